"""Closed-form present value of a growing annuity of withdrawals."""

from __future__ import annotations

import logging
import math
import sys

from cashflow.core.projection import Timing, int_power

logger = logging.getLogger(__name__)

# |r - g| below this is treated as r == g.
RATE_EPSILON = 1e-9


def required_principal(
    first_withdrawal: float,
    r: float,
    g: float,
    years: int,
    timing: Timing = Timing.END,
) -> float:
    """
    Principal that is exhausted exactly after `years` withdrawals.

    The first withdrawal is `first_withdrawal` and each later one grows by `g`;
    the principal earns `r`. Under the matching forward recurrence
    (simulate_forward) the balance reaches zero at the end of the last year.

      - END timing:   PV = W1 * (1 - ((1+g)/(1+r))^N) / (r - g)
      - BEGIN timing: the END value times (1 + r)
      - r == g:       limiting form W1 * N / (1 + r)

    Never negative; contradictory inputs are floored at 0. An overflowing
    present value saturates at the largest finite float.
    """
    if not math.isfinite(years) or years <= 0:
        return 0.0
    years = int(years)
    if first_withdrawal == 0:
        return 0.0
    if 1 + r == 0:
        # a -100% return wipes out any principal, nothing can fund the withdrawals
        logger.debug("nominal return of -100%%, no principal can fund withdrawals")
        return 0.0

    if abs(r - g) < RATE_EPSILON:
        logger.debug("r and g within %s, using limiting annuity formula", RATE_EPSILON)
        pv = first_withdrawal * years / (1 + r)
    else:
        ratio = int_power((1 + g) / (1 + r), years)
        pv = first_withdrawal * (1 - ratio) / (r - g)

    if Timing(timing) is Timing.BEGIN:
        pv *= 1 + r

    if math.isnan(pv):
        logger.debug("present value undefined, treating as 0")
        return 0.0
    return min(max(0.0, pv), sys.float_info.max)
