from __future__ import annotations

import logging
import math
from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

DEFAULT_MAX_YEARS = 200
MONTHS_PER_YEAR = 12


class Timing(str, Enum):
    """When each year's withdrawal happens relative to the year's growth."""

    END = "end"      # ordinary annuity: growth on the opening balance, then withdraw
    BEGIN = "begin"  # annuity due: withdraw first, growth on what is left


class ProjectionRecord(BaseModel):
    """
    One simulated year.

    For the drawdown models `growth` is the interest earned that year.
    For the accumulation model `growth` repeats the ending balance and
    `expense` is always 0.
    """

    model_config = ConfigDict(frozen=True, ser_json_inf_nan="null")

    year: int
    expense: float
    growth: float
    endPrincipal: float


def int_power(base: float, exponent: int) -> float:
    """base ** exponent for a whole exponent, saturating to +/-inf instead of raising OverflowError."""
    try:
        return base ** exponent
    except OverflowError:
        if base < 0 and exponent % 2:
            return -math.inf
        return math.inf


def withdrawal(expense0: float, g: float, year: int) -> float:
    """Withdrawal in `year` (1-based): expense0 * (1 + g)^(year - 1)."""
    if expense0 == 0:
        return 0.0
    return expense0 * int_power(1 + g, year - 1)


def _step(principal: float, expense: float, r: float, timing: Timing) -> tuple[float, float]:
    """Apply one year of withdrawal and growth. Returns (growth, new_principal)."""
    if timing is Timing.END:
        growth = principal * r
        return growth, principal + growth - expense

    principal = principal - expense
    growth = principal * r
    return growth, principal + growth


def simulate_forward(
    initial_principal: float,
    expense0: float,
    r: float,
    g: float,
    timing: Timing,
    years: int,
) -> List[ProjectionRecord]:
    """
    Fixed-horizon drawdown: exactly `years` records, whatever the balance does.

    Year y withdraws expense0 * (1 + g)^(y - 1).
    """
    timing = Timing(timing)
    if not math.isfinite(years) or years <= 0:
        return []
    principal = float(initial_principal)

    rows: List[ProjectionRecord] = []
    for year in range(1, int(years) + 1):
        expense = withdrawal(expense0, g, year)
        growth, principal = _step(principal, expense, r, timing)
        rows.append(
            ProjectionRecord(year=year, expense=expense, growth=growth, endPrincipal=principal)
        )

    return rows


def simulate_until_depleted(
    initial_principal: float,
    expense0: float,
    r: float,
    g: float,
    timing: Timing,
    max_years: int = DEFAULT_MAX_YEARS,
) -> List[ProjectionRecord]:
    """
    Run-to-depletion drawdown.

    Stops after the first year whose ending principal is <= 0 (that year is
    still recorded) or after `max_years` years, whichever comes first.
    A non-positive or non-finite starting principal gives no records.
    """
    timing = Timing(timing)
    if not math.isfinite(initial_principal) or initial_principal <= 0:
        logger.debug("starting principal %r is not positive, nothing to simulate", initial_principal)
        return []

    principal = float(initial_principal)
    year = 0

    rows: List[ProjectionRecord] = []
    while year < max_years and principal > 0:
        year += 1
        expense = withdrawal(expense0, g, year)
        growth, principal = _step(principal, expense, r, timing)
        rows.append(
            ProjectionRecord(year=year, expense=expense, growth=growth, endPrincipal=principal)
        )

    if principal > 0:
        logger.debug("principal not depleted after %d years", year)
    return rows


def simulate_compound(
    years: int,
    principal0: float,
    monthly: float,
    r: float,
) -> List[ProjectionRecord]:
    """
    Monthly compounding with a fixed monthly contribution (negative = withdrawal).

    Each month: balance = balance * (1 + r/12) + monthly. One record per year,
    with both `growth` and `endPrincipal` set to the year-end balance.
    """
    if not math.isfinite(years) or years <= 0:
        return []
    balance = float(principal0)
    monthly_rate = r / MONTHS_PER_YEAR

    rows: List[ProjectionRecord] = []
    for year in range(1, int(years) + 1):
        for _ in range(MONTHS_PER_YEAR):
            balance = balance * (1 + monthly_rate) + monthly
        rows.append(ProjectionRecord(year=year, expense=0.0, growth=balance, endPrincipal=balance))

    return rows


__all__ = [
    "DEFAULT_MAX_YEARS",
    "int_power",
    "withdrawal",
    "ProjectionRecord",
    "Timing",
    "simulate_forward",
    "simulate_until_depleted",
    "simulate_compound",
]
