"""Asset allocation and the nominal return it implies."""

from __future__ import annotations

from typing import Iterable, List

from pydantic import BaseModel, ConfigDict, Field

# Weights are decimals; anything further than this from 1.0 is flagged.
ALLOCATION_TOLERANCE = 1e-5


class Holding(BaseModel):
    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    label: str
    weight: float = Field(description="Share of the portfolio as a decimal (0.5 for 50%).")
    expectedReturn: float = Field(description="Expected nominal annual return as a decimal.")


def default_holdings() -> List[Holding]:
    return [
        Holding(label="ETF", weight=0.50, expectedReturn=0.07),
        Holding(label="Bond", weight=0.40, expectedReturn=0.03),
        Holding(label="Cash", weight=0.10, expectedReturn=0.0),
    ]


def weighted_return(holdings: Iterable[Holding]) -> float:
    """Allocation-weighted nominal return, e.g. 50% @ 7% + 50% @ 3% -> 0.05."""
    return sum(holding.weight * holding.expectedReturn for holding in holdings)


def allocation_total(holdings: Iterable[Holding]) -> float:
    return sum(holding.weight for holding in holdings)


def is_fully_allocated(holdings: Iterable[Holding]) -> bool:
    return abs(allocation_total(holdings) - 1.0) <= ALLOCATION_TOLERANCE
