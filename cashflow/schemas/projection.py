"""Data contracts for the calculation endpoints."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from cashflow.core.export import DEFAULT_HEADERS
from cashflow.core.projection import ProjectionRecord, Timing
from cashflow.domain.scenario import Scenario


class PingResponse(BaseModel):
    message: str
    maxYears: int


class PrincipalRequest(BaseModel):
    """Inputs for the growing-annuity present value."""

    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    firstWithdrawal: float = Field(..., ge=0, description="Withdrawal in the first year.")
    nominalRate: float = Field(
        ...,
        description="Nominal annual return expressed as a decimal (e.g. 0.07 for 7%).",
    )
    growthRate: float = Field(
        0.0,
        description="Annual growth of the withdrawals (inflation) as a decimal.",
    )
    years: int = Field(..., ge=0, le=1000, description="Number of years the principal must last.")
    timing: Timing = Timing.END


class PrincipalResponse(BaseModel):
    model_config = ConfigDict(ser_json_inf_nan="null")

    requiredPrincipal: float = Field(..., ge=0)


class AccumulationRequest(BaseModel):
    """Inputs required to compute an accumulation schedule."""

    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    years: int = Field(..., ge=0, le=1000, description="Number of years to project.")
    initialPrincipal: float = Field(0.0, description="Balance at the start of year 1.")
    monthlyContribution: float = Field(
        0.0,
        description="Added after each month's growth; negative values withdraw.",
    )
    nominalRate: float = Field(
        ...,
        description="Nominal annual return, compounded monthly at nominalRate / 12.",
    )


class AccumulationResponse(BaseModel):
    """Projected accumulation schedule."""

    model_config = ConfigDict(ser_json_inf_nan="null")

    records: List[ProjectionRecord]
    finalBalance: float


class ExportRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    scenario: Scenario
    headers: List[str] = Field(
        default_factory=lambda: list(DEFAULT_HEADERS),
        min_length=4,
        max_length=4,
    )
    filename: Optional[str] = Field(None, min_length=1, max_length=128, pattern=r"^[\w.\- ]+$")
