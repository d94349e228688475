from __future__ import annotations

import logging
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from cashflow.core.allocation import (
    Holding,
    allocation_total,
    default_holdings,
    is_fully_allocated,
    weighted_return,
)
from cashflow.core.annuity import required_principal
from cashflow.core.projection import (
    DEFAULT_MAX_YEARS,
    ProjectionRecord,
    Timing,
    simulate_compound,
    simulate_forward,
    simulate_until_depleted,
)

logger = logging.getLogger(__name__)

LOW_RETURN_WARNING = "nominal return is at or below inflation; principal may deplete faster"


class _ScenarioBase(BaseModel):
    """
    Return source shared by every mode: an explicit nominalRate wins,
    otherwise the allocation's weighted return is used.
    """

    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    nominalRate: Optional[float] = None
    allocation: List[Holding] = Field(default_factory=default_holdings)

    def resolved_rate(self) -> float:
        if self.nominalRate is not None:
            return self.nominalRate
        return weighted_return(self.allocation)

    def allocation_warnings(self) -> List[str]:
        if self.nominalRate is not None or is_fully_allocated(self.allocation):
            return []
        total_pct = allocation_total(self.allocation) * 100
        return [f"allocation sums to {total_pct:.1f}%, expected 100%"]


class AnnuityTarget(_ScenarioBase):
    """How much principal is needed to fund `years` of growing withdrawals."""

    mode: Literal["years"] = "years"
    years: int = Field(30, ge=0, le=1000)
    firstExpense: float = Field(100000.0, ge=0)
    inflationRate: float = 0.04
    timing: Timing = Timing.END


class DepletionTarget(_ScenarioBase):
    """How many years a given principal lasts under growing withdrawals."""

    mode: Literal["principal"] = "principal"
    initialPrincipal: float = 2600000.0
    firstExpense: float = Field(100000.0, ge=0)
    inflationRate: float = 0.04
    timing: Timing = Timing.END
    maxYears: Optional[int] = Field(None, ge=1, le=1000)


class AccumulationTarget(_ScenarioBase):
    """What a principal grows to with a monthly contribution."""

    mode: Literal["compound"] = "compound"
    years: int = Field(30, ge=0, le=1000)
    initialPrincipal: float = 0.0
    monthlyContribution: float = 0.0


Scenario = Annotated[
    Union[AnnuityTarget, DepletionTarget, AccumulationTarget],
    Field(discriminator="mode"),
]

scenario_adapter: TypeAdapter[Scenario] = TypeAdapter(Scenario)


class ScenarioResult(BaseModel):
    model_config = ConfigDict(ser_json_inf_nan="null")

    mode: str
    nominalRate: float
    inflationRate: Optional[float] = None
    # r - g, only meaningful for the drawdown modes
    spread: Optional[float] = None
    requiredPrincipal: Optional[float] = None
    yearsSupported: int
    finalBalance: float
    records: List[ProjectionRecord]
    warnings: List[str] = []


def _final_balance(records: List[ProjectionRecord]) -> float:
    return records[-1].endPrincipal if records else 0.0


def _drawdown_warnings(r: float, g: float) -> List[str]:
    return [LOW_RETURN_WARNING] if r <= g else []


def run_annuity_target(scenario: AnnuityTarget) -> ScenarioResult:
    r = scenario.resolved_rate()
    g = scenario.inflationRate

    principal = required_principal(scenario.firstExpense, r, g, scenario.years, scenario.timing)
    records = simulate_forward(principal, scenario.firstExpense, r, g, scenario.timing, scenario.years)

    return ScenarioResult(
        mode=scenario.mode,
        nominalRate=r,
        inflationRate=g,
        spread=r - g,
        requiredPrincipal=principal,
        yearsSupported=scenario.years,
        finalBalance=_final_balance(records),
        records=records,
        warnings=scenario.allocation_warnings() + _drawdown_warnings(r, g),
    )


def run_depletion_target(scenario: DepletionTarget, max_years: int = DEFAULT_MAX_YEARS) -> ScenarioResult:
    r = scenario.resolved_rate()
    g = scenario.inflationRate
    limit = scenario.maxYears if scenario.maxYears is not None else max_years

    records = simulate_until_depleted(
        scenario.initialPrincipal,
        scenario.firstExpense,
        r,
        g,
        scenario.timing,
        max_years=limit,
    )

    return ScenarioResult(
        mode=scenario.mode,
        nominalRate=r,
        inflationRate=g,
        spread=r - g,
        yearsSupported=len(records),
        finalBalance=_final_balance(records),
        records=records,
        warnings=scenario.allocation_warnings() + _drawdown_warnings(r, g),
    )


def run_accumulation_target(scenario: AccumulationTarget) -> ScenarioResult:
    r = scenario.resolved_rate()
    records = simulate_compound(
        scenario.years,
        scenario.initialPrincipal,
        scenario.monthlyContribution,
        r,
    )

    return ScenarioResult(
        mode=scenario.mode,
        nominalRate=r,
        yearsSupported=scenario.years,
        finalBalance=_final_balance(records),
        records=records,
        warnings=scenario.allocation_warnings(),
    )


def run_scenario(scenario: Scenario, max_years: int = DEFAULT_MAX_YEARS) -> ScenarioResult:
    """Dispatch on the scenario variant and recompute its full record sequence."""
    if isinstance(scenario, AnnuityTarget):
        result = run_annuity_target(scenario)
    elif isinstance(scenario, DepletionTarget):
        result = run_depletion_target(scenario, max_years=max_years)
    elif isinstance(scenario, AccumulationTarget):
        result = run_accumulation_target(scenario)
    else:
        raise TypeError(f"unsupported scenario type: {type(scenario).__name__}")

    logger.info(
        "scenario mode=%s r=%.4f records=%d warnings=%d",
        result.mode,
        result.nominalRate,
        len(result.records),
        len(result.warnings),
    )
    return result


__all__ = [
    "AccumulationTarget",
    "AnnuityTarget",
    "DepletionTarget",
    "Scenario",
    "ScenarioResult",
    "scenario_adapter",
    "run_scenario",
    "run_annuity_target",
    "run_depletion_target",
    "run_accumulation_target",
]
