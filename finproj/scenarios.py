"""
Scenario analysis (stress testing) for FinProj

Purpose
-------
Compares a baseline Monte Carlo run against a run of a "stressed" copy of
the same configuration, where the stress comes from a named adverse
scenario (job loss, market crash, recession, ...). Reports how much the
median and 10th-percentile outcomes drop, how severe that is and how long
the stressed portfolio needs to regain 90% of the baseline median.

Shock aggregation
-----------------
All shocks of one kind collapse into a single magnitude applied over the
whole horizon, each weighted by ``duration_years / years``:

    income, expense, return, volatility:  sum(magnitude / 100 * weight)
    one_time_expense:                     sum(magnitude)

The stressed configuration then uses

    monthly_contribution * (1 - income_reduction - expense_increase)
    expected_return - return_reduction
    min(return_volatility + volatility_increase, 1.0)
    max(initial_balance - one_time_expense, 0)

Baseline and stressed runs share one random stream so the comparison
reflects the shocks rather than sampling noise.

Example
-------
>>> engine = ScenarioAnalysisEngine(MonteCarloEngine(seed=1))
>>> res = engine.analyze_scenario(cfg, ScenarioType.MARKET_CRASH)
>>> res.stressed.final_balance.median <= res.baseline.final_balance.median
True
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, List, Literal, Mapping, Optional, Sequence, Tuple, Union

from .config import Scenario, ScenarioShock, ScenarioType, SimulationConfig
from .constants import (
    MAX_VOLATILITY,
    RECOVERY_TARGET_FRACTION,
    SEVERITY_THRESHOLDS,
    STRESS_TEST_THRESHOLD,
)
from .exceptions import ConfigurationError
from .monte_carlo import (
    MonteCarloEngine,
    SeedLike,
    SimulationResult,
    validate_simulation_config,
)

__all__ = [
    "ImpactSeverity",
    "ShockAggregate",
    "ScenarioComparison",
    "ScenarioComparisonResult",
    "PREDEFINED_SCENARIOS",
    "get_predefined_scenarios",
    "get_scenario",
    "aggregate_shocks",
    "stress_config",
    "classify_severity",
    "estimate_recovery_years",
    "compare_results",
    "ScenarioAnalysisEngine",
]

logger = logging.getLogger(__name__)

ImpactSeverity = Literal["minimal", "moderate", "significant", "critical"]


# ---------------------------------------------------------------------------
# Predefined scenarios
# ---------------------------------------------------------------------------

def _shock(kind: str, magnitude: float, start: int, duration: float) -> ScenarioShock:
    return ScenarioShock(type=kind, magnitude=magnitude, start_year=start, duration_years=duration)


PREDEFINED_SCENARIOS: Mapping[ScenarioType, Scenario] = MappingProxyType({
    ScenarioType.JOB_LOSS: Scenario(
        type=ScenarioType.JOB_LOSS,
        name="Job Loss (6 months)",
        description="Complete loss of income for 6 months",
        severity="severe",
        shocks=(_shock("income_reduction", 100, 1, 0.5),),
    ),
    ScenarioType.MARKET_CRASH: Scenario(
        type=ScenarioType.MARKET_CRASH,
        name="Market Crash (-30%)",
        description="Major market downturn similar to 2008",
        severity="severe",
        shocks=(
            _shock("return_reduction", 30, 1, 1),
            _shock("volatility_increase", 25, 1, 2),
            _shock("return_reduction", 10, 2, 2),
        ),
    ),
    ScenarioType.RECESSION: Scenario(
        type=ScenarioType.RECESSION,
        name="Economic Recession",
        description="Prolonged economic downturn with reduced income and returns",
        severity="moderate",
        shocks=(
            _shock("income_reduction", 20, 1, 1.5),
            _shock("return_reduction", 8, 1, 2),
            _shock("volatility_increase", 15, 1, 2),
        ),
    ),
    ScenarioType.MEDICAL_EMERGENCY: Scenario(
        type=ScenarioType.MEDICAL_EMERGENCY,
        name="Medical Emergency ($50k)",
        description="Unexpected medical expenses",
        severity="moderate",
        shocks=(_shock("one_time_expense", 50_000, 1, 0),),
    ),
    ScenarioType.INFLATION_SPIKE: Scenario(
        type=ScenarioType.INFLATION_SPIKE,
        name="High Inflation (5 years)",
        description="Sustained high inflation eroding real returns",
        severity="moderate",
        shocks=(
            _shock("return_reduction", 4, 1, 5),
            _shock("volatility_increase", 8, 1, 5),
        ),
    ),
    ScenarioType.DISABILITY: Scenario(
        type=ScenarioType.DISABILITY,
        name="Long-term Disability",
        description="Reduced income and increased medical costs",
        severity="severe",
        shocks=(
            _shock("income_reduction", 60, 1, 3),
            _shock("expense_increase", 20, 1, 3),
        ),
    ),
    ScenarioType.MARKET_CORRECTION: Scenario(
        type=ScenarioType.MARKET_CORRECTION,
        name="Market Correction (-10%)",
        description="Mild market downturn with quick recovery",
        severity="mild",
        shocks=(
            _shock("return_reduction", 15, 1, 1),
            _shock("volatility_increase", 10, 1, 1),
        ),
    ),
})


def get_predefined_scenarios() -> Tuple[Scenario, ...]:
    """All predefined scenarios in declaration order."""
    return tuple(PREDEFINED_SCENARIOS.values())


def get_scenario(scenario_type: Union[ScenarioType, str]) -> Scenario:
    """Look up a predefined scenario by enum member or its string value."""
    try:
        key = ScenarioType(scenario_type)
    except ValueError:
        raise ConfigurationError(f"Unknown scenario type {scenario_type!r}") from None
    return PREDEFINED_SCENARIOS[key]


def _resolve(scenario: Union[Scenario, ScenarioType, str]) -> Scenario:
    if isinstance(scenario, Scenario):
        return scenario
    return get_scenario(scenario)


# ---------------------------------------------------------------------------
# Shock application
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ShockAggregate:
    """Time-weighted totals per shock kind (fractions, except one-time in currency)."""
    income_reduction: float = 0.0
    expense_increase: float = 0.0
    return_reduction: float = 0.0
    volatility_increase: float = 0.0
    one_time_expense: float = 0.0


def aggregate_shocks(shocks: Iterable[ScenarioShock], years: int) -> ShockAggregate:
    """Collapse shocks into one horizon-wide magnitude per kind."""
    if years <= 0:
        raise ValueError(f"years must be positive (got {years}).")
    totals = {
        "income_reduction": 0.0,
        "expense_increase": 0.0,
        "return_reduction": 0.0,
        "volatility_increase": 0.0,
        "one_time_expense": 0.0,
    }
    for shock in shocks:
        if shock.type == "one_time_expense":
            totals["one_time_expense"] += shock.magnitude
        else:
            totals[shock.type] += shock.magnitude / 100 * (shock.duration_years / years)
    return ShockAggregate(**totals)


def stress_config(config: SimulationConfig, shocks: Sequence[ScenarioShock]) -> SimulationConfig:
    """
    Stressed copy of *config* with all *shocks* applied.

    Volatility is clamped to the engine's 100% ceiling and the initial
    balance to zero, so a valid baseline always yields a runnable config.
    """
    agg = aggregate_shocks(shocks, config.years)
    logger.debug("Aggregated shocks over %d years: %s", config.years, agg)

    volatility = config.return_volatility + agg.volatility_increase
    if volatility > MAX_VOLATILITY:
        logger.debug("Clamping stressed volatility %.4f to %.2f", volatility, MAX_VOLATILITY)
        volatility = MAX_VOLATILITY

    return config.model_copy(update={
        "monthly_contribution": config.monthly_contribution
        * (1 - agg.income_reduction - agg.expense_increase),
        "expected_return": config.expected_return - agg.return_reduction,
        "return_volatility": volatility,
        "initial_balance": max(config.initial_balance - agg.one_time_expense, 0.0),
    })


# ---------------------------------------------------------------------------
# Comparison
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ScenarioComparison:
    median_difference: float
    median_difference_percent: float
    p10_difference: float
    p10_difference_percent: float
    recovery_years: Optional[float]
    impact_severity: ImpactSeverity
    worth_stress_testing: bool


@dataclass(frozen=True)
class ScenarioComparisonResult:
    scenario: Scenario
    baseline: SimulationResult
    stressed: SimulationResult
    comparison: ScenarioComparison


def _percent(diff: float, base: float) -> float:
    if base == 0:
        return 0.0
    return diff / base * 100


def classify_severity(median_difference_percent: float) -> ImpactSeverity:
    """<10% minimal, <25% moderate, <50% significant, else critical."""
    for bound, label in SEVERITY_THRESHOLDS:
        if median_difference_percent < bound:
            return label
    return "critical"


def estimate_recovery_years(
    baseline: SimulationResult,
    stressed: SimulationResult,
) -> Optional[float]:
    """
    Years the stressed median needs to reach 90% of the baseline median.

    0 when already there; None when even the best stressed trial falls
    short, or when the stressed median is not growing. Otherwise the
    stressed median's compound growth rate (first to last yearly median)
    is extrapolated, rounded to one decimal.
    """
    target = baseline.final_balance.median * RECOVERY_TARGET_FRACTION
    stressed_median = stressed.final_balance.median
    if stressed_median >= target:
        return 0.0
    if stressed.final_balance.max < target:
        return None

    start_median = stressed.yearly_projections[0].median
    periods = len(stressed.yearly_projections) - 1
    if start_median <= 0 or stressed_median <= 0 or periods <= 0:
        return None
    growth = (stressed_median / start_median) ** (1 / periods) - 1
    if growth <= 0:
        return None
    return round(math.log(target / stressed_median) / math.log(1 + growth), 1)


def compare_results(baseline: SimulationResult, stressed: SimulationResult) -> ScenarioComparison:
    """Derive impact metrics of *stressed* relative to *baseline*."""
    median_diff = baseline.final_balance.median - stressed.final_balance.median
    p10_diff = baseline.final_balance.p10 - stressed.final_balance.p10
    median_pct = _percent(median_diff, baseline.final_balance.median)
    return ScenarioComparison(
        median_difference=median_diff,
        median_difference_percent=median_pct,
        p10_difference=p10_diff,
        p10_difference_percent=_percent(p10_diff, baseline.final_balance.p10),
        recovery_years=estimate_recovery_years(baseline, stressed),
        impact_severity=classify_severity(median_pct),
        worth_stress_testing=median_pct > STRESS_TEST_THRESHOLD,
    )


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

class ScenarioAnalysisEngine:
    """Runs baseline-vs-stressed Monte Carlo comparisons."""

    def __init__(self, monte_carlo: Optional[MonteCarloEngine] = None):
        self.monte_carlo = monte_carlo if monte_carlo is not None else MonteCarloEngine()

    def analyze_scenario(
        self,
        config: SimulationConfig,
        scenario: Union[Scenario, ScenarioType, str],
        seed: SeedLike = None,
    ) -> ScenarioComparisonResult:
        """
        Compare *config* against its stressed copy under *scenario*.

        Raises
        ------
        ConfigurationError
            If *scenario* names no predefined scenario.
        ConfigValidationError
            If *config* violates a Monte Carlo bound.
        """
        validate_simulation_config(config)
        resolved = _resolve(scenario)
        stressed_cfg = stress_config(config, resolved.shocks)

        seq = self.monte_carlo.spawn_sequence(seed)
        baseline = self.monte_carlo.simulate(config, seed=seq)
        stressed = self.monte_carlo.simulate(stressed_cfg, seed=seq)
        comparison = compare_results(baseline, stressed)

        logger.info(
            "Scenario %s: median impact %.1f%% (%s)",
            resolved.type.value, comparison.median_difference_percent, comparison.impact_severity,
        )
        return ScenarioComparisonResult(
            scenario=resolved,
            baseline=baseline,
            stressed=stressed,
            comparison=comparison,
        )

    def analyze_multiple_scenarios(
        self,
        config: SimulationConfig,
        scenarios: Optional[Sequence[Union[Scenario, ScenarioType, str]]] = None,
        seed: SeedLike = None,
    ) -> List[ScenarioComparisonResult]:
        """Analyze several scenarios (all predefined ones by default), in order."""
        items = list(scenarios) if scenarios is not None else list(get_predefined_scenarios())
        if seed is None:
            return [self.analyze_scenario(config, s) for s in items]
        children = self.monte_carlo.spawn_sequence(seed).spawn(len(items))
        return [self.analyze_scenario(config, s, seed=child) for s, child in zip(items, children)]
