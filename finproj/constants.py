"""
Global constants for FinProj.

Purpose
-------
Centralizes bounds, default values and jurisdiction figures used by the
projection engines. Using constants instead of hardcoded values keeps
the engines, the configuration layer and the tests in agreement.

Usage
-----
>>> from finproj.constants import MIN_ITERATIONS, MONTHS_PER_YEAR
>>> monthly_mean = 0.07 / MONTHS_PER_YEAR

Categories
----------
- Time: months per year
- Simulation: iteration/year/volatility bounds, batching
- Safe withdrawal: search bracket, tolerance, probe cap
- Goal seeking: contribution search limits
- Scenario analysis: severity thresholds, recovery target
- Cashflow: Social Security rules, FI withdrawal rate, risk weights
"""

from typing import Tuple

__all__ = [
    # Time
    "MONTHS_PER_YEAR",
    # Simulation
    "MIN_ITERATIONS",
    "MAX_ITERATIONS",
    "MIN_YEARS",
    "MAX_YEARS",
    "MIN_VOLATILITY",
    "MAX_VOLATILITY",
    "DEFAULT_ITERATIONS",
    "DEFAULT_BATCH_SIZE",
    "DEFAULT_CONFIDENCE",
    "SUMMARY_PERCENTILES",
    # Safe withdrawal
    "SWR_LOWER_BOUND",
    "SWR_UPPER_BOUND",
    "SWR_DEFAULT_RATE",
    "SWR_TOLERANCE",
    "SWR_MAX_PROBES",
    # Goal seeking
    "GOAL_SEEK_MAX_PROBES",
    "GOAL_SEEK_MIN_BRACKET",
    "GOAL_SEEK_ITERATIONS",
    "DEFAULT_GOAL_SUCCESS_RATE",
    # Scenario analysis
    "SEVERITY_THRESHOLDS",
    "STRESS_TEST_THRESHOLD",
    "RECOVERY_TARGET_FRACTION",
    # Cashflow
    "FULL_RETIREMENT_AGE",
    "EARLIEST_CLAIM_AGE",
    "MAX_DELAYED_CLAIM_AGE",
    "SS_COLA_FACTOR",
    "SS_TAXABLE_FRACTION_US",
    "FI_WITHDRAWAL_RATE",
]


# =============================================================================
# Time
# =============================================================================

MONTHS_PER_YEAR: int = 12
"""Number of months in a year (monthly stepping and rate conversion)."""


# =============================================================================
# Simulation Bounds and Defaults
# =============================================================================

MIN_ITERATIONS: int = 100
"""Fewest Monte Carlo trials accepted by MonteCarloEngine.simulate()."""

MAX_ITERATIONS: int = 100_000
"""Most Monte Carlo trials accepted by MonteCarloEngine.simulate()."""

MIN_YEARS: int = 1
"""Shortest simulation horizon in years."""

MAX_YEARS: int = 100
"""Longest simulation horizon in years."""

MIN_VOLATILITY: float = 0.0
"""Lowest annual return volatility accepted."""

MAX_VOLATILITY: float = 1.0
"""Highest annual return volatility accepted (100%)."""

DEFAULT_ITERATIONS: int = 10_000
"""Trial count for retirement and safe-withdrawal simulations."""

DEFAULT_BATCH_SIZE: int = 2_000
"""Trials per random stream.

Each batch draws from its own spawned SeedSequence, so results depend
only on the seed and the batch size, never on the worker count.
"""

DEFAULT_CONFIDENCE: float = 0.95
"""Confidence level of the per-year interval in yearly projections."""

SUMMARY_PERCENTILES: Tuple[int, ...] = (10, 25, 50, 75, 90)
"""Percentiles reported by summary statistics."""


# =============================================================================
# Safe Withdrawal Rate Search
# =============================================================================

SWR_LOWER_BOUND: float = 0.01
"""Lowest annual withdrawal rate probed (1%)."""

SWR_UPPER_BOUND: float = 0.10
"""Highest annual withdrawal rate probed (10%)."""

SWR_DEFAULT_RATE: float = 0.04
"""Fallback rate when no probed rate reaches the target (the 4% rule)."""

SWR_TOLERANCE: float = 0.001
"""Success-rate distance from target that ends the search (0.1%)."""

SWR_MAX_PROBES: int = 20
"""Maximum bisection steps."""


# =============================================================================
# Goal Seeking
# =============================================================================

GOAL_SEEK_MAX_PROBES: int = 20
"""Maximum bisection steps when solving for a monthly contribution."""

GOAL_SEEK_MIN_BRACKET: float = 10.0
"""Search stops once the contribution bracket is narrower than this."""

GOAL_SEEK_ITERATIONS: int = 1_000
"""Trials per probe while solving for a monthly contribution."""

DEFAULT_GOAL_SUCCESS_RATE: float = 0.90
"""Success probability targeted by the recommended contribution."""


# =============================================================================
# Scenario Analysis
# =============================================================================

SEVERITY_THRESHOLDS: Tuple[Tuple[float, str], ...] = (
    (10.0, "minimal"),
    (25.0, "moderate"),
    (50.0, "significant"),
)
"""Upper bounds (median impact, %) of each severity level; beyond is critical."""

STRESS_TEST_THRESHOLD: float = 5.0
"""Median impact (%) above which a scenario is worth stress testing."""

RECOVERY_TARGET_FRACTION: float = 0.90
"""Share of the baseline median the stressed path must regain to recover."""


# =============================================================================
# Long-Term Cashflow
# =============================================================================

FULL_RETIREMENT_AGE: int = 67
"""US full retirement age used by the claiming adjustment."""

EARLIEST_CLAIM_AGE: int = 62
"""Earliest age at which benefits can be claimed."""

MAX_DELAYED_CLAIM_AGE: int = 70
"""Age after which delayed retirement credits stop accruing."""

SS_COLA_FACTOR: float = 0.8
"""Cost-of-living escalation as a fraction of the inflation rate."""

SS_TAXABLE_FRACTION_US: float = 0.85
"""Share of US Social Security income subject to federal income tax."""

FI_WITHDRAWAL_RATE: float = 0.04
"""Passive-income rate applied to investable assets in the FI ratio."""
