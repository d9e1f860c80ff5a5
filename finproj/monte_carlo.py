"""Monte Carlo engine for FinProj

Simulates many independent portfolio trajectories under a monthly
contribution (or withdrawal) schedule and normally distributed monthly
returns, then aggregates them into percentile bands and probabilities.

Model
-----
For every trial, year ``y = 1..years`` and each of its 12 months:

    balance <- max(balance + c_y, 0) * (1 + r),   r ~ N(mu / 12, sigma / sqrt(12))
    balance <- max(balance, 0)

where ``c_y`` is the monthly contribution, escalated by
``(1 + inflation) ** y`` when inflation-adjusted contributions are on.

Design goals
------------
- Deterministic given a seed: every run draws from a numpy SeedSequence
  split into fixed-size batches (see executor.py), so the worker count never
  changes results.
- Vectorized across trials within a batch; batches fan out on a pool.
- Results are frozen dataclasses; ``all_outcomes`` is a read-only array.

Typical usage
-------------
>>> engine = MonteCarloEngine(seed=42)
>>> cfg = SimulationConfig(
...     initial_balance=100_000, monthly_contribution=1_000, years=10,
...     iterations=1_000, expected_return=0.07, return_volatility=0.15,
... )
>>> res = engine.simulate(cfg)
>>> res.probabilities.success_rate
1.0
>>> res.projections_frame().loc[10, "median"] > 100_000
True
"""
from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from .config import (
    AppSettings,
    GoalProbabilityConfig,
    RetirementSimulationConfig,
    SafeWithdrawalParams,
    SimulationConfig,
)
from .constants import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_CONFIDENCE,
    GOAL_SEEK_ITERATIONS,
    GOAL_SEEK_MAX_PROBES,
    GOAL_SEEK_MIN_BRACKET,
    MAX_ITERATIONS,
    MAX_VOLATILITY,
    MAX_YEARS,
    MIN_ITERATIONS,
    MIN_VOLATILITY,
    MIN_YEARS,
    MONTHS_PER_YEAR,
    SWR_DEFAULT_RATE,
    SWR_LOWER_BOUND,
    SWR_MAX_PROBES,
    SWR_TOLERANCE,
    SWR_UPPER_BOUND,
)
from .exceptions import ConfigValidationError
from .executor import as_seed_sequence, batch_sizes, run_batches
from .statistics import SummaryStatistics, mean, normal_random_array, summarize

__all__ = [
    # results
    "BalanceSummary",
    "YearlyProjection",
    "SimulationProbabilities",
    "SimulationResult",
    "SuccessByAge",
    "RetirementSimulationResult",
    "SafeWithdrawalResult",
    "GoalProbabilityResult",
    # engine
    "MonteCarloEngine",
    "validate_simulation_config",
    # goal helpers
    "success_rate",
    "expected_shortfall",
]

logger = logging.getLogger(__name__)

SeedLike = Union[None, int, np.random.SeedSequence]


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BalanceSummary:
    """Distribution of terminal balances."""
    median: float
    mean: float
    p10: float
    p25: float
    p75: float
    p90: float
    min: float
    max: float

    @classmethod
    def from_statistics(cls, stats: SummaryStatistics) -> "BalanceSummary":
        return cls(
            median=stats.median,
            mean=stats.mean,
            p10=stats.p10,
            p25=stats.p25,
            p75=stats.p75,
            p90=stats.p90,
            min=stats.min,
            max=stats.max,
        )


@dataclass(frozen=True)
class YearlyProjection:
    year: int
    median: float
    mean: float
    p10: float
    p25: float
    p75: float
    p90: float
    confidence_interval_95: Tuple[float, float]


@dataclass(frozen=True)
class SimulationProbabilities:
    success_rate: float
    doubling_probability: float
    maintaining_purchasing_power: float


def _projections_frame(projections: Sequence[YearlyProjection]) -> pd.DataFrame:
    rows = [
        {
            "year": p.year,
            "median": p.median,
            "mean": p.mean,
            "p10": p.p10,
            "p25": p.p25,
            "p75": p.p75,
            "p90": p.p90,
            "ci95_lower": p.confidence_interval_95[0],
            "ci95_upper": p.confidence_interval_95[1],
        }
        for p in projections
    ]
    return pd.DataFrame(rows).set_index("year")


@dataclass(frozen=True)
class SimulationResult:
    """
    Output of MonteCarloEngine.simulate().

    Invariants: ``len(all_outcomes) == config.iterations`` and
    ``len(yearly_projections) == config.years + 1`` (index 0 is the start).
    """
    config: SimulationConfig
    final_balance: BalanceSummary
    yearly_projections: Tuple[YearlyProjection, ...]
    probabilities: SimulationProbabilities
    all_outcomes: np.ndarray
    execution_time_ms: float

    def projections_frame(self) -> pd.DataFrame:
        """Yearly percentile bands as a DataFrame indexed by year."""
        return _projections_frame(self.yearly_projections)


@dataclass(frozen=True)
class SuccessByAge:
    age: int
    success_rate: float


@dataclass(frozen=True)
class RetirementSimulationResult:
    """
    Output of MonteCarloEngine.simulate_retirement().

    ``yearly_projections`` spans ``current_age`` to ``life_expectancy``:
    the accumulation trajectory of each trial followed by its distribution
    trajectory. ``median_years_until_depletion`` is the mean year index (from
    retirement) at which depleted trajectories first hit zero, or None when
    no trajectory depletes.
    """
    config: RetirementSimulationConfig
    success_probability: float
    balance_at_retirement: SummaryStatistics
    balance_at_life_expectancy: SummaryStatistics
    yearly_projections: Tuple[YearlyProjection, ...]
    median_years_until_depletion: Optional[float]
    success_by_age: Tuple[SuccessByAge, ...]
    execution_time_ms: float

    def projections_frame(self) -> pd.DataFrame:
        return _projections_frame(self.yearly_projections)


@dataclass(frozen=True)
class SafeWithdrawalResult:
    """
    Outcome of the safe-withdrawal-rate bisection.

    ``converged`` is False when no probed rate reached the target success
    probability; ``rate`` then holds the 4% fallback and
    ``achieved_success_rate`` is None.
    """
    rate: float
    converged: bool
    probes: int
    achieved_success_rate: Optional[float]


@dataclass(frozen=True)
class GoalProbabilityResult:
    probability: float
    median_outcome: float
    outcome_range: Tuple[float, float]
    expected_shortfall: float
    current_contribution: float
    recommended_contribution: float


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def validate_simulation_config(config: SimulationConfig) -> None:
    """Raise ConfigValidationError if a Monte Carlo bound is violated."""
    if config.iterations < MIN_ITERATIONS:
        raise ConfigValidationError(
            f"Iterations must be at least {MIN_ITERATIONS} for meaningful results",
            field="iterations",
            bound=MIN_ITERATIONS,
        )
    if config.iterations > MAX_ITERATIONS:
        raise ConfigValidationError(
            f"Iterations cannot exceed {MAX_ITERATIONS:,} (performance limit)",
            field="iterations",
            bound=MAX_ITERATIONS,
        )
    if config.years < MIN_YEARS:
        raise ConfigValidationError(
            f"Years must be at least {MIN_YEARS}",
            field="years",
            bound=MIN_YEARS,
        )
    if config.years > MAX_YEARS:
        raise ConfigValidationError(
            f"Years cannot exceed {MAX_YEARS}",
            field="years",
            bound=MAX_YEARS,
        )
    if config.return_volatility < MIN_VOLATILITY:
        raise ConfigValidationError(
            "Return volatility cannot be negative",
            field="return_volatility",
            bound=MIN_VOLATILITY,
        )
    if config.return_volatility > MAX_VOLATILITY:
        raise ConfigValidationError(
            "Return volatility cannot exceed 100%",
            field="return_volatility",
            bound=MAX_VOLATILITY,
        )


# ---------------------------------------------------------------------------
# Trajectory kernel
# ---------------------------------------------------------------------------

def _simulate_batch(payload: Tuple[Any, ...]) -> np.ndarray:
    """Simulate one batch of trials; returns an array of shape (count, years + 1).

    Module-level so process pools can pickle it.
    """
    (
        seq,
        initial,
        count,
        monthly_contribution,
        years,
        monthly_mean,
        monthly_std,
        inflation_rate,
        inflate,
    ) = payload
    rng = np.random.default_rng(seq)

    balance = np.empty(count, dtype=float)
    balance[:] = initial
    paths = np.empty((count, years + 1), dtype=float)
    paths[:, 0] = balance

    for year in range(1, years + 1):
        contribution = monthly_contribution
        if inflate and inflation_rate:
            contribution = monthly_contribution * (1.0 + inflation_rate) ** year
        for _ in range(MONTHS_PER_YEAR):
            # Floor before growth too: a negative growth factor must not flip a shortfall.
            balance = np.maximum(balance + contribution, 0.0)
            balance *= 1.0 + normal_random_array(count, monthly_mean, monthly_std, rng=rng)
            np.maximum(balance, 0.0, out=balance)
        paths[:, year] = balance

    return paths


def _yearly_projections(paths: np.ndarray) -> Tuple[YearlyProjection, ...]:
    alpha = 1.0 - DEFAULT_CONFIDENCE
    qs = [alpha / 2 * 100, 10, 25, 50, 75, 90, (1 - alpha / 2) * 100]
    lo, p10, p25, p50, p75, p90, hi = np.percentile(paths, qs, axis=0, method="linear")
    means = paths.mean(axis=0)
    return tuple(
        YearlyProjection(
            year=year,
            median=float(p50[year]),
            mean=float(means[year]),
            p10=float(p10[year]),
            p25=float(p25[year]),
            p75=float(p75[year]),
            p90=float(p90[year]),
            confidence_interval_95=(float(lo[year]), float(hi[year])),
        )
        for year in range(paths.shape[1])
    )


# ---------------------------------------------------------------------------
# Goal helpers
# ---------------------------------------------------------------------------

def success_rate(outcomes: Sequence[float], target: float) -> float:
    """Fraction of outcomes at or above *target*."""
    arr = np.asarray(outcomes, dtype=float)
    if arr.size == 0:
        raise ValueError("Cannot calculate success rate of empty outcomes")
    return float(np.mean(arr >= target))


def expected_shortfall(outcomes: Sequence[float], target: float) -> float:
    """Mean amount by which failing outcomes miss *target* (0 if none fail)."""
    arr = np.asarray(outcomes, dtype=float)
    shortfalls = target - arr[arr < target]
    if shortfalls.size == 0:
        return 0.0
    return mean(shortfalls)


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

class MonteCarloEngine:
    """
    Stochastic portfolio simulator.

    Parameters
    ----------
    seed : int or numpy.random.SeedSequence, optional
        Root seed. Each call without an explicit ``seed`` spawns the next
        child of the root, so an engine built with the same seed replays
        the same sequence of runs. None = fresh OS entropy.
    executor : {"thread", "process", "none"}
        How trial batches are dispatched.
    max_workers : int, optional
        Pool size cap (defaults to CPU count).
    batch_size : int
        Trials per random stream.
    """

    def __init__(
        self,
        seed: SeedLike = None,
        *,
        executor: str = "thread",
        max_workers: Optional[int] = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ):
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1 (got {batch_size}).")
        self._root = as_seed_sequence(seed)
        self.executor = executor
        self.max_workers = max_workers
        self.batch_size = batch_size

    @classmethod
    def from_settings(cls, settings: Optional[AppSettings] = None) -> "MonteCarloEngine":
        """Build an engine from FINPROJ_* environment settings."""
        s = settings if settings is not None else AppSettings()
        return cls(
            seed=s.seed,
            executor=s.executor,
            max_workers=s.max_workers,
            batch_size=s.batch_size,
        )

    def __repr__(self) -> str:
        return (
            f"MonteCarloEngine(executor={self.executor!r}, "
            f"max_workers={self.max_workers}, batch_size={self.batch_size})"
        )

    # ---------------------------- internals -------------------------------

    def spawn_sequence(self, seed: SeedLike = None) -> np.random.SeedSequence:
        """Random stream for one run: *seed* if given, else the next root child.

        Passing the returned sequence to several simulate() calls makes them
        share random numbers.
        """
        if seed is not None:
            return as_seed_sequence(seed)
        return self._root.spawn(1)[0]

    def _run_paths(
        self,
        seq: np.random.SeedSequence,
        initial: Union[float, np.ndarray],
        count: int,
        monthly_contribution: float,
        years: int,
        expected_return: float,
        volatility: float,
        inflation_rate: Optional[float],
        inflate: bool,
    ) -> np.ndarray:
        sizes = batch_sizes(count, self.batch_size)
        children = seq.spawn(len(sizes))
        monthly_mean = expected_return / MONTHS_PER_YEAR
        monthly_std = volatility / math.sqrt(MONTHS_PER_YEAR)

        payloads = []
        offset = 0
        for child, n in zip(children, sizes):
            start = initial[offset:offset + n] if isinstance(initial, np.ndarray) else initial
            payloads.append(
                (child, start, n, monthly_contribution, years,
                 monthly_mean, monthly_std, inflation_rate, inflate)
            )
            offset += n

        parts = run_batches(
            _simulate_batch,
            payloads,
            executor=self.executor,
            max_workers=self.max_workers,
        )
        return np.vstack(parts)

    # ---------------------------- public API ------------------------------

    def simulate(self, config: SimulationConfig, seed: SeedLike = None) -> SimulationResult:
        """
        Run ``config.iterations`` trials of ``config.years`` years.

        Parameters
        ----------
        config : SimulationConfig
        seed : int or SeedSequence, optional
            Pins this run. Passing the same SeedSequence twice replays the
            same random draws.

        Raises
        ------
        ConfigValidationError
            If iterations, years or return volatility are out of bounds.
        """
        validate_simulation_config(config)
        t0 = time.perf_counter()

        paths = self._run_paths(
            self.spawn_sequence(seed),
            config.initial_balance,
            config.iterations,
            config.monthly_contribution,
            config.years,
            config.expected_return,
            config.return_volatility,
            config.inflation_rate,
            config.inflation_adjusted_contributions,
        )
        finals = paths[:, -1].copy()
        finals.setflags(write=False)

        inflation = config.inflation_rate or 0.0
        inflated_initial = config.initial_balance * (1.0 + inflation) ** config.years
        probabilities = SimulationProbabilities(
            success_rate=float(np.mean(finals > 0)),
            doubling_probability=float(np.mean(finals >= 2 * config.initial_balance)),
            maintaining_purchasing_power=float(np.mean(finals >= inflated_initial)),
        )

        elapsed = (time.perf_counter() - t0) * 1000.0
        logger.info(
            "Monte Carlo run: %d iterations x %d years in %.1f ms",
            config.iterations, config.years, elapsed,
        )
        return SimulationResult(
            config=config,
            final_balance=BalanceSummary.from_statistics(summarize(finals)),
            yearly_projections=_yearly_projections(paths),
            probabilities=probabilities,
            all_outcomes=finals,
            execution_time_ms=elapsed,
        )

    def simulate_retirement(
        self,
        config: RetirementSimulationConfig,
        seed: SeedLike = None,
    ) -> RetirementSimulationResult:
        """
        Accumulate until retirement, then draw down until life expectancy.

        Every accumulation outcome seeds exactly one distribution trajectory
        with inflation-adjusted withdrawals at the post-retirement return.
        A trial succeeds when its balance stays above zero through the
        whole distribution phase.
        """
        t0 = time.perf_counter()
        accumulation = SimulationConfig(
            initial_balance=config.current_savings,
            monthly_contribution=config.monthly_contribution,
            years=config.years_until_retirement,
            iterations=config.iterations,
            expected_return=config.pre_retirement_return,
            return_volatility=config.return_volatility,
            inflation_rate=config.inflation_rate,
            inflation_adjusted_contributions=True,
        )
        distribution = SimulationConfig(
            initial_balance=0.0,
            monthly_contribution=-config.monthly_withdrawal,
            years=config.years_in_retirement,
            iterations=config.iterations,
            expected_return=config.post_retirement_return,
            return_volatility=config.return_volatility,
            inflation_rate=config.inflation_rate,
            inflation_adjusted_contributions=True,
        )
        validate_simulation_config(accumulation)
        validate_simulation_config(distribution)

        acc_seq, dist_seq = self.spawn_sequence(seed).spawn(2)
        acc_paths = self._run_paths(
            acc_seq,
            accumulation.initial_balance,
            config.iterations,
            accumulation.monthly_contribution,
            accumulation.years,
            accumulation.expected_return,
            accumulation.return_volatility,
            accumulation.inflation_rate,
            True,
        )
        at_retirement = acc_paths[:, -1]
        dist_paths = self._run_paths(
            dist_seq,
            at_retirement,
            config.iterations,
            distribution.monthly_contribution,
            distribution.years,
            distribution.expected_return,
            distribution.return_volatility,
            distribution.inflation_rate,
            True,
        )
        combined = np.hstack([acc_paths, dist_paths[:, 1:]])

        depleted_mask = dist_paths <= 0
        depleted = depleted_mask.any(axis=1)
        n_depleted = int(depleted.sum())
        if n_depleted:
            first_zero = depleted_mask[depleted].argmax(axis=1)
            years_until_depletion = float(first_zero.mean())
            logger.warning(
                "%d of %d retirement trajectories depleted before age %d",
                n_depleted, config.iterations, config.life_expectancy,
            )
        else:
            years_until_depletion = None

        success_by_age = tuple(
            SuccessByAge(
                age=age,
                success_rate=float(np.mean(combined[:, age - config.current_age] > 0)),
            )
            for age in range(config.current_age, config.life_expectancy + 1)
        )

        elapsed = (time.perf_counter() - t0) * 1000.0
        logger.info(
            "Retirement run: %d iterations, ages %d-%d-%d in %.1f ms",
            config.iterations, config.current_age, config.retirement_age,
            config.life_expectancy, elapsed,
        )
        return RetirementSimulationResult(
            config=config,
            success_probability=float(np.mean(~depleted)),
            balance_at_retirement=summarize(at_retirement),
            balance_at_life_expectancy=summarize(dist_paths[:, -1]),
            yearly_projections=_yearly_projections(combined),
            median_years_until_depletion=years_until_depletion,
            success_by_age=success_by_age,
            execution_time_ms=elapsed,
        )

    def solve_safe_withdrawal_rate(
        self,
        params: SafeWithdrawalParams,
        seed: SeedLike = None,
    ) -> SafeWithdrawalResult:
        """
        Bisect for the withdrawal rate whose success rate matches the target.

        The bracket starts at [1%, 10%]. Each probe converts the rate into
        an inflation-adjusted monthly withdrawal and runs simulate(); all
        probes share one random stream, so success is pathwise
        non-increasing in the rate. Stops after 20 probes or once the
        success rate is within 0.1% of the target.
        """
        seq = self.spawn_sequence(seed)
        target = params.success_probability
        low, high = SWR_LOWER_BOUND, SWR_UPPER_BOUND
        best: Optional[float] = None
        best_success: Optional[float] = None
        probes = 0

        for probes in range(1, SWR_MAX_PROBES + 1):
            rate = (low + high) / 2
            monthly_withdrawal = params.portfolio_value * rate / MONTHS_PER_YEAR
            cfg = SimulationConfig(
                initial_balance=params.portfolio_value,
                monthly_contribution=-monthly_withdrawal,
                years=params.years_in_retirement,
                iterations=params.iterations,
                expected_return=params.expected_return,
                return_volatility=params.return_volatility,
                inflation_rate=params.inflation_rate,
                inflation_adjusted_contributions=True,
            )
            achieved = self.simulate(cfg, seed=seq).probabilities.success_rate
            logger.debug("SWR probe %d: rate=%.5f success=%.4f", probes, rate, achieved)

            if abs(achieved - target) < SWR_TOLERANCE:
                best, best_success = rate, achieved
                break
            if achieved < target:
                high = rate
            else:
                low = rate
                best, best_success = rate, achieved

        if best is None:
            logger.warning(
                "Safe withdrawal search found no rate reaching %.1f%% success; "
                "falling back to %.0f%%",
                target * 100, SWR_DEFAULT_RATE * 100,
            )
            return SafeWithdrawalResult(
                rate=SWR_DEFAULT_RATE,
                converged=False,
                probes=probes,
                achieved_success_rate=None,
            )
        return SafeWithdrawalResult(
            rate=best,
            converged=True,
            probes=probes,
            achieved_success_rate=best_success,
        )

    def calculate_safe_withdrawal_rate(
        self,
        params: SafeWithdrawalParams,
        seed: SeedLike = None,
    ) -> float:
        """Annual withdrawal rate in [0.01, 0.10]; see solve_safe_withdrawal_rate()."""
        return self.solve_safe_withdrawal_rate(params, seed=seed).rate

    def find_required_contribution(
        self,
        config: GoalProbabilityConfig,
        target_amount: Optional[float] = None,
        desired_success_rate: Optional[float] = None,
        tolerance: float = 0.01,
        seed: SeedLike = None,
    ) -> float:
        """
        Monthly contribution giving roughly the desired chance of the target.

        Bisects over ``[0, target / months]`` with 1,000 trials per probe,
        for at most 20 probes or until the bracket is narrower than 10.
        """
        target = config.target_amount if target_amount is None else target_amount
        desired = config.desired_success_rate if desired_success_rate is None else desired_success_rate
        seq = self.spawn_sequence(seed)

        low, high = 0.0, target / config.months
        probes = 0
        while probes < GOAL_SEEK_MAX_PROBES and high - low > GOAL_SEEK_MIN_BRACKET:
            mid = (low + high) / 2
            result = self.simulate(
                config.to_simulation_config(monthly_contribution=mid, iterations=GOAL_SEEK_ITERATIONS),
                seed=seq,
            )
            achieved = success_rate(result.all_outcomes, target)
            logger.debug("Contribution probe %d: %.2f -> %.4f", probes + 1, mid, achieved)
            if abs(achieved - desired) < tolerance:
                return mid
            if achieved < desired:
                low = mid
            else:
                high = mid
            probes += 1

        return (low + high) / 2

    def calculate_goal_probability(
        self,
        config: GoalProbabilityConfig,
        seed: SeedLike = None,
    ) -> GoalProbabilityResult:
        """Probability of reaching the goal plus a recommended contribution."""
        main_seq, seek_seq = self.spawn_sequence(seed).spawn(2)
        result = self.simulate(config.to_simulation_config(), seed=main_seq)
        outcomes = result.all_outcomes
        return GoalProbabilityResult(
            probability=success_rate(outcomes, config.target_amount),
            median_outcome=result.final_balance.median,
            outcome_range=(result.final_balance.p10, result.final_balance.p90),
            expected_shortfall=expected_shortfall(outcomes, config.target_amount),
            current_contribution=config.monthly_contribution,
            recommended_contribution=self.find_required_contribution(config, seed=seek_seq),
        )
