"""
Unit tests for monte_carlo.py module.

Tests MonteCarloEngine functionality:
- simulate(): bounds, shapes, floor invariant, probabilities, reproducibility
- simulate_retirement(): accumulation + distribution phases
- Safe withdrawal rate search (range, monotonicity, fallback)
- Goal probability helpers
"""

import logging

import numpy as np
import pytest

from finproj.config import SafeWithdrawalParams, SimulationConfig
from finproj.exceptions import ConfigValidationError, FinProjError
from finproj.monte_carlo import (
    MonteCarloEngine,
    SimulationResult,
    expected_shortfall,
    success_rate,
)


def _with(config: SimulationConfig, **changes) -> SimulationConfig:
    return config.model_copy(update=changes)


# ============================================================================
# VALIDATION
# ============================================================================

class TestConfigBounds:
    """Test engine-enforced configuration bounds."""

    @pytest.mark.parametrize(
        "changes, message, field",
        [
            ({"iterations": 50}, "Iterations must be at least 100", "iterations"),
            ({"iterations": 150_000}, "100,000", "iterations"),
            ({"years": 0}, "Years must be at least 1", "years"),
            ({"years": 101}, "Years cannot exceed 100", "years"),
            ({"return_volatility": -0.1}, "cannot be negative", "return_volatility"),
            ({"return_volatility": 1.5}, "cannot exceed 100%", "return_volatility"),
        ],
    )
    def test_out_of_bounds_rejected(self, engine, sim_config, changes, message, field):
        with pytest.raises(ConfigValidationError, match=message) as exc_info:
            engine.simulate(_with(sim_config, **changes))
        assert exc_info.value.field == field
        assert isinstance(exc_info.value, FinProjError)

    def test_boundary_values_accepted(self, engine, sim_config):
        result = engine.simulate(_with(sim_config, iterations=100, years=1, return_volatility=0.0))
        assert len(result.all_outcomes) == 100

    def test_invalid_batch_size(self):
        with pytest.raises(ValueError, match="batch_size"):
            MonteCarloEngine(batch_size=0)


# ============================================================================
# SIMULATE
# ============================================================================

class TestSimulate:
    """Test single-phase simulation."""

    def test_growth_portfolio(self, engine, sim_config):
        """100k + 1k/month at 7% for 10 years ends well above the start."""
        result = engine.simulate(sim_config)

        assert isinstance(result, SimulationResult)
        assert result.final_balance.median > 100_000
        assert result.probabilities.success_rate > 0.9

    def test_withdrawal_portfolio_partially_succeeds(self, engine, withdrawal_config):
        result = engine.simulate(withdrawal_config)
        assert 0 < result.probabilities.success_rate < 1

    def test_shapes(self, engine, sim_config):
        result = engine.simulate(sim_config)
        assert len(result.all_outcomes) == sim_config.iterations
        assert len(result.yearly_projections) == sim_config.years + 1
        assert [p.year for p in result.yearly_projections] == list(range(sim_config.years + 1))

    def test_year_zero_is_initial_balance(self, engine, sim_config):
        first = engine.simulate(sim_config).yearly_projections[0]
        assert first.median == pytest.approx(sim_config.initial_balance)
        assert first.p10 == pytest.approx(sim_config.initial_balance)

    def test_balance_floor(self, engine, sim_config):
        """Huge withdrawals drive balances to zero, never below."""
        result = engine.simulate(_with(sim_config, monthly_contribution=-50_000))
        assert np.all(result.all_outcomes >= 0)
        assert result.final_balance.median == 0.0
        assert result.probabilities.success_rate == 0.0

    def test_probabilities_in_unit_interval(self, engine, withdrawal_config):
        p = engine.simulate(_with(withdrawal_config, inflation_rate=0.03)).probabilities
        for value in (p.success_rate, p.doubling_probability, p.maintaining_purchasing_power):
            assert 0.0 <= value <= 1.0

    def test_percentile_ordering(self, engine, sim_config):
        for p in engine.simulate(sim_config).yearly_projections:
            assert p.p10 <= p.p25 <= p.median <= p.p75 <= p.p90
            low, high = p.confidence_interval_95
            assert low <= p.p10 and p.p90 <= high

    def test_volatility_widens_spread(self, engine, sim_config):
        """Same random stream, higher volatility -> wider P10-P90 band."""
        calm = engine.simulate(_with(sim_config, return_volatility=0.10), seed=7)
        wild = engine.simulate(_with(sim_config, return_volatility=0.25), seed=7)
        calm_spread = calm.final_balance.p90 - calm.final_balance.p10
        wild_spread = wild.final_balance.p90 - wild.final_balance.p10
        assert wild_spread > calm_spread

    def test_zero_volatility_is_deterministic(self, engine, sim_config):
        result = engine.simulate(_with(sim_config, return_volatility=0.0, monthly_contribution=0))
        expected = 100_000 * (1 + 0.07 / 12) ** 120
        assert result.final_balance.min == pytest.approx(expected)
        assert result.final_balance.max == pytest.approx(expected)

    def test_inflation_adjusted_contributions_add_more(self, engine, sim_config):
        base = _with(sim_config, inflation_rate=0.03)
        flat = engine.simulate(base, seed=3)
        escalated = engine.simulate(_with(base, inflation_adjusted_contributions=True), seed=3)
        assert escalated.final_balance.median > flat.final_balance.median

    def test_outcomes_are_read_only(self, engine, sim_config):
        result = engine.simulate(sim_config)
        with pytest.raises(ValueError):
            result.all_outcomes[0] = -1.0

    def test_projections_frame(self, engine, sim_config):
        df = engine.simulate(sim_config).projections_frame()
        assert list(df.index) == list(range(11))
        assert {"median", "p10", "p90", "ci95_lower", "ci95_upper"} <= set(df.columns)


# ============================================================================
# REPRODUCIBILITY
# ============================================================================

class TestReproducibility:
    """Test seeding and executor independence."""

    def test_same_seed_same_results(self, sim_config):
        a = MonteCarloEngine(seed=11, executor="none").simulate(sim_config)
        b = MonteCarloEngine(seed=11, executor="none").simulate(sim_config)
        np.testing.assert_array_equal(a.all_outcomes, b.all_outcomes)

    def test_successive_runs_differ(self, engine, sim_config):
        a = engine.simulate(sim_config)
        b = engine.simulate(sim_config)
        assert not np.array_equal(a.all_outcomes, b.all_outcomes)

    def test_explicit_seed_pins_run(self, engine, sim_config):
        a = engine.simulate(sim_config, seed=5)
        b = engine.simulate(sim_config, seed=5)
        np.testing.assert_array_equal(a.all_outcomes, b.all_outcomes)

    @pytest.mark.parametrize("executor", ["thread", "process"])
    def test_executor_does_not_change_numbers(self, sim_config, executor):
        cfg = _with(sim_config, iterations=500)
        inline = MonteCarloEngine(seed=1, executor="none", batch_size=100).simulate(cfg)
        pooled = MonteCarloEngine(
            seed=1, executor=executor, max_workers=2, batch_size=100
        ).simulate(cfg)
        np.testing.assert_array_equal(inline.all_outcomes, pooled.all_outcomes)

    def test_from_settings(self):
        from finproj.config import AppSettings

        engine = MonteCarloEngine.from_settings(
            AppSettings(seed=3, executor="none", batch_size=500)
        )
        assert engine.executor == "none"
        assert engine.batch_size == 500


# ============================================================================
# RETIREMENT
# ============================================================================

class TestSimulateRetirement:
    """Test accumulation + distribution simulation."""

    def test_result_shape(self, engine, retirement_config):
        result = engine.simulate_retirement(retirement_config)
        span = retirement_config.life_expectancy - retirement_config.current_age + 1

        assert 0.0 <= result.success_probability <= 1.0
        assert len(result.yearly_projections) == span
        assert [s.age for s in result.success_by_age] == list(
            range(retirement_config.current_age, retirement_config.life_expectancy + 1)
        )

    def test_accumulation_grows_savings(self, engine, retirement_config):
        result = engine.simulate_retirement(retirement_config)
        assert result.balance_at_retirement.median > retirement_config.current_savings
        assert result.balance_at_retirement.count == retirement_config.iterations

    def test_success_by_age_starts_at_one(self, engine, retirement_config):
        result = engine.simulate_retirement(retirement_config)
        assert result.success_by_age[0].success_rate == 1.0
        rates = [s.success_rate for s in result.success_by_age]
        assert rates[-1] == pytest.approx(result.success_probability)

    def test_comfortable_plan_never_depletes(self, engine, retirement_config):
        cfg = retirement_config.model_copy(update={"monthly_withdrawal": 100.0})
        result = engine.simulate_retirement(cfg)
        assert result.success_probability == 1.0
        assert result.median_years_until_depletion is None

    def test_overspending_depletes(self, engine, retirement_config, caplog):
        cfg = retirement_config.model_copy(update={"monthly_withdrawal": 20_000.0})
        with caplog.at_level(logging.WARNING, logger="finproj.monte_carlo"):
            result = engine.simulate_retirement(cfg)

        assert result.success_probability < 0.5
        assert result.median_years_until_depletion is not None
        assert 0 < result.median_years_until_depletion <= cfg.years_in_retirement
        assert "depleted" in caplog.text

    def test_bounds_apply_to_phases(self, engine, retirement_config):
        cfg = retirement_config.model_copy(update={"iterations": 10})
        with pytest.raises(ConfigValidationError, match="Iterations must be at least 100"):
            engine.simulate_retirement(cfg)


# ============================================================================
# SAFE WITHDRAWAL RATE
# ============================================================================

class TestSafeWithdrawalRate:
    """Test bisection search for the sustainable withdrawal rate."""

    def test_rate_in_bracket(self, engine, swr_params):
        rate = engine.calculate_safe_withdrawal_rate(swr_params, seed=7)
        assert 0.01 <= rate <= 0.10

    def test_result_reports_convergence(self, engine, swr_params):
        result = engine.solve_safe_withdrawal_rate(swr_params, seed=7)
        assert result.converged
        assert 1 <= result.probes <= 20
        assert result.achieved_success_rate >= swr_params.success_probability - 0.001

    def test_shorter_horizon_allows_higher_rate(self, engine, swr_params):
        short = swr_params.model_copy(update={"years_in_retirement": 20})
        long = swr_params.model_copy(update={"years_in_retirement": 35})
        assert (
            engine.calculate_safe_withdrawal_rate(short, seed=7)
            >= engine.calculate_safe_withdrawal_rate(long, seed=7)
        )

    def test_higher_confidence_lowers_rate(self, engine, swr_params):
        relaxed = swr_params.model_copy(update={"success_probability": 0.75})
        strict = swr_params.model_copy(update={"success_probability": 0.95})
        assert (
            engine.calculate_safe_withdrawal_rate(strict, seed=7)
            <= engine.calculate_safe_withdrawal_rate(relaxed, seed=7)
        )

    def test_hopeless_portfolio_falls_back(self, engine, caplog):
        params = SafeWithdrawalParams(
            portfolio_value=1_000_000,
            years_in_retirement=30,
            success_probability=0.99,
            expected_return=-0.5,
            return_volatility=0.0,
            iterations=100,
        )
        with caplog.at_level(logging.WARNING, logger="finproj.monte_carlo"):
            result = engine.solve_safe_withdrawal_rate(params)

        assert result.rate == 0.04
        assert not result.converged
        assert result.achieved_success_rate is None
        assert result.probes == 20
        assert "falling back" in caplog.text


# ============================================================================
# GOAL PROBABILITY
# ============================================================================

class TestGoalHelpers:
    """Test outcome-vs-target helpers."""

    def test_success_rate(self):
        assert success_rate([50, 100, 150, 200], 100) == 0.75

    def test_success_rate_empty(self):
        with pytest.raises(ValueError, match="empty"):
            success_rate([], 100)

    def test_expected_shortfall(self):
        assert expected_shortfall([50, 80, 150], 100) == pytest.approx(35.0)

    def test_no_shortfall(self):
        assert expected_shortfall([100, 200], 100) == 0.0


class TestGoalProbability:
    """Test goal probability and required contribution search."""

    def test_goal_result(self, engine, goal_config):
        result = engine.calculate_goal_probability(goal_config)

        assert 0.0 <= result.probability <= 1.0
        assert result.expected_shortfall >= 0.0
        low, high = result.outcome_range
        assert low <= result.median_outcome <= high
        assert result.current_contribution == goal_config.monthly_contribution
        assert 0.0 <= result.recommended_contribution <= goal_config.target_amount / goal_config.months

    def test_goal_already_funded_needs_almost_nothing(self, engine, goal_config):
        cfg = goal_config.model_copy(update={"initial_balance": 400_000, "return_volatility": 0.0})
        assert engine.find_required_contribution(cfg) < 10

    def test_find_required_contribution_is_seed_stable(self, engine, goal_config):
        a = engine.find_required_contribution(goal_config, seed=9)
        b = engine.find_required_contribution(goal_config, seed=9)
        assert a == b
