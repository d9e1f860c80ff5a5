"""
Integration test for full FinProj workflow.

Tests complete planning sessions across the engines: config files in,
Monte Carlo and stress results, long-term projections with what-if
variants, and results back out to JSON.
"""

import json

import numpy as np
import pytest

from finproj.cashflow import LongTermCashflowEngine
from finproj.config import (
    LoanConfig,
    SafeWithdrawalParams,
    SimulationConfig,
    WhatIfScenario,
)
from finproj.monte_carlo import MonteCarloEngine
from finproj.scenarios import ScenarioAnalysisEngine
from finproj.serialization import load_config, load_result, save_config, save_result


@pytest.mark.integration
class TestMonteCarloWorkflow:
    """Config file -> simulation -> stress test -> saved results."""

    def test_file_to_stress_report(self, tmp_path, sim_config):
        # 1. Persist and reload the plan
        cfg_path = tmp_path / "plan.json"
        save_config(sim_config.model_copy(update={"iterations": 500}), cfg_path)
        cfg = load_config(cfg_path)
        assert isinstance(cfg, SimulationConfig)

        # 2. Baseline simulation
        engine = MonteCarloEngine(seed=11, executor="none")
        baseline = engine.simulate(cfg)
        assert baseline.all_outcomes.shape == (500,)
        assert len(baseline.yearly_projections) == cfg.years + 1

        # 3. Stress every predefined scenario on the same seed
        scenarios = ScenarioAnalysisEngine(engine).analyze_multiple_scenarios(cfg, seed=3)
        assert len(scenarios) == 7
        for r in scenarios:
            assert r.stressed.config.iterations == cfg.iterations
            assert r.comparison.impact_severity in ("minimal", "moderate", "significant", "critical")

        crash = next(r for r in scenarios if r.scenario.type.value == "market_crash")
        assert crash.stressed.final_balance.median < crash.baseline.final_balance.median

        # 4. Save and reload a result
        out = tmp_path / "out" / "crash.json"
        save_result(crash, out)
        data = load_result(out)
        assert data["kind"] == "ScenarioComparisonResult"
        assert data["result"]["scenario"]["type"] == "market_crash"
        assert "all_outcomes" not in data["result"]["baseline"]
        json.dumps(data)

    def test_thread_pool_matches_inline(self, sim_config):
        cfg = sim_config.model_copy(update={"iterations": 600})
        inline = MonteCarloEngine(seed=5, executor="none", batch_size=150).simulate(cfg)
        pooled = MonteCarloEngine(seed=5, executor="thread", max_workers=3, batch_size=150).simulate(cfg)
        np.testing.assert_array_equal(inline.all_outcomes, pooled.all_outcomes)


@pytest.mark.integration
class TestRetirementWorkflow:
    """Accumulate, pick a withdrawal rate, check the goal."""

    def test_retirement_plan(self, engine, retirement_config):
        retirement = engine.simulate_retirement(retirement_config)
        assert 0.0 <= retirement.success_probability <= 1.0
        assert retirement.success_by_age[0].age == 55
        assert retirement.success_by_age[-1].age == 85

        nest_egg = retirement.balance_at_retirement.median
        assert nest_egg > retirement_config.current_savings

        swr = engine.solve_safe_withdrawal_rate(
            SafeWithdrawalParams(
                portfolio_value=nest_egg,
                years_in_retirement=retirement_config.years_in_retirement,
                success_probability=0.9,
                expected_return=retirement_config.post_retirement_return,
                return_volatility=retirement_config.return_volatility,
                inflation_rate=retirement_config.inflation_rate,
                iterations=300,
            ),
            seed=8,
        )
        assert 0.01 <= swr.rate <= 0.10
        if swr.converged:
            assert swr.achieved_success_rate >= 0.9 - 0.001

    def test_goal_recommendation_reaches_target(self, engine, goal_config):
        result = engine.calculate_goal_probability(goal_config, seed=21)
        assert 0.0 <= result.probability <= 1.0
        low, high = result.outcome_range
        assert low <= result.median_outcome <= high

        # Running the recommended contribution lands near the desired rate
        check = engine.simulate(
            goal_config.to_simulation_config(
                monthly_contribution=result.recommended_contribution, iterations=2_000,
            ),
            seed=99,
        )
        achieved = float(np.mean(check.all_outcomes >= goal_config.target_amount))
        assert achieved == pytest.approx(goal_config.desired_success_rate, abs=0.06)


@pytest.mark.integration
class TestCashflowWorkflow:
    """Household projection with what-if variants."""

    def test_household_plan(self, tmp_path, household_config):
        cfg_path = tmp_path / "household.json"
        save_config(household_config, cfg_path)
        cfg = load_config(cfg_path)

        engine = LongTermCashflowEngine()
        comparison = engine.compare_scenarios(cfg, [
            WhatIfScenario(name="Retire at 60", modifications={"retirement_age": 60}),
            {"name": "No car loan", "modifications": {"loans": []}},
            {
                "name": "Mortgage",
                "modifications": {
                    "loans": [
                        LoanConfig(name="Mortgage", balance=300_000, interest_rate=0.06,
                                   monthly_payment=1_800, remaining_months=360, type="mortgage"),
                    ],
                },
            },
        ])

        frame = comparison.summary_frame()
        assert list(frame.index) == ["baseline", "Retire at 60", "No car loan", "Mortgage"]

        baseline = comparison.baseline
        by_name = {w.scenario.name: w.result for w in comparison.scenarios}

        # Retiring earlier means fewer earning years
        assert (
            by_name["Retire at 60"].summary.total_lifetime_earnings
            < baseline.summary.total_lifetime_earnings
        )
        # Without the car loan the household is debt free from the start
        assert by_name["No car loan"].summary.debt_free_year == 2025
        # A new 30-year mortgage is still outstanding five years in
        assert by_name["Mortgage"].yearly_snapshots[5].total_debt > 0
        assert by_name["Mortgage"].summary.risk_score >= baseline.summary.risk_score

        # Baseline car loan clears within five years
        assert baseline.summary.debt_free_year is not None
        assert baseline.summary.debt_free_year <= 2030

        out = tmp_path / "projection.json"
        save_result(baseline, out)
        data = load_result(out)
        assert data["result"]["summary"]["peak_net_worth"]["year"] >= 2025
        assert len(data["result"]["yearly_snapshots"]) == 31

    def test_frame_matches_snapshots(self, cashflow_engine, household_config):
        result = cashflow_engine.project(household_config)
        df = result.to_frame()
        assert df.index[0] == 2025
        assert df.index[-1] == 2055
        assert df.loc[2030, "net_worth"] == result.yearly_snapshots[5].net_worth
        assert (df["net_worth"] == df["total_assets"] - df["total_debt"]).all()
