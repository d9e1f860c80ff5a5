"""
Pytest configuration and fixtures for FinProj test suite.

This module provides reusable fixtures for testing all FinProj components.
Engines are seeded and run inline so stochastic assertions are
deterministic.
"""

import numpy as np
import pytest

from finproj.config import (
    AssetConfig,
    ExpenseCategory,
    GoalProbabilityConfig,
    IncomeStream,
    LifeEvent,
    LoanConfig,
    LongTermProjectionConfig,
    RetirementSimulationConfig,
    SafeWithdrawalParams,
    SimulationConfig,
    SocialSecurityConfig,
    TaxConfig,
)
from finproj.cashflow import LongTermCashflowEngine
from finproj.monte_carlo import MonteCarloEngine
from finproj.scenarios import ScenarioAnalysisEngine


# ---------------------------------------------------------------------------
# Randomness Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def seed() -> int:
    """Standard random seed for reproducibility."""
    return 42


@pytest.fixture
def rng(seed) -> np.random.Generator:
    """Seeded numpy Generator."""
    return np.random.default_rng(seed)


# ---------------------------------------------------------------------------
# Engine Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def engine(seed) -> MonteCarloEngine:
    """Seeded Monte Carlo engine running batches inline."""
    return MonteCarloEngine(seed=seed, executor="none")


@pytest.fixture
def scenario_engine(engine) -> ScenarioAnalysisEngine:
    return ScenarioAnalysisEngine(engine)


@pytest.fixture
def cashflow_engine() -> LongTermCashflowEngine:
    return LongTermCashflowEngine()


# ---------------------------------------------------------------------------
# Monte Carlo Config Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def sim_config() -> SimulationConfig:
    """
    Growth portfolio.

    100,000 initial, 1,000/month for 10 years at 7% / 15% volatility.
    """
    return SimulationConfig(
        initial_balance=100_000,
        monthly_contribution=1_000,
        years=10,
        iterations=1_000,
        expected_return=0.07,
        return_volatility=0.15,
    )


@pytest.fixture
def withdrawal_config() -> SimulationConfig:
    """Drawdown-only portfolio: 1M, withdrawing 4,000/month for 30 years."""
    return SimulationConfig(
        initial_balance=1_000_000,
        monthly_contribution=-4_000,
        years=30,
        iterations=1_000,
        expected_return=0.05,
        return_volatility=0.12,
    )


@pytest.fixture
def retirement_config() -> RetirementSimulationConfig:
    return RetirementSimulationConfig(
        current_age=55,
        retirement_age=65,
        life_expectancy=85,
        current_savings=400_000,
        monthly_contribution=2_000,
        monthly_withdrawal=3_500,
        pre_retirement_return=0.07,
        post_retirement_return=0.05,
        return_volatility=0.12,
        iterations=500,
        inflation_rate=0.02,
    )


@pytest.fixture
def swr_params() -> SafeWithdrawalParams:
    return SafeWithdrawalParams(
        portfolio_value=1_000_000,
        years_in_retirement=30,
        success_probability=0.9,
        expected_return=0.06,
        return_volatility=0.12,
        inflation_rate=0.02,
        iterations=300,
    )


@pytest.fixture
def goal_config() -> GoalProbabilityConfig:
    return GoalProbabilityConfig(
        initial_balance=20_000,
        monthly_contribution=800,
        years=10,
        target_amount=200_000,
        expected_return=0.06,
        return_volatility=0.12,
        iterations=500,
    )


# ---------------------------------------------------------------------------
# Cashflow Config Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def salary() -> IncomeStream:
    return IncomeStream(name="Salary", annual_amount=90_000, growth_rate=0.03, start_year=2025)


@pytest.fixture
def car_loan() -> LoanConfig:
    """20,000 at 5% paid 450/month; clears after 50 payments."""
    return LoanConfig(
        name="Car",
        balance=20_000,
        interest_rate=0.05,
        monthly_payment=450,
        remaining_months=60,
        type="auto",
    )


@pytest.fixture
def household_config(salary, car_loan) -> LongTermProjectionConfig:
    """
    A 35-year-old household projected 30 years from 2025.

    Salary, two expense lines, one car loan, a brokerage account,
    a 401k, Social Security claimed at 67 and US single-filer taxes.
    """
    return LongTermProjectionConfig(
        start_year=2025,
        projection_years=30,
        inflation_rate=0.03,
        current_age=35,
        retirement_age=65,
        life_expectancy=90,
        income_streams=[salary],
        expenses=[
            ExpenseCategory(name="Housing", annual_amount=24_000, growth_rate=0.03),
            ExpenseCategory(name="Travel", annual_amount=6_000, growth_rate=0.02, essential=False),
        ],
        loans=[car_loan],
        assets=[
            AssetConfig(name="Brokerage", current_value=60_000, expected_return=0.06,
                        monthly_contribution=500, type="taxable"),
            AssetConfig(name="401k", current_value=80_000, expected_return=0.07,
                        monthly_contribution=800, type="tax_deferred"),
        ],
        life_events=[
            LifeEvent(type="home_purchase", name="Down payment", year=2028, amount=-40_000),
        ],
        social_security=SocialSecurityConfig(
            country="US", monthly_benefit=2_500, claim_year=2057, claim_age=67,
        ),
        taxes=TaxConfig(country="US", filing_status="single", state_tax_rate=0.04),
        emergency_fund_months=6,
        current_liquid_savings=10_000,
    )
