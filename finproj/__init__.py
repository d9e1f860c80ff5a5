"""
FinProj - Financial Projection Engines

Computational core for personal financial planning: stochastic
portfolio simulation, stress testing against adverse scenarios and
deterministic multi-decade cashflow projection.

Modules
-------
- statistics   : Descriptive statistics, percentiles, normal sampling, TVM helpers
- monte_carlo  : Monte Carlo portfolio, retirement, withdrawal-rate and goal engines
- scenarios    : Predefined stress scenarios and baseline-vs-stressed comparison
- cashflow     : Year-by-year income/expense/loan/asset projection and what-ifs
- tax, loans, social_security : Cashflow building blocks
- config       : Pydantic configuration models and environment settings
- serialization, plotting, cli : Persistence, charts and command line
"""

__version__ = "0.1.0"

from .exceptions import (
    FinProjError,
    ConfigurationError,
    BracketTableError,
    ValidationError,
    ConfigValidationError,
)
from .config import (
    SimulationConfig,
    RetirementSimulationConfig,
    SafeWithdrawalParams,
    GoalProbabilityConfig,
    ScenarioType,
    ScenarioShock,
    Scenario,
    IncomeStream,
    ExpenseCategory,
    LoanConfig,
    AssetConfig,
    LifeEvent,
    SocialSecurityConfig,
    TaxConfig,
    LongTermProjectionConfig,
    WhatIfScenario,
    AppSettings,
)
from .monte_carlo import (
    MonteCarloEngine,
    SimulationResult,
    RetirementSimulationResult,
    SafeWithdrawalResult,
    GoalProbabilityResult,
)
from .scenarios import (
    ScenarioAnalysisEngine,
    ScenarioComparisonResult,
    get_predefined_scenarios,
    get_scenario,
)
from .cashflow import (
    LongTermCashflowEngine,
    LongTermProjectionResult,
    ScenarioProjectionComparison,
)
from . import statistics

__all__ = [
    "__version__",
    # Errors
    "FinProjError",
    "ConfigurationError",
    "BracketTableError",
    "ValidationError",
    "ConfigValidationError",
    # Config
    "SimulationConfig",
    "RetirementSimulationConfig",
    "SafeWithdrawalParams",
    "GoalProbabilityConfig",
    "ScenarioType",
    "ScenarioShock",
    "Scenario",
    "IncomeStream",
    "ExpenseCategory",
    "LoanConfig",
    "AssetConfig",
    "LifeEvent",
    "SocialSecurityConfig",
    "TaxConfig",
    "LongTermProjectionConfig",
    "WhatIfScenario",
    "AppSettings",
    # Engines
    "MonteCarloEngine",
    "SimulationResult",
    "RetirementSimulationResult",
    "SafeWithdrawalResult",
    "GoalProbabilityResult",
    "ScenarioAnalysisEngine",
    "ScenarioComparisonResult",
    "get_predefined_scenarios",
    "get_scenario",
    "LongTermCashflowEngine",
    "LongTermProjectionResult",
    "ScenarioProjectionComparison",
    "statistics",
]
