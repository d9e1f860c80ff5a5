"""
Configuration management module for FinProj.

Purpose
-------
Centralized configuration using Pydantic models for type-safe parameter
management, validation, and serialization. Every engine input is a frozen
model built once by the caller and never mutated by an engine.

Design Principles
-----------------
- Type-safe: Pydantic enforces types and validates ranges
- Immutable: Frozen models prevent accidental mutation
- Serializable: Easy conversion to/from JSON for config files
- Environment-aware: AppSettings reads FINPROJ_* variables and .env files

The Monte Carlo bounds on ``iterations``, ``years`` and
``return_volatility`` are deliberately not pydantic constraints. The
engine checks them and raises ConfigValidationError with a message
naming the field and the bound.

Example
-------
>>> from finproj.config import SimulationConfig
>>> cfg = SimulationConfig(
...     initial_balance=100_000, monthly_contribution=1_000, years=10,
...     iterations=1_000, expected_return=0.07, return_volatility=0.15,
... )
>>> cfg.model_dump()["years"]
10
>>> SimulationConfig.model_validate_json(cfg.model_dump_json()) == cfg
True
"""

from __future__ import annotations
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, Field, field_validator, ConfigDict
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_GOAL_SUCCESS_RATE,
    DEFAULT_ITERATIONS,
    MONTHS_PER_YEAR,
)

__all__ = [
    # Monte Carlo
    "SimulationConfig",
    "RetirementSimulationConfig",
    "SafeWithdrawalParams",
    "GoalProbabilityConfig",
    # Scenarios
    "ScenarioType",
    "ShockType",
    "SeverityLabel",
    "ScenarioShock",
    "Scenario",
    # Long-term cashflow
    "Country",
    "FilingStatus",
    "AssetType",
    "LoanType",
    "LifeEventType",
    "IncomeStream",
    "ExpenseCategory",
    "LoanConfig",
    "AssetConfig",
    "LifeEvent",
    "SocialSecurityConfig",
    "TaxConfig",
    "LongTermProjectionConfig",
    "WhatIfScenario",
    # Settings
    "AppSettings",
]


# ---------------------------------------------------------------------------
# Monte Carlo Configuration
# ---------------------------------------------------------------------------

class SimulationConfig(BaseModel):
    """
    Input of a single Monte Carlo run.

    Attributes
    ----------
    initial_balance : float
        Starting portfolio balance.
    monthly_contribution : float
        Amount added every month; negative values are withdrawals.
    years : int
        Horizon in years (engine bound: 1-100).
    iterations : int
        Number of independent trials (engine bound: 100-100,000).
    expected_return : float
        Expected annual return (e.g., 0.07 for 7%).
    return_volatility : float
        Annual standard deviation of returns (engine bound: 0-1).
    inflation_rate : float, optional
        Annual inflation rate. Drives the purchasing-power probability and,
        when ``inflation_adjusted_contributions`` is set, the contribution
        escalation.
    inflation_adjusted_contributions : bool
        Grow the monthly contribution by ``(1 + inflation_rate) ** year``.

    Examples
    --------
    >>> cfg = SimulationConfig(
    ...     initial_balance=1_000_000, monthly_contribution=-4_000, years=30,
    ...     iterations=1_000, expected_return=0.05, return_volatility=0.12,
    ... )
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    initial_balance: float = Field(
        ge=0,
        description="Starting portfolio balance"
    )
    monthly_contribution: float = Field(
        default=0.0,
        description="Monthly contribution (negative = withdrawal)"
    )
    years: int = Field(
        description="Simulation horizon in years"
    )
    iterations: int = Field(
        default=DEFAULT_ITERATIONS,
        description="Number of Monte Carlo trials"
    )
    expected_return: float = Field(
        description="Expected annual return"
    )
    return_volatility: float = Field(
        description="Annual return volatility (standard deviation)"
    )
    inflation_rate: Optional[float] = Field(
        default=None,
        ge=-0.5,
        le=1.0,
        description="Annual inflation rate"
    )
    inflation_adjusted_contributions: bool = Field(
        default=False,
        description="Escalate contributions with inflation every year"
    )


class RetirementSimulationConfig(BaseModel):
    """
    Two-phase (accumulation, then distribution) retirement simulation input.

    The accumulation phase runs from ``current_age`` to ``retirement_age``
    at ``pre_retirement_return`` with inflation-adjusted contributions. The
    distribution phase runs from ``retirement_age`` to ``life_expectancy`` at
    ``post_retirement_return`` withdrawing ``monthly_withdrawal`` (also
    inflation-adjusted).

    Examples
    --------
    >>> cfg = RetirementSimulationConfig(
    ...     current_age=35, retirement_age=65, life_expectancy=90,
    ...     current_savings=100_000, monthly_contribution=1_500,
    ...     monthly_withdrawal=5_000, pre_retirement_return=0.07,
    ...     post_retirement_return=0.05, return_volatility=0.15,
    ...     inflation_rate=0.03,
    ... )
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    current_age: int = Field(ge=0, le=120, description="Current age")
    retirement_age: int = Field(ge=0, le=120, description="Age at retirement")
    life_expectancy: int = Field(ge=0, le=150, description="Planning horizon age")
    current_savings: float = Field(ge=0, description="Current portfolio balance")
    monthly_contribution: float = Field(
        default=0.0,
        ge=0,
        description="Monthly contribution until retirement"
    )
    monthly_withdrawal: float = Field(
        default=0.0,
        ge=0,
        description="Monthly withdrawal during retirement"
    )
    pre_retirement_return: float = Field(description="Expected annual return before retirement")
    post_retirement_return: float = Field(description="Expected annual return after retirement")
    return_volatility: float = Field(description="Annual return volatility")
    iterations: int = Field(
        default=DEFAULT_ITERATIONS,
        description="Number of Monte Carlo trials"
    )
    inflation_rate: Optional[float] = Field(
        default=None,
        ge=-0.5,
        le=1.0,
        description="Annual inflation rate"
    )

    @field_validator("retirement_age")
    @classmethod
    def validate_retirement_age(cls, v, info):
        """Ensure retirement_age > current_age."""
        current = info.data.get("current_age")
        if current is not None and v <= current:
            raise ValueError(f"retirement_age ({v}) must be greater than current_age ({current})")
        return v

    @field_validator("life_expectancy")
    @classmethod
    def validate_life_expectancy(cls, v, info):
        """Ensure life_expectancy > retirement_age."""
        retirement = info.data.get("retirement_age")
        if retirement is not None and v <= retirement:
            raise ValueError(
                f"life_expectancy ({v}) must be greater than retirement_age ({retirement})"
            )
        return v

    @property
    def years_until_retirement(self) -> int:
        return self.retirement_age - self.current_age

    @property
    def years_in_retirement(self) -> int:
        return self.life_expectancy - self.retirement_age


class SafeWithdrawalParams(BaseModel):
    """
    Input of the safe-withdrawal-rate search.

    Attributes
    ----------
    portfolio_value : float
        Portfolio balance at the start of retirement.
    years_in_retirement : int
        Horizon the portfolio must survive.
    success_probability : float
        Target fraction of surviving trials (e.g., 0.95).
    iterations : int
        Trials per probe.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    portfolio_value: float = Field(gt=0, description="Portfolio value at retirement")
    years_in_retirement: int = Field(description="Years the portfolio must last")
    success_probability: float = Field(
        gt=0,
        le=1,
        description="Target probability of not depleting the portfolio"
    )
    expected_return: float = Field(description="Expected annual return")
    return_volatility: float = Field(description="Annual return volatility")
    inflation_rate: Optional[float] = Field(
        default=None,
        ge=-0.5,
        le=1.0,
        description="Annual inflation rate applied to withdrawals"
    )
    iterations: int = Field(
        default=DEFAULT_ITERATIONS,
        description="Trials per probed withdrawal rate"
    )


class GoalProbabilityConfig(BaseModel):
    """
    Probability of reaching ``target_amount`` after ``years``.

    A trial succeeds when its terminal balance is at least the target.
    ``desired_success_rate`` drives the recommended-contribution search.

    Examples
    --------
    >>> goal = GoalProbabilityConfig(
    ...     initial_balance=50_000, monthly_contribution=800, years=20,
    ...     target_amount=1_000_000, expected_return=0.07,
    ...     return_volatility=0.15,
    ... )
    >>> goal.months
    240
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    initial_balance: float = Field(ge=0, description="Current savings toward the goal")
    monthly_contribution: float = Field(default=0.0, description="Planned monthly contribution")
    years: int = Field(description="Years until the goal date")
    target_amount: float = Field(gt=0, description="Goal amount")
    expected_return: float = Field(description="Expected annual return")
    return_volatility: float = Field(description="Annual return volatility")
    inflation_rate: Optional[float] = Field(
        default=None,
        ge=-0.5,
        le=1.0,
        description="Annual inflation rate"
    )
    inflation_adjusted_contributions: bool = Field(
        default=False,
        description="Escalate contributions with inflation every year"
    )
    iterations: int = Field(
        default=DEFAULT_ITERATIONS,
        description="Number of Monte Carlo trials"
    )
    desired_success_rate: float = Field(
        default=DEFAULT_GOAL_SUCCESS_RATE,
        gt=0,
        lt=1,
        description="Success probability targeted by the recommended contribution"
    )

    @property
    def months(self) -> int:
        return self.years * MONTHS_PER_YEAR

    def to_simulation_config(
        self,
        monthly_contribution: Optional[float] = None,
        iterations: Optional[int] = None,
    ) -> SimulationConfig:
        """Equivalent SimulationConfig, optionally overriding contribution/iterations."""
        return SimulationConfig(
            initial_balance=self.initial_balance,
            monthly_contribution=(
                self.monthly_contribution if monthly_contribution is None else monthly_contribution
            ),
            years=self.years,
            iterations=self.iterations if iterations is None else iterations,
            expected_return=self.expected_return,
            return_volatility=self.return_volatility,
            inflation_rate=self.inflation_rate,
            inflation_adjusted_contributions=self.inflation_adjusted_contributions,
        )


# ---------------------------------------------------------------------------
# Scenario Configuration
# ---------------------------------------------------------------------------

class ScenarioType(str, Enum):
    """Predefined adverse scenarios."""

    JOB_LOSS = "job_loss"
    MARKET_CRASH = "market_crash"
    RECESSION = "recession"
    MEDICAL_EMERGENCY = "medical_emergency"
    INFLATION_SPIKE = "inflation_spike"
    DISABILITY = "disability"
    MARKET_CORRECTION = "market_correction"


ShockType = Literal[
    "income_reduction",
    "expense_increase",
    "return_reduction",
    "volatility_increase",
    "one_time_expense",
]

SeverityLabel = Literal["mild", "moderate", "severe"]


class ScenarioShock(BaseModel):
    """
    One parameterized perturbation of a baseline configuration.

    Attributes
    ----------
    type : ShockType
        Which part of the baseline the shock hits.
    magnitude : float
        Percentage points for rate/volatility/income/expense shocks
        (30 = 30%); currency units for ``one_time_expense``.
    start_year : int
        Year (1-indexed) in which the shock begins.
    duration_years : float
        Length of the shock in years; 0 for instantaneous shocks.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: ShockType = Field(description="Shock kind")
    magnitude: float = Field(ge=0, description="Shock size (percent, or currency for one-time)")
    start_year: int = Field(default=1, ge=0, description="Year the shock begins")
    duration_years: float = Field(default=0.0, ge=0, description="Shock duration in years")


class Scenario(BaseModel):
    """
    Named stress case made of one or more shocks.

    Examples
    --------
    >>> Scenario(
    ...     type=ScenarioType.MARKET_CORRECTION,
    ...     name="Mild pullback",
    ...     description="Returns dip for a year",
    ...     shocks=[ScenarioShock(type="return_reduction", magnitude=5, duration_years=1)],
    ...     severity="mild",
    ... )
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: ScenarioType = Field(description="Scenario identifier")
    name: str = Field(min_length=1, max_length=100, description="Display name")
    description: str = Field(default="", max_length=500, description="What the scenario models")
    shocks: Tuple[ScenarioShock, ...] = Field(
        default=(),
        description="Shocks applied to the baseline"
    )
    severity: SeverityLabel = Field(default="moderate", description="Qualitative severity")


# ---------------------------------------------------------------------------
# Long-Term Cashflow Configuration
# ---------------------------------------------------------------------------

Country = Literal["US", "MX"]
FilingStatus = Literal["single", "married_joint", "married_separate", "head_of_household"]
AssetType = Literal["taxable", "tax_deferred", "tax_free", "real_estate", "other"]
LoanType = Literal["mortgage", "auto", "student", "personal", "credit_card", "other"]
LifeEventType = Literal[
    "retirement",
    "college",
    "home_purchase",
    "car_purchase",
    "wedding",
    "child_birth",
    "inheritance",
    "business_sale",
    "custom",
]


class IncomeStream(BaseModel):
    """
    Recurring income source.

    Active while ``start_year <= year < end_year``. ``start_year`` defaults
    to the projection start and ``end_year`` to the retirement year. Growth
    compounds from the stream's own start year.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(min_length=1, max_length=100, description="Income source name")
    annual_amount: float = Field(ge=0, description="Current annual gross amount")
    growth_rate: float = Field(default=0.0, ge=-1, description="Annual growth rate")
    start_year: Optional[int] = Field(default=None, description="First active calendar year")
    end_year: Optional[int] = Field(default=None, description="First inactive calendar year")
    taxable: bool = Field(default=True, description="Subject to income tax")

    @field_validator("end_year")
    @classmethod
    def validate_end_year(cls, v, info):
        """Ensure end_year > start_year when both are given."""
        start = info.data.get("start_year")
        if v is not None and start is not None and v <= start:
            raise ValueError(f"end_year ({v}) must be after start_year ({start})")
        return v


class ExpenseCategory(BaseModel):
    """
    Recurring expense. Growth compounds from the projection start year.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(min_length=1, max_length=100, description="Expense category name")
    annual_amount: float = Field(ge=0, description="Current annual amount")
    growth_rate: float = Field(default=0.0, ge=-1, description="Annual growth rate")
    essential: bool = Field(default=True, description="Counts toward the FI ratio denominator")
    start_year: Optional[int] = Field(default=None, description="First active calendar year")
    end_year: Optional[int] = Field(default=None, description="First inactive calendar year")

    @field_validator("end_year")
    @classmethod
    def validate_end_year(cls, v, info):
        """Ensure end_year > start_year when both are given."""
        start = info.data.get("start_year")
        if v is not None and start is not None and v <= start:
            raise ValueError(f"end_year ({v}) must be after start_year ({start})")
        return v


class LoanConfig(BaseModel):
    """Fixed-payment loan."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(min_length=1, max_length=100, description="Loan name")
    balance: float = Field(ge=0, description="Outstanding balance")
    interest_rate: float = Field(ge=0, le=1, description="Annual interest rate")
    monthly_payment: float = Field(ge=0, description="Fixed monthly payment")
    remaining_months: int = Field(ge=0, description="Remaining term in months")
    type: LoanType = Field(default="other", description="Loan category")


class AssetConfig(BaseModel):
    """
    Investment or property that grows, receives contributions and pays out.

    ``annual_withdrawal`` is a currency amount when positive and a fraction
    of the current value when negative (-0.04 withdraws 4% a year).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(min_length=1, max_length=100, description="Asset name")
    current_value: float = Field(ge=0, description="Current value")
    expected_return: float = Field(default=0.0, ge=-1, description="Expected annual return")
    monthly_contribution: Optional[float] = Field(
        default=None,
        ge=0,
        description="Monthly contribution"
    )
    type: AssetType = Field(default="taxable", description="Tax treatment")
    contribution_end_year: Optional[int] = Field(
        default=None,
        description="First calendar year without contributions"
    )
    withdrawal_start_year: Optional[int] = Field(
        default=None,
        description="First calendar year with withdrawals"
    )
    annual_withdrawal: Optional[float] = Field(
        default=None,
        description="Annual withdrawal (negative = fraction of value)"
    )

    @field_validator("annual_withdrawal")
    @classmethod
    def validate_withdrawal_fraction(cls, v):
        """Percentage withdrawals cannot exceed 100% of the value."""
        if v is not None and v < -1:
            raise ValueError(
                f"annual_withdrawal ({v}) below -1 would withdraw more than the full value"
            )
        return v


class LifeEvent(BaseModel):
    """
    One-off (and optionally recurring) cashflow tied to a calendar year.

    The sign alone decides direction: negative amounts are expenses,
    positive amounts are income. ``type`` is descriptive only.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: LifeEventType = Field(default="custom", description="Event category")
    name: str = Field(min_length=1, max_length=100, description="Event name")
    year: int = Field(description="Calendar year the event occurs")
    amount: float = Field(default=0.0, description="One-time amount (negative = expense)")
    annual_impact: Optional[float] = Field(
        default=None,
        description="Recurring amount in the years after the event (negative = expense)"
    )
    impact_duration: Optional[int] = Field(
        default=None,
        ge=0,
        description="Years the recurring impact lasts (0 or None = through the end)"
    )
    inflation_adjusted: bool = Field(default=False, description="Inflate amounts from the start year")


class SocialSecurityConfig(BaseModel):
    """
    Public pension benefit.

    ``claim_age`` only matters for the US, where it drives the early/delayed
    claiming adjustment relative to full retirement age 67.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    country: Country = Field(default="US", description="Benefit rules jurisdiction")
    monthly_benefit: float = Field(ge=0, description="Monthly benefit at full retirement age")
    claim_year: int = Field(description="Calendar year benefits start")
    claim_age: Optional[Literal[62, 65, 67, 70]] = Field(
        default=None,
        description="Claiming age (US), defaults to 67"
    )
    spouse_monthly_benefit: Optional[float] = Field(
        default=None,
        ge=0,
        description="Spouse monthly benefit"
    )
    spouse_claim_year: Optional[int] = Field(default=None, description="Spouse claim year")


class TaxConfig(BaseModel):
    """Income tax jurisdiction and simplifications."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    country: Country = Field(default="US", description="Tax jurisdiction")
    filing_status: FilingStatus = Field(default="single", description="Filing status")
    state: Optional[str] = Field(default=None, max_length=50, description="State or region")
    state_tax_rate: Optional[float] = Field(
        default=None,
        ge=0,
        le=1,
        description="Flat effective state tax rate (US)"
    )
    annual_deductions: float = Field(default=0.0, ge=0, description="Annual deductions")


class LongTermProjectionConfig(BaseModel):
    """
    Complete input of the deterministic long-term cashflow projection.

    Examples
    --------
    >>> cfg = LongTermProjectionConfig(
    ...     start_year=2025, projection_years=30, inflation_rate=0.03,
    ...     current_age=35, retirement_age=65, life_expectancy=90,
    ...     income_streams=[IncomeStream(name="Salary", annual_amount=90_000, growth_rate=0.03)],
    ...     expenses=[ExpenseCategory(name="Living", annual_amount=50_000, growth_rate=0.03)],
    ... )
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    start_year: Optional[int] = Field(
        default=None,
        description="First projected calendar year (defaults to the current year)"
    )
    projection_years: int = Field(
        default=30,
        ge=1,
        le=100,
        description="Number of years projected after the start year"
    )
    inflation_rate: float = Field(default=0.03, ge=-0.5, le=1.0, description="Inflation rate")
    current_age: int = Field(ge=0, le=120, description="Current age")
    retirement_age: int = Field(ge=0, le=120, description="Target retirement age")
    life_expectancy: int = Field(ge=0, le=150, description="Planning horizon age")
    income_streams: List[IncomeStream] = Field(default_factory=list, description="Income streams")
    expenses: List[ExpenseCategory] = Field(default_factory=list, description="Expense categories")
    loans: List[LoanConfig] = Field(default_factory=list, description="Loans")
    assets: List[AssetConfig] = Field(default_factory=list, description="Assets")
    life_events: List[LifeEvent] = Field(default_factory=list, description="Life events")
    social_security: Optional[SocialSecurityConfig] = Field(
        default=None,
        description="Social Security benefits"
    )
    taxes: Optional[TaxConfig] = Field(default=None, description="Tax rules")
    emergency_fund_months: Optional[float] = Field(
        default=None,
        ge=0,
        description="Target emergency fund in months of essential expenses"
    )
    current_liquid_savings: Optional[float] = Field(
        default=None,
        ge=0,
        description="Liquid savings available for emergencies"
    )

    @field_validator("retirement_age")
    @classmethod
    def validate_retirement_age(cls, v, info):
        """Ensure retirement_age >= current_age."""
        current = info.data.get("current_age")
        if current is not None and v < current:
            raise ValueError(f"retirement_age ({v}) must be >= current_age ({current})")
        return v

    @field_validator("life_expectancy")
    @classmethod
    def validate_life_expectancy(cls, v, info):
        """Ensure life_expectancy > current_age."""
        current = info.data.get("current_age")
        if current is not None and v <= current:
            raise ValueError(f"life_expectancy ({v}) must be greater than current_age ({current})")
        return v


class WhatIfScenario(BaseModel):
    """
    Named partial override of a LongTermProjectionConfig.

    Collections given in ``modifications`` replace the base collection of
    the same kind wholesale.

    Examples
    --------
    >>> WhatIfScenario(
    ...     name="Retire at 60",
    ...     modifications={"retirement_age": 60},
    ... )
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(min_length=1, max_length=100, description="Scenario name")
    description: str = Field(default="", max_length=500, description="Scenario description")
    modifications: Dict[str, Any] = Field(
        default_factory=dict,
        description="Configuration fields to override"
    )

    @field_validator("modifications")
    @classmethod
    def validate_modification_keys(cls, v):
        """Reject keys that are not LongTermProjectionConfig fields."""
        unknown = sorted(set(v) - set(LongTermProjectionConfig.model_fields))
        if unknown:
            raise ValueError(f"Unknown configuration fields in modifications: {unknown}")
        return v


# ---------------------------------------------------------------------------
# Application Settings (Environment Variables)
# ---------------------------------------------------------------------------

class AppSettings(BaseSettings):
    """
    Global application settings loaded from environment variables.

    Supports .env files for local development. Environment variables
    should be prefixed with FINPROJ_ (e.g., FINPROJ_SEED=42).

    Attributes
    ----------
    log_level : str
        Logging level: "DEBUG", "INFO", "WARNING", "ERROR"
    seed : int, optional
        Default RNG seed for engines built by the CLI. None = unseeded.
    executor : str
        Trial dispatch: "thread", "process" or "none" (inline).
    max_workers : int, optional
        Worker pool cap. None = CPU count.
    batch_size : int
        Trials per random stream.

    Examples
    --------
    >>> settings = AppSettings()
    >>> settings.executor
    'thread'

    # With .env file:
    # FINPROJ_SEED=7
    # FINPROJ_EXECUTOR=process
    >>> settings = AppSettings(_env_file=".env")
    >>> settings.seed
    7
    """

    model_config = SettingsConfigDict(
        env_prefix="FINPROJ_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging level"
    )
    seed: Optional[int] = Field(
        default=None,
        ge=0,
        description="Default random seed (None = unseeded)"
    )
    executor: Literal["thread", "process", "none"] = Field(
        default="thread",
        description="Trial dispatch mode"
    )
    max_workers: Optional[int] = Field(
        default=None,
        ge=1,
        le=256,
        description="Maximum worker count"
    )
    batch_size: int = Field(
        default=DEFAULT_BATCH_SIZE,
        ge=1,
        le=100_000,
        description="Trials per random stream"
    )
