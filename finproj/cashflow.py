"""
Long-term cashflow projection for FinProj

Purpose
-------
Deterministic year-by-year projection of a household's finances from a
start year through ``start_year + projection_years`` (inclusive). Each
year realizes income growth, Social Security, progressive taxes, expense
growth, life events, loan amortization and asset growth/contribution/
withdrawal, producing a YearlySnapshot. A summary, a 0-100 risk score and
plain-language warnings are derived after the loop.

Per-year order
--------------
1. Income streams active in ``[start, end)``; growth from each stream start.
2. Social Security once the claim year arrives.
3. Taxes on taxable streams + taxable Social Security - deductions.
4. Expenses active in ``[start, end)``; growth from the projection start.
5. Life events triggered this year, plus recurring impacts of past events.
6. Loans: up to 12 payments, added to expenses as "<loan> Payment".
7. Assets: growth, contribution, then withdrawal (counted as income).
8. Net income, cashflow, net worth, savings rate, FI ratio.

Key invariants
--------------
- ``net_worth == total_assets - total_debt`` and
  ``net_cashflow == net_income - total_expenses`` on every snapshot.
- Loan balances never increase; asset values never go negative.

Example
-------
>>> engine = LongTermCashflowEngine()
>>> res = engine.project(config)
>>> res.summary.debt_free_year
2032
>>> res.to_frame()[["net_worth", "fi_ratio"]].tail()
"""
from __future__ import annotations

import datetime
import logging
import math
import time
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple, Union

import pandas as pd

from .config import (
    AssetConfig,
    LifeEvent,
    LongTermProjectionConfig,
    WhatIfScenario,
)
from .constants import FI_WITHDRAWAL_RATE, MONTHS_PER_YEAR
from .exceptions import ConfigurationError
from .loans import LoanState
from .social_security import social_security_income
from .tax import calculate_income_tax
from .types import AssetItemDict, ExpenseItemDict, IncomeItemDict, LoanItemDict

__all__ = [
    "YearlySnapshot",
    "NetWorthPoint",
    "ProjectionSummary",
    "LongTermProjectionResult",
    "WhatIfResult",
    "ScenarioProjectionComparison",
    "LongTermCashflowEngine",
    "apply_modifications",
]

logger = logging.getLogger(__name__)

_FI_ASSET_TYPES = ("taxable", "tax_deferred")

_COLLECTION_FIELDS = ("income_streams", "expenses", "loans", "assets", "life_events")


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class YearlySnapshot:
    """One projected calendar year."""
    year: int
    age: int
    gross_income: float
    taxes_paid: float
    net_income: float
    total_expenses: float
    net_cashflow: float
    total_debt: float
    total_assets: float
    net_worth: float
    social_security_income: float
    life_events_this_year: Tuple[LifeEvent, ...]
    income_breakdown: Tuple[IncomeItemDict, ...]
    expense_breakdown: Tuple[ExpenseItemDict, ...]
    asset_breakdown: Tuple[AssetItemDict, ...]
    loan_breakdown: Tuple[LoanItemDict, ...]
    savings_rate: float
    fi_ratio: float


@dataclass(frozen=True)
class NetWorthPoint:
    year: int
    amount: float


@dataclass(frozen=True)
class ProjectionSummary:
    debt_free_year: Optional[int]
    financial_independence_year: Optional[int]
    peak_net_worth: NetWorthPoint
    min_net_worth: NetWorthPoint
    total_lifetime_earnings: float
    total_lifetime_taxes: float
    total_social_security: float
    average_savings_rate: float
    years_until_retirement: int
    projected_retirement_income: float
    income_replacement_ratio: float
    risk_score: int


_FRAME_COLUMNS = (
    "age",
    "gross_income",
    "taxes_paid",
    "net_income",
    "total_expenses",
    "net_cashflow",
    "total_debt",
    "total_assets",
    "net_worth",
    "social_security_income",
    "savings_rate",
    "fi_ratio",
)


@dataclass(frozen=True)
class LongTermProjectionResult:
    config: LongTermProjectionConfig
    yearly_snapshots: Tuple[YearlySnapshot, ...]
    summary: ProjectionSummary
    warnings: Tuple[str, ...]
    execution_time_ms: float

    def to_frame(self) -> pd.DataFrame:
        """Scalar snapshot fields as a DataFrame indexed by calendar year."""
        rows = [
            {"year": s.year, **{col: getattr(s, col) for col in _FRAME_COLUMNS}}
            for s in self.yearly_snapshots
        ]
        return pd.DataFrame(rows).set_index("year")


@dataclass(frozen=True)
class WhatIfResult:
    scenario: WhatIfScenario
    config: LongTermProjectionConfig
    result: LongTermProjectionResult


@dataclass(frozen=True)
class ScenarioProjectionComparison:
    baseline: LongTermProjectionResult
    scenarios: Tuple[WhatIfResult, ...]

    def summary_frame(self) -> pd.DataFrame:
        """Headline metrics of the baseline and every scenario, one row each."""
        def row(name: str, res: LongTermProjectionResult) -> Dict[str, object]:
            s = res.summary
            return {
                "scenario": name,
                "final_net_worth": res.yearly_snapshots[-1].net_worth,
                "peak_net_worth": s.peak_net_worth.amount,
                "debt_free_year": s.debt_free_year,
                "financial_independence_year": s.financial_independence_year,
                "average_savings_rate": s.average_savings_rate,
                "income_replacement_ratio": s.income_replacement_ratio,
                "risk_score": s.risk_score,
            }

        rows = [row("baseline", self.baseline)]
        rows += [row(w.scenario.name, w.result) for w in self.scenarios]
        return pd.DataFrame(rows).set_index("scenario")


# ---------------------------------------------------------------------------
# Working state (local to one projection)
# ---------------------------------------------------------------------------

@dataclass
class _AssetState:
    config: AssetConfig
    value: float


def _active(year: int, start: int, end: Optional[float]) -> bool:
    return start <= year and (end is None or year < end)


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

class LongTermCashflowEngine:
    """Deterministic multi-decade cashflow projector."""

    def project(self, config: LongTermProjectionConfig) -> LongTermProjectionResult:
        """Run the year-by-year projection for *config*."""
        t0 = time.perf_counter()
        start_year = config.start_year if config.start_year is not None else datetime.date.today().year
        end_year = start_year + config.projection_years
        retirement_year = start_year + (config.retirement_age - config.current_age)
        inflation = config.inflation_rate

        loans = [LoanState.from_config(loan) for loan in config.loans]
        assets = [_AssetState(config=a, value=a.current_value) for a in config.assets]
        warnings: List[str] = []
        underpaid_loans = set()

        snapshots: List[YearlySnapshot] = []
        for year in range(start_year, end_year + 1):
            year_index = year - start_year
            inflation_multiplier = (1 + inflation) ** year_index

            # (a) income streams
            gross_income = 0.0
            taxable_income = 0.0
            income_items: List[IncomeItemDict] = []
            for stream in config.income_streams:
                stream_start = stream.start_year if stream.start_year is not None else start_year
                stream_end = stream.end_year if stream.end_year is not None else retirement_year
                if _active(year, stream_start, stream_end):
                    amount = stream.annual_amount * (1 + stream.growth_rate) ** (year - stream_start)
                    gross_income += amount
                    if stream.taxable:
                        taxable_income += amount
                    income_items.append({"name": stream.name, "amount": amount})

            # (b) Social Security
            ss_income = social_security_income(config.social_security, year, inflation)
            if ss_income > 0:
                gross_income += ss_income
                income_items.append({"name": "Social Security", "amount": ss_income})

            # (c) taxes
            taxes_paid = 0.0
            if config.taxes is not None:
                taxes_paid = calculate_income_tax(taxable_income, config.taxes, ss_income)

            # (d) expenses
            total_expenses = 0.0
            essential_expenses = 0.0
            expense_items: List[ExpenseItemDict] = []
            for expense in config.expenses:
                exp_start = expense.start_year if expense.start_year is not None else start_year
                if _active(year, exp_start, expense.end_year):
                    amount = expense.annual_amount * (1 + expense.growth_rate) ** year_index
                    total_expenses += amount
                    if expense.essential:
                        essential_expenses += amount
                    expense_items.append({"name": expense.name, "amount": amount})

            # (e) life events: trigger year, then recurring impacts
            events_this_year = tuple(e for e in config.life_events if e.year == year)
            for event in events_this_year:
                amount = event.amount * inflation_multiplier if event.inflation_adjusted else event.amount
                if amount < 0:
                    total_expenses += abs(amount)
                    expense_items.append({"name": event.name, "amount": abs(amount)})
                elif amount > 0:
                    gross_income += amount
                    income_items.append({"name": event.name, "amount": amount})

            for event in config.life_events:
                if not event.annual_impact or year <= event.year:
                    continue
                if event.impact_duration and year > event.year + event.impact_duration:
                    continue
                impact = event.annual_impact
                if event.inflation_adjusted:
                    impact *= inflation_multiplier
                label = f"{event.name} (ongoing)"
                if impact < 0:
                    total_expenses += abs(impact)
                    expense_items.append({"name": label, "amount": abs(impact)})
                else:
                    gross_income += impact
                    income_items.append({"name": label, "amount": impact})

            # (f) loans
            total_debt = 0.0
            loan_items: List[LoanItemDict] = []
            for idx, loan in enumerate(loans):
                paid = loan.advance_year()
                if paid.underpaid and idx not in underpaid_loans:
                    underpaid_loans.add(idx)
                    logger.warning("Loan %r payment does not cover interest in %d", loan.config.name, year)
                    warnings.append(
                        f"{loan.config.name} payment does not cover its interest. "
                        f"The balance will not be paid down."
                    )
                payment = paid.total_payment
                total_debt += loan.balance
                if payment > 0:
                    total_expenses += payment
                    expense_items.append({"name": f"{loan.config.name} Payment", "amount": payment})
                loan_items.append({
                    "name": loan.config.name,
                    "balance": loan.balance,
                    "payment_this_year": payment,
                })

            # (g) assets
            total_assets = 0.0
            fi_assets = 0.0
            asset_items: List[AssetItemDict] = []
            for state in assets:
                asset = state.config
                value = state.value * (1 + asset.expected_return)
                if asset.monthly_contribution and (
                    asset.contribution_end_year is None or year < asset.contribution_end_year
                ):
                    value += asset.monthly_contribution * MONTHS_PER_YEAR
                if (
                    asset.withdrawal_start_year is not None
                    and year >= asset.withdrawal_start_year
                    and asset.annual_withdrawal
                ):
                    withdrawal = asset.annual_withdrawal
                    if withdrawal < 0:
                        withdrawal = value * abs(withdrawal)
                    withdrawal = min(withdrawal, max(value, 0.0))
                    if withdrawal > 0:
                        value -= withdrawal
                        gross_income += withdrawal
                        income_items.append({"name": f"{asset.name} Withdrawal", "amount": withdrawal})
                state.value = max(0.0, value)
                total_assets += state.value
                if asset.type in _FI_ASSET_TYPES:
                    fi_assets += state.value
                asset_items.append({"name": asset.name, "value": state.value, "type": asset.type})

            # (h) derived
            net_income = gross_income - taxes_paid
            net_cashflow = net_income - total_expenses
            passive_income = fi_assets * FI_WITHDRAWAL_RATE + ss_income
            snapshots.append(YearlySnapshot(
                year=year,
                age=config.current_age + year_index,
                gross_income=gross_income,
                taxes_paid=taxes_paid,
                net_income=net_income,
                total_expenses=total_expenses,
                net_cashflow=net_cashflow,
                total_debt=total_debt,
                total_assets=total_assets,
                net_worth=total_assets - total_debt,
                social_security_income=ss_income,
                life_events_this_year=events_this_year,
                income_breakdown=tuple(income_items),
                expense_breakdown=tuple(expense_items),
                asset_breakdown=tuple(asset_items),
                loan_breakdown=tuple(loan_items),
                savings_rate=net_cashflow / gross_income if gross_income > 0 else 0.0,
                fi_ratio=passive_income / essential_expenses if essential_expenses > 0 else 0.0,
            ))

        for loan in loans:
            if loan.balance > 0 and loan.remaining_months == 0:
                warnings.append(
                    f"{loan.config.name} still has a balance of {loan.balance:,.0f} "
                    f"after its remaining term."
                )

        summary, summary_warnings = self._summarize(config, snapshots, retirement_year)
        warnings.extend(summary_warnings)
        warnings.extend(self._emergency_fund_warnings(config, snapshots[0]))

        elapsed = (time.perf_counter() - t0) * 1000.0
        logger.info(
            "Cashflow projection %d-%d: risk score %d in %.1f ms",
            start_year, end_year, summary.risk_score, elapsed,
        )
        return LongTermProjectionResult(
            config=config,
            yearly_snapshots=tuple(snapshots),
            summary=summary,
            warnings=tuple(warnings),
            execution_time_ms=elapsed,
        )

    # ------------------------------------------------------------------

    @staticmethod
    def _summarize(
        config: LongTermProjectionConfig,
        snapshots: Sequence[YearlySnapshot],
        retirement_year: int,
    ) -> Tuple[ProjectionSummary, List[str]]:
        by_year = {s.year: s for s in snapshots}
        net_worths = [s.net_worth for s in snapshots]
        peak = snapshots[net_worths.index(max(net_worths))]
        trough = snapshots[net_worths.index(min(net_worths))]

        debt_free = next((s.year for s in snapshots if s.total_debt == 0), None)
        fi_year = next((s.year for s in snapshots if s.fi_ratio >= 1), None)

        total_income = sum(s.gross_income for s in snapshots)
        total_saved = sum(max(0.0, s.net_cashflow) for s in snapshots)
        avg_savings = total_saved / total_income if total_income > 0 else 0.0

        retirement_income = by_year[retirement_year].gross_income if retirement_year in by_year else 0.0
        pre_retirement = by_year.get(retirement_year - 1)
        pre_income = pre_retirement.gross_income if pre_retirement is not None else 0.0
        replacement = retirement_income / pre_income if pre_income > 0 else 0.0

        negative_retirement_years = sum(
            1 for s in snapshots if s.year >= retirement_year and s.net_cashflow < 0
        )

        # risk score
        score = 0.0
        last = snapshots[-1]
        if last.total_debt > 0:
            score += min(30.0, last.total_debt / (last.total_assets or 1) * 50)
        if avg_savings < 0.1:
            score += 20
        elif avg_savings < 0.2:
            score += 10
        if replacement < 0.5:
            score += 25
        elif replacement < 0.7:
            score += 15
        elif replacement < 0.8:
            score += 5
        if config.social_security is None:
            score += 10
        score += min(15, negative_retirement_years * 3)
        risk_score = max(0, min(100, _round_half_up(score)))

        warnings: List[str] = []
        if avg_savings < 0.1:
            warnings.append(
                "Low savings rate detected. Consider reducing discretionary expenses or increasing income."
            )
        if replacement < 0.7:
            warnings.append(
                "Retirement income may be insufficient to maintain current lifestyle. "
                "Consider increasing retirement contributions."
            )
        if negative_retirement_years > 3:
            warnings.append(
                f"{negative_retirement_years} years of negative cashflow projected in retirement. "
                "Review spending assumptions."
            )
        if config.social_security is None:
            warnings.append(
                "No Social Security configured. Add expected benefits for more accurate projections."
            )
        if trough.net_worth < 0:
            warnings.append(
                f"Negative net worth projected in {trough.year}. Consider debt reduction strategies."
            )

        summary = ProjectionSummary(
            debt_free_year=debt_free,
            financial_independence_year=fi_year,
            peak_net_worth=NetWorthPoint(year=peak.year, amount=peak.net_worth),
            min_net_worth=NetWorthPoint(year=trough.year, amount=trough.net_worth),
            total_lifetime_earnings=total_income,
            total_lifetime_taxes=sum(s.taxes_paid for s in snapshots),
            total_social_security=sum(s.social_security_income for s in snapshots),
            average_savings_rate=avg_savings,
            years_until_retirement=config.retirement_age - config.current_age,
            projected_retirement_income=retirement_income,
            income_replacement_ratio=replacement,
            risk_score=risk_score,
        )
        return summary, warnings

    @staticmethod
    def _emergency_fund_warnings(
        config: LongTermProjectionConfig,
        first: YearlySnapshot,
    ) -> List[str]:
        if config.emergency_fund_months is None or config.current_liquid_savings is None:
            return []
        essential = sum(
            e.annual_amount
            for e in config.expenses
            if e.essential and _active(
                first.year,
                e.start_year if e.start_year is not None else first.year,
                e.end_year,
            )
        )
        monthly = essential / MONTHS_PER_YEAR
        if monthly <= 0:
            return []
        covered = config.current_liquid_savings / monthly
        if covered >= config.emergency_fund_months:
            return []
        return [
            f"Emergency fund covers {covered:.1f} months of essential expenses; "
            f"target is {config.emergency_fund_months:g} months."
        ]

    def compare_scenarios(
        self,
        base_config: LongTermProjectionConfig,
        scenarios: Sequence[Union[WhatIfScenario, dict]],
    ) -> ScenarioProjectionComparison:
        """
        Project the base configuration and each what-if variant of it.

        Raises
        ------
        ConfigurationError
            If a scenario cannot be parsed or overrides unknown fields.
        """
        baseline = self.project(base_config)
        results = []
        for raw in scenarios:
            scenario = _as_what_if(raw)
            cfg = apply_modifications(base_config, scenario)
            results.append(WhatIfResult(scenario=scenario, config=cfg, result=self.project(cfg)))
        return ScenarioProjectionComparison(baseline=baseline, scenarios=tuple(results))


def _as_what_if(raw: Union[WhatIfScenario, dict]) -> WhatIfScenario:
    if isinstance(raw, WhatIfScenario):
        return raw
    try:
        return WhatIfScenario.model_validate(raw)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid what-if scenario: {exc}") from exc


def apply_modifications(
    base: LongTermProjectionConfig,
    scenario: WhatIfScenario,
) -> LongTermProjectionConfig:
    """
    Merge *scenario*'s overrides onto *base*.

    Scalar fields and sub-configs are replaced; collections supplied by the
    scenario replace the base collection wholesale. A ``None`` collection
    keeps the base one.
    """
    merged = base.model_dump()
    for key, value in scenario.modifications.items():
        if key in _COLLECTION_FIELDS:
            if value is not None:
                merged[key] = list(value)
        else:
            merged[key] = value
    try:
        return LongTermProjectionConfig.model_validate(merged)
    except ValueError as exc:
        raise ConfigurationError(
            f"What-if scenario {scenario.name!r} produces an invalid configuration: {exc}"
        ) from exc
