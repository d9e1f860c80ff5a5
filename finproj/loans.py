"""
Fixed-payment loan amortization for FinProj.

Each month of a projection year:

    interest  = balance * annual_rate / 12
    principal = min(max(payment - interest, 0), balance)
    balance  -= principal

Payments stop once the balance reaches zero or the remaining term runs
out. A payment that does not cover the month's interest pays what it can;
the unpaid interest is not capitalized, so the balance never grows.
"""

from __future__ import annotations

from dataclasses import dataclass

from .config import LoanConfig
from .constants import MONTHS_PER_YEAR

__all__ = [
    "LoanYear",
    "LoanState",
    "amortize_year",
]


@dataclass(frozen=True)
class LoanYear:
    """One year of payments on a loan."""
    interest_paid: float
    principal_paid: float
    ending_balance: float
    remaining_months: int
    months_paid: int
    underpaid: bool

    @property
    def total_payment(self) -> float:
        return self.interest_paid + self.principal_paid


def amortize_year(
    balance: float,
    annual_rate: float,
    monthly_payment: float,
    remaining_months: int,
    months: int = MONTHS_PER_YEAR,
) -> LoanYear:
    """
    Apply up to *months* payments (never more than *remaining_months*).

    >>> y = amortize_year(10_000, 0.06, 500, 24)
    >>> round(y.ending_balance), y.remaining_months
    (4449, 12)
    """
    monthly_rate = annual_rate / MONTHS_PER_YEAR
    interest_total = 0.0
    principal_total = 0.0
    underpaid = False
    paid = 0

    while paid < min(months, remaining_months) and balance > 0:
        interest = balance * monthly_rate
        if monthly_payment < interest:
            underpaid = True
            interest_total += monthly_payment
        else:
            principal = min(monthly_payment - interest, balance)
            balance -= principal
            interest_total += interest
            principal_total += principal
        paid += 1

    return LoanYear(
        interest_paid=interest_total,
        principal_paid=principal_total,
        ending_balance=max(0.0, balance),
        remaining_months=remaining_months - paid,
        months_paid=paid,
        underpaid=underpaid,
    )


@dataclass
class LoanState:
    """Running balance of one loan inside a single projection run."""
    config: LoanConfig
    balance: float
    remaining_months: int

    @classmethod
    def from_config(cls, loan: LoanConfig) -> "LoanState":
        return cls(config=loan, balance=loan.balance, remaining_months=loan.remaining_months)

    def advance_year(self) -> LoanYear:
        """Pay one year and update the running balance and term."""
        year = amortize_year(
            self.balance,
            self.config.interest_rate,
            self.config.monthly_payment,
            self.remaining_months,
        )
        self.balance = year.ending_balance
        self.remaining_months = year.remaining_months
        return year
