"""
Unit tests for loans.py module.

Tests yearly amortization, term limits and the underpayment rule.
"""

import pytest

from finproj.config import LoanConfig
from finproj.loans import LoanState, amortize_year


class TestAmortizeYear:
    """Test one year of fixed payments."""

    def test_regular_year(self):
        year = amortize_year(10_000, 0.06, 500, 24)
        assert round(year.ending_balance) == 4_449
        assert year.remaining_months == 12
        assert year.months_paid == 12
        assert not year.underpaid
        assert year.total_payment == pytest.approx(6_000)

    def test_principal_equals_balance_drop(self):
        year = amortize_year(10_000, 0.06, 500, 24)
        assert year.principal_paid == pytest.approx(10_000 - year.ending_balance)

    def test_zero_interest(self):
        year = amortize_year(1_200, 0.0, 100, 12)
        assert year.ending_balance == pytest.approx(0.0)
        assert year.interest_paid == 0.0

    def test_final_payment_capped_at_balance(self):
        year = amortize_year(1_000, 0.0, 300, 12)
        assert year.ending_balance == 0.0
        assert year.months_paid == 4
        assert year.total_payment == pytest.approx(1_000)

    def test_stops_at_remaining_term(self):
        year = amortize_year(10_000, 0.05, 200, 3)
        assert year.months_paid == 3
        assert year.remaining_months == 0
        assert year.ending_balance > 0

    def test_underpayment_does_not_grow_balance(self):
        """1% monthly interest on 100k is 1,000; a 500 payment covers none of it."""
        year = amortize_year(100_000, 0.12, 500, 120)
        assert year.underpaid
        assert year.ending_balance == pytest.approx(100_000)
        assert year.principal_paid == 0.0
        assert year.total_payment == pytest.approx(6_000)

    def test_partial_year(self):
        year = amortize_year(10_000, 0.06, 500, 24, months=6)
        assert year.months_paid == 6
        assert year.remaining_months == 18


class TestLoanState:
    """Test the running balance across years."""

    def test_balance_non_increasing_until_zero(self, car_loan):
        state = LoanState.from_config(car_loan)
        balances = [state.balance]
        for _ in range(8):
            state.advance_year()
            balances.append(state.balance)

        assert all(b1 <= b0 for b0, b1 in zip(balances, balances[1:]))
        assert balances[-1] == 0.0
        first_zero = balances.index(0.0)
        assert all(b == 0.0 for b in balances[first_zero:])

    def test_config_is_not_mutated(self, car_loan):
        state = LoanState.from_config(car_loan)
        state.advance_year()
        assert car_loan.balance == 20_000
        assert state.remaining_months == 48

    def test_paid_off_loan_pays_nothing(self):
        state = LoanState.from_config(
            LoanConfig(name="Done", balance=0, interest_rate=0.05, monthly_payment=300, remaining_months=12)
        )
        year = state.advance_year()
        assert year.total_payment == 0.0
        assert year.months_paid == 0
