"""
Tests for the balance and stats delta calculator.
"""

from datetime import date
from decimal import Decimal

import pytest

from pocket_ledger.ledger.deltas import compute_delta, reversal_delta, signed_amount_for
from pocket_ledger.models.ledger import CategoryType, Transaction
from pocket_ledger.validation import TransactionValidationError


class TestSignedAmount:
    """The category type decides the sign."""

    @pytest.mark.parametrize("amount", ["12.50", "-12.50"])
    def test_expense_is_negative(self, amount):
        assert signed_amount_for(Decimal(amount), CategoryType.EXPENSE) == Decimal("-12.50")

    @pytest.mark.parametrize("amount", ["1000", "-1000"])
    def test_income_is_positive(self, amount):
        assert signed_amount_for(Decimal(amount), CategoryType.INCOME) == Decimal("1000")


class TestComputeDelta:
    """Deltas for applying a transaction."""

    def test_expense_delta(self):
        delta = compute_delta(Decimal("12.50"), CategoryType.EXPENSE, "food", date(2024, 3, 5))

        assert delta.signed_amount == Decimal("-12.50")
        assert delta.month_key == "2024_03"
        assert delta.day_key == "05"
        assert delta.stats_patch["dailyExpense.05"] == Decimal("12.50")

    def test_signed_caller_amount_still_follows_category(self):
        """A caller passing a negative income amount still gets a positive delta."""
        delta = compute_delta(Decimal("-800"), CategoryType.INCOME, "salary", date(2024, 3, 10))

        assert delta.signed_amount == Decimal("800")
        assert delta.stats_patch["totalIncome"] == Decimal("800")

    def test_reverse_sign(self):
        delta = compute_delta(
            Decimal("12.50"), CategoryType.EXPENSE, "food", date(2024, 3, 5), sign=-1
        )

        assert delta.signed_amount == Decimal("12.50")
        assert delta.stats_patch["totalExpense"] == Decimal("-12.50")

    def test_zero_is_rejected(self):
        with pytest.raises(TransactionValidationError):
            compute_delta(Decimal("0"), CategoryType.EXPENSE, "food", date(2024, 3, 5))

    def test_delta_is_immutable(self):
        delta = compute_delta(Decimal("1"), CategoryType.EXPENSE, "food", date(2024, 3, 5))

        with pytest.raises(Exception):
            delta.signed_amount = Decimal("2")


class TestReversalDelta:
    """Negating a stored transaction."""

    def test_negates_applied_delta(self):
        applied = compute_delta(Decimal("1000"), CategoryType.INCOME, "salary", date(2024, 3, 10))
        stored = Transaction(
            id="t1",
            amount=applied.signed_amount,
            currency="USD",
            txn_date=date(2024, 3, 10),
            account_id="acc-1",
            account_name="Checking",
            category_id="salary",
            category_name="Salary",
            category_icon="briefcase",
            category_color="#22C55E",
            category_type=CategoryType.INCOME,
        )

        reversed_ = reversal_delta(stored)

        assert reversed_.signed_amount == -applied.signed_amount
        assert reversed_.month_key == applied.month_key
        assert reversed_.stats_patch == {
            name: -amount for name, amount in applied.stats_patch.items()
        }
