"""
Tests for the monthly stats codec.
"""

from decimal import Decimal

import pytest

from pocket_ledger.ledger.codec import (
    PREFIX_FIELDS,
    StatsPrefix,
    decode,
    delta_patch,
    field_path,
)
from pocket_ledger.models.ledger import CategoryType, MonthlyStatsBucket


class TestFieldPath:
    """Building flattened field names."""

    def test_builds_prefixed_name(self):
        assert field_path(StatsPrefix.EXPENSE_BY_CATEGORY, "abc123") == "expenseByCategory.abc123"
        assert field_path(StatsPrefix.DAILY_EXPENSE, "07") == "dailyExpense.07"

    def test_accepts_prefix_value(self):
        assert field_path("incomeByCategory", "x") == "incomeByCategory.x"

    @pytest.mark.parametrize("key", ["", "  ", "a.b", "a/b", "`x`"])
    def test_rejects_unsafe_keys(self, key):
        with pytest.raises(ValueError):
            field_path(StatsPrefix.EXPENSE_BY_CATEGORY, key)

    @pytest.mark.parametrize("day", ["0", "00", "7", "32", "1a"])
    def test_rejects_bad_day_keys(self, day):
        with pytest.raises(ValueError):
            field_path(StatsPrefix.DAILY_EXPENSE, day)

    def test_rejects_unknown_prefix(self):
        with pytest.raises(ValueError):
            field_path("balance", "x")

    def test_every_prefix_maps_to_a_bucket_attribute(self):
        for prefix in StatsPrefix:
            assert PREFIX_FIELDS[prefix] in MonthlyStatsBucket.model_fields


class TestDecode:
    """Flat record to nested bucket."""

    def test_none_is_zero_bucket(self):
        bucket = decode(None, "2024_03")

        assert bucket.month_key == "2024_03"
        assert bucket.total_expense == Decimal("0")
        assert bucket.expense_by_category == {}
        assert bucket.is_empty

    def test_nests_prefixed_fields(self):
        record = {
            "totalExpense": Decimal("12.50"),
            "totalIncome": Decimal("1000"),
            "expenseByCategory.food": Decimal("12.50"),
            "incomeByCategory.salary": Decimal("1000"),
            "dailyExpense.05": Decimal("12.50"),
        }

        bucket = decode(record, "2024_03")

        assert bucket.total_expense == Decimal("12.50")
        assert bucket.total_income == Decimal("1000")
        assert bucket.expense_by_category == {"food": Decimal("12.50")}
        assert bucket.income_by_category == {"salary": Decimal("1000")}
        assert bucket.daily_expense == {"05": Decimal("12.50")}

    def test_ignores_unknown_fields(self):
        record = {
            "totalExpense": 3,
            "id": "2024_03",
            "otherPrefix.x": 9,
            "expenseByCategory.": 4,
        }

        bucket = decode(record, "2024_03")

        assert bucket.total_expense == Decimal("3")
        assert bucket.expense_by_category == {}

    def test_converts_stored_doubles(self):
        bucket = decode({"totalExpense": 0.1, "expenseByCategory.a": 0.1}, "2024_03")

        assert bucket.total_expense == Decimal("0.1")
        assert bucket.expense_by_category["a"] == Decimal("0.1")


class TestDeltaPatch:
    """Additive deltas for one transaction."""

    def test_expense_touches_three_fields(self):
        patch = delta_patch(CategoryType.EXPENSE, "food", "05", Decimal("12.50"), 1)

        assert patch == {
            "totalExpense": Decimal("12.50"),
            "expenseByCategory.food": Decimal("12.50"),
            "dailyExpense.05": Decimal("12.50"),
        }

    def test_income_has_no_daily_entry(self):
        patch = delta_patch(CategoryType.INCOME, "salary", "10", Decimal("1000"), 1)

        assert patch == {
            "totalIncome": Decimal("1000"),
            "incomeByCategory.salary": Decimal("1000"),
        }

    def test_reverse_sign_negates(self):
        patch = delta_patch(CategoryType.EXPENSE, "food", "05", Decimal("12.50"), -1)

        assert set(patch.values()) == {Decimal("-12.50")}

    def test_amount_is_taken_as_magnitude(self):
        patch = delta_patch(CategoryType.INCOME, "salary", "10", Decimal("-3"), 1)

        assert patch["totalIncome"] == Decimal("3")

    def test_rejects_other_signs(self):
        with pytest.raises(ValueError):
            delta_patch(CategoryType.EXPENSE, "food", "05", Decimal("1"), 2)

    def test_rejects_unsafe_category_id(self):
        with pytest.raises(ValueError):
            delta_patch(CategoryType.EXPENSE, "food.totalIncome", "05", Decimal("1"), 1)
