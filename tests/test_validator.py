"""
Tests for draft validation.
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from conftest import make_draft
from pocket_ledger.validation import DraftValidator, TransactionValidationError, validate_amount


class TestValidateAmount:
    def test_positive_amount_passes(self):
        assert validate_amount(Decimal("0.01")) is None

    def test_missing_amount(self):
        assert validate_amount(None).issue_type == "missing"

    @pytest.mark.parametrize("amount", ["0", "-1", "NaN", "Infinity"])
    def test_non_positive_or_non_finite(self, amount):
        issue = validate_amount(Decimal(amount))

        assert issue.issue_type == "invalid_value"
        assert issue.severity == "error"


class TestDraftValidator:
    """Collecting and enforcing issues."""

    def test_clean_draft(self):
        issues = DraftValidator().validate(make_draft("5", date(2024, 3, 5)), today=date(2024, 3, 5))

        assert issues == []

    def test_reports_every_error(self):
        draft = make_draft("0", date(2024, 3, 5), account_id=None, category_id="")

        issues = DraftValidator().validate(draft, today=date(2024, 3, 5))

        assert [i.field for i in issues] == ["amount", "account_id", "category_id"]

    def test_future_date_is_a_warning(self):
        draft = make_draft("5", date.today() + timedelta(days=2))

        warnings = DraftValidator().ensure_valid(draft)

        assert [w.issue_type for w in warnings] == ["future_date"]
        assert warnings[0].severity == "warning"

    def test_ensure_valid_raises_errors_only(self):
        draft = make_draft("-5", date.today() + timedelta(days=2))

        with pytest.raises(TransactionValidationError) as excinfo:
            DraftValidator().ensure_valid(draft)

        assert excinfo.value.fields == ["amount"]
        assert "greater than zero" in str(excinfo.value)
