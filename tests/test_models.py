"""
Tests for Pocket Ledger

Test strategy:
1. Unit tests for individual components (models, codec, calculator)
2. Integration tests for flows against the in-memory store
3. No real Firestore calls in tests
"""

import pytest
from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import uuid4

from pocket_ledger.auth import SessionContext, UnauthenticatedError
from pocket_ledger.models.ledger import (
    DEFAULT_ACCOUNT,
    DEFAULT_EXPENSE_CATEGORIES,
    DEFAULT_INCOME_CATEGORIES,
    Account,
    AccountType,
    Category,
    CategoryType,
    InputMode,
    MonthlyStatsBucket,
    ParsedTransaction,
    Transaction,
    UserProfile,
)
from pocket_ledger.models.audit import (
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


def sample_transaction(**overrides) -> Transaction:
    fields = dict(
        id="t1",
        amount=Decimal("-12.50"),
        currency="USD",
        txn_date=date(2024, 3, 5),
        note="lunch",
        account_id="acc-1",
        account_name="Checking",
        category_id="cat-food",
        category_name="Food",
        category_icon="fork-knife",
        category_color="#EF4444",
        category_type=CategoryType.EXPENSE,
    )
    fields.update(overrides)
    return Transaction(**fields)


class TestAccountAndCategory:
    """Tests for account and category models."""

    def test_account_currency_is_uppercased(self):
        """Test currency codes are normalized."""
        account = Account(name="Cash", currency="eur")
        assert account.currency == "EUR"

    def test_account_strips_whitespace(self):
        """Test that whitespace is stripped from names."""
        account = Account(name="  Cash  ")
        assert account.name == "Cash"

    def test_account_rejects_empty_name(self):
        with pytest.raises(ValueError):
            Account(name="")

    def test_account_document_is_camel_case_without_id(self):
        """Test stored form uses plain values and no id."""
        account = Account(id="a1", name="Card", type=AccountType.CREDIT)
        document = account.to_document()

        assert "id" not in document
        assert document["type"] == "credit"
        assert document["balance"] == Decimal("0")

    def test_category_from_document(self):
        category = Category.from_document("c1", {"name": "Food", "type": "expense", "order": 2})

        assert category.id == "c1"
        assert category.type == CategoryType.EXPENSE
        assert category.order == 2

    def test_defaults(self):
        """Test default seeding data."""
        assert DEFAULT_ACCOUNT.name == "My Wallet"
        assert DEFAULT_ACCOUNT.balance == Decimal("0")
        assert [c.name for c in DEFAULT_EXPENSE_CATEGORIES] == [
            "Food", "Transport", "Shopping", "Entertainment", "Housing", "Health",
        ]
        assert [c.name for c in DEFAULT_INCOME_CATEGORIES] == ["Salary", "Investment", "Gift"]
        assert all(c.type == CategoryType.INCOME for c in DEFAULT_INCOME_CATEGORIES)


class TestTransactionModels:
    """Tests for transaction-related models."""

    def test_document_uses_camel_case_and_utc_midnight(self):
        """Test the stored date is an orderable UTC timestamp."""
        document = sample_transaction().to_document()

        assert document["date"] == datetime(2024, 3, 5, tzinfo=timezone.utc)
        assert document["categoryType"] == "expense"
        assert document["accountName"] == "Checking"
        assert "id" not in document
        assert "createdAt" not in document

    def test_from_document_restores_calendar_day(self):
        """Test stored timestamps come back as a date."""
        stored = sample_transaction().to_document()
        stored["createdAt"] = datetime(2024, 3, 5, 12, 30, tzinfo=timezone.utc)

        transaction = Transaction.from_document("t1", stored)

        assert transaction.id == "t1"
        assert transaction.txn_date == date(2024, 3, 5)
        assert transaction.created_at is not None
        assert transaction == sample_transaction(created_at=stored["createdAt"])

    def test_magnitude(self):
        assert sample_transaction().magnitude == Decimal("12.50")

    def test_parsed_transaction_to_draft_uses_default_account(self):
        """Test parser output falls back to the default account."""
        parsed = ParsedTransaction(
            amount=Decimal("20"),
            category_id="cat-food",
            txn_date=date(2024, 3, 5),
            raw_transcript="twenty on food",
        )

        draft = parsed.to_draft(default_account_id="acc-default")

        assert draft.account_id == "acc-default"
        assert draft.category_id == "cat-food"
        assert draft.amount == Decimal("20")

    def test_parsed_transaction_without_amount(self):
        """Test a missing amount becomes zero so validation rejects it."""
        draft = ParsedTransaction(account_id="acc-1").to_draft()

        assert draft.amount == Decimal("0")
        assert draft.account_id == "acc-1"

    def test_parsed_transaction_accepts_stored_field_names(self):
        """Test parser output accepts camelCase input."""
        parsed = ParsedTransaction.model_validate(
            {"amount": "5", "date": "2024-03-05", "categoryId": "c"}
        )
        assert parsed.txn_date == date(2024, 3, 5)
        assert parsed.category_id == "c"


class TestMonthlyStatsBucket:
    """Tests for the month bucket model."""

    def test_month_key_format(self):
        with pytest.raises(ValueError):
            MonthlyStatsBucket(month_key="2024-03")

    def test_net_and_empty(self):
        bucket = MonthlyStatsBucket(
            month_key="2024_03",
            total_expense=Decimal("12.50"),
            total_income=Decimal("1000"),
        )
        assert bucket.net == Decimal("987.50")
        assert not bucket.is_empty
        assert MonthlyStatsBucket(month_key="2024_03").is_empty


class TestUserProfile:
    def test_default_settings(self):
        profile = UserProfile(email="a@b.c")
        assert profile.settings.default_input_mode == InputMode.VOICE

    def test_document_round_trip(self):
        document = UserProfile(email="a@b.c", display_name="Ana").to_document()

        assert document["displayName"] == "Ana"
        assert document["settings"] == {"defaultInputMode": "voice"}
        assert UserProfile.from_document(document).display_name == "Ana"


class TestSessionContext:
    def test_require_user(self):
        assert SessionContext(user_id="u1").require_user_id() == "u1"

    def test_anonymous_raises(self):
        with pytest.raises(UnauthenticatedError, match="not authenticated"):
            SessionContext.anonymous().require_user_id()

    def test_empty_user_id_counts_as_anonymous(self):
        assert SessionContext(user_id="").current_user_id() is None


class TestAuditModels:
    """Tests for audit-related models."""

    def test_transaction_applied_event(self):
        """Test AuditEventBuilder.transaction_applied."""
        correlation_id = uuid4()

        event = AuditEventBuilder.transaction_applied(
            user_id="u1",
            transaction_id="t1",
            signed_amount="-12.50",
            month_key="2024_03",
            correlation_id=correlation_id,
        )

        assert event.event_type == AuditEventType.TRANSACTION_APPLIED
        assert event.entity_id == "t1"
        assert event.correlation_id == correlation_id

    def test_update_partial_is_a_warning(self):
        event = AuditEventBuilder.update_partial(
            user_id="u1",
            old_transaction_id="t1",
            error_message="boom",
            correlation_id=uuid4(),
        )

        assert event.severity == AuditSeverity.WARNING
        assert event.error_message == "boom"

    def test_log_dict_is_plain(self):
        """Test the structured log form contains only plain values."""
        event = AuditEventBuilder.purge_completed("u1", {"transactions": 3, "accounts": 1})
        log_dict = event.to_log_dict()

        assert log_dict["event_type"] == "purge_completed"
        assert log_dict["details"]["deleted_counts"]["transactions"] == 3
        assert log_dict["correlation_id"] is None
        assert "4 documents" in log_dict["description"]
