"""
Core Data Models for Pocket Ledger

These models define the strict schemas for all data flowing through the ledger.
They are designed to:
1. Enforce type safety at runtime
2. Map cleanly onto the stored documents (camelCase field names)
3. Keep the denormalized snapshots on transactions explicit

DESIGN DECISION: Python attributes are snake_case, stored documents are
camelCase. The alias generator handles the mapping so the storage key
scheme stays compatible with existing data.
"""

from datetime import date, datetime, time, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)
from pydantic.alias_generators import to_camel


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class AccountType(str, Enum):
    """Kinds of accounts a user can hold money in."""
    DEBIT = "debit"
    CREDIT = "credit"
    CASH = "cash"
    WALLET = "wallet"


class CategoryType(str, Enum):
    """
    Direction of money for a category.

    CRITICAL: The category type decides the sign of a transaction amount.
    Expense amounts are stored negative, income amounts positive.
    """
    EXPENSE = "expense"
    INCOME = "income"


class InputMode(str, Enum):
    """How the user prefers to enter transactions."""
    VOICE = "voice"
    MANUAL = "manual"


def _to_utc_midnight(value: date) -> datetime:
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


def _plain_values(data: dict[str, Any]) -> dict[str, Any]:
    """Replace enum members with their raw values for storage."""
    plain = {}
    for key, value in data.items():
        if isinstance(value, Enum):
            value = value.value
        elif isinstance(value, dict):
            value = _plain_values(value)
        plain[key] = value
    return plain


class LedgerModel(BaseModel):
    """Base for models that are stored as documents."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


# =============================================================================
# ACCOUNTS AND CATEGORIES
# =============================================================================

class Account(LedgerModel):
    """
    A place money lives (bank account, card, wallet).

    The balance is maintained incrementally by the ledger writer.
    It always equals the sum of signed amounts of the transactions
    pointing at this account.
    """

    id: Optional[str] = Field(
        default=None,
        description="Document ID, assigned by the store"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
    )
    type: AccountType = AccountType.WALLET
    currency: str = Field(
        default="USD",
        min_length=3,
        max_length=3,
        description="ISO currency code"
    )
    balance: Decimal = Field(
        default=Decimal("0"),
        description="Signed running balance"
    )
    icon: str = "wallet"
    color: str = "#3B82F6"

    @field_validator('currency')
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        return v.upper()

    def to_document(self) -> dict[str, Any]:
        return _plain_values(self.model_dump(by_alias=True, exclude={"id"}))

    @classmethod
    def from_document(cls, doc_id: str, data: dict[str, Any]) -> "Account":
        return cls.model_validate({**data, "id": doc_id})


class Category(LedgerModel):
    """
    A label for transactions (Food, Salary, ...).

    The ledger copies name/icon/color/type onto every transaction at
    creation time. Later edits to the category are not propagated.
    """

    id: Optional[str] = None
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
    )
    type: CategoryType
    icon: str = "money"
    color: str = "#6B7280"
    order: int = Field(
        default=0,
        description="Display order; ties keep insertion order"
    )

    def to_document(self) -> dict[str, Any]:
        return _plain_values(self.model_dump(by_alias=True, exclude={"id"}))

    @classmethod
    def from_document(cls, doc_id: str, data: dict[str, Any]) -> "Category":
        return cls.model_validate({**data, "id": doc_id})


DEFAULT_ACCOUNT = Account(
    name="My Wallet",
    type=AccountType.WALLET,
    currency="USD",
    balance=Decimal("0"),
    icon="wallet",
    color="#3B82F6",
)

DEFAULT_EXPENSE_CATEGORIES = [
    Category(name="Food", type=CategoryType.EXPENSE, icon="fork-knife", color="#EF4444", order=1),
    Category(name="Transport", type=CategoryType.EXPENSE, icon="car", color="#3B82F6", order=2),
    Category(name="Shopping", type=CategoryType.EXPENSE, icon="shopping-cart", color="#F97316", order=3),
    Category(name="Entertainment", type=CategoryType.EXPENSE, icon="game-controller", color="#8B5CF6", order=4),
    Category(name="Housing", type=CategoryType.EXPENSE, icon="house", color="#10B981", order=5),
    Category(name="Health", type=CategoryType.EXPENSE, icon="first-aid-kit", color="#EC4899", order=6),
]

DEFAULT_INCOME_CATEGORIES = [
    Category(name="Salary", type=CategoryType.INCOME, icon="briefcase", color="#22C55E", order=1),
    Category(name="Investment", type=CategoryType.INCOME, icon="chart-line-up", color="#3B82F6", order=2),
    Category(name="Gift", type=CategoryType.INCOME, icon="gift", color="#F59E0B", order=3),
]


# =============================================================================
# TRANSACTIONS
# =============================================================================

class TransactionDraft(LedgerModel):
    """
    The only input shape the ledger accepts.

    Comes from manual form entry or from the natural-language parser.
    The amount is read as a magnitude; the sign is decided by the category.
    Account and category may be missing here - the validator reports that.
    """

    amount: Decimal
    txn_date: date = Field(
        ...,
        alias="date",
        description="Calendar day of the transaction"
    )
    note: str = Field(
        default="",
        max_length=500,
    )
    account_id: Optional[str] = None
    category_id: Optional[str] = None


class ParsedTransaction(LedgerModel):
    """
    What the natural-language parser produced from a transcript.

    CRITICAL: This is PROPOSED data. Fields the parser could not resolve
    stay None and must be filled in by the user before saving.
    """

    amount: Optional[Decimal] = None
    category_id: Optional[str] = None
    category_name: Optional[str] = None
    account_id: Optional[str] = None
    account_name: Optional[str] = None
    txn_date: date = Field(
        default_factory=date.today,
        alias="date",
    )
    note: str = ""
    transaction_type: CategoryType = CategoryType.EXPENSE
    raw_transcript: str = ""

    def to_draft(self, default_account_id: Optional[str] = None) -> TransactionDraft:
        """Build a draft, falling back to the default account when none was heard."""
        return TransactionDraft(
            amount=self.amount if self.amount is not None else Decimal("0"),
            txn_date=self.txn_date,
            note=self.note,
            account_id=self.account_id or default_account_id,
            category_id=self.category_id,
        )


class Transaction(LedgerModel):
    """
    A stored ledger entry.

    Never mutated in place. An edit is a reversal of this entry followed
    by the creation of a new one.
    """

    id: Optional[str] = None
    amount: Decimal = Field(
        ...,
        description="Signed amount: negative for expense, positive for income"
    )
    currency: str
    txn_date: date = Field(
        ...,
        alias="date",
    )
    created_at: Optional[datetime] = Field(
        default=None,
        description="Assigned by the store when the entry is committed"
    )
    note: str = ""

    # Denormalized account data
    account_id: str
    account_name: str

    # Denormalized category data
    category_id: str
    category_name: str
    category_icon: str
    category_color: str
    category_type: CategoryType

    @field_validator('txn_date', mode='before')
    @classmethod
    def timestamp_to_calendar_day(cls, v: Any) -> Any:
        """Stored dates come back as timestamps; keep the day only."""
        if isinstance(v, datetime):
            return v.date()
        return v

    @property
    def magnitude(self) -> Decimal:
        return abs(self.amount)

    def to_document(self) -> dict[str, Any]:
        """Stored form; the date becomes a UTC-midnight timestamp so it can be ordered."""
        data = _plain_values(self.model_dump(by_alias=True, exclude={"id", "created_at"}))
        data["date"] = _to_utc_midnight(self.txn_date)
        return data

    @classmethod
    def from_document(cls, doc_id: str, data: dict[str, Any]) -> "Transaction":
        return cls.model_validate({**data, "id": doc_id})


# =============================================================================
# MONTHLY STATISTICS
# =============================================================================

class MonthlyStatsBucket(BaseModel):
    """
    Aggregate statistics for one user and one calendar month.

    INVARIANTS:
    - total_expense == sum(expense_by_category) == sum(daily_expense)
    - total_income == sum(income_by_category)

    A month with no stored bucket is the all-zero bucket, not an error.
    """

    month_key: str = Field(
        ...,
        pattern=r"^\d{4}_\d{2}$",
        description="yyyy_MM"
    )
    total_expense: Decimal = Decimal("0")
    total_income: Decimal = Decimal("0")
    expense_by_category: dict[str, Decimal] = Field(default_factory=dict)
    income_by_category: dict[str, Decimal] = Field(default_factory=dict)
    daily_expense: dict[str, Decimal] = Field(
        default_factory=dict,
        description="Two-digit day of month -> expense that day"
    )

    @property
    def net(self) -> Decimal:
        """Income minus expense for the month."""
        return self.total_income - self.total_expense

    @property
    def is_empty(self) -> bool:
        return (
            not self.total_expense
            and not self.total_income
            and not any(self.expense_by_category.values())
            and not any(self.income_by_category.values())
        )


class CategoryAmount(BaseModel):
    """One row of a per-category breakdown for display."""

    category_id: str
    category_name: str
    category_color: str = "#6B7280"
    category_icon: str = "money"
    amount: Decimal


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single problem found with a draft."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'future_date')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
    )


# =============================================================================
# USERS
# =============================================================================

class UserSettings(LedgerModel):
    default_input_mode: InputMode = InputMode.VOICE


class UserProfile(LedgerModel):
    """Profile document stored at users/{uid}."""

    email: str = ""
    display_name: str = ""
    created_at: Optional[datetime] = None
    settings: UserSettings = Field(default_factory=UserSettings)

    def to_document(self) -> dict[str, Any]:
        return _plain_values(self.model_dump(by_alias=True, exclude={"created_at"}))

    @classmethod
    def from_document(cls, data: dict[str, Any]) -> "UserProfile":
        return cls.model_validate(data)
