"""
Data Models Package

This package contains all Pydantic models used by the ledger.
All data flowing through the system must conform to these schemas.
"""

from pocket_ledger.models.ledger import (
    DEFAULT_ACCOUNT,
    DEFAULT_EXPENSE_CATEGORIES,
    DEFAULT_INCOME_CATEGORIES,
    Account,
    AccountType,
    Category,
    CategoryAmount,
    CategoryType,
    InputMode,
    MonthlyStatsBucket,
    ParsedTransaction,
    Transaction,
    TransactionDraft,
    UserProfile,
    UserSettings,
    ValidationIssue,
)
from pocket_ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "DEFAULT_ACCOUNT",
    "DEFAULT_EXPENSE_CATEGORIES",
    "DEFAULT_INCOME_CATEGORIES",
    "Account",
    "AccountType",
    "Category",
    "CategoryAmount",
    "CategoryType",
    "InputMode",
    "MonthlyStatsBucket",
    "ParsedTransaction",
    "Transaction",
    "TransactionDraft",
    "UserProfile",
    "UserSettings",
    "ValidationIssue",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
