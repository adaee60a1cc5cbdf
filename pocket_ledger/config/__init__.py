"""Configuration package."""

from pocket_ledger.config.settings import (
    FIRESTORE_MAX_BATCH_SIZE,
    FirestoreSettings,
    LedgerSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "FIRESTORE_MAX_BATCH_SIZE",
    "FirestoreSettings",
    "LedgerSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
