"""Draft validation package."""

from pocket_ledger.validation.validator import (
    DraftValidator,
    TransactionValidationError,
    validate_amount,
)

__all__ = ["DraftValidator", "TransactionValidationError", "validate_amount"]
