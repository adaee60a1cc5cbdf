"""
Balance and Stats Delta Calculator

Pure functions: given an amount, a category type and a date, work out
exactly what the account balance and the month bucket must change by.

The caller's sign is never trusted. The magnitude is taken and the sign
comes from the category type: expense is negative, income positive.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from pocket_ledger.ledger.codec import delta_patch
from pocket_ledger.ledger.periods import day_key_for, month_key_for
from pocket_ledger.models.ledger import CategoryType, Transaction
from pocket_ledger.validation.validator import (
    TransactionValidationError,
    validate_amount,
)


class LedgerDelta(BaseModel):
    """Everything one ledger write changes besides the transaction entry."""

    model_config = ConfigDict(frozen=True)

    signed_amount: Decimal
    month_key: str
    day_key: str
    stats_patch: dict[str, Decimal]


def signed_amount_for(amount: Decimal, category_type: CategoryType) -> Decimal:
    """Expense amounts are negative, income amounts positive."""
    magnitude = abs(amount)
    if CategoryType(category_type) is CategoryType.EXPENSE:
        return -magnitude
    return magnitude


def compute_delta(
    amount: Decimal,
    category_type: CategoryType,
    category_id: str,
    txn_date: date,
    sign: int = 1,
) -> LedgerDelta:
    """
    Work out the balance delta and the stats patch for one transaction.

    Args:
        amount: Transaction amount; only its magnitude is used
        category_type: Decides the sign
        category_id: Category the amount is booked under
        txn_date: Decides the month bucket and the day key
        sign: +1 when applying, -1 when reversing

    Raises:
        TransactionValidationError: If the amount is zero
    """
    issue = validate_amount(abs(amount) if amount is not None else None)
    if issue:
        raise TransactionValidationError([issue])

    magnitude = abs(amount)
    month_key = month_key_for(txn_date)
    day_key = day_key_for(txn_date)

    return LedgerDelta(
        signed_amount=signed_amount_for(magnitude, category_type) * sign,
        month_key=month_key,
        day_key=day_key,
        stats_patch=delta_patch(category_type, category_id, day_key, magnitude, sign),
    )


def reversal_delta(transaction: Transaction) -> LedgerDelta:
    """
    The exact negation of a stored transaction's effects.

    Uses only the stored snapshot, so it stays correct after the
    category or account it referenced has been edited or deleted.
    """
    return compute_delta(
        transaction.amount,
        transaction.category_type,
        transaction.category_id,
        transaction.txn_date,
        sign=-1,
    )
