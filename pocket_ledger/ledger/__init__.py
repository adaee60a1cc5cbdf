"""
Ledger consistency engine.

Keeps transactions, account balances and monthly statistics in step.
"""

from pocket_ledger.ledger.codec import (
    PREFIX_FIELDS,
    TOTAL_EXPENSE_FIELD,
    TOTAL_INCOME_FIELD,
    StatsPrefix,
    decode,
    delta_patch,
    field_path,
)
from pocket_ledger.ledger.deltas import (
    LedgerDelta,
    compute_delta,
    reversal_delta,
    signed_amount_for,
)
from pocket_ledger.ledger.periods import (
    Month,
    day_key_for,
    format_month_display,
    is_future_month,
    month_key,
    month_key_for,
    next_month_key,
    parse_month_key,
    previous_month_key,
    shift_month_key,
)
from pocket_ledger.ledger.purge import BulkPurge, PurgeIncompleteError, PurgeReport
from pocket_ledger.ledger.writer import LedgerTransactionWriter

__all__ = [
    # Codec
    "PREFIX_FIELDS",
    "TOTAL_EXPENSE_FIELD",
    "TOTAL_INCOME_FIELD",
    "StatsPrefix",
    "decode",
    "delta_patch",
    "field_path",
    # Deltas
    "LedgerDelta",
    "compute_delta",
    "reversal_delta",
    "signed_amount_for",
    # Periods
    "Month",
    "day_key_for",
    "format_month_display",
    "is_future_month",
    "month_key",
    "month_key_for",
    "next_month_key",
    "parse_month_key",
    "previous_month_key",
    "shift_month_key",
    # Writes
    "BulkPurge",
    "LedgerTransactionWriter",
    "PurgeIncompleteError",
    "PurgeReport",
]
