"""Read views over the ledger."""

from pocket_ledger.queries.stats import StatsReader, TransactionTotals

__all__ = ["StatsReader", "TransactionTotals"]
