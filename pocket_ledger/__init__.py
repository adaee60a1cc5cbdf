"""
Pocket Ledger - Source Package

The ledger consistency engine behind a personal finance tracker.
Every transaction write touches three records together: the transaction
entry, the account balance and the monthly statistics bucket.

DESIGN PRINCIPLES:
1. All three records change in one atomic batch, or none do
2. Balances and stats move by additive increments, never read-modify-write
3. Reversals are computed from the stored transaction snapshot only
4. Fail early, fail visibly: no silent retries of commits
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Pocket Ledger Team"
