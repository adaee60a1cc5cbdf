"""
Read Views

DESIGN DECISION: Reads never recompute from transaction history.
Monthly numbers come straight from the stored month bucket; only the
small per-category summaries of a transaction list are aggregated here.

All reads require a signed-in user, like writes do.

KNOWN LIMITATION: "today's transactions" scans only the most recent
``today_window`` transactions by date. A user with more entries than
that dated today sees an undercount.
"""

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from pydantic import BaseModel

from pocket_ledger.auth import SessionContext
from pocket_ledger.config import LedgerSettings, get_settings
from pocket_ledger.ledger.codec import decode
from pocket_ledger.ledger.periods import month_key, month_key_for, parse_month_key
from pocket_ledger.models.ledger import (
    Category,
    CategoryAmount,
    CategoryType,
    MonthlyStatsBucket,
    Transaction,
)
from pocket_ledger.services.storage import (
    DocumentStoreInterface,
    Family,
    collection_path,
    document_path,
)


class TransactionTotals(BaseModel):
    """Expense and income sums over a list of transactions."""

    expense: Decimal = Decimal("0")
    income: Decimal = Decimal("0")
    count: int = 0

    @property
    def net(self) -> Decimal:
        return self.income - self.expense


def _ranked(rows: list[CategoryAmount]) -> list[CategoryAmount]:
    # Largest first; equal amounts by category ID so the order is stable
    return sorted(rows, key=lambda row: (-row.amount, row.category_id))


class StatsReader:
    """
    Read-side views over the ledger.

    GUARANTEES:
    - A month with no stored bucket reads as all zeros
    - Per-category rows are always ordered by amount, then category ID
    """

    def __init__(
        self,
        store: DocumentStoreInterface,
        settings: Optional[LedgerSettings] = None,
    ):
        self._store = store
        self._settings = settings or get_settings().ledger

    async def get_monthly_stats(
        self,
        session: SessionContext,
        year: int,
        month: int,
    ) -> MonthlyStatsBucket:
        """Read one month's bucket; missing means all zeros."""
        user_id = session.require_user_id()
        key = month_key(year, month)
        record = await self._store.get_document(
            document_path(user_id, Family.MONTHLY_STATS, key)
        )
        return decode(record, key)

    async def get_current_month_stats(
        self,
        session: SessionContext,
        today: Optional[date] = None,
    ) -> MonthlyStatsBucket:
        today = today or date.today()
        return await self.get_monthly_stats(session, today.year, today.month)

    async def fetch_recent_transactions(
        self,
        session: SessionContext,
        limit: Optional[int] = None,
    ) -> list[Transaction]:
        """Most recent transactions first, by transaction date."""
        user_id = session.require_user_id()
        if limit is None:
            limit = self._settings.recent_limit
        if limit <= 0:
            return []

        snapshots = await self._store.query_collection(
            collection_path(user_id, Family.TRANSACTIONS),
            order_by="date",
            descending=True,
            limit=limit,
        )
        return [Transaction.from_document(s.id, s.data) for s in snapshots]

    async def fetch_today_transactions(
        self,
        session: SessionContext,
        today: Optional[date] = None,
    ) -> list[Transaction]:
        """Transactions dated today, taken from the recent window only."""
        today = today or date.today()
        recent = await self.fetch_recent_transactions(
            session, limit=self._settings.today_window
        )
        return [t for t in recent if t.txn_date == today]

    @staticmethod
    def aggregate_by_category(
        transactions: Iterable[Transaction],
        category_type: CategoryType,
    ) -> list[CategoryAmount]:
        """
        Sum magnitudes per category for one category type.

        Name, color and icon come from the first transaction seen for
        each category (the snapshot it was created with).
        """
        category_type = CategoryType(category_type)
        sums: dict[str, Decimal] = defaultdict(Decimal)
        first_seen: dict[str, Transaction] = {}

        for transaction in transactions:
            if transaction.category_type != category_type:
                continue
            sums[transaction.category_id] += transaction.magnitude
            first_seen.setdefault(transaction.category_id, transaction)

        return _ranked([
            CategoryAmount(
                category_id=category_id,
                category_name=first_seen[category_id].category_name,
                category_color=first_seen[category_id].category_color,
                category_icon=first_seen[category_id].category_icon,
                amount=amount,
            )
            for category_id, amount in sums.items()
        ])

    @staticmethod
    def breakdown_from_stats(
        stats: MonthlyStatsBucket,
        categories: Iterable[Category],
        category_type: CategoryType,
    ) -> list[CategoryAmount]:
        """
        Join a bucket's per-category amounts with the current categories.

        Categories that no longer exist and amounts that are not positive
        are left out.
        """
        category_type = CategoryType(category_type)
        amounts = (
            stats.expense_by_category
            if category_type is CategoryType.EXPENSE
            else stats.income_by_category
        )
        known = {c.id: c for c in categories if c.id}

        rows = []
        for category_id, amount in amounts.items():
            category = known.get(category_id)
            if category is None or amount <= 0:
                continue
            rows.append(CategoryAmount(
                category_id=category_id,
                category_name=category.name,
                category_color=category.color,
                category_icon=category.icon,
                amount=amount,
            ))
        return _ranked(rows)

    @staticmethod
    def totals(transactions: Iterable[Transaction]) -> TransactionTotals:
        result = TransactionTotals()
        for transaction in transactions:
            if transaction.category_type == CategoryType.EXPENSE:
                result.expense += transaction.magnitude
            else:
                result.income += transaction.magnitude
            result.count += 1
        return result

    @staticmethod
    def daily_expense_series(stats: MonthlyStatsBucket) -> list[tuple[str, Decimal]]:
        """One (day key, expense) pair for every day of the bucket's month."""
        month = parse_month_key(stats.month_key)
        return [
            (day, stats.daily_expense.get(day, Decimal("0")))
            for day in (f"{n:02d}" for n in range(1, month.days + 1))
        ]

    @staticmethod
    def current_month_key(today: Optional[date] = None) -> str:
        return month_key_for(today or date.today())
