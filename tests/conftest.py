"""
Shared fixtures.

Every test runs against the in-memory store. Commit failures are
injected with FlakyDocumentStore.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

import pytest

from pocket_ledger.audit import AuditLogger
from pocket_ledger.auth import SessionContext
from pocket_ledger.config import LedgerSettings, get_settings
from pocket_ledger.models.ledger import (
    Account,
    AccountType,
    Category,
    CategoryType,
    TransactionDraft,
)
from pocket_ledger.orchestrator import LedgerService
from pocket_ledger.services.storage import (
    CommitError,
    Family,
    InMemoryDocumentStore,
    WriteBatch,
    document_path,
)


USER_ID = "user-1"


class FlakyDocumentStore(InMemoryDocumentStore):
    """
    In-memory store whose chosen commit attempts fail.

    Args:
        fail_on: 1-based commit attempt numbers that raise CommitError
    """

    def __init__(self, fail_on: Optional[set[int]] = None, **kwargs):
        super().__init__(**kwargs)
        self.fail_on = set(fail_on or ())
        self.attempts = 0

    async def commit(self, batch: WriteBatch) -> None:
        self.attempts += 1
        if self.attempts in self.fail_on:
            raise CommitError(f"Injected failure on commit attempt {self.attempts}")
        await super().commit(batch)


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    """Settings come from defaults, not from the developer's environment."""
    for name in ("LEDGER_RECENT_LIMIT", "LEDGER_TODAY_WINDOW", "LEDGER_PURGE_BATCH_SIZE",
                 "LEDGER_DEFAULT_CURRENCY"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> LedgerSettings:
    return LedgerSettings(_env_file=None)


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def session() -> SessionContext:
    return SessionContext(user_id=USER_ID, email="ana@example.com")


@pytest.fixture
def anonymous() -> SessionContext:
    return SessionContext.anonymous()


@pytest.fixture
def audit_logger() -> AuditLogger:
    return AuditLogger()


async def seed(store: InMemoryDocumentStore, user_id: str = USER_ID) -> dict:
    """Store one account and an expense and an income category."""
    account = Account(
        id="acc-1", name="Checking", type=AccountType.DEBIT, currency="USD",
    )
    food = Category(
        id="cat-food", name="Food", type=CategoryType.EXPENSE,
        icon="fork-knife", color="#EF4444", order=1,
    )
    salary = Category(
        id="cat-salary", name="Salary", type=CategoryType.INCOME,
        icon="briefcase", color="#22C55E", order=1,
    )

    batch = WriteBatch()
    batch.set(document_path(user_id, Family.ACCOUNTS, account.id), account.to_document())
    batch.set(document_path(user_id, Family.CATEGORIES, food.id), food.to_document())
    batch.set(document_path(user_id, Family.CATEGORIES, salary.id), salary.to_document())
    await store.commit(batch)

    return {"account": account, "food": food, "salary": salary}


@pytest.fixture
async def seeded(store) -> dict:
    return await seed(store)


@pytest.fixture
def ledger(store, audit_logger, settings) -> LedgerService:
    return LedgerService(store, audit_logger=audit_logger, settings=settings)


def make_draft(
    amount: str,
    day: date,
    account_id: Optional[str] = "acc-1",
    category_id: Optional[str] = "cat-food",
    note: str = "",
) -> TransactionDraft:
    return TransactionDraft(
        amount=Decimal(amount),
        txn_date=day,
        note=note,
        account_id=account_id,
        category_id=category_id,
    )


async def balance_of(store: InMemoryDocumentStore, account_id: str = "acc-1") -> Decimal:
    data = await store.get_document(document_path(USER_ID, Family.ACCOUNTS, account_id))
    return data["balance"]


async def stats_record(store: InMemoryDocumentStore, key: str) -> Optional[dict]:
    return await store.get_document(document_path(USER_ID, Family.MONTHLY_STATS, key))
