"""
Main Orchestrator for Pocket Ledger

This module ties the components together and defines the end-to-end
flows the app calls:
1. Record (draft -> resolve account/category -> validate -> one atomic batch)
2. Delete (stored transaction -> reversal batch)
3. Update (reversal batch, then a fresh record batch)
4. Read (month buckets and recent transactions)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing is written without a signed-in user
- A draft is validated before the first batch of any flow
- Every write is audited

KNOWN LIMITATION: An update spans two batches. If the second one fails
the old transaction is gone and the new one was never written. The
ledger is still consistent (balances and buckets match the stored
transactions) but the user's edit is lost. The failure is logged as an
``update_partial`` event and the error is re-raised.
"""

from datetime import date
from typing import Optional
from uuid import UUID

import structlog

from pocket_ledger.audit import AuditLogger, create_correlation_id
from pocket_ledger.auth import SessionContext
from pocket_ledger.config import LedgerSettings, get_settings
from pocket_ledger.ledger import BulkPurge, LedgerTransactionWriter
from pocket_ledger.models.ledger import (
    Account,
    Category,
    MonthlyStatsBucket,
    Transaction,
    TransactionDraft,
)
from pocket_ledger.queries import StatsReader
from pocket_ledger.services.accounts import AccountService
from pocket_ledger.services.categories import CategoryService
from pocket_ledger.services.storage import (
    ConnectionError,
    DocumentStoreInterface,
    Family,
    FirestoreClient,
    FirestoreDocumentStore,
    InMemoryDocumentStore,
    NotFoundError,
    document_path,
)
from pocket_ledger.services.users import UserService
from pocket_ledger.validation import DraftValidator


logger = structlog.get_logger("pocket_ledger.orchestrator")


class LedgerService:
    """
    Entry point for every ledger operation.

    Holds the writer, the read views and the account/category/user
    collaborators, all bound to the same document store.
    """

    def __init__(
        self,
        store: DocumentStoreInterface,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[LedgerSettings] = None,
        validator: Optional[DraftValidator] = None,
    ):
        self._store = store
        self._audit_logger = audit_logger
        self._settings = settings or get_settings().ledger

        self.writer = LedgerTransactionWriter(store, validator, audit_logger)
        self.stats = StatsReader(store, self._settings)
        self.accounts = AccountService(store, audit_logger)
        self.categories = CategoryService(store, audit_logger)
        self.users = UserService(
            store,
            purge=BulkPurge(store, self._settings.purge_batch_size, audit_logger),
            audit_logger=audit_logger,
        )

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def apply(
        self,
        session: SessionContext,
        draft: TransactionDraft,
        account: Account,
        category: Category,
        correlation_id: Optional[UUID] = None,
    ) -> str:
        """Record a transaction against an already resolved account and category."""
        return await self.writer.apply(session, draft, account, category, correlation_id)

    async def apply_draft(
        self,
        session: SessionContext,
        draft: TransactionDraft,
        correlation_id: Optional[UUID] = None,
    ) -> str:
        """
        Record a transaction, looking up its account and category by ID.

        Returns:
            The new transaction's ID

        Raises:
            UnauthenticatedError: No signed-in user
            TransactionValidationError: The draft is not writable
            NotFoundError: The account or category does not exist
            CommitError: The batch failed; nothing was written
        """
        correlation_id = correlation_id or create_correlation_id()
        await self.writer.validate_draft(session, draft, correlation_id)

        account, category = await self._resolve(session, draft)
        return await self.writer.apply(session, draft, account, category, correlation_id)

    async def delete_transaction(
        self,
        session: SessionContext,
        transaction_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> Transaction:
        """
        Delete a stored transaction and undo its effects.

        Returns:
            The transaction as it was stored

        Raises:
            NotFoundError: No such transaction
            CommitError: The reversal batch failed; nothing changed
        """
        transaction = await self.get_transaction(session, transaction_id)
        if transaction is None:
            raise NotFoundError(f"Transaction not found: {transaction_id}")

        await self.writer.reverse(session, transaction, correlation_id)
        return transaction

    async def update_transaction(
        self,
        session: SessionContext,
        old_transaction: Transaction,
        new_draft: TransactionDraft,
        new_account: Account,
        new_category: Category,
        correlation_id: Optional[UUID] = None,
    ) -> str:
        """
        Replace a transaction: reverse the old one, then record the new one.

        The two steps are separate batches. The new draft is validated
        before the first one so a bad edit never reverses anything.

        Returns:
            The ID of the newly recorded transaction (IDs are not reused)

        Raises:
            TransactionValidationError: The new draft is not writable;
                nothing changed
            CommitError: From the reversal (nothing changed; also raised when
                the old transaction was already reversed) or from the new
                record (old one already reversed)
            NotFoundError: The new account or category does not exist;
                nothing changed
        """
        user_id = session.require_user_id()
        correlation_id = correlation_id or create_correlation_id()

        await self.writer.validate_draft(session, new_draft, correlation_id)
        await self._ensure_stored(session, new_account, new_category)

        if self._audit_logger:
            await self._audit_logger.log_update_started(
                user_id=user_id,
                transaction_id=old_transaction.id or "",
                correlation_id=correlation_id,
            )

        await self.writer.reverse(session, old_transaction, correlation_id)

        try:
            new_id = await self.writer.apply(
                session, new_draft, new_account, new_category, correlation_id
            )
        except Exception as e:
            if self._audit_logger:
                await self._audit_logger.log_update_partial(
                    user_id=user_id,
                    old_transaction_id=old_transaction.id,
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            raise

        if self._audit_logger:
            await self._audit_logger.log_transaction_updated(
                user_id=user_id,
                old_transaction_id=old_transaction.id,
                new_transaction_id=new_id,
                correlation_id=correlation_id,
            )
        return new_id

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def get_transaction(
        self,
        session: SessionContext,
        transaction_id: str,
    ) -> Optional[Transaction]:
        user_id = session.require_user_id()
        data = await self._store.get_document(
            document_path(user_id, Family.TRANSACTIONS, transaction_id)
        )
        if data is None:
            return None
        return Transaction.from_document(transaction_id, data)

    async def get_monthly_stats(
        self,
        session: SessionContext,
        year: int,
        month: int,
    ) -> MonthlyStatsBucket:
        return await self.stats.get_monthly_stats(session, year, month)

    async def fetch_recent_transactions(
        self,
        session: SessionContext,
        limit: Optional[int] = None,
    ) -> list[Transaction]:
        return await self.stats.fetch_recent_transactions(session, limit)

    async def fetch_today_transactions(
        self,
        session: SessionContext,
        today: Optional[date] = None,
    ) -> list[Transaction]:
        return await self.stats.fetch_today_transactions(session, today)

    # -------------------------------------------------------------------------
    # Onboarding
    # -------------------------------------------------------------------------

    async def initialize_user(self, session: SessionContext, display_name: str = "") -> None:
        """Create the profile and seed the default account and categories."""
        await self.users.create_profile(session, session.email or "", display_name)
        await self.accounts.initialize_default_account(session)
        await self.categories.initialize_default_categories(session)

    async def _ensure_stored(
        self,
        session: SessionContext,
        account: Account,
        category: Category,
    ) -> None:
        if not account.id or await self.accounts.get_account(session, account.id) is None:
            raise NotFoundError(f"Account not found: {account.id}")
        if not category.id or await self.categories.get_category(session, category.id) is None:
            raise NotFoundError(f"Category not found: {category.id}")

    async def _resolve(
        self,
        session: SessionContext,
        draft: TransactionDraft,
    ) -> tuple[Account, Category]:
        account = await self.accounts.get_account(session, draft.account_id)
        if account is None:
            raise NotFoundError(f"Account not found: {draft.account_id}")

        category = await self.categories.get_category(session, draft.category_id)
        if category is None:
            raise NotFoundError(f"Category not found: {draft.category_id}")

        return account, category


def create_app_components(
    use_firestore: bool = True,
) -> tuple[LedgerService, Optional[FirestoreClient]]:
    """
    Factory function to create all application components.

    Args:
        use_firestore: Whether to connect to Firestore.
                       Set to False to run on the in-memory store.

    Returns:
        (ledger_service, firestore_client)

    Raises:
        ConnectionError: Firestore was requested but could not be set up.
            Pass use_firestore=False to run on the in-memory store.
    """
    firestore_client = None
    store: DocumentStoreInterface

    if use_firestore:
        try:
            firestore_client = FirestoreClient()
            firestore_client.connect()
            store = FirestoreDocumentStore(firestore_client)
        except Exception as e:
            logger.error("firestore_unavailable", error=str(e))
            raise ConnectionError(f"Firestore is not configured: {e}") from e
    else:
        store = InMemoryDocumentStore()

    service = LedgerService(store, audit_logger=AuditLogger())
    return service, firestore_client
