"""
Ledger Transaction Writer

Every ledger write is ONE atomic batch touching three records:

    users/{uid}/transactions/{id}        set (apply) or delete (reverse)
    users/{uid}/accounts/{accountId}     balance += signed amount
    users/{uid}/monthly_stats/{yyyy_MM}  merge-increment totals and breakdowns

Either all three change or none do. Numeric changes are Increment
sentinels, so two writers hitting the same account at the same time both
land. The writer never reads a balance to compute a new one.

A failed commit surfaces as CommitError and is NOT retried here: the
transaction ID is assigned before commit, but a retry through apply()
would mint a new one and double-book the amount.
"""

from typing import Optional
from uuid import UUID

from pocket_ledger.audit import AuditLogger
from pocket_ledger.auth import SessionContext
from pocket_ledger.ledger.deltas import LedgerDelta, compute_delta, reversal_delta
from pocket_ledger.models.ledger import (
    Account,
    Category,
    Transaction,
    TransactionDraft,
    ValidationIssue,
)
from pocket_ledger.services.storage import (
    SERVER_TIMESTAMP,
    CommitError,
    DocumentStoreInterface,
    Family,
    Increment,
    NotFoundError,
    WriteBatch,
    collection_path,
    document_path,
)
from pocket_ledger.validation import DraftValidator, TransactionValidationError


class LedgerTransactionWriter:
    """
    Applies and reverses transactions against the store.

    GUARANTEES:
    - Drafts are validated before any store call
    - The transaction's sign always follows its category type
    - Reversal uses only the stored transaction snapshot
    """

    def __init__(
        self,
        store: DocumentStoreInterface,
        validator: Optional[DraftValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._validator = validator or DraftValidator()
        self._audit_logger = audit_logger

    async def validate_draft(
        self,
        session: SessionContext,
        draft: TransactionDraft,
        correlation_id: Optional[UUID] = None,
    ) -> list[ValidationIssue]:
        """
        Check a draft without writing anything.

        Returns:
            Warning-level issues (e.g. a future date)

        Raises:
            UnauthenticatedError: No signed-in user
            TransactionValidationError: The draft has error-level issues
        """
        user_id = session.require_user_id()
        try:
            return self._validator.ensure_valid(draft)
        except TransactionValidationError as e:
            if self._audit_logger:
                await self._audit_logger.log_validation_failed(
                    user_id=user_id,
                    issues=[issue.model_dump() for issue in e.issues],
                    correlation_id=correlation_id,
                )
            raise

    async def apply(
        self,
        session: SessionContext,
        draft: TransactionDraft,
        account: Account,
        category: Category,
        correlation_id: Optional[UUID] = None,
    ) -> str:
        """
        Record a new transaction.

        Returns:
            The new transaction's ID

        Raises:
            UnauthenticatedError: No signed-in user
            TransactionValidationError: Bad amount or missing selection
            NotFoundError: Account or category does not exist for this user
            CommitError: The batch failed; nothing was written
        """
        user_id = session.require_user_id()
        await self.validate_draft(session, draft, correlation_id)

        await self._require_exists(user_id, Family.ACCOUNTS, account.id, "Account")
        await self._require_exists(user_id, Family.CATEGORIES, category.id, "Category")

        delta = compute_delta(draft.amount, category.type, category.id, draft.txn_date)

        transactions = collection_path(user_id, Family.TRANSACTIONS)
        transaction_id = self._store.new_document_id(transactions)
        transaction = Transaction(
            id=transaction_id,
            amount=delta.signed_amount,
            currency=account.currency,
            txn_date=draft.txn_date,
            note=draft.note,
            account_id=account.id,
            account_name=account.name,
            category_id=category.id,
            category_name=category.name,
            category_icon=category.icon,
            category_color=category.color,
            category_type=category.type,
        )

        document = transaction.to_document()
        document["createdAt"] = SERVER_TIMESTAMP

        batch = WriteBatch()
        batch.set(document_path(user_id, Family.TRANSACTIONS, transaction_id), document)
        self._add_balance_and_stats(batch, user_id, account.id, delta)

        await self._commit(batch, user_id, "apply", transaction_id, correlation_id)

        if self._audit_logger:
            await self._audit_logger.log_transaction_applied(
                user_id=user_id,
                transaction_id=transaction_id,
                signed_amount=str(delta.signed_amount),
                month_key=delta.month_key,
                correlation_id=correlation_id,
            )
        return transaction_id

    async def reverse(
        self,
        session: SessionContext,
        transaction: Transaction,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """
        Delete a transaction and undo its balance and stats effects.

        The deltas come from the transaction as stored, not from the
        current account or category.

        Raises:
            UnauthenticatedError: No signed-in user
            CommitError: The batch failed (the transaction was already
                reversed, or the account no longer exists); nothing was written
        """
        user_id = session.require_user_id()
        if not transaction.id:
            raise NotFoundError("Transaction has no ID; it was never stored")

        delta = reversal_delta(transaction)

        # Fails if the transaction is already gone, so effects are undone at most once
        batch = WriteBatch()
        batch.delete(
            document_path(user_id, Family.TRANSACTIONS, transaction.id),
            must_exist=True,
        )
        self._add_balance_and_stats(batch, user_id, transaction.account_id, delta)

        await self._commit(batch, user_id, "reverse", transaction.id, correlation_id)

        if self._audit_logger:
            await self._audit_logger.log_transaction_reversed(
                user_id=user_id,
                transaction_id=transaction.id,
                signed_amount=str(delta.signed_amount),
                month_key=delta.month_key,
                correlation_id=correlation_id,
            )

    def _add_balance_and_stats(
        self,
        batch: WriteBatch,
        user_id: str,
        account_id: str,
        delta: LedgerDelta,
    ) -> None:
        batch.update(
            document_path(user_id, Family.ACCOUNTS, account_id),
            {"balance": Increment(delta.signed_amount)},
        )
        batch.set(
            document_path(user_id, Family.MONTHLY_STATS, delta.month_key),
            {name: Increment(amount) for name, amount in delta.stats_patch.items()},
            merge=True,
        )

    async def _require_exists(
        self,
        user_id: str,
        family: Family,
        doc_id: Optional[str],
        label: str,
    ) -> None:
        if not doc_id:
            raise NotFoundError(f"{label} has not been saved")
        if await self._store.get_document(document_path(user_id, family, doc_id)) is None:
            raise NotFoundError(f"{label} not found: {doc_id}")

    async def _commit(
        self,
        batch: WriteBatch,
        user_id: str,
        operation: str,
        transaction_id: str,
        correlation_id: Optional[UUID],
    ) -> None:
        try:
            await self._store.commit(batch)
        except CommitError as e:
            if self._audit_logger:
                await self._audit_logger.log_commit_failed(
                    user_id=user_id,
                    operation=operation,
                    error_message=str(e),
                    entity_id=transaction_id,
                    correlation_id=correlation_id,
                )
            raise
