"""
Account Service

CRUD for the user's accounts plus one-time default seeding.

IMPORTANT: The balance belongs to the ledger writer. Edits made here
never write the balance field, so they cannot clobber an increment
that lands at the same time.
"""

from typing import Any, Optional

from pydantic.alias_generators import to_camel

from pocket_ledger.audit import AuditLogger
from pocket_ledger.auth import SessionContext
from pocket_ledger.config import get_settings
from pocket_ledger.models.ledger import DEFAULT_ACCOUNT, Account
from pocket_ledger.services.storage import (
    DocumentStoreInterface,
    Family,
    NotFoundError,
    collection_path,
    document_path,
)


# Fields an edit may never write
PROTECTED_FIELDS = {"id", "balance"}


class AccountService:
    """Reads and edits accounts under ``users/{uid}/accounts``."""

    def __init__(
        self,
        store: DocumentStoreInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._audit_logger = audit_logger

    async def list_accounts(self, session: SessionContext) -> list[Account]:
        user_id = session.require_user_id()
        snapshots = await self._store.query_collection(
            collection_path(user_id, Family.ACCOUNTS)
        )
        return [Account.from_document(s.id, s.data) for s in snapshots]

    async def get_account(
        self,
        session: SessionContext,
        account_id: str,
    ) -> Optional[Account]:
        """Returns None when the account does not exist."""
        user_id = session.require_user_id()
        data = await self._store.get_document(
            document_path(user_id, Family.ACCOUNTS, account_id)
        )
        if data is None:
            return None
        return Account.from_document(account_id, data)

    async def add_account(self, session: SessionContext, account: Account) -> str:
        """
        Store a new account.

        The account's balance is stored as its opening balance.

        Returns:
            The new account's ID
        """
        user_id = session.require_user_id()
        account_id = self._store.new_document_id(collection_path(user_id, Family.ACCOUNTS))
        await self._store.set_document(
            document_path(user_id, Family.ACCOUNTS, account_id),
            account.to_document(),
        )
        return account_id

    async def update_account(
        self,
        session: SessionContext,
        account_id: str,
        changes: dict[str, Any],
    ) -> Account:
        """
        Change some fields of an account.

        Args:
            changes: Attribute name -> new value. ``balance`` and ``id``
                are ignored.

        Returns:
            The account as it looks after the edit (balance as last read)

        Raises:
            NotFoundError: The account does not exist
            pydantic.ValidationError: A new value is invalid
        """
        current = await self.get_account(session, account_id)
        if current is None:
            raise NotFoundError(f"Account not found: {account_id}")

        changes = {k: v for k, v in changes.items() if k not in PROTECTED_FIELDS}
        unknown = set(changes) - set(Account.model_fields)
        if unknown:
            raise ValueError(f"Unknown account fields: {sorted(unknown)}")
        if not changes:
            return current

        updated = Account.model_validate({**current.model_dump(), **changes})
        stored = updated.to_document()
        fields = [to_camel(name) for name in changes]

        user_id = session.require_user_id()
        await self._store.update_document(
            document_path(user_id, Family.ACCOUNTS, account_id),
            {name: stored[name] for name in fields},
        )
        return updated

    async def delete_account(self, session: SessionContext, account_id: str) -> None:
        """
        Delete an account.

        Transactions that reference it are left as they are.
        """
        user_id = session.require_user_id()
        await self._store.delete_document(
            document_path(user_id, Family.ACCOUNTS, account_id)
        )

    async def initialize_default_account(self, session: SessionContext) -> Optional[str]:
        """
        Seed the default wallet if the user has no accounts yet.

        Returns:
            The new account's ID, or None if accounts already existed
        """
        user_id = session.require_user_id()
        existing = await self._store.query_collection(
            collection_path(user_id, Family.ACCOUNTS), limit=1
        )
        if existing:
            return None

        default = DEFAULT_ACCOUNT.model_copy(
            update={"currency": get_settings().ledger.default_currency}
        )
        account_id = await self.add_account(session, default)

        if self._audit_logger:
            await self._audit_logger.log_defaults_seeded(user_id, Family.ACCOUNTS.value, 1)
        return account_id
