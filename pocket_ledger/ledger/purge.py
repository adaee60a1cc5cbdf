"""
Bulk Purge

Deletes everything a user owns: the four record families under
``users/{uid}`` and then the profile document itself.

A family is drained in chunks. Each round lists up to ``batch_size``
documents and deletes them in one batch, until a listing comes back
empty. The chunk size never exceeds the store's batch limit.

After draining, every family is listed once more. Only when all of them
are empty is the profile removed, so a failed purge always leaves the
profile in place and can simply be run again.
"""

from typing import Optional

from pydantic import BaseModel, Field

from pocket_ledger.audit import AuditLogger
from pocket_ledger.auth import SessionContext
from pocket_ledger.config import get_settings
from pocket_ledger.services.storage import (
    DocumentStoreInterface,
    Family,
    StorageError,
    WriteBatch,
    collection_path,
    user_path,
)


# The profile is not a family; it is deleted separately, last.
PURGE_ORDER = (
    Family.TRANSACTIONS,
    Family.ACCOUNTS,
    Family.CATEGORIES,
    Family.MONTHLY_STATS,
)

PROFILE = "profile"


class PurgeIncompleteError(Exception):
    """
    Some of the user's data is still stored after a purge attempt.

    Attributes:
        user_id: Whose data was being purged
        pending_families: Families (or "profile") not confirmed empty
        cause: The underlying storage error, if any
    """

    def __init__(
        self,
        user_id: str,
        pending_families: list[str],
        cause: Optional[Exception] = None,
    ):
        self.user_id = user_id
        self.pending_families = pending_families
        self.cause = cause
        message = f"Purge incomplete for user {user_id}: {', '.join(pending_families)}"
        if cause is not None:
            message = f"{message} ({cause})"
        super().__init__(message)


class PurgeReport(BaseModel):
    """What a completed purge removed."""

    user_id: str
    deleted_counts: dict[str, int] = Field(default_factory=dict)
    profile_deleted: bool = False

    @property
    def total_deleted(self) -> int:
        return sum(self.deleted_counts.values())


class BulkPurge:
    """Removes all of one user's records."""

    def __init__(
        self,
        store: DocumentStoreInterface,
        batch_size: Optional[int] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        if batch_size is None:
            batch_size = get_settings().ledger.purge_batch_size
        self._batch_size = max(1, min(batch_size, store.max_batch_size))
        self._audit_logger = audit_logger

    @property
    def batch_size(self) -> int:
        return self._batch_size

    async def purge_user(self, session: SessionContext) -> PurgeReport:
        """
        Delete every document the signed-in user owns.

        Raises:
            UnauthenticatedError: No signed-in user
            PurgeIncompleteError: A delete failed or documents remained.
                Running the purge again is safe.
        """
        user_id = session.require_user_id()

        if self._audit_logger:
            await self._audit_logger.log_purge_started(user_id)

        report = PurgeReport(user_id=user_id)

        for index, family in enumerate(PURGE_ORDER):
            try:
                report.deleted_counts[family.value] = await self._drain(user_id, family)
            except StorageError as e:
                pending = [f.value for f in PURGE_ORDER[index:]] + [PROFILE]
                await self._fail(user_id, pending, e)

        try:
            stragglers = await self._non_empty_families(user_id)
        except StorageError as e:
            await self._fail(user_id, [f.value for f in PURGE_ORDER] + [PROFILE], e)

        if stragglers:
            await self._fail(user_id, stragglers + [PROFILE])

        try:
            await self._store.delete_document(user_path(user_id))
        except StorageError as e:
            await self._fail(user_id, [PROFILE], e)
        report.profile_deleted = True

        if self._audit_logger:
            await self._audit_logger.log_purge_completed(user_id, report.deleted_counts)
        return report

    async def _drain(self, user_id: str, family: Family) -> int:
        """Delete a family chunk by chunk until a listing comes back empty."""
        path = collection_path(user_id, family)
        deleted = 0
        while True:
            snapshots = await self._store.query_collection(path, limit=self._batch_size)
            if not snapshots:
                return deleted

            batch = WriteBatch()
            for snapshot in snapshots:
                batch.delete(snapshot.path)
            await self._store.commit(batch)
            deleted += len(snapshots)

    async def _non_empty_families(self, user_id: str) -> list[str]:
        remaining = []
        for family in PURGE_ORDER:
            path = collection_path(user_id, family)
            if await self._store.query_collection(path, limit=1):
                remaining.append(family.value)
        return remaining

    async def _fail(
        self,
        user_id: str,
        pending: list[str],
        cause: Optional[Exception] = None,
    ) -> None:
        if self._audit_logger:
            await self._audit_logger.log_purge_incomplete(
                user_id=user_id,
                pending_families=pending,
                error_message=str(cause) if cause else "documents remained after purge",
            )
        raise PurgeIncompleteError(user_id, pending, cause) from cause
