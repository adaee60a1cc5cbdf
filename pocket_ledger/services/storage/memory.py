"""
In-Memory Document Store

Holds documents in a dict keyed by path. Used by the test suite and for
running the ledger locally without a Firestore project.

Batch semantics match Firestore's:
- every operation is staged first; if any fails, nothing is published
- update() on a missing document fails the whole batch
- Increment adds to the stored value at commit time
- SERVER_TIMESTAMP becomes the commit time
"""

import asyncio
import copy
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional
from uuid import uuid4

from pocket_ledger.services.storage.interface import (
    SERVER_TIMESTAMP,
    CommitError,
    DocumentSnapshot,
    DocumentStoreInterface,
    Increment,
    WriteBatch,
)


def _as_number(value: Any) -> Decimal:
    if isinstance(value, bool) or value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(str(value))
    # Firestore replaces non-numeric values when incrementing
    return Decimal("0")


class InMemoryDocumentStore(DocumentStoreInterface):
    """
    Dict-backed implementation of the document store.

    Args:
        latency: Seconds to wait before applying each commit. Lets tests
            interleave many in-flight commits.
        max_batch_size: Operations allowed per batch.
    """

    def __init__(self, latency: float = 0.0, max_batch_size: int = 500):
        self._documents: dict[str, dict[str, Any]] = {}
        self._latency = latency
        self.max_batch_size = max_batch_size
        self.commit_count = 0

    def new_document_id(self, collection_path: str) -> str:
        return uuid4().hex[:20]

    async def get_document(self, path: str) -> Optional[dict[str, Any]]:
        data = self._documents.get(path)
        return copy.deepcopy(data) if data is not None else None

    async def query_collection(
        self,
        collection_path: str,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[DocumentSnapshot]:
        prefix = collection_path.rstrip("/") + "/"
        snapshots = [
            DocumentSnapshot(
                id=path[len(prefix):],
                path=path,
                data=copy.deepcopy(data),
            )
            for path, data in self._documents.items()
            if path.startswith(prefix) and "/" not in path[len(prefix):]
        ]

        if order_by:
            snapshots = [s for s in snapshots if order_by in s.data]
            snapshots.sort(key=lambda s: s.data[order_by], reverse=descending)

        if limit is not None:
            snapshots = snapshots[:limit]
        return snapshots

    async def commit(self, batch: WriteBatch) -> None:
        if len(batch) > self.max_batch_size:
            raise CommitError(
                f"Batch has {len(batch)} operations; limit is {self.max_batch_size}"
            )

        if self._latency:
            await asyncio.sleep(self._latency)

        # Nothing below awaits, so no other commit can interleave.
        now = datetime.now(timezone.utc)
        staged: dict[str, Optional[dict[str, Any]]] = {}

        for op in batch.operations:
            if op.path in staged:
                current = staged[op.path]
            else:
                current = copy.deepcopy(self._documents.get(op.path))

            if op.kind == "delete":
                if op.must_exist and current is None:
                    raise CommitError(f"No document to delete: {op.path}")
                staged[op.path] = None
            elif op.kind == "set":
                base = current if (op.merge and current is not None) else {}
                staged[op.path] = self._apply_fields(base, op.data or {}, now)
            elif op.kind == "update":
                if current is None:
                    raise CommitError(f"No document to update: {op.path}")
                staged[op.path] = self._apply_fields(current, op.data or {}, now)
            else:
                raise CommitError(f"Unknown write operation: {op.kind}")

        for path, data in staged.items():
            if data is None:
                self._documents.pop(path, None)
            else:
                self._documents[path] = data
        self.commit_count += 1

    @staticmethod
    def _apply_fields(
        base: dict[str, Any],
        fields: dict[str, Any],
        now: datetime,
    ) -> dict[str, Any]:
        for key, value in fields.items():
            if isinstance(value, Increment):
                base[key] = _as_number(base.get(key)) + value.amount
            elif value is SERVER_TIMESTAMP:
                base[key] = now
            else:
                base[key] = copy.deepcopy(value)
        return base

    def document_paths(self) -> list[str]:
        """Every stored path (inspection helper)."""
        return list(self._documents)
