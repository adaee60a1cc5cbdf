"""
Abstract Document Store Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Run on Firestore in production
2. Use in-memory storage for testing
3. Keep the ledger logic decoupled from the storage product

The interface is intentionally small - get, query and atomic batch commit.
Numeric fields are changed with the Increment sentinel so the store
applies the addition itself. The ledger never reads a balance in order
to write it back.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Optional


class _ServerTimestamp:
    """Sentinel replaced by the store's clock at commit time."""

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


@dataclass(frozen=True)
class Increment:
    """Add ``amount`` to the stored numeric field (missing counts as zero)."""

    amount: Decimal


@dataclass(frozen=True)
class DocumentSnapshot:
    """A stored document: its ID (last path segment) and its fields."""

    id: str
    path: str
    data: dict[str, Any]


@dataclass(frozen=True)
class WriteOperation:
    kind: str  # "set" | "update" | "delete"
    path: str
    data: Optional[dict[str, Any]] = None
    merge: bool = False
    must_exist: bool = False


@dataclass
class WriteBatch:
    """
    Writes that become visible together or not at all.

    Build it up, then hand it to DocumentStoreInterface.commit().
    """

    operations: list[WriteOperation] = field(default_factory=list)

    def set(self, path: str, data: dict[str, Any], merge: bool = False) -> "WriteBatch":
        """Create or overwrite a document; with merge=True only the given fields change."""
        self.operations.append(WriteOperation("set", path, dict(data), merge))
        return self

    def update(self, path: str, data: dict[str, Any]) -> "WriteBatch":
        """Change fields of an existing document. The commit fails if it is missing."""
        self.operations.append(WriteOperation("update", path, dict(data)))
        return self

    def delete(self, path: str, must_exist: bool = False) -> "WriteBatch":
        """Remove a document; with must_exist=True the commit fails if it is already gone."""
        self.operations.append(WriteOperation("delete", path, must_exist=must_exist))
        return self

    def __len__(self) -> int:
        return len(self.operations)


class DocumentStoreInterface(ABC):
    """
    Abstract interface for the document store.

    Any storage implementation (Firestore, in-memory, ...)
    must implement these methods.
    """

    #: Largest number of operations a single batch may carry.
    max_batch_size: int = 500

    @abstractmethod
    def new_document_id(self, collection_path: str) -> str:
        """
        Reserve a fresh document ID in a collection.

        Args:
            collection_path: e.g. ``users/{uid}/transactions``

        Returns:
            An ID no existing document in that collection uses
        """
        pass

    @abstractmethod
    async def get_document(self, path: str) -> Optional[dict[str, Any]]:
        """
        Read one document.

        Args:
            path: Full document path

        Returns:
            The document's fields, or None if it does not exist

        Raises:
            StorageError: If the read fails
        """
        pass

    @abstractmethod
    async def query_collection(
        self,
        collection_path: str,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[DocumentSnapshot]:
        """
        List documents of one collection.

        Args:
            collection_path: Collection to read
            order_by: Field to sort on (documents missing it are skipped)
            descending: Sort direction
            limit: Maximum number of documents

        Returns:
            Matching documents

        Raises:
            StorageError: If the read fails
        """
        pass

    @abstractmethod
    async def commit(self, batch: WriteBatch) -> None:
        """
        Apply every operation in the batch atomically.

        Args:
            batch: The writes to apply

        Raises:
            CommitError: If the batch could not be committed. Nothing
                from the batch is visible in that case.
        """
        pass

    async def set_document(self, path: str, data: dict[str, Any], merge: bool = False) -> None:
        await self.commit(WriteBatch().set(path, data, merge=merge))

    async def update_document(self, path: str, data: dict[str, Any]) -> None:
        await self.commit(WriteBatch().update(path, data))

    async def delete_document(self, path: str) -> None:
        await self.commit(WriteBatch().delete(path))


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class CommitError(StorageError):
    """
    An atomic batch failed to commit.

    No part of the batch is visible. Do not retry blindly: a retried
    insert would be applied twice.
    """
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
