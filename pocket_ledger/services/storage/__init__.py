"""
Storage Services Package

Provides the abstract document store interface and its implementations.
Firestore is the production backend; the in-memory store backs tests
and local runs.
"""

from pocket_ledger.services.storage.interface import (
    SERVER_TIMESTAMP,
    CommitError,
    ConnectionError,
    DocumentSnapshot,
    DocumentStoreInterface,
    Increment,
    NotFoundError,
    StorageError,
    WriteBatch,
    WriteOperation,
)
from pocket_ledger.services.storage.firestore import (
    FirestoreClient,
    FirestoreDocumentStore,
)
from pocket_ledger.services.storage.memory import InMemoryDocumentStore
from pocket_ledger.services.storage.paths import (
    Family,
    collection_path,
    document_path,
    user_path,
)

__all__ = [
    # Interface
    "DocumentSnapshot",
    "DocumentStoreInterface",
    "Increment",
    "SERVER_TIMESTAMP",
    "WriteBatch",
    "WriteOperation",
    # Exceptions
    "CommitError",
    "ConnectionError",
    "NotFoundError",
    "StorageError",
    # Key scheme
    "Family",
    "collection_path",
    "document_path",
    "user_path",
    # Implementations
    "FirestoreClient",
    "FirestoreDocumentStore",
    "InMemoryDocumentStore",
]
