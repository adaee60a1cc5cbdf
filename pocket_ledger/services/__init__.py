"""
Services package.

Storage lives in ``services.storage``. The account, category and user
collaborators are imported from their own modules.
"""

from pocket_ledger.services.storage import (
    CommitError,
    ConnectionError,
    DocumentStoreInterface,
    FirestoreDocumentStore,
    InMemoryDocumentStore,
    NotFoundError,
    StorageError,
)

__all__ = [
    "CommitError",
    "ConnectionError",
    "DocumentStoreInterface",
    "FirestoreDocumentStore",
    "InMemoryDocumentStore",
    "NotFoundError",
    "StorageError",
]
