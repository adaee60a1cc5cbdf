"""
Google Cloud Firestore Storage Implementation

DESIGN DECISION: Firestore is the production backend because:
1. Write batches are atomic (all-or-nothing visibility)
2. Increment transforms are applied server-side, so concurrent writers
   never lose updates
3. Set-with-merge gives lazy creation of monthly buckets for free

TRADEOFFS:
- Numbers are stored as doubles; Decimal values are converted on the way
  in and out
- A batch carries at most 500 writes (bulk purge chunks accordingly)

Reads and connection setup are retried with backoff. Commits are NOT:
a blindly retried insert would be applied twice.
"""

from decimal import Decimal
from typing import Any, Optional

from google.api_core import exceptions as google_exceptions
from google.cloud import firestore
from google.oauth2.service_account import Credentials
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from pocket_ledger.config import FIRESTORE_MAX_BATCH_SIZE, get_settings
from pocket_ledger.services.storage.interface import (
    SERVER_TIMESTAMP,
    CommitError,
    ConnectionError,
    DocumentSnapshot,
    DocumentStoreInterface,
    Increment,
    StorageError,
    WriteBatch,
)


TRANSIENT_ERRORS = (
    google_exceptions.ServiceUnavailable,
    google_exceptions.DeadlineExceeded,
    google_exceptions.InternalServerError,
)


def _to_firestore(value: Any) -> Any:
    """Convert ledger values to what the Firestore client accepts."""
    if isinstance(value, Increment):
        return firestore.Increment(float(value.amount))
    if value is SERVER_TIMESTAMP:
        return firestore.SERVER_TIMESTAMP
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, dict):
        return {k: _to_firestore(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_to_firestore(v) for v in value]
    return value


def _from_firestore(value: Any) -> Any:
    """Convert stored doubles back to Decimal."""
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {k: _from_firestore(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_from_firestore(v) for v in value]
    return value


class FirestoreClient:
    """
    Low-level Firestore client wrapper.

    Handles authentication and provides retry logic for connecting.
    """

    def __init__(self):
        self._db: Optional[firestore.AsyncClient] = None
        self._settings = get_settings().firestore

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> firestore.AsyncClient:
        """
        Establish the Firestore client.

        Uses service account credentials for authentication.
        """
        if self._db is None:
            try:
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=["https://www.googleapis.com/auth/datastore"],
                )
                self._db = firestore.AsyncClient(
                    project=self._settings.project_id,
                    credentials=credentials,
                    database=self._settings.database,
                )
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Firestore: {e}")

        return self._db


class FirestoreDocumentStore(DocumentStoreInterface):
    """
    Firestore implementation of the document store.

    Paths are passed through unchanged: ``users/{uid}/accounts/{id}``
    is the Firestore document path.
    """

    max_batch_size = FIRESTORE_MAX_BATCH_SIZE

    def __init__(self, client: Optional[FirestoreClient] = None):
        self._client = client or FirestoreClient()

    def new_document_id(self, collection_path: str) -> str:
        return self._client.connect().collection(collection_path).document().id

    @retry(
        retry=retry_if_exception_type(TRANSIENT_ERRORS),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        reraise=True,
    )
    async def _read_document(self, path: str):
        return await self._client.connect().document(path).get()

    @retry(
        retry=retry_if_exception_type(TRANSIENT_ERRORS),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        reraise=True,
    )
    async def _run_query(self, query) -> list:
        return [snapshot async for snapshot in query.stream()]

    async def get_document(self, path: str) -> Optional[dict[str, Any]]:
        """Read one document."""
        try:
            snapshot = await self._read_document(path)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to read {path}: {e}")

        if not snapshot.exists:
            return None
        return _from_firestore(snapshot.to_dict() or {})

    async def query_collection(
        self,
        collection_path: str,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[DocumentSnapshot]:
        """List documents of one collection."""
        try:
            query = self._client.connect().collection(collection_path)
            if order_by:
                direction = (
                    firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
                )
                query = query.order_by(order_by, direction=direction)
            if limit is not None:
                query = query.limit(limit)
            snapshots = await self._run_query(query)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to query {collection_path}: {e}")

        return [
            DocumentSnapshot(
                id=snapshot.id,
                path=snapshot.reference.path,
                data=_from_firestore(snapshot.to_dict() or {}),
            )
            for snapshot in snapshots
        ]

    async def commit(self, batch: WriteBatch) -> None:
        """Commit once; failures surface as CommitError."""
        if len(batch) > self.max_batch_size:
            raise CommitError(
                f"Batch has {len(batch)} operations; limit is {self.max_batch_size}"
            )

        try:
            db = self._client.connect()
            firestore_batch = db.batch()
            for op in batch.operations:
                ref = db.document(op.path)
                if op.kind == "set":
                    firestore_batch.set(ref, _to_firestore(op.data), merge=op.merge)
                elif op.kind == "update":
                    firestore_batch.update(ref, _to_firestore(op.data))
                elif op.kind == "delete":
                    option = db.write_option(exists=True) if op.must_exist else None
                    firestore_batch.delete(ref, option=option)
                else:
                    raise ValueError(f"Unknown write operation: {op.kind}")
            await firestore_batch.commit()
        except Exception as e:
            raise CommitError(f"Failed to commit batch of {len(batch)} writes: {e}")
