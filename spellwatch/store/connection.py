"""Firestore database connection."""

from contextlib import contextmanager
from typing import Generator, Optional

from google.api_core import exceptions as gcp_exceptions
from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter
from loguru import logger

from spellwatch.store.base import SERVER_TIMESTAMP, Document, DocumentStore, WriteBatch
from spellwatch.utils.config import FirestoreConfig
from spellwatch.utils.errors import DocumentExistsError, StoreError


def _to_firestore(data: dict) -> dict:
    converted = {}
    for key, value in data.items():
        if value is SERVER_TIMESTAMP:
            converted[key] = firestore.SERVER_TIMESTAMP
        elif isinstance(value, dict):
            converted[key] = _to_firestore(value)
        else:
            converted[key] = value
    return converted


@contextmanager
def _translate_errors(action: str) -> Generator[None, None, None]:
    try:
        yield
    except gcp_exceptions.Conflict as e:
        logger.warning(f"Firestore {action} conflict: {e}")
        raise DocumentExistsError(str(e)) from e
    except gcp_exceptions.GoogleAPIError as e:
        logger.error(f"Firestore {action} failed: {e}")
        raise StoreError(f"Firestore {action} failed: {e}") from e


class FirestoreWriteBatch(WriteBatch):
    def __init__(self, client: firestore.Client):
        self._client = client
        self._batch = client.batch()

    def _ref(self, collection: str, doc_id: str):
        return self._client.collection(collection).document(doc_id)

    def create(self, collection, doc_id, data):
        self._batch.create(self._ref(collection, doc_id), _to_firestore(data))
        return self

    def set(self, collection, doc_id, data, merge=False):
        self._batch.set(self._ref(collection, doc_id), _to_firestore(data), merge=merge)
        return self

    def update(self, collection, doc_id, data):
        self._batch.update(self._ref(collection, doc_id), _to_firestore(data))
        return self

    def delete(self, collection, doc_id):
        self._batch.delete(self._ref(collection, doc_id))
        return self

    def commit(self) -> None:
        with _translate_errors("batch commit"):
            self._batch.commit()


class FirestoreStore(DocumentStore):
    """Firestore-backed store. The client is created lazily on first use."""

    def __init__(self, config: FirestoreConfig, client: Optional[firestore.Client] = None):
        self.config = config
        self._client = client

    def _connect(self):
        try:
            if self.config.credentials_file:
                self._client = firestore.Client.from_service_account_json(
                    self.config.credentials_file,
                    project=self.config.project_id,
                    database=self.config.database,
                )
            else:
                self._client = firestore.Client(
                    project=self.config.project_id,
                    database=self.config.database,
                )
            logger.info(f"Connected to Firestore project {self._client.project}")
        except Exception as e:
            logger.error(f"Firestore connection failed: {e}")
            raise StoreError(
                "Failed to initialize Firestore. Check FIRESTORE_PROJECT_ID and GOOGLE_APPLICATION_CREDENTIALS."
            ) from e

    @property
    def client(self) -> firestore.Client:
        if self._client is None:
            self._connect()
        return self._client

    def get(self, collection, doc_id):
        with _translate_errors("get"):
            snapshot = self.client.collection(collection).document(doc_id).get()
        if not snapshot.exists:
            return None
        return Document(snapshot.id, snapshot.to_dict())

    def query(self, collection, where=None, order_by=None, descending=False, limit=None):
        q = self.client.collection(collection)
        for field_name, value in (where or {}).items():
            q = q.where(filter=FieldFilter(field_name, "==", value))
        if order_by:
            direction = firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
            q = q.order_by(order_by, direction=direction)
        if limit is not None:
            q = q.limit(limit)
        with _translate_errors("query"):
            return [Document(doc.id, doc.to_dict()) for doc in q.stream()]

    def add(self, collection, data):
        with _translate_errors("add"):
            _, ref = self.client.collection(collection).add(_to_firestore(data))
        return ref.id

    def set(self, collection, doc_id, data, merge=False):
        with _translate_errors("set"):
            self.client.collection(collection).document(doc_id).set(_to_firestore(data), merge=merge)

    def delete(self, collection, doc_id):
        with _translate_errors("delete"):
            self.client.collection(collection).document(doc_id).delete()

    def new_id(self, collection):
        return self.client.collection(collection).document().id

    def batch(self):
        return FirestoreWriteBatch(self.client)

    def health_check(self) -> bool:
        try:
            next(iter(self.client.collections()), None)
            return True
        except Exception:
            return False

    def close(self):
        if self._client:
            self._client.close()
            self._client = None
