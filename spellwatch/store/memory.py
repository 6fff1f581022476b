"""In-process document store for tests and local development."""

import copy
import threading
import uuid
from collections import defaultdict
from datetime import datetime, timezone
from typing import Callable, Optional

from loguru import logger

from spellwatch.utils.errors import DocumentExistsError, StoreError
from spellwatch.store.base import SERVER_TIMESTAMP, Document, DocumentStore, WriteBatch


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MemoryWriteBatch(WriteBatch):
    def __init__(self, store: "MemoryStore"):
        self._store = store
        self._ops: list[tuple] = []

    def create(self, collection, doc_id, data):
        self._ops.append(("create", collection, doc_id, data, False))
        return self

    def set(self, collection, doc_id, data, merge=False):
        self._ops.append(("set", collection, doc_id, data, merge))
        return self

    def update(self, collection, doc_id, data):
        self._ops.append(("update", collection, doc_id, data, True))
        return self

    def delete(self, collection, doc_id):
        self._ops.append(("delete", collection, doc_id, None, False))
        return self

    def commit(self) -> None:
        self._store._apply(self._ops)
        self._ops = []


class MemoryStore(DocumentStore):
    """Dict-backed store with the same semantics as the Firestore backend."""

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._collections: dict[str, dict[str, dict]] = defaultdict(dict)
        self._clock = clock or _utcnow
        self._lock = threading.Lock()

    def _resolve(self, data: dict, now: datetime) -> dict:
        resolved = {}
        for key, value in data.items():
            if value is SERVER_TIMESTAMP:
                resolved[key] = now
            elif isinstance(value, dict):
                resolved[key] = self._resolve(value, now)
            else:
                resolved[key] = copy.deepcopy(value)
        return resolved

    def get(self, collection, doc_id):
        with self._lock:
            data = self._collections[collection].get(doc_id)
            return Document(doc_id, copy.deepcopy(data)) if data is not None else None

    def query(self, collection, where=None, order_by=None, descending=False, limit=None):
        with self._lock:
            docs = [
                Document(doc_id, copy.deepcopy(data))
                for doc_id, data in self._collections[collection].items()
                if all(data.get(k) == v for k, v in (where or {}).items())
            ]

        if order_by:
            # Documents without the ordering field are left out
            docs = [d for d in docs if order_by in d.data]
            docs.sort(
                key=lambda d: (d.data[order_by] is not None, d.data[order_by]),
                reverse=descending,
            )
        if limit is not None:
            docs = docs[:limit]
        return docs

    def add(self, collection, data):
        doc_id = self.new_id(collection)
        self.set(collection, doc_id, data)
        return doc_id

    def set(self, collection, doc_id, data, merge=False):
        self._apply([("set", collection, doc_id, data, merge)])

    def delete(self, collection, doc_id):
        self._apply([("delete", collection, doc_id, None, False)])

    def new_id(self, collection):
        return uuid.uuid4().hex[:20]

    def batch(self):
        return MemoryWriteBatch(self)

    def _apply(self, ops: list[tuple]) -> None:
        with self._lock:
            # Validate everything before touching any document
            for op, collection, doc_id, _, _ in ops:
                exists = doc_id in self._collections[collection]
                if op == "create" and exists:
                    raise DocumentExistsError(f"Document {collection}/{doc_id} already exists.")
                if op == "update" and not exists:
                    raise StoreError(f"No document to update: {collection}/{doc_id}")

            now = self._clock()
            for op, collection, doc_id, data, merge in ops:
                docs = self._collections[collection]
                if op == "delete":
                    docs.pop(doc_id, None)
                elif merge and doc_id in docs:
                    docs[doc_id].update(self._resolve(data, now))
                else:
                    docs[doc_id] = self._resolve(data, now)

        logger.debug(f"Committed {len(ops)} write(s) to memory store")

    def clear(self) -> None:
        with self._lock:
            self._collections.clear()
