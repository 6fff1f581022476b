"""Document store interface shared by every backend."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


class _ServerTimestamp:
    """Placeholder replaced by the store's clock at write time."""

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


@dataclass
class Document:
    doc_id: str
    data: dict


class WriteBatch(ABC):
    """Atomic multi-document write. Nothing is applied until ``commit``."""

    @abstractmethod
    def create(self, collection: str, doc_id: str, data: dict) -> "WriteBatch":
        """Write a new document; the whole commit fails if it already exists."""

    @abstractmethod
    def set(self, collection: str, doc_id: str, data: dict, merge: bool = False) -> "WriteBatch":
        ...

    @abstractmethod
    def update(self, collection: str, doc_id: str, data: dict) -> "WriteBatch":
        """Patch an existing document; the whole commit fails if it is missing."""

    @abstractmethod
    def delete(self, collection: str, doc_id: str) -> "WriteBatch":
        ...

    @abstractmethod
    def commit(self) -> None:
        ...


class DocumentStore(ABC):
    """Collection CRUD with equality filters, ordering, limit and batches."""

    @abstractmethod
    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        ...

    @abstractmethod
    def query(
        self,
        collection: str,
        where: Optional[dict] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[Document]:
        ...

    @abstractmethod
    def add(self, collection: str, data: dict) -> str:
        """Store a document under a generated id and return the id."""

    @abstractmethod
    def set(self, collection: str, doc_id: str, data: dict, merge: bool = False) -> None:
        ...

    @abstractmethod
    def delete(self, collection: str, doc_id: str) -> None:
        ...

    @abstractmethod
    def new_id(self, collection: str) -> str:
        ...

    @abstractmethod
    def batch(self) -> WriteBatch:
        ...

    def health_check(self) -> bool:
        return True

    def close(self) -> None:
        pass
