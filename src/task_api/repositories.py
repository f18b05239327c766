from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from threading import RLock
from typing import Any, Dict, Iterator, List, Optional

from .filters import Filter, check_field_name, matches
from .settings import get_settings

logger = logging.getLogger(__name__)

Document = Dict[str, Any]


@dataclass(frozen=True)
class SortSpec:
    """
    Single-key sort for repository queries.

    Documents missing the field sort before documents that have it. Documents
    comparing equal keep their insertion order in both directions.
    """
    field: str
    descending: bool = False


# PUBLIC_INTERFACE
class DocumentRepository(ABC):
    """Abstract repository contract for one collection of documents."""

    @abstractmethod
    def find(
        self,
        flt: Filter,
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> Iterator[Document]:
        """Yield copies of the documents matching ``flt`` in sort order, after skip/limit."""

    @abstractmethod
    def count(self, flt: Filter) -> int:
        """Return the number of documents matching ``flt``."""

    @abstractmethod
    def insert(self, doc: Document) -> Document:
        """Store a new document and return a copy of it."""

    @abstractmethod
    def update_one(self, flt: Filter, changes: Document) -> bool:
        """Set ``changes`` on the first document matching ``flt``. Return False if none matched."""

    @abstractmethod
    def delete_one(self, flt: Filter) -> bool:
        """Delete the first document matching ``flt``. Return False if none matched."""

    def find_one(self, flt: Filter) -> Optional[Document]:
        """Return the first document matching ``flt``, or None."""
        return next(iter(self.find(flt, limit=1)), None)


def _sort_key(field: str):
    def key(doc: Document):
        value = doc.get(field)
        return (value is not None, value)
    return key


class InMemoryRepository(DocumentRepository):
    """
    Thread-safe in-memory repository suitable for testing and default runtime.
    Documents are kept in insertion order.
    """

    def __init__(self, name: str = "documents") -> None:
        self.name = name
        self._lock = RLock()
        self._items: Dict[int, Document] = {}
        self._next_seq = 1

    def _matching(self, flt: Filter) -> List[Document]:
        with self._lock:
            return [doc for doc in self._items.values() if matches(doc, flt)]

    def find(
        self,
        flt: Filter,
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> Iterator[Document]:
        items = self._matching(flt)
        if sort is not None:
            check_field_name(sort.field)
            # sorted() is stable and keeps equal keys in insertion order even with reverse=True
            items = sorted(items, key=_sort_key(sort.field), reverse=sort.descending)
        start = max(skip, 0)
        end = None if limit is None else start + max(limit, 0)
        for doc in items[start:end]:
            # Return copies to avoid external mutation
            yield dict(doc)

    def count(self, flt: Filter) -> int:
        return len(self._matching(flt))

    def insert(self, doc: Document) -> Document:
        with self._lock:
            self._items[self._next_seq] = dict(doc)
            self._next_seq += 1
        return dict(doc)

    def _first_key(self, flt: Filter) -> Optional[int]:
        for key, doc in self._items.items():
            if matches(doc, flt):
                return key
        return None

    def update_one(self, flt: Filter, changes: Document) -> bool:
        with self._lock:
            key = self._first_key(flt)
            if key is None:
                return False
            updated = dict(self._items[key])
            updated.update(changes)
            self._items[key] = updated
            return True

    def delete_one(self, flt: Filter) -> bool:
        with self._lock:
            key = self._first_key(flt)
            if key is None:
                return False
            del self._items[key]
            return True


# PUBLIC_INTERFACE
def get_repository(collection: str) -> DocumentRepository:
    """
    Factory returning the configured repository for a collection.
    - memory: InMemoryRepository
    - sqlite: SQLiteRepository storing the collection in its own table
    """
    settings = get_settings()
    if settings.persistence_backend == "sqlite":
        from .db import SQLiteRepository

        logger.info("Using SQLite repository for %s at %s", collection, settings.sqlite_db_path)
        return SQLiteRepository(settings.sqlite_db_path, collection)
    logger.info("Using in-memory repository for %s", collection)
    return InMemoryRepository(collection)
