import logging
import threading
from typing import Callable, Generic, Optional, TypeVar

from core import Book, Note, Recommendation
from .db import KeyValueStore
from .persistence import (
    BOOKS_KEY,
    NOTES_KEY,
    RECOMMENDATIONS_KEY,
    CollectionStore,
    StorageResult,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EntityRepository(Generic[T]):
    """In-memory ordered collection, re-saved in full after every mutation."""

    def __init__(self, store: CollectionStore[T]):
        self.store = store
        self._lock = threading.RLock()
        self._items: list[T] = store.load()
        self.last_result: StorageResult = StorageResult.success()

    def _persist(self) -> StorageResult:
        self.last_result = self.store.save(self._items)
        return self.last_result

    def __len__(self) -> int:
        return len(self._items)

    def _index_of(self, record_id: str) -> Optional[int]:
        for index, item in enumerate(self._items):
            if item.id == record_id:
                return index
        return None

    def add(self, record: T) -> StorageResult:
        """Append a record that already carries its id."""
        with self._lock:
            self._items.append(record)
            return self._persist()

    def add_many(self, records: list[T]) -> StorageResult:
        with self._lock:
            self._items.extend(records)
            return self._persist()

    def get(self, record_id: str) -> Optional[T]:
        """Get a record by ID."""
        with self._lock:
            index = self._index_of(record_id)
            return self._items[index] if index is not None else None

    def list_all(self) -> list[T]:
        """Snapshot of the collection in insertion order."""
        with self._lock:
            return list(self._items)

    def update(self, record: T) -> StorageResult:
        """Replace in place; unknown ids are ignored."""
        with self._lock:
            index = self._index_of(record.id)
            if index is None:
                logger.debug(f"Update skipped, no record {record.id}")
                return StorageResult.not_found(record.id)
            self._items[index] = record
            return self._persist()

    def modify(self, record_id: str, change: Callable[[T], None]) -> StorageResult:
        """Apply ``change`` to the stored record and persist."""
        with self._lock:
            index = self._index_of(record_id)
            if index is None:
                logger.debug(f"Modify skipped, no record {record_id}")
                return StorageResult.not_found(record_id)
            change(self._items[index])
            return self._persist()

    def delete(self, record_id: str) -> int:
        return self.delete_where(lambda item: item.id == record_id)

    def delete_where(self, predicate: Callable[[T], bool]) -> int:
        """Remove every matching record and return how many went."""
        with self._lock:
            kept = [item for item in self._items if not predicate(item)]
            removed = len(self._items) - len(kept)
            self._items = kept
            self._persist()
            return removed

    def replace_all(self, records: list[T]) -> StorageResult:
        with self._lock:
            self._items = list(records)
            return self._persist()


class BookRepository(EntityRepository[Book]):
    """Repository for Book records."""

    def __init__(self, kv: KeyValueStore):
        super().__init__(CollectionStore(kv, BOOKS_KEY, Book.from_dict))


class NoteRepository(EntityRepository[Note]):
    """Repository for Note records."""

    def __init__(self, kv: KeyValueStore):
        super().__init__(CollectionStore(kv, NOTES_KEY, Note.from_dict))

    def get_by_book(self, book_id: str) -> list[Note]:
        return [note for note in self.list_all() if note.book_id == book_id]


class RecommendationRepository(EntityRepository[Recommendation]):
    """Repository for Recommendation records."""

    def __init__(self, kv: KeyValueStore):
        super().__init__(CollectionStore(kv, RECOMMENDATIONS_KEY, Recommendation.from_dict))
