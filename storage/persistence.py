"""Serialize whole entity collections into the key-value store.

Each collection lives under one fixed key as a JSON envelope::

    {"version": 1, "items": [...]}

Saving never raises: failures are logged and reported through a
``StorageResult`` so the in-memory collection stays authoritative.
Loading never raises either: a missing or unreadable blob is an empty
collection.
"""
import json
import logging
import sqlite3
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Generic, Optional, TypeVar

from .db import KeyValueStore

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

BOOKS_KEY = "SavedBooks"
NOTES_KEY = "SavedNotes"
RECOMMENDATIONS_KEY = "SavedRecommendations"

T = TypeVar("T")


class StorageStatus(Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    INVALID_INPUT = "invalid_input"
    STORAGE_ERROR = "storage_error"


@dataclass
class StorageResult:
    """Outcome of a store operation that callers may inspect or ignore."""
    status: StorageStatus = StorageStatus.OK
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status is StorageStatus.OK

    @classmethod
    def success(cls) -> "StorageResult":
        return cls(StorageStatus.OK)

    @classmethod
    def not_found(cls, message: str = "") -> "StorageResult":
        return cls(StorageStatus.NOT_FOUND, message)

    @classmethod
    def invalid(cls, message: str = "") -> "StorageResult":
        return cls(StorageStatus.INVALID_INPUT, message)

    @classmethod
    def failed(cls, message: str = "") -> "StorageResult":
        return cls(StorageStatus.STORAGE_ERROR, message)


class CollectionStore(Generic[T]):
    """Persistence adapter for one named collection."""

    def __init__(self, kv: KeyValueStore, key: str,
                 decode: Callable[[dict], T], encode: Optional[Callable[[T], dict]] = None):
        self.kv = kv
        self.key = key
        self.decode = decode
        self.encode = encode or (lambda record: record.to_dict())

    def save(self, records: list[T]) -> StorageResult:
        """Overwrite the stored blob with the whole collection."""
        try:
            payload = json.dumps(
                {"version": SCHEMA_VERSION, "items": [self.encode(r) for r in records]},
                ensure_ascii=False,
            )
        except (TypeError, ValueError) as e:
            logger.error(f"Failed to serialize {self.key}: {e}")
            return StorageResult.failed(str(e))
        try:
            self.kv.set(self.key, payload)
        except sqlite3.Error as e:
            logger.error(f"Failed to save {self.key}: {e}")
            return StorageResult.failed(str(e))
        logger.debug(f"Saved {len(records)} record(s) under {self.key}")
        return StorageResult.success()

    def load(self) -> list[T]:
        """Read the collection back; anything unreadable becomes empty."""
        try:
            raw = self.kv.get(self.key)
        except sqlite3.Error as e:
            logger.error(f"Failed to read {self.key}: {e}")
            return []
        if raw is None:
            return []

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to load {self.key}: {e}")
            return []

        # Blobs written before the envelope existed are bare lists.
        if isinstance(data, list):
            items = data
        elif isinstance(data, dict) and isinstance(data.get("items"), list):
            version = data.get("version", 0)
            if not isinstance(version, int) or isinstance(version, bool):
                logger.warning(f"Failed to load {self.key}: invalid schema version {version!r}")
                return []
            if version > SCHEMA_VERSION:
                logger.warning(f"{self.key} has newer schema version {version}, reading known fields only")
            items = data["items"]
        else:
            logger.warning(f"Failed to load {self.key}: unexpected payload")
            return []

        try:
            return [self.decode(item) for item in items]
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Failed to load {self.key}: {e}")
            return []

    def clear(self) -> None:
        self.kv.delete(self.key)
