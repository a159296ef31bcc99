# Storage layer
from .db import connect, KeyValueStore, MEMORY, SCHEMA_SQL
from .persistence import CollectionStore, StorageResult, StorageStatus
from .repository import BookRepository, NoteRepository, RecommendationRepository

__all__ = [
    "connect",
    "KeyValueStore",
    "MEMORY",
    "SCHEMA_SQL",
    "CollectionStore",
    "StorageResult",
    "StorageStatus",
    "BookRepository",
    "NoteRepository",
    "RecommendationRepository",
]
