# Service layer
import logging
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from recommender import RecommendationEngine, source_from_config
from storage import (
    BookRepository,
    KeyValueStore,
    NoteRepository,
    RecommendationRepository,
    connect,
)
from .library_service import BookService
from .note_service import NoteService
from .recommendation_service import RecommendationService
from .report_service import ReportService

logger = logging.getLogger(__name__)


@dataclass
class Library:
    """Every service wired to one key-value store."""
    kv: KeyValueStore
    books: BookService
    notes: NoteService
    recommendations: RecommendationService
    reports: ReportService

    def close(self) -> None:
        self.recommendations.shutdown()
        self.kv.conn.close()


def open_library(db_path: Union[Path, str], config: Optional[dict] = None,
                 engine: Optional[RecommendationEngine] = None,
                 rng: Optional[random.Random] = None,
                 seed_sample_books: Optional[bool] = None,
                 generate_if_empty: bool = True) -> Library:
    """Open the store, then build each service after the ones it reads from."""
    config = config or {}
    kv = KeyValueStore(connect(db_path))

    books = BookService(BookRepository(kv))
    if seed_sample_books is None:
        seed_sample_books = config.get("seed_sample_books", True)
    if seed_sample_books:
        books.seed_sample_books()

    notes = NoteService(NoteRepository(kv))
    engine = engine or RecommendationEngine(source_from_config(config))
    recommendations = RecommendationService(
        RecommendationRepository(kv), books, notes,
        engine=engine, rng=rng, generate_if_empty=generate_if_empty,
    )
    reports = ReportService(books, notes, recommendations, kv)
    logger.debug(f"Library opened at {db_path}")
    return Library(kv, books, notes, recommendations, reports)


__all__ = [
    "Library",
    "open_library",
    "BookService",
    "NoteService",
    "RecommendationService",
    "ReportService",
]
