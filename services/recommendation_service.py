# Recommendation Service
"""
Stores generated recommendations and applies reader actions to them.

Generation moves Idle -> Generating -> Idle. A request made while a run
is in flight gets that run's future back instead of starting another.
"""
import logging
import random
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional

from core import Book, ConfidenceLevel, Recommendation, RecommendationType, clamp
from query import RecommendationQuery, filter_recommendations, top_recommendations
from recommender import RecommendationEngine, default_engine
from storage import RecommendationRepository, StorageResult
from .library_service import BookService
from .note_service import NoteService

logger = logging.getLogger(__name__)

MIN_PAGES = 150
MAX_PAGES = 500


def preview_content(rec: Recommendation) -> str:
    """Placeholder text for a book added from a recommendation."""
    return f"""# {rec.title}

## Synopsis
{rec.synopsis}

## Chapter 1: The Beginning

Every great story begins with a single word, a single thought, a single moment of inspiration. In "{rec.title}", {rec.author} crafts a narrative that captivates from the very first page.

The story unfolds in the {rec.genre.lower()} tradition, bringing together elements that made this book a match for your reading history.

## Chapter 2: Development

{rec.reason}

[This is a preview of the full book content.]
"""


class RecommendationService:
    """Service for recommendation generation, ranking and actions."""

    def __init__(self, repo: RecommendationRepository, books: BookService, notes: NoteService,
                 engine: Optional[RecommendationEngine] = None,
                 rng: Optional[random.Random] = None,
                 generate_if_empty: bool = True):
        self.repo = repo
        self.books = books
        self.notes = notes
        self.engine = engine or default_engine
        self.rng = rng or random.Random()
        self._lock = threading.Lock()
        self._executor: Optional[ThreadPoolExecutor] = None
        self._in_flight: Optional[Future] = None
        self.is_generating = False

        if generate_if_empty and not len(self.repo):
            self.generate()

    @property
    def recommendations(self) -> list[Recommendation]:
        return self.repo.list_all()

    # Generation

    def _begin(self) -> bool:
        with self._lock:
            if self.is_generating:
                return False
            self.is_generating = True
            return True

    def _publish(self, recommendations: list[Recommendation]) -> None:
        self.repo.replace_all(recommendations)
        logger.info(f"Published {len(recommendations)} recommendation(s)")

    def _finish(self) -> None:
        with self._lock:
            self.is_generating = False
            self._in_flight = None

    def generate(self) -> list[Recommendation]:
        """Generate on the calling thread. A no-op while another run is in flight."""
        if not self._begin():
            logger.info("Generation already running, request ignored")
            return self.recommendations
        try:
            result = self.engine.generate(self.books.books, self.notes.notes)
            self._publish(result)
            return result
        finally:
            self._finish()

    def generate_in_background(self) -> Future:
        """Generate on the worker thread and publish when done.

        Returns the in-flight future when a run is already going.
        """
        with self._lock:
            if self.is_generating and self._in_flight is not None:
                logger.info("Generation already running, returning in-flight run")
                return self._in_flight
            if self.is_generating:
                done: Future = Future()
                done.set_result(self.recommendations)
                return done
            self.is_generating = True
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="recommender")
            # Snapshots; the worker never touches live collections.
            future = self._executor.submit(self._run, self.books.books, self.notes.notes)
            self._in_flight = future
            return future

    def _run(self, books: list[Book], notes) -> list[Recommendation]:
        try:
            result = self.engine.generate(books, notes)
            self._publish(result)
            return result
        except Exception as e:
            logger.error(f"Recommendation generation failed: {e}", exc_info=True)
            raise
        finally:
            self._finish()

    def refresh(self) -> list[Recommendation]:
        self.repo.replace_all([])
        return self.generate()

    def shutdown(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    # CRUD

    def add(self, recommendation: Recommendation) -> StorageResult:
        return self.repo.add(recommendation)

    def update(self, recommendation: Recommendation) -> StorageResult:
        return self.repo.update(recommendation)

    def delete(self, recommendation_id: str) -> int:
        return self.repo.delete(recommendation_id)

    def get(self, recommendation_id: str) -> Optional[Recommendation]:
        return self.repo.get(recommendation_id)

    # Actions

    def mark_as_read(self, recommendation_id: str) -> StorageResult:
        def change(rec: Recommendation) -> None:
            rec.is_read = True
        return self.repo.modify(recommendation_id, change)

    def add_to_library(self, recommendation_id: str) -> Optional[Book]:
        """Copy the recommendation into the library as a new book."""
        rec = self.repo.get(recommendation_id)
        if rec is None:
            logger.debug(f"No recommendation {recommendation_id} to add")
            return None
        book = Book(
            title=rec.title,
            author=rec.author,
            genre=rec.genre,
            synopsis=rec.synopsis,
            content=preview_content(rec),
            total_pages=self.rng.randint(MIN_PAGES, MAX_PAGES),
        )
        self.books.add_book(book)

        def change(r: Recommendation) -> None:
            r.is_in_library = True
        self.repo.modify(recommendation_id, change)
        return book

    def rate(self, recommendation_id: str, rating: float) -> StorageResult:
        def change(rec: Recommendation) -> None:
            rec.rating = clamp(float(rating), 0.0, 5.0)
        return self.repo.modify(recommendation_id, change)

    # Views

    def personalized(self, limit: int = 10) -> list[Recommendation]:
        scored = self.engine.rank(self.recommendations, self.books.books, limit=limit)
        return [s.recommendation for s in scored]

    def similar_to(self, book: Book, limit: int = 5) -> list[Recommendation]:
        return self.engine.similar_to(self.recommendations, book, limit=limit)

    def by_type(self, rec_type: RecommendationType) -> list[Recommendation]:
        return filter_recommendations(self.recommendations, RecommendationQuery(type=rec_type))

    def by_confidence_level(self, level: ConfidenceLevel) -> list[Recommendation]:
        return filter_recommendations(self.recommendations, RecommendationQuery(confidence_level=level))

    def unread(self) -> list[Recommendation]:
        return filter_recommendations(self.recommendations, RecommendationQuery(unread_only=True))

    def not_in_library(self) -> list[Recommendation]:
        return filter_recommendations(self.recommendations, RecommendationQuery(not_in_library_only=True))

    def search(self, query: str) -> list[Recommendation]:
        return filter_recommendations(self.recommendations, RecommendationQuery(query=query))

    def top(self, limit: int = 5) -> list[Recommendation]:
        return top_recommendations(self.recommendations, limit=limit)
