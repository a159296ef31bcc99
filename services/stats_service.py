# Statistics Service
"""
Read-side aggregates over books, notes and recommendations.
"""
import datetime as dt
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, Optional, TypeVar

from core import (
    Book,
    ConfidenceLevel,
    Note,
    NoteCategory,
    Recommendation,
    RecommendationType,
)

T = TypeVar("T")
E = TypeVar("E", bound=Enum)


def group_count(items: Iterable[T], key: Callable[[T], E], members: Iterable[E]) -> dict[E, int]:
    """Count items per enum member; every member appears, zero-filled."""
    counts: dict[E, int] = {member: 0 for member in members}
    for item in items:
        counts[key(item)] += 1
    return counts


def average(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


@dataclass
class BookStats:
    total: int = 0
    completed: int = 0
    currently_reading: int = 0
    unread: int = 0
    average_rating: float = 0.0
    favorite_genres: list[str] = field(default_factory=list)
    total_pages_read: int = 0
    average_progress: float = 0.0
    reading_streak: int = 0


@dataclass
class NoteStats:
    total: int = 0
    bookmarked: int = 0
    category_distribution: dict[NoteCategory, int] = field(default_factory=dict)
    average_notes_per_book: float = 0.0
    popular_tags: list[str] = field(default_factory=list)


@dataclass
class RecommendationStats:
    total: int = 0
    read: int = 0
    in_library: int = 0
    type_distribution: dict[RecommendationType, int] = field(default_factory=dict)
    confidence_distribution: dict[ConfidenceLevel, int] = field(default_factory=dict)
    average_confidence: float = 0.0
    average_rating: float = 0.0


def favorite_genres(books: Iterable[Book], limit: int = 5) -> list[str]:
    """Genres ranked by how many books carry them."""
    counts = Counter(book.genre for book in books)
    return [genre for genre, _ in counts.most_common(limit)]


def average_rating(books: Iterable[Book]) -> float:
    return average([b.rating for b in books if b.rating is not None])


def reading_streak(books: Iterable[Book], today: Optional[dt.date] = None) -> int:
    """Books last opened today or yesterday."""
    today = today or dt.date.today()
    recent = {today, today - dt.timedelta(days=1)}
    return sum(1 for b in books if b.last_read_date and b.last_read_date.date() in recent)


def book_stats(books: list[Book], today: Optional[dt.date] = None) -> BookStats:
    return BookStats(
        total=len(books),
        completed=sum(1 for b in books if b.is_completed),
        currently_reading=sum(1 for b in books if not b.is_completed and b.current_page > 0),
        unread=sum(1 for b in books if b.current_page == 0),
        average_rating=average_rating(books),
        favorite_genres=favorite_genres(books),
        total_pages_read=sum(b.current_page for b in books),
        average_progress=average([b.progress for b in books]),
        reading_streak=reading_streak(books, today),
    )


def notes_count_for_book(notes: Iterable[Note], book_id: str) -> int:
    return sum(1 for n in notes if n.book_id == book_id)


def average_notes_per_book(notes: list[Note]) -> float:
    books_with_notes = {n.book_id for n in notes}
    if not books_with_notes:
        return 0.0
    return len(notes) / len(books_with_notes)


def popular_tags(notes: Iterable[Note], limit: int = 10) -> list[str]:
    counts = Counter(tag for n in notes for tag in n.tags)
    return [tag for tag, _ in counts.most_common(limit)]


def note_stats(notes: list[Note]) -> NoteStats:
    return NoteStats(
        total=len(notes),
        bookmarked=sum(1 for n in notes if n.is_bookmarked),
        category_distribution=group_count(notes, lambda n: n.category, NoteCategory),
        average_notes_per_book=average_notes_per_book(notes),
        popular_tags=popular_tags(notes),
    )


def recommendation_stats(recommendations: list[Recommendation]) -> RecommendationStats:
    return RecommendationStats(
        total=len(recommendations),
        read=sum(1 for r in recommendations if r.is_read),
        in_library=sum(1 for r in recommendations if r.is_in_library),
        type_distribution=group_count(recommendations, lambda r: r.recommendation_type, RecommendationType),
        confidence_distribution=group_count(recommendations, lambda r: r.confidence_level, ConfidenceLevel),
        average_confidence=average([r.confidence_score for r in recommendations]),
        average_rating=average([r.rating for r in recommendations if r.rating > 0]),
    )
