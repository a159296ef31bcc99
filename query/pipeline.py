"""Search, filter and sort derived views over the entity collections.

Every view runs the same steps over a snapshot of a collection:

1. free-text search (case-insensitive substring over text fields and tags)
2. conjunctive categorical filters
3. one stable sort key
4. optional truncation

The source list is never modified.
"""
import datetime as dt
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Optional, TypeVar

from core import (
    Book,
    ConfidenceLevel,
    Note,
    NoteCategory,
    NoteColor,
    Recommendation,
    RecommendationType,
)

T = TypeVar("T")

ALL_GENRES = "All"


class BookSort(Enum):
    TITLE = "Title"
    AUTHOR = "Author"
    GENRE = "Genre"
    DATE_ADDED = "Date Added"
    LAST_READ = "Last Read"
    PROGRESS = "Progress"
    RATING = "Rating"


class NoteSort(Enum):
    TITLE = "Title"
    DATE_CREATED = "Date Created"
    DATE_MODIFIED = "Date Modified"
    CATEGORY = "Category"
    BOOKMARK_STATUS = "Bookmarked"


class RecommendationSort(Enum):
    CONFIDENCE = "Confidence"
    TITLE = "Title"
    AUTHOR = "Author"
    GENRE = "Genre"
    RATING = "Rating"
    DATE_GENERATED = "Date Generated"
    TYPE = "Type"


# sort option -> (key function, descending)
BOOK_SORT_KEYS: dict[BookSort, tuple[Callable[[Book], object], bool]] = {
    BookSort.TITLE: (lambda b: b.title, False),
    BookSort.AUTHOR: (lambda b: b.author, False),
    BookSort.GENRE: (lambda b: b.genre, False),
    BookSort.DATE_ADDED: (lambda b: b.date_added, True),
    BookSort.LAST_READ: (lambda b: b.last_read_date or dt.datetime.min, True),
    BookSort.PROGRESS: (lambda b: b.progress, True),
    BookSort.RATING: (lambda b: b.rating or 0, True),
}

NOTE_SORT_KEYS: dict[NoteSort, tuple[Callable[[Note], object], bool]] = {
    NoteSort.TITLE: (lambda n: n.title, False),
    NoteSort.DATE_CREATED: (lambda n: n.date_created, True),
    NoteSort.DATE_MODIFIED: (lambda n: n.date_modified, True),
    NoteSort.CATEGORY: (lambda n: n.category.value, False),
    NoteSort.BOOKMARK_STATUS: (lambda n: n.is_bookmarked, True),
}

RECOMMENDATION_SORT_KEYS: dict[RecommendationSort, tuple[Callable[[Recommendation], object], bool]] = {
    RecommendationSort.CONFIDENCE: (lambda r: r.confidence_score, True),
    RecommendationSort.TITLE: (lambda r: r.title, False),
    RecommendationSort.AUTHOR: (lambda r: r.author, False),
    RecommendationSort.GENRE: (lambda r: r.genre, False),
    RecommendationSort.RATING: (lambda r: r.rating, True),
    RecommendationSort.DATE_GENERATED: (lambda r: r.date_generated, True),
    RecommendationSort.TYPE: (lambda r: r.recommendation_type.value, False),
}


def matches_text(query: str, fields: Iterable[str], tags: Iterable[str] = ()) -> bool:
    """True when ``query`` is a case-insensitive substring of any field or tag."""
    needle = query.lower()
    if any(needle in (value or "").lower() for value in fields):
        return True
    return any(needle in tag.lower() for tag in tags)


def run_pipeline(
    items: Iterable[T],
    query: str = "",
    text_of: Optional[Callable[[T], Iterable[str]]] = None,
    tags_of: Optional[Callable[[T], Iterable[str]]] = None,
    predicates: Iterable[Callable[[T], bool]] = (),
    sort_key: Optional[Callable[[T], object]] = None,
    descending: bool = False,
    limit: Optional[int] = None,
) -> list[T]:
    """Search, filter, sort and truncate a snapshot of ``items``."""
    result = list(items)

    if query and text_of is not None:
        result = [
            item for item in result
            if matches_text(query, text_of(item), tags_of(item) if tags_of else ())
        ]

    for predicate in predicates:
        result = [item for item in result if predicate(item)]

    if sort_key is not None:
        # sorted() stays stable with reverse=True
        result = sorted(result, key=sort_key, reverse=descending)

    if limit is not None:
        result = result[:max(limit, 0)]
    return result


@dataclass
class BookQuery:
    query: str = ""
    genre: Optional[str] = None
    show_completed: bool = True
    show_in_progress: bool = True
    show_unread: bool = True
    min_rating: Optional[int] = None
    sort: Optional[BookSort] = BookSort.DATE_ADDED
    limit: Optional[int] = None


@dataclass
class NoteQuery:
    query: str = ""
    book_id: Optional[str] = None
    category: Optional[NoteCategory] = None
    color: Optional[NoteColor] = None
    tag: Optional[str] = None
    bookmarked_only: bool = False
    sort: Optional[NoteSort] = NoteSort.DATE_MODIFIED
    limit: Optional[int] = None


@dataclass
class RecommendationQuery:
    query: str = ""
    type: Optional[RecommendationType] = None
    confidence_level: Optional[ConfidenceLevel] = None
    read_only: bool = False
    unread_only: bool = False
    in_library_only: bool = False
    not_in_library_only: bool = False
    sort: Optional[RecommendationSort] = RecommendationSort.CONFIDENCE
    limit: Optional[int] = None


def _book_status_filter(q: BookQuery) -> Callable[[Book], bool]:
    def check(book: Book) -> bool:
        in_progress = not book.is_completed and book.current_page > 0
        unread = book.current_page == 0
        return (
            (q.show_completed and book.is_completed)
            or (q.show_in_progress and in_progress)
            or (q.show_unread and unread)
        )
    return check


def filter_books(books: Iterable[Book], q: Optional[BookQuery] = None) -> list[Book]:
    q = q or BookQuery()
    predicates: list[Callable[[Book], bool]] = []
    if q.genre and q.genre != ALL_GENRES:
        predicates.append(lambda b: b.genre == q.genre)
    if not (q.show_completed and q.show_in_progress and q.show_unread):
        predicates.append(_book_status_filter(q))
    if q.min_rating is not None:
        predicates.append(lambda b: (b.rating or 0) >= q.min_rating)

    sort_key, descending = BOOK_SORT_KEYS[q.sort] if q.sort else (None, False)
    return run_pipeline(
        books,
        query=q.query,
        text_of=lambda b: (b.title, b.author, b.genre),
        tags_of=lambda b: b.tags,
        predicates=predicates,
        sort_key=sort_key,
        descending=descending,
        limit=q.limit,
    )


def filter_notes(notes: Iterable[Note], q: Optional[NoteQuery] = None) -> list[Note]:
    q = q or NoteQuery()
    predicates: list[Callable[[Note], bool]] = []
    if q.book_id is not None:
        predicates.append(lambda n: n.book_id == q.book_id)
    if q.category is not None:
        predicates.append(lambda n: n.category == q.category)
    if q.color is not None:
        predicates.append(lambda n: n.color == q.color)
    if q.tag:
        predicates.append(lambda n: q.tag in n.tags)
    if q.bookmarked_only:
        predicates.append(lambda n: n.is_bookmarked)

    sort_key, descending = NOTE_SORT_KEYS[q.sort] if q.sort else (None, False)
    return run_pipeline(
        notes,
        query=q.query,
        text_of=lambda n: (n.title, n.content),
        tags_of=lambda n: n.tags,
        predicates=predicates,
        sort_key=sort_key,
        descending=descending,
        limit=q.limit,
    )


def filter_recommendations(recommendations: Iterable[Recommendation],
                           q: Optional[RecommendationQuery] = None) -> list[Recommendation]:
    q = q or RecommendationQuery()
    predicates: list[Callable[[Recommendation], bool]] = []
    if q.type is not None:
        predicates.append(lambda r: r.recommendation_type == q.type)
    if q.confidence_level is not None:
        predicates.append(lambda r: r.confidence_level == q.confidence_level)
    if q.read_only:
        predicates.append(lambda r: r.is_read)
    elif q.unread_only:
        predicates.append(lambda r: not r.is_read)
    if q.in_library_only:
        predicates.append(lambda r: r.is_in_library)
    elif q.not_in_library_only:
        predicates.append(lambda r: not r.is_in_library)

    sort_key, descending = RECOMMENDATION_SORT_KEYS[q.sort] if q.sort else (None, False)
    return run_pipeline(
        recommendations,
        query=q.query,
        text_of=lambda r: (r.title, r.author, r.genre, r.reason),
        tags_of=lambda r: r.tags,
        predicates=predicates,
        sort_key=sort_key,
        descending=descending,
        limit=q.limit,
    )


def available_genres(books: Iterable[Book]) -> list[str]:
    return [ALL_GENRES] + sorted({b.genre for b in books})


def recently_read(books: Iterable[Book], limit: int = 5) -> list[Book]:
    return run_pipeline(
        books,
        predicates=[lambda b: b.last_read_date is not None],
        sort_key=lambda b: b.last_read_date,
        descending=True,
        limit=limit,
    )


def next_to_read(books: Iterable[Book], limit: int = 3) -> list[Book]:
    return run_pipeline(books, predicates=[lambda b: b.current_page == 0], limit=limit)


def recent_notes(notes: Iterable[Note], limit: int = 10) -> list[Note]:
    return filter_notes(notes, NoteQuery(sort=NoteSort.DATE_MODIFIED, limit=limit))


def notes_created_in_last(notes: Iterable[Note], days: int,
                          now: Optional[dt.datetime] = None) -> list[Note]:
    cutoff = (now or dt.datetime.now()) - dt.timedelta(days=days)
    return run_pipeline(
        notes,
        predicates=[lambda n: n.date_created >= cutoff],
        sort_key=lambda n: n.date_created,
        descending=True,
    )


def top_recommendations(recommendations: Iterable[Recommendation], limit: int = 5) -> list[Recommendation]:
    return filter_recommendations(recommendations, RecommendationQuery(limit=limit))
