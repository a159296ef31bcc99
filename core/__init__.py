# Domain models
import datetime as dt
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


def new_id() -> str:
    return str(uuid.uuid4())


def now() -> dt.datetime:
    return dt.datetime.now()


def _parse_datetime(value) -> Optional[dt.datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, dt.datetime):
        return value
    return dt.datetime.fromisoformat(value)


def _dedupe(items) -> list[str]:
    seen: list[str] = []
    for item in items or []:
        if item not in seen:
            seen.append(item)
    return seen


def clamp(value, low, high):
    return max(low, min(high, value))


class FontFamily(Enum):
    SYSTEM = "System"
    SERIF = "Times New Roman"
    SANS_SERIF = "Helvetica"
    GEORGIA = "Georgia"
    PALATINO = "Palatino"


class BackgroundColor(Enum):
    DARK = "Dark"
    LIGHT = "Light"
    SEPIA = "Sepia"
    NIGHT = "Night"


class TextColor(Enum):
    PRIMARY = "Primary"
    WHITE = "White"
    BLACK = "Black"
    SEPIA = "Sepia"


class NoteCategory(Enum):
    GENERAL = "General"
    QUOTE = "Quote"
    IDEA = "Idea"
    QUESTION = "Question"
    ANALYSIS = "Analysis"
    REVIEW = "Review"
    SUMMARY = "Summary"


class NoteColor(Enum):
    YELLOW = "Yellow"
    BLUE = "Blue"
    GREEN = "Green"
    PINK = "Pink"
    PURPLE = "Purple"
    ORANGE = "Orange"
    RED = "Red"
    GRAY = "Gray"


class RecommendationType(Enum):
    ALGORITHM = "Algorithm"
    SIMILAR_GENRE = "Similar Genre"
    SAME_AUTHOR = "Same Author"
    TRENDING = "Trending"
    EDITORIAL = "Editorial Pick"
    USER_RATED = "Highly Rated"


class ConfidenceLevel(Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @classmethod
    def for_score(cls, score: float) -> "ConfidenceLevel":
        if score >= 0.8:
            return cls.HIGH
        if score >= 0.6:
            return cls.MEDIUM
        return cls.LOW


@dataclass
class Book:
    """Core domain model for a book in the library."""
    title: str = ""
    author: str = ""
    genre: str = ""
    synopsis: str = ""
    content: str = ""
    total_pages: int = 100
    id: str = field(default_factory=new_id)
    is_completed: bool = False
    current_page: int = 0
    date_added: dt.datetime = field(default_factory=now)
    last_read_date: Optional[dt.datetime] = None
    rating: Optional[int] = None
    tags: list[str] = field(default_factory=list)
    font_size: float = 16.0
    font_family: FontFamily = FontFamily.SYSTEM
    background_color: BackgroundColor = BackgroundColor.DARK
    text_color: TextColor = TextColor.PRIMARY

    def __post_init__(self):
        self.tags = _dedupe(self.tags)
        self.current_page = clamp(self.current_page, 0, max(self.total_pages, 0))
        if self.rating is not None:
            self.rating = clamp(int(self.rating), 1, 5)

    @property
    def progress(self) -> float:
        if self.total_pages <= 0:
            return 0.0
        return self.current_page / self.total_pages

    @property
    def progress_percentage(self) -> int:
        return int(self.progress * 100)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "genre": self.genre,
            "synopsis": self.synopsis,
            "content": self.content,
            "is_completed": self.is_completed,
            "current_page": self.current_page,
            "total_pages": self.total_pages,
            "date_added": self.date_added.isoformat(),
            "last_read_date": self.last_read_date.isoformat() if self.last_read_date else None,
            "rating": self.rating,
            "tags": list(self.tags),
            "font_size": self.font_size,
            "font_family": self.font_family.value,
            "background_color": self.background_color.value,
            "text_color": self.text_color.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Book":
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            author=data.get("author", ""),
            genre=data.get("genre", ""),
            synopsis=data.get("synopsis", ""),
            content=data.get("content", ""),
            is_completed=bool(data.get("is_completed", False)),
            current_page=int(data.get("current_page", 0)),
            total_pages=int(data.get("total_pages", 100)),
            date_added=_parse_datetime(data.get("date_added")) or now(),
            last_read_date=_parse_datetime(data.get("last_read_date")),
            rating=data.get("rating"),
            tags=list(data.get("tags", [])),
            font_size=float(data.get("font_size", 16.0)),
            font_family=FontFamily(data.get("font_family", FontFamily.SYSTEM.value)),
            background_color=BackgroundColor(data.get("background_color", BackgroundColor.DARK.value)),
            text_color=TextColor(data.get("text_color", TextColor.PRIMARY.value)),
        )


@dataclass
class Note:
    """Core domain model for a note attached to a book."""
    title: str = ""
    content: str = ""
    book_id: str = ""
    page_reference: Optional[int] = None
    id: str = field(default_factory=new_id)
    tags: list[str] = field(default_factory=list)
    date_created: dt.datetime = field(default_factory=now)
    date_modified: dt.datetime = field(default_factory=now)
    is_bookmarked: bool = False
    category: NoteCategory = NoteCategory.GENERAL
    color: NoteColor = NoteColor.YELLOW

    def __post_init__(self):
        self.tags = _dedupe(self.tags)

    def touch(self) -> None:
        self.date_modified = now()

    def update_content(self, content: str) -> None:
        self.content = content
        self.touch()

    def add_tag(self, tag: str) -> bool:
        if tag in self.tags:
            return False
        self.tags.append(tag)
        self.touch()
        return True

    def remove_tag(self, tag: str) -> None:
        self.tags = [t for t in self.tags if t != tag]
        self.touch()

    @property
    def preview_text(self) -> str:
        if len(self.content) <= 100:
            return self.content
        return self.content[:100] + "..."

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "book_id": self.book_id,
            "page_reference": self.page_reference,
            "tags": list(self.tags),
            "date_created": self.date_created.isoformat(),
            "date_modified": self.date_modified.isoformat(),
            "is_bookmarked": self.is_bookmarked,
            "category": self.category.value,
            "color": self.color.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Note":
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            content=data.get("content", ""),
            book_id=data.get("book_id", ""),
            page_reference=data.get("page_reference"),
            tags=list(data.get("tags", [])),
            date_created=_parse_datetime(data.get("date_created")) or now(),
            date_modified=_parse_datetime(data.get("date_modified")) or now(),
            is_bookmarked=bool(data.get("is_bookmarked", False)),
            category=NoteCategory(data.get("category", NoteCategory.GENERAL.value)),
            color=NoteColor(data.get("color", NoteColor.YELLOW.value)),
        )


@dataclass
class Recommendation:
    """Core domain model for a suggested book."""
    title: str = ""
    author: str = ""
    genre: str = ""
    synopsis: str = ""
    reason: str = ""
    confidence_score: float = 0.0
    id: str = field(default_factory=new_id)
    rating: float = 0.0
    based_on_books: list[str] = field(default_factory=list)
    based_on_notes: list[str] = field(default_factory=list)
    date_generated: dt.datetime = field(default_factory=now)
    is_read: bool = False
    is_in_library: bool = False
    tags: list[str] = field(default_factory=list)
    recommendation_type: RecommendationType = RecommendationType.ALGORITHM

    def __post_init__(self):
        self.confidence_score = clamp(float(self.confidence_score), 0.0, 1.0)
        self.rating = clamp(float(self.rating), 0.0, 5.0)
        self.tags = _dedupe(self.tags)

    @property
    def confidence_level(self) -> ConfidenceLevel:
        return ConfidenceLevel.for_score(self.confidence_score)

    @property
    def confidence_percentage(self) -> int:
        return int(self.confidence_score * 100)

    @property
    def formatted_rating(self) -> str:
        return f"{self.rating:.1f}"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "genre": self.genre,
            "synopsis": self.synopsis,
            "rating": self.rating,
            "reason": self.reason,
            "confidence_score": self.confidence_score,
            "based_on_books": list(self.based_on_books),
            "based_on_notes": list(self.based_on_notes),
            "date_generated": self.date_generated.isoformat(),
            "is_read": self.is_read,
            "is_in_library": self.is_in_library,
            "tags": list(self.tags),
            "recommendation_type": self.recommendation_type.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Recommendation":
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            author=data.get("author", ""),
            genre=data.get("genre", ""),
            synopsis=data.get("synopsis", ""),
            rating=float(data.get("rating", 0.0)),
            reason=data.get("reason", ""),
            confidence_score=float(data.get("confidence_score", 0.0)),
            based_on_books=list(data.get("based_on_books", [])),
            based_on_notes=list(data.get("based_on_notes", [])),
            date_generated=_parse_datetime(data.get("date_generated")) or now(),
            is_read=bool(data.get("is_read", False)),
            is_in_library=bool(data.get("is_in_library", False)),
            tags=list(data.get("tags", [])),
            recommendation_type=RecommendationType(
                data.get("recommendation_type", RecommendationType.ALGORITHM.value)
            ),
        )


@dataclass
class ReadingPattern:
    """Per-run profile of what the reader favours. Never persisted."""
    favorite_genres: dict[str, float] = field(default_factory=dict)
    favorite_authors: dict[str, float] = field(default_factory=dict)
    average_rating: float = 0.0
    preferred_note_categories: dict[NoteCategory, float] = field(default_factory=dict)
    common_tags: dict[str, float] = field(default_factory=dict)

    def top_genres(self, limit: int = 3) -> list[str]:
        ranked = sorted(self.favorite_genres.items(), key=lambda x: -x[1])
        return [genre for genre, _ in ranked[:limit]]
