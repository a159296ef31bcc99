# Library Service
"""
Book management: progress tracking, ratings, reading preferences and tags.
"""
import logging
from typing import Optional

from core import (
    BackgroundColor,
    Book,
    FontFamily,
    TextColor,
    clamp,
    now,
)
from query import BookQuery, filter_books
from storage import BookRepository, StorageResult

logger = logging.getLogger(__name__)

SAMPLE_CONTENT = """Chapter 1

In the beginning of every story, there lies a moment of infinite possibility. The characters stand at the threshold of their journey, unaware of the adventures that await them. Each page turns like a season, bringing new revelations and deeper understanding.

The art of storytelling has captivated humanity for millennia. From ancient oral traditions to modern digital narratives, we have always sought to make sense of our world through the power of story.

Chapter 2

As we delve deeper into the narrative, the complexities of human nature begin to unfold. Each character carries within them a universe of experiences, hopes, and fears.

Literature serves as both mirror and window, reflecting our own experiences while offering glimpses into lives vastly different from our own.

Chapter 3

The power of words to transport us cannot be understated. Within the pages of a book, we can travel to distant lands, experience different time periods, and encounter extraordinary circumstances.

This is just the beginning of what promises to be an extraordinary literary journey...
"""

# title, author, genre, synopsis, total pages
SAMPLE_BOOKS = [
    ("To Kill a Mockingbird", "Harper Lee", "Classic Literature",
     "A gripping tale of racial injustice and loss of innocence in the American South.", 281),
    ("1984", "George Orwell", "Dystopian Fiction",
     "A chilling vision of a totalitarian future where freedom and truth are under siege.", 328),
    ("The Great Gatsby", "F. Scott Fitzgerald", "Classic Literature",
     "The story of Jay Gatsby's pursuit of the American Dream and his tragic obsession with Daisy Buchanan.", 180),
    ("Dune", "Frank Herbert", "Science Fiction",
     "Epic tale of politics, religion, and ecology on the desert planet Arrakis.", 688),
    ("Pride and Prejudice", "Jane Austen", "Romance",
     "The timeless story of Elizabeth Bennet and Mr. Darcy's tumultuous relationship.", 432),
]


class BookService:
    """Service for the reader's library."""

    def __init__(self, repo: BookRepository):
        self.repo = repo

    @property
    def books(self) -> list[Book]:
        return self.repo.list_all()

    def create_book(self, title: str, author: str, genre: str, synopsis: str = "",
                    content: str = "", total_pages: int = 100) -> Book:
        """Add a new book."""
        book = Book(
            title=title.strip(),
            author=author.strip(),
            genre=genre.strip(),
            synopsis=synopsis,
            content=content,
            total_pages=max(1, total_pages),
        )
        self.repo.add(book)
        return book

    def add_book(self, book: Book) -> StorageResult:
        return self.repo.add(book)

    def update_book(self, book: Book) -> StorageResult:
        return self.repo.update(book)

    def delete_book(self, book_id: str) -> int:
        """Delete a book. Its notes stay behind; see NoteService.delete_all_for_book."""
        return self.repo.delete(book_id)

    def get_book(self, book_id: str) -> Optional[Book]:
        return self.repo.get(book_id)

    def update_reading_progress(self, book_id: str, current_page: int) -> StorageResult:
        """Move the bookmark, completing the book on its last page."""
        def change(book: Book) -> None:
            book.current_page = clamp(current_page, 0, book.total_pages)
            book.last_read_date = now()
            if book.current_page >= book.total_pages:
                book.is_completed = True
        return self.repo.modify(book_id, change)

    def mark_as_completed(self, book_id: str) -> StorageResult:
        def change(book: Book) -> None:
            book.is_completed = True
            book.current_page = book.total_pages
            book.last_read_date = now()
        return self.repo.modify(book_id, change)

    def rate_book(self, book_id: str, rating: int) -> StorageResult:
        """Store a 1-5 rating; out-of-range values are pulled to the nearest bound."""
        def change(book: Book) -> None:
            book.rating = clamp(int(rating), 1, 5)
        return self.repo.modify(book_id, change)

    def update_reading_preferences(self, book_id: str, font_size: float,
                                   font_family: FontFamily, background_color: BackgroundColor,
                                   text_color: TextColor) -> StorageResult:
        def change(book: Book) -> None:
            book.font_size = font_size
            book.font_family = font_family
            book.background_color = background_color
            book.text_color = text_color
        return self.repo.modify(book_id, change)

    def add_tag(self, book_id: str, tag: str) -> StorageResult:
        book = self.repo.get(book_id)
        if book is None:
            return StorageResult.not_found(book_id)
        tag = tag.strip()
        if not tag or tag in book.tags:
            return StorageResult.success()
        return self.repo.modify(book_id, lambda b: b.tags.append(tag))

    def remove_tag(self, book_id: str, tag: str) -> StorageResult:
        def change(book: Book) -> None:
            book.tags = [t for t in book.tags if t != tag]
        return self.repo.modify(book_id, change)

    def by_genre(self, genre: str) -> list[Book]:
        return [b for b in self.books if b.genre.lower() == genre.lower()]

    def by_author(self, author: str) -> list[Book]:
        return [b for b in self.books if author.lower() in b.author.lower()]

    def search(self, query: str) -> list[Book]:
        """Search over title, author, genre and tags, keeping insertion order."""
        return filter_books(self.books, BookQuery(query=query, sort=None))

    def completed(self) -> list[Book]:
        return [b for b in self.books if b.is_completed]

    def currently_reading(self) -> list[Book]:
        return [b for b in self.books if not b.is_completed and b.current_page > 0]

    def unread(self) -> list[Book]:
        return [b for b in self.books if b.current_page == 0]

    def seed_sample_books(self) -> int:
        """Insert the demo library when the collection is empty."""
        if len(self.repo):
            return 0
        books = [
            Book(title=title, author=author, genre=genre, synopsis=synopsis,
                 content=SAMPLE_CONTENT, total_pages=pages)
            for title, author, genre, synopsis, pages in SAMPLE_BOOKS
        ]
        books[0].current_page = 45
        books[0].rating = 5
        books[1].current_page = 120
        books[1].rating = 4
        books[2].is_completed = True
        books[2].current_page = books[2].total_pages
        books[2].rating = 5
        self.repo.add_many(books)
        logger.info(f"Seeded {len(books)} sample books")
        return len(books)
