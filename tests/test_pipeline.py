import datetime as dt
import unittest

from core import Book, ConfidenceLevel, Note, NoteCategory, Recommendation, RecommendationType
from query import (
    ALL_GENRES,
    BookQuery,
    BookSort,
    NoteQuery,
    NoteSort,
    RecommendationQuery,
    RecommendationSort,
    available_genres,
    filter_books,
    filter_notes,
    filter_recommendations,
    next_to_read,
    notes_created_in_last,
    recent_notes,
    recently_read,
    top_recommendations,
)

BASE = dt.datetime(2024, 1, 1, 9, 0)


def make_books() -> list[Book]:
    return [
        Book(title="Dune", author="Frank Herbert", genre="Science Fiction", total_pages=100,
             current_page=0, date_added=BASE, tags=["desert"]),
        Book(title="1984", author="George Orwell", genre="Dystopian Fiction", total_pages=100,
             current_page=40, rating=4, date_added=BASE + dt.timedelta(days=1),
             last_read_date=BASE + dt.timedelta(days=3)),
        Book(title="The Great Gatsby", author="F. Scott Fitzgerald", genre="Classic Literature",
             total_pages=100, current_page=100, is_completed=True, rating=5,
             date_added=BASE + dt.timedelta(days=2), last_read_date=BASE + dt.timedelta(days=5)),
        Book(title="Pride and Prejudice", author="Jane Austen", genre="Classic Literature",
             total_pages=100, current_page=0, date_added=BASE + dt.timedelta(days=3)),
    ]


class TestBookFilters(unittest.TestCase):
    """Tests for book search, filters and sorting."""

    def setUp(self):
        self.books = make_books()

    def titles(self, books):
        return [b.title for b in books]

    def test_default_sort_is_newest_first(self):
        self.assertEqual(
            self.titles(filter_books(self.books)),
            ["Pride and Prejudice", "The Great Gatsby", "1984", "Dune"],
        )

    def test_search_is_case_insensitive(self):
        self.assertEqual(self.titles(filter_books(self.books, BookQuery(query="ORWELL"))), ["1984"])

    def test_search_matches_tags(self):
        self.assertEqual(self.titles(filter_books(self.books, BookQuery(query="dese"))), ["Dune"])

    def test_genre_filter(self):
        books = filter_books(self.books, BookQuery(genre="Classic Literature", sort=BookSort.TITLE))
        self.assertEqual(self.titles(books), ["Pride and Prejudice", "The Great Gatsby"])

    def test_empty_query_keeps_everything(self):
        """Without a query or sort the input comes back unchanged."""
        self.assertEqual(filter_books(self.books, BookQuery(query="", sort=None)), self.books)

    def test_removing_genre_filter_restores_search_results(self):
        searched = filter_books(self.books, BookQuery(query="o", sort=None))
        narrowed = filter_books(self.books, BookQuery(query="o", genre="Classic Literature", sort=None))
        restored = filter_books(self.books, BookQuery(query="o", genre=None, sort=None))

        self.assertLess(len(narrowed), len(searched))
        self.assertEqual(restored, searched)

    def test_all_genres_is_no_filter(self):
        self.assertEqual(len(filter_books(self.books, BookQuery(genre=ALL_GENRES))), 4)

    def test_status_filters(self):
        """Only unread books remain when completed and in-progress are hidden."""
        q = BookQuery(show_completed=False, show_in_progress=False, sort=BookSort.TITLE)
        self.assertEqual(self.titles(filter_books(self.books, q)), ["Dune", "Pride and Prejudice"])

    def test_min_rating(self):
        q = BookQuery(min_rating=5)
        self.assertEqual(self.titles(filter_books(self.books, q)), ["The Great Gatsby"])

    def test_last_read_puts_never_read_last(self):
        books = filter_books(self.books, BookQuery(sort=BookSort.LAST_READ))
        self.assertEqual(self.titles(books)[:2], ["The Great Gatsby", "1984"])

    def test_sort_is_stable_on_ties(self):
        """Equal keys keep their source order."""
        books = filter_books(self.books, BookQuery(sort=BookSort.RATING))
        self.assertEqual(self.titles(books), ["The Great Gatsby", "1984", "Dune", "Pride and Prejudice"])

    def test_sort_is_idempotent(self):
        q = BookQuery(sort=BookSort.PROGRESS)
        once = filter_books(self.books, q)
        self.assertEqual(filter_books(once, q), once)

    def test_limit(self):
        self.assertEqual(len(filter_books(self.books, BookQuery(limit=2))), 2)
        self.assertEqual(filter_books(self.books, BookQuery(limit=0)), [])

    def test_source_untouched(self):
        before = list(self.books)
        filter_books(self.books, BookQuery(sort=BookSort.TITLE, limit=1))
        self.assertEqual(self.books, before)

    def test_available_genres(self):
        self.assertEqual(
            available_genres(self.books),
            [ALL_GENRES, "Classic Literature", "Dystopian Fiction", "Science Fiction"],
        )

    def test_recently_read(self):
        self.assertEqual(self.titles(recently_read(self.books)), ["The Great Gatsby", "1984"])

    def test_next_to_read(self):
        self.assertEqual(self.titles(next_to_read(self.books)), ["Dune", "Pride and Prejudice"])


class TestNoteFilters(unittest.TestCase):
    """Tests for note search and filters."""

    def setUp(self):
        self.notes = [
            Note(title="Opening", content="It was a bright cold day", book_id="b1",
                 date_created=BASE, date_modified=BASE, category=NoteCategory.QUOTE),
            Note(title="Power", content="Who controls the past", book_id="b1", tags=["theme"],
                 date_created=BASE + dt.timedelta(days=1), date_modified=BASE + dt.timedelta(days=4),
                 is_bookmarked=True, category=NoteCategory.IDEA),
            Note(title="Green light", content="Hope", book_id="b2",
                 date_created=BASE + dt.timedelta(days=2), date_modified=BASE + dt.timedelta(days=2)),
        ]

    def titles(self, notes):
        return [n.title for n in notes]

    def test_search_content(self):
        self.assertEqual(self.titles(filter_notes(self.notes, NoteQuery(query="cold"))), ["Opening"])

    def test_filters_are_conjunctive(self):
        q = NoteQuery(book_id="b1", category=NoteCategory.IDEA)
        self.assertEqual(self.titles(filter_notes(self.notes, q)), ["Power"])

    def test_tag_filter(self):
        self.assertEqual(self.titles(filter_notes(self.notes, NoteQuery(tag="theme"))), ["Power"])

    def test_bookmark_sort_keeps_ties_in_order(self):
        notes = filter_notes(self.notes, NoteQuery(sort=NoteSort.BOOKMARK_STATUS))
        self.assertEqual(self.titles(notes), ["Power", "Opening", "Green light"])

    def test_recent_notes(self):
        self.assertEqual(self.titles(recent_notes(self.notes, limit=2)), ["Power", "Green light"])

    def test_notes_created_in_last(self):
        notes = notes_created_in_last(self.notes, days=1, now=BASE + dt.timedelta(days=2, hours=1))
        self.assertEqual(self.titles(notes), ["Green light"])


class TestRecommendationFilters(unittest.TestCase):
    """Tests for recommendation filters."""

    def setUp(self):
        self.recs = [
            Recommendation(title="A", author="X", genre="Fantasy", confidence_score=0.7,
                           reason="epic worldbuilding"),
            Recommendation(title="B", author="Y", genre="Romance", confidence_score=0.9, is_read=True,
                           recommendation_type=RecommendationType.SIMILAR_GENRE),
            Recommendation(title="C", author="Z", genre="Fantasy", confidence_score=0.5, is_in_library=True),
            Recommendation(title="D", author="X", genre="Horror", confidence_score=0.7),
        ]

    def titles(self, recs):
        return [r.title for r in recs]

    def test_default_confidence_order_stable(self):
        self.assertEqual(self.titles(filter_recommendations(self.recs)), ["B", "A", "D", "C"])

    def test_search_reason(self):
        q = RecommendationQuery(query="worldbuilding")
        self.assertEqual(self.titles(filter_recommendations(self.recs, q)), ["A"])

    def test_flags(self):
        self.assertEqual(
            self.titles(filter_recommendations(self.recs, RecommendationQuery(read_only=True))), ["B"])
        self.assertEqual(
            self.titles(filter_recommendations(self.recs, RecommendationQuery(in_library_only=True))), ["C"])
        unread = filter_recommendations(self.recs, RecommendationQuery(unread_only=True, not_in_library_only=True))
        self.assertEqual(self.titles(unread), ["A", "D"])

    def test_type_and_level(self):
        q = RecommendationQuery(type=RecommendationType.SIMILAR_GENRE)
        self.assertEqual(self.titles(filter_recommendations(self.recs, q)), ["B"])
        q = RecommendationQuery(confidence_level=ConfidenceLevel.MEDIUM)
        self.assertEqual(self.titles(filter_recommendations(self.recs, q)), ["A", "D"])

    def test_sort_by_author(self):
        q = RecommendationQuery(sort=RecommendationSort.AUTHOR)
        self.assertEqual(self.titles(filter_recommendations(self.recs, q)), ["A", "D", "B", "C"])

    def test_top_recommendations(self):
        self.assertEqual(self.titles(top_recommendations(self.recs, limit=2)), ["B", "A"])


if __name__ == "__main__":
    unittest.main()
