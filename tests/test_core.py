import datetime as dt
import unittest

from core import (
    BackgroundColor,
    Book,
    ConfidenceLevel,
    FontFamily,
    Note,
    NoteCategory,
    NoteColor,
    ReadingPattern,
    Recommendation,
    RecommendationType,
)


class TestBook(unittest.TestCase):
    """Tests for the Book model."""

    def test_progress_is_page_ratio(self):
        """Progress should be current page over total pages."""
        book = Book(title="Dune", total_pages=200, current_page=50)
        self.assertAlmostEqual(book.progress, 0.25)
        self.assertEqual(book.progress_percentage, 25)

    def test_progress_with_zero_pages(self):
        """A book without pages has zero progress instead of dividing by zero."""
        book = Book(title="Empty", total_pages=0)
        self.assertEqual(book.progress, 0.0)

    def test_current_page_clamped(self):
        """Current page should stay within [0, total_pages]."""
        self.assertEqual(Book(total_pages=100, current_page=150).current_page, 100)
        self.assertEqual(Book(total_pages=100, current_page=-3).current_page, 0)

    def test_rating_clamped(self):
        """Ratings outside 1-5 are pulled to the nearest bound."""
        self.assertEqual(Book(rating=9).rating, 5)
        self.assertEqual(Book(rating=0).rating, 1)
        self.assertIsNone(Book().rating)

    def test_rating_clamped_on_load(self):
        book = Book.from_dict({"id": "x", "genre": "SF", "rating": 9})
        self.assertEqual(book.rating, 5)

    def test_tags_deduplicated(self):
        """Duplicate tags should collapse, keeping first-seen order."""
        book = Book(tags=["classic", "war", "classic"])
        self.assertEqual(book.tags, ["classic", "war"])

    def test_dict_round_trip(self):
        """to_dict/from_dict should preserve every field."""
        book = Book(
            title="1984", author="George Orwell", genre="Dystopian Fiction",
            total_pages=328, current_page=120, rating=4, tags=["classic"],
            last_read_date=dt.datetime(2024, 3, 5, 14, 7, 12, 345678),
            font_family=FontFamily.GEORGIA, background_color=BackgroundColor.SEPIA,
        )
        self.assertEqual(Book.from_dict(book.to_dict()), book)

    def test_enums_stored_by_display_value(self):
        """Enums should serialize as their display strings."""
        data = Book(font_family=FontFamily.SERIF).to_dict()
        self.assertEqual(data["font_family"], "Times New Roman")
        self.assertEqual(data["text_color"], "Primary")


class TestNote(unittest.TestCase):
    """Tests for the Note model."""

    def test_defaults(self):
        note = Note(title="Thought", book_id="b1")
        self.assertEqual(note.category, NoteCategory.GENERAL)
        self.assertEqual(note.color, NoteColor.YELLOW)
        self.assertFalse(note.is_bookmarked)

    def test_add_tag_is_idempotent(self):
        """Adding an existing tag should not change the note."""
        note = Note(tags=["theme"])
        self.assertFalse(note.add_tag("theme"))
        self.assertTrue(note.add_tag("symbol"))
        self.assertEqual(note.tags, ["theme", "symbol"])

    def test_update_content_touches_modified(self):
        note = Note(date_modified=dt.datetime(2000, 1, 1))
        note.update_content("new text")
        self.assertEqual(note.content, "new text")
        self.assertGreater(note.date_modified, dt.datetime(2000, 1, 1))

    def test_preview_text_truncates(self):
        """Preview should cut long content at 100 characters."""
        note = Note(content="x" * 150)
        self.assertEqual(note.preview_text, "x" * 100 + "...")
        self.assertEqual(Note(content="short").preview_text, "short")

    def test_dict_round_trip(self):
        note = Note(
            title="Quote", content="It was a bright cold day", book_id="b1",
            page_reference=3, tags=["opening"], is_bookmarked=True,
            category=NoteCategory.QUOTE, color=NoteColor.BLUE,
        )
        self.assertEqual(Note.from_dict(note.to_dict()), note)


class TestRecommendation(unittest.TestCase):
    """Tests for the Recommendation model."""

    def test_confidence_clamped(self):
        self.assertEqual(Recommendation(confidence_score=1.4).confidence_score, 1.0)
        self.assertEqual(Recommendation(confidence_score=-0.2).confidence_score, 0.0)

    def test_rating_clamped(self):
        self.assertEqual(Recommendation(rating=7).rating, 5.0)

    def test_confidence_level_boundaries(self):
        """Levels split at 0.8 and 0.6, inclusive on the lower bound."""
        cases = [
            (0.8, ConfidenceLevel.HIGH),
            (0.79999, ConfidenceLevel.MEDIUM),
            (0.6, ConfidenceLevel.MEDIUM),
            (0.59999, ConfidenceLevel.LOW),
        ]
        for score, level in cases:
            with self.subTest(score=score):
                self.assertEqual(Recommendation(confidence_score=score).confidence_level, level)

    def test_confidence_percentage(self):
        self.assertEqual(Recommendation(confidence_score=0.85).confidence_percentage, 85)

    def test_formatted_rating(self):
        self.assertEqual(Recommendation(rating=4).formatted_rating, "4.0")

    def test_dict_round_trip(self):
        rec = Recommendation(
            title="Project Hail Mary", author="Andy Weir", genre="Science Fiction",
            confidence_score=0.78, based_on_books=["b1"], based_on_notes=["n1"],
            recommendation_type=RecommendationType.SIMILAR_GENRE,
        )
        self.assertEqual(Recommendation.from_dict(rec.to_dict()), rec)


class TestReadingPattern(unittest.TestCase):

    def test_top_genres_by_weight(self):
        pattern = ReadingPattern(favorite_genres={"A": 0.5, "B": 1.8, "C": 1.0, "D": 0.2})
        self.assertEqual(pattern.top_genres(), ["B", "C", "A"])

    def test_top_genres_ties_keep_first_seen(self):
        pattern = ReadingPattern(favorite_genres={"A": 1.0, "B": 1.0, "C": 1.0, "D": 1.0})
        self.assertEqual(pattern.top_genres(), ["A", "B", "C"])


if __name__ == "__main__":
    unittest.main()
