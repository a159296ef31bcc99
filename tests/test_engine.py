import unittest

from core import Book, Note, NoteCategory, ReadingPattern, Recommendation, RecommendationType
from recommender import (
    Candidate,
    RecommendationEngine,
    StaticCandidateSource,
    analyze_reading_pattern,
    classify,
    personalized_score,
)


class TestReadingPattern(unittest.TestCase):
    """Tests for analyze_reading_pattern."""

    def test_weights_rated_and_unrated(self):
        """Rated books weigh rating/5, unrated books 0.5."""
        books = [
            Book(genre="Science Fiction", author="Frank Herbert", rating=5),
            Book(genre="Science Fiction", author="Andy Weir"),
            Book(genre="Romance", author="Jane Austen", rating=2),
        ]
        pattern = analyze_reading_pattern(books, [])

        self.assertAlmostEqual(pattern.favorite_genres["Science Fiction"], 1.5)
        self.assertAlmostEqual(pattern.favorite_genres["Romance"], 0.4)
        self.assertAlmostEqual(pattern.favorite_authors["Andy Weir"], 0.5)

    def test_average_rating_ignores_unrated(self):
        books = [Book(rating=5), Book(rating=4), Book()]
        self.assertAlmostEqual(analyze_reading_pattern(books, []).average_rating, 4.5)

    def test_average_rating_without_ratings(self):
        self.assertEqual(analyze_reading_pattern([Book()], []).average_rating, 0.0)

    def test_out_of_range_rating_weighs_at_most_one(self):
        pattern = analyze_reading_pattern([Book.from_dict({"id": "x", "genre": "SF", "rating": 9})], [])
        self.assertAlmostEqual(pattern.favorite_genres["SF"], 1.0)

    def test_note_categories_and_tags(self):
        books = [Book(tags=["space", "politics"]), Book(tags=["space"])]
        notes = [Note(category=NoteCategory.QUOTE), Note(category=NoteCategory.QUOTE), Note()]
        pattern = analyze_reading_pattern(books, notes)

        self.assertEqual(pattern.common_tags["space"], 2.0)
        self.assertEqual(pattern.preferred_note_categories[NoteCategory.QUOTE], 2.0)
        self.assertEqual(pattern.preferred_note_categories[NoteCategory.GENERAL], 1.0)


class TestClassify(unittest.TestCase):
    """Tests for candidate classification precedence."""

    def test_similar_genre_wins_over_author(self):
        pattern = ReadingPattern(favorite_genres={"Science Fiction": 1.0}, favorite_authors={"Andy Weir": 1.0})
        candidate = Candidate(title="PHM", author="Andy Weir", genre="Science Fiction", confidence_score=0.9)
        self.assertEqual(classify(candidate, pattern), RecommendationType.SIMILAR_GENRE)

    def test_same_author(self):
        pattern = ReadingPattern(favorite_genres={"Fantasy": 0.6}, favorite_authors={"Andy Weir": 0.9})
        candidate = Candidate(title="PHM", author="Andy Weir", genre="Fantasy")
        self.assertEqual(classify(candidate, pattern), RecommendationType.SAME_AUTHOR)

    def test_thresholds_are_strict(self):
        """Weights equal to the threshold do not qualify."""
        pattern = ReadingPattern(favorite_genres={"Fantasy": 0.7}, favorite_authors={"X": 0.8})
        self.assertEqual(classify(Candidate("T", "X", "Fantasy", confidence_score=0.8), pattern),
                         RecommendationType.TRENDING)

    def test_high_confidence_is_algorithm(self):
        self.assertEqual(classify(Candidate("T", "X", "Fantasy", confidence_score=0.85), ReadingPattern()),
                         RecommendationType.ALGORITHM)

    def test_fallback_trending(self):
        self.assertEqual(classify(Candidate("T", "X", "Fantasy", confidence_score=0.5), ReadingPattern()),
                         RecommendationType.TRENDING)


class TestPersonalizedScore(unittest.TestCase):
    """Tests for personalized re-ranking."""

    def test_boosts_clamped_to_one(self):
        """A strong candidate with every boost should cap at 1.0."""
        pattern = ReadingPattern(favorite_genres={"Fantasy": 2.0})
        completed = [Book(author="X", is_completed=True)]
        rec = Recommendation(author="X", genre="Fantasy", confidence_score=0.95)
        self.assertEqual(personalized_score(rec, pattern, completed), 1.0)

    def test_unread_and_not_in_library(self):
        rec = Recommendation(genre="Fantasy", confidence_score=0.5)
        self.assertAlmostEqual(personalized_score(rec, ReadingPattern(), []), 0.65)

    def test_read_in_library_no_boost(self):
        rec = Recommendation(genre="Fantasy", confidence_score=0.5, is_read=True, is_in_library=True)
        self.assertAlmostEqual(personalized_score(rec, ReadingPattern(), []), 0.5)

    def test_high_standards_penalty(self):
        pattern = ReadingPattern(average_rating=4.5)
        rec = Recommendation(genre="Fantasy", confidence_score=0.6, is_read=True, is_in_library=True)
        self.assertAlmostEqual(personalized_score(rec, pattern, []), 0.5)

    def test_penalty_not_applied_at_threshold(self):
        pattern = ReadingPattern(average_rating=4.0)
        rec = Recommendation(genre="Fantasy", confidence_score=0.6, is_read=True, is_in_library=True)
        self.assertAlmostEqual(personalized_score(rec, pattern, []), 0.6)

    def test_only_top_three_genres_boosted(self):
        pattern = ReadingPattern(favorite_genres={"A": 3.0, "B": 2.0, "C": 1.5, "D": 1.0})
        rec = Recommendation(genre="D", confidence_score=0.3, is_read=True, is_in_library=True)
        self.assertAlmostEqual(personalized_score(rec, pattern, []), 0.3)

    def test_never_negative(self):
        pattern = ReadingPattern(average_rating=5.0)
        rec = Recommendation(confidence_score=0.05, is_read=True, is_in_library=True)
        self.assertEqual(personalized_score(rec, pattern, []), 0.0)


class TestRecommendationEngine(unittest.TestCase):
    """Tests for RecommendationEngine."""

    def setUp(self):
        self.engine = RecommendationEngine(StaticCandidateSource([
            Candidate("Project Hail Mary", "Andy Weir", "Science Fiction", confidence_score=0.78),
            Candidate("Atomic Habits", "James Clear", "Self-Help", confidence_score=0.73),
        ]))

    def test_science_fiction_reader(self):
        """A five-star science fiction book makes the SF candidate a similar-genre pick."""
        dune = Book(title="Dune", author="Frank Herbert", genre="Science Fiction", rating=5)
        note = Note(book_id=dune.id)
        recs = self.engine.generate([dune], [note])

        by_title = {r.title: r for r in recs}
        phm = by_title["Project Hail Mary"]
        self.assertEqual(phm.recommendation_type, RecommendationType.SIMILAR_GENRE)
        self.assertEqual(phm.based_on_books, [dune.id])
        self.assertEqual(phm.based_on_notes, [note.id])
        self.assertEqual(by_title["Atomic Habits"].recommendation_type, RecommendationType.TRENDING)
        self.assertEqual(by_title["Atomic Habits"].based_on_books, [])

    def test_generate_with_empty_library(self):
        recs = self.engine.generate([], [])
        self.assertEqual(len(recs), 2)
        self.assertTrue(all(r.recommendation_type == RecommendationType.TRENDING for r in recs))
        self.assertEqual(len({r.date_generated for r in recs}), 1)

    def test_empty_pool(self):
        self.assertEqual(RecommendationEngine(StaticCandidateSource([])).generate([Book()], []), [])

    def test_rank_orders_by_adjusted_score(self):
        books = [Book(genre="Romance", author="Jane Austen", rating=5, is_completed=True)]
        recs = [
            Recommendation(title="Strong", genre="Horror", confidence_score=0.8),
            Recommendation(title="Matching", genre="Romance", author="Jane Austen", confidence_score=0.6),
        ]
        ranked = RecommendationEngine.rank(recs, books)
        self.assertEqual([s.recommendation.title for s in ranked], ["Matching", "Strong"])
        # stored confidence is untouched
        self.assertEqual(recs[1].confidence_score, 0.6)

    def test_rank_limit(self):
        recs = [Recommendation(confidence_score=0.1 * i) for i in range(6)]
        self.assertEqual(len(RecommendationEngine.rank(recs, [], limit=3)), 3)

    def test_similar_to(self):
        book = Book(genre="Fantasy", author="X", tags=["dragons"])
        recs = [
            Recommendation(title="genre", genre="Fantasy", confidence_score=0.5),
            Recommendation(title="author", author="X", confidence_score=0.9),
            Recommendation(title="tag", tags=["dragons"], confidence_score=0.7),
            Recommendation(title="none", genre="Romance", confidence_score=1.0),
        ]
        self.assertEqual([r.title for r in RecommendationEngine.similar_to(recs, book)],
                         ["author", "tag", "genre"])


if __name__ == "__main__":
    unittest.main()
