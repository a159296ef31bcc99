"""Reading-pattern recommendation scoring.

Two heuristics live here:

* generation: profile the reader's books and notes, then classify each
  candidate from the pool by why it fits (genre, author, raw confidence)
* personalization: re-rank stored recommendations with fixed boosts and
  penalties, clamped to [0, 1]

Both are pure functions of their inputs; storing the results is the
service's job.
"""
from dataclasses import dataclass
from typing import Iterable, Optional

from core import (
    Book,
    Note,
    ReadingPattern,
    Recommendation,
    RecommendationType,
    clamp,
    now,
)
from .candidates import Candidate, CandidateSource, JsonFileCandidateSource

NEUTRAL_WEIGHT = 0.5

SIMILAR_GENRE_THRESHOLD = 0.7
SAME_AUTHOR_THRESHOLD = 0.8
ALGORITHM_THRESHOLD = 0.8

TOP_GENRE_COUNT = 3
TOP_GENRE_BOOST = 0.20
SAME_AUTHOR_BOOST = 0.15
HIGH_STANDARDS_RATING = 4.0
HIGH_STANDARDS_CONFIDENCE = 0.7
HIGH_STANDARDS_PENALTY = 0.10
UNREAD_BOOST = 0.10
NOT_IN_LIBRARY_BOOST = 0.05


def book_weight(book: Book) -> float:
    """Rated books count rating/5; unrated books get a neutral prior."""
    if book.rating is None:
        return NEUTRAL_WEIGHT
    return book.rating / 5.0


def analyze_reading_pattern(books: Iterable[Book], notes: Iterable[Note]) -> ReadingPattern:
    """Build the genre/author/note profile for one generation run."""
    pattern = ReadingPattern()
    ratings: list[int] = []

    for book in books:
        weight = book_weight(book)
        pattern.favorite_genres[book.genre] = pattern.favorite_genres.get(book.genre, 0.0) + weight
        pattern.favorite_authors[book.author] = pattern.favorite_authors.get(book.author, 0.0) + weight
        for tag in book.tags:
            pattern.common_tags[tag] = pattern.common_tags.get(tag, 0.0) + 1.0
        if book.rating is not None:
            ratings.append(book.rating)

    pattern.average_rating = sum(ratings) / len(ratings) if ratings else 0.0

    for note in notes:
        category = note.category
        pattern.preferred_note_categories[category] = pattern.preferred_note_categories.get(category, 0.0) + 1.0

    return pattern


def classify(candidate: Candidate, pattern: ReadingPattern) -> RecommendationType:
    """First matching rule wins."""
    if pattern.favorite_genres.get(candidate.genre, 0.0) > SIMILAR_GENRE_THRESHOLD:
        return RecommendationType.SIMILAR_GENRE
    if pattern.favorite_authors.get(candidate.author, 0.0) > SAME_AUTHOR_THRESHOLD:
        return RecommendationType.SAME_AUTHOR
    if candidate.confidence_score > ALGORITHM_THRESHOLD:
        return RecommendationType.ALGORITHM
    return RecommendationType.TRENDING


def personalized_score(recommendation: Recommendation, pattern: ReadingPattern,
                       completed_books: Iterable[Book]) -> float:
    """Adjusted score for ranking; the stored confidence is left alone."""
    score = recommendation.confidence_score

    if recommendation.genre in pattern.top_genres(TOP_GENRE_COUNT):
        score += TOP_GENRE_BOOST

    if any(book.author == recommendation.author for book in completed_books):
        score += SAME_AUTHOR_BOOST

    # Readers who rate highly are harder to please with weak suggestions.
    if (pattern.average_rating > HIGH_STANDARDS_RATING
            and recommendation.confidence_score < HIGH_STANDARDS_CONFIDENCE):
        score -= HIGH_STANDARDS_PENALTY

    if not recommendation.is_read:
        score += UNREAD_BOOST

    if not recommendation.is_in_library:
        score += NOT_IN_LIBRARY_BOOST

    return clamp(score, 0.0, 1.0)


@dataclass
class ScoredRecommendation:
    recommendation: Recommendation
    score: float


class RecommendationEngine:
    """Turns a candidate pool into recommendations for one reader."""

    def __init__(self, source: Optional[CandidateSource] = None):
        self.source = source or JsonFileCandidateSource()

    def generate(self, books: list[Book], notes: list[Note]) -> list[Recommendation]:
        """Score the candidate pool against a snapshot of books and notes."""
        pattern = analyze_reading_pattern(books, notes)
        generated_at = now()
        results = []
        for candidate in self.source.load():
            basis = [b for b in books if b.genre == candidate.genre or b.author == candidate.author]
            basis_ids = {b.id for b in basis}
            results.append(Recommendation(
                title=candidate.title,
                author=candidate.author,
                genre=candidate.genre,
                synopsis=candidate.synopsis,
                reason=candidate.reason,
                confidence_score=candidate.confidence_score,
                tags=list(candidate.tags),
                based_on_books=[b.id for b in basis],
                based_on_notes=[n.id for n in notes if n.book_id in basis_ids],
                date_generated=generated_at,
                recommendation_type=classify(candidate, pattern),
            ))
        return results

    @staticmethod
    def rank(recommendations: list[Recommendation], books: list[Book],
             limit: int = 10) -> list[ScoredRecommendation]:
        """Personalized ranking, highest adjusted score first."""
        pattern = analyze_reading_pattern(books, [])
        completed = [b for b in books if b.is_completed]
        scored = [
            ScoredRecommendation(rec, personalized_score(rec, pattern, completed))
            for rec in recommendations
        ]
        scored.sort(key=lambda s: s.score, reverse=True)
        return scored[:max(limit, 0)]

    @staticmethod
    def similar_to(recommendations: list[Recommendation], book: Book,
                   limit: int = 5) -> list[Recommendation]:
        """Recommendations sharing the book's genre, author or any tag."""
        book_tags = set(book.tags)
        matches = [
            rec for rec in recommendations
            if rec.genre == book.genre
            or rec.author == book.author
            or bool(book_tags & set(rec.tags))
        ]
        matches.sort(key=lambda r: r.confidence_score, reverse=True)
        return matches[:max(limit, 0)]


# Default engine instance
default_engine = RecommendationEngine()
