# Reading Report Service
"""
Render a markdown reading report from the library statistics.
"""
import datetime as dt
import logging
from datetime import date
from pathlib import Path
from typing import Optional

from storage import KeyValueStore
from .stats_service import book_stats, note_stats, recommendation_stats

logger = logging.getLogger(__name__)

REPORT_KEY_PREFIX = "Report:"


def today() -> date:
    return dt.date.today()


def iso_date(value: date) -> str:
    return value.isoformat()


def _get_reports_dir() -> Path:
    """Get reports directory, create if not exists."""
    reports_dir = Path.home() / ".bookshelf" / "reports"
    reports_dir.mkdir(parents=True, exist_ok=True)
    return reports_dir


class ReportService:
    """Service for generating reading reports."""

    def __init__(self, books, notes, recommendations, kv: KeyValueStore,
                 reports_dir: Optional[Path] = None):
        self.books = books
        self.notes = notes
        self.recommendations = recommendations
        self.kv = kv
        self.reports_dir = reports_dir

    def _dir(self) -> Path:
        if self.reports_dir is None:
            return _get_reports_dir()
        self.reports_dir.mkdir(parents=True, exist_ok=True)
        return self.reports_dir

    def _collect_stats(self, target_date: date) -> dict:
        """Collect statistics for a specific date."""
        books = self.books.books
        notes = self.notes.notes
        return {
            "books": book_stats(books, today=target_date),
            "notes": note_stats(notes),
            "recommendations": recommendation_stats(self.recommendations.recommendations),
            "notes_today": [n for n in notes if n.date_created.date() == target_date],
            "currently_reading": [b for b in books if not b.is_completed and b.current_page > 0],
        }

    def _calculate_backlog_score(self, unread: int, in_progress: int) -> tuple[str, float]:
        """Score how much unfinished reading is piling up."""
        score = unread * 0.5 + in_progress * 1.2
        if score < 5:
            return "Healthy", score
        elif score < 15:
            return "Growing", score
        else:
            return "Overloaded", score

    def render(self, stats: dict, target_date: date) -> str:
        """Generate markdown report content."""
        books = stats["books"]
        notes = stats["notes"]
        recs = stats["recommendations"]
        status, score = self._calculate_backlog_score(books.unread, books.currently_reading)

        lines = []
        lines.append(f"# Reading Report ({iso_date(target_date)})")
        lines.append("")
        lines.append("## Overview")
        lines.append(f"- Books: {books.total} ({books.completed} completed, "
                     f"{books.currently_reading} in progress, {books.unread} unread)")
        lines.append(f"- Average rating: {books.average_rating:.1f}")
        lines.append(f"- Pages read: {books.total_pages_read}")
        lines.append(f"- Average progress: {books.average_progress * 100:.0f}%")
        lines.append(f"- Read today or yesterday: {books.reading_streak}")
        lines.append(f"- Backlog: {status} ({score:.1f})")
        lines.append("")

        if books.favorite_genres:
            lines.append("## Favorite Genres")
            for genre in books.favorite_genres:
                lines.append(f"- {genre}")
            lines.append("")

        if stats["currently_reading"]:
            lines.append("## Currently Reading")
            for book in stats["currently_reading"][:5]:
                lines.append(f"- {book.title} by {book.author}: {book.progress_percentage}%")
            lines.append("")

        lines.append("## Notes")
        lines.append(f"- Total: {notes.total} ({notes.bookmarked} bookmarked)")
        lines.append(f"- Average per book: {notes.average_notes_per_book:.1f}")
        lines.append(f"- Written on this day: {len(stats['notes_today'])}")
        for category, count in notes.category_distribution.items():
            if count:
                lines.append(f"- {category.value}: {count}")
        if notes.popular_tags:
            lines.append(f"- Popular tags: {', '.join(notes.popular_tags[:5])}")
        lines.append("")

        lines.append("## Recommendations")
        lines.append(f"- Total: {recs.total} ({recs.read} read, {recs.in_library} in library)")
        lines.append(f"- Average confidence: {recs.average_confidence * 100:.0f}%")
        for level, count in recs.confidence_distribution.items():
            lines.append(f"- {level.value} confidence: {count}")
        lines.append("")

        lines.append("## Suggestions")
        suggestions = []
        if books.currently_reading > 3:
            suggestions.append("Several books are in progress, consider finishing one before starting another")
        if books.unread > 10:
            suggestions.append("The unread pile is large, skip new additions for a while")
        if recs.total and recs.read == 0:
            suggestions.append("None of your recommendations are marked read yet")
        if not suggestions:
            suggestions.append("Keep up the reading rhythm")
        for s in suggestions:
            lines.append(f"- {s}")

        return "\n".join(lines)

    def _save_to_store(self, target_date: date, content: str) -> bool:
        """Save report under its date key; an existing report is kept."""
        key = REPORT_KEY_PREFIX + iso_date(target_date)
        if self.kv.get(key) is not None:
            return False
        self.kv.set(key, content)
        return True

    def _save_to_file(self, target_date: date, content: str) -> Path:
        """Save report to markdown file."""
        filepath = self._dir() / f"{iso_date(target_date)}.md"
        filepath.write_text(content, encoding="utf-8")
        return filepath

    def generate(self, target_date: Optional[date] = None, force: bool = False) -> str:
        """Generate the reading report for a date.

        Args:
            target_date: Date to report on, defaults to today
            force: Regenerate even if a report for the date exists

        Returns:
            Path to the generated report file
        """
        if target_date is None:
            target_date = today()

        key = REPORT_KEY_PREFIX + iso_date(target_date)
        stored = self.kv.get(key)
        if not force and stored is not None:
            filepath = self._dir() / f"{iso_date(target_date)}.md"
            if not filepath.exists():
                filepath = self._save_to_file(target_date, stored)
            return str(filepath)

        content = self.render(self._collect_stats(target_date), target_date)

        if force:
            self.kv.delete(key)
        self._save_to_store(target_date, content)
        filepath = self._save_to_file(target_date, content)
        logger.info(f"Report written to {filepath}")
        return str(filepath)
