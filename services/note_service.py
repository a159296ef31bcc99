# Note Service
"""
Notes on books: creation, organisation, tags and markdown export.
"""
import logging
from collections import Counter
from typing import Optional

from core import Note, NoteCategory, NoteColor
from query import NoteQuery, NoteSort, filter_notes
from storage import NoteRepository, StorageResult

logger = logging.getLogger(__name__)

ARCHIVED_TAG = "archived"
UNTITLED = "Untitled Note"


def format_date(value) -> str:
    """Medium date with short time, e.g. ``Mar 5, 2024 at 2:07 PM``."""
    hour = value.hour % 12 or 12
    meridiem = "AM" if value.hour < 12 else "PM"
    return f"{value.strftime('%b')} {value.day}, {value.year} at {hour}:{value.minute:02d} {meridiem}"


def export_note(note: Note) -> str:
    """Render one note as markdown."""
    lines = [
        f"# {note.title}",
        "",
        f"**Category:** {note.category.value}",
        f"**Created:** {format_date(note.date_created)}",
    ]
    if note.page_reference is not None:
        lines.append(f"**Page Reference:** {note.page_reference}")
    if note.tags:
        lines.append(f"**Tags:** {', '.join(note.tags)}")
    lines.append("---")
    lines.append("")
    lines.append(note.content)
    return "\n".join(lines)


class NoteService:
    """Service for notes attached to books."""

    def __init__(self, repo: NoteRepository):
        self.repo = repo

    @property
    def notes(self) -> list[Note]:
        return self.repo.list_all()

    def create_note(self, title: str, content: str, book_id: str,
                    page_reference: Optional[int] = None,
                    category: NoteCategory = NoteCategory.GENERAL,
                    color: NoteColor = NoteColor.YELLOW,
                    excerpt: Optional[str] = None) -> Note:
        """Add a new note, optionally seeded from highlighted text."""
        if excerpt:
            quoted = "\n".join(f"> {line}" for line in excerpt.strip().splitlines())
            content = f"{quoted}\n\n{content}" if content else quoted
        note = Note(
            title=title.strip() or UNTITLED,
            content=content,
            book_id=book_id,
            page_reference=page_reference,
            category=category,
            color=color,
        )
        self.repo.add(note)
        return note

    def add_note(self, note: Note) -> StorageResult:
        return self.repo.add(note)

    def update_note(self, note: Note) -> StorageResult:
        note.touch()
        return self.repo.update(note)

    def delete_note(self, note_id: str) -> int:
        return self.repo.delete(note_id)

    def delete_all_for_book(self, book_id: str) -> int:
        removed = self.repo.delete_where(lambda n: n.book_id == book_id)
        logger.info(f"Deleted {removed} note(s) for book {book_id}")
        return removed

    def get_note(self, note_id: str) -> Optional[Note]:
        return self.repo.get(note_id)

    def toggle_bookmark(self, note_id: str) -> StorageResult:
        def change(note: Note) -> None:
            note.is_bookmarked = not note.is_bookmarked
            note.touch()
        return self.repo.modify(note_id, change)

    def update_category(self, note_id: str, category: NoteCategory) -> StorageResult:
        def change(note: Note) -> None:
            note.category = category
            note.touch()
        return self.repo.modify(note_id, change)

    def update_color(self, note_id: str, color: NoteColor) -> StorageResult:
        def change(note: Note) -> None:
            note.color = color
            note.touch()
        return self.repo.modify(note_id, change)

    def bulk_update_category(self, note_ids: list[str], category: NoteCategory) -> None:
        for note_id in note_ids:
            self.update_category(note_id, category)

    def bulk_update_color(self, note_ids: list[str], color: NoteColor) -> None:
        for note_id in note_ids:
            self.update_color(note_id, color)

    def add_tag(self, note_id: str, tag: str) -> StorageResult:
        tag = tag.strip()
        if not tag:
            return StorageResult.invalid("empty tag")
        return self.repo.modify(note_id, lambda n: n.add_tag(tag))

    def remove_tag(self, note_id: str, tag: str) -> StorageResult:
        return self.repo.modify(note_id, lambda n: n.remove_tag(tag))

    def archive(self, note_id: str) -> StorageResult:
        return self.add_tag(note_id, ARCHIVED_TAG)

    def unarchive(self, note_id: str) -> StorageResult:
        return self.remove_tag(note_id, ARCHIVED_TAG)

    def archived(self) -> list[Note]:
        return self.with_tag(ARCHIVED_TAG)

    def duplicate_note(self, note_id: str) -> Optional[Note]:
        original = self.repo.get(note_id)
        if original is None:
            return None
        copy = Note(
            title=f"{original.title} (Copy)",
            content=original.content,
            book_id=original.book_id,
            page_reference=original.page_reference,
            tags=list(original.tags),
            category=original.category,
            color=original.color,
        )
        self.repo.add(copy)
        return copy

    def all_tags(self) -> list[str]:
        return sorted({tag for note in self.notes for tag in note.tags})

    def popular_tags(self, limit: int = 10) -> list[str]:
        counts = Counter(tag for note in self.notes for tag in note.tags)
        return [tag for tag, _ in counts.most_common(limit)]

    def notes_for_book(self, book_id: str) -> list[Note]:
        return filter_notes(self.notes, NoteQuery(book_id=book_id))

    def bookmarked(self) -> list[Note]:
        return filter_notes(self.notes, NoteQuery(bookmarked_only=True))

    def by_category(self, category: NoteCategory) -> list[Note]:
        return filter_notes(self.notes, NoteQuery(category=category))

    def with_tag(self, tag: str) -> list[Note]:
        return filter_notes(self.notes, NoteQuery(tag=tag))

    def search(self, query: str) -> list[Note]:
        return filter_notes(self.notes, NoteQuery(query=query, sort=NoteSort.DATE_MODIFIED))

    def search_suggestions(self) -> list[str]:
        suggestions = set(self.popular_tags()[:5])
        suggestions.update(c.value for c in NoteCategory)
        suggestions.update(n.title for n in filter_notes(self.notes, NoteQuery(limit=5)))
        return sorted(suggestions)

    def export_note(self, note_id: str) -> Optional[str]:
        note = self.repo.get(note_id)
        if note is None:
            return None
        return export_note(note)

    def export_all_for_book(self, book_id: str) -> str:
        """Concatenate every note of a book, separated by horizontal rules."""
        notes = self.notes_for_book(book_id)
        if not notes:
            return "No notes found for this book."
        text = "# All Notes\n\n"
        for note in notes:
            text += export_note(note) + "\n\n---\n\n"
        return text
