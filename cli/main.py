#!/usr/bin/env python3
"""Bookshelf CLI - command line interface for the library, notes and recommendations."""
import argparse
import datetime as dt
import sys
from pathlib import Path
from typing import Optional

from config import load_config
from core import NoteCategory, NoteColor
from logging_config import setup_logging
from query import BookQuery, BookSort, NoteQuery, RecommendationQuery, filter_books, filter_notes, filter_recommendations
from services import Library, open_library
from services.stats_service import book_stats, note_stats, recommendation_stats


def _find_book(lib: Library, book_id: str):
    book = lib.books.get_book(book_id)
    if book is None:
        print(f"No book with id {book_id}.")
    return book


def _report(result, done: str) -> None:
    if result.ok:
        print(done)
    else:
        print(f"Nothing changed ({result.status.value}).")


def add_book(lib: Library, args: argparse.Namespace) -> None:
    book = lib.books.create_book(
        title=args.title,
        author=args.author,
        genre=args.genre,
        synopsis=args.synopsis or "",
        content=Path(args.content_file).read_text(encoding="utf-8") if args.content_file else "",
        total_pages=args.pages,
    )
    print(f"Added book {book.id}.")


def list_books(lib: Library, args: argparse.Namespace) -> None:
    books = filter_books(lib.books.books, BookQuery(
        query=args.search or "",
        genre=args.genre,
        sort=BookSort[args.sort.upper()],
        limit=args.limit,
    ))
    if not books:
        print("No books.")
        return
    for b in books:
        rating = f" {'*' * b.rating}" if b.rating else ""
        tags = f" #{' #'.join(b.tags)}" if b.tags else ""
        state = "done" if b.is_completed else f"{b.progress_percentage}%"
        print(
            f"[{b.id}] {b.title} - {b.author} ({b.genre}){rating}\n"
            f"page {b.current_page}/{b.total_pages} {state}{tags}\n"
        )


def update_progress(lib: Library, args: argparse.Namespace) -> None:
    _report(lib.books.update_reading_progress(args.id, args.page), "Progress saved.")


def complete_book(lib: Library, args: argparse.Namespace) -> None:
    _report(lib.books.mark_as_completed(args.id), "Marked as completed.")


def rate_book(lib: Library, args: argparse.Namespace) -> None:
    _report(lib.books.rate_book(args.id, args.rating), "Rating saved.")


def delete_book(lib: Library, args: argparse.Namespace) -> None:
    removed = lib.books.delete_book(args.id)
    if removed and args.with_notes:
        lib.notes.delete_all_for_book(args.id)
    print(f"Deleted {removed} book(s).")


def add_note(lib: Library, args: argparse.Namespace) -> None:
    if _find_book(lib, args.book) is None:
        return
    note = lib.notes.create_note(
        title=args.title,
        content=args.content,
        book_id=args.book,
        page_reference=args.page,
        category=NoteCategory[args.category.upper()],
        color=NoteColor[args.color.upper()],
        excerpt=args.excerpt,
    )
    for tag in args.tags.split(",") if args.tags else []:
        lib.notes.add_tag(note.id, tag)
    print(f"Added note {note.id}.")


def list_notes(lib: Library, args: argparse.Namespace) -> None:
    notes = filter_notes(lib.notes.notes, NoteQuery(
        query=args.search or "",
        book_id=args.book,
        bookmarked_only=args.bookmarked,
        limit=args.limit,
    ))
    if not notes:
        print("No notes.")
        return
    for n in notes:
        page = f" p.{n.page_reference}" if n.page_reference is not None else ""
        print(f"[{n.id}] {n.title} ({n.category.value}{page})\n{n.preview_text}\n")


def export_notes(lib: Library, args: argparse.Namespace) -> None:
    if args.note:
        text = lib.notes.export_note(args.note)
        if text is None:
            print(f"No note with id {args.note}.")
            return
    else:
        text = lib.notes.export_all_for_book(args.book)
    if args.output:
        Path(args.output).write_text(text, encoding="utf-8")
        print(f"Exported to {args.output}")
    else:
        print(text)


def delete_note(lib: Library, args: argparse.Namespace) -> None:
    print(f"Deleted {lib.notes.delete_note(args.id)} note(s).")


def generate_recommendations(lib: Library, args: argparse.Namespace) -> None:
    recs = lib.recommendations.refresh() if args.refresh else lib.recommendations.generate()
    print(f"Generated {len(recs)} recommendation(s).")


def _print_recommendations(recs) -> None:
    if not recs:
        print("No recommendations.")
        return
    for r in recs:
        flags = []
        if r.is_read:
            flags.append("read")
        if r.is_in_library:
            flags.append("in library")
        suffix = f" [{', '.join(flags)}]" if flags else ""
        print(
            f"[{r.id}] {r.title} - {r.author} ({r.genre}){suffix}\n"
            f"{r.recommendation_type.value}, {r.confidence_level.value} confidence "
            f"({r.confidence_percentage}%)\n"
            f"{r.reason}\n"
        )


def list_recommendations(lib: Library, args: argparse.Namespace) -> None:
    _print_recommendations(filter_recommendations(lib.recommendations.recommendations, RecommendationQuery(
        query=args.search or "",
        unread_only=args.unread,
        limit=args.limit,
    )))


def personalized_recommendations(lib: Library, args: argparse.Namespace) -> None:
    _print_recommendations(lib.recommendations.personalized(limit=args.limit))


def similar_recommendations(lib: Library, args: argparse.Namespace) -> None:
    book = _find_book(lib, args.book)
    if book is not None:
        _print_recommendations(lib.recommendations.similar_to(book, limit=args.limit))


def mark_recommendation_read(lib: Library, args: argparse.Namespace) -> None:
    _report(lib.recommendations.mark_as_read(args.id), "Marked as read.")


def add_recommendation_to_library(lib: Library, args: argparse.Namespace) -> None:
    book = lib.recommendations.add_to_library(args.id)
    if book is None:
        print(f"No recommendation with id {args.id}.")
        return
    print(f"Added book {book.id} ({book.total_pages} pages).")


def rate_recommendation(lib: Library, args: argparse.Namespace) -> None:
    _report(lib.recommendations.rate(args.id, args.rating), "Rating saved.")


def show_stats(lib: Library, args: argparse.Namespace) -> None:
    books = book_stats(lib.books.books)
    notes = note_stats(lib.notes.notes)
    recs = recommendation_stats(lib.recommendations.recommendations)
    print(f"Books: {books.total} total, {books.completed} completed, "
          f"{books.currently_reading} reading, {books.unread} unread")
    print(f"Average rating: {books.average_rating:.1f}")
    print(f"Favorite genres: {', '.join(books.favorite_genres) or '-'}")
    print(f"Notes: {notes.total} total, {notes.bookmarked} bookmarked, "
          f"{notes.average_notes_per_book:.1f} per book")
    print(f"Recommendations: {recs.total} total, {recs.read} read, {recs.in_library} in library")


def generate_report(lib: Library, args: argparse.Namespace) -> None:
    target_date = None
    if args.date:
        target_date = dt.datetime.strptime(args.date, "%Y-%m-%d").date()
    filepath = lib.reports.generate(target_date=target_date, force=args.force)
    print(f"Report generated: {filepath}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Bookshelf: a personal library with notes and recommendations.")
    parser.add_argument("--db", default=None, help="SQLite database path (overrides config.json).")
    parser.add_argument("--config", default=None, help="Path to config.json.")
    sub = parser.add_subparsers(dest="command", required=True)

    # book
    p_book = sub.add_parser("book", help="Manage books.")
    book_sub = p_book.add_subparsers(dest="action", required=True)

    p = book_sub.add_parser("add", help="Add one book.")
    p.add_argument("--title", required=True)
    p.add_argument("--author", required=True)
    p.add_argument("--genre", required=True)
    p.add_argument("--synopsis", default="")
    p.add_argument("--content-file", default="", help="Text file with the book content.")
    p.add_argument("--pages", type=int, default=100, help="Total pages.")
    p.set_defaults(func=add_book)

    p = book_sub.add_parser("list", help="List books.")
    p.add_argument("--search", default="", help="Match title, author, genre or tag.")
    p.add_argument("--genre", default=None)
    p.add_argument("--sort", default="date_added", choices=[s.name.lower() for s in BookSort])
    p.add_argument("--limit", type=int, default=None)
    p.set_defaults(func=list_books)

    p = book_sub.add_parser("progress", help="Set the current page.")
    p.add_argument("id")
    p.add_argument("page", type=int)
    p.set_defaults(func=update_progress)

    p = book_sub.add_parser("complete", help="Mark a book completed.")
    p.add_argument("id")
    p.set_defaults(func=complete_book)

    p = book_sub.add_parser("rate", help="Rate a book 1-5.")
    p.add_argument("id")
    p.add_argument("rating", type=int)
    p.set_defaults(func=rate_book)

    p = book_sub.add_parser("delete", help="Delete a book.")
    p.add_argument("id")
    p.add_argument("--with-notes", action="store_true", help="Also delete the book's notes.")
    p.set_defaults(func=delete_book)

    # note
    p_note = sub.add_parser("note", help="Manage notes.")
    note_sub = p_note.add_subparsers(dest="action", required=True)

    p = note_sub.add_parser("add", help="Add a note to a book.")
    p.add_argument("--book", required=True, help="Book id.")
    p.add_argument("--title", default="")
    p.add_argument("--content", default="")
    p.add_argument("--excerpt", default=None, help="Highlighted text to quote.")
    p.add_argument("--page", type=int, default=None)
    p.add_argument("--category", default="general", choices=[c.name.lower() for c in NoteCategory])
    p.add_argument("--color", default="yellow", choices=[c.name.lower() for c in NoteColor])
    p.add_argument("--tags", default="", help="Comma-separated tags.")
    p.set_defaults(func=add_note)

    p = note_sub.add_parser("list", help="List notes.")
    p.add_argument("--book", default=None)
    p.add_argument("--search", default="")
    p.add_argument("--bookmarked", action="store_true")
    p.add_argument("--limit", type=int, default=None)
    p.set_defaults(func=list_notes)

    p = note_sub.add_parser("export", help="Export notes as markdown.")
    group = p.add_mutually_exclusive_group(required=True)
    group.add_argument("--note", default=None, help="Note id.")
    group.add_argument("--book", default=None, help="Export every note of this book.")
    p.add_argument("--output", default="", help="Write to file instead of stdout.")
    p.set_defaults(func=export_notes)

    p = note_sub.add_parser("delete", help="Delete a note.")
    p.add_argument("id")
    p.set_defaults(func=delete_note)

    # rec
    p_rec = sub.add_parser("rec", help="Recommendations.")
    rec_sub = p_rec.add_subparsers(dest="action", required=True)

    p = rec_sub.add_parser("generate", help="Generate recommendations from your reading.")
    p.add_argument("--refresh", action="store_true", help="Clear before generating.")
    p.set_defaults(func=generate_recommendations)

    p = rec_sub.add_parser("list", help="List recommendations by confidence.")
    p.add_argument("--search", default="")
    p.add_argument("--unread", action="store_true")
    p.add_argument("--limit", type=int, default=None)
    p.set_defaults(func=list_recommendations)

    p = rec_sub.add_parser("personalized", help="Recommendations re-ranked for you.")
    p.add_argument("--limit", type=int, default=10)
    p.set_defaults(func=personalized_recommendations)

    p = rec_sub.add_parser("similar", help="Recommendations similar to a book.")
    p.add_argument("book", help="Book id.")
    p.add_argument("--limit", type=int, default=5)
    p.set_defaults(func=similar_recommendations)

    p = rec_sub.add_parser("read", help="Mark a recommendation read.")
    p.add_argument("id")
    p.set_defaults(func=mark_recommendation_read)

    p = rec_sub.add_parser("add", help="Add a recommendation to the library.")
    p.add_argument("id")
    p.set_defaults(func=add_recommendation_to_library)

    p = rec_sub.add_parser("rate", help="Rate a recommendation 0-5.")
    p.add_argument("id")
    p.add_argument("rating", type=float)
    p.set_defaults(func=rate_recommendation)

    # stats / report
    p = sub.add_parser("stats", help="Print library statistics.")
    p.set_defaults(func=show_stats)

    p = sub.add_parser("report", help="Generate a reading report.")
    p.add_argument("--date", default="", help="Report date (YYYY-MM-DD), defaults to today.")
    p.add_argument("--force", action="store_true", help="Force regenerate if exists.")
    p.set_defaults(func=generate_report)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    config = load_config(Path(args.config) if args.config else None)
    setup_logging(config["log_level"], config["log_file"])

    lib = open_library(args.db or config["db_path"], config=config)
    try:
        args.func(lib, args)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        lib.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
