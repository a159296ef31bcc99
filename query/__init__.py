# Query module
from .pipeline import (
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
    matches_text,
    next_to_read,
    notes_created_in_last,
    recent_notes,
    recently_read,
    run_pipeline,
    top_recommendations,
)

__all__ = [
    "ALL_GENRES",
    "BookQuery",
    "BookSort",
    "NoteQuery",
    "NoteSort",
    "RecommendationQuery",
    "RecommendationSort",
    "available_genres",
    "filter_books",
    "filter_notes",
    "filter_recommendations",
    "matches_text",
    "next_to_read",
    "notes_created_in_last",
    "recent_notes",
    "recently_read",
    "run_pipeline",
    "top_recommendations",
]
