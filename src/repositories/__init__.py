"""Database and file repository helpers."""

from repositories.matches import discover_match_paths, iter_matches, load_match
from repositories.ratings import (
    RatingStats,
    SqlRatingStore,
    TopCategory,
    ensure_schema,
    get_game,
    save_game,
)

__all__ = [
    "RatingStats",
    "SqlRatingStore",
    "TopCategory",
    "discover_match_paths",
    "ensure_schema",
    "get_game",
    "iter_matches",
    "load_match",
    "save_game",
]
