"""Rating persistence repositories."""

from repositories.ratings.base import ensure_schema
from repositories.ratings.game_repository import get_game, save_game
from repositories.ratings.player_repository import RatingStats, SqlRatingStore, TopCategory

__all__ = ["RatingStats", "SqlRatingStore", "TopCategory", "ensure_schema", "get_game", "save_game"]
