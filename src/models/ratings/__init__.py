"""Rating ORM models."""

from models.ratings.player_rating import PlayerRating
from models.ratings.processed_game import ProcessedGame

__all__ = ["PlayerRating", "ProcessedGame"]
