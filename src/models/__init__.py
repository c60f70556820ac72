"""ORM models."""

from models.base import Base
from models.ratings import PlayerRating, ProcessedGame

__all__ = ["Base", "PlayerRating", "ProcessedGame"]
