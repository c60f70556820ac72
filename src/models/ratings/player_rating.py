"""player_ratings table model."""

from __future__ import annotations

from typing import Any

from sqlalchemy import CheckConstraint, Float, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base
from models.ratings.mixins import JSONDocument, TimestampMixin


class PlayerRating(TimestampMixin, Base):
    """Current rating, running totals and bounded history for one player name."""

    __tablename__ = "player_ratings"
    __table_args__ = (
        CheckConstraint("rating >= 0", name="ck_player_ratings_rating_floor"),
        CheckConstraint("games = total_wins + total_losses", name="ck_player_ratings_games"),
        Index("idx_player_ratings_rating", "rating"),
        Index("idx_player_ratings_games", "games"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False, unique=True, index=True)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    total_kills: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_assists: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_deaths: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_gold: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_wins: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_losses: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    games: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    avg_kills: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    avg_assists: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    avg_deaths: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    avg_gold: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    win_loss: Mapped[str] = mapped_column(String(32), nullable=False, default="0:0")
    rating_history: Mapped[list[dict[str, Any]]] = mapped_column(JSONDocument, nullable=False)
    performance_history: Mapped[list[dict[str, Any]]] = mapped_column(JSONDocument, nullable=False)
