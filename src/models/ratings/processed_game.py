"""processed_games table model."""

from __future__ import annotations

from typing import Any

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base
from models.ratings.mixins import JSONDocument, TimestampMixin


class ProcessedGame(TimestampMixin, Base):
    """Summary of one rated match (one row per game id)."""

    __tablename__ = "processed_games"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    game_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    rating_system: Mapped[str] = mapped_column(String(128), nullable=False)
    config_json: Mapped[dict[str, Any]] = mapped_column(JSONDocument, nullable=False)
    participants: Mapped[list[dict[str, Any]]] = mapped_column(JSONDocument, nullable=False)
