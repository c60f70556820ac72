"""SQL-backed player rating store and leaderboard queries."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from sqlalchemy import Float, cast, desc, func, select
from sqlalchemy.orm import Session

from domain.ledger import RatingRecord
from domain.ratings.protocol import round_half_up
from models import PlayerRating, ProcessedGame
from repositories.ratings.base import storage_errors, utc_now

DEFAULT_MIN_GAMES = 2
WIN_RATE_MIN_GAMES = 5


class TopCategory(str, Enum):
    """Ranking categories for top-player listings."""

    ELO = "elo"
    GAMES = "games"
    WINRATE = "winrate"
    KILLS = "kills"


@dataclass(frozen=True)
class RatingStats:
    """Database-wide counts for the stats report."""

    players: int
    processed_games: int
    average_rating: int
    total_games_played: int


class SqlRatingStore:
    """Rating store over one SQLAlchemy session.

    Writes are flushed, not committed; the caller owns the transaction so
    that one match's updates land together.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def _row(self, name: str) -> PlayerRating | None:
        return self.session.execute(
            select(PlayerRating).where(PlayerRating.name == name)
        ).scalar_one_or_none()

    def load_rating(self, name: str) -> RatingRecord | None:
        with storage_errors(f"loading rating for {name!r}"):
            row = self._row(name)
        return None if row is None else _row_to_record(row)

    def save_rating(self, record: RatingRecord) -> None:
        document = record.as_document()
        with storage_errors(f"saving rating for {record.name!r}"):
            row = self._row(record.name)
            if row is None:
                row = PlayerRating(name=record.name)
                self.session.add(row)
            else:
                row.updated_at = utc_now()
            for key, value in document.items():
                if key != "name":
                    setattr(row, key, value)
            self.session.flush()

    def get_player(self, name: str) -> RatingRecord | None:
        return self.load_rating(name)

    def leaderboard(self, *, min_games: int = DEFAULT_MIN_GAMES) -> list[RatingRecord]:
        """Players with at least `min_games` games, highest rating first."""
        statement = (
            select(PlayerRating)
            .where(PlayerRating.games >= min_games)
            .order_by(desc(PlayerRating.rating), PlayerRating.name)
        )
        with storage_errors("loading leaderboard"):
            rows = self.session.execute(statement).scalars().all()
        return [_row_to_record(row) for row in rows]

    def top_players(
        self,
        category: TopCategory,
        *,
        limit: int = 10,
        min_games: int = DEFAULT_MIN_GAMES,
    ) -> list[RatingRecord]:
        if limit <= 0:
            raise ValueError("limit must be greater than 0")

        statement = select(PlayerRating)
        if category is TopCategory.ELO:
            statement = statement.where(PlayerRating.games >= min_games).order_by(
                desc(PlayerRating.rating)
            )
        elif category is TopCategory.GAMES:
            statement = statement.where(PlayerRating.games >= min_games).order_by(
                desc(PlayerRating.games)
            )
        elif category is TopCategory.WINRATE:
            statement = statement.where(PlayerRating.games >= WIN_RATE_MIN_GAMES).order_by(
                desc(cast(PlayerRating.total_wins, Float) / PlayerRating.games)
            )
        elif category is TopCategory.KILLS:
            statement = statement.where(PlayerRating.games >= min_games).order_by(
                desc(PlayerRating.avg_kills)
            )
        else:
            raise ValueError(f"Unknown category: {category}")

        statement = statement.order_by(PlayerRating.name).limit(limit)
        with storage_errors(f"loading top players by {category.value}"):
            rows = self.session.execute(statement).scalars().all()
        return [_row_to_record(row) for row in rows]

    def stats(self) -> RatingStats:
        """Player and game counts, mean rating (rounded) and summed games played."""
        player_totals = select(
            func.count(PlayerRating.id),
            func.avg(PlayerRating.rating),
            func.coalesce(func.sum(PlayerRating.games), 0),
        )
        with storage_errors("loading database stats"):
            players, average, total_games = self.session.execute(player_totals).one()
            processed_games = self.session.execute(
                select(func.count(ProcessedGame.id))
            ).scalar_one()
        return RatingStats(
            players=int(players),
            processed_games=int(processed_games),
            average_rating=round_half_up(float(average)) if average is not None else 0,
            total_games_played=int(total_games),
        )


def _row_to_record(row: PlayerRating) -> RatingRecord:
    return RatingRecord.from_document(
        {
            "name": row.name,
            "rating": row.rating,
            "total_kills": row.total_kills,
            "total_assists": row.total_assists,
            "total_deaths": row.total_deaths,
            "total_gold": row.total_gold,
            "total_wins": row.total_wins,
            "total_losses": row.total_losses,
            "games": row.games,
            "avg_kills": row.avg_kills,
            "avg_assists": row.avg_assists,
            "avg_deaths": row.avg_deaths,
            "avg_gold": row.avg_gold,
            "rating_history": list(row.rating_history or []),
            "performance_history": list(row.performance_history or []),
        }
    )


__all__ = ["DEFAULT_MIN_GAMES", "RatingStats", "SqlRatingStore", "TopCategory"]
