"""Rating ledger: the single owner of persisted player rating records."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from typing import Any, Protocol

from domain.ratings.engine import MatchEvaluation, ParticipantRatingResult

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 50


class StorageError(RuntimeError):
    """Raised by rating stores when the backing storage fails."""


@dataclass(frozen=True)
class RatingHistoryEntry:
    game_id: str
    old_rating: int
    new_rating: int
    delta: int
    method: str
    timestamp: str


@dataclass(frozen=True)
class PerformanceHistoryEntry:
    game_id: str
    performance_score: float
    role: str
    win: bool
    timestamp: str
    lane_rank: int | None = None


@dataclass
class RatingRecord:
    """One player's persisted rating, running totals and bounded history."""

    name: str
    rating: int
    total_kills: int = 0
    total_assists: int = 0
    total_deaths: int = 0
    total_gold: int = 0
    total_wins: int = 0
    total_losses: int = 0
    games: int = 0
    avg_kills: float = 0.0
    avg_assists: float = 0.0
    avg_deaths: float = 0.0
    avg_gold: float = 0.0
    rating_history: list[RatingHistoryEntry] = field(default_factory=list)
    performance_history: list[PerformanceHistoryEntry] = field(default_factory=list)

    @classmethod
    def new(cls, name: str, base_rating: int) -> RatingRecord:
        return cls(name=name, rating=base_rating)

    @property
    def win_loss(self) -> str:
        return f"{self.total_wins}:{self.total_losses}"

    @property
    def win_rate(self) -> float:
        return self.total_wins / self.games if self.games else 0.0

    def recompute_averages(self) -> None:
        if self.games == 0:
            self.avg_kills = self.avg_assists = self.avg_deaths = self.avg_gold = 0.0
            return
        self.avg_kills = self.total_kills / self.games
        self.avg_assists = self.total_assists / self.games
        self.avg_deaths = self.total_deaths / self.games
        self.avg_gold = self.total_gold / self.games

    def append_history(
        self,
        rating_entry: RatingHistoryEntry,
        performance_entry: PerformanceHistoryEntry,
    ) -> None:
        self.rating_history = [*self.rating_history, rating_entry][-HISTORY_LIMIT:]
        self.performance_history = [*self.performance_history, performance_entry][-HISTORY_LIMIT:]

    def as_document(self) -> dict[str, Any]:
        """Logical persisted shape of the record."""
        return {
            "name": self.name,
            "rating": self.rating,
            "total_kills": self.total_kills,
            "total_assists": self.total_assists,
            "total_deaths": self.total_deaths,
            "total_gold": self.total_gold,
            "total_wins": self.total_wins,
            "total_losses": self.total_losses,
            "games": self.games,
            "avg_kills": self.avg_kills,
            "avg_assists": self.avg_assists,
            "avg_deaths": self.avg_deaths,
            "avg_gold": self.avg_gold,
            "win_loss": self.win_loss,
            "rating_history": [asdict(entry) for entry in self.rating_history],
            "performance_history": [asdict(entry) for entry in self.performance_history],
        }

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> RatingRecord:
        return cls(
            name=str(document["name"]),
            rating=int(document["rating"]),
            total_kills=int(document.get("total_kills", 0)),
            total_assists=int(document.get("total_assists", 0)),
            total_deaths=int(document.get("total_deaths", 0)),
            total_gold=int(document.get("total_gold", 0)),
            total_wins=int(document.get("total_wins", 0)),
            total_losses=int(document.get("total_losses", 0)),
            games=int(document.get("games", 0)),
            avg_kills=float(document.get("avg_kills", 0.0)),
            avg_assists=float(document.get("avg_assists", 0.0)),
            avg_deaths=float(document.get("avg_deaths", 0.0)),
            avg_gold=float(document.get("avg_gold", 0.0)),
            rating_history=[
                RatingHistoryEntry(**entry) for entry in document.get("rating_history") or []
            ],
            performance_history=[
                PerformanceHistoryEntry(**entry)
                for entry in document.get("performance_history") or []
            ],
        )


class RatingStore(Protocol):
    """Persistence contract consumed by the ledger."""

    def load_rating(self, name: str) -> RatingRecord | None: ...

    def save_rating(self, record: RatingRecord) -> None: ...


def _utc_now() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class RatingLedger:
    """Applies match evaluations to stored rating records.

    A game id is not checked for prior processing; committing the same
    evaluation twice counts it twice.
    """

    def __init__(
        self,
        store: RatingStore,
        *,
        base_rating: int,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.store = store
        self.base_rating = base_rating
        self.clock = clock

    def load_or_create(self, name: str) -> RatingRecord:
        try:
            record = self.store.load_rating(name)
        except StorageError as exc:
            logger.warning(
                "failed to load rating for %s, treating as new player at %d: %s",
                name,
                self.base_rating,
                exc,
            )
            record = None
        return record if record is not None else RatingRecord.new(name, self.base_rating)

    def current_ratings(self, names: Iterable[str]) -> dict[str, int]:
        return {name: self.load_or_create(name).rating for name in dict.fromkeys(names)}

    def commit(self, evaluation: MatchEvaluation) -> list[RatingRecord]:
        """Persist the authoritative outcome of every participant, in input order."""
        timestamp = self.clock().isoformat()
        records: list[RatingRecord] = []
        for participant, result in zip(evaluation.participants, evaluation.results):
            record = self.load_or_create(result.name)
            old_rating = record.rating

            record.total_kills += participant.kills
            record.total_assists += participant.assists
            record.total_deaths += participant.deaths
            record.total_gold += participant.gold_earned
            record.total_wins += 1 if result.win else 0
            record.total_losses += 0 if result.win else 1
            record.games += 1
            record.recompute_averages()

            new_rating = self._new_rating(old_rating, result)
            record.rating = new_rating
            record.append_history(
                RatingHistoryEntry(
                    game_id=evaluation.game_id,
                    old_rating=old_rating,
                    new_rating=new_rating,
                    delta=result.delta,
                    method=result.method,
                    timestamp=timestamp,
                ),
                PerformanceHistoryEntry(
                    game_id=evaluation.game_id,
                    performance_score=result.performance_score,
                    role=result.role,
                    win=result.win,
                    timestamp=timestamp,
                    lane_rank=result.lane_rank,
                ),
            )

            self.store.save_rating(record)
            logger.info(
                "%s [%s] rating: %d -> %d (%+d)",
                record.name,
                result.method,
                old_rating,
                new_rating,
                result.delta,
            )
            records.append(record)
        return records

    @staticmethod
    def _new_rating(stored_rating: int, result: ParticipantRatingResult) -> int:
        # The stored rating can differ from the evaluated one when a name
        # appears twice in a match; apply the delta to what is stored now.
        if stored_rating == result.old_rating:
            return result.new_rating
        return max(0, stored_rating + result.delta)


__all__ = [
    "HISTORY_LIMIT",
    "PerformanceHistoryEntry",
    "RatingHistoryEntry",
    "RatingLedger",
    "RatingRecord",
    "RatingStore",
    "StorageError",
]
