"""Tests for applying match evaluations to stored rating records."""

from __future__ import annotations

import logging
from datetime import datetime

import pytest

from domain.common import ParticipantRecord
from domain.ledger import (
    HISTORY_LIMIT,
    PerformanceHistoryEntry,
    RatingHistoryEntry,
    RatingLedger,
    RatingRecord,
    StorageError,
)
from domain.ratings.config import build_rating_system_config
from domain.ratings.elo.calculator import TraditionalParameters
from domain.ratings.engine import RatingEngine

WEIGHTS = {
    "kda": 0.25,
    "damage": 0.20,
    "vision": 0.10,
    "objectives": 0.15,
    "farm": 0.10,
    "survival": 0.10,
    "utility": 0.10,
}
FIXED_NOW = datetime(2026, 1, 1, 12, 0, 0)


class MemoryStore:
    def __init__(self) -> None:
        self.records: dict[str, RatingRecord] = {}
        self.saves = 0

    def load_rating(self, name: str) -> RatingRecord | None:
        return self.records.get(name)

    def save_rating(self, record: RatingRecord) -> None:
        self.saves += 1
        self.records[record.name] = record


class BrokenLoadStore(MemoryStore):
    def load_rating(self, name: str) -> RatingRecord | None:
        raise StorageError("connection reset")


class BrokenSaveStore(MemoryStore):
    def save_rating(self, record: RatingRecord) -> None:
        raise StorageError("disk full")


def _participants() -> tuple[ParticipantRecord, ...]:
    return (
        ParticipantRecord(name="a", team_id=100, win=True, kills=6, deaths=1, assists=4, gold_earned=12000),
        ParticipantRecord(name="b", team_id=100, win=True, kills=2, deaths=3, assists=9, gold_earned=9000),
        ParticipantRecord(name="c", team_id=200, win=False, kills=1, deaths=5, assists=2, gold_earned=8000),
        ParticipantRecord(name="d", team_id=200, win=False, kills=3, deaths=4, assists=1, gold_earned=9500),
    )


def _evaluate(ledger: RatingLedger, game_id: str = "G1"):
    config = build_rating_system_config(
        performance_weights=WEIGHTS,
        lane_stat_priorities={"MIDDLE": {"kda": 1.0}},
        traditional=TraditionalParameters(k_factor=64.0, performance_weight=0.0),
    )
    participants = _participants()
    current = ledger.current_ratings(participant.name for participant in participants)
    return RatingEngine(config).evaluate(game_id, participants, current)


def _ledger(store: MemoryStore) -> RatingLedger:
    return RatingLedger(store, base_rating=1000, clock=lambda: FIXED_NOW)


def test_commit_updates_ratings_totals_and_history() -> None:
    store = MemoryStore()
    ledger = _ledger(store)
    records = ledger.commit(_evaluate(ledger))

    assert [record.rating for record in records] == [1032, 1032, 968, 968]
    assert store.saves == 4

    winner = store.records["a"]
    assert winner.games == 1
    assert winner.total_wins == 1
    assert winner.total_losses == 0
    assert winner.win_loss == "1:0"
    assert winner.avg_kills == pytest.approx(6.0)
    assert winner.avg_gold == pytest.approx(12000.0)
    assert winner.rating_history == [
        RatingHistoryEntry(
            game_id="G1",
            old_rating=1000,
            new_rating=1032,
            delta=32,
            method="traditional",
            timestamp=FIXED_NOW.isoformat(),
        )
    ]
    assert winner.performance_history[0].win is True
    assert store.records["c"].win_loss == "0:1"


def test_second_commit_builds_on_stored_ratings() -> None:
    store = MemoryStore()
    ledger = _ledger(store)
    ledger.commit(_evaluate(ledger, "G1"))
    second = _evaluate(ledger, "G2")

    assert second.results[0].old_rating == 1032
    ledger.commit(second)

    winner = store.records["a"]
    assert winner.games == 2
    assert winner.games == winner.total_wins + winner.total_losses
    assert winner.avg_kills == pytest.approx(6.0)
    assert [entry.game_id for entry in winner.rating_history] == ["G1", "G2"]
    assert winner.rating == winner.rating_history[-1].new_rating


def test_history_is_capped() -> None:
    store = MemoryStore()
    record = RatingRecord.new("a", 1000)
    for number in range(HISTORY_LIMIT):
        record.append_history(
            RatingHistoryEntry(f"old{number}", 1000, 1000, 0, "hybrid", "t"),
            PerformanceHistoryEntry(f"old{number}", 1.0, "MIDDLE", True, "t"),
        )
    store.records["a"] = record

    ledger = _ledger(store)
    ledger.commit(_evaluate(ledger, "newest"))

    history = store.records["a"].rating_history
    assert len(history) == HISTORY_LIMIT
    assert history[0].game_id == "old1"
    assert history[-1].game_id == "newest"
    assert len(store.records["a"].performance_history) == HISTORY_LIMIT


def test_load_failure_treats_player_as_new(caplog: pytest.LogCaptureFixture) -> None:
    ledger = _ledger(BrokenLoadStore())

    with caplog.at_level(logging.WARNING, logger="domain.ledger"):
        record = ledger.load_or_create("a")

    assert record.rating == 1000
    assert record.games == 0
    assert "treating as new player" in caplog.text


def test_save_failure_propagates() -> None:
    ledger = _ledger(BrokenSaveStore())

    with pytest.raises(StorageError, match="disk full"):
        ledger.commit(_evaluate(ledger))


def test_win_rate_and_document_shape() -> None:
    record = RatingRecord(name="a", rating=1010, total_wins=3, total_losses=1, games=4)

    assert record.win_rate == pytest.approx(0.75)
    assert RatingRecord.new("b", 1000).win_rate == 0.0

    document = record.as_document()
    assert document["win_loss"] == "3:1"
    assert RatingRecord.from_document(document) == record
