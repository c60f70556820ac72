"""Unit tests for same-role lane comparison."""

from __future__ import annotations

import pytest

from domain.common import ParticipantRecord
from domain.ratings.lanes import compare_lanes, lane_weights_for_role
from domain.ratings.metrics import extract_performance_metrics

LANE_PRIORITIES = {
    "MIDDLE": {"damage": 0.5, "kda": 0.5},
    "UTILITY": {"vision": 1.0},
}


def _participant(name: str, role: str, *, damage: float = 15000.0, vision: float = 30.0) -> ParticipantRecord:
    return ParticipantRecord(
        name=name,
        team_id=100,
        win=True,
        role=role,
        kills=3,
        deaths=3,
        assists=3,
        time_played=1800.0,
        total_damage_dealt_to_champions=damage,
        vision_score=vision,
    )


def _standings(participants: list[ParticipantRecord], priorities=LANE_PRIORITIES):
    metrics = {index: extract_performance_metrics(p) for index, p in enumerate(participants)}
    return compare_lanes(participants, metrics, priorities)


def test_ranks_same_role_participants() -> None:
    standings = _standings(
        [
            _participant("weak_mid", "MIDDLE", damage=9000.0),
            _participant("strong_mid", "MIDDLE", damage=30000.0),
        ]
    )

    assert standings[1].rank == 1
    assert standings[1].percentile == pytest.approx(1.0)
    assert standings[0].rank == 2
    assert standings[0].percentile == pytest.approx(0.5)
    assert standings[0].group_size == 2
    assert standings[1].lane_score > standings[0].lane_score


def test_single_participant_role_has_no_standing() -> None:
    standings = _standings(
        [
            _participant("mid_a", "MIDDLE"),
            _participant("mid_b", "MIDDLE"),
            _participant("solo_support", "UTILITY"),
        ]
    )

    assert set(standings) == {0, 1}


def test_ties_keep_input_order() -> None:
    standings = _standings([_participant("first", "MIDDLE"), _participant("second", "MIDDLE")])

    assert standings[0].rank == 1
    assert standings[1].rank == 2


def test_three_way_group_percentiles() -> None:
    standings = _standings(
        [
            _participant("low", "UTILITY", vision=10.0),
            _participant("high", "UTILITY", vision=90.0),
            _participant("mid", "UTILITY", vision=40.0),
        ]
    )

    assert [standings[index].rank for index in range(3)] == [3, 1, 2]
    assert standings[1].percentile == pytest.approx(1.0)
    assert standings[2].percentile == pytest.approx(2.0 / 3.0)
    assert standings[0].percentile == pytest.approx(1.0 / 3.0)


def test_unknown_role_uses_fallback_table() -> None:
    assert lane_weights_for_role("jungle", LANE_PRIORITIES) == LANE_PRIORITIES["MIDDLE"]
    assert lane_weights_for_role("utility", LANE_PRIORITIES) == LANE_PRIORITIES["UTILITY"]
    assert lane_weights_for_role("TOP", {"DEFAULT": {"kda": 1.0}}) == {"kda": 1.0}

    standings = _standings(
        [
            _participant("jungle_a", "JUNGLE", damage=20000.0),
            _participant("jungle_b", "JUNGLE", damage=10000.0),
        ]
    )
    assert standings[0].rank == 1
    assert standings[0].role == "JUNGLE"


def test_missing_fallback_table_raises() -> None:
    with pytest.raises(ValueError, match="No lane stat priorities"):
        lane_weights_for_role("TOP", {"UTILITY": {"vision": 1.0}})
