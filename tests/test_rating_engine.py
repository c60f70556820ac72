"""Tests for match evaluation across enabled rating methods."""

from __future__ import annotations

import pytest

from domain.common import ParticipantRecord, TeamCompositionError
from domain.ratings.config import MethodToggles, build_rating_system_config
from domain.ratings.elo.calculator import TraditionalParameters
from domain.ratings.engine import RatingEngine, compare_methods
from domain.ratings.player_mixin import split_teams
from domain.ratings.protocol import MethodName
from domain.ratings.registry import build_methods, get, register, resolve_authoritative

WEIGHTS = {
    "kda": 0.25,
    "damage": 0.20,
    "vision": 0.10,
    "objectives": 0.15,
    "farm": 0.10,
    "survival": 0.10,
    "utility": 0.10,
}
LANES = {"MIDDLE": {"damage": 0.5, "kda": 0.5}, "UTILITY": {"vision": 1.0}}
ALL_METHODS = MethodToggles(traditional=True, lane_comparison=True, hybrid=True)


def _participant(name: str, team_id: int, win: bool, role: str, *, kills: int = 3) -> ParticipantRecord:
    return ParticipantRecord(
        name=name,
        team_id=team_id,
        win=win,
        role=role,
        kills=kills,
        deaths=2,
        assists=4,
        time_played=1800.0,
        total_damage_dealt_to_champions=12000.0 + kills * 1000.0,
        total_minions_killed=200,
        vision_score=30.0,
        gold_earned=11000,
    )


def _match() -> tuple[ParticipantRecord, ...]:
    return (
        _participant("blue_mid", 100, True, "MIDDLE", kills=8),
        _participant("blue_support", 100, True, "UTILITY", kills=1),
        _participant("red_mid", 200, False, "MIDDLE", kills=2),
        _participant("red_support", 200, False, "UTILITY", kills=0),
    )


def _config(**overrides):
    values = {"performance_weights": WEIGHTS, "lane_stat_priorities": LANES, "enabled": ALL_METHODS}
    values.update(overrides)
    return build_rating_system_config(**values)


def test_highest_priority_method_is_authoritative() -> None:
    evaluation = RatingEngine(_config()).evaluate("G1", _match(), {})

    assert evaluation.methods == (
        MethodName.HYBRID,
        MethodName.TRADITIONAL,
        MethodName.LANE_COMPARISON,
    )
    for result in evaluation.results:
        assert result.method == "hybrid"
        assert set(result.method_outcomes) == set(MethodName)
        assert result.delta == result.method_outcomes[MethodName.HYBRID].delta
        assert result.new_rating == result.old_rating + result.delta


def test_custom_priority_changes_authority() -> None:
    config = _config(
        priority=(MethodName.TRADITIONAL, MethodName.HYBRID, MethodName.LANE_COMPARISON)
    )
    evaluation = RatingEngine(config).evaluate("G1", _match(), {})

    assert {result.method for result in evaluation.results} == {"traditional"}


def test_single_enabled_method_is_authoritative() -> None:
    config = _config(
        enabled=MethodToggles(traditional=False, lane_comparison=True, hybrid=False)
    )
    evaluation = RatingEngine(config).evaluate("G1", _match(), {})

    assert evaluation.methods == (MethodName.LANE_COMPARISON,)
    assert all(set(r.method_outcomes) == {MethodName.LANE_COMPARISON} for r in evaluation.results)
    assert {result.method for result in evaluation.results} == {"lane_comparison"}


def test_results_follow_input_order_and_carry_lane_ranks() -> None:
    evaluation = RatingEngine(_config()).evaluate("G1", _match(), {"blue_mid": 1100})

    assert [result.name for result in evaluation.results] == [
        "blue_mid",
        "blue_support",
        "red_mid",
        "red_support",
    ]
    assert evaluation.results[0].old_rating == 1100
    assert evaluation.results[1].old_rating == 1000
    assert evaluation.results[0].lane_rank == 1
    assert evaluation.results[2].lane_rank == 2
    assert evaluation.results[2].lane_rank_percentile == pytest.approx(0.5)
    assert evaluation.results[0].performance_score > evaluation.results[2].performance_score


def test_winners_gain_and_losers_lose() -> None:
    evaluation = RatingEngine(_config()).evaluate("G1", _match(), {})

    for result in evaluation.results:
        for outcome in result.method_outcomes.values():
            assert (outcome.delta > 0) if result.win else (outcome.delta < 0)


def test_traditional_only_equal_ratings() -> None:
    config = _config(
        enabled=MethodToggles(),
        traditional=TraditionalParameters(k_factor=64.0, performance_weight=0.0),
    )
    evaluation = RatingEngine(config).evaluate("G1", _match(), {})

    assert [result.delta for result in evaluation.results] == [32, 32, -32, -32]


@pytest.mark.parametrize(
    "participants",
    [
        (
            ParticipantRecord(name="a", team_id=100, win=True),
            ParticipantRecord(name="b", team_id=100, win=True),
        ),
        (
            ParticipantRecord(name="a", team_id=100, win=True),
            ParticipantRecord(name="b", team_id=200, win=False),
            ParticipantRecord(name="c", team_id=300, win=False),
        ),
        (
            ParticipantRecord(name="a", team_id=100, win=True),
            ParticipantRecord(name="b", team_id=200, win=True),
        ),
        (
            ParticipantRecord(name="a", team_id=100, win=True),
            ParticipantRecord(name="b", team_id=100, win=False),
            ParticipantRecord(name="c", team_id=200, win=False),
            ParticipantRecord(name="d", team_id=200, win=False),
        ),
    ],
)
def test_invalid_team_composition_raises(participants) -> None:
    with pytest.raises(TeamCompositionError):
        RatingEngine(_config()).evaluate("bad", participants, {})


def test_compare_methods_runs_everything_without_mutating_config() -> None:
    config = _config(enabled=MethodToggles())
    evaluation = compare_methods(config, "G1", _match(), {})

    assert set(evaluation.methods) == set(MethodName)
    assert config.enabled == MethodToggles()
    assert {result.method for result in evaluation.results} == {"hybrid"}


def test_registry_builds_enabled_methods_in_priority_order() -> None:
    methods = build_methods(_config())
    assert [method.name for method in methods] == list(_config().priority)

    with pytest.raises(ValueError, match="Duplicate rating method registration"):
        register(MethodName.HYBRID, get(MethodName.HYBRID))


def test_resolve_authoritative_skips_missing_methods() -> None:
    evaluation = RatingEngine(_config()).evaluate("G1", _match(), {})
    outcomes = dict(evaluation.results[0].method_outcomes)
    del outcomes[MethodName.HYBRID]

    picked = resolve_authoritative(outcomes, _config().priority)
    assert picked is not None
    assert picked.method is MethodName.TRADITIONAL
    assert resolve_authoritative({}, _config().priority) is None


def test_teammates_with_different_outcomes_are_rejected() -> None:
    participants = (
        ParticipantRecord(name="a", team_id=100, win=True),
        ParticipantRecord(name="b", team_id=100, win=False),
        ParticipantRecord(name="c", team_id=200, win=False),
        ParticipantRecord(name="d", team_id=200, win=False),
    )

    with pytest.raises(TeamCompositionError, match="team 100 has members with different outcomes"):
        split_teams(participants)
