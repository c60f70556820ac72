"""Tests for participant payload parsing and match file discovery."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from domain.common import MalformedParticipantError, MatchInput, ParticipantRecord
from repositories.matches import discover_match_paths, iter_matches, load_match


def _payload(name: str, team_id: int, win: bool, **extra) -> dict:
    payload = {
        "riotIdGameName": name,
        "teamId": team_id,
        "win": win,
        "teamPosition": "MIDDLE",
        "kills": 3,
        "deaths": 2,
        "assists": 5,
        "timePlayed": 1800,
        "totalMinionsKilled": 180,
        "goldEarned": 10500,
        "challenges": {"killParticipation": 0.55, "soloKills": 1, "legendaryItemUsed": [3031]},
    }
    payload.update(extra)
    return payload


def _match_document(match_id: str) -> dict:
    return {
        "metadata": {"matchId": match_id},
        "info": {
            "gameId": 1,
            "participants": [_payload("blue", 100, True), _payload("red", 200, False)],
        },
    }


def test_participant_from_payload() -> None:
    record = ParticipantRecord.from_payload(
        _payload("Faker", 100, True, individualPosition="utility", championName="Ahri")
    )

    assert record.name == "Faker"
    assert record.team_id == 100
    assert record.win is True
    assert record.role == "UTILITY"
    assert record.champion_name == "Ahri"
    assert record.time_played == pytest.approx(1800.0)
    assert record.challenge("killParticipation") == pytest.approx(0.55)
    assert record.challenge("missing") == 0.0
    assert "legendaryItemUsed" not in record.challenges


def test_player_name_fallbacks() -> None:
    by_summoner = _payload("", 100, True, summonerName="Summoner")
    by_tagline = _payload("", 100, True, riotIdTagline="KR1")
    anonymous = _payload("", 100, True)

    assert ParticipantRecord.from_payload(by_summoner).name == "Summoner"
    assert ParticipantRecord.from_payload(by_tagline).name == "KR1"
    assert ParticipantRecord.from_payload(anonymous).name == "unknown"


def test_missing_role_is_unknown() -> None:
    payload = _payload("Faker", 100, True)
    del payload["teamPosition"]
    assert ParticipantRecord.from_payload(payload).role == "UNKNOWN"


def test_missing_team_raises() -> None:
    payload = _payload("Faker", 100, True)
    del payload["teamId"]

    with pytest.raises(MalformedParticipantError, match="missing teamId"):
        ParticipantRecord.from_payload(payload)


def test_missing_counters_default_to_zero(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="domain.common"):
        record = ParticipantRecord.from_payload({"riotIdGameName": "Faker", "teamId": 100})

    assert record.kills == 0
    assert record.win is False
    assert "defaulting to zero values" in caplog.text


def test_load_match_document(tmp_path: Path) -> None:
    path = tmp_path / "KR_1.json"
    path.write_text(json.dumps(_match_document("KR_1")))

    match = load_match(path)

    assert isinstance(match, MatchInput)
    assert match.game_id == "KR_1"
    assert [participant.name for participant in match.participants] == ["blue", "red"]
    assert match.source == str(path)


def test_load_bare_participant_list(tmp_path: Path) -> None:
    path = tmp_path / "scrim_7.json"
    path.write_text(json.dumps([_payload("blue", 100, True), _payload("red", 200, False)]))

    assert load_match(path).game_id == "scrim_7"


def test_load_game_directory(tmp_path: Path) -> None:
    game_dir = tmp_path / "game_42"
    game_dir.mkdir()
    (game_dir / "b.json").write_text(json.dumps(_payload("red", 200, False)))
    (game_dir / "a.json").write_text(json.dumps(_payload("blue", 100, True)))

    match = load_match(game_dir)

    assert match.game_id == "42"
    assert [participant.name for participant in match.participants] == ["blue", "red"]


def test_discovery_is_sorted_and_filtered(tmp_path: Path) -> None:
    (tmp_path / "b.json").write_text("[]")
    (tmp_path / "a.json").write_text("[]")
    (tmp_path / "notes.txt").write_text("ignore me")
    (tmp_path / "game_1").mkdir()
    (tmp_path / "other_dir").mkdir()

    assert [path.name for path in discover_match_paths(tmp_path)] == ["a.json", "b.json", "game_1"]


def test_missing_path_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        discover_match_paths(tmp_path / "nope")


def test_iter_matches_reports_bad_sources(tmp_path: Path) -> None:
    (tmp_path / "a.json").write_text(json.dumps(_match_document("A")))
    (tmp_path / "b.json").write_text("{not json")
    (tmp_path / "c.json").write_text(json.dumps({"metadata": {"matchId": "C"}, "info": {}}))
    (tmp_path / "d.json").write_text(json.dumps([{"riotIdGameName": "x"}]))
    (tmp_path / "e.json").write_text(json.dumps([1, 2]))

    items = [item for _, item in iter_matches(tmp_path)]

    assert isinstance(items[0], MatchInput)
    assert isinstance(items[1], ValueError)
    assert "info.participants is missing" in str(items[2])
    assert isinstance(items[3], MalformedParticipantError)
    assert "must be an object" in str(items[4])


def test_non_boolean_win_is_a_loss(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="domain.common"):
        record = ParticipantRecord.from_payload(_payload("Faker", 100, "false"))

    assert record.win is False
    assert "non-boolean win='false'" in caplog.text
