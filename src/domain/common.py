"""Shared participant and match payload types used by the rating engine."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

UNKNOWN_PLAYER_NAME = "unknown"
UNKNOWN_ROLE = "UNKNOWN"

_NAME_FIELDS = ("riotIdGameName", "summonerName", "riotIdTagline")
_REQUIRED_FIELDS = ("kills", "deaths", "assists", "timePlayed", "win")


class MalformedParticipantError(ValueError):
    """Raised when a participant payload cannot be turned into a record."""


class TeamCompositionError(ValueError):
    """Raised when a match does not consist of exactly two opposing teams."""


@dataclass(frozen=True)
class ParticipantRecord:
    """Raw per-participant match statistics (immutable for one computation)."""

    name: str
    team_id: int
    win: bool
    role: str = UNKNOWN_ROLE
    champion_name: str | None = None
    kills: int = 0
    deaths: int = 0
    assists: int = 0
    total_minions_killed: int = 0
    neutral_minions_killed: int = 0
    time_played: float = 0.0
    total_damage_dealt_to_champions: float = 0.0
    gold_earned: int = 0
    vision_score: float = 0.0
    wards_placed: int = 0
    wards_killed: int = 0
    damage_dealt_to_turrets: float = 0.0
    dragon_kills: int = 0
    baron_kills: int = 0
    turret_kills: int = 0
    inhibitor_kills: int = 0
    double_kills: int = 0
    triple_kills: int = 0
    quadra_kills: int = 0
    penta_kills: int = 0
    first_blood_kill: bool = False
    first_blood_assist: bool = False
    challenges: Mapping[str, float] = field(default_factory=dict)

    def challenge(self, key: str) -> float:
        """Return one provider challenge metric, 0 when absent."""
        value = self.challenges.get(key)
        return float(value) if value else 0.0

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> ParticipantRecord:
        """Build a record from a match-v5 participant payload."""
        if payload.get("teamId") is None:
            raise MalformedParticipantError(
                f"participant {resolve_player_name(payload)!r} is missing teamId"
            )

        missing = [key for key in _REQUIRED_FIELDS if key not in payload]
        if missing:
            logger.warning(
                "participant %s is missing %s; defaulting to zero values",
                resolve_player_name(payload),
                ", ".join(missing),
            )

        challenges_raw = payload.get("challenges") or {}
        challenges = {
            str(key): float(value)
            for key, value in challenges_raw.items()
            if isinstance(value, (int, float)) and not isinstance(value, bool)
        }

        return cls(
            name=resolve_player_name(payload),
            team_id=int(payload["teamId"]),
            win=_win(payload),
            role=resolve_role(payload),
            champion_name=payload.get("championName"),
            kills=_int(payload, "kills"),
            deaths=_int(payload, "deaths"),
            assists=_int(payload, "assists"),
            total_minions_killed=_int(payload, "totalMinionsKilled"),
            neutral_minions_killed=_int(payload, "neutralMinionsKilled"),
            time_played=_float(payload, "timePlayed"),
            total_damage_dealt_to_champions=_float(payload, "totalDamageDealtToChampions"),
            gold_earned=_int(payload, "goldEarned"),
            vision_score=_float(payload, "visionScore"),
            wards_placed=_int(payload, "wardsPlaced") or _int(payload, "visionWardsBoughtInGame"),
            wards_killed=_int(payload, "wardsKilled"),
            damage_dealt_to_turrets=(
                _float(payload, "damageDealtToTurrets")
                or float(challenges.get("damageDealtToTurrets", 0.0))
            ),
            dragon_kills=_int(payload, "dragonKills"),
            baron_kills=_int(payload, "baronKills"),
            turret_kills=_int(payload, "turretKills"),
            inhibitor_kills=_int(payload, "inhibitorKills"),
            double_kills=_int(payload, "doubleKills"),
            triple_kills=_int(payload, "tripleKills"),
            quadra_kills=_int(payload, "quadraKills"),
            penta_kills=_int(payload, "pentaKills"),
            first_blood_kill=bool(payload.get("firstBloodKill", False)),
            first_blood_assist=bool(payload.get("firstBloodAssist", False)),
            challenges=challenges,
        )


@dataclass(frozen=True)
class MatchInput:
    """One completed match, ready for rating."""

    game_id: str
    participants: tuple[ParticipantRecord, ...]
    source: str | None = None


def resolve_player_name(payload: Mapping[str, Any]) -> str:
    for key in _NAME_FIELDS:
        value = payload.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return UNKNOWN_PLAYER_NAME


def resolve_role(payload: Mapping[str, Any]) -> str:
    role = payload.get("individualPosition") or payload.get("teamPosition") or UNKNOWN_ROLE
    return str(role).upper()


def _win(payload: Mapping[str, Any]) -> bool:
    value = payload.get("win", False)
    if isinstance(value, bool):
        return value
    logger.warning(
        "participant %s has non-boolean win=%r; treating as a loss",
        resolve_player_name(payload),
        value,
    )
    return False


def _int(payload: Mapping[str, Any], key: str) -> int:
    value = payload.get(key)
    return int(value) if value else 0


def _float(payload: Mapping[str, Any], key: str) -> float:
    value = payload.get(key)
    return float(value) if value else 0.0


__all__ = [
    "MalformedParticipantError",
    "MatchInput",
    "ParticipantRecord",
    "TeamCompositionError",
    "UNKNOWN_PLAYER_NAME",
    "UNKNOWN_ROLE",
    "resolve_player_name",
    "resolve_role",
]
