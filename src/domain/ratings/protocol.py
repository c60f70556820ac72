"""Shared protocols, enums and payloads for rating methods."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from math import floor
from typing import Protocol, runtime_checkable

from domain.common import ParticipantRecord
from domain.ratings.lanes import LaneStanding
from domain.ratings.metrics import PerformanceMetrics


class MethodName(str, Enum):
    """Which rating methodology produced an outcome."""

    TRADITIONAL = "traditional"
    LANE_COMPARISON = "lane_comparison"
    HYBRID = "hybrid"


NO_METHOD = "none"


@dataclass(frozen=True)
class TeamSplit:
    """The two sides of a match as tuples of participant indexes."""

    team1_id: int
    team2_id: int
    team1: tuple[int, ...]
    team2: tuple[int, ...]
    team1_won: bool

    @property
    def winners(self) -> tuple[int, ...]:
        return self.team1 if self.team1_won else self.team2

    @property
    def losers(self) -> tuple[int, ...]:
        return self.team2 if self.team1_won else self.team1


@dataclass(frozen=True)
class MatchContext:
    """Everything a rating method needs, keyed by participant index."""

    participants: tuple[ParticipantRecord, ...]
    current_ratings: Mapping[int, int]
    metrics: Mapping[int, PerformanceMetrics]
    performance_scores: Mapping[int, float]
    lane_standings: Mapping[int, LaneStanding]
    teams: TeamSplit | None


@dataclass(frozen=True)
class MethodOutcome:
    """One method's rating change for one participant."""

    method: MethodName
    old_rating: int
    delta: int
    new_rating: int
    components: Mapping[str, float] = field(default_factory=dict)


@runtime_checkable
class RatingMethod(Protocol):
    """Contract every rating method satisfies."""

    name: MethodName

    def compute(self, context: MatchContext) -> dict[int, MethodOutcome]: ...


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward positive infinity."""
    return floor(value + 0.5)


def apply_delta(
    method: MethodName,
    *,
    old_rating: int,
    delta: int,
    won: bool,
    components: Mapping[str, float] | None = None,
) -> MethodOutcome:
    """Build an outcome, forcing losers to lose and flooring the rating at zero."""
    if not won and delta >= 0:
        delta = -1
    return MethodOutcome(
        method=method,
        old_rating=old_rating,
        delta=delta,
        new_rating=max(0, old_rating + delta),
        components=dict(components or {}),
    )


__all__ = [
    "MatchContext",
    "MethodName",
    "MethodOutcome",
    "NO_METHOD",
    "RatingMethod",
    "TeamSplit",
    "apply_delta",
    "round_half_up",
]
