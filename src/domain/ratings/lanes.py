"""Same-role lane comparison."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from domain.common import ParticipantRecord
from domain.ratings.metrics import PerformanceMetrics, weighted_stat_score

FALLBACK_ROLES = ("MIDDLE", "DEFAULT")


@dataclass(frozen=True)
class LaneStanding:
    role: str
    lane_score: float
    rank: int
    group_size: int
    percentile: float


def lane_weights_for_role(
    role: str,
    lane_stat_priorities: Mapping[str, Mapping[str, float]],
) -> Mapping[str, float]:
    """Return the stat weighting for a role, falling back to the default role table."""
    weights = lane_stat_priorities.get(role.upper())
    if weights is not None:
        return weights
    for fallback in FALLBACK_ROLES:
        weights = lane_stat_priorities.get(fallback)
        if weights is not None:
            return weights
    raise ValueError(f"No lane stat priorities for role={role!r} and no fallback table")


def compare_lanes(
    participants: Sequence[ParticipantRecord],
    metrics: Mapping[int, PerformanceMetrics],
    lane_stat_priorities: Mapping[str, Mapping[str, float]],
) -> dict[int, LaneStanding]:
    """Rank participants against same-role opponents.

    Returns standings keyed by participant index. Roles with a single
    participant get no standing.
    """
    groups: dict[str, list[int]] = {}
    for index, participant in enumerate(participants):
        groups.setdefault(participant.role.upper(), []).append(index)

    standings: dict[int, LaneStanding] = {}
    for role, members in groups.items():
        if len(members) < 2:
            continue

        weights = lane_weights_for_role(role, lane_stat_priorities)
        scores = {index: weighted_stat_score(metrics[index], weights) for index in members}
        # sorted() is stable, so equal scores keep input order.
        ranked = sorted(members, key=lambda index: scores[index], reverse=True)
        group_size = len(ranked)
        for position, index in enumerate(ranked, start=1):
            standings[index] = LaneStanding(
                role=role,
                lane_score=scores[index],
                rank=position,
                group_size=group_size,
                percentile=(group_size - position + 1) / group_size,
            )

    return standings


__all__ = ["LaneStanding", "compare_lanes", "lane_weights_for_role"]
