"""Hybrid win/loss-asymmetric rating.

Winners gain a scalar amount scaled by their own performance score.
Losers share a fixed team pool, split by inverse performance so that a
weak performer on the losing side loses more than a strong teammate.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from domain.ratings.player_mixin import TeamMethodMixin
from domain.ratings.protocol import (
    MatchContext,
    MethodName,
    MethodOutcome,
    apply_delta,
    round_half_up,
)

MIN_WIN_CHANGE = 5.0
MIN_WEIGHT_SCORE = 0.1
LOW_PERFORMANCE_THRESHOLD = 0.7
LOW_PERFORMANCE_PENALTY = 1.1


@dataclass(frozen=True)
class HybridParameters:
    base_elo_change: float = 20.0
    performance_multiplier: float = 15.0
    win_bonus_reduction: float = 0.5


def loss_weights(scores: Sequence[float]) -> list[float]:
    """Inverse-performance weights over a losing team, normalized to sum to 1."""
    inverse = [1.0 / max(MIN_WEIGHT_SCORE, score) for score in scores]
    total = sum(inverse)
    return [value / total for value in inverse]


class HybridMethod(TeamMethodMixin):
    name = MethodName.HYBRID

    def __init__(self, params: HybridParameters) -> None:
        self.params = params

    def win_change(self, performance_score: float) -> float:
        if performance_score < 1.0:
            return max(MIN_WIN_CHANGE, self.params.base_elo_change * self.params.win_bonus_reduction)
        return self.params.base_elo_change + (performance_score - 1.0) * self.params.performance_multiplier

    def loss_changes(self, losers: Sequence[int], scores: Mapping[int, float]) -> dict[int, int]:
        pool = -self.params.base_elo_change * len(losers)
        weights = loss_weights([scores[index] for index in losers])
        changes: dict[int, int] = {}
        for index, weight in zip(losers, weights):
            change = pool * weight
            if scores[index] < LOW_PERFORMANCE_THRESHOLD:
                change *= LOW_PERFORMANCE_PENALTY
            changes[index] = min(round_half_up(change), -1)
        return changes

    def compute(self, context: MatchContext) -> dict[int, MethodOutcome]:
        teams = self._teams(context)
        if teams is None:
            return {}

        scores = context.performance_scores
        outcomes: dict[int, MethodOutcome] = {}
        for index in teams.winners:
            outcomes[index] = apply_delta(
                self.name,
                old_rating=context.current_ratings[index],
                delta=round_half_up(self.win_change(scores[index])),
                won=True,
                components={"performance_score": scores[index]},
            )

        for index, change in self.loss_changes(teams.losers, scores).items():
            outcomes[index] = apply_delta(
                self.name,
                old_rating=context.current_ratings[index],
                delta=change,
                won=False,
                components={"performance_score": scores[index]},
            )

        # Keep input order for callers that iterate the mapping.
        return {index: outcomes[index] for index in sorted(outcomes)}


__all__ = ["HybridMethod", "HybridParameters", "loss_weights"]
