"""Lane-relative rating: lane rank, team result and individual score blended into one bonus."""

from __future__ import annotations

from dataclasses import dataclass

from domain.ratings.metrics import PerformanceMetrics
from domain.ratings.player_mixin import TeamMethodMixin
from domain.ratings.protocol import (
    MatchContext,
    MethodName,
    MethodOutcome,
    apply_delta,
    round_half_up,
)


@dataclass(frozen=True)
class LaneComparisonParameters:
    max_lane_bonus: float = 15.0
    max_team_bonus: float = 20.0
    max_individual_bonus: float = 10.0
    lane_weight: float = 0.4
    team_weight: float = 0.4
    individual_weight: float = 0.2


def individual_score(metrics: PerformanceMetrics) -> float:
    return (metrics.kda + metrics.kill_participation) / 2.0


class LaneComparisonMethod(TeamMethodMixin):
    """Bonus/penalty independent of classical Elo expectation.

    Requires lane standings on the context; participants without a lane
    opponent get no lane bonus.
    """

    name = MethodName.LANE_COMPARISON

    def __init__(self, params: LaneComparisonParameters) -> None:
        self.params = params

    def compute(self, context: MatchContext) -> dict[int, MethodOutcome]:
        if self._teams(context) is None:
            return {}

        outcomes: dict[int, MethodOutcome] = {}
        for index, participant in enumerate(context.participants):
            standing = context.lane_standings.get(index)
            if standing is not None:
                lane_bonus = (standing.percentile - 0.5) * 2.0 * self.params.max_lane_bonus
            else:
                lane_bonus = 0.0
            team_bonus = self.params.max_team_bonus if participant.win else -self.params.max_team_bonus
            individual_bonus = (
                individual_score(context.metrics[index]) - 1.0
            ) * self.params.max_individual_bonus

            delta = round_half_up(
                lane_bonus * self.params.lane_weight
                + team_bonus * self.params.team_weight
                + individual_bonus * self.params.individual_weight
            )
            outcomes[index] = apply_delta(
                self.name,
                old_rating=context.current_ratings[index],
                delta=delta,
                won=participant.win,
                components={
                    "lane_bonus": lane_bonus,
                    "team_bonus": team_bonus,
                    "individual_bonus": individual_bonus,
                },
            )
        return outcomes


__all__ = ["LaneComparisonMethod", "LaneComparisonParameters", "individual_score"]
