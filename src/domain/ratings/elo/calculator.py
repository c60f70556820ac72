"""Traditional Elo with an individual performance modifier."""

from __future__ import annotations

from dataclasses import dataclass

from domain.ratings.player_mixin import TeamMethodMixin
from domain.ratings.protocol import (
    MatchContext,
    MethodName,
    MethodOutcome,
    apply_delta,
    round_half_up,
)


@dataclass(frozen=True)
class TraditionalParameters:
    k_factor: float = 64.0
    scale_factor: float = 400.0
    team_result_weight: float = 1.0
    performance_weight: float = 0.5
    min_performance_bonus: float = -20.0
    max_performance_bonus: float = 20.0


def calculate_expected_score(rating: float, opponent_rating: float, scale_factor: float) -> float:
    """Compute the Elo expected score for one side."""
    return 1.0 / (1.0 + 10.0 ** ((opponent_rating - rating) / scale_factor))


class TraditionalEloMethod(TeamMethodMixin):
    """Team-average Elo expectation plus a clamped per-player performance modifier."""

    name = MethodName.TRADITIONAL

    def __init__(self, params: TraditionalParameters) -> None:
        self.params = params

    def performance_modifier(self, performance_score: float) -> float:
        raw = (performance_score - 1.0) * 100.0
        return max(self.params.min_performance_bonus, min(self.params.max_performance_bonus, raw))

    def compute(self, context: MatchContext) -> dict[int, MethodOutcome]:
        teams = self._teams(context)
        if teams is None:
            return {}

        team1_avg = self._average_rating(teams.team1, context.current_ratings)
        team2_avg = self._average_rating(teams.team2, context.current_ratings)
        team1_expected = calculate_expected_score(
            rating=team1_avg,
            opponent_rating=team2_avg,
            scale_factor=self.params.scale_factor,
        )
        team2_expected = 1.0 - team1_expected
        team1_actual, team2_actual = self._team_outcome(teams)

        outcomes: dict[int, MethodOutcome] = {}
        for members, expected, actual in (
            (teams.team1, team1_expected, team1_actual),
            (teams.team2, team2_expected, team2_actual),
        ):
            team_component = (
                self.params.k_factor * (actual - expected) * self.params.team_result_weight
            )
            for index in members:
                modifier = self.performance_modifier(context.performance_scores[index])
                performance_component = modifier * self.params.performance_weight
                outcomes[index] = apply_delta(
                    self.name,
                    old_rating=context.current_ratings[index],
                    delta=round_half_up(team_component + performance_component),
                    won=actual == 1.0,
                    components={
                        "expected_score": expected,
                        "actual_score": actual,
                        "team_component": team_component,
                        "performance_modifier": modifier,
                        "performance_component": performance_component,
                    },
                )
        return outcomes


__all__ = ["TraditionalEloMethod", "TraditionalParameters", "calculate_expected_score"]
