"""Rating engine: metrics, lane comparison, every enabled method and authority resolution."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from domain.common import ParticipantRecord
from domain.ratings.config import RatingSystemConfig
from domain.ratings.lanes import compare_lanes
from domain.ratings.metrics import extract_performance_metrics, performance_score
from domain.ratings.player_mixin import split_teams
from domain.ratings.protocol import NO_METHOD, MatchContext, MethodName, MethodOutcome
from domain.ratings.registry import build_methods, resolve_authoritative

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParticipantRatingResult:
    """Per-participant result consumed by presentation layers."""

    name: str
    team: int
    win: bool
    role: str
    old_rating: int
    new_rating: int
    delta: int
    method: str
    performance_score: float
    lane_rank: int | None = None
    lane_rank_percentile: float | None = None
    method_outcomes: Mapping[MethodName, MethodOutcome] = field(default_factory=dict)


@dataclass(frozen=True)
class MatchEvaluation:
    """Output of one match computation, in participant input order."""

    game_id: str
    participants: tuple[ParticipantRecord, ...]
    results: tuple[ParticipantRatingResult, ...]
    methods: tuple[MethodName, ...]


class RatingEngine:
    """Evaluates completed matches against one immutable rating configuration."""

    def __init__(self, config: RatingSystemConfig) -> None:
        self.config = config
        self.methods = build_methods(config)

    def evaluate(
        self,
        game_id: str,
        participants: Sequence[ParticipantRecord],
        current_ratings: Mapping[str, int],
    ) -> MatchEvaluation:
        """Compute every enabled method's rating change for one match.

        Raises TeamCompositionError unless the match has exactly two teams
        with opposite outcomes.
        """
        participants = tuple(participants)
        teams = split_teams(participants)

        avg_duration = sum(p.time_played for p in participants) / float(len(participants))
        metrics = {
            index: extract_performance_metrics(participant, avg_duration)
            for index, participant in enumerate(participants)
        }
        scores = {
            index: performance_score(metrics[index], self.config.performance_weights)
            for index in metrics
        }
        context = MatchContext(
            participants=participants,
            current_ratings={
                index: int(current_ratings.get(participant.name, self.config.base_rating))
                for index, participant in enumerate(participants)
            },
            metrics=metrics,
            performance_scores=scores,
            lane_standings=compare_lanes(
                participants,
                metrics,
                self.config.lane_stat_priorities,
            ),
            teams=teams,
        )

        per_method = {method.name: method.compute(context) for method in self.methods}

        results: list[ParticipantRatingResult] = []
        for index, participant in enumerate(participants):
            outcomes = {
                name: method_outcomes[index]
                for name, method_outcomes in per_method.items()
                if index in method_outcomes
            }
            authoritative = resolve_authoritative(outcomes, self.config.priority)
            old_rating = context.current_ratings[index]
            standing = context.lane_standings.get(index)
            results.append(
                ParticipantRatingResult(
                    name=participant.name,
                    team=participant.team_id,
                    win=participant.win,
                    role=participant.role,
                    old_rating=old_rating,
                    new_rating=authoritative.new_rating if authoritative else old_rating,
                    delta=authoritative.delta if authoritative else 0,
                    method=authoritative.method.value if authoritative else NO_METHOD,
                    performance_score=scores[index],
                    lane_rank=standing.rank if standing else None,
                    lane_rank_percentile=standing.percentile if standing else None,
                    method_outcomes=outcomes,
                )
            )

        logger.debug(
            "evaluated game_id=%s participants=%d methods=%s",
            game_id,
            len(participants),
            ",".join(name.value for name in per_method),
        )
        return MatchEvaluation(
            game_id=game_id,
            participants=participants,
            results=tuple(results),
            methods=tuple(per_method),
        )


def compare_methods(
    config: RatingSystemConfig,
    game_id: str,
    participants: Sequence[ParticipantRecord],
    current_ratings: Mapping[str, int],
) -> MatchEvaluation:
    """Evaluate a match with every method enabled, leaving `config` untouched."""
    return RatingEngine(config.with_all_methods_enabled()).evaluate(
        game_id,
        participants,
        current_ratings,
    )


__all__ = ["MatchEvaluation", "ParticipantRatingResult", "RatingEngine", "compare_methods"]
