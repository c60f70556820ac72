"""Shared helpers for team-aware rating methods (team split, average rating, outcome)."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from domain.common import ParticipantRecord, TeamCompositionError
from domain.ratings.protocol import MatchContext, TeamSplit


def split_teams(participants: Sequence[ParticipantRecord]) -> TeamSplit:
    """Group participants into exactly two opposing teams.

    Teams keep first-appearance order. Every member of a team must share
    the same outcome.
    """
    groups: dict[int, list[int]] = {}
    for index, participant in enumerate(participants):
        groups.setdefault(participant.team_id, []).append(index)

    if len(groups) != 2:
        raise TeamCompositionError(f"Expected exactly 2 teams, found {len(groups)}")

    (team1_id, team1), (team2_id, team2) = groups.items()
    team1_won = _team_outcome(participants, team1_id, team1)
    team2_won = _team_outcome(participants, team2_id, team2)
    if team1_won == team2_won:
        raise TeamCompositionError(
            f"teams {team1_id}/{team2_id} share the same outcome (win={team1_won})"
        )

    return TeamSplit(
        team1_id=team1_id,
        team2_id=team2_id,
        team1=tuple(team1),
        team2=tuple(team2),
        team1_won=team1_won,
    )


def _team_outcome(
    participants: Sequence[ParticipantRecord],
    team_id: int,
    members: list[int],
) -> bool:
    outcomes = {participants[index].win for index in members}
    if len(outcomes) != 1:
        raise TeamCompositionError(f"team {team_id} has members with different outcomes")
    return outcomes.pop()


class TeamMethodMixin:
    """Mixin providing team split lookup, average rating and match outcome.

    Subclasses implement the method-specific delta formula.
    """

    def _teams(self, context: MatchContext) -> TeamSplit | None:
        if context.teams is not None:
            return context.teams
        try:
            return split_teams(context.participants)
        except TeamCompositionError:
            return None

    @staticmethod
    def _average_rating(indexes: Sequence[int], ratings: Mapping[int, int]) -> float:
        return sum(ratings[index] for index in indexes) / float(len(indexes))

    @staticmethod
    def _team_outcome(teams: TeamSplit) -> tuple[float, float]:
        """Return (team1_actual, team2_actual)."""
        team1_actual = 1.0 if teams.team1_won else 0.0
        return team1_actual, 1.0 - team1_actual


__all__ = ["TeamMethodMixin", "split_teams"]
