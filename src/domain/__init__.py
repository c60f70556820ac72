"""Rating-engine domain modules."""

from domain.common import MalformedParticipantError, MatchInput, ParticipantRecord, TeamCompositionError

__all__ = ["MalformedParticipantError", "MatchInput", "ParticipantRecord", "TeamCompositionError"]
