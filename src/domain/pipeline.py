"""Batch pipeline: rate completed matches one at a time, in input order."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace

from domain.common import MatchInput
from domain.ledger import RatingLedger, RatingRecord, RatingStore
from domain.ratings.config import RatingSystemConfig
from domain.ratings.engine import MatchEvaluation, ParticipantRatingResult, RatingEngine
from repositories.ratings import SqlRatingStore, save_game

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchSummary:
    """Outcome for one match of a batch."""

    game_id: str
    source: str | None
    succeeded: bool
    error: str | None = None
    results: tuple[ParticipantRatingResult, ...] = ()


@dataclass(frozen=True)
class BatchSummary:
    """Outcome for one batch run."""

    system_name: str
    dry_run: bool
    matches: tuple[MatchSummary, ...] = field(default_factory=tuple)

    @property
    def succeeded(self) -> int:
        return sum(1 for match in self.matches if match.succeeded)

    @property
    def failed(self) -> int:
        return sum(1 for match in self.matches if not match.succeeded)


class DryRunRatingStore:
    """Reads through to another store but keeps every write in memory."""

    def __init__(self, store: RatingStore, pending: dict[str, RatingRecord]) -> None:
        self.store = store
        self.pending = pending

    def load_rating(self, name: str) -> RatingRecord | None:
        if name in self.pending:
            return replace(self.pending[name])
        return self.store.load_rating(name)

    def save_rating(self, record: RatingRecord) -> None:
        self.pending[record.name] = replace(record)


def apply_match(
    engine: RatingEngine,
    ledger: RatingLedger,
    match: MatchInput,
) -> tuple[MatchEvaluation, list[RatingRecord]]:
    """Evaluate one match against the ledger's current ratings and commit it."""
    current = ledger.current_ratings(participant.name for participant in match.participants)
    evaluation = engine.evaluate(match.game_id, match.participants, current)
    records = ledger.commit(evaluation)
    return evaluation, records


def process_matches(
    *,
    session_factory,
    config: RatingSystemConfig,
    matches: Iterable[MatchInput | tuple[str, Exception]],
    dry_run: bool = False,
    echo: Callable[[str], None] | None = None,
) -> BatchSummary:
    """Rate matches strictly in iteration order, one transaction per match.

    A failing match is rolled back and reported; later matches still run.
    Items may be `(source, error)` pairs for inputs that failed to load.
    """
    engine = RatingEngine(config)
    pending: dict[str, RatingRecord] = {}
    summaries: list[MatchSummary] = []

    for item in matches:
        if isinstance(item, tuple):
            source, error = item
            summaries.append(_failed(game_id=source, source=source, error=error, echo=echo))
            continue

        match = item
        with session_factory() as session:
            store: RatingStore = SqlRatingStore(session)
            if dry_run:
                store = DryRunRatingStore(store, pending)
            ledger = RatingLedger(store, base_rating=config.base_rating)
            try:
                evaluation, _ = apply_match(engine, ledger, match)
                if dry_run:
                    session.rollback()
                else:
                    save_game(session, evaluation, config=config)
                    session.commit()
            except Exception as exc:
                session.rollback()
                logger.exception("failed to process game_id=%s", match.game_id)
                summaries.append(
                    _failed(game_id=match.game_id, source=match.source, error=exc, echo=echo)
                )
                continue

        summaries.append(
            MatchSummary(
                game_id=match.game_id,
                source=match.source,
                succeeded=True,
                results=evaluation.results,
            )
        )
        if echo is not None:
            echo(
                f"{'[dry-run] ' if dry_run else ''}processed game_id={match.game_id} "
                f"participants={len(evaluation.results)} system={config.name}"
            )

    summary = BatchSummary(system_name=config.name, dry_run=dry_run, matches=tuple(summaries))
    if echo is not None:
        echo(
            f"completed system={config.name} processed={len(summary.matches)} "
            f"succeeded={summary.succeeded} failed={summary.failed} dry_run={dry_run}"
        )
    return summary


def _failed(
    *,
    game_id: str,
    source: str | None,
    error: Exception,
    echo: Callable[[str], None] | None,
) -> MatchSummary:
    if echo is not None:
        echo(f"error processing game_id={game_id}: {error}")
    return MatchSummary(game_id=game_id, source=source, succeeded=False, error=str(error))


__all__ = [
    "BatchSummary",
    "DryRunRatingStore",
    "MatchSummary",
    "apply_match",
    "process_matches",
]
