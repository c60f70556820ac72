"""Persistence scaffold shared by rating repositories."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from domain.ledger import StorageError
from models import PlayerRating, ProcessedGame

RATING_TABLES = (PlayerRating.__table__, ProcessedGame.__table__)


def ensure_schema(engine: Engine) -> None:
    """Create required tables and indexes when missing."""
    with engine.begin() as connection:
        for table in RATING_TABLES:
            table.create(bind=connection, checkfirst=True)


@contextmanager
def storage_errors(action: str) -> Iterator[None]:
    """Re-raise SQLAlchemy failures as domain StorageError."""
    try:
        yield
    except SQLAlchemyError as exc:
        raise StorageError(f"{action} failed: {exc}") from exc


def utc_now() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


__all__ = ["RATING_TABLES", "ensure_schema", "storage_errors", "utc_now"]
