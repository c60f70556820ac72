"""Persistence of processed-game summaries."""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from domain.ratings.config import RatingSystemConfig
from domain.ratings.engine import MatchEvaluation
from models import ProcessedGame
from repositories.ratings.base import storage_errors, utc_now


def _participant_rows(evaluation: MatchEvaluation) -> list[dict[str, Any]]:
    return [
        {
            "name": result.name,
            "champion": participant.champion_name,
            "team": result.team,
            "role": result.role,
            "kills": participant.kills,
            "deaths": participant.deaths,
            "assists": participant.assists,
            "win": result.win,
            "performance_score": result.performance_score,
            "old_rating": result.old_rating,
            "new_rating": result.new_rating,
            "delta": result.delta,
            "method": result.method,
            "lane_rank": result.lane_rank,
        }
        for participant, result in zip(evaluation.participants, evaluation.results)
    ]


def save_game(session: Session, evaluation: MatchEvaluation, *, config: RatingSystemConfig) -> ProcessedGame:
    """Create or update the summary row for one game id, with the config that rated it."""
    participants = _participant_rows(evaluation)
    config_json = config.as_config_json()
    with storage_errors(f"saving game {evaluation.game_id}"):
        game = session.execute(
            select(ProcessedGame).where(ProcessedGame.game_id == evaluation.game_id)
        ).scalar_one_or_none()
        if game is None:
            game = ProcessedGame(
                game_id=evaluation.game_id,
                rating_system=config.name,
                config_json=config_json,
                participants=participants,
            )
            session.add(game)
        else:
            game.rating_system = config.name
            game.config_json = config_json
            game.participants = participants
            game.updated_at = utc_now()
        session.flush()
    return game


def get_game(session: Session, game_id: str) -> ProcessedGame | None:
    with storage_errors(f"loading game {game_id}"):
        return session.execute(
            select(ProcessedGame).where(ProcessedGame.game_id == game_id)
        ).scalar_one_or_none()


__all__ = ["get_game", "save_game"]
