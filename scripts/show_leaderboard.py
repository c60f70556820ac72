#!/usr/bin/env python3
"""Show the rating leaderboard, one player's stats, top players by category, or database stats."""

from __future__ import annotations

import sys
from datetime import datetime
from pathlib import Path
from typing import Annotated

import typer

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from db import DEFAULT_DB_URL, create_db_engine, create_session_factory
from domain.ledger import RatingRecord
from domain.ratings.protocol import round_half_up
from repositories import SqlRatingStore, TopCategory, ensure_schema
from repositories.ratings.player_repository import DEFAULT_MIN_GAMES, WIN_RATE_MIN_GAMES

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Query stored player ratings.",
)

DbUrlOption = Annotated[
    str,
    typer.Option("--db-url", help="Database URL. Defaults to the local league_elo postgres instance."),
]


def _session_factory(db_url: str):
    engine = create_db_engine(db_url)
    ensure_schema(engine)
    return create_session_factory(engine)


def _win_rate(record: RatingRecord) -> str:
    return f"({record.win_rate * 100:.1f}%)" if record.games else ""


@app.command()
def leaderboard(
    min_games: Annotated[
        int,
        typer.Option("--min-games", help="Minimum games played to be listed."),
    ] = DEFAULT_MIN_GAMES,
    db_url: DbUrlOption = DEFAULT_DB_URL,
) -> None:
    """Print every qualifying player by rating, with summary statistics."""
    if min_games < 0:
        raise typer.BadParameter("--min-games must be >= 0")

    with _session_factory(db_url)() as session:
        players = SqlRatingStore(session).leaderboard(min_games=min_games)

    if not players:
        typer.echo("No players found with the minimum required games.")
        return

    typer.echo(f"min_games={min_games} players={len(players)}")
    for index, player in enumerate(players, start=1):
        typer.echo(
            f"{index:2d}. {player.name:<20} elo={player.rating:4d} games={player.games:3d} "
            f"w/l={player.win_loss:<8} {_win_rate(player)}"
        )

    average = round_half_up(sum(player.rating for player in players) / len(players))
    total_games = sum(player.games for player in players)
    most_games = max(players, key=lambda player: player.games)
    typer.echo(f"average_elo={average} total_games={total_games}")
    typer.echo(f"highest_elo={players[0].name} ({players[0].rating})")
    typer.echo(f"most_games={most_games.name} ({most_games.games})")

    veterans = [player for player in players if player.games >= WIN_RATE_MIN_GAMES]
    if veterans:
        best = max(veterans, key=lambda player: player.win_rate)
        typer.echo(
            f"best_win_rate={best.name} ({best.win_rate * 100:.1f}% over {best.games} games)"
        )


@app.command()
def player(
    name: Annotated[str, typer.Argument(help="Player name as stored.")],
    history: Annotated[
        int,
        typer.Option("--history", help="Number of recent rating changes to show."),
    ] = 5,
    db_url: DbUrlOption = DEFAULT_DB_URL,
) -> None:
    """Print one player's rating, averages and recent rating history."""
    with _session_factory(db_url)() as session:
        record = SqlRatingStore(session).get_player(name)

    if record is None:
        typer.echo(f'Player "{name}" not found.')
        raise typer.Exit(code=1)

    typer.echo(f"name={record.name} elo={record.rating} games={record.games} w/l={record.win_loss} {_win_rate(record)}")
    if record.games == 0:
        return

    typer.echo(
        f"avg_kills={record.avg_kills:.1f} avg_deaths={record.avg_deaths:.1f} "
        f"avg_assists={record.avg_assists:.1f} avg_gold={record.avg_gold:.0f}"
    )
    for entry in record.rating_history[-history:] if history > 0 else []:
        date = datetime.fromisoformat(entry.timestamp).date().isoformat()
        typer.echo(
            f"  {date} game_id={entry.game_id} {entry.old_rating} -> {entry.new_rating} "
            f"({entry.delta:+d}) [{entry.method}]"
        )


@app.command()
def top(
    category: Annotated[
        TopCategory,
        typer.Option("--category", help="Ranking category."),
    ] = TopCategory.ELO,
    limit: Annotated[
        int,
        typer.Option("--limit", help="Number of players to return."),
    ] = 10,
    db_url: DbUrlOption = DEFAULT_DB_URL,
) -> None:
    """Print the top players by rating, games, win rate or average kills."""
    if limit <= 0:
        raise typer.BadParameter("--limit must be greater than 0")

    with _session_factory(db_url)() as session:
        players = SqlRatingStore(session).top_players(category, limit=limit)

    typer.echo(f"top={limit} category={category.value}")
    for index, record in enumerate(players, start=1):
        if category is TopCategory.ELO:
            value = str(record.rating)
        elif category is TopCategory.GAMES:
            value = str(record.games)
        elif category is TopCategory.WINRATE:
            value = f"{record.win_rate * 100:.1f}%"
        else:
            value = f"{record.avg_kills:.1f}"
        typer.echo(f"{index:2d}. {record.name:<20} {value}")


@app.command()
def stats(db_url: DbUrlOption = DEFAULT_DB_URL) -> None:
    """Print player and processed-game counts, average rating and total games played."""
    with _session_factory(db_url)() as session:
        summary = SqlRatingStore(session).stats()

    typer.echo(f"players={summary.players}")
    typer.echo(f"processed_games={summary.processed_games}")
    typer.echo(f"average_elo={summary.average_rating}")
    typer.echo(f"total_games_played={summary.total_games_played}")


if __name__ == "__main__":
    app()
