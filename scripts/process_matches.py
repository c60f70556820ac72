#!/usr/bin/env python3
"""Rate completed matches with a configured rating system."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Annotated

import typer

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from db import DEFAULT_DB_URL, create_db_engine, create_session_factory
from domain.common import MatchInput
from domain.ledger import RatingLedger
from domain.pipeline import BatchSummary, process_matches
from domain.ratings.config import (
    RatingSystemConfig,
    load_rating_system_config,
    load_rating_system_configs,
)
from domain.ratings.engine import MatchEvaluation, compare_methods
from repositories import SqlRatingStore, ensure_schema, iter_matches, load_match

DEFAULT_CONFIG_DIR = ROOT_DIR / "configs" / "ratings"

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Match rating commands.",
)

ConfigDirOption = Annotated[
    Path,
    typer.Option("--config-dir", help="Directory of rating-system TOML files."),
]
ConfigNameOption = Annotated[
    str | None,
    typer.Option(
        "--config-name",
        help="Rating system name or config filename (for example: default.toml).",
    ),
]
DbUrlOption = Annotated[
    str,
    typer.Option("--db-url", help="Database URL. Defaults to the local league_elo postgres instance."),
]
LogLevelOption = Annotated[
    str,
    typer.Option("--log-level", help="Python logging level for library output."),
]


def select_config(config_dir: Path, config_name: str | None) -> RatingSystemConfig:
    """Load configs and pick one by name or filename (the only one when unnamed)."""
    if config_name is not None and (config_dir / config_name).is_file():
        try:
            return load_rating_system_config(config_dir / config_name)
        except (OSError, ValueError) as exc:
            raise typer.BadParameter(str(exc), param_hint="--config-name") from exc

    try:
        configs = load_rating_system_configs(config_dir)
    except (OSError, ValueError) as exc:
        raise typer.BadParameter(str(exc), param_hint="--config-dir") from exc

    if config_name is None:
        if len(configs) != 1:
            names = ", ".join(config.name for config in configs)
            raise typer.BadParameter(
                f"{len(configs)} configs found in {config_dir}; choose one of: {names}",
                param_hint="--config-name",
            )
        return configs[0]

    for config in configs:
        if config_name in (config.name, config.file_path.name):
            return config
    raise typer.BadParameter(
        f"No config named '{config_name}' found in {config_dir}",
        param_hint="--config-name",
    )


def _configure_logging(log_level: str) -> None:
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _format_delta(delta: int) -> str:
    if delta > 0:
        return typer.style(f"+{delta}", fg=typer.colors.GREEN)
    if delta < 0:
        return typer.style(str(delta), fg=typer.colors.RED)
    return str(delta)


def _echo_summary(summary: BatchSummary) -> None:
    for match in summary.matches:
        if not match.succeeded:
            continue
        typer.echo(f"game_id={match.game_id}")
        for result in match.results:
            typer.echo(
                f"  {result.name:<20} [{result.method}] "
                f"{result.old_rating} -> {result.new_rating} ({_format_delta(result.delta)})"
            )


def _echo_comparison(evaluation: MatchEvaluation) -> None:
    typer.echo(f"game_id={evaluation.game_id} methods={','.join(m.value for m in evaluation.methods)}")
    for result in evaluation.results:
        lane = (
            f" lane_rank={result.lane_rank} percentile={result.lane_rank_percentile:.2f}"
            if result.lane_rank is not None and result.lane_rank_percentile is not None
            else ""
        )
        typer.echo(
            f"{result.name} ({result.role}, {'win' if result.win else 'loss'}) "
            f"perf={result.performance_score:.2f}{lane}"
        )
        for method, outcome in result.method_outcomes.items():
            typer.echo(
                f"  {method.value:<16} {outcome.new_rating} ({_format_delta(outcome.delta)})"
            )


def _run_batch(
    *,
    path: Path,
    config_dir: Path,
    config_name: str | None,
    db_url: str,
    dry_run: bool,
    verbose: bool,
) -> BatchSummary:
    config = select_config(config_dir, config_name)
    engine = create_db_engine(db_url)
    ensure_schema(engine)
    session_factory = create_session_factory(engine)

    try:
        loaded = list(iter_matches(path))
    except FileNotFoundError as exc:
        raise typer.BadParameter(str(exc), param_hint="PATH") from exc

    typer.echo(f"loaded_matches={len(loaded)} path={path} system={config.name}")
    summary = process_matches(
        session_factory=session_factory,
        config=config,
        matches=(
            item if isinstance(item, MatchInput) else (str(source), item)
            for source, item in loaded
        ),
        dry_run=dry_run,
        echo=typer.echo,
    )
    if verbose:
        _echo_summary(summary)
    return summary


@app.command()
def process(
    path: Annotated[Path, typer.Argument(help="Match JSON file, game_<id> directory, or a directory of them.")],
    config_dir: ConfigDirOption = DEFAULT_CONFIG_DIR,
    config_name: ConfigNameOption = None,
    db_url: DbUrlOption = DEFAULT_DB_URL,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Compute ratings without writing them."),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Print every participant's rating change."),
    ] = False,
    log_level: LogLevelOption = "WARNING",
) -> None:
    """Rate every match under PATH in sorted order, continuing past failures."""
    _configure_logging(log_level)
    summary = _run_batch(
        path=path,
        config_dir=config_dir,
        config_name=config_name,
        db_url=db_url,
        dry_run=dry_run,
        verbose=verbose,
    )
    if summary.failed:
        raise typer.Exit(code=1)


@app.command()
def single(
    path: Annotated[Path, typer.Argument(help="One match JSON file or game_<id> directory.")],
    config_dir: ConfigDirOption = DEFAULT_CONFIG_DIR,
    config_name: ConfigNameOption = None,
    db_url: DbUrlOption = DEFAULT_DB_URL,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Compute ratings without writing them."),
    ] = False,
    log_level: LogLevelOption = "WARNING",
) -> None:
    """Rate a single match and print each participant's change."""
    _configure_logging(log_level)
    if not path.exists():
        raise typer.BadParameter(f"Match path not found: {path}", param_hint="PATH")
    summary = _run_batch(
        path=path,
        config_dir=config_dir,
        config_name=config_name,
        db_url=db_url,
        dry_run=dry_run,
        verbose=True,
    )
    if summary.failed:
        raise typer.Exit(code=1)


@app.command()
def compare(
    path: Annotated[Path, typer.Argument(help="One match JSON file or game_<id> directory.")],
    config_dir: ConfigDirOption = DEFAULT_CONFIG_DIR,
    config_name: ConfigNameOption = None,
    db_url: DbUrlOption = DEFAULT_DB_URL,
    log_level: LogLevelOption = "WARNING",
) -> None:
    """Show every method's result for one match without persisting anything."""
    _configure_logging(log_level)
    config = select_config(config_dir, config_name)
    try:
        match = load_match(path)
    except (OSError, ValueError) as exc:
        raise typer.BadParameter(str(exc), param_hint="PATH") from exc

    engine = create_db_engine(db_url)
    ensure_schema(engine)
    session_factory = create_session_factory(engine)
    with session_factory() as session:
        ledger = RatingLedger(SqlRatingStore(session), base_rating=config.base_rating)
        current = ledger.current_ratings(participant.name for participant in match.participants)

    try:
        evaluation = compare_methods(config, match.game_id, match.participants, current)
    except ValueError as exc:
        typer.echo(f"error processing game_id={match.game_id}: {exc}")
        raise typer.Exit(code=1) from exc
    _echo_comparison(evaluation)


@app.command()
def list_systems(config_dir: ConfigDirOption = DEFAULT_CONFIG_DIR) -> None:
    """Print all configured rating systems."""
    try:
        configs = load_rating_system_configs(config_dir)
    except (OSError, ValueError) as exc:
        raise typer.BadParameter(str(exc), param_hint="--config-dir") from exc

    for config in configs:
        enabled = ",".join(method.value for method in config.enabled.enabled_methods())
        priority = ",".join(method.value for method in config.priority)
        typer.echo(
            f"{config.name} file={config.file_path.name} "
            f"base_rating={config.base_rating} k_factor={config.k_factor:g} "
            f"enabled={enabled} priority={priority}"
        )


if __name__ == "__main__":
    app()
