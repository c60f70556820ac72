"""Load completed matches from match-v5 JSON files and per-game participant directories."""

from __future__ import annotations

import json
import re
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from domain.common import MatchInput, ParticipantRecord

GAME_DIR_PATTERN = re.compile(r"^game_(?P<game_id>[\w-]+)$")


def load_match_file(path: Path) -> MatchInput:
    """Read one match document.

    Accepts a full match-v5 document (`metadata.matchId`, `info.participants`)
    or a bare list of participant payloads, whose game id is the file stem.
    """
    with path.open("r", encoding="utf-8") as file:
        raw = json.load(file)

    if isinstance(raw, list):
        return _match_from_payloads(path.stem, raw, source=str(path))

    if not isinstance(raw, dict):
        raise ValueError(f"{path}: expected a match object or a participant list")

    info = raw.get("info") or {}
    payloads = info.get("participants")
    if not isinstance(payloads, list):
        raise ValueError(f"{path}: info.participants is missing")

    metadata = raw.get("metadata") or {}
    game_id = metadata.get("matchId") or info.get("gameId") or path.stem
    return _match_from_payloads(str(game_id), payloads, source=str(path))


def load_game_directory(path: Path) -> MatchInput:
    """Read a `game_<id>` directory holding one JSON file per participant."""
    match = GAME_DIR_PATTERN.match(path.name)
    if match is None:
        raise ValueError(f"{path}: game directories must be named game_<id>")

    payloads: list[dict[str, Any]] = []
    for file_path in sorted(path.glob("*.json")):
        with file_path.open("r", encoding="utf-8") as file:
            payloads.append(json.load(file))
    if not payloads:
        raise ValueError(f"{path}: no participant .json files found")
    return _match_from_payloads(match.group("game_id"), payloads, source=str(path))


def load_match(path: Path) -> MatchInput:
    if path.is_dir():
        return load_game_directory(path)
    return load_match_file(path)


def discover_match_paths(path: Path) -> list[Path]:
    """Match sources under `path` in deterministic (sorted) processing order."""
    if not path.exists():
        raise FileNotFoundError(f"Match path not found: {path}")
    if path.is_file():
        return [path]
    if GAME_DIR_PATTERN.match(path.name):
        return [path]

    sources = [
        child
        for child in path.iterdir()
        if (child.is_file() and child.suffix == ".json")
        or (child.is_dir() and GAME_DIR_PATTERN.match(child.name))
    ]
    return sorted(sources, key=lambda child: child.name)


def iter_matches(path: Path) -> Iterator[tuple[Path, MatchInput | Exception]]:
    """Yield each source with its parsed match, or the error that parsing raised."""
    for source in discover_match_paths(path):
        try:
            yield source, load_match(source)
        except (OSError, ValueError) as exc:
            yield source, exc


def _match_from_payloads(game_id: str, payloads: list[Any], *, source: str) -> MatchInput:
    if not all(isinstance(payload, dict) for payload in payloads):
        raise ValueError(f"{source}: every participant payload must be an object")
    participants = tuple(ParticipantRecord.from_payload(payload) for payload in payloads)
    return MatchInput(game_id=game_id, participants=participants, source=source)


__all__ = [
    "discover_match_paths",
    "iter_matches",
    "load_game_directory",
    "load_match",
    "load_match_file",
]
