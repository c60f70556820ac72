"""Load rating-engine system definitions from TOML files."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass, replace
from pathlib import Path
from typing import Any

from domain.config_base import BaseSystemConfig, load_system_config, load_system_configs
from domain.ratings.elo.calculator import TraditionalParameters
from domain.ratings.hybrid.calculator import HybridParameters
from domain.ratings.lane.calculator import LaneComparisonParameters
from domain.ratings.metrics import STAT_KEYS
from domain.ratings.protocol import MethodName

DEFAULT_PRIORITY = (MethodName.HYBRID, MethodName.TRADITIONAL, MethodName.LANE_COMPARISON)


@dataclass(frozen=True)
class MethodToggles:
    traditional: bool = True
    lane_comparison: bool = False
    hybrid: bool = False

    def is_enabled(self, method: MethodName) -> bool:
        return bool(getattr(self, method.value))

    def enabled_methods(self) -> tuple[MethodName, ...]:
        return tuple(method for method in MethodName if self.is_enabled(method))


@dataclass(frozen=True)
class RatingSystemConfig(BaseSystemConfig):
    """Immutable configuration for one rating engine."""

    base_rating: int
    k_factor: float
    performance_weights: Mapping[str, float]
    lane_stat_priorities: Mapping[str, Mapping[str, float]]
    enabled: MethodToggles
    traditional: TraditionalParameters
    lane_comparison: LaneComparisonParameters
    hybrid: HybridParameters
    priority: tuple[MethodName, ...] = DEFAULT_PRIORITY

    def with_all_methods_enabled(self) -> RatingSystemConfig:
        """Copy of this config with every method enabled, for method comparison."""
        return replace(
            self,
            enabled=MethodToggles(traditional=True, lane_comparison=True, hybrid=True),
        )

    def as_config_json(self) -> dict[str, Any]:
        return {
            "base_rating": self.base_rating,
            "k_factor": self.k_factor,
            "performance_weights": dict(self.performance_weights),
            "lane_stat_priorities": {
                role: dict(weights) for role, weights in self.lane_stat_priorities.items()
            },
            "methods": {
                MethodName.TRADITIONAL.value: {
                    "enabled": self.enabled.traditional,
                    **asdict(self.traditional),
                },
                MethodName.LANE_COMPARISON.value: {
                    "enabled": self.enabled.lane_comparison,
                    **asdict(self.lane_comparison),
                },
                MethodName.HYBRID.value: {
                    "enabled": self.enabled.hybrid,
                    **asdict(self.hybrid),
                },
            },
            "priority": [method.value for method in self.priority],
        }


def load_rating_system_configs(config_dir: Path) -> list[RatingSystemConfig]:
    """Load and validate all rating-system TOML config files in a directory."""
    return load_system_configs(
        config_dir,
        parse_rating_system_config,
        duplicate_name_label="rating",
    )


def load_rating_system_config(file_path: Path) -> RatingSystemConfig:
    """Load and validate a single rating-system TOML file."""
    return load_system_config(file_path, parse_rating_system_config)


def parse_rating_system_config(raw: dict[str, Any], file_path: Path) -> RatingSystemConfig:
    system_raw = raw.get("system", {})
    rating_raw = raw.get("rating", {})
    methods_raw = raw.get("methods", {})
    ledger_raw = raw.get("ledger", {})

    name = str(system_raw.get("name", "")).strip()
    if not name:
        raise ValueError(f"{file_path}: [system].name is required")

    description_value = system_raw.get("description")
    description = None if description_value is None else str(description_value)

    for key in ("base_rating", "k_factor"):
        if key not in rating_raw:
            raise ValueError(f"{file_path}: [rating].{key} is required")
    base_rating = int(rating_raw["base_rating"])
    if base_rating < 0:
        raise ValueError(f"{file_path}: [rating].base_rating must be >= 0")
    k_factor = float(rating_raw["k_factor"])
    if k_factor <= 0.0:
        raise ValueError(f"{file_path}: [rating].k_factor must be > 0")
    scale_factor = float(rating_raw.get("scale_factor", 400.0))
    if scale_factor <= 0.0:
        raise ValueError(f"{file_path}: [rating].scale_factor must be > 0")

    performance_weights = _parse_weights(
        raw.get("performance_weights"),
        file_path=file_path,
        section="[performance_weights]",
        required=STAT_KEYS,
    )
    lane_stat_priorities = _parse_lane_priorities(raw.get("lane_stat_priorities"), file_path=file_path)

    traditional_raw = _method_block(methods_raw, MethodName.TRADITIONAL, file_path)
    lane_raw = _method_block(methods_raw, MethodName.LANE_COMPARISON, file_path)
    hybrid_raw = _method_block(methods_raw, MethodName.HYBRID, file_path)

    enabled = MethodToggles(
        traditional=traditional_raw["enabled"],
        lane_comparison=lane_raw["enabled"],
        hybrid=hybrid_raw["enabled"],
    )
    if not enabled.enabled_methods():
        raise ValueError(f"{file_path}: at least one of [methods.*].enabled must be true")

    traditional = TraditionalParameters(
        k_factor=k_factor,
        scale_factor=scale_factor,
        team_result_weight=float(traditional_raw.get("team_result_weight", 1.0)),
        performance_weight=float(traditional_raw.get("performance_weight", 0.5)),
        min_performance_bonus=float(traditional_raw.get("min_performance_bonus", -20.0)),
        max_performance_bonus=float(traditional_raw.get("max_performance_bonus", 20.0)),
    )
    if traditional.min_performance_bonus > traditional.max_performance_bonus:
        raise ValueError(
            f"{file_path}: [methods.traditional].min_performance_bonus must be "
            "<= max_performance_bonus"
        )

    lane_comparison = LaneComparisonParameters(
        max_lane_bonus=float(lane_raw.get("max_lane_bonus", 15.0)),
        max_team_bonus=float(lane_raw.get("max_team_bonus", 20.0)),
        max_individual_bonus=float(lane_raw.get("max_individual_bonus", 10.0)),
        lane_weight=float(lane_raw.get("lane_weight", 0.4)),
        team_weight=float(lane_raw.get("team_weight", 0.4)),
        individual_weight=float(lane_raw.get("individual_weight", 0.2)),
    )

    hybrid = HybridParameters(
        base_elo_change=float(hybrid_raw.get("base_elo_change", 20.0)),
        performance_multiplier=float(hybrid_raw.get("performance_multiplier", 15.0)),
        win_bonus_reduction=float(hybrid_raw.get("win_bonus_reduction", 0.5)),
    )
    if hybrid.base_elo_change <= 0.0:
        raise ValueError(f"{file_path}: [methods.hybrid].base_elo_change must be > 0")

    priority = _parse_priority(ledger_raw.get("priority"), file_path=file_path)

    return RatingSystemConfig(
        name=name,
        description=description,
        file_path=file_path,
        base_rating=base_rating,
        k_factor=k_factor,
        performance_weights=performance_weights,
        lane_stat_priorities=lane_stat_priorities,
        enabled=enabled,
        traditional=traditional,
        lane_comparison=lane_comparison,
        hybrid=hybrid,
        priority=priority,
    )


def _parse_weights(
    raw: Any,
    *,
    file_path: Path,
    section: str,
    required: tuple[str, ...] = (),
) -> dict[str, float]:
    if not isinstance(raw, dict):
        raise ValueError(f"{file_path}: {section} table is required")

    missing = [key for key in required if key not in raw]
    if missing:
        raise ValueError(f"{file_path}: {section} is missing {', '.join(missing)}")

    weights: dict[str, float] = {}
    for key, value in raw.items():
        if key not in STAT_KEYS:
            raise ValueError(f"{file_path}: {section}.{key} is not a known stat key {STAT_KEYS}")
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"{file_path}: {section}.{key} must be numeric")
        weights[key] = float(value)
    return weights


def _parse_lane_priorities(raw: Any, *, file_path: Path) -> dict[str, dict[str, float]]:
    if not isinstance(raw, dict) or not raw:
        raise ValueError(f"{file_path}: [lane_stat_priorities] table is required")

    priorities = {
        str(role).upper(): _parse_weights(
            weights,
            file_path=file_path,
            section=f"[lane_stat_priorities.{role}]",
        )
        for role, weights in raw.items()
    }
    if "MIDDLE" not in priorities and "DEFAULT" not in priorities:
        raise ValueError(
            f"{file_path}: [lane_stat_priorities] needs a MIDDLE or DEFAULT fallback table"
        )
    return priorities


def _method_block(methods_raw: Any, method: MethodName, file_path: Path) -> dict[str, Any]:
    section = f"[methods.{method.value}]"
    block = methods_raw.get(method.value) if isinstance(methods_raw, dict) else None
    if not isinstance(block, dict):
        raise ValueError(f"{file_path}: {section} table is required")
    if not isinstance(block.get("enabled"), bool):
        raise ValueError(f"{file_path}: {section}.enabled must be true or false")
    return block


def _parse_priority(raw: Any, *, file_path: Path) -> tuple[MethodName, ...]:
    if raw is None:
        return DEFAULT_PRIORITY
    if not isinstance(raw, list) or not raw:
        raise ValueError(f"{file_path}: [ledger].priority must be a non-empty list")

    try:
        priority = tuple(MethodName(str(value)) for value in raw)
    except ValueError as exc:
        allowed = ", ".join(method.value for method in MethodName)
        raise ValueError(f"{file_path}: [ledger].priority entries must be one of {allowed}") from exc
    if len(set(priority)) != len(priority):
        raise ValueError(f"{file_path}: [ledger].priority contains duplicates")
    missing = [method.value for method in MethodName if method not in priority]
    if missing:
        raise ValueError(f"{file_path}: [ledger].priority is missing {', '.join(missing)}")
    return priority


def build_rating_system_config(
    *,
    name: str = "inline",
    base_rating: int = 1000,
    k_factor: float = 64.0,
    performance_weights: Mapping[str, float],
    lane_stat_priorities: Mapping[str, Mapping[str, float]],
    enabled: MethodToggles = MethodToggles(),
    traditional: TraditionalParameters | None = None,
    lane_comparison: LaneComparisonParameters | None = None,
    hybrid: HybridParameters | None = None,
    priority: tuple[MethodName, ...] = DEFAULT_PRIORITY,
) -> RatingSystemConfig:
    """Construct a config without a TOML file (embedding and tests)."""
    return RatingSystemConfig(
        name=name,
        description=None,
        file_path=Path(f"<{name}>"),
        base_rating=base_rating,
        k_factor=k_factor,
        performance_weights=dict(performance_weights),
        lane_stat_priorities={role.upper(): dict(w) for role, w in lane_stat_priorities.items()},
        enabled=enabled,
        traditional=traditional or TraditionalParameters(k_factor=k_factor),
        lane_comparison=lane_comparison or LaneComparisonParameters(),
        hybrid=hybrid or HybridParameters(),
        priority=priority,
    )


__all__ = [
    "DEFAULT_PRIORITY",
    "MethodToggles",
    "RatingSystemConfig",
    "build_rating_system_config",
    "load_rating_system_config",
    "load_rating_system_configs",
    "parse_rating_system_config",
]
