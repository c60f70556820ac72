"""Registry of rating methods and the ledger's authority order."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Callable

from domain.ratings.config import RatingSystemConfig
from domain.ratings.elo.calculator import TraditionalEloMethod
from domain.ratings.hybrid.calculator import HybridMethod
from domain.ratings.lane.calculator import LaneComparisonMethod
from domain.ratings.protocol import MethodName, MethodOutcome, RatingMethod

CreateMethodFn = Callable[[RatingSystemConfig], RatingMethod]

_REGISTRY: dict[MethodName, CreateMethodFn] = {}


def register(method: MethodName, create: CreateMethodFn) -> None:
    """Register one rating-method factory."""
    if method in _REGISTRY:
        raise ValueError(f"Duplicate rating method registration for {method.value}")
    _REGISTRY[method] = create


def get(method: MethodName) -> CreateMethodFn:
    try:
        return _REGISTRY[method]
    except KeyError as exc:
        available = ", ".join(sorted(name.value for name in _REGISTRY))
        raise KeyError(f"No rating method registered for {method.value}. Available: {available}") from exc


def build_methods(config: RatingSystemConfig) -> list[RatingMethod]:
    """Instantiate every enabled method, in the config's priority order."""
    return [get(method)(config) for method in config.priority if config.enabled.is_enabled(method)]


def resolve_authoritative(
    outcomes: Mapping[MethodName, MethodOutcome],
    priority: Sequence[MethodName],
) -> MethodOutcome | None:
    """Pick the outcome that is persisted: the first method in priority order that produced one."""
    for method in priority:
        outcome = outcomes.get(method)
        if outcome is not None:
            return outcome
    return None


def _register_defaults() -> None:
    if _REGISTRY:
        return
    register(MethodName.TRADITIONAL, lambda config: TraditionalEloMethod(config.traditional))
    register(MethodName.LANE_COMPARISON, lambda config: LaneComparisonMethod(config.lane_comparison))
    register(MethodName.HYBRID, lambda config: HybridMethod(config.hybrid))


_register_defaults()

__all__ = ["build_methods", "get", "register", "resolve_authoritative"]
