"""Hybrid win/loss-asymmetric rating method."""

from domain.ratings.hybrid.calculator import HybridMethod, HybridParameters

__all__ = ["HybridMethod", "HybridParameters"]
