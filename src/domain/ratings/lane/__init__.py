"""Lane-relative rating method."""

from domain.ratings.lane.calculator import LaneComparisonMethod, LaneComparisonParameters

__all__ = ["LaneComparisonMethod", "LaneComparisonParameters"]
