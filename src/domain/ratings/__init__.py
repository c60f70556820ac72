"""Rating-method domain modules."""

from domain.ratings.lanes import LaneStanding, compare_lanes
from domain.ratings.metrics import PerformanceMetrics, extract_performance_metrics, performance_score
from domain.ratings.protocol import MatchContext, MethodName, MethodOutcome, RatingMethod

__all__ = [
    "LaneStanding",
    "MatchContext",
    "MethodName",
    "MethodOutcome",
    "PerformanceMetrics",
    "RatingMethod",
    "compare_lanes",
    "extract_performance_metrics",
    "performance_score",
]
