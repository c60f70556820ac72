"""Traditional Elo rating method."""

from domain.ratings.elo.calculator import (
    TraditionalEloMethod,
    TraditionalParameters,
    calculate_expected_score,
)

__all__ = ["TraditionalEloMethod", "TraditionalParameters", "calculate_expected_score"]
