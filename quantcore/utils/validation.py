# quantcore/utils/validation.py
"""
Input validation utilities for quantcore

Required inputs that are wrong raise ValidationError. Optional inputs that are
wrong are replaced by a documented default.
"""

import math
import re

from loguru import logger

from quantcore.utils.calculations import is_valid_positive


class ValidationError(ValueError):
    """Raised when a required input is missing or malformed"""

    pass


VALID_STRATEGIES = ["buy_and_hold", "momentum", "mean_reversion", "macd_crossover"]

# Names used by the dashboard that produced the original strategy list
STRATEGY_ALIASES = {
    "macd": "macd_crossover",
    "buyhold": "buy_and_hold",
}

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def to_snake_case(name: str) -> str:
    """meanReversion -> mean_reversion"""
    return _CAMEL_BOUNDARY.sub("_", name.strip()).lower().replace("-", "_")


def validate_strategy(strategy_name: str) -> str:
    """
    Validate backtesting strategy name.

    Accepts snake_case ("mean_reversion") and camelCase ("meanReversion").

    Args:
        strategy_name: Name of strategy

    Returns:
        Normalized strategy name

    Raises:
        ValidationError: If strategy is invalid
    """
    if not isinstance(strategy_name, str) or not strategy_name.strip():
        raise ValidationError("Strategy name must be a non-empty string")

    normalized = to_snake_case(strategy_name)
    normalized = STRATEGY_ALIASES.get(normalized, normalized)

    if normalized not in VALID_STRATEGIES:
        raise ValidationError(
            f"Invalid strategy: {strategy_name}. Must be one of: {VALID_STRATEGIES}"
        )

    return normalized


def positive_or_default(value, default, name: str = "value"):
    """
    Return value if it is a finite positive number, otherwise default.

    Args:
        value: Candidate value (may be None, NaN, negative, or non-numeric)
        default: Replacement value
        name: Parameter name used in the log line

    Returns:
        value cast to the type of default, or default
    """
    if is_valid_positive(value):
        converted = type(default)(float(value))
        if converted > 0:
            return converted

    if value is not None:
        logger.debug(f"Replacing invalid {name}={value!r} with default {default}")
    return default


def validate_weights(
    weights: list[float],
    must_sum_to_one: bool = True,
    tolerance: float = 0.001,
) -> list[float]:
    """
    Validate portfolio weights.

    Args:
        weights: Position weights
        must_sum_to_one: Whether weights must sum to 1.0
        tolerance: Allowed deviation from 1.0

    Returns:
        Weights as floats

    Raises:
        ValidationError: If weights are invalid
    """
    if not weights:
        raise ValidationError("Weights cannot be empty")

    validated = []
    for i, weight in enumerate(weights):
        if isinstance(weight, bool) or not isinstance(weight, (int, float)):
            raise ValidationError(f"Weight at position {i} must be numeric")
        if weight < 0 or not math.isfinite(weight):
            raise ValidationError(f"Weight at position {i} must be a finite non-negative number")
        validated.append(float(weight))

    total = sum(validated)
    if must_sum_to_one and abs(total - 1.0) > tolerance:
        raise ValidationError(f"Weights must sum to 1.0, got {total:.4f}")

    return validated
