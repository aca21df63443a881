# quantcore/utils/__init__.py
"""
Utilities Module for quantcore

Calculations:
- simple_returns, annualize_volatility, max_drawdown, herfindahl_index, beta

Formatting:
- format_currency, format_percentage, format_number

Validation:
- ValidationError, validate_strategy, positive_or_default, validate_weights
"""

from quantcore.utils.calculations import (
    annualize_volatility,
    beta,
    clamp,
    herfindahl_index,
    max_drawdown,
    path_max_drawdowns,
    round_half_up,
    simple_returns,
)
from quantcore.utils.formatting import format_currency, format_number, format_percentage
from quantcore.utils.validation import (
    ValidationError,
    positive_or_default,
    to_snake_case,
    validate_strategy,
    validate_weights,
)

__all__ = [
    # Calculations
    "simple_returns",
    "annualize_volatility",
    "max_drawdown",
    "path_max_drawdowns",
    "herfindahl_index",
    "beta",
    "clamp",
    "round_half_up",
    # Formatting
    "format_currency",
    "format_percentage",
    "format_number",
    # Validation
    "ValidationError",
    "validate_strategy",
    "positive_or_default",
    "to_snake_case",
    "validate_weights",
]
