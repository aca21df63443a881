# quantcore/utils/formatting.py
"""
Output formatting utilities for quantcore

Provides consistent display strings for result records.
"""


def format_currency(
    value: float | int | None,
    currency: str = "$",
    decimal_places: int = 2,
    include_sign: bool = False,
) -> str:
    """
    Format a number as currency.

    Args:
        value: Numeric value to format
        currency: Currency symbol
        decimal_places: Number of decimal places
        include_sign: Include + for positive values

    Returns:
        Formatted currency string

    Examples:
        format_currency(10000.50) -> "$10,000.50"
        format_currency(-500, include_sign=True) -> "-$500.00"
    """
    if value is None:
        return f"{currency}"

    sign = ""
    if value < 0:
        sign = "-"
        value = abs(value)
    elif include_sign and value > 0:
        sign = "+"

    formatted = f"{value:,.{decimal_places}f}"
    return f"{sign}{currency}{formatted}"


def format_percentage(
    value: float | int | None,
    decimal_places: int = 2,
    include_sign: bool = False,
    multiply_by_100: bool = True,
) -> str:
    """
    Format a number as percentage.

    Args:
        value: Numeric value (0.15 = 15% if multiply_by_100=True)
        decimal_places: Number of decimal places
        include_sign: Include + for positive values
        multiply_by_100: If True, multiply value by 100

    Returns:
        Formatted percentage string

    Examples:
        format_percentage(0.1523) -> "15.23%"
        format_percentage(0.0) -> "0.00%"
        format_percentage(-0.05, include_sign=True) -> "-5.00%"
    """
    if value is None:
        return "--%"

    if multiply_by_100:
        value = value * 100

    # Avoid rendering "-0.00%"
    if round(value, decimal_places) == 0:
        value = 0.0

    sign = "+" if include_sign and value > 0 else ""
    return f"{sign}{value:.{decimal_places}f}%"


def format_number(value: float | int | None, decimal_places: int = 2) -> str:
    """
    Format a plain number without thousands separators.

    Examples:
        format_number(10000) -> "10000.00"
        format_number(1.23456, 3) -> "1.235"
    """
    if value is None:
        return "--"

    if round(value, decimal_places) == 0:
        value = 0.0

    return f"{value:.{decimal_places}f}"
