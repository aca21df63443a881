# quantcore/utils/calculations.py
"""
Financial calculation utilities for quantcore

Provides common financial calculations used across modules. Degenerate inputs
(empty samples, zero variance) return 0.0 rather than NaN or inf.
"""

import math

import numpy as np
import pandas as pd

ArrayLike = np.ndarray | pd.Series | list | tuple


def _clean(values: ArrayLike) -> np.ndarray:
    values = np.asarray(values, dtype=float)
    return values[np.isfinite(values)]


def simple_returns(prices: ArrayLike) -> np.ndarray:
    """
    Period-over-period simple returns.

    return[i] = (price[i] - price[i-1]) / price[i-1]

    Args:
        prices: Ordered price or value series

    Returns:
        Array of length len(prices) - 1 (empty for fewer than two prices)
    """
    prices = np.asarray(prices, dtype=float)

    if len(prices) < 2:
        return np.array([], dtype=float)

    previous = prices[:-1]
    with np.errstate(divide="ignore", invalid="ignore"):
        returns = np.where(previous != 0, np.diff(prices) / previous, 0.0)

    return returns


def annualize_volatility(
    returns: ArrayLike,
    periods_per_year: int = 252,
    ddof: int = 1,
) -> float:
    """
    Annualize volatility from periodic returns.

    Args:
        returns: Array of periodic returns
        periods_per_year: Trading periods per year (252 for daily)
        ddof: Delta degrees of freedom (1 = sample, 0 = population)

    Returns:
        Annualized volatility (standard deviation)
    """
    returns = _clean(returns)

    if len(returns) <= ddof or len(returns) < 2:
        return 0.0

    return float(np.std(returns, ddof=ddof) * np.sqrt(periods_per_year))


def max_drawdown(values: ArrayLike) -> float:
    """
    Calculate maximum peak-to-trough decline.

    Args:
        values: Price or equity curve

    Returns:
        Maximum drawdown as a positive fraction (0.25 = 25% decline)
    """
    values = _clean(values)

    if len(values) < 2:
        return 0.0

    running_max = np.maximum.accumulate(values)

    with np.errstate(divide="ignore", invalid="ignore"):
        drawdowns = np.where(running_max > 0, (running_max - values) / running_max, 0.0)

    return float(max(0.0, np.max(drawdowns)))


def path_max_drawdowns(paths: np.ndarray) -> np.ndarray:
    """
    Maximum drawdown of each row of a (num_paths, num_steps) array.

    Args:
        paths: Value paths, one per row

    Returns:
        Array of positive drawdown fractions, one per path
    """
    running_max = np.maximum.accumulate(paths, axis=1)

    with np.errstate(divide="ignore", invalid="ignore"):
        drawdowns = np.where(running_max > 0, (running_max - paths) / running_max, 0.0)

    return np.max(drawdowns, axis=1)


def herfindahl_index(weights: ArrayLike) -> float:
    """
    Herfindahl-Hirschman concentration index (sum of squared weights).

    Args:
        weights: Portfolio weights (expected to sum to 1)

    Returns:
        HHI in (0, 1] for normalized weights, 0.0 for an empty list
    """
    weights = _clean(weights)

    if len(weights) == 0:
        return 0.0

    return float(np.sum(weights**2))


def beta(
    returns: ArrayLike,
    benchmark_returns: ArrayLike,
    default: float = 1.0,
) -> float:
    """
    Calculate portfolio beta vs benchmark.

    Args:
        returns: Portfolio returns
        benchmark_returns: Benchmark returns
        default: Value returned when beta is undefined

    Returns:
        Beta coefficient
    """
    returns = np.asarray(returns, dtype=float)
    benchmark_returns = np.asarray(benchmark_returns, dtype=float)

    # Align arrays on the most recent observations
    min_len = min(len(returns), len(benchmark_returns))
    returns = returns[len(returns) - min_len :]
    benchmark_returns = benchmark_returns[len(benchmark_returns) - min_len :]

    mask = np.isfinite(returns) & np.isfinite(benchmark_returns)
    returns = returns[mask]
    benchmark_returns = benchmark_returns[mask]

    if len(returns) < 2:
        return default

    benchmark_variance = np.var(benchmark_returns, ddof=1)

    if benchmark_variance == 0:
        return default

    covariance = np.cov(returns, benchmark_returns)[0, 1]

    return float(covariance / benchmark_variance)


def clamp(value: float, lower: float = 0.0, upper: float = 100.0) -> float:
    """Clamp value into [lower, upper]"""
    return max(lower, min(upper, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up"""
    return int(math.floor(value + 0.5))


def is_valid_positive(value) -> bool:
    """True for finite numbers strictly greater than zero"""
    if isinstance(value, bool):
        return False
    try:
        number = float(value)
    except (TypeError, ValueError):
        return False
    return math.isfinite(number) and number > 0
