# quantcore/backtesting/indicators.py
"""
Technical indicators used by the built-in strategies

Trailing-window indicators look only at the ``period`` values *before* index i,
so the value at i never includes the current close. Indices without a full
window are NaN.
"""

import numpy as np
import pandas as pd

from quantcore.utils.calculations import ArrayLike


def trailing_mean(values: ArrayLike, period: int) -> np.ndarray:
    """Mean of values[i - period : i]"""
    values = np.asarray(values, dtype=float)
    result = np.full(len(values), np.nan)

    for i in range(period, len(values)):
        result[i] = np.mean(values[i - period : i])

    return result


def trailing_zscore(values: ArrayLike, period: int) -> np.ndarray:
    """
    Z-score of values[i] against values[i - period : i].

    Uses the population standard deviation; the z-score is 0 when the
    window has no dispersion.
    """
    values = np.asarray(values, dtype=float)
    result = np.full(len(values), np.nan)

    for i in range(period, len(values)):
        window = values[i - period : i]
        mean = np.mean(window)
        std = np.std(window)
        result[i] = (values[i] - mean) / std if std > 0 else 0.0

    return result


def ema(values: ArrayLike, period: int) -> np.ndarray:
    """
    Exponential moving average seeded with the first value.

    ema[0] = values[0]; ema[i] = values[i] * k + ema[i-1] * (1 - k), k = 2 / (period + 1)
    """
    series = pd.Series(np.asarray(values, dtype=float))
    return series.ewm(span=period, adjust=False).mean().to_numpy()


def macd(
    values: ArrayLike,
    fast_period: int = 12,
    slow_period: int = 26,
    signal_period: int = 9,
) -> tuple[np.ndarray, np.ndarray]:
    """
    MACD line and signal line.

    Returns:
        (macd_line, signal_line), both the same length as values
    """
    macd_line = ema(values, fast_period) - ema(values, slow_period)
    signal_line = ema(macd_line, signal_period)
    return macd_line, signal_line
