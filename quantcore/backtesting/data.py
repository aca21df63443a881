# quantcore/backtesting/data.py
"""
Synthetic price data for demos and for the engine's empty-series fallback
"""

from datetime import date, timedelta

import numpy as np

from quantcore.schemas.market import PriceBar, PriceSeries

DAILY_DRIFT = 0.0002


def generate_price_series(
    rng: np.random.Generator,
    days: int = 252,
    start_price: float = 100.0,
    volatility: float = 0.02,
    start: date | None = None,
    symbol: str = "SYNTHETIC",
) -> PriceSeries:
    """
    Random-walk daily bars with a small upward drift.

    close[i] = close[i-1] * (1 + U(-vol, vol) + 0.0002)

    Args:
        rng: Random generator (seed it for reproducible series)
        days: Number of consecutive calendar days
        start_price: Price before the first bar
        volatility: Half-width of the uniform daily return
        start: First bar date (defaults to ``days`` days before today)
        symbol: Symbol recorded on the series

    Returns:
        PriceSeries with OHLCV bars
    """
    start = start or date.today() - timedelta(days=days)

    daily_returns = (rng.random(days) - 0.5) * 2 * volatility + DAILY_DRIFT
    closes = start_price * np.cumprod(1 + daily_returns)

    opens = closes * (1 + (rng.random(days) - 0.5) * 0.01)
    highs = np.maximum(closes * (1 + rng.random(days) * 0.02), np.maximum(opens, closes))
    lows = np.minimum(closes * (1 - rng.random(days) * 0.02), np.minimum(opens, closes))
    volumes = np.floor(1_000_000 + rng.random(days) * 500_000)

    bars = [
        PriceBar(
            date=start + timedelta(days=i),
            open=float(opens[i]),
            high=float(highs[i]),
            low=float(lows[i]),
            close=float(closes[i]),
            volume=float(volumes[i]),
        )
        for i in range(days)
    ]
    return PriceSeries(symbol=symbol, bars=bars)
