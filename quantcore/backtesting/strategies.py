# quantcore/backtesting/strategies.py
"""
Pre-built trading strategies for backtesting
Collection of long-only rule-based strategies with configurable parameters

Strategies only emit BUY/SELL/HOLD signals. Position state (FLAT/LONG), sizing
and execution belong to the engine, so a strategy may emit BUY while already
long; the engine ignores it.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any

import numpy as np
import pandas as pd
from loguru import logger

from quantcore.backtesting.indicators import macd, trailing_mean, trailing_zscore
from quantcore.utils.validation import positive_or_default, to_snake_case, validate_strategy


class Signal(str, Enum):
    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"


def normalize_params(params: dict[str, Any] | None) -> dict[str, Any]:
    """Convert camelCase parameter names (maPeriod) to snake_case (ma_period)"""
    if not params:
        return {}
    return {to_snake_case(key): value for key, value in params.items()}


class BaseStrategy(ABC):
    """
    Base class for all trading strategies
    """

    # Column of the bar used to fill orders
    fill_column = "close"

    def __init__(self, name: str, params: dict[str, Any] | None = None):
        """
        Initialize strategy

        Args:
            name: Strategy name
            params: Strategy parameters
        """
        self.name = name
        self.params = params or {}
        logger.debug(f"Initialized strategy: {name} {self.params}")

    @property
    def warmup_period(self) -> int:
        """First bar index at which the strategy can trade"""
        return 0

    @abstractmethod
    def generate_signals(self, data: pd.DataFrame) -> list[Signal]:
        """
        Generate trading signals

        Args:
            data: Price data with OHLCV columns

        Returns:
            One signal per bar
        """
        pass


class BuyAndHoldStrategy(BaseStrategy):
    """
    Buy on the first bar at the open and never sell
    """

    fill_column = "open"

    def __init__(self, **kwargs):
        super().__init__("Buy and Hold", {})

    def generate_signals(self, data: pd.DataFrame) -> list[Signal]:
        if len(data) == 0:
            return []
        return [Signal.BUY] + [Signal.HOLD] * (len(data) - 1)


class MomentumStrategy(BaseStrategy):
    """
    Moving average momentum strategy
    Buy when close > MA * (1 + band), Sell when close < MA * (1 - band)
    """

    def __init__(self, ma_period: int = 20, band: float = 0.02, **kwargs):
        params = {
            "ma_period": positive_or_default(ma_period, 20, "ma_period"),
            "band": positive_or_default(band, 0.02, "band"),
        }
        super().__init__("Momentum Strategy", params)

    @property
    def warmup_period(self) -> int:
        return self.params["ma_period"]

    def generate_signals(self, data: pd.DataFrame) -> list[Signal]:
        """Generate moving average band signals"""
        closes = data["close"].to_numpy(dtype=float)
        moving_average = trailing_mean(closes, self.params["ma_period"])
        band = self.params["band"]

        signals = []
        for close, ma in zip(closes, moving_average):
            if np.isnan(ma):
                signals.append(Signal.HOLD)
            elif close > ma * (1 + band):
                signals.append(Signal.BUY)
            elif close < ma * (1 - band):
                signals.append(Signal.SELL)
            else:
                signals.append(Signal.HOLD)

        return signals


class MeanReversionStrategy(BaseStrategy):
    """
    Mean Reversion Strategy
    Buy when price is far below mean, Sell once it reverts above the mean
    """

    def __init__(self, lookback: int = 20, z_score_threshold: float = 2.0, **kwargs):
        params = {
            "lookback": positive_or_default(lookback, 20, "lookback"),
            "z_score_threshold": positive_or_default(
                z_score_threshold, 2.0, "z_score_threshold"
            ),
        }
        super().__init__("Mean Reversion Strategy", params)

    @property
    def warmup_period(self) -> int:
        return self.params["lookback"]

    def generate_signals(self, data: pd.DataFrame) -> list[Signal]:
        """Generate mean reversion signals"""
        closes = data["close"].to_numpy(dtype=float)
        z_scores = trailing_zscore(closes, self.params["lookback"])
        threshold = self.params["z_score_threshold"]

        signals = []
        for z in z_scores:
            if np.isnan(z):
                signals.append(Signal.HOLD)
            elif z < -threshold:
                signals.append(Signal.BUY)
            elif z > 0:
                # Reverted to (or beyond) the mean
                signals.append(Signal.SELL)
            else:
                signals.append(Signal.HOLD)

        return signals


class MACDCrossoverStrategy(BaseStrategy):
    """
    MACD (Moving Average Convergence Divergence) strategy
    Buy when MACD crosses above signal, Sell when crosses below
    """

    def __init__(
        self,
        fast_period: int = 12,
        slow_period: int = 26,
        signal_period: int = 9,
        **kwargs,
    ):
        params = {
            "fast_period": positive_or_default(fast_period, 12, "fast_period"),
            "slow_period": positive_or_default(slow_period, 26, "slow_period"),
            "signal_period": positive_or_default(signal_period, 9, "signal_period"),
        }
        super().__init__("MACD Crossover Strategy", params)

    def generate_signals(self, data: pd.DataFrame) -> list[Signal]:
        """Generate MACD-based signals"""
        closes = data["close"].to_numpy(dtype=float)
        if len(closes) == 0:
            return []

        macd_line, signal_line = macd(
            closes,
            self.params["fast_period"],
            self.params["slow_period"],
            self.params["signal_period"],
        )

        signals = [Signal.HOLD]
        for i in range(1, len(closes)):
            prev_macd, prev_signal = macd_line[i - 1], signal_line[i - 1]
            current_macd, current_signal = macd_line[i], signal_line[i]

            # Bullish crossover
            if prev_macd <= prev_signal and current_macd > current_signal:
                signals.append(Signal.BUY)
            # Bearish crossover
            elif prev_macd >= prev_signal and current_macd < current_signal:
                signals.append(Signal.SELL)
            else:
                signals.append(Signal.HOLD)

        return signals


# Strategy registry
STRATEGIES: dict[str, type[BaseStrategy]] = {
    "buy_and_hold": BuyAndHoldStrategy,
    "momentum": MomentumStrategy,
    "mean_reversion": MeanReversionStrategy,
    "macd_crossover": MACDCrossoverStrategy,
}


def list_strategies() -> list[str]:
    return list(STRATEGIES.keys())


def get_strategy(strategy_name: str, **params) -> BaseStrategy:
    """
    Factory function to create strategy instances

    Args:
        strategy_name: Strategy name in snake_case or camelCase
        **params: Strategy parameters (snake_case or camelCase)

    Returns:
        Strategy instance

    Raises:
        ValidationError: If the strategy name is unknown
    """
    strategy_name = validate_strategy(strategy_name)
    strategy_class = STRATEGIES[strategy_name]
    return strategy_class(**normalize_params(params))
