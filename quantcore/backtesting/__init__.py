# quantcore/backtesting/__init__.py
"""
Backtesting Module for quantcore

BacktestEngine:
- Bar-by-bar replay with a FLAT/LONG position state machine
- All-in whole-share sizing, no leverage or shorting
- Total/annualized return, Sharpe, drawdown, volatility, win rate
- Synthetic random-walk fallback for empty price series

Strategies:
- buy_and_hold, momentum, mean_reversion, macd_crossover
- Names and parameters accept snake_case or camelCase

Usage:
    from quantcore.backtesting import BacktestEngine

    engine = BacktestEngine()
    result = engine.run(price_series, "macd_crossover", {"fastPeriod": 8})
    print(result.metrics.formatted())
"""

from quantcore.backtesting.data import generate_price_series
from quantcore.backtesting.engine import (
    BacktestEngine,
    BacktestMetrics,
    BacktestResult,
    EquityPoint,
    PositionState,
    Trade,
)
from quantcore.backtesting.indicators import ema, macd, trailing_mean, trailing_zscore
from quantcore.backtesting.strategies import (
    STRATEGIES,
    BaseStrategy,
    BuyAndHoldStrategy,
    MACDCrossoverStrategy,
    MeanReversionStrategy,
    MomentumStrategy,
    Signal,
    get_strategy,
    list_strategies,
)

__all__ = [
    # Engine
    "BacktestEngine",
    "BacktestResult",
    "BacktestMetrics",
    "Trade",
    "EquityPoint",
    "PositionState",
    # Strategies
    "BaseStrategy",
    "BuyAndHoldStrategy",
    "MomentumStrategy",
    "MeanReversionStrategy",
    "MACDCrossoverStrategy",
    "Signal",
    "STRATEGIES",
    "get_strategy",
    "list_strategies",
    # Indicators
    "ema",
    "macd",
    "trailing_mean",
    "trailing_zscore",
    # Data
    "generate_price_series",
]
