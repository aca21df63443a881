# quantcore/backtesting/engine.py
"""
Backtesting engine

Replays a daily price series against a rule-based strategy with a shared
FLAT/LONG position state machine: BUY is honored only when flat, SELL only when
long. Every BUY invests all cash in whole shares, every SELL liquidates. An
open position at the end is marked to market, not closed.
"""

import math
from collections.abc import Iterable
from dataclasses import asdict, dataclass
from datetime import date
from enum import Enum
from typing import Any

import numpy as np
import pandas as pd
from loguru import logger

from quantcore.backtesting.data import generate_price_series
from quantcore.backtesting.strategies import (
    BaseStrategy,
    Signal,
    get_strategy,
    list_strategies,
    normalize_params,
)
from quantcore.config.defaults import BacktestConfig
from quantcore.config.logging_config import log_backtest_run
from quantcore.config.settings import Settings, get_settings
from quantcore.schemas.market import PriceSeries
from quantcore.simulation.random import make_rng
from quantcore.utils.calculations import annualize_volatility, max_drawdown, simple_returns
from quantcore.utils.formatting import format_currency, format_number, format_percentage
from quantcore.utils.validation import positive_or_default


class PositionState(str, Enum):
    FLAT = "FLAT"
    LONG = "LONG"


@dataclass(frozen=True)
class Trade:
    """
    Represents a single executed order
    """

    date: date
    action: Signal
    price: float
    shares: int
    cash_after: float

    @property
    def value(self) -> float:
        return self.price * self.shares

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "action": self.action.value,
            "price": self.price,
            "shares": self.shares,
            "value": self.value,
            "cash": self.cash_after,
        }


@dataclass(frozen=True)
class EquityPoint:
    date: date
    value: float

    def to_dict(self) -> dict[str, Any]:
        return {"date": self.date.isoformat(), "value": self.value}


@dataclass(frozen=True)
class BacktestMetrics:
    """
    Aggregate performance metrics

    Returns, drawdown, volatility and win rate are fractions (0.05 = 5%).
    """

    total_return: float = 0.0
    annualized_return: float = 0.0
    sharpe_ratio: float = 0.0
    max_drawdown: float = 0.0
    volatility: float = 0.0
    total_trades: int = 0
    win_rate: float = 0.0
    final_value: float = 0.0

    def formatted(self) -> dict[str, str]:
        """Display strings, e.g. total_return "0.00%" and final_value "10000.00" """
        return {
            "total_return": format_percentage(self.total_return),
            "annualized_return": format_percentage(self.annualized_return),
            "sharpe_ratio": format_number(self.sharpe_ratio),
            "max_drawdown": format_percentage(self.max_drawdown),
            "volatility": format_percentage(self.volatility),
            "total_trades": str(self.total_trades),
            "win_rate": format_percentage(self.win_rate),
            "final_value": format_number(self.final_value),
        }

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class BacktestResult:
    """
    Complete backtest results
    """

    strategy_name: str
    params: dict[str, Any]
    initial_capital: float
    trades: tuple[Trade, ...]
    portfolio_values: tuple[EquityPoint, ...]
    metrics: BacktestMetrics
    synthetic_data: bool = False
    final_state: PositionState = PositionState.FLAT
    open_shares: int = 0

    @property
    def start_date(self) -> date | None:
        return self.portfolio_values[0].date if self.portfolio_values else None

    @property
    def end_date(self) -> date | None:
        return self.portfolio_values[-1].date if self.portfolio_values else None

    def equity_curve(self) -> pd.Series:
        """Portfolio value indexed by date"""
        return pd.Series(
            [point.value for point in self.portfolio_values],
            index=pd.DatetimeIndex([pd.Timestamp(p.date) for p in self.portfolio_values]),
            name="value",
            dtype=float,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary"""
        return {
            "strategy_name": self.strategy_name,
            "params": self.params,
            "initial_capital": self.initial_capital,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "trades": [t.to_dict() for t in self.trades],
            "portfolio_values": [p.to_dict() for p in self.portfolio_values],
            "metrics": self.metrics.to_dict(),
            "synthetic_data": self.synthetic_data,
            "final_state": self.final_state.value,
            "open_shares": self.open_shares,
        }


class BacktestEngine:
    """
    Main backtesting engine

    Usage:
        engine = BacktestEngine(BacktestConfig(initial_capital=10000))
        result = engine.run(series, "momentum", {"ma_period": 50})
    """

    def __init__(
        self,
        config: BacktestConfig | None = None,
        rng: np.random.Generator | None = None,
    ):
        """
        Initialize backtest engine

        Args:
            config: Backtest configuration
            rng: Generator for the synthetic fallback series
        """
        self.config = config or BacktestConfig()
        self.rng = rng if rng is not None else make_rng()

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "BacktestEngine":
        """Engine configured from application settings, seeded by RANDOM_SEED"""
        settings = settings or get_settings()
        return cls(BacktestConfig.from_settings(settings), make_rng(settings.RANDOM_SEED))

    def run(
        self,
        price_series: PriceSeries | pd.DataFrame | None,
        strategy_name: str,
        params: dict[str, Any] | None = None,
    ) -> BacktestResult:
        """
        Run backtest with specified strategy

        Args:
            price_series: Daily bars; an empty series is replaced by a synthetic one
            strategy_name: buy_and_hold, momentum, mean_reversion or macd_crossover
                (camelCase accepted)
            params: Strategy parameters, plus optional initial_capital

        Returns:
            BacktestResult object

        Raises:
            ValidationError: If the strategy name is unknown
        """
        params = normalize_params(params)
        initial_capital = positive_or_default(
            params.pop("initial_capital", None), self.config.initial_capital, "initial_capital"
        )
        strategy = get_strategy(strategy_name, **params)

        series, synthetic = self._resolve_series(price_series)
        data = series.to_frame()

        logger.info(f"Running backtest: {strategy.name} on {len(data)} bars")

        trades, values, state, shares = self._execute(strategy, data, initial_capital)
        metrics = self._calculate_metrics(trades, values, initial_capital)

        result = BacktestResult(
            strategy_name=strategy.name,
            params=dict(strategy.params),
            initial_capital=initial_capital,
            trades=tuple(trades),
            portfolio_values=tuple(values),
            metrics=metrics,
            synthetic_data=synthetic,
            final_state=state,
            open_shares=shares,
        )

        self._log_summary(result)

        return result

    def _resolve_series(
        self, price_series: PriceSeries | pd.DataFrame | None
    ) -> tuple[PriceSeries, bool]:
        if isinstance(price_series, pd.DataFrame):
            price_series = None if price_series.empty else PriceSeries.from_frame(price_series)

        if price_series is not None and not price_series.is_empty:
            return price_series, False

        logger.warning(
            "Empty price series supplied, falling back to a synthetic random-walk series"
        )
        cfg = self.config
        synthetic = generate_price_series(
            self.rng,
            days=cfg.synthetic_days,
            start_price=cfg.synthetic_start_price,
            volatility=cfg.synthetic_volatility,
        )
        return synthetic, True

    def _execute(
        self,
        strategy: BaseStrategy,
        data: pd.DataFrame,
        initial_capital: float,
    ) -> tuple[list[Trade], list[EquityPoint], PositionState, int]:
        """Walk the bars applying signals through the FLAT/LONG state machine"""
        signals = strategy.generate_signals(data)
        closes = data["close"].to_numpy(dtype=float)
        fills = data[strategy.fill_column].to_numpy(dtype=float)
        dates = [ts.date() for ts in data.index]

        cash = initial_capital
        shares = 0
        state = PositionState.FLAT
        trades: list[Trade] = []
        values: list[EquityPoint] = []

        for i in range(strategy.warmup_period, len(data)):
            signal = signals[i]
            price = fills[i]

            if signal == Signal.BUY and state == PositionState.FLAT:
                quantity = math.floor(cash / price)
                if quantity > 0:
                    cash -= quantity * price
                    shares = quantity
                    state = PositionState.LONG
                    trades.append(Trade(dates[i], Signal.BUY, price, quantity, cash))

            elif signal == Signal.SELL and state == PositionState.LONG:
                cash += shares * price
                trades.append(Trade(dates[i], Signal.SELL, price, shares, cash))
                shares = 0
                state = PositionState.FLAT

            # Open positions are marked to market at the close
            values.append(EquityPoint(dates[i], cash + shares * closes[i]))

        return trades, values, state, shares

    def _calculate_metrics(
        self,
        trades: list[Trade],
        values: list[EquityPoint],
        initial_capital: float,
    ) -> BacktestMetrics:
        """Calculate performance metrics from the equity curve and trade list"""
        cfg = self.config

        if not values:
            return BacktestMetrics(final_value=initial_capital)

        equity = np.array([point.value for point in values], dtype=float)
        final_value = float(equity[-1])

        total_return = (final_value - initial_capital) / initial_capital
        annualized_return = (1 + total_return) ** (cfg.trading_days / len(equity)) - 1

        returns = simple_returns(equity)
        volatility = annualize_volatility(returns, cfg.trading_days, ddof=0)
        sharpe_ratio = (
            (annualized_return - cfg.risk_free_rate) / volatility if volatility > 0 else 0.0
        )

        return BacktestMetrics(
            total_return=total_return,
            annualized_return=float(annualized_return),
            sharpe_ratio=float(sharpe_ratio),
            max_drawdown=max_drawdown(equity),
            volatility=volatility,
            total_trades=len(trades),
            win_rate=self.win_rate(trades),
            final_value=final_value,
        )

    @staticmethod
    def win_rate(trades: Iterable[Trade]) -> float:
        """
        Fraction of matched BUY -> SELL pairs that closed above the entry price.

        A trailing BUY without a SELL is excluded; 0.0 when there are no pairs.
        """
        wins = 0
        closed = 0
        entry_price = None

        for trade in trades:
            if trade.action == Signal.BUY:
                entry_price = trade.price
            elif trade.action == Signal.SELL and entry_price is not None:
                closed += 1
                if trade.price > entry_price:
                    wins += 1
                entry_price = None

        return wins / closed if closed > 0 else 0.0

    def _log_summary(self, result: BacktestResult):
        """Log backtest summary"""
        metrics = result.metrics
        logger.info("=" * 60)
        logger.info("BACKTEST RESULTS")
        logger.info("=" * 60)
        logger.info(f"Strategy: {result.strategy_name}")
        logger.info(f"Period: {result.start_date} to {result.end_date}")
        logger.info(f"Initial Capital: {format_currency(result.initial_capital)}")
        logger.info(f"Final Value: {format_currency(metrics.final_value)}")
        logger.info(f"Total Return: {metrics.total_return * 100:.2f}%")
        logger.info(f"Annualized Return: {metrics.annualized_return * 100:.2f}%")
        logger.info(f"Volatility: {metrics.volatility * 100:.2f}%")
        logger.info(f"Sharpe Ratio: {metrics.sharpe_ratio:.2f}")
        logger.info(f"Max Drawdown: {metrics.max_drawdown * 100:.2f}%")
        logger.info(f"Total Trades: {metrics.total_trades}")
        logger.info(f"Win Rate: {metrics.win_rate * 100:.2f}%")
        logger.info("=" * 60)

        log_backtest_run(
            result.strategy_name,
            str(result.start_date),
            str(result.end_date),
            metrics.to_dict(),
        )

    def compare_strategies(
        self,
        price_series: PriceSeries | pd.DataFrame | None,
        strategies: Iterable[str | tuple[str, dict[str, Any]]] | None = None,
    ) -> pd.DataFrame:
        """
        Compare multiple strategies on the same series

        Args:
            price_series: Daily bars shared by every run
            strategies: Strategy names or (name, params) tuples; all built-in
                strategies when omitted

        Returns:
            DataFrame with one row of metrics per strategy, sorted by Sharpe ratio

        Raises:
            ValidationError: If a strategy name is unknown
        """
        strategies = list(strategies) if strategies is not None else list_strategies()
        logger.info(f"Comparing {len(strategies)} strategies")

        # Resolve once so every strategy sees the same (possibly synthetic) bars
        series, _ = self._resolve_series(price_series)

        rows = []
        for entry in strategies:
            name, params = entry if isinstance(entry, tuple) else (entry, None)
            result = self.run(series, name, params)
            rows.append({"strategy": result.strategy_name, **result.metrics.to_dict()})

        comparison = pd.DataFrame(rows)
        if not comparison.empty:
            comparison = comparison.sort_values("sharpe_ratio", ascending=False).reset_index(
                drop=True
            )

        logger.success("Strategy comparison complete")
        return comparison
