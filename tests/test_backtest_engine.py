# tests/test_backtest_engine.py
"""
Unit tests for the backtesting engine
Run with: pytest tests/test_backtest_engine.py -v
"""

from datetime import date

import numpy as np
import pandas as pd
import pytest
from loguru import logger

from quantcore.backtesting import (
    BacktestEngine,
    BacktestMetrics,
    BacktestResult,
    PositionState,
    Signal,
    Trade,
)
from quantcore.config import BacktestConfig
from quantcore.schemas import PriceSeries
from quantcore.utils import ValidationError


@pytest.fixture
def engine(rng):
    return BacktestEngine(rng=rng)


@pytest.fixture
def dip_and_recover_series():
    """Alternating 100/101 closes, a drop to 95, then a jump to 110"""
    closes = [100.0, 101.0] * 15 + [95.0, 110.0]
    return PriceSeries.from_closes(closes, start=date(2024, 1, 1))


@pytest.fixture
def up_then_down_series():
    up = [100.0 + i for i in range(40)]
    down = [139.0 - 1.5 * i for i in range(1, 41)]
    return PriceSeries.from_closes(up + down, start=date(2024, 1, 1))


def assert_alternating(trades):
    """BUY and SELL must strictly alternate starting with BUY"""
    for i, trade in enumerate(trades):
        expected = Signal.BUY if i % 2 == 0 else Signal.SELL
        assert trade.action == expected


class TestBacktestEngine:
    """Tests for BacktestEngine.run"""

    def test_flat_buy_and_hold(self, engine, flat_series):
        """Test 100 flat days: one trade of 100 shares, capital unchanged"""
        result = engine.run(flat_series, "buy_and_hold", {"initialCapital": 10000})

        assert isinstance(result, BacktestResult)
        assert len(result.trades) == 1
        assert result.trades[0].shares == 100
        assert result.trades[0].action == Signal.BUY
        assert result.metrics.final_value == pytest.approx(10000.0)
        assert result.metrics.formatted()["total_return"] == "0.00%"
        assert result.metrics.total_trades == 1
        assert result.metrics.win_rate == 0.0
        assert result.metrics.sharpe_ratio == 0.0
        assert result.metrics.max_drawdown == 0.0
        assert result.final_state == PositionState.LONG
        assert result.open_shares == 100

    def test_equity_curve_covers_every_bar(self, engine, flat_series):
        result = engine.run(flat_series, "buy_and_hold")

        assert len(result.portfolio_values) == 100
        assert result.start_date == date(2024, 1, 1)
        assert result.end_date == date(2024, 4, 9)

    def test_buy_and_hold_rising(self, engine, rising_series):
        result = engine.run(rising_series, "buy_and_hold")
        first_open = rising_series.bars[0].open
        shares = int(10000 // first_open)

        assert result.trades[0].price == pytest.approx(first_open)
        assert result.trades[0].shares == shares
        expected_final = 10000 - shares * first_open + shares * rising_series.bars[-1].close
        assert result.metrics.final_value == pytest.approx(expected_final)
        assert result.metrics.total_return > 0
        assert result.metrics.annualized_return > 0
        assert result.metrics.max_drawdown == pytest.approx(0.0)

        equity = result.equity_curve()
        assert (equity.diff().dropna() > 0).all()

    def test_initial_capital_too_small(self, engine, flat_series):
        """Test a BUY that cannot afford one share leaves the engine flat"""
        result = engine.run(flat_series, "buy_and_hold", {"initial_capital": 50})

        assert result.trades == ()
        assert result.final_state == PositionState.FLAT
        assert result.metrics.final_value == pytest.approx(50.0)

    def test_momentum_warmup(self, engine, rising_series):
        result = engine.run(rising_series, "momentum", {"maPeriod": 20})

        assert len(result.portfolio_values) == len(rising_series) - 20
        assert len(result.trades) == 1
        assert result.trades[0].date == rising_series.bars[20].date

    def test_warmup_longer_than_series(self, engine, flat_series):
        result = engine.run(flat_series, "momentum", {"ma_period": 500})

        assert result.trades == ()
        assert result.portfolio_values == ()
        assert result.metrics.final_value == 10000.0
        assert result.metrics.annualized_return == 0.0
        assert result.start_date is None

    def test_mean_reversion_round_trip(self, engine, dip_and_recover_series):
        result = engine.run(dip_and_recover_series, "meanReversion")

        assert [t.action for t in result.trades] == [Signal.BUY, Signal.SELL]
        assert result.trades[0].price == 95.0
        assert result.trades[0].shares == 105
        assert result.trades[1].price == 110.0
        assert result.metrics.final_value == pytest.approx(25.0 + 105 * 110.0)
        assert result.metrics.win_rate == 1.0
        assert result.final_state == PositionState.FLAT

    def test_macd_crossovers(self, engine, up_then_down_series):
        result = engine.run(up_then_down_series, "macd_crossover")

        assert len(result.trades) >= 2
        assert result.trades[0].action == Signal.BUY
        assert result.trades[0].date == up_then_down_series.bars[1].date
        assert result.trades[1].action == Signal.SELL
        assert_alternating(result.trades)

    def test_no_simultaneous_positions(self, engine, oscillating_series):
        """Test every strategy alternates BUY and SELL"""
        for name in ("buy_and_hold", "momentum", "mean_reversion", "macd_crossover"):
            result = engine.run(oscillating_series, name, {"ma_period": 5, "band": 0.01})
            assert_alternating(result.trades)

    def test_mark_to_market(self, engine, oscillating_series):
        """Test each equity point equals cash plus shares at the close"""
        result = engine.run(oscillating_series, "momentum", {"ma_period": 5, "band": 0.01})
        closes = {bar.date: bar.close for bar in oscillating_series.bars}

        cash, shares = 10000.0, 0
        trades = {t.date: t for t in result.trades}
        for point in result.portfolio_values:
            trade = trades.get(point.date)
            if trade is not None:
                cash = trade.cash_after
                shares = trade.shares if trade.action == Signal.BUY else 0
            assert point.value == pytest.approx(cash + shares * closes[point.date])

    def test_metrics_consistency(self, engine, oscillating_series):
        result = engine.run(oscillating_series, "momentum", {"ma_period": 5, "band": 0.01})
        metrics = result.metrics
        values = result.equity_curve().to_numpy()

        assert metrics.total_return == pytest.approx(values[-1] / 10000 - 1)
        assert metrics.total_trades == len(result.trades)
        assert 0.0 <= metrics.win_rate <= 1.0
        assert 0.0 <= metrics.max_drawdown <= 1.0

        returns = np.diff(values) / values[:-1]
        assert metrics.volatility == pytest.approx(np.std(returns) * np.sqrt(252))

    def test_unknown_strategy(self, engine, flat_series):
        with pytest.raises(ValidationError):
            engine.run(flat_series, "pairs_trading")

    def test_empty_series_uses_synthetic_data(self, engine):
        result = engine.run(PriceSeries(), "buy_and_hold")

        assert result.synthetic_data
        assert len(result.portfolio_values) == 252
        assert len(result.trades) == 1

    def test_empty_dataframe_uses_synthetic_data(self, engine):
        result = engine.run(pd.DataFrame(), "buy_and_hold")

        assert result.synthetic_data
        assert len(result.portfolio_values) == 252

    def test_missing_series_uses_synthetic_data(self, engine):
        assert engine.run(None, "momentum").synthetic_data

    def test_summary_logs_currency(self, engine, dip_and_recover_series):
        messages = []
        handler_id = logger.add(messages.append, level="INFO", format="{message}")
        try:
            engine.run(dip_and_recover_series, "buy_and_hold")
        finally:
            logger.remove(handler_id)

        assert any("Initial Capital: $10,000.00" in str(m) for m in messages)
        assert any(str(m).startswith("Final Value: $") for m in messages)

    def test_dataframe_input(self, engine):
        frame = pd.DataFrame(
            {"close": [100.0] * 30},
            index=pd.date_range("2024-01-01", periods=30, freq="D"),
        )
        result = engine.run(frame, "buy_and_hold")

        assert not result.synthetic_data
        assert result.trades[0].shares == 100

    def test_config_risk_free_rate(self, rising_series):
        result = BacktestEngine(BacktestConfig(risk_free_rate=0.0)).run(
            rising_series, "buy_and_hold"
        )
        metrics = result.metrics

        if metrics.volatility > 0:
            assert metrics.sharpe_ratio == pytest.approx(
                metrics.annualized_return / metrics.volatility
            )

    def test_to_dict(self, engine, flat_series):
        data = engine.run(flat_series, "buy_and_hold").to_dict()

        assert data["strategy_name"] == "Buy and Hold"
        assert data["start_date"] == "2024-01-01"
        assert data["trades"][0]["action"] == "BUY"
        assert data["trades"][0]["value"] == pytest.approx(10000.0)
        assert data["metrics"]["total_trades"] == 1
        assert data["final_state"] == "LONG"
        assert len(data["portfolio_values"]) == 100


class TestWinRate:
    """Tests for matched BUY -> SELL win rate"""

    def _trade(self, action, price):
        return Trade(date(2024, 1, 1), action, price, 10, 0.0)

    def test_no_pairs(self):
        assert BacktestEngine.win_rate([]) == 0.0
        assert BacktestEngine.win_rate([self._trade(Signal.BUY, 100)]) == 0.0

    def test_trailing_buy_excluded(self):
        trades = [
            self._trade(Signal.BUY, 100),
            self._trade(Signal.SELL, 110),
            self._trade(Signal.BUY, 105),
            self._trade(Signal.SELL, 100),
            self._trade(Signal.BUY, 90),
        ]
        assert BacktestEngine.win_rate(trades) == 0.5

    def test_breakeven_is_not_a_win(self):
        trades = [self._trade(Signal.BUY, 100), self._trade(Signal.SELL, 100)]
        assert BacktestEngine.win_rate(trades) == 0.0

    def test_formatted_win_rate(self):
        formatted = BacktestMetrics(win_rate=2 / 3, final_value=10250.5).formatted()

        assert formatted["win_rate"] == "66.67%"
        assert formatted["final_value"] == "10250.50"


class TestCompareStrategies:
    def test_all_strategies(self, engine, oscillating_series):
        comparison = engine.compare_strategies(oscillating_series)

        assert len(comparison) == 4
        assert list(comparison["sharpe_ratio"]) == sorted(
            comparison["sharpe_ratio"], reverse=True
        )
        assert "total_return" in comparison.columns

    def test_with_params(self, engine, oscillating_series):
        comparison = engine.compare_strategies(
            oscillating_series, ["buy_and_hold", ("momentum", {"maPeriod": 5})]
        )
        assert set(comparison["strategy"]) == {"Buy and Hold", "Momentum Strategy"}

    def test_unknown_strategy(self, engine, oscillating_series):
        with pytest.raises(ValidationError):
            engine.compare_strategies(oscillating_series, ["nope"])
