# quantcore/schemas/market.py
"""
Market data records: daily bars, price series, and the market inputs consumed by
the risk calculators
"""

from collections.abc import Sequence
from datetime import date, timedelta

import numpy as np
import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, model_validator

from quantcore.utils.calculations import simple_returns

OHLCV_COLUMNS = ["open", "high", "low", "close", "volume"]


class PriceBar(BaseModel):
    """Daily OHLCV bar"""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    date: date
    open: float = Field(..., gt=0)
    high: float = Field(..., gt=0)
    low: float = Field(..., gt=0)
    close: float = Field(..., gt=0)
    volume: float = Field(0.0, ge=0)


class PriceSeries(BaseModel):
    """
    Ordered sequence of daily bars

    Dates must be strictly increasing; gaps (weekends, holidays) are allowed.
    Returns are derived on demand, never stored.
    """

    model_config = ConfigDict(frozen=True)

    symbol: str | None = None
    bars: list[PriceBar] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_dates_increasing(self):
        for previous, current in zip(self.bars, self.bars[1:]):
            if current.date <= previous.date:
                raise ValueError(
                    "Bars must be strictly increasing by date: "
                    f"{current.date} follows {previous.date}"
                )
        return self

    def __len__(self) -> int:
        return len(self.bars)

    @property
    def is_empty(self) -> bool:
        return len(self.bars) == 0

    def dates(self) -> list[date]:
        return [bar.date for bar in self.bars]

    def closes(self) -> np.ndarray:
        return np.array([bar.close for bar in self.bars], dtype=float)

    def returns(self) -> np.ndarray:
        """return[i] = (close[i] - close[i-1]) / close[i-1]"""
        return simple_returns(self.closes())

    def to_frame(self) -> pd.DataFrame:
        """OHLCV DataFrame indexed by date"""
        frame = pd.DataFrame(
            [bar.model_dump(exclude={"date"}) for bar in self.bars],
            index=pd.DatetimeIndex([pd.Timestamp(bar.date) for bar in self.bars], name="date"),
            columns=OHLCV_COLUMNS,
        )
        return frame.astype(float)

    @classmethod
    def from_frame(cls, frame: pd.DataFrame, symbol: str | None = None) -> "PriceSeries":
        """
        Build from a DataFrame with a date index (or "date" column) and OHLCV columns.

        Missing open/high/low fall back to close; missing volume to 0.
        """
        frame = frame.copy()
        frame.columns = [str(c).lower() for c in frame.columns]

        if "date" in frame.columns:
            frame = frame.set_index("date")

        if "close" not in frame.columns:
            raise ValueError("Price frame requires a 'close' column")

        for column in ("open", "high", "low"):
            if column not in frame.columns:
                frame[column] = frame["close"]
        if "volume" not in frame.columns:
            frame["volume"] = 0.0

        bars = [
            PriceBar(
                date=pd.Timestamp(index).date(),
                open=row["open"],
                high=row["high"],
                low=row["low"],
                close=row["close"],
                volume=row["volume"],
            )
            for index, row in frame.iterrows()
        ]
        return cls(symbol=symbol, bars=bars)

    @classmethod
    def from_closes(
        cls,
        closes: Sequence[float],
        start: date | None = None,
        symbol: str | None = None,
    ) -> "PriceSeries":
        """Build a series of consecutive calendar days where open/high/low equal close"""
        start = start or date(2024, 1, 1)
        bars = [
            PriceBar(
                date=start + timedelta(days=i),
                open=close,
                high=close,
                low=close,
                close=close,
            )
            for i, close in enumerate(closes)
        ]
        return cls(symbol=symbol, bars=bars)


class MarketData(BaseModel):
    """
    Market inputs for the composite risk score

    Every field is optional; the scorer substitutes configured defaults for
    anything missing.
    """

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    prices: list[float] = Field(default_factory=list)
    volatility: float | None = Field(None, ge=0)
    avg_volume: float | None = None
    bid_ask_spread: float | None = Field(None, ge=0)
    avg_correlation: float | None = Field(None, ge=-1, le=1)
    contagion_indicator: float | None = Field(None, ge=0)
    max_stress_loss: float | None = Field(None, ge=0)

    @classmethod
    def from_price_series(cls, series: PriceSeries, **kwargs) -> "MarketData":
        closes = series.closes()
        volumes = [bar.volume for bar in series.bars if bar.volume > 0]
        if volumes and "avg_volume" not in kwargs:
            kwargs["avg_volume"] = float(np.mean(volumes))
        return cls(prices=closes.tolist(), **kwargs)


class MarketContext(BaseModel):
    """Optional market context for the portfolio analyzer"""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    market_returns: list[float] = Field(default_factory=list)
    market_volatility: float | None = Field(None, gt=0)
