# quantcore/risk/regime.py
"""
Market regime detection from price history

Rule-based, no training required:
- Current regime (quiet / normal / volatile / crisis) from recent annualized
  volatility and average cross-asset correlation
- Volatility buckets (stable / normal / elevated / crisis) per bar
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import numpy as np
import pandas as pd
from loguru import logger
from scipy import stats

from quantcore.config.defaults import RegimeConfig
from quantcore.utils.calculations import annualize_volatility, simple_returns


class MarketRegime(str, Enum):
    QUIET = "QUIET"
    NORMAL = "NORMAL"
    VOLATILE = "VOLATILE"
    CRISIS = "CRISIS"


class VolatilityBucket(str, Enum):
    STABLE = "stable"
    NORMAL = "normal"
    ELEVATED = "elevated"
    CRISIS = "crisis"


@dataclass(frozen=True)
class RegimeAnalysis:
    """Current regime with the indicators it was derived from"""

    regime: MarketRegime
    volatility_bucket: VolatilityBucket
    probabilities: dict[str, float] = field(default_factory=dict)
    volatility: float = 0.0
    correlation: float = 0.0
    skewness: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "regime": self.regime.value,
            "volatility_bucket": self.volatility_bucket.value,
            "probabilities": dict(self.probabilities),
            "indicators": {
                "volatility": self.volatility,
                "correlation": self.correlation,
                "skewness": self.skewness,
            },
        }


class RegimeDetector:
    """
    Rule-based regime detector

    Usage:
        analysis = RegimeDetector().detect(closes, avg_correlation=0.6)
        labels = RegimeDetector().volatility_regimes(closes)
    """

    def __init__(self, config: RegimeConfig | None = None):
        self.config = config or RegimeConfig()

    def detect(
        self,
        prices: Sequence[float],
        avg_correlation: float | None = None,
    ) -> RegimeAnalysis:
        """
        Classify the current market regime

        Args:
            prices: Closing prices, oldest first
            avg_correlation: Average cross-asset correlation; configured default
                when omitted

        Returns:
            RegimeAnalysis
        """
        cfg = self.config
        returns = simple_returns(prices)

        volatility = self.recent_volatility(returns)
        correlation = cfg.default_correlation if avg_correlation is None else avg_correlation

        if volatility > cfg.volatile_threshold:
            regime = (
                MarketRegime.CRISIS
                if correlation > cfg.crisis_correlation
                else MarketRegime.VOLATILE
            )
        elif volatility < cfg.quiet_threshold:
            regime = MarketRegime.QUIET
        elif correlation > cfg.calm_crisis_correlation:
            regime = MarketRegime.CRISIS
        else:
            regime = MarketRegime.NORMAL

        analysis = RegimeAnalysis(
            regime=regime,
            volatility_bucket=self.classify_volatility(volatility),
            probabilities=self.regime_probabilities(regime),
            volatility=volatility,
            correlation=correlation,
            skewness=self.skewness(returns),
        )

        logger.debug(
            f"Regime {regime.value}: vol={volatility:.4f}, corr={correlation:.2f}, "
            f"skew={analysis.skewness:.2f}"
        )
        return analysis

    def recent_volatility(self, returns: np.ndarray) -> float:
        """Population std of the last ``window`` returns, annualized"""
        if len(returns) == 0:
            return self.config.default_volatility
        recent = returns[-self.config.window :]
        return annualize_volatility(recent, self.config.trading_days, ddof=0)

    def classify_volatility(self, volatility: float) -> VolatilityBucket:
        stable, normal, elevated = self.config.bucket_thresholds
        if volatility < stable:
            return VolatilityBucket.STABLE
        if volatility < normal:
            return VolatilityBucket.NORMAL
        if volatility < elevated:
            return VolatilityBucket.ELEVATED
        return VolatilityBucket.CRISIS

    def regime_probabilities(self, regime: MarketRegime) -> dict[str, float]:
        """Weights favoring the current regime, normalized to sum to 1"""
        weights = {
            name: current if name == regime.value else other
            for name, (current, other) in self.config.regime_weights.items()
        }
        total = sum(weights.values())
        return {name: weight / total for name, weight in weights.items()}

    @staticmethod
    def skewness(returns: np.ndarray) -> float:
        """Population skewness; 0 below three returns or without dispersion"""
        if len(returns) < 3 or np.std(returns) == 0:
            return 0.0
        value = float(stats.skew(returns, bias=True))
        return value if math.isfinite(value) else 0.0

    def volatility_regimes(self, prices: Sequence[float] | pd.Series) -> pd.Series:
        """
        Label every bar with its volatility bucket

        Bars before a full rolling window are labelled normal.

        Args:
            prices: Closing prices; a Series keeps its index

        Returns:
            Series of VolatilityBucket values, one per price
        """
        closes = prices if isinstance(prices, pd.Series) else pd.Series(prices, dtype=float)
        rolling = closes.pct_change().rolling(self.config.window).std(ddof=0) * math.sqrt(
            self.config.trading_days
        )

        labels = [
            VolatilityBucket.NORMAL if pd.isna(vol) else self.classify_volatility(vol)
            for vol in rolling
        ]

        logger.debug(f"Volatility regimes labelled for {len(labels)} bars")
        return pd.Series(labels, index=closes.index, name="volatility_regime")
