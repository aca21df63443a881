# quantcore/risk/scorer.py
"""
Composite risk scoring

Combines five weighted component scores (market, credit, liquidity, sentiment,
systemic) into a 0-100 total, a discrete risk level and a fixed set of
advisories. The scorer is a pure function of its inputs: no randomness, no
cached state.
"""

from collections.abc import Mapping
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any

from loguru import logger

from quantcore.config.defaults import RiskScorerConfig
from quantcore.risk.correlation import average_sector_correlation
from quantcore.schemas.market import MarketData
from quantcore.schemas.portfolio import PortfolioProfile
from quantcore.schemas.sentiment import ExplainedSentiment, SentimentBreakdown, parse_sentiment
from quantcore.utils.calculations import (
    annualize_volatility,
    clamp,
    herfindahl_index,
    round_half_up,
    simple_returns,
)


class RiskLevel(str, Enum):
    """Discrete risk bands over the 0-100 total"""

    MINIMAL = "MINIMAL"
    LOW = "LOW"
    MODERATE = "MODERATE"
    ELEVATED = "ELEVATED"
    HIGH = "HIGH"
    EXTREME = "EXTREME"

    @property
    def lower_bound(self) -> int:
        return _LEVEL_BANDS[self][0]

    @property
    def label(self) -> str:
        return _LEVEL_BANDS[self][1]

    @classmethod
    def from_score(cls, score: float) -> "RiskLevel":
        """
        Classify a score into its half-open band.

        Bands are [0,20), [20,40), [40,60), [60,75), [75,90) and [90,100];
        anything at or above 90 (including 100) is EXTREME.
        """
        for level in reversed(list(cls)):
            if score >= level.lower_bound:
                return level
        return cls.MINIMAL


_LEVEL_BANDS: dict[RiskLevel, tuple[int, str]] = {
    RiskLevel.MINIMAL: (0, "Minimal Risk"),
    RiskLevel.LOW: (20, "Low Risk"),
    RiskLevel.MODERATE: (40, "Moderate Risk"),
    RiskLevel.ELEVATED: (60, "Elevated Risk"),
    RiskLevel.HIGH: (75, "High Risk"),
    RiskLevel.EXTREME: (90, "Extreme Risk"),
}


@dataclass(frozen=True)
class Advisory:
    """Fixed recommendation template"""

    type: str
    priority: str
    action: str
    detail: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


OPPORTUNITY = Advisory(
    type="opportunity",
    priority="medium",
    action="Consider increasing risk exposure",
    detail=(
        "Current risk levels suggest potential for higher returns through "
        "increased allocation to growth assets"
    ),
)
MAINTAIN = Advisory(
    type="maintain",
    priority="low",
    action="Maintain current risk profile",
    detail="Risk levels are appropriate for balanced growth and capital preservation",
)
CAUTION = Advisory(
    type="caution",
    priority="high",
    action="Review and potentially reduce risk exposure",
    detail="Consider rebalancing toward defensive assets and implementing stop-loss orders",
)
URGENT = Advisory(
    type="urgent",
    priority="critical",
    action="Immediate risk reduction required",
    detail=(
        "Implement defensive positioning, increase cash allocation, "
        "and review all high-risk positions"
    ),
)
HEDGING = Advisory(
    type="hedging",
    priority="high",
    action="Implement market hedging strategies",
    detail="Consider put options, VIX calls, or inverse ETFs to protect against market decline",
)
LIQUIDITY = Advisory(
    type="liquidity",
    priority="high",
    action="Improve portfolio liquidity",
    detail="Reduce positions in illiquid assets, maintain higher cash reserves",
)
CREDIT_QUALITY = Advisory(
    type="quality",
    priority="medium",
    action="Upgrade credit quality",
    detail="Shift from high-yield to investment-grade bonds, reduce emerging market exposure",
)
DIVERSIFICATION = Advisory(
    type="diversification",
    priority="high",
    action="Increase portfolio diversification",
    detail="Reduce correlation risk through alternative assets and geographic diversification",
)

_LEVEL_ADVISORIES: dict[RiskLevel, Advisory] = {
    RiskLevel.MINIMAL: OPPORTUNITY,
    RiskLevel.LOW: OPPORTUNITY,
    RiskLevel.MODERATE: MAINTAIN,
    RiskLevel.ELEVATED: CAUTION,
    RiskLevel.HIGH: URGENT,
    RiskLevel.EXTREME: URGENT,
}


@dataclass(frozen=True)
class RiskComponents:
    """Component scores, each in [0, 100]"""

    market: float
    credit: float
    liquidity: float
    sentiment: float
    systemic: float

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class RiskScoreResult:
    """Composite risk score"""

    total_risk: int
    components: RiskComponents
    level: RiskLevel
    recommendations: tuple[Advisory, ...]

    def component_status(self) -> dict[str, str]:
        """Label each component good (<30), warning (<60) or danger"""
        status = {}
        for name, value in self.components.to_dict().items():
            if value < 30:
                status[name] = "good"
            elif value < 60:
                status[name] = "warning"
            else:
                status[name] = "danger"
        return status

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_risk": self.total_risk,
            "components": self.components.to_dict(),
            "level": self.level.value,
            "level_label": self.level.label,
            "recommendations": [r.to_dict() for r in self.recommendations],
        }


Sentiment = SentimentBreakdown | ExplainedSentiment


class RiskScorer:
    """
    Professional risk scoring model

    Weights:
    - Market: 35%
    - Credit: 20%
    - Liquidity: 15%
    - Sentiment: 15%
    - Systemic: 15%
    """

    def __init__(self, config: RiskScorerConfig | None = None):
        self.config = config or RiskScorerConfig()

    def score(
        self,
        market_data: MarketData | Mapping[str, Any],
        portfolio: PortfolioProfile | Mapping[str, Any],
        news_analysis: Sentiment | Mapping[str, Any] | None = None,
    ) -> RiskScoreResult:
        """
        Calculate the composite risk score.

        Args:
            market_data: Market inputs; missing optional fields use configured defaults
            portfolio: Portfolio profile
            news_analysis: Optional sentiment breakdown (tagged on ``kind``)

        Returns:
            RiskScoreResult

        Raises:
            pydantic.ValidationError: If an input record is malformed
        """
        market_data = MarketData.model_validate(market_data)
        portfolio = PortfolioProfile.model_validate(portfolio)
        sentiment = parse_sentiment(news_analysis) if news_analysis is not None else None

        components = RiskComponents(
            market=self.market_risk(market_data, portfolio),
            credit=self.credit_risk(portfolio),
            liquidity=self.liquidity_risk(market_data, portfolio),
            sentiment=self.sentiment_risk(sentiment),
            systemic=self.systemic_risk(market_data, portfolio),
        )

        weighted = sum(
            getattr(components, name) * weight
            for name, weight in self.config.component_weights.items()
        )
        total_risk = int(clamp(round_half_up(weighted)))
        # Banded on the unrounded sum, so 89.6 reports 90 but stays HIGH
        level = RiskLevel.from_score(clamp(weighted))

        logger.debug(
            f"Risk score {total_risk} ({level.value}): "
            + ", ".join(f"{k}={v:.1f}" for k, v in components.to_dict().items())
        )

        return RiskScoreResult(
            total_risk=total_risk,
            components=components,
            level=level,
            recommendations=self.recommendations(level, components),
        )

    def market_risk(self, market_data: MarketData, portfolio: PortfolioProfile) -> float:
        """Volatility bucket + beta distance bucket + worst stress loss x 150"""
        volatility = self._volatility(market_data)
        if volatility < 0.10:
            vol_score = 10
        elif volatility < 0.20:
            vol_score = 20
        elif volatility < 0.30:
            vol_score = 30
        else:
            vol_score = 40

        beta = portfolio.beta if portfolio.beta is not None else self.config.default_beta
        beta_distance = abs(beta - 1.0)
        if beta_distance < 0.3:
            beta_score = 10
        elif beta_distance < 0.6:
            beta_score = 20
        else:
            beta_score = 30

        stress_score = self.max_stress_loss(market_data) * self.config.stress_multiplier

        return clamp(vol_score + beta_score + stress_score)

    def max_stress_loss(self, market_data: MarketData) -> float:
        """Largest loss magnitude over the configured stress scenarios"""
        if market_data.max_stress_loss is not None:
            return market_data.max_stress_loss
        if not self.config.stress_scenarios:
            return 0.0
        return max(abs(scenario.impact) for scenario in self.config.stress_scenarios)

    def credit_risk(self, portfolio: PortfolioProfile) -> float:
        score = 30.0
        if portfolio.has_high_yield:
            score += 20
        if portfolio.has_emerging_markets:
            score += 15
        if portfolio.has_crypto:
            score += 25

        # A portfolio without weights is treated as a single position
        hhi = herfindahl_index(portfolio.weights) if portfolio.weights else 1.0
        score -= (1 - hhi) * 10

        return clamp(score)

    def liquidity_risk(self, market_data: MarketData, portfolio: PortfolioProfile) -> float:
        score = 20.0

        avg_volume = market_data.avg_volume
        if avg_volume is None or avg_volume <= 0:
            avg_volume = self.config.default_avg_volume

        volume_ratio = portfolio.size / avg_volume
        if volume_ratio > 0.1:
            score += 40
        elif volume_ratio > 0.05:
            score += 30
        elif volume_ratio > 0.01:
            score += 20
        else:
            score += 10

        spread = (
            market_data.bid_ask_spread
            if market_data.bid_ask_spread is not None
            else self.config.default_bid_ask_spread
        )
        score += min(40.0, spread * 10000)

        return clamp(score)

    def sentiment_risk(self, sentiment: Sentiment | None) -> float:
        if sentiment is None:
            return self.config.neutral_sentiment_risk

        volatility = (
            sentiment.volatility
            if sentiment.volatility is not None
            else self.config.default_sentiment_volatility
        )

        score = sentiment.bearish_pct + volatility * 20
        if sentiment.bearish_pct > 70 or sentiment.bullish_pct > 70:
            score += 15

        return clamp(score)

    def systemic_risk(self, market_data: MarketData, portfolio: PortfolioProfile) -> float:
        score = 30.0

        avg_correlation = self.average_correlation(market_data, portfolio)
        if avg_correlation > 0.7:
            score += 40
        elif avg_correlation > 0.5:
            score += 25
        elif avg_correlation > 0.3:
            score += 15

        contagion = (
            market_data.contagion_indicator
            if market_data.contagion_indicator is not None
            else self.config.default_contagion
        )
        score += contagion * 30

        return clamp(score)

    def average_correlation(self, market_data: MarketData, portfolio: PortfolioProfile) -> float:
        """Supplied correlation, else sector estimate, else configured default"""
        if market_data.avg_correlation is not None:
            return market_data.avg_correlation

        estimate = average_sector_correlation(portfolio.sectors, self.config.sector_correlations)
        if estimate is not None:
            return estimate

        return self.config.default_avg_correlation

    @staticmethod
    def recommendations(level: RiskLevel, components: RiskComponents) -> tuple[Advisory, ...]:
        """Overall advisory for the level followed by component advisories"""
        advisories = [_LEVEL_ADVISORIES[level]]

        if components.market > 70:
            advisories.append(HEDGING)
        if components.liquidity > 60:
            advisories.append(LIQUIDITY)
        if components.credit > 65:
            advisories.append(CREDIT_QUALITY)
        if components.systemic > 70:
            advisories.append(DIVERSIFICATION)

        return tuple(advisories)

    def _volatility(self, market_data: MarketData) -> float:
        if market_data.volatility is not None:
            return market_data.volatility
        return annualize_volatility(simple_returns(market_data.prices))
