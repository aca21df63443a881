# quantcore/risk/portfolio_analyzer.py
"""
Portfolio risk analysis

Computes volatility, drawdown, VaR, Sharpe/Treynor ratios and a diversification
breakdown from a list of holdings, then evaluates strengths, weaknesses and fund
category recommendations with fixed threshold rules.
"""

import math
from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass, field
from typing import Any

import numpy as np
from loguru import logger
from scipy import stats

from quantcore.config.defaults import AnalyzerConfig
from quantcore.risk.correlation import (
    RiskDecomposition,
    average_sector_correlation,
    risk_contributions,
    risk_decomposition,
    weighted_volatility_ratio,
)
from quantcore.schemas.holdings import AssetType, Holding, active_holdings, value_weights
from quantcore.schemas.market import MarketContext
from quantcore.utils.calculations import (
    ArrayLike,
    annualize_volatility,
    beta as covariance_beta,
    clamp,
    herfindahl_index,
    max_drawdown,
    simple_returns,
)

Z_SCORES = {0.90: 1.282, 0.95: 1.645, 0.99: 2.326}


def z_score(confidence_level: float) -> float:
    """One-sided normal quantile for a confidence level"""
    key = round(confidence_level, 4)
    if key in Z_SCORES:
        return Z_SCORES[key]
    return float(stats.norm.ppf(confidence_level))


@dataclass(frozen=True)
class PortfolioMetrics:
    total_value: float = 0.0
    volatility: float = 0.0
    max_drawdown: float = 0.0
    drawdown_available: bool = False
    value_at_risk: float = 0.0
    sharpe_ratio: float = 0.0
    expected_return: float = 0.0
    beta: float = 0.0
    treynor_ratio: float = 0.0


@dataclass(frozen=True)
class DiversificationProfile:
    """Concentration breakdown by asset type, sector and region"""

    asset_types: dict[str, float] = field(default_factory=dict)
    sectors: dict[str, float] = field(default_factory=dict)
    regions: dict[str, float] = field(default_factory=dict)
    herfindahl_index: float = 0.0
    effective_n: float = 0.0
    diversification_ratio: float = 0.0
    is_well_diversified: bool = False


@dataclass(frozen=True)
class Insight:
    """Portfolio strength or weakness"""

    category: str
    description: str
    impact: str


@dataclass(frozen=True)
class FundRecommendation:
    category: str
    rationale: str
    benefit: str
    priority: str
    allocation_suggestion: str


@dataclass(frozen=True)
class PortfolioAnalysis:
    """Result of PortfolioRiskAnalyzer.analyze"""

    metrics: PortfolioMetrics
    diversification: DiversificationProfile
    strengths: tuple[Insight, ...] = ()
    weaknesses: tuple[Insight, ...] = ()
    recommendations: tuple[FundRecommendation, ...] = ()
    risk_contributions: dict[str, float] = field(default_factory=dict)
    average_correlation: float | None = None
    volatility_ratio: float = 0.0
    decomposition: RiskDecomposition | None = None

    @classmethod
    def empty(cls) -> "PortfolioAnalysis":
        """Zeroed analysis for a portfolio without active positions"""
        return cls(metrics=PortfolioMetrics(), diversification=DiversificationProfile())

    @property
    def is_empty(self) -> bool:
        return self.metrics.total_value == 0 and not self.diversification.asset_types

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# Fund category templates
BROAD_MARKET = FundRecommendation(
    category="Broad Market Index Funds",
    rationale=(
        "Your portfolio is highly concentrated. Adding broad market index funds "
        "(S&P 500, Total Market) would instantly improve diversification and reduce "
        "single-stock risk."
    ),
    benefit="Reduces concentration risk, lowers volatility, provides market returns",
    priority="high",
    allocation_suggestion="20-30% of portfolio",
)
GLOBAL_EQUITY = FundRecommendation(
    category="Global Equity Funds",
    rationale=(
        "Portfolio lacks international diversification. Global or international equity "
        "funds provide exposure to overseas markets, reducing home country bias."
    ),
    benefit="Geographic diversification, access to global growth, currency diversification",
    priority="high",
    allocation_suggestion="15-25% of portfolio",
)
TIPS = FundRecommendation(
    category="Inflation-Protected Bond Funds (TIPS)",
    rationale=(
        "Portfolio lacks inflation protection. TIPS funds preserve purchasing power when "
        "inflation rises, providing a hedge against currency debasement."
    ),
    benefit="Inflation protection, portfolio stability, real return preservation",
    priority="medium",
    allocation_suggestion="5-10% of portfolio",
)
COMMODITIES = FundRecommendation(
    category="Commodity Funds",
    rationale=(
        "Commodities provide inflation hedge and diversification. They often move "
        "independently of stocks/bonds, reducing overall portfolio volatility."
    ),
    benefit="Inflation hedge, crisis protection, portfolio diversification",
    priority="medium",
    allocation_suggestion="5-10% of portfolio",
)
REITS = FundRecommendation(
    category="Real Estate Funds (REITs)",
    rationale=(
        "REITs add real estate exposure, providing income through dividends and "
        "diversification through low correlation with traditional assets."
    ),
    benefit="Income generation, inflation hedge, portfolio diversification",
    priority="medium",
    allocation_suggestion="5-15% of portfolio",
)
VALUE_FUNDS = FundRecommendation(
    category="Value Stock Funds",
    rationale=(
        "Portfolio is growth-heavy. Adding value funds provides balance, potentially "
        "reducing volatility and adding dividend income."
    ),
    benefit="Style diversification, dividend income, reduced volatility",
    priority="low",
    allocation_suggestion="10-20% of portfolio",
)
GROWTH_FUNDS = FundRecommendation(
    category="Growth Stock Funds",
    rationale=(
        "Portfolio is value-heavy. Adding growth funds increases upside potential and "
        "exposure to innovation sectors."
    ),
    benefit="Growth potential, technology exposure, long-term appreciation",
    priority="low",
    allocation_suggestion="10-20% of portfolio",
)
INVESTMENT_GRADE = FundRecommendation(
    category="Investment Grade Bond Funds",
    rationale=(
        "Portfolio lacks defensive assets. Quality bonds provide stability, income, and "
        "protection during market downturns."
    ),
    benefit="Reduces volatility, provides income, portfolio ballast",
    priority="high",
    allocation_suggestion="15-25% of portfolio",
)


class PortfolioRiskAnalyzer:
    """
    Portfolio risk analyzer

    Metrics:
    - Annualized volatility of per-holding returns
    - Max drawdown over a supplied value history
    - 10-day VaR (parametric below 10 observations, historical otherwise)
    - Sharpe and Treynor ratios
    - Herfindahl concentration and effective number of holdings
    """

    def __init__(self, config: AnalyzerConfig | None = None):
        self.config = config or AnalyzerConfig()

    def analyze(
        self,
        holdings: Iterable[Holding | Mapping[str, Any]],
        market_context: MarketContext | Mapping[str, Any] | None = None,
        value_history: ArrayLike | None = None,
    ) -> PortfolioAnalysis:
        """
        Perform comprehensive portfolio analysis.

        Args:
            holdings: Portfolio positions; zero-quantity positions are ignored
            market_context: Optional market returns/volatility for beta
            value_history: Optional historical portfolio values (NAV) for drawdown
                and covariance beta

        Returns:
            PortfolioAnalysis (zeroed when there are no active positions)

        Raises:
            pydantic.ValidationError: If a holding or the context is malformed
        """
        positions = active_holdings(holdings)
        if market_context is not None:
            market_context = MarketContext.model_validate(market_context)

        if not positions:
            logger.debug("No active holdings, returning empty analysis")
            return PortfolioAnalysis.empty()

        weights = value_weights(positions)
        total_value = sum(h.market_value for h in positions)
        returns = np.array([h.holding_return for h in positions], dtype=float)

        volatility = self.volatility(returns)
        drawdown, drawdown_available = self.drawdown(value_history)
        value_at_risk = self.value_at_risk(total_value, returns)
        sharpe_ratio = self.sharpe_ratio(returns, volatility)
        portfolio_beta = self.beta(returns, volatility, market_context, value_history)

        metrics = PortfolioMetrics(
            total_value=total_value,
            volatility=volatility,
            max_drawdown=drawdown,
            drawdown_available=drawdown_available,
            value_at_risk=value_at_risk,
            sharpe_ratio=sharpe_ratio,
            expected_return=self.expected_return(returns),
            beta=portfolio_beta,
            treynor_ratio=self.treynor_ratio(returns, portfolio_beta),
        )
        diversification = self.diversification(positions, weights)
        strengths, weaknesses = self.evaluate(positions, weights, diversification, metrics)

        logger.info(
            f"Analyzed {len(positions)} holdings: value={total_value:,.2f}, "
            f"vol={volatility:.4f}, sharpe={sharpe_ratio:.2f}, "
            f"HHI={diversification.herfindahl_index:.3f}"
        )

        return PortfolioAnalysis(
            metrics=metrics,
            diversification=diversification,
            strengths=strengths,
            weaknesses=weaknesses,
            recommendations=self.recommend_funds(positions, weights, diversification),
            risk_contributions=risk_contributions(positions, volatility),
            average_correlation=average_sector_correlation(
                [h.sector for h in positions if h.sector], self.config.sector_correlations
            ),
            volatility_ratio=weighted_volatility_ratio(
                positions,
                volatility,
                self.config.sector_volatilities,
                self.config.default_sector_volatility,
            ),
            decomposition=risk_decomposition(
                positions,
                volatility,
                self.config.sector_correlations,
                self.config.sector_volatilities,
                self.config.default_sector_volatility,
            ),
        )

    # ------------------------------------------------------------------
    # Risk metrics
    # ------------------------------------------------------------------

    def volatility(self, returns: np.ndarray) -> float:
        """Sample std of returns annualized by sqrt(trading days); 0 below two returns"""
        return annualize_volatility(returns, self.config.trading_days, ddof=1)

    def drawdown(self, value_history: ArrayLike | None) -> tuple[float, bool]:
        """
        Max drawdown over real portfolio history.

        Returns:
            (drawdown, available); (0.0, False) when no usable history is supplied
        """
        if value_history is None or len(value_history) < 2:
            logger.warning("No portfolio value history supplied, max drawdown reported as 0.0")
            return 0.0, False
        return max_drawdown(value_history), True

    def value_at_risk(self, total_value: float, returns: np.ndarray) -> float:
        """
        10-day Value at Risk as a positive amount.

        Parametric below the minimum observation count:
            |V * (mean - z * vol / sqrt(252)) * sqrt(10)|
        Historical otherwise:
            |V * sorted_returns[floor((1 - cl) * n)] * sqrt(10)|
        """
        cfg = self.config
        horizon = math.sqrt(cfg.var_horizon_days)

        if len(returns) < cfg.min_historical_observations:
            mean_return = float(np.mean(returns)) if len(returns) > 0 else 0.0
            volatility = self.volatility(returns)
            z = z_score(cfg.confidence_level)
            daily_var = total_value * (
                mean_return - z * volatility / math.sqrt(cfg.trading_days)
            )
            return abs(daily_var * horizon)

        sorted_returns = np.sort(returns)
        index = int(math.floor((1 - cfg.confidence_level) * len(sorted_returns)))
        index = min(index, len(sorted_returns) - 1)
        return abs(total_value * float(sorted_returns[index]) * horizon)

    def expected_return(self, returns: np.ndarray) -> float:
        """Annualized mean return"""
        if len(returns) == 0:
            return 0.0
        return float(np.mean(returns)) * self.config.trading_days

    def sharpe_ratio(self, returns: np.ndarray, volatility: float) -> float:
        if len(returns) == 0 or volatility == 0:
            return 0.0
        return (self.expected_return(returns) - self.config.risk_free_rate) / volatility

    def beta(
        self,
        returns: np.ndarray,
        volatility: float,
        market_context: MarketContext | None = None,
        value_history: ArrayLike | None = None,
    ) -> float:
        """
        Portfolio beta.

        Covariance beta of the value history returns against market returns when
        both have at least two aligned points; otherwise the volatility ratio to
        the market, clamped to [min_beta, max_beta].
        """
        if len(returns) == 0:
            return 1.0

        cfg = self.config
        market_volatility = cfg.market_volatility
        if market_context is not None and market_context.market_volatility:
            market_volatility = market_context.market_volatility

        ratio_beta = clamp(volatility / market_volatility, cfg.min_beta, cfg.max_beta)

        if market_context is not None and value_history is not None:
            portfolio_returns = simple_returns(value_history)
            if len(portfolio_returns) >= 2 and len(market_context.market_returns) >= 2:
                return covariance_beta(
                    portfolio_returns, market_context.market_returns, default=ratio_beta
                )

        return ratio_beta

    def treynor_ratio(self, returns: np.ndarray, portfolio_beta: float) -> float:
        if len(returns) == 0 or portfolio_beta == 0:
            return 0.0
        return (self.expected_return(returns) - self.config.risk_free_rate) / portfolio_beta

    # ------------------------------------------------------------------
    # Diversification
    # ------------------------------------------------------------------

    def diversification(
        self, positions: list[Holding], weights: list[float]
    ) -> DiversificationProfile:
        asset_types: dict[str, float] = {}
        sectors: dict[str, float] = {}
        regions: dict[str, float] = {}

        for holding, weight in zip(positions, weights):
            asset_type = holding.asset_type.value
            asset_types[asset_type] = asset_types.get(asset_type, 0.0) + weight

            sector = holding.sector or "unknown"
            sectors[sector] = sectors.get(sector, 0.0) + weight

            region = self._region(holding)
            regions[region] = regions.get(region, 0.0) + weight

        hhi = herfindahl_index(weights)
        effective_n = 1 / hhi if hhi > 0 else 0.0

        return DiversificationProfile(
            asset_types=asset_types,
            sectors=sectors,
            regions=regions,
            herfindahl_index=hhi,
            effective_n=effective_n,
            diversification_ratio=effective_n / len(positions),
            is_well_diversified=(
                effective_n > self.config.well_diversified_min_effective_n
                and hhi < self.config.well_diversified_max_hhi
            ),
        )

    # ------------------------------------------------------------------
    # Rule evaluation
    # ------------------------------------------------------------------

    def evaluate(
        self,
        positions: list[Holding],
        weights: list[float],
        diversification: DiversificationProfile,
        metrics: PortfolioMetrics,
    ) -> tuple[tuple[Insight, ...], tuple[Insight, ...]]:
        """Strengths and weaknesses from fixed threshold rules"""
        strengths: list[Insight] = []
        weaknesses: list[Insight] = []

        if diversification.is_well_diversified:
            strengths.append(
                Insight(
                    "Diversification",
                    f"Portfolio is well-diversified across {round(diversification.effective_n)} "
                    "effective holdings, reducing concentration risk and volatility. No single "
                    "position dominates, protecting against individual asset downturns.",
                    "high",
                )
            )
        else:
            weaknesses.append(
                Insight(
                    "Concentration Risk",
                    f"Portfolio is concentrated in {round(diversification.effective_n)} effective "
                    f"positions. High concentration (HHI: {diversification.herfindahl_index:.3f}) "
                    "means greater exposure to individual asset risks and higher volatility.",
                    "high",
                )
            )

        if metrics.sharpe_ratio > 1:
            strengths.append(
                Insight(
                    "Risk-Adjusted Returns",
                    f"Strong Sharpe ratio of {metrics.sharpe_ratio:.2f} indicates excellent "
                    "risk-adjusted performance. Portfolio is delivering substantial returns "
                    "relative to the risk taken.",
                    "high",
                )
            )
        elif metrics.sharpe_ratio < 0.5:
            weaknesses.append(
                Insight(
                    "Poor Risk-Adjusted Returns",
                    f"Low Sharpe ratio of {metrics.sharpe_ratio:.2f} suggests returns don't "
                    "adequately compensate for risk. Consider rebalancing to improve "
                    "risk-reward profile.",
                    "medium",
                )
            )

        if metrics.volatility < 0.15:
            strengths.append(
                Insight(
                    "Low Volatility",
                    f"Portfolio volatility of {metrics.volatility * 100:.1f}% is relatively low, "
                    "providing stable returns with limited fluctuations. Good for risk-averse "
                    "investors.",
                    "medium",
                )
            )
        elif metrics.volatility > 0.30:
            weaknesses.append(
                Insight(
                    "High Volatility",
                    f"Portfolio volatility of {metrics.volatility * 100:.1f}% is high, meaning "
                    "returns fluctuate widely. This increases risk of large losses during "
                    "market downturns.",
                    "high",
                )
            )

        if metrics.max_drawdown > 0.20:
            weaknesses.append(
                Insight(
                    "Large Drawdown Risk",
                    f"Maximum drawdown of {metrics.max_drawdown * 100:.1f}% indicates significant "
                    "downside risk. Portfolio has experienced or could face deep losses during "
                    "market stress.",
                    "high",
                )
            )

        stock_weight = self._asset_type_weight(positions, weights, AssetType.STOCK)
        bond_weight = self._asset_type_weight(positions, weights, AssetType.BOND)

        if stock_weight > 0.8:
            weaknesses.append(
                Insight(
                    "Equity Concentration",
                    f"Portfolio is {stock_weight * 100:.0f}% stocks, lacking defensive assets. "
                    "This aggressive allocation increases volatility and drawdown risk during "
                    "market corrections.",
                    "medium",
                )
            )
        elif bond_weight > 0.6:
            weaknesses.append(
                Insight(
                    "Conservative Bias",
                    f"Portfolio is {bond_weight * 100:.0f}% bonds, limiting growth potential. "
                    "While stable, this allocation may not meet long-term return objectives.",
                    "medium",
                )
            )
        elif stock_weight > 0.3 and bond_weight > 0.2:
            strengths.append(
                Insight(
                    "Balanced Allocation",
                    f"Portfolio has balanced mix of growth ({stock_weight * 100:.0f}% stocks) "
                    f"and defensive assets ({bond_weight * 100:.0f}% bonds), providing both "
                    "upside potential and downside protection.",
                    "medium",
                )
            )

        domestic_weight = self._domestic_weight(positions, weights)
        if domestic_weight > 0.9:
            weaknesses.append(
                Insight(
                    "Home Bias",
                    f"Portfolio is {domestic_weight * 100:.0f}% concentrated in domestic markets, "
                    "missing international diversification. This exposes portfolio to "
                    "country-specific risks.",
                    "medium",
                )
            )

        if not self._has_real_assets(positions):
            weaknesses.append(
                Insight(
                    "Missing Real Assets",
                    "Portfolio lacks commodities or real estate exposure, missing inflation "
                    "protection and additional diversification benefits these asset classes "
                    "provide.",
                    "low",
                )
            )

        return tuple(strengths), tuple(weaknesses)

    def recommend_funds(
        self,
        positions: list[Holding],
        weights: list[float],
        diversification: DiversificationProfile,
    ) -> tuple[FundRecommendation, ...]:
        """Fund categories that fill gaps in the portfolio"""
        recommendations: list[FundRecommendation] = []

        if diversification.herfindahl_index > self.config.well_diversified_max_hhi:
            recommendations.append(BROAD_MARKET)

        if 1 - self._domestic_weight(positions, weights) < 0.2:
            recommendations.append(GLOBAL_EQUITY)

        has_commodity = any(h.asset_type == AssetType.COMMODITY for h in positions)
        has_inflation_protection = has_commodity or any(
            h.has_tag(self.config.inflation_protected_sectors) for h in positions
        )
        if not has_inflation_protection:
            recommendations.extend([TIPS, COMMODITIES])

        if not any(h.has_tag(self.config.real_estate_sectors) for h in positions):
            recommendations.append(REITS)

        growth_weight = self._style_weight(positions, weights, "growth")
        value_weight = self._style_weight(positions, weights, "value")
        if growth_weight > 0.7:
            recommendations.append(VALUE_FUNDS)
        elif value_weight > 0.7:
            recommendations.append(GROWTH_FUNDS)

        defensive_weight = self._asset_type_weight(
            positions, weights, AssetType.BOND
        ) + self._asset_type_weight(positions, weights, AssetType.CASH)
        if defensive_weight < 0.2:
            recommendations.append(INVESTMENT_GRADE)

        return tuple(recommendations)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _region(self, holding: Holding) -> str:
        return (holding.region or self.config.domestic_region).lower()

    def _domestic_weight(self, positions: list[Holding], weights: list[float]) -> float:
        domestic = self.config.domestic_region.lower()
        return sum(w for h, w in zip(positions, weights) if self._region(h) == domestic)

    def _style_weight(self, positions: list[Holding], weights: list[float], style: str) -> float:
        return sum(
            w
            for h, w in zip(positions, weights)
            if (h.style or self.config.default_style).lower() == style
        )

    @staticmethod
    def _asset_type_weight(
        positions: list[Holding], weights: list[float], asset_type: AssetType
    ) -> float:
        return sum(w for h, w in zip(positions, weights) if h.asset_type == asset_type)

    def _has_real_assets(self, positions: list[Holding]) -> bool:
        return any(
            h.asset_type == AssetType.COMMODITY or h.has_tag(self.config.real_estate_sectors)
            for h in positions
        )
