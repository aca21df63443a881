# quantcore/risk/__init__.py
"""
Risk Module

Composite risk scoring, portfolio risk analysis and regime detection.

Usage:
    from quantcore.risk import RiskScorer, PortfolioRiskAnalyzer

    result = RiskScorer().score(market_data, portfolio_profile)
    analysis = PortfolioRiskAnalyzer().analyze(holdings, value_history=nav)
"""

from quantcore.risk.correlation import (
    RiskDecomposition,
    average_sector_correlation,
    risk_contributions,
    risk_decomposition,
    sector_correlation,
    weighted_volatility_ratio,
)
from quantcore.risk.portfolio_analyzer import (
    DiversificationProfile,
    FundRecommendation,
    Insight,
    PortfolioAnalysis,
    PortfolioMetrics,
    PortfolioRiskAnalyzer,
)
from quantcore.risk.regime import (
    MarketRegime,
    RegimeAnalysis,
    RegimeDetector,
    VolatilityBucket,
)
from quantcore.risk.scorer import (
    Advisory,
    RiskComponents,
    RiskLevel,
    RiskScorer,
    RiskScoreResult,
)

__all__ = [
    "RiskScorer",
    "RiskScoreResult",
    "RiskComponents",
    "RiskLevel",
    "Advisory",
    "PortfolioRiskAnalyzer",
    "PortfolioAnalysis",
    "PortfolioMetrics",
    "DiversificationProfile",
    "Insight",
    "FundRecommendation",
    "RegimeDetector",
    "RegimeAnalysis",
    "MarketRegime",
    "VolatilityBucket",
    "average_sector_correlation",
    "risk_contributions",
    "risk_decomposition",
    "RiskDecomposition",
    "sector_correlation",
    "weighted_volatility_ratio",
]
