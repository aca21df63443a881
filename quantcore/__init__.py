# quantcore/__init__.py
"""
quantcore - Portfolio Risk and Strategy Analytics

This package provides pure computational tools for:
- Composite 0-100 risk scoring with advisories
- Portfolio risk analysis, diversification and fund recommendations
- Monte Carlo simulation (GBM with jumps, multi-factor model)
- Rule-based strategy backtesting
"""

__version__ = "1.0.0"
__license__ = "MIT"

from quantcore.backtesting import BacktestEngine, BacktestResult, get_strategy, list_strategies
from quantcore.config import get_settings, setup_logging
from quantcore.risk import (
    PortfolioRiskAnalyzer,
    RegimeDetector,
    RiskLevel,
    RiskScorer,
    RiskScoreResult,
)
from quantcore.simulation import FactorModel, MonteCarloSimulator, SimulationResult, make_rng
from quantcore.utils import ValidationError

# Package metadata
PACKAGE_INFO = {
    "name": "quantcore",
    "version": __version__,
    "description": "Portfolio risk scoring, Monte Carlo simulation and backtesting",
    "modules": [
        "config",
        "schemas",
        "risk",
        "simulation",
        "backtesting",
        "utils",
    ],
}


def get_version() -> str:
    """Return the current package version."""
    return __version__


def get_package_info() -> dict:
    """Return package metadata information."""
    return PACKAGE_INFO.copy()


__all__ = [
    "__version__",
    "__license__",
    "get_version",
    "get_package_info",
    "PACKAGE_INFO",
    "BacktestEngine",
    "BacktestResult",
    "get_strategy",
    "list_strategies",
    "MonteCarloSimulator",
    "SimulationResult",
    "FactorModel",
    "make_rng",
    "RiskScorer",
    "RiskScoreResult",
    "RiskLevel",
    "PortfolioRiskAnalyzer",
    "RegimeDetector",
    "ValidationError",
    "get_settings",
    "setup_logging",
]
