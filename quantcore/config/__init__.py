# quantcore/config/__init__.py
"""
Configuration module for quantcore

Provides centralized configuration management using Pydantic settings, the
explicit calculator configuration objects, and loguru logging setup.

Usage:
    from quantcore.config import get_settings, SimulationConfig

    settings = get_settings()
    sim_config = SimulationConfig.from_settings(settings)
"""

from quantcore.config.defaults import (
    FACTOR_PARAMETERS,
    SECTOR_CORRELATIONS,
    SECTOR_VOLATILITIES,
    SYSTEMATIC_RISK_SHARES,
    TRADING_DAYS_PER_YEAR,
    AnalyzerConfig,
    BacktestConfig,
    RegimeConfig,
    RiskScorerConfig,
    SimulationConfig,
    StressScenario,
)
from quantcore.config.logging_config import (
    get_logger,
    log_backtest_run,
    log_exceptions,
    log_simulation_run,
    setup_development_logging,
    setup_logging,
    setup_production_logging,
    timed_operation,
)
from quantcore.config.settings import Settings, get_settings

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    # Calculator configs
    "AnalyzerConfig",
    "BacktestConfig",
    "RegimeConfig",
    "RiskScorerConfig",
    "SimulationConfig",
    "StressScenario",
    "FACTOR_PARAMETERS",
    "SECTOR_CORRELATIONS",
    "SECTOR_VOLATILITIES",
    "SYSTEMATIC_RISK_SHARES",
    "TRADING_DAYS_PER_YEAR",
    # Logging
    "get_logger",
    "setup_logging",
    "setup_production_logging",
    "setup_development_logging",
    "timed_operation",
    "log_exceptions",
    "log_backtest_run",
    "log_simulation_run",
]
