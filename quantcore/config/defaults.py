# quantcore/config/defaults.py
"""
Calculator configuration objects

Every fallback constant used by the calculators lives here so that defaults are
visible and overridable. Each calculator takes one of these explicitly; none of
them reads global or environment state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from quantcore.config.settings import Settings

TRADING_DAYS_PER_YEAR = 252

# Pairwise sector correlation estimates used when no return history is available
SECTOR_CORRELATIONS: dict[str, dict[str, float]] = {
    "Technology": {
        "Technology": 0.8,
        "Finance": 0.5,
        "Healthcare": 0.4,
        "Energy": 0.3,
        "Consumer": 0.5,
        "Industrial": 0.4,
    },
    "Finance": {
        "Technology": 0.5,
        "Finance": 0.85,
        "Healthcare": 0.3,
        "Energy": 0.4,
        "Consumer": 0.5,
        "Industrial": 0.6,
    },
    "Healthcare": {
        "Technology": 0.4,
        "Finance": 0.3,
        "Healthcare": 0.75,
        "Energy": 0.2,
        "Consumer": 0.4,
        "Industrial": 0.3,
    },
    "Energy": {
        "Technology": 0.3,
        "Finance": 0.4,
        "Healthcare": 0.2,
        "Energy": 0.9,
        "Consumer": 0.3,
        "Industrial": 0.5,
    },
    "Consumer": {
        "Technology": 0.5,
        "Finance": 0.5,
        "Healthcare": 0.4,
        "Energy": 0.3,
        "Consumer": 0.7,
        "Industrial": 0.4,
    },
    "Industrial": {
        "Technology": 0.4,
        "Finance": 0.6,
        "Healthcare": 0.3,
        "Energy": 0.5,
        "Consumer": 0.4,
        "Industrial": 0.8,
    },
}

SECTOR_VOLATILITIES: dict[str, float] = {
    "Technology": 0.25,
    "Finance": 0.22,
    "Healthcare": 0.18,
    "Energy": 0.28,
    "Consumer": 0.16,
    "Industrial": 0.20,
}

# Annualized (mean, volatility) per named factor
FACTOR_PARAMETERS: dict[str, tuple[float, float]] = {
    "Market": (0.08, 0.16),
    "Size": (0.02, 0.08),
    "Value": (0.03, 0.06),
    "Momentum": (0.04, 0.10),
    "Quality": (0.03, 0.05),
    "Volatility": (-0.02, 0.07),
}

# Share of systematic risk attributed to each risk source
SYSTEMATIC_RISK_SHARES: dict[str, float] = {
    "Market Risk": 0.45,
    "Sector Risk": 0.20,
    "Style Risk": 0.15,
    "Currency Risk": 0.12,
    "Liquidity Risk": 0.08,
}


@dataclass(frozen=True)
class StressScenario:
    """Instantaneous portfolio shock"""

    name: str
    impact: float


DEFAULT_STRESS_SCENARIOS: tuple[StressScenario, ...] = (
    StressScenario("Market Crash", -0.20),
    StressScenario("Interest Rate Shock", -0.10),
    StressScenario("Currency Crisis", -0.15),
)


@dataclass(frozen=True)
class RiskScorerConfig:
    """Weights, scenarios and fallbacks for the composite risk score"""

    market_weight: float = 0.35
    credit_weight: float = 0.20
    liquidity_weight: float = 0.15
    sentiment_weight: float = 0.15
    systemic_weight: float = 0.15

    stress_scenarios: tuple[StressScenario, ...] = DEFAULT_STRESS_SCENARIOS
    stress_multiplier: float = 150.0

    default_beta: float = 1.0
    default_avg_volume: float = 1_000_000.0
    default_bid_ask_spread: float = 0.001
    default_sentiment_volatility: float = 0.3
    default_avg_correlation: float = 0.4
    default_contagion: float = 0.3
    neutral_sentiment_risk: float = 50.0

    sector_correlations: dict[str, dict[str, float]] = field(
        default_factory=lambda: SECTOR_CORRELATIONS
    )

    @property
    def component_weights(self) -> dict[str, float]:
        return {
            "market": self.market_weight,
            "credit": self.credit_weight,
            "liquidity": self.liquidity_weight,
            "sentiment": self.sentiment_weight,
            "systemic": self.systemic_weight,
        }


@dataclass(frozen=True)
class AnalyzerConfig:
    """Constants for the portfolio risk analyzer"""

    risk_free_rate: float = 0.02
    confidence_level: float = 0.95
    trading_days: int = TRADING_DAYS_PER_YEAR
    var_horizon_days: int = 10
    min_historical_observations: int = 10
    market_volatility: float = 0.15
    min_beta: float = 0.5
    max_beta: float = 2.0
    well_diversified_min_effective_n: float = 10.0
    well_diversified_max_hhi: float = 0.15
    domestic_region: str = "domestic"
    default_style: str = "blend"
    real_estate_sectors: frozenset[str] = frozenset({"real estate", "reit", "reits"})
    inflation_protected_sectors: frozenset[str] = frozenset(
        {"tips", "inflation-protected", "inflation protected"}
    )
    sector_correlations: dict[str, dict[str, float]] = field(
        default_factory=lambda: SECTOR_CORRELATIONS
    )
    sector_volatilities: dict[str, float] = field(default_factory=lambda: SECTOR_VOLATILITIES)
    default_sector_volatility: float = 0.20

    @classmethod
    def from_settings(cls, settings: Settings) -> AnalyzerConfig:
        return cls(
            risk_free_rate=settings.RISK_FREE_RATE,
            confidence_level=settings.VAR_CONFIDENCE_LEVEL,
        )


@dataclass(frozen=True)
class SimulationConfig:
    """Monte Carlo defaults and jump-diffusion parameters"""

    default_current_value: float = 1_000_000.0
    default_expected_return: float = 0.08
    default_volatility: float = 0.15
    default_horizon_days: int = TRADING_DAYS_PER_YEAR
    default_num_simulations: int = 1000

    jump_probability: float = 0.01
    jump_mean: float = -0.02
    jump_std: float = 0.05

    confidence_level: float = 0.95
    risk_free_rate: float = 0.03
    max_retained_paths: int = 100
    trading_days: int = TRADING_DAYS_PER_YEAR

    @classmethod
    def from_settings(cls, settings: Settings) -> SimulationConfig:
        return cls(
            default_horizon_days=settings.DEFAULT_HORIZON_DAYS,
            default_num_simulations=settings.DEFAULT_NUM_SIMULATIONS,
            confidence_level=settings.VAR_CONFIDENCE_LEVEL,
            risk_free_rate=settings.RISK_FREE_RATE,
        )


@dataclass(frozen=True)
class BacktestConfig:
    """
    Configuration for backtesting
    """

    initial_capital: float = 10000.0
    risk_free_rate: float = 0.02
    trading_days: int = TRADING_DAYS_PER_YEAR

    # Synthetic fallback series used when no prices are supplied
    synthetic_days: int = TRADING_DAYS_PER_YEAR
    synthetic_start_price: float = 100.0
    synthetic_volatility: float = 0.02

    @classmethod
    def from_settings(cls, settings: Settings) -> BacktestConfig:
        return cls(
            initial_capital=settings.DEFAULT_INITIAL_CAPITAL,
            risk_free_rate=settings.RISK_FREE_RATE,
        )


@dataclass(frozen=True)
class RegimeConfig:
    """Thresholds for market regime classification"""

    window: int = 20
    trading_days: int = TRADING_DAYS_PER_YEAR
    default_volatility: float = 0.15
    default_correlation: float = 0.5

    # Current-regime rules (annualized volatility, average correlation)
    volatile_threshold: float = 0.25
    quiet_threshold: float = 0.12
    crisis_correlation: float = 0.7
    calm_crisis_correlation: float = 0.8

    # Upper bounds of the stable / normal / elevated volatility buckets
    bucket_thresholds: tuple[float, float, float] = (0.10, 0.20, 0.30)

    # (weight when current, weight otherwise) before normalization
    regime_weights: dict[str, tuple[float, float]] = field(
        default_factory=lambda: {
            "QUIET": (0.7, 0.1),
            "NORMAL": (0.6, 0.2),
            "VOLATILE": (0.6, 0.15),
            "CRISIS": (0.8, 0.05),
        }
    )
