# quantcore/simulation/monte_carlo.py
"""
Monte Carlo simulation for portfolio risk assessment

Simulates forward portfolio value paths with geometric Brownian motion plus
Merton-style jumps (or a multi-factor model) and summarizes them into VaR/CVaR,
drawdown, probability of loss and percentile bands.
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import numpy as np
from loguru import logger

from quantcore.config.defaults import SimulationConfig
from quantcore.config.logging_config import log_simulation_run, timed_operation
from quantcore.config.settings import Settings, get_settings
from quantcore.simulation.factor_model import FactorModel, FactorStatistics
from quantcore.simulation.random import box_muller_normals, make_rng
from quantcore.utils.calculations import path_max_drawdowns
from quantcore.utils.validation import positive_or_default

BAND_PERCENTILES = (5, 25, 50, 75, 95)

_INPUT_KEYS = {
    "current_value": ("current_value", "currentValue"),
    "expected_return": ("expected_return", "expectedReturn"),
    "volatility": ("volatility",),
}


@dataclass(frozen=True)
class SimulationInputs:
    """Portfolio parameters for a simulation run"""

    current_value: float
    expected_return: float
    volatility: float

    @classmethod
    def coerce(
        cls,
        portfolio: "SimulationInputs | Mapping[str, Any]",
        config: SimulationConfig | None = None,
    ) -> "SimulationInputs":
        """
        Build inputs, replacing degenerate values with configured defaults.

        Zero, negative, NaN, infinite or missing values fall back to the
        ``SimulationConfig`` defaults (1,000,000 / 0.08 / 0.15).
        """
        config = config or SimulationConfig()

        if isinstance(portfolio, SimulationInputs):
            raw = {
                "current_value": portfolio.current_value,
                "expected_return": portfolio.expected_return,
                "volatility": portfolio.volatility,
            }
        else:
            raw = {
                name: next((portfolio[k] for k in keys if k in portfolio), None)
                for name, keys in _INPUT_KEYS.items()
            }

        return cls(
            current_value=positive_or_default(
                raw["current_value"], config.default_current_value, "current_value"
            ),
            expected_return=positive_or_default(
                raw["expected_return"], config.default_expected_return, "expected_return"
            ),
            volatility=positive_or_default(
                raw["volatility"], config.default_volatility, "volatility"
            ),
        )


@dataclass(frozen=True)
class SimulationResult:
    """
    Summary of a simulation run

    ``var`` and ``cvar`` are portfolio values (not losses) at the configured
    confidence level; ``var_loss``/``cvar_loss`` give the corresponding losses.
    ``volatility`` and ``sharpe_ratio`` describe the distribution of horizon
    returns (terminal value / initial value - 1) and are not annualized.
    """

    expected_value: float
    var: float
    cvar: float
    max_drawdown: float
    probability_of_loss: float
    confidence_interval: tuple[float, float]
    paths: np.ndarray
    initial_value: float
    confidence_level: float
    num_simulations: int
    horizon_days: int
    method: str = "gbm_jump_diffusion"
    volatility: float = 0.0
    sharpe_ratio: float = 0.0
    percentile_bands: dict[int, np.ndarray] = field(default_factory=dict)
    factor_statistics: FactorStatistics | None = None

    @property
    def var_loss(self) -> float:
        return self.initial_value - self.var

    @property
    def cvar_loss(self) -> float:
        return self.initial_value - self.cvar

    @property
    def expected_return(self) -> float:
        if self.initial_value == 0:
            return 0.0
        return self.expected_value / self.initial_value - 1

    def summary(self) -> dict[str, float]:
        return {
            "expected_value": self.expected_value,
            "var": self.var,
            "cvar": self.cvar,
            "max_drawdown": self.max_drawdown,
            "probability_of_loss": self.probability_of_loss,
            "volatility": self.volatility,
            "sharpe_ratio": self.sharpe_ratio,
        }

    def to_dict(self) -> dict[str, Any]:
        result = {
            **self.summary(),
            "var_loss": self.var_loss,
            "cvar_loss": self.cvar_loss,
            "confidence_interval": list(self.confidence_interval),
            "confidence_level": self.confidence_level,
            "initial_value": self.initial_value,
            "num_simulations": self.num_simulations,
            "horizon_days": self.horizon_days,
            "method": self.method,
            "paths": self.paths.tolist(),
            "percentile_bands": {
                str(p): band.tolist() for p, band in self.percentile_bands.items()
            },
        }
        if self.factor_statistics is not None:
            result["factor_statistics"] = self.factor_statistics.to_dict()
        return result


class MonteCarloSimulator:
    """
    Monte Carlo simulator for portfolio analysis

    Features:
    - GBM with jump diffusion (daily jump probability, normal jump sizes)
    - Multi-factor model variant with idiosyncratic residual
    - VaR, CVaR, max drawdown and probability of loss
    - Percentile bands over time and a bounded sample of paths

    Randomness comes from the injected generator; pass ``make_rng(seed)`` for
    reproducible runs.
    """

    def __init__(
        self,
        config: SimulationConfig | None = None,
        rng: np.random.Generator | None = None,
    ):
        self.config = config or SimulationConfig()
        self.rng = rng if rng is not None else make_rng()

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "MonteCarloSimulator":
        """Simulator configured from application settings, seeded by RANDOM_SEED"""
        settings = settings or get_settings()
        return cls(SimulationConfig.from_settings(settings), make_rng(settings.RANDOM_SEED))

    def simulate(
        self,
        portfolio: SimulationInputs | Mapping[str, Any],
        horizon_days: int | None = None,
        num_simulations: int | None = None,
    ) -> SimulationResult:
        """
        Simulate using geometric Brownian motion with jumps

        value *= 1 + mu/252 + sigma/sqrt(252) * Z + J

        Args:
            portfolio: current_value, expected_return and volatility
            horizon_days: Trading days to simulate
            num_simulations: Number of paths

        Returns:
            SimulationResult
        """
        inputs = SimulationInputs.coerce(portfolio, self.config)
        horizon_days, num_simulations = self._run_shape(horizon_days, num_simulations)
        cfg = self.config

        with timed_operation(f"GBM simulation ({num_simulations} paths, {horizon_days} days)"):
            shape = (num_simulations, horizon_days)
            drift = inputs.expected_return / cfg.trading_days
            diffusion = inputs.volatility / math.sqrt(cfg.trading_days)

            shocks = box_muller_normals(self.rng, shape)
            jump_sizes = cfg.jump_mean + cfg.jump_std * box_muller_normals(self.rng, shape)
            jumps = np.where(self.rng.random(shape) < cfg.jump_probability, jump_sizes, 0.0)

            returns = drift + diffusion * shocks + jumps
            paths = self._build_paths(inputs.current_value, returns)

        return self._summarize(paths, inputs.current_value, "gbm_jump_diffusion")

    def simulate_factor_model(
        self,
        portfolio: SimulationInputs | Mapping[str, Any],
        horizon_days: int | None = None,
        num_simulations: int | None = None,
        model: FactorModel | None = None,
        statistics: FactorStatistics | None = None,
    ) -> SimulationResult:
        """
        Simulate using a multi-factor return model

        Args:
            portfolio: current_value, expected_return and volatility
            horizon_days: Trading days to simulate
            num_simulations: Number of paths
            model: Factor definitions (defaults to the six standard factors)
            statistics: Exposures, e.g. from ``FactorModel.estimate_exposures``;
                derived heuristically from the portfolio volatility when omitted

        Returns:
            SimulationResult with ``factor_statistics`` attached
        """
        inputs = SimulationInputs.coerce(portfolio, self.config)
        horizon_days, num_simulations = self._run_shape(horizon_days, num_simulations)
        model = model or FactorModel(trading_days=self.config.trading_days)

        if statistics is None:
            statistics = FactorStatistics.from_betas(
                model.default_exposures(inputs.volatility),
                inputs.expected_return,
                inputs.volatility,
                model.factors,
            )

        with timed_operation(f"Factor simulation ({num_simulations} paths, {horizon_days} days)"):
            returns = model.simulate_returns(statistics, num_simulations, horizon_days, self.rng)
            paths = self._build_paths(inputs.current_value, returns)

        return self._summarize(
            paths, inputs.current_value, "factor_model", factor_statistics=statistics
        )

    def _run_shape(self, horizon_days, num_simulations) -> tuple[int, int]:
        horizon_days = positive_or_default(
            horizon_days, self.config.default_horizon_days, "horizon_days"
        )
        num_simulations = positive_or_default(
            num_simulations, self.config.default_num_simulations, "num_simulations"
        )
        return horizon_days, num_simulations

    @staticmethod
    def _build_paths(initial_value: float, returns: np.ndarray) -> np.ndarray:
        """Compound daily returns into value paths that start at initial_value"""
        growth = np.cumprod(1 + returns, axis=1)
        start = np.ones((returns.shape[0], 1))
        return initial_value * np.hstack([start, growth])

    def _summarize(
        self,
        paths: np.ndarray,
        initial_value: float,
        method: str,
        factor_statistics: FactorStatistics | None = None,
    ) -> SimulationResult:
        cfg = self.config
        num_simulations, steps = paths.shape
        horizon_days = steps - 1

        final_values = np.sort(paths[:, -1])
        tail = 1 - cfg.confidence_level

        var_index = min(int(math.floor(num_simulations * tail)), num_simulations - 1)
        var = float(final_values[var_index])
        cvar = float(np.mean(final_values[: max(1, var_index)]))

        lower_index = min(int(math.floor(num_simulations * tail / 2)), num_simulations - 1)
        upper_index = min(int(math.floor(num_simulations * (1 - tail / 2))), num_simulations - 1)

        horizon_returns = final_values / initial_value - 1
        volatility = float(np.std(horizon_returns))
        sharpe_ratio = (
            (float(np.mean(horizon_returns)) - cfg.risk_free_rate) / volatility
            if volatility > 0
            else 0.0
        )

        result = SimulationResult(
            expected_value=float(np.mean(final_values)),
            var=var,
            cvar=cvar,
            max_drawdown=float(np.max(path_max_drawdowns(paths))),
            probability_of_loss=float(np.mean(final_values < initial_value)),
            confidence_interval=(
                float(final_values[lower_index]),
                float(final_values[upper_index]),
            ),
            paths=paths[: cfg.max_retained_paths].copy(),
            initial_value=initial_value,
            confidence_level=cfg.confidence_level,
            num_simulations=num_simulations,
            horizon_days=horizon_days,
            method=method,
            volatility=volatility,
            sharpe_ratio=sharpe_ratio,
            percentile_bands={
                p: np.percentile(paths, p, axis=0) for p in BAND_PERCENTILES
            },
            factor_statistics=factor_statistics,
        )

        log_simulation_run(method, num_simulations, horizon_days, result.summary())
        logger.success(f"Simulation complete: {num_simulations} paths generated")

        return result
