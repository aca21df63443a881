# tests/test_monte_carlo.py
"""
Unit tests for Monte Carlo simulation
Run with: pytest tests/test_monte_carlo.py -v
"""

import numpy as np
import pytest

from quantcore.config import SimulationConfig
from quantcore.simulation import (
    MonteCarloSimulator,
    SimulationInputs,
    SimulationResult,
    make_rng,
)
from quantcore.simulation.monte_carlo import BAND_PERCENTILES
from quantcore.simulation.random import box_muller_normals


@pytest.fixture
def portfolio():
    return {"current_value": 100_000.0, "expected_return": 0.08, "volatility": 0.20}


class TestSimulationInputs:
    """Tests for degenerate-input handling"""

    def test_defaults_replace_degenerate_values(self):
        inputs = SimulationInputs.coerce(
            {"current_value": 0, "expected_return": float("nan"), "volatility": -0.3}
        )

        assert inputs.current_value == 1_000_000.0
        assert inputs.expected_return == 0.08
        assert inputs.volatility == 0.15

    def test_missing_values(self):
        inputs = SimulationInputs.coerce({})
        assert inputs == SimulationInputs(1_000_000.0, 0.08, 0.15)

    def test_camel_case_keys(self):
        inputs = SimulationInputs.coerce(
            {"currentValue": 5000, "expectedReturn": 0.1, "volatility": 0.3}
        )
        assert inputs == SimulationInputs(5000.0, 0.1, 0.3)

    def test_infinite_value(self):
        inputs = SimulationInputs.coerce({"current_value": float("inf")})
        assert inputs.current_value == 1_000_000.0


class TestMonteCarloSimulator:
    """Tests for MonteCarloSimulator"""

    @pytest.fixture
    def simulator(self, rng):
        return MonteCarloSimulator(rng=rng)

    def test_result_structure(self, simulator, portfolio):
        result = simulator.simulate(portfolio, horizon_days=60, num_simulations=500)

        assert isinstance(result, SimulationResult)
        assert result.num_simulations == 500
        assert result.horizon_days == 60
        assert result.method == "gbm_jump_diffusion"
        assert result.initial_value == 100_000.0

    def test_paths_bounded_and_anchored(self, simulator, portfolio):
        """Test at most 100 paths are retained, each starting at the current value"""
        result = simulator.simulate(portfolio, horizon_days=30, num_simulations=500)

        assert result.paths.shape == (100, 31)
        assert np.all(result.paths[:, 0] == 100_000.0)

    def test_fewer_paths_than_retention_limit(self, simulator, portfolio):
        result = simulator.simulate(portfolio, horizon_days=10, num_simulations=20)
        assert result.paths.shape == (20, 11)

    def test_risk_metric_invariants(self, simulator, portfolio):
        result = simulator.simulate(portfolio, horizon_days=252, num_simulations=2000)

        # CVaR averages the tail beyond VaR, so it is the lower portfolio value
        assert result.cvar <= result.var
        assert result.cvar_loss >= result.var_loss
        assert 0.0 <= result.probability_of_loss <= 1.0
        assert 0.0 <= result.max_drawdown <= 1.0
        low, high = result.confidence_interval
        assert low <= result.var
        assert low <= high

    @pytest.mark.parametrize("horizon_days", [63, 252])
    def test_expected_value_without_jumps(self, rng, horizon_days):
        """Test mean terminal value matches current x (1 + mu)^(horizon / 252)"""
        config = SimulationConfig(jump_probability=0.0)
        simulator = MonteCarloSimulator(config, rng=rng)

        result = simulator.simulate(
            {"current_value": 1_000_000, "expected_return": 0.08, "volatility": 0.15},
            horizon_days=horizon_days,
            num_simulations=20_000,
        )

        expected = 1_000_000 * (1 + 0.08) ** (horizon_days / 252)
        assert result.horizon_days == horizon_days
        assert result.expected_value == pytest.approx(expected, rel=0.01)
        assert result.expected_return == pytest.approx(expected / 1_000_000 - 1, abs=0.01)

    def test_volatility_and_sharpe_from_terminal_values(self, rng, portfolio):
        simulator = MonteCarloSimulator(rng=rng)
        result = simulator.simulate(portfolio, horizon_days=60, num_simulations=80)

        horizon_returns = result.paths[:, -1] / portfolio["current_value"] - 1
        volatility = np.std(horizon_returns)

        assert len(result.paths) == 80
        assert result.volatility == pytest.approx(volatility)
        assert result.sharpe_ratio == pytest.approx(
            (np.mean(horizon_returns) - 0.03) / volatility
        )

    def test_sharpe_uses_configured_risk_free_rate(self, portfolio):
        default = MonteCarloSimulator(rng=make_rng(3)).simulate(
            portfolio, horizon_days=30, num_simulations=200
        )
        zero_rate = MonteCarloSimulator(
            SimulationConfig(risk_free_rate=0.0), rng=make_rng(3)
        ).simulate(portfolio, horizon_days=30, num_simulations=200)

        assert zero_rate.volatility == pytest.approx(default.volatility)
        assert zero_rate.sharpe_ratio == pytest.approx(
            default.sharpe_ratio + 0.03 / default.volatility
        )
        assert zero_rate.to_dict()["sharpe_ratio"] == zero_rate.sharpe_ratio

    def test_jumps_lower_mean(self, portfolio):
        """Test negative-biased jumps pull the mean below the no-jump case"""
        crash_prone = SimulationConfig(jump_probability=0.2, jump_mean=-0.05, jump_std=0.01)
        calm = SimulationConfig(jump_probability=0.0)

        with_jumps = MonteCarloSimulator(crash_prone, rng=make_rng(7)).simulate(
            portfolio, horizon_days=60, num_simulations=1000
        )
        without = MonteCarloSimulator(calm, rng=make_rng(7)).simulate(
            portfolio, horizon_days=60, num_simulations=1000
        )

        assert with_jumps.expected_value < without.expected_value

    def test_reproducible_with_seed(self, portfolio):
        first = MonteCarloSimulator(rng=make_rng(123)).simulate(
            portfolio, horizon_days=20, num_simulations=200
        )
        second = MonteCarloSimulator(rng=make_rng(123)).simulate(
            portfolio, horizon_days=20, num_simulations=200
        )

        assert first.expected_value == second.expected_value
        assert first.var == second.var
        np.testing.assert_array_equal(first.paths, second.paths)

    def test_degenerate_run_shape_uses_defaults(self, simulator):
        result = simulator.simulate({}, horizon_days=0, num_simulations=-5)

        assert result.horizon_days == 252
        assert result.num_simulations == 1000
        assert result.initial_value == 1_000_000.0
        assert np.isfinite(result.expected_value)

    def test_single_path(self, simulator, portfolio):
        result = simulator.simulate(portfolio, horizon_days=5, num_simulations=1)

        assert result.var == result.cvar
        assert result.probability_of_loss in (0.0, 1.0)

    def test_percentile_bands(self, simulator, portfolio):
        result = simulator.simulate(portfolio, horizon_days=40, num_simulations=500)

        assert set(result.percentile_bands) == set(BAND_PERCENTILES)
        assert all(len(band) == 41 for band in result.percentile_bands.values())
        assert np.all(result.percentile_bands[5] <= result.percentile_bands[95])
        assert result.percentile_bands[50][0] == pytest.approx(100_000.0)

    def test_confidence_level_config(self, portfolio):
        config = SimulationConfig(confidence_level=0.99)
        result = MonteCarloSimulator(config, rng=make_rng(1)).simulate(
            portfolio, horizon_days=30, num_simulations=1000
        )
        final_values = np.sort(result.paths[:, -1])

        assert result.confidence_level == 0.99
        assert result.var <= np.median(final_values)

    def test_to_dict(self, simulator, portfolio):
        data = simulator.simulate(portfolio, horizon_days=10, num_simulations=50).to_dict()

        assert data["method"] == "gbm_jump_diffusion"
        assert len(data["confidence_interval"]) == 2
        assert len(data["paths"]) == 50
        assert "factor_statistics" not in data
        assert set(data["percentile_bands"]) == {"5", "25", "50", "75", "95"}


class TestFactorSimulation:
    """Tests for the multi-factor simulation variant"""

    def test_factor_model_run(self, rng, portfolio):
        simulator = MonteCarloSimulator(rng=rng)
        result = simulator.simulate_factor_model(portfolio, horizon_days=60, num_simulations=500)

        assert result.method == "factor_model"
        assert result.factor_statistics is not None
        assert result.factor_statistics.method == "heuristic"
        assert result.paths.shape == (100, 61)
        assert 0.0 <= result.probability_of_loss <= 1.0
        assert result.cvar <= result.var

    def test_factor_statistics_serialized(self, rng, portfolio):
        simulator = MonteCarloSimulator(rng=rng)
        data = simulator.simulate_factor_model(
            portfolio, horizon_days=5, num_simulations=10
        ).to_dict()

        assert "Market" in data["factor_statistics"]["betas"]


class TestBoxMuller:
    def test_standard_normal_moments(self, rng):
        samples = box_muller_normals(rng, 100_000)

        assert samples.shape == (100_000,)
        assert np.mean(samples) == pytest.approx(0.0, abs=0.02)
        assert np.std(samples) == pytest.approx(1.0, abs=0.02)

    def test_finite(self, rng):
        assert np.all(np.isfinite(box_muller_normals(rng, (50, 50))))
