# tests/test_factor_model.py
"""
Unit tests for the multi-factor return model
Run with: pytest tests/test_factor_model.py -v
"""

import numpy as np
import pandas as pd
import pytest

from quantcore.simulation import DEFAULT_FACTORS, Factor, FactorModel, FactorStatistics
from quantcore.utils import ValidationError


class TestFactorModel:
    """Tests for FactorModel"""

    @pytest.fixture
    def model(self):
        return FactorModel()

    @pytest.fixture
    def factor_returns(self, rng):
        n = 500
        return pd.DataFrame(
            {
                "Market": rng.normal(0.0003, 0.01, n),
                "Size": rng.normal(0.0001, 0.005, n),
                "Value": rng.normal(0.0001, 0.004, n),
            }
        )

    def test_six_default_factors(self, model):
        assert model.names == ["Market", "Size", "Value", "Momentum", "Quality", "Volatility"]
        assert len(DEFAULT_FACTORS) == 6

    def test_unknown_factor(self, model):
        assert model.factor("Carry") == Factor("Carry", 0.0, 0.10)

    @pytest.mark.parametrize(
        "volatility,tilt",
        [(0.10, -0.4), (0.16, -0.1), (0.25, 0.3)],
    )
    def test_default_exposures(self, model, volatility, tilt):
        exposures = model.default_exposures(volatility)

        assert exposures["Market"] == pytest.approx(0.8 * volatility / 0.16)
        assert exposures["Size"] == 0.0
        assert exposures["Value"] == 0.2
        assert exposures["Momentum"] == 0.2
        assert exposures["Quality"] == 0.25
        assert exposures["Volatility"] == tilt

    def test_default_exposures_limited_to_model_factors(self):
        model = FactorModel(factors=[Factor("Market", 0.08, 0.16)])
        assert set(model.default_exposures(0.15)) == {"Market"}

    def test_estimate_exposures_recovers_betas(self, model, factor_returns, rng):
        noise = rng.normal(0.0, 0.001, len(factor_returns))
        portfolio_returns = (
            0.0002
            + 1.2 * factor_returns["Market"]
            + 0.5 * factor_returns["Size"]
            - 0.3 * factor_returns["Value"]
            + noise
        )

        stats = model.estimate_exposures(portfolio_returns.to_numpy(), factor_returns)

        assert stats.method == "regression"
        assert stats.betas["Market"] == pytest.approx(1.2, abs=0.05)
        assert stats.betas["Size"] == pytest.approx(0.5, abs=0.1)
        assert stats.betas["Value"] == pytest.approx(-0.3, abs=0.1)
        assert stats.r_squared > 0.9
        assert stats.alpha == pytest.approx(0.0002 * 252, abs=0.03)
        assert stats.tracking_error == pytest.approx(0.001 * np.sqrt(252), rel=0.2)

    def test_estimate_exposures_from_mapping(self, model, rng):
        """Test mapping input is aligned on the most recent observations"""
        market = rng.normal(0.0, 0.01, 300)
        portfolio_returns = 0.9 * market[-250:]

        stats = model.estimate_exposures(portfolio_returns, {"Market": market})

        assert stats.betas["Market"] == pytest.approx(0.9)
        assert stats.r_squared == pytest.approx(1.0)

    def test_too_few_observations(self, model):
        with pytest.raises(ValidationError):
            model.estimate_exposures([0.01, 0.02], {"Market": [0.01, 0.015]})

    def test_no_factors(self, model):
        with pytest.raises(ValidationError):
            model.estimate_exposures([0.01, 0.02, 0.03], {})

    def test_simulate_returns_shape(self, model, rng):
        stats = FactorStatistics.from_betas(model.default_exposures(0.15), 0.08, 0.15)
        returns = model.simulate_returns(stats, num_simulations=200, horizon_days=30, rng=rng)

        assert returns.shape == (200, 30)
        assert np.all(np.isfinite(returns))

    def test_simulated_mean_matches_expected_return(self, model, rng):
        """Test alpha plus factor premia reproduce the target annual return"""
        stats = FactorStatistics.from_betas(model.default_exposures(0.15), 0.08, 0.15)
        returns = model.simulate_returns(stats, num_simulations=4000, horizon_days=252, rng=rng)

        assert returns.mean() * 252 == pytest.approx(0.08, abs=0.01)


class TestFactorStatistics:
    """Tests for heuristic factor statistics"""

    def test_from_betas(self):
        betas = {"Market": 1.0, "Value": 0.5}
        stats = FactorStatistics.from_betas(betas, expected_return=0.10, volatility=0.20)

        assert stats.r_squared == pytest.approx(0.6 + 0.75 * 0.3)
        assert stats.alpha == pytest.approx(0.10 - (1.0 * 0.08 + 0.5 * 0.03))
        assert stats.tracking_error == pytest.approx(0.20 * np.sqrt(1 - stats.r_squared))
        assert stats.method == "heuristic"

    def test_r_squared_capped(self):
        stats = FactorStatistics.from_betas({"Market": 2.0}, 0.1, 0.2)
        assert stats.r_squared == 0.95

    def test_empty_betas(self):
        stats = FactorStatistics.from_betas({}, 0.08, 0.15)

        assert stats.r_squared == pytest.approx(0.6)
        assert stats.alpha == pytest.approx(0.08)
        assert stats.dominant_factor is None

    def test_dominant_factor(self):
        stats = FactorStatistics.from_betas({"Market": 0.4, "Volatility": -0.9}, 0.08, 0.15)
        assert stats.dominant_factor == ("Volatility", -0.9)

    def test_to_dict(self):
        data = FactorStatistics.from_betas({"Market": 1.0}, 0.08, 0.15).to_dict()
        assert data["betas"] == {"Market": 1.0}
        assert data["method"] == "heuristic"
