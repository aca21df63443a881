# tests/conftest.py
"""
Pytest configuration and fixtures for quantcore tests.
"""

from datetime import date

import numpy as np
import pytest

from quantcore.schemas import Holding, PriceSeries
from quantcore.simulation import make_rng


def pytest_configure(config):
    """Configure pytest markers"""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line("markers", "unit: marks tests as unit tests")


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def rng():
    """Seeded generator for reproducible draws"""
    return make_rng(42)


@pytest.fixture
def flat_series():
    """100 days with close constant at 100"""
    return PriceSeries.from_closes([100.0] * 100, start=date(2024, 1, 1), symbol="FLAT")


@pytest.fixture
def rising_series():
    """Steady 0.5% daily gains"""
    closes = 100.0 * np.cumprod(np.full(120, 1.005))
    return PriceSeries.from_closes(closes.tolist(), start=date(2024, 1, 1), symbol="UP")


@pytest.fixture
def oscillating_series():
    """Sine wave around 100 with a 40-day cycle"""
    t = np.arange(200)
    closes = 100.0 + 10.0 * np.sin(2 * np.pi * t / 40)
    return PriceSeries.from_closes(closes.tolist(), start=date(2024, 1, 1), symbol="WAVE")


@pytest.fixture
def equal_weight_holdings():
    """Two positions of equal market value"""
    return [
        Holding(
            symbol="AAA",
            quantity=10,
            buy_price=90.0,
            current_price=100.0,
            sector="Technology",
        ),
        Holding(
            symbol="BBB",
            quantity=20,
            buy_price=55.0,
            current_price=50.0,
            sector="Finance",
        ),
    ]


@pytest.fixture
def diversified_holdings():
    """Twenty equal-value positions across asset types, sectors and regions"""
    sectors = ["Technology", "Finance", "Healthcare", "Energy", "Consumer", "Industrial"]
    holdings = []
    for i in range(20):
        holdings.append(
            Holding(
                symbol=f"SYM{i}",
                quantity=10,
                buy_price=100.0,
                current_price=100.0 + (i % 7) - 3,
                asset_type="bond" if i % 4 == 0 else "stock",
                sector=sectors[i % len(sectors)],
                region="international" if i % 3 == 0 else "domestic",
            )
        )
    return holdings
