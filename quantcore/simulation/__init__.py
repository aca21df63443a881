# quantcore/simulation/__init__.py
"""
Simulation Module

Monte Carlo path simulation (GBM with jumps, multi-factor model) and the
random number helpers it uses.
"""

from quantcore.simulation.factor_model import (
    DEFAULT_FACTORS,
    Factor,
    FactorModel,
    FactorStatistics,
)
from quantcore.simulation.monte_carlo import (
    MonteCarloSimulator,
    SimulationInputs,
    SimulationResult,
)
from quantcore.simulation.random import box_muller_normals, make_rng

__all__ = [
    "MonteCarloSimulator",
    "SimulationInputs",
    "SimulationResult",
    "Factor",
    "FactorModel",
    "FactorStatistics",
    "DEFAULT_FACTORS",
    "make_rng",
    "box_muller_normals",
]
