# quantcore/simulation/random.py
"""
Random number helpers

All stochastic code takes an explicit ``numpy.random.Generator`` so tests can
reproduce exact paths. Use ``make_rng(seed)`` in tests and ``make_rng()`` in
production.
"""

import numpy as np


def make_rng(seed: int | None = None) -> np.random.Generator:
    """Create a generator; unseeded (OS entropy) when seed is None"""
    return np.random.default_rng(seed)


def box_muller_normals(rng: np.random.Generator, size) -> np.ndarray:
    """
    Standard normal draws via the Box-Muller transform.

    z = sqrt(-2 ln u1) * cos(2 pi u2), with u1 in (0, 1] so the log is finite.

    Args:
        rng: Random generator
        size: Output shape

    Returns:
        Array of standard normal samples
    """
    u1 = 1.0 - rng.random(size)
    u2 = rng.random(size)
    return np.sqrt(-2.0 * np.log(u1)) * np.cos(2.0 * np.pi * u2)
