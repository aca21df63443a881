# quantcore/risk/correlation.py
"""
Sector-based correlation and risk decomposition estimates

Used when no return history is available for the positions: pairwise
correlations and volatilities come from static sector tables.
"""

import math
from dataclasses import asdict, dataclass
from itertools import combinations
from typing import Any

from quantcore.config.defaults import (
    SECTOR_CORRELATIONS,
    SECTOR_VOLATILITIES,
    SYSTEMATIC_RISK_SHARES,
)
from quantcore.schemas.holdings import Holding, value_weights
from quantcore.utils.calculations import clamp, herfindahl_index

SAME_SECTOR_CORRELATION = 0.8
CROSS_SECTOR_CORRELATION = 0.4


def sector_correlation(
    sector_a: str | None,
    sector_b: str | None,
    table: dict[str, dict[str, float]] = SECTOR_CORRELATIONS,
) -> float:
    """Correlation estimate for two sectors"""
    row = table.get(sector_a or "", {})
    if sector_b in row:
        return row[sector_b]
    if sector_a is not None and sector_a == sector_b:
        return SAME_SECTOR_CORRELATION
    return CROSS_SECTOR_CORRELATION


def average_sector_correlation(
    sectors: list[str],
    table: dict[str, dict[str, float]] = SECTOR_CORRELATIONS,
) -> float | None:
    """
    Mean pairwise correlation across positions.

    Returns:
        Average correlation, or None for fewer than two positions
    """
    pairs = list(combinations(sectors, 2))
    if not pairs:
        return None
    return sum(sector_correlation(a, b, table) for a, b in pairs) / len(pairs)


def asset_volatility(
    holding: Holding,
    table: dict[str, float] = SECTOR_VOLATILITIES,
    default: float = 0.20,
) -> float:
    return table.get(holding.sector or "", default)


def risk_contributions(
    holdings: list[Holding],
    portfolio_volatility: float,
) -> dict[str, float]:
    """
    Split portfolio volatility across positions by weight x beta.

    Contributions are normalized so they sum to the portfolio volatility.
    Holdings without a beta count as beta 1.0.
    """
    weights = value_weights(holdings)
    contributions: dict[str, float] = {}

    for holding, weight in zip(holdings, weights):
        holding_beta = holding.beta if holding.beta is not None else 1.0
        contribution = weight * holding_beta * portfolio_volatility
        contributions[holding.symbol] = contributions.get(holding.symbol, 0.0) + contribution

    total = sum(contributions.values())
    if total > 0:
        contributions = {
            symbol: value / total * portfolio_volatility for symbol, value in contributions.items()
        }

    return contributions


def weighted_volatility_ratio(
    holdings: list[Holding],
    portfolio_volatility: float,
    table: dict[str, float] = SECTOR_VOLATILITIES,
    default: float = 0.20,
) -> float:
    """
    Weighted average position volatility over portfolio volatility.

    Above 1 indicates a diversification benefit. Returns 1.0 when portfolio
    volatility is zero.
    """
    if portfolio_volatility <= 0:
        return 1.0

    weights = value_weights(holdings)
    weighted = sum(w * asset_volatility(h, table, default) for h, w in zip(holdings, weights))
    return weighted / portfolio_volatility


@dataclass(frozen=True)
class RiskDecomposition:
    """Systematic / idiosyncratic split of portfolio volatility"""

    total: float
    systematic: float
    idiosyncratic: float
    average_correlation: float
    concentration: float
    diversification_ratio: float
    contributions: dict[str, float]
    factors: dict[str, float]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def risk_decomposition(
    holdings: list[Holding],
    portfolio_volatility: float,
    correlations: dict[str, dict[str, float]] = SECTOR_CORRELATIONS,
    volatilities: dict[str, float] = SECTOR_VOLATILITIES,
    default_volatility: float = 0.20,
    default_correlation: float = 0.5,
    factor_shares: dict[str, float] = SYSTEMATIC_RISK_SHARES,
) -> RiskDecomposition:
    """
    Decompose portfolio volatility using the average sector correlation.

    systematic = total x sqrt(avg correlation) and
    idiosyncratic = sqrt(total^2 - systematic^2), so the two parts add up in
    variance. Systematic risk is then spread over named risk sources by
    ``factor_shares``.

    Args:
        holdings: Positions (sector tags drive the correlation estimate)
        portfolio_volatility: Annualized portfolio volatility
        correlations: Sector correlation table
        volatilities: Sector volatility table
        default_volatility: Volatility for sectors missing from the table
        default_correlation: Used for fewer than two sector-tagged positions
        factor_shares: Fraction of systematic risk per risk source

    Returns:
        RiskDecomposition
    """
    total = max(0.0, portfolio_volatility)

    average = average_sector_correlation([h.sector for h in holdings if h.sector], correlations)
    if average is None:
        average = default_correlation

    systematic = total * math.sqrt(clamp(average, 0.0, 1.0))
    idiosyncratic = math.sqrt(max(0.0, total * total - systematic * systematic))

    return RiskDecomposition(
        total=total,
        systematic=systematic,
        idiosyncratic=idiosyncratic,
        average_correlation=average,
        concentration=herfindahl_index(value_weights(holdings)),
        diversification_ratio=weighted_volatility_ratio(
            holdings, total, volatilities, default_volatility
        ),
        contributions=risk_contributions(holdings, total),
        factors={name: systematic * share for name, share in factor_shares.items()},
    )
