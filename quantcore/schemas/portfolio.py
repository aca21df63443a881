# quantcore/schemas/portfolio.py
"""
Portfolio-level inputs for the composite risk score
"""

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from quantcore.schemas.holdings import (
    EMERGING_MARKET_TAGS,
    HIGH_YIELD_TAGS,
    AssetType,
    Holding,
    active_holdings,
    total_market_value,
    value_weights,
)
from quantcore.utils.validation import validate_weights


class PortfolioProfile(BaseModel):
    """Aggregate portfolio characteristics used by RiskScorer"""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    size: float = Field(0.0, ge=0)
    beta: float | None = None
    has_high_yield: bool = False
    has_emerging_markets: bool = False
    has_crypto: bool = False
    weights: list[float] = Field(default_factory=list)
    sectors: list[str] = Field(default_factory=list)

    @field_validator("weights")
    @classmethod
    def check_weights(cls, v: list[float]) -> list[float]:
        if not v:
            return v
        return validate_weights(v, must_sum_to_one=False)

    @classmethod
    def from_holdings(
        cls, holdings: Iterable[Holding | Mapping[str, Any]]
    ) -> "PortfolioProfile":
        """
        Derive the profile from positions.

        Beta is the value-weighted average over holdings that report one;
        None when no holding does.
        """
        positions = active_holdings(holdings)
        weights = value_weights(positions)

        with_beta = [(h, w) for h, w in zip(positions, weights) if h.beta is not None]
        beta_weight = sum(w for _, w in with_beta)
        portfolio_beta = (
            sum(h.beta * w for h, w in with_beta) / beta_weight if beta_weight > 0 else None
        )

        return cls(
            size=total_market_value(positions),
            beta=portfolio_beta,
            has_high_yield=any(h.has_tag(HIGH_YIELD_TAGS) for h in positions),
            has_emerging_markets=any(h.has_tag(EMERGING_MARKET_TAGS) for h in positions),
            has_crypto=any(h.asset_type == AssetType.CRYPTO for h in positions),
            weights=weights,
            sectors=[h.sector for h in positions if h.sector],
        )
