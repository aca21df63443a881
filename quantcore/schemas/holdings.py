# quantcore/schemas/holdings.py
"""
Portfolio position records
"""

from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

HIGH_YIELD_TAGS = frozenset({"high yield", "high-yield", "high_yield", "junk"})
EMERGING_MARKET_TAGS = frozenset({"emerging", "emerging markets", "emerging_markets", "em"})


class AssetType(str, Enum):
    """Supported asset classes"""

    STOCK = "stock"
    BOND = "bond"
    FUND = "fund"
    CRYPTO = "crypto"
    COMMODITY = "commodity"
    CASH = "cash"


class Holding(BaseModel):
    """One portfolio position"""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False, str_strip_whitespace=True)

    symbol: str = Field(..., min_length=1)
    name: str | None = None
    quantity: float = Field(..., ge=0)
    buy_price: float = Field(..., gt=0)
    current_price: float = Field(..., gt=0)
    asset_type: AssetType = AssetType.STOCK
    sector: str | None = None
    region: str | None = None
    style: str | None = None
    beta: float | None = None

    @field_validator("asset_type", mode="before")
    @classmethod
    def normalize_asset_type(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @property
    def market_value(self) -> float:
        return self.quantity * self.current_price

    @property
    def cost_basis(self) -> float:
        return self.quantity * self.buy_price

    @property
    def unrealized_pnl(self) -> float:
        return self.market_value - self.cost_basis

    @property
    def holding_return(self) -> float:
        """Return since purchase, (current - buy) / buy"""
        return (self.current_price - self.buy_price) / self.buy_price

    @property
    def is_active(self) -> bool:
        return self.quantity > 0

    def has_tag(self, tags: Iterable[str]) -> bool:
        """True if sector, region or style matches one of tags (case-insensitive)"""
        tags = {t.lower() for t in tags}
        return any(
            value is not None and value.lower() in tags
            for value in (self.sector, self.region, self.style)
        )


def coerce_holdings(holdings: Iterable[Holding | Mapping[str, Any]]) -> list[Holding]:
    """
    Validate raw records into Holding models.

    Raises:
        pydantic.ValidationError: If any record is malformed
    """
    return [h if isinstance(h, Holding) else Holding.model_validate(h) for h in holdings]


def active_holdings(holdings: Iterable[Holding | Mapping[str, Any]]) -> list[Holding]:
    """Validated holdings with zero-quantity positions removed"""
    return [h for h in coerce_holdings(holdings) if h.is_active]


def total_market_value(holdings: Iterable[Holding]) -> float:
    return float(sum(h.market_value for h in holdings))


def value_weights(holdings: list[Holding]) -> list[float]:
    """Market-value weights; all zeros when the portfolio has no value"""
    total = total_market_value(holdings)
    if total <= 0:
        return [0.0 for _ in holdings]
    return [h.market_value / total for h in holdings]
