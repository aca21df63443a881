# quantcore/schemas/__init__.py
"""
Input records for the quantcore calculators

All records are frozen Pydantic models. Malformed input raises
``pydantic.ValidationError`` at construction; calculators never guess at shapes.
"""

from quantcore.schemas.holdings import (
    AssetType,
    Holding,
    active_holdings,
    coerce_holdings,
    total_market_value,
    value_weights,
)
from quantcore.schemas.market import MarketContext, MarketData, PriceBar, PriceSeries
from quantcore.schemas.portfolio import PortfolioProfile
from quantcore.schemas.sentiment import (
    ExplainedSentiment,
    SentimentBreakdown,
    SentimentComponent,
    SentimentInput,
    parse_sentiment,
)

__all__ = [
    "AssetType",
    "Holding",
    "active_holdings",
    "coerce_holdings",
    "total_market_value",
    "value_weights",
    "MarketContext",
    "MarketData",
    "PriceBar",
    "PriceSeries",
    "PortfolioProfile",
    "ExplainedSentiment",
    "SentimentBreakdown",
    "SentimentComponent",
    "SentimentInput",
    "parse_sentiment",
]
