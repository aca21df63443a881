# quantcore/schemas/sentiment.py
"""
Sentiment analysis input

Upstream analyzers report sentiment in one of two shapes: plain percentages, or
percentages with a short explanation per side. Both are accepted as a tagged
union on the ``kind`` field; anything else is rejected at the boundary.
"""

from collections.abc import Mapping
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class SentimentBreakdown(BaseModel):
    """Bullish/neutral/bearish percentages (0-100)"""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    kind: Literal["breakdown"] = "breakdown"
    bullish: float = Field(0.0, ge=0, le=100)
    neutral: float = Field(0.0, ge=0, le=100)
    bearish: float = Field(0.0, ge=0, le=100)
    volatility: float | None = Field(None, ge=0)

    @property
    def bullish_pct(self) -> float:
        return self.bullish

    @property
    def bearish_pct(self) -> float:
        return self.bearish


class SentimentComponent(BaseModel):
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    value: float = Field(..., ge=0, le=100)
    explanation: str = ""


class ExplainedSentiment(BaseModel):
    """Percentages with a per-side explanation"""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    kind: Literal["explained"] = "explained"
    bullish: SentimentComponent
    neutral: SentimentComponent = SentimentComponent(value=0.0)
    bearish: SentimentComponent
    volatility: float | None = Field(None, ge=0)

    @property
    def bullish_pct(self) -> float:
        return self.bullish.value

    @property
    def bearish_pct(self) -> float:
        return self.bearish.value


SentimentInput = Annotated[
    SentimentBreakdown | ExplainedSentiment,
    Field(discriminator="kind"),
]

_sentiment_adapter = TypeAdapter(SentimentInput)


def parse_sentiment(
    data: SentimentBreakdown | ExplainedSentiment | Mapping[str, Any],
) -> SentimentBreakdown | ExplainedSentiment:
    """
    Validate a raw sentiment record.

    Raises:
        pydantic.ValidationError: If ``kind`` is missing/unknown or values are malformed
    """
    if isinstance(data, (SentimentBreakdown, ExplainedSentiment)):
        return data
    return _sentiment_adapter.validate_python(data)
