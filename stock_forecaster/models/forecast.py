"""
Forecast output models.

``Prediction`` is one day of the multi-day forecast; ``ForecastResult`` is the
complete response of ``forecast()``: exactly ``horizon`` predictions ordered
by ``day`` plus ``ForecastMetadata``.

All models are frozen and serialise with camelCase aliases
(``model_dump(by_alias=True)``) so the output matches the JSON shape the
HTTP layer returns::

    {"predictions": [{"day": 1, "price": ..., "confidence": ..., "factors": {...}}],
     "metadata": {"sentimentScore": ..., "currentPrice": ..., "dataQuality": {...}}}
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from pydantic.alias_generators import to_camel

ForecastPath = Literal["ensemble", "fallback"]

_ALIASED = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class ForecastFactors(BaseModel):
    """Per-day breakdown of the signals that produced a prediction.

    Attributes:
        technical: RSI/MACD technical adjustment (fraction of price).
        sentiment: Sentiment adjustment (fraction of price).
        trend: Short-term trend adjustment (fraction of price).
        ml: Blended statistical-model price (0 on the fallback path).
        volume: Volume momentum signal in ``{-0.1, 0, 0.1}``.
        rsi: RSI value used.
        macd: MACD line value used.
        sentiment_score: Aggregated news sentiment in ``[-1, 1]``.
    """

    model_config = _ALIASED

    technical: float = 0.0
    sentiment: float = 0.0
    trend: float = 0.0
    ml: float = 0.0
    volume: float = 0.0
    rsi: float = 50.0
    macd: float = 0.0
    sentiment_score: float = 0.0


class Prediction(BaseModel):
    """Forecast for one day ahead of the anchor price."""

    model_config = _ALIASED

    day: int
    price: float
    confidence: float
    factors: ForecastFactors = ForecastFactors()

    @field_validator("day")
    @classmethod
    def validate_day(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"day must be >= 1, got {v}.")
        return v

    @field_validator("price")
    @classmethod
    def validate_price_positive(cls, v: float) -> float:
        if not v > 0:
            raise ValueError(f"price must be > 0, got {v}.")
        return v

    @field_validator("confidence")
    @classmethod
    def validate_confidence(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"confidence must be in [0, 1], got {v}.")
        return v


class DataQuality(BaseModel):
    """Provenance and sufficiency of the inputs behind a forecast.

    Attributes:
        has_real_stock: Quote came from a live feed.
        has_real_historical: At least one price point came from a live feed.
        has_real_news: At least one news item came from a live feed.
        historical_points: Length of the price history used.
        news_articles: Number of news items aggregated.
        path: ``"ensemble"`` or ``"fallback"``, the branch that produced the output.
    """

    model_config = _ALIASED

    has_real_stock: bool = False
    has_real_historical: bool = False
    has_real_news: bool = False
    historical_points: int = 0
    news_articles: int = 0
    path: ForecastPath = "fallback"


class ForecastMetadata(BaseModel):
    """Inputs that anchored the forecast."""

    model_config = _ALIASED

    sentiment_score: float
    current_price: float
    data_quality: DataQuality


class ForecastResult(BaseModel):
    """Complete forecast: ordered predictions plus metadata."""

    model_config = _ALIASED

    predictions: list[Prediction]
    metadata: ForecastMetadata

    @model_validator(mode="after")
    def validate_day_ordering(self) -> "ForecastResult":
        days = [p.day for p in self.predictions]
        if days != list(range(1, len(days) + 1)):
            raise ValueError(f"predictions must be ordered by day 1..N, got {days}.")
        return self

    @property
    def average_confidence(self) -> float:
        """Mean confidence across all predictions (0.0 if empty)."""
        if not self.predictions:
            return 0.0
        return sum(p.confidence for p in self.predictions) / len(self.predictions)
