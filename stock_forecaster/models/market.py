"""
Market data models — OHLCV price points and point-in-time quotes.

Both models are frozen (immutable) after construction.  A forecast call
receives its inputs as these value objects and never mutates them.

``is_real_data`` records provenance: ``True`` when the value came from a live
upstream feed, ``False`` when a fallback provider synthesized it.  The
prediction pipeline surfaces these flags in ``DataQuality``.
"""

from __future__ import annotations

import math
from typing import Sequence

from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from pydantic.alias_generators import to_camel


class PricePoint(BaseModel):
    """One daily OHLCV bar.

    Attributes:
        timestamp: Bar open time as integer epoch seconds (UTC).
        open: Opening price.
        high: Highest traded price.
        low: Lowest traded price.
        close: Closing price; the series the indicators and models consume.
        volume: Traded volume (shares), non-negative.
        is_real_data: ``True`` if sourced from a live feed.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    timestamp: int
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0
    is_real_data: bool = False

    @field_validator("open", "high", "low", "close")
    @classmethod
    def validate_price_non_negative(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError(f"Prices must be finite, got {v}.")
        if v < 0:
            raise ValueError("Prices must be non-negative.")
        return v

    @field_validator("volume")
    @classmethod
    def validate_volume_non_negative(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError(f"volume must be finite, got {v}.")
        if v < 0:
            raise ValueError("volume must be non-negative.")
        return v

    @model_validator(mode="after")
    def validate_ohlc_ordering(self) -> "PricePoint":
        body_low = min(self.open, self.close)
        body_high = max(self.open, self.close)
        if not self.low <= body_low <= body_high <= self.high:
            raise ValueError(
                f"OHLC out of order: require low ({self.low}) <= min(open, close) "
                f"({body_low}) <= max(open, close) ({body_high}) <= high ({self.high})."
            )
        return self


class Quote(BaseModel):
    """Current/last traded price for a symbol (the forecast anchor).

    Attributes:
        symbol: Upper-case ticker, e.g. ``"AAPL"`` or ``"TCS.NS"``.
        price: Last traded price, strictly positive.
        change: Absolute change vs. previous close.
        change_percent: Percent change vs. previous close (``1.5`` = +1.5%).
        high, low, open: Intraday range and open.
        previous_close: Prior session close.
        timestamp: Quote time as epoch seconds.
        is_real_data: ``True`` if sourced from a live feed.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    symbol: str
    price: float
    change: float = 0.0
    change_percent: float = 0.0
    high: float
    low: float
    open: float
    previous_close: float
    timestamp: int
    is_real_data: bool = False

    @field_validator("symbol")
    @classmethod
    def validate_symbol(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("symbol must not be empty.")
        return v

    @field_validator("price")
    @classmethod
    def validate_price_positive(cls, v: float) -> float:
        if not math.isfinite(v) or v <= 0:
            raise ValueError(f"price must be > 0, got {v}.")
        return v


def validate_price_series(points: Sequence[PricePoint]) -> None:
    """Raise ``ValueError`` unless timestamps are strictly increasing.

    The indicator library and model bank assume oldest-first ordering; this
    check lets loaders reject (or re-sort) a feed before it reaches the core.
    """
    for prev, cur in zip(points, points[1:]):
        if cur.timestamp <= prev.timestamp:
            raise ValueError(
                f"Price series timestamps must be strictly increasing: "
                f"{prev.timestamp} followed by {cur.timestamp}."
            )


def close_prices(points: Sequence[PricePoint]) -> list[float]:
    """Return the close-price series in input order."""
    return [p.close for p in points]
