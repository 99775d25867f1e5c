"""
Provider protocols.

The forecasting core consumes plain value objects; where they come from is a
provider's business.  Live feeds are out of scope for this package, so the
only built-in implementation is ``SyntheticMarketData``.  A live provider
tags what it returns with ``is_real_data=True`` and raises
``ProviderError`` when the upstream is unavailable; the prediction pipeline
then falls back to synthetic content.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from stock_forecaster.models.market import PricePoint, Quote
from stock_forecaster.models.news import NewsItem


@runtime_checkable
class PriceHistoryProvider(Protocol):
    """Supplies daily OHLCV bars, oldest first."""

    def get_price_history(self, symbol: str, lookback_days: int) -> list[PricePoint]: ...


@runtime_checkable
class NewsProvider(Protocol):
    """Supplies scored news items, most recent first."""

    def get_news(self, symbol: str, limit: int) -> list[NewsItem]: ...


@runtime_checkable
class QuoteProvider(Protocol):
    """Supplies the latest quote for a symbol."""

    def get_quote(self, symbol: str) -> Quote: ...
