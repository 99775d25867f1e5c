"""
Prediction pipeline: fetch inputs from providers, run the core, enforce a deadline.

Flow for ``PredictionPipeline.run(symbol)``
-------------------------------------------
  1. Quote         → anchor price (``quote.price``).
  2. Price history → ``lookback_days`` bars.
  3. News          → ``news_limit`` scored items.
  4. ``forecast_with_deadline()`` on the collected inputs.

Each fetch goes to the configured live provider first.  If none is configured,
it raises, or it returns nothing, the pipeline uses the synthetic fallback
provider instead; the ``is_real_data`` flags on the returned values end up in
``metadata.dataQuality`` so callers can tell the difference.

Deadline
--------
``forecast_with_deadline`` runs the core on a worker thread and waits at most
``timeout_seconds``.  On timeout the pending result is abandoned and the
fallback-path forecast (no indicators, no model fitting) is returned instead.
"""

from __future__ import annotations

import logging
import random
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Callable, Optional, Sequence, TypeVar

from stock_forecaster.config import AppConfig, resolve_path
from stock_forecaster.errors import DataLoadError, ProviderError
from stock_forecaster.forecast.engine import fallback_forecast, forecast
from stock_forecaster.ingestion.providers import NewsProvider, PriceHistoryProvider, QuoteProvider
from stock_forecaster.ingestion.synthetic import SeedTable, SyntheticMarketData, load_seed_table
from stock_forecaster.models.forecast import ForecastResult
from stock_forecaster.models.market import PricePoint, Quote
from stock_forecaster.models.news import NewsItem

logger = logging.getLogger(__name__)

T = TypeVar("T")


def forecast_with_deadline(
    price_history: Sequence[PricePoint],
    news_items: Sequence[NewsItem],
    current_price: float,
    timeout_seconds: float,
    rng: Optional[random.Random] = None,
    config: Optional[AppConfig] = None,
    quote: Optional[Quote] = None,
) -> ForecastResult:
    """Run ``forecast()`` with a caller-level deadline.

    Args:
        price_history:   Price points, oldest first.
        news_items:      News items, most recent first.
        current_price:   Anchor price.
        timeout_seconds: Maximum wait for the full forecast.
        rng:             Randomness for the full forecast.
        config:          Application config; defaults to ``AppConfig()``.
        quote:           Quote behind ``current_price``, for provenance.

    Returns:
        The full forecast, or the fallback-path forecast if the deadline passed.
    """
    cfg = config or AppConfig()
    pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="forecast-deadline")
    try:
        future = pool.submit(
            forecast, price_history, news_items, current_price, rng, cfg, quote
        )
        try:
            return future.result(timeout=timeout_seconds)
        except FutureTimeoutError:
            logger.warning(
                "Forecast exceeded %.2fs deadline; returning fallback-path output",
                timeout_seconds,
            )
            # The abandoned worker may still be drawing from ``rng``.
            return fallback_forecast(
                current_price, news_items, random.Random(cfg.seed), cfg, quote, price_history
            )
    finally:
        pool.shutdown(wait=False, cancel_futures=True)


class PredictionPipeline:
    """Collects inputs for a symbol and produces its forecast.

    Usage::

        pipeline = PredictionPipeline.from_config(config)
        result = pipeline.run("AAPL")

    Attributes:
        config: The application configuration.
        fallback: Synthetic provider used whenever a live source is unavailable.
        price_provider, news_provider, quote_provider: Optional live providers.
    """

    def __init__(
        self,
        config: AppConfig,
        fallback: SyntheticMarketData,
        price_provider: Optional[PriceHistoryProvider] = None,
        news_provider: Optional[NewsProvider] = None,
        quote_provider: Optional[QuoteProvider] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.config = config
        self.fallback = fallback
        self.price_provider = price_provider
        self.news_provider = news_provider
        self.quote_provider = quote_provider
        self.rng = rng or random.Random(config.seed)

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        price_provider: Optional[PriceHistoryProvider] = None,
        news_provider: Optional[NewsProvider] = None,
        quote_provider: Optional[QuoteProvider] = None,
    ) -> "PredictionPipeline":
        """Build a pipeline whose fallback provider uses ``data.seed_file``.

        A missing or unreadable seed file degrades to an empty ``SeedTable``
        (every symbol then draws a random base price).
        """
        try:
            seed_table = load_seed_table(resolve_path(config.data.seed_file))
        except DataLoadError as exc:
            logger.warning("Seed table unavailable, using empty table: %s", exc)
            seed_table = SeedTable()

        return cls(
            config=config,
            fallback=SyntheticMarketData(
                seed_table,
                rng=random.Random(config.seed),
                label_threshold=config.sentiment.label_threshold,
            ),
            price_provider=price_provider,
            news_provider=news_provider,
            quote_provider=quote_provider,
            rng=random.Random(config.seed),
        )

    def run(self, symbol: str) -> ForecastResult:
        """Forecast ``symbol`` from provider data (or synthetic fallbacks)."""
        symbol = symbol.strip().upper()
        data = self.config.data

        quote = self._fetch(
            "quote", symbol,
            self.quote_provider.get_quote if self.quote_provider else None,
            self.fallback.get_quote,
        )
        history = self._fetch(
            "price history", symbol,
            self.price_provider.get_price_history if self.price_provider else None,
            self.fallback.get_price_history,
            data.lookback_days,
        )
        news = self._fetch(
            "news", symbol,
            self.news_provider.get_news if self.news_provider else None,
            self.fallback.get_news,
            data.news_limit,
        )

        logger.info(
            "Inputs for %s | price=%.2f bars=%d news=%d", symbol, quote.price, len(history), len(news)
        )
        return self.run_inputs(history, news, quote.price, quote=quote)

    def run_inputs(
        self,
        price_history: Sequence[PricePoint],
        news_items: Sequence[NewsItem],
        current_price: float,
        quote: Optional[Quote] = None,
    ) -> ForecastResult:
        """Forecast from already-collected inputs under the configured deadline."""
        return forecast_with_deadline(
            price_history,
            news_items,
            current_price,
            timeout_seconds=self.config.forecast.deadline_seconds,
            rng=self.rng,
            config=self.config,
            quote=quote,
        )

    def _fetch(
        self,
        what: str,
        symbol: str,
        live: Optional[Callable[..., T]],
        fallback: Callable[..., T],
        *args,
    ) -> T:
        """Call ``live`` and fall back to ``fallback`` on failure or empty output."""
        if live is not None:
            try:
                value = live(symbol, *args)
            except (ProviderError, OSError, ValueError) as exc:
                logger.warning("Live %s for %s failed, using synthetic data: %s", what, symbol, exc)
            else:
                if value:
                    return value
                logger.warning("Live %s for %s was empty, using synthetic data", what, symbol)
        return fallback(symbol, *args)
