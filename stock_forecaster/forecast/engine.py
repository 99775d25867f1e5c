"""
Core forecast entry point.

``forecast()`` is a pure function of its inputs plus the injected RNG:

  1. Anchor price: non-positive or non-finite → ``forecast.default_current_price``.
  2. Price history: non-finite closes dropped, sorted by timestamp, duplicate
     timestamps keep the last row.
  3. News sentiment: time-decayed aggregate (``sentiment.aggregate_sentiment``).
  4. Predictions: ``ensemble.generate_predictions``.
  5. Metadata: anchor price, sentiment, and ``DataQuality`` provenance flags.

It never raises for short or empty inputs; those take the fallback path.
"""

from __future__ import annotations

import logging
import math
import random
from typing import Sequence

from stock_forecaster.config import AppConfig
from stock_forecaster.forecast.ensemble import fallback_predictions, generate_predictions
from stock_forecaster.models.forecast import DataQuality, ForecastMetadata, ForecastResult
from stock_forecaster.models.market import PricePoint, Quote
from stock_forecaster.models.news import NewsItem
from stock_forecaster.sentiment.scorer import aggregate_sentiment

logger = logging.getLogger(__name__)


def forecast(
    price_history: Sequence[PricePoint],
    news_items: Sequence[NewsItem],
    current_price: float,
    rng: random.Random | None = None,
    config: AppConfig | None = None,
    quote: Quote | None = None,
) -> ForecastResult:
    """Produce a multi-day forecast from price history and news.

    Args:
        price_history: Price points, oldest first.
        news_items:    News items, most recent first.
        current_price: Anchor price for the forecast.
        rng:           Source of randomness; ``random.Random(config.seed)``
                       when omitted.
        config:        Application config; defaults to ``AppConfig()``.
        quote:         Quote the anchor price came from, for provenance only.

    Returns:
        ``ForecastResult`` with exactly ``forecast.horizon_days`` predictions.
    """
    cfg = config or AppConfig()
    rng = rng if rng is not None else random.Random(cfg.seed)
    anchor = resolve_current_price(current_price, cfg)
    history = _ordered_history(price_history)

    sentiment = aggregate_sentiment(
        news_items,
        decay=cfg.sentiment.decay,
        default_score=cfg.sentiment.default_item_score,
    )
    predictions = generate_predictions(history, sentiment, anchor, rng, cfg)
    path = "ensemble" if len(history) >= cfg.forecast.min_history_points else "fallback"

    result = ForecastResult(
        predictions=predictions,
        metadata=ForecastMetadata(
            sentiment_score=sentiment,
            current_price=anchor,
            data_quality=_data_quality(history, news_items, quote, path),
        ),
    )
    logger.info(
        "Forecast | path=%s price=%.2f sentiment=%+.3f points=%d news=%d avg_conf=%.3f",
        path, anchor, sentiment, len(history), len(news_items), result.average_confidence,
    )
    return result


def fallback_forecast(
    current_price: float,
    news_items: Sequence[NewsItem] = (),
    rng: random.Random | None = None,
    config: AppConfig | None = None,
    quote: Quote | None = None,
    price_history: Sequence[PricePoint] = (),
) -> ForecastResult:
    """Fallback-path forecast that skips indicators and model fitting.

    Used by the pipeline when the full forecast misses its deadline.
    ``price_history`` only feeds the provenance counts in ``DataQuality``.
    """
    cfg = config or AppConfig()
    rng = rng if rng is not None else random.Random(cfg.seed)
    anchor = resolve_current_price(current_price, cfg)
    sentiment = aggregate_sentiment(
        news_items,
        decay=cfg.sentiment.decay,
        default_score=cfg.sentiment.default_item_score,
    )
    predictions = fallback_predictions(anchor, sentiment, rng, cfg.forecast.horizon_days)
    return ForecastResult(
        predictions=predictions,
        metadata=ForecastMetadata(
            sentiment_score=sentiment,
            current_price=anchor,
            data_quality=_data_quality(price_history, news_items, quote, "fallback"),
        ),
    )


def resolve_current_price(current_price: float, config: AppConfig) -> float:
    """Return ``current_price``, or the configured default when it is unusable."""
    if isinstance(current_price, (int, float)) and math.isfinite(current_price) and current_price > 0:
        return float(current_price)
    logger.warning(
        "Unusable current price %r; anchoring at %.2f",
        current_price, config.forecast.default_current_price,
    )
    return config.forecast.default_current_price


# ── Internal helpers ───────────────────────────────────────────────────────────


def _ordered_history(points: Sequence[PricePoint]) -> list[PricePoint]:
    """Sort by timestamp; a repeated timestamp keeps the later row.

    Bars with a non-finite close (only reachable via ``model_construct``) are
    dropped.
    """
    finite = [p for p in points if math.isfinite(p.close)]
    if len(finite) != len(points):
        logger.warning("Dropped %d price points with a non-finite close", len(points) - len(finite))
    by_ts: dict[int, PricePoint] = {}
    for point in finite:
        by_ts[point.timestamp] = point
    ordered = [by_ts[ts] for ts in sorted(by_ts)]
    if len(ordered) != len(finite):
        logger.debug("Dropped %d duplicate price timestamps", len(finite) - len(ordered))
    return ordered


def _data_quality(
    history: Sequence[PricePoint],
    news_items: Sequence[NewsItem],
    quote: Quote | None,
    path: str,
) -> DataQuality:
    return DataQuality(
        has_real_stock=quote.is_real_data if quote is not None else False,
        has_real_historical=any(p.is_real_data for p in history),
        has_real_news=any(n.is_real_data for n in news_items),
        historical_points=len(history),
        news_articles=len(news_items),
        path=path,
    )
