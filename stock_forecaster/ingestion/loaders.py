"""
JSON file loaders for price history and news.

Price history
-------------
A JSON array (or an object with a ``"data"`` array) of bars.  Each bar may use
full field names or the compact keys upstream chart feeds emit::

    {"timestamp": 1700000000, "open": 1.0, "high": 1.2, "low": 0.9, "close": 1.1, "volume": 5000}
    {"t": 1700000000, "o": 1.0, "h": 1.2, "l": 0.9, "c": 1.1, "v": 5000, "isRealData": true}

Rows are returned oldest first; out-of-order input is re-sorted.

News
----
A JSON array (or an object with a ``"news"`` array) of articles::

    {"headline": "...", "summary": "...", "datetime": 1700000000,
     "sentiment": "positive", "score": 0.4, "url": "...", "isRealData": false}

``published_at`` / ``publishedAt`` are accepted for ``datetime``;
``sentiment_label`` / ``sentimentLabel`` for ``sentiment``;
``sentiment_score`` / ``sentimentScore`` for ``score``.  Articles with no
label are scored with the lexicon scorer on load.  Items are returned
most recent first.

Invalid rows are skipped with a warning; an unreadable file raises
``DataLoadError``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from stock_forecaster.errors import DataLoadError
from stock_forecaster.models.market import PricePoint, validate_price_series
from stock_forecaster.models.news import NewsItem
from stock_forecaster.sentiment.scorer import DEFAULT_LABEL_THRESHOLD, score_news_item

logger = logging.getLogger(__name__)

_PRICE_KEYS: dict[str, tuple[str, ...]] = {
    "timestamp": ("timestamp", "t"),
    "open": ("open", "o"),
    "high": ("high", "h"),
    "low": ("low", "l"),
    "close": ("close", "c"),
    "volume": ("volume", "v"),
    "is_real_data": ("is_real_data", "isRealData"),
}

_NEWS_KEYS: dict[str, tuple[str, ...]] = {
    "published_at": ("published_at", "publishedAt", "datetime"),
    "sentiment_label": ("sentiment_label", "sentimentLabel", "sentiment"),
    "sentiment_score": ("sentiment_score", "sentimentScore", "score"),
    "is_real_data": ("is_real_data", "isRealData"),
}


def load_price_history(path: Path) -> list[PricePoint]:
    """Load OHLCV bars from a JSON file.

    Args:
        path: Path to the JSON file.

    Returns:
        Valid ``PricePoint`` rows, oldest first.

    Raises:
        DataLoadError: If the file is missing, not JSON, or not a list of rows.
    """
    rows = _read_rows(Path(path), container_key="data")

    points: list[PricePoint] = []
    for i, row in enumerate(rows):
        try:
            points.append(PricePoint(**_pick(row, _PRICE_KEYS)))
        except (ValueError, ValidationError, TypeError) as exc:
            logger.warning("Skipping price row %d in %s: %s", i, Path(path).name, exc)

    try:
        validate_price_series(points)
    except ValueError as exc:
        logger.warning("Re-sorting price history from %s: %s", Path(path).name, exc)
        by_ts = {p.timestamp: p for p in points}
        points = [by_ts[ts] for ts in sorted(by_ts)]

    logger.info("Loaded %d price points from %s", len(points), Path(path).name)
    return points


def load_news(path: Path, label_threshold: float = DEFAULT_LABEL_THRESHOLD) -> list[NewsItem]:
    """Load news items from a JSON file.

    Args:
        path: Path to the JSON file.
        label_threshold: Neutral dead band for items scored on load
            (``sentiment.label_threshold``).

    Returns:
        Valid ``NewsItem`` rows, most recent first.

    Raises:
        DataLoadError: If the file is missing, not JSON, or not a list of rows.
    """
    rows = _read_rows(Path(path), container_key="news")

    items: list[NewsItem] = []
    for i, row in enumerate(rows):
        try:
            items.append(_row_to_news_item(row, label_threshold))
        except (ValueError, ValidationError, TypeError) as exc:
            logger.warning("Skipping news row %d in %s: %s", i, Path(path).name, exc)

    items.sort(key=lambda n: n.published_at, reverse=True)
    logger.info("Loaded %d news items from %s", len(items), Path(path).name)
    return items


# ── Private helpers ────────────────────────────────────────────────────────────


def _read_rows(path: Path, container_key: str) -> list[Any]:
    if not path.exists():
        raise DataLoadError(f"Input file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
    except json.JSONDecodeError as exc:
        raise DataLoadError(f"Input file is not valid JSON: {path}: {exc}") from exc

    if isinstance(raw, dict) and isinstance(raw.get(container_key), list):
        raw = raw[container_key]
    if not isinstance(raw, list):
        raise DataLoadError(
            f"Expected a JSON array (or an object with a '{container_key}' array) in {path}"
        )
    if not raw:
        logger.warning("Input file has no rows: %s", path)
    return raw


def _pick(row: Any, keys: dict[str, tuple[str, ...]]) -> dict[str, Any]:
    """Map whichever alias is present in ``row`` to the canonical field name."""
    if not isinstance(row, dict):
        raise TypeError(f"Row must be a JSON object, got {type(row).__name__}.")
    picked: dict[str, Any] = {}
    for field_name, aliases in keys.items():
        for alias in aliases:
            if alias in row:
                picked[field_name] = row[alias]
                break
    return picked


def _row_to_news_item(row: Any, label_threshold: float) -> NewsItem:
    fields = _pick(row, _NEWS_KEYS)
    headline = row.get("headline") or ""
    if not headline:
        raise ValueError("Required field 'headline' is empty.")
    summary = row.get("summary") or ""
    url = row.get("url") or "#"

    label: Optional[str] = fields.get("sentiment_label")
    if label is None:
        return score_news_item(
            headline=headline,
            summary=summary,
            published_at=fields.get("published_at"),
            url=url,
            is_real_data=bool(fields.get("is_real_data", False)),
            threshold=label_threshold,
        )

    return NewsItem(
        headline=headline,
        summary=summary,
        url=url,
        **fields,
    )
