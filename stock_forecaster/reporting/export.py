"""
Export helpers for forecast results.

All functions write to disk and return the written ``Path``.
``export_to_csv`` / ``export_to_json`` accept generic data so they stay
decoupled from the forecast shape; ``flatten_forecast_for_export()`` is the
adapter that turns a ``ForecastResult`` into flat rows (one per day, factors
as separate columns) that load directly in a spreadsheet.
"""

from __future__ import annotations

import csv
import json
from pathlib import Path

from stock_forecaster.models.forecast import ForecastResult

FORECAST_CSV_COLUMNS: list[str] = [
    "symbol",
    "day",
    "price",
    "confidence",
    "current_price",
    "change_pct",
    "technical",
    "sentiment",
    "trend",
    "ml",
    "volume",
    "rsi",
    "macd",
    "sentiment_score",
    "path",
]


def export_to_csv(
    records: list[dict],
    path: Path,
    fieldnames: list[str] | None = None,
) -> Path:
    """Write ``records`` to a UTF-8 CSV file.

    Args:
        records:    List of row dicts.
        path:       Destination file path (parent dirs created if missing).
        fieldnames: Column order.  If None, uses the keys of the first record.

    Returns:
        ``path`` as written.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if not records:
        path.write_text("", encoding="utf-8")
        return path
    cols = fieldnames or list(records[0].keys())
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=cols, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(records)
    return path


def export_to_json(
    data: dict | list,
    path: Path,
) -> Path:
    """Write ``data`` to a pretty-printed JSON file (parent dirs created if missing)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, default=str), encoding="utf-8")
    return path


def forecast_to_dict(result: ForecastResult) -> dict:
    """Serialise a forecast with camelCase keys, as the HTTP layer returns it."""
    return result.model_dump(mode="json", by_alias=True)


def flatten_forecast_for_export(result: ForecastResult, symbol: str = "") -> list[dict]:
    """Flatten a ``ForecastResult`` into one row per forecast day.

    Each row carries the day's price and confidence, every factor as its own
    column, the anchor price, the percent change from it, and which path
    (``ensemble`` / ``fallback``) produced the forecast.

    Args:
        result: Forecast to flatten.
        symbol: Optional ticker to stamp on every row.

    Returns:
        List of flat row dicts keyed by ``FORECAST_CSV_COLUMNS``.
    """
    current = result.metadata.current_price
    path = result.metadata.data_quality.path

    rows: list[dict] = []
    for p in result.predictions:
        f = p.factors
        rows.append(
            {
                "symbol":          symbol,
                "day":             p.day,
                "price":           round(p.price, 4),
                "confidence":      round(p.confidence, 4),
                "current_price":   round(current, 4),
                "change_pct":      round((p.price - current) / current * 100.0, 4),
                "technical":       f.technical,
                "sentiment":       f.sentiment,
                "trend":           f.trend,
                "ml":              f.ml,
                "volume":          f.volume,
                "rsi":             f.rsi,
                "macd":            f.macd,
                "sentiment_score": f.sentiment_score,
                "path":            path,
            }
        )
    return rows
