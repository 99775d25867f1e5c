"""
Tests for the core ``forecast()`` entry point.

What we test
------------
1. End-to-end: rising 30-point series, current 129, no news → 7 predictions,
   day-1 confidence above day-7, every price ≥ 90.3.
2. End-to-end: 3-point series → fallback path, every price ≥ 0.8 × current.
3. Anchor price guard: zero / negative / NaN → configured default (100).
4. History hygiene: unordered input is sorted, duplicate timestamps and
   non-finite closes dropped; a NaN row in a price file never reaches the core.
5. Metadata: sentiment aggregate, DataQuality flags and counts, camelCase JSON.
6. Seeding: config.seed makes the default RNG reproducible.
7. fallback_forecast().
"""

from __future__ import annotations

import json
import logging
import math
import random

import pytest

from stock_forecaster.config import AppConfig
from stock_forecaster.forecast.engine import fallback_forecast, forecast, resolve_current_price
from stock_forecaster.ingestion.loaders import load_price_history
from stock_forecaster.models.market import PricePoint, Quote


def _quote(price: float = 129.0, real: bool = True) -> Quote:
    return Quote(
        symbol="aapl", price=price, high=price, low=price, open=price,
        previous_close=price, timestamp=1_700_000_000, is_real_data=real,
    )


# ── End-to-end scenarios ──────────────────────────────────────────────────────

class TestEndToEnd:
    def test_rising_series(self, rising_history, rng) -> None:
        result = forecast(rising_history, [], 129.0, rng=rng)
        preds = result.predictions
        assert len(preds) == 7
        assert [p.day for p in preds] == list(range(1, 8))
        assert preds[0].confidence > preds[6].confidence
        assert all(p.price >= 129.0 * 0.7 for p in preds)
        assert result.metadata.data_quality.path == "ensemble"

    def test_three_point_series(self, short_history, rng) -> None:
        result = forecast(short_history, [], 102.0, rng=rng)
        assert len(result.predictions) == 7
        assert all(p.price >= 102.0 * 0.8 for p in result.predictions)
        assert result.metadata.data_quality.path == "fallback"

    def test_empty_inputs(self, rng) -> None:
        result = forecast([], [], 50.0, rng=rng)
        assert len(result.predictions) == 7
        assert result.metadata.sentiment_score == 0.0
        assert result.metadata.data_quality.historical_points == 0

    def test_news_sentiment_in_metadata(self, rising_history, mixed_news, rng) -> None:
        result = forecast(rising_history, mixed_news, 129.0, rng=rng)
        assert result.metadata.sentiment_score > 0
        assert all(p.factors.sentiment_score == result.metadata.sentiment_score
                   for p in result.predictions)


# ── Anchor price ──────────────────────────────────────────────────────────────

class TestCurrentPrice:
    @pytest.mark.parametrize("bad", [0.0, -5.0, float("nan"), float("inf")])
    def test_unusable_price_uses_default(self, bad: float, rising_history, rng) -> None:
        result = forecast(rising_history, [], bad, rng=rng)
        assert result.metadata.current_price == 100.0
        assert all(p.price >= 70.0 for p in result.predictions)

    def test_resolve_keeps_valid_price(self, app_config) -> None:
        assert resolve_current_price(42.5, app_config) == 42.5


# ── History hygiene ───────────────────────────────────────────────────────────

class TestHistoryOrdering:
    def test_unordered_history_sorted(self, rising_history) -> None:
        ordered = forecast(rising_history, [], 129.0, rng=random.Random(6))
        shuffled = list(reversed(rising_history))
        unordered = forecast(shuffled, [], 129.0, rng=random.Random(6))
        assert ordered.predictions == unordered.predictions

    def test_duplicate_timestamps_dropped(self, rising_history, rng) -> None:
        result = forecast(rising_history + rising_history[-3:], [], 129.0, rng=rng)
        assert result.metadata.data_quality.historical_points == 30

    def test_non_finite_close_dropped(self, rising_history, rng) -> None:
        last = rising_history[-1]
        broken = PricePoint.model_construct(
            timestamp=last.timestamp + 86_400, open=129.0, high=130.0, low=128.0,
            close=float("nan"), volume=1_000_000.0, is_real_data=False,
        )
        result = forecast(rising_history + [broken], [], 129.0, rng=rng)
        assert result.metadata.data_quality.historical_points == 30
        assert result.metadata.data_quality.path == "ensemble"
        assert all(math.isfinite(p.price) for p in result.predictions)

    def test_nan_row_in_file_is_skipped(self, tmp_path, rng) -> None:
        rows = [
            {"t": 1_700_000_000 + i * 86_400, "o": 100.0 + i, "h": 101.0 + i,
             "l": 99.0 + i, "c": 100.0 + i, "v": 1_000_000}
            for i in range(30)
        ]
        rows[-1]["c"] = float("nan")
        path = tmp_path / "prices.json"
        path.write_text(json.dumps(rows), encoding="utf-8")

        history = load_price_history(path)
        result = forecast(history, [], 129.0, rng=rng)
        assert len(history) == 29
        assert len(result.predictions) == 7
        assert all(math.isfinite(p.price) for p in result.predictions)


# ── Metadata ──────────────────────────────────────────────────────────────────

class TestMetadata:
    def test_data_quality_synthetic(self, rising_history, mixed_news, rng) -> None:
        dq = forecast(rising_history, mixed_news, 129.0, rng=rng).metadata.data_quality
        assert dq.has_real_stock is False
        assert dq.has_real_historical is False
        assert dq.has_real_news is False
        assert dq.historical_points == 30
        assert dq.news_articles == 10

    def test_data_quality_real(self, history_factory, rng) -> None:
        history = history_factory([100.0 + i for i in range(10)], is_real_data=True)
        dq = forecast(history, [], 109.0, rng=rng, quote=_quote(109.0)).metadata.data_quality
        assert dq.has_real_stock is True
        assert dq.has_real_historical is True

    def test_camel_case_json(self, rising_history, rng) -> None:
        payload = forecast(rising_history, [], 129.0, rng=rng).model_dump(by_alias=True)
        assert set(payload) == {"predictions", "metadata"}
        assert set(payload["metadata"]) == {"sentimentScore", "currentPrice", "dataQuality"}
        assert set(payload["predictions"][0]) == {"day", "price", "confidence", "factors"}
        assert "sentimentScore" in payload["predictions"][0]["factors"]
        assert "historicalPoints" in payload["metadata"]["dataQuality"]

    def test_logs_summary(self, rising_history, rng, caplog) -> None:
        with caplog.at_level(logging.INFO, logger="stock_forecaster.forecast.engine"):
            forecast(rising_history, [], 129.0, rng=rng)
        assert any("Forecast | path=ensemble" in r.getMessage() for r in caplog.records)


# ── Seeding / fallback_forecast ───────────────────────────────────────────────

class TestSeedingAndFallback:
    def test_config_seed_reproducible(self, short_history) -> None:
        cfg = AppConfig(seed=123)
        a = forecast(short_history, [], 100.0, config=cfg)
        b = forecast(short_history, [], 100.0, config=cfg)
        assert a == b

    def test_fallback_forecast(self, rising_history, mixed_news) -> None:
        result = fallback_forecast(
            129.0, mixed_news, rng=random.Random(1), price_history=rising_history
        )
        dq = result.metadata.data_quality
        assert dq.path == "fallback"
        assert dq.historical_points == 30
        assert dq.news_articles == 10
        assert all(0.3 <= p.confidence <= 0.7 for p in result.predictions)
        assert all(p.factors.ml == 0.0 for p in result.predictions)
