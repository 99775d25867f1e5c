"""
Shared pytest fixtures for the Stock Forecaster test suite.

Provides:
  - ``make_history``: build a ``PricePoint`` series from close prices.
  - Sample series: rising (100 → 129), flat (100 × 30), short (3 points).
  - Sample news lists and a seeded ``random.Random``.
  - ``serial_config``: ``AppConfig`` with ``parallel_fit`` off.
"""

from __future__ import annotations

import random
from typing import Sequence

import pytest

from stock_forecaster.config import AppConfig, ForecastConfig
from stock_forecaster.models.market import PricePoint
from stock_forecaster.models.news import NewsItem
from stock_forecaster.utils.time_utils import SECONDS_PER_DAY, SECONDS_PER_HOUR

BASE_TS = 1_700_000_000


def make_history(
    closes: Sequence[float],
    volumes: Sequence[float] | None = None,
    start_ts: int = BASE_TS,
    is_real_data: bool = False,
) -> list[PricePoint]:
    """One bar per close, one day apart; open == close, high/low ±1%."""
    volumes = volumes or [1_000_000.0] * len(closes)
    return [
        PricePoint(
            timestamp=start_ts + i * SECONDS_PER_DAY,
            open=c,
            high=c * 1.01,
            low=c * 0.99,
            close=c,
            volume=v,
            is_real_data=is_real_data,
        )
        for i, (c, v) in enumerate(zip(closes, volumes))
    ]


def make_news(label: str, score: float | None, hours_ago: int = 0) -> NewsItem:
    return NewsItem(
        headline=f"{label} headline",
        summary="",
        published_at=BASE_TS - hours_ago * SECONDS_PER_HOUR,
        sentiment_label=label,
        sentiment_score=score,
    )


# ── Price series ──────────────────────────────────────────────────────────────

@pytest.fixture
def rising_closes() -> list[float]:
    """30 closes rising linearly from 100.00 to 129.00."""
    return [100.0 + i for i in range(30)]


@pytest.fixture
def rising_history(rising_closes: list[float]) -> list[PricePoint]:
    return make_history(rising_closes)


@pytest.fixture
def flat_history() -> list[PricePoint]:
    return make_history([100.0] * 30)


@pytest.fixture
def short_history() -> list[PricePoint]:
    return make_history([100.0, 101.0, 102.0])


# ── News ──────────────────────────────────────────────────────────────────────

@pytest.fixture
def mixed_news() -> list[NewsItem]:
    """10 items, most recent first: 7 positive then 3 negative."""
    positive = [make_news("positive", 0.6, hours_ago=i * 6) for i in range(7)]
    negative = [make_news("negative", -0.6, hours_ago=(7 + i) * 6) for i in range(3)]
    return positive + negative


# ── Config / randomness ───────────────────────────────────────────────────────

@pytest.fixture
def rng() -> random.Random:
    return random.Random(42)


@pytest.fixture
def app_config() -> AppConfig:
    return AppConfig()


@pytest.fixture
def serial_config() -> AppConfig:
    return AppConfig(forecast=ForecastConfig(parallel_fit=False))


@pytest.fixture
def history_factory():
    """``make_history`` as a fixture, for tests that need custom series."""
    return make_history


@pytest.fixture
def news_factory():
    """``make_news`` as a fixture."""
    return make_news
