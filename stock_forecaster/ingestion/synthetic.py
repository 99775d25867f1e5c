"""
Synthetic market data — the fallback provider.

Used whenever a live provider is missing or fails.  Every value it returns is
tagged ``is_real_data=False``.  All randomness comes from the injected
``random.Random``, so a seeded provider reproduces the same history, quote
and news.

Generation rules
----------------
Price history (``lookback_days`` bars, oldest first, one day apart):
  trend      = ±1 · U(0.02, 0.05) · progress          (progress 0 → 1)
  noise      = U(-0.02, 0.02)
  weekly     = sin(progress · 4π) · 0.01
  day_price  = base · (1 + trend + noise + weekly)
  intraday   = day_price · U(0.005, 0.02)
  open/close = day_price ± intraday/2;  high/low extend past the body
  volume     = base_volume · (1 + 5·|close-open|/open) · U(0.5, 1.5)

Quote: 60% of draws move ±2%, 30% ±5%, 10% ±10% from the base price.

News: ``limit`` items drawn from fixed headline templates, 6 hours apart,
scored on construction with the lexicon scorer.

Unknown symbols draw a base price and volume from a market-appropriate range
(``.NS`` listings trade at higher nominal prices and lower share volumes).
"""

from __future__ import annotations

import json
import logging
import math
import random
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Mapping, Optional

from stock_forecaster.errors import DataLoadError
from stock_forecaster.models.market import PricePoint, Quote
from stock_forecaster.models.news import NewsItem
from stock_forecaster.sentiment.scorer import DEFAULT_LABEL_THRESHOLD, score_news_item
from stock_forecaster.utils.time_utils import SECONDS_PER_HOUR, daily_timestamps, now_epoch

logger = logging.getLogger(__name__)

INDIAN_SUFFIX = ".NS"

# (low, span) for unknown symbols: value = low + U(0, 1) * span
_INDIAN_PRICE_RANGE = (500.0, 2000.0)
_US_PRICE_RANGE = (50.0, 300.0)
_INDIAN_VOLUME_RANGE = (500_000.0, 5_000_000.0)
_US_VOLUME_RANGE = (1_000_000.0, 20_000_000.0)

# (cumulative probability, max absolute percent move)
_QUOTE_MOVES: tuple[tuple[float, float], ...] = ((0.6, 2.0), (0.9, 5.0), (1.0, 10.0))

NEWS_SPACING_SECONDS = 6 * SECONDS_PER_HOUR

NEWS_TEMPLATES: tuple[tuple[str, str], ...] = (
    (
        "{company} Reports Strong Q3 Earnings, Beats Analyst Expectations",
        "{company} delivered exceptional quarterly results with revenue growth of 15% YoY "
        "and improved profit margins, surpassing Wall Street estimates.",
    ),
    (
        "{company} Announces Major AI Innovation Partnership",
        "The company unveiled a strategic partnership to integrate advanced AI technologies, "
        "positioning itself for future growth in emerging markets.",
    ),
    (
        "Analysts Upgrade {company} Stock Rating to 'Strong Buy'",
        "Multiple investment firms raised their price targets citing strong fundamentals, "
        "market leadership, and robust growth prospects.",
    ),
    (
        "{company} Faces Regulatory Challenges in Key Markets",
        "The company is navigating increased regulatory scrutiny which may impact operations "
        "and growth strategies in several regions.",
    ),
    (
        "{company} Stock Shows Volatility Amid Market Uncertainty",
        "Shares experienced fluctuations as investors weigh various market factors including "
        "inflation concerns and global economic indicators.",
    ),
    (
        "{company} Expands Global Operations with $2B Investment",
        "The company announced significant capital investment to expand manufacturing "
        "capabilities and enter new international markets.",
    ),
    (
        "{company} Commits to Carbon Neutrality by 2030",
        "New sustainability initiatives include renewable energy adoption and green technology "
        "development as part of ESG strategy.",
    ),
    (
        "Market Analysts Review {company} Performance Metrics",
        "Industry experts analyze recent performance indicators and provide outlook for the "
        "coming quarters based on market trends.",
    ),
    (
        "{company} Launches Revolutionary Product Line",
        "The company introduced innovative products featuring cutting-edge technology, "
        "expected to capture significant market share.",
    ),
    (
        "{company} Reports Supply Chain Disruptions Impact",
        "Global supply chain challenges have affected production schedules and may influence "
        "short-term financial performance.",
    ),
)


# ── Seed table ─────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class SeedTable:
    """Per-symbol reference data for synthetic generation.

    Attributes:
        base_prices: Symbol → typical price.
        base_volumes: Symbol → typical daily share volume.
        company_names: Symbol → display name used in news headlines.
    """

    base_prices: Mapping[str, float] = field(default_factory=dict)
    base_volumes: Mapping[str, float] = field(default_factory=dict)
    company_names: Mapping[str, str] = field(default_factory=dict)

    def base_price(self, symbol: str, rng: random.Random) -> float:
        if symbol in self.base_prices:
            return float(self.base_prices[symbol])
        low, span = _INDIAN_PRICE_RANGE if _is_indian(symbol) else _US_PRICE_RANGE
        return low + rng.random() * span

    def base_volume(self, symbol: str, rng: random.Random) -> float:
        if symbol in self.base_volumes:
            return float(self.base_volumes[symbol])
        low, span = _INDIAN_VOLUME_RANGE if _is_indian(symbol) else _US_VOLUME_RANGE
        return low + rng.random() * span

    def company_name(self, symbol: str) -> str:
        return self.company_names.get(symbol, symbol.removesuffix(INDIAN_SUFFIX))


def load_seed_table(path: Path) -> SeedTable:
    """Load a ``SeedTable`` from JSON.

    Expected shape::

        {"base_prices": {"AAPL": 175.5, ...},
         "base_volumes": {"AAPL": 50000000, ...},
         "company_names": {"AAPL": "Apple", ...}}

    Every key is optional.

    Raises:
        DataLoadError: If the file is missing, not valid JSON, or not an object.
    """
    path = Path(path)
    if not path.exists():
        raise DataLoadError(f"Seed file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
    except json.JSONDecodeError as exc:
        raise DataLoadError(f"Seed file is not valid JSON: {path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise DataLoadError(f"Seed file must contain a JSON object: {path}")

    table = SeedTable(
        base_prices={k.upper(): float(v) for k, v in raw.get("base_prices", {}).items()},
        base_volumes={k.upper(): float(v) for k, v in raw.get("base_volumes", {}).items()},
        company_names={k.upper(): str(v) for k, v in raw.get("company_names", {}).items()},
    )
    logger.debug(
        "Loaded seed table from %s | %d prices, %d volumes, %d names",
        path.name, len(table.base_prices), len(table.base_volumes), len(table.company_names),
    )
    return table


# ── Provider ───────────────────────────────────────────────────────────────────


class SyntheticMarketData:
    """Fallback provider implementing the price-history, news and quote protocols.

    Usage::

        provider = SyntheticMarketData(load_seed_table(path), rng=random.Random(42))
        history = provider.get_price_history("AAPL", 30)
        quote = provider.get_quote("AAPL")
        news = provider.get_news("AAPL", 8)

    Attributes:
        seed_table: Reference prices, volumes and company names.
        rng: Source of all randomness.
        clock: Returns "now" as epoch seconds; injectable for tests.
        label_threshold: Neutral dead band used when scoring generated news.
    """

    def __init__(
        self,
        seed_table: Optional[SeedTable] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], int] = now_epoch,
        label_threshold: float = DEFAULT_LABEL_THRESHOLD,
    ) -> None:
        self.seed_table = seed_table or SeedTable()
        self.rng = rng or random.Random()
        self.clock = clock
        self.label_threshold = label_threshold

    def get_price_history(self, symbol: str, lookback_days: int = 30) -> list[PricePoint]:
        """Generate ``lookback_days`` daily bars ending now."""
        symbol = symbol.strip().upper()
        rng = self.rng
        base_price = self.seed_table.base_price(symbol, rng)
        base_volume = self.seed_table.base_volume(symbol, rng)

        direction = 1.0 if rng.random() > 0.5 else -1.0
        strength = 0.02 + rng.random() * 0.03

        timestamps = daily_timestamps(self.clock(), lookback_days)
        last = max(len(timestamps) - 1, 1)

        points: list[PricePoint] = []
        for i, ts in enumerate(timestamps):
            progress = i / last
            trend = direction * strength * progress
            noise = (rng.random() - 0.5) * 0.04
            weekly = math.sin(progress * math.pi * 4) * 0.01
            day_price = base_price * (1.0 + trend + noise + weekly)

            intraday = day_price * (0.005 + rng.random() * 0.015)
            open_ = round(day_price + (rng.random() - 0.5) * intraday, 2)
            close = round(day_price + (rng.random() - 0.5) * intraday, 2)
            high = round(max(open_, close) + rng.random() * intraday, 2)
            low = round(min(open_, close) - rng.random() * intraday, 2)

            move = abs(close - open_) / open_ if open_ > 0 else 0.0
            volume = math.floor(base_volume * (1.0 + move * 5.0) * (0.5 + rng.random()))

            points.append(
                PricePoint(
                    timestamp=ts,
                    open=open_,
                    high=high,
                    low=low,
                    close=close,
                    volume=volume,
                    is_real_data=False,
                )
            )

        logger.debug("Synthesized %d bars for %s (base %.2f)", len(points), symbol, base_price)
        return points

    def get_quote(self, symbol: str) -> Quote:
        """Generate a quote as a move from the symbol's base price."""
        symbol = symbol.strip().upper()
        rng = self.rng
        base_price = self.seed_table.base_price(symbol, rng)

        draw = rng.random()
        max_move = next(bound for cutoff, bound in _QUOTE_MOVES if draw < cutoff)
        change_percent = (rng.random() - 0.5) * 2.0 * max_move

        change = base_price * change_percent / 100.0
        price = base_price + change
        volatility = abs(change) + base_price * (0.005 + rng.random() * 0.015)
        high = price + rng.random() * volatility
        low = price - rng.random() * volatility
        open_ = base_price + (rng.random() - 0.5) * volatility * 0.5

        return Quote(
            symbol=symbol,
            price=round(price, 2),
            change=round(change, 2),
            change_percent=round(change_percent, 2),
            high=round(high, 2),
            low=round(low, 2),
            open=round(open_, 2),
            previous_close=round(base_price, 2),
            timestamp=self.clock(),
            is_real_data=False,
        )

    def get_news(self, symbol: str, limit: int = 8) -> list[NewsItem]:
        """Generate ``limit`` scored news items, most recent first."""
        symbol = symbol.strip().upper()
        company = self.seed_table.company_name(symbol)
        now = self.clock()

        items: list[NewsItem] = []
        for i in range(limit):
            headline, summary = self.rng.choice(NEWS_TEMPLATES)
            items.append(
                score_news_item(
                    headline=headline.format(company=company),
                    summary=summary.format(company=company),
                    published_at=now - i * NEWS_SPACING_SECONDS,
                    url=f"https://example.com/news/{symbol.lower()}-{i}",
                    is_real_data=False,
                    threshold=self.label_threshold,
                )
            )
        return items


def _is_indian(symbol: str) -> bool:
    return symbol.upper().endswith(INDIAN_SUFFIX)
