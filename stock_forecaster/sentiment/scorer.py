"""
Lexicon sentiment scoring and time-decay aggregation.

Per-text score
--------------
    p, n   = positive / negative lexicon hits among lowercased tokens
    score  = (p - n) / max(total_tokens * 0.1, p + n)

The denominator dampens long texts with few sentiment words: one hit in a
100-token article scores 0.1, not 1.0.  Labels use a ±0.15 dead band so a
single stray word in a long summary stays neutral.

Aggregation
-----------
News lists arrive most-recent-first.  Item ``i`` gets weight ``exp(-decay*i)``
and contributes ``sign(label) * |score|`` (``|score|`` defaults to 0.5 when the
provider left the item unscored)::

    aggregate = Σ w_i * v_i / Σ w_i        (0.0 for an empty list)

Because ``|v_i| <= 1`` the aggregate is always in ``[-1, 1]``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

from stock_forecaster.models.news import NewsItem, SentimentLabel
from stock_forecaster.sentiment.lexicon import NEGATIVE_WORDS, POSITIVE_WORDS

DEFAULT_LABEL_THRESHOLD = 0.15
DEFAULT_DECAY = 0.1
DEFAULT_ITEM_SCORE = 0.5
DEFAULT_OUTLOOK_THRESHOLD = 0.1

_LABEL_SIGN: dict[str, int] = {"positive": 1, "negative": -1, "neutral": 0}


@dataclass(frozen=True)
class SentimentResult:
    """Label and signed magnitude for one piece of text."""

    label: SentimentLabel
    score: float


@dataclass(frozen=True)
class NewsSentimentSummary:
    """Label counts across a news list, with percentages of the total.

    Percentages are ``0.0`` for an empty list.
    """

    total: int
    positive: int
    negative: int
    neutral: int

    def percent(self, label: SentimentLabel) -> float:
        if self.total == 0:
            return 0.0
        return 100.0 * getattr(self, label) / self.total


def analyze_sentiment(
    text: str,
    threshold: float = DEFAULT_LABEL_THRESHOLD,
) -> SentimentResult:
    """Score free text against the finance lexicons.

    Args:
        text:      Any text; empty input is neutral.
        threshold: Dead band half-width for the neutral label.

    Returns:
        ``SentimentResult``. Positive scores are capped at 1, negative at -1.
    """
    tokens = text.lower().split()
    positive = sum(1 for t in tokens if t in POSITIVE_WORDS)
    negative = sum(1 for t in tokens if t in NEGATIVE_WORDS)

    hits = positive + negative
    if hits == 0:
        return SentimentResult("neutral", 0.0)

    score = (positive - negative) / max(len(tokens) * 0.1, hits)

    if score > threshold:
        return SentimentResult("positive", min(score, 1.0))
    if score < -threshold:
        return SentimentResult("negative", max(score, -1.0))
    return SentimentResult("neutral", score)


def score_news_item(
    headline: str,
    summary: str,
    published_at: int,
    url: str = "#",
    is_real_data: bool = False,
    threshold: float = DEFAULT_LABEL_THRESHOLD,
) -> NewsItem:
    """Build a scored ``NewsItem`` from raw article fields."""
    result = analyze_sentiment(f"{headline} {summary}", threshold=threshold)
    return NewsItem(
        headline=headline,
        summary=summary,
        published_at=published_at,
        sentiment_label=result.label,
        sentiment_score=result.score,
        url=url,
        is_real_data=is_real_data,
    )


def aggregate_sentiment(
    news_items: Sequence[NewsItem],
    decay: float = DEFAULT_DECAY,
    default_score: float = DEFAULT_ITEM_SCORE,
) -> float:
    """Collapse a most-recent-first news list into one scalar in ``[-1, 1]``."""
    if not news_items:
        return 0.0

    weighted = 0.0
    weight_sum = 0.0
    for i, item in enumerate(news_items):
        weight = math.exp(-decay * i)
        magnitude = abs(item.sentiment_score) if item.sentiment_score is not None else default_score
        weighted += _LABEL_SIGN[item.sentiment_label] * magnitude * weight
        weight_sum += weight

    return weighted / weight_sum if weight_sum > 0 else 0.0


def sentiment_outlook(
    score: float,
    threshold: float = DEFAULT_OUTLOOK_THRESHOLD,
) -> str:
    """Map an aggregate score to ``"bullish"``, ``"bearish"`` or ``"neutral"``."""
    if score > threshold:
        return "bullish"
    if score < -threshold:
        return "bearish"
    return "neutral"


def summarize_news(news_items: Sequence[NewsItem]) -> NewsSentimentSummary:
    """Count news items per sentiment label."""
    counts = {"positive": 0, "negative": 0, "neutral": 0}
    for item in news_items:
        counts[item.sentiment_label] += 1
    return NewsSentimentSummary(total=len(news_items), **counts)
