"""
News item model.

A ``NewsItem`` is pre-scored: the news provider runs the lexicon scorer on
``headline + " " + summary`` at ingestion time (see
``stock_forecaster.sentiment.scorer.score_news_item``).  The aggregator only
reads ``sentiment_label`` and ``sentiment_score``.

Lists of news items are consumed most-recent-first.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

SentimentLabel = Literal["positive", "negative", "neutral"]


class NewsItem(BaseModel):
    """A scored news headline.

    Attributes:
        headline: Article headline.
        summary: Short article summary (may be empty).
        published_at: Publication time as epoch seconds.
        sentiment_label: ``"positive"``, ``"negative"`` or ``"neutral"``.
        sentiment_score: Signed magnitude in ``[-1, 1]``, or ``None`` when the
            provider did not score the item.
        url: Link to the article.
        is_real_data: ``True`` if sourced from a live feed.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    headline: str
    summary: str = ""
    published_at: int
    sentiment_label: SentimentLabel = "neutral"
    sentiment_score: Optional[float] = None
    url: str = "#"
    is_real_data: bool = False

    @field_validator("sentiment_score")
    @classmethod
    def validate_score_range(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and not -1.0 <= v <= 1.0:
            raise ValueError(f"sentiment_score must be in [-1, 1], got {v}.")
        return v

    @property
    def text(self) -> str:
        """Headline and summary joined with a single space; this is the scored text."""
        return f"{self.headline} {self.summary}"
