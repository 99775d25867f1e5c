"""
ASCII terminal formatters for CLI commands.

All formatters take already-computed results and return plain multi-line
strings suitable for ``typer.echo()``.

No third-party dependencies (no ``rich``, no ``colorama``).

Data-quality banner
-------------------
Every forecast starts with a banner so readers can tell at a glance whether
the numbers rest on live or synthetic inputs::

  [LIVE] quote, history, news
  [SYNTHETIC] quote, history, news -- demo data, not market data
"""

from __future__ import annotations

from stock_forecaster.indicators.technical import IndicatorSet, bollinger_position
from stock_forecaster.models.forecast import DataQuality, ForecastResult
from stock_forecaster.sentiment.scorer import (
    DEFAULT_OUTLOOK_THRESHOLD,
    NewsSentimentSummary,
    SentimentResult,
    sentiment_outlook,
)


# ── Data-quality banner ───────────────────────────────────────────────────────


def format_data_quality_banner(quality: DataQuality) -> str:
    """Return a one-line live/synthetic indicator plus input counts."""
    sources = {
        "quote": quality.has_real_stock,
        "history": quality.has_real_historical,
        "news": quality.has_real_news,
    }
    live = [name for name, real in sources.items() if real]
    synthetic = [name for name, real in sources.items() if not real]

    parts: list[str] = []
    if live:
        parts.append(f"  [LIVE] {', '.join(live)}")
    if synthetic:
        parts.append(f"  [SYNTHETIC] {', '.join(synthetic)} -- demo data, not market data")
    parts.append(
        f"  Inputs: {quality.historical_points} price points, "
        f"{quality.news_articles} news articles ({quality.path} path)"
    )
    return "\n".join(parts)


# ── Forecast ──────────────────────────────────────────────────────────────────


def format_forecast_table(
    result: ForecastResult,
    symbol: str = "",
    outlook_threshold: float = DEFAULT_OUTLOOK_THRESHOLD,
) -> str:
    """Format a forecast as an ASCII table, one row per day::

        Day      Price   Change   Conf  Technical  Sentiment    Trend        ML
        ----------------------------------------------------------------------
          1     176.12   +0.35%   0.62    +0.0100    +0.0040  +0.0012    175.90

    Args:
        result: Forecast to display.
        symbol: Optional ticker for the header.
        outlook_threshold: Bullish/bearish cut-off (``sentiment.outlook_threshold``).

    Returns:
        Multi-line string.
    """
    meta = result.metadata
    current = meta.current_price

    lines: list[str] = []
    lines.append("")
    title = f"=== {symbol} Forecast ===" if symbol else "=== Forecast ==="
    lines.append(title)
    lines.append(f"  Current price:  {current:.2f}")
    lines.append(
        f"  Sentiment:      {meta.sentiment_score:+.3f} "
        f"({sentiment_outlook(meta.sentiment_score, outlook_threshold)})"
    )
    lines.append(f"  Avg confidence: {result.average_confidence:.1%}")
    lines.append(format_data_quality_banner(meta.data_quality))
    lines.append("")

    header = (
        f"  {'Day':>3}  {'Price':>10}  {'Change':>8}  {'Conf':>5}  "
        f"{'Technical':>9}  {'Sentiment':>9}  {'Trend':>8}  {'ML':>10}"
    )
    lines.append(header)
    lines.append("  " + "-" * (len(header) - 2))

    for p in result.predictions:
        f = p.factors
        change = (p.price - current) / current * 100.0
        lines.append(
            f"  {p.day:>3}  {p.price:>10.2f}  {change:>+7.2f}%  {p.confidence:>5.2f}  "
            f"{f.technical:>+9.4f}  {f.sentiment:>+9.4f}  {f.trend:>+8.4f}  {f.ml:>10.2f}"
        )

    if result.predictions:
        last = result.predictions[-1]
        total = (last.price - current) / current * 100.0
        lines.append("")
        lines.append(f"  Day {last.day} target: {last.price:.2f} ({total:+.2f}%)")

    return "\n".join(lines)


# ── Indicators ────────────────────────────────────────────────────────────────


def format_indicator_summary(indicators: IndicatorSet, last_price: float) -> str:
    """Format an ``IndicatorSet`` with short readings for each indicator."""
    rsi = indicators.rsi
    if rsi > 70:
        rsi_note = "overbought"
    elif rsi < 30:
        rsi_note = "oversold"
    else:
        rsi_note = "neutral"

    macd = indicators.macd
    bands = indicators.bollinger
    position = bollinger_position(last_price, bands)
    position_str = f"{position:.2f}" if position is not None else "n/a (flat or short history)"

    volume_note = {0.1: "above average", -0.1: "below average"}.get(
        indicators.volume_signal, "average"
    )

    lines = [
        "",
        "=== Technical Indicators ===",
        f"  Last close:     {last_price:.2f}",
        f"  RSI:            {rsi:.2f} ({rsi_note})",
        f"  MACD:           {macd.macd:+.4f}  signal {macd.signal:+.4f}  "
        f"histogram {macd.histogram:+.4f}",
        f"  Bollinger:      upper {bands.upper:.2f}  middle {bands.middle:.2f}  "
        f"lower {bands.lower:.2f}",
        f"  Band position:  {position_str}",
        f"  Volume signal:  {indicators.volume_signal:+.1f} ({volume_note})",
    ]
    return "\n".join(lines)


# ── Sentiment ─────────────────────────────────────────────────────────────────


def format_sentiment_result(text: str, result: SentimentResult) -> str:
    """Format a single-text lexicon score."""
    preview = text if len(text) <= 60 else text[:57] + "..."
    return "\n".join([
        f"  Text:   {preview}",
        f"  Label:  {result.label}",
        f"  Score:  {result.score:+.4f}",
    ])


def format_news_summary(
    summary: NewsSentimentSummary,
    aggregate: float,
    outlook_threshold: float = DEFAULT_OUTLOOK_THRESHOLD,
) -> str:
    """Format per-label news counts with percentages and the aggregate outlook."""
    lines = [
        "",
        "=== News Sentiment ===",
        f"  Articles:   {summary.total}",
    ]
    for label in ("positive", "negative", "neutral"):
        count = getattr(summary, label)
        lines.append(f"  {label.capitalize():<10}  {count:>3}  ({summary.percent(label):.0f}%)")
    outlook = sentiment_outlook(aggregate, outlook_threshold)
    lines.append(f"  Aggregate:  {aggregate:+.3f} ({outlook})")
    return "\n".join(lines)
