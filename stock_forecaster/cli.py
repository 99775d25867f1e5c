"""
Stock Forecaster — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging (to stderr, so ``--json`` output stays clean).
  3. Load inputs from JSON files, or synthesize them for a symbol.
  4. Run the forecaster / scorer / indicator library.
  5. Report the result to stdout.

Install and run::

    pip install -e .
    stock-forecaster --help
    stock-forecaster validate-config
    stock-forecaster forecast AAPL --seed 42
    stock-forecaster forecast --history prices.json --news news.json --json
    stock-forecaster indicators TCS.NS
    stock-forecaster score-text "Shares surge after record profit"
"""

from __future__ import annotations

import json
import random
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="stock-forecaster",
    help="Stock price forecaster — technical indicators, news sentiment, ensemble models.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None, seed: Optional[int] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from stock_forecaster.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        config = load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except ValueError as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)

    if seed is not None:
        config = config.model_copy(update={"seed": seed})
    return config


def _configure_logging(config):
    """Set up logging from config."""
    from stock_forecaster.utils.logging import configure_logging
    configure_logging(config.logging, debug=config.debug)


def _load_history_or_exit(path: str):
    from stock_forecaster.errors import DataLoadError
    from stock_forecaster.ingestion.loaders import load_price_history

    try:
        return load_price_history(Path(path))
    except DataLoadError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)


def _load_news_or_exit(path: str, label_threshold: float):
    from stock_forecaster.errors import DataLoadError
    from stock_forecaster.ingestion.loaders import load_news

    try:
        return load_news(Path(path), label_threshold=label_threshold)
    except DataLoadError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    from stock_forecaster.config import resolve_path

    config = _load_config_or_exit(config_path)
    seed_path = resolve_path(config.data.seed_file)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Horizon:          {config.forecast.horizon_days} days")
    typer.echo(f"  Min history:      {config.forecast.min_history_points} points")
    typer.echo(f"  Deadline:         {config.forecast.deadline_seconds:.1f}s")
    typer.echo(f"  Parallel fit:     {config.forecast.parallel_fit}")
    typer.echo(f"  Sentiment decay:  {config.sentiment.decay}")
    typer.echo(f"  Seed file:        {seed_path}")
    typer.echo(f"  RNG seed:         {config.seed if config.seed is not None else '(random)'}")
    typer.echo(f"  Log level:        {config.logging.level}")
    typer.echo(f"  Debug mode:       {config.debug}")

    if not seed_path.exists():
        typer.echo("")
        typer.echo(f"  [WARN] Seed file not found: {seed_path} (synthetic data uses random bases)")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config is valid.")


@app.command("forecast")
def forecast_cmd(
    symbol: Optional[str] = typer.Argument(
        None,
        help="Ticker to forecast from synthetic data (e.g. AAPL, TCS.NS).",
    ),
    history_path: Optional[str] = typer.Option(
        None,
        "--history",
        help="JSON file of price bars (full or t/o/h/l/c/v keys).",
    ),
    news_path: Optional[str] = typer.Option(
        None,
        "--news",
        help="JSON file of news items (most recent first).",
    ),
    price: Optional[float] = typer.Option(
        None,
        "--price",
        help="Anchor price. Defaults to the last close in --history.",
    ),
    seed: Optional[int] = typer.Option(
        None,
        "--seed",
        help="RNG seed for reproducible output (overrides config).",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the forecast as camelCase JSON instead of a table.",
    ),
    output: Optional[str] = typer.Option(
        None,
        "--output",
        help="Also write the JSON forecast to this file.",
    ),
    csv_path: Optional[str] = typer.Option(
        None,
        "--csv",
        help="Also write one CSV row per forecast day to this file.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Forecast the next days' prices.

    With --history, forecasts from the given files.  Otherwise forecasts
    SYMBOL from synthetic market data.
    """
    from stock_forecaster.models.market import close_prices
    from stock_forecaster.pipeline.predict import PredictionPipeline
    from stock_forecaster.reporting.export import (
        FORECAST_CSV_COLUMNS,
        export_to_csv,
        export_to_json,
        flatten_forecast_for_export,
        forecast_to_dict,
    )
    from stock_forecaster.reporting.formatters import format_forecast_table

    if symbol is None and history_path is None:
        typer.echo("[ERROR] Provide a SYMBOL or --history.", err=True)
        raise typer.Exit(code=1)

    config = _load_config_or_exit(config_path, seed=seed)
    _configure_logging(config)

    pipeline = PredictionPipeline.from_config(config)
    label = (symbol or Path(history_path).stem).upper()

    if history_path is not None:
        history = _load_history_or_exit(history_path)
        news = _load_news_or_exit(news_path, config.sentiment.label_threshold) if news_path else []
        closes = close_prices(history)
        if price is not None:
            anchor = price
        elif closes:
            anchor = closes[-1]
        else:
            anchor = config.forecast.default_current_price
        result = pipeline.run_inputs(history, news, anchor)
    else:
        result = pipeline.run(symbol)

    payload = forecast_to_dict(result)

    if as_json:
        typer.echo(json.dumps(payload, indent=2))
    else:
        typer.echo(format_forecast_table(
            result, symbol=label, outlook_threshold=config.sentiment.outlook_threshold
        ))

    if output:
        written = export_to_json(payload, Path(output))
        typer.echo(f"[OK] JSON written to {written}", err=as_json)
    if csv_path:
        rows = flatten_forecast_for_export(result, symbol=label)
        written = export_to_csv(rows, Path(csv_path), fieldnames=FORECAST_CSV_COLUMNS)
        typer.echo(f"[OK] CSV written to {written}", err=as_json)


@app.command("score-text")
def score_text(
    text: str = typer.Argument(..., help="Headline or article text to score."),
    as_json: bool = typer.Option(False, "--json", help="Print label and score as JSON."),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Score free text with the finance sentiment lexicon."""
    from stock_forecaster.reporting.formatters import format_sentiment_result
    from stock_forecaster.sentiment.scorer import analyze_sentiment

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    result = analyze_sentiment(text, threshold=config.sentiment.label_threshold)
    if as_json:
        typer.echo(json.dumps({"sentiment": result.label, "score": result.score}))
    else:
        typer.echo(format_sentiment_result(text, result))


@app.command("indicators")
def indicators_cmd(
    symbol: Optional[str] = typer.Argument(
        None,
        help="Ticker to analyse from synthetic data.",
    ),
    history_path: Optional[str] = typer.Option(
        None,
        "--history",
        help="JSON file of price bars (full or t/o/h/l/c/v keys).",
    ),
    news_path: Optional[str] = typer.Option(
        None,
        "--news",
        help="JSON file of news items to summarise alongside the indicators.",
    ),
    seed: Optional[int] = typer.Option(
        None,
        "--seed",
        help="RNG seed for synthetic data (overrides config).",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Print RSI, MACD, Bollinger bands and volume signal for a price history."""
    from stock_forecaster.config import resolve_path
    from stock_forecaster.errors import DataLoadError
    from stock_forecaster.indicators.technical import compute_indicators
    from stock_forecaster.ingestion.synthetic import SeedTable, SyntheticMarketData, load_seed_table
    from stock_forecaster.models.market import close_prices
    from stock_forecaster.reporting.formatters import format_indicator_summary, format_news_summary
    from stock_forecaster.sentiment.scorer import aggregate_sentiment, summarize_news

    if symbol is None and history_path is None:
        typer.echo("[ERROR] Provide a SYMBOL or --history.", err=True)
        raise typer.Exit(code=1)

    config = _load_config_or_exit(config_path, seed=seed)
    _configure_logging(config)

    news = _load_news_or_exit(news_path, config.sentiment.label_threshold) if news_path else []
    if history_path is not None:
        history = _load_history_or_exit(history_path)
    else:
        try:
            seed_table = load_seed_table(resolve_path(config.data.seed_file))
        except DataLoadError as exc:
            typer.echo(f"[WARN] {exc}", err=True)
            seed_table = SeedTable()
        provider = SyntheticMarketData(
            seed_table,
            rng=random.Random(config.seed),
            label_threshold=config.sentiment.label_threshold,
        )
        history = provider.get_price_history(symbol, config.data.lookback_days)

    if not history:
        typer.echo("[ERROR] No valid price points to analyse.", err=True)
        raise typer.Exit(code=1)

    indicator_set = compute_indicators(history, config.indicators)
    typer.echo(format_indicator_summary(indicator_set, close_prices(history)[-1]))

    if news:
        aggregate = aggregate_sentiment(
            news,
            decay=config.sentiment.decay,
            default_score=config.sentiment.default_item_score,
        )
        typer.echo(format_news_summary(
            summarize_news(news), aggregate, config.sentiment.outlook_threshold
        ))


# ── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    app()
