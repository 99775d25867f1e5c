"""
Tests for the typer CLI.

What we test
------------
1. validate-config — success banner, missing config → exit 1.
2. forecast — synthetic symbol, --json output, file inputs with --csv and
   --output, argument validation, unreadable input → exit 1.
3. score-text — table and --json output.
4. indicators — from a history file (with news) and from a synthetic symbol.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from stock_forecaster.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch) -> None:
    monkeypatch.setenv("STOCK_FORECASTER_LOG_LEVEL", "ERROR")
    monkeypatch.delenv("STOCK_FORECASTER_SEED", raising=False)
    monkeypatch.delenv("STOCK_FORECASTER_DEBUG", raising=False)


@pytest.fixture
def history_file(tmp_path: Path) -> Path:
    rows = [
        {"t": 1_700_000_000 + i * 86_400, "o": 100.0 + i, "h": 101.0 + i,
         "l": 99.0 + i, "c": 100.0 + i, "v": 1_000_000}
        for i in range(30)
    ]
    path = tmp_path / "prices.json"
    path.write_text(json.dumps(rows), encoding="utf-8")
    return path


@pytest.fixture
def news_file(tmp_path: Path) -> Path:
    rows = [
        {"headline": "Shares surge on record profit", "summary": "", "datetime": 1_700_000_000},
        {"headline": "Analysts warn of risk", "summary": "", "datetime": 1_699_990_000},
    ]
    path = tmp_path / "news.json"
    path.write_text(json.dumps(rows), encoding="utf-8")
    return path


# ── validate-config ───────────────────────────────────────────────────────────

class TestValidateConfig:
    def test_default_config(self) -> None:
        result = runner.invoke(app, ["validate-config"])
        assert result.exit_code == 0
        assert "Configuration validated successfully." in result.output
        assert "Horizon:          7 days" in result.output
        assert "[OK] Config is valid." in result.output

    def test_full_dump(self) -> None:
        result = runner.invoke(app, ["validate-config", "--full"])
        assert result.exit_code == 0
        assert '"horizon_days": 7' in result.output

    def test_missing_config(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["validate-config", "--config", str(tmp_path / "x.toml")])
        assert result.exit_code == 1
        assert "[ERROR]" in result.output

    def test_invalid_config(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.toml"
        path.write_text("[indicators]\nmacd_fast = 30\n", encoding="utf-8")
        result = runner.invoke(app, ["validate-config", "--config", str(path)])
        assert result.exit_code == 1
        assert "Config validation failed" in result.output


# ── forecast ──────────────────────────────────────────────────────────────────

class TestForecast:
    def test_synthetic_symbol_table(self) -> None:
        result = runner.invoke(app, ["forecast", "AAPL", "--seed", "1"])
        assert result.exit_code == 0, result.output
        assert "=== AAPL Forecast ===" in result.output
        assert "[SYNTHETIC]" in result.output
        assert "Day 7 target:" in result.output

    def test_json_output(self) -> None:
        result = runner.invoke(app, ["forecast", "MSFT", "--seed", "1", "--json"])
        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert [p["day"] for p in payload["predictions"]] == list(range(1, 8))
        assert payload["metadata"]["dataQuality"]["newsArticles"] == 8

    def test_seeded_json_reproducible(self) -> None:
        a = runner.invoke(app, ["forecast", "TSLA", "--seed", "5", "--json"])
        b = runner.invoke(app, ["forecast", "TSLA", "--seed", "5", "--json"])
        assert json.loads(a.stdout)["predictions"] == json.loads(b.stdout)["predictions"]

    def test_file_inputs_with_exports(
        self, history_file: Path, news_file: Path, tmp_path: Path
    ) -> None:
        csv_out = tmp_path / "out" / "forecast.csv"
        json_out = tmp_path / "out" / "forecast.json"
        result = runner.invoke(app, [
            "forecast", "--history", str(history_file), "--news", str(news_file),
            "--seed", "2", "--csv", str(csv_out), "--output", str(json_out),
        ])
        assert result.exit_code == 0, result.output
        assert "=== PRICES Forecast ===" in result.output
        assert "Current price:  129.00" in result.output
        assert len(csv_out.read_text(encoding="utf-8").splitlines()) == 8
        payload = json.loads(json_out.read_text(encoding="utf-8"))
        assert payload["metadata"]["dataQuality"]["historicalPoints"] == 30
        assert payload["metadata"]["dataQuality"]["newsArticles"] == 2

    def test_explicit_price(self, history_file: Path) -> None:
        result = runner.invoke(app, [
            "forecast", "--history", str(history_file), "--price", "140", "--json",
        ])
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["metadata"]["currentPrice"] == 140.0

    def test_requires_symbol_or_history(self) -> None:
        result = runner.invoke(app, ["forecast"])
        assert result.exit_code == 1
        assert "Provide a SYMBOL or --history" in result.output

    def test_missing_history_file(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["forecast", "--history", str(tmp_path / "none.json")])
        assert result.exit_code == 1
        assert "[ERROR]" in result.output


# ── score-text / indicators ───────────────────────────────────────────────────

class TestScoreText:
    def test_table(self) -> None:
        result = runner.invoke(app, ["score-text", "Shares surge after record profit"])
        assert result.exit_code == 0
        assert "Label:  positive" in result.output

    def test_json(self) -> None:
        result = runner.invoke(app, ["score-text", "", "--json"])
        assert result.exit_code == 0
        assert json.loads(result.stdout) == {"sentiment": "neutral", "score": 0.0}


class TestIndicators:
    def test_from_history_file(self, history_file: Path, news_file: Path) -> None:
        result = runner.invoke(app, [
            "indicators", "--history", str(history_file), "--news", str(news_file),
        ])
        assert result.exit_code == 0, result.output
        assert "=== Technical Indicators ===" in result.output
        assert "Last close:     129.00" in result.output
        assert "=== News Sentiment ===" in result.output

    def test_sentiment_thresholds_from_config(
        self, history_file: Path, news_file: Path, tmp_path: Path
    ) -> None:
        config_file = tmp_path / "strict.toml"
        config_file.write_text(
            "[sentiment]\nlabel_threshold = 1.0\noutlook_threshold = 0.99\n", encoding="utf-8"
        )
        result = runner.invoke(app, [
            "indicators", "--history", str(history_file), "--news", str(news_file),
            "--config", str(config_file),
        ])
        assert result.exit_code == 0, result.output
        assert "Neutral       2  (100%)" in result.output
        assert "(neutral)" in result.output

    def test_synthetic_symbol(self) -> None:
        result = runner.invoke(app, ["indicators", "RELIANCE.NS", "--seed", "3"])
        assert result.exit_code == 0, result.output
        assert "RSI:" in result.output

    def test_requires_symbol_or_history(self) -> None:
        result = runner.invoke(app, ["indicators"])
        assert result.exit_code == 1
