"""Tests for stock_forecaster.reporting.export."""

from __future__ import annotations

import csv
import json
import random
from pathlib import Path

import pytest

from stock_forecaster.forecast.engine import forecast
from stock_forecaster.reporting.export import (
    FORECAST_CSV_COLUMNS,
    export_to_csv,
    export_to_json,
    flatten_forecast_for_export,
    forecast_to_dict,
)


@pytest.fixture
def result(rising_history):
    return forecast(rising_history, [], 129.0, rng=random.Random(0))


# ── export_to_csv / export_to_json ────────────────────────────────────────────


def test_export_to_csv_basic(tmp_path: Path) -> None:
    """Writes a valid CSV with correct headers and values."""
    records = [{"day": 1, "price": 101.5}, {"day": 2, "price": 102.0}]
    out = export_to_csv(records, tmp_path / "f.csv")

    with out.open(encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert len(rows) == 2
    assert rows[1]["price"] == "102.0"


def test_export_to_csv_custom_fieldnames(tmp_path: Path) -> None:
    """Custom fieldnames control column order; extra keys are ignored."""
    out = tmp_path / "cols.csv"
    export_to_csv([{"a": 1, "b": 2, "c": 3}], out, fieldnames=["c", "a"])
    assert out.read_text(encoding="utf-8").splitlines()[0] == "c,a"


def test_export_to_csv_empty_records(tmp_path: Path) -> None:
    """Empty records list writes an empty file without raising."""
    out = export_to_csv([], tmp_path / "empty.csv")
    assert out.read_text(encoding="utf-8") == ""


def test_export_creates_parent_dirs(tmp_path: Path) -> None:
    out = tmp_path / "nested" / "dir" / "output.json"
    export_to_json({"x": 1}, out)
    assert json.loads(out.read_text(encoding="utf-8")) == {"x": 1}


# ── Forecast adapters ─────────────────────────────────────────────────────────


def test_forecast_to_dict_camel_case(result) -> None:
    payload = forecast_to_dict(result)
    assert payload["metadata"]["currentPrice"] == 129.0
    assert payload["metadata"]["dataQuality"]["path"] == "ensemble"
    assert len(payload["predictions"]) == 7
    json.dumps(payload)


def test_flatten_one_row_per_day(result) -> None:
    rows = flatten_forecast_for_export(result, symbol="AAPL")
    assert [r["day"] for r in rows] == list(range(1, 8))
    assert set(rows[0]) == set(FORECAST_CSV_COLUMNS)
    assert all(r["symbol"] == "AAPL" for r in rows)
    assert all(r["path"] == "ensemble" for r in rows)


def test_flatten_change_pct(result) -> None:
    row = flatten_forecast_for_export(result)[0]
    expected = (result.predictions[0].price - 129.0) / 129.0 * 100.0
    assert row["change_pct"] == pytest.approx(expected, abs=1e-3)


def test_forecast_csv_round_trip_columns(result, tmp_path: Path) -> None:
    out = export_to_csv(
        flatten_forecast_for_export(result), tmp_path / "f.csv", fieldnames=FORECAST_CSV_COLUMNS
    )
    with out.open(encoding="utf-8") as f:
        reader = csv.DictReader(f)
        assert reader.fieldnames == FORECAST_CSV_COLUMNS
        assert len(list(reader)) == 7
