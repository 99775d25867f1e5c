"""
Tests for logging setup.

What we test
------------
1. JsonLineFormatter: core fields, extra= fields, attached tracebacks.
2. resolve_level: configured level, debug override.
3. configure_logging: stderr handler, file handler with parent dir creation.
"""

from __future__ import annotations

import json
import logging
import sys

import pytest

from stock_forecaster.config import LoggingConfig
from stock_forecaster.utils.logging import (
    JsonLineFormatter,
    build_formatter,
    configure_logging,
    resolve_level,
)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def _record(msg: str = "hello %s", args=("world",), exc_info=None) -> logging.LogRecord:
    return logging.LogRecord(
        "stock_forecaster.test", logging.INFO, __file__, 1, msg, args, exc_info
    )


class TestJsonLineFormatter:
    def test_core_fields(self) -> None:
        payload = json.loads(JsonLineFormatter().format(_record()))
        assert payload["level"] == "INFO"
        assert payload["logger"] == "stock_forecaster.test"
        assert payload["msg"] == "hello world"
        assert payload["ts"].endswith("Z")

    def test_extra_fields_included(self) -> None:
        record = _record()
        record.symbol = "AAPL"
        payload = json.loads(JsonLineFormatter().format(record))
        assert payload["symbol"] == "AAPL"
        assert "args" not in payload

    def test_traceback_included(self) -> None:
        try:
            raise ValueError("boom")
        except ValueError:
            record = _record(exc_info=sys.exc_info())
        payload = json.loads(JsonLineFormatter().format(record))
        assert "ValueError: boom" in payload["exc"]

    def test_build_formatter(self) -> None:
        assert isinstance(build_formatter(True), JsonLineFormatter)
        assert not isinstance(build_formatter(False), JsonLineFormatter)


class TestResolveLevel:
    def test_configured_level(self) -> None:
        assert resolve_level(LoggingConfig(level="warning")) == logging.WARNING

    def test_debug_overrides(self) -> None:
        assert resolve_level(LoggingConfig(level="ERROR"), debug=True) == logging.DEBUG


class TestConfigureLogging:
    def test_stderr_handler(self, restore_root_logger) -> None:
        configure_logging(LoggingConfig(level="ERROR"))
        root = restore_root_logger
        assert root.level == logging.ERROR
        assert len(root.handlers) == 1
        assert root.handlers[0].stream is sys.stderr

    def test_file_handler(self, restore_root_logger, tmp_path) -> None:
        log_file = tmp_path / "logs" / "forecaster.log"
        configure_logging(LoggingConfig(level="INFO", log_file=str(log_file), json_format=True))

        logging.getLogger("stock_forecaster.test").info("Forecast | path=%s", "ensemble")
        for handler in restore_root_logger.handlers:
            handler.flush()

        line = log_file.read_text(encoding="utf-8").strip().splitlines()[-1]
        assert json.loads(line)["msg"] == "Forecast | path=ensemble"
