"""
Logging setup for the Stock Forecaster.

``configure_logging(config.logging, debug=config.debug)`` runs once at CLI
entry, before any forecast work.  Library modules only ever call
``logging.getLogger(__name__)``.

Handlers always write to stderr (or a file), never stdout: ``forecast --json``
and ``score-text --json`` print machine-readable payloads on stdout.

With ``json_format = true`` in ``[logging]`` each record is one JSON object::

    {"ts": "2026-02-24T15:00:00Z", "level": "INFO", "logger": "stock_forecaster.forecast.engine", "msg": "Forecast | ..."}
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from stock_forecaster.config import LoggingConfig

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# Attributes every LogRecord carries; anything else came from ``extra=``.
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__.keys()
) | {"message", "asctime"}


class JsonLineFormatter(logging.Formatter):
    """One JSON object per record: ``ts``, ``level``, ``logger``, ``msg``.

    ``extra=`` fields are merged in at the top level; ``exc`` holds a
    formatted traceback when one is attached.
    """

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: dict = {
            "ts": ts.strftime(LOG_DATE_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        payload.update(
            (key, val)
            for key, val in record.__dict__.items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        )
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def build_formatter(json_format: bool) -> logging.Formatter:
    if json_format:
        return JsonLineFormatter()
    return logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)


def resolve_level(config: "LoggingConfig", debug: bool = False) -> int:
    """``DEBUG`` when debug mode is on, otherwise the configured level."""
    if debug:
        return logging.DEBUG
    return getattr(logging, config.level.upper(), logging.INFO)


def configure_logging(config: "LoggingConfig", debug: bool = False) -> None:
    """Install stderr (and optional file) handlers on the root logger.

    Args:
        config: ``[logging]`` section of ``AppConfig``.
        debug:  ``AppConfig.debug``; forces ``DEBUG`` level so model fits and
                fallbacks are traced.
    """
    level = resolve_level(config, debug)
    formatter = build_formatter(config.json_format)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)

    logging.basicConfig(level=level, handlers=handlers, force=True)
