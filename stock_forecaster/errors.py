"""
Exception hierarchy for the Stock Forecaster.

The forecasting core itself never raises for insufficient data: every
indicator and model has a defined fallback.  These exceptions cover the
edges: reading input files and talking to data providers.
"""

from __future__ import annotations


class ForecasterError(Exception):
    """Base class for all Stock Forecaster errors."""


class DataLoadError(ForecasterError):
    """An input file could not be read or has an unsupported shape."""


class ProviderError(ForecasterError):
    """A market-data provider failed to supply price history, news, or a quote."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
