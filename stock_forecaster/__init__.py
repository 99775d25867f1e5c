"""Stock Forecaster — technical indicators, news sentiment and ensemble price forecasts."""

__version__ = "0.1.0"
