"""
Ensemble forecasting — the core entry point.

Modules
-------
ensemble : generate_predictions() — fallback path for short histories,
           otherwise the ML + rule-based blend with decaying confidence.
engine   : forecast() — aggregates news sentiment, runs the ensemble, and
           assembles a ForecastResult with data-quality metadata.
"""

from stock_forecaster.forecast.engine import fallback_forecast, forecast

__all__ = ["fallback_forecast", "forecast"]
