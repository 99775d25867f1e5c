"""
stock_forecaster.reporting — terminal formatting and flat-file export.

Modules:
  formatters — ASCII tables for forecasts, indicators and sentiment.
  export     — CSV/JSON export helpers and the forecast row flattener.
"""
