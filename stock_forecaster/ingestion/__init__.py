"""
Market-data collaborators for the forecasting core.

Modules
-------
providers : Protocols for price history, news and quote providers.
synthetic : SyntheticMarketData — seedable fallback provider driven by a SeedTable.
loaders   : JSON file loaders for price history and news.
"""
