"""
Technical indicator library.

Every function is total: too-short input returns a documented neutral value
instead of raising, so the ensemble can always run.

Modules
-------
technical : rsi, ema, macd, bollinger_bands, volume_signal, price_change,
            and compute_indicators() which bundles them into an IndicatorSet.
"""
