"""
Statistical model bank — three lightweight models retrained on every call.

Modules
-------
linear         : Closed-form OLS trend over (index, price); R² fit quality.
regressor      : Single-layer gradient-descent regressor on lagged prices;
                 needs an injected random.Random for weight initialisation.
autoregressive : AR(3) fitted by gradient descent.
bank           : fit_model_bank() — fits all three (optionally in parallel)
                 and returns an immutable ModelBank.

No weights are persisted.  Every fit is a pure function of the price series
(plus the RNG for the regressor), so seeded forecasts are reproducible.
"""
