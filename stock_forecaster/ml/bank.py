"""
Model bank: fit the linear trend, regressor, and AR(3) models together.

The three fits share no mutable state, so when an executor is supplied they
run as independent tasks and ``fit_model_bank`` joins on all three before
returning.  Without an executor they run sequentially; results are
identical either way, because only the regressor draws from the RNG.
"""

from __future__ import annotations

import logging
import random
from concurrent.futures import Executor
from dataclasses import dataclass
from typing import Sequence

from stock_forecaster.config import ModelsConfig
from stock_forecaster.ml.autoregressive import ARFit, fit_autoregressive
from stock_forecaster.ml.linear import LinearFit, fit_linear_regression
from stock_forecaster.ml.regressor import RegressorFit, fit_regressor, latest_features

logger = logging.getLogger(__name__)

LINEAR_WEIGHT = 0.4
REGRESSOR_WEIGHT = 0.4
AR_WEIGHT = 0.2


@dataclass(frozen=True)
class ModelBank:
    """The three fitted models for one forecast call."""

    linear: LinearFit
    regressor: RegressorFit
    autoregressive: ARFit

    @property
    def base_confidence(self) -> float:
        """Fit-quality blend: 0.4·R² + 0.4·regressor accuracy + 0.2·AR accuracy."""
        return (
            LINEAR_WEIGHT * self.linear.fit_quality
            + REGRESSOR_WEIGHT * self.regressor.fit_quality
            + AR_WEIGHT * self.autoregressive.fit_quality
        )

    def predict(self, prices: Sequence[float], day: int) -> "BankPrediction":
        """Model outputs for ``day`` days past the end of ``prices``.

        Only the linear trend depends on ``day``; the regressor and AR models
        give a one-step-ahead value that is reused across the horizon.
        """
        linear = self.linear.predict(len(prices) + day - 1)
        regressor = self.regressor.predict(latest_features(prices))
        autoregressive = self.autoregressive.predict(prices)
        return BankPrediction(linear=linear, regressor=regressor, autoregressive=autoregressive)


@dataclass(frozen=True)
class BankPrediction:
    """Raw per-model predictions plus the weighted blend."""

    linear: float
    regressor: float
    autoregressive: float

    @property
    def blended(self) -> float:
        return (
            LINEAR_WEIGHT * self.linear
            + REGRESSOR_WEIGHT * self.regressor
            + AR_WEIGHT * self.autoregressive
        )


def fit_model_bank(
    prices: Sequence[float],
    rng: random.Random,
    config: ModelsConfig | None = None,
    executor: Executor | None = None,
) -> ModelBank:
    """Fit all three models on ``prices`` (oldest first).

    Args:
        prices:   Close-price series.
        rng:      Source of the regressor's initial weights.
        config:   Training hyperparameters; defaults to ``ModelsConfig()``.
        executor: Optional executor to run the fits concurrently.

    Returns:
        Immutable ``ModelBank``.
    """
    cfg = config or ModelsConfig()
    series = list(prices)

    def _regressor() -> RegressorFit:
        return fit_regressor(
            series,
            rng,
            learning_rate=cfg.regressor_learning_rate,
            epochs=cfg.regressor_epochs,
            tolerance=cfg.regressor_tolerance,
        )

    def _autoregressive() -> ARFit:
        return fit_autoregressive(
            series,
            learning_rate=cfg.ar_learning_rate,
            iterations=cfg.ar_iterations,
        )

    if executor is None:
        bank = ModelBank(
            linear=fit_linear_regression(series),
            regressor=_regressor(),
            autoregressive=_autoregressive(),
        )
    else:
        linear_future = executor.submit(fit_linear_regression, series)
        regressor_future = executor.submit(_regressor)
        ar_future = executor.submit(_autoregressive)
        bank = ModelBank(
            linear=linear_future.result(),
            regressor=regressor_future.result(),
            autoregressive=ar_future.result(),
        )

    logger.debug(
        "Model bank fitted on %d prices | r2=%.3f reg_acc=%.3f ar_acc=%.3f",
        len(series), bank.linear.r_squared, bank.regressor.accuracy, bank.autoregressive.accuracy,
    )
    return bank
