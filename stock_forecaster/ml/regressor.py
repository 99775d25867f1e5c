"""
Single-layer gradient-descent regressor on lagged prices.

Model
-----
    features(t) = [p(t-1), p(t-2), (p(t-1) - p(t-2)) / p(t-2)]
    p̂(t)       = w · features(t) + b

Training
--------
- Weights start uniform in [-0.5, 0.5] from the injected ``random.Random``;
  the bias starts at 0.
- Price features and targets are divided by the series mean before training
  (``scale``) and predictions are multiplied back.  At raw price levels
  (hundreds to tens of thousands) a 0.01 learning rate diverges within a
  handful of epochs.
- Full-batch gradient descent on mean squared error, up to ``epochs``
  passes; stops early once the epoch's summed squared error (in scaled
  units) drops below ``tolerance``.

Accuracy
--------
Fraction of training rows whose relative error ``|p̂ - p| / p`` is under 5%.
This is in-sample accuracy (there is no hold-out split), so it overstates
out-of-sample skill.

Fallback
--------
Fewer than 5 prices or 5 training rows, a non-positive scale, or a
non-finite result yields ``weights=[0.1, 0.1, 0.1], bias=0, accuracy=0``.
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from typing import Sequence

logger = logging.getLogger(__name__)

MIN_PRICES = 5
MIN_ROWS = 5
ACCURACY_TOLERANCE = 0.05
FALLBACK_WEIGHTS = (0.1, 0.1, 0.1)


@dataclass(frozen=True)
class RegressorFit:
    """Trained weights.  ``accuracy`` doubles as the fit quality."""

    weights: tuple[float, float, float]
    bias: float
    accuracy: float
    scale: float = 1.0
    epochs_run: int = 0
    is_fallback: bool = False

    @property
    def parameters(self) -> list[float]:
        return [*self.weights, self.bias]

    @property
    def fit_quality(self) -> float:
        return self.accuracy

    def predict(self, features: Sequence[float]) -> float:
        """Forward pass on a raw (unscaled) feature vector."""
        scaled = _scale_features(features, self.scale)
        return _forward(self.weights, self.bias, scaled) * self.scale


def fallback_fit() -> RegressorFit:
    """The fixed low-confidence regressor used when training is impossible."""
    return RegressorFit(weights=FALLBACK_WEIGHTS, bias=0.0, accuracy=0.0, is_fallback=True)


def feature_vector(prev: float, prev2: float) -> list[float]:
    """``[p(t-1), p(t-2), relative change]``; change is 0 when ``p(t-2)`` is 0."""
    change = (prev - prev2) / prev2 if prev2 != 0 else 0.0
    return [prev, prev2, change]


def latest_features(prices: Sequence[float]) -> list[float]:
    """Feature vector built from the two most recent prices (predicts the next one)."""
    if len(prices) < 2:
        last = float(prices[-1]) if prices else 0.0
        return feature_vector(last, last)
    return feature_vector(prices[-1], prices[-2])


def build_training_rows(prices: Sequence[float]) -> list[tuple[list[float], float]]:
    """All ``(features(t), p(t))`` pairs for ``t >= 2``."""
    return [
        (feature_vector(prices[t - 1], prices[t - 2]), float(prices[t]))
        for t in range(2, len(prices))
    ]


def fit_regressor(
    prices: Sequence[float],
    rng: random.Random,
    learning_rate: float = 0.01,
    epochs: int = 100,
    tolerance: float = 0.01,
) -> RegressorFit:
    """Train the regressor on ``prices`` (oldest first)."""
    rows = build_training_rows(prices)
    if len(prices) < MIN_PRICES or len(rows) < MIN_ROWS:
        logger.debug("Regressor fallback: %d prices, %d rows", len(prices), len(rows))
        return fallback_fit()

    scale = sum(prices) / len(prices)
    if scale <= 0:
        logger.debug("Regressor fallback: non-positive price scale %.4f", scale)
        return fallback_fit()

    weights = [rng.uniform(-0.5, 0.5) for _ in range(3)]
    bias = 0.0
    scaled_rows = [(_scale_features(x, scale), y / scale) for x, y in rows]
    n = len(scaled_rows)

    epochs_run = 0
    for _ in range(epochs):
        epochs_run += 1
        grad_w = [0.0, 0.0, 0.0]
        grad_b = 0.0
        sse = 0.0
        for x, y in scaled_rows:
            error = _forward(weights, bias, x) - y
            sse += error * error
            for j in range(3):
                grad_w[j] += error * x[j]
            grad_b += error

        for j in range(3):
            weights[j] -= learning_rate * 2.0 * grad_w[j] / n
        bias -= learning_rate * 2.0 * grad_b / n

        if sse < tolerance:
            break

    if not all(math.isfinite(v) for v in (*weights, bias)):
        logger.warning("Regressor training diverged; using fallback weights")
        return fallback_fit()

    hits = 0
    for x, y in scaled_rows:
        if y != 0 and abs(_forward(weights, bias, x) - y) / abs(y) < ACCURACY_TOLERANCE:
            hits += 1
    accuracy = hits / n

    logger.debug(
        "Regressor fit: weights=%s bias=%.4f accuracy=%.3f epochs=%d",
        [round(w, 4) for w in weights], bias, accuracy, epochs_run,
    )
    return RegressorFit(
        weights=(weights[0], weights[1], weights[2]),
        bias=bias,
        accuracy=accuracy,
        scale=scale,
        epochs_run=epochs_run,
    )


# ── Internal helpers ───────────────────────────────────────────────────────────


def _scale_features(features: Sequence[float], scale: float) -> list[float]:
    # The relative-change feature is already dimensionless.
    return [features[0] / scale, features[1] / scale, features[2]]


def _forward(weights: Sequence[float], bias: float, x: Sequence[float]) -> float:
    return weights[0] * x[0] + weights[1] * x[1] + weights[2] * x[2] + bias
