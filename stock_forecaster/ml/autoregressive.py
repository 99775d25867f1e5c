"""
AR(3) model fitted by batch gradient descent.

    p̂(t) = c1·p(t-1) + c2·p(t-2) + c3·p(t-3)

There is no intercept, so the coefficients are scale-invariant: training on
mean-normalised prices gives the same coefficients the raw series would if
gradient descent were stable there.  Normalising keeps a 0.001 learning rate
convergent for any price level.

Coefficients start at zero; each iteration applies the gradient of the mean
squared error over all rows.  Accuracy is ``1 - mean(|p̂ - p| / p)`` over the
training rows (rows with ``p == 0`` are skipped), clamped to ``[0, 1]``.

Fewer than 10 prices (or a non-finite fit) yields the fallback coefficients
``[0.5, 0.3, 0.2]`` with accuracy 0.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Sequence

logger = logging.getLogger(__name__)

ORDER = 3
MIN_PRICES = 10
FALLBACK_COEFFICIENTS = (0.5, 0.3, 0.2)


@dataclass(frozen=True)
class ARFit:
    """AR(3) coefficients, most recent lag first."""

    coefficients: tuple[float, float, float]
    accuracy: float
    is_fallback: bool = False

    @property
    def parameters(self) -> list[float]:
        return list(self.coefficients)

    @property
    def fit_quality(self) -> float:
        return self.accuracy

    def predict(self, prices: Sequence[float]) -> float:
        """Next value after ``prices`` (oldest first) from its last three points."""
        recent = list(reversed(prices[-ORDER:]))
        return sum(c * p for c, p in zip(self.coefficients, recent))


def fallback_fit() -> ARFit:
    return ARFit(coefficients=FALLBACK_COEFFICIENTS, accuracy=0.0, is_fallback=True)


def build_design_matrix(prices: Sequence[float]) -> list[tuple[list[float], float]]:
    """Rows ``([p(t-1), p(t-2), p(t-3)], p(t))`` for every ``t >= 3``."""
    return [
        ([float(prices[t - 1]), float(prices[t - 2]), float(prices[t - 3])], float(prices[t]))
        for t in range(ORDER, len(prices))
    ]


def fit_autoregressive(
    prices: Sequence[float],
    learning_rate: float = 0.001,
    iterations: int = 1000,
) -> ARFit:
    """Fit AR(3) coefficients to ``prices`` (oldest first)."""
    if len(prices) < MIN_PRICES:
        logger.debug("AR fallback: %d prices < %d", len(prices), MIN_PRICES)
        return fallback_fit()

    scale = sum(abs(p) for p in prices) / len(prices)
    if scale == 0:
        return fallback_fit()

    rows = [([v / scale for v in x], y / scale) for x, y in build_design_matrix(prices)]
    n = len(rows)
    coefficients = [0.0] * ORDER

    for _ in range(iterations):
        gradient = [0.0] * ORDER
        for x, y in rows:
            error = sum(c * v for c, v in zip(coefficients, x)) - y
            for j in range(ORDER):
                gradient[j] += error * x[j]
        for j in range(ORDER):
            coefficients[j] -= learning_rate * 2.0 * gradient[j] / n

    if not all(math.isfinite(c) for c in coefficients):
        logger.warning("AR training diverged; using fallback coefficients")
        return fallback_fit()

    relative_errors = [
        abs(sum(c * v for c, v in zip(coefficients, x)) - y) / abs(y)
        for x, y in rows
        if y != 0
    ]
    if relative_errors:
        accuracy = max(0.0, min(1.0, 1.0 - sum(relative_errors) / len(relative_errors)))
    else:
        accuracy = 0.0

    logger.debug("AR fit: coefficients=%s accuracy=%.3f", [round(c, 4) for c in coefficients], accuracy)
    return ARFit(
        coefficients=(coefficients[0], coefficients[1], coefficients[2]),
        accuracy=accuracy,
    )
