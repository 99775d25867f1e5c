"""
Ordinary least-squares linear trend over ``(index, price)``.

    slope     = (nΣxy - ΣxΣy) / (nΣx² - (Σx)²)
    intercept = (Σy - slope·Σx) / n
    R²        = 1 - SS_res / SS_tot, clamped to [0, 1]

A flat series has ``SS_tot == 0``; R² is reported as 0 there rather than
dividing by zero.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LinearFit:
    """Fitted trend line.  ``r_squared`` doubles as the fit quality."""

    slope: float
    intercept: float
    r_squared: float

    @property
    def parameters(self) -> list[float]:
        return [self.slope, self.intercept]

    @property
    def fit_quality(self) -> float:
        return self.r_squared

    def predict(self, index: float) -> float:
        """Trend value at position ``index`` (0 = first training point)."""
        return self.slope * index + self.intercept


def fit_linear_regression(prices: Sequence[float]) -> LinearFit:
    """Fit the OLS trend line; fewer than 2 points yields a flat line."""
    n = len(prices)
    if n < 2:
        return LinearFit(slope=0.0, intercept=float(prices[0]) if n else 0.0, r_squared=0.0)

    sum_x = n * (n - 1) / 2
    sum_x2 = (n - 1) * n * (2 * n - 1) / 6
    sum_y = sum(prices)
    sum_xy = sum(i * p for i, p in enumerate(prices))

    slope = (n * sum_xy - sum_x * sum_y) / (n * sum_x2 - sum_x * sum_x)
    intercept = (sum_y - slope * sum_x) / n

    mean_y = sum_y / n
    ss_tot = sum((p - mean_y) ** 2 for p in prices)
    ss_res = sum((p - (slope * i + intercept)) ** 2 for i, p in enumerate(prices))
    r_squared = 1.0 - ss_res / ss_tot if ss_tot > 0 else 0.0
    r_squared = max(0.0, min(1.0, r_squared))

    logger.debug("Linear fit: slope=%.6f intercept=%.4f r2=%.4f n=%d", slope, intercept, r_squared, n)
    return LinearFit(slope=slope, intercept=intercept, r_squared=r_squared)
