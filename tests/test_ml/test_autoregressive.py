"""
Tests for the AR(3) model.

What we test
------------
1. Design matrix rows (most recent lag first).
2. Fallback for < 10 prices and an all-zero series.
3. Convergence on a flat series: coefficients sum to ≈ 1, accuracy ≈ 1.
4. predict() uses the last three prices, most recent first.
"""

from __future__ import annotations

import pytest

from stock_forecaster.ml.autoregressive import (
    FALLBACK_COEFFICIENTS,
    ARFit,
    build_design_matrix,
    fit_autoregressive,
)


class TestDesignMatrix:
    def test_rows(self) -> None:
        rows = build_design_matrix([1.0, 2.0, 3.0, 4.0, 5.0])
        assert rows == [([3.0, 2.0, 1.0], 4.0), ([4.0, 3.0, 2.0], 5.0)]

    def test_too_short(self) -> None:
        assert build_design_matrix([1.0, 2.0, 3.0]) == []


class TestFitAutoregressive:
    def test_fallback_below_ten_points(self) -> None:
        fit = fit_autoregressive([100.0] * 9)
        assert fit.is_fallback
        assert fit.coefficients == FALLBACK_COEFFICIENTS
        assert fit.accuracy == 0.0

    def test_zero_series_falls_back(self) -> None:
        assert fit_autoregressive([0.0] * 20).is_fallback

    def test_flat_series(self) -> None:
        fit = fit_autoregressive([100.0] * 30)
        assert not fit.is_fallback
        assert sum(fit.coefficients) == pytest.approx(1.0, abs=0.01)
        assert fit.accuracy > 0.99
        assert fit.predict([100.0] * 30) == pytest.approx(100.0, rel=0.01)

    def test_rising_series_tracks_level(self, rising_closes) -> None:
        fit = fit_autoregressive(rising_closes)
        assert 0.9 < fit.accuracy <= 1.0
        assert fit.predict(rising_closes) == pytest.approx(129.0, rel=0.05)

    def test_deterministic(self, rising_closes) -> None:
        assert fit_autoregressive(rising_closes) == fit_autoregressive(rising_closes)


class TestPredict:
    def test_most_recent_first(self) -> None:
        fit = ARFit(coefficients=(1.0, 0.0, 0.0), accuracy=1.0)
        assert fit.predict([1.0, 2.0, 3.0]) == 3.0

    def test_fallback_coefficients(self) -> None:
        fit = ARFit(coefficients=FALLBACK_COEFFICIENTS, accuracy=0.0)
        assert fit.predict([1.0, 2.0, 3.0]) == pytest.approx(0.5 * 3 + 0.3 * 2 + 0.2 * 1)

    def test_parameters(self) -> None:
        fit = ARFit(coefficients=(0.2, 0.3, 0.5), accuracy=0.7)
        assert fit.parameters == [0.2, 0.3, 0.5]
        assert fit.fit_quality == 0.7
