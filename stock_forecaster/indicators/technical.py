"""
Stateless technical indicators over a chronologically ordered close series.

Fallbacks for insufficient data
-------------------------------
  rsi              < period + 1 points   → 50.0 (neutral)
  ema              empty                 → 0.0
  macd             < slow (26) points    → all zeros
  bollinger_bands  < period points       → all zeros
  volume_signal    < window (5) points   → 0.0
  price_change     < lookback + 1 points → 0.0

Simplifications
---------------
- ``ema`` only walks the first ``min(len, 2 * period)`` prices.  It is a
  warm-up EMA anchored at the start of the window, not a full-series EMA.
- The MACD signal line is ``0.9 * macd`` rather than a 9-period EMA of the
  MACD history, so ``histogram`` is always ``0.1 * macd``.
- RSI uses simple averages over the last ``period`` transitions (no Wilder
  smoothing).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

from stock_forecaster.config import IndicatorConfig
from stock_forecaster.models.market import PricePoint, close_prices

NEUTRAL_RSI = 50.0
VOLUME_SPIKE_RATIO = 1.2
VOLUME_DRY_RATIO = 0.8
VOLUME_SIGNAL = 0.1
MACD_SIGNAL_RATIO = 0.9


@dataclass(frozen=True)
class MACDResult:
    """MACD line, simplified signal line, and histogram."""

    macd: float = 0.0
    signal: float = 0.0
    histogram: float = 0.0


@dataclass(frozen=True)
class BollingerBands:
    """Upper/middle/lower bands.  All zero when history is too short."""

    upper: float = 0.0
    middle: float = 0.0
    lower: float = 0.0

    @property
    def width(self) -> float:
        return self.upper - self.lower


@dataclass(frozen=True)
class IndicatorSet:
    """All indicators for one forecast call.  Recomputed every call."""

    rsi: float
    macd: MACDResult
    bollinger: BollingerBands
    volume_signal: float


def rsi(prices: Sequence[float], period: int = 14) -> float:
    """Relative Strength Index over the last ``period`` price changes.

    Returns:
        Value in ``[0, 100]``; 50 for short input, 100 when there were no losses.
    """
    if len(prices) < period + 1:
        return NEUTRAL_RSI

    gains = 0.0
    losses = 0.0
    for i in range(1, period + 1):
        change = prices[-i] - prices[-i - 1]
        if change > 0:
            gains += change
        else:
            losses += -change

    avg_gain = gains / period
    avg_loss = losses / period
    if avg_loss == 0:
        return 100.0
    return 100.0 - 100.0 / (1.0 + avg_gain / avg_loss)


def ema(prices: Sequence[float], period: int) -> float:
    """Exponential moving average seeded with the first price."""
    if not prices:
        return 0.0

    multiplier = 2.0 / (period + 1)
    value = float(prices[0])
    for i in range(1, min(len(prices), period * 2)):
        value = prices[i] * multiplier + value * (1.0 - multiplier)
    return value


def macd(prices: Sequence[float], fast: int = 12, slow: int = 26) -> MACDResult:
    """MACD = EMA(fast) - EMA(slow) with the simplified 0.9x signal line."""
    if len(prices) < slow:
        return MACDResult()

    line = ema(prices, fast) - ema(prices, slow)
    signal = line * MACD_SIGNAL_RATIO
    return MACDResult(macd=line, signal=signal, histogram=line - signal)


def bollinger_bands(
    prices: Sequence[float],
    period: int = 20,
    width: float = 2.0,
) -> BollingerBands:
    """SMA ± ``width`` population standard deviations over the last ``period``."""
    if len(prices) < period or period <= 0:
        return BollingerBands()

    window = prices[-period:]
    middle = sum(window) / period
    variance = sum((p - middle) ** 2 for p in window) / period
    std = math.sqrt(variance)
    return BollingerBands(
        upper=middle + width * std,
        middle=middle,
        lower=middle - width * std,
    )


def bollinger_position(price: float, bands: BollingerBands) -> float | None:
    """Where ``price`` sits inside the band: 0 = lower, 1 = upper.

    Returns ``None`` for a zero-width band (flat or too-short history).
    """
    if bands.width <= 0:
        return None
    return (price - bands.lower) / bands.width


def volume_signal(history: Sequence[PricePoint], window: int = 5) -> float:
    """+0.1 on a volume spike, -0.1 on a dry-up, else 0.

    Compares the latest bar's volume with the mean of the last ``window``
    bars (the latest bar included).
    """
    if len(history) < window or window <= 0:
        return 0.0

    volumes = [p.volume for p in history[-window:]]
    average = sum(volumes) / len(volumes)
    latest = volumes[-1]

    if latest > average * VOLUME_SPIKE_RATIO:
        return VOLUME_SIGNAL
    if latest < average * VOLUME_DRY_RATIO:
        return -VOLUME_SIGNAL
    return 0.0


def price_change(prices: Sequence[float], lookback: int) -> float:
    """Relative change between the last price and the one ``lookback`` points earlier.

    ``lookback=4`` compares ``prices[-1]`` with ``prices[-5]``.
    """
    if lookback <= 0 or len(prices) < lookback + 1:
        return 0.0
    base = prices[-lookback - 1]
    if base == 0:
        return 0.0
    return (prices[-1] - base) / base


def compute_indicators(
    history: Sequence[PricePoint],
    config: IndicatorConfig | None = None,
) -> IndicatorSet:
    """Compute every indicator the ensemble consumes, once."""
    cfg = config or IndicatorConfig()
    closes = close_prices(history)
    return IndicatorSet(
        rsi=rsi(closes, cfg.rsi_period),
        macd=macd(closes, cfg.macd_fast, cfg.macd_slow),
        bollinger=bollinger_bands(closes, cfg.bollinger_period, cfg.bollinger_width),
        volume_signal=volume_signal(history, cfg.volume_window),
    )
