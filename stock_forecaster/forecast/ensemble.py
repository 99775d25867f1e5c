"""
Ensemble price forecaster.

Two paths
---------
FALLBACK (fewer than ``min_history_points`` prices, default 5)
    price(d)      = current · (1 + (jitter + 0.01·sentiment) · d · 0.2)
                    floored at 0.8 · current;  jitter ~ U(-0.015, 0.015)
    confidence(d) = max(0.3, 0.7 - 0.05·d)

ENSEMBLE
    Indicators and the three statistical models are computed once (in
    parallel when ``forecast.parallel_fit`` is on) and reused for every day.
    For day d:

    ml          = 0.4·linear(N+d-1) + 0.4·regressor + 0.2·AR
    technical   = RSI term (±0.02 outside 30–70, else (50-RSI)/1000)
                  ± 0.01 by MACD histogram sign
    sentiment_w = 0.02·sentiment
    trend_w     = 0.1 · (p[N-1] - p[N-5]) / p[N-5] · exp(-0.1·d)
    traditional = current · (1 + technical + sentiment_w + trend_w)
    price       = max(0.5·ml + 0.5·traditional, 0.7·current)
    agreement   = 1 - |ml - traditional| / current
    confidence  = clamp(base · agreement · exp(-0.1·d), 0.2, 0.95)

    where base = 0.4·R² + 0.4·regressor accuracy + 0.2·AR accuracy.

The price floors stop a degenerate model from forecasting a collapse; the
confidence decays with the horizon because uncertainty compounds.
"""

from __future__ import annotations

import logging
import math
import random
from concurrent.futures import ThreadPoolExecutor
from typing import Sequence

from stock_forecaster.config import AppConfig
from stock_forecaster.indicators.technical import IndicatorSet, compute_indicators, price_change
from stock_forecaster.ml.bank import ModelBank, fit_model_bank
from stock_forecaster.models.forecast import ForecastFactors, Prediction
from stock_forecaster.models.market import PricePoint, close_prices

logger = logging.getLogger(__name__)

# Fallback path
FALLBACK_JITTER = 0.015
FALLBACK_SENTIMENT_WEIGHT = 0.01
FALLBACK_STEP = 0.2
FALLBACK_FLOOR = 0.8
FALLBACK_BASE_CONFIDENCE = 0.7
FALLBACK_CONFIDENCE_STEP = 0.05
FALLBACK_MIN_CONFIDENCE = 0.3

# Ensemble path
ML_SHARE = 0.5
PRICE_FLOOR = 0.7
SENTIMENT_WEIGHT = 0.02
TREND_WEIGHT = 0.1
TREND_LOOKBACK = 4  # compares p[N-1] with p[N-5]
HORIZON_DECAY = 0.1
MIN_CONFIDENCE = 0.2
MAX_CONFIDENCE = 0.95
RSI_OVERBOUGHT = 70.0
RSI_OVERSOLD = 30.0
RSI_EXTREME_SCORE = 0.02
MACD_SCORE = 0.01


def generate_predictions(
    history: Sequence[PricePoint],
    sentiment: float,
    current_price: float,
    rng: random.Random,
    config: AppConfig | None = None,
) -> list[Prediction]:
    """Produce exactly ``horizon_days`` predictions ordered by day.

    Args:
        history:       Price points, oldest first.
        sentiment:     Aggregated news sentiment in ``[-1, 1]``.
        current_price: Anchor price (must be > 0).
        rng:           Randomness for the fallback jitter and regressor init.
        config:        Application config; defaults to ``AppConfig()``.
    """
    cfg = config or AppConfig()
    horizon = cfg.forecast.horizon_days

    if len(history) < cfg.forecast.min_history_points:
        logger.debug(
            "Fallback path: %d price points < %d", len(history), cfg.forecast.min_history_points
        )
        return fallback_predictions(current_price, sentiment, rng, horizon)

    prices = close_prices(history)
    indicators, bank = _fit(history, prices, rng, cfg)

    technical = technical_score(indicators)
    sentiment_w = sentiment * SENTIMENT_WEIGHT
    short_term_trend = price_change(prices, TREND_LOOKBACK)
    base_confidence = bank.base_confidence

    predictions: list[Prediction] = []
    for day in range(1, horizon + 1):
        decay = math.exp(-HORIZON_DECAY * day)
        trend_w = short_term_trend * TREND_WEIGHT * decay
        traditional = current_price * (1.0 + technical + sentiment_w + trend_w)
        if not math.isfinite(traditional):
            logger.warning("Non-finite rule-based price on day %d; using fallback path", day)
            return fallback_predictions(current_price, sentiment, rng, horizon)

        ml = bank.predict(prices, day).blended
        if not math.isfinite(ml):
            logger.warning("Non-finite model blend on day %d; using rule-based price", day)
            ml = traditional

        price = max(ML_SHARE * ml + (1.0 - ML_SHARE) * traditional, current_price * PRICE_FLOOR)
        agreement = 1.0 - abs(ml - traditional) / current_price
        confidence = _clamp(base_confidence * agreement * decay, MIN_CONFIDENCE, MAX_CONFIDENCE)

        predictions.append(
            Prediction(
                day=day,
                price=price,
                confidence=confidence,
                factors=ForecastFactors(
                    technical=technical,
                    sentiment=sentiment_w,
                    trend=trend_w,
                    ml=ml,
                    volume=indicators.volume_signal,
                    rsi=indicators.rsi,
                    macd=indicators.macd.macd,
                    sentiment_score=sentiment,
                ),
            )
        )
    return predictions


def fallback_predictions(
    current_price: float,
    sentiment: float,
    rng: random.Random,
    horizon: int = 7,
) -> list[Prediction]:
    """Jittered, sentiment-tilted forecast used when history is too short."""
    sentiment_influence = sentiment * FALLBACK_SENTIMENT_WEIGHT
    predictions: list[Prediction] = []
    for day in range(1, horizon + 1):
        jitter = rng.uniform(-FALLBACK_JITTER, FALLBACK_JITTER)
        price = current_price * (1.0 + (jitter + sentiment_influence) * day * FALLBACK_STEP)
        predictions.append(
            Prediction(
                day=day,
                price=max(price, current_price * FALLBACK_FLOOR),
                confidence=max(
                    FALLBACK_MIN_CONFIDENCE,
                    FALLBACK_BASE_CONFIDENCE - day * FALLBACK_CONFIDENCE_STEP,
                ),
                factors=ForecastFactors(
                    sentiment=sentiment_influence,
                    trend=jitter,
                    sentiment_score=sentiment,
                ),
            )
        )
    return predictions


def technical_score(indicators: IndicatorSet) -> float:
    """RSI mean-reversion term plus the MACD histogram direction."""
    if indicators.rsi > RSI_OVERBOUGHT:
        score = -RSI_EXTREME_SCORE
    elif indicators.rsi < RSI_OVERSOLD:
        score = RSI_EXTREME_SCORE
    else:
        score = (50.0 - indicators.rsi) / 1000.0

    score += MACD_SCORE if indicators.macd.histogram > 0 else -MACD_SCORE
    return score


# ── Internal helpers ───────────────────────────────────────────────────────────


def _fit(
    history: Sequence[PricePoint],
    prices: list[float],
    rng: random.Random,
    cfg: AppConfig,
) -> tuple[IndicatorSet, ModelBank]:
    """Compute indicators and fit the model bank; join before returning."""
    if not cfg.forecast.parallel_fit:
        return (
            compute_indicators(history, cfg.indicators),
            fit_model_bank(prices, rng, cfg.models),
        )

    with ThreadPoolExecutor(max_workers=4, thread_name_prefix="forecast-fit") as pool:
        indicators_future = pool.submit(compute_indicators, history, cfg.indicators)
        bank = fit_model_bank(prices, rng, cfg.models, executor=pool)
        indicators = indicators_future.result()
    return indicators, bank


def _clamp(value: float, lower: float, upper: float) -> float:
    if math.isnan(value):
        return lower
    return max(lower, min(upper, value))
