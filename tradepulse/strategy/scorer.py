"""Signal scorer — combines indicator readings into a direction and confidence.

Pure function of the price series. Starts from a neutral score of 50 and
applies independent adjustments in a fixed order (RSI, MACD, Bollinger,
trend). Each adjustment that fires appends a reasoning token; the token
order is shown to end users as an ordered explanation.
"""

import math
from dataclasses import dataclass
from typing import Optional

from tradepulse.models.signal import Direction
from tradepulse.strategy.indicators import compute_indicators
from tradepulse.strategy.models import IndicatorSet, Trend

MIN_SERIES_LENGTH = 50

NEUTRAL_SCORE = 50
BUY_THRESHOLD = 65
SELL_THRESHOLD = 35
MAX_CONFIDENCE = 95

RSI_OVERSOLD = 30
RSI_OVERBOUGHT = 70
RSI_WEIGHT = 15
MACD_WEIGHT = 10
BOLLINGER_WEIGHT = 10
TREND_WEIGHT = 15


@dataclass(frozen=True)
class ScoreResult:
    """Outcome of scoring one price series."""

    direction: Direction
    confidence: int
    score: int
    reasoning: tuple[str, ...]
    indicators: IndicatorSet

    @property
    def reasoning_text(self) -> str:
        return ", ".join(self.reasoning)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves rounded up (2.5 → 3, -2.5 → -2)."""
    return int(math.floor(value + 0.5))


def confidence_for_score(score: float) -> tuple[Direction, int]:
    """Map a raw score to ``(direction, confidence)``.

    * score > 65 → BUY,  ``min(95, 60 + (score - 65) × 1.5)``
    * score < 35 → SELL, ``min(95, 60 + (35 - score) × 1.5)``
    * otherwise → NEUTRAL, ``50 - |score - 50| × 0.5``
    """
    if score > BUY_THRESHOLD:
        direction = Direction.BUY
        confidence = min(MAX_CONFIDENCE, 60 + (score - BUY_THRESHOLD) * 1.5)
    elif score < SELL_THRESHOLD:
        direction = Direction.SELL
        confidence = min(MAX_CONFIDENCE, 60 + (SELL_THRESHOLD - score) * 1.5)
    else:
        direction = Direction.NEUTRAL
        confidence = NEUTRAL_SCORE - abs(score - NEUTRAL_SCORE) * 0.5
    return direction, max(0, round_half_up(confidence))


def analyze_signal(
    prices: list[float],
    highs: Optional[list[float]] = None,
    lows: Optional[list[float]] = None,
) -> Optional[ScoreResult]:
    """Score a price series.

    Args:
        prices: Closing prices, oldest first.
        highs: Accepted for callers that carry them; not used by the score.
        lows: Accepted for callers that carry them; not used by the score.

    Returns:
        ``ScoreResult``, or ``None`` when fewer than 50 prices are given.
        Callers must apply their own fallback in that case.
    """
    if len(prices) < MIN_SERIES_LENGTH:
        return None

    indicators = compute_indicators(prices)
    score = NEUTRAL_SCORE
    reasoning: list[str] = []

    if indicators.rsi is not None:
        if indicators.rsi < RSI_OVERSOLD:
            score += RSI_WEIGHT
            reasoning.append(f"rsiOversold:{indicators.rsi:.1f}")
        elif indicators.rsi > RSI_OVERBOUGHT:
            score -= RSI_WEIGHT
            reasoning.append(f"rsiOverbought:{indicators.rsi:.1f}")

    if indicators.macd is not None:
        if indicators.macd > 0:
            score += MACD_WEIGHT
            reasoning.append(f"macdBullish:{indicators.macd:.4f}")
        else:
            score -= MACD_WEIGHT
            reasoning.append(f"macdBearish:{indicators.macd:.4f}")

    if indicators.bollinger is not None:
        price = prices[-1]
        if price > indicators.bollinger.upper:
            score -= BOLLINGER_WEIGHT
            reasoning.append(f"bollingerUpper:{price:.4f}")
        elif price < indicators.bollinger.lower:
            score += BOLLINGER_WEIGHT
            reasoning.append(f"bollingerLower:{price:.4f}")

    if indicators.trend == Trend.BULLISH:
        score += TREND_WEIGHT
        reasoning.append("trendBullish")
    elif indicators.trend == Trend.BEARISH:
        score -= TREND_WEIGHT
        reasoning.append("trendBearish")

    direction, confidence = confidence_for_score(score)
    return ScoreResult(
        direction=direction,
        confidence=confidence,
        score=score,
        reasoning=tuple(reasoning),
        indicators=indicators,
    )
