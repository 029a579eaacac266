"""Technical indicators — SMA, EMA, RSI, MACD, Bollinger Bands, Stochastic. Pure functions, no I/O.

Every function takes closing prices oldest-first and returns ``None``
when the series is too short for the indicator's lookback.
"""

import math
from typing import Optional

from tradepulse.strategy.models import BollingerBands, IndicatorSet, Trend


def calculate_sma(prices: list[float], period: int) -> Optional[float]:
    """Arithmetic mean of the last *period* prices."""
    if len(prices) < period:
        return None
    return sum(prices[-period:]) / period


def calculate_ema(prices: list[float], period: int) -> Optional[float]:
    """Calculate the latest Exponential Moving Average value.

    ``EMA_today = close × k + EMA_yesterday × (1 - k)`` with
    ``k = 2 / (period + 1)``.

    The EMA is seeded with the first price of the whole series, not with an
    SMA of the first *period* prices, so values differ slightly from the
    textbook EMA on short series.
    """
    if len(prices) < period:
        return None

    k = 2.0 / (period + 1)
    ema = prices[0]
    for price in prices[1:]:
        ema = price * k + ema * (1 - k)
    return ema


# ── RSI ──────────────────────────────────────────────────────────────────


def calculate_rsi(prices: list[float], period: int = 14) -> Optional[float]:
    """Calculate Wilder's Relative Strength Index for the latest price.

    Algorithm (Wilder-smoothed):
        1. delta = close[i] - close[i-1]
        2. Seed average gain/loss = mean of the first *period* deltas.
        3. Subsequent: avg = (prev_avg × (period-1) + current) / period
        4. RSI = 100 - 100 / (1 + avg_gain / avg_loss)

    Returns exactly 100 when the average loss is 0.
    Requires at least ``period + 1`` prices.
    """
    if len(prices) < period + 1:
        return None

    gains = 0.0
    losses = 0.0
    for i in range(1, period + 1):
        change = prices[i] - prices[i - 1]
        if change > 0:
            gains += change
        else:
            losses += abs(change)

    avg_gain = gains / period
    avg_loss = losses / period

    for i in range(period + 1, len(prices)):
        change = prices[i] - prices[i - 1]
        gain = change if change > 0 else 0.0
        loss = abs(change) if change < 0 else 0.0
        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period

    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return 100.0 - 100.0 / (1.0 + rs)


# ── MACD ─────────────────────────────────────────────────────────────────


def calculate_macd(
    prices: list[float],
    fast_period: int = 12,
    slow_period: int = 26,
    signal_period: int = 9,
) -> Optional[float]:
    """Return the MACD line, ``EMA(fast) - EMA(slow)``.

    Only the MACD line is produced. The signal line and histogram would need
    a history of MACD values, so *signal_period* is accepted for signature
    compatibility and not used.
    """
    if len(prices) < slow_period:
        return None

    ema_fast = calculate_ema(prices, fast_period)
    ema_slow = calculate_ema(prices, slow_period)
    if ema_fast is None or ema_slow is None:
        return None
    return ema_fast - ema_slow


# ── Bollinger Bands ──────────────────────────────────────────────────────


def calculate_bollinger(
    prices: list[float],
    period: int = 20,
    std_dev: float = 2.0,
) -> Optional[BollingerBands]:
    """Calculate Bollinger Bands over the last *period* prices.

    Middle = SMA(close, *period*)
    Upper  = middle + *std_dev* × σ
    Lower  = middle − *std_dev* × σ

    σ is the population standard deviation (variance divided by *period*).
    """
    middle = calculate_sma(prices, period)
    if middle is None:
        return None

    window = prices[-period:]
    variance = sum((x - middle) ** 2 for x in window) / period
    sigma = math.sqrt(variance)

    return BollingerBands(
        upper=middle + std_dev * sigma,
        middle=middle,
        lower=middle - std_dev * sigma,
    )


# ── Stochastic ───────────────────────────────────────────────────────────


def calculate_stochastic(
    highs: list[float],
    lows: list[float],
    closes: list[float],
    k_period: int = 14,
) -> Optional[float]:
    """Calculate Stochastic %K for the latest close.

    ``%K = (close - lowest_low) / (highest_high - lowest_low) × 100`` over
    the last *k_period* bars. %D is not computed.

    Returns ``None`` when the window has no range (highest == lowest).
    """
    if len(highs) < k_period or len(lows) < k_period or not closes:
        return None

    highest = max(highs[-k_period:])
    lowest = min(lows[-k_period:])
    if highest == lowest:
        return None
    return (closes[-1] - lowest) / (highest - lowest) * 100.0


# ── Trend ────────────────────────────────────────────────────────────────


def analyze_trend(prices: list[float]) -> Trend:
    """Classify trend by voting price and SMA20 against SMA50.

    +1/-1 each for price vs SMA20, price vs SMA50, and SMA20 vs SMA50.
    A total of 2 or more is bullish, -2 or less bearish. Series shorter
    than 50 prices are neutral.
    """
    sma20 = calculate_sma(prices, 20)
    sma50 = calculate_sma(prices, 50)
    if sma20 is None or sma50 is None:
        return Trend.NEUTRAL

    price = prices[-1]
    score = 0
    score += _vote(price, sma20)
    score += _vote(price, sma50)
    score += _vote(sma20, sma50)

    if score >= 2:
        return Trend.BULLISH
    if score <= -2:
        return Trend.BEARISH
    return Trend.NEUTRAL


def _vote(a: float, b: float) -> int:
    if a > b:
        return 1
    if a < b:
        return -1
    return 0


def compute_indicators(prices: list[float]) -> IndicatorSet:
    """Derive the full ``IndicatorSet`` for a price series."""
    return IndicatorSet(
        rsi=calculate_rsi(prices),
        macd=calculate_macd(prices),
        bollinger=calculate_bollinger(prices),
        sma20=calculate_sma(prices, 20),
        sma50=calculate_sma(prices, 50),
        trend=analyze_trend(prices),
    )
