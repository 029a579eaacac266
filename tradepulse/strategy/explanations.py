"""Explanation selection — maps signal context to a translation key and parameters.

The core never renders text. Clients look up the key and interpolate the
parameters in the user's language.

Selection precedence is fixed: direction (BUY / SELL) first, then exchange
rate bands, then trading-hour bands, then the price-info default.
"""

from typing import Any, Optional

from tradepulse.models.signal import Direction

KEY_PREFIX = "signals.explanations."

GROWTH_BUY = KEY_PREFIX + "growthBuy"
FALL_SELL = KEY_PREFIX + "fallSell"
HIGH_RATE = KEY_PREFIX + "highRate"
LOW_RATE = KEY_PREFIX + "lowRate"
CURRENT_RATE = KEY_PREFIX + "currentRate"
TRADING_HOURS = KEY_PREFIX + "tradingHours"
NON_TRADING_HOURS = KEY_PREFIX + "nonTradingHours"
PRICE_INFO = KEY_PREFIX + "priceInfo"
DATA_UNAVAILABLE = KEY_PREFIX + "dataUnavailable"
ERROR_GETTING_DATA = KEY_PREFIX + "errorGettingData"

HIGH_RATE_LEVEL = 1.1
LOW_RATE_LEVEL = 0.9
TRADING_HOUR_START = 9
TRADING_HOUR_END = 17


def trend_word(change24h: float) -> str:
    if change24h > 0:
        return "upward"
    if change24h < 0:
        return "downward"
    return "sideways"


def generate_explanation(
    direction: Direction,
    change24h: float,
    price: float,
    base: Optional[str] = None,
    quote: Optional[str] = None,
    rate: Optional[float] = None,
    hour: Optional[int] = None,
    minute: Optional[int] = None,
) -> tuple[str, dict[str, Any]]:
    """Select the explanation key and parameters for a signal.

    Args:
        direction: Signal direction.
        change24h: 24h change in percent.
        price: Current price.
        base, quote, rate: Exchange-rate context (rate-based path).
        hour, minute: Clock context (time-based path).

    Returns:
        ``(key, params)`` tuple.
    """
    if direction == Direction.BUY:
        return GROWTH_BUY, {
            "change": f"{change24h:.2f}",
            "trend": trend_word(change24h),
        }
    if direction == Direction.SELL:
        return FALL_SELL, {
            "change": f"{abs(change24h):.2f}",
            "trend": trend_word(change24h),
        }
    if base and quote and rate:
        params = {"base": base, "quote": quote, "rate": f"{rate:.4f}"}
        if rate > HIGH_RATE_LEVEL:
            return HIGH_RATE, params
        if rate < LOW_RATE_LEVEL:
            return LOW_RATE, params
        return CURRENT_RATE, params
    if hour is not None and minute is not None:
        params = {"hour": hour, "minute": f"{minute:02d}"}
        if TRADING_HOUR_START <= hour <= TRADING_HOUR_END:
            return TRADING_HOURS, params
        return NON_TRADING_HOURS, params
    return PRICE_INFO, {
        "price": f"{price:.4f}",
        "change": f"{change24h:.2f}",
        "trend": trend_word(change24h),
    }
