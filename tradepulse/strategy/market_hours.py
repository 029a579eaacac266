"""Market hours — pure functions, report which markets are open on a given day.

Crypto and forex feeds are treated as closed on Saturday and Sunday; the
synthetic OTC market is available around the clock.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

MARKETS = ("crypto", "forex", "otc")


@dataclass(frozen=True)
class MarketStatus:
    """Availability of one market at a point in time."""

    available: bool
    reason: str
    next_available: Optional[datetime] = None


def is_weekend(dt: datetime) -> bool:
    """Return True on Saturday or Sunday."""
    return dt.weekday() >= 5


def next_working_day(dt: datetime) -> datetime:
    """Return the first Monday–Friday date strictly after *dt*."""
    nxt = dt + timedelta(days=1)
    while is_weekend(nxt):
        nxt += timedelta(days=1)
    return nxt


def get_market_status(market: str, now: Optional[datetime] = None) -> MarketStatus:
    """Return the availability of *market* (``crypto``, ``forex`` or ``otc``).

    Args:
        market: Market name.
        now: Reference time. Defaults to ``datetime.now(UTC)``.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    if market in ("crypto", "forex"):
        if is_weekend(now):
            return MarketStatus(
                available=False,
                reason=f"{market}_weekend_closed",
                next_available=next_working_day(now),
            )
        return MarketStatus(available=True, reason=f"{market}_available")

    if market == "otc":
        return MarketStatus(available=True, reason="otc_available_24_7")

    return MarketStatus(available=False, reason="unknown_market")


def available_markets(now: Optional[datetime] = None) -> list[str]:
    """Return the names of markets open at *now*."""
    return [m for m in MARKETS if get_market_status(m, now).available]
