"""Read-only API routers — /signals, /markets, /status endpoints.

No business logic and no generation. Serves the latest signals from the
shared store injected at startup.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter

from tradepulse.api.broadcast import waiting_payload
from tradepulse.strategy.market_hours import MARKETS, get_market_status

logger = logging.getLogger("tradepulse")
router = APIRouter()

# ── Shared state (set during app startup) ────────────────────────────────

_store = None      # Set via configure_routers()
_scheduler = None  # Set via configure_routers()
_hub = None        # Set via configure_routers()


def configure_routers(store=None, scheduler=None, hub=None) -> None:
    """Inject dependencies from the application startup.

    Args:
        store: A ``SignalStore`` instance (or duck-type for tests).
        scheduler: A ``SignalScheduler`` for the status endpoint.
        hub: A ``BroadcastHub`` for connection counts.
    """
    global _store, _scheduler, _hub  # noqa: PLW0603
    _store = store
    _scheduler = scheduler
    _hub = hub


# ── Endpoints ────────────────────────────────────────────────────────────


@router.get("/signals")
async def list_signals():
    """Every held signal, one per instrument."""
    if _store is None:
        return {"signals": []}
    return {"signals": [s.to_payload() for s in _store.snapshot()]}


@router.get("/signals/{pair}")
async def get_signal(pair: str):
    """The held signal for *pair*, or a waiting notice when none exists yet."""
    pair = pair.upper()
    signal = _store.get(pair) if _store is not None else None
    if signal is None:
        return {**waiting_payload(pair), "status": "waiting"}
    return signal.to_payload()


@router.get("/markets")
async def get_markets():
    """Availability of every market right now."""
    now = datetime.now(timezone.utc)
    markets = {}
    for market in MARKETS:
        status = get_market_status(market, now)
        markets[market] = {
            "available": status.available,
            "reason": status.reason,
            "next_available": (
                status.next_available.date().isoformat()
                if status.next_available else None
            ),
        }
    return {"markets": markets, "checked_at": now.isoformat()}


@router.get("/status")
async def get_status():
    """Scheduler state and subscriber count."""
    status = _scheduler.get_status() if _scheduler is not None else {
        "running": False,
        "groups": {},
    }
    status["connections"] = _hub.connection_count if _hub is not None else 0
    status["signals_held"] = len(_store) if _store is not None else 0
    return status
