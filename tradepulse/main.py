"""TradePulse — application entry point.

Boots the FastAPI server (REST read path plus the ``/ws`` broadcast
channel) and provides the CLI entry point that runs the signal scheduler
alongside it.
"""

import logging
from typing import Optional

from fastapi import FastAPI, WebSocket, WebSocketDisconnect

from tradepulse.api.broadcast import BroadcastHub
from tradepulse.api.routers import configure_routers, router
from tradepulse.config import Config
from tradepulse.engine.scheduler import SignalScheduler
from tradepulse.engine.signal_generator import Clock, SignalGenerator
from tradepulse.engine.signal_store import SignalStore
from tradepulse.feeds.cascade import ProviderCascade
from tradepulse.feeds.crypto import (
    BinanceKlinesProvider,
    BinanceTickerProvider,
    CoinCapProvider,
    CoinGeckoProvider,
)
from tradepulse.feeds.forex import (
    AlphaVantageFxProvider,
    ExchangeRateHistoryProvider,
    ExchangeRateLookup,
    FixerLatestProvider,
    YahooChartProvider,
)
from tradepulse.feeds.key_rotation import KeyRotator

app = FastAPI(title="TradePulse Signal API", version="0.1.0")
app.include_router(router)

logger = logging.getLogger("tradepulse")

# Set by configure_app(); the /ws endpoint closes immediately without one.
_hub: Optional[BroadcastHub] = None


@app.get("/health")
async def health():
    """Liveness probe."""
    return {"status": "ok"}


@app.websocket("/ws")
async def signals_socket(websocket: WebSocket):
    """Push signal updates and answer ``request-signal`` frames."""
    hub = _hub
    if hub is None:
        await websocket.close(code=1013)
        return

    await hub.connect(websocket)
    try:
        while True:
            message = await websocket.receive_text()
            await hub.handle_message(websocket, message)
    except WebSocketDisconnect:
        pass
    except Exception as exc:
        logger.error("WebSocket error: %s", exc)
    finally:
        await hub.disconnect(websocket)


def configure_app(store: SignalStore, hub: BroadcastHub, scheduler=None) -> None:
    """Inject the shared store, hub and scheduler into the app and routers."""
    global _hub  # noqa: PLW0603
    _hub = hub
    configure_routers(store=store, scheduler=scheduler, hub=hub)


# ── Wiring ───────────────────────────────────────────────────────────────


def build_crypto_cascades(config: Config) -> tuple[ProviderCascade, ProviderCascade]:
    """Return the crypto ``(quote, history)`` cascades."""
    quotes = ProviderCascade(
        [
            BinanceTickerProvider(api_key=config.binance_api_key),
            CoinGeckoProvider(),
            CoinCapProvider(),
        ],
        label="crypto-quote",
    )
    history = ProviderCascade(
        [BinanceKlinesProvider(api_key=config.binance_api_key)],
        label="crypto-history",
    )
    return quotes, history


def build_forex_cascades(
    config: Config, clock: Optional[Clock] = None,
) -> tuple[ProviderCascade, ProviderCascade]:
    """Return the forex ``(quote, history)`` cascades."""
    quotes = ProviderCascade(
        [AlphaVantageFxProvider(api_key=config.alpha_vantage_api_key)],
        label="forex-quote",
    )
    history = ProviderCascade(
        [
            YahooChartProvider(),
            ExchangeRateHistoryProvider(clock=clock),
            FixerLatestProvider(api_key=config.fixer_api_key, clock=clock),
        ],
        label="forex-history",
    )
    return quotes, history


def build_generator(config: Config, clock: Optional[Clock] = None) -> SignalGenerator:
    """Wire every provider tier into a ``SignalGenerator``."""
    crypto_quotes, crypto_history = build_crypto_cascades(config)
    forex_quotes, forex_history = build_forex_cascades(config, clock)
    rate_lookup = ExchangeRateLookup(KeyRotator(config.exchange_rate_api_keys))
    return SignalGenerator(
        config=config,
        crypto_quotes=crypto_quotes,
        crypto_history=crypto_history,
        forex_quotes=forex_quotes,
        forex_history=forex_history,
        rate_lookup=rate_lookup,
        clock=clock,
    )


def build_services(
    config: Config,
) -> tuple[SignalStore, BroadcastHub, SignalScheduler]:
    """Build the store, hub and scheduler and inject them into the app."""
    store = SignalStore()
    hub = BroadcastHub(store)
    scheduler = SignalScheduler(
        generator=build_generator(config),
        store=store,
        broadcaster=hub,
        groups=config.groups(),
    )
    configure_app(store, hub, scheduler)
    return store, hub, scheduler


# ── CLI ──────────────────────────────────────────────────────────────────


def _run_cli() -> None:
    """Parse CLI arguments and start the server and scheduler."""
    import argparse
    import asyncio
    import signal

    from tradepulse.config import load_config

    parser = argparse.ArgumentParser(description="TradePulse signal engine")
    parser.add_argument("--host", help="Bind address (default: HOST or 0.0.0.0)")
    parser.add_argument(
        "--port", type=int, help="Listen port (default: PORT or 3000)",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run one generation pass over every group, log the signals and exit",
    )
    args = parser.parse_args()

    config = load_config()

    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    store, hub, scheduler = build_services(config)

    if args.once:
        asyncio.run(_run_once(scheduler, store))
        return

    def handle_shutdown(signum, frame):
        logger.info("Shutdown signal received — stopping gracefully.")
        scheduler.stop()

    signal.signal(signal.SIGINT, handle_shutdown)

    asyncio.run(
        _run_server_and_scheduler(
            scheduler,
            host=args.host or config.host,
            port=args.port or config.port,
        )
    )


async def _run_once(scheduler: SignalScheduler, store: SignalStore) -> None:
    """Run a single pass over every group and log the results."""
    await scheduler.run_all(max_cycles=1)
    for sig in store.snapshot():
        logger.info(
            "%s: %s (%d%%) %s",
            sig.pair, sig.signal.value, sig.confidence, sig.explanation,
        )


async def _run_server_and_scheduler(
    scheduler: SignalScheduler, host: str, port: int,
) -> None:
    """Start the API server and the scheduler concurrently."""
    import asyncio

    import uvicorn

    logger.info(
        "Starting TradePulse with %d group(s) on %s:%d",
        len(scheduler.groups), host, port,
    )

    uvi_config = uvicorn.Config(app, host=host, port=port, log_level="info")
    server = uvicorn.Server(uvi_config)

    async def _serve():
        # uvicorn replaces the SIGINT handler; stop the loops when it exits
        await server.serve()
        scheduler.stop()

    results = await asyncio.gather(
        _serve(),
        scheduler.run_all(),
        return_exceptions=True,
    )
    logger.info("TradePulse stopped. Results: %s", results)


if __name__ == "__main__":
    _run_cli()
