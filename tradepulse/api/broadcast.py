"""WebSocket broadcast hub for live signal updates.

Frames are JSON text ``{"event": <name>, "data": <payload>}``.

Server → client events:
    signals-update   snapshot of every held signal, sent on connect
    signal-update    one signal, pushed after each generation or on request
    signal-waiting   requested pair has no signal yet
    signal-error     malformed or unknown client message

Client → server events:
    request-signal   ``data`` is the pair; answered from the store only
"""

import asyncio
import json
import logging
from typing import Any

from fastapi import WebSocket

from tradepulse.engine.signal_store import SignalStore
from tradepulse.models.signal import Signal

logger = logging.getLogger("tradepulse.broadcast")

SIGNAL_UPDATE = "signal-update"
SIGNALS_UPDATE = "signals-update"
SIGNAL_WAITING = "signal-waiting"
SIGNAL_ERROR = "signal-error"
REQUEST_SIGNAL = "request-signal"

WAITING_MESSAGE = "Signal will be available on next update cycle"


def encode_frame(event: str, data: Any) -> str:
    return json.dumps({"event": event, "data": data})


def waiting_payload(pair: str) -> dict:
    return {"pair": pair, "message": WAITING_MESSAGE}


class BroadcastHub:
    """Tracks subscribers and fans signal updates out to them.

    Args:
        store: Latest-signal store used for snapshots and requests.
    """

    def __init__(self, store: SignalStore) -> None:
        self._store = store
        self._connections: list[WebSocket] = []
        self._lock = asyncio.Lock()

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    async def connect(self, websocket: WebSocket) -> None:
        """Accept *websocket*, register it and send the current snapshot."""
        await websocket.accept()
        async with self._lock:
            self._connections.append(websocket)
        logger.info("Client connected. Total connections: %d", self.connection_count)

        snapshot = [s.to_payload() for s in self._store.snapshot()]
        await websocket.send_text(encode_frame(SIGNALS_UPDATE, snapshot))

    async def disconnect(self, websocket: WebSocket) -> None:
        async with self._lock:
            if websocket in self._connections:
                self._connections.remove(websocket)
        logger.info("Client disconnected. Total connections: %d", self.connection_count)

    async def publish_signal(self, signal: Signal) -> None:
        """Send ``signal-update`` to every subscriber, dropping dead sockets."""
        if not self._connections:
            return

        frame = encode_frame(SIGNAL_UPDATE, signal.to_payload())
        dropped = []
        async with self._lock:
            for websocket in self._connections:
                try:
                    await websocket.send_text(frame)
                except Exception as exc:
                    logger.warning("Dropping subscriber: %s", exc)
                    dropped.append(websocket)
            for websocket in dropped:
                self._connections.remove(websocket)

    async def handle_message(self, websocket: WebSocket, message: str) -> None:
        """Answer one client frame. Never triggers a generation."""
        try:
            parsed = json.loads(message)
        except ValueError:
            await websocket.send_text(
                encode_frame(SIGNAL_ERROR, {"message": "Invalid JSON"})
            )
            return

        event = parsed.get("event") if isinstance(parsed, dict) else None
        pair = parsed.get("data") if isinstance(parsed, dict) else None
        if event != REQUEST_SIGNAL or not isinstance(pair, str) or not pair:
            await websocket.send_text(
                encode_frame(SIGNAL_ERROR, {"message": f"Unsupported event: {event}"})
            )
            return

        pair = pair.upper()
        signal = self._store.get(pair)
        if signal is None:
            logger.debug("Request for %s: no signal yet", pair)
            await websocket.send_text(encode_frame(SIGNAL_WAITING, waiting_payload(pair)))
            return
        await websocket.send_text(encode_frame(SIGNAL_UPDATE, signal.to_payload()))
