"""In-memory store of the latest signal per instrument."""

from typing import Optional

from tradepulse.models.signal import Signal


class SignalStore:
    """Mapping of pair → latest ``Signal``.

    Entries are inserted or replaced, never deleted. Readers may see a
    stale or missing entry while a cycle is in flight.
    """

    def __init__(self) -> None:
        self._signals: dict[str, Signal] = {}

    def put(self, signal: Signal) -> None:
        self._signals[signal.pair] = signal

    def get(self, pair: str) -> Optional[Signal]:
        return self._signals.get(pair)

    def snapshot(self) -> list[Signal]:
        """All held signals, in first-insertion order of their pairs."""
        return list(self._signals.values())

    def __contains__(self, pair: object) -> bool:
        return pair in self._signals

    def __len__(self) -> int:
        return len(self._signals)
