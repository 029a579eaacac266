"""Round-robin API key rotation for rate-limited providers."""

from typing import Sequence


class KeyRotator:
    """Hands out API keys in round-robin order.

    The index advances on every ``next_key()`` call, whether or not the
    caller's request with that key succeeds. State lives for the lifetime
    of the object; a fresh rotator starts at key 0.
    """

    def __init__(self, keys: Sequence[str]) -> None:
        self._keys = list(keys)
        self._index = 0

    def __len__(self) -> int:
        return len(self._keys)

    @property
    def index(self) -> int:
        """Index of the key the next call will return."""
        return self._index

    def next_key(self) -> tuple[int, str]:
        """Return ``(index, key)`` and advance to the following key.

        Raises ``LookupError`` when no keys are configured.
        """
        if not self._keys:
            raise LookupError("No API keys configured")
        index = self._index
        self._index = (self._index + 1) % len(self._keys)
        return index, self._keys[index]
