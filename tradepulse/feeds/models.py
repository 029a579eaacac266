"""Feed data models — normalized provider results."""

from dataclasses import dataclass, field
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Quote:
    """A snapshot of current price and 24h change for one instrument."""

    pair: str
    price: float
    change24h: float  # signed percent
    volume: float = 0.0
    high24h: float = 0.0
    low24h: float = 0.0
    source: str = ""


@dataclass(frozen=True)
class TierResult(Generic[T]):
    """Outcome of running a provider cascade.

    ``attempts`` lists ``(tier_name, outcome)`` pairs in the order tried;
    outcome is ``"ok"``, ``"skipped"``, ``"empty"`` or the error message.
    """

    tier: Optional[str] = None
    value: Optional[T] = None
    attempts: tuple[tuple[str, str], ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return self.value is not None


@dataclass(frozen=True)
class RateLookup:
    """Outcome of a rotating exchange-rate lookup.

    ``completed`` is True once any key produced a completed HTTP response,
    whether or not the quote currency was present in it.
    """

    rate: Optional[float] = None
    completed: bool = False
    key_index: Optional[int] = None
