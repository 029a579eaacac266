"""Signal data model — the record broadcast to subscribers.

A ``Signal`` is created once per generation cycle per instrument and is
superseded, never mutated, by the next cycle's signal for the same pair.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class Direction(str, Enum):
    BUY = "BUY"
    SELL = "SELL"
    NEUTRAL = "NEUTRAL"


class AnalysisType(str, Enum):
    """Which generation path produced a signal.

    The rate-based and time-based forex fallbacks carry no analysis type;
    their signals leave the field unset.
    """

    TECHNICAL = "technical"
    PRICE_CHANGE = "price_change"
    NO_DATA = "no_data"
    ERROR = "error"
    OTC = "otc"


@dataclass(frozen=True)
class Signal:
    """A trading signal for one instrument.

    ``explanation`` is a translation key and ``explanation_params`` its
    interpolation values; rendering text is left to clients.

    When ``synthetic`` is True, ``price`` and/or ``change24h`` are fixed
    placeholder values for display only and carry no analytical meaning.
    """

    id: str
    pair: str
    signal: Direction
    confidence: int
    explanation: str
    explanation_params: dict[str, Any]
    timestamp: int  # epoch milliseconds
    price: float
    change24h: float
    technical_reasoning: Optional[str] = None
    reasoning: tuple[str, ...] = field(default_factory=tuple)
    analysis_type: Optional[AnalysisType] = None
    synthetic: bool = False

    def to_payload(self) -> dict[str, Any]:
        """Return the camelCase wire representation.

        ``technicalReasoning`` and ``analysisType`` are omitted when unset.
        """
        payload: dict[str, Any] = {
            "id": self.id,
            "pair": self.pair,
            "signal": self.signal.value,
            "confidence": self.confidence,
            "explanation": self.explanation,
            "explanationParams": dict(self.explanation_params),
            "timestamp": self.timestamp,
            "price": self.price,
            "change24h": self.change24h,
            "reasoning": list(self.reasoning),
            "synthetic": self.synthetic,
        }
        if self.technical_reasoning is not None:
            payload["technicalReasoning"] = self.technical_reasoning
        if self.analysis_type is not None:
            payload["analysisType"] = self.analysis_type.value
        return payload


def make_signal_id(pair: str, timestamp_ms: int) -> str:
    """Build the per-emission id ``"<pair>-<timestamp_ms>"``."""
    return f"{pair}-{timestamp_ms}"
