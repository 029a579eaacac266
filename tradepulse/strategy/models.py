"""Strategy data models — typed representations for indicator inputs and outputs."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class PriceSeries:
    """Chronological price history for one instrument, oldest first.

    ``highs``, ``lows`` and ``volumes`` are optional parallel sequences; when
    present they must match ``prices`` in length.
    """

    prices: list[float]
    highs: list[float] = field(default_factory=list)
    lows: list[float] = field(default_factory=list)
    volumes: list[float] = field(default_factory=list)

    def __post_init__(self) -> None:
        for name in ("highs", "lows", "volumes"):
            values = getattr(self, name)
            if values and len(values) != len(self.prices):
                raise ValueError(
                    f"{name} has {len(values)} values, "
                    f"prices has {len(self.prices)}"
                )

    def __len__(self) -> int:
        return len(self.prices)


class Trend(str, Enum):
    BULLISH = "BULLISH"
    BEARISH = "BEARISH"
    NEUTRAL = "NEUTRAL"


@dataclass(frozen=True)
class BollingerBands:
    upper: float
    middle: float
    lower: float


@dataclass(frozen=True)
class IndicatorSet:
    """Indicator readings derived from one price series.

    Each reading is ``None`` when the series is shorter than its lookback.
    """

    rsi: Optional[float]
    macd: Optional[float]
    bollinger: Optional[BollingerBands]
    sma20: Optional[float]
    sma50: Optional[float]
    trend: Trend
