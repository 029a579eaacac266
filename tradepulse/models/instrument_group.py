"""Instrument group dataclass and pair classification.

An instrument group is one set of pairs regenerated on a shared interval
(crypto every 5 minutes, forex and OTC every 15 minutes by default).
"""

from dataclasses import dataclass
from typing import Literal

OTC_PREFIX = "OTC_"
CRYPTO_QUOTE = "USDT"

InstrumentKind = Literal["crypto", "forex", "otc"]


@dataclass(frozen=True)
class InstrumentGroup:
    """Configuration for a single scheduled instrument group."""

    name: str
    kind: InstrumentKind
    pairs: tuple[str, ...]
    interval_seconds: int = 900
    enabled: bool = True


def is_otc(pair: str) -> bool:
    """Return True for synthetic OTC pairs such as ``OTC_EURUSD``."""
    return pair.startswith(OTC_PREFIX)


def is_crypto(pair: str) -> bool:
    """Return True for exchange-quoted crypto pairs such as ``BTCUSDT``."""
    return CRYPTO_QUOTE in pair and not is_otc(pair)


def otc_base_pair(otc_pair: str) -> str:
    """Return the forex pair an OTC pair derives from (``OTC_EURUSD`` → ``EURUSD``)."""
    return otc_pair.replace(OTC_PREFIX, "", 1)


def split_forex_pair(pair: str) -> tuple[str, str]:
    """Split a six-letter forex pair into ``(base, quote)``."""
    return pair[:3], pair[3:6]


def crypto_coin(pair: str) -> str:
    """Strip the quote-currency suffix from a crypto pair (``BTCUSDT`` → ``BTC``)."""
    return pair.replace(CRYPTO_QUOTE, "")
