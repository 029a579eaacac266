"""Provider protocol and ordered fallback cascade.

A cascade holds an ordered list of providers for one data need (a live
quote or a price history). Tiers run in order and the first usable result
wins. Each tier is an independent failure domain: a timeout, HTTP error,
rate-limit sentinel or malformed payload in one tier is logged and the next
tier runs. Any other exception is a programming error and propagates.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol, Sequence, runtime_checkable

import httpx

from tradepulse.feeds.models import Quote, TierResult
from tradepulse.strategy.models import PriceSeries

logger = logging.getLogger("tradepulse.feeds")


class ProviderError(Exception):
    """A provider returned a response that cannot be used."""


class RateLimitError(ProviderError):
    """A provider answered 200 but signalled a rate or call limit in the payload."""


# Failures that mean "this tier is unavailable", not "the code is broken".
# KeyError / ValueError / TypeError / IndexError cover payloads whose shape
# does not match what the provider normally returns.
TIER_ERRORS = (
    httpx.HTTPError,
    ProviderError,
    KeyError,
    ValueError,
    TypeError,
    IndexError,
)


@runtime_checkable
class QuoteProvider(Protocol):
    """A single live-quote tier."""

    name: str

    @property
    def enabled(self) -> bool:
        ...

    async def fetch(self, pair: str) -> Optional[Quote]:
        """Return a normalized quote, or None if the payload had no data."""
        ...


@runtime_checkable
class SeriesProvider(Protocol):
    """A single price-history tier."""

    name: str

    @property
    def enabled(self) -> bool:
        ...

    async def fetch(self, pair: str, limit: int) -> Optional[PriceSeries]:
        """Return up to *limit* points oldest-first, or None if unusable."""
        ...


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, PriceSeries):
        return len(value) == 0
    return False


class ProviderCascade:
    """Run providers in order and stop at the first success.

    Args:
        providers: Tiers in priority order.
        label: Name used in log lines (e.g. ``"crypto-quote"``).
    """

    def __init__(self, providers: Sequence[Any], label: str) -> None:
        self._providers = list(providers)
        self._label = label

    @property
    def providers(self) -> list[Any]:
        return list(self._providers)

    @property
    def label(self) -> str:
        return self._label

    async def run(self, pair: str, **kwargs: Any) -> TierResult:
        """Try every enabled tier for *pair* until one returns data.

        Extra keyword arguments (e.g. ``limit``) are passed to each
        provider's ``fetch``.

        Returns:
            ``TierResult`` with ``value`` set on success, or ``value=None``
            when every tier was skipped or failed.
        """
        attempts: list[tuple[str, str]] = []

        for provider in self._providers:
            if not provider.enabled:
                logger.debug(
                    "%s %s: tier %s skipped (not configured)",
                    self._label, pair, provider.name,
                )
                attempts.append((provider.name, "skipped"))
                continue

            logger.debug("%s %s: trying tier %s", self._label, pair, provider.name)
            try:
                value = await provider.fetch(pair, **kwargs)
            except TIER_ERRORS as exc:
                message = str(exc) or exc.__class__.__name__
                logger.warning(
                    "%s %s: tier %s failed — %s",
                    self._label, pair, provider.name, message,
                )
                attempts.append((provider.name, message))
                continue

            if _is_empty(value):
                logger.warning(
                    "%s %s: tier %s returned no usable data",
                    self._label, pair, provider.name,
                )
                attempts.append((provider.name, "empty"))
                continue

            logger.info("%s %s: tier %s succeeded", self._label, pair, provider.name)
            attempts.append((provider.name, "ok"))
            return TierResult(tier=provider.name, value=value, attempts=tuple(attempts))

        logger.warning(
            "%s %s: all %d tier(s) exhausted",
            self._label, pair, len(self._providers),
        )
        return TierResult(attempts=tuple(attempts))
