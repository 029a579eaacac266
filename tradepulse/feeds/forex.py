"""Forex market-data providers.

Live quote tier:
    Alpha Vantage FX_DAILY (rate-limited; soft-limit payloads are failures)

History tiers, in cascade order:
    1. Yahoo Finance hourly chart (30 days)
    2. ExchangeRate-API daily history (rolling 30-day window)
    3. Fixer latest rate, expanded into a synthetic hourly series

Exchange-rate lookup with rotating API keys, used by the signal generator
when the live quote tier fails.
"""

import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from tradepulse.feeds.cascade import TIER_ERRORS, ProviderError, RateLimitError
from tradepulse.feeds.http import get_json
from tradepulse.feeds.key_rotation import KeyRotator
from tradepulse.feeds.models import Quote, RateLookup
from tradepulse.models.instrument_group import split_forex_pair
from tradepulse.strategy.models import PriceSeries

logger = logging.getLogger("tradepulse.feeds.forex")

ALPHA_VANTAGE_URL = "https://www.alphavantage.co/query"
YAHOO_CHART_URL = "https://query1.finance.yahoo.com/v8/finance/chart"
EXCHANGE_RATE_HISTORY_URL = "https://api.exchangerate-api.com/v4/history"
EXCHANGE_RATE_LATEST_URL = "https://v6.exchangerate-api.com/v6"
FIXER_LATEST_URL = "https://data.fixer.io/api/latest"

PROVIDER_TIMEOUT = 10.0
HISTORY_WINDOW_DAYS = 30
MIN_HISTORY_POINTS = 10

_DAILY_SERIES_KEY = "Time Series FX (Daily)"
_LIMIT_PHRASES = ("API call frequency", "limit")

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def check_rate_limit(payload: dict) -> None:
    """Raise if an otherwise-200 Alpha Vantage payload carries a sentinel.

    Raises:
        ProviderError: ``Error Message`` present.
        RateLimitError: ``Note`` present, or ``Information`` mentions a
            call-frequency limit.
    """
    if payload.get("Error Message"):
        raise ProviderError(f"Alpha Vantage error: {payload['Error Message']}")
    if payload.get("Note"):
        raise RateLimitError(f"Alpha Vantage limit reached: {payload['Note']}")
    info = payload.get("Information")
    if isinstance(info, str) and any(p in info for p in _LIMIT_PHRASES):
        raise RateLimitError(f"Alpha Vantage limit reached: {info}")


# ── Live quote ───────────────────────────────────────────────────────────


class AlphaVantageFxProvider:
    """Alpha Vantage ``FX_DAILY`` — latest close and day-over-day change."""

    name = "alpha-vantage"

    def __init__(self, api_key: str, url: str = ALPHA_VANTAGE_URL) -> None:
        self._api_key = api_key
        self._url = url

    @property
    def enabled(self) -> bool:
        return bool(self._api_key)

    async def fetch(self, pair: str) -> Optional[Quote]:
        base, quote = split_forex_pair(pair)
        data = await get_json(
            self._url,
            params={
                "function": "FX_DAILY",
                "from_symbol": base,
                "to_symbol": quote,
                "apikey": self._api_key,
            },
            timeout=PROVIDER_TIMEOUT,
        )
        if not isinstance(data, dict):
            raise ProviderError("Alpha Vantage returned a non-object payload")
        check_rate_limit(data)

        series = data.get(_DAILY_SERIES_KEY)
        if not series:
            raise ProviderError(f"No {_DAILY_SERIES_KEY!r} in Alpha Vantage response")

        dates = sorted(series.keys(), reverse=True)
        if len(dates) < 2:
            raise ProviderError("Alpha Vantage returned fewer than two daily closes")

        latest = series[dates[0]]
        previous = series[dates[1]]
        price = float(latest["4. close"])
        previous_price = float(previous["4. close"])
        if previous_price == 0:
            raise ProviderError("Alpha Vantage previous close is zero")

        change = (price - previous_price) / previous_price * 100.0
        logger.debug(
            "Alpha Vantage %s: %s close=%s, %s close=%s, change=%.4f%%",
            pair, dates[0], price, dates[1], previous_price, change,
        )
        return Quote(
            pair=pair,
            price=price,
            change24h=change,
            volume=0.0,
            high24h=float(latest.get("2. high", price)),
            low24h=float(latest.get("3. low", price)),
            source=self.name,
        )


# ── History tiers ────────────────────────────────────────────────────────


class YahooChartProvider:
    """Yahoo Finance chart endpoint, hourly bars over the last 30 days."""

    name = "yahoo-chart"

    def __init__(self, url: str = YAHOO_CHART_URL) -> None:
        self._url = url

    @property
    def enabled(self) -> bool:
        return True

    async def fetch(self, pair: str, limit: int = 100) -> Optional[PriceSeries]:
        base, _ = split_forex_pair(pair)
        data = await get_json(
            f"{self._url}/{base}=X",
            params={"interval": "1h", "range": "30d", "includePrePost": "false"},
            timeout=PROVIDER_TIMEOUT,
        )
        if not isinstance(data, dict):
            return None
        results = (data.get("chart") or {}).get("result") or []
        if not results:
            return None

        quote = results[0]["indicators"]["quote"][0]
        closes = quote.get("close") or []
        highs = quote.get("high") or []
        lows = quote.get("low") or []
        volumes = quote.get("volume") or []

        prices: list[float] = []
        out_highs: list[float] = []
        out_lows: list[float] = []
        out_volumes: list[float] = []
        start = max(0, len(closes) - limit)
        for i in range(start, len(closes)):
            close = closes[i]
            if close is None:
                continue
            high = highs[i] if i < len(highs) else None
            low = lows[i] if i < len(lows) else None
            volume = volumes[i] if i < len(volumes) else None
            prices.append(float(close))
            out_highs.append(float(high if high is not None else close))
            out_lows.append(float(low if low is not None else close))
            out_volumes.append(float(volume or 0))

        logger.debug("Yahoo %s: %d data points", pair, len(prices))
        return PriceSeries(
            prices=prices, highs=out_highs, lows=out_lows, volumes=out_volumes,
        )


class ExchangeRateHistoryProvider:
    """ExchangeRate-API daily history over a rolling 30-day window.

    Highs and lows are approximated as ±0.1% of the daily rate.
    """

    name = "exchangerate-history"

    def __init__(
        self,
        url: str = EXCHANGE_RATE_HISTORY_URL,
        clock: Optional[Clock] = None,
    ) -> None:
        self._url = url
        self._clock = clock or _utc_now

    @property
    def enabled(self) -> bool:
        return True

    async def fetch(self, pair: str, limit: int = 100) -> Optional[PriceSeries]:
        base, quote = split_forex_pair(pair)
        end = self._clock().date()
        start = end - timedelta(days=HISTORY_WINDOW_DAYS)
        data = await get_json(
            f"{self._url}/{base}/{start.isoformat()}/{end.isoformat()}",
            timeout=PROVIDER_TIMEOUT,
        )
        rates = data.get("rates") if isinstance(data, dict) else None
        if not rates:
            return None

        in_window = sorted(
            (day, values)
            for day, values in rates.items()
            if start.isoformat() <= day[:10] <= end.isoformat()
        )[-limit:]
        if len(in_window) < MIN_HISTORY_POINTS:
            logger.debug(
                "ExchangeRate history %s: only %d points", pair, len(in_window),
            )
            return None

        prices = [
            float(v[quote])
            for _, v in in_window
            if isinstance(v, dict) and v.get(quote)
        ]
        return PriceSeries(
            prices=prices,
            highs=[p * 1.001 for p in prices],
            lows=[p * 0.999 for p in prices],
            volumes=[1_000_000.0] * len(prices),
        )


class FixerLatestProvider:
    """Fixer latest rate expanded into a synthetic hourly series.

    The series is *not* real history: each point is the current rate scaled
    by a small sinusoid of its hour of day, ``rate × (1 + sin(h/24·2π) × 0.001)``.
    Highs and lows are ±0.05%.
    """

    name = "fixer-latest"

    def __init__(
        self,
        api_key: str,
        url: str = FIXER_LATEST_URL,
        clock: Optional[Clock] = None,
    ) -> None:
        self._api_key = api_key
        self._url = url
        self._clock = clock or _utc_now

    @property
    def enabled(self) -> bool:
        return bool(self._api_key)

    async def fetch(self, pair: str, limit: int = 100) -> Optional[PriceSeries]:
        base, quote = split_forex_pair(pair)
        data = await get_json(
            self._url,
            params={"access_key": self._api_key, "base": base, "symbols": quote},
            timeout=PROVIDER_TIMEOUT,
        )
        rate = ((data.get("rates") or {}) if isinstance(data, dict) else {}).get(quote)
        if not rate:
            return None

        return PriceSeries(**synthesize_hourly_series(float(rate), limit, self._clock()))


def synthesize_hourly_series(rate: float, limit: int, now: datetime) -> dict:
    """Build ``limit`` hourly points ending at *now* around a single rate."""
    prices: list[float] = []
    for i in range(limit - 1, -1, -1):
        hour = (now - timedelta(hours=i)).hour
        variation = math.sin(hour / 24 * math.pi * 2) * 0.001
        prices.append(rate * (1 + variation))
    return {
        "prices": prices,
        "highs": [p * 1.0005 for p in prices],
        "lows": [p * 0.9995 for p in prices],
        "volumes": [500_000.0] * len(prices),
    }


# ── Rotating exchange-rate lookup ────────────────────────────────────────


class ExchangeRateLookup:
    """Latest-rate lookup that rotates through a pool of API keys.

    Each attempt takes the next key from the shared ``KeyRotator``; at most
    one pass over the pool is made per lookup. Rotation stops after the
    first HTTP call that completes, even when the response does not contain
    the quote currency. In that case the lookup reports ``completed=True``
    with no rate.
    """

    name = "exchangerate-latest"

    def __init__(self, rotator: KeyRotator, url: str = EXCHANGE_RATE_LATEST_URL) -> None:
        self._rotator = rotator
        self._url = url

    async def lookup(self, pair: str) -> RateLookup:
        base, quote = split_forex_pair(pair)

        for attempt in range(len(self._rotator)):
            index, key = self._rotator.next_key()
            if not key:
                continue

            logger.debug(
                "ExchangeRate %s/%s: key %d/%d (attempt %d)",
                base, quote, index + 1, len(self._rotator), attempt + 1,
            )
            try:
                data = await get_json(
                    f"{self._url}/{key}/latest/{base}",
                    timeout=PROVIDER_TIMEOUT,
                )
            except TIER_ERRORS as exc:
                logger.warning(
                    "ExchangeRate %s key %d failed — %s",
                    pair, index + 1, str(exc) or exc.__class__.__name__,
                )
                continue

            rates = {}
            if isinstance(data, dict):
                rates = data.get("conversion_rates") or data.get("rates") or {}
            rate = rates.get(quote) if isinstance(rates, dict) else None
            if isinstance(rate, (int, float)) and rate:
                logger.info("ExchangeRate %s/%s: rate %s", base, quote, rate)
                return RateLookup(rate=float(rate), completed=True, key_index=index)

            logger.warning(
                "ExchangeRate %s: %s missing from response, rotation stopped",
                pair, quote,
            )
            return RateLookup(completed=True, key_index=index)

        return RateLookup()
