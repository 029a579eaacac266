"""Crypto market-data providers.

Live quote tiers, in cascade order:
    1. Binance 24hr ticker
    2. CoinGecko simple price
    3. CoinCap asset by symbol

History: Binance 1-hour klines (single tier).

Each provider normalizes its own response shape into a ``Quote`` or a
``PriceSeries``; errors are left to the cascade.
"""

import logging
from typing import Optional

from tradepulse.feeds.http import get_json
from tradepulse.feeds.models import Quote
from tradepulse.models.instrument_group import crypto_coin
from tradepulse.strategy.models import PriceSeries

logger = logging.getLogger("tradepulse.feeds.crypto")

BINANCE_BASE_URL = "https://api.binance.com/api/v3"
COINGECKO_BASE_URL = "https://api.coingecko.com/api/v3"
COINCAP_BASE_URL = "https://api.coincap.io/v2"

BINANCE_TIMEOUT = 15.0
AGGREGATOR_TIMEOUT = 10.0


def _binance_headers(api_key: str) -> dict[str, str]:
    if api_key:
        return {"X-MBX-APIKEY": api_key}
    return {}


class BinanceTickerProvider:
    """Binance ``/ticker/24hr`` — price and percent change in one call."""

    name = "binance-ticker"

    def __init__(self, api_key: str = "", base_url: str = BINANCE_BASE_URL) -> None:
        self._api_key = api_key
        self._base_url = base_url

    @property
    def enabled(self) -> bool:
        return True

    async def fetch(self, pair: str) -> Optional[Quote]:
        data = await get_json(
            f"{self._base_url}/ticker/24hr",
            params={"symbol": pair},
            headers=_binance_headers(self._api_key),
            timeout=BINANCE_TIMEOUT,
        )
        price = float(data["lastPrice"])
        change = float(data["priceChangePercent"])
        logger.debug("Binance %s: price=%s change=%s%%", pair, price, change)
        return Quote(
            pair=pair,
            price=price,
            change24h=change,
            volume=float(data.get("volume", 0)),
            high24h=float(data.get("highPrice", price)),
            low24h=float(data.get("lowPrice", price)),
            source=self.name,
        )


class CoinGeckoProvider:
    """CoinGecko ``/simple/price`` keyed by the lower-cased coin symbol."""

    name = "coingecko"

    def __init__(self, base_url: str = COINGECKO_BASE_URL) -> None:
        self._base_url = base_url

    @property
    def enabled(self) -> bool:
        return True

    async def fetch(self, pair: str) -> Optional[Quote]:
        coin_id = crypto_coin(pair).lower()
        data = await get_json(
            f"{self._base_url}/simple/price",
            params={
                "ids": coin_id,
                "vs_currencies": "usd",
                "include_24hr_change": "true",
            },
            timeout=AGGREGATOR_TIMEOUT,
        )
        entry = data.get(coin_id) if isinstance(data, dict) else None
        if not entry:
            return None

        price = float(entry["usd"])
        return Quote(
            pair=pair,
            price=price,
            change24h=float(entry.get("usd_24h_change") or 0),
            high24h=price,
            low24h=price,
            source=self.name,
        )


class CoinCapProvider:
    """CoinCap ``/assets/{symbol}``."""

    name = "coincap"

    def __init__(self, base_url: str = COINCAP_BASE_URL) -> None:
        self._base_url = base_url

    @property
    def enabled(self) -> bool:
        return True

    async def fetch(self, pair: str) -> Optional[Quote]:
        coin = crypto_coin(pair).lower()
        data = await get_json(
            f"{self._base_url}/assets/{coin}",
            timeout=AGGREGATOR_TIMEOUT,
        )
        asset = data.get("data") if isinstance(data, dict) else None
        if not asset:
            return None

        price = float(asset["priceUsd"])
        return Quote(
            pair=pair,
            price=price,
            change24h=float(asset.get("changePercent24Hr") or 0),
            volume=float(asset.get("volumeUsd24Hr") or 0),
            high24h=price,
            low24h=price,
            source=self.name,
        )


class BinanceKlinesProvider:
    """Binance ``/klines`` — the most recent *limit* 1-hour candles."""

    name = "binance-klines"

    def __init__(
        self,
        api_key: str = "",
        base_url: str = BINANCE_BASE_URL,
        interval: str = "1h",
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url
        self._interval = interval

    @property
    def enabled(self) -> bool:
        return True

    async def fetch(self, pair: str, limit: int = 100) -> Optional[PriceSeries]:
        rows = await get_json(
            f"{self._base_url}/klines",
            params={"symbol": pair, "interval": self._interval, "limit": limit},
            headers=_binance_headers(self._api_key),
            timeout=BINANCE_TIMEOUT,
        )
        if not rows:
            return None

        # Kline columns: [open_time, open, high, low, close, volume, ...]
        return PriceSeries(
            prices=[float(k[4]) for k in rows],
            highs=[float(k[2]) for k in rows],
            lows=[float(k[3]) for k in rows],
            volumes=[float(k[5]) for k in rows],
        )
