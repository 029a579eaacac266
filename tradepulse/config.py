"""TradePulse — application configuration.

Loads .env variables into a typed config object.
Validates numeric and pair settings on startup.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from tradepulse.models.instrument_group import InstrumentGroup


_DEFAULT_CRYPTO_PAIRS = (
    "BTCUSDT,ETHUSDT,ADAUSDT,DOTUSDT,LINKUSDT,UNIUSDT,AAVEUSDT,SOLUSDT"
)
_DEFAULT_FOREX_PAIRS = (
    "EURUSD,GBPUSD,AUDCAD,USDJPY,USDCAD,NZDUSD,EURGBP,AUDUSD"
)

_POSITIVE_INT_VARS = {
    "CRYPTO_INTERVAL_SECONDS": "300",
    "FOREX_INTERVAL_SECONDS": "900",
    "OTC_INTERVAL_SECONDS": "900",
    "HISTORY_LIMIT": "100",
    "PORT": "3000",
}


@dataclass(frozen=True)
class Config:
    """Typed configuration loaded from environment variables."""

    alpha_vantage_api_key: str
    exchange_rate_api_keys: tuple[str, ...]
    fixer_api_key: str
    binance_api_key: str
    crypto_pairs: tuple[str, ...]
    forex_pairs: tuple[str, ...]
    otc_pairs: tuple[str, ...]
    crypto_interval_seconds: int = 300
    forex_interval_seconds: int = 900
    otc_interval_seconds: int = 900
    history_limit: int = 100
    time_fallback_enabled: bool = True
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3000

    def groups(self) -> list[InstrumentGroup]:
        """Return the crypto, forex and OTC groups in generation order."""
        return [
            InstrumentGroup(
                name="crypto",
                kind="crypto",
                pairs=self.crypto_pairs,
                interval_seconds=self.crypto_interval_seconds,
            ),
            InstrumentGroup(
                name="forex",
                kind="forex",
                pairs=self.forex_pairs,
                interval_seconds=self.forex_interval_seconds,
            ),
            InstrumentGroup(
                name="otc",
                kind="otc",
                pairs=self.otc_pairs,
                interval_seconds=self.otc_interval_seconds,
            ),
        ]


def _split_list(raw: str) -> tuple[str, ...]:
    """Split a comma-separated value, dropping blanks and whitespace."""
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def _parse_bool(raw: str) -> bool:
    return raw.strip().lower() not in ("0", "false", "no", "off", "")


def load_config(env_path: str | None = None) -> Config:
    """Load configuration from environment variables.

    Raises ``ValueError`` with a message naming the offending variable when
    an interval or the history limit is not a positive integer, or when a
    forex pair is not a six-letter currency pair.
    """
    load_dotenv(dotenv_path=env_path)

    ints: dict[str, int] = {}
    for var, default in _POSITIVE_INT_VARS.items():
        raw = os.environ.get(var, default)
        try:
            value = int(raw)
        except ValueError:
            raise ValueError(
                f"{var} must be a positive integer, got {raw!r}"
            ) from None
        if value <= 0:
            raise ValueError(f"{var} must be a positive integer, got {raw!r}")
        ints[var] = value

    forex_pairs = tuple(
        p.upper()
        for p in _split_list(os.environ.get("FOREX_PAIRS", _DEFAULT_FOREX_PAIRS))
    )
    bad = [p for p in forex_pairs if len(p) != 6 or not p.isalpha()]
    if bad:
        raise ValueError(
            f"FOREX_PAIRS contains invalid pair(s): {', '.join(bad)}"
        )

    otc_raw = os.environ.get("OTC_PAIRS")
    if otc_raw is None:
        otc_pairs = tuple(f"OTC_{p}" for p in forex_pairs)
    else:
        otc_pairs = tuple(p.upper() for p in _split_list(otc_raw))

    return Config(
        alpha_vantage_api_key=os.environ.get("ALPHA_VANTAGE_API_KEY", ""),
        exchange_rate_api_keys=_split_list(
            os.environ.get("EXCHANGE_RATE_API_KEYS", "")
        ),
        fixer_api_key=os.environ.get("FIXER_API_KEY", ""),
        binance_api_key=os.environ.get("BINANCE_API_KEY", ""),
        crypto_pairs=tuple(
            p.upper()
            for p in _split_list(
                os.environ.get("CRYPTO_PAIRS", _DEFAULT_CRYPTO_PAIRS)
            )
        ),
        forex_pairs=forex_pairs,
        otc_pairs=otc_pairs,
        crypto_interval_seconds=ints["CRYPTO_INTERVAL_SECONDS"],
        forex_interval_seconds=ints["FOREX_INTERVAL_SECONDS"],
        otc_interval_seconds=ints["OTC_INTERVAL_SECONDS"],
        history_limit=ints["HISTORY_LIMIT"],
        time_fallback_enabled=_parse_bool(
            os.environ.get("TIME_FALLBACK_ENABLED", "true")
        ),
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
        host=os.environ.get("HOST", "0.0.0.0"),
        port=ints["PORT"],
    )
