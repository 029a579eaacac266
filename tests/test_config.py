"""Tests for tradepulse.config — environment variable loading and validation."""

import pytest

from tradepulse.config import Config, load_config

_ENV_VARS = [
    "ALPHA_VANTAGE_API_KEY",
    "EXCHANGE_RATE_API_KEYS",
    "FIXER_API_KEY",
    "BINANCE_API_KEY",
    "CRYPTO_PAIRS",
    "FOREX_PAIRS",
    "OTC_PAIRS",
    "CRYPTO_INTERVAL_SECONDS",
    "FOREX_INTERVAL_SECONDS",
    "OTC_INTERVAL_SECONDS",
    "HISTORY_LIMIT",
    "TIME_FALLBACK_ENABLED",
    "LOG_LEVEL",
    "HOST",
    "PORT",
]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Ensure TradePulse env vars are cleared between tests."""
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def env_path(tmp_path):
    # Non-existent file so load_dotenv doesn't populate from a real .env
    return str(tmp_path / "nonexistent.env")


class TestLoadConfig:
    def test_defaults(self, env_path):
        cfg = load_config(env_path=env_path)
        assert cfg.crypto_pairs[0] == "BTCUSDT"
        assert len(cfg.crypto_pairs) == 8
        assert cfg.forex_pairs[0] == "EURUSD"
        assert len(cfg.forex_pairs) == 8
        assert cfg.crypto_interval_seconds == 300
        assert cfg.forex_interval_seconds == 900
        assert cfg.otc_interval_seconds == 900
        assert cfg.history_limit == 100
        assert cfg.time_fallback_enabled is True
        assert cfg.exchange_rate_api_keys == ()
        assert cfg.alpha_vantage_api_key == ""
        assert cfg.port == 3000

    def test_otc_pairs_default_to_forex(self, monkeypatch, env_path):
        monkeypatch.setenv("FOREX_PAIRS", "eurusd, gbpusd")
        cfg = load_config(env_path=env_path)
        assert cfg.forex_pairs == ("EURUSD", "GBPUSD")
        assert cfg.otc_pairs == ("OTC_EURUSD", "OTC_GBPUSD")

    def test_explicit_otc_pairs(self, monkeypatch, env_path):
        monkeypatch.setenv("OTC_PAIRS", "OTC_USDJPY")
        cfg = load_config(env_path=env_path)
        assert cfg.otc_pairs == ("OTC_USDJPY",)

    def test_key_pool_split(self, monkeypatch, env_path):
        monkeypatch.setenv("EXCHANGE_RATE_API_KEYS", "k0, k1,,k2 ")
        cfg = load_config(env_path=env_path)
        assert cfg.exchange_rate_api_keys == ("k0", "k1", "k2")

    def test_time_fallback_disabled(self, monkeypatch, env_path):
        monkeypatch.setenv("TIME_FALLBACK_ENABLED", "false")
        cfg = load_config(env_path=env_path)
        assert cfg.time_fallback_enabled is False

    def test_non_integer_interval(self, monkeypatch, env_path):
        monkeypatch.setenv("CRYPTO_INTERVAL_SECONDS", "five")
        with pytest.raises(ValueError, match="CRYPTO_INTERVAL_SECONDS"):
            load_config(env_path=env_path)

    def test_zero_history_limit(self, monkeypatch, env_path):
        monkeypatch.setenv("HISTORY_LIMIT", "0")
        with pytest.raises(ValueError, match="HISTORY_LIMIT"):
            load_config(env_path=env_path)

    @pytest.mark.parametrize("raw", ["abc", "0", "-1"])
    def test_invalid_port(self, monkeypatch, env_path, raw):
        monkeypatch.setenv("PORT", raw)
        with pytest.raises(ValueError, match="PORT"):
            load_config(env_path=env_path)

    def test_invalid_forex_pair(self, monkeypatch, env_path):
        monkeypatch.setenv("FOREX_PAIRS", "EURUSD,EUR_USD")
        with pytest.raises(ValueError, match="FOREX_PAIRS"):
            load_config(env_path=env_path)


class TestGroups:
    def test_group_order_and_intervals(self, env_path):
        groups = load_config(env_path=env_path).groups()
        assert [g.name for g in groups] == ["crypto", "forex", "otc"]
        assert [g.kind for g in groups] == ["crypto", "forex", "otc"]
        assert groups[0].interval_seconds == 300
        assert groups[1].interval_seconds == 900

    def test_config_is_frozen(self, env_path):
        cfg = load_config(env_path=env_path)
        with pytest.raises(AttributeError):
            cfg.history_limit = 5  # type: ignore[misc]

    def test_direct_construction(self):
        cfg = Config(
            alpha_vantage_api_key="",
            exchange_rate_api_keys=(),
            fixer_api_key="",
            binance_api_key="",
            crypto_pairs=("BTCUSDT",),
            forex_pairs=("EURUSD",),
            otc_pairs=("OTC_EURUSD",),
        )
        assert cfg.groups()[2].pairs == ("OTC_EURUSD",)
