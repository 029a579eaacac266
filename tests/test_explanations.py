"""Tests for tradepulse.strategy.explanations — key and parameter selection."""

from tradepulse.models.signal import Direction
from tradepulse.strategy.explanations import (
    CURRENT_RATE,
    FALL_SELL,
    GROWTH_BUY,
    HIGH_RATE,
    LOW_RATE,
    NON_TRADING_HOURS,
    PRICE_INFO,
    TRADING_HOURS,
    generate_explanation,
    trend_word,
)


class TestTrendWord:
    def test_words(self):
        assert trend_word(1.2) == "upward"
        assert trend_word(-0.1) == "downward"
        assert trend_word(0.0) == "sideways"


class TestDirectionFirst:
    def test_buy(self):
        key, params = generate_explanation(Direction.BUY, 1.234, 100.0)
        assert key == "signals.explanations.growthBuy"
        assert key == GROWTH_BUY
        assert params == {"change": "1.23", "trend": "upward"}

    def test_sell_uses_absolute_change(self):
        key, params = generate_explanation(Direction.SELL, -2.5, 100.0)
        assert key == FALL_SELL
        assert params == {"change": "2.50", "trend": "downward"}

    def test_direction_beats_rate_context(self):
        key, _ = generate_explanation(
            Direction.BUY, 0.0, 1.2, base="EUR", quote="USD", rate=1.2,
        )
        assert key == GROWTH_BUY


class TestRateBands:
    def test_high_rate(self):
        key, params = generate_explanation(
            Direction.NEUTRAL, 0.0, 1.25, base="GBP", quote="USD", rate=1.25,
        )
        assert key == HIGH_RATE
        assert params == {"base": "GBP", "quote": "USD", "rate": "1.2500"}

    def test_low_rate(self):
        key, _ = generate_explanation(
            Direction.NEUTRAL, 0.0, 0.65, base="NZD", quote="USD", rate=0.65,
        )
        assert key == LOW_RATE

    def test_current_rate(self):
        key, params = generate_explanation(
            Direction.NEUTRAL, 0.0, 1.05, base="EUR", quote="USD", rate=1.05,
        )
        assert key == CURRENT_RATE
        assert params["rate"] == "1.0500"


class TestHourBands:
    def test_trading_hours(self):
        key, params = generate_explanation(
            Direction.NEUTRAL, 0.0, 1.0, hour=9, minute=5,
        )
        assert key == TRADING_HOURS
        assert params == {"hour": 9, "minute": "05"}

    def test_non_trading_hours(self):
        key, _ = generate_explanation(Direction.NEUTRAL, 0.0, 1.0, hour=18, minute=0)
        assert key == NON_TRADING_HOURS


class TestPriceInfoDefault:
    def test_price_info(self):
        key, params = generate_explanation(Direction.NEUTRAL, -0.1, 65000.5)
        assert key == PRICE_INFO
        assert params == {"price": "65000.5000", "change": "-0.10", "trend": "downward"}
