"""Tests for tradepulse.strategy.indicators — pure indicator functions."""

import math

import pytest

from tradepulse.strategy.indicators import (
    analyze_trend,
    calculate_bollinger,
    calculate_ema,
    calculate_macd,
    calculate_rsi,
    calculate_sma,
    calculate_stochastic,
    compute_indicators,
)
from tradepulse.strategy.models import PriceSeries, Trend


def _rising(n: int = 100) -> list[float]:
    return [float(i) for i in range(1, n + 1)]


def _falling(n: int = 100) -> list[float]:
    return [float(i) for i in range(n, 0, -1)]


class TestPriceSeries:
    def test_length_is_number_of_closes(self):
        assert len(PriceSeries(prices=[1.0, 2.0, 3.0])) == 3

    def test_mismatched_parallel_list_rejected(self):
        with pytest.raises(ValueError, match="highs"):
            PriceSeries(prices=[1.0, 2.0], highs=[1.0])

    def test_empty_parallel_lists_allowed(self):
        series = PriceSeries(prices=[1.0, 2.0])
        assert series.highs == []


class TestSMA:
    def test_mean_of_last_period(self):
        assert calculate_sma([1, 2, 3, 4, 5], 3) == pytest.approx(4.0)

    def test_too_short(self):
        assert calculate_sma([1, 2], 3) is None


class TestEMA:
    def test_seeded_with_first_price(self):
        # k = 2/3; ema = 1 → 2*(2/3)+1/3 = 5/3 → 3*(2/3)+5/9 = 23/9
        assert calculate_ema([1.0, 2.0, 3.0], 2) == pytest.approx(23 / 9)

    def test_constant_series(self):
        assert calculate_ema([4.0] * 30, 12) == pytest.approx(4.0)

    def test_too_short(self):
        assert calculate_ema([1.0, 2.0], 3) is None


class TestRSI:
    def test_all_gains_is_100(self):
        assert calculate_rsi(_rising(30)) == 100.0

    def test_all_losses_is_0(self):
        assert calculate_rsi(_falling(30)) == pytest.approx(0.0)

    def test_requires_period_plus_one(self):
        assert calculate_rsi([1.0] * 14) is None
        assert calculate_rsi([1.0] * 15) is not None

    def test_alternating_is_midrange(self):
        prices = [10.0 + (1 if i % 2 else 0) for i in range(40)]
        rsi = calculate_rsi(prices)
        assert 40 < rsi < 60


class TestMACD:
    def test_rising_series_positive(self):
        assert calculate_macd(_rising()) > 0

    def test_falling_series_negative(self):
        assert calculate_macd(_falling()) < 0

    def test_constant_series_zero(self):
        assert calculate_macd([2.0] * 40) == pytest.approx(0.0)

    def test_needs_slow_period(self):
        assert calculate_macd([1.0] * 25) is None


class TestBollinger:
    def test_population_std(self):
        prices = [float(i) for i in range(81, 101)]
        bands = calculate_bollinger(prices)
        sigma = math.sqrt(sum((p - 90.5) ** 2 for p in prices) / 20)
        assert bands.middle == pytest.approx(90.5)
        assert bands.upper == pytest.approx(90.5 + 2 * sigma)
        assert bands.lower == pytest.approx(90.5 - 2 * sigma)

    def test_constant_series_collapses(self):
        bands = calculate_bollinger([3.0] * 20)
        assert bands.upper == bands.middle == bands.lower == 3.0

    def test_too_short(self):
        assert calculate_bollinger([1.0] * 19) is None


class TestStochastic:
    def test_close_at_top_of_range(self):
        highs = [float(i + 1) for i in range(14)]
        lows = [float(i) for i in range(14)]
        closes = [float(i + 1) for i in range(14)]
        assert calculate_stochastic(highs, lows, closes) == pytest.approx(100.0)

    def test_zero_range_returns_none(self):
        flat = [5.0] * 14
        assert calculate_stochastic(flat, flat, flat) is None

    def test_too_short(self):
        assert calculate_stochastic([1.0] * 13, [1.0] * 13, [1.0] * 13) is None


class TestTrend:
    def test_rising_is_bullish(self):
        assert analyze_trend(_rising()) == Trend.BULLISH

    def test_falling_is_bearish(self):
        assert analyze_trend(_falling()) == Trend.BEARISH

    def test_flat_is_neutral(self):
        assert analyze_trend([1.0] * 60) == Trend.NEUTRAL

    def test_short_series_neutral(self):
        assert analyze_trend(_rising(49)) == Trend.NEUTRAL


class TestComputeIndicators:
    def test_short_series_has_nones(self):
        ind = compute_indicators(_rising(10))
        assert ind.rsi is None
        assert ind.macd is None
        assert ind.bollinger is None
        assert ind.sma20 is None
        assert ind.trend == Trend.NEUTRAL

    def test_full_series(self):
        ind = compute_indicators(_rising())
        assert ind.sma20 == pytest.approx(90.5)
        assert ind.sma50 == pytest.approx(75.5)
        assert ind.trend == Trend.BULLISH
