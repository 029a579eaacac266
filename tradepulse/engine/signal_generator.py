"""Signal generator — runs the fetch-and-score chain for one instrument.

Each ``generate`` call walks an ordered set of states, each a fallback of
the previous one, and always returns a ``Signal``:

    1. Primary fetch   quote cascade, then history cascade
    2. Technical       history has ≥ 50 points → scorer
    3. Price change    history too short or missing → 24h change thresholds
    4. Rate based      forex only, quote cascade exhausted → exchange rate level
    5. Time based      forex only, every exchange-rate key failed → hour of day
    6. No data         nothing usable was reached
    7. Error           any unexpected exception in the chain

OTC signals are derived from the base forex pair's signal without any
extra fetching.
"""

import dataclasses
import logging
import time
from datetime import datetime, timezone
from typing import Callable, Optional

from tradepulse.config import Config
from tradepulse.feeds.cascade import ProviderCascade
from tradepulse.feeds.forex import ExchangeRateLookup
from tradepulse.feeds.models import Quote
from tradepulse.models.instrument_group import (
    is_crypto,
    is_otc,
    otc_base_pair,
    split_forex_pair,
)
from tradepulse.models.signal import AnalysisType, Direction, Signal, make_signal_id
from tradepulse.strategy.explanations import (
    DATA_UNAVAILABLE,
    ERROR_GETTING_DATA,
    generate_explanation,
)
from tradepulse.strategy.models import PriceSeries
from tradepulse.strategy.scorer import MIN_SERIES_LENGTH, analyze_signal, round_half_up

logger = logging.getLogger("tradepulse.engine")

CRYPTO_CHANGE_THRESHOLD = 0.5  # percent
CRYPTO_CHANGE_SLOPE = 2.0
FOREX_CHANGE_THRESHOLD = 0.2  # percent
FOREX_CHANGE_SLOPE = 15.0

RATE_BUY_LEVEL = 1.1
RATE_SELL_LEVEL = 0.9
RATE_CONFIDENCE = 65

OTC_CONFIDENCE_PENALTY = 5
OTC_CONFIDENCE_FLOOR = 50

# Display-only values for paths without a measured price or change
PLACEHOLDER_PRICE = 1.0
PLACEHOLDER_CHANGE = 0.0

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ── Pure decision rules ──────────────────────────────────────────────────


def price_change_direction(
    change24h: float,
    threshold: float,
    slope: float,
) -> tuple[Direction, int]:
    """Classify a 24h change against ±*threshold* percent.

    Confidence is ``min(95, 55 + |change| × slope)`` outside the band and
    50 inside it.
    """
    if change24h > threshold:
        return Direction.BUY, round_half_up(min(95.0, 55 + change24h * slope))
    if change24h < -threshold:
        return Direction.SELL, round_half_up(min(95.0, 55 + abs(change24h) * slope))
    return Direction.NEUTRAL, 50


def rate_direction(rate: float) -> tuple[Direction, int]:
    """Classify a raw exchange rate: above 1.1 buy, below 0.9 sell."""
    if rate > RATE_BUY_LEVEL:
        return Direction.BUY, RATE_CONFIDENCE
    if rate < RATE_SELL_LEVEL:
        return Direction.SELL, RATE_CONFIDENCE
    return Direction.NEUTRAL, 50


def time_direction(hour: int) -> tuple[Direction, int]:
    """Classify an hour of day: 09–17 buy, 18–08 sell."""
    if 9 <= hour <= 17:
        return Direction.BUY, 65
    if hour >= 18 or hour <= 8:
        return Direction.SELL, 60
    return Direction.NEUTRAL, 50


def overlay_otc(base: Signal, otc_pair: str, timestamp_ms: int) -> Signal:
    """Derive an OTC signal from its base forex signal.

    All fields are copied; id and pair are replaced, confidence drops by 5
    with a floor of 50, and ``otcContext`` is added to the explanation
    parameters.
    """
    return dataclasses.replace(
        base,
        id=make_signal_id(otc_pair, timestamp_ms),
        pair=otc_pair,
        confidence=max(OTC_CONFIDENCE_FLOOR, base.confidence - OTC_CONFIDENCE_PENALTY),
        explanation_params={**base.explanation_params, "otcContext": True},
        timestamp=timestamp_ms,
        analysis_type=AnalysisType.OTC,
    )


# ── Orchestrator ─────────────────────────────────────────────────────────


class SignalGenerator:
    """Produces one ``Signal`` per call for crypto, forex and OTC pairs.

    Args:
        config: Application configuration (history limit, time fallback).
        crypto_quotes: Crypto live-quote cascade.
        crypto_history: Crypto history cascade.
        forex_quotes: Forex live-quote cascade.
        forex_history: Forex history cascade.
        rate_lookup: Rotating exchange-rate lookup for forex fallbacks.
        clock: Returns the current UTC time. Injected for tests.
    """

    def __init__(
        self,
        config: Config,
        crypto_quotes: ProviderCascade,
        crypto_history: ProviderCascade,
        forex_quotes: ProviderCascade,
        forex_history: ProviderCascade,
        rate_lookup: ExchangeRateLookup,
        clock: Optional[Clock] = None,
    ) -> None:
        self._config = config
        self._crypto_quotes = crypto_quotes
        self._crypto_history = crypto_history
        self._forex_quotes = forex_quotes
        self._forex_history = forex_history
        self._rates = rate_lookup
        self._clock = clock or _utc_now

    # ── Public API ───────────────────────────────────────────────────────

    async def generate(self, pair: str) -> Signal:
        """Generate a signal for *pair*. Never raises."""
        try:
            if is_otc(pair):
                return await self.generate_otc(pair)
            if is_crypto(pair):
                return await self._generate_crypto(pair)
            return await self._generate_forex(pair)
        except Exception:
            logger.exception("Signal generation for %s failed", pair)
            return self._error_signal(pair)

    async def generate_otc(self, otc_pair: str) -> Signal:
        """Generate an OTC signal from its base forex pair. Never raises."""
        base_pair = otc_base_pair(otc_pair)
        logger.info("OTC %s: deriving from %s", otc_pair, base_pair)
        base = await self.generate(base_pair)
        try:
            return overlay_otc(base, otc_pair, self._now_ms())
        except Exception:
            logger.exception("OTC overlay for %s failed", otc_pair)
            return self._error_signal(otc_pair)

    # ── Chains ───────────────────────────────────────────────────────────

    async def _generate_crypto(self, pair: str) -> Signal:
        result = await self._crypto_quotes.run(pair)
        if not result.ok:
            logger.warning("Crypto %s: every quote tier failed", pair)
            return self._no_data_signal(pair)

        series = await self._fetch_history(self._crypto_history, pair)
        return self._signal_from_quote(
            pair, result.value, series,
            CRYPTO_CHANGE_THRESHOLD, CRYPTO_CHANGE_SLOPE,
        )

    async def _generate_forex(self, pair: str) -> Signal:
        result = await self._forex_quotes.run(pair)
        if result.ok:
            series = await self._fetch_history(self._forex_history, pair)
            return self._signal_from_quote(
                pair, result.value, series,
                FOREX_CHANGE_THRESHOLD, FOREX_CHANGE_SLOPE,
            )

        lookup = await self._rates.lookup(pair)
        if lookup.rate is not None:
            logger.debug(
                "Forex %s: rate from exchange-rate key %s", pair, lookup.key_index,
            )
            return self._rate_signal(pair, lookup.rate)
        if lookup.completed:
            # A completed exchange-rate call ends the rotation even without
            # a usable rate; the time-based fallback is not reached.
            logger.warning(
                "Forex %s: exchange-rate response (key %s) had no rate",
                pair, lookup.key_index,
            )
            return self._no_data_signal(pair)
        if self._config.time_fallback_enabled:
            return self._time_signal(pair)
        return self._no_data_signal(pair)

    async def _fetch_history(
        self, cascade: ProviderCascade, pair: str,
    ) -> Optional[PriceSeries]:
        result = await cascade.run(pair, limit=self._config.history_limit)
        return result.value

    # ── Signal builders ──────────────────────────────────────────────────

    def _now_ms(self) -> int:
        return int(self._clock().timestamp() * 1000)

    def _signal_from_quote(
        self,
        pair: str,
        quote: Quote,
        series: Optional[PriceSeries],
        threshold: float,
        slope: float,
    ) -> Signal:
        score = None
        if series is not None and len(series) >= MIN_SERIES_LENGTH:
            score = analyze_signal(series.prices, series.highs, series.lows)

        if score is not None:
            direction, confidence = score.direction, score.confidence
            reasoning = score.reasoning
            analysis_type = AnalysisType.TECHNICAL
            logger.info(
                "%s technical: %s (%d%%) — %s",
                pair, direction.value, confidence, score.reasoning_text,
            )
        else:
            direction, confidence = price_change_direction(
                quote.change24h, threshold, slope,
            )
            reasoning = ()
            analysis_type = AnalysisType.PRICE_CHANGE
            logger.info(
                "%s price change %.2f%% (history: %s): %s (%d%%)",
                pair, quote.change24h,
                len(series) if series is not None else "none",
                direction.value, confidence,
            )

        key, params = generate_explanation(direction, quote.change24h, quote.price)
        timestamp = self._now_ms()
        return Signal(
            id=make_signal_id(pair, timestamp),
            pair=pair,
            signal=direction,
            confidence=confidence,
            explanation=key,
            explanation_params=params,
            timestamp=timestamp,
            price=quote.price,
            change24h=quote.change24h,
            technical_reasoning=(
                ", ".join(reasoning) or f"Price change: {quote.change24h:.2f}%"
            ),
            reasoning=tuple(reasoning),
            analysis_type=analysis_type,
        )

    def _rate_signal(self, pair: str, rate: float) -> Signal:
        base, quote = split_forex_pair(pair)
        direction, confidence = rate_direction(rate)
        key, params = generate_explanation(
            direction, PLACEHOLDER_CHANGE, rate, base, quote, rate,
        )
        logger.info(
            "%s rate based: rate=%.4f → %s (%d%%)",
            pair, rate, direction.value, confidence,
        )
        timestamp = self._now_ms()
        return Signal(
            id=make_signal_id(pair, timestamp),
            pair=pair,
            signal=direction,
            confidence=confidence,
            explanation=key,
            explanation_params=params,
            timestamp=timestamp,
            price=rate,
            change24h=PLACEHOLDER_CHANGE,
            synthetic=True,
        )

    def _time_signal(self, pair: str) -> Signal:
        now = self._clock()
        direction, confidence = time_direction(now.hour)
        key, params = generate_explanation(
            direction, PLACEHOLDER_CHANGE, PLACEHOLDER_PRICE,
            hour=now.hour, minute=now.minute,
        )
        logger.info(
            "%s time based: %02d:%02d UTC → %s (%d%%)",
            pair, now.hour, now.minute, direction.value, confidence,
        )
        timestamp = int(now.timestamp() * 1000)
        return Signal(
            id=make_signal_id(pair, timestamp),
            pair=pair,
            signal=direction,
            confidence=confidence,
            explanation=key,
            explanation_params=params,
            timestamp=timestamp,
            price=PLACEHOLDER_PRICE,
            change24h=PLACEHOLDER_CHANGE,
            synthetic=True,
        )

    def _no_data_signal(self, pair: str) -> Signal:
        timestamp = self._now_ms()
        return Signal(
            id=make_signal_id(pair, timestamp),
            pair=pair,
            signal=Direction.NEUTRAL,
            confidence=50,
            explanation=DATA_UNAVAILABLE,
            explanation_params={},
            timestamp=timestamp,
            price=PLACEHOLDER_PRICE,
            change24h=PLACEHOLDER_CHANGE,
            technical_reasoning="No data available",
            analysis_type=AnalysisType.NO_DATA,
            synthetic=True,
        )

    @staticmethod
    def _error_signal(pair: str) -> Signal:
        # Wall clock: the injected clock may be what raised
        timestamp = int(time.time() * 1000)
        return Signal(
            id=make_signal_id(pair, timestamp),
            pair=pair,
            signal=Direction.NEUTRAL,
            confidence=50,
            explanation=ERROR_GETTING_DATA,
            explanation_params={},
            timestamp=timestamp,
            price=PLACEHOLDER_PRICE,
            change24h=PLACEHOLDER_CHANGE,
            technical_reasoning="Error getting data",
            analysis_type=AnalysisType.ERROR,
            synthetic=True,
        )
