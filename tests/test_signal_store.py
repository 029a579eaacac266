"""Tests for tradepulse.engine.signal_store and the Signal wire payload."""

from tradepulse.engine.signal_store import SignalStore
from tradepulse.models.signal import AnalysisType, Direction, Signal, make_signal_id


def _make_signal(pair: str, confidence: int = 50, **kwargs) -> Signal:
    return Signal(
        id=make_signal_id(pair, 1000),
        pair=pair,
        signal=Direction.NEUTRAL,
        confidence=confidence,
        explanation="signals.explanations.dataUnavailable",
        explanation_params={},
        timestamp=1000,
        price=1.0,
        change24h=0.0,
        **kwargs,
    )


class TestSignalStore:
    def test_put_and_get(self):
        store = SignalStore()
        store.put(_make_signal("EURUSD"))
        assert store.get("EURUSD").pair == "EURUSD"
        assert store.get("GBPUSD") is None

    def test_replace_keeps_insertion_order(self):
        store = SignalStore()
        store.put(_make_signal("BTCUSDT"))
        store.put(_make_signal("EURUSD"))
        store.put(_make_signal("BTCUSDT", confidence=80))
        snapshot = store.snapshot()
        assert [s.pair for s in snapshot] == ["BTCUSDT", "EURUSD"]
        assert snapshot[0].confidence == 80
        assert len(store) == 2

    def test_contains(self):
        store = SignalStore()
        store.put(_make_signal("OTC_EURUSD"))
        assert "OTC_EURUSD" in store
        assert "EURUSD" not in store


class TestSignalPayload:
    def test_optional_fields_omitted(self):
        payload = _make_signal("EURUSD").to_payload()
        assert "technicalReasoning" not in payload
        assert "analysisType" not in payload
        assert payload["id"] == "EURUSD-1000"
        assert payload["reasoning"] == []

    def test_optional_fields_present(self):
        payload = _make_signal(
            "EURUSD",
            technical_reasoning="No data available",
            analysis_type=AnalysisType.NO_DATA,
            synthetic=True,
        ).to_payload()
        assert payload["technicalReasoning"] == "No data available"
        assert payload["analysisType"] == "no_data"
        assert payload["synthetic"] is True
