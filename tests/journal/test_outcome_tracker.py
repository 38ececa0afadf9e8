# tests/journal/test_outcome_tracker.py
"""Tests for prediction outcome grading."""
from datetime import datetime, timedelta, timezone

import pytest

from src.journal.audit_trail import AuditTrail
from src.journal.decision_store import DecisionStore
from src.journal.models import AiTradeDecision
from src.journal.outcome_tracker import PredictionOutcomeTracker, is_prediction_accurate
from src.ledger.base import PriceSource
from src.llm.decision_schema import ParsedDecision, Prediction

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


class FixedPrices(PriceSource):
    def __init__(self, prices: dict[str, float]):
        self.prices = prices

    def latest_price(self, symbol: str) -> float | None:
        return self.prices.get(symbol)


def make_decision(
    symbol: str = "AAPL",
    direction: str = "bullish",
    price_at_decision: float = 100.0,
    index_id: str | None = None,
) -> AiTradeDecision:
    """Create a due AiTradeDecision for testing."""
    return AiTradeDecision(
        timestamp=NOW - timedelta(days=6),
        action="BUY",
        symbol=symbol,
        confidence=0.8,
        reasoning="Breakout",
        model_used="qwen3:235b",
        price_at_decision=price_at_decision,
        predicted_direction=direction,
        predicted_price_target=110.0,
        predicted_timeframe_days=5,
        index_id=index_id,
    )


class TestIsPredictionAccurate:
    """Tests for is_prediction_accurate."""

    @pytest.mark.parametrize(
        "direction,current,expected",
        [
            ("bullish", 110.0, True),
            ("bullish", 95.0, False),
            ("bullish", 100.0, False),
            ("bearish", 95.0, True),
            ("bearish", 110.0, False),
            ("neutral", 100.0, False),
            ("neutral", 110.0, False),
        ],
    )
    def test_grading(self, direction, current, expected):
        assert is_prediction_accurate(direction, 100.0, current) is expected


class TestPredictionOutcomeTracker:
    """Tests for PredictionOutcomeTracker."""

    async def test_grades_due_predictions(self, tmp_path):
        store = DecisionStore(tmp_path)
        store.save_decision(make_decision("AAPL"))
        store.save_decision(make_decision("NVDA"))
        tracker = PredictionOutcomeTracker(store, FixedPrices({"AAPL": 110.0, "NVDA": 95.0}))

        graded = await tracker.evaluate_predictions(NOW)

        assert graded == 2
        aapl, nvda = store.get_decision(1), store.get_decision(2)
        assert aapl.prediction_accurate is True
        assert aapl.actual_price_at_timeframe == 110.0
        assert aapl.actual_outcome == "100.00 -> 110.00 (predicted: 110.00)"
        assert nvda.prediction_accurate is False

    async def test_missing_price_defers_grading(self, tmp_path):
        store = DecisionStore(tmp_path)
        store.save_decision(make_decision("AAPL"))
        tracker = PredictionOutcomeTracker(store, FixedPrices({}))

        assert await tracker.evaluate_predictions(NOW) == 0
        assert store.get_decision(1).is_graded is False

        tracker = PredictionOutcomeTracker(store, FixedPrices({"AAPL": 120.0}))
        assert await tracker.evaluate_predictions(NOW) == 1

    async def test_graded_once(self, tmp_path):
        store = DecisionStore(tmp_path)
        store.save_decision(make_decision())
        tracker = PredictionOutcomeTracker(store, FixedPrices({"AAPL": 110.0}))

        await tracker.evaluate_predictions(NOW)

        assert await tracker.evaluate_predictions(NOW) == 0

    async def test_updates_decision_index(self, tmp_path):
        trail = AuditTrail(tmp_path / "logs")
        parsed = ParsedDecision(
            action="BUY",
            symbol="AAPL",
            quantity_percent=5.0,
            confidence=0.8,
            reasoning="Breakout",
            prediction=Prediction(direction="bullish", price_target=110.0, timeframe_days=5),
        )
        [index_id] = await trail.index_decisions("m", [parsed], "log.json", NOW - timedelta(days=6))
        store = DecisionStore(tmp_path / "data")
        store.save_decision(make_decision(index_id=index_id))
        tracker = PredictionOutcomeTracker(store, FixedPrices({"AAPL": 108.0}), trail)

        await tracker.evaluate_predictions(NOW)

        index = await trail.load_index()
        entry = index.entries[0]
        assert entry.outcome_recorded is True
        assert entry.actual_pnl == pytest.approx(8.0)
        assert entry.prediction_accurate is True
        assert index.accuracy_rate == 100.0
