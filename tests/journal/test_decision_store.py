# tests/journal/test_decision_store.py
"""Tests for DecisionStore."""
from datetime import datetime, timedelta, timezone

import pytest

from src.journal.decision_store import DecisionStore
from src.journal.models import AiTradeDecision

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


def make_decision(
    symbol: str = "AAPL",
    timestamp: datetime = NOW,
    direction: str | None = "bullish",
    timeframe_days: int | None = 5,
    price_at_decision: float | None = 100.0,
) -> AiTradeDecision:
    """Create an AiTradeDecision for testing."""
    return AiTradeDecision(
        timestamp=timestamp,
        action="BUY",
        symbol=symbol,
        confidence=0.8,
        reasoning="Breakout",
        model_used="qwen3:235b",
        price_at_decision=price_at_decision,
        predicted_direction=direction,
        predicted_price_target=110.0 if direction else None,
        predicted_timeframe_days=timeframe_days,
    )


class TestDecisions:
    """Tests for decision rows."""

    def test_save_assigns_ids(self, tmp_path):
        store = DecisionStore(tmp_path)

        assert store.save_decision(make_decision()) == 1
        assert store.save_decision(make_decision("NVDA")) == 2
        assert store.count_decisions() == 2
        assert store.get_decision(2).symbol == "NVDA"

    def test_persists_across_instances(self, tmp_path):
        DecisionStore(tmp_path).save_decision(make_decision())

        reloaded = DecisionStore(tmp_path)

        assert reloaded.count_decisions() == 1
        assert reloaded.get_decision(1).timestamp == NOW

    def test_decisions_most_recent_first(self, tmp_path):
        store = DecisionStore(tmp_path)
        for symbol in ("AAPL", "MSFT", "NVDA"):
            store.save_decision(make_decision(symbol))

        assert [d.symbol for d in store.decisions(limit=2)] == ["NVDA", "MSFT"]

    def test_unevaluated_only_due_predictions(self, tmp_path):
        store = DecisionStore(tmp_path)
        store.save_decision(make_decision("DUE", timestamp=NOW - timedelta(days=6)))
        store.save_decision(make_decision("NOT_DUE", timestamp=NOW - timedelta(days=1)))
        store.save_decision(make_decision("NO_PRED", direction=None, timeframe_days=None))
        store.save_decision(make_decision("NO_PRICE", timestamp=NOW - timedelta(days=6), price_at_decision=None))

        assert [d.symbol for d in store.unevaluated(NOW)] == ["DUE"]

    def test_graded_decisions_not_returned(self, tmp_path):
        store = DecisionStore(tmp_path)
        decision_id = store.save_decision(make_decision(timestamp=NOW - timedelta(days=6)))

        store.update_outcome(decision_id, "100.00 -> 110.00", 110.0, True)

        assert store.unevaluated(NOW) == []

    def test_update_outcome_unknown_id(self, tmp_path):
        with pytest.raises(KeyError):
            DecisionStore(tmp_path).update_outcome(99, "x", 1.0, True)

    def test_prediction_accuracy(self, tmp_path):
        store = DecisionStore(tmp_path)
        for accurate in (True, True, False):
            decision_id = store.save_decision(make_decision())
            store.update_outcome(decision_id, "x", 1.0, accurate)
        store.save_decision(make_decision())

        stats = store.prediction_accuracy()

        assert stats.total_predictions == 3
        assert stats.accurate_predictions == 2
        assert stats.accuracy_percent == pytest.approx(66.667, rel=1e-3)

    def test_prediction_accuracy_empty(self, tmp_path):
        stats = DecisionStore(tmp_path).prediction_accuracy()

        assert stats.total_predictions == 0
        assert stats.accuracy_percent == 0.0


class TestSessions:
    """Tests for trading sessions."""

    def test_session_lifecycle(self, tmp_path):
        store = DecisionStore(tmp_path)

        session = store.start_session(1_000_000.0, NOW)
        store.record_session_activity(session.id, decisions=4, trades=2)
        store.record_session_activity(session.id, decisions=1, trades=0)
        assert store.active_session().id == session.id

        ended = store.end_session(session.id, 1_010_000.0, "good day", NOW + timedelta(hours=6))

        assert ended.status == "completed"
        assert ended.decisions_count == 5
        assert ended.trades_count == 2
        assert ended.ending_portfolio_value == 1_010_000.0
        assert store.active_session() is None
        assert store.count_completed_sessions() == 1

    def test_active_session_survives_restart(self, tmp_path):
        DecisionStore(tmp_path).start_session(1_000_000.0, NOW)

        assert DecisionStore(tmp_path).active_session().id == 1

    def test_end_unknown_session(self, tmp_path):
        with pytest.raises(KeyError):
            DecisionStore(tmp_path).end_session(5, 1.0)
