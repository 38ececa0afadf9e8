# tests/execution/test_trade_executor.py
"""Tests for TradeExecutor class."""
import pytest
from datetime import datetime, timezone

from src.execution.models import MissingPriceError
from src.execution.trade_executor import TradeExecutor
from src.ledger.base import PriceSource
from src.ledger.models import InsufficientCashError, NoPositionError, TradeSide
from src.ledger.paper_ledger import PaperLedger
from src.llm.decision_schema import ParsedDecision, Prediction

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


class FixedPrices(PriceSource):
    def __init__(self, prices: dict[str, float]):
        self.prices = prices

    def latest_price(self, symbol: str) -> float | None:
        return self.prices.get(symbol)


# Helper functions for test fixtures
def make_decision(
    action: str = "BUY",
    symbol: str = "AAPL",
    quantity_percent: float = 10.0,
    reasoning: str = "Breakout above resistance",
    with_prediction: bool = True,
) -> ParsedDecision:
    """Create a test ParsedDecision with sensible defaults."""
    return ParsedDecision(
        action=action,
        symbol=symbol,
        quantity_percent=quantity_percent,
        confidence=0.8,
        reasoning=reasoning,
        prediction=(
            Prediction(direction="bullish", price_target=120.0, timeframe_days=5)
            if with_prediction
            else None
        ),
    )


def make_executor(
    cash: float = 10_000.0,
    prices: dict[str, float] | None = None,
) -> tuple[TradeExecutor, PaperLedger]:
    """Create an executor over a fresh ledger."""
    price_source = FixedPrices({"AAPL": 100.0} if prices is None else prices)
    ledger = PaperLedger(starting_cash=cash, price_source=price_source, clock=lambda: NOW)
    return TradeExecutor(ledger, price_source), ledger


class TestResolveQuantity:
    """Tests for TradeExecutor.resolve_quantity."""

    def test_buy_is_percent_of_cash(self):
        executor, _ = make_executor(cash=10_000.0)

        assert executor.resolve_quantity(make_decision(quantity_percent=10.0), 100.0) == 10

    def test_buy_rounds_down(self):
        executor, _ = make_executor(cash=10_000.0)

        assert executor.resolve_quantity(make_decision(quantity_percent=10.0), 300.0) == 3

    def test_sell_is_percent_of_position(self):
        executor, ledger = make_executor()
        ledger.execute_trade("AAPL", TradeSide.BUY, 15, 100.0)

        assert executor.resolve_quantity(make_decision("SELL", quantity_percent=50.0), 100.0) == 7

    def test_sell_without_position_is_zero(self):
        executor, _ = make_executor()

        assert executor.resolve_quantity(make_decision("SELL"), 100.0) == 0

    def test_hold_is_zero(self):
        executor, _ = make_executor()

        assert executor.resolve_quantity(make_decision("HOLD"), 100.0) == 0


class TestExecute:
    """Tests for TradeExecutor.execute."""

    def test_buy_executes(self):
        executor, ledger = make_executor()

        result = executor.execute(make_decision(), "qwen3:235b", session_id=2, index_id="idx", now=NOW)

        assert result.executed is True
        assert result.trade.quantity == 10
        assert result.trade.price == 100.0
        assert result.trade.notes == "AI: Breakout above resistance"
        assert result.realized_pnl is None
        assert ledger.cash == 9_000.0

        record = result.decision
        assert record.quantity == 10
        assert record.paper_trade_id == result.trade.id
        assert record.price_at_decision == 100.0
        assert record.session_id == 2
        assert record.index_id == "idx"
        assert record.model_used == "qwen3:235b"
        assert record.predicted_direction == "bullish"
        assert record.predicted_timeframe_days == 5

    def test_notes_truncate_reasoning(self):
        executor, _ = make_executor()

        result = executor.execute(make_decision(reasoning="x" * 500), "m", now=NOW)

        assert result.trade.notes == "AI: " + "x" * 200

    def test_sell_realizes_pnl(self):
        executor, ledger = make_executor(prices={"AAPL": 120.0})
        ledger.execute_trade("AAPL", TradeSide.BUY, 10, 100.0)

        result = executor.execute(make_decision("SELL", quantity_percent=100.0), "m", now=NOW)

        assert result.trade.action == TradeSide.SELL
        assert result.realized_pnl == pytest.approx(200.0)
        assert ledger.position("AAPL") is None

    def test_hold_records_without_trade(self):
        executor, ledger = make_executor()

        result = executor.execute(make_decision("HOLD"), "m", now=NOW)

        assert result.executed is False
        assert result.decision.paper_trade_id is None
        assert result.decision.quantity is None
        assert ledger.trades() == []

    def test_zero_share_resolution_records_without_trade(self):
        executor, ledger = make_executor(cash=50.0)

        result = executor.execute(make_decision(quantity_percent=10.0), "m", now=NOW)

        assert result.executed is False
        assert result.decision.paper_trade_id is None
        assert ledger.trades() == []

    def test_missing_price(self):
        executor, _ = make_executor(prices={})

        with pytest.raises(MissingPriceError):
            executor.execute(make_decision(), "m", now=NOW)

    def test_zero_price_treated_as_missing(self):
        executor, ledger = make_executor(prices={"AAPL": 0.0})

        with pytest.raises(MissingPriceError):
            executor.execute(make_decision(), "m", now=NOW)
        assert ledger.trades() == []

    def test_hold_without_price_is_fine(self):
        executor, _ = make_executor(prices={})

        result = executor.execute(make_decision("HOLD"), "m", now=NOW)

        assert result.decision.price_at_decision is None

    def test_sell_without_position(self):
        executor, _ = make_executor()

        with pytest.raises(NoPositionError):
            executor.execute(make_decision("SELL"), "m", now=NOW)

    def test_ledger_error_propagates(self):
        executor, ledger = make_executor(cash=10_000.0)
        executor.resolve_quantity = lambda decision, price: 1_000

        with pytest.raises(InsufficientCashError):
            executor.execute(make_decision(), "m", now=NOW)
        assert ledger.cash == 10_000.0
