"""Trade executor that applies validated decisions to the paper ledger."""
import logging
import math
from datetime import datetime, timezone

from src.execution.models import ExecutionResult, MissingPriceError
from src.journal.models import AiTradeDecision
from src.ledger.base import Ledger, PriceSource
from src.ledger.models import NoPositionError, TradeSide
from src.llm.decision_schema import ParsedDecision

logger = logging.getLogger(__name__)


class TradeExecutor:
    """Resolve decision sizes into whole shares and execute them.

    BUY sizes are a percent of available cash, SELL sizes a percent of the
    shares held. A size that rounds down to zero shares is recorded as a
    decision with no trade.

    Attributes:
        _ledger: Ledger that applies the trades.
        _prices: Price lookup used for execution.
    """

    NOTES_PREFIX = "AI: "
    NOTES_MAX_REASONING = 200

    def __init__(self, ledger: Ledger, price_source: PriceSource):
        """Initialize TradeExecutor.

        Args:
            ledger: Ledger to mutate.
            price_source: Latest price lookup.
        """
        self._ledger = ledger
        self._prices = price_source

    def resolve_quantity(self, decision: ParsedDecision, price: float) -> int:
        """Convert the decision's percent into whole shares.

        BUY: floor(cash * pct / 100 / price).
        SELL: floor(position.quantity * pct / 100), 0 without a position.
        HOLD: 0.

        Args:
            decision: Parsed model decision.
            price: Execution price.

        Returns:
            Share count, possibly 0.
        """
        pct = decision.quantity_percent / 100.0
        if decision.action == "BUY":
            cash = self._ledger.portfolio_value().cash
            return math.floor(cash * pct / price)
        if decision.action == "SELL":
            position = self._ledger.position(decision.symbol)
            if position is None:
                return 0
            return math.floor(position.quantity * pct)
        return 0

    def decision_record(
        self,
        decision: ParsedDecision,
        model: str,
        price: float | None,
        session_id: int | None = None,
        index_id: str | None = None,
        now: datetime | None = None,
    ) -> AiTradeDecision:
        """Build the decision row for a model decision, executed or not."""
        prediction = decision.prediction
        return AiTradeDecision(
            timestamp=now or datetime.now(timezone.utc),
            action=decision.action,
            symbol=decision.symbol,
            confidence=decision.confidence,
            reasoning=decision.reasoning,
            model_used=model,
            session_id=session_id,
            price_at_decision=price,
            predicted_direction=prediction.direction if prediction else None,
            predicted_price_target=prediction.price_target if prediction else None,
            predicted_timeframe_days=prediction.timeframe_days if prediction else None,
            index_id=index_id,
        )

    def execute(
        self,
        decision: ParsedDecision,
        model: str,
        session_id: int | None = None,
        index_id: str | None = None,
        now: datetime | None = None,
    ) -> ExecutionResult:
        """Execute a decision that passed validation.

        Args:
            decision: Parsed model decision.
            model: Model that produced it.
            session_id: Active trading session.
            index_id: Decision index entry id.
            now: Decision time. Defaults to the system clock.

        Returns:
            ExecutionResult holding the decision record and the trade, if any.

        Raises:
            MissingPriceError: No price for a BUY or SELL.
            LedgerError: The ledger refused the trade.
        """
        price = self._prices.latest_price(decision.symbol)
        record = self.decision_record(decision, model, price, session_id, index_id, now)

        if decision.action == "HOLD":
            return ExecutionResult(decision=record)

        if price is None or price <= 0:
            raise MissingPriceError(f"No valid price for {decision.symbol}")

        if decision.action == "SELL" and self._ledger.position(decision.symbol) is None:
            raise NoPositionError(f"No position in {decision.symbol} to sell")

        quantity = self.resolve_quantity(decision, price)
        if quantity < 1:
            logger.info(
                f"{decision.action} {decision.symbol} at {decision.quantity_percent}% "
                f"resolves to zero shares, nothing executed"
            )
            return ExecutionResult(decision=record)

        notes = self.NOTES_PREFIX + decision.reasoning[: self.NOTES_MAX_REASONING]
        trade = self._ledger.execute_trade(
            decision.symbol,
            TradeSide(decision.action),
            quantity,
            price,
            notes=notes,
        )

        record.quantity = quantity
        record.paper_trade_id = trade.id
        logger.info(
            f"Executed {trade.action.value} {trade.quantity} {trade.symbol} @ ${trade.price:.2f}"
            + (f" (P&L ${trade.pnl:.2f})" if trade.pnl is not None else "")
        )
        return ExecutionResult(decision=record, trade=trade, realized_pnl=trade.pnl)
