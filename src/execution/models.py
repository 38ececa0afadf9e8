"""Data models for the execution system."""
from dataclasses import dataclass

from src.journal.models import AiTradeDecision
from src.ledger.models import Trade


class MissingPriceError(LookupError):
    """Raised when no price is available to execute a decision."""


@dataclass
class ExecutionResult:
    """Result of applying one decision to the ledger.

    Attributes:
        decision: Decision record, with paper_trade_id set when a trade executed.
        trade: Ledger trade, None for HOLD or zero-share resolutions.
        realized_pnl: Realized P&L for sells.
    """

    decision: AiTradeDecision
    trade: Trade | None = None
    realized_pnl: float | None = None

    @property
    def executed(self) -> bool:
        return self.trade is not None
