"""Data models for trade guardrails."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class TradingMode(str, Enum):
    """Trading mode, which fully determines the active guardrails."""

    AGGRESSIVE = "aggressive"
    NORMAL = "normal"
    CONSERVATIVE = "conservative"
    PAUSED = "paused"

    @property
    def permissiveness(self) -> int:
        """Rank used to order modes: paused < conservative < normal < aggressive."""
        return _PERMISSIVENESS[self]


_PERMISSIVENESS = {
    TradingMode.PAUSED: 0,
    TradingMode.CONSERVATIVE: 1,
    TradingMode.NORMAL: 2,
    TradingMode.AGGRESSIVE: 3,
}


class RuleTag(str, Enum):
    """Machine-readable tag of the guardrail rule that rejected a trade."""

    MODE_PAUSED = "mode_paused"
    CIRCUIT_BREAKER_PAUSE = "circuit_breaker_pause"
    MAX_POSITION_SIZE = "max_position_size"
    MAX_TRADE_VALUE = "max_trade_value"
    REQUIRE_CONFLUENCE = "require_confluence"
    MAX_DAILY_TRADES = "max_daily_trades"
    BLOCKED_HOURS = "blocked_hours"


@dataclass(frozen=True)
class GuardrailSet:
    """Hard trading limits derived from a trading mode.

    Attributes:
        mode: The mode these limits belong to.
        max_position_pct: Maximum position size as percent of capital.
        max_daily_trades: Maximum executed trades per UTC day.
        max_single_trade_value: Maximum dollar value of one trade.
        require_confluence: Whether confluence support is required.
        blocked_hours: Half-open UTC hour ranges [start, end) with no trading.
    """

    mode: TradingMode
    max_position_pct: float
    max_daily_trades: int
    max_single_trade_value: float
    require_confluence: bool
    blocked_hours: tuple[tuple[int, int], ...] = ()

    def blocked_range_for(self, hour: int) -> tuple[int, int] | None:
        """Return the blocked range containing ``hour``, if any."""
        for start, end in self.blocked_hours:
            if start <= hour < end:
                return (start, end)
        return None


@dataclass(frozen=True)
class ProposedTrade:
    """A trade proposal built from a model decision, before validation."""

    action: str
    symbol: str
    quantity: float
    quantity_percent: float
    estimated_value: float
    confidence: float
    reasoning: str


@dataclass
class Executed:
    """Trade cleared every guardrail.

    ``trade_id`` and ``price`` stay empty until the executor fills them.
    """

    symbol: str
    action: str
    quantity: float
    value: float
    trade_id: int | None = None
    price: float | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    status = "executed"


@dataclass
class Queued:
    """Trade held for human review."""

    reason: str
    review_by: datetime
    proposed_trade: ProposedTrade

    status = "queued"


@dataclass
class Rejected:
    """Trade refused by a guardrail rule."""

    reason: str
    rule_triggered: RuleTag
    proposed_trade: ProposedTrade

    status = "rejected"


TradeResult = Executed | Queued | Rejected
