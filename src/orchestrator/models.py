"""Data models for the model query orchestrator and trading cycle."""

from dataclasses import dataclass, field
from datetime import datetime

from src.execution.models import ExecutionResult
from src.guardrails.models import TradeResult
from src.journal.models import AttemptLog, TradingSession
from src.llm.decision_schema import DecisionResponse, ParsedDecision


class DecisionParseError(ValueError):
    """Raised when a model response does not hold a valid decision payload."""


class AllModelsFailedError(RuntimeError):
    """Raised when every model in the fallback chain failed.

    Attributes:
        attempts: One AttemptLog per model tried, in order.
    """

    def __init__(self, attempts: list[AttemptLog]):
        self.attempts = attempts
        errors = "; ".join(f"{a.model}: {a.error}" for a in attempts)
        super().__init__(f"All {len(attempts)} models failed: {errors}")


class BankruptcyError(RuntimeError):
    """Raised when equity has fallen below the bankruptcy threshold."""

    def __init__(self, equity: float, threshold: float):
        self.equity = equity
        self.threshold = threshold
        super().__init__(f"Portfolio value ${equity:.2f} is below bankruptcy threshold ${threshold:.2f}")


@dataclass
class QueryOutcome:
    """Successful result of a fallback query.

    Attributes:
        model: Model whose response was accepted.
        response: Validated decision payload.
        attempts: Every attempt made, the accepted one last.
        log_file: Attempt log file of the accepted response.
        index_ids: Decision index ids, aligned with ``response.decisions``.
    """

    model: str
    response: DecisionResponse
    attempts: list[AttemptLog]
    log_file: str
    index_ids: list[str] = field(default_factory=list)


@dataclass
class PositionInfo:
    symbol: str
    quantity: float
    entry_price: float
    current_price: float
    unrealized_pnl: float
    unrealized_pnl_percent: float


@dataclass
class PortfolioSnapshot:
    cash: float
    positions: list[PositionInfo]
    total_value: float
    total_pnl: float
    total_pnl_percent: float


@dataclass
class SymbolContext:
    symbol: str
    current_price: float | None
    has_confluence: bool


@dataclass
class RecentTrade:
    symbol: str
    action: str
    quantity: float
    price: float
    pnl: float | None
    timestamp: datetime


@dataclass
class TradingConstraints:
    """Limits presented to the model alongside the market data."""

    trading_mode: str
    max_position_size_percent: float
    max_daily_trades: int
    max_single_trade_value: float
    require_confluence: bool
    stop_loss_percent: float
    take_profit_percent: float
    min_cash_reserve_percent: float


@dataclass
class MarketContext:
    """Everything the model sees when deciding."""

    timestamp: datetime
    portfolio: PortfolioSnapshot
    symbols_data: list[SymbolContext]
    recent_trades: list[RecentTrade]
    prediction_accuracy: float | None
    constraints: TradingConstraints

    def confluence_for(self, symbol: str) -> bool:
        for ctx in self.symbols_data:
            if ctx.symbol == symbol:
                return ctx.has_confluence
        return False


@dataclass
class DecisionOutcome:
    """What happened to one decision during a cycle."""

    decision: ParsedDecision
    verdict: TradeResult | None = None
    execution: ExecutionResult | None = None
    error: str | None = None


@dataclass
class CycleReport:
    """Summary of one trading cycle."""

    started_at: datetime
    model_used: str
    market_outlook: str | None
    outcomes: list[DecisionOutcome] = field(default_factory=list)
    portfolio_value: float | None = None

    @property
    def trades_executed(self) -> int:
        return sum(1 for o in self.outcomes if o.execution is not None and o.execution.executed)

    @property
    def errors(self) -> list[str]:
        return [o.error for o in self.outcomes if o.error]


@dataclass
class TraderStatus:
    is_running: bool
    current_session: TradingSession | None
    portfolio_value: float
    cash: float
    positions_value: float
    is_bankrupt: bool
    sessions_completed: int
    total_decisions: int
    total_trades: int
    trading_mode: str
    circuit_breaker_triggered: bool
    override_active: bool
