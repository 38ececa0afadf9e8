"""Data models for the decision audit trail and risk journal."""
from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any


def _utc_stamp(moment: datetime | None = None) -> str:
    return (moment or datetime.now(timezone.utc)).strftime("%Y-%m-%d %H:%M:%S UTC")


@dataclass
class AttemptLog:
    """Record of one model query attempt, successful or not.

    Attributes:
        timestamp: When the attempt started (UTC).
        model: Model identifier queried.
        prompt: Context prompt sent to the model.
        raw_response: Full response text including any reasoning trace.
        parsed_decisions: Validated decision payload on success.
        error: Transport or parse error on failure.
        duration_seconds: Wall time of the attempt.
    """

    timestamp: datetime
    model: str
    prompt: str
    raw_response: str = ""
    parsed_decisions: dict[str, Any] | None = None
    error: str | None = None
    duration_seconds: float | None = None

    @property
    def succeeded(self) -> bool:
        return self.parsed_decisions is not None and self.error is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": _utc_stamp(self.timestamp),
            "model": self.model,
            "prompt": self.prompt,
            "raw_response": self.raw_response,
            "parsed_decisions": self.parsed_decisions,
            "error": self.error,
            "duration_seconds": self.duration_seconds,
        }


@dataclass
class DecisionIndexEntry:
    """Manifest entry for one parsed decision.

    Attributes:
        id: ``{YYYYmmddHHMMSS}_{symbol}``, suffixed on collision.
        timestamp: When the decision was indexed.
        model: Model that produced the decision.
        symbol: Stock symbol.
        action: BUY, SELL or HOLD.
        quantity_percent: Requested size as percent.
        confidence: Model confidence (0-1).
        predicted_direction: bullish, bearish, neutral or unknown.
        predicted_price_target: Predicted price, 0.0 without a prediction.
        log_file: Attempt log file the decision came from.
        outcome_recorded: Whether the outcome has been attached.
        actual_pnl: Price move since the decision, once graded.
        prediction_accurate: Grading result, once graded.
    """

    id: str
    timestamp: str
    model: str
    symbol: str
    action: str
    quantity_percent: float
    confidence: float
    predicted_direction: str
    predicted_price_target: float
    log_file: str
    outcome_recorded: bool = False
    actual_pnl: float | None = None
    prediction_accurate: bool | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DecisionIndexEntry":
        return cls(**data)


@dataclass
class DecisionIndex:
    """Cumulative manifest of every indexed decision.

    ``decisions_with_outcomes`` and ``accuracy_rate`` are always recomputed
    from the entries, never adjusted incrementally.
    """

    last_updated: str = ""
    total_decisions: int = 0
    decisions_with_outcomes: int = 0
    accuracy_rate: float | None = None
    entries: list[DecisionIndexEntry] = field(default_factory=list)

    def has_id(self, entry_id: str) -> bool:
        return any(e.id == entry_id for e in self.entries)

    def add_decision(self, entry: DecisionIndexEntry) -> None:
        self.entries.append(entry)
        self.total_decisions = len(self.entries)
        self.last_updated = _utc_stamp()

    def update_outcome(self, entry_id: str, pnl: float, accurate: bool) -> bool:
        """Attach an outcome to an entry and recompute the aggregates.

        Returns:
            True if the entry was found.
        """
        found = False
        for entry in self.entries:
            if entry.id == entry_id:
                entry.outcome_recorded = True
                entry.actual_pnl = pnl
                entry.prediction_accurate = accurate
                found = True
                break
        self.recalculate_stats()
        return found

    def recalculate_stats(self) -> None:
        """Recompute outcome count and accuracy (percent) from the entries."""
        with_outcomes = [e for e in self.entries if e.outcome_recorded]
        self.decisions_with_outcomes = len(with_outcomes)

        if with_outcomes:
            accurate = sum(1 for e in with_outcomes if e.prediction_accurate is True)
            self.accuracy_rate = accurate / len(with_outcomes) * 100.0
        else:
            self.accuracy_rate = None
        self.last_updated = _utc_stamp()

    def to_dict(self) -> dict[str, Any]:
        return {
            "last_updated": self.last_updated,
            "total_decisions": self.total_decisions,
            "decisions_with_outcomes": self.decisions_with_outcomes,
            "accuracy_rate": self.accuracy_rate,
            "entries": [asdict(e) for e in self.entries],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DecisionIndex":
        return cls(
            last_updated=data.get("last_updated", ""),
            total_decisions=data.get("total_decisions", 0),
            decisions_with_outcomes=data.get("decisions_with_outcomes", 0),
            accuracy_rate=data.get("accuracy_rate"),
            entries=[DecisionIndexEntry.from_dict(e) for e in data.get("entries", [])],
        )


@dataclass
class TradeRejection:
    """Audit record of a guardrail rejection.

    Attributes:
        timestamp: When the rejection happened (UTC).
        session_id: Trading session, if one was active.
        attempted_action: BUY or SELL.
        symbol: Stock symbol.
        quantity: Resolved share quantity.
        quantity_percent: Requested size as percent.
        estimated_value: Estimated dollar value.
        reason: Human-readable reason.
        rule_triggered: Stable rule tag.
        trading_mode: Mode in force at the time.
        raw_request: The proposed trade as submitted.
    """

    timestamp: datetime
    session_id: int | None
    attempted_action: str
    symbol: str
    quantity: float
    quantity_percent: float
    estimated_value: float
    reason: str
    rule_triggered: str
    trading_mode: str
    raw_request: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TradeRejection":
        data = dict(data)
        data["timestamp"] = datetime.fromisoformat(data["timestamp"])
        return cls(**data)


@dataclass
class CircuitBreakerEvent:
    """Audit record of a circuit breaker trip.

    Attributes:
        timestamp: When the breaker tripped (UTC).
        trigger: daily_loss_threshold, consecutive_losses or manual_pause.
        previous_mode: Mode before the trip.
        new_mode: Mode after the trip.
        daily_pnl: Daily P&L percent at the time.
        consecutive_losses: Loss streak at the time.
        resume_at: End of the pause.
    """

    timestamp: datetime
    trigger: str
    previous_mode: str
    new_mode: str
    daily_pnl: float
    consecutive_losses: int
    resume_at: datetime | None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        data["resume_at"] = self.resume_at.isoformat() if self.resume_at else None
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CircuitBreakerEvent":
        data = dict(data)
        data["timestamp"] = datetime.fromisoformat(data["timestamp"])
        data["resume_at"] = (
            datetime.fromisoformat(data["resume_at"]) if data.get("resume_at") else None
        )
        return cls(**data)


@dataclass
class TradingSession:
    """A run of trading cycles between start and stop."""

    id: int
    start_time: datetime
    starting_portfolio_value: float
    end_time: datetime | None = None
    ending_portfolio_value: float | None = None
    decisions_count: int = 0
    trades_count: int = 0
    session_notes: str | None = None
    status: str = "active"

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["start_time"] = self.start_time.isoformat()
        data["end_time"] = self.end_time.isoformat() if self.end_time else None
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TradingSession":
        data = dict(data)
        data["start_time"] = datetime.fromisoformat(data["start_time"])
        data["end_time"] = (
            datetime.fromisoformat(data["end_time"]) if data.get("end_time") else None
        )
        return cls(**data)


@dataclass
class PredictionAccuracy:
    """Aggregate prediction grading stats."""

    total_predictions: int
    accurate_predictions: int
    accuracy_percent: float


@dataclass
class AiTradeDecision:
    """One row per model decision, executed or not.

    Attributes:
        id: Store-assigned identifier (0 until saved).
        session_id: Trading session the decision belongs to.
        timestamp: When the decision was made (UTC).
        action: BUY, SELL or HOLD.
        symbol: Stock symbol.
        quantity: Shares executed, None when nothing executed.
        price_at_decision: Latest price when the decision was made.
        confidence: Model confidence (0-1).
        reasoning: Model rationale.
        model_used: Model that produced the decision.
        predicted_direction: bullish, bearish or neutral.
        predicted_price_target: Predicted price.
        predicted_timeframe_days: Prediction horizon in days.
        actual_outcome: Human-readable outcome once graded.
        actual_price_at_timeframe: Price when graded.
        prediction_accurate: Grading result.
        paper_trade_id: Ledger trade id, None when nothing executed.
        index_id: Decision index entry id.
    """

    timestamp: datetime
    action: str
    symbol: str
    confidence: float
    reasoning: str
    model_used: str
    id: int = 0
    session_id: int | None = None
    quantity: float | None = None
    price_at_decision: float | None = None
    predicted_direction: str | None = None
    predicted_price_target: float | None = None
    predicted_timeframe_days: int | None = None
    actual_outcome: str | None = None
    actual_price_at_timeframe: float | None = None
    prediction_accurate: bool | None = None
    paper_trade_id: int | None = None
    index_id: str | None = None

    @property
    def has_prediction(self) -> bool:
        return (
            self.predicted_direction is not None
            and self.predicted_price_target is not None
            and self.predicted_timeframe_days is not None
        )

    @property
    def is_graded(self) -> bool:
        return self.prediction_accurate is not None

    def prediction_due_at(self) -> datetime | None:
        """When the prediction horizon elapses, if there is a prediction."""
        if self.predicted_timeframe_days is None:
            return None
        return self.timestamp + timedelta(days=self.predicted_timeframe_days)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AiTradeDecision":
        data = dict(data)
        data["timestamp"] = datetime.fromisoformat(data["timestamp"])
        return cls(**data)
