"""Journal module for decision audit, outcomes and risk events."""

from .audit_trail import AuditTrail
from .decision_store import DecisionStore
from .models import (
    AiTradeDecision,
    AttemptLog,
    CircuitBreakerEvent,
    DecisionIndex,
    DecisionIndexEntry,
    PredictionAccuracy,
    TradeRejection,
    TradingSession,
)
from .outcome_tracker import PredictionOutcomeTracker, is_prediction_accurate
from .risk_event_log import RiskEventLog
from .settings import JournalSettings

__all__ = [
    "AiTradeDecision",
    "AttemptLog",
    "AuditTrail",
    "CircuitBreakerEvent",
    "DecisionIndex",
    "DecisionIndexEntry",
    "DecisionStore",
    "JournalSettings",
    "PredictionAccuracy",
    "PredictionOutcomeTracker",
    "RiskEventLog",
    "TradeRejection",
    "TradingSession",
    "is_prediction_accurate",
]
