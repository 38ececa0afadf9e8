"""Orchestrator module for model queries and trading cycles."""

from .models import (
    AllModelsFailedError,
    BankruptcyError,
    CycleReport,
    DecisionOutcome,
    DecisionParseError,
    MarketContext,
    QueryOutcome,
    TraderStatus,
)
from .prompts import SYSTEM_PROMPT, format_context_prompt
from .query_orchestrator import ModelQueryOrchestrator, parse_decision_response
from .settings import TraderSettings
from .trading_cycle import AutonomousTrader

__all__ = [
    "AllModelsFailedError",
    "AutonomousTrader",
    "BankruptcyError",
    "CycleReport",
    "DecisionOutcome",
    "DecisionParseError",
    "MarketContext",
    "ModelQueryOrchestrator",
    "QueryOutcome",
    "SYSTEM_PROMPT",
    "TraderSettings",
    "TraderStatus",
    "format_context_prompt",
    "parse_decision_response",
]
