"""Guardrails module for trade limits, circuit breaker and overrides."""

from .circuit_breaker import CircuitBreaker, CircuitBreakerTrigger
from .models import (
    Executed,
    GuardrailSet,
    ProposedTrade,
    Queued,
    Rejected,
    RuleTag,
    TradeResult,
    TradingMode,
)
from .override import Override, effective_max_position_pct
from .policy import for_mode
from .settings import CircuitBreakerSettings
from .state import StateStore, TraderState
from .validator import DecisionValidator

__all__ = [
    "CircuitBreaker",
    "CircuitBreakerSettings",
    "CircuitBreakerTrigger",
    "DecisionValidator",
    "Executed",
    "GuardrailSet",
    "Override",
    "ProposedTrade",
    "Queued",
    "Rejected",
    "RuleTag",
    "StateStore",
    "TradeResult",
    "TraderState",
    "TradingMode",
    "effective_max_position_pct",
    "for_mode",
]
