"""Execution module for applying decisions to the ledger."""

from .models import ExecutionResult, MissingPriceError
from .trade_executor import TradeExecutor

__all__ = ["ExecutionResult", "MissingPriceError", "TradeExecutor"]
