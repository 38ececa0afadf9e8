"""Data models for the simulated brokerage ledger."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import NamedTuple


class TradeSide(str, Enum):
    """Side of a ledger trade."""

    BUY = "BUY"
    SELL = "SELL"


@dataclass
class Position:
    """An open position.

    Attributes:
        symbol: Stock symbol.
        quantity: Shares held, always positive.
        entry_price: Volume-weighted average cost per share.
        entry_date: When the position was first opened.
    """

    symbol: str
    quantity: float
    entry_price: float
    entry_date: datetime


@dataclass(frozen=True)
class Trade:
    """Immutable record of an executed ledger trade.

    Attributes:
        id: Ledger-assigned identifier.
        symbol: Stock symbol.
        action: BUY or SELL.
        quantity: Shares traded.
        price: Execution price.
        pnl: Realized P&L for sells, None for buys.
        timestamp: Execution time (UTC).
        notes: Free-form note attached by the caller.
    """

    id: int
    symbol: str
    action: TradeSide
    quantity: float
    price: float
    pnl: float | None
    timestamp: datetime
    notes: str | None = None


class PortfolioValue(NamedTuple):
    """Cash, marked-to-market positions value and total equity."""

    cash: float
    positions_value: float
    total: float


class LedgerError(Exception):
    """Base class for ledger constraint violations."""


class InsufficientCashError(LedgerError):
    """Raised when a buy costs more than the available cash."""


class InsufficientSharesError(LedgerError):
    """Raised when a sell exceeds the shares held."""


class NoPositionError(LedgerError):
    """Raised when selling a symbol with no open position."""
