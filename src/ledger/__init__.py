"""Ledger module for simulated cash, positions and trades."""

from .base import ConfluenceSource, Ledger, PriceSource
from .models import (
    InsufficientCashError,
    InsufficientSharesError,
    LedgerError,
    NoPositionError,
    PortfolioValue,
    Position,
    Trade,
    TradeSide,
)
from .confluence_source import FileConfluenceSource
from .paper_ledger import POSITION_EPSILON, PaperLedger
from .price_source import YFinancePriceSource

__all__ = [
    "ConfluenceSource",
    "FileConfluenceSource",
    "InsufficientCashError",
    "InsufficientSharesError",
    "Ledger",
    "LedgerError",
    "NoPositionError",
    "POSITION_EPSILON",
    "PaperLedger",
    "PortfolioValue",
    "Position",
    "PriceSource",
    "Trade",
    "TradeSide",
    "YFinancePriceSource",
]
