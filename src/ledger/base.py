"""Interfaces consumed by the trading core."""

from abc import ABC, abstractmethod
from datetime import datetime

from src.ledger.models import PortfolioValue, Position, Trade, TradeSide


class Ledger(ABC):
    """Transactional cash/position/trade store."""

    @abstractmethod
    def portfolio_value(self) -> PortfolioValue:
        """Return cash, positions value and total equity."""
        pass

    @abstractmethod
    def position(self, symbol: str) -> Position | None:
        pass

    @abstractmethod
    def positions(self) -> list[Position]:
        pass

    @abstractmethod
    def execute_trade(
        self,
        symbol: str,
        side: TradeSide,
        quantity: float,
        price: float,
        notes: str | None = None,
    ) -> Trade:
        """Apply a trade atomically.

        Raises:
            InsufficientCashError: Buy cost exceeds cash.
            NoPositionError: Sell without a position.
            InsufficientSharesError: Sell exceeds shares held.
        """
        pass

    @abstractmethod
    def trades_today(self, now: datetime | None = None) -> list[Trade]:
        """Return trades executed on the current UTC date."""
        pass

    @abstractmethod
    def trades(self, limit: int | None = None) -> list[Trade]:
        """Return trades, most recent first."""
        pass


class PriceSource(ABC):
    """Read-only latest price lookup."""

    @abstractmethod
    def latest_price(self, symbol: str) -> float | None:
        pass

    def clear_cache(self) -> None:
        """Drop cached prices. Called at the start of each trading cycle."""
        pass


class ConfluenceSource(ABC):
    """Tells whether independent indicators agree on a symbol."""

    @abstractmethod
    def has_confluence_support(self, symbol: str) -> bool:
        pass
