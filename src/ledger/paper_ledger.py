"""In-memory paper trading ledger."""

import logging
from datetime import datetime, timezone
from typing import Callable

from src.ledger.base import Ledger, PriceSource
from src.ledger.models import (
    InsufficientCashError,
    InsufficientSharesError,
    NoPositionError,
    PortfolioValue,
    Position,
    Trade,
    TradeSide,
)

logger = logging.getLogger(__name__)

# Remaining quantity at or below this closes the position.
POSITION_EPSILON = 1e-4


class PaperLedger(Ledger):
    """Simulated brokerage account with average-cost position accounting.

    Buys merge into an existing position at the volume-weighted average cost.
    Sells realize ``(price - entry_price) * quantity`` and close the position
    once the remainder drops to POSITION_EPSILON or below.
    """

    def __init__(
        self,
        starting_cash: float,
        price_source: PriceSource | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize the ledger.

        Args:
            starting_cash: Initial cash balance.
            price_source: Used to mark positions to market; entry price is the
                fallback when no price is available.
            clock: Returns the current UTC time. Defaults to the system clock.
        """
        self._cash = starting_cash
        self._price_source = price_source
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._positions: dict[str, Position] = {}
        self._trades: list[Trade] = []

    @property
    def cash(self) -> float:
        return self._cash

    def portfolio_value(self) -> PortfolioValue:
        positions_value = 0.0
        for pos in self._positions.values():
            price = None
            if self._price_source is not None:
                price = self._price_source.latest_price(pos.symbol)
            positions_value += pos.quantity * (price if price is not None else pos.entry_price)
        return PortfolioValue(self._cash, positions_value, self._cash + positions_value)

    def position(self, symbol: str) -> Position | None:
        return self._positions.get(symbol)

    def positions(self) -> list[Position]:
        return list(self._positions.values())

    def execute_trade(
        self,
        symbol: str,
        side: TradeSide,
        quantity: float,
        price: float,
        notes: str | None = None,
    ) -> Trade:
        if quantity <= 0:
            raise ValueError(f"Trade quantity must be positive, got {quantity}")
        if price <= 0:
            raise ValueError(f"Trade price must be positive, got {price}")

        cost = quantity * price
        pnl = None

        if TradeSide(side) == TradeSide.BUY:
            if self._cash < cost:
                raise InsufficientCashError(
                    f"Insufficient cash: have ${self._cash:.2f}, need ${cost:.2f}"
                )
            self._cash -= cost

            existing = self._positions.get(symbol)
            if existing is not None:
                total_qty = existing.quantity + quantity
                existing.entry_price = (
                    existing.quantity * existing.entry_price + quantity * price
                ) / total_qty
                existing.quantity = total_qty
            else:
                self._positions[symbol] = Position(
                    symbol=symbol,
                    quantity=quantity,
                    entry_price=price,
                    entry_date=self._clock(),
                )
        else:
            existing = self._positions.get(symbol)
            if existing is None:
                raise NoPositionError(f"No position in {symbol} to sell")
            if existing.quantity < quantity:
                raise InsufficientSharesError(
                    f"Insufficient shares: have {existing.quantity}, trying to sell {quantity}"
                )

            pnl = (price - existing.entry_price) * quantity
            self._cash += cost

            remaining = existing.quantity - quantity
            if remaining <= POSITION_EPSILON:
                del self._positions[symbol]
            else:
                existing.quantity = remaining

        trade = Trade(
            id=len(self._trades) + 1,
            symbol=symbol,
            action=TradeSide(side),
            quantity=quantity,
            price=price,
            pnl=pnl,
            timestamp=self._clock(),
            notes=notes,
        )
        self._trades.append(trade)
        logger.debug(f"Ledger {trade.action.value} {symbol} x {quantity} @ ${price:.2f}")
        return trade

    def trades_today(self, now: datetime | None = None) -> list[Trade]:
        today = (now or self._clock()).date()
        return [t for t in reversed(self._trades) if t.timestamp.date() == today]

    def trades(self, limit: int | None = None) -> list[Trade]:
        ordered = list(reversed(self._trades))
        return ordered[:limit] if limit is not None else ordered

    def reset(self, starting_cash: float) -> None:
        """Wipe positions and trades and restore the starting cash."""
        self._cash = starting_cash
        self._positions.clear()
        self._trades.clear()
