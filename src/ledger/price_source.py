"""Latest-price lookup using yfinance."""

import logging

import yfinance as yf

from src.ledger.base import PriceSource

logger = logging.getLogger(__name__)


class YFinancePriceSource(PriceSource):
    """Fetches the latest quote for a symbol from Yahoo Finance.

    Prices are cached until ``clear_cache()`` so a trading cycle sees one
    consistent price per symbol.
    """

    def __init__(self):
        self._cache: dict[str, float] = {}

    def latest_price(self, symbol: str) -> float | None:
        """Fetch current price.

        Returns:
            Current price, or None if the fetch fails.
        """
        if symbol in self._cache:
            return self._cache[symbol]

        try:
            ticker = yf.Ticker(symbol)
            info = ticker.info

            # Try regularMarketPrice first, then previousClose as fallback
            price = info.get("regularMarketPrice") or info.get("previousClose")
        except Exception as e:
            logger.warning(f"Price fetch failed for {symbol}: {e}")
            return None

        if price is None:
            return None

        self._cache[symbol] = float(price)
        return self._cache[symbol]

    def clear_cache(self) -> None:
        self._cache.clear()
