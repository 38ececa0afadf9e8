"""Tests for YFinancePriceSource."""

from unittest.mock import MagicMock, patch

from src.ledger.price_source import YFinancePriceSource


class TestLatestPrice:
    """Tests for YFinancePriceSource.latest_price."""

    @patch("src.ledger.price_source.yf.Ticker")
    def test_uses_regular_market_price(self, mock_ticker):
        mock_ticker.return_value.info = {"regularMarketPrice": 187.5, "previousClose": 185.0}

        assert YFinancePriceSource().latest_price("AAPL") == 187.5
        mock_ticker.assert_called_once_with("AAPL")

    @patch("src.ledger.price_source.yf.Ticker")
    def test_falls_back_to_previous_close(self, mock_ticker):
        mock_ticker.return_value.info = {"previousClose": 185.0}

        assert YFinancePriceSource().latest_price("AAPL") == 185.0

    @patch("src.ledger.price_source.yf.Ticker")
    def test_missing_price_returns_none(self, mock_ticker):
        mock_ticker.return_value.info = {}

        assert YFinancePriceSource().latest_price("ZZZZ") is None

    @patch("src.ledger.price_source.yf.Ticker")
    def test_fetch_error_returns_none(self, mock_ticker):
        mock_ticker.side_effect = Exception("network down")

        assert YFinancePriceSource().latest_price("AAPL") is None

    @patch("src.ledger.price_source.yf.Ticker")
    def test_price_cached_until_cleared(self, mock_ticker):
        mock_ticker.return_value.info = {"regularMarketPrice": 100.0}
        source = YFinancePriceSource()

        source.latest_price("AAPL")
        source.latest_price("AAPL")
        assert mock_ticker.call_count == 1

        source.clear_cache()
        source.latest_price("AAPL")
        assert mock_ticker.call_count == 2
