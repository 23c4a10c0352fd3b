"""
Yahoo symbol mapping and live price prefill. yfinance is monkeypatched out.
"""
import pandas as pd
import pytest

import price_helper
from price_helper import fetch_current_price, format_price, to_yahoo_symbol

pytestmark = pytest.mark.unit


class TestSymbolMapping:

    @pytest.mark.parametrize("ticker,symbol", [
        ("BTCUSD", "BTC-USD"),
        ("ethusd", "ETH-USD"),
        ("ETHBTC", "ETH-BTC"),
        ("SOLUSDT", "SOL-USD"),
        ("DOGEUSDC", "DOGE-USD"),
        ("SOLETH", "SOL-ETH"),
        ("SOL", "SOL-USD"),
    ])
    def test_known_shapes(self, ticker, symbol):
        assert to_yahoo_symbol(ticker) == symbol

    @pytest.mark.parametrize("ticker", [
        "TOTAL", "TOTAL3", "BTC.D", "USDT.D", "USDT", "", None,
        "TOTAL (Crypto Total Market Cap)",
    ])
    def test_no_symbol(self, ticker):
        assert to_yahoo_symbol(ticker) is None


class _FakeTicker:
    def __init__(self, frame=None, error=None):
        self.frame = frame
        self.error = error

    def history(self, period):
        if self.error:
            raise self.error
        return self.frame


class TestFetch:

    def test_latest_close(self, monkeypatch):
        frame = pd.DataFrame({"Close": [96000.0, 96512.5]})
        seen = []

        def fake_ticker(symbol):
            seen.append(symbol)
            return _FakeTicker(frame)

        monkeypatch.setattr(price_helper.yf, "Ticker", fake_ticker)
        assert fetch_current_price("BTCUSD") == 96512.5
        assert seen == ["BTC-USD"]

    def test_empty_history(self, monkeypatch):
        monkeypatch.setattr(price_helper.yf, "Ticker", lambda s: _FakeTicker(pd.DataFrame()))
        assert fetch_current_price("BTCUSD") is None

    def test_network_error_is_none(self, monkeypatch):
        monkeypatch.setattr(price_helper.yf, "Ticker", lambda s: _FakeTicker(error=ConnectionError("offline")))
        assert fetch_current_price("BTCUSD") is None

    def test_index_ticker_never_queries(self, monkeypatch):
        def boom(symbol):
            raise AssertionError("should not be called")

        monkeypatch.setattr(price_helper.yf, "Ticker", boom)
        assert fetch_current_price("TOTAL3") is None


class TestFormat:

    @pytest.mark.parametrize("price,text", [
        (96500.123, "96,500.12"),
        (1.0, "1.00"),
        (0.0421, "0.0421"),
        (0.00001234, "0.000012"),
    ])
    def test_format(self, price, text):
        assert format_price(price) == text
