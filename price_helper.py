"""
Analyst Console - Market price helper
Prefills the "Current Price" field from Yahoo Finance where the ticker has a
Yahoo symbol. Index-style tickers (TOTAL, BTC.D, ...) have none.
"""

import logging
import re
from typing import Optional

import yfinance as yf

logger = logging.getLogger(__name__)

YAHOO_SYMBOLS = {
    'BTCUSD': 'BTC-USD',
    'ETHUSD': 'ETH-USD',
    'ETHBTC': 'ETH-BTC',
}

_QUOTES = ('USDT', 'USDC', 'USD', 'BTC', 'ETH')


def to_yahoo_symbol(ticker: str) -> Optional[str]:
    """Map a chart ticker to a Yahoo symbol, or None if there is no sensible one."""
    ticker = (ticker or '').strip().upper()
    if ticker in YAHOO_SYMBOLS:
        return YAHOO_SYMBOLS[ticker]
    if not re.fullmatch(r'[A-Z0-9]{2,15}', ticker):
        return None
    if ticker in ('TOTAL', 'TOTAL2', 'TOTAL3') or ticker in _QUOTES[:3]:
        return None

    for quote in _QUOTES:
        base = ticker[:-len(quote)]
        if ticker.endswith(quote) and len(base) >= 2:
            # stablecoin quotes trade like USD on Yahoo
            return f"{base}-{'USD' if quote.startswith('USD') else quote}"
    # bare coin symbol (SOL, DOGE)
    return f"{ticker}-USD"


def fetch_current_price(ticker: str) -> Optional[float]:
    """Fetch the latest close for a ticker; None when unavailable."""
    symbol = to_yahoo_symbol(ticker)
    if symbol is None:
        return None
    try:
        hist = yf.Ticker(symbol).history(period='1d')
        if not hist.empty:
            return float(hist['Close'].iloc[-1])
        return None
    except Exception as e:
        logger.warning("Error fetching price for %s (%s): %s", ticker, symbol, e)
        return None


def format_price(price: float) -> str:
    """96500.123 -> '96,500.12'; small prices keep more decimals."""
    if price >= 1:
        return f"{price:,.2f}"
    return f"{price:.6f}".rstrip('0').rstrip('.')
