"""
Binance spot klines with retry and rate-limit handling.
"""

from __future__ import annotations
import logging
import time
from typing import List, Optional

import pandas as pd
import requests

from binance.client import Client
from binance.exceptions import BinanceAPIException, BinanceRequestException

from breakout_backtest.core.types import Bar
from breakout_backtest.data.base import MarketDataClient
from breakout_backtest.utils.timeframes import timeframe_minutes

logger = logging.getLogger("breakout_backtest.data.binance")

MAX_KLINES_PER_REQUEST = 1000

KNOWN_SYMBOLS = (
    "BTCUSDT", "ETHUSDT", "BNBUSDT", "ADAUSDT", "XRPUSDT",
    "SOLUSDT", "DOTUSDT", "DOGEUSDT", "AVAXUSDT", "LINKUSDT",
)

KLINE_COLUMNS = [
    "open_time", "open", "high", "low", "close", "volume",
    "close_time", "quote_av", "num_trades", "tb_base_av", "tb_quote_av", "ignore",
]


class MarketDataError(Exception):
    """Klines could not be fetched (network, unknown symbol, exhausted retries)."""


def retry_on_rate_limit(max_retries: int = 3, base_delay: float = 1.0):
    """Decorator: retry on 429 or 418 (rate limit) with exponential backoff."""
    def decorator(f):
        def wrapped(*args, **kwargs):
            last_exc = None
            for attempt in range(max_retries):
                try:
                    return f(*args, **kwargs)
                except BinanceAPIException as e:
                    last_exc = e
                    if e.status_code in (429, 418) and attempt < max_retries - 1:
                        delay = base_delay * (2 ** attempt)
                        logger.warning("Rate limited, retry in %.1fs (attempt %d)", delay, attempt + 1)
                        time.sleep(delay)
                    else:
                        raise
            raise last_exc
        return wrapped
    return decorator


def limit_for_days(days: int, interval: str) -> int:
    """Number of klines covering `days` days of `interval` bars, capped at one request."""
    per_day = 24 * 60 // timeframe_minutes(interval)
    return min(MAX_KLINES_PER_REQUEST, max(1, days * per_day))


def describe_api_error(e: BinanceAPIException) -> str:
    if e.status_code == 400:
        return f"Invalid request: {e.message or 'incorrect parameters'}"
    if e.status_code == 404:
        return "Symbol not found"
    if e.status_code in (418, 429):
        return "Rate limit exceeded. Please wait a moment."
    if e.status_code >= 500:
        return "Internal server error from Binance"
    return f"API error: {e.status_code} - {e.message or 'unknown error'}"


class BinanceDataClient(MarketDataClient):
    """Public Binance spot market data. Keys are optional."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_secret: Optional[str] = None,
        base_url: str = "",
        client: Optional[Client] = None,
    ):
        self._client = client or Client(api_key or None, api_secret or None, requests_params={"timeout": 10})
        if base_url:
            self._client.API_URL = base_url.rstrip("/")
            logger.info("Binance: using custom API URL")

    @retry_on_rate_limit(max_retries=3, base_delay=1.0)
    def _raw_klines(self, symbol: str, interval: str, limit: int) -> list:
        return self._client.get_klines(symbol=symbol, interval=interval, limit=limit)

    def get_klines(self, symbol: str, interval: str, limit: int = 500) -> pd.DataFrame:
        symbol = symbol.upper()
        if symbol not in KNOWN_SYMBOLS:
            logger.warning("Symbol %s is not in the validated list. Continuing...", symbol)
        logger.info("Fetching %d candles for %s (%s)", limit, symbol, interval)
        try:
            raw = self._raw_klines(symbol, interval, limit)
        except BinanceAPIException as e:
            raise MarketDataError(describe_api_error(e)) from e
        except (BinanceRequestException, requests.RequestException) as e:
            raise MarketDataError(f"Could not connect to Binance API: {e}") from e
        df = pd.DataFrame(raw, columns=KLINE_COLUMNS)
        df[["open", "high", "low", "close", "volume"]] = df[["open", "high", "low", "close", "volume"]].astype(float)
        df["time"] = pd.to_datetime(df["open_time"].astype("int64"), unit="ms", utc=True)
        logger.info("Fetched %d candles", len(df))
        return df[["time", "open", "high", "low", "close", "volume"]]

    def fetch_history(self, symbol: str, interval: str = "1h", days: int = 30) -> List[Bar]:
        """Bars for the last `days` days, oldest first."""
        return self.fetch_bars(symbol, interval, limit_for_days(days, interval))
