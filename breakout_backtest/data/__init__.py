"""Market data: abstract source and the Binance klines implementation."""

from breakout_backtest.data.base import MarketDataClient, bars_from_frame
from breakout_backtest.data.binance_client import BinanceDataClient, MarketDataError, limit_for_days

__all__ = ["MarketDataClient", "bars_from_frame", "BinanceDataClient", "MarketDataError", "limit_for_days"]
