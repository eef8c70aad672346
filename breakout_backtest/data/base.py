"""Abstract market-data interface: historical klines as a DataFrame or as Bar records."""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import List

import pandas as pd

from breakout_backtest.core.types import Bar


def bars_from_frame(df: pd.DataFrame) -> List[Bar]:
    """Convert an OHLCV DataFrame (columns: time, open, high, low, close, volume) to Bars."""
    return [
        Bar(
            time=row.time.to_pydatetime() if isinstance(row.time, pd.Timestamp) else row.time,
            open=float(row.open),
            high=float(row.high),
            low=float(row.low),
            close=float(row.close),
            volume=float(row.volume),
        )
        for row in df.itertuples(index=False)
    ]


class MarketDataClient(ABC):
    """Source of historical bars for one symbol."""

    @abstractmethod
    def get_klines(self, symbol: str, interval: str, limit: int = 500) -> pd.DataFrame:
        """Return OHLCV DataFrame with columns: time (UTC), open, high, low, close, volume."""
        pass

    def fetch_bars(self, symbol: str, interval: str, limit: int = 500) -> List[Bar]:
        """Klines as Bar records, oldest first."""
        return bars_from_frame(self.get_klines(symbol, interval, limit))
