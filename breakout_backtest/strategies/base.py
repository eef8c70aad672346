"""Abstract strategy: daily reference levels + signal generation."""

from __future__ import annotations
from abc import ABC, abstractmethod
from datetime import date
from typing import Dict, List, Optional, Sequence

from breakout_backtest.core.types import Bar, DayLevels, Signal


class BaseStrategy(ABC):
    """Strategy computes per-day levels and returns chronological, date-unique signals."""

    name: str = "base"

    @abstractmethod
    def compute_levels(self, bars: Sequence[Bar]) -> Dict[date, DayLevels]:
        """Per-day levels keyed by UTC date, in date order."""
        pass

    @abstractmethod
    def get_signals(
        self,
        bars: Sequence[Bar],
        levels: Optional[Dict[date, DayLevels]] = None,
    ) -> List[Signal]:
        """
        Signals in bar order. Uses only levels of days before the signal bar's day.
        levels may be passed in to avoid recomputing them.
        """
        pass
