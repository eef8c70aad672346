"""Strategies: base interface and the daily breakout implementation."""

from breakout_backtest.strategies.base import BaseStrategy
from breakout_backtest.strategies.breakout import (
    Breakout,
    BreakoutStrategy,
    calculate_daily_levels,
    detect_breakout,
    schedule_signals,
    signal_stats,
)

__all__ = [
    "BaseStrategy",
    "Breakout",
    "BreakoutStrategy",
    "calculate_daily_levels",
    "detect_breakout",
    "schedule_signals",
    "signal_stats",
]
