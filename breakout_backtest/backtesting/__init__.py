"""Backtesting: trade simulation and the day-by-day run loop."""

from breakout_backtest.backtesting.engine import BacktestEngine, BacktestResult, check_bars
from breakout_backtest.backtesting.simulator import (
    EXIT_RULES,
    ExitRule,
    OpenPosition,
    TradeSimulator,
    find_exit,
    price_move_percent,
    stop_and_target,
)

__all__ = [
    "BacktestEngine",
    "BacktestResult",
    "check_bars",
    "EXIT_RULES",
    "ExitRule",
    "OpenPosition",
    "TradeSimulator",
    "find_exit",
    "price_move_percent",
    "stop_and_target",
]
