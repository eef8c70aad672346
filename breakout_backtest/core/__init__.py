"""Core: config, types, errors, logging."""

from breakout_backtest.core.config import load_config, validate_parameters, Config
from breakout_backtest.core.errors import (
    BacktestError,
    InvalidConfigurationError,
    InsufficientDataError,
    InvalidBarSequenceError,
)
from breakout_backtest.core.types import (
    Bar,
    BreakoutType,
    DailyResult,
    DayLevels,
    Direction,
    ExitReason,
    RunState,
    Signal,
    Trade,
)
from breakout_backtest.core.logger import setup_logging

__all__ = [
    "load_config",
    "validate_parameters",
    "Config",
    "BacktestError",
    "InvalidConfigurationError",
    "InsufficientDataError",
    "InvalidBarSequenceError",
    "Bar",
    "BreakoutType",
    "DailyResult",
    "DayLevels",
    "Direction",
    "ExitReason",
    "RunState",
    "Signal",
    "Trade",
    "setup_logging",
]
