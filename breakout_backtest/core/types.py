"""
Core data types for bars, daily levels, signals, trades, and run state.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Dict, Optional, Tuple


class Direction(str, Enum):
    LONG = "LONG"
    SHORT = "SHORT"


class BreakoutType(str, Enum):
    HIGH = "BREAKOUT_HIGH"
    LOW = "BREAKOUT_LOW"


class ExitReason(str, Enum):
    TIME = "TIME"
    STOP_LOSS = "SL"
    TAKE_PROFIT = "TP"
    DATA_EXHAUSTION = "DATA_EXHAUSTION"


@dataclass(frozen=True)
class Bar:
    """OHLCV candle. `time` is the UTC open time."""
    time: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0


@dataclass(frozen=True)
class DayLevels:
    """High/low of a calendar day plus the previous day's high/low (None on the first day)."""
    date: date
    current_high: float
    current_low: float
    previous_high: Optional[float] = None
    previous_low: Optional[float] = None

    @property
    def has_reference(self) -> bool:
        return self.previous_high is not None and self.previous_low is not None


@dataclass(frozen=True)
class Signal:
    """Breakout entry signal. Entry is always the close of the source bar."""
    date: date
    time: datetime
    direction: Direction
    entry_price: float
    reference_level: float
    reason: str
    source_bar_index: int
    breakout_type: BreakoutType
    previous_high: float
    previous_low: float


@dataclass(frozen=True)
class Trade:
    """Closed trade. Built once, when the exit is known."""
    id: str
    signal: Signal
    entry_price: float
    entry_time: datetime
    direction: Direction
    position_size: float
    leverage: float
    stop_loss: float
    take_profit: float
    exit_price: float
    exit_time: datetime
    exit_reason: ExitReason
    result_usd: float
    result_percent: float
    duration_hours: int


@dataclass(frozen=True)
class DailyResult:
    """Outcome of one calendar day of the run."""
    date: date
    trade_executed: bool
    balance_before: float
    balance_after: float
    daily_return: float
    trade: Optional[Trade] = None
    reason: str = ""


@dataclass(frozen=True)
class RunState:
    """
    Running state of one backtest. Every transition returns a new RunState;
    trades and daily results are kept in chronological order.
    """
    balance: float
    trades: Tuple[Trade, ...] = field(default_factory=tuple)
    daily_results: Tuple[DailyResult, ...] = field(default_factory=tuple)

    @property
    def next_trade_id(self) -> str:
        return f"trade_{len(self.trades) + 1}"

    def with_trade(self, trade: Trade, balance_after: float, balance_before: float) -> "RunState":
        day = DailyResult(
            date=trade.signal.date,
            trade_executed=True,
            balance_before=balance_before,
            balance_after=balance_after,
            daily_return=trade.result_usd,
            trade=trade,
        )
        return replace(
            self,
            balance=balance_after,
            trades=self.trades + (trade,),
            daily_results=self.daily_results + (day,),
        )

    def with_idle_day(self, day: date, reason: str = "No breakout detected") -> "RunState":
        result = DailyResult(
            date=day,
            trade_executed=False,
            balance_before=self.balance,
            balance_after=self.balance,
            daily_return=0.0,
            reason=reason,
        )
        return replace(self, daily_results=self.daily_results + (result,))

    def daily_results_by_date(self) -> Dict[date, DailyResult]:
        return {r.date: r for r in self.daily_results}
