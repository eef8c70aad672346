"""
Previous-day high/low breakout strategy.

A bar whose high pierces yesterday's high is a high breakout: a body fully above
the level goes LONG, a body fully below it (wick only) fades SHORT. A bar whose
low pierces yesterday's low is the mirror image. The high side is checked first
and wins when one bar breaks both levels. Only the first signal of a day counts.
"""

from __future__ import annotations
import logging
from collections import Counter
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from breakout_backtest.core.types import Bar, BreakoutType, DayLevels, Direction, Signal
from breakout_backtest.strategies.base import BaseStrategy
from breakout_backtest.utils.timeframes import utc_date

logger = logging.getLogger("breakout_backtest.strategy")

REASON_BODY_ABOVE_HIGH = "Body above previous high"
REASON_WICK_ABOVE_HIGH = "Body below previous high, wick touched above"
REASON_BODY_BELOW_LOW = "Body below previous low"
REASON_WICK_BELOW_LOW = "Body above previous low, wick touched below"


@dataclass(frozen=True)
class Breakout:
    """A detected level break. direction is None when the body straddles or touches the level."""
    breakout_type: BreakoutType
    reference_level: float
    entry_price: float
    direction: Optional[Direction] = None
    reason: Optional[str] = None


def calculate_daily_levels(bars: Sequence[Bar]) -> Dict[date, DayLevels]:
    """
    Group bars by UTC date and attach the previous day's high/low to each day.
    Days without bars do not exist; "previous" is the previous day present in the data.
    """
    if not bars:
        return {}
    frame = pd.DataFrame(
        {
            "date": [utc_date(b.time) for b in bars],
            "high": [b.high for b in bars],
            "low": [b.low for b in bars],
        }
    )
    daily = frame.groupby("date", sort=True).agg(
        current_high=("high", "max"),
        current_low=("low", "min"),
    )
    daily["previous_high"] = daily["current_high"].shift(1)
    daily["previous_low"] = daily["current_low"].shift(1)

    levels: Dict[date, DayLevels] = {}
    for day, row in daily.iterrows():
        levels[day] = DayLevels(
            date=day,
            current_high=float(row["current_high"]),
            current_low=float(row["current_low"]),
            previous_high=None if pd.isna(row["previous_high"]) else float(row["previous_high"]),
            previous_low=None if pd.isna(row["previous_low"]) else float(row["previous_low"]),
        )
    logger.info("Levels calculated for %d days", len(levels))
    return levels


def detect_breakout(
    bar: Bar,
    previous_high: Optional[float],
    previous_low: Optional[float],
) -> Optional[Breakout]:
    """
    Classify one bar against the previous day's levels. Pure function.
    Returns None when there is no reference or no breakout.
    """
    if previous_high is None or previous_low is None:
        return None

    if bar.high > previous_high:
        direction = None
        reason = None
        if bar.open > previous_high and bar.close > previous_high:
            direction, reason = Direction.LONG, REASON_BODY_ABOVE_HIGH
        elif bar.open < previous_high and bar.close < previous_high:
            direction, reason = Direction.SHORT, REASON_WICK_ABOVE_HIGH
        # High break decides the bar even if the low was broken too
        return Breakout(BreakoutType.HIGH, previous_high, bar.close, direction, reason)

    if bar.low < previous_low:
        direction = None
        reason = None
        if bar.open < previous_low and bar.close < previous_low:
            direction, reason = Direction.SHORT, REASON_BODY_BELOW_LOW
        elif bar.open > previous_low and bar.close > previous_low:
            direction, reason = Direction.LONG, REASON_WICK_BELOW_LOW
        return Breakout(BreakoutType.LOW, previous_low, bar.close, direction, reason)

    return None


def schedule_signals(bars: Sequence[Bar], levels: Dict[date, DayLevels]) -> List[Signal]:
    """Walk bars in order; emit the first directional breakout of each day and ignore the rest of that day."""
    signals: List[Signal] = []
    signaled: set = set()
    for i, bar in enumerate(bars):
        day = utc_date(bar.time)
        if day in signaled:
            continue
        day_levels = levels.get(day)
        if day_levels is None or not day_levels.has_reference:
            continue
        breakout = detect_breakout(bar, day_levels.previous_high, day_levels.previous_low)
        if breakout is None:
            continue
        if breakout.direction is None:
            logger.debug("%s %s at %s without direction (open=%s close=%s)",
                         day, breakout.breakout_type.value, bar.time, bar.open, bar.close)
            continue
        signals.append(Signal(
            date=day,
            time=bar.time,
            direction=breakout.direction,
            entry_price=breakout.entry_price,
            reference_level=breakout.reference_level,
            reason=breakout.reason,
            source_bar_index=i,
            breakout_type=breakout.breakout_type,
            previous_high=day_levels.previous_high,
            previous_low=day_levels.previous_low,
        ))
        signaled.add(day)
    logger.info("%d signals detected in total", len(signals))
    return signals


def signal_stats(signals: Sequence[Signal]) -> Dict[str, Any]:
    """Counts of signals by direction, broken level, and reason."""
    return {
        "total": len(signals),
        "long": sum(1 for s in signals if s.direction == Direction.LONG),
        "short": sum(1 for s in signals if s.direction == Direction.SHORT),
        "breakoutHigh": sum(1 for s in signals if s.breakout_type == BreakoutType.HIGH),
        "breakoutLow": sum(1 for s in signals if s.breakout_type == BreakoutType.LOW),
        "byReason": dict(Counter(s.reason for s in signals)),
    }


class BreakoutStrategy(BaseStrategy):
    """Previous-day high/low breakout, one signal per UTC day."""

    name = "breakout"

    def compute_levels(self, bars: Sequence[Bar]) -> Dict[date, DayLevels]:
        return calculate_daily_levels(bars)

    def get_signals(
        self,
        bars: Sequence[Bar],
        levels: Optional[Dict[date, DayLevels]] = None,
    ) -> List[Signal]:
        if levels is None:
            levels = self.compute_levels(bars)
        return schedule_signals(bars, levels)
