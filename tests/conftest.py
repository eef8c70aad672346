"""Shared fixtures: bar factory and a small multi-day breakout scenario."""

from datetime import datetime

import pytest

from breakout_backtest.core.types import Bar


def bar(day: int, hour: int, o: float, h: float, l: float, c: float, volume: float = 1.0) -> Bar:
    return Bar(time=datetime(2024, 1, day, hour), open=o, high=h, low=l, close=c, volume=volume)


@pytest.fixture
def make_bar():
    return bar


@pytest.fixture
def scenario_bars():
    """
    Jan 1: reference day, high 100 / low 90.
    Jan 2: LONG at 102 (01:00), TP on the next bar; a later low break is suppressed.
    Jan 3: reference 107 / 85; SHORT at 82 (05:00), SL on the next bar.
    Jan 4: no breakout.
    """
    return [
        bar(1, 0, 95, 100, 90, 96),
        bar(1, 12, 96, 99, 91, 97),
        bar(2, 0, 97, 99, 92, 98),
        bar(2, 1, 101, 103, 100.5, 102),
        bar(2, 2, 102, 107, 101, 106),
        bar(2, 3, 95, 96, 85, 86),
        bar(3, 0, 90, 95, 88, 91),
        bar(3, 5, 84, 84.5, 80, 82),
        bar(3, 6, 82, 84, 81, 83.5),
        bar(4, 0, 85, 90, 84, 86),
    ]
