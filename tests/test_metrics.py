"""Unit tests for analytics.metrics."""

from datetime import datetime

import pytest
from breakout_backtest.analytics.metrics import (
    balance_curve,
    compute_summary,
    max_drawdown,
    price_statistics,
    profit_factor,
    win_rate,
)
from breakout_backtest.core.types import BreakoutType, Direction, ExitReason, Signal, Trade


def _trade(result_usd: float, n: int = 1) -> Trade:
    t = datetime(2024, 1, 1 + n, 10)
    sig = Signal(
        date=t.date(), time=t, direction=Direction.LONG, entry_price=100.0, reference_level=99.0,
        reason="test", source_bar_index=0, breakout_type=BreakoutType.HIGH,
        previous_high=99.0, previous_low=90.0,
    )
    return Trade(
        id=f"trade_{n}", signal=sig, entry_price=100.0, entry_time=t, direction=Direction.LONG,
        position_size=500.0, leverage=5, stop_loss=98.0, take_profit=104.0, exit_price=100.0,
        exit_time=t, exit_reason=ExitReason.TIME, result_usd=result_usd, result_percent=0.0,
        duration_hours=0,
    )


def test_win_rate():
    assert win_rate([1, -1, 1, 1]) == 75.0
    assert win_rate([]) == 0.0


def test_profit_factor():
    assert profit_factor([10, -5, 10, -5]) == 2.0
    assert profit_factor([10, 10]) is None
    assert profit_factor([]) is None
    assert profit_factor([-5, -5]) == 0.0


def test_max_drawdown():
    # peak 120 -> trough 100 => 20 USD, 16.67%
    usd, pct = max_drawdown([100, 120, 100, 110])
    assert usd == pytest.approx(20)
    assert pct == pytest.approx(16.666, rel=0.01)


def test_max_drawdown_usd_and_percent_peaks_can_differ():
    # 100 -> 50 is -50% ; 400 -> 330 is -70 USD but only -17.5%
    usd, pct = max_drawdown([100, 50, 400, 330])
    assert usd == pytest.approx(70)
    assert pct == pytest.approx(50)


def test_max_drawdown_flat_or_rising():
    assert max_drawdown([]) == (0.0, 0.0)
    assert max_drawdown([100]) == (0.0, 0.0)
    assert max_drawdown([100, 110, 120]) == (0.0, 0.0)


def test_balance_curve():
    assert balance_curve(100.0, [_trade(20.0, 1), _trade(-12.0, 2)]) == [100.0, 120.0, 108.0]


def test_compute_summary_no_trades():
    s = compute_summary([], 100.0, 100.0)
    assert s.total_trades == 0
    assert s.win_rate == 0.0
    assert s.avg_win == 0.0
    assert s.avg_loss == 0.0
    assert s.profit_factor is None
    assert s.total_return == 0.0
    assert s.max_drawdown == 0.0


def test_compute_summary_zero_result_is_neither_win_nor_loss():
    trades = [_trade(10.0, 1), _trade(0.0, 2), _trade(-5.0, 3)]
    s = compute_summary(trades, 100.0, 105.0)
    assert s.total_trades == 3
    assert s.winning_trades == 1
    assert s.losing_trades == 1
    assert s.win_rate == 33.33
    assert s.profit_factor == 2.0
    assert s.avg_loss == 5.0


def test_compute_summary_rounds_to_cents():
    trades = [_trade(10.0, 1), _trade(5.0, 2), _trade(2.5, 3), _trade(-3.0, 4)]
    s = compute_summary(trades, 300.0, 314.5)
    assert s.avg_win == 5.83
    assert s.total_return_percent == 4.83
    assert s.profit_factor == 5.83


def test_compute_summary_all_winners_has_no_profit_factor():
    s = compute_summary([_trade(5.0, 1), _trade(7.0, 2)], 100.0, 112.0)
    assert s.profit_factor is None
    assert s.losing_trades == 0


def test_price_statistics(make_bar):
    bars = [make_bar(1, 0, 10, 12, 9, 11), make_bar(1, 1, 11, 15, 10, 14), make_bar(2, 0, 14, 14, 8, 9)]
    ps = price_statistics(bars)
    assert ps["max"] == 15
    assert ps["min"] == 8
    assert ps["range"] == 7
    assert ps["avg"] == pytest.approx(11.33)
    assert ps["days"] == 2
