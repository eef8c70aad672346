"""
Performance summary of a finished run: win rate, returns, average win/loss,
profit factor, and max drawdown over the per-trade balance curve.
All reported figures are rounded to 2 decimals.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from breakout_backtest.core.types import Bar, Trade
from breakout_backtest.utils.numbers import round2


@dataclass(frozen=True)
class PerformanceSummary:
    """Aggregate performance of one run. profit_factor is None when there are no losing trades."""
    total_trades: int
    winning_trades: int
    losing_trades: int
    win_rate: float
    initial_capital: float
    final_balance: float
    total_return: float
    total_return_percent: float
    avg_win: float
    avg_loss: float
    profit_factor: Optional[float]
    max_drawdown: float
    max_drawdown_percent: float


def win_rate(pnls: Sequence[float]) -> float:
    """Percent of trades with positive PnL; 0 for no trades."""
    if not pnls:
        return 0.0
    return sum(1 for p in pnls if p > 0) / len(pnls) * 100


def profit_factor(pnls: Sequence[float]) -> Optional[float]:
    """Gross profit / gross loss. None if there are no losses (undefined ratio)."""
    wins = sum(p for p in pnls if p > 0)
    losses = sum(-p for p in pnls if p < 0)
    if losses <= 0:
        return None
    return wins / losses


def max_drawdown(balances: Sequence[float]) -> Tuple[float, float]:
    """
    Largest peak-to-trough decline of a balance curve as (usd, percent of peak).
    Both are positive numbers, maximized independently; (0, 0) for a curve that never falls.
    """
    if len(balances) < 2:
        return 0.0, 0.0
    arr = np.asarray(balances, dtype=float)
    peak = np.maximum.accumulate(arr)
    decline = peak - arr
    pct = np.divide(decline, peak, out=np.zeros_like(decline), where=peak > 0) * 100.0
    return float(decline.max()), float(pct.max())


def balance_curve(initial_capital: float, trades: Sequence[Trade]) -> List[float]:
    """Initial capital followed by the balance after each trade, rounded like the run's balance."""
    curve = [initial_capital]
    for t in trades:
        curve.append(round2(curve[-1] + t.result_usd))
    return curve


def compute_summary(
    trades: Sequence[Trade],
    initial_capital: float,
    final_balance: float,
) -> PerformanceSummary:
    """Reduce the closed trades and the final balance of a run to a PerformanceSummary."""
    pnls = [t.result_usd for t in trades]
    wins = [p for p in pnls if p > 0]
    losses = [p for p in pnls if p < 0]
    total_return = final_balance - initial_capital
    pf = profit_factor(pnls)
    dd_usd, dd_pct = max_drawdown(balance_curve(initial_capital, trades))
    return PerformanceSummary(
        total_trades=len(pnls),
        winning_trades=len(wins),
        losing_trades=len(losses),
        win_rate=round2(win_rate(pnls)),
        initial_capital=initial_capital,
        final_balance=round2(final_balance),
        total_return=round2(total_return),
        total_return_percent=round2(total_return / initial_capital * 100),
        avg_win=round2(sum(wins) / len(wins)) if wins else 0.0,
        avg_loss=round2(abs(sum(losses) / len(losses))) if losses else 0.0,
        profit_factor=round2(pf) if pf is not None else None,
        max_drawdown=round2(dd_usd),
        max_drawdown_percent=round2(dd_pct),
    )


def price_statistics(bars: Sequence[Bar]) -> dict:
    """Max/min/average price, range, and number of distinct UTC days of a bar series."""
    if not bars:
        return {"max": 0.0, "min": 0.0, "avg": 0.0, "range": 0.0, "days": 0}
    df = pd.DataFrame([{"time": b.time, "high": b.high, "low": b.low, "close": b.close} for b in bars])
    times = pd.to_datetime(df["time"], utc=True)
    hi = float(df["high"].max())
    lo = float(df["low"].min())
    return {
        "max": round2(hi),
        "min": round2(lo),
        "avg": round2(float(df["close"].mean())),
        "range": round2(hi - lo),
        "days": int(times.dt.date.nunique()),
    }
