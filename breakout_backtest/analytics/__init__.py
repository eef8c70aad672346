"""Analytics: performance summary (win rate, returns, profit factor, drawdown)."""

from breakout_backtest.analytics.metrics import (
    PerformanceSummary,
    balance_curve,
    compute_summary,
    max_drawdown,
    price_statistics,
    profit_factor,
    win_rate,
)

__all__ = [
    "PerformanceSummary",
    "balance_curve",
    "compute_summary",
    "max_drawdown",
    "price_statistics",
    "profit_factor",
    "win_rate",
]
