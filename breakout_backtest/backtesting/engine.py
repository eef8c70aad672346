"""
Backtest engine: levels -> signals -> one trade per signal day, folded in date order.
Each trade is sized from the balance left by the previous one.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

from breakout_backtest.core.config import validate_parameters
from breakout_backtest.core.errors import InsufficientDataError, InvalidBarSequenceError
from breakout_backtest.core.types import Bar, DailyResult, DayLevels, RunState, Signal, Trade
from breakout_backtest.strategies.base import BaseStrategy
from breakout_backtest.strategies.breakout import BreakoutStrategy, signal_stats
from breakout_backtest.backtesting.simulator import TradeSimulator
from breakout_backtest.analytics.metrics import PerformanceSummary, compute_summary
from breakout_backtest.utils.timeframes import utc_date

logger = logging.getLogger("breakout_backtest.backtest")


@dataclass
class BacktestResult:
    """Backtest output: inputs seen, signals, trades, per-day outcomes, and summary."""
    symbol: str
    bars: Sequence[Bar]
    levels: Dict[date, DayLevels]
    signals: List[Signal]
    final_state: RunState
    summary: PerformanceSummary
    signal_stats: Dict[str, Any]
    parameters: Dict[str, float] = field(default_factory=dict)
    strategy_name: str = "breakout"

    @property
    def trades(self) -> List[Trade]:
        return list(self.final_state.trades)

    @property
    def daily_results(self) -> Dict[date, DailyResult]:
        return self.final_state.daily_results_by_date()

    @property
    def start_date(self) -> date:
        return utc_date(self.bars[0].time)

    @property
    def end_date(self) -> date:
        return utc_date(self.bars[-1].time)


def check_bars(bars: Sequence[Bar]) -> List[date]:
    """
    Validate the bar sequence and return its distinct UTC dates in order.
    Raises InvalidBarSequenceError / InsufficientDataError.
    """
    if not bars:
        raise InsufficientDataError("No bars supplied")
    for prev, cur in zip(bars, bars[1:]):
        if cur.time <= prev.time:
            raise InvalidBarSequenceError(
                f"Bar times must be strictly increasing: {cur.time} follows {prev.time}"
            )
    days: List[date] = []
    for bar in bars:
        day = utc_date(bar.time)
        if not days or days[-1] != day:
            days.append(day)
    if len(days) < 2:
        raise InsufficientDataError(
            f"Bars span {len(days)} day(s); at least 2 are needed for a previous-day level"
        )
    return days


class BacktestEngine:
    """
    Runs a strategy over historical bars. Single-threaded and deterministic:
    the same bars and parameters always give the same signals, trades, and balances.
    """

    def __init__(
        self,
        strategy: Optional[BaseStrategy] = None,
        initial_capital: float = 100.0,
        leverage: float = 5.0,
        max_hours: float = 4.0,
        stop_loss_percent: float = 10.0,
        take_profit_percent: float = 20.0,
    ):
        validate_parameters(initial_capital, leverage, max_hours, stop_loss_percent, take_profit_percent)
        self.strategy = strategy or BreakoutStrategy()
        self.initial_capital = initial_capital
        self.simulator = TradeSimulator(
            leverage=leverage,
            max_hours=max_hours,
            stop_loss_percent=stop_loss_percent,
            take_profit_percent=take_profit_percent,
        )

    @property
    def parameters(self) -> Dict[str, float]:
        return {
            "initialCapital": self.initial_capital,
            "leverage": self.simulator.leverage,
            "maxHours": self.simulator.max_hours,
            "stopLossPercent": self.simulator.stop_loss_percent,
            "takeProfitPercent": self.simulator.take_profit_percent,
        }

    def run(self, bars: Sequence[Bar], symbol: str = "BTCUSDT") -> BacktestResult:
        """
        Run the backtest on bars ordered by open time (at least two UTC days).
        Every day in the data gets a DailyResult: a trade on signal days, idle otherwise.
        """
        days = check_bars(bars)
        logger.info("Starting backtest for %s: %d bars over %d days", symbol, len(bars), len(days))

        levels = self.strategy.compute_levels(bars)
        signals = self.strategy.get_signals(bars, levels)
        by_day = {s.date: s for s in signals}

        state = RunState(balance=self.initial_capital)
        for day in days:
            signal = by_day.get(day)
            if signal is None:
                state = state.with_idle_day(day)
                logger.info("%s: no signal", day.isoformat())
                continue
            state = self.simulator.step(state, signal, bars)
            trade = state.trades[-1]
            logger.info(
                "%s: %s at %.4f - %s (level %.4f) -> %s at %.4f (%dh) %.2f USD (%.2f%%) balance %.2f",
                day.isoformat(), signal.direction.value, signal.entry_price, signal.reason,
                signal.reference_level, trade.exit_reason.value, trade.exit_price,
                trade.duration_hours, trade.result_usd, trade.result_percent, state.balance,
            )

        summary = compute_summary(state.trades, self.initial_capital, state.balance)
        logger.info(
            "%d trades simulated: final balance %.2f (%.2f%%)",
            summary.total_trades, summary.final_balance, summary.total_return_percent,
        )
        return BacktestResult(
            symbol=symbol,
            bars=bars,
            levels=levels,
            signals=signals,
            final_state=state,
            summary=summary,
            signal_stats=signal_stats(signals),
            parameters=self.parameters,
            strategy_name=self.strategy.name,
        )
