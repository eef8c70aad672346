"""
Trade simulator: leveraged position sizing, SL/TP placement, and the exit state machine.

A position opens at the signal bar's close and is checked on every later bar
against EXIT_RULES in order (TIME, SL, TP); the first rule that fires closes it.
If none fires before the data ends the position closes at the last close.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Sequence, Tuple

from breakout_backtest.core.errors import InvalidBarSequenceError
from breakout_backtest.core.types import Bar, Direction, ExitReason, RunState, Signal, Trade
from breakout_backtest.utils.numbers import round2
from breakout_backtest.utils.timeframes import hours_between

logger = logging.getLogger("breakout_backtest.backtest.simulator")


@dataclass(frozen=True)
class OpenPosition:
    """Position between entry and exit. Levels are fixed at entry."""
    signal: Signal
    entry_price: float
    entry_time: datetime
    direction: Direction
    balance_at_entry: float
    leverage: float
    position_size: float
    stop_loss: float
    take_profit: float


@dataclass(frozen=True)
class ExitRule:
    """One exit check: whether it fires on a bar, and the price it fills at."""
    reason: ExitReason
    triggered: Callable[[OpenPosition, Bar, float], bool]
    price: Callable[[OpenPosition, Bar], float]


def _time_limit_reached(pos: OpenPosition, bar: Bar, max_hours: float) -> bool:
    return hours_between(pos.entry_time, bar.time) >= max_hours


def _stop_hit(pos: OpenPosition, bar: Bar, max_hours: float) -> bool:
    if pos.direction == Direction.LONG:
        return bar.low <= pos.stop_loss
    return bar.high >= pos.stop_loss


def _target_hit(pos: OpenPosition, bar: Bar, max_hours: float) -> bool:
    if pos.direction == Direction.LONG:
        return bar.high >= pos.take_profit
    return bar.low <= pos.take_profit


# Order is the tie-break: a bar that satisfies several rules closes on the first.
EXIT_RULES: Tuple[ExitRule, ...] = (
    ExitRule(ExitReason.TIME, _time_limit_reached, lambda pos, bar: bar.close),
    ExitRule(ExitReason.STOP_LOSS, _stop_hit, lambda pos, bar: pos.stop_loss),
    ExitRule(ExitReason.TAKE_PROFIT, _target_hit, lambda pos, bar: pos.take_profit),
)


def price_offset(entry_price: float, percent_of_capital: float, leverage: float) -> float:
    """Price distance that moves capital by percent_of_capital at the given leverage."""
    return (percent_of_capital / leverage) / 100 * entry_price


def stop_and_target(
    entry_price: float,
    direction: Direction,
    leverage: float,
    stop_loss_percent: float,
    take_profit_percent: float,
) -> Tuple[float, float]:
    """(stop_loss, take_profit) prices on the correct sides of entry for the direction."""
    sl_delta = price_offset(entry_price, stop_loss_percent, leverage)
    tp_delta = price_offset(entry_price, take_profit_percent, leverage)
    if direction == Direction.LONG:
        return entry_price - sl_delta, entry_price + tp_delta
    return entry_price + sl_delta, entry_price - tp_delta


def price_move_percent(entry_price: float, exit_price: float, direction: Direction) -> float:
    """Unleveraged price move in percent, positive when the trade made money."""
    if direction == Direction.LONG:
        return (exit_price - entry_price) / entry_price * 100
    return (entry_price - exit_price) / entry_price * 100


def find_exit(
    position: OpenPosition,
    bars: Sequence[Bar],
    max_hours: float,
    rules: Sequence[ExitRule] = EXIT_RULES,
) -> Tuple[ExitReason, float, Bar]:
    """
    First (reason, price, bar) over bars after entry. bars must not be empty.
    Falls back to DATA_EXHAUSTION at the last bar's close.
    """
    for bar in bars:
        for rule in rules:
            if rule.triggered(position, bar, max_hours):
                return rule.reason, rule.price(position, bar), bar
    last = bars[-1]
    return ExitReason.DATA_EXHAUSTION, last.close, last


class TradeSimulator:
    """
    Simulates one signal at a time. Stateless between calls: the running balance
    lives in the RunState passed to step().
    """

    def __init__(
        self,
        leverage: float,
        max_hours: float,
        stop_loss_percent: float,
        take_profit_percent: float,
    ):
        self.leverage = leverage
        self.max_hours = max_hours
        self.stop_loss_percent = stop_loss_percent
        self.take_profit_percent = take_profit_percent

    def open_position(self, signal: Signal, balance: float) -> OpenPosition:
        stop, target = stop_and_target(
            signal.entry_price,
            signal.direction,
            self.leverage,
            self.stop_loss_percent,
            self.take_profit_percent,
        )
        return OpenPosition(
            signal=signal,
            entry_price=signal.entry_price,
            entry_time=signal.time,
            direction=signal.direction,
            balance_at_entry=balance,
            leverage=self.leverage,
            position_size=balance * self.leverage,
            stop_loss=stop,
            take_profit=target,
        )

    def close_position(
        self,
        position: OpenPosition,
        trade_id: str,
        reason: ExitReason,
        exit_price: float,
        exit_time: datetime,
    ) -> Trade:
        move = price_move_percent(position.entry_price, exit_price, position.direction)
        return Trade(
            id=trade_id,
            signal=position.signal,
            entry_price=position.entry_price,
            entry_time=position.entry_time,
            direction=position.direction,
            position_size=position.position_size,
            leverage=position.leverage,
            stop_loss=position.stop_loss,
            take_profit=position.take_profit,
            exit_price=exit_price,
            exit_time=exit_time,
            exit_reason=reason,
            result_usd=round2(move / 100 * position.balance_at_entry * position.leverage),
            result_percent=round2(move * position.leverage),
            duration_hours=hours_between(position.entry_time, exit_time),
        )

    def simulate(self, signal: Signal, bars: Sequence[Bar], balance: float, trade_id: str) -> Trade:
        """
        Run one signal to its exit against the full bar sequence.
        Only bars after signal.source_bar_index are inspected, across day boundaries.
        """
        idx = signal.source_bar_index
        if not 0 <= idx < len(bars) or bars[idx].time != signal.time:
            raise InvalidBarSequenceError(
                f"Signal at {signal.time} does not match bar index {idx} of the sequence"
            )
        position = self.open_position(signal, balance)
        logger.debug(
            "%s %s entry=%.4f size=%.2f SL=%.4f TP=%.4f",
            trade_id, position.direction.value, position.entry_price,
            position.position_size, position.stop_loss, position.take_profit,
        )
        remaining = bars[idx + 1:]
        if remaining:
            reason, price, exit_bar = find_exit(position, remaining, self.max_hours)
        else:
            # Signal on the final bar: nothing left to observe
            exit_bar = bars[idx]
            reason, price = ExitReason.DATA_EXHAUSTION, exit_bar.close
        return self.close_position(position, trade_id, reason, price, exit_bar.time)

    def step(self, state: RunState, signal: Signal, bars: Sequence[Bar]) -> RunState:
        """Fold one signal into the run: size from state.balance, return the next state."""
        trade = self.simulate(signal, bars, state.balance, state.next_trade_id)
        balance_after = round2(state.balance + trade.result_usd)
        return state.with_trade(trade, balance_after=balance_after, balance_before=state.balance)

