"""Utils: rounding, timeframes, Telegram."""

from breakout_backtest.utils.numbers import round2, round_half_up
from breakout_backtest.utils.telegram import send_telegram, format_summary_message
from breakout_backtest.utils.timeframes import timeframe_minutes, utc_date, hours_between

__all__ = [
    "round2",
    "round_half_up",
    "send_telegram",
    "format_summary_message",
    "timeframe_minutes",
    "utc_date",
    "hours_between",
]
