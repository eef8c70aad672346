"""Telegram notifications. Never log token or chat_id."""

from __future__ import annotations
import logging
from typing import TYPE_CHECKING

import requests

if TYPE_CHECKING:
    from breakout_backtest.analytics.metrics import PerformanceSummary

logger = logging.getLogger("breakout_backtest.utils.telegram")


def format_summary_message(symbol: str, summary: "PerformanceSummary") -> str:
    """One message with the headline numbers of a finished backtest."""
    pf = "n/a" if summary.profit_factor is None else f"{summary.profit_factor:.2f}"
    return (
        f"Backtest {symbol}\n"
        f"Trades: {summary.total_trades} (W {summary.winning_trades} / L {summary.losing_trades})\n"
        f"Win rate: {summary.win_rate:.2f}%\n"
        f"Capital: ${summary.initial_capital:.2f} -> ${summary.final_balance:.2f}\n"
        f"Return: ${summary.total_return:.2f} ({summary.total_return_percent:.2f}%)\n"
        f"Profit factor: {pf} | Max DD: {summary.max_drawdown_percent:.2f}%"
    )


def send_telegram(text: str, bot_token: str = "", chat_id: str = "") -> bool:
    """Send message to Telegram. Returns True on success; False if not configured or on failure."""
    if not bot_token or not chat_id:
        logger.debug("Telegram not configured, skipping message (len=%d)", len(text))
        return False
    try:
        url = f"https://api.telegram.org/bot{bot_token}/sendMessage"
        payload = {"chat_id": chat_id, "text": text}
        r = requests.post(url, json=payload, timeout=10)
        if r.status_code != 200:
            logger.warning("Telegram send failed: %s %s", r.status_code, r.text[:200])
            return False
        return True
    except requests.RequestException as e:
        logger.warning("Telegram error: %s", e)
        return False
