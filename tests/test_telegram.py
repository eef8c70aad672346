"""Unit tests for utils.telegram (no network)."""

from breakout_backtest.backtesting.engine import BacktestEngine
from breakout_backtest.utils import telegram
from breakout_backtest.utils.telegram import format_summary_message, send_telegram


def test_send_skipped_when_not_configured():
    assert send_telegram("hello") is False
    assert send_telegram("hello", bot_token="t") is False


def test_send_posts_message(monkeypatch):
    calls = []

    class Resp:
        status_code = 200
        text = "ok"

    def fake_post(url, json, timeout):
        calls.append((url, json))
        return Resp()

    monkeypatch.setattr(telegram.requests, "post", fake_post)
    assert send_telegram("hi", bot_token="TOKEN", chat_id="42") is True
    assert calls[0][1] == {"chat_id": "42", "text": "hi"}


def test_summary_message(scenario_bars):
    summary = BacktestEngine().run(scenario_bars).summary
    text = format_summary_message("TESTUSDT", summary)
    assert "Backtest TESTUSDT" in text
    assert "Trades: 2 (W 1 / L 1)" in text
    assert "$100.00 -> $108.00" in text
    assert "Profit factor: 1.67" in text
