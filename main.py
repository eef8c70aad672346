#!/usr/bin/env python3
"""
Breakout backtest CLI.
Usage:
  python main.py [SYMBOL] [--config config.yaml] [--capital N] [--leverage N]
                 [--hours N] [--sl N] [--tp N] [--days N] [--output DIR] [--no-save]
Examples:
  python main.py BTCUSDT
  python main.py ETHUSDT --capital=500 --leverage=10 --hours=6 --sl=15 --tp=30
"""

from __future__ import annotations
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Project root
ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from breakout_backtest.core.config import Config, load_config
from breakout_backtest.core.errors import BacktestError
from breakout_backtest.core.logger import setup_logging
from breakout_backtest.strategies.breakout import BreakoutStrategy
from breakout_backtest.backtesting.engine import BacktestEngine, BacktestResult
from breakout_backtest.analytics.metrics import price_statistics
from breakout_backtest.data.binance_client import BinanceDataClient, MarketDataError
from breakout_backtest.output.exporter import ResultsExporter, ExportValidationError
from breakout_backtest.utils.telegram import format_summary_message, send_telegram

logger = logging.getLogger("breakout_backtest")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Previous-day breakout strategy backtest")
    parser.add_argument("symbol", nargs="?", default=None, help="Trading pair symbol (e.g. BTCUSDT)")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.yaml")
    parser.add_argument("--capital", type=float, default=None, help="Initial capital in USD (default: 100)")
    parser.add_argument("--leverage", type=float, default=None, help="Leverage (default: 5)")
    parser.add_argument("--hours", type=float, default=None, help="Max hours per trade (default: 4)")
    parser.add_argument("--sl", type=float, default=None, help="Stop loss, percent of capital (default: 10)")
    parser.add_argument("--tp", type=float, default=None, help="Take profit, percent of capital (default: 20)")
    parser.add_argument("--days", type=int, default=None, help="Days of history to fetch (default: 30)")
    parser.add_argument("--output", type=Path, default=None, help="Output directory (default: results)")
    parser.add_argument("--no-save", action="store_true", help="Do not write JSON results")
    return parser


def apply_cli_overrides(config: Config, args: argparse.Namespace) -> Config:
    return config.override(
        symbol=args.symbol.upper() if args.symbol else None,
        initial_capital=args.capital,
        leverage=args.leverage,
        max_hours=args.hours,
        stop_loss_percent=args.sl,
        take_profit_percent=args.tp,
        lookback_days=args.days,
        output_dir=args.output,
        save_results=False if args.no_save else None,
    )


def print_results(result: BacktestResult) -> None:
    stats = result.signal_stats
    m = result.summary
    print("\n--- Backtest Results ---")
    print(f"Total signals: {stats['total']} (long: {stats['long']}, short: {stats['short']})")
    print(f"Total trades: {m.total_trades} (wins: {m.winning_trades}, losses: {m.losing_trades})")
    print(f"Win rate: {m.win_rate:.2f}%")
    print(f"Capital: ${m.initial_capital:.2f} -> ${m.final_balance:.2f}")
    print(f"Total return: ${m.total_return:.2f} ({m.total_return_percent:.2f}%)")
    print(f"Avg win: ${m.avg_win:.2f} | Avg loss: ${m.avg_loss:.2f}")
    print(f"Profit factor: {'n/a' if m.profit_factor is None else f'{m.profit_factor:.2f}'}")
    print(f"Max drawdown: ${m.max_drawdown:.2f} ({m.max_drawdown_percent:.2f}%)")


def run_backtest(args: argparse.Namespace) -> int:
    """Fetch bars, run the backtest, print and export results."""
    try:
        config = apply_cli_overrides(load_config(args.config, ROOT), args)
    except BacktestError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1
    setup_logging(config.log_level, config.log_dir, config.log_file)
    logger.info(
        "Symbol %s | capital $%.2f | leverage %sx | max %sh | SL %s%% | TP %s%% of capital",
        config.symbol, config.initial_capital, config.leverage, config.max_hours,
        config.stop_loss_percent, config.take_profit_percent,
    )

    try:
        client = BinanceDataClient(config.binance_api_key, config.binance_api_secret, config.binance_api_url)
        bars = client.fetch_history(config.symbol, config.timeframe, config.lookback_days)
    except MarketDataError as e:
        logger.error("Could not fetch market data: %s", e)
        return 1

    if bars:
        logger.info("Data range: %s -> %s (%d candles)", bars[0].time, bars[-1].time, len(bars))
        ps = price_statistics(bars)
        logger.info(
            "Prices: max %.2f | min %.2f | avg %.2f | range %.2f | %d unique days",
            ps["max"], ps["min"], ps["avg"], ps["range"], ps["days"],
        )

    engine = BacktestEngine(
        strategy=BreakoutStrategy(),
        initial_capital=config.initial_capital,
        leverage=config.leverage,
        max_hours=config.max_hours,
        stop_loss_percent=config.stop_loss_percent,
        take_profit_percent=config.take_profit_percent,
    )
    try:
        result = engine.run(bars, symbol=config.symbol)
    except BacktestError as e:
        logger.error("Backtest failed: %s", e)
        return 1

    print_results(result)

    if config.save_results:
        try:
            ResultsExporter(config.output_dir).export_json(result)
        except (ExportValidationError, OSError) as e:
            logger.error("Failed to save results: %s", e)

    send_telegram(
        format_summary_message(config.symbol, result.summary),
        config.telegram_bot_token,
        config.telegram_chat_id,
    )
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    return run_backtest(args)


if __name__ == "__main__":
    sys.exit(main())
