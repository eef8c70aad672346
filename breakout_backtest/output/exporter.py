"""
Results export: backtest result -> JSON document with metadata, dailyResults, summary.
Field names are the ones existing export consumers read; do not rename them.
"""

from __future__ import annotations
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Optional

from breakout_backtest.core.types import DailyResult, Trade
from breakout_backtest.utils.numbers import round2

if TYPE_CHECKING:
    from breakout_backtest.backtesting.engine import BacktestResult

logger = logging.getLogger("breakout_backtest.output")


class ExportValidationError(ValueError):
    """Formatted results are incomplete or their balances do not chain day to day."""


def format_trade(trade: Trade) -> Dict[str, Any]:
    return {
        "id": trade.id,
        "direction": trade.direction.value,
        "entryPrice": trade.entry_price,
        "exitPrice": trade.exit_price,
        "exitReason": trade.exit_reason.value,
        "durationHours": trade.duration_hours,
        "resultUSD": trade.result_usd,
        "resultPercent": trade.result_percent,
        "stopLoss": trade.stop_loss,
        "takeProfit": trade.take_profit,
    }


def format_daily_result(day: DailyResult) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "tradeExecuted": day.trade_executed,
        "balanceBefore": day.balance_before,
        "balanceAfter": day.balance_after,
        "dailyReturn": day.daily_return,
    }
    if day.trade_executed and day.trade is not None:
        out["trade"] = format_trade(day.trade)
    else:
        out["reason"] = day.reason or "No breakout detected"
    return out


def format_metadata(result: "BacktestResult", generated_at: Optional[datetime] = None) -> Dict[str, Any]:
    start, end = result.start_date, result.end_date
    generated_at = generated_at or datetime.now(timezone.utc)
    return {
        "symbol": result.symbol,
        "startDate": start.isoformat(),
        "endDate": end.isoformat(),
        "totalDays": (end - start).days + 1,
        "strategy": result.strategy_name,
        "parameters": dict(result.parameters),
        "generatedAt": generated_at.isoformat(),
    }


def format_summary(result: "BacktestResult") -> Dict[str, Any]:
    s = result.summary
    return {
        "totalTrades": s.total_trades,
        "winningTrades": s.winning_trades,
        "losingTrades": s.losing_trades,
        "winRate": s.win_rate,
        "totalReturn": s.total_return,
        "totalReturnPercent": s.total_return_percent,
        "finalBalance": s.final_balance,
        "avgWin": s.avg_win,
        "avgLoss": s.avg_loss,
        "profitFactor": s.profit_factor,
        "maxDrawdown": s.max_drawdown,
        "maxDrawdownPercent": s.max_drawdown_percent,
    }


def format_results(result: "BacktestResult", generated_at: Optional[datetime] = None) -> Dict[str, Any]:
    """Full export document. dailyResults keys are ISO dates in chronological order."""
    return {
        "metadata": format_metadata(result, generated_at),
        "dailyResults": {
            day.date.isoformat(): format_daily_result(day)
            for day in sorted(result.final_state.daily_results, key=lambda d: d.date)
        },
        "summary": format_summary(result),
    }


def validate_balance_consistency(daily_results: Dict[str, Dict[str, Any]]) -> None:
    """Each day's balanceBefore must equal the previous day's balanceAfter (at 2 decimals)."""
    expected = None
    for day in sorted(daily_results):
        entry = daily_results[day]
        if expected is not None and round2(entry["balanceBefore"]) != round2(expected):
            raise ExportValidationError(
                f"Balance inconsistency on {day}: expected {round2(expected)}, got {round2(entry['balanceBefore'])}"
            )
        expected = entry["balanceAfter"]


def validate(data: Dict[str, Any]) -> None:
    """Raise ExportValidationError if the document is not fit for export."""
    metadata = data.get("metadata")
    if not isinstance(metadata, dict) or not metadata.get("symbol"):
        raise ExportValidationError("Missing metadata or symbol")
    daily = data.get("dailyResults")
    if not isinstance(daily, dict):
        raise ExportValidationError("Missing or invalid dailyResults")
    if not isinstance(data.get("summary"), dict):
        raise ExportValidationError("Missing or invalid summary")
    if not daily:
        raise ExportValidationError("No daily results found")
    validate_balance_consistency(daily)


class ResultsExporter:
    """Writes validated backtest results as JSON files under output_dir."""

    def __init__(self, output_dir: Path = Path("results")):
        self.output_dir = Path(output_dir)

    def filename(self, result: "BacktestResult", suffix: str = "") -> str:
        return f"{result.symbol}_{result.start_date.isoformat()}_to_{result.end_date.isoformat()}{suffix}.json"

    def _write(self, data: Dict[str, Any], name: str) -> Path:
        if not self.output_dir.exists():
            self.output_dir.mkdir(parents=True, exist_ok=True)
            logger.info("Created output directory: %s", self.output_dir)
        path = self.output_dir / name
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        return path

    def export_json(self, result: "BacktestResult", generated_at: Optional[datetime] = None) -> Path:
        """Write the full document; returns the file path."""
        data = format_results(result, generated_at)
        validate(data)
        path = self._write(data, self.filename(result))
        logger.info("Results exported to: %s", path)
        return path

    def export_summary(self, result: "BacktestResult", generated_at: Optional[datetime] = None) -> Path:
        """Write metadata and summary only."""
        data = {
            "metadata": format_metadata(result, generated_at),
            "summary": format_summary(result),
        }
        path = self._write(data, self.filename(result, "_summary"))
        logger.info("Summary exported to: %s", path)
        return path
