"""Tests for output.exporter."""

import json
from datetime import datetime, timezone

import pytest
from breakout_backtest.backtesting.engine import BacktestEngine
from breakout_backtest.output.exporter import (
    ExportValidationError,
    ResultsExporter,
    format_results,
    validate,
    validate_balance_consistency,
)

GENERATED = datetime(2024, 2, 1, tzinfo=timezone.utc)


@pytest.fixture
def result(scenario_bars):
    return BacktestEngine().run(scenario_bars, symbol="TESTUSDT")


def test_format_sections_and_metadata(result):
    data = format_results(result, GENERATED)
    assert set(data) == {"metadata", "dailyResults", "summary"}
    meta = data["metadata"]
    assert meta["symbol"] == "TESTUSDT"
    assert meta["startDate"] == "2024-01-01"
    assert meta["endDate"] == "2024-01-04"
    assert meta["totalDays"] == 4
    assert meta["strategy"] == "breakout"
    assert set(meta["parameters"]) == {"initialCapital", "leverage", "maxHours", "stopLossPercent", "takeProfitPercent"}
    assert meta["generatedAt"] == GENERATED.isoformat()


def test_format_daily_results(result):
    daily = format_results(result, GENERATED)["dailyResults"]
    assert list(daily) == ["2024-01-01", "2024-01-02", "2024-01-03", "2024-01-04"]
    idle = daily["2024-01-01"]
    assert idle == {
        "tradeExecuted": False,
        "balanceBefore": 100.0,
        "balanceAfter": 100.0,
        "dailyReturn": 0.0,
        "reason": "No breakout detected",
    }
    traded = daily["2024-01-02"]
    assert traded["tradeExecuted"] is True
    assert traded["balanceAfter"] == 120.0
    assert set(traded["trade"]) == {
        "id", "direction", "entryPrice", "exitPrice", "exitReason", "durationHours",
        "resultUSD", "resultPercent", "stopLoss", "takeProfit",
    }
    assert traded["trade"]["direction"] == "LONG"
    assert traded["trade"]["exitReason"] == "TP"
    assert daily["2024-01-03"]["trade"]["exitReason"] == "SL"


def test_format_summary_fields(result):
    summary = format_results(result, GENERATED)["summary"]
    assert summary == {
        "totalTrades": 2,
        "winningTrades": 1,
        "losingTrades": 1,
        "winRate": 50.0,
        "totalReturn": 8.0,
        "totalReturnPercent": 8.0,
        "finalBalance": 108.0,
        "avgWin": 20.0,
        "avgLoss": 12.0,
        "profitFactor": 1.67,
        "maxDrawdown": 12.0,
        "maxDrawdownPercent": 10.0,
    }


def test_validate_accepts_formatted_results(result):
    validate(format_results(result, GENERATED))


def test_validate_rejects_missing_sections(result):
    data = format_results(result, GENERATED)
    with pytest.raises(ExportValidationError):
        validate({**data, "metadata": {}})
    with pytest.raises(ExportValidationError):
        validate({**data, "dailyResults": {}})
    with pytest.raises(ExportValidationError):
        validate({k: v for k, v in data.items() if k != "summary"})


def test_balance_inconsistency_detected():
    daily = {
        "2024-01-01": {"balanceBefore": 100.0, "balanceAfter": 120.0},
        "2024-01-02": {"balanceBefore": 119.0, "balanceAfter": 119.0},
    }
    with pytest.raises(ExportValidationError, match="2024-01-02"):
        validate_balance_consistency(daily)


def test_export_json_writes_file(result, tmp_path):
    exporter = ResultsExporter(tmp_path / "out")
    path = exporter.export_json(result, GENERATED)
    assert path.name == "TESTUSDT_2024-01-01_to_2024-01-04.json"
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["summary"]["finalBalance"] == 108.0
    assert data["dailyResults"]["2024-01-04"]["tradeExecuted"] is False


def test_export_summary_only(result, tmp_path):
    path = ResultsExporter(tmp_path).export_summary(result, GENERATED)
    assert path.name.endswith("_summary.json")
    data = json.loads(path.read_text(encoding="utf-8"))
    assert set(data) == {"metadata", "summary"}


def test_profit_factor_without_losses_is_null(make_bar, tmp_path):
    bars = [
        make_bar(1, 0, 95, 100, 90, 96),
        make_bar(2, 1, 101, 103, 100.5, 102),
        make_bar(2, 2, 102, 107, 101, 106),
    ]
    result = BacktestEngine().run(bars, symbol="ONLYWIN")
    path = ResultsExporter(tmp_path).export_json(result, GENERATED)
    assert '"profitFactor": null' in path.read_text(encoding="utf-8")
