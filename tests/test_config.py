"""Tests for core.config and the CLI overrides in main."""

import os
from pathlib import Path

import pytest
from breakout_backtest.core.config import Config, load_config, validate_parameters
from breakout_backtest.core.errors import InvalidConfigurationError

ENV_KEYS = (
    "SYMBOL", "DEFAULT_SYMBOL", "TIMEFRAME", "LOOKBACK_DAYS", "INITIAL_CAPITAL", "LEVERAGE",
    "MAX_HOURS", "STOP_LOSS_PERCENT", "TAKE_PROFIT_PERCENT", "OUTPUT_DIR", "SAVE_RESULTS",
    "BINANCE_API_URL", "BINANCE_API_KEY", "BINANCE_API_SECRET",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    # .env loading writes straight to os.environ, outside monkeypatch
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    yield
    for key in ENV_KEYS:
        os.environ.pop(key, None)


def _write_yaml(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults_without_files(tmp_path):
    config = load_config(tmp_path / "missing.yaml", project_root=tmp_path)
    assert config.symbol == "BTCUSDT"
    assert config.timeframe == "1h"
    assert config.lookback_days == 30
    assert config.initial_capital == 100.0
    assert config.leverage == 5.0
    assert config.max_hours == 4.0
    assert config.stop_loss_percent == 10.0
    assert config.take_profit_percent == 20.0
    assert config.save_results is True


def test_yaml_values(tmp_path):
    path = _write_yaml(tmp_path, "market:\n  symbol: ethusdt\nbacktest:\n  leverage: 10\n  max_hours: 6\n")
    config = load_config(path, project_root=tmp_path)
    assert config.symbol == "ETHUSDT"
    assert config.leverage == 10.0
    assert config.max_hours == 6.0


def test_env_overrides_yaml(tmp_path, monkeypatch):
    path = _write_yaml(tmp_path, "backtest:\n  leverage: 10\n")
    monkeypatch.setenv("LEVERAGE", "3")
    monkeypatch.setenv("DEFAULT_SYMBOL", "solusdt")
    config = load_config(path, project_root=tmp_path)
    assert config.leverage == 3.0
    assert config.symbol == "SOLUSDT"


def test_dotenv_file_is_loaded(tmp_path, monkeypatch):
    (tmp_path / ".env").write_text("STOP_LOSS_PERCENT=7.5\n", encoding="utf-8")
    config = load_config(tmp_path / "missing.yaml", project_root=tmp_path)
    assert config.stop_loss_percent == 7.5


def test_malformed_env_value_is_an_error(tmp_path, monkeypatch):
    monkeypatch.setenv("LEVERAGE", "five")
    with pytest.raises(InvalidConfigurationError):
        load_config(tmp_path / "missing.yaml", project_root=tmp_path)


def test_non_positive_yaml_value_is_an_error(tmp_path):
    path = _write_yaml(tmp_path, "backtest:\n  initial_capital: 0\n")
    with pytest.raises(InvalidConfigurationError):
        load_config(path, project_root=tmp_path)


@pytest.mark.parametrize("bad", [0, -1, float("nan"), "10", True])
def test_validate_parameters_rejects(bad):
    with pytest.raises(InvalidConfigurationError):
        validate_parameters(100, bad, 4, 10, 20)


def test_validate_parameters_accepts_positive():
    validate_parameters(100, 5, 4, 10, 20)
    validate_parameters(0.5, 1.5, 0.5, 0.1, 0.1)


def test_override_returns_validated_copy():
    base = Config()
    changed = base.override(leverage=10.0, symbol=None)
    assert changed.leverage == 10.0
    assert changed.symbol == "BTCUSDT"
    assert base.leverage == 5.0
    with pytest.raises(InvalidConfigurationError):
        base.override(max_hours=0)
    with pytest.raises(InvalidConfigurationError):
        base.override(not_a_key=1)


def test_lookback_days_must_cover_two_days():
    with pytest.raises(InvalidConfigurationError):
        Config(lookback_days=1).validate()


def test_cli_overrides():
    from main import apply_cli_overrides, build_parser

    args = build_parser().parse_args(["ethusdt", "--capital", "500", "--leverage", "10", "--hours", "6",
                                      "--sl", "15", "--tp", "30", "--days", "10", "--no-save"])
    config = apply_cli_overrides(Config(), args)
    assert config.symbol == "ETHUSDT"
    assert config.initial_capital == 500
    assert config.leverage == 10
    assert config.max_hours == 6
    assert config.stop_loss_percent == 15
    assert config.take_profit_percent == 30
    assert config.lookback_days == 10
    assert config.save_results is False


def test_cli_rejects_non_positive_leverage():
    from main import apply_cli_overrides, build_parser

    args = build_parser().parse_args(["--leverage", "0"])
    with pytest.raises(InvalidConfigurationError):
        apply_cli_overrides(Config(), args)
