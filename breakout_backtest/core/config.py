"""
Load configuration from config.yaml and .env. Env values override yaml values.
"""

from __future__ import annotations
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from breakout_backtest.core.errors import InvalidConfigurationError


def _env_path(project_root: Optional[Path] = None) -> Path:
    root = project_root or Path(__file__).resolve().parents[2]
    return root / ".env"


def load_dotenv_if_exists(project_root: Optional[Path] = None) -> None:
    """Load .env from project root if present."""
    path = _env_path(project_root)
    if path.exists():
        load_dotenv(path)


def validate_parameters(
    initial_capital: float,
    leverage: float,
    max_hours: float,
    stop_loss_percent: float,
    take_profit_percent: float,
) -> None:
    """Raise InvalidConfigurationError unless every strategy parameter is a positive number."""
    params = {
        "initial_capital": initial_capital,
        "leverage": leverage,
        "max_hours": max_hours,
        "stop_loss_percent": stop_loss_percent,
        "take_profit_percent": take_profit_percent,
    }
    for name, value in params.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InvalidConfigurationError(f"{name} must be a number, got {value!r}")
        # `not >` also rejects NaN
        if not value > 0:
            raise InvalidConfigurationError(f"{name} must be > 0, got {value}")


def load_config(config_path: Optional[Path] = None, project_root: Optional[Path] = None) -> "Config":
    """Load config.yaml and overlay with env. Returns a validated Config."""
    load_dotenv_if_exists(project_root)
    root = project_root or Path(__file__).resolve().parents[2]
    path = config_path or root / "config.yaml"
    data: Dict[str, Any] = {}
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

    def env(key: str, default: str = "") -> str:
        return str(os.getenv(key) or default or "").strip()

    def env_bool(key: str, default: bool = False) -> bool:
        return os.getenv(key, str(default)).lower() in ("true", "1", "yes")

    # Malformed values are errors, never silently replaced by defaults
    def env_int(key: str, default: int = 0) -> int:
        raw = os.getenv(key, default)
        try:
            return int(raw)
        except (TypeError, ValueError):
            raise InvalidConfigurationError(f"{key} must be an integer, got {raw!r}") from None

    def env_float(key: str, default: float = 0.0) -> float:
        raw = os.getenv(key, default)
        try:
            return float(raw)
        except (TypeError, ValueError):
            raise InvalidConfigurationError(f"{key} must be a number, got {raw!r}") from None

    api = data.get("api", {})
    market = data.get("market", {})
    backtest = data.get("backtest", {})
    output = data.get("output", {})
    telegram = data.get("telegram", {})
    logging_cfg = data.get("logging", {})

    symbol = env("SYMBOL") or env("DEFAULT_SYMBOL") or market.get("symbol", "BTCUSDT")

    config = Config(
        # Public klines need no keys; keys only raise rate limits
        binance_api_key=env("BINANCE_API_KEY"),
        binance_api_secret=env("BINANCE_API_SECRET"),
        binance_api_url=env("BINANCE_API_URL", api.get("binance_api_url", "")),
        symbol=symbol.upper(),
        timeframe=env("TIMEFRAME", market.get("timeframe", "1h")),
        lookback_days=env_int("LOOKBACK_DAYS", market.get("lookback_days", 30)),
        # Strategy
        initial_capital=env_float("INITIAL_CAPITAL", backtest.get("initial_capital", 100.0)),
        leverage=env_float("LEVERAGE", backtest.get("leverage", 5.0)),
        max_hours=env_float("MAX_HOURS", backtest.get("max_hours", 4.0)),
        stop_loss_percent=env_float("STOP_LOSS_PERCENT", backtest.get("stop_loss_percent", 10.0)),
        take_profit_percent=env_float("TAKE_PROFIT_PERCENT", backtest.get("take_profit_percent", 20.0)),
        # Output
        output_dir=Path(env("OUTPUT_DIR", str(output.get("dir", "results")))),
        save_results=env_bool("SAVE_RESULTS", output.get("save", True)),
        # Telegram
        telegram_bot_token=env("TELEGRAM_BOT_TOKEN", telegram.get("bot_token", "")),
        telegram_chat_id=env("TELEGRAM_CHAT_ID", telegram.get("chat_id", "")),
        # Logging
        log_level=logging_cfg.get("level", "INFO"),
        log_dir=Path(logging_cfg.get("log_dir", "logs")),
        log_file=logging_cfg.get("log_file", "backtest.log"),
    )
    config.validate()
    return config


class Config:
    """Unified configuration. Use override() to derive a copy with CLI values applied."""

    __slots__ = (
        "binance_api_key", "binance_api_secret", "binance_api_url",
        "symbol", "timeframe", "lookback_days",
        "initial_capital", "leverage", "max_hours", "stop_loss_percent", "take_profit_percent",
        "output_dir", "save_results",
        "telegram_bot_token", "telegram_chat_id",
        "log_level", "log_dir", "log_file",
    )

    def __init__(
        self,
        binance_api_key: str = "",
        binance_api_secret: str = "",
        binance_api_url: str = "",
        symbol: str = "BTCUSDT",
        timeframe: str = "1h",
        lookback_days: int = 30,
        initial_capital: float = 100.0,
        leverage: float = 5.0,
        max_hours: float = 4.0,
        stop_loss_percent: float = 10.0,
        take_profit_percent: float = 20.0,
        output_dir: Path = None,
        save_results: bool = True,
        telegram_bot_token: str = "",
        telegram_chat_id: str = "",
        log_level: str = "INFO",
        log_dir: Path = None,
        log_file: str = "backtest.log",
    ):
        self.binance_api_key = binance_api_key
        self.binance_api_secret = binance_api_secret
        self.binance_api_url = binance_api_url
        self.symbol = symbol
        self.timeframe = timeframe
        self.lookback_days = lookback_days
        self.initial_capital = initial_capital
        self.leverage = leverage
        self.max_hours = max_hours
        self.stop_loss_percent = stop_loss_percent
        self.take_profit_percent = take_profit_percent
        self.output_dir = Path(output_dir) if output_dir else Path("results")
        self.save_results = save_results
        self.telegram_bot_token = telegram_bot_token
        self.telegram_chat_id = telegram_chat_id
        self.log_level = log_level
        self.log_dir = Path(log_dir) if log_dir else Path("logs")
        self.log_file = log_file

    def validate(self) -> None:
        validate_parameters(
            self.initial_capital,
            self.leverage,
            self.max_hours,
            self.stop_loss_percent,
            self.take_profit_percent,
        )
        if isinstance(self.lookback_days, bool) or not isinstance(self.lookback_days, int) or self.lookback_days < 2:
            raise InvalidConfigurationError(f"lookback_days must be an integer >= 2, got {self.lookback_days!r}")
        if not self.symbol:
            raise InvalidConfigurationError("symbol must not be empty")

    def override(self, **values: Any) -> "Config":
        """Return a validated copy with the given non-None values replaced."""
        unknown = set(values) - set(self.__slots__)
        if unknown:
            raise InvalidConfigurationError(f"Unknown config keys: {sorted(unknown)}")
        merged = {name: getattr(self, name) for name in self.__slots__}
        merged.update({k: v for k, v in values.items() if v is not None})
        config = Config(**merged)
        config.validate()
        return config
