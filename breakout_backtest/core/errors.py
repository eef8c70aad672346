"""Backtest error categories. All are deterministic input errors; none is retried."""


class BacktestError(ValueError):
    """Base class for errors raised by the backtest core."""


class InvalidConfigurationError(BacktestError):
    """A strategy or run parameter is missing, malformed, or not positive."""


class InsufficientDataError(BacktestError):
    """Bar input does not span the two calendar days needed for a reference level."""


class InvalidBarSequenceError(BacktestError):
    """Bar open times are not strictly increasing."""
