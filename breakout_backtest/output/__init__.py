"""Output: JSON export of backtest results."""

from breakout_backtest.output.exporter import (
    ExportValidationError,
    ResultsExporter,
    format_results,
    validate,
)

__all__ = ["ExportValidationError", "ResultsExporter", "format_results", "validate"]
