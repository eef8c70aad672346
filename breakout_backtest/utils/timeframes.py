"""Timeframe strings and UTC time helpers."""

from __future__ import annotations
from datetime import date, datetime, timezone


def timeframe_minutes(tf: str) -> int:
    """Convert Binance-style timeframe (e.g. '5m', '1h', '1d') to minutes."""
    tf = tf.strip().lower()
    if tf.endswith("m"):
        return int(tf[:-1])
    if tf.endswith("h"):
        return int(tf[:-1]) * 60
    if tf.endswith("d"):
        return int(tf[:-1]) * 60 * 24
    raise ValueError(f"Unsupported timeframe: {tf}")


def utc_date(ts: datetime) -> date:
    """Calendar date of a timestamp at the UTC day boundary. Naive timestamps are taken as UTC."""
    if ts.tzinfo is not None:
        ts = ts.astimezone(timezone.utc)
    return ts.date()


def hours_between(start: datetime, end: datetime) -> int:
    """Whole hours elapsed from start to end, truncated toward zero."""
    return int((end - start).total_seconds() / 3600)
