"""Rounding helpers for money and percent values."""

from __future__ import annotations
import math


def round_half_up(value: float, decimals: int = 2) -> float:
    """
    Round with ties going up (toward +inf), e.g. 2.675 -> 2.68 in exact arithmetic.
    Python's round() ties to even; balances must not depend on that.
    """
    scale = 10 ** decimals
    return math.floor(value * scale + 0.5) / scale


def round2(value: float) -> float:
    """Round a USD or percent figure to 2 decimals."""
    return round_half_up(value, 2)
