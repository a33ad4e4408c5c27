"""Small numeric helpers shared by the layout, encoder and progress math."""

from __future__ import annotations

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives.

    Python's ``round`` uses banker's rounding (``round(12.5) == 12``), which
    would make progress and pixel sizes drift by one on exact halves.
    """
    return math.floor(value + 0.5)


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def percent(done: int, total: int) -> int:
    """Whole-number completion percentage in [0, 100]."""
    if total <= 0:
        return 0
    return int(clamp(round_half_up(done / total * 100), 0, 100))
