# File: utils/math_utils.py
"""Math and calculation utilities for the checklist scheduler.

Functions:
    - round_half_up: Integer rounding with .5 always rounding up
    - calculate_percentage: Whole-number percentage with division guard
    - clamp: Bound a value to a range
"""

from __future__ import annotations

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with halves rounding up.

    Python's built-in round() uses banker's rounding (round(2.5) == 2);
    scores and percentages shown to staff round .5 upwards instead.

    Examples:
        round_half_up(2.5) → 3
        round_half_up(66.666) → 67
        round_half_up(-0.5) → 0
    """
    return math.floor(value + 0.5)


def calculate_percentage(current: float, total: float) -> int:
    """Calculate a whole-number percentage.

    Args:
        current: Number of items meeting the criterion
        total: Total number of items

    Returns:
        Percentage (0-100) rounded half-up, or 0 if total is 0

    Examples:
        calculate_percentage(1, 3) → 33
        calculate_percentage(2, 3) → 67
        calculate_percentage(5, 0) → 0
    """
    if total <= 0:
        return 0
    return round_half_up((current / total) * 100)


def clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp a value between minimum and maximum bounds.

    Examples:
        clamp(150, 0, 100) → 100
        clamp(-10, 0, 100) → 0
    """
    return max(min_val, min(value, max_val))
