# File: utils/math_utils.py
"""Math and calculation utilities for Habit Tracker.

Pure Python math functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

Functions:
    - round_half_up: Integer rounding with halves rounded up
    - clamp: Bound a value between limits
    - clamp_percentage: Bound a percentage to [0, 100]
    - calculate_percentage: Whole-number percentage with zero-division guard
"""

from __future__ import annotations

import math

# ==============================================================================
# Constants (local copies to avoid circular imports)
# ==============================================================================

PERCENT_MIN = 0
PERCENT_MAX = 100


# ==============================================================================
# Rounding and Bounds
# ==============================================================================


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward positive infinity.

    Python's round() uses banker's rounding (round(12.5) == 12); percentages
    here follow the usual convention (12.5 → 13, -2.5 → -2).

    Examples:
        round_half_up(66.666) → 67
        round_half_up(12.5) → 13
        round_half_up(-2.5) → -2
    """
    return math.floor(value + 0.5)


def clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp a value between minimum and maximum bounds.

    Args:
        value: Value to clamp
        min_val: Minimum allowed value
        max_val: Maximum allowed value

    Returns:
        Value clamped to [min_val, max_val]
    """
    return max(min_val, min(value, max_val))


def clamp_percentage(value: float) -> int:
    """Round and clamp a percentage to the integer range [0, 100]."""
    return int(clamp(round_half_up(value), PERCENT_MIN, PERCENT_MAX))


def calculate_percentage(part: float, whole: float) -> int:
    """Calculate a whole-number percentage clamped to [0, 100].

    Args:
        part: Achieved amount
        whole: Possible amount

    Returns:
        round(100 * part / whole) clamped to [0, 100], or 0 if whole <= 0

    Examples:
        calculate_percentage(2, 3) → 67
        calculate_percentage(5, 0) → 0  # Division by zero protection
        calculate_percentage(9, 4) → 100  # Stale data clamped
    """
    if whole <= 0:
        return 0
    return clamp_percentage(part / whole * 100)
