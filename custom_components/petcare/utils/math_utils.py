# File: utils/math_utils.py
"""Math and calculation utilities for PetCare.

Pure Python math functions with ZERO Home Assistant dependencies.

Functions:
    - round_points: Consistent rounding to configured precision
    - floor_points: Integer floor with float-noise guard
    - clamp: Clamp a value to an inclusive range
    - calculate_percentage: Progress percentage calculations
"""

from __future__ import annotations

import math

# ==============================================================================
# Constants (local copies to avoid circular imports)
# ==============================================================================

DATA_FLOAT_PRECISION = 2

# Guard for floor() of products like 10 * 1.1 == 11.000000000000002 or 0.3 * 10
FLOOR_EPSILON = 1e-9


# ==============================================================================
# Point Arithmetic Functions
# ==============================================================================


def round_points(value: float, precision: int = DATA_FLOAT_PRECISION) -> float:
    """Round a point value to the configured precision.

    Examples:
        round_points(10.456) → 10.46
        round_points(1.1000000001) → 1.1
    """
    return round(value, precision)


def floor_points(value: float) -> int:
    """Floor a computed point value to an integer.

    Products such as 15 * 1.3 evaluate to 19.499999999999996 in binary
    floating point; the epsilon keeps exact decimal results intact.

    Examples:
        floor_points(16.5) → 16
        floor_points(13.999999999999998) → 14
    """
    return math.floor(value + FLOOR_EPSILON)


def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp a value to the inclusive range [lower, upper]."""
    return max(lower, min(upper, value))


# ==============================================================================
# Progress Calculations
# ==============================================================================


def calculate_percentage(
    current: float,
    target: float,
    precision: int = DATA_FLOAT_PRECISION,
) -> float:
    """Calculate progress percentage toward a target, capped at 100.

    Returns:
        Percentage (0.0 to 100.0), or 0.0 if target is not positive.

    Examples:
        calculate_percentage(5, 10) → 50.0
        calculate_percentage(15, 10) → 100.0
        calculate_percentage(5, 0) → 0.0
    """
    if target <= 0:
        return 0.0

    percentage = (current / target) * 100
    return round(min(percentage, 100.0), precision)
