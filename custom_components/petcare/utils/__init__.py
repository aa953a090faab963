# File: utils/__init__.py
"""Pure Python utilities for PetCare.

This module contains pure Python functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

Submodules:
    - dt_utils: Date/time parsing, reset windows, countdown formatting
    - math_utils: Point rounding, clamping, progress calculations

Usage:
    from . import dt_utils
    from .math_utils import round_points
"""

from . import dt_utils, math_utils

__all__ = ["dt_utils", "math_utils"]
