# File: utils/__init__.py
"""Pure Python utilities for the checklist scheduler.

Submodules:
    - dt_utils: Local wall clock, epoch conversion, time-of-day arithmetic
    - math_utils: Percentage rounding and clamping

Usage:
    from . import dt_utils
    from .math_utils import calculate_percentage
"""

from . import dt_utils, math_utils

__all__ = ["dt_utils", "math_utils"]
