"""Test helpers for checklist scheduler tests.

This module re-exports all helpers for convenient imports:

    from tests.helpers import make_checklist, make_completion, make_utc_dt

See builders.py for full documentation.
"""

from tests.helpers.builders import (
    DEFAULT_CHECKLIST_ID,
    make_checklist,
    make_completion,
    make_item,
    make_response,
    make_schedule,
    make_utc_dt,
    ms,
)

__all__ = [
    "DEFAULT_CHECKLIST_ID",
    "make_checklist",
    "make_completion",
    "make_item",
    "make_response",
    "make_schedule",
    "make_utc_dt",
    "ms",
]
