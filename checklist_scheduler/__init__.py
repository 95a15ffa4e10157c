"""Scheduling and status resolution for recurring compliance checklists.

Maps (now, checklist, completions) to a status, a next due date and a set of
calendar instances. Everything here is pure computation: records are read
from the arguments and nothing is persisted.

Usage:
    from checklist_scheduler import ChecklistStatus, StatusEngine

    status = StatusEngine.get_checklist_status(checklist, completions, now=now)
"""

from .const import ChecklistStatus
from .engines import (
    ChecklistInstance,
    ScheduleWindow,
    ScoringEngine,
    StatusEngine,
    calculate_next_due_date,
    generate_checklist_instances,
    is_checklist_open,
    resolve_window,
)
from .utils.dt_utils import get_default_timezone, set_default_timezone

__all__ = [
    "ChecklistInstance",
    "ChecklistStatus",
    "ScheduleWindow",
    "ScoringEngine",
    "StatusEngine",
    "calculate_next_due_date",
    "generate_checklist_instances",
    "get_default_timezone",
    "is_checklist_open",
    "resolve_window",
    "set_default_timezone",
]
