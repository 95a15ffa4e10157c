"""Engine modules for the checklist scheduler.

Contains specialized computation engines:
- schedule_engine: Next due date per cadence, 4-week cycle alignment
- window_engine: Opening/closing/expiry instants for one occurrence
- status_engine: Status state machine and stored-status precedence
- instance_engine: Calendar instances for a checklist
- scoring_engine: Scores, progress, validation, streaks and metrics
"""

# Use relative imports within package to avoid mypy module resolution issues
from .instance_engine import ChecklistInstance, generate_checklist_instances
from .schedule_engine import (
    calculate_next_due_date,
    get_cycle_start,
    get_schedule_interval,
    get_start_of_week,
)
from .scoring_engine import ScoringEngine
from .status_engine import StatusEngine
from .window_engine import ScheduleWindow, is_checklist_open, resolve_window

__all__ = [
    "ChecklistInstance",
    "ScheduleWindow",
    "ScoringEngine",
    "StatusEngine",
    "calculate_next_due_date",
    "generate_checklist_instances",
    "get_cycle_start",
    "get_schedule_interval",
    "get_start_of_week",
    "is_checklist_open",
    "resolve_window",
]
