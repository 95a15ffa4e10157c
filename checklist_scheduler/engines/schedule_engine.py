"""Schedule Engine for the checklist scheduler.

Computes when a recurring checklist next becomes due, per cadence:
- Fixed-interval cadences (daily, monthly, yearly) add a fixed duration to
  the last completion
- Weekly snaps to Monday 00:00 of the current week via dateutil.relativedelta
- 4-week cycles are aligned to the schedule's startDate anchor

Interval arithmetic is done on absolute (UTC) instants; calendar-day
arithmetic goes through the local wall clock in dt_utils.

IMPORTANT: This module is a leaf. It must NOT import from other engines.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

from .. import const
from ..utils.dt_utils import as_utc, dt_from_epoch_ms, dt_now_utc, start_of_local_week

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ..type_defs import ChecklistData, CompletionData, ScheduleData


# =============================================================================
# Record Accessors
# =============================================================================


def get_schedule(checklist: Mapping[str, Any]) -> ScheduleData | None:
    """Return the checklist's schedule, or None when it is not recurring."""
    schedule = checklist.get(const.DATA_CHECKLIST_SCHEDULE)
    return schedule or None


def get_schedule_type(checklist: Mapping[str, Any]) -> str | None:
    """Return the cadence of a checklist, or None without a schedule."""
    schedule = get_schedule(checklist)
    if schedule is None:
        return None
    return schedule.get(const.DATA_SCHEDULE_TYPE)


def get_completed_at(completion: Mapping[str, Any]) -> datetime | None:
    """Return when a completion was submitted (UTC)."""
    return dt_from_epoch_ms(completion.get(const.DATA_COMPLETION_COMPLETED_AT))


def get_scheduled_for(completion: Mapping[str, Any]) -> datetime | None:
    """Return the occurrence a completion satisfies (UTC), if recorded."""
    return dt_from_epoch_ms(completion.get(const.DATA_COMPLETION_SCHEDULED_FOR))


def get_start_date(schedule: Mapping[str, Any] | None) -> datetime | None:
    """Return the 4-week cycle anchor (UTC), if configured."""
    if not schedule:
        return None
    return dt_from_epoch_ms(schedule.get(const.DATA_SCHEDULE_START_DATE))


def get_created_at(checklist: Mapping[str, Any]) -> datetime | None:
    """Return when the checklist was created (UTC), if recorded."""
    return dt_from_epoch_ms(checklist.get(const.DATA_CHECKLIST_CREATED_AT))


# =============================================================================
# Intervals and Anchors
# =============================================================================


def get_schedule_interval(schedule_type: str | None) -> timedelta:
    """Return the nominal repeat interval for a cadence.

    Continuous checklists have a zero interval. Unknown cadences fall back
    to daily.
    """
    return const.SCHEDULE_INTERVALS.get(schedule_type or "", const.INTERVAL_DAILY)


def get_start_of_week(now: datetime | None = None) -> datetime:
    """Return Monday 00:00 (local) of the week containing now, as UTC."""
    return as_utc(start_of_local_week(now or dt_now_utc()))


def get_cycles_passed(start_date: datetime, now: datetime) -> int:
    """Return how many whole 4-week cycles have elapsed since start_date.

    Floors towards negative infinity, so an anchor in the future yields -1.
    """
    return (as_utc(now) - as_utc(start_date)) // const.INTERVAL_FOUR_WEEK


def get_cycle_start(start_date: datetime, now: datetime, offset: int = 0) -> datetime:
    """Return the start of the 4-week cycle containing now, shifted by offset cycles.

    Args:
        start_date: Cycle anchor.
        now: Reference instant.
        offset: 0 for the current cycle, 1 for the next one.

    Returns:
        Cycle start (UTC).
    """
    cycles = get_cycles_passed(start_date, now) + offset
    return as_utc(start_date) + cycles * const.INTERVAL_FOUR_WEEK


# =============================================================================
# Next Due Date
# =============================================================================


def calculate_next_due_date(
    checklist: ChecklistData | Mapping[str, Any],
    last_completion: CompletionData | Mapping[str, Any] | None = None,
    now: datetime | None = None,
) -> datetime:
    """Calculate when a checklist is next due.

    Args:
        checklist: The checklist definition.
        last_completion: Most recent completion for this checklist, if any.
        now: Reference instant. Defaults to the current time.

    Returns:
        Next due instant (UTC). Never None: checklists without a schedule,
        and continuous checklists, are due now.

    Examples:
        Daily, completed Jan 19 12:00 → Jan 20 12:00
        Weekly, no completion, now Wednesday → Monday 00:00 this week
        4-week anchored Jan 1, now Jan 11, no completion → Jan 1
    """
    now_utc = as_utc(now or dt_now_utc())
    schedule = get_schedule(checklist)
    if schedule is None:
        return now_utc

    schedule_type = schedule.get(const.DATA_SCHEDULE_TYPE)
    if schedule_type == const.SCHEDULE_TYPE_CONTINUOUS:
        return now_utc

    completed_at = get_completed_at(last_completion) if last_completion else None

    if schedule_type == const.SCHEDULE_TYPE_DAILY:
        if completed_at is None:
            return now_utc
        return completed_at + const.INTERVAL_DAILY

    if schedule_type == const.SCHEDULE_TYPE_WEEKLY:
        if completed_at is None or now_utc - completed_at > const.INTERVAL_WEEKLY:
            return get_start_of_week(now_utc)
        return completed_at + const.INTERVAL_WEEKLY

    base = completed_at or now_utc

    if schedule_type == const.SCHEDULE_TYPE_FOUR_WEEK:
        start_date = get_start_date(schedule)
        if start_date is None:
            # Legacy checklists without an anchor drift from the last completion
            return base + const.INTERVAL_FOUR_WEEK
        current_cycle_start = get_cycle_start(start_date, now_utc)
        if completed_at is None or completed_at < current_cycle_start:
            return current_cycle_start
        return get_cycle_start(start_date, now_utc, offset=1)

    if schedule_type == const.SCHEDULE_TYPE_MONTHLY:
        return base + const.INTERVAL_MONTHLY

    if schedule_type == const.SCHEDULE_TYPE_YEARLY:
        return base + const.INTERVAL_YEARLY

    const.LOGGER.debug(
        "ScheduleEngine: Unknown schedule type %s for checklist %s, using daily",
        schedule_type,
        checklist.get(const.DATA_CHECKLIST_ID),
    )
    return base + const.INTERVAL_DAILY
