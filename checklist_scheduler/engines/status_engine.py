"""Status Engine - Pure logic for classifying checklist occurrences.

This engine answers "what state is this checklist in right now?" and
"what state is this particular occurrence in?" by combining:
- the reference instant (now)
- the most relevant completion
- the occurrence window from window_engine

Instance status is a two-step pipeline:
    compute_base_status() → override_with_stored_completion()
so a persisted "late" or "expired" completion keeps its label after the
fact instead of being recomputed as "completed".

ARCHITECTURE: All methods are static and operate on passed-in data. The
engine never mutates its inputs and never raises for malformed records.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from .. import const
from ..const import ChecklistStatus
from ..utils.dt_utils import as_utc, dt_is_same_local_day, dt_now_utc
from .schedule_engine import (
    calculate_next_due_date,
    get_completed_at,
    get_schedule,
    get_schedule_interval,
    get_scheduled_for,
)
from .window_engine import ScheduleWindow, resolve_window

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from ..type_defs import ChecklistData, CompletionData


class StatusEngine:
    """Pure logic engine for checklist status resolution.

    All methods are static - no instance state.
    """

    # =========================================================================
    # COMPLETION LOOKUP
    # =========================================================================

    @staticmethod
    def get_checklist_completions(
        checklist: ChecklistData | Mapping[str, Any],
        completions: Iterable[CompletionData | Mapping[str, Any]],
    ) -> list[Mapping[str, Any]]:
        """Return this checklist's completions, newest first."""
        checklist_id = checklist.get(const.DATA_CHECKLIST_ID)
        own = [
            completion
            for completion in completions
            if completion.get(const.DATA_COMPLETION_CHECKLIST_ID) == checklist_id
        ]
        return sorted(own, key=_completed_at_sort_key, reverse=True)

    @staticmethod
    def get_last_completion(
        checklist: ChecklistData | Mapping[str, Any],
        completions: Iterable[CompletionData | Mapping[str, Any]],
    ) -> Mapping[str, Any] | None:
        """Return the most recent completion of this checklist, if any."""
        own = StatusEngine.get_checklist_completions(checklist, completions)
        return own[0] if own else None

    @staticmethod
    def find_instance_completion(
        checklist: ChecklistData | Mapping[str, Any],
        completions: Iterable[CompletionData | Mapping[str, Any]],
        instance_date: datetime,
    ) -> Mapping[str, Any] | None:
        """Find the completion recorded against a specific occurrence.

        Daily checklists match scheduledFor by local calendar day; every
        other cadence requires the exact occurrence timestamp.
        """
        schedule = get_schedule(checklist)
        is_daily = bool(
            schedule
            and schedule.get(const.DATA_SCHEDULE_TYPE) == const.SCHEDULE_TYPE_DAILY
        )
        instance_utc = as_utc(instance_date)

        for completion in StatusEngine.get_checklist_completions(checklist, completions):
            scheduled_for = get_scheduled_for(completion)
            if scheduled_for is None:
                continue
            if is_daily:
                if dt_is_same_local_day(scheduled_for, instance_utc):
                    return completion
            elif scheduled_for == instance_utc:
                return completion
        return None

    # =========================================================================
    # PREDICATES
    # =========================================================================

    @staticmethod
    def is_expired(
        checklist: ChecklistData | Mapping[str, Any],
        last_completion: CompletionData | Mapping[str, Any] | None = None,
        now: datetime | None = None,
    ) -> bool:
        """Check whether the next occurrence is past its expiry.

        Requires both expireTime and closingTime; without either a checklist
        can only ever become overdue.
        """
        schedule = get_schedule(checklist)
        if not schedule:
            return False
        if not (
            schedule.get(const.DATA_SCHEDULE_EXPIRE_TIME)
            and schedule.get(const.DATA_SCHEDULE_CLOSING_TIME)
        ):
            return False

        now_utc = as_utc(now or dt_now_utc())
        due_date = calculate_next_due_date(checklist, last_completion, now_utc)
        window = resolve_window(due_date, schedule)
        return window is not None and window.is_expired(now_utc)

    @staticmethod
    def is_overdue(
        checklist: ChecklistData | Mapping[str, Any],
        last_completion: CompletionData | Mapping[str, Any] | None = None,
        now: datetime | None = None,
    ) -> bool:
        """Coarse overdue check: has a full cadence interval passed since completion?

        Checklists without a schedule and continuous checklists are never
        overdue. A scheduled checklist that was never completed always is.
        Unknown cadences are never overdue.
        """
        schedule = get_schedule(checklist)
        if not schedule:
            return False

        schedule_type = schedule.get(const.DATA_SCHEDULE_TYPE)
        if schedule_type == const.SCHEDULE_TYPE_CONTINUOUS:
            return False

        completed_at = get_completed_at(last_completion) if last_completion else None
        if completed_at is None:
            return True

        interval = const.SCHEDULE_INTERVALS.get(schedule_type or "")
        if interval is None:
            return False

        now_utc = as_utc(now or dt_now_utc())
        return now_utc - completed_at > interval

    @staticmethod
    def is_completion_late(
        completion: CompletionData | Mapping[str, Any],
        checklist: ChecklistData | Mapping[str, Any],
    ) -> bool:
        """Check whether a completion was submitted after its occurrence closed.

        The deadline is the closing time of the scheduledFor occurrence, or
        scheduledFor itself when the schedule has no closing time.
        """
        scheduled_for = get_scheduled_for(completion)
        schedule = get_schedule(checklist)
        if scheduled_for is None or not schedule:
            return False

        completed_at = get_completed_at(completion)
        if completed_at is None:
            return False

        window = resolve_window(scheduled_for, schedule)
        deadline = window.closes_at if window else scheduled_for
        return completed_at > deadline

    # =========================================================================
    # STATUS RESOLUTION
    # =========================================================================

    @staticmethod
    def get_checklist_status(
        checklist: ChecklistData | Mapping[str, Any],
        completions: Iterable[CompletionData | Mapping[str, Any]],
        instance_date: datetime | None = None,
        now: datetime | None = None,
    ) -> ChecklistStatus:
        """Resolve the status of a checklist, or of one of its occurrences.

        Args:
            checklist: The checklist definition.
            completions: Completions for any checklists; only this
                checklist's are considered.
            instance_date: Occurrence to classify. When omitted, the current
                status of the checklist as a whole is returned.
            now: Reference instant. Defaults to the current time.

        Returns:
            One ChecklistStatus member.
        """
        now_utc = as_utc(now or dt_now_utc())
        completions = list(completions)

        base_status = StatusEngine.compute_base_status(
            checklist, completions, instance_date, now_utc
        )
        if instance_date is None or not _is_stored_status_applicable(checklist):
            return base_status

        stored = StatusEngine.find_instance_completion(
            checklist, completions, instance_date
        )
        return StatusEngine.override_with_stored_completion(base_status, stored)

    @staticmethod
    def compute_base_status(
        checklist: ChecklistData | Mapping[str, Any],
        completions: Iterable[CompletionData | Mapping[str, Any]],
        instance_date: datetime | None = None,
        now: datetime | None = None,
    ) -> ChecklistStatus:
        """Compute a status purely from the schedule, ignoring stored statuses."""
        now_utc = as_utc(now or dt_now_utc())
        schedule = get_schedule(checklist)
        if not schedule:
            return ChecklistStatus.UPCOMING

        last_completion = StatusEngine.get_last_completion(checklist, completions)

        if schedule.get(const.DATA_SCHEDULE_TYPE) == const.SCHEDULE_TYPE_CONTINUOUS:
            return _continuous_status(last_completion, now_utc)

        if instance_date is not None:
            return _instance_status(schedule, as_utc(instance_date), now_utc)

        return _current_status(checklist, schedule, last_completion, now_utc)

    @staticmethod
    def override_with_stored_completion(
        base_status: ChecklistStatus,
        stored_completion: CompletionData | Mapping[str, Any] | None,
    ) -> ChecklistStatus:
        """Let a persisted completion's own status win over a computed one.

        "in_progress" reads as due. Statuses outside the known vocabulary are
        ignored and the computed status stands.
        """
        if stored_completion is None:
            return base_status

        stored_status = stored_completion.get(const.DATA_COMPLETION_STATUS)
        if stored_status == const.COMPLETION_STATUS_IN_PROGRESS:
            return ChecklistStatus.DUE

        try:
            return ChecklistStatus(stored_status)
        except ValueError:
            const.LOGGER.debug(
                "StatusEngine: Ignoring unknown stored status %r on completion %s",
                stored_status,
                stored_completion.get(const.DATA_COMPLETION_ID),
            )
            return base_status

    # =========================================================================
    # COLLECTION HELPERS
    # =========================================================================

    @staticmethod
    def filter_checklists_by_status(
        checklists: Iterable[ChecklistData | Mapping[str, Any]],
        completions: Sequence[CompletionData | Mapping[str, Any]],
        status: ChecklistStatus | str,
        now: datetime | None = None,
    ) -> list[Mapping[str, Any]]:
        """Return the checklists whose current status equals status."""
        now_utc = as_utc(now or dt_now_utc())
        return [
            checklist
            for checklist in checklists
            if StatusEngine.get_checklist_status(checklist, completions, now=now_utc)
            == status
        ]

    @staticmethod
    def sort_checklists_by_priority(
        checklists: Iterable[ChecklistData | Mapping[str, Any]],
        completions: Sequence[CompletionData | Mapping[str, Any]],
        now: datetime | None = None,
    ) -> list[Mapping[str, Any]]:
        """Return a new list ordered most urgent first.

        Order: expired, overdue, due, upcoming, late, completed. The sort is
        stable, so checklists sharing a status keep their input order.
        """
        now_utc = as_utc(now or dt_now_utc())
        ranked = [
            (
                const.STATUS_PRIORITY[
                    StatusEngine.get_checklist_status(checklist, completions, now=now_utc)
                ],
                checklist,
            )
            for checklist in checklists
        ]
        ranked.sort(key=lambda pair: pair[0])
        return [checklist for _, checklist in ranked]


# =============================================================================
# Private helpers
# =============================================================================


def _completed_at_sort_key(completion: Mapping[str, Any]) -> float:
    completed_at = get_completed_at(completion)
    return completed_at.timestamp() if completed_at else 0.0


def _is_stored_status_applicable(checklist: Mapping[str, Any]) -> bool:
    """Stored statuses only apply to scheduled, non-continuous checklists."""
    schedule = get_schedule(checklist)
    if not schedule:
        return False
    return schedule.get(const.DATA_SCHEDULE_TYPE) != const.SCHEDULE_TYPE_CONTINUOUS


def _continuous_status(
    last_completion: Mapping[str, Any] | None, now: datetime
) -> ChecklistStatus:
    """Continuous checklists are always due unless just completed."""
    completed_at = get_completed_at(last_completion) if last_completion else None
    if completed_at is not None and now - completed_at < const.CONTINUOUS_COMPLETED_WINDOW:
        return ChecklistStatus.COMPLETED
    return ChecklistStatus.DUE


def _window_status(window: ScheduleWindow, now: datetime) -> ChecklistStatus:
    """Place now on the upcoming → due → overdue → expired ladder of a window."""
    if now < window.due_from:
        return ChecklistStatus.UPCOMING
    if now <= window.closes_at:
        return ChecklistStatus.DUE
    if window.is_expired(now):
        return ChecklistStatus.EXPIRED
    return ChecklistStatus.OVERDUE


def _instance_status(
    schedule: Mapping[str, Any], instance_date: datetime, now: datetime
) -> ChecklistStatus:
    """Status of one occurrence, anchored on its own window."""
    window = resolve_window(instance_date, schedule)
    if window is not None:
        if not window.has_opened(now):
            return ChecklistStatus.UPCOMING
        return _window_status(window, now)

    # No closing time: day-granularity rules
    if instance_date > now:
        return ChecklistStatus.UPCOMING
    if dt_is_same_local_day(instance_date, now):
        return ChecklistStatus.DUE
    return ChecklistStatus.OVERDUE


def _current_status(
    checklist: Mapping[str, Any],
    schedule: Mapping[str, Any],
    last_completion: Mapping[str, Any] | None,
    now: datetime,
) -> ChecklistStatus:
    """Status of the checklist as a whole, relative to its next due date."""
    if StatusEngine.is_expired(checklist, last_completion, now):
        return ChecklistStatus.EXPIRED

    next_due = calculate_next_due_date(checklist, last_completion, now)

    completed_at = get_completed_at(last_completion) if last_completion else None
    if completed_at is not None:
        # Completion falls within the cadence interval leading up to the due date
        interval = get_schedule_interval(schedule.get(const.DATA_SCHEDULE_TYPE))
        if completed_at > next_due - interval:
            if completed_at > next_due:
                return ChecklistStatus.LATE
            return ChecklistStatus.COMPLETED

    window = resolve_window(next_due, schedule)
    if window is not None:
        return _window_status(window, now)

    if dt_is_same_local_day(next_due, now):
        return ChecklistStatus.DUE
    return ChecklistStatus.UPCOMING
