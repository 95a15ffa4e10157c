"""Instance Engine - calendar occurrences for a checklist.

Projects a checklist onto a bounded list of dated instances for calendar
and task-list views. Instances are never persisted and carry no state of
their own: every call recomputes them from (now, checklist, completions).

Per cadence:
- daily: today, up to days_to_show past days, days_to_show future days
- 4week: current cycle, plus the next cycle once the current one is done
- continuous / weekly / monthly / yearly / unscheduled: a single instance
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

from .. import const
from ..const import ChecklistStatus
from ..utils.dt_utils import as_utc, dt_add_local_days, dt_now_utc, start_of_local_day
from .schedule_engine import (
    calculate_next_due_date,
    get_completed_at,
    get_created_at,
    get_cycles_passed,
    get_schedule,
    get_start_date,
)
from .status_engine import StatusEngine

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from ..type_defs import ChecklistData, CompletionData


@dataclass(frozen=True)
class ChecklistInstance:
    """One dated occurrence of a checklist, for display only.

    Attributes:
        checklist: The checklist this instance belongs to
        instance_date: The occurrence's date (UTC). Local midnight for daily
                       checklists, cycle start for 4-week checklists.
        status: Stored or computed status of the occurrence
    """

    checklist: Mapping[str, Any]
    instance_date: datetime
    status: ChecklistStatus


def generate_checklist_instances(
    checklist: ChecklistData | Mapping[str, Any],
    completions: Iterable[CompletionData | Mapping[str, Any]],
    days_to_show: int = const.DEFAULT_DAYS_TO_SHOW,
    now: datetime | None = None,
) -> list[ChecklistInstance]:
    """Generate the calendar instances of a checklist.

    Args:
        checklist: The checklist definition.
        completions: Completions for any checklists; only this checklist's
            are considered.
        days_to_show: How far back and forward daily checklists reach.
        now: Reference instant. Defaults to the current time.

    Returns:
        Finite list of instances. None is dated before createdAt, except
        today's instance of a daily checklist created later today.
    """
    now_utc = as_utc(now or dt_now_utc())
    own = StatusEngine.get_checklist_completions(checklist, completions)
    created_at = get_created_at(checklist)

    schedule = get_schedule(checklist)
    if schedule is None:
        instance_date = max(now_utc, created_at) if created_at else now_utc
        return [_current_instance(checklist, own, instance_date, now_utc)]

    schedule_type = schedule.get(const.DATA_SCHEDULE_TYPE)

    if schedule_type == const.SCHEDULE_TYPE_CONTINUOUS:
        return [_current_instance(checklist, own, now_utc, now_utc)]

    if schedule_type == const.SCHEDULE_TYPE_DAILY:
        today, *others = _generate_daily(checklist, own, days_to_show, now_utc)
        # Today's instance is always shown, even on the day of creation
        return [today, *_drop_before_creation(others, created_at)]

    if schedule_type == const.SCHEDULE_TYPE_FOUR_WEEK:
        instances = _generate_four_week(checklist, own, created_at, now_utc)
    else:
        last_completion = own[0] if own else None
        next_due = calculate_next_due_date(checklist, last_completion, now_utc)
        if created_at and next_due < created_at:
            next_due = created_at
        instances = [_current_instance(checklist, own, next_due, now_utc)]

    return _drop_before_creation(instances, created_at)


# =============================================================================
# Per-cadence generators
# =============================================================================


def _generate_daily(
    checklist: Mapping[str, Any],
    completions: list[Mapping[str, Any]],
    days_to_show: int,
    now: datetime,
) -> list[ChecklistInstance]:
    """Today, then past days newest first, then future placeholders."""
    today = start_of_local_day(now)
    created_at = get_created_at(checklist)

    instances = [
        ChecklistInstance(
            checklist=checklist,
            instance_date=as_utc(today),
            status=StatusEngine.get_checklist_status(
                checklist, completions, instance_date=today, now=now
            ),
        )
    ]

    for offset in range(1, days_to_show + 1):
        past_day = dt_add_local_days(today, -offset)
        if created_at is not None and past_day < created_at:
            break

        stored = StatusEngine.find_instance_completion(checklist, completions, past_day)
        base_status = StatusEngine.compute_base_status(
            checklist, completions, instance_date=past_day, now=now
        )
        if stored is None and base_status == ChecklistStatus.EXPIRED:
            # Older days can only be further past their expiry
            break

        instances.append(
            ChecklistInstance(
                checklist=checklist,
                instance_date=as_utc(past_day),
                status=StatusEngine.override_with_stored_completion(base_status, stored),
            )
        )

    instances.extend(
        ChecklistInstance(
            checklist=checklist,
            instance_date=as_utc(dt_add_local_days(today, offset)),
            status=ChecklistStatus.UPCOMING,
        )
        for offset in range(1, days_to_show + 1)
    )
    return instances


def _generate_four_week(
    checklist: Mapping[str, Any],
    completions: list[Mapping[str, Any]],
    created_at: datetime | None,
    now: datetime,
) -> list[ChecklistInstance]:
    """Current 4-week cycle, and the next one once the current is completed."""
    start_date = get_start_date(get_schedule(checklist))

    if start_date is None:
        # Legacy checklists without an anchor: a single drifting instance
        last_completion = completions[0] if completions else None
        last_completed_at = get_completed_at(last_completion) if last_completion else None
        base = last_completed_at or (max(now, created_at) if created_at else now)
        return [
            _current_instance(
                checklist, completions, base + const.INTERVAL_FOUR_WEEK, now
            )
        ]

    effective_start = max(start_date, created_at) if created_at else start_date
    cycle = get_cycles_passed(effective_start, now)
    current_start = effective_start + cycle * const.INTERVAL_FOUR_WEEK
    next_start = current_start + const.INTERVAL_FOUR_WEEK

    cycle_completion = next(
        (
            completion
            for completion in completions
            if (completed_at := get_completed_at(completion)) is not None
            and current_start <= completed_at < next_start
        ),
        None,
    )

    instances: list[ChecklistInstance] = []
    if cycle_completion is None:
        if current_start <= now:
            instances.append(
                ChecklistInstance(
                    checklist=checklist,
                    instance_date=current_start,
                    status=StatusEngine.get_checklist_status(
                        checklist, completions, instance_date=current_start, now=now
                    ),
                )
            )
        return instances

    instances.append(
        ChecklistInstance(
            checklist=checklist,
            instance_date=current_start,
            status=ChecklistStatus.COMPLETED,
        )
    )
    instances.append(
        ChecklistInstance(
            checklist=checklist,
            instance_date=next_start,
            status=ChecklistStatus.DUE if next_start <= now else ChecklistStatus.UPCOMING,
        )
    )
    return instances


# =============================================================================
# Private helpers
# =============================================================================


def _current_instance(
    checklist: Mapping[str, Any],
    completions: list[Mapping[str, Any]],
    instance_date: datetime,
    now: datetime,
) -> ChecklistInstance:
    """Single instance carrying the checklist's current status."""
    return ChecklistInstance(
        checklist=checklist,
        instance_date=as_utc(instance_date),
        status=StatusEngine.get_checklist_status(checklist, completions, now=now),
    )


def _drop_before_creation(
    instances: list[ChecklistInstance], created_at: datetime | None
) -> list[ChecklistInstance]:
    """Drop instances dated before the checklist was created."""
    if created_at is None:
        return instances
    kept = [instance for instance in instances if instance.instance_date >= created_at]
    if len(kept) != len(instances):
        const.LOGGER.debug(
            "InstanceEngine: Dropped %d instance(s) dated before creation at %s",
            len(instances) - len(kept),
            created_at,
        )
    return kept
