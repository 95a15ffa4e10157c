"""Window Engine - opening, closing and expiry instants for one occurrence.

A schedule's window is expressed as local wall-clock times ("HH:MM") plus an
optional grace period in hours. This engine pins those times to a concrete
calendar day:

    opens_at ──── due_from (closes_at - 24h) ──── closes_at ──── expires_at

When the closing time is earlier than the opening time the window runs
overnight and closes on the following calendar day.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

from .. import const
from ..utils.dt_utils import as_utc, dt_add_local_days, dt_at_time_of_day, dt_now_utc
from .schedule_engine import get_schedule

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ..type_defs import ChecklistData, ScheduleData


@dataclass(frozen=True)
class ScheduleWindow:
    """Concrete time window for a single occurrence.

    Attributes:
        closes_at: Deadline for on-time completion (UTC)
        opens_at: Earliest completion time, or None when no opening time is set
        expires_at: End of the post-closing grace period, or None when the
                    schedule has no expireTime
    """

    closes_at: datetime
    opens_at: datetime | None = None
    expires_at: datetime | None = None

    @property
    def due_from(self) -> datetime:
        """Start of the lead-notice period during which the occurrence is due."""
        return self.closes_at - const.DUE_LEAD_TIME

    @property
    def expiry_boundary(self) -> datetime:
        """Last instant the occurrence can still be completed."""
        return self.expires_at or self.closes_at

    def has_opened(self, now: datetime) -> bool:
        """Return True once the window's opening time has passed."""
        return self.opens_at is None or now >= self.opens_at

    def is_expired(self, now: datetime) -> bool:
        """Return True past a configured expiry. Never True without one."""
        return self.expires_at is not None and now > self.expires_at


def resolve_window(
    anchor: datetime, schedule: ScheduleData | Mapping[str, Any] | None
) -> ScheduleWindow | None:
    """Resolve a schedule's window onto the local calendar day of anchor.

    Args:
        anchor: Any instant on the occurrence's calendar day.
        schedule: The checklist schedule.

    Returns:
        ScheduleWindow in UTC, or None when the schedule has no closing time
        (no time-window gating applies).
    """
    if not schedule:
        return None

    closing_time = schedule.get(const.DATA_SCHEDULE_CLOSING_TIME)
    if not closing_time:
        return None

    closes_at = dt_at_time_of_day(anchor, closing_time)

    opens_at: datetime | None = None
    opening_time = schedule.get(const.DATA_SCHEDULE_OPENING_TIME)
    if opening_time:
        opens_at = dt_at_time_of_day(anchor, opening_time)
        if closes_at < opens_at:
            # Overnight window: closing belongs to the next calendar day
            closes_at = dt_add_local_days(closes_at, 1)

    expires_at: datetime | None = None
    expire_hours = _coerce_hours(schedule.get(const.DATA_SCHEDULE_EXPIRE_TIME))
    if expire_hours:
        expires_at = as_utc(closes_at) + timedelta(hours=expire_hours)

    return ScheduleWindow(
        closes_at=as_utc(closes_at),
        opens_at=as_utc(opens_at) if opens_at else None,
        expires_at=expires_at,
    )


def is_checklist_open(
    checklist: ChecklistData | Mapping[str, Any], now: datetime | None = None
) -> bool:
    """Return True if the checklist can be filled in right now.

    Only schedules with both an opening and a closing time restrict
    availability; everything else is always open. The window used is the
    one anchored on today's local calendar day.
    """
    schedule = get_schedule(checklist)
    if not schedule:
        return True
    if not (
        schedule.get(const.DATA_SCHEDULE_OPENING_TIME)
        and schedule.get(const.DATA_SCHEDULE_CLOSING_TIME)
    ):
        return True

    now_utc = as_utc(now or dt_now_utc())
    window = resolve_window(now_utc, schedule)
    if window is None:
        return True
    return window.has_opened(now_utc) and now_utc <= window.expiry_boundary


def _coerce_hours(value: Any) -> float | None:
    """Coerce an expireTime field to hours, treating unusable values as unset."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        const.LOGGER.debug("WindowEngine: Ignoring invalid expireTime %r", value)
        return None
