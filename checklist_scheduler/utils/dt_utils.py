# File: utils/dt_utils.py
"""Date and time utilities for the checklist scheduler.

Pure Python date/time functions. Every calendar-day decision in the engines
(today, start of week, applying an "HH:MM" time) goes through the single
configured local wall clock held here.

Functions:
    - set_default_timezone / get_default_timezone: Local wall clock config
    - dt_now_utc: Current instant (UTC)
    - as_utc / as_local: Timezone conversion
    - start_of_local_day / start_of_local_week: Calendar boundaries
    - dt_add_local_days: Wall-clock day arithmetic
    - dt_is_same_local_day: Calendar-day comparison
    - dt_from_epoch_ms / dt_to_epoch_ms: Persistence boundary conversion
    - parse_time_of_day: Lenient "HH:MM" parsing
    - dt_at_time_of_day: Apply "HH:MM" to a calendar day
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
import logging
from typing import Any
from zoneinfo import ZoneInfo

from dateutil.relativedelta import MO, relativedelta

# Module-level logger
_LOGGER = logging.getLogger(__name__)

# ==============================================================================
# Constants (local copies to avoid circular imports)
# ==============================================================================

# Default timezone - can be overridden by caller
DEFAULT_TIME_ZONE: ZoneInfo = ZoneInfo("UTC")

TIME_OF_DAY_SEPARATOR = ":"
MILLIS_PER_SECOND = 1000


# ==============================================================================
# Timezone Configuration
# ==============================================================================


def set_default_timezone(tz: ZoneInfo) -> None:
    """Set the local wall clock used for all calendar-day decisions.

    Call this once during application start-up.

    Args:
        tz: ZoneInfo object representing the local timezone
    """
    global DEFAULT_TIME_ZONE  # noqa: PLW0603
    DEFAULT_TIME_ZONE = tz


def get_default_timezone() -> ZoneInfo:
    """Get the current local wall clock timezone."""
    return DEFAULT_TIME_ZONE


# ==============================================================================
# Current Date/Time
# ==============================================================================


def dt_now_utc() -> datetime:
    """Return the current datetime in UTC (timezone-aware)."""
    return datetime.now(UTC)


# ==============================================================================
# Timezone Conversion
# ==============================================================================


def as_utc(dt_obj: datetime) -> datetime:
    """Convert a datetime to UTC timezone.

    Args:
        dt_obj: Datetime object. Naive values are assumed to be local.

    Returns:
        Datetime in UTC timezone
    """
    if dt_obj.tzinfo is None:
        dt_obj = dt_obj.replace(tzinfo=DEFAULT_TIME_ZONE)
    return dt_obj.astimezone(UTC)


def as_local(dt_obj: datetime, tz: ZoneInfo | None = None) -> datetime:
    """Convert a datetime to local timezone.

    Args:
        dt_obj: Datetime object. Naive values are assumed to be UTC.
        tz: Optional timezone override. Uses DEFAULT_TIME_ZONE if not provided.

    Returns:
        Datetime in local timezone
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    if dt_obj.tzinfo is None:
        dt_obj = dt_obj.replace(tzinfo=UTC)
    return dt_obj.astimezone(tz_info)


# ==============================================================================
# Calendar Boundaries
# ==============================================================================


def start_of_local_day(dt_obj: datetime, tz: ZoneInfo | None = None) -> datetime:
    """Get local midnight (00:00:00) of the calendar day containing dt_obj.

    Args:
        dt_obj: Datetime object (can be in any timezone)
        tz: Optional timezone override. Uses DEFAULT_TIME_ZONE if not provided.

    Returns:
        Datetime at 00:00:00 in local timezone (timezone-aware)
    """
    local_dt = as_local(dt_obj, tz)
    return local_dt.replace(hour=0, minute=0, second=0, microsecond=0)


def start_of_local_week(dt_obj: datetime, tz: ZoneInfo | None = None) -> datetime:
    """Get Monday 00:00 (local) of the ISO week containing dt_obj.

    Sunday belongs to the week that started six days earlier.

    Example:
        Wednesday 2026-01-21 15:00 → Monday 2026-01-19 00:00
    """
    return start_of_local_day(dt_obj, tz) + relativedelta(weekday=MO(-1))


def dt_add_local_days(dt_obj: datetime, days: int, tz: ZoneInfo | None = None) -> datetime:
    """Shift a datetime by whole calendar days, preserving local wall time.

    Unlike adding a fixed 24h timedelta to a UTC instant, this keeps
    local midnight at local midnight across DST transitions.
    """
    return as_local(dt_obj, tz) + relativedelta(days=days)


def dt_is_same_local_day(
    first: datetime, second: datetime, tz: ZoneInfo | None = None
) -> bool:
    """Return True if both instants fall on the same local calendar day."""
    return as_local(first, tz).date() == as_local(second, tz).date()


# ==============================================================================
# Epoch Milliseconds (persistence boundary)
# ==============================================================================


def dt_from_epoch_ms(value: Any) -> datetime | None:
    """Convert an epoch-millisecond field to a UTC datetime.

    Args:
        value: Milliseconds since the Unix epoch. Zero, None, booleans and
            non-numeric values are treated as absent.

    Returns:
        UTC-aware datetime, or None if the value is absent or unusable.

    Example:
        1768824000000 → datetime.datetime(2026, 1, 19, 12, 0, tzinfo=UTC)
    """
    if not value or isinstance(value, bool):
        return None
    try:
        return datetime.fromtimestamp(float(value) / MILLIS_PER_SECOND, UTC)
    except (TypeError, ValueError, OverflowError, OSError):
        _LOGGER.debug("Ignoring unusable epoch milliseconds value: %r", value)
        return None


def dt_to_epoch_ms(dt_obj: datetime) -> int:
    """Convert a datetime to epoch milliseconds (naive values assumed local)."""
    return round(as_utc(dt_obj).timestamp() * MILLIS_PER_SECOND)


# ==============================================================================
# Time of Day
# ==============================================================================


def parse_time_of_day(time_str: str | None) -> tuple[int, int]:
    """Parse an "HH:MM" string into (hours, minutes).

    Parsing is lenient: any missing or non-numeric component coerces to 0
    rather than raising, so "8" → (8, 0) and "ab:cd" → (0, 0).

    Args:
        time_str: 24-hour local time string

    Returns:
        Tuple of (hours, minutes)
    """
    if not time_str or not isinstance(time_str, str):
        return 0, 0

    parts = time_str.strip().split(TIME_OF_DAY_SEPARATOR)
    values: list[int] = []
    for part in parts[:2]:
        try:
            values.append(int(part.strip()))
        except ValueError:
            _LOGGER.debug("Coercing time component %r in %r to 0", part, time_str)
            values.append(0)

    while len(values) < 2:
        values.append(0)

    return values[0], values[1]


def dt_at_time_of_day(
    anchor: datetime, time_str: str | None, tz: ZoneInfo | None = None
) -> datetime:
    """Apply an "HH:MM" local time to the calendar day of anchor.

    Out-of-range components roll over (e.g. "25:00" lands at 01:00 the
    following day).

    Args:
        anchor: Any instant on the target local calendar day
        time_str: 24-hour local time string
        tz: Optional timezone override. Uses DEFAULT_TIME_ZONE if not provided.

    Returns:
        Local timezone-aware datetime
    """
    hours, minutes = parse_time_of_day(time_str)
    return start_of_local_day(anchor, tz) + timedelta(hours=hours, minutes=minutes)
