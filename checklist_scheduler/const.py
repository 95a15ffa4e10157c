# File: const.py
"""Constants for the checklist scheduler.

This file centralizes schedule types, record keys, durations and the status
vocabulary used across the engines, so that every cadence rule and every
status label is defined in exactly one place.
"""

from datetime import timedelta
from enum import StrEnum
import logging

# ------------------------------------------------------------------------------------------------
# General
# ------------------------------------------------------------------------------------------------
CHECKLIST_SCHEDULER_TITLE = "Checklist Scheduler"

# Logger
LOGGER = logging.getLogger(__package__)

# ------------------------------------------------------------------------------------------------
# Schedule Types (cadences)
# ------------------------------------------------------------------------------------------------
SCHEDULE_TYPE_DAILY = "daily"
SCHEDULE_TYPE_WEEKLY = "weekly"
SCHEDULE_TYPE_FOUR_WEEK = "4week"
SCHEDULE_TYPE_MONTHLY = "monthly"
SCHEDULE_TYPE_YEARLY = "yearly"
SCHEDULE_TYPE_CONTINUOUS = "continuous"

SCHEDULE_TYPES = [
    SCHEDULE_TYPE_DAILY,
    SCHEDULE_TYPE_WEEKLY,
    SCHEDULE_TYPE_FOUR_WEEK,
    SCHEDULE_TYPE_MONTHLY,
    SCHEDULE_TYPE_YEARLY,
    SCHEDULE_TYPE_CONTINUOUS,
]

# ------------------------------------------------------------------------------------------------
# Durations
# ------------------------------------------------------------------------------------------------
INTERVAL_DAILY = timedelta(days=1)
INTERVAL_WEEKLY = timedelta(days=7)
INTERVAL_FOUR_WEEK = timedelta(days=28)
# Calendar-month/year drift is accepted: fixed 30/365 day approximations
INTERVAL_MONTHLY = timedelta(days=30)
INTERVAL_YEARLY = timedelta(days=365)
INTERVAL_CONTINUOUS = timedelta(0)

SCHEDULE_INTERVALS: dict[str, timedelta] = {
    SCHEDULE_TYPE_DAILY: INTERVAL_DAILY,
    SCHEDULE_TYPE_WEEKLY: INTERVAL_WEEKLY,
    SCHEDULE_TYPE_FOUR_WEEK: INTERVAL_FOUR_WEEK,
    SCHEDULE_TYPE_MONTHLY: INTERVAL_MONTHLY,
    SCHEDULE_TYPE_YEARLY: INTERVAL_YEARLY,
    SCHEDULE_TYPE_CONTINUOUS: INTERVAL_CONTINUOUS,
}

# Lead time before a window closes during which an occurrence counts as due
DUE_LEAD_TIME = timedelta(hours=24)

# A continuous checklist completed within this window reads as completed
CONTINUOUS_COMPLETED_WINDOW = timedelta(minutes=60)

# Allowed drift between a completion and its expected streak slot
STREAK_TOLERANCE = timedelta(hours=6)

# Calendar generation
DEFAULT_DAYS_TO_SHOW = 7

# ------------------------------------------------------------------------------------------------
# Statuses
# ------------------------------------------------------------------------------------------------


class ChecklistStatus(StrEnum):
    """Closed set of states an occurrence of a checklist can be in."""

    COMPLETED = "completed"
    DUE = "due"
    OVERDUE = "overdue"
    UPCOMING = "upcoming"
    LATE = "late"
    EXPIRED = "expired"


# Stored-only completion status: a completion that was started but not submitted
COMPLETION_STATUS_IN_PROGRESS = "in_progress"

# Dashboard ordering, most urgent first
STATUS_PRIORITY: dict[ChecklistStatus, int] = {
    ChecklistStatus.EXPIRED: 0,
    ChecklistStatus.OVERDUE: 1,
    ChecklistStatus.DUE: 2,
    ChecklistStatus.UPCOMING: 3,
    ChecklistStatus.LATE: 4,
    ChecklistStatus.COMPLETED: 5,
}

# ------------------------------------------------------------------------------------------------
# Sections and Items
# ------------------------------------------------------------------------------------------------
SECTION_TYPE_LOGS = "logs"

ITEM_TYPE_YESNO = "yesno"
ITEM_TYPE_NUMBER = "number"
ITEM_TYPE_TEXT = "text"
ITEM_TYPE_PHOTO = "photo"

YESNO_YES = "yes"
YESNO_NO = "no"
YESNO_VALUES = (YESNO_YES, YESNO_NO)

# Characters the persistence layer cannot use in keys; replaced with "_"
ITEM_ID_FORBIDDEN_CHARS = ".#$[]/"
ITEM_ID_REPLACEMENT_CHAR = "_"

# ------------------------------------------------------------------------------------------------
# Record Keys (persisted field names)
# ------------------------------------------------------------------------------------------------

# Checklist
DATA_CHECKLIST_ID = "id"
DATA_CHECKLIST_TITLE = "title"
DATA_CHECKLIST_SCHEDULE = "schedule"
DATA_CHECKLIST_ITEMS = "items"
DATA_CHECKLIST_SECTIONS = "sections"
DATA_CHECKLIST_CREATED_AT = "createdAt"

# Schedule
DATA_SCHEDULE_TYPE = "type"
DATA_SCHEDULE_OPENING_TIME = "openingTime"
DATA_SCHEDULE_CLOSING_TIME = "closingTime"
DATA_SCHEDULE_EXPIRE_TIME = "expireTime"
DATA_SCHEDULE_START_DATE = "startDate"

# Section
DATA_SECTION_ID = "id"
DATA_SECTION_TYPE = "sectionType"
DATA_SECTION_ITEMS = "items"

# Item
DATA_ITEM_ID = "id"
DATA_ITEM_TITLE = "title"
DATA_ITEM_TYPE = "type"
DATA_ITEM_REQUIRED = "required"

# Item response
DATA_RESPONSE_ITEM_ID = "itemId"
DATA_RESPONSE_TYPE = "type"
DATA_RESPONSE_VALUE = "value"
DATA_RESPONSE_COMPLETED = "completed"
DATA_RESPONSE_PHOTOS = "photos"

# Completion
DATA_COMPLETION_ID = "id"
DATA_COMPLETION_CHECKLIST_ID = "checklistId"
DATA_COMPLETION_COMPLETED_AT = "completedAt"
DATA_COMPLETION_SCHEDULED_FOR = "scheduledFor"
DATA_COMPLETION_STATUS = "status"
DATA_COMPLETION_RESPONSES = "responses"

# ------------------------------------------------------------------------------------------------
# Validation Messages
# ------------------------------------------------------------------------------------------------
VALIDATION_RESPONSES_REQUIRED = "At least one response is required"
VALIDATION_RESPONSE_REQUIRED = "Response required for: {title}"
VALIDATION_INVALID_YESNO = "Invalid yes/no response for: {title}"
VALIDATION_NUMBER_REQUIRED = "Number required for: {title}"
VALIDATION_TEXT_REQUIRED = "Text required for: {title}"
VALIDATION_PHOTO_REQUIRED = "Photo required for: {title}"
