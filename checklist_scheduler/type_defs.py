"""Type definitions for checklist scheduler data structures.

Records are passed in exactly as the persistence layer stores them: plain
dicts with camelCase keys and epoch-millisecond timestamps. The TypedDicts
below describe those shapes for static analysis only.

NOTE: TypedDict is STATIC ANALYSIS ONLY. Runtime handling of missing or
malformed fields (.get() defaults, coercion) lives in the engines, which
never raise for bad input.

IMPORTANT: This file must NOT import from engines/ to avoid circular imports.
"""

from typing import Any, NotRequired, TypedDict

# =============================================================================
# Type Aliases (for readability)
# =============================================================================

ChecklistId = str
ItemId = str
EpochMillis = int  # Milliseconds since the Unix epoch
TimeOfDay = str  # 24-hour local wall clock "HH:MM"


# =============================================================================
# Checklist Definition
# =============================================================================


class ScheduleData(TypedDict, total=False):
    """Recurrence configuration embedded in a checklist.

    Absence of closingTime disables window gating entirely.
    """

    type: str  # SCHEDULE_TYPE_* constant
    openingTime: TimeOfDay
    closingTime: TimeOfDay
    expireTime: float  # Hours after closing time
    startDate: EpochMillis  # Anchor for 4-week cycles


class ChecklistItemData(TypedDict):
    """A single gradeable (or informational) checklist item."""

    id: ItemId
    title: str
    type: str  # ITEM_TYPE_* constant
    required: bool
    description: NotRequired[str]


class ChecklistSectionData(TypedDict):
    """A group of items. Sections typed "logs" are excluded from scoring."""

    id: str
    title: str
    sectionType: str
    items: list[ChecklistItemData]
    order: NotRequired[int]


class ChecklistData(TypedDict):
    """A checklist definition as supplied by the persistence layer."""

    id: ChecklistId
    title: str
    items: list[ChecklistItemData]
    sections: list[ChecklistSectionData]
    createdAt: EpochMillis
    schedule: NotRequired[ScheduleData | None]
    description: NotRequired[str]


# =============================================================================
# Completion Records
# =============================================================================


class ItemResponseData(TypedDict):
    """A response to one checklist item."""

    itemId: ItemId
    type: str
    value: Any
    completed: bool
    photos: NotRequired[list[str]]


class CompletionData(TypedDict):
    """A submitted (or in-progress) checklist completion.

    The stored status wins over any recomputed status for the occurrence
    identified by scheduledFor.
    """

    id: str
    checklistId: ChecklistId
    completedAt: EpochMillis
    status: str  # ChecklistStatus value or "in_progress"
    responses: dict[ItemId, ItemResponseData]
    scheduledFor: NotRequired[EpochMillis]
    completedBy: NotRequired[str]


# =============================================================================
# Dashboard Aggregates
# =============================================================================


class ChecklistMetrics(TypedDict):
    """Dashboard aggregate returned by ScoringEngine.get_checklist_metrics()."""

    total_checklists: int
    completed_on_time: int
    completed_late: int
    overdue: int
    completion_rate: float
    average_score: float
    streak_count: int
