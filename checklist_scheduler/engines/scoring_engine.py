"""Scoring Engine - completion scores, validation, streaks and dashboard metrics.

This engine grades completions rather than scheduling them:
- Completion score: share of responses marked completed
- Progress: share of checklist items satisfied by type-specific rules
- Validation: human-readable errors for an incomplete submission
- Streaks and completion rates per checklist
- Dashboard aggregates across all checklists

Design Principles:
    - Stateless: operates on passed data structures only
    - Log sections are informational and never graded
    - Percentages are whole numbers rounded half-up
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from .. import const
from ..const import ChecklistStatus
from ..utils.dt_utils import as_utc, dt_now_utc
from ..utils.math_utils import calculate_percentage, clamp
from .schedule_engine import get_completed_at, get_schedule, get_schedule_interval
from .status_engine import StatusEngine

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from ..type_defs import (
        ChecklistData,
        ChecklistMetrics,
        CompletionData,
        ItemResponseData,
    )


def sanitize_item_id(item_id: str) -> str:
    """Map an item id to the key it is stored under in completion responses.

    Example:
        "temp.fridge[1]" → "temp_fridge_1_"
    """
    return "".join(
        const.ITEM_ID_REPLACEMENT_CHAR if char in const.ITEM_ID_FORBIDDEN_CHARS else char
        for char in item_id
    )


class ScoringEngine:
    """Pure logic engine for grading checklist completions.

    All methods are static - no instance state.
    """

    # ────────────────────────────────────────────────────────────────
    # Per-completion grading
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def get_log_item_ids(checklist: ChecklistData | Mapping[str, Any]) -> set[str]:
        """Return the (sanitized) ids of items that live in "logs" sections."""
        return {
            sanitize_item_id(str(item.get(const.DATA_ITEM_ID, "")))
            for section in checklist.get(const.DATA_CHECKLIST_SECTIONS) or []
            if section.get(const.DATA_SECTION_TYPE) == const.SECTION_TYPE_LOGS
            for item in section.get(const.DATA_SECTION_ITEMS) or []
        }

    @staticmethod
    def calculate_completion_score(
        responses: Mapping[str, ItemResponseData | Mapping[str, Any]] | None,
        checklist: ChecklistData | Mapping[str, Any] | None = None,
    ) -> int:
        """Score a set of responses from 0 to 100.

        Args:
            responses: Item id → response.
            checklist: When given, responses to items in "logs" sections are
                excluded before scoring.

        Returns:
            0 when there are no responses at all, 100 when every response was
            excluded as a log entry, otherwise the percentage of responses
            marked completed.
        """
        if not responses:
            return 0

        graded = dict(responses)
        if checklist is not None:
            log_ids = ScoringEngine.get_log_item_ids(checklist)
            graded = {
                item_id: response
                for item_id, response in graded.items()
                if item_id not in log_ids
            }

        if not graded:
            return 100

        passed = sum(
            1 for response in graded.values() if response.get(const.DATA_RESPONSE_COMPLETED)
        )
        return calculate_percentage(passed, len(graded))

    @staticmethod
    def is_response_satisfied(
        item: Mapping[str, Any], response: Mapping[str, Any]
    ) -> bool:
        """Apply the item type's rule to decide whether a response counts."""
        item_type = item.get(const.DATA_ITEM_TYPE)
        value = response.get(const.DATA_RESPONSE_VALUE)

        if item_type == const.ITEM_TYPE_YESNO:
            return value == const.YESNO_YES
        if item_type == const.ITEM_TYPE_NUMBER:
            return value is not None
        if item_type == const.ITEM_TYPE_TEXT:
            return bool(value) and len(str(value).strip()) > 0
        if item_type == const.ITEM_TYPE_PHOTO:
            return bool(response.get(const.DATA_RESPONSE_PHOTOS))
        return False

    @staticmethod
    def calculate_progress(
        checklist: ChecklistData | Mapping[str, Any],
        completion: CompletionData | Mapping[str, Any],
    ) -> int:
        """Percentage of checklist items satisfied by a completion.

        Rules: yes/no needs "yes", number needs any value, text needs
        non-blank content, photo needs at least one photo. Other item types
        never count.
        """
        items = checklist.get(const.DATA_CHECKLIST_ITEMS) or []
        if not items:
            return 0

        items_by_id = {item.get(const.DATA_ITEM_ID): item for item in items}
        responses = completion.get(const.DATA_COMPLETION_RESPONSES) or {}

        satisfied = 0
        for response in responses.values():
            item = items_by_id.get(response.get(const.DATA_RESPONSE_ITEM_ID))
            if item is not None and ScoringEngine.is_response_satisfied(item, response):
                satisfied += 1

        return calculate_percentage(satisfied, len(items))

    @staticmethod
    def validate_checklist_completion(
        checklist: ChecklistData | Mapping[str, Any],
        completion: CompletionData | Mapping[str, Any],
    ) -> list[str]:
        """Validate a submission against the checklist's items.

        Returns:
            List of human-readable error messages. Empty when valid.
        """
        responses = completion.get(const.DATA_COMPLETION_RESPONSES) or {}
        if not responses:
            return [const.VALIDATION_RESPONSES_REQUIRED]

        errors: list[str] = []
        for item in checklist.get(const.DATA_CHECKLIST_ITEMS) or []:
            title = item.get(const.DATA_ITEM_TITLE, "")
            response = responses.get(item.get(const.DATA_ITEM_ID))

            if not response:
                if item.get(const.DATA_ITEM_REQUIRED):
                    errors.append(const.VALIDATION_RESPONSE_REQUIRED.format(title=title))
                continue

            item_type = item.get(const.DATA_ITEM_TYPE)
            value = response.get(const.DATA_RESPONSE_VALUE)

            if item_type == const.ITEM_TYPE_YESNO:
                if value not in const.YESNO_VALUES:
                    errors.append(const.VALIDATION_INVALID_YESNO.format(title=title))
            elif item_type == const.ITEM_TYPE_NUMBER:
                if isinstance(value, bool) or not isinstance(value, int | float):
                    errors.append(const.VALIDATION_NUMBER_REQUIRED.format(title=title))
            elif item_type == const.ITEM_TYPE_TEXT:
                if not value or not str(value).strip():
                    errors.append(const.VALIDATION_TEXT_REQUIRED.format(title=title))
            elif item_type == const.ITEM_TYPE_PHOTO:
                if not response.get(const.DATA_RESPONSE_PHOTOS):
                    errors.append(const.VALIDATION_PHOTO_REQUIRED.format(title=title))

        return errors

    # ────────────────────────────────────────────────────────────────
    # Per-checklist history
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def get_streak_count(
        checklist: ChecklistData | Mapping[str, Any],
        completions: Iterable[CompletionData | Mapping[str, Any]],
        now: datetime | None = None,
    ) -> int:
        """Count consecutive on-schedule completions, newest first.

        The i-th newest completion (stored status "completed") must land
        within STREAK_TOLERANCE of now - i * cadence interval; the streak
        stops at the first completion that does not.
        """
        schedule = get_schedule(checklist)
        if not schedule:
            return 0

        completed = [
            completion
            for completion in StatusEngine.get_checklist_completions(checklist, completions)
            if completion.get(const.DATA_COMPLETION_STATUS) == ChecklistStatus.COMPLETED
        ]
        if not completed:
            return 0

        now_utc = as_utc(now or dt_now_utc())
        interval = get_schedule_interval(schedule.get(const.DATA_SCHEDULE_TYPE))

        streak = 0
        for index, completion in enumerate(completed):
            completed_at = get_completed_at(completion)
            expected = now_utc - index * interval
            if completed_at is None or abs(completed_at - expected) > const.STREAK_TOLERANCE:
                break
            streak += 1

        return streak

    @staticmethod
    def get_completion_rate(
        checklist: ChecklistData | Mapping[str, Any],
        completions: Iterable[CompletionData | Mapping[str, Any]],
    ) -> int:
        """Percentage of this checklist's completions stored as "completed"."""
        own = StatusEngine.get_checklist_completions(checklist, completions)
        completed = sum(
            1
            for completion in own
            if completion.get(const.DATA_COMPLETION_STATUS) == ChecklistStatus.COMPLETED
        )
        return calculate_percentage(completed, len(own))

    # ────────────────────────────────────────────────────────────────
    # Dashboard aggregates
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def get_late_completions_count(
        completions: Iterable[CompletionData | Mapping[str, Any]],
        checklists: Iterable[ChecklistData | Mapping[str, Any]],
        now: datetime | None = None,
    ) -> int:
        """Count completions that were stored as overdue or resolve to late/expired.

        Each completion is judged on its own against its checklist.
        """
        now_utc = as_utc(now or dt_now_utc())
        checklists_by_id = {
            checklist.get(const.DATA_CHECKLIST_ID): checklist for checklist in checklists
        }

        late = 0
        for completion in completions:
            if completion.get(const.DATA_COMPLETION_STATUS) == ChecklistStatus.OVERDUE:
                late += 1
                continue
            checklist = checklists_by_id.get(
                completion.get(const.DATA_COMPLETION_CHECKLIST_ID)
            )
            if checklist is None:
                continue
            status = StatusEngine.get_checklist_status(checklist, [completion], now=now_utc)
            if status in (ChecklistStatus.LATE, ChecklistStatus.EXPIRED):
                late += 1

        return late

    @staticmethod
    def get_checklist_metrics(
        checklists: Sequence[ChecklistData | Mapping[str, Any]],
        completions: Sequence[CompletionData | Mapping[str, Any]],
        now: datetime | None = None,
    ) -> ChecklistMetrics:
        """Aggregate dashboard metrics across all checklists.

        Returns:
            ChecklistMetrics with on-time/late counts (from stored
            "completed" completions), overdue checklists, completion rate,
            average score and the best current streak.
        """
        now_utc = as_utc(now or dt_now_utc())
        checklists_by_id = {
            checklist.get(const.DATA_CHECKLIST_ID): checklist for checklist in checklists
        }

        completed_on_time = 0
        completed_late = 0
        total_score = 0
        score_count = 0

        for completion in completions:
            if completion.get(const.DATA_COMPLETION_STATUS) != ChecklistStatus.COMPLETED:
                continue
            checklist = checklists_by_id.get(
                completion.get(const.DATA_COMPLETION_CHECKLIST_ID)
            )
            if checklist is not None and StatusEngine.is_completion_late(
                completion, checklist
            ):
                completed_late += 1
            else:
                completed_on_time += 1

            # Logs sections are excluded from the averaged score
            total_score += ScoringEngine.calculate_completion_score(
                completion.get(const.DATA_COMPLETION_RESPONSES), checklist
            )
            score_count += 1

        overdue = 0
        streak_count = 0
        for checklist in checklists:
            last_completion = StatusEngine.get_last_completion(checklist, completions)
            if StatusEngine.is_overdue(checklist, last_completion, now_utc):
                overdue += 1
            streak_count = max(
                streak_count,
                ScoringEngine.get_streak_count(checklist, completions, now_utc),
            )

        total_checklists = len(checklists)
        completion_rate = 0.0
        if total_checklists:
            # Several completions per checklist can exceed 100%; capped
            completion_rate = clamp(
                (completed_on_time + completed_late) / total_checklists * 100, 0.0, 100.0
            )

        const.LOGGER.debug(
            "ScoringEngine: Metrics for %d checklists: %d on time, %d late, %d overdue",
            total_checklists,
            completed_on_time,
            completed_late,
            overdue,
        )

        return {
            "total_checklists": total_checklists,
            "completed_on_time": completed_on_time,
            "completed_late": completed_late,
            "overdue": overdue,
            "completion_rate": completion_rate,
            "average_score": total_score / score_count if score_count else 0.0,
            "streak_count": streak_count,
        }
