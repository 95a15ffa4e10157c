"""Tests for ScoringEngine - scores, progress, validation, streaks and metrics.

These tests cover pure grading logic with no scheduling side effects:
- calculate_completion_score (logs sections excluded, half-up rounding)
- calculate_progress per item type
- validate_checklist_completion error messages
- get_streak_count / get_completion_rate
- get_late_completions_count / get_checklist_metrics
"""

import pytest

from checklist_scheduler import const
from checklist_scheduler.engines.scoring_engine import ScoringEngine, sanitize_item_id
from tests.helpers import (
    make_checklist,
    make_completion,
    make_item,
    make_response,
    make_schedule,
    make_utc_dt,
)

NOW = make_utc_dt(2026, 1, 19, 12)


def _logs_checklist(*log_item_ids: str) -> dict:
    return make_checklist(
        make_schedule(const.SCHEDULE_TYPE_DAILY),
        sections=[
            {
                "id": "section-logs",
                "sectionType": const.SECTION_TYPE_LOGS,
                "items": [make_item(item_id, "number") for item_id in log_item_ids],
            }
        ],
    )


# =============================================================================
# Completion Score
# =============================================================================


class TestCompletionScore:
    """Tests for calculate_completion_score()."""

    def test_no_responses_scores_zero(self) -> None:
        """Empty or missing responses → 0."""
        assert ScoringEngine.calculate_completion_score({}) == 0
        assert ScoringEngine.calculate_completion_score(None) == 0

    @pytest.mark.parametrize(
        ("completed_flags", "expected"),
        [
            ([True, True], 100),
            ([True, False, False], 33),
            ([True, True, False], 67),
            ([False], 0),
        ],
    )
    def test_share_of_completed_responses(
        self, completed_flags: list[bool], expected: int
    ) -> None:
        """Score is the rounded share of responses marked completed."""
        responses = {
            f"item-{index}": make_response(f"item-{index}", "yes", completed=flag)
            for index, flag in enumerate(completed_flags)
        }

        assert ScoringEngine.calculate_completion_score(responses) == expected

    def test_only_log_responses_scores_full(self) -> None:
        """Every response excluded as a log entry → 100."""
        checklist = _logs_checklist("temp-am", "temp-pm")
        responses = {
            "temp-am": make_response("temp-am", 4, completed=False, item_type="number"),
            "temp-pm": make_response("temp-pm", 5, completed=False, item_type="number"),
        }

        assert ScoringEngine.calculate_completion_score(responses, checklist) == 100

    def test_log_responses_are_excluded(self) -> None:
        """Log entries are dropped before grading, matched by sanitized id."""
        checklist = _logs_checklist("temp.reading")
        responses = {
            "temp_reading": make_response("temp.reading", 3, completed=False),
            "door": make_response("door", "yes", completed=True),
            "fridge": make_response("fridge", "no", completed=False),
        }

        assert ScoringEngine.calculate_completion_score(responses, checklist) == 50

    def test_logs_not_excluded_without_checklist(self) -> None:
        """Without the checklist every response is graded."""
        responses = {
            "temp_reading": make_response("temp.reading", 3, completed=False),
            "door": make_response("door", "yes", completed=True),
        }

        assert ScoringEngine.calculate_completion_score(responses) == 50

    @pytest.mark.parametrize(
        ("item_id", "expected"),
        [
            ("temp.fridge[1]", "temp_fridge_1_"),
            ("a/b#c$d", "a_b_c_d"),
            ("plain-id", "plain-id"),
        ],
    )
    def test_sanitize_item_id(self, item_id: str, expected: str) -> None:
        """Forbidden key characters are replaced with underscores."""
        assert sanitize_item_id(item_id) == expected


# =============================================================================
# Progress and Validation
# =============================================================================


ITEMS = [
    make_item("door", const.ITEM_TYPE_YESNO, required=True),
    make_item("temp", const.ITEM_TYPE_NUMBER, required=True),
    make_item("notes", const.ITEM_TYPE_TEXT),
    make_item("photo", const.ITEM_TYPE_PHOTO),
]


class TestProgress:
    """Tests for calculate_progress()."""

    def test_type_specific_rules(self) -> None:
        """yes, any number (even 0), non-blank text, at least one photo."""
        checklist = make_checklist(items=ITEMS)
        completion = make_completion(
            checklist,
            NOW,
            responses={
                "door": make_response("door", "yes"),
                "temp": make_response("temp", 0, item_type="number"),
                "notes": make_response("notes", "   ", item_type="text"),
                "photo": make_response("photo", None, item_type="photo", photos=["a.jpg"]),
                "ghost": make_response("ghost", "yes"),
            },
        )

        assert ScoringEngine.calculate_progress(checklist, completion) == 75

    def test_no_for_yesno_does_not_count(self) -> None:
        """A "no" answer is an answer, but not a satisfied item."""
        checklist = make_checklist(items=ITEMS[:1])
        completion = make_completion(
            checklist, NOW, responses={"door": make_response("door", "no")}
        )

        assert ScoringEngine.calculate_progress(checklist, completion) == 0

    def test_no_items_is_zero(self) -> None:
        """A checklist without items has no progress."""
        checklist = make_checklist()
        completion = make_completion(
            checklist, NOW, responses={"door": make_response("door", "yes")}
        )

        assert ScoringEngine.calculate_progress(checklist, completion) == 0


class TestValidation:
    """Tests for validate_checklist_completion()."""

    def test_empty_submission(self) -> None:
        """No responses at all → a single error."""
        checklist = make_checklist(items=ITEMS)
        completion = make_completion(checklist, NOW)

        assert ScoringEngine.validate_checklist_completion(checklist, completion) == [
            "At least one response is required"
        ]

    def test_missing_required_items(self) -> None:
        """Required items without a response are reported by title."""
        checklist = make_checklist(items=ITEMS)
        completion = make_completion(
            checklist,
            NOW,
            responses={"notes": make_response("notes", "fine", item_type="text")},
        )

        assert ScoringEngine.validate_checklist_completion(checklist, completion) == [
            "Response required for: Door",
            "Response required for: Temp",
        ]

    def test_invalid_values_per_type(self) -> None:
        """Each item type rejects its own kind of bad value."""
        checklist = make_checklist(items=ITEMS)
        completion = make_completion(
            checklist,
            NOW,
            responses={
                "door": make_response("door", "maybe"),
                "temp": make_response("temp", "12", item_type="number"),
                "notes": make_response("notes", "   ", item_type="text"),
                "photo": make_response("photo", None, item_type="photo", photos=[]),
            },
        )

        assert ScoringEngine.validate_checklist_completion(checklist, completion) == [
            "Invalid yes/no response for: Door",
            "Number required for: Temp",
            "Text required for: Notes",
            "Photo required for: Photo",
        ]

    def test_boolean_is_not_a_number(self) -> None:
        """True is rejected for number items."""
        checklist = make_checklist(items=ITEMS[1:2])
        completion = make_completion(
            checklist,
            NOW,
            responses={"temp": make_response("temp", True, item_type="number")},
        )

        assert ScoringEngine.validate_checklist_completion(checklist, completion) == [
            "Number required for: Temp"
        ]

    def test_valid_submission(self) -> None:
        """A fully valid submission has no errors."""
        checklist = make_checklist(items=ITEMS)
        completion = make_completion(
            checklist,
            NOW,
            responses={
                "door": make_response("door", "no"),
                "temp": make_response("temp", 4.5, item_type="number"),
                "notes": make_response("notes", "ok", item_type="text"),
                "photo": make_response("photo", None, item_type="photo", photos=["a.jpg"]),
            },
        )

        assert ScoringEngine.validate_checklist_completion(checklist, completion) == []


# =============================================================================
# Streaks and Rates
# =============================================================================


class TestStreaksAndRates:
    """Tests for get_streak_count() and get_completion_rate()."""

    def _daily_history(self, second_status: str = "completed") -> tuple[dict, list]:
        checklist = make_checklist(make_schedule(const.SCHEDULE_TYPE_DAILY))
        completions = [
            make_completion(checklist, make_utc_dt(2026, 1, 19, 11), completion_id="c0"),
            make_completion(
                checklist,
                make_utc_dt(2026, 1, 18, 10),
                status=second_status,
                completion_id="c1",
            ),
            make_completion(checklist, make_utc_dt(2026, 1, 17, 15), completion_id="c2"),
            make_completion(checklist, make_utc_dt(2026, 1, 15, 12), completion_id="c3"),
        ]
        return checklist, completions

    def test_streak_counts_on_schedule_completions(self) -> None:
        """Three consecutive days within tolerance, then a gap."""
        checklist, completions = self._daily_history()

        assert ScoringEngine.get_streak_count(checklist, completions, NOW) == 3

    def test_streak_only_counts_completed_status(self) -> None:
        """A late completion breaks the chain of completed slots."""
        checklist, completions = self._daily_history(second_status="late")

        assert ScoringEngine.get_streak_count(checklist, completions, NOW) == 1

    def test_streak_without_schedule_is_zero(self) -> None:
        """Unscheduled checklists have no streak."""
        checklist = make_checklist(schedule=None)
        completion = make_completion(checklist, NOW)

        assert ScoringEngine.get_streak_count(checklist, [completion], NOW) == 0

    def test_completion_rate(self) -> None:
        """Share of own completions stored as completed."""
        checklist, completions = self._daily_history(second_status="late")
        other = make_completion(make_checklist(checklist_id="other"), NOW)

        assert ScoringEngine.get_completion_rate(checklist, completions + [other]) == 75

    def test_completion_rate_without_completions(self) -> None:
        """No completions → 0."""
        assert ScoringEngine.get_completion_rate(make_checklist(), []) == 0


# =============================================================================
# Dashboard Aggregates
# =============================================================================


class TestAggregates:
    """Tests for get_late_completions_count() and get_checklist_metrics()."""

    def test_late_completions_count(self) -> None:
        """Stored overdue or resolving to late/expired counts as late."""
        expiring = make_checklist(
            make_schedule(const.SCHEDULE_TYPE_DAILY, closing_time="18:00", expire_time=2),
            checklist_id="expiring",
        )
        cycle = make_checklist(
            make_schedule(
                const.SCHEDULE_TYPE_FOUR_WEEK, start_date=make_utc_dt(2026, 1, 1)
            ),
            checklist_id="cycle",
        )
        completions = [
            make_completion(expiring, make_utc_dt(2026, 1, 17, 8), completion_id="x"),
            make_completion(
                expiring,
                make_utc_dt(2026, 1, 18, 8),
                status="overdue",
                completion_id="o",
            ),
            make_completion(cycle, make_utc_dt(2026, 1, 5), completion_id="f"),
            make_completion(
                make_checklist(checklist_id="missing"),
                make_utc_dt(2026, 1, 17, 8),
                completion_id="orphan",
            ),
        ]

        count = ScoringEngine.get_late_completions_count(
            completions, [expiring, cycle], now=NOW
        )

        assert count == 2

    def test_metrics(self) -> None:
        """On-time/late split, overdue count, rate, average score and streak."""
        daily = make_checklist(
            make_schedule(const.SCHEDULE_TYPE_DAILY, closing_time="18:00"),
            checklist_id="daily",
        )
        cycle = make_checklist(
            make_schedule(
                const.SCHEDULE_TYPE_FOUR_WEEK, start_date=make_utc_dt(2026, 1, 1)
            ),
            checklist_id="cycle",
        )
        weekly = make_checklist(
            make_schedule(const.SCHEDULE_TYPE_WEEKLY), checklist_id="weekly"
        )
        completions = [
            make_completion(
                daily,
                make_utc_dt(2026, 1, 18, 19),
                scheduled_for=make_utc_dt(2026, 1, 18),
                responses={
                    "a": make_response("a", "yes", completed=True),
                    "b": make_response("b", "no", completed=False),
                },
                completion_id="late",
            ),
            make_completion(
                daily,
                make_utc_dt(2026, 1, 10),
                status=const.COMPLETION_STATUS_IN_PROGRESS,
                completion_id="draft",
            ),
            make_completion(
                cycle,
                make_utc_dt(2026, 1, 5),
                responses={"a": make_response("a", "yes", completed=True)},
                completion_id="on-time",
            ),
        ]

        metrics = ScoringEngine.get_checklist_metrics(
            [daily, cycle, weekly], completions, now=NOW
        )

        assert metrics["total_checklists"] == 3
        assert metrics["completed_on_time"] == 1
        assert metrics["completed_late"] == 1
        assert metrics["overdue"] == 1
        assert metrics["completion_rate"] == pytest.approx(200 / 3)
        assert metrics["average_score"] == pytest.approx(75.0)
        assert metrics["streak_count"] == 0

    def test_metrics_best_streak(self) -> None:
        """streak_count is the best current streak across checklists."""
        daily = make_checklist(make_schedule(const.SCHEDULE_TYPE_DAILY))
        completions = [
            make_completion(daily, make_utc_dt(2026, 1, 19, 10), completion_id="c0"),
            make_completion(daily, make_utc_dt(2026, 1, 18, 13), completion_id="c1"),
        ]

        metrics = ScoringEngine.get_checklist_metrics([daily], completions, now=NOW)

        assert metrics["streak_count"] == 2
        assert metrics["completion_rate"] == 100.0

    def test_metrics_average_score_skips_log_entries(self) -> None:
        """Unticked log readings do not pull the average score down."""
        checklist = _logs_checklist("temp")
        completion = make_completion(
            checklist,
            make_utc_dt(2026, 1, 19, 11),
            responses={
                "temp": make_response("temp", 4, completed=False, item_type="number"),
                "door": make_response("door", "yes", completed=True),
            },
        )

        metrics = ScoringEngine.get_checklist_metrics([checklist], [completion], now=NOW)

        assert metrics["average_score"] == pytest.approx(100.0)

    def test_metrics_empty(self) -> None:
        """No checklists → all zeros."""
        metrics = ScoringEngine.get_checklist_metrics([], [], now=NOW)

        assert metrics == {
            "total_checklists": 0,
            "completed_on_time": 0,
            "completed_late": 0,
            "overdue": 0,
            "completion_rate": 0.0,
            "average_score": 0.0,
            "streak_count": 0,
        }
