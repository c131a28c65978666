"""Unit tests for the activity entity and its enums."""

from dataclasses import FrozenInstanceError
from datetime import datetime, timedelta

import pytest

from activity_timer.errors import InvalidArgumentError
from activity_timer.models import Activity, ActivityStatus, ActivityType


class TestActivityType:
    """Tests for ActivityType lookup."""

    def test_closed_set_in_menu_order(self) -> None:
        assert [t.name for t in ActivityType] == [
            "BUG",
            "DEVELOP",
            "GENERAL",
            "INFRA",
            "MEETING",
            "OUT_OF_OFFICE",
            "PROBLEM",
            "SUPPORT",
        ]

    def test_parse_ignores_case_and_blanks(self) -> None:
        assert ActivityType.parse(" meeting ") is ActivityType.MEETING
        assert ActivityType.parse("Out_Of_Office") is ActivityType.OUT_OF_OFFICE

    def test_parse_unknown_raises(self) -> None:
        with pytest.raises(InvalidArgumentError, match="Invalid activity type"):
            ActivityType.parse("coffee")

    def test_paused_is_defined(self) -> None:
        assert ActivityStatus["PAUSED"] is ActivityStatus.PAUSED


class TestActivity:
    """Tests for Activity constructors and helpers."""

    def test_started_is_active_without_end(self) -> None:
        start = datetime(2025, 1, 15, 9, 0)
        activity = Activity.started(ActivityType.DEVELOP, "Write code", start)

        assert activity.status is ActivityStatus.ACTIVE
        assert activity.end_time is None
        assert activity.id is None
        assert activity.is_active

    def test_completed_requires_end_after_start(self) -> None:
        start = datetime(2025, 1, 15, 9, 0)
        with pytest.raises(InvalidArgumentError, match="must be after"):
            Activity.completed(ActivityType.BUG, "Fix", start, start)
        with pytest.raises(ValueError):
            Activity.completed(ActivityType.BUG, "Fix", start, start - timedelta(minutes=1))

    def test_blank_description_rejected(self) -> None:
        with pytest.raises(InvalidArgumentError, match="blank"):
            Activity.started(ActivityType.GENERAL, "   ", datetime(2025, 1, 15, 9, 0))

    def test_description_is_stripped(self) -> None:
        activity = Activity.started(ActivityType.GENERAL, "  Email  ", datetime(2025, 1, 15, 9, 0))
        assert activity.description == "Email"

    def test_is_immutable(self) -> None:
        activity = Activity.started(ActivityType.GENERAL, "Email", datetime(2025, 1, 15, 9, 0))
        with pytest.raises(FrozenInstanceError):
            activity.description = "Other"  # type: ignore[misc]

    def test_with_changes_returns_copy(self) -> None:
        activity = Activity.started(ActivityType.GENERAL, "Email", datetime(2025, 1, 15, 9, 0))
        changed = activity.with_changes(description="Reply", activity_type=ActivityType.SUPPORT)

        assert changed.description == "Reply"
        assert changed.activity_type is ActivityType.SUPPORT
        assert activity.description == "Email"
        assert activity.with_id(4).id == 4

    def test_duration_of_active_runs_until_now(self) -> None:
        activity = Activity.started(ActivityType.GENERAL, "Email", datetime(2025, 1, 15, 9, 0))
        now = datetime(2025, 1, 15, 9, 45, 30)

        assert activity.duration(now) == timedelta(minutes=45, seconds=30)
        assert activity.duration_minutes(now) == 45

    def test_duration_of_completed_ignores_now(self) -> None:
        activity = Activity.completed(
            ActivityType.MEETING,
            "Standup",
            datetime(2025, 1, 15, 9, 0),
            datetime(2025, 1, 15, 9, 15),
        )
        assert activity.duration_minutes(datetime(2030, 1, 1)) == 15
