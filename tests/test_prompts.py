"""Tests for parsing activity type menu answers."""

import pytest

from activity_timer.models import ActivityType
from activity_timer.prompts import parse_activity_type


class TestParseActivityType:
    """Tests for parse_activity_type."""

    def test_blank_takes_default(self) -> None:
        assert parse_activity_type("  ", ActivityType.MEETING) is ActivityType.MEETING

    @pytest.mark.parametrize(
        ("answer", "expected"),
        [
            ("1", ActivityType.BUG),
            ("8", ActivityType.SUPPORT),
            ("m", ActivityType.MEETING),
            ("O", ActivityType.OUT_OF_OFFICE),
            ("infra", ActivityType.INFRA),
            ("Out_of_office", ActivityType.OUT_OF_OFFICE),
        ],
    )
    def test_number_letter_or_name(self, answer: str, expected: ActivityType) -> None:
        assert parse_activity_type(answer, ActivityType.DEVELOP) is expected

    @pytest.mark.parametrize("answer", ["0", "9", "x", "coffee"])
    def test_unrecognized(self, answer: str) -> None:
        assert parse_activity_type(answer, ActivityType.DEVELOP) is None
