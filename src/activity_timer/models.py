"""Domain models for tracked activities."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Optional

from .errors import InvalidArgumentError


class ActivityType(str, Enum):
    """Kind of work an activity represents."""

    BUG = "BUG"
    DEVELOP = "DEVELOP"
    GENERAL = "GENERAL"
    INFRA = "INFRA"
    MEETING = "MEETING"
    OUT_OF_OFFICE = "OUT_OF_OFFICE"
    PROBLEM = "PROBLEM"
    SUPPORT = "SUPPORT"

    @classmethod
    def parse(cls, value: str) -> "ActivityType":
        """Look up a type by name, ignoring case and surrounding blanks."""
        try:
            return cls[value.strip().upper()]
        except KeyError:
            valid = ", ".join(member.name for member in cls)
            raise InvalidArgumentError(
                f"Invalid activity type: {value!r}. Valid types: {valid}"
            ) from None

    def __str__(self) -> str:
        return self.value


class ActivityStatus(str, Enum):
    """Lifecycle state of an activity.

    PAUSED is reserved; nothing currently moves an activity into or out of it.
    """

    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    COMPLETED = "COMPLETED"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class Activity:
    """A tracked unit of work with a type, description and time span."""

    start_time: datetime
    activity_type: ActivityType
    status: ActivityStatus
    description: str
    end_time: Optional[datetime] = None
    id: Optional[int] = None

    @classmethod
    def started(
        cls,
        activity_type: ActivityType,
        description: str,
        start_time: datetime,
    ) -> "Activity":
        """Build a new, not yet persisted, ACTIVE activity."""
        return cls(
            start_time=start_time,
            activity_type=activity_type,
            status=ActivityStatus.ACTIVE,
            description=_require_description(description),
        )

    @classmethod
    def completed(
        cls,
        activity_type: ActivityType,
        description: str,
        start_time: datetime,
        end_time: datetime,
    ) -> "Activity":
        """Build a new, not yet persisted, COMPLETED activity."""
        ensure_end_after_start(start_time, end_time)
        return cls(
            start_time=start_time,
            end_time=end_time,
            activity_type=activity_type,
            status=ActivityStatus.COMPLETED,
            description=_require_description(description),
        )

    def with_changes(self, **changes: Any) -> "Activity":
        return replace(self, **changes)

    def with_id(self, activity_id: int) -> "Activity":
        return replace(self, id=activity_id)

    @property
    def is_active(self) -> bool:
        return self.status is ActivityStatus.ACTIVE

    def duration(self, now: Optional[datetime] = None) -> Optional[timedelta]:
        """Elapsed time; an ACTIVE activity without an end runs until ``now``."""
        end = self.end_time
        if end is None and self.is_active:
            end = now or datetime.now()
        if end is None:
            return None
        return end - self.start_time

    def duration_minutes(self, now: Optional[datetime] = None) -> int:
        elapsed = self.duration(now)
        if elapsed is None:
            return 0
        return int(elapsed.total_seconds() // 60)


def ensure_end_after_start(start_time: datetime, end_time: datetime) -> None:
    if end_time <= start_time:
        raise InvalidArgumentError(
            f"End time ({end_time:%Y-%m-%d %H:%M}) must be after "
            f"start time ({start_time:%Y-%m-%d %H:%M})"
        )


def _require_description(description: str) -> str:
    if description is None or not description.strip():
        raise InvalidArgumentError("Description cannot be blank")
    return description.strip()
