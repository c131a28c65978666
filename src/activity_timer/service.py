"""Activity lifecycle: start, stop and restart, plus manual bookkeeping.

At most one activity is ACTIVE at a time. Starting an activity first closes
whatever is still running; stopping rounds the end time up to the configured
interval.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Callable, Optional, Protocol

from .errors import InvalidArgumentError
from .models import Activity, ActivityStatus, ActivityType, ensure_end_after_start
from .repository import ActivityRepository
from .timeutil import DayLike, as_day, round_up_to_interval, truncate_to_minute

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class RoundingSettings(Protocol):
    """Anything exposing the configured stop-time rounding interval."""

    @property
    def rounding_minutes(self) -> int:
        ...


class ActivityService:
    """Enforces the single active activity rule on top of a repository."""

    def __init__(
        self,
        repository: ActivityRepository,
        settings: RoundingSettings,
        clock: Clock = datetime.now,
    ) -> None:
        self._repository = repository
        self._settings = settings
        self._clock = clock

    def start_activity(
        self,
        activity_type: ActivityType,
        description: str,
        start_time: Optional[datetime] = None,
    ) -> Activity:
        """Close any running activity and start a new one.

        The running activity ends at the current wall-clock time, not at the
        new activity's start time.
        """
        new_activity = Activity.started(
            activity_type,
            description,
            start_time if start_time is not None else self._clock(),
        )
        closed = self._repository.update_status_by_status(
            ActivityStatus.ACTIVE, ActivityStatus.COMPLETED, self._clock()
        )
        if closed:
            logger.info("Completed %d running activity(ies) before starting a new one", closed)
        saved = self._repository.save(new_activity)
        logger.info("Started activity id=%s type=%s", saved.id, saved.activity_type.name)
        return saved

    def stop_activity(self) -> Optional[Activity]:
        """Complete the most recently started ACTIVE activity.

        Returns ``None`` when nothing is running.
        """
        running = self._repository.find_by_status(ActivityStatus.ACTIVE)
        if not running:
            logger.debug("No active activity to stop")
            return None
        current = running[0]
        end_time = round_up_to_interval(self._clock(), self._settings.rounding_minutes)
        stopped = self._repository.update(
            current.with_changes(end_time=end_time, status=ActivityStatus.COMPLETED)
        )
        logger.info("Stopped activity id=%s at %s", stopped.id, end_time)
        return stopped

    def restart_activity(self, source_id: int) -> Optional[Activity]:
        """Start a fresh activity with the type and description of ``source_id``.

        The new activity starts at the current minute. Returns ``None`` without
        touching the store if the source is unknown. The source itself is left
        unchanged.
        """
        source = self._repository.find_by_id(source_id)
        if source is None:
            return None
        self.stop_activity()
        restarted = self._repository.save(
            Activity.started(
                source.activity_type, source.description, truncate_to_minute(self._clock())
            )
        )
        logger.info("Restarted activity id=%s as id=%s", source_id, restarted.id)
        return restarted

    def get_activity(self, activity_id: int) -> Optional[Activity]:
        return self._repository.find_by_id(activity_id)

    def active_activities(self) -> list[Activity]:
        return self._repository.find_by_status(ActivityStatus.ACTIVE)

    def connect_start_time(self, day: Optional[DayLike] = None) -> Optional[datetime]:
        """Start time that follows the day's latest activity by one minute.

        Returns ``None`` if nothing was started on that day.
        """
        activities = self._repository.find_by_start_time(
            day if day is not None else self._clock()
        )
        if not activities:
            return None
        latest = activities[-1]
        if latest.end_time is None:
            raise InvalidArgumentError(
                f"The latest activity of the day (id={latest.id}) has no end time"
            )
        return latest.end_time + timedelta(minutes=1)

    def add_activity(
        self,
        activity_type: ActivityType,
        description: str,
        start_time: datetime,
        end_time: datetime,
    ) -> Activity:
        saved = self._repository.save(
            Activity.completed(activity_type, description, start_time, end_time)
        )
        logger.info("Added completed activity id=%s", saved.id)
        return saved

    def copy_activity(
        self,
        source_id: int,
        *,
        activity_type: Optional[ActivityType] = None,
        description: Optional[str] = None,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
    ) -> Optional[Activity]:
        """Save a COMPLETED copy of ``source_id`` with the given overrides."""
        source = self._repository.find_by_id(source_id)
        if source is None:
            return None
        new_end = end_time if end_time is not None else source.end_time
        if new_end is None:
            raise InvalidArgumentError(
                f"Activity {source_id} has no end time; provide one to copy it"
            )
        copied = self._repository.save(
            Activity.completed(
                activity_type or source.activity_type,
                description if description is not None else source.description,
                start_time if start_time is not None else source.start_time,
                new_end,
            )
        )
        logger.info("Copied activity id=%s to id=%s", source_id, copied.id)
        return copied

    def edit_activity(
        self,
        activity_id: int,
        *,
        activity_type: Optional[ActivityType] = None,
        description: Optional[str] = None,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
    ) -> Optional[Activity]:
        """Change fields of a stopped activity; id and status are kept."""
        current = self._repository.find_by_id(activity_id)
        if current is None:
            return None
        if current.is_active:
            raise InvalidArgumentError(
                "Cannot edit an active activity. Stop it first with 'timer stop'."
            )
        changes: dict[str, object] = {}
        if activity_type is not None:
            changes["activity_type"] = activity_type
        if description is not None:
            if not description.strip():
                raise InvalidArgumentError("Description cannot be blank")
            changes["description"] = description.strip()
        if start_time is not None:
            changes["start_time"] = start_time
        if end_time is not None:
            changes["end_time"] = end_time
        edited = current.with_changes(**changes)
        if edited.end_time is not None:
            ensure_end_after_start(edited.start_time, edited.end_time)
        updated = self._repository.update(edited)
        logger.info("Edited activity id=%s", activity_id)
        return updated

    def delete_activity(self, activity_id: int) -> Optional[Activity]:
        """Delete an activity and return it, or ``None`` if it does not exist."""
        existing = self._repository.find_by_id(activity_id)
        if existing is None:
            return None
        self._repository.delete(activity_id)
        logger.info("Deleted activity id=%s", activity_id)
        return existing

    def activities_for_day(self, day: DayLike) -> list[Activity]:
        return self._repository.find_by_start_time(day)

    def activities_between(self, start: DayLike, end: DayLike) -> list[Activity]:
        first: date = as_day(start)
        last: date = as_day(end)
        if last < first:
            raise InvalidArgumentError(
                f"End date {last:%Y%m%d} cannot be before start date {first:%Y%m%d}"
            )
        return self._repository.find_by_date_range(first, last)

    def all_activities(self) -> list[Activity]:
        return self._repository.find_all()
