"""Simple reporting utilities for CLI output."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable, Optional

from .models import Activity, ActivityStatus

_STATUS_LABELS = {
    ActivityStatus.ACTIVE: "Active",
    ActivityStatus.PAUSED: "Paused",
    ActivityStatus.COMPLETED: "Done",
}

_ROW_FMT = "{:<5} | {:<10} | {:<5} | {:<5} | {:<8} | {:<15} | {:<10} | {}"
_RULE = "------+------------+-------+-------+----------+-----------------+------------+------------------"


class ActivityPrinter:
    """Render human-readable activity listings in the console."""

    def __init__(self, now: Optional[datetime] = None) -> None:
        self.now = now

    def print_table(self, activities: list[Activity]) -> None:
        if not activities:
            print("No activities found for the specified date range.")
            return

        now = self.now or datetime.now()
        print(_ROW_FMT.format("ID", "Date", "Start", "End", "Duration", "Type", "Status", "Description"))
        print(_RULE)
        for activity in activities:
            print(
                _ROW_FMT.format(
                    activity.id,
                    activity.start_time.strftime("%Y-%m-%d"),
                    activity.start_time.strftime("%H:%M"),
                    activity.end_time.strftime("%H:%M") if activity.end_time else "-",
                    f"{activity.duration_minutes(now)} min",
                    activity.activity_type.name,
                    _STATUS_LABELS[activity.status],
                    activity.description,
                )
            )
        print(_RULE)
        total = total_minutes(activities, now)
        hours, minutes = divmod(total, 60)
        print(f"{'':<5} | {'':<10} | {'':<5} | {'TOTAL:':<5} | {total} min ({hours}h {minutes}m)")
        print()
        print(f"Total activities: {len(activities)}")

    def print_active(self, activities: list[Activity]) -> None:
        if not activities:
            print("No active activities found.")
            return

        now = self.now or datetime.now()
        print("Active Activities:")
        print("==================")
        for activity in activities:
            print()
            print(f"ID: {activity.id}")
            print(f"Type: {activity.activity_type.name}")
            print(f"Description: {activity.description}")
            print(f"Started at: {format_timestamp(activity.start_time)}")
            print(f"Running for: {format_duration(activity.duration(now))}")
            print("------------------")
        print()
        print(f"Total active activities: {len(activities)}")

    def print_details(self, title: str, activity: Activity, *, stopped: bool = False) -> None:
        print(title)
        print(f"  ID: {activity.id}")
        print(f"  Type: {activity.activity_type.name}")
        print(f"  Description: {activity.description}")
        print(f"  Started at: {format_timestamp(activity.start_time)}")
        if activity.end_time is not None:
            label = "Stopped at" if stopped else "Ended at"
            print(f"  {label}: {format_timestamp(activity.end_time)}")
            print(f"  Duration: {format_duration(activity.duration())}")


def total_minutes(activities: Iterable[Activity], now: datetime) -> int:
    """Sum whole minutes per activity, measuring running ones up to ``now``."""
    return sum(activity.duration_minutes(now) for activity in activities)


def format_timestamp(value: Optional[datetime]) -> str:
    if value is None:
        return "-"
    return value.strftime("%Y-%m-%d %H:%M")


def format_duration(value: Optional[timedelta]) -> str:
    if value is None:
        return "N/A"
    total_seconds = int(round(value.total_seconds()))
    sign = "-" if total_seconds < 0 else ""
    hours, remainder = divmod(abs(total_seconds), 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{sign}{hours:02d}:{minutes:02d}:{secs:02d}"
