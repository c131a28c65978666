"""Activity persistence contract and its SQLite implementation."""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from typing import Any, Iterable, Optional, Protocol

from .db import (
    ACTIVITY_COLUMNS,
    activity_params,
    format_timestamp,
    row_to_activity,
)
from .errors import InvalidArgumentError, PersistenceError
from .models import Activity, ActivityStatus, ActivityType
from .timeutil import DayLike, as_day

logger = logging.getLogger(__name__)


class ActivityRepository(Protocol):
    """Protocol for activity persistence.

    Queries by day or date range compare calendar dates only. ``find_all``
    and the date queries return oldest first; status and type queries
    return newest first.
    """

    def save(self, activity: Activity) -> Activity:
        """Insert activity and return it with its assigned id."""
        ...

    def update(self, activity: Activity) -> Activity:
        """Overwrite every mutable field of an existing activity."""
        ...

    def delete(self, activity_id: int) -> None:
        """Remove an activity; unknown ids are ignored."""
        ...

    def find_by_id(self, activity_id: int) -> Optional[Activity]:
        ...

    def find_all(self) -> list[Activity]:
        ...

    def find_by_status(self, status: ActivityStatus) -> list[Activity]:
        ...

    def find_by_type(self, activity_type: ActivityType) -> list[Activity]:
        ...

    def find_by_start_time(self, day: DayLike) -> list[Activity]:
        ...

    def find_by_date_range(self, start: DayLike, end: DayLike) -> list[Activity]:
        ...

    def update_status_by_status(
        self,
        current_status: ActivityStatus,
        new_status: ActivityStatus,
        end_time: Optional[datetime],
    ) -> int:
        """Move every activity in ``current_status`` to ``new_status``."""
        ...


class SqliteActivityRepository:
    """Activity repository backed by an open SQLite connection.

    The connection is owned by the caller (see ``db.database_connection``)
    and is expected to run in autocommit mode, so each statement is durable
    once the call returns.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def save(self, activity: Activity) -> Activity:
        cur = self._execute(
            "save",
            """
            INSERT INTO activity (start_time, end_time, activity_type, status, description)
            VALUES (?, ?, ?, ?, ?)
            """,
            activity_params(activity),
        )
        if cur.lastrowid is None or cur.rowcount == 0:
            raise PersistenceError("Creating activity failed, no rows affected", "save")
        saved = activity.with_id(int(cur.lastrowid))
        logger.debug("Saved activity id=%s status=%s", saved.id, saved.status.name)
        return saved

    def update(self, activity: Activity) -> Activity:
        if activity.id is None:
            raise InvalidArgumentError("Activity id cannot be None for update")
        cur = self._execute(
            "update",
            """
            UPDATE activity
            SET start_time = ?, end_time = ?, activity_type = ?, status = ?, description = ?
            WHERE id = ?
            """,
            (*activity_params(activity), activity.id),
        )
        if cur.rowcount == 0:
            raise PersistenceError(
                f"Updating activity failed, no activity with id={activity.id}", "update"
            )
        logger.debug("Updated activity id=%s status=%s", activity.id, activity.status.name)
        return activity

    def delete(self, activity_id: int) -> None:
        cur = self._execute("delete", "DELETE FROM activity WHERE id = ?", (activity_id,))
        logger.debug("Deleted %d row(s) for activity id=%s", cur.rowcount, activity_id)

    def find_by_id(self, activity_id: int) -> Optional[Activity]:
        rows = self._query(
            "find_by_id",
            f"SELECT {ACTIVITY_COLUMNS} FROM activity WHERE id = ?",
            (activity_id,),
        )
        return rows[0] if rows else None

    def find_all(self) -> list[Activity]:
        return self._query(
            "find_all",
            f"SELECT {ACTIVITY_COLUMNS} FROM activity ORDER BY start_time ASC, id ASC",
        )

    def find_by_status(self, status: ActivityStatus) -> list[Activity]:
        return self._query(
            "find_by_status",
            f"""
            SELECT {ACTIVITY_COLUMNS}
            FROM activity
            WHERE status = ?
            ORDER BY start_time DESC, id DESC
            """,
            (status.name,),
        )

    def find_by_type(self, activity_type: ActivityType) -> list[Activity]:
        return self._query(
            "find_by_type",
            f"""
            SELECT {ACTIVITY_COLUMNS}
            FROM activity
            WHERE activity_type = ?
            ORDER BY start_time DESC, id DESC
            """,
            (activity_type.name,),
        )

    def find_by_start_time(self, day: DayLike) -> list[Activity]:
        return self._query(
            "find_by_start_time",
            f"""
            SELECT {ACTIVITY_COLUMNS}
            FROM activity
            WHERE date(start_time) = ?
            ORDER BY start_time ASC, id ASC
            """,
            (as_day(day).isoformat(),),
        )

    def find_by_date_range(self, start: DayLike, end: DayLike) -> list[Activity]:
        return self._query(
            "find_by_date_range",
            f"""
            SELECT {ACTIVITY_COLUMNS}
            FROM activity
            WHERE date(start_time) >= ? AND date(start_time) <= ?
            ORDER BY start_time ASC, id ASC
            """,
            (as_day(start).isoformat(), as_day(end).isoformat()),
        )

    def update_status_by_status(
        self,
        current_status: ActivityStatus,
        new_status: ActivityStatus,
        end_time: Optional[datetime],
    ) -> int:
        cur = self._execute(
            "update_status_by_status",
            "UPDATE activity SET status = ?, end_time = ? WHERE status = ?",
            (new_status.name, format_timestamp(end_time), current_status.name),
        )
        if cur.rowcount:
            logger.info(
                "Moved %d activity(ies) from %s to %s",
                cur.rowcount,
                current_status.name,
                new_status.name,
            )
        return cur.rowcount

    def _execute(
        self, operation: str, sql: str, params: Iterable[Any] = ()
    ) -> sqlite3.Cursor:
        try:
            return self._conn.execute(sql, tuple(params))
        except sqlite3.Error as exc:
            raise PersistenceError(
                f"Failed to {operation.replace('_', ' ')}: {exc}", operation
            ) from exc

    def _query(
        self, operation: str, sql: str, params: Iterable[Any] = ()
    ) -> list[Activity]:
        cur = self._execute(operation, sql, params)
        try:
            return [row_to_activity(row) for row in cur.fetchall()]
        except sqlite3.Error as exc:
            raise PersistenceError(
                f"Failed to {operation.replace('_', ' ')}: {exc}", operation
            ) from exc
