"""SQLite database layer for tracked activities."""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional

from .errors import PersistenceError
from .models import Activity, ActivityStatus, ActivityType


# Fixed width, so text order equals chronological order.
DATETIME_FMT = "%Y-%m-%d %H:%M:%S.%f"

ACTIVITY_COLUMNS = "id, start_time, end_time, activity_type, status, description"

logger = logging.getLogger(__name__)


def open_database(path: Path) -> sqlite3.Connection:
    """Open (and initialize) the SQLite database."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(path, isolation_level=None)
    except (OSError, sqlite3.Error) as exc:
        raise PersistenceError(f"Failed to open database {path}: {exc}", "open") from exc
    conn.row_factory = sqlite3.Row
    try:
        initialize_schema(conn)
    except sqlite3.Error as exc:
        conn.close()
        raise PersistenceError(
            f"Failed to initialize database {path}: {exc}", "initialize"
        ) from exc
    logger.debug("Opened activity database at %s", path)
    return conn


@contextmanager
def database_connection(path: Path) -> Iterator[sqlite3.Connection]:
    conn = open_database(path)
    try:
        yield conn
    finally:
        conn.close()


def initialize_schema(conn: sqlite3.Connection) -> None:
    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS activity (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            start_time TEXT NOT NULL,
            end_time TEXT,
            activity_type TEXT NOT NULL,
            status TEXT NOT NULL,
            description TEXT
        );

        CREATE INDEX IF NOT EXISTS idx_activity_start_time
            ON activity(start_time);

        CREATE INDEX IF NOT EXISTS idx_activity_status
            ON activity(status);
        """
    )


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.strftime(DATETIME_FMT)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    return datetime.strptime(value, DATETIME_FMT)


def activity_params(activity: Activity) -> tuple[object, ...]:
    """Column values in ``start_time, end_time, type, status, description`` order."""
    return (
        format_timestamp(activity.start_time),
        format_timestamp(activity.end_time),
        activity.activity_type.name,
        activity.status.name,
        activity.description,
    )


def row_to_activity(row: sqlite3.Row) -> Activity:
    return Activity(
        id=row["id"],
        start_time=parse_timestamp(row["start_time"]),
        end_time=parse_timestamp(row["end_time"]),
        activity_type=ActivityType[row["activity_type"]],
        status=ActivityStatus[row["status"]],
        description=row["description"] or "",
    )
