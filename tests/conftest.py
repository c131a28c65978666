"""Shared fixtures for activity timer tests."""

from __future__ import annotations

import sqlite3
from datetime import datetime, timedelta
from pathlib import Path
from typing import Iterator

import pytest

from activity_timer.config import TimerSettings
from activity_timer.db import database_connection
from activity_timer.repository import SqliteActivityRepository
from activity_timer.service import ActivityService


class FixedClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "timer.sqlite3"


@pytest.fixture
def conn(db_path: Path) -> Iterator[sqlite3.Connection]:
    with database_connection(db_path) as connection:
        yield connection


@pytest.fixture
def repository(conn: sqlite3.Connection) -> SqliteActivityRepository:
    return SqliteActivityRepository(conn)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2025, 1, 15, 10, 7, 42))


@pytest.fixture
def settings() -> TimerSettings:
    return TimerSettings()


@pytest.fixture
def service(
    repository: SqliteActivityRepository, settings: TimerSettings, clock: FixedClock
) -> ActivityService:
    return ActivityService(repository, settings, clock=clock)
