"""Configuration models and helpers for the activity timer."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import InvalidArgumentError, PersistenceError
from .models import ActivityType
from .timeutil import ROUNDING_INTERVALS, is_valid_clock

logger = logging.getLogger(__name__)


class TimerSettings(BaseModel):
    """User preferences read by the service and the CLI."""

    default_activity_type: ActivityType = Field(
        ActivityType.DEVELOP, description="type offered first when prompting"
    )
    default_duration_minutes: int = Field(
        60, description="suggested length in minutes of a manually added activity"
    )
    rounding_minutes: int = Field(
        0, description="stop times round up to this interval: 0, 1, 5, 10, 15, 30 or 60"
    )
    default_start_time: str = Field(
        "09:00", description="HH:MM start offered when connecting on an empty day"
    )
    csv_delimiter: str = Field(
        ",", description="single character separating exported CSV columns"
    )

    model_config = ConfigDict(extra="ignore", validate_assignment=True)

    @field_validator("default_activity_type", mode="before")
    @classmethod
    def _normalize_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("default_duration_minutes")
    @classmethod
    def _check_duration(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("Duration must be greater than 0")
        return value

    @field_validator("rounding_minutes")
    @classmethod
    def _check_rounding(cls, value: int) -> int:
        if value not in ROUNDING_INTERVALS:
            allowed = ", ".join(str(interval) for interval in ROUNDING_INTERVALS)
            raise ValueError(f"Rounding must be {allowed} minutes")
        return value

    @field_validator("default_start_time")
    @classmethod
    def _check_start_time(cls, value: str) -> str:
        if not is_valid_clock(value):
            raise ValueError("Start time must be in HH:MM format (e.g., 09:00)")
        return value.strip()

    @field_validator("csv_delimiter")
    @classmethod
    def _check_delimiter(cls, value: str) -> str:
        if len(value) != 1 or value in {'"', "\r", "\n"}:
            raise ValueError("CSV delimiter must be a single character other than a quote or newline")
        return value

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "TimerSettings":
        """Build settings, replacing each invalid value with its default."""
        values: dict[str, Any] = {}
        for name in cls.model_fields:
            if name not in raw:
                continue
            try:
                cls.model_validate({name: raw[name]})
            except ValidationError:
                logger.warning(
                    "Ignoring invalid configuration value %s=%r; using default %r",
                    name,
                    raw[name],
                    cls.model_fields[name].default,
                )
                continue
            values[name] = raw[name]
        return cls.model_validate(values)


class ConfigurationStore:
    """Key/value settings persisted as JSON.

    Mutators validate before writing; a rejected value leaves both the
    in-memory settings and the file untouched.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._settings = self._load()

    @property
    def settings(self) -> TimerSettings:
        return self._settings

    @property
    def default_activity_type(self) -> ActivityType:
        return self._settings.default_activity_type

    @property
    def default_duration_minutes(self) -> int:
        return self._settings.default_duration_minutes

    @property
    def rounding_minutes(self) -> int:
        return self._settings.rounding_minutes

    @property
    def default_start_time(self) -> str:
        return self._settings.default_start_time

    @property
    def csv_delimiter(self) -> str:
        return self._settings.csv_delimiter

    def set_default_activity_type(self, value: ActivityType | str) -> None:
        self.set("default_activity_type", value)

    def set_default_duration_minutes(self, value: int) -> None:
        self.set("default_duration_minutes", value)

    def set_rounding_minutes(self, value: int) -> None:
        self.set("rounding_minutes", value)

    def set_default_start_time(self, value: str) -> None:
        self.set("default_start_time", value)

    def set_csv_delimiter(self, value: str) -> None:
        self.set("csv_delimiter", value)

    def set(self, key: str, value: Any) -> None:
        if key not in TimerSettings.model_fields:
            known = ", ".join(TimerSettings.model_fields)
            raise InvalidArgumentError(f"Unknown setting {key!r}. Known settings: {known}")
        data = self._settings.model_dump()
        data[key] = value
        try:
            updated = TimerSettings.model_validate(data)
        except ValidationError as exc:
            raise InvalidArgumentError(_first_error(exc)) from exc
        self._write(updated)
        self._settings = updated
        logger.info("Configuration %s set to %r", key, getattr(updated, key))

    def _load(self) -> TimerSettings:
        if not self.path.exists():
            settings = TimerSettings()
            self._write(settings)
            logger.info("Created default configuration at %s", self.path)
            return settings
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Could not read configuration %s; using defaults", self.path)
            return TimerSettings()
        if not isinstance(raw, dict):
            logger.warning("Configuration %s is not a JSON object; using defaults", self.path)
            return TimerSettings()
        return TimerSettings.from_mapping(raw)

    def _write(self, settings: TimerSettings) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(settings.model_dump_json(indent=2) + "\n", encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(
                f"Failed to save configuration file {self.path}: {exc}", "save_config"
            ) from exc


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    message = errors[0]["msg"]
    # Custom validators surface as "Value error, <message>".
    return message.removeprefix("Value error, ")
