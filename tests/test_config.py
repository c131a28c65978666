"""Unit tests for settings validation and persistence."""

import json
from pathlib import Path

import pytest

from activity_timer.config import ConfigurationStore, TimerSettings
from activity_timer.errors import InvalidArgumentError
from activity_timer.models import ActivityType


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    return tmp_path / "conf" / "timer.json"


class TestDefaults:
    """Tests for first load and fallbacks."""

    def test_missing_file_is_created_with_defaults(self, config_path: Path) -> None:
        store = ConfigurationStore(config_path)

        assert config_path.exists()
        assert store.default_activity_type is ActivityType.DEVELOP
        assert store.default_duration_minutes == 60
        assert store.rounding_minutes == 0
        assert store.default_start_time == "09:00"
        assert store.csv_delimiter == ","

    def test_invalid_stored_values_fall_back(self, config_path: Path) -> None:
        config_path.parent.mkdir(parents=True)
        config_path.write_text(
            json.dumps(
                {
                    "default_activity_type": "coffee",
                    "default_duration_minutes": -5,
                    "rounding_minutes": 7,
                    "default_start_time": "late",
                    "csv_delimiter": ";",
                }
            ),
            encoding="utf-8",
        )

        store = ConfigurationStore(config_path)

        assert store.default_activity_type is ActivityType.DEVELOP
        assert store.default_duration_minutes == 60
        assert store.rounding_minutes == 0
        assert store.default_start_time == "09:00"
        assert store.csv_delimiter == ";"

    def test_stored_type_is_case_insensitive(self, config_path: Path) -> None:
        config_path.parent.mkdir(parents=True)
        config_path.write_text('{"default_activity_type": "meeting"}', encoding="utf-8")

        assert ConfigurationStore(config_path).default_activity_type is ActivityType.MEETING

    def test_multi_character_delimiter_falls_back(self, config_path: Path) -> None:
        config_path.parent.mkdir(parents=True)
        config_path.write_text('{"csv_delimiter": ";;"}', encoding="utf-8")

        assert ConfigurationStore(config_path).csv_delimiter == ","

    def test_unreadable_file_uses_defaults(self, config_path: Path) -> None:
        config_path.parent.mkdir(parents=True)
        config_path.write_text("{not json", encoding="utf-8")

        assert ConfigurationStore(config_path).settings == TimerSettings()


class TestMutators:
    """Tests for validated updates."""

    def test_valid_value_is_persisted(self, config_path: Path) -> None:
        store = ConfigurationStore(config_path)
        store.set_rounding_minutes(15)
        store.set_default_activity_type(ActivityType.SUPPORT)
        store.set_default_start_time("08:30")
        store.set_default_duration_minutes(45)
        store.set_csv_delimiter(";")

        reloaded = ConfigurationStore(config_path)
        assert reloaded.rounding_minutes == 15
        assert reloaded.default_activity_type is ActivityType.SUPPORT
        assert reloaded.default_start_time == "08:30"
        assert reloaded.default_duration_minutes == 45
        assert reloaded.csv_delimiter == ";"

    def test_string_values_are_coerced(self, config_path: Path) -> None:
        store = ConfigurationStore(config_path)
        store.set("rounding_minutes", "30")
        store.set("default_activity_type", "infra")

        assert store.rounding_minutes == 30
        assert store.default_activity_type is ActivityType.INFRA

    @pytest.mark.parametrize(
        ("key", "value", "message"),
        [
            ("rounding_minutes", 7, "Rounding must be"),
            ("default_duration_minutes", 0, "greater than 0"),
            ("default_start_time", "9:00", "HH:MM"),
            ("default_start_time", "25:00", "HH:MM"),
            ("csv_delimiter", "::", "single character"),
            ("default_activity_type", "COFFEE", "DEVELOP"),
        ],
    )
    def test_invalid_value_leaves_store_unchanged(
        self, config_path: Path, key: str, value: object, message: str
    ) -> None:
        store = ConfigurationStore(config_path)
        before_file = config_path.read_text(encoding="utf-8")
        before = store.settings

        with pytest.raises(InvalidArgumentError, match=message):
            store.set(key, value)

        assert store.settings == before
        assert config_path.read_text(encoding="utf-8") == before_file

    def test_unknown_key(self, config_path: Path) -> None:
        with pytest.raises(InvalidArgumentError, match="Unknown setting"):
            ConfigurationStore(config_path).set("colour", "blue")
