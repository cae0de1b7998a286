"""Tests für das Konfigurationssystem."""

from pathlib import Path

import pytest

from config.schema import (
    AppConfig,
    LessonSlot,
    LoggingConfig,
    StorageConfig,
    TimeGridConfig,
)
from config.defaults import (
    default_app_config,
    default_time_grid,
    SUBJECT_METADATA,
)
from config.manager import ConfigManager


# ─── DEFAULT-KONFIGURATION ────────────────────────────────────────────────────

class TestDefaultConfig:
    def test_default_time_grid_valid(self):
        """Default-Zeitraster lässt sich ohne Fehler erstellen."""
        tg = default_time_grid()
        assert tg.school_days == [1, 2, 3, 4, 5]
        assert len(tg.lesson_slots) == 10
        assert tg.lesson_duration_minutes == 45

    def test_default_app_config_valid(self):
        config = default_app_config()
        assert config.school_name == "Muster-Schule"
        assert config.storage.sunday_zero_days is False
        assert config.logging.level == "WARNING"

    def test_subject_metadata_fits_grid(self):
        """Die Demo-Stundentafel passt in das Default-Raster (Mo–Fr)."""
        total = sum(meta["hours"] for meta in SUBJECT_METADATA.values())
        tg = default_time_grid()
        assert total <= len(tg.lesson_slots) * len(tg.school_days)

    def test_day_name(self):
        tg = default_time_grid()
        assert tg.day_name(1) == "Mo"
        assert tg.day_name(7) == "So"
        assert tg.day_name(9) == "9"


# ─── SCHEMA-VALIDIERUNG ───────────────────────────────────────────────────────

class TestSchemaValidation:
    def test_invalid_slot_time(self):
        with pytest.raises(ValueError):
            LessonSlot(slot_number=1, start_time="8 Uhr", end_time="08:45")

    def test_slot_end_before_start(self):
        with pytest.raises(ValueError):
            TimeGridConfig(lesson_slots=[
                LessonSlot(slot_number=1, start_time="09:00", end_time="08:00"),
            ])

    def test_overlapping_slots(self):
        with pytest.raises(ValueError):
            TimeGridConfig(lesson_slots=[
                LessonSlot(slot_number=1, start_time="08:00", end_time="08:45"),
                LessonSlot(slot_number=2, start_time="08:30", end_time="09:15"),
            ])

    def test_school_days_sorted_and_checked(self):
        tg = TimeGridConfig(school_days=[5, 1, 6, 1], lesson_slots=[])
        assert tg.school_days == [1, 5, 6]
        with pytest.raises(ValueError):
            TimeGridConfig(school_days=[0], lesson_slots=[])

    def test_log_level_normalized(self):
        assert LoggingConfig(level="debug").level == "DEBUG"
        with pytest.raises(ValueError):
            LoggingConfig(level="laut")

    def test_storage_defaults(self):
        assert StorageConfig().data_path.endswith(".json")


# ─── CONFIG-MANAGER ───────────────────────────────────────────────────────────

class TestConfigManager:
    def test_save_and_load_roundtrip(self, tmp_path):
        """Speichern und Laden ergibt identische Konfiguration."""
        mgr = ConfigManager()
        path = tmp_path / "app_config.yaml"
        config = default_app_config()
        config.storage.sunday_zero_days = True
        mgr.save(config, path)
        loaded = mgr.load(path)
        assert loaded == config

    def test_saved_yaml_has_german_comments(self, tmp_path):
        mgr = ConfigManager()
        path = tmp_path / "app_config.yaml"
        mgr.save(default_app_config(), path)
        text = path.read_text(encoding="utf-8")
        assert "Stundenraster" in text
        assert "Datenablage" in text
        assert text.startswith("# ====")

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigManager().load(tmp_path / "fehlt.yaml")

    def test_load_invalid_file(self, tmp_path):
        path = tmp_path / "kaputt.yaml"
        path.write_text("time_grid:\n  lesson_slots: 5\n", encoding="utf-8")
        with pytest.raises(ValueError):
            ConfigManager().load(path)

    def test_load_or_default(self, tmp_path):
        config = ConfigManager().load_or_default(tmp_path / "fehlt.yaml")
        assert config == default_app_config()

    def test_first_run_check(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        mgr = ConfigManager()
        assert mgr.first_run_check()
        mgr.save(default_app_config())
        assert not mgr.first_run_check()
        assert Path(tmp_path / "config" / "app_config.yaml").exists()
