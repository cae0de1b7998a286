"""Tests für Datenmodelle und Zeit-Hilfen."""

from datetime import date, datetime, time, timezone

import pytest
from pydantic import ValidationError

from models.effective import EffectiveLesson
from models.lesson import LessonStatus, StableLesson, WeekLesson
from models.subject import Subject
from models.timeslot import (
    TimeSlot,
    add_minutes,
    format_short_time,
    format_wall_time,
    iso_to_sunday_zero,
    parse_wall_time,
    sunday_zero_to_iso,
    week_start,
)
from models.timetable_data import TimetableData


# ─── ZEIT-HILFEN ──────────────────────────────────────────────────────────────

class TestWallTime:
    def test_parse_short_and_long(self):
        """HH:MM und HH:MM:SS werden akzeptiert."""
        assert parse_wall_time("08:00") == time(8, 0)
        assert parse_wall_time("08:45:30") == time(8, 45, 30)

    def test_parse_time_object_strips_microseconds(self):
        assert parse_wall_time(time(9, 5, 1, 500)) == time(9, 5, 1)

    @pytest.mark.parametrize("raw", ["8", "25:00", "aa:bb", "08:00:00:00", ""])
    def test_parse_invalid(self, raw):
        with pytest.raises(ValueError):
            parse_wall_time(raw)

    def test_format(self):
        """Austauschformat mit Sekunden, Anzeige ohne."""
        assert format_wall_time(time(8, 0)) == "08:00:00"
        assert format_short_time(time(8, 0)) == "08:00"


class TestWeekStart:
    def test_every_day_maps_to_monday(self):
        """Jeder Tag der Woche 13.–19.10.2025 gehört zu Montag 13.10."""
        for offset in range(7):
            d = date(2025, 10, 13 + offset)
            assert week_start(d) == date(2025, 10, 13)

    def test_idempotent(self):
        d = date(2025, 10, 16)
        assert week_start(week_start(d)) == week_start(d)

    def test_sunday_belongs_to_previous_monday(self):
        assert week_start(date(2025, 10, 19)) == date(2025, 10, 13)

    def test_year_boundary(self):
        assert week_start(date(2026, 1, 1)) == date(2025, 12, 29)


class TestAddMinutes:
    def test_default_lesson(self):
        assert add_minutes(time(8, 0), 45) == time(8, 45)
        assert add_minutes(time(9, 50), 45) == time(10, 35)

    def test_past_midnight_rejected(self):
        with pytest.raises(ValueError):
            add_minutes(time(23, 30), 45)


class TestDayConversion:
    def test_sunday(self):
        assert iso_to_sunday_zero(7) == 0
        assert sunday_zero_to_iso(0) == 7

    def test_weekdays_unchanged(self):
        for d in range(1, 7):
            assert iso_to_sunday_zero(d) == d
            assert sunday_zero_to_iso(d) == d


class TestTimeSlot:
    def test_contains_half_open(self):
        slot = TimeSlot(1, time(8, 0), time(8, 45))
        assert slot.contains(time(8, 0))
        assert slot.contains(time(8, 44, 59))
        assert not slot.contains(time(8, 45))

    def test_back_to_back_does_not_overlap(self):
        slot = TimeSlot(1, time(8, 0), time(8, 45))
        assert not slot.overlaps(time(8, 45), time(9, 30))
        assert not slot.overlaps(time(7, 15), time(8, 0))

    def test_overlap(self):
        slot = TimeSlot(3, time(8, 0), time(9, 0))
        assert slot.overlaps(time(8, 30), time(9, 30))
        assert slot.overlaps(time(8, 15), time(8, 30))

    def test_str(self):
        assert str(TimeSlot(1, time(8, 0), time(8, 45))) == "Mo 08:00–08:45"


# ─── STUNDEN ──────────────────────────────────────────────────────────────────

class TestLessonModels:
    def test_stable_parses_times(self):
        lesson = StableLesson(
            id="s1", subject_id="m", class_id="7b", day_of_week=1,
            start_time="08:00", end_time="08:45:00",
        )
        assert lesson.start_time == time(8, 0)
        assert lesson.time_range == "08:00–08:45"

    def test_week_normalizes_to_monday(self):
        """week_start_date wird beim Anlegen auf den Montag gesetzt."""
        lesson = WeekLesson(
            id="w1", subject_id="m", class_id="7b",
            week_start_date=date(2025, 10, 17), day_of_week=5,
            start_time="10:00", end_time="10:45",
        )
        assert lesson.week_start_date == date(2025, 10, 13)
        assert lesson.status == LessonStatus.NORMAL
        assert lesson.is_ad_hoc
        assert lesson.created_at.tzinfo is not None

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            WeekLesson(
                id="w1", subject_id="m", class_id="7b",
                week_start_date=date(2025, 10, 13), day_of_week=1,
                start_time="10:00", end_time="10:45", status="verlegt",
            )

    def test_subject_color_hex(self):
        subject = Subject(id="m", name="Mathematik", color=0xFF2196F3)
        assert subject.color_hex == "2196F3"


class TestEffectiveLesson:
    def _make(self, **kwargs) -> EffectiveLesson:
        values = dict(
            class_id="7b", day_of_week=1, start_time=time(8, 0), end_time=time(8, 45),
            subject_id="m", subject_name="Mathematik", teacher_name="Fr. Weber",
        )
        values.update(kwargs)
        return EffectiveLesson(**values)

    def test_immutable(self):
        lesson = self._make()
        with pytest.raises(Exception):
            lesson.room = "101"

    def test_display_teacher_prefers_substitute(self):
        lesson = self._make(status=LessonStatus.SUBSTITUTION, substitute_teacher_name="Hr. Koch")
        assert lesson.display_teacher == "Hr. Koch"
        assert self._make().display_teacher == "Fr. Weber"

    def test_source_ids(self):
        lesson = self._make(stable_lesson_id="s1", week_lesson_id="w1", is_stable=False)
        assert lesson.source_ids == ("w1", "s1")
        assert not lesson.is_ad_hoc

    def test_ad_hoc(self):
        lesson = self._make(week_lesson_id="w1", is_stable=False)
        assert lesson.is_ad_hoc

    def test_to_dict(self):
        lesson = self._make(
            week_start_date=date(2025, 10, 13),
            change_set={"room": ("101", "204")},
        )
        d = lesson.to_dict()
        assert d["start_time"] == "08:00:00"
        assert d["week_start_date"] == "2025-10-13"
        assert d["change_set"] == {"room": ["101", "204"]}
        assert d["status"] == "normal"


class TestTimetableData:
    def test_document_roundtrip(self):
        """to_document erhält Stamm- und Wochenstunden und setzt Zeitstempel."""
        data = TimetableData(
            subjects=[Subject(id="m", name="Mathematik")],
            stable_lessons=[StableLesson(
                id="s1", subject_id="m", class_id="7b", day_of_week=2,
                start_time="08:00", end_time="08:45", room="101",
            )],
            week_lessons=[WeekLesson(
                id="w1", stable_lesson_id="s1", subject_id="m", class_id="7b",
                week_start_date=date(2025, 10, 13), day_of_week=2,
                start_time="08:00", end_time="08:45", status=LessonStatus.CANCELLED,
                created_at=datetime(2025, 10, 1, tzinfo=timezone.utc),
            )],
        )
        loaded = TimetableData.model_validate(data.to_document())
        assert loaded.stable_lessons == data.stable_lessons
        assert loaded.week_lessons == data.week_lessons
        assert loaded.created_at is not None

    def test_summary(self):
        assert "Stammstunden: 0" in TimetableData().summary()
