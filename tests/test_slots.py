"""Tests für ScheduleSlotResolver (Zeitpunkt → Stunde, Überschneidungen)."""

from datetime import time

from models.effective import EffectiveLesson
from models.lesson import StableLesson
from timetable.slots import ScheduleSlotResolver, lesson_ids


def _make_stable(lesson_id: str, start: str, end: str) -> StableLesson:
    return StableLesson(
        id=lesson_id, subject_id="m", class_id="7b", day_of_week=1,
        start_time=start, end_time=end,
    )


def _make_effective(start: time, end: time, stable_id=None, week_id=None) -> EffectiveLesson:
    return EffectiveLesson(
        class_id="7b", day_of_week=1, start_time=start, end_time=end,
        subject_id="m", stable_lesson_id=stable_id, week_lesson_id=week_id,
        is_stable=week_id is None,
    )


class TestFindLessonAt:
    def test_start_inclusive_end_exclusive(self):
        resolver = ScheduleSlotResolver()
        first = _make_stable("a", "08:00", "08:45")
        second = _make_stable("b", "08:45", "09:30")
        day = [first, second]
        assert resolver.find_lesson_at(day, time(8, 0)) is first
        assert resolver.find_lesson_at(day, time(8, 44)) is first
        assert resolver.find_lesson_at(day, time(8, 45)) is second

    def test_gap_returns_none(self):
        resolver = ScheduleSlotResolver()
        day = [_make_stable("a", "08:00", "08:45"), _make_stable("b", "09:00", "09:45")]
        assert resolver.find_lesson_at(day, time(8, 50)) is None
        assert resolver.find_lesson_at(day, time(7, 0)) is None
        assert resolver.find_lesson_at([], time(8, 0)) is None


class TestFindConflict:
    def test_overlap(self):
        resolver = ScheduleSlotResolver()
        existing = [_make_stable("a", "08:00", "08:45")]
        assert resolver.find_conflict(time(8, 30), time(9, 0), existing) is existing[0]
        assert resolver.has_conflict(time(7, 30), time(8, 15), existing)

    def test_contained_and_containing(self):
        resolver = ScheduleSlotResolver()
        existing = [_make_stable("a", "08:00", "09:00")]
        assert resolver.has_conflict(time(8, 15), time(8, 30), existing)
        assert resolver.has_conflict(time(7, 0), time(10, 0), existing)

    def test_back_to_back_is_no_conflict(self):
        """Ende == Beginn ist keine Überschneidung (beide Richtungen)."""
        resolver = ScheduleSlotResolver()
        existing = [_make_stable("a", "08:00", "08:45")]
        assert not resolver.has_conflict(time(8, 45), time(9, 30), existing)
        assert not resolver.has_conflict(time(7, 15), time(8, 0), existing)

    def test_one_minute_overlap_is_conflict(self):
        resolver = ScheduleSlotResolver()
        existing = [_make_stable("a", "08:00", "08:45")]
        assert resolver.has_conflict(time(8, 44), time(9, 30), existing)

    def test_exclude_own_id(self):
        resolver = ScheduleSlotResolver()
        existing = [_make_stable("a", "08:00", "08:45")]
        assert resolver.find_conflict(time(8, 0), time(8, 45), existing, exclude_id="a") is None

    def test_exclude_matches_any_source_id(self):
        """Effektive Stunden sind über Wochen- und Stamm-ID ausblendbar."""
        resolver = ScheduleSlotResolver()
        lesson = _make_effective(time(8, 0), time(8, 45), stable_id="s1", week_id="w1")
        assert lesson_ids(lesson) == ("w1", "s1")
        assert not resolver.has_conflict(time(8, 0), time(8, 45), [lesson], exclude_id="s1")
        assert not resolver.has_conflict(time(8, 0), time(8, 45), [lesson], exclude_id="w1")
        assert resolver.has_conflict(time(8, 0), time(8, 45), [lesson], exclude_id="x")
