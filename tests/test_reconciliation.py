"""Tests für den Abgleich Stammplan ↔ Wochenplan (ReconciliationEngine)."""

from datetime import date, datetime, time, timedelta, timezone

import pytest

from models.lesson import LessonStatus, StableLesson, WeekLesson
from models.school_class import SchoolClass
from models.subject import Subject
from storage.errors import NotFoundError
from storage.memory import InMemoryStore
from timetable.reconciliation import ReconciliationEngine, compute_changes, merge_week
from timetable.stable import StableTimetable
from timetable.week import WeekOverrideStore

MONDAY = date(2025, 10, 13)


def _make_services():
    store = InMemoryStore()
    store.add_class(SchoolClass(id="7b", name="7b"))
    store.add_subject(Subject(id="m", name="Mathematik", teacher_name="Fr. Weber"))
    store.add_subject(Subject(id="d", name="Deutsch", teacher_name="Hr. Koch"))
    store.add_subject(Subject(id="m2", name="Mathematik", teacher_name="Fr. Weber"))
    engine = ReconciliationEngine(store, store, store, store)
    stable = StableTimetable(store, store, store)
    week = WeekOverrideStore(store, store, store, store, engine=engine)
    return store, stable, week, engine


def _subjects(store: InMemoryStore) -> dict[str, Subject]:
    return {s.id: s for s in store.list_subjects()}


def _all(effective: dict) -> list:
    return [l for day in effective.values() for l in day]


# ─── ÄNDERUNGSLISTE ───────────────────────────────────────────────────────────

class TestComputeChanges:
    def _make_pair(self, **override_fields):
        stable = StableLesson(
            id="s1", subject_id="m", class_id="7b", day_of_week=1,
            start_time="08:00", end_time="08:45", room="101",
        )
        values = dict(
            id="w1", stable_lesson_id="s1", subject_id="m", class_id="7b",
            week_start_date=MONDAY, day_of_week=1,
            start_time="08:00", end_time="08:45", room="101",
        )
        values.update(override_fields)
        return stable, WeekLesson(**values)

    def test_identical_copy_has_no_changes(self):
        store, *_ = _make_services()
        stable, override = self._make_pair()
        assert compute_changes(stable, override, _subjects(store)) == {}

    def test_room_change(self):
        store, *_ = _make_services()
        stable, override = self._make_pair(room="204")
        assert compute_changes(stable, override, _subjects(store)) == {"room": ("101", "204")}

    def test_none_and_empty_room_are_equal(self):
        store, *_ = _make_services()
        stable, override = self._make_pair(room=None)
        stable = stable.model_copy(update={"room": ""})
        assert compute_changes(stable, override, _subjects(store)) == {}

    def test_subject_and_teacher_change(self):
        store, *_ = _make_services()
        stable, override = self._make_pair(subject_id="d")
        changes = compute_changes(stable, override, _subjects(store))
        assert changes["subject"] == ("Mathematik", "Deutsch")
        assert changes["teacher"] == ("Fr. Weber", "Hr. Koch")

    def test_same_teacher_is_not_a_change(self):
        """Anderes Fach-Objekt mit gleicher Lehrkraft: nur subject ändert sich."""
        store, *_ = _make_services()
        stable, override = self._make_pair(subject_id="m2")
        changes = compute_changes(stable, override, _subjects(store))
        assert "teacher" not in changes
        assert changes["subject"] == ("Mathematik", "Mathematik")

    def test_time_and_day_change(self):
        store, *_ = _make_services()
        stable, override = self._make_pair(day_of_week=3, start_time="09:00", end_time="09:45")
        changes = compute_changes(stable, override, _subjects(store))
        assert changes["day_of_week"] == ("1", "3")
        assert changes["start_time"] == ("08:00", "09:00")
        assert changes["end_time"] == ("08:45", "09:45")

    def test_status_is_not_a_field(self):
        store, *_ = _make_services()
        stable, override = self._make_pair(status=LessonStatus.CANCELLED)
        assert compute_changes(stable, override, _subjects(store)) == {}


# ─── EFFEKTIVE WOCHE ──────────────────────────────────────────────────────────

class TestEffectiveWeek:
    def test_without_overrides_equals_stable(self):
        """Ohne Wochenstunden: Stammplan 1:1, alles is_stable und unverändert."""
        _, stable, _, engine = _make_services()
        a = stable.create_stable_lesson("7b", "m", 1, "08:00", "08:45", room="101")
        b = stable.create_stable_lesson("7b", "d", 3, "10:00", "10:45")
        week = engine.get_effective_week("7b", MONDAY)
        lessons = _all(week)
        assert [l.stable_lesson_id for l in lessons] == [a.id, b.id]
        assert all(l.is_stable and not l.modified_from_stable for l in lessons)
        assert all(l.week_start_date == MONDAY for l in lessons)
        assert week[1][0].teacher_name == "Fr. Weber"
        assert week[1][0].room == "101"

    def test_week_date_normalized(self):
        _, stable, week_svc, engine = _make_services()
        s = stable.create_stable_lesson("7b", "m", 1, "08:00", "08:45")
        week_svc.create_week_lesson("7b", MONDAY, "m", 1, "08:00", "08:45",
                                    stable_lesson_id=s.id, status="cancelled")
        for offset in range(7):
            week = engine.get_effective_week("7b", MONDAY + timedelta(days=offset))
            assert week[1][0].is_cancelled

    def test_none_week_is_stable_view(self):
        _, stable, _, engine = _make_services()
        stable.create_stable_lesson("7b", "m", 1, "08:00", "08:45")
        view = engine.get_effective_week("7b", None)
        assert view[1][0].week_start_date is None
        assert view[1][0].is_stable

    def test_unmodified_copy(self):
        """Unveränderte Kopie ist Wochenstunde, aber nicht modified."""
        _, stable, week_svc, engine = _make_services()
        stable.create_stable_lesson("7b", "m", 1, "08:00", "08:45")
        week_svc.create_week_from_stable("7b", MONDAY)
        lesson = engine.get_effective_week("7b", MONDAY)[1][0]
        assert not lesson.is_stable
        assert not lesson.modified_from_stable
        assert lesson.change_set == {}

    def test_cancelled_is_modified(self):
        """Ausfall ohne Feldänderung: modified, Änderungsliste leer."""
        _, stable, week_svc, engine = _make_services()
        s = stable.create_stable_lesson("7b", "m", 1, "08:00", "08:45")
        week_svc.create_week_lesson("7b", MONDAY, "m", 1, "08:00", "08:45",
                                    stable_lesson_id=s.id, status="cancelled")
        lesson = engine.get_effective_week("7b", MONDAY)[1][0]
        assert lesson.modified_from_stable
        assert lesson.change_set == {}
        assert lesson.status == LessonStatus.CANCELLED

    def test_room_change_scenario(self):
        """Raumwechsel 101 → 204 nur in dieser Woche."""
        _, stable, week_svc, engine = _make_services()
        s = stable.create_stable_lesson("7b", "m", 1, "08:00", "08:45", room="101")
        copies = week_svc.create_week_from_stable("7b", MONDAY)
        week_svc.update_week_lesson(copies[0].id, room="204")

        lesson = engine.get_effective_week("7b", MONDAY)[1][0]
        assert lesson.room == "204"
        assert lesson.change_set == {"room": ("101", "204")}
        assert lesson.stable_lesson_id == s.id

        next_week = engine.get_effective_week("7b", MONDAY + timedelta(days=7))[1][0]
        assert next_week.room == "101"
        assert next_week.is_stable

    def test_moved_lesson_appears_on_new_day(self):
        _, stable, week_svc, engine = _make_services()
        s = stable.create_stable_lesson("7b", "m", 1, "08:00", "08:45")
        week_svc.create_week_lesson("7b", MONDAY, "m", 2, "09:00", "09:45",
                                    stable_lesson_id=s.id)
        week = engine.get_effective_week("7b", MONDAY)
        assert week[1] == []
        assert week[2][0].change_set["day_of_week"] == ("1", "2")

    def test_ad_hoc_lesson(self):
        _, _, week_svc, engine = _make_services()
        extra = week_svc.create_week_lesson("7b", MONDAY, "d", 6, "09:00", "09:45")
        week = engine.get_effective_week("7b", MONDAY)
        lesson = week[6][0]
        assert lesson.week_lesson_id == extra.id
        assert lesson.is_ad_hoc
        assert not lesson.modified_from_stable

    def test_substitution_teacher(self):
        _, stable, week_svc, engine = _make_services()
        s = stable.create_stable_lesson("7b", "m", 1, "08:00", "08:45")
        week_svc.create_week_lesson("7b", MONDAY, "m", 1, "08:00", "08:45",
                                    stable_lesson_id=s.id, status="substitution",
                                    substitute_teacher_name="Hr. Bauer")
        lesson = engine.get_effective_week("7b", MONDAY)[1][0]
        assert lesson.display_teacher == "Hr. Bauer"
        assert lesson.teacher_name == "Fr. Weber"
        assert lesson.modified_from_stable

    def test_each_stable_lesson_at_most_once(self):
        """Jede Stammstunde erscheint genau einmal (Original oder Wochen-Version)."""
        _, stable, week_svc, engine = _make_services()
        a = stable.create_stable_lesson("7b", "m", 1, "08:00", "08:45")
        b = stable.create_stable_lesson("7b", "d", 1, "09:00", "09:45")
        week_svc.create_week_lesson("7b", MONDAY, "m", 1, "08:00", "08:45",
                                    stable_lesson_id=a.id, room="204")
        ids = [l.stable_lesson_id for l in _all(engine.get_effective_week("7b", MONDAY))]
        assert sorted(ids) == sorted([a.id, b.id])

    def test_sorted_within_day(self):
        _, stable, week_svc, engine = _make_services()
        stable.create_stable_lesson("7b", "m", 1, "10:00", "10:45")
        week_svc.create_week_lesson("7b", MONDAY, "d", 1, "08:00", "08:45")
        starts = [l.start_time for l in engine.get_effective_week("7b", MONDAY)[1]]
        assert starts == [time(8, 0), time(10, 0)]

    def test_dangling_reference(self):
        """Gelöschte Stammstunde: Wochenstunde bleibt, ohne Vergleichsbasis."""
        _, stable, week_svc, engine = _make_services()
        s = stable.create_stable_lesson("7b", "m", 1, "08:00", "08:45", room="101")
        override = week_svc.create_week_lesson("7b", MONDAY, "m", 1, "08:00", "08:45",
                                               stable_lesson_id=s.id, room="204")
        stable.delete_stable_lesson(s.id)

        lesson = engine.get_effective_week("7b", MONDAY)[1][0]
        assert lesson.week_lesson_id == override.id
        assert lesson.stable_lesson_id is None
        assert not lesson.modified_from_stable
        assert lesson.change_set == {}
        assert engine.get_lesson_changes(override.id) == {}

    def test_unknown_class(self):
        _, _, _, engine = _make_services()
        with pytest.raises(NotFoundError):
            engine.get_effective_week("9z", MONDAY)


class TestMergeWeek:
    def test_latest_duplicate_wins(self, caplog):
        """Mehrere Wochenstunden je Stammstunde: die neueste gewinnt, mit Warnung."""
        store, stable, _, _ = _make_services()
        s = stable.create_stable_lesson("7b", "m", 1, "08:00", "08:45", room="101")
        base = dict(
            stable_lesson_id=s.id, subject_id="m", class_id="7b",
            week_start_date=MONDAY, day_of_week=1, start_time="08:00", end_time="08:45",
        )
        older = WeekLesson(id="w-alt", room="201",
                           created_at=datetime(2025, 10, 1, tzinfo=timezone.utc), **base)
        newer = WeekLesson(id="w-neu", room="202",
                           created_at=datetime(2025, 10, 2, tzinfo=timezone.utc), **base)

        with caplog.at_level("WARNING"):
            week = merge_week([s], [newer, older], _subjects(store), MONDAY)
        assert [l.week_lesson_id for l in week[1]] == ["w-neu"]
        assert week[1][0].room == "202"
        assert "neueste gewinnt" in caplog.text

    def test_weekend_days_only_when_occupied(self):
        store, stable, _, _ = _make_services()
        s = stable.create_stable_lesson("7b", "m", 1, "08:00", "08:45")
        week = merge_week([s], [], _subjects(store), MONDAY)
        assert list(week) == [1, 2, 3, 4, 5]


class TestGetLessonChanges:
    def test_changes_of_override(self):
        _, stable, week_svc, engine = _make_services()
        s = stable.create_stable_lesson("7b", "m", 1, "08:00", "08:45")
        override = week_svc.create_week_lesson("7b", MONDAY, "d", 1, "08:00", "08:45",
                                               stable_lesson_id=s.id)
        changes = engine.get_lesson_changes(override.id)
        assert set(changes) == {"subject", "teacher"}

    def test_ad_hoc_has_no_changes(self):
        _, _, week_svc, engine = _make_services()
        extra = week_svc.create_week_lesson("7b", MONDAY, "d", 1, "08:00", "08:45")
        assert engine.get_lesson_changes(extra.id) == {}

    def test_unknown(self):
        _, _, _, engine = _make_services()
        with pytest.raises(NotFoundError):
            engine.get_lesson_changes("fehlt")


class TestEndToEnd:
    def test_substitution_monday(self):
        """Mathe mit Vertretung, Physik unverändert: Änderungsliste ohne Raum/Zeit."""
        store, stable, week_svc, engine = _make_services()
        store.add_subject(Subject(id="p", name="Physik", teacher_name="Hr. Wolf"))
        math = stable.create_stable_lesson("7b", "m", 1, "08:00", "08:45", room="A101")
        stable.create_stable_lesson("7b", "p", 1, "08:55", "09:40", room="B203")
        week_svc.create_week_lesson("7b", MONDAY, "m", 1, "08:00", "08:45", room="A101",
                                    stable_lesson_id=math.id, status="substitution",
                                    substitute_teacher_name="Dr. Brown")

        monday = engine.get_effective_week("7b", MONDAY)[1]
        assert len(monday) == 2
        first, second = monday
        assert first.modified_from_stable
        assert first.change_set == {}
        assert first.status == LessonStatus.SUBSTITUTION
        assert first.substitute_teacher_name == "Dr. Brown"
        assert first.room == "A101"
        assert second.subject_name == "Physik"
        assert not second.modified_from_stable
