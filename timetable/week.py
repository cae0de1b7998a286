"""Wochenstunden (Overrides) einer Klasse für eine bestimmte Kalenderwoche.

Alle Datumsangaben werden auf den Montag der Woche normalisiert; Aufrufer
dürfen jedes Datum innerhalb der Woche übergeben.
"""

import logging
from datetime import date
from typing import Optional

from models.lesson import LessonStatus, WeekLesson
from models.timeslot import week_start
from storage.base import ClassStore, StableLessonStore, SubjectStore, WeekLessonStore
from storage.errors import (
    DuplicateOverrideError,
    LessonValidationError,
    NotFoundError,
    SlotConflictError,
)
from storage.updates import UNSET, collect_changes
from timetable.reconciliation import ReconciliationEngine
from timetable.slots import ScheduleSlotResolver
from timetable.validation import (
    require_date,
    require_day,
    require_id,
    require_time,
    require_time_range,
)

logger = logging.getLogger(__name__)


def _require_status(value) -> LessonStatus:
    try:
        return LessonStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in LessonStatus)
        raise LessonValidationError("status", f"unbekannt: {value!r} (erlaubt: {allowed})") from None


def _sort_key(lesson: WeekLesson):
    return (lesson.day_of_week, lesson.start_time, lesson.end_time)


class WeekOverrideStore:
    """CRUD für Wochenstunden, geschlüsselt nach (Klasse, Montag der Woche)."""

    def __init__(
        self,
        week_store: WeekLessonStore,
        stable_store: StableLessonStore,
        class_store: ClassStore,
        subject_store: SubjectStore,
        engine: Optional[ReconciliationEngine] = None,
        resolver: Optional[ScheduleSlotResolver] = None,
    ) -> None:
        self.week_store = week_store
        self.stable_store = stable_store
        self.class_store = class_store
        self.subject_store = subject_store
        self.engine = engine or ReconciliationEngine(
            stable_store, week_store, class_store, subject_store
        )
        self.resolver = resolver or ScheduleSlotResolver()

    # ─── Lesen ───

    def get_week_overrides(self, class_id: str, week_start_date) -> list[WeekLesson]:
        class_id = require_id("class_id", class_id)
        monday = week_start(require_date("week_start_date", week_start_date))
        self.class_store.get_class(class_id)
        return sorted(self.week_store.list_week(class_id, monday), key=_sort_key)

    def get_week_lesson(self, lesson_id: str) -> WeekLesson:
        lesson = self.week_store.get_week(require_id("lesson_id", lesson_id))
        if lesson is None:
            raise NotFoundError("week_lesson", lesson_id)
        return lesson

    # ─── Anlegen ───

    def create_week_lesson(
        self,
        class_id: str,
        week_start_date,
        subject_id: str,
        day_of_week: int,
        start_time,
        end_time,
        room: Optional[str] = None,
        stable_lesson_id: Optional[str] = None,
        *,
        status=LessonStatus.NORMAL,
        substitute_teacher_name: Optional[str] = None,
        note: Optional[str] = None,
    ) -> WeekLesson:
        """Legt eine Wochenstunde an.

        Mit ``stable_lesson_id`` ersetzt sie die Stammstunde in dieser Woche,
        ohne ist sie eine Zusatzstunde. Die Überschneidungsprüfung läuft gegen
        alles, was die Klasse in dieser Woche tatsächlich sieht.
        """
        class_id = require_id("class_id", class_id)
        subject_id = require_id("subject_id", subject_id)
        monday = week_start(require_date("week_start_date", week_start_date))
        day_of_week = require_day(day_of_week, stable=False)
        start = require_time("start_time", start_time)
        end = require_time("end_time", end_time)
        require_time_range(start, end)
        status = _require_status(status)
        substitute_teacher_name = (substitute_teacher_name or "").strip() or None
        if substitute_teacher_name and status != LessonStatus.SUBSTITUTION:
            raise LessonValidationError(
                "substitute_teacher_name", "nur bei status=substitution erlaubt"
            )
        room = (room or "").strip() or None
        if stable_lesson_id is not None:
            stable_lesson_id = require_id("stable_lesson_id", stable_lesson_id)

        self.class_store.get_class(class_id)
        self.subject_store.get_subject(subject_id)
        if stable_lesson_id is not None:
            baseline = self.stable_store.get_stable(stable_lesson_id)
            if baseline is None or baseline.class_id != class_id:
                raise NotFoundError("stable_lesson", stable_lesson_id)
            existing = next(
                (o for o in self.week_store.list_week(class_id, monday)
                 if o.stable_lesson_id == stable_lesson_id),
                None,
            )
            if existing is not None:
                raise DuplicateOverrideError(class_id, monday, stable_lesson_id, existing.id)

        if status != LessonStatus.CANCELLED:
            self._check_overlap(class_id, monday, day_of_week, start, end,
                                exclude_id=stable_lesson_id)

        lesson = self.week_store.create_week(
            class_id, monday, subject_id, day_of_week, start, end,
            room=room, stable_lesson_id=stable_lesson_id,
            status=status, substitute_teacher_name=substitute_teacher_name, note=note,
        )
        logger.info(
            f"Wochenstunde angelegt: {lesson.id} ({class_id}, {monday}, Tag {day_of_week}, "
            f"{lesson.time_range}, {status.value})"
        )
        return lesson

    def create_week_from_stable(self, class_id: str, week_start_date) -> list[WeekLesson]:
        """Kopiert den Stammplan als Wochenstunden in die Woche.

        Idempotent: ein zweiter Aufruf legt keine Duplikate an und liefert den
        vorhandenen Bestand. Nach einem Teilausfall kann einfach wiederholt werden.
        """
        class_id = require_id("class_id", class_id)
        monday = week_start(require_date("week_start_date", week_start_date))
        self.class_store.get_class(class_id)
        before = len(self.week_store.list_week(class_id, monday))
        lessons = self.week_store.copy_from_stable(class_id, monday)
        logger.info(
            f"Woche {monday} für {class_id} aus Stammplan erzeugt: "
            f"{len(lessons) - before} neu, {len(lessons)} gesamt"
        )
        return sorted(lessons, key=_sort_key)

    def get_or_create_week(self, class_id: str, week_start_date) -> list[WeekLesson]:
        """Vorhandene Wochenstunden, sonst Kopie des Stammplans."""
        existing = self.get_week_overrides(class_id, week_start_date)
        if existing:
            return existing
        return self.create_week_from_stable(class_id, week_start_date)

    # ─── Ändern / Löschen ───

    def update_week_lesson(
        self,
        lesson_id: str,
        *,
        subject_id=UNSET,
        day_of_week=UNSET,
        start_time=UNSET,
        end_time=UNSET,
        room=UNSET,
        status=UNSET,
        substitute_teacher_name=UNSET,
        note=UNSET,
    ) -> WeekLesson:
        """Teil-Update: nur angegebene Felder ändern sich.

        room="" leert den Raum (≠ nicht angegeben). Ein Status außer
        substitution entfernt die Vertretungslehrkraft.
        """
        changes = collect_changes(
            subject_id=subject_id, day_of_week=day_of_week,
            start_time=start_time, end_time=end_time, room=room,
            status=status, substitute_teacher_name=substitute_teacher_name, note=note,
        )
        if "subject_id" in changes:
            changes["subject_id"] = require_id("subject_id", changes["subject_id"])
        if "day_of_week" in changes:
            require_day(changes["day_of_week"], stable=False)
        for field in ("start_time", "end_time"):
            if field in changes:
                changes[field] = require_time(field, changes[field])
        if "status" in changes:
            changes["status"] = _require_status(changes["status"])

        current = self.get_week_lesson(lesson_id)
        if not changes:
            return current

        day = changes.get("day_of_week", current.day_of_week)
        start = changes.get("start_time", current.start_time)
        end = changes.get("end_time", current.end_time)
        require_time_range(start, end)

        new_status = changes.get("status", current.status)
        if new_status != LessonStatus.SUBSTITUTION:
            if changes.get("substitute_teacher_name"):
                raise LessonValidationError(
                    "substitute_teacher_name", "nur bei status=substitution erlaubt"
                )
            if current.substitute_teacher_name is not None:
                changes["substitute_teacher_name"] = None

        if "subject_id" in changes:
            self.subject_store.get_subject(changes["subject_id"])

        moved = (day, start, end) != (current.day_of_week, current.start_time, current.end_time)
        reactivated = (
            current.status == LessonStatus.CANCELLED and new_status != LessonStatus.CANCELLED
        )
        if new_status != LessonStatus.CANCELLED and (moved or reactivated):
            self._check_overlap(current.class_id, current.week_start_date, day, start, end,
                                exclude_id=current.id)

        updated = self.week_store.update_week(current.id, changes)
        logger.info(f"Wochenstunde geändert: {current.id} ({', '.join(sorted(changes))})")
        return updated

    def delete_week_lesson(self, lesson_id: str) -> None:
        """Entfernt die Wochenstunde; der Slot zeigt danach wieder die Stammstunde."""
        lesson_id = require_id("lesson_id", lesson_id)
        self.week_store.delete_week(lesson_id)
        logger.info(f"Wochenstunde gelöscht: {lesson_id}")

    # ─── Intern ───

    def _check_overlap(self, class_id: str, monday: date, day: int, start, end,
                       exclude_id: Optional[str] = None) -> None:
        """Prüft gegen die effektive Woche; entfallene Stunden belegen keinen Slot."""
        week = self.engine.get_effective_week(class_id, monday)
        visible = [l for l in week.get(day, []) if not l.is_cancelled]
        conflict = self.resolver.find_conflict(start, end, visible, exclude_id=exclude_id)
        if conflict is not None:
            raise SlotConflictError(
                conflict.source_ids[0], day, conflict.start_time, conflict.end_time
            )
