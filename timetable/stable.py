"""Stammplan (stabiler Wochenplan) einer Klasse: Lesen und Pflege."""

import logging
from datetime import time
from typing import Optional

from models.lesson import StableLesson
from models.timeslot import SCHOOL_DAYS
from storage.base import ClassStore, StableLessonStore, SubjectStore
from storage.errors import NotFoundError, SlotConflictError
from storage.updates import UNSET, collect_changes
from timetable.slots import ScheduleSlotResolver
from timetable.validation import require_day, require_id, require_time, require_time_range

logger = logging.getLogger(__name__)


def group_by_day(lessons, days=SCHOOL_DAYS) -> dict[int, list]:
    """{Wochentag: [Stunden nach Beginn sortiert]}; alle ``days`` immer enthalten."""
    result: dict[int, list] = {d: [] for d in days}
    for lesson in lessons:
        result.setdefault(lesson.day_of_week, []).append(lesson)
    for day_lessons in result.values():
        day_lessons.sort(key=lambda l: (l.start_time, l.end_time))
    return dict(sorted(result.items()))


class StableTimetable:
    """Datumsunabhängige Wochenvorlage: was findet an Tag D um Zeit T statt?

    Änderungen wirken auf alle künftigen Wochen ohne eigene Wochenstunde.
    """

    def __init__(
        self,
        stable_store: StableLessonStore,
        class_store: ClassStore,
        subject_store: SubjectStore,
        resolver: Optional[ScheduleSlotResolver] = None,
    ) -> None:
        self.stable_store = stable_store
        self.class_store = class_store
        self.subject_store = subject_store
        self.resolver = resolver or ScheduleSlotResolver()

    # ─── Lesen ───

    def get_stable_timetable(self, class_id: str) -> dict[int, list[StableLesson]]:
        """Stammplan Mo–Fr; leere Tage als leere Liste. NotFoundError für unbekannte Klasse."""
        class_id = require_id("class_id", class_id)
        self.class_store.get_class(class_id)
        return group_by_day(self.stable_store.list_stable(class_id))

    def get_stable_lesson(self, lesson_id: str) -> StableLesson:
        lesson = self.stable_store.get_stable(require_id("lesson_id", lesson_id))
        if lesson is None:
            raise NotFoundError("stable_lesson", lesson_id)
        return lesson

    # ─── Schreiben ───

    def create_stable_lesson(
        self,
        class_id: str,
        subject_id: str,
        day_of_week: int,
        start_time,
        end_time,
        room: Optional[str] = None,
    ) -> StableLesson:
        """Legt eine Stammstunde an (Mo–Fr, Ende nach Beginn, keine Überschneidung)."""
        class_id = require_id("class_id", class_id)
        subject_id = require_id("subject_id", subject_id)
        day_of_week = require_day(day_of_week, stable=True)
        start = require_time("start_time", start_time)
        end = require_time("end_time", end_time)
        require_time_range(start, end)
        room = (room or "").strip() or None

        self.class_store.get_class(class_id)
        self.subject_store.get_subject(subject_id)
        self._check_overlap(class_id, day_of_week, start, end)

        lesson = self.stable_store.create_stable(
            class_id, subject_id, day_of_week, start, end, room
        )
        logger.info(
            f"Stammstunde angelegt: {lesson.id} ({class_id}, Tag {day_of_week}, {lesson.time_range})"
        )
        return lesson

    def update_stable_lesson(
        self,
        lesson_id: str,
        *,
        subject_id=UNSET,
        day_of_week=UNSET,
        start_time=UNSET,
        end_time=UNSET,
        room=UNSET,
    ) -> StableLesson:
        """Teil-Update: nur angegebene Felder ändern sich; room="" leert den Raum."""
        changes = collect_changes(
            subject_id=subject_id, day_of_week=day_of_week,
            start_time=start_time, end_time=end_time, room=room,
        )
        if "subject_id" in changes:
            changes["subject_id"] = require_id("subject_id", changes["subject_id"])
        if "day_of_week" in changes:
            require_day(changes["day_of_week"], stable=True)
        for field in ("start_time", "end_time"):
            if field in changes:
                changes[field] = require_time(field, changes[field])

        current = self.get_stable_lesson(lesson_id)
        if not changes:
            return current

        day = changes.get("day_of_week", current.day_of_week)
        start = changes.get("start_time", current.start_time)
        end = changes.get("end_time", current.end_time)
        require_time_range(start, end)

        if "subject_id" in changes:
            self.subject_store.get_subject(changes["subject_id"])
        self._check_overlap(current.class_id, day, start, end, exclude_id=current.id)

        updated = self.stable_store.update_stable(current.id, changes)
        logger.info(f"Stammstunde geändert: {current.id} ({', '.join(sorted(changes))})")
        return updated

    def delete_stable_lesson(self, lesson_id: str) -> None:
        """Löscht bedingungslos; Wochenstunden mit Verweis darauf verwaisen."""
        lesson_id = require_id("lesson_id", lesson_id)
        self.stable_store.delete_stable(lesson_id)
        logger.info(f"Stammstunde gelöscht: {lesson_id}")

    # ─── Intern ───

    def _check_overlap(self, class_id: str, day: int, start: time, end: time,
                       exclude_id: Optional[str] = None) -> None:
        same_day = [
            l for l in self.stable_store.list_stable(class_id) if l.day_of_week == day
        ]
        conflict = self.resolver.find_conflict(start, end, same_day, exclude_id=exclude_id)
        if conflict is not None:
            raise SlotConflictError(conflict.id, day, conflict.start_time, conflict.end_time)
