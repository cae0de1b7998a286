"""In-Memory-Implementierung aller Stores (Tests, Demo, Basis des JSON-Speichers)."""

import logging
import uuid
from datetime import date, time
from typing import Any, Optional

from models.lesson import StableLesson, WeekLesson
from models.school_class import SchoolClass
from models.subject import Subject
from models.timetable_data import TimetableData
from models.timeslot import week_start
from storage.base import ClassStore, StableLessonStore, SubjectStore, WeekLessonStore
from storage.errors import DuplicateOverrideError, NotFoundError, StoreUnavailableError

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid.uuid4())


# Markiert "kein Eintrag" beim Schreiben und Zurückrollen
_ABSENT = object()


class InMemoryStore(ClassStore, SubjectStore, StableLessonStore, WeekLessonStore):
    """Hält Klassen, Fächer, Stamm- und Wochenstunden in Dictionaries.

    Setzt die Eindeutigkeit (Klasse, Woche, Stammstunde) wie eine
    Datenbank-Constraint durch.
    """

    def __init__(self, data: Optional[TimetableData] = None) -> None:
        self._classes: dict[str, SchoolClass] = {}
        self._subjects: dict[str, Subject] = {}
        self._stable: dict[str, StableLesson] = {}
        self._week: dict[str, WeekLesson] = {}
        if data is not None:
            self.load_data(data)

    # ─── Datensatz ───

    def load_data(self, data: TimetableData) -> None:
        """Ersetzt den gesamten Inhalt durch ``data``."""
        self._classes = {c.id: c for c in data.classes}
        self._subjects = {s.id: s for s in data.subjects}
        self._stable = {l.id: l for l in data.stable_lessons}
        self._week = {l.id: l for l in data.week_lessons}

    def to_data(self) -> TimetableData:
        return TimetableData(
            classes=list(self._classes.values()),
            subjects=list(self._subjects.values()),
            stable_lessons=list(self._stable.values()),
            week_lessons=list(self._week.values()),
        )

    def add_class(self, school_class: SchoolClass) -> SchoolClass:
        self._commit(self._classes, school_class.id, school_class)
        return school_class

    def add_subject(self, subject: Subject) -> Subject:
        self._commit(self._subjects, subject.id, subject)
        return subject

    def _changed(self) -> None:
        """Hook nach jedem Schreibvorgang (JsonFileStore speichert hier)."""

    def _commit(self, table: dict, key: str, value: Any) -> None:
        """Setzt (oder entfernt, value=_ABSENT) einen Eintrag und speichert.

        Scheitert das Speichern, wird der vorherige Eintrag wiederhergestellt:
        ein fehlgeschlagener Schreibvorgang hinterlässt keine Spuren.
        """
        previous = table.get(key, _ABSENT)
        self._put(table, key, value)
        try:
            self._changed()
        except StoreUnavailableError:
            self._put(table, key, previous)
            logger.warning(f"Speichern fehlgeschlagen, Änderung an {key} zurückgenommen")
            raise

    @staticmethod
    def _put(table: dict, key: str, value: Any) -> None:
        if value is _ABSENT:
            table.pop(key, None)
        else:
            table[key] = value

    # ─── Klassen / Fächer ───

    def get_class(self, class_id: str) -> SchoolClass:
        try:
            return self._classes[class_id]
        except KeyError:
            raise NotFoundError("class", class_id) from None

    def list_classes(self) -> list[SchoolClass]:
        return sorted(self._classes.values(), key=lambda c: c.name)

    def get_subject(self, subject_id: str) -> Subject:
        try:
            return self._subjects[subject_id]
        except KeyError:
            raise NotFoundError("subject", subject_id) from None

    def list_subjects(self) -> list[Subject]:
        return sorted(self._subjects.values(), key=lambda s: s.name)

    # ─── Stammstunden ───

    def list_stable(self, class_id: str) -> list[StableLesson]:
        return [l for l in self._stable.values() if l.class_id == class_id]

    def get_stable(self, lesson_id: str) -> Optional[StableLesson]:
        return self._stable.get(lesson_id)

    def create_stable(
        self,
        class_id: str,
        subject_id: str,
        day_of_week: int,
        start_time: time,
        end_time: time,
        room: Optional[str] = None,
    ) -> StableLesson:
        lesson = StableLesson(
            id=_new_id(), subject_id=subject_id, class_id=class_id,
            day_of_week=day_of_week, start_time=start_time, end_time=end_time,
            room=room,
        )
        self._commit(self._stable, lesson.id, lesson)
        return lesson

    def update_stable(self, lesson_id: str, changes: dict[str, Any]) -> StableLesson:
        current = self._stable.get(lesson_id)
        if current is None:
            raise NotFoundError("stable_lesson", lesson_id)
        updated = StableLesson.model_validate({**current.model_dump(), **changes})
        self._commit(self._stable, lesson_id, updated)
        return updated

    def delete_stable(self, lesson_id: str) -> None:
        # Wochenstunden behalten ihre (dann verwaiste) stable_lesson_id
        if lesson_id not in self._stable:
            raise NotFoundError("stable_lesson", lesson_id)
        self._commit(self._stable, lesson_id, _ABSENT)

    # ─── Wochenstunden ───

    def list_week(self, class_id: str, week_start_date: date) -> list[WeekLesson]:
        monday = week_start(week_start_date)
        return [
            l for l in self._week.values()
            if l.class_id == class_id and l.week_start_date == monday
        ]

    def get_week(self, lesson_id: str) -> Optional[WeekLesson]:
        return self._week.get(lesson_id)

    def _find_override(self, class_id: str, monday: date,
                       stable_lesson_id: str) -> Optional[WeekLesson]:
        return next(
            (l for l in self._week.values()
             if l.class_id == class_id
             and l.week_start_date == monday
             and l.stable_lesson_id == stable_lesson_id),
            None,
        )

    def create_week(
        self,
        class_id: str,
        week_start_date: date,
        subject_id: str,
        day_of_week: int,
        start_time: time,
        end_time: time,
        room: Optional[str] = None,
        stable_lesson_id: Optional[str] = None,
        **extra: Any,
    ) -> WeekLesson:
        monday = week_start(week_start_date)
        if stable_lesson_id is not None:
            existing = self._find_override(class_id, monday, stable_lesson_id)
            if existing is not None:
                raise DuplicateOverrideError(class_id, monday, stable_lesson_id, existing.id)
        lesson = WeekLesson(
            id=_new_id(), stable_lesson_id=stable_lesson_id, subject_id=subject_id,
            class_id=class_id, week_start_date=monday, day_of_week=day_of_week,
            start_time=start_time, end_time=end_time, room=room, **extra,
        )
        self._commit(self._week, lesson.id, lesson)
        return lesson

    def update_week(self, lesson_id: str, changes: dict[str, Any]) -> WeekLesson:
        current = self._week.get(lesson_id)
        if current is None:
            raise NotFoundError("week_lesson", lesson_id)
        updated = WeekLesson.model_validate({**current.model_dump(), **changes})
        self._commit(self._week, lesson_id, updated)
        return updated

    def delete_week(self, lesson_id: str) -> None:
        if lesson_id not in self._week:
            raise NotFoundError("week_lesson", lesson_id)
        self._commit(self._week, lesson_id, _ABSENT)

    def copy_from_stable(self, class_id: str, week_start_date: date) -> list[WeekLesson]:
        monday = week_start(week_start_date)
        created = 0
        for stable in self.list_stable(class_id):
            # check-then-insert: bereits kopierte Stunden werden übersprungen
            if self._find_override(class_id, monday, stable.id) is not None:
                continue
            self.create_week(
                class_id=class_id,
                week_start_date=monday,
                subject_id=stable.subject_id,
                day_of_week=stable.day_of_week,
                start_time=stable.start_time,
                end_time=stable.end_time,
                room=stable.room,
                stable_lesson_id=stable.id,
            )
            created += 1
        logger.debug(f"copy_from_stable {class_id} {monday}: {created} neu angelegt")
        return self.list_week(class_id, monday)
