"""Abgleich Stammplan ↔ Wochenplan: effektive Woche und Änderungsliste.

Ablauf für get_effective_week(class_id, week_start_date):
  1. Stammstunden der Klasse laden (alle Wochentage)
  2. Wochenstunden für den normalisierten Montag laden
  3. Wochenstunden nach stable_lesson_id indizieren
  4. Pro Stammstunde: Wochenstunde vorhanden → daraus ableiten und gegen die
     Stammstunde vergleichen; sonst Stammstunde unverändert übernehmen
  5. Zusatzstunden (ohne Stammstunde) ergänzen
  6. Nach Wochentag gruppieren und nach Beginn sortieren
"""

import logging
from collections import defaultdict
from datetime import date
from typing import Optional

from models.effective import ChangeSet, EffectiveLesson
from models.lesson import LessonStatus, StableLesson, WeekLesson
from models.subject import Subject
from models.timeslot import format_short_time, week_start
from storage.base import ClassStore, StableLessonStore, SubjectStore, WeekLessonStore
from storage.errors import NotFoundError
from timetable.stable import group_by_day
from timetable.validation import require_date, require_id

logger = logging.getLogger(__name__)


def _subject_name(subject_id: str, subjects: dict[str, Subject]) -> str:
    subject = subjects.get(subject_id)
    return subject.name if subject else subject_id


def _teacher_name(subject_id: str, subjects: dict[str, Subject]) -> Optional[str]:
    subject = subjects.get(subject_id)
    return subject.teacher_name if subject else None


def compute_changes(
    stable: StableLesson,
    override: WeekLesson,
    subjects: dict[str, Subject],
) -> ChangeSet:
    """Vergleicht eine Wochenstunde mit ihrer Stammstunde.

    Enthält nur Felder, die sich tatsächlich unterscheiden. Der Status
    (entfallen/Vertretung) ist kein Feld der Änderungsliste, sondern steht
    direkt an der Stunde.
    """
    changes: ChangeSet = {}

    if override.subject_id != stable.subject_id:
        changes["subject"] = (
            _subject_name(stable.subject_id, subjects),
            _subject_name(override.subject_id, subjects),
        )
    # Zusätzlich zu Fach, Zeit, Raum und Lehrkraft: verschobene Stunden
    # zeigen den Tageswechsel
    if override.day_of_week != stable.day_of_week:
        changes["day_of_week"] = (str(stable.day_of_week), str(override.day_of_week))
    if override.start_time != stable.start_time:
        changes["start_time"] = (
            format_short_time(stable.start_time), format_short_time(override.start_time)
        )
    if override.end_time != stable.end_time:
        changes["end_time"] = (
            format_short_time(stable.end_time), format_short_time(override.end_time)
        )
    # None und "" gelten als "kein Raum"
    if (override.room or "") != (stable.room or ""):
        changes["room"] = (stable.room, override.room)

    stable_teacher = _teacher_name(stable.subject_id, subjects)
    current_teacher = _teacher_name(override.subject_id, subjects)
    if stable_teacher != current_teacher:
        changes["teacher"] = (stable_teacher, current_teacher)

    return changes


def effective_from_stable(
    stable: StableLesson,
    subjects: dict[str, Subject],
    week_start_date: Optional[date] = None,
) -> EffectiveLesson:
    subject = subjects.get(stable.subject_id)
    return EffectiveLesson(
        class_id=stable.class_id,
        day_of_week=stable.day_of_week,
        start_time=stable.start_time,
        end_time=stable.end_time,
        subject_id=stable.subject_id,
        subject_name=subject.name if subject else None,
        subject_color=subject.color if subject else None,
        teacher_name=subject.teacher_name if subject else None,
        room=stable.room,
        week_start_date=week_start_date,
        stable_lesson_id=stable.id,
        is_stable=True,
    )


def effective_from_override(
    override: WeekLesson,
    subjects: dict[str, Subject],
    baseline: Optional[StableLesson] = None,
) -> EffectiveLesson:
    """Ohne ``baseline`` (Zusatzstunde oder verwaiste Referenz) gibt es nichts zu vergleichen."""
    subject = subjects.get(override.subject_id)
    if baseline is not None:
        change_set = compute_changes(baseline, override, subjects)
        modified = bool(change_set) or override.status != LessonStatus.NORMAL
    else:
        change_set = {}
        modified = False
    return EffectiveLesson(
        class_id=override.class_id,
        day_of_week=override.day_of_week,
        start_time=override.start_time,
        end_time=override.end_time,
        subject_id=override.subject_id,
        subject_name=subject.name if subject else None,
        subject_color=subject.color if subject else None,
        teacher_name=subject.teacher_name if subject else None,
        room=override.room,
        status=override.status,
        substitute_teacher_name=override.substitute_teacher_name,
        note=override.note,
        week_start_date=override.week_start_date,
        stable_lesson_id=baseline.id if baseline is not None else None,
        week_lesson_id=override.id,
        is_stable=False,
        modified_from_stable=modified,
        change_set=change_set,
    )


def merge_week(
    stable_lessons: list[StableLesson],
    overrides: list[WeekLesson],
    subjects: dict[str, Subject],
    week_start_date: date,
) -> dict[int, list[EffectiveLesson]]:
    """Reine Abgleichsfunktion ohne Speicherzugriff (Schritte 3–6)."""
    by_stable: dict[str, list[WeekLesson]] = defaultdict(list)
    unlinked: list[WeekLesson] = []
    for o in overrides:
        if o.stable_lesson_id is None:
            unlinked.append(o)
        else:
            by_stable[o.stable_lesson_id].append(o)

    effective: list[EffectiveLesson] = []
    stable_ids = set()
    for s in stable_lessons:
        stable_ids.add(s.id)
        candidates = by_stable.get(s.id)
        if not candidates:
            effective.append(effective_from_stable(s, subjects, week_start_date))
            continue
        if len(candidates) > 1:
            # Sollte durch die Eindeutigkeit im Store nie auftreten
            logger.warning(
                f"{len(candidates)} Wochenstunden für Stammstunde {s.id} in Woche "
                f"{week_start_date}: neueste gewinnt"
            )
        override = max(candidates, key=lambda o: o.created_at)
        effective.append(effective_from_override(override, subjects, baseline=s))

    # Verwaiste Referenzen: Stammstunde gelöscht → wie Zusatzstunde behandeln
    for stable_id, candidates in by_stable.items():
        if stable_id in stable_ids:
            continue
        logger.debug(f"Stammstunde {stable_id} existiert nicht mehr; {len(candidates)} Wochenstunde(n) ohne Basis")
        unlinked.extend(candidates)

    for o in unlinked:
        effective.append(effective_from_override(o, subjects, baseline=None))

    return group_by_day(effective)


class ReconciliationEngine:
    """Erzeugt die effektive Woche einer Klasse aus Stammplan und Wochenstunden."""

    def __init__(
        self,
        stable_store: StableLessonStore,
        week_store: WeekLessonStore,
        class_store: ClassStore,
        subject_store: SubjectStore,
    ) -> None:
        self.stable_store = stable_store
        self.week_store = week_store
        self.class_store = class_store
        self.subject_store = subject_store

    def _subjects(self) -> dict[str, Subject]:
        return {s.id: s for s in self.subject_store.list_subjects()}

    def get_effective_week(
        self, class_id: str, week_start_date=None
    ) -> dict[int, list[EffectiveLesson]]:
        """Effektive Woche {Wochentag: [EffectiveLesson]}.

        Ohne ``week_start_date`` wird die Stammplan-Ansicht geliefert.
        Ein beliebiges Datum der Woche genügt; es wird auf den Montag normalisiert.
        """
        if week_start_date is None:
            return self.get_stable_view(class_id)

        class_id = require_id("class_id", class_id)
        monday = week_start(require_date("week_start_date", week_start_date))
        self.class_store.get_class(class_id)

        stable_lessons = self.stable_store.list_stable(class_id)
        overrides = self.week_store.list_week(class_id, monday)
        logger.debug(
            f"Abgleich {class_id} / {monday}: {len(stable_lessons)} Stamm-, "
            f"{len(overrides)} Wochenstunden"
        )
        return merge_week(stable_lessons, overrides, self._subjects(), monday)

    def get_stable_view(self, class_id: str) -> dict[int, list[EffectiveLesson]]:
        """Stammplan als EffectiveLesson-Liste (alle is_stable=True)."""
        class_id = require_id("class_id", class_id)
        self.class_store.get_class(class_id)
        subjects = self._subjects()
        return group_by_day(
            effective_from_stable(s, subjects) for s in self.stable_store.list_stable(class_id)
        )

    def get_lesson_changes(self, week_lesson_id: str) -> ChangeSet:
        """Änderungsliste einer einzelnen Wochenstunde gegenüber ihrer Stammstunde.

        Leer für Zusatzstunden und für Wochenstunden, deren Stammstunde gelöscht wurde.
        """
        override = self.week_store.get_week(require_id("week_lesson_id", week_lesson_id))
        if override is None:
            raise NotFoundError("week_lesson", week_lesson_id)
        if override.stable_lesson_id is None:
            return {}
        baseline = self.stable_store.get_stable(override.stable_lesson_id)
        if baseline is None:
            return {}
        return compute_changes(baseline, override, self._subjects())
