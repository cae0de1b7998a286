"""Zuordnung Zeitpunkt → Stunde und Überschneidungsprüfung.

Arbeitet mit allen Stundenarten (StableLesson, WeekLesson, EffectiveLesson):
benötigt werden nur ihr TimeSlot (``slot``) und die IDs der Stunde.
Pro Tag gibt es höchstens ~10 Stunden, daher genügt eine lineare Suche.
"""

from datetime import time
from typing import Iterable, Optional, Sequence

from models.effective import EffectiveLesson


def lesson_ids(lesson) -> tuple[str, ...]:
    """Alle IDs, unter denen eine Stunde angesprochen werden kann."""
    if isinstance(lesson, EffectiveLesson):
        return lesson.source_ids
    return (lesson.id,)


class ScheduleSlotResolver:
    """Findet belegte Slots und Überschneidungen innerhalb eines Tages."""

    def find_lesson_at(self, day_lessons: Sequence, t: time):
        """Stunde L mit L.start_time <= t < L.end_time, sonst None."""
        for lesson in day_lessons:
            if lesson.slot.contains(t):
                return lesson
        return None

    def find_conflict(
        self,
        start: time,
        end: time,
        existing: Iterable,
        exclude_id: Optional[str] = None,
    ):
        """Erste Stunde, die [start, end) überschneidet, sonst None.

        Direkt anschließende Stunden (Ende == Beginn) sind KEIN Konflikt.
        ``exclude_id`` blendet die Stunde aus, die gerade bearbeitet wird.
        """
        for lesson in existing:
            if exclude_id is not None and exclude_id in lesson_ids(lesson):
                continue
            if lesson.slot.overlaps(start, end):
                return lesson
        return None

    def has_conflict(
        self,
        start: time,
        end: time,
        existing: Iterable,
        exclude_id: Optional[str] = None,
    ) -> bool:
        return self.find_conflict(start, end, existing, exclude_id) is not None
