"""Abgeleitete Anzeige-Stunde (EffectiveLesson), wird nie gespeichert.

Ergebnis des Abgleichs Stammstunde + Wochenstunde für eine konkrete Woche.
Hat keine eigene ID; nur die Quell-IDs stable_lesson_id / week_lesson_id.
"""

from dataclasses import dataclass, field
from datetime import date, time
from typing import Optional

from models.lesson import LessonStatus
from models.timeslot import TimeSlot, format_short_time, format_wall_time

# Feldname → (Wert im Stammplan, aktueller Wert)
ChangeSet = dict[str, tuple[Optional[str], Optional[str]]]


@dataclass(frozen=True)
class EffectiveLesson:
    """Eine Stunde, wie sie in einer bestimmten Woche tatsächlich angezeigt wird."""

    class_id: str
    day_of_week: int
    start_time: time
    end_time: time
    subject_id: str
    subject_name: Optional[str] = None
    subject_color: Optional[int] = None
    teacher_name: Optional[str] = None
    room: Optional[str] = None
    status: LessonStatus = LessonStatus.NORMAL
    substitute_teacher_name: Optional[str] = None
    note: Optional[str] = None
    week_start_date: Optional[date] = None    # None in der Stammplan-Ansicht
    stable_lesson_id: Optional[str] = None
    week_lesson_id: Optional[str] = None
    is_stable: bool = True
    modified_from_stable: bool = False
    change_set: ChangeSet = field(default_factory=dict)

    @property
    def source_ids(self) -> tuple[str, ...]:
        """Alle IDs, über die diese Stunde referenziert werden kann."""
        return tuple(i for i in (self.week_lesson_id, self.stable_lesson_id) if i)

    @property
    def is_cancelled(self) -> bool:
        return self.status == LessonStatus.CANCELLED

    @property
    def is_ad_hoc(self) -> bool:
        """Zusatzstunde der Woche ohne (noch existierende) Stammstunde."""
        return not self.is_stable and self.stable_lesson_id is None

    @property
    def display_teacher(self) -> Optional[str]:
        """Vertretungslehrkraft hat Vorrang vor der regulären Lehrkraft."""
        if self.status == LessonStatus.SUBSTITUTION and self.substitute_teacher_name:
            return self.substitute_teacher_name
        return self.teacher_name

    @property
    def slot(self) -> TimeSlot:
        return TimeSlot(self.day_of_week, self.start_time, self.end_time)

    @property
    def time_range(self) -> str:
        return f"{format_short_time(self.start_time)}–{format_short_time(self.end_time)}"

    def to_dict(self) -> dict:
        """Serialisiert die Stunde als Dictionary (für JSON-Ausgabe)."""
        return {
            "class_id": self.class_id,
            "day_of_week": self.day_of_week,
            "start_time": format_wall_time(self.start_time),
            "end_time": format_wall_time(self.end_time),
            "subject_id": self.subject_id,
            "subject_name": self.subject_name,
            "teacher_name": self.teacher_name,
            "room": self.room,
            "status": self.status.value,
            "substitute_teacher_name": self.substitute_teacher_name,
            "note": self.note,
            "week_start_date": (
                self.week_start_date.isoformat() if self.week_start_date else None
            ),
            "stable_lesson_id": self.stable_lesson_id,
            "week_lesson_id": self.week_lesson_id,
            "is_stable": self.is_stable,
            "modified_from_stable": self.modified_from_stable,
            "change_set": {k: list(v) for k, v in self.change_set.items()},
        }
