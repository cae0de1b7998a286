"""Datenmodelle für Stammstunden und Wochenstunden (Pydantic v2).

Stammstunde (StableLesson): datumsunabhängige Vorlage, gilt jede Woche.
Wochenstunde (WeekLesson): gilt nur für genau eine Kalenderwoche und ersetzt
(stable_lesson_id gesetzt) oder ergänzt (stable_lesson_id None) den Stammplan.
"""

from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from models.timeslot import TimeSlot, format_short_time, parse_wall_time, week_start


class LessonStatus(str, Enum):
    NORMAL = "normal"
    CANCELLED = "cancelled"
    SUBSTITUTION = "substitution"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StableLesson(BaseModel):
    """Eine Stunde des Stammplans einer Klasse."""

    id: str
    subject_id: str
    class_id: str
    day_of_week: int          # 1=Mo .. 5=Fr
    start_time: time
    end_time: time
    room: Optional[str] = None

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _parse_time(cls, v):
        return parse_wall_time(v)

    @property
    def slot(self) -> TimeSlot:
        return TimeSlot(self.day_of_week, self.start_time, self.end_time)

    @property
    def time_range(self) -> str:
        return f"{format_short_time(self.start_time)}–{format_short_time(self.end_time)}"


class WeekLesson(BaseModel):
    """Wochenspezifische Stunde (Override) für (Klasse, Woche).

    stable_lesson_id ist eine schwache Referenz: die Stammstunde kann später
    gelöscht werden, dann gilt die Wochenstunde als "ohne Basis".
    """

    id: str
    stable_lesson_id: Optional[str] = None
    subject_id: str
    class_id: str
    week_start_date: date     # immer ein Montag
    day_of_week: int          # ISO 1=Mo .. 7=So
    start_time: time
    end_time: time
    room: Optional[str] = None
    status: LessonStatus = LessonStatus.NORMAL
    substitute_teacher_name: Optional[str] = None   # nur bei status=substitution
    note: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _parse_time(cls, v):
        return parse_wall_time(v)

    @field_validator("week_start_date")
    @classmethod
    def _normalize_week(cls, v: date) -> date:
        return week_start(v)

    @property
    def is_ad_hoc(self) -> bool:
        """True für Zusatzstunden ohne Bezug zum Stammplan."""
        return self.stable_lesson_id is None

    @property
    def slot(self) -> TimeSlot:
        return TimeSlot(self.day_of_week, self.start_time, self.end_time)

    @property
    def time_range(self) -> str:
        return f"{format_short_time(self.start_time)}–{format_short_time(self.end_time)}"
