"""Änderungsübersicht einer Woche gegenüber dem Stammplan.

Gibt strukturierte Unterschiede zurück, die als Rich-Tabelle oder JSON
ausgegeben werden können.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from models.effective import EffectiveLesson
from models.lesson import LessonStatus
from models.timeslot import DAY_NAMES


@dataclass
class LessonChange:
    """Eine vom Stammplan abweichende Stunde der Woche."""

    day_of_week: int
    time_range: str
    subject_name: str
    status: str
    week_lesson_id: Optional[str]
    stable_lesson_id: Optional[str]
    fields: dict[str, tuple[Optional[str], Optional[str]]] = field(default_factory=dict)
    substitute_teacher_name: Optional[str] = None
    note: Optional[str] = None

    def describe(self) -> str:
        """Einzeilige Beschreibung, z.B. "Mo 08:00–08:45 Mathematik: room 101 → 204"."""
        head = f"{DAY_NAMES.get(self.day_of_week, self.day_of_week)} {self.time_range} {self.subject_name}"
        parts = [f"{k} {old or '—'} → {new or '—'}" for k, (old, new) in self.fields.items()]
        if self.status == LessonStatus.CANCELLED.value:
            parts.insert(0, "entfällt")
        elif self.status == LessonStatus.SUBSTITUTION.value:
            parts.insert(0, f"Vertretung {self.substitute_teacher_name or ''}".strip())
        return head + (": " + ", ".join(parts) if parts else "")

    def to_dict(self) -> dict:
        return {
            "day_of_week": self.day_of_week,
            "time_range": self.time_range,
            "subject_name": self.subject_name,
            "status": self.status,
            "week_lesson_id": self.week_lesson_id,
            "stable_lesson_id": self.stable_lesson_id,
            "fields": {k: list(v) for k, v in self.fields.items()},
            "substitute_teacher_name": self.substitute_teacher_name,
            "note": self.note,
        }


@dataclass
class WeekDiff:
    """Alle Abweichungen einer Klasse in einer Woche."""

    class_id: str
    week_start_date: date
    modified: list[LessonChange] = field(default_factory=list)
    cancelled: list[LessonChange] = field(default_factory=list)
    substitutions: list[LessonChange] = field(default_factory=list)
    ad_hoc: list[LessonChange] = field(default_factory=list)

    def is_empty(self) -> bool:
        """Gibt True zurück wenn die Woche exakt dem Stammplan entspricht."""
        return not (self.modified or self.cancelled or self.substitutions or self.ad_hoc)

    def all_changes(self) -> list[LessonChange]:
        return sorted(
            self.modified + self.cancelled + self.substitutions + self.ad_hoc,
            key=lambda c: (c.day_of_week, c.time_range),
        )

    def to_dict(self) -> dict:
        """Serialisiert den Diff als Dictionary (für JSON-Ausgabe)."""
        return {
            "class_id": self.class_id,
            "week_start_date": self.week_start_date.isoformat(),
            "modified": [c.to_dict() for c in self.modified],
            "cancelled": [c.to_dict() for c in self.cancelled],
            "substitutions": [c.to_dict() for c in self.substitutions],
            "ad_hoc": [c.to_dict() for c in self.ad_hoc],
        }

    def to_json(self, indent: int = 2) -> str:
        """Gibt den Diff als JSON-String zurück."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)


def _to_change(lesson: EffectiveLesson) -> LessonChange:
    return LessonChange(
        day_of_week=lesson.day_of_week,
        time_range=lesson.time_range,
        subject_name=lesson.subject_name or lesson.subject_id,
        status=lesson.status.value,
        week_lesson_id=lesson.week_lesson_id,
        stable_lesson_id=lesson.stable_lesson_id,
        fields=dict(lesson.change_set),
        substitute_teacher_name=lesson.substitute_teacher_name,
        note=lesson.note,
    )


def diff_effective_week(
    class_id: str,
    week_start_date: date,
    week: dict[int, list[EffectiveLesson]],
) -> WeekDiff:
    """Ordnet die Stunden einer effektiven Woche in Änderungskategorien ein.

    - Zusatzstunden (ohne Stammstunde) → ad_hoc
    - entfallen → cancelled
    - Vertretung → substitutions
    - sonstige Abweichung in Fach/Zeit/Raum/Lehrkraft → modified

    Unveränderte Kopien des Stammplans tauchen nicht auf.
    """
    diff = WeekDiff(class_id=class_id, week_start_date=week_start_date)
    for day in sorted(week):
        for lesson in week[day]:
            if lesson.is_ad_hoc:
                diff.ad_hoc.append(_to_change(lesson))
            elif not lesson.modified_from_stable:
                continue
            elif lesson.status == LessonStatus.CANCELLED:
                diff.cancelled.append(_to_change(lesson))
            elif lesson.status == LessonStatus.SUBSTITUTION:
                diff.substitutions.append(_to_change(lesson))
            else:
                diff.modified.append(_to_change(lesson))
    return diff
