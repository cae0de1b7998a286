"""Fehlerklassen des Stundenplan-Kerns.

Alle Fehler tragen eine maschinenlesbare Art (``kind``) und die betroffenen IDs,
damit die Oberfläche eine passende Meldung erzeugen kann.
"""

from datetime import date, time
from typing import Optional

from models.timeslot import format_wall_time


class TimetableError(Exception):
    """Basisklasse aller Stundenplan-Fehler."""

    kind = "timetable_error"

    def to_dict(self) -> dict:
        """Strukturierte Fehlerdetails (ohne Anzeigetexte)."""
        return {"kind": self.kind}


class NotFoundError(TimetableError):
    """Klasse, Fach oder Stunde existiert nicht im Speicher."""

    kind = "not_found"

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity          # "class" / "subject" / "stable_lesson" / "week_lesson"
        self.entity_id = entity_id
        super().__init__(f"{entity} nicht gefunden: {entity_id}")

    def to_dict(self) -> dict:
        return {"kind": self.kind, "entity": self.entity, "id": self.entity_id}


class SlotConflictError(TimetableError):
    """Anlegen/Ändern würde eine bestehende Stunde derselben Woche überschneiden."""

    kind = "slot_conflict"

    def __init__(self, lesson_id: str, day_of_week: int,
                 start_time: time, end_time: time):
        self.lesson_id = lesson_id
        self.day_of_week = day_of_week
        self.start_time = start_time
        self.end_time = end_time
        super().__init__(
            f"Überschneidung mit Stunde {lesson_id} "
            f"(Tag {day_of_week}, {format_wall_time(start_time)}-{format_wall_time(end_time)})"
        )

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "lesson_id": self.lesson_id,
            "day_of_week": self.day_of_week,
            "start_time": format_wall_time(self.start_time),
            "end_time": format_wall_time(self.end_time),
        }


class LessonValidationError(TimetableError):
    """Ungültige Eingabe; wird vor jedem Speicherzugriff erkannt."""

    kind = "validation"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"{field}: {reason}")

    def to_dict(self) -> dict:
        return {"kind": self.kind, "field": self.field, "reason": self.reason}


class StoreUnavailableError(TimetableError):
    """Speicher nicht erreichbar oder Zeitüberschreitung. Wird nicht wiederholt."""

    kind = "store_unavailable"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Speicher nicht verfügbar: {reason}")

    def to_dict(self) -> dict:
        return {"kind": self.kind, "reason": self.reason}


class DuplicateOverrideError(TimetableError):
    """Für diese Stammstunde existiert in der Woche bereits eine Wochenstunde."""

    kind = "duplicate_override"

    def __init__(self, class_id: str, week_start_date: date,
                 stable_lesson_id: str, existing_id: Optional[str] = None):
        self.class_id = class_id
        self.week_start_date = week_start_date
        self.stable_lesson_id = stable_lesson_id
        self.existing_id = existing_id
        super().__init__(
            f"Stammstunde {stable_lesson_id} hat in Woche {week_start_date.isoformat()} "
            f"bereits eine Wochenstunde"
            + (f" ({existing_id})" if existing_id else "")
        )

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "class_id": self.class_id,
            "week_start_date": self.week_start_date.isoformat(),
            "stable_lesson_id": self.stable_lesson_id,
            "existing_id": self.existing_id,
        }
