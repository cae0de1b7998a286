"""Eingabeprüfungen vor jedem Speicherzugriff."""

from datetime import date, datetime, time
from typing import Optional

from models.timeslot import ALL_DAYS, SCHOOL_DAYS, parse_wall_time
from storage.errors import LessonValidationError


def require_id(field: str, value: Optional[str]) -> str:
    if value is None or not str(value).strip():
        raise LessonValidationError(field, "darf nicht leer sein")
    return str(value).strip()


def require_day(value: int, stable: bool) -> int:
    """Stammstunden: 1..5 (Mo–Fr). Wochenstunden: 1..7 (ISO)."""
    allowed = SCHOOL_DAYS if stable else ALL_DAYS
    if isinstance(value, bool) or not isinstance(value, int) or value not in allowed:
        raise LessonValidationError(
            "day_of_week", f"muss zwischen {allowed[0]} und {allowed[-1]} liegen, ist {value!r}"
        )
    return value


def require_time(field: str, value) -> time:
    if value is None:
        raise LessonValidationError(field, "darf nicht leer sein")
    try:
        return parse_wall_time(value)
    except ValueError as e:
        raise LessonValidationError(field, str(e)) from e


def require_time_range(start: time, end: time) -> None:
    if end <= start:
        raise LessonValidationError("end_time", "muss nach start_time liegen")


def require_date(field: str, value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError as e:
            raise LessonValidationError(field, f"ungültiges Datum {value!r}") from e
    raise LessonValidationError(field, "Datum erforderlich")
