"""TimetableData: vollständiger Datensatz eines Stundenplans (Pydantic v2).

Wird vom JSON-Dateispeicher als Dokument gelesen und geschrieben.
"""

import json
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel

from models.lesson import LessonStatus, StableLesson, WeekLesson
from models.school_class import SchoolClass
from models.subject import Subject


class TimetableData(BaseModel):
    """Fächer, Klassen, Stammstunden und Wochenstunden einer Schule."""

    subjects: list[Subject] = []
    classes: list[SchoolClass] = []
    stable_lessons: list[StableLesson] = []
    week_lessons: list[WeekLesson] = []
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None
    data_version: str = "1.0"

    # ─── Übersicht ───

    def summary(self) -> str:
        """Kurze Übersicht über den Datensatz."""
        weeks = {w.week_start_date for w in self.week_lessons}
        changed = sum(
            1 for w in self.week_lessons if w.status != LessonStatus.NORMAL
        )
        lines = [
            f"Klassen: {len(self.classes)}",
            f"Fächer: {len(self.subjects)}",
            f"Stammstunden: {len(self.stable_lessons)}",
            f"Wochenstunden: {len(self.week_lessons)} in {len(weeks)} Wochen"
            + (f" ({changed} entfallen/vertreten)" if changed else ""),
        ]
        return "\n".join(lines)

    # ─── Persistenz ────────────────────────────────────────────────────────

    def to_document(self) -> dict:
        """JSON-kompatibles Dictionary mit aktualisierten Zeitstempeln."""
        now = datetime.now(timezone.utc)
        updated = self.model_copy(update={
            "modified_at": now,
            "created_at": self.created_at or now,
        })
        return json.loads(updated.model_dump_json())

