"""JSON-Dateispeicher: InMemoryStore, der nach jedem Schreibvorgang speichert.

Optional werden Wochentage im Format 0=Sonntag abgelegt (kompatibel zu
Backends mit Sonntag-basiertem Wochentag); intern gilt immer ISO 1=Mo..7=So.
"""

import json
import logging
import os
from pathlib import Path

from pydantic import ValidationError

from models.timetable_data import TimetableData
from models.timeslot import iso_to_sunday_zero, sunday_zero_to_iso
from storage.errors import StoreUnavailableError
from storage.memory import InMemoryStore

logger = logging.getLogger(__name__)

_LESSON_LISTS = ("stable_lessons", "week_lessons")


class JsonFileStore(InMemoryStore):
    """Persistiert den kompletten Datensatz als ein JSON-Dokument."""

    def __init__(self, path: Path, sunday_zero_days: bool = False) -> None:
        self.path = Path(path)
        self.sunday_zero_days = sunday_zero_days
        super().__init__()
        if self.path.exists():
            self.load_data(self._read())

    # ─── Lesen ───

    def _read(self) -> TimetableData:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except OSError as e:
            raise StoreUnavailableError(f"{self.path}: {e}") from e
        except json.JSONDecodeError as e:
            raise StoreUnavailableError(f"{self.path}: kein gültiges JSON ({e})") from e

        if self.sunday_zero_days:
            self._convert_days(raw, sunday_zero_to_iso)
        try:
            data = TimetableData.model_validate(raw)
        except ValidationError as e:
            raise StoreUnavailableError(f"{self.path}: Datensatz ungültig ({e})") from e
        logger.info(
            f"Datensatz geladen: {self.path} "
            f"({len(data.stable_lessons)} Stamm-, {len(data.week_lessons)} Wochenstunden)"
        )
        return data

    # ─── Schreiben ───

    def _changed(self) -> None:
        self.save()

    def save(self) -> None:
        """Schreibt den aktuellen Stand in die JSON-Datei.

        Erst in eine temporäre Datei daneben, dann per os.replace ausgetauscht:
        die bisherige Datei bleibt bis zum Austausch vollständig erhalten.
        """
        doc = self.to_data().to_document()
        if self.sunday_zero_days:
            self._convert_days(doc, iso_to_sunday_zero)
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(doc, f, indent=2, ensure_ascii=False)
            os.replace(tmp, self.path)
        except OSError as e:
            if tmp.exists():
                tmp.unlink()
            raise StoreUnavailableError(f"{self.path}: {e}") from e

    @staticmethod
    def _convert_days(doc: dict, convert) -> None:
        for key in _LESSON_LISTS:
            for row in doc.get(key, []):
                if "day_of_week" in row:
                    row["day_of_week"] = convert(row["day_of_week"])
