from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional

from models.timeslot import ALL_DAYS, parse_wall_time


# ─── ZEITRASTER (Anzeige & Eingabehilfe) ───

class LessonSlot(BaseModel):
    """Eine einzelne Unterrichtsstunde im Tagesraster."""
    # Laufende Nummer der Stunde, 1-basiert (1. Stunde, 2. Stunde, ...)
    slot_number: int
    # Beginn der Stunde im Format "HH:MM"
    start_time: str
    # Ende der Stunde im Format "HH:MM"
    end_time: str

    @field_validator("start_time", "end_time")
    @classmethod
    def _valid_time(cls, v: str) -> str:
        parse_wall_time(v)
        return v


class TimeGridConfig(BaseModel):
    """Standard-Stundenraster der Schule.

    Das Raster ist nur eine Vorlage für Eingabe und Export; Stunden dürfen
    auch außerhalb des Rasters liegen.
    """
    # Unterrichtstage (ISO, 1=Mo .. 7=So)
    school_days: list[int] = Field(
        default=[1, 2, 3, 4, 5],
        description="Unterrichtstage (ISO-Wochentage)")
    # Namen der Wochentage, Index 0 = Montag
    day_names: list[str] = Field(
        default=["Mo", "Di", "Mi", "Do", "Fr", "Sa", "So"],
        description="Namen der Wochentage (Mo zuerst)")
    # Alle Unterrichtsstunden des Tages mit Uhrzeiten
    lesson_slots: list[LessonSlot] = Field(
        description="Alle Unterrichtsstunden des Tages mit Uhrzeiten")
    # Standarddauer einer Stunde in Minuten (stable/week add ohne END)
    lesson_duration_minutes: int = Field(45, ge=5, le=240,
        description="Standarddauer einer Stunde in Minuten")

    @field_validator("school_days")
    @classmethod
    def _valid_days(cls, v: list[int]) -> list[int]:
        for d in v:
            if d not in ALL_DAYS:
                raise ValueError(f"Wochentag {d} ungültig (1=Mo .. 7=So)")
        return sorted(set(v))

    @model_validator(mode='after')
    def validate_slots(self):
        """Prüfe dass die Stunden aufsteigend nummeriert sind und sich nicht überschneiden."""
        previous = None
        for slot in sorted(self.lesson_slots, key=lambda s: s.slot_number):
            start = parse_wall_time(slot.start_time)
            end = parse_wall_time(slot.end_time)
            if end <= start:
                raise ValueError(
                    f"Stunde {slot.slot_number}: Ende {slot.end_time} liegt nicht nach Beginn")
            if previous is not None and start < previous:
                raise ValueError(
                    f"Stunde {slot.slot_number} beginnt vor dem Ende der vorherigen Stunde")
            previous = end
        return self

    def day_name(self, day_of_week: int) -> str:
        """Anzeigename für einen ISO-Wochentag."""
        idx = day_of_week - 1
        return self.day_names[idx] if 0 <= idx < len(self.day_names) else str(day_of_week)


# ─── SPEICHER ───

class StorageConfig(BaseModel):
    """Ablage des Datensatzes."""
    # Pfad zur JSON-Datei mit Klassen, Fächern, Stamm- und Wochenstunden
    data_path: str = Field("output/timetable.json",
        description="Pfad zur JSON-Datendatei")
    # Wochentage im Format 0=Sonntag ablegen (Kompatibilität zu externen Backends)
    sunday_zero_days: bool = Field(False,
        description="Wochentage als 0=So..6=Sa speichern")


# ─── LOGGING ───

class LoggingConfig(BaseModel):
    """Log-Ausgabe."""
    # Log-Level (DEBUG, INFO, WARNING, ERROR)
    level: str = Field("WARNING", description="Log-Level")
    # Optional: Log-Datei zusätzlich zur Konsole
    file: Optional[str] = None

    @field_validator("level")
    @classmethod
    def _valid_level(cls, v: str) -> str:
        v = v.upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unbekanntes Log-Level: {v}")
        return v


# ─── GESAMT-CONFIG ───

class AppConfig(BaseModel):
    """Gesamtkonfiguration der Anwendung."""
    # Name der Schule
    school_name: str = Field("Muster-Schule",
        description="Name der Schule")
    # Stundenraster mit Uhrzeiten
    time_grid: TimeGridConfig
    # Datenablage
    storage: StorageConfig = Field(default_factory=StorageConfig)
    # Log-Ausgabe
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
