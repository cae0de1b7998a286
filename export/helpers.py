"""Gemeinsame Hilfsfunktionen für Terminal- und Excel-Export."""

from dataclasses import dataclass, field
from datetime import date, time
from typing import Optional

from config.schema import AppConfig
from models.effective import EffectiveLesson
from models.lesson import LessonStatus
from models.timeslot import format_short_time, parse_wall_time

# ─── Farbpalette (RRGGBB, ohne #) ─────────────────────────────────────────────

COLORS: dict[str, str] = {
    "normal":       "FFFFFF",
    "modified":     "FFF2B3",
    "cancelled":    "FF9999",
    "substitution": "B3D4FF",
    "ad_hoc":       "B3FFB3",
    "free":         "F5F5F5",
    "header":       "4472C4",
}

# Rich-Stile für die Terminal-Anzeige
RICH_STYLES: dict[str, str] = {
    "normal":       "",
    "modified":     "yellow",
    "cancelled":    "red strike",
    "substitution": "cyan",
    "ad_hoc":       "green",
}


def hex_to_rgb(hex_color: str) -> tuple[int, int, int]:
    """Wandelt RRGGBB-String in (r, g, b)-Tupel um."""
    h = hex_color.lstrip("#")
    return int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)


def today_str() -> str:
    """Gibt das heutige Datum als DD.MM.YYYY zurück."""
    return date.today().strftime("%d.%m.%Y")


def week_label(monday: Optional[date]) -> str:
    """"KW 42 (13.10.2025 – 19.10.2025)" bzw. "Stammplan" ohne Datum."""
    if monday is None:
        return "Stammplan"
    sunday = date.fromordinal(monday.toordinal() + 6)
    return (
        f"KW {monday.isocalendar()[1]} "
        f"({monday.strftime('%d.%m.%Y')} – {sunday.strftime('%d.%m.%Y')})"
    )


# ─── Status-Kategorie ─────────────────────────────────────────────────────────

def lesson_category(lesson: EffectiveLesson) -> str:
    """Einordnung für Farbe/Stil: cancelled, substitution, ad_hoc, modified, normal."""
    if lesson.status == LessonStatus.CANCELLED:
        return "cancelled"
    if lesson.status == LessonStatus.SUBSTITUTION:
        return "substitution"
    if lesson.is_ad_hoc:
        return "ad_hoc"
    if lesson.modified_from_stable:
        return "modified"
    return "normal"


# ─── Zeitraster-Zeilen ────────────────────────────────────────────────────────

@dataclass
class GridRow:
    """Eine Tabellenzeile: Rasterstunde oder Stunde außerhalb des Rasters."""

    label: str                 # "1", "2", ... oder "*" außerhalb des Rasters
    start: time
    end: time
    cells: dict[int, list[EffectiveLesson]] = field(default_factory=dict)

    @property
    def time_label(self) -> str:
        return f"{format_short_time(self.start)}–{format_short_time(self.end)}"


def build_week_rows(
    week: dict[int, list[EffectiveLesson]], config: AppConfig
) -> list[GridRow]:
    """Ordnet die Stunden einer Woche den Zeilen des Stundenrasters zu.

    Eine Stunde landet in der Rasterzeile, in der ihr Beginn liegt.
    Stunden, deren Beginn in keine Rasterstunde fällt, bekommen eine
    eigene Zeile mit ihrer tatsächlichen Uhrzeit.
    """
    rows = [
        GridRow(
            label=str(s.slot_number),
            start=parse_wall_time(s.start_time),
            end=parse_wall_time(s.end_time),
        )
        for s in sorted(config.time_grid.lesson_slots, key=lambda s: s.slot_number)
    ]
    extra: dict[tuple[time, time], GridRow] = {}

    for day, lessons in week.items():
        for lesson in lessons:
            row = next((r for r in rows if r.start <= lesson.start_time < r.end), None)
            if row is None:
                key = (lesson.start_time, lesson.end_time)
                row = extra.setdefault(
                    key, GridRow(label="*", start=lesson.start_time, end=lesson.end_time)
                )
            row.cells.setdefault(day, []).append(lesson)

    all_rows = rows + list(extra.values())
    all_rows.sort(key=lambda r: (r.start, r.end))
    return all_rows


def week_days(week: dict[int, list[EffectiveLesson]], config: AppConfig) -> list[int]:
    """Unterrichtstage plus belegte Zusatztage (z.B. Samstag mit Zusatzstunde)."""
    days = set(config.time_grid.school_days)
    days.update(d for d, lessons in week.items() if lessons)
    return sorted(days)


# ─── Zelleninhalt-Formatierung ────────────────────────────────────────────────

def format_lesson(lesson: EffectiveLesson) -> str:
    """Formatiert eine Stunde als Zelleninhalt.

    "Fach\\nLehrkraft Raum" plus Statuszeile bei Ausfall/Vertretung.
    """
    lines = [lesson.subject_name or lesson.subject_id]
    detail = " ".join(p for p in (lesson.display_teacher, lesson.room) if p)
    if detail:
        lines.append(detail)
    if lesson.status == LessonStatus.CANCELLED:
        lines.append("entfällt")
    elif lesson.status == LessonStatus.SUBSTITUTION:
        lines.append("Vertretung")
    if lesson.note:
        lines.append(lesson.note)
    return "\n".join(lines)


def format_lessons(lessons: list[EffectiveLesson]) -> str:
    """Mehrere Stunden für eine Zelle (getrennt durch ──)."""
    if not lessons:
        return ""
    return "\n──\n".join(format_lesson(l) for l in lessons)
