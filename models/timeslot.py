"""Zeit-Hilfen für das Wochenraster: Uhrzeiten, Wochenbeginn, Tageskonvertierung.

Uhrzeiten werden als Wanduhrzeit ohne Datum und ohne Zeitzone geführt
(``datetime.time``) und nach außen als "HH:MM:SS" ausgetauscht.
"""

from dataclasses import dataclass
from datetime import date, time, timedelta
from typing import Union

# ISO-Wochentage: 1=Montag .. 7=Sonntag
DAY_NAMES: dict[int, str] = {
    1: "Mo", 2: "Di", 3: "Mi", 4: "Do", 5: "Fr", 6: "Sa", 7: "So",
}

SCHOOL_DAYS: tuple[int, ...] = (1, 2, 3, 4, 5)
ALL_DAYS: tuple[int, ...] = (1, 2, 3, 4, 5, 6, 7)


def parse_wall_time(value: Union[str, time]) -> time:
    """Wandelt "HH:MM" oder "HH:MM:SS" in ein ``time``-Objekt um."""
    if isinstance(value, time):
        return value.replace(microsecond=0, tzinfo=None)
    parts = str(value).strip().split(":")
    if len(parts) not in (2, 3):
        raise ValueError(f"Ungültige Uhrzeit: {value!r} (erwartet HH:MM oder HH:MM:SS)")
    try:
        hour, minute = int(parts[0]), int(parts[1])
        second = int(parts[2]) if len(parts) == 3 else 0
        return time(hour, minute, second)
    except ValueError as e:
        raise ValueError(f"Ungültige Uhrzeit: {value!r}") from e


def format_wall_time(t: time) -> str:
    """Formatiert eine Uhrzeit im Austauschformat "HH:MM:SS"."""
    return t.strftime("%H:%M:%S")


def format_short_time(t: time) -> str:
    """Formatiert eine Uhrzeit für die Anzeige ("HH:MM")."""
    return t.strftime("%H:%M")


def add_minutes(t: time, minutes: int) -> time:
    """Uhrzeit plus Minuten; ein Ergebnis nach Mitternacht ist ungültig."""
    total = t.hour * 60 + t.minute + minutes
    if total >= 24 * 60:
        raise ValueError(f"{format_short_time(t)} + {minutes} min liegt nach Mitternacht")
    return time(total // 60, total % 60, t.second)


def week_start(d: date) -> date:
    """Gibt den Montag der Kalenderwoche zurück, in der ``d`` liegt.

    Deterministisch und idempotent: week_start(week_start(d)) == week_start(d).
    """
    return d - timedelta(days=d.isoweekday() - 1)


def iso_to_sunday_zero(day_of_week: int) -> int:
    """ISO-Wochentag (1=Mo..7=So) → Speicherformat mit 0=Sonntag."""
    return 0 if day_of_week == 7 else day_of_week


def sunday_zero_to_iso(db_day: int) -> int:
    """Speicherformat mit 0=Sonntag → ISO-Wochentag (1=Mo..7=So)."""
    return 7 if db_day == 0 else db_day


@dataclass(frozen=True)
class TimeSlot:
    """Ein belegtes Zeitintervall an einem Wochentag.

    Halboffenes Intervall [start, end). Immutable (frozen=True) damit es als
    Dict-Key / Set-Element nutzbar ist.
    """

    # Wochentag (ISO, 1=Montag .. 7=Sonntag)
    day: int
    start: time
    end: time

    def contains(self, t: time) -> bool:
        """True wenn ``t`` in [start, end) liegt."""
        return self.start <= t < self.end

    def overlaps(self, start: time, end: time) -> bool:
        """Überschneidung mit [start, end); direkt anschließende Stunden zählen nicht."""
        return self.start < end and self.end > start

    @property
    def day_name(self) -> str:
        """Abgekürzter Tagesname."""
        return DAY_NAMES.get(self.day, str(self.day))

    def __repr__(self) -> str:
        return f"TimeSlot({self.day_name}, {format_short_time(self.start)}-{format_short_time(self.end)})"

    def __str__(self) -> str:
        return f"{self.day_name} {format_short_time(self.start)}–{format_short_time(self.end)}"
