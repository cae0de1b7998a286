"""Demo-Daten für den Stundenplan-Abgleich.

Erzeugt Klassen, Fächer (mit Lehrkraft) und überschneidungsfreie Stammpläne
im Stundenraster der Konfiguration. Optional wird für eine Woche eine Reihe
typischer Abweichungen angelegt:

  1. Ausfall: eine Stunde entfällt
  2. Vertretung: eine Stunde mit Vertretungslehrkraft
  3. Raumwechsel: eine Stunde in einem anderen Raum
  4. Zusatzstunde: eine Stunde in einem freien Slot ohne Stammstunde
"""

import random
import uuid
from datetime import date
from typing import Optional

from config.defaults import SUBJECT_METADATA
from config.schema import AppConfig
from models.lesson import LessonStatus, StableLesson, WeekLesson
from models.school_class import SchoolClass
from models.subject import Subject
from models.timeslot import parse_wall_time, week_start
from models.timetable_data import TimetableData

# ─── Namens-Listen ────────────────────────────────────────────────────────────

_FIRST_NAMES = [
    "Anna", "Birgit", "Christian", "Dieter", "Eva", "Franz", "Gabi",
    "Jürgen", "Kathrin", "Lena", "Markus", "Peter", "Sandra", "Thomas",
]

_LAST_NAMES = [
    "Müller", "Schmidt", "Schneider", "Fischer", "Weber", "Meyer",
    "Wagner", "Becker", "Schulz", "Hoffmann", "Schäfer", "Koch",
    "Bauer", "Richter", "Klein", "Wolf", "Schröder", "Neumann",
]

_DEFAULT_CLASSES = ["5a", "5b", "6a"]


def _new_id() -> str:
    return str(uuid.uuid4())


class DemoDataGenerator:
    """Generiert einen vollständigen Demo-Datensatz auf Basis der AppConfig."""

    def __init__(
        self,
        config: AppConfig,
        seed: Optional[int] = None,
        class_names: Optional[list[str]] = None,
    ) -> None:
        self.config = config
        self.rng = random.Random(seed)
        self.class_names = class_names or list(_DEFAULT_CLASSES)

    # ─── Klassen & Fächer ─────────────────────────────────────────────────────

    def _teacher_name(self) -> str:
        return f"{self.rng.choice(_FIRST_NAMES)} {self.rng.choice(_LAST_NAMES)}"

    def _generate_classes(self) -> list[SchoolClass]:
        return [SchoolClass(id=name, name=name) for name in self.class_names]

    def _generate_subjects(self, school_class: SchoolClass) -> list[Subject]:
        """Ein Fach pro Klasse und Fachname, jeweils mit eigener Lehrkraft."""
        return [
            Subject(
                id=f"{school_class.id}-{meta['short']}",
                name=name,
                color=meta["color"],
                teacher_name=self._teacher_name(),
            )
            for name, meta in SUBJECT_METADATA.items()
        ]

    # ─── Stammplan ────────────────────────────────────────────────────────────

    def _generate_stable(
        self, school_class: SchoolClass, subjects: list[Subject]
    ) -> list[StableLesson]:
        """Verteilt die Wochenstunden der Fächer auf freie Rasterstunden.

        Jede (Tag, Rasterstunde) wird höchstens einmal belegt, daher ist der
        Stammplan per Konstruktion überschneidungsfrei. Die frühen Stunden
        werden bevorzugt, damit keine großen Lücken entstehen.
        """
        grid = sorted(self.config.time_grid.lesson_slots, key=lambda s: s.slot_number)
        days = [d for d in self.config.time_grid.school_days if d <= 5]

        demand: list[Subject] = []
        by_name = {s.name: s for s in subjects}
        for name, meta in SUBJECT_METADATA.items():
            demand.extend([by_name[name]] * meta["hours"])
        self.rng.shuffle(demand)

        # Slots tageweise auffüllen: erst Stunde 1 an allen Tagen, dann Stunde 2, …
        free = [(day, slot) for slot in grid for day in days]
        lessons: list[StableLesson] = []
        for subject, (day, slot) in zip(demand, free):
            lessons.append(StableLesson(
                id=_new_id(),
                subject_id=subject.id,
                class_id=school_class.id,
                day_of_week=day,
                start_time=parse_wall_time(slot.start_time),
                end_time=parse_wall_time(slot.end_time),
                room=f"R{self.rng.randint(100, 320)}",
            ))
        return lessons

    # ─── Woche mit Abweichungen ───────────────────────────────────────────────

    def _generate_week_changes(
        self,
        school_class: SchoolClass,
        stable: list[StableLesson],
        subjects: list[Subject],
        monday: date,
    ) -> list[WeekLesson]:
        if len(stable) < 3:
            return []
        cancelled, substituted, moved_room = self.rng.sample(stable, 3)
        changes = [
            self._override(cancelled, monday, status=LessonStatus.CANCELLED,
                           note="Lehrkraft erkrankt"),
            self._override(substituted, monday, status=LessonStatus.SUBSTITUTION,
                           substitute_teacher_name=self._teacher_name()),
            self._override(moved_room, monday, room=f"R{self.rng.randint(100, 320)}"),
        ]

        # Zusatzstunde in der ersten freien Rasterstunde
        used = {(l.day_of_week, l.start_time) for l in stable}
        for slot in sorted(self.config.time_grid.lesson_slots, key=lambda s: s.slot_number):
            start = parse_wall_time(slot.start_time)
            day = next(
                (d for d in self.config.time_grid.school_days if (d, start) not in used),
                None,
            )
            if day is not None:
                changes.append(WeekLesson(
                    id=_new_id(),
                    subject_id=self.rng.choice(subjects).id,
                    class_id=school_class.id,
                    week_start_date=monday,
                    day_of_week=day,
                    start_time=start,
                    end_time=parse_wall_time(slot.end_time),
                    note="Förderstunde",
                ))
                break
        return changes

    def _override(self, stable: StableLesson, monday: date, **fields) -> WeekLesson:
        values = dict(
            id=_new_id(),
            stable_lesson_id=stable.id,
            subject_id=stable.subject_id,
            class_id=stable.class_id,
            week_start_date=monday,
            day_of_week=stable.day_of_week,
            start_time=stable.start_time,
            end_time=stable.end_time,
            room=stable.room,
        )
        values.update(fields)
        return WeekLesson(**values)

    # ─── Gesamt ───────────────────────────────────────────────────────────────

    def generate(self, week_start_date: Optional[date] = None) -> TimetableData:
        """Erzeugt den Datensatz; mit ``week_start_date`` inkl. Demo-Woche."""
        classes = self._generate_classes()
        subjects: list[Subject] = []
        stable_lessons: list[StableLesson] = []
        week_lessons: list[WeekLesson] = []

        for school_class in classes:
            class_subjects = self._generate_subjects(school_class)
            class_stable = self._generate_stable(school_class, class_subjects)
            subjects.extend(class_subjects)
            stable_lessons.extend(class_stable)
            if week_start_date is not None:
                week_lessons.extend(self._generate_week_changes(
                    school_class, class_stable, class_subjects, week_start(week_start_date)
                ))

        return TimetableData(
            subjects=subjects,
            classes=classes,
            stable_lessons=stable_lessons,
            week_lessons=week_lessons,
        )

    # ─── Ausgabe ──────────────────────────────────────────────────────────────

    def print_summary(self, data: TimetableData) -> None:
        """Gibt eine Rich-Tabelle mit Übersicht der erzeugten Daten aus."""
        from rich.console import Console
        from rich.table import Table
        from rich import box

        console = Console()
        table = Table(title="Erzeugte Demo-Daten", box=box.ROUNDED)
        table.add_column("Kategorie", style="bold cyan")
        table.add_column("Anzahl", justify="right")
        table.add_column("Details")

        weeks = {w.week_start_date for w in data.week_lessons}
        table.add_row("Klassen", str(len(data.classes)),
                      ", ".join(c.name for c in data.classes))
        table.add_row("Fächer", str(len(data.subjects)),
                      f"{len(SUBJECT_METADATA)} je Klasse")
        table.add_row("Stammstunden", str(len(data.stable_lessons)), "")
        table.add_row("Wochenstunden", str(len(data.week_lessons)),
                      ", ".join(sorted(w.isoformat() for w in weeks)))

        console.print(table)
