"""Konsistenzprüfung eines kompletten Datensatzes.

Prüft gespeicherte Daten, die an den Diensten vorbei entstanden sein können
(Import, Handbearbeitung der JSON-Datei, ältere Versionen), als Sicherheitsnetz
unabhängig von den Prüfungen beim Anlegen und Ändern.
"""

from collections import defaultdict
from typing import Literal

from pydantic import BaseModel

from models.lesson import LessonStatus
from models.timeslot import DAY_NAMES, SCHOOL_DAYS, ALL_DAYS
from models.timetable_data import TimetableData
from timetable.reconciliation import merge_week
from timetable.slots import ScheduleSlotResolver


class ValidationViolation(BaseModel):
    """Eine einzelne Inkonsistenz."""

    severity: Literal["error", "warning"]
    check: str           # z.B. "stable_overlap"
    description: str
    entity: str          # lesson_id / class_id


class ValidationReport(BaseModel):
    """Ergebnis der Datensatz-Prüfung."""

    violations: list[ValidationViolation]
    is_valid: bool       # True wenn keine Errors (Warnings ok)

    @property
    def errors(self) -> list[ValidationViolation]:
        return [v for v in self.violations if v.severity == "error"]

    @property
    def warnings(self) -> list[ValidationViolation]:
        return [v for v in self.violations if v.severity == "warning"]

    def print_rich(self) -> None:
        """Gibt den Report formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        status = (
            "[bold green]✓ KONSISTENT[/bold green]"
            if self.is_valid
            else "[bold red]✗ FEHLER GEFUNDEN[/bold red]"
        )
        lines = [status, f"Fehler: {len(self.errors)} | Warnungen: {len(self.warnings)}"]
        console.print(Panel("\n".join(lines), title="Datensatz-Prüfung", border_style="cyan"))

        if not self.violations:
            console.print("[dim]Keine Auffälligkeiten gefunden.[/dim]")
            return

        table = Table(box=box.ROUNDED, show_lines=True)
        table.add_column("Typ", width=8)
        table.add_column("Prüfung", width=26)
        table.add_column("Entität", width=14)
        table.add_column("Beschreibung")

        for v in self.violations:
            color = "red" if v.severity == "error" else "yellow"
            table.add_row(
                f"[{color}]{v.severity.upper()}[/{color}]",
                v.check,
                v.entity,
                v.description,
            )
        console.print(table)


class TimetableValidator:
    """Prüft einen TimetableData-Datensatz auf Inkonsistenzen."""

    def __init__(self) -> None:
        self.resolver = ScheduleSlotResolver()

    def validate(self, data: TimetableData) -> ValidationReport:
        """Führt alle Checks durch und gibt einen ValidationReport zurück."""
        violations: list[ValidationViolation] = []

        violations.extend(self._check_references(data))
        violations.extend(self._check_time_ranges(data))
        violations.extend(self._check_weekdays(data))
        violations.extend(self._check_stable_overlaps(data))
        violations.extend(self._check_duplicate_overrides(data))
        violations.extend(self._check_dangling_references(data))
        violations.extend(self._check_substitutes(data))
        violations.extend(self._check_week_overlaps(data))

        has_errors = any(v.severity == "error" for v in violations)
        return ValidationReport(violations=violations, is_valid=not has_errors)

    # ── Einzelne Prüfungen ────────────────────────────────────────────────────

    def _check_references(self, data: TimetableData) -> list[ValidationViolation]:
        """Klasse und Fach jeder Stunde müssen existieren."""
        violations: list[ValidationViolation] = []
        class_ids = {c.id for c in data.classes}
        subject_ids = {s.id for s in data.subjects}

        for lesson in [*data.stable_lessons, *data.week_lessons]:
            if lesson.class_id not in class_ids:
                violations.append(ValidationViolation(
                    severity="error",
                    check="unknown_class",
                    entity=lesson.id,
                    description=f"Klasse '{lesson.class_id}' existiert nicht.",
                ))
            if lesson.subject_id not in subject_ids:
                violations.append(ValidationViolation(
                    severity="error",
                    check="unknown_subject",
                    entity=lesson.id,
                    description=f"Fach '{lesson.subject_id}' existiert nicht.",
                ))
        return violations

    def _check_time_ranges(self, data: TimetableData) -> list[ValidationViolation]:
        violations: list[ValidationViolation] = []
        for lesson in [*data.stable_lessons, *data.week_lessons]:
            if lesson.end_time <= lesson.start_time:
                violations.append(ValidationViolation(
                    severity="error",
                    check="invalid_time_range",
                    entity=lesson.id,
                    description=f"Ende liegt nicht nach Beginn ({lesson.time_range}).",
                ))
        return violations

    def _check_weekdays(self, data: TimetableData) -> list[ValidationViolation]:
        """Stammstunden nur Mo–Fr, Wochenstunden Mo–So."""
        violations: list[ValidationViolation] = []
        for lesson in data.stable_lessons:
            if lesson.day_of_week not in SCHOOL_DAYS:
                violations.append(ValidationViolation(
                    severity="error",
                    check="stable_weekday_out_of_range",
                    entity=lesson.id,
                    description=f"Wochentag {lesson.day_of_week} außerhalb Mo–Fr.",
                ))
        for lesson in data.week_lessons:
            if lesson.day_of_week not in ALL_DAYS:
                violations.append(ValidationViolation(
                    severity="error",
                    check="week_weekday_out_of_range",
                    entity=lesson.id,
                    description=f"Wochentag {lesson.day_of_week} außerhalb 1–7.",
                ))
        return violations

    def _check_stable_overlaps(self, data: TimetableData) -> list[ValidationViolation]:
        """Keine zwei Stammstunden einer Klasse dürfen sich überschneiden."""
        violations: list[ValidationViolation] = []
        by_class_day: dict[tuple, list] = defaultdict(list)
        for lesson in data.stable_lessons:
            by_class_day[(lesson.class_id, lesson.day_of_week)].append(lesson)

        for (class_id, day), lessons in sorted(by_class_day.items()):
            lessons.sort(key=lambda l: (l.start_time, l.end_time))
            for i, lesson in enumerate(lessons):
                other = self.resolver.find_conflict(
                    lesson.start_time, lesson.end_time, lessons[i + 1:]
                )
                if other is not None:
                    violations.append(ValidationViolation(
                        severity="error",
                        check="stable_overlap",
                        entity=class_id,
                        description=(
                            f"{DAY_NAMES.get(day, day)}: {lesson.time_range} überschneidet "
                            f"{other.time_range} ({lesson.id} / {other.id})."
                        ),
                    ))
        return violations

    def _check_duplicate_overrides(self, data: TimetableData) -> list[ValidationViolation]:
        """Pro Woche höchstens eine Wochenstunde je Stammstunde."""
        violations: list[ValidationViolation] = []
        seen: dict[tuple, list[str]] = defaultdict(list)
        for lesson in data.week_lessons:
            if lesson.stable_lesson_id is None:
                continue
            key = (lesson.class_id, lesson.week_start_date, lesson.stable_lesson_id)
            seen[key].append(lesson.id)

        for (class_id, monday, stable_id), ids in seen.items():
            if len(ids) > 1:
                violations.append(ValidationViolation(
                    severity="warning",
                    check="duplicate_override",
                    entity=stable_id,
                    description=(
                        f"{len(ids)} Wochenstunden in Woche {monday.isoformat()} "
                        f"({class_id}); nur die neueste wird angezeigt."
                    ),
                ))
        return violations

    def _check_dangling_references(self, data: TimetableData) -> list[ValidationViolation]:
        violations: list[ValidationViolation] = []
        stable_ids = {l.id for l in data.stable_lessons}
        for lesson in data.week_lessons:
            if lesson.stable_lesson_id and lesson.stable_lesson_id not in stable_ids:
                violations.append(ValidationViolation(
                    severity="warning",
                    check="dangling_stable_reference",
                    entity=lesson.id,
                    description=(
                        f"Stammstunde {lesson.stable_lesson_id} wurde gelöscht; "
                        f"Anzeige als Zusatzstunde."
                    ),
                ))
        return violations

    def _check_substitutes(self, data: TimetableData) -> list[ValidationViolation]:
        violations: list[ValidationViolation] = []
        for lesson in data.week_lessons:
            if lesson.substitute_teacher_name and lesson.status != LessonStatus.SUBSTITUTION:
                violations.append(ValidationViolation(
                    severity="warning",
                    check="substitute_without_substitution",
                    entity=lesson.id,
                    description=(
                        f"Vertretung '{lesson.substitute_teacher_name}' eingetragen, "
                        f"Status ist aber '{lesson.status.value}'."
                    ),
                ))
        return violations

    def _check_week_overlaps(self, data: TimetableData) -> list[ValidationViolation]:
        """Überschneidungen in der effektiven Woche (entfallene Stunden zählen nicht)."""
        violations: list[ValidationViolation] = []
        subjects = {s.id: s for s in data.subjects}
        stable_by_class: dict[str, list] = defaultdict(list)
        for lesson in data.stable_lessons:
            stable_by_class[lesson.class_id].append(lesson)
        weeks: dict[tuple, list] = defaultdict(list)
        for lesson in data.week_lessons:
            weeks[(lesson.class_id, lesson.week_start_date)].append(lesson)

        for (class_id, monday), overrides in sorted(weeks.items()):
            week = merge_week(stable_by_class[class_id], overrides, subjects, monday)
            for day, lessons in week.items():
                visible = [l for l in lessons if not l.is_cancelled]
                for i, lesson in enumerate(visible):
                    other = self.resolver.find_conflict(
                        lesson.start_time, lesson.end_time, visible[i + 1:]
                    )
                    if other is not None:
                        violations.append(ValidationViolation(
                            severity="warning",
                            check="week_overlap",
                            entity=class_id,
                            description=(
                                f"Woche {monday.isoformat()}, {DAY_NAMES.get(day, day)}: "
                                f"{lesson.time_range} überschneidet {other.time_range}."
                            ),
                        ))
        return violations
