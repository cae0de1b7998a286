"""Stundenplan-Abgleich: Haupt-CLI.

Verwendung:
  python main.py setup                          Standard-Konfiguration anlegen
  python main.py config show                    Konfiguration anzeigen
  python main.py demo                           Demo-Datensatz erzeugen
  python main.py validate                       Datensatz prüfen
  python main.py stable show <klasse>           Stammplan anzeigen
  python main.py stable add|edit|delete ...     Stammstunden pflegen
  python main.py week show <klasse> [--week]    Effektive Woche anzeigen
  python main.py week copy <klasse> [--week]    Stammplan in die Woche kopieren
  python main.py week add|edit|delete ...       Wochenstunden pflegen
  python main.py week diff <klasse> [--week]    Abweichungen vom Stammplan
  python main.py week export <klasse> [--week]  Woche als Excel exportieren
  python main.py slot <klasse> <tag> <zeit>     Welche Stunde läuft gerade?
"""

import logging
import sys
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich import box

from storage.errors import TimetableError
from storage.updates import UNSET

console = Console()
logger = logging.getLogger(__name__)


# ─── Hilfsfunktionen ──────────────────────────────────────────────────────────

def _load_config():
    """Lädt die Konfiguration (Default, falls keine Datei existiert)."""
    from config.manager import ConfigManager
    mgr = ConfigManager()
    try:
        return mgr, mgr.load_or_default()
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)


def _setup_logging(config) -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if config.logging.file:
        Path(config.logging.file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(config.logging.file, encoding="utf-8"))
    logging.basicConfig(
        level=config.logging.level,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
        handlers=handlers,
        force=True,
    )


@dataclass
class Services:
    """Verdrahtete Dienste über einem gemeinsamen Speicher."""

    config: object
    store: object
    stable: object
    week: object
    engine: object


def _services(data_path: Optional[str] = None) -> Services:
    from storage.json_store import JsonFileStore
    from timetable.reconciliation import ReconciliationEngine
    from timetable.stable import StableTimetable
    from timetable.week import WeekOverrideStore

    _, config = _load_config()
    _setup_logging(config)
    store = JsonFileStore(
        Path(data_path or config.storage.data_path),
        sunday_zero_days=config.storage.sunday_zero_days,
    )
    engine = ReconciliationEngine(store, store, store, store)
    return Services(
        config=config,
        store=store,
        stable=StableTimetable(store, store, store),
        week=WeekOverrideStore(store, store, store, store, engine=engine),
        engine=engine,
    )


def _fail(error: TimetableError) -> None:
    console.print(f"[red]✗ {error}[/red]")
    logger.debug(f"Fehlerdetails: {error.to_dict()}")
    sys.exit(1)


def _parse_week(value: Optional[str]) -> date:
    if not value:
        return date.today()
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"Datum im Format JJJJ-MM-TT erwartet: {value}")


def _opt(value):
    """CLI-Option → Teil-Update: nicht angegeben (None) bleibt UNSET."""
    return UNSET if value is None else value


def _end_or_default(start: str, end: Optional[str], config) -> str:
    """Ohne END: Beginn plus Standarddauer (time_grid.lesson_duration_minutes)."""
    if end:
        return end
    from models.timeslot import add_minutes, format_short_time, parse_wall_time
    try:
        begin = parse_wall_time(start)
        return format_short_time(add_minutes(begin, config.time_grid.lesson_duration_minutes))
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="START")


def _show_week(svc: Services, class_id: str, week, title: str) -> None:
    from export.tui_renderer import render_week_table
    console.print(render_week_table(week, svc.config, title))


data_option = click.option("--data", "data_path", default=None,
                           help="Pfad zur JSON-Datendatei (überschreibt die Konfiguration).")
week_option = click.option("--week", "week_str", default=None,
                           help="Beliebiges Datum der Woche (JJJJ-MM-TT), Standard: heute.")


# ─── SETUP ────────────────────────────────────────────────────────────────────

@click.command("setup")
@click.option("--force", is_flag=True, default=False, help="Bestehende Konfiguration überschreiben.")
def cmd_setup(force: bool):
    """Ersteinrichtung: Standard-Konfiguration als YAML anlegen."""
    from config.defaults import default_app_config
    from config.manager import ConfigManager

    mgr = ConfigManager()
    if not mgr.first_run_check() and not force:
        console.print(
            "[yellow]Eine Konfiguration existiert bereits.[/yellow]\n"
            f"Bearbeiten Sie [bold]{mgr.DEFAULT_CONFIG}[/bold] oder nutzen Sie --force."
        )
        return
    mgr.save(default_app_config())
    console.print("Führen Sie jetzt [bold]python main.py demo[/bold] aus.")


# ─── CONFIG ───────────────────────────────────────────────────────────────────

@click.group("config")
def cmd_config():
    """Konfiguration anzeigen."""


@cmd_config.command("show")
def config_show():
    """Zeigt die aktuelle Konfiguration an."""
    _, config = _load_config()

    console.print(Panel(
        f"[bold]{config.school_name}[/bold]  |  Daten: {config.storage.data_path}  |  "
        f"Log-Level: {config.logging.level}",
        title="Konfiguration",
        border_style="cyan",
    ))

    tg = config.time_grid
    table = Table(title="Zeitraster", box=box.ROUNDED)
    table.add_column("Std.")
    table.add_column("Beginn")
    table.add_column("Ende")
    for slot in tg.lesson_slots:
        table.add_row(str(slot.slot_number), slot.start_time, slot.end_time)
    console.print(table)
    console.print(
        f"[bold]Unterrichtstage:[/bold] {', '.join(tg.day_name(d) for d in tg.school_days)}"
    )


# ─── DEMO ─────────────────────────────────────────────────────────────────────

@click.command("demo")
@click.option("--seed", default=42, help="Zufalls-Seed für reproduzierbare Daten.")
@week_option
@data_option
def cmd_demo(seed: int, week_str: Optional[str], data_path: Optional[str]):
    """Erzeugt Demo-Daten (Klassen, Fächer, Stammpläne, eine geänderte Woche)."""
    from data.fake_data import DemoDataGenerator
    from storage.json_store import JsonFileStore

    _, config = _load_config()
    _setup_logging(config)
    gen = DemoDataGenerator(config, seed=seed)
    data = gen.generate(week_start_date=_parse_week(week_str))
    gen.print_summary(data)

    path = Path(data_path or config.storage.data_path)
    try:
        store = JsonFileStore(path, sunday_zero_days=config.storage.sunday_zero_days)
        store.load_data(data)
        store.save()
    except TimetableError as e:
        _fail(e)
    console.print(f"[green]✓[/green] Datensatz gespeichert: {path}")


# ─── VALIDATE ─────────────────────────────────────────────────────────────────

@click.command("validate")
@data_option
def cmd_validate(data_path: Optional[str]):
    """Prüft den gespeicherten Datensatz auf Inkonsistenzen."""
    from analysis.timetable_validator import TimetableValidator

    try:
        svc = _services(data_path)
    except TimetableError as e:
        _fail(e)
    data = svc.store.to_data()
    console.print(f"\n{data.summary()}\n")
    report = TimetableValidator().validate(data)
    report.print_rich()
    sys.exit(0 if report.is_valid else 1)


# ─── STAMMPLAN ────────────────────────────────────────────────────────────────

@click.group("stable")
def cmd_stable():
    """Stammplan anzeigen und pflegen."""


@cmd_stable.command("show")
@click.argument("class_id")
@data_option
def stable_show(class_id: str, data_path: Optional[str]):
    """Zeigt den Stammplan einer Klasse."""
    try:
        svc = _services(data_path)
        view = svc.engine.get_stable_view(class_id)
    except TimetableError as e:
        _fail(e)
    _show_week(svc, class_id, view, f"Stammplan {class_id}")


@cmd_stable.command("add")
@click.argument("class_id")
@click.argument("subject_id")
@click.argument("day", type=int)
@click.argument("start")
@click.argument("end", required=False)
@click.option("--room", default=None)
@data_option
def stable_add(class_id, subject_id, day, start, end, room, data_path):
    """Legt eine Stammstunde an (Tag 1=Mo .. 5=Fr, Zeiten HH:MM).

    Ohne END dauert die Stunde so lange wie im Stundenraster eingestellt.
    """
    try:
        svc = _services(data_path)
        end = _end_or_default(start, end, svc.config)
        lesson = svc.stable.create_stable_lesson(class_id, subject_id, day, start, end, room)
    except TimetableError as e:
        _fail(e)
    console.print(f"[green]✓[/green] Stammstunde angelegt: {lesson.id} ({lesson.time_range})")


@cmd_stable.command("edit")
@click.argument("lesson_id")
@click.option("--subject", "subject_id", default=None)
@click.option("--day", type=int, default=None)
@click.option("--start", default=None)
@click.option("--end", default=None)
@click.option("--room", default=None, help='"" leert den Raum.')
@data_option
def stable_edit(lesson_id, subject_id, day, start, end, room, data_path):
    """Ändert einzelne Felder einer Stammstunde."""
    try:
        svc = _services(data_path)
        lesson = svc.stable.update_stable_lesson(
            lesson_id,
            subject_id=_opt(subject_id), day_of_week=_opt(day),
            start_time=_opt(start), end_time=_opt(end), room=_opt(room),
        )
    except TimetableError as e:
        _fail(e)
    console.print(f"[green]✓[/green] Stammstunde geändert: {lesson.id} ({lesson.time_range})")


@cmd_stable.command("delete")
@click.argument("lesson_id")
@data_option
def stable_delete(lesson_id, data_path):
    """Löscht eine Stammstunde (Wochenstunden bleiben erhalten)."""
    try:
        svc = _services(data_path)
        svc.stable.delete_stable_lesson(lesson_id)
    except TimetableError as e:
        _fail(e)
    console.print(f"[green]✓[/green] Stammstunde gelöscht: {lesson_id}")


# ─── WOCHE ────────────────────────────────────────────────────────────────────

@click.group("week")
def cmd_week():
    """Effektive Woche anzeigen und Wochenstunden pflegen."""


@cmd_week.command("show")
@click.argument("class_id")
@week_option
@data_option
def week_show(class_id, week_str, data_path):
    """Zeigt die effektive Woche (Stammplan + Abweichungen)."""
    from export.helpers import week_label
    from models.timeslot import week_start

    monday = week_start(_parse_week(week_str))
    try:
        svc = _services(data_path)
        week = svc.engine.get_effective_week(class_id, monday)
    except TimetableError as e:
        _fail(e)
    _show_week(svc, class_id, week, f"{class_id} – {week_label(monday)}")


@cmd_week.command("copy")
@click.argument("class_id")
@week_option
@data_option
def week_copy(class_id, week_str, data_path):
    """Kopiert den Stammplan als Wochenstunden (mehrfach ausführbar)."""
    try:
        svc = _services(data_path)
        lessons = svc.week.create_week_from_stable(class_id, _parse_week(week_str))
    except TimetableError as e:
        _fail(e)
    console.print(f"[green]✓[/green] {len(lessons)} Wochenstunden vorhanden")


@cmd_week.command("add")
@click.argument("class_id")
@click.argument("subject_id")
@click.argument("day", type=int)
@click.argument("start")
@click.argument("end", required=False)
@week_option
@click.option("--room", default=None)
@click.option("--stable", "stable_lesson_id", default=None,
              help="ID der Stammstunde, die in dieser Woche ersetzt wird.")
@click.option("--status", type=click.Choice(["normal", "cancelled", "substitution"]),
              default="normal")
@click.option("--substitute", default=None, help="Name der Vertretungslehrkraft.")
@click.option("--note", default=None)
@data_option
def week_add(class_id, subject_id, day, start, end, week_str, room, stable_lesson_id,
             status, substitute, note, data_path):
    """Legt eine Wochenstunde an (Zusatzstunde oder Ersatz einer Stammstunde).

    Ohne END dauert die Stunde so lange wie im Stundenraster eingestellt.
    """
    try:
        svc = _services(data_path)
        end = _end_or_default(start, end, svc.config)
        lesson = svc.week.create_week_lesson(
            class_id, _parse_week(week_str), subject_id, day, start, end,
            room=room, stable_lesson_id=stable_lesson_id,
            status=status, substitute_teacher_name=substitute, note=note,
        )
    except TimetableError as e:
        _fail(e)
    console.print(f"[green]✓[/green] Wochenstunde angelegt: {lesson.id} ({lesson.time_range})")


@cmd_week.command("edit")
@click.argument("lesson_id")
@click.option("--subject", "subject_id", default=None)
@click.option("--day", type=int, default=None)
@click.option("--start", default=None)
@click.option("--end", default=None)
@click.option("--room", default=None, help='"" leert den Raum.')
@click.option("--status", type=click.Choice(["normal", "cancelled", "substitution"]),
              default=None)
@click.option("--substitute", default=None)
@click.option("--note", default=None)
@data_option
def week_edit(lesson_id, subject_id, day, start, end, room, status, substitute, note,
              data_path):
    """Ändert einzelne Felder einer Wochenstunde."""
    try:
        svc = _services(data_path)
        lesson = svc.week.update_week_lesson(
            lesson_id,
            subject_id=_opt(subject_id), day_of_week=_opt(day),
            start_time=_opt(start), end_time=_opt(end), room=_opt(room),
            status=_opt(status), substitute_teacher_name=_opt(substitute), note=_opt(note),
        )
    except TimetableError as e:
        _fail(e)
    console.print(
        f"[green]✓[/green] Wochenstunde geändert: {lesson.id} "
        f"({lesson.time_range}, {lesson.status.value})"
    )


@cmd_week.command("delete")
@click.argument("lesson_id")
@data_option
def week_delete(lesson_id, data_path):
    """Löscht eine Wochenstunde; der Slot zeigt wieder den Stammplan."""
    try:
        svc = _services(data_path)
        svc.week.delete_week_lesson(lesson_id)
    except TimetableError as e:
        _fail(e)
    console.print(f"[green]✓[/green] Wochenstunde gelöscht: {lesson_id}")


@cmd_week.command("diff")
@click.argument("class_id")
@week_option
@click.option("--json", "as_json", is_flag=True, default=False, help="Ausgabe als JSON.")
@data_option
def week_diff(class_id, week_str, as_json, data_path):
    """Listet alle Abweichungen der Woche vom Stammplan."""
    from analysis.diff import diff_effective_week
    from models.timeslot import week_start

    monday = week_start(_parse_week(week_str))
    try:
        svc = _services(data_path)
        diff = diff_effective_week(
            class_id, monday, svc.engine.get_effective_week(class_id, monday)
        )
    except TimetableError as e:
        _fail(e)

    if as_json:
        click.echo(diff.to_json())
        return
    if diff.is_empty():
        console.print("[dim]Keine Abweichungen vom Stammplan.[/dim]")
        return
    table = Table(title=f"Abweichungen {class_id} – Woche {monday.isoformat()}", box=box.ROUNDED)
    table.add_column("Kategorie", style="bold")
    table.add_column("Änderung")
    for label, changes in (
        ("entfällt", diff.cancelled),
        ("Vertretung", diff.substitutions),
        ("geändert", diff.modified),
        ("Zusatzstunde", diff.ad_hoc),
    ):
        for change in changes:
            table.add_row(label, change.describe())
    console.print(table)


@cmd_week.command("export")
@click.argument("class_id")
@week_option
@click.option("--output", "-o", default=None, help="Zieldatei (.xlsx).")
@data_option
def week_export(class_id, week_str, output, data_path):
    """Exportiert die effektive Woche als Excel-Datei."""
    from analysis.diff import diff_effective_week
    from export.excel_export import WeekExcelExporter
    from models.timeslot import week_start

    monday = week_start(_parse_week(week_str))
    try:
        svc = _services(data_path)
        school_class = svc.store.get_class(class_id)
        week = svc.engine.get_effective_week(class_id, monday)
    except TimetableError as e:
        _fail(e)

    target = Path(output or f"output/woche_{school_class.name}_{monday.isoformat()}.xlsx")
    exporter = WeekExcelExporter(
        svc.config, school_class.name, week, monday,
        diff=diff_effective_week(class_id, monday, week),
    )
    exporter.export(target)
    console.print(f"[green]✓[/green] Excel gespeichert: {target}")


# ─── SLOT ─────────────────────────────────────────────────────────────────────

@click.command("slot")
@click.argument("class_id")
@click.argument("day", type=int)
@click.argument("at")
@week_option
@click.option("--stable", "stable_only", is_flag=True, default=False,
              help="Im Stammplan statt in der effektiven Woche suchen.")
@data_option
def cmd_slot(class_id, day, at, week_str, stable_only, data_path):
    """Zeigt die Stunde, die an Tag DAY um AT (HH:MM) stattfindet."""
    from models.timeslot import parse_wall_time
    from timetable.slots import ScheduleSlotResolver

    try:
        t = parse_wall_time(at)
    except ValueError as e:
        raise click.BadParameter(str(e))
    try:
        svc = _services(data_path)
        if stable_only:
            week = svc.engine.get_stable_view(class_id)
        else:
            week = svc.engine.get_effective_week(class_id, _parse_week(week_str))
    except TimetableError as e:
        _fail(e)

    lesson = ScheduleSlotResolver().find_lesson_at(week.get(day, []), t)
    if lesson is None:
        console.print("[dim]Keine Stunde zu dieser Zeit.[/dim]")
        return
    status = "" if lesson.status.value == "normal" else f" [{lesson.status.value}]"
    console.print(
        f"[bold]{lesson.subject_name or lesson.subject_id}[/bold] {lesson.time_range}"
        f" {lesson.display_teacher or ''} {lesson.room or ''}{status}"
    )


# ─── HAUPT-CLI ────────────────────────────────────────────────────────────────

@click.group()
def cli():
    """Stundenplan-Abgleich: Stammplan und Wochenänderungen.

    Starten Sie mit: python main.py setup
    """


def main():
    """Einstiegspunkt."""
    cli()


# Befehle registrieren
cli.add_command(cmd_setup)
cli.add_command(cmd_config)
cli.add_command(cmd_demo)
cli.add_command(cmd_validate)
cli.add_command(cmd_stable)
cli.add_command(cmd_week)
cli.add_command(cmd_slot)


if __name__ == "__main__":
    main()
