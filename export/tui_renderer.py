"""Gemeinsamer Renderer für die Terminal-Anzeige einer Woche (Rich)."""

from typing import TYPE_CHECKING

from export.helpers import (
    RICH_STYLES,
    build_week_rows,
    format_lessons,
    lesson_category,
    week_days,
)

if TYPE_CHECKING:
    from config.schema import AppConfig
    from models.effective import EffectiveLesson


def render_week_rows(
    week: dict[int, list["EffectiveLesson"]],
    config: "AppConfig",
    markup: bool = True,
) -> list[list[str]]:
    """Gibt Tabellenzeilen für eine (effektive) Woche zurück.

    Jede Zeile: [slot_label, time_label, <ein Eintrag pro Tag>]
    Leere Rasterstunden werden als '—' angezeigt. Mit ``markup`` werden
    geänderte Stunden über Rich-Markup eingefärbt.
    """
    days = week_days(week, config)
    rows: list[list[str]] = []

    for row in build_week_rows(week, config):
        cells = [row.label, row.time_label]
        for day in days:
            lessons = row.cells.get(day, [])
            if not lessons:
                cells.append("—")
                continue
            text = format_lessons(lessons)
            style = RICH_STYLES[lesson_category(lessons[0])] if markup else ""
            cells.append(f"[{style}]{text}[/{style}]" if style else text)
        rows.append(cells)

    return rows


def render_week_table(week, config, title: str):
    """Baut eine fertige rich.Table für die Woche."""
    from rich import box
    from rich.table import Table

    days = week_days(week, config)
    table = Table(title=title, box=box.ROUNDED, show_lines=True)
    table.add_column("Std", justify="right", width=4)
    table.add_column("Zeit", width=12)
    for day in days:
        table.add_column(config.time_grid.day_name(day), min_width=14)
    for cells in render_week_rows(week, config):
        table.add_row(*cells)
    return table
