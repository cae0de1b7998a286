"""Excel-Export einer effektiven Woche (openpyxl)."""

from datetime import date
from pathlib import Path
from typing import Optional

from analysis.diff import WeekDiff
from config.schema import AppConfig
from models.effective import EffectiveLesson

from export.helpers import (
    COLORS, build_week_rows, format_lessons, lesson_category, today_str,
    week_days, week_label,
)


class WeekExcelExporter:
    """Exportiert die effektive Woche einer Klasse in eine Excel-Datei.

    Blatt 1 zeigt das Wochenraster mit Statusfarben, Blatt 2 (optional)
    die Änderungsliste gegenüber dem Stammplan.
    """

    # Spaltenbreiten (Excel-Einheiten)
    COL_STD_W  = 6
    COL_ZEIT_W = 15
    COL_DAY_W  = 22

    # Zeilenhöhen (Punkte)
    ROW_HEADER_H  = 22
    ROW_LESSON_H  = 48

    def __init__(
        self,
        config: AppConfig,
        class_name: str,
        week: dict[int, list[EffectiveLesson]],
        week_start_date: Optional[date] = None,
        diff: Optional[WeekDiff] = None,
    ):
        self.config     = config
        self.class_name = class_name
        self.week       = week
        self.monday     = week_start_date
        self.diff       = diff
        self.days       = week_days(week, config)

    # ─── Öffentliche API ──────────────────────────────────────────────────────

    def export(self, output_path: Path) -> Path:
        """Erstellt die Excel-Datei und gibt den Pfad zurück."""
        from openpyxl import Workbook
        wb = Workbook()
        wb.remove(wb.active)   # Leeres Standard-Sheet entfernen

        self._sheet_woche(wb)
        if self.diff is not None:
            self._sheet_aenderungen(wb)

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(output_path)
        return output_path

    # ─── Style-Helpers ────────────────────────────────────────────────────────

    def _fill(self, hex_color: str):
        from openpyxl.styles import PatternFill
        return PatternFill(start_color=hex_color, end_color=hex_color, fill_type="solid")

    def _center_align(self, wrap: bool = True):
        from openpyxl.styles import Alignment
        return Alignment(wrap_text=wrap, horizontal="center", vertical="center")

    def _thin_border(self):
        from openpyxl.styles import Border, Side
        s = Side(border_style="thin", color="BBBBBB")
        return Border(left=s, right=s, top=s, bottom=s)

    def _setup_sheet(self, ws) -> None:
        """Setzt Spaltenbreiten für das Wochenblatt."""
        from openpyxl.utils import get_column_letter
        ws.column_dimensions["A"].width = self.COL_STD_W
        ws.column_dimensions["B"].width = self.COL_ZEIT_W
        for col in range(3, 3 + len(self.days)):
            ws.column_dimensions[get_column_letter(col)].width = self.COL_DAY_W

    def _write_header_row(self, ws, row: int, headers: list[str]) -> None:
        from openpyxl.styles import Font
        fill = self._fill(COLORS["header"])
        border = self._thin_border()
        for col, text in enumerate(headers, 1):
            cell = ws.cell(row=row, column=col, value=text)
            cell.fill = fill
            cell.font = Font(bold=True, color="FFFFFF", size=10)
            cell.alignment = self._center_align(wrap=False)
            cell.border = border
        ws.row_dimensions[row].height = self.ROW_HEADER_H

    def _cell_color(self, lessons: list[EffectiveLesson]) -> str:
        if not lessons:
            return COLORS["free"]
        return COLORS[lesson_category(lessons[0])]

    # ─── Blätter ──────────────────────────────────────────────────────────────

    def _sheet_woche(self, wb) -> None:
        """Wochenraster: Std. | Zeit | Mo | Di | …"""
        from openpyxl.styles import Font

        ws = wb.create_sheet(title=f"Klasse {self.class_name}"[:31])
        self._setup_sheet(ws)

        title = f"{self.config.school_name} – Klasse {self.class_name} – {week_label(self.monday)}"
        ws.cell(row=1, column=1, value=title).font = Font(bold=True, size=12)
        ws.cell(row=2, column=1, value=f"Stand: {today_str()}").font = Font(size=8, italic=True)

        headers = ["Std.", "Zeit"] + [self.config.time_grid.day_name(d) for d in self.days]
        self._write_header_row(ws, 4, headers)

        border = self._thin_border()
        excel_row = 5
        for grid_row in build_week_rows(self.week, self.config):
            c = ws.cell(row=excel_row, column=1, value=grid_row.label)
            c.alignment = self._center_align(wrap=False)
            c.border = border
            c.font = Font(bold=True, size=9)

            c = ws.cell(row=excel_row, column=2, value=grid_row.time_label)
            c.alignment = self._center_align(wrap=False)
            c.border = border
            c.font = Font(size=8)

            for offset, day in enumerate(self.days):
                lessons = grid_row.cells.get(day, [])
                c = ws.cell(row=excel_row, column=3 + offset, value=format_lessons(lessons))
                c.fill = self._fill(self._cell_color(lessons))
                c.alignment = self._center_align()
                c.border = border
                c.font = Font(size=8, strike=bool(lessons) and lessons[0].is_cancelled)

            ws.row_dimensions[excel_row].height = self.ROW_LESSON_H
            excel_row += 1

        self._write_legend(ws, excel_row + 1)

    def _write_legend(self, ws, start_row: int) -> None:
        from openpyxl.styles import Font
        labels = [
            ("modified", "geändert"),
            ("cancelled", "entfällt"),
            ("substitution", "Vertretung"),
            ("ad_hoc", "Zusatzstunde"),
        ]
        ws.cell(row=start_row, column=1, value="Legende").font = Font(bold=True, size=9)
        for i, (key, label) in enumerate(labels, 1):
            c = ws.cell(row=start_row + i, column=2, value=label)
            c.fill = self._fill(COLORS[key])
            c.font = Font(size=8)

    def _sheet_aenderungen(self, wb) -> None:
        """Liste aller Abweichungen vom Stammplan."""
        from openpyxl.styles import Font

        ws = wb.create_sheet(title="Änderungen")
        for col, width in zip("ABCDE", (8, 14, 18, 14, 60)):
            ws.column_dimensions[col].width = width
        self._write_header_row(ws, 1, ["Tag", "Zeit", "Fach", "Status", "Änderung"])

        changes = self.diff.all_changes()
        if not changes:
            ws.cell(row=2, column=1, value="Keine Abweichungen vom Stammplan.").font = Font(
                italic=True, size=9
            )
            return

        for row, change in enumerate(changes, 2):
            values = [
                self.config.time_grid.day_name(change.day_of_week),
                change.time_range,
                change.subject_name,
                change.status,
                change.describe(),
            ]
            for col, value in enumerate(values, 1):
                c = ws.cell(row=row, column=col, value=value)
                c.font = Font(size=9)
                c.border = self._thin_border()
