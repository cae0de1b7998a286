"""Export-Modul: Terminal-Tabellen (rich) und Excel (openpyxl) für die Wochenansicht."""

from export.excel_export import WeekExcelExporter
from export.tui_renderer import render_week_rows, render_week_table

__all__ = ["WeekExcelExporter", "render_week_rows", "render_week_table"]
