"""
Excel export of HQL reports.
"""

from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter

from core.config import LIST_HEADERS, NO_ENTRIES_MESSAGE
from core.query import HarvestQuery
from services.rendering import color_for_rank
from services.reports import ListView, NoEntries, ReportView, SummaryView

SUMMARY_HEADERS = ["Project", "Hours", "Share"]


def write_list_sheet(ws, view: ListView):
    """
    Write the list report: Project, Task, Date, Hours.

    Hours are written as numbers with a two-decimal format so the sheet can
    still be summed.
    """
    for col_idx, header in enumerate(LIST_HEADERS, start=1):
        cell = ws.cell(row=1, column=col_idx, value=header)
        cell.font = Font(bold=True)

    for row_idx, row in enumerate(view.rows, start=2):
        ws.cell(row=row_idx, column=1, value=row.project_name)
        ws.cell(row=row_idx, column=2, value=row.task_name)
        ws.cell(row=row_idx, column=3, value=row.date).number_format = "yyyy-mm-dd"
        ws.cell(row=row_idx, column=4, value=row.hours).number_format = "0.00"

    total_row = len(view.rows) + 2
    ws.cell(row=total_row, column=3, value="Total").font = Font(bold=True)
    ws.cell(row=total_row, column=4, value=f"=SUM(D2:D{total_row - 1})").number_format = "0.00"


def write_summary_sheet(ws, view: SummaryView):
    """
    Write the summary report: one row per project in ranked order.

    The project cell is filled with the same colour as its bar chart segment.
    """
    for col_idx, header in enumerate(SUMMARY_HEADERS, start=1):
        cell = ws.cell(row=1, column=col_idx, value=header)
        cell.font = Font(bold=True)

    for index, project_total in enumerate(view.project_totals):
        row_idx = index + 2
        color = color_for_rank(index).lstrip("#").upper()
        name_cell = ws.cell(row=row_idx, column=1, value=project_total.project_name)
        name_cell.fill = PatternFill(start_color=color, end_color=color, fill_type="solid")
        ws.cell(row=row_idx, column=2, value=project_total.hours).number_format = "0.00"
        ws.cell(row=row_idx, column=3, value=view.share(project_total) / 100).number_format = "0.0%"

    total_row = len(view.project_totals) + 2
    ws.cell(row=total_row, column=1, value="Total Hours").font = Font(bold=True)
    ws.cell(row=total_row, column=2, value=view.total_hours).number_format = "0.00"


def create_report_workbook(view: ReportView, query: HarvestQuery) -> Workbook:
    """Build a one-sheet workbook for a report view."""
    wb = Workbook()
    ws = wb.active
    ws.title = f"{query.type.value.title()} {query.from_iso} - {query.to_iso}"[:31]

    if isinstance(view, NoEntries):
        ws.cell(row=1, column=1, value=NO_ENTRIES_MESSAGE)
    elif isinstance(view, ListView):
        write_list_sheet(ws, view)
    elif isinstance(view, SummaryView):
        write_summary_sheet(ws, view)
    else:
        raise TypeError(f"Unsupported report view: {type(view).__name__}")

    for col_idx in range(1, ws.max_column + 1):
        ws.column_dimensions[get_column_letter(col_idx)].width = 20
    return wb


def save_report_workbook(view: ReportView, query: HarvestQuery, output_path: Path) -> Path:
    """Create the report workbook and save it to output_path."""
    wb = create_report_workbook(view, query)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(str(output_path))
    print(f"Saved Excel report to: {output_path}")
    return output_path
