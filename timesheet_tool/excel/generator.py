"""Excel export of a daily time sheet.

Writes a fresh single-sheet workbook: header block, one row per entry,
then a totals row. All values are computed in Python; no formulas.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from pathlib import Path

import openpyxl
from openpyxl.styles import Alignment, Border, Font, Side
from openpyxl.utils import get_column_letter

from timesheet_tool.engine.aggregator import compute_totals
from timesheet_tool.engine.expenses import sum_expenses
from timesheet_tool.engine.overtime import format_hours, split_overtime
from timesheet_tool.models import TimeSheet

TITLE_ROW = 1
HEADER_ROW_1 = 2  # Job Number, Customer
HEADER_ROW_2 = 3  # Address, Date
COLUMN_HEADER_ROW = 5
DATA_START_ROW = 6

COLUMNS = [
    ("Date", 16),
    ("Start", 9),
    ("Stop", 9),
    ("Regular", 10),
    ("Overtime", 10),
    ("Total Hours", 12),
    ("Job Description", 40),
    ("Travel Hours", 12),
    ("Expenses", 12),
    ("Remarks", 30),
]

# Formatting constants
THIN_BORDER = Border(
    left=Side(style='thin'),
    right=Side(style='thin'),
    top=Side(style='thin'),
    bottom=Side(style='thin'),
)

HEADER_FONT = Font(name='Calibri', size=11, bold=True)
DATA_FONT = Font(name='Calibri', size=11)
TITLE_FONT = Font(name='Calibri', size=12, bold=True)
CENTER_ALIGN = Alignment(horizontal='center', vertical='center')
NUMBER_FORMAT = '#,##0.00'
DATE_FORMAT = 'yyyy-mm-dd'


def _num(value: Decimal) -> float:
    return float(format_hours(value))


def generate_excel_report(sheet: TimeSheet, output_path: str | Path) -> Path:
    """Write the time sheet workbook and return its path."""
    output_path = Path(output_path)

    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Daily Time Sheet"

    last_col = len(COLUMNS)
    ws.merge_cells(start_row=TITLE_ROW, start_column=1, end_row=TITLE_ROW, end_column=last_col)
    title_cell = ws.cell(row=TITLE_ROW, column=1)
    title_cell.value = 'Daily Time Sheet'
    title_cell.font = TITLE_FONT
    title_cell.alignment = CENTER_ALIGN

    # --- Header block ---
    header = [
        (HEADER_ROW_1, 'Job Number', sheet.job_number, 'Customer', sheet.customer),
        (HEADER_ROW_2, 'Address', sheet.address, 'Date', sheet.date),
    ]
    for row, label_a, value_a, label_b, value_b in header:
        ws.cell(row=row, column=1).value = label_a
        ws.cell(row=row, column=1).font = HEADER_FONT
        ws.cell(row=row, column=2).value = value_a
        ws.cell(row=row, column=6).value = label_b
        ws.cell(row=row, column=6).font = HEADER_FONT
        ws.cell(row=row, column=7).value = value_b

    # --- Column headers ---
    for col, (label, width) in enumerate(COLUMNS, start=1):
        cell = ws.cell(row=COLUMN_HEADER_ROW, column=col)
        cell.value = label
        cell.font = HEADER_FONT
        cell.alignment = CENTER_ALIGN
        cell.border = THIN_BORDER
        ws.column_dimensions[get_column_letter(col)].width = width

    # --- Entries ---
    row = DATA_START_ROW
    for entry in sheet.entries:
        split = split_overtime(entry.start_time, entry.stop_time)
        values = [
            datetime(entry.entry_date.year, entry.entry_date.month, entry.entry_date.day)
            if entry.entry_date else None,
            entry.start_time or None,
            entry.stop_time or None,
            _num(split.regular_hours),
            _num(split.overtime_hours),
            _num(split.total_hours),
            entry.job_description,
            entry.travel_hours or None,
            _num(sum_expenses(entry)),
            entry.expense_remarks,
        ]
        for col, value in enumerate(values, start=1):
            cell = ws.cell(row=row, column=col)
            cell.value = value
            cell.font = DATA_FONT
            cell.border = THIN_BORDER
            if col == 1 and value is not None:
                cell.number_format = DATE_FORMAT
            elif col in (4, 5, 6, 9):
                cell.number_format = NUMBER_FORMAT
        row += 1

    # --- Totals ---
    totals = compute_totals(sheet.entries)
    total_expenses = sum((sum_expenses(e) for e in sheet.entries), Decimal("0"))
    total_row = row
    ws.cell(row=total_row, column=1).value = 'Total'
    ws.cell(row=total_row, column=1).font = HEADER_FONT
    for col, value in (
        (4, totals.total_regular_hours),
        (5, totals.total_overtime_hours),
        (6, totals.grand_total_hours),
        (9, total_expenses),
    ):
        cell = ws.cell(row=total_row, column=col)
        cell.value = _num(value)
        cell.font = HEADER_FONT
        cell.border = THIN_BORDER
        cell.number_format = NUMBER_FORMAT

    # --- Sign-off ---
    ws.cell(row=total_row + 2, column=1).value = 'Performed By'
    ws.cell(row=total_row + 2, column=1).font = HEADER_FONT
    ws.cell(row=total_row + 2, column=2).value = sheet.performed_by_name
    ws.cell(row=total_row + 3, column=1).value = 'Approved By'
    ws.cell(row=total_row + 3, column=1).font = HEADER_FONT
    ws.cell(row=total_row + 3, column=2).value = sheet.approved_by_name

    wb.save(str(output_path))
    return output_path
