"""JSON export of a computed time sheet."""

from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path

from timesheet_tool.engine.aggregator import compute_totals
from timesheet_tool.engine.expenses import sum_expenses
from timesheet_tool.engine.overtime import format_hours, split_overtime
from timesheet_tool.models import TimeSheet


def _hours(value: Decimal) -> float:
    return float(format_hours(value))


def generate_sheet_dict(sheet: TimeSheet) -> dict:
    """Build the export dictionary from a time sheet (no file I/O)."""
    entries = []
    for index, entry in enumerate(sheet.entries):
        split = split_overtime(entry.start_time, entry.stop_time)
        entries.append({
            "sort_order": index,
            "entry_date": entry.entry_date.isoformat() if entry.entry_date else None,
            "start_time": entry.start_time or None,
            "stop_time": entry.stop_time or None,
            "job_description": entry.job_description,
            "hours": {
                "regular": _hours(split.regular_hours),
                "overtime": _hours(split.overtime_hours),
                "total": _hours(split.total_hours),
            },
            "travel_hours": entry.travel_hours or None,
            "expenses": {
                "breakfast": entry.expense_breakfast or None,
                "lunch": entry.expense_lunch or None,
                "dinner": entry.expense_dinner or None,
                "transport": entry.expense_transport or None,
                "lodging": entry.expense_lodging or None,
                "others": entry.expense_others or None,
                "total": float(sum_expenses(entry)),
                "remarks": entry.expense_remarks,
            },
        })

    totals = compute_totals(sheet.entries)
    dates = sorted(e.entry_date for e in sheet.entries if e.entry_date)

    return {
        "job_number": sheet.job_number,
        "customer": sheet.customer,
        "address": sheet.address,
        "date": sheet.date or None,
        "status": sheet.status,
        "performed_by": sheet.performed_by_name,
        "approved_by": sheet.approved_by_name,
        "entries": entries,
        "summary": {
            "total_entries": len(sheet.entries),
            "total_regular_hours": _hours(totals.total_regular_hours),
            "total_overtime_hours": _hours(totals.total_overtime_hours),
            "grand_total_hours": _hours(totals.grand_total_hours),
            "total_expenses": float(sum((sum_expenses(e) for e in sheet.entries), Decimal("0"))),
        },
        "date_range": {
            "start": dates[0].isoformat() if dates else None,
            "end": dates[-1].isoformat() if dates else None,
            "total_dates": len(set(dates)),
        },
    }


def write_sheet_json(sheet: TimeSheet, output_path: str | Path) -> Path:
    """Write the export dictionary to a JSON file."""
    output_path = Path(output_path)
    data = generate_sheet_dict(sheet)
    output_path.write_text(json.dumps(data, indent=2), encoding='utf-8')
    return output_path
