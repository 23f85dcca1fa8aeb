"""Sheet-level hour totals."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from timesheet_tool.engine.overtime import format_hours, split_overtime
from timesheet_tool.models import TimeEntry, TimeSheet


@dataclass(frozen=True)
class SheetTotals:
    total_regular_hours: Decimal
    total_overtime_hours: Decimal

    @property
    def grand_total_hours(self) -> Decimal:
        return self.total_regular_hours + self.total_overtime_hours


def compute_totals(entries: list[TimeEntry]) -> SheetTotals:
    """Sum the regular/overtime split over every entry."""
    regular = Decimal("0")
    overtime = Decimal("0")
    for entry in entries:
        split = split_overtime(entry.start_time, entry.stop_time)
        regular += split.regular_hours
        overtime += split.overtime_hours
    return SheetTotals(total_regular_hours=regular, total_overtime_hours=overtime)


def refresh_totals(sheet: TimeSheet) -> bool:
    """Write recomputed totals into the sheet.

    Only fields whose formatted value changed are written. Returns True
    if anything was written.
    """
    totals = compute_totals(sheet.entries)
    regular = format_hours(totals.total_regular_hours)
    grand = format_hours(totals.grand_total_hours)

    changed = False
    if sheet.total_regular_hours != regular:
        sheet.total_regular_hours = regular
        changed = True
    if sheet.grand_total_hours != grand:
        sheet.grand_total_hours = grand
        changed = True
    return changed
