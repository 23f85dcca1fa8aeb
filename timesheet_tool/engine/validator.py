"""Pre-save validation.

Runs before any network call. All problems are collected and raised
together so the technician can fix them in one pass.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

from timesheet_tool.engine.overtime import is_overnight, parse_clock
from timesheet_tool.models import (
    EXPENSE_FIELDS,
    TIME_FIELDS,
    TimeSheet,
    TimesheetValidationError,
)


def _is_number(value: str) -> bool:
    try:
        return Decimal(value.strip()).is_finite()
    except InvalidOperation:
        return False


def validate_sheet(sheet: TimeSheet, reject_overnight: bool = False) -> TimeSheet:
    """Validate a time sheet before it is saved.

    Overnight shifts (stop at or before start) are accepted unless
    ``reject_overnight`` is set. Returns the sheet if all checks pass.
    """
    errors: list[str] = []

    if not sheet.job_number.strip():
        errors.append("Job order is required")

    if not sheet.entries:
        errors.append("Time sheet has no entries")

    for row, entry in enumerate(sheet.entries, start=1):
        # --- Times ---
        for attr in TIME_FIELDS:
            value = getattr(entry, attr)
            if value and parse_clock(value) is None:
                errors.append(f"Row {row}: {attr} '{value}' is not a valid HH:MM time")

        if bool(entry.start_time) != bool(entry.stop_time):
            errors.append(f"Row {row}: both start_time and stop_time are needed to compute hours")

        if reject_overnight and is_overnight(entry.start_time, entry.stop_time):
            errors.append(
                f"Row {row}: stop_time {entry.stop_time} is not after start_time {entry.start_time}"
            )

        # --- Amounts ---
        for attr in EXPENSE_FIELDS + ("travel_hours",):
            value = getattr(entry, attr)
            if not value or not value.strip():
                continue
            if not _is_number(value):
                errors.append(f"Row {row}: {attr} '{value}' is not a number")
            elif Decimal(value.strip()) < 0:
                errors.append(f"Row {row}: {attr} must not be negative, got {value}")

    if errors:
        raise TimesheetValidationError(errors)

    return sheet
