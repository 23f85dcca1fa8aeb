"""Draft state for a time sheet being filled out or edited.

A ``TimeSheetDraft`` is created when a form opens and reset after a
successful submit. Every mutation goes through it so the derived fields
(per-entry hours and expense totals, sheet totals, performance) are
always consistent with what the technician typed.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, fields, replace
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from timesheet_tool.engine.aggregator import refresh_totals
from timesheet_tool.engine.expenses import expense_total, parse_amount
from timesheet_tool.engine.overtime import format_hours, parse_clock, worked_hours
from timesheet_tool.models import (
    CLIENT_ONLY_ENTRY_FIELDS,
    DERIVED_ENTRY_FIELDS,
    TimeEntry,
    TimeSheet,
)

logger = logging.getLogger(__name__)

DRAFT_VERSION = 4

_ENTRY_FIELDS = {f.name for f in fields(TimeEntry)}
_SHEET_FIELDS = {f.name for f in fields(TimeSheet)} - {"entries"}
_DERIVED_SHEET_FIELDS = {"total_regular_hours", "grand_total_hours", "performance"}


def _parse_entry_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def recompute_entry(entry: TimeEntry) -> TimeEntry:
    """Refresh the derived fields of one entry in place."""
    if parse_clock(entry.start_time) is None or parse_clock(entry.stop_time) is None:
        entry.total_hours = ""
    else:
        entry.total_hours = format_hours(worked_hours(entry.start_time, entry.stop_time))
    entry.expense_total = expense_total(entry)
    return entry


def entry_from_dict(data: dict) -> TimeEntry:
    """Build an entry from a backend row or a stored draft, ignoring unknown keys."""
    values = {k: v for k, v in data.items() if k in _ENTRY_FIELDS and k not in DERIVED_ENTRY_FIELDS}
    for key, value in list(values.items()):
        if key == "entry_date":
            values[key] = _parse_entry_date(value)
        elif key == "has_date":
            values[key] = bool(value)
        elif key == "id":
            values[key] = str(value) if value else TimeEntry().id
        elif value is None:
            values[key] = ""
        else:
            values[key] = str(value)
    if "has_date" not in values:
        values["has_date"] = values.get("entry_date") is not None
    return recompute_entry(TimeEntry(**values))


class TimeSheetDraft:
    """Explicit container for the current draft of one time sheet."""

    def __init__(self, sheet: Optional[TimeSheet] = None):
        self.sheet = sheet if sheet is not None else self._blank_sheet()
        if not self.sheet.entries:
            self.sheet.entries.append(TimeEntry(has_date=True))
        self._recompute_all()

    @staticmethod
    def _blank_sheet() -> TimeSheet:
        return TimeSheet(entries=[TimeEntry(has_date=True)])

    @classmethod
    def from_record(cls, record: dict) -> "TimeSheetDraft":
        """Load a sheet as returned by the forms backend."""
        rows = record.get("entries") or record.get("daily_time_sheet_entries") or []
        rows = sorted(rows, key=lambda r: r.get("sort_order") or 0)

        sheet = TimeSheet(entries=[entry_from_dict(r) for r in rows])
        for name in _SHEET_FIELDS:
            if name in record and record[name] is not None:
                setattr(sheet, name, str(record[name]))
        return cls(sheet)

    # --- Rows ---

    @property
    def entries(self) -> list[TimeEntry]:
        return self.sheet.entries

    def entry(self, entry_id: str) -> TimeEntry:
        for entry in self.sheet.entries:
            if entry.id == entry_id:
                return entry
        raise KeyError(f"No entry with id {entry_id!r}")

    def add_row(self) -> TimeEntry:
        """Append a continuation row for the same day."""
        return self._append(TimeEntry(has_date=False))

    def add_date_row(self) -> TimeEntry:
        """Append a row that starts a new day."""
        return self._append(TimeEntry(has_date=True))

    def _append(self, entry: TimeEntry) -> TimeEntry:
        self.sheet.entries.append(recompute_entry(entry))
        refresh_totals(self.sheet)
        return entry

    def update_entry(self, entry_id: str, **changes: Any) -> TimeEntry:
        entry = self.entry(entry_id)
        for name, value in changes.items():
            if name in DERIVED_ENTRY_FIELDS:
                raise ValueError(f"'{name}' is computed and cannot be set")
            if name not in _ENTRY_FIELDS or name == "id":
                raise ValueError(f"Unknown entry field '{name}'")
            if name == "entry_date":
                value = _parse_entry_date(value)
            elif name == "has_date":
                value = bool(value)
            else:
                value = "" if value is None else str(value)
            setattr(entry, name, value)

        recompute_entry(entry)
        refresh_totals(self.sheet)
        return entry

    def remove_entry(self, entry_id: str) -> bool:
        """Remove a row. The last remaining row is kept; returns False then."""
        entry = self.entry(entry_id)
        if len(self.sheet.entries) <= 1:
            return False
        self.sheet.entries.remove(entry)
        refresh_totals(self.sheet)
        return True

    # --- Header fields ---

    def set_fields(self, **changes: Any) -> None:
        for name, value in changes.items():
            if name in _DERIVED_SHEET_FIELDS:
                raise ValueError(f"'{name}' is computed and cannot be set")
            if name not in _SHEET_FIELDS:
                raise ValueError(f"Unknown time sheet field '{name}'")
            setattr(self.sheet, name, "" if value is None else str(value))
        self._refresh_performance()

    def _refresh_performance(self) -> None:
        srt = parse_amount(self.sheet.total_srt)
        actual = parse_amount(self.sheet.actual_manhour)
        if actual > 0:
            self.sheet.performance = format_hours(srt / actual * Decimal("100"))

    def _recompute_all(self) -> None:
        for entry in self.sheet.entries:
            recompute_entry(entry)
        refresh_totals(self.sheet)
        self._refresh_performance()

    def reset(self) -> None:
        self.sheet = self._blank_sheet()
        self._recompute_all()

    # --- Serialization ---

    def to_payload(self) -> dict:
        """Request body for saving the sheet: scalars plus ordered entries."""
        payload: dict[str, Any] = {}
        for name in sorted(_SHEET_FIELDS):
            payload[name] = getattr(self.sheet, name)
        payload["total_manhours"] = payload.pop("total_regular_hours")
        payload["grand_total_manhours"] = payload.pop("grand_total_hours")

        entries = []
        for index, entry in enumerate(self.sheet.entries):
            row = asdict(entry)
            for name in CLIENT_ONLY_ENTRY_FIELDS:
                row.pop(name)
            row["entry_date"] = entry.entry_date.isoformat() if entry.entry_date else None
            row["sort_order"] = index
            entries.append(row)
        payload["entries"] = entries
        return payload

    def to_json(self) -> str:
        """Serialize the draft so it can survive a restart."""
        sheet = asdict(self.sheet)
        for row in sheet["entries"]:
            row["entry_date"] = row["entry_date"].isoformat() if row["entry_date"] else ""
        return json.dumps({"version": DRAFT_VERSION, "sheet": sheet})

    @classmethod
    def from_json(cls, text: str) -> "TimeSheetDraft":
        data = json.loads(text)
        version = data.get("version", 0)
        sheet_data = data.get("sheet") or {}
        if version < DRAFT_VERSION:
            logger.info("Migrating time sheet draft from version %s to %s", version, DRAFT_VERSION)
            # Older drafts grouped rows under separate date sections
            sheet_data.pop("dateSections", None)
            sheet_data.pop("date_sections", None)

        entries = [entry_from_dict(row) for row in sheet_data.get("entries") or []]
        sheet = TimeSheet(entries=entries)
        for name in _SHEET_FIELDS:
            value = sheet_data.get(name)
            if value is not None:
                setattr(sheet, name, str(value))
        return cls(sheet)

    def copy(self) -> "TimeSheetDraft":
        sheet = replace(self.sheet, entries=[replace(e) for e in self.sheet.entries])
        return TimeSheetDraft(sheet)
