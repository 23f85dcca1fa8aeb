"""API routes for the Time Sheet service."""

from __future__ import annotations

import base64
import logging
import tempfile
from pathlib import Path

from fastapi import APIRouter

from timesheet_tool.engine import compute_totals, validate_sheet
from timesheet_tool.engine.overtime import format_hours, split_overtime
from timesheet_tool.excel import generate_excel_report
from timesheet_tool.export import generate_sheet_dict
from timesheet_tool.models import TimesheetValidationError
from timesheet_tool.store import TimeSheetDraft

from api.schemas import (
    ComputeResponse,
    EntryResult,
    SheetIn,
    SheetTotals,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1")


def _build_draft(request: SheetIn) -> TimeSheetDraft:
    record = request.model_dump(exclude={"reject_overnight"}, exclude_none=True)
    # Rows keep the order they were sent in unless sort_order says otherwise
    for index, row in enumerate(record["entries"]):
        row.setdefault("sort_order", index)
    return TimeSheetDraft.from_record(record)


def _compute(request: SheetIn) -> ComputeResponse:
    # A draft always holds at least one row, so emptiness is checked on the request
    if not request.entries:
        raise TimesheetValidationError(["Time sheet has no entries"])
    draft = _build_draft(request)
    sheet = draft.sheet
    validate_sheet(sheet, reject_overnight=request.reject_overnight)

    entries = []
    for index, entry in enumerate(sheet.entries):
        split = split_overtime(entry.start_time, entry.stop_time)
        entries.append(EntryResult(
            sort_order=index,
            regular_hours=float(split.regular_hours),
            overtime_hours=float(split.overtime_hours),
            total_hours=entry.total_hours,
            expense_total=entry.expense_total,
        ))

    totals = compute_totals(sheet.entries)
    return ComputeResponse(
        success=True,
        entries=entries,
        totals=SheetTotals(
            total_regular_hours=sheet.total_regular_hours,
            total_overtime_hours=format_hours(totals.total_overtime_hours),
            grand_total_hours=sheet.grand_total_hours,
            performance=sheet.performance or None,
        ),
    )


@router.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "ok"}


@router.post("/compute", response_model=ComputeResponse)
async def compute(request: SheetIn):
    """Derive per-entry hours, expense totals and sheet totals."""
    try:
        return _compute(request)
    except TimesheetValidationError as e:
        return ComputeResponse(
            success=False,
            error_type="validation_error",
            errors=e.errors,
        )


@router.post("/export", response_model=ComputeResponse)
async def export(request: SheetIn):
    """Compute the sheet and return it with a base64 Excel report and JSON export."""
    try:
        response = _compute(request)
        sheet = _build_draft(request).sheet

        with tempfile.TemporaryDirectory() as tmpdir:
            out_excel = Path(tmpdir) / "Daily_Time_Sheet.xlsx"
            generate_excel_report(sheet, out_excel)
            response.excel_base64 = base64.b64encode(out_excel.read_bytes()).decode("ascii")

        response.export = generate_sheet_dict(sheet)
        return response

    except TimesheetValidationError as e:
        return ComputeResponse(
            success=False,
            error_type="validation_error",
            errors=e.errors,
        )
    except Exception as e:
        logger.exception("Export failed")
        return ComputeResponse(
            success=False,
            error_type="processing_error",
            errors=[str(e)],
        )
