"""CLI entry point.

Usage:
    python -m timesheet_tool summarize sheet.json \
        --excel-out "Time_Sheet.xlsx" \
        --json-out "Time_Sheet.json" \
        --strict

    python -m timesheet_tool sync --queue pending_submissions.json
"""

from __future__ import annotations

import json
from pathlib import Path

import typer

from timesheet_tool.config import Settings
from timesheet_tool.logging_config import setup_logging
from timesheet_tool.models import TimesheetValidationError
from timesheet_tool.store import TimeSheetDraft

app = typer.Typer(help="Daily time sheet tools.", no_args_is_help=True)


def load_draft(path: Path) -> TimeSheetDraft:
    """Read either a saved draft or a sheet record as returned by the backend."""
    text = path.read_text(encoding='utf-8')
    data = json.loads(text)
    if isinstance(data, dict) and "sheet" in data and "version" in data:
        return TimeSheetDraft.from_json(text)
    if isinstance(data, dict) and isinstance(data.get("data"), dict):
        data = data["data"]
    return TimeSheetDraft.from_record(data)


@app.command()
def summarize(
    sheet_file: str = typer.Argument(..., help="Time sheet JSON (draft or backend record)"),
    excel_out: str = typer.Option(None, "--excel-out", help="Write an Excel report to this path"),
    json_out: str = typer.Option(None, "--json-out", help="Write a JSON export to this path"),
    strict: bool = typer.Option(True, "--strict/--no-strict", help="Stop on validation errors (default: True)"),
    reject_overnight: bool = typer.Option(False, "--reject-overnight", help="Treat stop-before-start shifts as errors"),
) -> None:
    """Compute hours and expenses for a time sheet and optionally export it."""
    from timesheet_tool.engine import validate_sheet
    from timesheet_tool.engine.aggregator import compute_totals
    from timesheet_tool.engine.overtime import format_hours, split_overtime
    from timesheet_tool.excel import generate_excel_report
    from timesheet_tool.export import write_sheet_json

    settings = Settings.from_env()
    setup_logging(settings.log_level)
    reject_overnight = reject_overnight or settings.reject_overnight

    path = Path(sheet_file)
    if not path.exists():
        typer.echo(f"ERROR: Time sheet file not found: {sheet_file}", err=True)
        raise typer.Exit(1)

    try:
        draft = load_draft(path)
    except (ValueError, TypeError, AttributeError) as e:
        typer.echo(f"ERROR: Cannot read time sheet: {e}", err=True)
        raise typer.Exit(1)

    sheet = draft.sheet
    typer.echo(f"Job number: {sheet.job_number or '-'}")
    typer.echo(f"Customer:   {sheet.customer or '-'}")
    typer.echo(f"Entries:    {len(sheet.entries)}")
    typer.echo("")

    try:
        validate_sheet(sheet, reject_overnight=reject_overnight)
        typer.echo("Validation PASSED")
    except TimesheetValidationError as e:
        typer.echo("VALIDATION FAILED:", err=True)
        for error in e.errors:
            typer.echo(f"  ERROR: {error}", err=True)
        if strict:
            typer.echo("\nNothing exported (strict mode).", err=True)
            raise typer.Exit(1)
        typer.echo("\nWARNING: Continuing in non-strict mode...", err=True)

    typer.echo("")
    for index, entry in enumerate(sheet.entries, start=1):
        split = split_overtime(entry.start_time, entry.stop_time)
        day = entry.entry_date.isoformat() if entry.entry_date else "          "
        typer.echo(
            f"  {index:>2}. {day} {entry.start_time or '--:--'}-{entry.stop_time or '--:--'}  "
            f"regular {format_hours(split.regular_hours)}h  overtime {format_hours(split.overtime_hours)}h  "
            f"expenses {entry.expense_total}"
        )

    totals = compute_totals(sheet.entries)
    typer.echo(f"\n  Regular hours:  {sheet.total_regular_hours}")
    typer.echo(f"  Overtime hours: {format_hours(totals.total_overtime_hours)}")
    typer.echo(f"  GRAND TOTAL:    {sheet.grand_total_hours}")

    if excel_out:
        generate_excel_report(sheet, excel_out)
        typer.echo(f"\nExcel report saved to: {excel_out}")
    if json_out:
        write_sheet_json(sheet, json_out)
        typer.echo(f"JSON export saved to: {json_out}")


@app.command()
def sync(
    queue: str = typer.Option(None, "--queue", help="Offline queue file (default from TIMESHEET_OFFLINE_QUEUE)"),
) -> None:
    """Replay form submissions that were queued while offline."""
    from timesheet_tool.client import FormsApiClient
    from timesheet_tool.offline import OfflineQueue

    settings = Settings.from_env()
    setup_logging(settings.log_level)

    offline_queue = OfflineQueue(queue or settings.offline_queue_path)
    pending = offline_queue.pending()
    if not pending:
        typer.echo("No pending submissions.")
        return

    typer.echo(f"Syncing {len(pending)} pending submission(s) to {settings.api_base_url}...")
    client = FormsApiClient(settings.api_base_url, token=settings.api_token, timeout=settings.api_timeout)
    report = offline_queue.sync(client)
    typer.echo(f"  Synced: {report.synced}")
    typer.echo(f"  Failed: {report.failed}")

    for submission in offline_queue.all():
        if submission.status == "failed":
            typer.echo(f"  FAILED {submission.form_type} {submission.id}: {submission.error_message}", err=True)

    if report.failed:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
