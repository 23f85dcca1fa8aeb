"""Tests for the command line interface."""

import json

import openpyxl
from typer.testing import CliRunner

from timesheet_tool.__main__ import app, load_draft
from timesheet_tool.offline import OfflineQueue

runner = CliRunner()


def _write_record(tmp_path, **kwargs):
    record = {
        "job_number": "JO-2026-0101",
        "customer": "Acme Mining",
        "daily_time_sheet_entries": [
            {"id": 1, "sort_order": 0, "entry_date": "2026-01-10", "start_time": "08:00", "stop_time": "17:00"},
            {"id": 2, "sort_order": 1, "start_time": "17:00", "stop_time": "19:00", "expense_lunch": "100"},
        ],
    }
    record.update(kwargs)
    path = tmp_path / "sheet.json"
    path.write_text(json.dumps({"data": record}), encoding="utf-8")
    return path


class TestLoadDraft:
    def test_backend_record(self, tmp_path):
        draft = load_draft(_write_record(tmp_path))
        assert draft.sheet.grand_total_hours == "11.00"

    def test_saved_draft(self, tmp_path):
        original = load_draft(_write_record(tmp_path))
        path = tmp_path / "draft.json"
        path.write_text(original.to_json(), encoding="utf-8")
        assert [e.id for e in load_draft(path).entries] == ["1", "2"]


class TestSummarize:
    def test_prints_totals(self, tmp_path):
        result = runner.invoke(app, ["summarize", str(_write_record(tmp_path))])
        assert result.exit_code == 0
        assert "Validation PASSED" in result.output
        assert "GRAND TOTAL:    11.00" in result.output
        assert "Overtime hours: 2.00" in result.output

    def test_exports(self, tmp_path):
        excel_out = tmp_path / "sheet.xlsx"
        json_out = tmp_path / "export.json"
        result = runner.invoke(app, [
            "summarize", str(_write_record(tmp_path)),
            "--excel-out", str(excel_out),
            "--json-out", str(json_out),
        ])
        assert result.exit_code == 0
        assert openpyxl.load_workbook(str(excel_out)).active.title == "Daily Time Sheet"
        assert json.loads(json_out.read_text(encoding="utf-8"))["summary"]["grand_total_hours"] == 11.0

    def test_strict_stops_on_errors(self, tmp_path):
        excel_out = tmp_path / "sheet.xlsx"
        path = _write_record(tmp_path, job_number="")
        result = runner.invoke(app, ["summarize", str(path), "--excel-out", str(excel_out)])
        assert result.exit_code == 1
        assert not excel_out.exists()

    def test_no_strict_continues(self, tmp_path):
        path = _write_record(tmp_path, job_number="")
        result = runner.invoke(app, ["summarize", str(path), "--no-strict"])
        assert result.exit_code == 0

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["summarize", str(tmp_path / "nope.json")])
        assert result.exit_code == 1


class TestSync:
    def test_empty_queue(self, tmp_path):
        result = runner.invoke(app, ["sync", "--queue", str(tmp_path / "pending.json")])
        assert result.exit_code == 0
        assert "No pending submissions." in result.output

    def test_unreachable_backend(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TIMESHEET_API_BASE_URL", "http://127.0.0.1:9/api")
        monkeypatch.setenv("TIMESHEET_API_TIMEOUT", "1")
        queue_path = tmp_path / "pending.json"
        OfflineQueue(queue_path).enqueue("daily-time-sheet", {"job_number": "JO-1"})

        result = runner.invoke(app, ["sync", "--queue", str(queue_path)])

        assert result.exit_code == 1
        stored = OfflineQueue(queue_path).pending()
        assert len(stored) == 1
        assert stored[0].retry_count == 1
