"""Pydantic request/response models for the Time Sheet API."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field, field_validator

# Backend rows carry these as numeric columns; the engine works on strings
NUMERIC_TEXT_FIELDS = (
    "travel_hours",
    "expense_breakfast",
    "expense_lunch",
    "expense_dinner",
    "expense_transport",
    "expense_lodging",
    "expense_others",
)


def _number_to_text(value):
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class EntryIn(BaseModel):
    entry_date: date | None = None
    has_date: bool | None = None
    start_time: str = ""
    stop_time: str = ""
    job_description: str = ""
    travel_hours: str = ""
    expense_breakfast: str = ""
    expense_lunch: str = ""
    expense_dinner: str = ""
    expense_transport: str = ""
    expense_lodging: str = ""
    expense_others: str = ""
    expense_remarks: str = ""
    sort_order: int | None = None

    @field_validator(*NUMERIC_TEXT_FIELDS, mode="before")
    @classmethod
    def numbers_as_text(cls, value):
        return _number_to_text(value)


class SheetIn(BaseModel):
    job_number: str = ""
    job_order_request_id: str = ""
    date: str = ""
    customer: str = ""
    address: str = ""
    performed_by_name: str = ""
    approved_by_name: str = ""
    total_srt: str = ""
    actual_manhour: str = ""
    status: str = "Pending"
    entries: list[EntryIn] = Field(default_factory=list)
    reject_overnight: bool = False

    @field_validator("job_order_request_id", "total_srt", "actual_manhour", mode="before")
    @classmethod
    def numbers_as_text(cls, value):
        return _number_to_text(value)


class EntryResult(BaseModel):
    sort_order: int
    regular_hours: float
    overtime_hours: float
    total_hours: str
    expense_total: str


class SheetTotals(BaseModel):
    total_regular_hours: str
    total_overtime_hours: str
    grand_total_hours: str
    performance: str | None = None


class ComputeResponse(BaseModel):
    success: bool
    entries: list[EntryResult] | None = None
    totals: SheetTotals | None = None
    excel_base64: str | None = None
    export: dict | None = None
    error_type: str | None = None
    errors: list[str] | None = None
