"""Canonical data model for the daily time sheet."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import Optional


EXPENSE_FIELDS: tuple[str, ...] = (
    "expense_breakfast",
    "expense_lunch",
    "expense_dinner",
    "expense_transport",
    "expense_lodging",
    "expense_others",
)

TIME_FIELDS: tuple[str, ...] = ("start_time", "stop_time")

# Never user-entered; recomputed from the other fields on every edit.
DERIVED_ENTRY_FIELDS: tuple[str, ...] = ("total_hours", "expense_total")

# Fields that only exist client-side and are stripped before sending.
CLIENT_ONLY_ENTRY_FIELDS: tuple[str, ...] = ("id", "has_date")


def generate_entry_id() -> str:
    return f"entry-{uuid.uuid4().hex[:12]}"


@dataclass
class TimeEntry:
    """One row of a time sheet."""
    id: str = field(default_factory=generate_entry_id)
    has_date: bool = True
    entry_date: Optional[date] = None
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

    # Travel log
    travel_time_from: str = ""
    travel_time_to: str = ""
    travel_time_depart: str = ""
    travel_time_arrived: str = ""
    travel_time_hours: str = ""
    travel_distance_from: str = ""
    travel_distance_to: str = ""
    travel_departure_odo: str = ""
    travel_arrival_odo: str = ""
    travel_distance_km: str = ""

    # Derived
    total_hours: str = ""
    expense_total: str = ""


@dataclass
class TimeSheet:
    """A daily time sheet: header fields plus an ordered list of entries."""
    job_number: str = ""
    job_order_request_id: str = ""
    date: str = ""
    customer: str = ""
    address: str = ""
    entries: list[TimeEntry] = field(default_factory=list)

    # Derived totals, sent as total_manhours / grand_total_manhours
    total_regular_hours: str = ""
    grand_total_hours: str = ""

    performed_by_name: str = ""
    performed_by_signature: str = ""
    approved_by_name: str = ""
    approved_by_signature: str = ""

    # For service office only
    total_srt: str = ""
    actual_manhour: str = ""
    performance: str = ""
    service_office_note: str = ""
    checked_by: str = ""
    service_coordinator: str = ""
    approved_by_service: str = ""
    service_manager: str = ""

    status: str = "Pending"


@dataclass
class Attachment:
    """An attachment the server already knows about."""
    id: str
    file_url: str = ""
    file_name: str = ""
    file_type: str = ""
    description: str = ""
    created_at: str = ""

    @classmethod
    def from_api(cls, data: dict) -> "Attachment":
        return cls(
            id=str(data["id"]),
            file_url=data.get("file_url") or "",
            file_name=data.get("file_name") or "",
            file_type=data.get("file_type") or "",
            description=data.get("description") or data.get("file_title") or "",
            created_at=data.get("created_at") or "",
        )

    def to_api(self) -> dict:
        return {
            "id": self.id,
            "file_url": self.file_url,
            "file_name": self.file_name,
            "file_type": self.file_type,
            "description": self.description,
            "created_at": self.created_at,
        }


@dataclass
class NewAttachment:
    """A file queued for upload on the next save."""
    file_name: str
    content: bytes
    content_type: str
    description: str = ""

    @property
    def size(self) -> int:
        return len(self.content)


class TimesheetValidationError(Exception):
    """Raised when a time sheet fails pre-save validation."""
    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Time sheet validation failed with {len(errors)} error(s):\n" +
                         "\n".join(f"  - {e}" for e in errors))


class AttachmentRejected(ValueError):
    """Raised when a file cannot be queued as an attachment."""
