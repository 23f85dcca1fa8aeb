"""Save workflow for an edited daily time sheet.

The sheet is saved in two requests: the form fields first, then, only if
that succeeded, the attachment ledger. The backend offers no way to do
both atomically, so a failure in the second phase is reported as an
explicit "attachments pending" outcome. The ledger keeps its queued
changes in that case and ``retry_attachments`` re-sends just that part.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from timesheet_tool.attachments import AttachmentLedger
from timesheet_tool.client import ApiError, FormsApiClient
from timesheet_tool.engine.validator import validate_sheet
from timesheet_tool.permissions import require_permission
from timesheet_tool.store import TimeSheetDraft

logger = logging.getLogger(__name__)


class SaveError(Exception):
    """Raised when the form fields could not be saved."""
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


@dataclass
class SaveOutcome:
    form_saved: bool
    attachments_saved: bool
    error: Optional[str] = None

    @property
    def attachments_pending(self) -> bool:
        return self.form_saved and not self.attachments_saved


@dataclass(frozen=True)
class UserAccess:
    """Who is saving, and what their position allows."""
    user_id: str
    permissions: frozenset[tuple[str, str]]
    record_created_by: Optional[str] = None

    @classmethod
    def build(
        cls,
        user_id: str,
        permissions: Iterable[tuple[str, str]],
        record_created_by: Optional[str] = None,
    ) -> "UserAccess":
        return cls(user_id, frozenset(permissions), record_created_by)


def retry_attachments(
    client: FormsApiClient,
    ledger: AttachmentLedger,
    record_id: str,
    retries: int = 0,
) -> SaveOutcome:
    """Send the attachment ledger, retrying up to ``retries`` extra times.

    Assumes the form fields are already saved. The ledger is only cleared
    once the server accepted it.
    """
    last_error: Optional[ApiError] = None
    for attempt in range(retries + 1):
        try:
            client.save_attachments(record_id, ledger)
        except ApiError as e:
            last_error = e
            logger.warning(
                f"Attachment save for time sheet {record_id} failed "
                f"(attempt {attempt + 1}/{retries + 1}): {e.message}"
            )
            # Rejections will not succeed on retry
            if e.is_client_error:
                break
            continue
        ledger.clear_pending()
        return SaveOutcome(form_saved=True, attachments_saved=True)

    return SaveOutcome(
        form_saved=True,
        attachments_saved=False,
        error=last_error.message if last_error else None,
    )


def save_time_sheet(
    client: FormsApiClient,
    draft: TimeSheetDraft,
    ledger: AttachmentLedger,
    record_id: str,
    attachment_retries: int = 0,
    reject_overnight: bool = False,
    access: Optional[UserAccess] = None,
) -> SaveOutcome:
    """Validate and save a time sheet and its attachments.

    Raises TimesheetValidationError before any request is made, or
    PermissionDenied when ``access`` does not allow editing. Raises
    SaveError if the form fields were not saved; the draft and the ledger
    are left untouched so the user can retry.
    """
    if access is not None:
        require_permission(access.permissions, access.user_id, access.record_created_by, "edit")

    validate_sheet(draft.sheet, reject_overnight=reject_overnight)

    payload = draft.to_payload()
    logger.info(f"Saving time sheet {record_id} with {len(payload['entries'])} entries")
    try:
        client.update_time_sheet(record_id, payload)
    except ApiError as e:
        raise SaveError(e.message, e.status_code) from e

    outcome = retry_attachments(client, ledger, record_id, retries=attachment_retries)
    if outcome.attachments_pending:
        logger.error(f"Time sheet {record_id} saved but attachments are pending: {outcome.error}")
        return outcome

    draft.reset()
    logger.info(f"Time sheet {record_id} saved")
    return outcome


def delete_time_sheet(client: FormsApiClient, record_id: str, access: UserAccess) -> None:
    """Delete a time sheet after checking the user may do so."""
    require_permission(access.permissions, access.user_id, access.record_created_by, "delete")
    try:
        client.delete_time_sheet(record_id)
    except ApiError as e:
        raise SaveError(e.message, e.status_code) from e
    logger.info(f"Time sheet {record_id} deleted by {access.user_id}")


def open_time_sheet(client: FormsApiClient, record_id: str) -> tuple[TimeSheetDraft, AttachmentLedger]:
    """Load a saved sheet and its attachments for editing."""
    record = client.get_time_sheet(record_id)
    attachments = client.fetch_attachments(record_id)
    return TimeSheetDraft.from_record(record), AttachmentLedger(attachments)
