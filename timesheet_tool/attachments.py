"""Attachment ledger for a record being edited.

Tracks three collections until the record is saved:

- existing attachments the server knows about (captions may be edited),
- ids of existing attachments queued for deletion,
- new files queued for upload.

On save the whole ledger is sent in one request; the server deletes the
queued ids, updates captions on the kept attachments and creates records
for the uploaded files. Building the payload never mutates the ledger,
so a failed save can simply be retried.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, replace

from timesheet_tool.imaging import MAX_UPLOAD_BYTES, compress_image_if_needed, is_image_type
from timesheet_tool.models import Attachment, AttachmentRejected, NewAttachment

logger = logging.getLogger(__name__)


@dataclass
class AttachmentPayload:
    """Multipart body: plain fields and (field, (name, bytes, type)) files."""
    data: list[tuple[str, str]]
    files: list[tuple[str, tuple[str, bytes, str]]]


class AttachmentLedger:
    def __init__(self, existing: list[Attachment] | None = None):
        self.existing_attachments: list[Attachment] = [replace(a) for a in existing or []]
        self.attachments_to_delete: list[str] = []
        self.new_attachments: list[NewAttachment] = []
        self._saved_captions = {a.id: a.description for a in self.existing_attachments}

    @property
    def is_dirty(self) -> bool:
        if self.attachments_to_delete or self.new_attachments:
            return True
        return any(a.description != self._saved_captions.get(a.id) for a in self.existing_attachments)

    # --- Existing attachments ---

    def _find_existing(self, attachment_id: str) -> Attachment:
        for attachment in self.existing_attachments:
            if attachment.id == attachment_id:
                return attachment
        raise KeyError(f"No attachment with id {attachment_id!r}")

    def mark_for_deletion(self, attachment_id: str) -> None:
        """Hide an existing attachment and queue its id for deletion.

        Marking the same id twice is a no-op.
        """
        if attachment_id in self.attachments_to_delete:
            return
        attachment = self._find_existing(attachment_id)
        self.existing_attachments.remove(attachment)
        self.attachments_to_delete.append(attachment_id)

    def set_existing_caption(self, attachment_id: str, text: str) -> None:
        self._find_existing(attachment_id).description = text

    # --- New attachments ---

    def add_new(
        self,
        file_name: str,
        content: bytes,
        content_type: str,
        description: str = "",
    ) -> NewAttachment:
        """Validate, compress if large, and queue a new image for upload."""
        if not is_image_type(content_type):
            raise AttachmentRejected(f"{file_name}: only image files can be attached (got {content_type or 'unknown type'})")
        if len(content) > MAX_UPLOAD_BYTES:
            raise AttachmentRejected(
                f"{file_name}: exceeds {MAX_UPLOAD_BYTES // (1024 * 1024)}MB limit ({len(content)} bytes)"
            )

        content, file_name, content_type = compress_image_if_needed(content, file_name, content_type)
        attachment = NewAttachment(
            file_name=file_name,
            content=content,
            content_type=content_type,
            description=description,
        )
        self.new_attachments.append(attachment)
        return attachment

    def set_new_caption(self, index: int, text: str) -> None:
        self.new_attachments[index].description = text

    def remove_new(self, index: int) -> NewAttachment:
        return self.new_attachments.pop(index)

    # --- Save ---

    def build_payload(self, record_id: str) -> AttachmentPayload:
        data = [
            ("daily_time_sheet_id", str(record_id)),
            ("attachments_to_delete", json.dumps(self.attachments_to_delete)),
            ("existing_attachments", json.dumps([a.to_api() for a in self.existing_attachments])),
        ]
        files = []
        for attachment in self.new_attachments:
            files.append((
                "attachment_files",
                (attachment.file_name, attachment.content, attachment.content_type),
            ))
            data.append(("attachment_descriptions", attachment.description))
        return AttachmentPayload(data=data, files=files)

    def clear_pending(self) -> None:
        """Forget queued changes after the server has applied them."""
        logger.debug(
            f"Clearing ledger: {len(self.attachments_to_delete)} deletions, "
            f"{len(self.new_attachments)} uploads"
        )
        self.attachments_to_delete = []
        self.new_attachments = []
        self._saved_captions = {a.id: a.description for a in self.existing_attachments}
