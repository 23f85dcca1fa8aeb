"""Queue of form submissions made while the backend was unreachable.

Submissions are kept in a JSON file and replayed by ``OfflineQueue.sync``.
Each failed attempt bumps ``retry_count``; after MAX_RETRIES attempts, or
when the server rejects the submission outright (4xx), it is marked
failed and left for a manual ``retry``.
"""

from __future__ import annotations

import json
import logging
import time
import uuid
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Optional

from timesheet_tool.client import ApiError, FormsApiClient

logger = logging.getLogger(__name__)

MAX_RETRIES = 5
RETRY_DELAYS_SECONDS = (1, 5, 30, 60, 300)

FORM_TYPES = frozenset({
    "job-order-request",
    "daily-time-sheet",
    "deutz-commissioning",
    "deutz-service",
    "engine-teardown",
    "electric-surface-pump-teardown",
    "electric-surface-pump-service",
    "electric-surface-pump-commissioning",
    "engine-surface-pump-service",
    "engine-surface-pump-commissioning",
    "submersible-pump-commissioning",
    "submersible-pump-service",
    "submersible-pump-teardown",
    "engine-inspection-receiving",
    "components-teardown-measuring",
})

PENDING = "pending"
SYNCING = "syncing"
FAILED = "failed"


def retry_delay(retry_count: int) -> int:
    """Seconds to wait before the next attempt."""
    return RETRY_DELAYS_SECONDS[min(retry_count, len(RETRY_DELAYS_SECONDS) - 1)]


@dataclass
class PendingSubmission:
    form_type: str
    form_data: dict
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: float = field(default_factory=time.time)
    retry_count: int = 0
    last_retry_at: Optional[float] = None
    status: str = PENDING
    error_message: Optional[str] = None


@dataclass
class SyncReport:
    synced: int = 0
    failed: int = 0


class OfflineQueue:
    def __init__(self, path: str | Path):
        self.path = Path(path)

    # --- Storage ---

    def _load(self) -> list[PendingSubmission]:
        if not self.path.exists():
            return []
        rows = json.loads(self.path.read_text(encoding="utf-8") or "[]")
        return [PendingSubmission(**row) for row in rows]

    def _save(self, submissions: list[PendingSubmission]) -> None:
        self.path.write_text(json.dumps([asdict(s) for s in submissions], indent=2), encoding="utf-8")

    def _update(self, submission_id: str, **changes) -> None:
        submissions = self._load()
        for submission in submissions:
            if submission.id == submission_id:
                for name, value in changes.items():
                    setattr(submission, name, value)
        self._save(submissions)

    # --- Queue operations ---

    def enqueue(self, form_type: str, form_data: dict) -> PendingSubmission:
        if form_type not in FORM_TYPES:
            raise ValueError(f"Unknown form type '{form_type}'")
        submission = PendingSubmission(form_type=form_type, form_data=form_data)
        submissions = self._load()
        submissions.append(submission)
        self._save(submissions)
        logger.info(f"Queued {form_type} submission {submission.id} for later sync")
        return submission

    def all(self) -> list[PendingSubmission]:
        return sorted(self._load(), key=lambda s: s.created_at)

    def pending(self) -> list[PendingSubmission]:
        return [s for s in self.all() if s.status == PENDING]

    def get(self, submission_id: str) -> Optional[PendingSubmission]:
        for submission in self._load():
            if submission.id == submission_id:
                return submission
        return None

    def remove(self, submission_id: str) -> None:
        self._save([s for s in self._load() if s.id != submission_id])

    def count(self) -> int:
        return len(self._load())

    def retry(self, submission_id: str) -> None:
        """Put a failed submission back in line with a fresh retry budget."""
        if self.get(submission_id) is None:
            raise KeyError(f"No pending submission with id {submission_id!r}")
        self._update(submission_id, status=PENDING, retry_count=0, error_message=None)

    # --- Sync ---

    def _sync_one(self, client: FormsApiClient, submission: PendingSubmission) -> bool:
        if submission.retry_count >= MAX_RETRIES:
            self._update(submission.id, status=FAILED, error_message="Maximum retry attempts reached")
            return False

        self._update(submission.id, status=SYNCING)
        try:
            client.submit_form(submission.form_type, submission.form_data)
        except ApiError as e:
            if e.is_client_error:
                self._update(
                    submission.id,
                    status=FAILED,
                    error_message=f"Server rejected submission ({e.status_code})",
                )
                return False

            retry_count = submission.retry_count + 1
            exhausted = retry_count >= MAX_RETRIES
            self._update(
                submission.id,
                status=FAILED if exhausted else PENDING,
                retry_count=retry_count,
                last_retry_at=time.time(),
                error_message="Maximum retry attempts reached" if exhausted else e.message,
            )
            logger.warning(f"Sync of {submission.id} failed ({retry_count}/{MAX_RETRIES}): {e.message}")
            return False

        self.remove(submission.id)
        logger.info(f"Synced {submission.form_type} submission {submission.id}")
        return True

    def sync(self, client: FormsApiClient) -> SyncReport:
        report = SyncReport()
        for submission in self.pending():
            if self._sync_one(client, submission):
                report.synced += 1
            else:
                report.failed += 1
        return report
