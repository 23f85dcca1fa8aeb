"""REST client for the forms backend."""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

import requests

from timesheet_tool.attachments import AttachmentLedger
from timesheet_tool.models import Attachment

logger = logging.getLogger(__name__)

TIME_SHEET_PATH = "/forms/daily-time-sheet"
DEFAULT_ERROR_MESSAGE = "Failed to update Daily Time Sheet"


class ApiError(Exception):
    """Raised when the backend rejects a request or cannot be reached."""
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)

    @property
    def is_client_error(self) -> bool:
        return self.status_code is not None and 400 <= self.status_code < 500


def extract_error_message(body: Any, default: str = DEFAULT_ERROR_MESSAGE) -> str:
    """Pull a human-readable message out of an error response body.

    Handles ``{"error": "..."}``, ``{"error": {"message": "..."}}``, other
    error objects (JSON-encoded) and a top-level ``message``.
    """
    if not isinstance(body, dict):
        return default

    error = body.get("error")
    if isinstance(error, str) and error:
        return error
    if isinstance(error, dict):
        message = error.get("message")
        if isinstance(message, str) and message:
            return message
        return json.dumps(error)
    if error:
        return json.dumps(error)

    message = body.get("message")
    if isinstance(message, str) and message:
        return message
    return default


def _multipart(fields: list[tuple[str, str]]) -> list[tuple[str, tuple[None, str]]]:
    # A None filename makes requests send a plain form field inside multipart/form-data
    return [(name, (None, value)) for name, value in fields]


class FormsApiClient:
    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: Optional[float] = 30,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self.base_url}{path}"
        logger.debug(f"{method} {url}")
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error(f"{method} {url} failed: {e}")
            raise ApiError(f"Network error: {e}") from e

        if not response.ok:
            try:
                body = response.json()
            except ValueError:
                body = None
            message = extract_error_message(body)
            logger.error(f"{method} {url} returned {response.status_code}: {message}")
            raise ApiError(message, response.status_code)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None

    # --- Daily time sheet ---

    def get_time_sheet(self, record_id: str) -> dict:
        body = self._request("GET", f"{TIME_SHEET_PATH}/{record_id}")
        if isinstance(body, dict) and isinstance(body.get("data"), dict):
            return body["data"]
        return body or {}

    def update_time_sheet(self, record_id: str, payload: dict) -> Any:
        return self._request("PATCH", f"{TIME_SHEET_PATH}/{record_id}", json=payload)

    def delete_time_sheet(self, record_id: str) -> Any:
        return self._request("DELETE", f"{TIME_SHEET_PATH}/{record_id}")

    def fetch_attachments(self, record_id: str) -> list[Attachment]:
        body = self._request(
            "GET",
            f"{TIME_SHEET_PATH}/attachments",
            params={"daily_time_sheet_id": record_id},
        )
        rows = body.get("data") if isinstance(body, dict) else body
        return [Attachment.from_api(row) for row in rows or []]

    def save_attachments(self, record_id: str, ledger: AttachmentLedger) -> Any:
        payload = ledger.build_payload(record_id)
        return self._request("POST", f"{TIME_SHEET_PATH}/attachments", files=_multipart(payload.data) + payload.files)

    # --- Generic forms ---

    def submit_form(self, form_type: str, fields: dict) -> Any:
        """Create a record of any form type from flat multipart fields."""
        data = [(k, v if isinstance(v, str) else json.dumps(v)) for k, v in fields.items() if v is not None]
        return self._request("POST", f"/forms/{form_type}", files=_multipart(data))
