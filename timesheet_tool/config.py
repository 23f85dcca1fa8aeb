"""Settings read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    api_base_url: str
    api_token: str | None
    api_timeout: float
    offline_queue_path: str
    attachment_retries: int
    reject_overnight: bool
    log_level: str

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            api_base_url=os.environ.get("TIMESHEET_API_BASE_URL", "http://localhost:3000/api"),
            api_token=os.environ.get("TIMESHEET_API_TOKEN") or None,
            api_timeout=float(os.environ.get("TIMESHEET_API_TIMEOUT", "30")),
            offline_queue_path=os.environ.get("TIMESHEET_OFFLINE_QUEUE", "pending_submissions.json"),
            attachment_retries=int(os.environ.get("TIMESHEET_ATTACHMENT_RETRIES", "1")),
            reject_overnight=_env_bool("TIMESHEET_REJECT_OVERNIGHT", False),
            log_level=os.environ.get("TIMESHEET_LOG_LEVEL", "INFO"),
        )
