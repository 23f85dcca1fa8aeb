"""FastAPI application for daily time sheet computation and export."""

from __future__ import annotations

import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import router
from timesheet_tool.logging_config import setup_logging

API_NAME = "Daily Time Sheet API"
API_VERSION = "1.0.0"

# Forms web app and the Streamlit form during development
DEFAULT_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:8501",
    "http://127.0.0.1:3000",
]


def allowed_origins(raw: str | None = None) -> list[str]:
    """Parse ALLOWED_ORIGINS (comma-separated). A "*" entry allows any origin."""
    if raw is None:
        raw = os.environ.get("ALLOWED_ORIGINS", "")
    origins = [o.strip() for o in raw.split(",") if o.strip()]
    if "*" in origins:
        return ["*"]
    return origins or list(DEFAULT_ORIGINS)


setup_logging(os.environ.get("TIMESHEET_LOG_LEVEL", "INFO"))

app = FastAPI(
    title=API_NAME,
    description="Regular/overtime hours, expense totals and exports for field service time sheets.",
    version=API_VERSION,
)

_origins = allowed_origins()
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins,
    # Browsers refuse credentials with a wildcard origin
    allow_credentials=_origins != ["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    max_age=3600,
)

app.include_router(router)


@app.get("/")
async def root():
    return {
        "name": API_NAME,
        "version": API_VERSION,
        "docs": "/docs",
        "health": "/api/v1/health",
    }
