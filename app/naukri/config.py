"""Configuration for the Naukri CV scraper API."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

SERVICE_NAME: str = "Naukri CV Scraper API"
SERVICE_VERSION: str = "1.0.0"

DEFAULT_WEBHOOK_URL: str = "https://n8n.grrbaow.com/webhook/naukri-scrapper"
# Large scrapes (1000 profiles) take several minutes inside the workflow.
DEFAULT_TIMEOUT_SECONDS: int = 600

DEFAULT_MAX_RESULTS: int = 10
MIN_MAX_RESULTS: int = 1
MAX_MAX_RESULTS: int = 1000

CORS_ALLOWED_METHODS: list[str] = ["GET", "POST", "OPTIONS"]
CORS_ALLOWED_HEADERS: list[str] = [
    "Content-Type",
    "Authorization",
    "X-RapidAPI-Key",
    "X-RapidAPI-Host",
]


def _parse_timeout_seconds(env_var: str, default: int, *, minimum: int = 1) -> int:
    """Parse a timeout value in seconds from the environment with bounds."""

    try:
        value = int(os.getenv(env_var, str(default)))
    except ValueError:
        return default
    return max(minimum, value)


@dataclass(frozen=True)
class WorkflowConfig:
    """Settings for the outbound n8n webhook call.

    Built once at process start (``from_env``) and passed explicitly to the
    Flask app and the batch job, so tests can construct one directly.
    """

    webhook_url: str = DEFAULT_WEBHOOK_URL
    webhook_secret: str | None = None
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls) -> "WorkflowConfig":
        webhook_url = os.getenv("N8N_WEBHOOK_URL", "").strip() or DEFAULT_WEBHOOK_URL
        webhook_secret = os.getenv("N8N_WEBHOOK_SECRET", "").strip() or None
        return cls(
            webhook_url=webhook_url,
            webhook_secret=webhook_secret,
            timeout_seconds=_parse_timeout_seconds(
                "N8N_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS
            ),
        )


def log_file() -> Path | None:
    """Return the optional log file path configured via ``NAUKRI_LOG_FILE``."""

    raw = os.getenv("NAUKRI_LOG_FILE", "").strip()
    return Path(raw) if raw else None


__all__ = [
    "WorkflowConfig",
    "log_file",
    "SERVICE_NAME",
    "SERVICE_VERSION",
    "DEFAULT_MAX_RESULTS",
    "MIN_MAX_RESULTS",
    "MAX_MAX_RESULTS",
]
