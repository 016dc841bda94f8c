from __future__ import annotations

import urllib.parse
from typing import Literal

from .config import WorkflowConfig
from .logging_utils import _scraper_event
from .utils import log_line

Entrypoint = Literal["api", "batch", "tests"]


def _raise_config_error(message: str, *, entrypoint: Entrypoint, error: str) -> None:
    _scraper_event(
        "error",
        phase="config",
        context="runtime_validation",
        error=error,
        entrypoint=entrypoint,
    )
    log_line(f"[CONFIG] {message} (entrypoint={entrypoint})")
    raise ValueError(message)


def validate_workflow_config(workflow_config: WorkflowConfig, entrypoint: Entrypoint) -> None:
    """Validate the webhook settings for the given entrypoint.

    Raises ``ValueError`` when the webhook URL is not an absolute http(s) URL
    or the timeout is not positive.
    """

    parsed = urllib.parse.urlparse(workflow_config.webhook_url or "")
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        _raise_config_error(
            f"N8N_WEBHOOK_URL must be an absolute http(s) URL, got {workflow_config.webhook_url!r}.",
            entrypoint=entrypoint,
            error="webhook_url_invalid",
        )

    if workflow_config.timeout_seconds <= 0:
        _raise_config_error(
            "N8N_TIMEOUT_SECONDS must be greater than zero.",
            entrypoint=entrypoint,
            error="invalid_timeout",
        )


__all__ = ["validate_workflow_config", "Entrypoint"]
