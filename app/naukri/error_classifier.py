from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .error_codes import ErrorCode
from .models import ScrapeValidationError
from .workflow_client import WorkflowError


@dataclass(frozen=True)
class ErrorClassification:
    """HTTP status and operator guidance for a failed scrape.

    ``guidance`` is the short list returned to the caller; ``steps`` is the
    longer checklist written to the log.
    """

    status_code: int
    error_code: str
    message: str
    fix: str
    guidance: list[str] = field(default_factory=list)
    steps: list[str] = field(default_factory=list)
    details: Any = None
    http_status: int | None = None


def classify_error(exc: BaseException) -> ErrorClassification:
    """Map a caught failure to a status code, message and guidance."""

    if isinstance(exc, ScrapeValidationError):
        return ErrorClassification(
            status_code=400,
            error_code=ErrorCode.VALIDATION,
            message=str(exc),
            fix="Provide curlCommand (or cookies with Resdex identifiers) in the request body",
            guidance=["Provide curlCommand in request body"],
        )

    if not isinstance(exc, WorkflowError):
        return _unknown(exc, ErrorCode.INTERNAL)

    code = exc.error_code
    if code == ErrorCode.UPSTREAM_UNREACHABLE:
        return ErrorClassification(
            status_code=503,
            error_code=code,
            message="n8n webhook is not accessible",
            fix="n8n webhook is not accessible",
            guidance=["Check if n8n is running", "Verify webhook URL is correct"],
            steps=["Check n8n is running", "Verify webhook URL is correct"],
            details=exc.details,
            http_status=exc.http_status,
        )
    if code == ErrorCode.TIMEOUT:
        return ErrorClassification(
            status_code=504,
            error_code=code,
            message="Request timed out",
            fix="Request timed out",
            guidance=["Reduce maxResults", "Check n8n workflow performance"],
            steps=[
                "Reduce maxResults",
                "Check n8n workflow performance",
                "Increase N8N_TIMEOUT_SECONDS if needed",
            ],
            details=exc.details,
            http_status=exc.http_status,
        )
    if code == ErrorCode.UPSTREAM_AUTH:
        return ErrorClassification(
            status_code=401,
            error_code=code,
            message="Authentication failed",
            fix="Authentication failed",
            guidance=[
                "Get fresh cURL command with valid cookies",
                "Check Naukri login session",
            ],
            steps=[
                "Get fresh cURL command with valid cookies",
                "Check Naukri login session is active",
            ],
            details=exc.details,
            http_status=exc.http_status,
        )
    if code == ErrorCode.UPSTREAM_SERVER:
        return ErrorClassification(
            status_code=502,
            error_code=code,
            message="n8n workflow error",
            fix="n8n workflow error",
            guidance=["Check n8n workflow logs", "Test with smaller maxResults"],
            steps=[
                "Check n8n workflow logs for details",
                "Verify workflow configuration",
                "Test with smaller maxResults first",
            ],
            details=exc.details,
            http_status=exc.http_status,
        )
    return _unknown(exc, code)


def _unknown(exc: BaseException, error_code: str) -> ErrorClassification:
    return ErrorClassification(
        status_code=500,
        error_code=error_code,
        message=str(exc) or exc.__class__.__name__,
        fix="Check error details above",
        guidance=["Review n8n workflow logs", "Verify configurations"],
        steps=[
            "Review n8n workflow logs",
            "Verify all configurations",
            "Test with curl command manually",
        ],
        details=getattr(exc, "details", None),
        http_status=getattr(exc, "http_status", None),
    )


__all__ = ["ErrorClassification", "classify_error"]
