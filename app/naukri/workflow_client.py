from __future__ import annotations

import urllib.parse
from typing import Any, Optional

import requests
from urllib3.exceptions import ReadTimeoutError

from .config import WorkflowConfig
from .error_codes import ErrorCode
from .logging_utils import _scraper_event
from .utils import log_line


class WorkflowError(Exception):
    """A failed call to the n8n webhook.

    ``details`` holds the upstream response body (decoded JSON when possible)
    so callers can surface it next to their own message.
    """

    def __init__(
        self,
        error_code: str,
        message: str,
        *,
        http_status: int | None = None,
        details: Any = None,
    ) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.http_status = http_status
        self.details = details


def _redact_url(url: str) -> str:
    try:
        parsed = urllib.parse.urlparse(url)
        return urllib.parse.urlunparse(parsed._replace(query=""))
    except Exception:
        return url


def _classify_http_status(status: Optional[int]) -> str:
    if status is None:
        return ErrorCode.INTERNAL
    if status in {401, 403}:
        return ErrorCode.UPSTREAM_AUTH
    if status == 500:
        return ErrorCode.UPSTREAM_SERVER
    return ErrorCode.UPSTREAM_HTTP


def _response_body(response: Any) -> Any:
    """Return the JSON body of ``response``, or its text when it is not JSON."""

    try:
        return response.json()
    except ValueError:
        return getattr(response, "text", None) or None


def _is_read_timeout(exc: BaseException) -> bool:
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, ReadTimeoutError):
            return True
        if any(isinstance(arg, ReadTimeoutError) for arg in current.args):
            return True
        current = current.__cause__ or current.__context__
    return False


def build_headers(workflow_config: WorkflowConfig) -> dict[str, str]:
    headers = {"Content-Type": "application/json"}
    if workflow_config.webhook_secret:
        headers["Authorization"] = f"Bearer {workflow_config.webhook_secret}"
    return headers


def post_to_workflow(workflow_config: WorkflowConfig, payload: dict[str, Any]) -> Any:
    """POST ``payload`` to the n8n webhook once and return the decoded body.

    There is no retry: timeouts, connection failures and non-2xx answers are
    raised as ``WorkflowError`` with an ``ErrorCode``.

    ``timeout_seconds`` bounds the connect and each socket read, not the
    whole call, so an upstream that keeps trickling bytes can run past it.
    """

    safe_url = _redact_url(workflow_config.webhook_url)
    _scraper_event(
        "workflow",
        phase="request",
        url=safe_url,
        timeout_seconds=workflow_config.timeout_seconds,
        authenticated=bool(workflow_config.webhook_secret),
    )

    try:
        response = requests.post(
            workflow_config.webhook_url,
            json=payload,
            headers=build_headers(workflow_config),
            timeout=workflow_config.timeout_seconds,
        )
        response.raise_for_status()
    # ConnectTimeout is both a Timeout and a ConnectionError; timeouts win.
    except requests.Timeout as exc:
        _scraper_event("error", phase="workflow", error=ErrorCode.TIMEOUT, url=safe_url)
        raise WorkflowError(ErrorCode.TIMEOUT, str(exc) or "timeout") from exc
    except requests.ConnectionError as exc:
        # A timeout while reading the body surfaces as ConnectionError.
        if _is_read_timeout(exc):
            _scraper_event("error", phase="workflow", error=ErrorCode.TIMEOUT, url=safe_url)
            raise WorkflowError(ErrorCode.TIMEOUT, str(exc) or "timeout") from exc
        _scraper_event(
            "error", phase="workflow", error=ErrorCode.UPSTREAM_UNREACHABLE, url=safe_url
        )
        raise WorkflowError(ErrorCode.UPSTREAM_UNREACHABLE, str(exc) or "connection failed") from exc
    except requests.HTTPError as exc:
        status = getattr(exc.response, "status_code", None)
        details = _response_body(exc.response) if exc.response is not None else None
        error_code = _classify_http_status(status)
        _scraper_event(
            "error", phase="workflow", error=error_code, http_status=status, url=safe_url
        )
        raise WorkflowError(
            error_code,
            f"Request failed with status code {status}",
            http_status=status,
            details=details,
        ) from exc

    log_line(f"[WORKFLOW] url={safe_url} status={response.status_code}")
    return _response_body(response)


__all__ = [
    "WorkflowError",
    "build_headers",
    "post_to_workflow",
]
