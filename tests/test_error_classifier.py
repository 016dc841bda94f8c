from __future__ import annotations

import pytest

from app.naukri.error_classifier import classify_error
from app.naukri.error_codes import ErrorCode
from app.naukri.models import ScrapeValidationError
from app.naukri.workflow_client import WorkflowError


def test_validation_error_maps_to_400() -> None:
    result = classify_error(ScrapeValidationError("curlCommand is required"))

    assert result.status_code == 400
    assert result.error_code == ErrorCode.VALIDATION
    assert result.message == "curlCommand is required"
    assert result.guidance == ["Provide curlCommand in request body"]


@pytest.mark.parametrize(
    "error_code, http_status, status_code, message",
    [
        (ErrorCode.UPSTREAM_UNREACHABLE, None, 503, "n8n webhook is not accessible"),
        (ErrorCode.TIMEOUT, None, 504, "Request timed out"),
        (ErrorCode.UPSTREAM_AUTH, 401, 401, "Authentication failed"),
        (ErrorCode.UPSTREAM_AUTH, 403, 401, "Authentication failed"),
        (ErrorCode.UPSTREAM_SERVER, 500, 502, "n8n workflow error"),
    ],
)
def test_workflow_errors_map_to_status(
    error_code: str, http_status: int | None, status_code: int, message: str
) -> None:
    exc = WorkflowError(error_code, "raw failure", http_status=http_status, details={"hint": "x"})

    result = classify_error(exc)

    assert result.status_code == status_code
    assert result.message == message
    assert result.error_code == error_code
    assert result.details == {"hint": "x"}
    assert result.http_status == http_status
    assert result.guidance
    assert result.steps


def test_other_upstream_status_keeps_original_message() -> None:
    exc = WorkflowError(ErrorCode.UPSTREAM_HTTP, "Request failed with status code 404", http_status=404)

    result = classify_error(exc)

    assert result.status_code == 500
    assert result.message == "Request failed with status code 404"
    assert result.guidance == ["Review n8n workflow logs", "Verify configurations"]


def test_unknown_exception_defaults_to_500() -> None:
    result = classify_error(RuntimeError("boom"))

    assert result.status_code == 500
    assert result.error_code == ErrorCode.INTERNAL
    assert result.message == "boom"
    assert result.details is None
