from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any

from .config import WorkflowConfig
from .diagnostics import Diagnosis, diagnose
from .error_classifier import ErrorClassification, classify_error
from .logging_utils import _scraper_event
from .models import ScrapeRequest
from .normalizer import WorkflowResponse, decode_workflow_response
from .reporting import (
    report_diagnosis,
    report_failure,
    report_response,
    report_start,
    report_summary,
)
from .utils import elapsed_seconds, log_line, utc_now_iso
from .workflow_client import post_to_workflow


@dataclass(frozen=True)
class ScrapeResult:
    scrape_request: ScrapeRequest
    response: WorkflowResponse
    diagnosis: Diagnosis
    elapsed_seconds: float
    completed_at: str

    def output(self) -> dict[str, Any]:
        """Return the normalized payload without stats."""

        return self.response.to_output(self.completed_at)

    def response_body(self) -> dict[str, Any]:
        """Return the API body: normalized payload, stats and optional warning."""

        body = self.output()
        body["stats"] = self.diagnosis.stats(self.elapsed_seconds)
        warning = self.diagnosis.quota_warning()
        if warning is not None:
            body["quotaWarning"] = warning
        return body


def run_scrape(
    scrape_request: ScrapeRequest,
    workflow_config: WorkflowConfig,
    *,
    title: str = "NAUKRI CV SCRAPER API",
    closing: str = "API request completed successfully",
    started: float | None = None,
) -> ScrapeResult:
    """Forward ``scrape_request`` to n8n and analyse what came back.

    ``started`` is a ``time.monotonic`` reading taken by the caller so the
    reported time covers validation as well. Failures from the workflow call
    or the response decode propagate unchanged.
    """

    if started is None:
        started = time.monotonic()

    report_start(title, scrape_request, workflow_config, utc_now_iso())
    _scraper_event("state", phase="scrape", context="start", **scrape_request.log_fields())

    body = post_to_workflow(workflow_config, scrape_request.to_workflow_payload())
    log_line("[WORKFLOW] n8n workflow completed successfully")

    response = decode_workflow_response(body)
    report_response(response)

    elapsed = elapsed_seconds(started)
    diagnosis = diagnose(scrape_request.max_results, response.count)
    report_diagnosis(diagnosis, elapsed)
    report_summary(diagnosis, elapsed, closing)

    _scraper_event(
        "state",
        phase="scrape",
        context="complete",
        shape=response.kind,
        outcome=diagnosis.outcome,
        requested=diagnosis.requested,
        received=diagnosis.received,
        elapsed_seconds=elapsed,
    )

    return ScrapeResult(
        scrape_request=scrape_request,
        response=response,
        diagnosis=diagnosis,
        elapsed_seconds=elapsed,
        completed_at=utc_now_iso(),
    )


def handle_failure(exc: BaseException) -> ErrorClassification:
    """Classify ``exc`` and write the operator guidance to the log."""

    classification = classify_error(exc)
    report_failure(classification, str(exc) or exc.__class__.__name__)
    _scraper_event(
        "error",
        phase="scrape",
        error=classification.error_code,
        status_code=classification.status_code,
        http_status=classification.http_status,
        message=str(exc),
    )
    return classification


def build_error_body(classification: ErrorClassification, elapsed: float) -> dict[str, Any]:
    body: dict[str, Any] = {
        "success": False,
        "error": classification.message,
        "details": classification.details,
        "stats": {"timeTakenSeconds": elapsed},
    }
    if classification.guidance:
        body["guidance"] = list(classification.guidance)
    return body


__all__ = ["ScrapeResult", "run_scrape", "handle_failure", "build_error_body"]
