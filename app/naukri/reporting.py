"""Human-readable log output for each phase of a scrape request."""
from __future__ import annotations

import json
from typing import Any

from .config import WorkflowConfig
from .diagnostics import Diagnosis, Outcome
from .error_classifier import ErrorClassification
from .models import ScrapeRequest
from .normalizer import WorkflowResponse
from .utils import BANNER_WIDTH, log_banner, log_line


def report_start(title: str, scrape_request: ScrapeRequest, workflow_config: WorkflowConfig, started_at: str) -> None:
    log_banner(title)
    log_line(f"[PARAMS] Request kind: {scrape_request.kind}")
    log_line(f"[PARAMS] Requested profiles: {scrape_request.max_results}")
    log_line(f"[PARAMS] n8n webhook: {workflow_config.webhook_url}")
    log_line(f"[PARAMS] Started at: {started_at}")
    log_line("[WORKFLOW] Calling n8n workflow...")


def report_response(response: WorkflowResponse) -> None:
    if response.kind == "candidates":
        log_line(f"[RESULTS] Processing {response.count} candidates from n8n")
    elif response.kind == "profiles":
        log_line(f"[RESULTS] Processing {response.count} results from n8n")
    elif response.kind == "single":
        log_line("[RESULTS] Processing single result from n8n")
    else:
        log_line("[RESULTS][WARN] Unexpected response format from n8n")


def report_diagnosis(diagnosis: Diagnosis, elapsed_seconds: float) -> None:
    log_banner("SCRAPING RESULTS")
    log_line(f"[RESULTS] Profiles received: {diagnosis.received}")
    log_line(f"[RESULTS] Profiles requested: {diagnosis.requested}")
    log_line(f"[RESULTS] Time taken: {elapsed_seconds}s")

    if diagnosis.is_partial:
        log_line("[QUOTA][WARN] ATTENTION: Did not get all requested profiles")
        log_line("-" * BANNER_WIDTH)
        log_line(
            f"[QUOTA] Missing: {diagnosis.shortfall} profiles "
            f"(got {diagnosis.percentage_received}%)"
        )
        log_line("[QUOTA] Possible reasons:")
        if diagnosis.outcome == Outcome.PAGED_QUOTA:
            log_line(
                f"[QUOTA]   Got {diagnosis.pages_received} pages out of "
                f"{diagnosis.pages_requested} requested pages"
            )
        elif diagnosis.outcome == Outcome.LOW_COUNT:
            log_line("[QUOTA]   Low profile count - Likely causes:")
        else:
            log_line("[QUOTA]   Partial success - Possible causes:")
        for cause in diagnosis.causes:
            log_line(f"[QUOTA]     * {cause}")
        log_line("[QUOTA] Recommended actions:")
        for index, action in enumerate(diagnosis.actions, start=1):
            log_line(f"[QUOTA]   {index}. {action}")
    elif diagnosis.is_empty:
        log_line("[QUOTA][CRITICAL] No profiles scraped!")
        log_line("-" * BANNER_WIDTH)
        log_line("[QUOTA] Likely causes:")
        for cause in diagnosis.causes:
            log_line(f"[QUOTA]   * {cause}")
        log_line("[QUOTA] Immediate actions:")
        for index, action in enumerate(diagnosis.actions, start=1):
            log_line(f"[QUOTA]   {index}. {action}")
    elif diagnosis.outcome == Outcome.OVER_DELIVERED:
        log_line(
            f"[RESULTS] Received {diagnosis.received - diagnosis.requested} more profiles than requested"
        )
    else:
        log_line("[RESULTS] SUCCESS: Got all requested profiles!")


def report_summary(diagnosis: Diagnosis, elapsed_seconds: float, closing: str) -> None:
    log_banner("SCRAPING COMPLETE")
    log_line(f"[SUMMARY] Total profiles saved: {diagnosis.received}")
    log_line(f"[SUMMARY] Success rate: {diagnosis.success_rate}")
    log_line(f"[SUMMARY] Total time: {elapsed_seconds}s")
    if diagnosis.shortfall > 0:
        log_line("[SUMMARY][WARN] NOTE: Partial results (see quota details above)")
    log_line(f"[SUMMARY] {closing}")
    log_line("=" * BANNER_WIDTH)


def _format_details(details: Any) -> str:
    try:
        return json.dumps(details, indent=2, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        return repr(details)


def report_failure(classification: ErrorClassification, raw_message: str) -> None:
    log_banner("SCRAPING FAILED")
    log_line(f"[ERROR] Error: {raw_message}")
    if classification.details:
        log_line("[ERROR] Error details from n8n:")
        for line in _format_details(classification.details).splitlines():
            log_line(f"[ERROR]   {line}")
    log_line(f"[ERROR] Fix: {classification.fix}")
    for step in classification.steps:
        log_line(f"[ERROR]   * {step}")
    log_line("=" * BANNER_WIDTH)


__all__ = [
    "report_start",
    "report_response",
    "report_diagnosis",
    "report_summary",
    "report_failure",
]
