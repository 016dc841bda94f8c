from __future__ import annotations

"""Batch-job runner: one scrape per Actor run.

Each normalized item is pushed to the default dataset. The default key-value
store receives ``OUTPUT``, then ``QUOTA_WARNING`` (partial results) or
``ERROR_INFO`` (no results), then ``SCRAPING_STATS``. A failed job writes
``OUTPUT`` and ``ERROR_LOG`` and the exception is re-raised, which fails the
run.
"""

import asyncio
import time
import traceback
from typing import Any

from apify import Actor

from . import config
from .config_validation import validate_workflow_config
from .logging_utils import _scraper_event
from .models import parse_scrape_request
from .run import handle_failure, run_scrape
from .utils import log_line, utc_now_iso

OUTPUT_KEY = "OUTPUT"
QUOTA_WARNING_KEY = "QUOTA_WARNING"
ERROR_INFO_KEY = "ERROR_INFO"
SCRAPING_STATS_KEY = "SCRAPING_STATS"
ERROR_LOG_KEY = "ERROR_LOG"


async def run_job(job_input: Any, *, workflow_config: config.WorkflowConfig) -> dict[str, Any]:
    """Run one scrape job and persist its results; return the ``OUTPUT`` record.

    Must be awaited inside an initialized ``Actor``. The webhook call runs in
    a worker thread so the Actor event loop keeps serving platform events.
    """

    started = time.monotonic()
    try:
        validate_workflow_config(workflow_config, "batch")
        scrape_request = parse_scrape_request(job_input)
        result = await asyncio.to_thread(
            run_scrape,
            scrape_request,
            workflow_config,
            title="NAUKRI CV SCRAPER STARTED",
            closing="Job finished successfully",
            started=started,
        )

        items = result.response.items()
        for item in items:
            await Actor.push_data(item)
        _scraper_event("state", phase="batch", context="dataset", pushed=len(items))

        output = result.output()
        await Actor.set_value(OUTPUT_KEY, output)

        diagnosis = result.diagnosis
        if diagnosis.is_partial:
            await Actor.set_value(QUOTA_WARNING_KEY, diagnosis.quota_warning_record(utc_now_iso()))
        elif diagnosis.is_empty:
            await Actor.set_value(ERROR_INFO_KEY, diagnosis.error_info(utc_now_iso()))

        await Actor.set_value(
            SCRAPING_STATS_KEY,
            diagnosis.scraping_stats(result.elapsed_seconds, utc_now_iso()),
        )
        return output
    except Exception as exc:
        stack = traceback.format_exc()
        classification = handle_failure(exc)
        timestamp = utc_now_iso()
        await Actor.set_value(
            OUTPUT_KEY,
            {
                "success": False,
                "error": str(exc),
                "details": classification.details,
                "timestamp": timestamp,
            },
        )
        await Actor.set_value(
            ERROR_LOG_KEY,
            {
                "error": str(exc),
                "stack": stack,
                "response": classification.details,
                "code": classification.error_code,
                "status": classification.http_status,
                "timestamp": timestamp,
            },
        )
        log_line(f"[BATCH] Job failed: {exc}")
        raise


async def run_actor() -> None:
    """Read the Actor input and run one job; a failure fails the Actor run."""

    async with Actor:
        job_input = await Actor.get_input()
        await run_job(job_input, workflow_config=config.WorkflowConfig.from_env())


def main() -> None:
    """Entry point for the ``naukri-scrape-job`` console script."""

    asyncio.run(run_actor())


if __name__ == "__main__":  # pragma: no cover - Actor entry
    main()
