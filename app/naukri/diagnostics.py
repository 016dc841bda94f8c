"""Requested-vs-received analysis for a finished scrape.

``diagnose`` is pure: it turns two counts into a ``Diagnosis`` holding the
outcome, the probable causes and the remediation steps. Writing those to the
log is the job of ``reporting``.

Resdex returns results in pages of 50, so a partial count that is an exact
multiple of 50 usually means the CV viewing quota ran out between pages.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from .utils import format_percentage

PAGE_SIZE = 50
LOW_COUNT_THRESHOLD = 100


class Outcome:
    COMPLETE = "complete"
    OVER_DELIVERED = "over_delivered"
    PAGED_QUOTA = "paged_quota"
    LOW_COUNT = "low_count"
    PARTIAL = "partial"
    EMPTY = "empty"


PARTIAL_OUTCOMES = frozenset({Outcome.PAGED_QUOTA, Outcome.LOW_COUNT, Outcome.PARTIAL})

PAGED_QUOTA_CAUSES = (
    "Naukri CV viewing quota exhausted",
    "Daily/monthly limit reached",
    "Check your Naukri Resdex dashboard for quota status",
)
LOW_COUNT_CAUSES = (
    "Naukri CV quota nearly exhausted",
    "CAPTCHA triggered (reduce scraping speed in n8n)",
    "Session expired midway",
)
PARTIAL_CAUSES = (
    "CV viewing quota ran out partway through",
    "CAPTCHA triggered after viewing many profiles",
    "Session timeout or network issues",
)
PARTIAL_ACTIONS = (
    "Login to Naukri Resdex and check CV viewing quota",
    "Wait for quota reset (check daily/monthly limits)",
    "Get fresh cookies (new cURL command from Chrome DevTools)",
    "Reduce maxResults to match available quota",
    "If needed, contact Naukri support to purchase more CV credits",
)
PARTIAL_RECOMMENDATIONS = (
    "Check Naukri Resdex CV viewing quota",
    "Get fresh cURL command",
    "Reduce maxResults",
)

EMPTY_CAUSES = (
    "Cookies expired - Get fresh cURL from Chrome DevTools",
    "Account quota fully exhausted - Check Naukri dashboard",
    "Invalid search parameters in n8n workflow",
    "Network/authentication issues",
)
EMPTY_ACTIONS = (
    "Open Naukri Resdex in Chrome incognito mode",
    "Perform a search",
    "Copy fresh cURL command from Network tab",
    "Check Naukri account quota status",
)
EMPTY_RECOMMENDATIONS = (
    "Get fresh cURL command",
    "Check if cookies expired",
    "Verify Naukri account quota",
)
EMPTY_POSSIBLE_REASONS = (
    "Cookies expired",
    "Quota exhausted",
    "Invalid search parameters",
    "Authentication failed",
)


@dataclass(frozen=True)
class Diagnosis:
    outcome: str
    requested: int
    received: int
    causes: tuple[str, ...] = ()
    actions: tuple[str, ...] = ()

    @property
    def is_partial(self) -> bool:
        return self.outcome in PARTIAL_OUTCOMES

    @property
    def is_empty(self) -> bool:
        return self.outcome == Outcome.EMPTY

    @property
    def shortfall(self) -> int:
        """Missing profiles; over-delivery counts as no shortfall."""
        return max(0, self.requested - self.received)

    @property
    def percentage_received(self) -> str:
        return format_percentage(self.received, self.requested)

    @property
    def success_rate(self) -> str:
        return f"{self.percentage_received}%"

    @property
    def pages_received(self) -> int:
        return self.received // PAGE_SIZE

    @property
    def pages_requested(self) -> int:
        return math.ceil(self.requested / PAGE_SIZE)

    @property
    def likely_quota_issue(self) -> bool:
        return self.received % PAGE_SIZE == 0 and self.received < self.requested

    def quota_warning(self) -> dict[str, Any] | None:
        """Return the warning object attached to API responses, if any."""

        if self.is_partial:
            return {
                "message": "Did not get all requested profiles",
                "requested": self.requested,
                "received": self.received,
                "shortfall": self.shortfall,
                "percentageReceived": self.percentage_received,
                "likelyQuotaIssue": self.outcome == Outcome.PAGED_QUOTA,
                "recommendations": list(PARTIAL_RECOMMENDATIONS),
            }
        if self.is_empty:
            return {
                "message": "No profiles scraped",
                "critical": True,
                "recommendations": list(EMPTY_RECOMMENDATIONS),
            }
        return None

    def stats(self, elapsed_seconds: float) -> dict[str, Any]:
        return {
            "requested": self.requested,
            "received": self.received,
            "successRate": self.success_rate,
            "timeTakenSeconds": elapsed_seconds,
            "quotaWarning": self.is_partial,
        }

    def quota_warning_record(self, timestamp: str) -> dict[str, Any]:
        """Return the ``QUOTA_WARNING`` record persisted by the batch job."""

        return {
            "requested": self.requested,
            "received": self.received,
            "shortfall": self.shortfall,
            "percentageReceived": self.percentage_received,
            "likelyQuotaIssue": self.outcome == Outcome.PAGED_QUOTA,
            "pagesReceived": self.pages_received,
            "pagesRequested": self.pages_requested,
            "timestamp": timestamp,
        }

    def error_info(self, timestamp: str) -> dict[str, Any]:
        """Return the ``ERROR_INFO`` record persisted when nothing was scraped."""

        return {
            "error": "No profiles scraped",
            "requested": self.requested,
            "received": self.received,
            "timestamp": timestamp,
            "possibleReasons": list(EMPTY_POSSIBLE_REASONS),
        }

    def scraping_stats(self, elapsed_seconds: float, timestamp: str) -> dict[str, Any]:
        """Return the ``SCRAPING_STATS`` record persisted by the batch job."""

        return {
            "requested": self.requested,
            "received": self.received,
            "shortfall": self.shortfall,
            "successRate": self.success_rate,
            "timeTakenSeconds": elapsed_seconds,
            "timestamp": timestamp,
            "quotaExhausted": self.shortfall > 0,
            "likelyQuotaIssue": self.likely_quota_issue,
        }


def diagnose(requested: int, received: int) -> Diagnosis:
    """Classify a scrape that returned ``received`` of ``requested`` profiles."""

    if received <= 0:
        return Diagnosis(
            Outcome.EMPTY, requested, 0, causes=EMPTY_CAUSES, actions=EMPTY_ACTIONS
        )
    if received == requested:
        return Diagnosis(Outcome.COMPLETE, requested, received)
    if received > requested:
        return Diagnosis(Outcome.OVER_DELIVERED, requested, received)

    if received % PAGE_SIZE == 0:
        outcome, causes = Outcome.PAGED_QUOTA, PAGED_QUOTA_CAUSES
    elif received < LOW_COUNT_THRESHOLD:
        outcome, causes = Outcome.LOW_COUNT, LOW_COUNT_CAUSES
    else:
        outcome, causes = Outcome.PARTIAL, PARTIAL_CAUSES
    return Diagnosis(outcome, requested, received, causes=causes, actions=PARTIAL_ACTIONS)


__all__ = [
    "Diagnosis",
    "Outcome",
    "diagnose",
    "PAGE_SIZE",
    "PARTIAL_RECOMMENDATIONS",
    "EMPTY_RECOMMENDATIONS",
]
