"""Inbound scrape request models.

A scrape request comes in one of two kinds:

* ``CurlScrapeRequest``: a cURL command copied from Chrome DevTools, which
  carries the Resdex session cookies and search parameters.
* ``SessionScrapeRequest``: the session cookies plus the Resdex identifiers
  the workflow needs to rebuild the search itself.

Both forward ``maxResults`` to the workflow after clamping it to
``[MIN_MAX_RESULTS, MAX_MAX_RESULTS]``.
"""
from __future__ import annotations

import math
import re
from collections.abc import Mapping
from typing import Any, ClassVar, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .config import DEFAULT_MAX_RESULTS, MAX_MAX_RESULTS, MIN_MAX_RESULTS

SESSION_ID_FIELDS: tuple[str, ...] = ("requirementId", "companyId", "rdxUserId", "rdxUserName")

CURL_USAGE: dict[str, str] = {
    "curlCommand": "The complete cURL command copied from Chrome DevTools Network tab",
    "maxResults": f"Optional number of profiles to scrape (default: {DEFAULT_MAX_RESULTS})",
}

SESSION_USAGE: dict[str, str] = {
    "cookies": "Resdex session cookies (alternative to curlCommand)",
    "requirementId": "Resdex requirement ID (required with cookies)",
    "companyId": "Resdex company ID (required with cookies)",
    "rdxUserId": "Resdex user ID (required with cookies)",
    "rdxUserName": "Resdex user name (required with cookies)",
}

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


class ScrapeValidationError(ValueError):
    """Raised when an inbound scrape request is missing or has invalid fields."""

    def __init__(self, message: str, *, missing_fields: list[str] | None = None) -> None:
        super().__init__(message)
        self.missing_fields = list(missing_fields or [])


def _parse_leading_int(raw: Any) -> int | None:
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        return int(raw) if math.isfinite(raw) else None
    if isinstance(raw, str):
        match = _LEADING_INT.match(raw)
        return int(match.group(1)) if match else None
    return None


def clamp_max_results(raw: Any) -> int:
    """Return ``raw`` as a result count clamped to ``[1, 1000]``.

    Strings contribute their leading digits (``"25abc"`` -> 25). Missing,
    non-numeric and zero values fall back to ``DEFAULT_MAX_RESULTS``.
    """

    value = _parse_leading_int(raw)
    if not value:
        value = DEFAULT_MAX_RESULTS
    return min(max(MIN_MAX_RESULTS, value), MAX_MAX_RESULTS)


class _ScrapeRequestBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    max_results: int = Field(DEFAULT_MAX_RESULTS, alias="maxResults")

    @field_validator("max_results", mode="before")
    @classmethod
    def _clamp_max_results(cls, value: Any) -> int:
        return clamp_max_results(value)


class CurlScrapeRequest(_ScrapeRequestBase):
    kind: ClassVar[str] = "curl"

    curl_command: str = Field(..., alias="curlCommand", min_length=1)

    def to_workflow_payload(self) -> dict[str, Any]:
        return {"curlCommand": self.curl_command, "maxResults": self.max_results}

    def log_fields(self) -> dict[str, Any]:
        return {"kind": self.kind, "max_results": self.max_results}


class SessionScrapeRequest(_ScrapeRequestBase):
    kind: ClassVar[str] = "session"

    cookies: str = Field(..., min_length=1)
    requirement_id: Union[str, int] = Field(..., alias="requirementId")
    company_id: Union[str, int] = Field(..., alias="companyId")
    rdx_user_id: Union[str, int] = Field(..., alias="rdxUserId")
    rdx_user_name: str = Field(..., alias="rdxUserName", min_length=1)

    def to_workflow_payload(self) -> dict[str, Any]:
        return {
            "cookies": self.cookies,
            "requirementId": self.requirement_id,
            "companyId": self.company_id,
            "rdxUserId": self.rdx_user_id,
            "rdxUserName": self.rdx_user_name,
            "maxResults": self.max_results,
        }

    def log_fields(self) -> dict[str, Any]:
        # Cookies stay out of the logs.
        return {
            "kind": self.kind,
            "requirement_id": self.requirement_id,
            "company_id": self.company_id,
            "rdx_user_id": self.rdx_user_id,
            "max_results": self.max_results,
        }


ScrapeRequest = Union[CurlScrapeRequest, SessionScrapeRequest]


def _describe_validation_error(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts) or "Invalid scrape request"


def parse_scrape_request(payload: Any) -> ScrapeRequest:
    """Decode an inbound payload into a ``CurlScrapeRequest`` or ``SessionScrapeRequest``.

    ``curlCommand`` takes precedence when both kinds of credentials are sent.
    Raises ``ScrapeValidationError`` when neither is present, when cookie
    requests lack an identifier, or when a field has the wrong type.
    """

    if not isinstance(payload, Mapping):
        payload = {}

    model: type[_ScrapeRequestBase]
    if payload.get("curlCommand"):
        model = CurlScrapeRequest
    elif payload.get("cookies"):
        missing = [name for name in SESSION_ID_FIELDS if not payload.get(name)]
        if missing:
            raise ScrapeValidationError(
                f"Missing required fields: {', '.join(missing)}",
                missing_fields=missing,
            )
        model = SessionScrapeRequest
    else:
        raise ScrapeValidationError("curlCommand is required", missing_fields=["curlCommand"])

    try:
        return model.model_validate(dict(payload))
    except ValidationError as exc:
        raise ScrapeValidationError(_describe_validation_error(exc)) from exc


__all__ = [
    "CurlScrapeRequest",
    "SessionScrapeRequest",
    "ScrapeRequest",
    "ScrapeValidationError",
    "parse_scrape_request",
    "clamp_max_results",
    "CURL_USAGE",
    "SESSION_USAGE",
    "SESSION_ID_FIELDS",
]
