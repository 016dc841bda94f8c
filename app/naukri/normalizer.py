"""Decode the n8n webhook body into one of four known response shapes.

Shapes are tested in priority order:

1. an object with a list-valued ``candidates`` field (``CandidateListResponse``)
2. a bare list of profiles (``ProfileListResponse``)
3. any other JSON object (``SingleResultResponse``)
4. anything else, e.g. ``null``, a number or a non-JSON text body
   (``OpaqueResponse``)

Each shape knows its profile ``count``, its normalized ``to_output`` payload
and the ``items`` the batch job pushes to its dataset.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Union


@dataclass(frozen=True)
class CandidateListResponse:
    kind: ClassVar[str] = "candidates"

    candidates: list[Any]
    total_candidates: Any = None
    scraped_at: Any = None

    @property
    def count(self) -> int:
        return len(self.candidates)

    def items(self) -> list[Any]:
        return list(self.candidates)

    def to_output(self, now_iso: str) -> dict[str, Any]:
        return {
            "success": True,
            "totalCandidates": self.total_candidates or self.count,
            "scrapedAt": self.scraped_at or now_iso,
            "candidates": self.candidates,
        }


@dataclass(frozen=True)
class ProfileListResponse:
    kind: ClassVar[str] = "profiles"

    profiles: list[Any] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.profiles)

    def items(self) -> list[Any]:
        return list(self.profiles)

    def to_output(self, now_iso: str) -> dict[str, Any]:
        return {"success": True, "totalProfiles": self.count, "profiles": self.profiles}


@dataclass(frozen=True)
class SingleResultResponse:
    kind: ClassVar[str] = "single"

    data: dict[str, Any] = field(default_factory=dict)

    @property
    def count(self) -> int:
        return 1

    def items(self) -> list[Any]:
        return [self.data]

    def to_output(self, now_iso: str) -> dict[str, Any]:
        return {"success": True, "data": self.data}


@dataclass(frozen=True)
class OpaqueResponse:
    kind: ClassVar[str] = "opaque"

    data: Any = None

    @property
    def count(self) -> int:
        return 0

    def items(self) -> list[Any]:
        return []

    def to_output(self, now_iso: str) -> dict[str, Any]:
        return {"success": True, "data": self.data}


WorkflowResponse = Union[
    CandidateListResponse,
    ProfileListResponse,
    SingleResultResponse,
    OpaqueResponse,
]


def decode_workflow_response(body: Any) -> WorkflowResponse:
    """Classify a decoded webhook body.

    ``totalCandidates`` and ``scrapedAt`` are carried through as sent; only
    the list-valued ``candidates`` field decides the shape.
    """

    if isinstance(body, dict) and isinstance(body.get("candidates"), list):
        return CandidateListResponse(
            candidates=body["candidates"],
            total_candidates=body.get("totalCandidates"),
            scraped_at=body.get("scrapedAt"),
        )
    if isinstance(body, list):
        return ProfileListResponse(profiles=body)
    if isinstance(body, dict):
        return SingleResultResponse(data=body)
    return OpaqueResponse(data=body)


__all__ = [
    "CandidateListResponse",
    "ProfileListResponse",
    "SingleResultResponse",
    "OpaqueResponse",
    "WorkflowResponse",
    "decode_workflow_response",
]
