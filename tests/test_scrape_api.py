from __future__ import annotations

from typing import Any

import pytest
import requests
from urllib3.exceptions import ReadTimeoutError

from app.main import create_app
from app.naukri.config import WorkflowConfig
from tests.test_workflow_client import FakeResponse, install_fake_post

WEBHOOK_URL = "https://n8n.example.test/webhook/naukri-scrapper"


def _client(**overrides: Any):
    workflow_config = WorkflowConfig(
        webhook_url=overrides.pop("webhook_url", WEBHOOK_URL),
        webhook_secret=overrides.pop("webhook_secret", None),
        timeout_seconds=overrides.pop("timeout_seconds", 30),
    )
    return create_app(workflow_config).test_client()


def test_scrape_returns_candidates(monkeypatch: pytest.MonkeyPatch) -> None:
    upstream = {
        "candidates": [{"name": "A"}, {"name": "B"}, {"name": "C"}],
        "totalCandidates": 3,
        "scrapedAt": "T",
    }
    calls = install_fake_post(monkeypatch, FakeResponse(body=upstream))

    resp = _client().post("/scrape", json={"curlCommand": "curl 'https://resdex'", "maxResults": 3})

    assert resp.status_code == 200
    data = resp.get_json()
    assert data["success"] is True
    assert len(data["candidates"]) == 3
    assert data["totalCandidates"] == 3
    assert data["scrapedAt"] == "T"
    assert data["stats"]["requested"] == 3
    assert data["stats"]["received"] == 3
    assert data["stats"]["successRate"] == "100.0%"
    assert data["stats"]["quotaWarning"] is False
    assert "quotaWarning" not in data

    assert len(calls) == 1
    assert calls[0]["url"] == WEBHOOK_URL
    assert calls[0]["json"] == {"curlCommand": "curl 'https://resdex'", "maxResults": 3}
    assert calls[0]["timeout"] == 30


def test_scrape_reports_profile_lists(monkeypatch: pytest.MonkeyPatch) -> None:
    install_fake_post(monkeypatch, FakeResponse(body=[{"id": 1}, {"id": 2}]))

    resp = _client().post("/api/scrape", json={"curlCommand": "curl x", "maxResults": 2})

    assert resp.status_code == 200
    data = resp.get_json()
    assert data["totalProfiles"] == 2
    assert data["profiles"] == [{"id": 1}, {"id": 2}]


def test_scrape_missing_curl_command_never_calls_workflow(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = install_fake_post(monkeypatch, FakeResponse(body={}))

    resp = _client().post("/scrape", json={"maxResults": 10})

    assert resp.status_code == 400
    data = resp.get_json()
    assert data["success"] is False
    assert data["error"] == "curlCommand is required"
    assert "curlCommand" in data["usage"]
    assert calls == []


def test_scrape_without_body_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = install_fake_post(monkeypatch, FakeResponse(body={}))

    resp = _client().post("/scrape")

    assert resp.status_code == 400
    assert calls == []


def test_scrape_session_request_requires_identifiers(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = install_fake_post(monkeypatch, FakeResponse(body={}))

    resp = _client().post("/scrape", json={"cookies": "a=b", "requirementId": "r1"})

    assert resp.status_code == 400
    assert "companyId" in resp.get_json()["error"]
    assert calls == []


def test_scrape_forwards_session_request(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = install_fake_post(monkeypatch, FakeResponse(body={"candidates": []}))

    resp = _client(webhook_secret="s3cret").post(
        "/scrape",
        json={
            "cookies": "a=b",
            "requirementId": "r1",
            "companyId": "c1",
            "rdxUserId": "u1",
            "rdxUserName": "recruiter",
            "maxResults": "5000",
        },
    )

    assert resp.status_code == 200
    assert calls[0]["json"] == {
        "cookies": "a=b",
        "requirementId": "r1",
        "companyId": "c1",
        "rdxUserId": "u1",
        "rdxUserName": "recruiter",
        "maxResults": 1000,
    }
    assert calls[0]["headers"]["Authorization"] == "Bearer s3cret"
    data = resp.get_json()
    assert data["quotaWarning"]["critical"] is True


def test_scrape_partial_results_carry_quota_warning(monkeypatch: pytest.MonkeyPatch) -> None:
    install_fake_post(monkeypatch, FakeResponse(body=[{"id": i} for i in range(50)]))

    resp = _client().post("/scrape", json={"curlCommand": "curl x", "maxResults": 100})

    assert resp.status_code == 200
    data = resp.get_json()
    assert data["stats"]["quotaWarning"] is True
    warning = data["quotaWarning"]
    assert warning["shortfall"] == 50
    assert warning["percentageReceived"] == "50.0"
    assert warning["likelyQuotaIssue"] is True


def test_scrape_single_object(monkeypatch: pytest.MonkeyPatch) -> None:
    install_fake_post(monkeypatch, FakeResponse(body={"message": "ok"}))

    resp = _client().post("/scrape", json={"curlCommand": "curl x", "maxResults": 1})

    data = resp.get_json()
    assert data["data"] == {"message": "ok"}
    assert data["stats"]["received"] == 1
    assert "quotaWarning" not in data


@pytest.mark.parametrize(
    "exc",
    [
        requests.ReadTimeout("Read timed out. (read timeout=30)"),
        requests.ConnectionError(ReadTimeoutError(None, WEBHOOK_URL, "Read timed out.")),
    ],
)
def test_scrape_timeout_maps_to_504(monkeypatch: pytest.MonkeyPatch, exc: Exception) -> None:
    install_fake_post(monkeypatch, exc)

    resp = _client().post("/scrape", json={"curlCommand": "curl x", "maxResults": 1000})

    assert resp.status_code == 504
    data = resp.get_json()
    assert data["success"] is False
    assert data["error"] == "Request timed out"
    assert data["guidance"] == ["Reduce maxResults", "Check n8n workflow performance"]
    assert "timeTakenSeconds" in data["stats"]


def test_scrape_upstream_500_maps_to_502(monkeypatch: pytest.MonkeyPatch) -> None:
    install_fake_post(
        monkeypatch, FakeResponse(status_code=500, body={"message": "Workflow execution failed"})
    )

    resp = _client().post("/scrape", json={"curlCommand": "curl x"})

    assert resp.status_code == 502
    data = resp.get_json()
    assert data["error"] == "n8n workflow error"
    assert data["details"] == {"message": "Workflow execution failed"}


def test_scrape_connection_refused_maps_to_503(monkeypatch: pytest.MonkeyPatch) -> None:
    install_fake_post(monkeypatch, requests.ConnectionError("[Errno 111] Connection refused"))

    resp = _client().post("/scrape", json={"curlCommand": "curl x"})

    assert resp.status_code == 503
    assert resp.get_json()["error"] == "n8n webhook is not accessible"


def test_scrape_rejects_invalid_config(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = install_fake_post(monkeypatch, FakeResponse(body={}))

    resp = _client(webhook_url="ftp://n8n.example.test").post("/scrape", json={"curlCommand": "curl x"})

    assert resp.status_code == 500
    assert resp.get_json()["error"] == "config_invalid"
    assert calls == []


def test_scrape_other_methods_are_not_allowed() -> None:
    resp = _client().get("/scrape")

    assert resp.status_code == 405
    data = resp.get_json()
    assert data["success"] is False
    assert data["usage"]["method"] == "POST"


def test_scrape_preflight_is_empty_ok() -> None:
    resp = _client().options(
        "/scrape",
        headers={
            "Origin": "https://app.example.test",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Content-Type",
        },
    )

    assert resp.status_code == 200
    assert resp.data == b""
    assert resp.headers.get("Access-Control-Allow-Origin") == "*"


def test_cors_header_on_json_responses(monkeypatch: pytest.MonkeyPatch) -> None:
    install_fake_post(monkeypatch, FakeResponse(body=[]))

    resp = _client().post(
        "/scrape",
        json={"curlCommand": "curl x"},
        headers={"Origin": "https://app.example.test"},
    )

    assert resp.headers.get("Access-Control-Allow-Origin") == "*"


def test_scrape_keeps_candidates_with_unexpected_metadata(monkeypatch: pytest.MonkeyPatch) -> None:
    install_fake_post(monkeypatch, FakeResponse(body={"candidates": [{"n": 1}], "scrapedAt": 1760000000}))

    resp = _client().post("/scrape", json={"curlCommand": "curl x", "maxResults": 1})

    assert resp.status_code == 200
    data = resp.get_json()
    assert data["candidates"] == [{"n": 1}]
    assert data["scrapedAt"] == 1760000000
    assert data["stats"]["received"] == 1
