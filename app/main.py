from __future__ import annotations

import time
from typing import Any

from flask import Flask, Response, current_app, jsonify, request
from flask_cors import CORS

from app.naukri import config
from app.naukri.config_validation import validate_workflow_config
from app.naukri.healthcheck import build_health_payload, run_health_checks
from app.naukri.logging_utils import _scraper_event
from app.naukri.models import (
    CURL_USAGE,
    SESSION_USAGE,
    ScrapeValidationError,
    parse_scrape_request,
)
from app.naukri.run import build_error_body, handle_failure, run_scrape
from app.naukri.utils import elapsed_seconds, log_line

SCRAPE_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

METHOD_NOT_ALLOWED_USAGE: dict[str, Any] = {
    "method": "POST",
    "body": {
        "curlCommand": "string (required) - cURL command from Chrome DevTools",
        "maxResults": "number (optional) - Maximum profiles to scrape (default: 10)",
    },
}


def _workflow_config() -> config.WorkflowConfig:
    return current_app.config["WORKFLOW_CONFIG"]


def _parse_scrape_payload() -> dict[str, object]:
    if request.is_json:
        return request.get_json(silent=True) or {}
    return dict(request.form or {})


def scrape() -> Response:
    """Forward a scrape request to the n8n workflow and return normalized results."""

    if request.method == "OPTIONS":
        return Response(status=200)

    if request.method != "POST":
        return (
            jsonify(
                {
                    "success": False,
                    "error": "Method not allowed. Use POST request.",
                    "usage": METHOD_NOT_ALLOWED_USAGE,
                }
            ),
            405,
        )

    started = time.monotonic()
    workflow_config = _workflow_config()

    try:
        scrape_request = parse_scrape_request(_parse_scrape_payload())
    except ScrapeValidationError as exc:
        _scraper_event(
            "error",
            phase="api",
            context="scrape",
            error="invalid_params",
            details=str(exc),
            remote_addr=request.remote_addr,
        )
        log_line(f"[API] Rejected scrape request: {exc}")
        return (
            jsonify(
                {
                    "success": False,
                    "error": str(exc),
                    "usage": {**CURL_USAGE, **SESSION_USAGE},
                }
            ),
            400,
        )

    try:
        validate_workflow_config(workflow_config, "api")
    except ValueError as exc:
        return jsonify({"success": False, "error": "config_invalid", "details": str(exc)}), 500

    try:
        result = run_scrape(scrape_request, workflow_config, started=started)
    except Exception as exc:  # noqa: BLE001
        classification = handle_failure(exc)
        body = build_error_body(classification, elapsed_seconds(started))
        return jsonify(body), classification.status_code

    return jsonify(result.response_body()), 200


def health() -> Response:
    """Return service identity and configuration health."""

    result = run_health_checks(_workflow_config(), entrypoint="api")
    status = 200 if result.ok else 503
    return jsonify(build_health_payload(result)), status


def create_app(workflow_config: config.WorkflowConfig | None = None) -> Flask:
    """Build the Flask app around an explicit ``WorkflowConfig``.

    When no config is given it is read from the environment once, here.
    """

    flask_app = Flask(__name__)
    flask_app.config["WORKFLOW_CONFIG"] = workflow_config or config.WorkflowConfig.from_env()
    flask_app.json.sort_keys = False

    CORS(
        flask_app,
        resources={r"/*": {"origins": "*"}},
        send_wildcard=True,
        methods=config.CORS_ALLOWED_METHODS,
        allow_headers=config.CORS_ALLOWED_HEADERS,
    )

    for rule in ("/scrape", "/api/scrape"):
        flask_app.add_url_rule(rule, view_func=scrape, methods=SCRAPE_METHODS, endpoint=rule)
    for rule in ("/health", "/api/health"):
        flask_app.add_url_rule(rule, view_func=health, methods=["GET"], endpoint=rule)

    return flask_app


app = create_app()
