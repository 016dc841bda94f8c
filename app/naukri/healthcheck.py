from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from . import config
from .config_validation import Entrypoint, validate_workflow_config
from .logging_utils import _scraper_event
from .utils import log_line, utc_now_iso


@dataclass
class HealthResult:
    ok: bool
    checks: dict[str, dict[str, Any]]


def run_health_checks(workflow_config: config.WorkflowConfig, entrypoint: Entrypoint = "api") -> HealthResult:
    """Check the configuration needed to reach the n8n webhook.

    The webhook itself is not called; a health probe must not start a scrape.
    """

    checks: dict[str, dict[str, Any]] = {}
    try:
        validate_workflow_config(workflow_config, entrypoint)
        checks["config"] = {"ok": True}
    except ValueError as exc:
        checks["config"] = {"ok": False, "error": str(exc)}

    overall_ok = all(check.get("ok", False) for check in checks.values())
    _scraper_event(
        "state" if overall_ok else "error",
        phase="health",
        context="healthcheck",
        ok=overall_ok,
        checks=checks,
    )
    return HealthResult(ok=overall_ok, checks=checks)


def build_health_payload(result: HealthResult) -> dict[str, Any]:
    return {
        "status": "ok" if result.ok else "degraded",
        "service": config.SERVICE_NAME,
        "version": config.SERVICE_VERSION,
        "timestamp": utc_now_iso(),
        "checks": result.checks,
    }


if __name__ == "__main__":  # pragma: no cover
    result = run_health_checks(config.WorkflowConfig.from_env(), entrypoint="api")
    for name, info in result.checks.items():
        status = "OK" if info.get("ok") else "FAIL"
        log_line(f"[HEALTH] {name}: {status} {info}")
    raise SystemExit(0 if result.ok else 1)
