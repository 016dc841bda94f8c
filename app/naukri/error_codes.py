from __future__ import annotations

"""Error code taxonomy for scrape request failures.

These codes appear in structured logs, in ``WorkflowError.error_code`` and in
the batch ``ERROR_LOG`` record. They should stay stable for log searches.
"""


class ErrorCode:
    VALIDATION = "validation_error"
    UPSTREAM_UNREACHABLE = "upstream_unreachable"
    TIMEOUT = "timeout"
    UPSTREAM_AUTH = "upstream_auth"
    UPSTREAM_SERVER = "upstream_server_error"
    UPSTREAM_HTTP = "upstream_http_error"
    INTERNAL = "internal_error"


__all__ = ["ErrorCode"]
