from __future__ import annotations

import logging
import sys
import time
from datetime import datetime, timezone
from pathlib import Path

from . import config

LOGGER = logging.getLogger("naukri")
_LOGGER_INITIALISED = False

BANNER_WIDTH = 60


def _configure_logger(log_path: Path | None) -> None:
    """Configure the shared application logger (stdout plus optional file)."""

    global _LOGGER_INITIALISED

    for handler in list(LOGGER.handlers):
        LOGGER.removeHandler(handler)
        try:
            handler.close()
        except Exception:  # noqa: BLE001
            continue

    formatter = logging.Formatter(
        fmt="[%(asctime)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)
    LOGGER.addHandler(stream_handler)

    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        LOGGER.addHandler(file_handler)

    LOGGER.setLevel(logging.INFO)
    LOGGER.propagate = False
    _LOGGER_INITIALISED = True


def _ensure_logger() -> None:
    """Initialise the logger lazily from ``NAUKRI_LOG_FILE``."""

    if _LOGGER_INITIALISED:
        return
    _configure_logger(config.log_file())


def log_line(message: str) -> None:
    """Write a timestamped log line to stdout and the optional log file."""

    _ensure_logger()
    LOGGER.info(message)


def log_banner(title: str) -> None:
    """Write ``title`` framed by ``=`` rules."""

    rule = "=" * BANNER_WIDTH
    log_line(rule)
    log_line(title)
    log_line(rule)


def utc_now_iso() -> str:
    """Return the current UTC time as an ISO-8601 string with millisecond precision."""

    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def elapsed_seconds(started: float) -> float:
    """Return seconds since ``started`` (a ``time.monotonic`` value), one decimal."""

    return round(time.monotonic() - started, 1)


def format_percentage(part: int, whole: int) -> str:
    """Return ``part / whole`` as a percentage string with one decimal place."""

    if whole <= 0:
        return "0.0"
    return f"{(part / whole) * 100:.1f}"


__all__ = [
    "LOGGER",
    "log_line",
    "log_banner",
    "utc_now_iso",
    "elapsed_seconds",
    "format_percentage",
]
