"""
Diagnostic logging for the SDK itself.

The SDK reports what it does (initialisation, dropped events, delivery
failures) through a stdlib ``logging.Logger`` named ``bugcatch``.  Output
goes to stderr: coloured text by default, or one JSON object per line when
``BUGCATCH_LOG_FORMAT=json``.  Setting ``BUGCATCH_LOG_FILE`` additionally
writes JSON lines to a rotating file.  Every handler carries a
:class:`~bugcatch.diagnostics.pii.PiiScrubber` so DSN keys and other secrets
never reach the output.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

from ..constants import LOG_BACKUP_COUNT, LOG_MAX_BYTES, SDK_LOGGER_NAME, SDK_VERSION
from .pii import PiiScrubber

# ── JSON Formatter ───────────────────────────────────────────────


class _JsonFormatter(logging.Formatter):
    """Emit each record as a single-line JSON object."""

    # Keys that are promoted from ``extra`` to the top-level JSON.
    _PROMOTE_KEYS = frozenset(
        {
            "event_id",
            "status_code",
            "duration_ms",
            "error_type",
            "thread_name",
        }
    )

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "sdk_version": SDK_VERSION,
            "thread": record.threadName,
        }

        if record.levelno <= logging.DEBUG or record.levelno >= logging.ERROR:
            entry["func"] = record.funcName
            entry["line"] = record.lineno

        for key in self._PROMOTE_KEYS:
            val = getattr(record, key, None)
            if val is not None:
                entry[key] = val

        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
            entry["error_type"] = record.exc_info[0].__name__

        return json.dumps(entry, default=str, ensure_ascii=False)


# ── Plain Formatter (dev / console) ─────────────────────────────


class _DevFormatter(logging.Formatter):
    """Human-readable coloured output, prefixed with ``[BugCatch]``."""

    _COLORS = {
        "DEBUG": "\033[36m",     # cyan
        "INFO": "\033[32m",      # green
        "WARNING": "\033[33m",   # yellow
        "ERROR": "\033[31m",     # red
        "CRITICAL": "\033[35m",  # magenta
    }
    _RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self._COLORS.get(record.levelname, "")
        ts = datetime.fromtimestamp(record.created).strftime("%H:%M:%S.%f")[:-3]
        base = (
            f"{color}{ts} {record.levelname:<8}{self._RESET} "
            f"[BugCatch] {record.getMessage()}"
        )
        if record.exc_info and record.exc_info[0] is not None:
            base += "\n" + self.formatException(record.exc_info)
        return base


# ── Logger Factory ───────────────────────────────────────────────


def setup_sdk_logger(
    name: str = SDK_LOGGER_NAME,
    *,
    level: Optional[int] = None,
    debug: bool = False,
) -> logging.Logger:
    """Create (or retrieve) the SDK's diagnostic logger.

    Args:
        name: Logger name.
        level: Explicit level (overrides *debug*).
        debug: If ``True``, sets level to ``DEBUG``.

    Returns:
        A configured ``logging.Logger``.  Calling again only updates levels.
    """
    if level is None:
        level = logging.DEBUG if debug else logging.INFO

    logger = logging.getLogger(name)
    logger.setLevel(level)

    if logger.handlers:
        for h in logger.handlers:
            h.setLevel(level)
        return logger

    scrubber = PiiScrubber()

    # ── Console handler: JSON when asked, coloured otherwise ────
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    if os.environ.get("BUGCATCH_LOG_FORMAT", "").lower() == "json":
        console_handler.setFormatter(_JsonFormatter())
    else:
        console_handler.setFormatter(_DevFormatter())
    console_handler.addFilter(scrubber)
    logger.addHandler(console_handler)

    # ── Optional JSON file handler ───────────────────────────────
    log_file = os.environ.get("BUGCATCH_LOG_FILE", "")
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(_JsonFormatter())
        file_handler.addFilter(scrubber)
        logger.addHandler(file_handler)

    return logger


def get_sdk_logger() -> logging.Logger:
    """The SDK logger, for modules that must not configure handlers."""
    return logging.getLogger(SDK_LOGGER_NAME)
