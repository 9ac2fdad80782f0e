"""Logging setup for reqsender.

Engine log records may carry request context through ``extra=``
(see :data:`REQUEST_FIELDS`); both formatters render it when present.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import IO, Any

# Request context attributes the engine attaches to its log records.
REQUEST_FIELDS = ("method", "url", "status", "error_kind", "latency_ms")

_HANDLER_NAME = "reqsender-console"


def _request_context(record: logging.LogRecord) -> dict[str, Any]:
    return {
        name: getattr(record, name)
        for name in REQUEST_FIELDS
        if getattr(record, name, None) is not None
    }


class _JsonFormatter(logging.Formatter):
    """One JSON object per line.

    Keys: timestamp, level, logger, message, any request context fields,
    and exception when the record has one.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_entry.update(_request_context(record))
        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


class _ConsoleFormatter(logging.Formatter):
    """Human-readable lines with request context appended as ``key=value``."""

    def __init__(self) -> None:
        super().__init__(
            "%(asctime)s [%(levelname)-8s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = _request_context(record)
        if not context:
            return line
        pairs = " ".join(f"{key}={value}" for key, value in context.items())
        first, sep, rest = line.partition("\n")
        return f"{first} ({pairs}){sep}{rest}"


def setup_logging(
    level: int = logging.WARNING,
    *,
    json_format: bool = False,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """Configure and return the ``reqsender`` logger.

    Installs a single named console handler. Calling again reconfigures
    that handler (level and format) instead of adding another; handlers
    installed by anything else are left alone.

    Args:
        level: Logging level. Defaults to WARNING so log lines do not
            interleave with the rendered request events.
        json_format: Emit one JSON object per line instead of plain text.
        stream: Target stream for a newly created handler. Defaults to
            ``sys.stderr``.

    Returns:
        The configured ``reqsender`` logger.
    """
    logger = logging.getLogger("reqsender")
    logger.setLevel(level)

    handler = next((h for h in logger.handlers if h.name == _HANDLER_NAME), None)
    if handler is None:
        handler = logging.StreamHandler(stream or sys.stderr)
        handler.set_name(_HANDLER_NAME)
        logger.addHandler(handler)

    handler.setLevel(level)
    handler.setFormatter(_JsonFormatter() if json_format else _ConsoleFormatter())

    # Keep CLI output off the root logger
    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """Return ``reqsender.<name>``, e.g. ``get_logger("engine.sender")``."""
    return logging.getLogger(f"reqsender.{name}")
