# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Structured JSON logging utilities.

This module exposes the JSON formatter used by the persistent sinks, the
filter that stamps every record with the application name, and a per-module
logger factory.

Features:
    * Stable keys: ``ts``, ``level``, ``logger``, ``message``.
    * Optional ``application`` and ``request_id`` from record attributes.
    * Full fault detail: ``exc_type``, ``exc_message`` and ``exc_traceback``.
    * Structured fields merged from ``record.extra`` when it is a dict.

Typical usage:
    log = get_json_logger(__name__)
    log.error("fault", exc_info=exc, extra={"extra": {"status": 500}})
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any

from global_error_handler.domain.exceptions.base import fault_text

__all__ = [
    "ApplicationNameFilter",
    "JsonFormatter",
    "get_json_logger",
]


class ApplicationNameFilter(logging.Filter):
    """Stamp records with the configured application name.

    Never filters anything out; an existing ``application`` attribute wins.
    """

    def __init__(self, application_name: str) -> None:
        super().__init__()
        self.application_name = application_name

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "application", None):
            record.application = self.application_name
        return True


class JsonFormatter(logging.Formatter):
    """JSON log formatter emitting stable keys and optional extras."""

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as a JSON object.

        Args:
            record: Logging record.

        Returns:
            JSON-encoded log line.
        """
        ts = datetime.fromtimestamp(record.created, tz=UTC).isoformat()
        payload: dict[str, Any] = {
            "ts": ts,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        app = getattr(record, "application", None)
        if app:
            payload["application"] = app

        rid = getattr(record, "request_id", None)
        if rid:
            payload["request_id"] = rid

        # Exceptions: guard against None in exc_info tuple.
        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            if exc_type is not None:
                payload["exc_type"] = exc_type.__name__
            if exc_value is not None:
                payload["exc_message"] = fault_text(exc_value)
            payload["exc_traceback"] = self.formatException(record.exc_info)
        elif record.exc_text:
            # Records that went through a QueueHandler carry pre-rendered text only.
            payload["exc_traceback"] = record.exc_text

        extra = getattr(record, "extra", None)
        if isinstance(extra, dict):
            payload.update(extra)

        return json.dumps(payload, separators=(",", ":"), ensure_ascii=False, default=str)


def get_json_logger(name: str) -> logging.Logger:
    """Return a module-specific logger that delegates to the root handlers.

    This does *not* configure any sink. Call
    :func:`global_error_handler.infrastructure.logging.configurator.build_logger`
    once at startup.

    Args:
        name: Logger name, typically ``__name__`` of the caller.

    Returns:
        Configured logger.
    """
    logger = logging.getLogger(name)
    # Delegate formatting and level to the root logger.
    logger.propagate = True
    return logger
