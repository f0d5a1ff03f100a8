# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Configuration Exceptions.

Summary:
    Canonical error raised when the error handler or its logging pipeline is
    configured with values it cannot honour. Raised at startup only; the
    request path never raises it. Also hosts :func:`fault_text`, the guarded
    renderer of arbitrary fault text used on the request path.

Layer:
    domain/exceptions
"""

from __future__ import annotations

from typing import Any


class ConfigurationError(ValueError):
    """Invalid error-handler or logging configuration.

    Attributes:
        code:
            Stable error code suitable for startup diagnostics.
        details:
            Optional machine-readable payload describing the rejected value.
    """

    code: str = "CONFIGURATION_ERROR"

    def __init__(self, message: str = "", *, details: dict[str, Any] | None = None) -> None:
        """Initialize a ConfigurationError instance.

        Args:
            message:
                Human-readable description of the rejected configuration.
            details:
                Optional structured payload for logs.
        """
        super().__init__(message)
        self.details: dict[str, Any] = details or {}


def fault_text(fault: BaseException) -> str:
    """Return ``str(fault)``, or the class name when ``__str__`` itself fails."""
    try:
        return str(fault)
    except Exception:
        return type(fault).__name__
