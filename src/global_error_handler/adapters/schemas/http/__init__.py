# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""HTTP Schemas package (Adapters Layer).

Purpose:
    Public, adapter-facing HTTP schema surface for the error handler. It
    intentionally does NOT expose BaseHTTPSchema to keep the base class
    internal to this package.

Layer:
    adapters/schemas/http
"""

from __future__ import annotations

from global_error_handler.adapters.schemas.http.error_response import ErrorResponseBody

__all__ = ["ErrorResponseBody"]
