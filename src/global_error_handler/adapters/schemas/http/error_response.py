# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Error Response Body (Adapters Layer).

Purpose:
    Wire shape written for every intercepted fault:

        {"error": "<message>", "statusCode": <int>}

    Exactly these two keys; anything else is rejected at construction.

Layer: adapters/schemas/http
"""

from __future__ import annotations

from pydantic import Field

from global_error_handler.adapters.schemas.http.base import BaseHTTPSchema


class ErrorResponseBody(BaseHTTPSchema):
    """Client-safe error body."""

    error: str = Field(..., description="Client-visible error message.")
    status_code: int = Field(
        ...,
        alias="statusCode",
        description="HTTP status code, repeated in the body for client convenience.",
    )
