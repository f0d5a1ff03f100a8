# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Fault Interception Middleware.

Summary:
    Terminal handler for every exception escaping downstream request
    processing. Each fault is mapped to a status code, logged once with full
    detail, and answered with a client-safe JSON body.

Contract:
    • Success path: the downstream response is returned untouched.
    • Fault path: exactly one ERROR log record (with ``exc_info``) and exactly
      one response ``{"error": <message>, "statusCode": <status>}`` with
      ``application/json``. The fault is never re-raised.
    • Logs are never sanitized; only the client message follows the
      mapper's message policy.

Cancellation:
    Only ``Exception`` subclasses are intercepted. ``asyncio.CancelledError``
    and other ``BaseException`` signals (client disconnect, shutdown,
    ``KeyboardInterrupt``) propagate to the server unchanged.

Usage:
    app.add_middleware(FaultInterceptionMiddleware, mapper=mapper, logger=logger)
"""

from __future__ import annotations

import logging
from typing import Any, Final

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from global_error_handler.adapters.mappers.status_code_mapper import StatusMapper
from global_error_handler.adapters.schemas.http.error_response import ErrorResponseBody
from global_error_handler.domain.exceptions.base import fault_text
from global_error_handler.infrastructure.logging.logger import get_json_logger

_logger: logging.Logger = get_json_logger(__name__)

_REQUEST_ID_HEADER: Final[str] = "X-Request-ID"


class FaultInterceptionMiddleware(BaseHTTPMiddleware):
    """Translate escaping faults into JSON error responses.

    Args:
        app: ASGI application.
        mapper: Frozen status mapper shared by all requests.
        logger: Logger receiving fault records; defaults to this module's logger.
    """

    def __init__(
        self,
        app: ASGIApp,
        mapper: StatusMapper,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(app)
        self.mapper = mapper
        self.logger = logger or _logger

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """Run the downstream chain and handle any fault it raises."""
        try:
            return await call_next(request)
        except Exception as fault:
            return self.handle_fault(request, fault)

    def handle_fault(self, request: Request, fault: Exception) -> Response:
        """Map, log and render a single fault.

        Args:
            request: The request whose processing failed.
            fault: The intercepted exception.

        Returns:
            The JSON error response.
        """
        resolution = self.mapper.map(fault)
        message = self.mapper.resolve_message(fault, resolution.status_code)

        fields: dict[str, Any] = {
            "evt": "fault",
            "method": request.method,
            "path": request.url.path,
            "status": resolution.status_code,
            "mapped": resolution.is_mapped,
            "fault_type": f"{type(fault).__module__}.{type(fault).__qualname__}",
        }
        extra: dict[str, Any] = {"extra": fields}
        request_id = request.headers.get(_REQUEST_ID_HEADER)
        if request_id:
            extra["request_id"] = request_id
        self.logger.error(fault_text(fault) or type(fault).__name__, exc_info=fault, extra=extra)

        body = ErrorResponseBody(error=message, status_code=resolution.status_code)
        return JSONResponse(status_code=resolution.status_code, content=body.model_dump_http())
