# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Global error handling for Starlette/FastAPI services.

Public surface:
    StatusMapper, FaultInterceptionMiddleware, LoggingOptionsBuilder,
    build_logger and the bootstrap helpers.
"""

from __future__ import annotations

from global_error_handler.adapters.mappers.status_code_mapper import (
    DEFAULT_ERROR_MESSAGE,
    DEFAULT_STATUS_CODE,
    StatusMapper,
    StatusResolution,
)
from global_error_handler.adapters.schemas.http import ErrorResponseBody
from global_error_handler.dependencies.core.bootstrap import (
    add_global_error_handler,
    bootstrap,
    build_status_mapper,
    use_global_error_handler,
)
from global_error_handler.domain.exceptions.base import ConfigurationError
from global_error_handler.infrastructure.logging.configurator import LoggerHandle, build_logger
from global_error_handler.infrastructure.logging.options import (
    LoggingOptions,
    LoggingOptionsBuilder,
    LogLevel,
    RollingInterval,
)
from global_error_handler.infrastructure.middleware.fault_interception import (
    FaultInterceptionMiddleware,
)

__all__ = [
    "DEFAULT_ERROR_MESSAGE",
    "DEFAULT_STATUS_CODE",
    "ConfigurationError",
    "ErrorResponseBody",
    "FaultInterceptionMiddleware",
    "LogLevel",
    "LoggerHandle",
    "LoggingOptions",
    "LoggingOptionsBuilder",
    "RollingInterval",
    "StatusMapper",
    "StatusResolution",
    "add_global_error_handler",
    "bootstrap",
    "build_logger",
    "build_status_mapper",
    "use_global_error_handler",
]
