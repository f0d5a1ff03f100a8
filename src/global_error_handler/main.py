# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""
Application Entry (Composition Root)

Synopsis:
    Application factory showing the intended wiring of the error handler:
    settings → logger handle → status mapper → middleware → lifespan.

Design:
    • Bootstrap only (no business logic).
    • Logging is configured once per process from `Settings`.
    • The logger handle is closed by the lifespan on shutdown.
    • Host routes are attached by the caller after `create_app()` returns.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from global_error_handler.config.settings import Settings, get_settings
from global_error_handler.dependencies.core.bootstrap import (
    StatusMappingConfigurer,
    add_global_error_handler,
    bootstrap,
)
from global_error_handler.infrastructure.logging.configurator import build_logger


@asynccontextmanager
async def runtime_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Close the process-wide logger handle when the app shuts down."""
    async with bootstrap(app):
        yield


def create_app(
    settings: Settings | None = None,
    configure: StatusMappingConfigurer | None = None,
) -> FastAPI:
    """Build a FastAPI app with global fault interception installed.

    Args:
        settings: Explicit settings; defaults to :func:`get_settings`.
        configure: Callback registering ``{exception class: status code}`` entries.

    Returns:
        The configured application.
    """
    if settings is None:
        settings = get_settings()
    handle = build_logger(settings.to_logging_options())

    app = FastAPI(lifespan=runtime_lifespan)
    app.state.settings = settings
    app.state.logger_handle = handle

    add_global_error_handler(
        app,
        configure,
        default_status_code=settings.error_default_status_code,
        default_error_message=settings.error_default_message,
        logger=handle.get_logger("faults"),
    )
    return app
