# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Core bootstrap for the fault interception pipeline.

This module owns the registration surface consumed by host applications and
the lifecycle of the process-wide logger handle.

Surfaces:
    * :func:`build_status_mapper`: the caller populates a plain dict of
      ``{exception class: status code}``; the result is frozen.
    * :func:`use_global_error_handler`: installs the middleware.
    * :func:`add_global_error_handler`: both of the above in one call.
    * :func:`bootstrap`: async context manager for the FastAPI lifespan that
      closes the logger handle on shutdown.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass

from fastapi import FastAPI

from global_error_handler.adapters.mappers.status_code_mapper import (
    DEFAULT_ERROR_MESSAGE,
    DEFAULT_STATUS_CODE,
    StatusMapper,
)
from global_error_handler.config.settings import Settings
from global_error_handler.infrastructure.logging.configurator import LoggerHandle
from global_error_handler.infrastructure.logging.logger import get_json_logger
from global_error_handler.infrastructure.middleware.fault_interception import (
    FaultInterceptionMiddleware,
)

logger = get_json_logger(__name__)

StatusMappingConfigurer = Callable[[dict[type[BaseException], int]], None]


@dataclass
class BootstrapState:
    """State yielded by the bootstrap context manager."""

    settings: Settings | None
    logger_handle: LoggerHandle | None


def build_status_mapper(
    configure: StatusMappingConfigurer | None = None,
    default_status_code: int = DEFAULT_STATUS_CODE,
    default_error_message: str = DEFAULT_ERROR_MESSAGE,
) -> StatusMapper:
    """Build the frozen status mapper from a caller-populated table.

    Args:
        configure: Callback filling a mutable ``{exception class: status}`` dict.
        default_status_code: Status for unmapped faults.
        default_error_message: Generic client message for the default status.

    Returns:
        A frozen :class:`StatusMapper`.

    Raises:
        ConfigurationError: If the populated table holds invalid entries.
    """
    mapping: dict[type[BaseException], int] = {}
    if configure is not None:
        configure(mapping)
    mapper = StatusMapper(mapping, default_status_code, default_error_message).freeze()
    logger.info(
        "error_handler.mapper_built",
        extra={
            "extra": {
                "entries": len(mapping),
                "default_status_code": default_status_code,
            }
        },
    )
    return mapper


def use_global_error_handler(
    app: FastAPI,
    mapper: StatusMapper,
    logger: logging.Logger | None = None,
) -> FastAPI:
    """Install :class:`FaultInterceptionMiddleware` on ``app``.

    Middleware added later wraps this one, so call it after any middleware
    whose own faults should be translated too.

    Args:
        app: FastAPI application.
        mapper: Frozen status mapper.
        logger: Logger for fault records; defaults to the middleware module logger.

    Returns:
        The same application.
    """
    if not mapper.frozen:
        mapper.freeze()
    app.state.status_mapper = mapper
    app.add_middleware(FaultInterceptionMiddleware, mapper=mapper, logger=logger)
    return app


def add_global_error_handler(
    app: FastAPI,
    configure: StatusMappingConfigurer | None = None,
    default_status_code: int = DEFAULT_STATUS_CODE,
    default_error_message: str = DEFAULT_ERROR_MESSAGE,
    logger: logging.Logger | None = None,
) -> StatusMapper:
    """Build the mapper and install the middleware in one step.

    Returns:
        The frozen mapper installed on ``app``.
    """
    mapper = build_status_mapper(configure, default_status_code, default_error_message)
    use_global_error_handler(app, mapper, logger=logger)
    return mapper


@asynccontextmanager
async def bootstrap(app: FastAPI) -> AsyncGenerator[BootstrapState, None]:
    """Tie the logger handle stored on ``app.state`` to the app lifespan.

    Responsibilities:
        * Expose the resolved settings and logger handle.
        * Flush and close the logger handle on exit, even on error.

    Args:
        app: FastAPI application; reads ``app.state.settings`` and
            ``app.state.logger_handle`` when present.

    Yields:
        BootstrapState: Resolved settings and logger handle.
    """
    state = BootstrapState(
        settings=getattr(app.state, "settings", None),
        logger_handle=getattr(app.state, "logger_handle", None),
    )
    logger.info("bootstrap.start")
    try:
        yield state
    finally:
        logger.info("bootstrap.stop")
        if state.logger_handle is not None:
            try:
                state.logger_handle.close()
            except Exception:
                logger.exception("bootstrap.logger_close_failed")
