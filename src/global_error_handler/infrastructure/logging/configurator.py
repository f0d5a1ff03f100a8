# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Logging Configurator.

Summary:
    Turns a frozen :class:`LoggingOptions` value into the process-wide logger
    handle. The handle owns the sink handlers it installs on the root logger
    and releases them on :meth:`LoggerHandle.close`.

Policy:
    * Root threshold = ``options.minimum_level``.
    * Framework namespaces (server, framework and the collector's own HTTP
      client) never go below WARNING.
    * No sink enabled → Fatal-only threshold with a ``NullHandler``; nothing at
      ordinary severities is written anywhere.
    * File and network sinks are additive, each restricted to the threshold.
    * Previously installed root handlers are detached (not closed).
    * The handle logger has a fixed, propagating name; the application name
      is only stamped on records.
    * The network sink is fed through a bounded queue; overflow is dropped
      and counted in :attr:`LoggerHandle.dropped_records`.

Usage:
    handle = build_logger(options)
    try:
        ...
    finally:
        handle.close()
"""

from __future__ import annotations

import atexit
import logging
import queue
import threading
from dataclasses import dataclass, field
from logging.handlers import QueueListener
from types import TracebackType
from typing import Final

from global_error_handler.infrastructure.logging.logger import ApplicationNameFilter
from global_error_handler.infrastructure.logging.options import LoggingOptions
from global_error_handler.infrastructure.logging.sinks.file import (
    FileSinkConfiguration,
    build_file_handler,
)
from global_error_handler.infrastructure.logging.sinks.network import (
    CollectorHandler,
    CollectorQueueHandler,
    CollectorQueueListener,
    NetworkSinkConfiguration,
)

__all__ = ["APP_LOGGER_NAME", "FRAMEWORK_NAMESPACES", "LoggerHandle", "build_logger"]

APP_LOGGER_NAME: Final[str] = "global_error_handler.app"

FRAMEWORK_NAMESPACES: Final[tuple[str, ...]] = (
    "uvicorn",
    "uvicorn.access",
    "uvicorn.error",
    "starlette",
    "fastapi",
    # The collector sink's transport; left chatty it would feed on itself.
    "httpx",
    "httpcore",
)
_FATAL_ONLY: Final[int] = logging.CRITICAL


@dataclass
class LoggerHandle:
    """Process-wide logger handle.

    Attributes:
        logger: The package-owned application logger (``APP_LOGGER_NAME``).
        handlers: Handlers installed on the root logger by this handle.
        listener: Background listener feeding the collector sink, if any.
        level: Effective root threshold.
    """

    logger: logging.Logger
    handlers: tuple[logging.Handler, ...] = ()
    listener: QueueListener | None = None
    level: int = logging.INFO
    _closed: bool = field(default=False, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def dropped_records(self) -> int:
        """Records the network sink discarded (full queue or unreachable collector)."""
        owned = list(self.handlers)
        if self.listener is not None:
            owned.extend(self.listener.handlers)
        return sum(getattr(handler, "dropped", 0) for handler in owned)

    def get_logger(self, name: str) -> logging.Logger:
        """Return a child of the application logger."""
        return self.logger.getChild(name)

    def flush(self) -> None:
        """Flush every owned handler."""
        for handler in self.handlers:
            handler.flush()

    def close(self) -> None:
        """Drain, flush, close and detach the owned handlers (idempotent)."""
        with self._lock:
            if self._closed:
                return
            self._closed = True

        if self.listener is not None:
            # Blocks until queued records reach the collector.
            self.listener.stop()
            for handler in self.listener.handlers:
                handler.close()

        root = logging.getLogger()
        for handler in self.handlers:
            root.removeHandler(handler)
            handler.flush()
            handler.close()
        atexit.unregister(self.close)

    def __enter__(self) -> LoggerHandle:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


def build_logger(options: LoggingOptions) -> LoggerHandle:
    """Install the sinks described by ``options`` and return the handle.

    Args:
        options: Frozen logging options.

    Returns:
        The process-wide logger handle; closed automatically at interpreter exit.
    """
    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)

    handlers: list[logging.Handler] = []
    listener: QueueListener | None = None

    if not options.has_any_sink:
        level = _FATAL_ONLY
        handlers.append(logging.NullHandler())
    else:
        level = options.minimum_level.to_logging()
        app_filter = ApplicationNameFilter(options.application_name)

        if options.enable_file:
            file_handler = build_file_handler(
                FileSinkConfiguration(
                    path=options.file_path or "",
                    rolling_interval=options.rolling_interval,
                    retained_file_count=options.retained_file_count,
                    restricted_to_minimum_level=level,
                )
            )
            file_handler.addFilter(app_filter)
            handlers.append(file_handler)

        if options.enable_network:
            network_config = NetworkSinkConfiguration(
                server_url=options.server_url or "",
                api_key=options.api_key,
                restricted_to_minimum_level=level,
            )
            collector = CollectorHandler(network_config)
            records: queue.Queue[logging.LogRecord] = queue.Queue(maxsize=network_config.queue_size)
            queue_handler = CollectorQueueHandler(records)
            queue_handler.setLevel(level)
            queue_handler.addFilter(app_filter)
            listener = CollectorQueueListener(records, collector, respect_handler_level=True)
            listener.start()
            handlers.append(queue_handler)

    root.setLevel(level)
    for handler in handlers:
        root.addHandler(handler)

    framework_level = max(level, logging.WARNING)
    for namespace in FRAMEWORK_NAMESPACES:
        logging.getLogger(namespace).setLevel(framework_level)

    # Never named after the application: ``uvicorn`` owns a non-propagating logger.
    app_logger = logging.getLogger(APP_LOGGER_NAME)
    app_logger.propagate = True

    handle = LoggerHandle(
        logger=app_logger,
        handlers=tuple(handlers),
        listener=listener,
        level=level,
    )
    atexit.register(handle.close)
    return handle
