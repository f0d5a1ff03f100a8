# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Logging Options (immutable configuration value).

Summary:
    Describes which sinks are active and at what severity threshold. Options
    are assembled through :class:`LoggingOptionsBuilder`, validated once in
    :meth:`LoggingOptionsBuilder.build`, and handed to the configurator as a
    frozen :class:`LoggingOptions` value.

Sinks:
    * File: rolling JSON-lines file (path template, interval, retention).
    * Network: log-event collector reachable over HTTP (URL, optional API key).

Sinks are additive. When neither is enabled the configurator forces a
Fatal-only threshold.

Usage:
    options = (
        LoggingOptionsBuilder()
        .enable_file_sink()
        .enable_network_sink(api_key="secret")
        .set_minimum_level(LogLevel.WARNING)
        .build()
    )
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Final

import httpx

from global_error_handler.domain.exceptions.base import ConfigurationError

__all__ = [
    "DEFAULT_FILE_PATH",
    "DEFAULT_RETAINED_FILE_COUNT",
    "DEFAULT_SERVER_URL",
    "LogLevel",
    "LoggingOptions",
    "LoggingOptionsBuilder",
    "RollingInterval",
]

DEFAULT_FILE_PATH: Final[str] = "logs/log-.txt"
DEFAULT_RETAINED_FILE_COUNT: Final[int] = 7
DEFAULT_SERVER_URL: Final[str] = "http://localhost:5341"
_UNKNOWN_APPLICATION: Final[str] = "UnknownApp"

VERBOSE: Final[int] = 5
logging.addLevelName(VERBOSE, "VERBOSE")


class LogLevel(str, Enum):
    """Ordered severity threshold."""

    VERBOSE = "verbose"
    DEBUG = "debug"
    INFORMATION = "information"
    WARNING = "warning"
    ERROR = "error"
    FATAL = "fatal"

    def to_logging(self) -> int:
        """Return the matching stdlib ``logging`` level number."""
        return _STDLIB_LEVELS[self]


_STDLIB_LEVELS: Final[dict[LogLevel, int]] = {
    LogLevel.VERBOSE: VERBOSE,
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFORMATION: logging.INFO,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.FATAL: logging.CRITICAL,
}


class RollingInterval(str, Enum):
    """How often the file sink starts a new file."""

    INFINITE = "infinite"
    YEAR = "year"
    MONTH = "month"
    DAY = "day"
    HOUR = "hour"
    MINUTE = "minute"

    @property
    def period_format(self) -> str | None:
        """``strftime`` pattern of the period stamp; ``None`` never rolls."""
        return _PERIOD_FORMATS[self]


_PERIOD_FORMATS: Final[dict[RollingInterval, str | None]] = {
    RollingInterval.INFINITE: None,
    RollingInterval.YEAR: "%Y",
    RollingInterval.MONTH: "%Y%m",
    RollingInterval.DAY: "%Y%m%d",
    RollingInterval.HOUR: "%Y%m%d%H",
    RollingInterval.MINUTE: "%Y%m%d%H%M",
}


def default_application_name() -> str:
    """Return the running process's own name, or ``"UnknownApp"``."""
    argv0 = sys.argv[0] if sys.argv else ""
    return Path(argv0).stem or _UNKNOWN_APPLICATION


@dataclass(frozen=True)
class LoggingOptions:
    """Immutable sink selection and thresholds.

    Attributes:
        minimum_level: Threshold applied to the root logger and every sink.
        enable_file: Whether the rolling file sink is attached.
        file_path: Path template of the active log file.
        rolling_interval: Roll-over cadence of the file sink.
        retained_file_count: Number of period files kept, the active one
            included; ``None`` keeps all.
        enable_network: Whether the collector sink is attached.
        server_url: Base URL of the collector.
        api_key: Optional collector API key.
        application_name: Stamped on every emitted record.
    """

    minimum_level: LogLevel = LogLevel.INFORMATION
    enable_file: bool = False
    file_path: str | None = None
    rolling_interval: RollingInterval = RollingInterval.DAY
    retained_file_count: int | None = DEFAULT_RETAINED_FILE_COUNT
    enable_network: bool = False
    server_url: str | None = None
    api_key: str | None = None
    application_name: str = _UNKNOWN_APPLICATION

    @property
    def has_any_sink(self) -> bool:
        """True when at least one sink is enabled."""
        return self.enable_file or self.enable_network

    def __repr__(self) -> str:
        # Never render the API key.
        return (
            f"LoggingOptions(minimum_level={self.minimum_level.value!r}, "
            f"enable_file={self.enable_file}, file_path={self.file_path!r}, "
            f"rolling_interval={self.rolling_interval.value!r}, "
            f"retained_file_count={self.retained_file_count}, "
            f"enable_network={self.enable_network}, server_url={self.server_url!r}, "
            f"api_key_set={self.api_key is not None}, "
            f"application_name={self.application_name!r})"
        )


class LoggingOptionsBuilder:
    """Fluent builder producing a validated :class:`LoggingOptions`."""

    def __init__(self) -> None:
        self._minimum_level = LogLevel.INFORMATION
        self._enable_file = False
        self._file_path: str | None = None
        self._rolling_interval = RollingInterval.DAY
        self._retained_file_count: int | None = DEFAULT_RETAINED_FILE_COUNT
        self._enable_network = False
        self._server_url: str | None = None
        self._api_key: str | None = None
        self._application_name: str | None = None

    def enable_file_sink(
        self,
        path: str = DEFAULT_FILE_PATH,
        interval: RollingInterval = RollingInterval.DAY,
        retain_count: int | None = DEFAULT_RETAINED_FILE_COUNT,
    ) -> LoggingOptionsBuilder:
        """Enable the rolling file sink.

        Args:
            path: Log file path template.
            interval: Roll-over cadence.
            retain_count: Period files to keep, the active one included;
                ``None`` keeps all of them.

        Returns:
            The builder.
        """
        self._enable_file = True
        self._file_path = path
        self._rolling_interval = RollingInterval(interval)
        self._retained_file_count = retain_count
        return self

    def enable_network_sink(
        self,
        url: str | None = None,
        api_key: str | None = None,
    ) -> LoggingOptionsBuilder:
        """Enable the network collector sink.

        Args:
            url: Collector base URL; defaults to ``http://localhost:5341``.
            api_key: Optional API key; blank keys connect unauthenticated.

        Returns:
            The builder.
        """
        self._enable_network = True
        self._server_url = url or DEFAULT_SERVER_URL
        self._api_key = api_key or None
        return self

    def set_minimum_level(self, level: LogLevel = LogLevel.INFORMATION) -> LoggingOptionsBuilder:
        """Set the minimum severity captured by every sink."""
        self._minimum_level = LogLevel(level)
        return self

    def set_application_name(self, name: str) -> LoggingOptionsBuilder:
        """Set the application name stamped on every record."""
        self._application_name = name
        return self

    def build(self) -> LoggingOptions:
        """Validate and freeze the options.

        Raises:
            ConfigurationError: If any enabled sink is misconfigured.
        """
        if self._enable_file:
            if not self._file_path or not self._file_path.strip():
                raise ConfigurationError("File sink path must not be empty.")
            if self._retained_file_count is not None and self._retained_file_count < 1:
                raise ConfigurationError(
                    "Retained file count must be at least 1.",
                    details={"retained_file_count": self._retained_file_count},
                )
        if self._enable_network:
            _validate_server_url(self._server_url or "")

        if self._application_name is None:
            application_name = default_application_name()
        elif not self._application_name.strip():
            raise ConfigurationError("Application name must not be empty.")
        else:
            application_name = self._application_name

        return LoggingOptions(
            minimum_level=self._minimum_level,
            enable_file=self._enable_file,
            file_path=self._file_path,
            rolling_interval=self._rolling_interval,
            retained_file_count=self._retained_file_count,
            enable_network=self._enable_network,
            server_url=self._server_url,
            api_key=self._api_key,
            application_name=application_name,
        )


def _validate_server_url(url: str) -> None:
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL as exc:
        raise ConfigurationError("Invalid collector URL.", details={"url": url}) from exc
    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise ConfigurationError(
            "Collector URL must be an absolute http(s) URL.", details={"url": url}
        )
