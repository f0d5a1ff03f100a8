# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Rolling File Sink.

Summary:
    Builds the persistent JSON-lines handler. The period stamp is inserted
    between the stem and the extension of the path template, so
    ``logs/log-.txt`` rolled daily writes ``logs/log-20261019.txt``. A
    non-rolling interval writes the template path as-is through a plain
    :class:`logging.FileHandler`.

Retention:
    ``retained_file_count`` counts period files of the same template, the
    active one included. Older files are deleted when a new period opens.
    Files whose stamp does not match the interval's pattern are left alone.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from global_error_handler.infrastructure.logging.logger import JsonFormatter
from global_error_handler.infrastructure.logging.options import RollingInterval

__all__ = ["FileSinkConfiguration", "RollingFileHandler", "build_file_handler"]


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(frozen=True)
class FileSinkConfiguration:
    """Configuration parameters for the file sink."""

    path: str
    rolling_interval: RollingInterval = RollingInterval.DAY
    retained_file_count: int | None = 7
    restricted_to_minimum_level: int = logging.INFO


class RollingFileHandler(logging.FileHandler):
    """File handler that switches to a new period-stamped file as time passes.

    Args:
        template: Path template; the stamp goes before its extension.
        interval: Rolling cadence; must not be ``INFINITE``.
        retained_file_count: Period files to keep; ``None`` keeps all.
        encoding: File encoding.
    """

    def __init__(
        self,
        template: str | os.PathLike[str],
        interval: RollingInterval,
        retained_file_count: int | None = None,
        encoding: str = "utf-8",
    ) -> None:
        period_format = interval.period_format
        if period_format is None:
            raise ValueError("RollingFileHandler requires a rolling interval.")
        self.template = Path(template)
        self.interval = interval
        self.retained_file_count = retained_file_count
        self._period_format = period_format
        self._period = _utc_now().strftime(period_format)
        super().__init__(self.path_for(self._period), encoding=encoding, delay=True)
        self._prune()

    def path_for(self, period: str) -> Path:
        """Return the file path for a period stamp."""
        return self.template.with_name(f"{self.template.stem}{period}{self.template.suffix}")

    def emit(self, record: logging.LogRecord) -> None:
        try:
            period = _utc_now().strftime(self._period_format)
            if period != self._period:
                self._roll(period)
        except Exception:
            self.handleError(record)
            return
        super().emit(record)

    def _roll(self, period: str) -> None:
        if self.stream is not None:
            self.stream.flush()
            self.stream.close()
            self.stream = None
        self._period = period
        self.baseFilename = os.path.abspath(self.path_for(period))
        self._prune()

    def _prune(self) -> None:
        if self.retained_file_count is None:
            return
        stem, suffix = self.template.stem, self.template.suffix
        width = len(self._period)
        active = Path(self.baseFilename).name
        older: list[Path] = []
        for candidate in self.template.parent.glob(f"{stem}*{suffix}"):
            stamp = candidate.name[len(stem) : len(candidate.name) - len(suffix)]
            if candidate.name != active and len(stamp) == width and stamp.isdigit():
                older.append(candidate)
        older.sort(key=lambda p: p.name)
        excess = len(older) - (self.retained_file_count - 1)
        for stale in older[: max(excess, 0)]:
            stale.unlink(missing_ok=True)


def build_file_handler(config: FileSinkConfiguration) -> logging.Handler:
    """Create the file handler described by ``config``.

    The parent directory is created if missing.

    Args:
        config: File sink parameters.

    Returns:
        A handler writing JSON lines at or above the configured level.
    """
    path = Path(config.path)
    path.parent.mkdir(parents=True, exist_ok=True)

    handler: logging.Handler
    if config.rolling_interval.period_format is None:
        handler = logging.FileHandler(path, encoding="utf-8", delay=True)
    else:
        handler = RollingFileHandler(
            path,
            config.rolling_interval,
            retained_file_count=config.retained_file_count,
        )
    handler.setLevel(config.restricted_to_minimum_level)
    handler.setFormatter(JsonFormatter())
    return handler
