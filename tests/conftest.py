# tests/conftest.py
from __future__ import annotations

import logging
import uuid
from collections.abc import Iterator

import pytest

from global_error_handler.config.settings import get_settings
from global_error_handler.infrastructure.logging.configurator import FRAMEWORK_NAMESPACES


class RecordingHandler(logging.Handler):
    """Handler that keeps every record it receives."""

    def __init__(self, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Force pytest-anyio to use asyncio (not trio)."""
    return "asyncio"


@pytest.fixture
def isolated_root_logger() -> Iterator[logging.Logger]:
    """Snapshot and restore root/framework logger state around a test."""
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    saved_levels = {ns: logging.getLogger(ns).level for ns in FRAMEWORK_NAMESPACES}
    try:
        yield root
    finally:
        for handler in list(root.handlers):
            if handler not in saved_handlers:
                root.removeHandler(handler)
        for handler in saved_handlers:
            if handler not in root.handlers:
                root.addHandler(handler)
        root.setLevel(saved_level)
        for ns, level in saved_levels.items():
            logging.getLogger(ns).setLevel(level)


@pytest.fixture
def fault_logger() -> Iterator[tuple[logging.Logger, RecordingHandler]]:
    """A private, non-propagating logger with a recording handler."""
    logger = logging.getLogger(f"tests.faults.{uuid.uuid4().hex}")
    handler = RecordingHandler()
    logger.handlers = [handler]
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    try:
        yield logger, handler
    finally:
        logger.handlers = []


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Iterator[None]:
    """Run in an empty directory (no `.env`) with settings cache cleared."""
    for key in (
        "APP_NAME",
        "ERROR_DEFAULT_STATUS_CODE",
        "ERROR_DEFAULT_MESSAGE",
        "LOG_MIN_LEVEL",
        "LOG_FILE_ENABLED",
        "LOG_FILE_PATH",
        "LOG_FILE_ROLLING_INTERVAL",
        "LOG_FILE_RETAINED_COUNT",
        "LOG_NETWORK_ENABLED",
        "LOG_NETWORK_URL",
        "LOG_NETWORK_API_KEY",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    try:
        yield
    finally:
        get_settings.cache_clear()
