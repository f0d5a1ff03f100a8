# tests/unit/infrastructure/test_json_logger.py
from __future__ import annotations

import json
import logging

from global_error_handler.infrastructure.logging.logger import (
    ApplicationNameFilter,
    JsonFormatter,
    get_json_logger,
)


def _render(record_msg: str, level: int = logging.INFO, exc_info=None, **extra) -> dict:
    """Build a record with arbitrary attributes and return the parsed JSON payload."""
    logger = logging.getLogger("test.logger")
    record = logger.makeRecord(
        name=logger.name,
        level=level,
        fn="test_json_logger",
        lno=123,
        msg=record_msg,
        args=(),
        exc_info=exc_info,
    )
    for k, v in extra.items():
        setattr(record, k, v)
    return json.loads(JsonFormatter().format(record))


def test_json_formatter_basic_fields() -> None:
    """Formatter should emit ts, level, logger and message."""
    payload = _render("hello-world")
    assert payload["message"] == "hello-world"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "test.logger"
    assert "ts" in payload
    assert "application" not in payload


def test_json_formatter_includes_application_and_request_id() -> None:
    payload = _render("with-ids", application="billing", request_id="abc-123")
    assert payload["application"] == "billing"
    assert payload["request_id"] == "abc-123"


def test_json_formatter_includes_full_exception_detail() -> None:
    """exc_type, exc_message and the rendered traceback are all present."""
    try:
        raise ValueError("boom")
    except ValueError as exc:
        payload = _render("failure", level=logging.ERROR, exc_info=(type(exc), exc, exc.__traceback__))

    assert payload["level"] == "ERROR"
    assert payload["exc_type"] == "ValueError"
    assert payload["exc_message"] == "boom"
    assert "Traceback (most recent call last)" in payload["exc_traceback"]
    assert "test_json_formatter_includes_full_exception_detail" in payload["exc_traceback"]


def test_json_formatter_uses_pre_rendered_exception_text() -> None:
    payload = _render("queued", exc_text="Traceback: already rendered")
    assert payload["exc_traceback"] == "Traceback: already rendered"


def test_json_formatter_merges_extra_dict() -> None:
    payload = _render("fault", extra={"status": 400, "mapped": True})
    assert payload["status"] == 400
    assert payload["mapped"] is True


def test_application_filter_stamps_without_overwriting() -> None:
    flt = ApplicationNameFilter("svc")
    record = logging.makeLogRecord({"msg": "m"})
    assert flt.filter(record) is True
    assert record.application == "svc"

    preset = logging.makeLogRecord({"msg": "m", "application": "other"})
    flt.filter(preset)
    assert preset.application == "other"


def test_get_json_logger_propagates_to_root() -> None:
    logger = get_json_logger("test.logger.propagate")
    assert logger.propagate is True
    assert logger.name == "test.logger.propagate"


class _Unprintable(Exception):
    def __str__(self) -> str:
        raise RuntimeError("cannot render")


def test_json_formatter_survives_exception_with_failing_str() -> None:
    try:
        raise _Unprintable()
    except _Unprintable as exc:
        payload = _render("fault", level=logging.ERROR, exc_info=(type(exc), exc, exc.__traceback__))
    assert payload["exc_type"] == "_Unprintable"
    assert payload["exc_message"] == "_Unprintable"
    assert "_Unprintable" in payload["exc_traceback"]
