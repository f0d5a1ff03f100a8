# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Unit tests for the ErrorResponseBody wire shape."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from global_error_handler.adapters.schemas.http import ErrorResponseBody


def test_dump_uses_exactly_error_and_status_code_keys() -> None:
    body = ErrorResponseBody(error="bad id", status_code=400)
    assert body.model_dump_http() == {"error": "bad id", "statusCode": 400}


def test_wire_alias_is_accepted_on_input() -> None:
    body = ErrorResponseBody.model_validate({"error": "x", "statusCode": 418})
    assert body.status_code == 418


def test_extra_fields_are_rejected() -> None:
    with pytest.raises(ValidationError):
        ErrorResponseBody.model_validate({"error": "x", "statusCode": 400, "trace": "t"})


def test_body_is_immutable() -> None:
    body = ErrorResponseBody(error="x", status_code=400)
    with pytest.raises(ValidationError):
        body.error = "y"  # type: ignore[misc]
