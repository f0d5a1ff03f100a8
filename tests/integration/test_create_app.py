# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""End-to-end checks through the application factory."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from global_error_handler.config.settings import Settings
from global_error_handler.infrastructure.logging.configurator import APP_LOGGER_NAME
from global_error_handler.main import create_app


class KindA(Exception):
    pass


class KindB(Exception):
    pass


class KindC(Exception):
    pass


def _add_routes(app) -> None:
    @app.get("/a")
    async def raise_a() -> None:
        raise KindA("bad id")

    @app.get("/b")
    async def raise_b() -> None:
        raise KindB("secret detail")

    @app.get("/c")
    async def raise_c() -> None:
        raise KindC("hidden")


def test_registered_and_unregistered_faults(clean_env, isolated_root_logger: logging.Logger) -> None:
    app = create_app(Settings(), configure=lambda m: m.update({KindA: 400}))
    _add_routes(app)

    with TestClient(app) as client:
        a = client.get("/a")
        b = client.get("/b")

    assert (a.status_code, a.json()) == (400, {"error": "bad id", "statusCode": 400})
    assert (b.status_code, b.json()) == (500, {"error": "Something went wrong.", "statusCode": 500})
    assert app.state.logger_handle.closed is True


def test_configured_defaults(clean_env, isolated_root_logger, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ERROR_DEFAULT_STATUS_CODE", "422")
    monkeypatch.setenv("ERROR_DEFAULT_MESSAGE", "Unprocessable")
    app = create_app()
    _add_routes(app)

    with TestClient(app) as client:
        r = client.get("/c")

    assert r.status_code == 422
    assert r.json() == {"error": "Unprocessable", "statusCode": 422}


def test_no_sink_still_responds_and_persists_nothing(
    clean_env, isolated_root_logger: logging.Logger, tmp_path: Path
) -> None:
    app = create_app(Settings(), configure=lambda m: m.update({KindA: 400}))
    _add_routes(app)

    with TestClient(app) as client:
        r = client.get("/b")

    assert r.status_code == 500
    assert r.json() == {"error": "Something went wrong.", "statusCode": 500}
    assert not (tmp_path / "logs").exists()


def test_file_sink_receives_full_fault_detail(
    clean_env, isolated_root_logger, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("APP_NAME", "orders")
    monkeypatch.setenv("LOG_FILE_ENABLED", "true")
    app = create_app(configure=lambda m: m.update({KindA: 400}))
    _add_routes(app)

    with TestClient(app) as client:
        r = client.get("/b")

    assert r.json() == {"error": "Something went wrong.", "statusCode": 500}
    (log_file,) = (tmp_path / "logs").glob("log-*.txt")
    lines = log_file.read_text(encoding="utf-8").splitlines()
    faults = [json.loads(line) for line in lines if json.loads(line).get("evt") == "fault"]
    assert len(faults) == 1
    entry = faults[0]
    assert entry["message"] == "secret detail"
    assert entry["application"] == "orders"
    assert entry["logger"] == f"{APP_LOGGER_NAME}.faults"
    assert entry["status"] == 500
    assert entry["mapped"] is False
    assert "KindB: secret detail" in entry["exc_traceback"]
