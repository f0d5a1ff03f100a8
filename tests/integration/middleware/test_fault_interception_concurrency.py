# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Concurrent requests each raising a distinct fault kind stay isolated."""

from __future__ import annotations

import asyncio

import httpx
import pytest
from fastapi import FastAPI

from global_error_handler.dependencies.core.bootstrap import add_global_error_handler

_N = 20


def _make_app(logger) -> tuple[FastAPI, list[type[Exception]]]:
    kinds: list[type[Exception]] = [type(f"Kind{i}", (Exception,), {}) for i in range(_N)]

    def configure(mapping: dict[type[BaseException], int]) -> None:
        for i, kind in enumerate(kinds):
            mapping[kind] = 400 + i

    app = FastAPI()
    add_global_error_handler(app, configure, logger=logger)

    @app.get("/fault/{index}")
    async def fault(index: int) -> None:
        # Interleave with the other in-flight requests before failing.
        await asyncio.sleep(0.01 * ((index * 7) % 5))
        raise kinds[index](f"fault-{index}")

    @app.get("/ok/{index}")
    async def ok(index: int) -> dict[str, int]:
        await asyncio.sleep(0)
        return {"index": index}

    return app, kinds


@pytest.mark.anyio
async def test_concurrent_faults_map_to_their_own_status(fault_logger) -> None:
    logger, records = fault_logger
    app, _ = _make_app(logger)
    transport = httpx.ASGITransport(app=app)

    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        responses = await asyncio.gather(*(client.get(f"/fault/{i}") for i in range(_N)))

    for i, response in enumerate(responses):
        assert response.status_code == 400 + i
        assert response.json() == {"error": f"fault-{i}", "statusCode": 400 + i}
    assert len(records.records) == _N
    assert sorted(r.getMessage() for r in records.records) == sorted(f"fault-{i}" for i in range(_N))


@pytest.mark.anyio
async def test_mixed_success_and_fault_traffic(fault_logger) -> None:
    logger, records = fault_logger
    app, _ = _make_app(logger)
    transport = httpx.ASGITransport(app=app)

    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        calls = []
        for i in range(_N):
            calls.append(client.get(f"/ok/{i}"))
            calls.append(client.get(f"/fault/{i}"))
        responses = await asyncio.gather(*calls)

    oks = responses[0::2]
    faults = responses[1::2]
    assert [r.json() for r in oks] == [{"index": i} for i in range(_N)]
    assert [r.status_code for r in faults] == [400 + i for i in range(_N)]
    assert len(records.records) == _N
