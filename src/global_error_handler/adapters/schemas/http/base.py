# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Base HTTP Schema (Adapters Layer).

Purpose:
    Canonical Pydantic base for adapter-layer HTTP schemas.
    Enforces strict config and deterministic JSON encoding.

Layer: adapters/schemas/http
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class BaseHTTPSchema(BaseModel):
    """Base class for HTTP-facing schemas.

    Provides:
        • Strict `extra='forbid'` validation.
        • Immutable instances.
        • Consistent `model_dump_http()` that always emits wire aliases.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        populate_by_name=True,
        str_strip_whitespace=False,
    )

    def model_dump_http(self, **kwargs: Any) -> dict[str, Any]:
        """Return a JSON-serializable dict suitable for HTTP responses."""
        return self.model_dump(mode="json", by_alias=True, **kwargs)
