"""
Response classes for the tablet-facing edge endpoints.

Every edge response, errors included, carries the CORS headers the
tablet web view expects.
"""

from __future__ import annotations

from typing import Any

import orjson
from fastapi.responses import JSONResponse, PlainTextResponse

from tabletads.common.config import get_settings


class EdgeJSONResponse(JSONResponse):
    """JSON response rendered with orjson, with CORS headers attached."""

    def __init__(
        self,
        content: Any,
        status_code: int = 200,
        headers: dict[str, str] | None = None,
        **kwargs: Any,
    ):
        merged = {**get_settings().cors.headers, **(headers or {})}
        super().__init__(content, status_code=status_code, headers=merged, **kwargs)

    def render(self, content: Any) -> bytes:
        return orjson.dumps(content)


def preflight_response() -> PlainTextResponse:
    """Unconditional answer to a CORS preflight."""
    return PlainTextResponse("ok", headers=get_settings().cors.headers)


def error_response(message: str, status_code: int = 400) -> EdgeJSONResponse:
    return EdgeJSONResponse({"error": message}, status_code=status_code)
