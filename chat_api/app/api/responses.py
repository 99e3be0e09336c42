"""
Response helpers shared by the endpoints.

Validation failures answer with plain text bodies while every other
failure answers with a JSON ``{"error": ...}`` body.  Existing clients
rely on this difference, so it is kept.
"""

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse, PlainTextResponse


async def read_json_body(request: Request) -> Any:
    """Return the decoded JSON body, or ``None`` if it is missing or malformed."""
    try:
        return await request.json()
    except ValueError:
        return None


def invalid_body(text: str) -> PlainTextResponse:
    return PlainTextResponse(text, status_code=400)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)
