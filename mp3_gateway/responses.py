from __future__ import annotations

import re
from datetime import datetime, timezone
from urllib.parse import quote

from fastapi.responses import JSONResponse, PlainTextResponse, Response

from mp3_gateway.models import ApiErrorResponse, Converted


CORS_HEADERS: dict[str, str] = {"Access-Control-Allow-Origin": "*"}

PREFLIGHT_HEADERS: dict[str, str] = {
    **CORS_HEADERS,
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
    "Access-Control-Max-Age": "86400",
}

_UNSAFE_FILENAME_CHARS = re.compile(r'["\\\x00-\x1f\x7f]')


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2024-01-01T00:00:00.000Z."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def content_disposition(filename: str) -> str:
    """Build an attachment Content-Disposition for `filename`.

    Header values travel as latin-1, so names outside ASCII get an ASCII
    fallback plus an RFC 5987 `filename*` parameter.
    """
    cleaned = _UNSAFE_FILENAME_CHARS.sub("", filename)
    if cleaned.isascii():
        return f'attachment; filename="{cleaned}"'
    fallback = cleaned.encode("ascii", errors="ignore").decode("ascii").strip() or "converted.mp3"
    if fallback.startswith("."):
        fallback = "converted" + fallback
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(cleaned)}"


def preflight_response() -> Response:
    return Response(status_code=200, headers=dict(PREFLIGHT_HEADERS))


def not_found_response() -> PlainTextResponse:
    return PlainTextResponse("Not Found", status_code=404, headers=dict(CORS_HEADERS))


def error_response(message: str, status_code: int = 400) -> JSONResponse:
    body = ApiErrorResponse(message=message, timestamp=utc_timestamp())
    return JSONResponse(
        content=body.model_dump(),
        status_code=status_code,
        headers=dict(CORS_HEADERS),
    )


def mp3_response(converted: Converted) -> Response:
    """Binary MP3 download; Response fills in Content-Length from the body."""
    return Response(
        content=converted.mp3_bytes,
        status_code=200,
        media_type="audio/mpeg",
        headers={
            **CORS_HEADERS,
            "Content-Disposition": content_disposition(converted.suggested_filename),
        },
    )
