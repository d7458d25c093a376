from __future__ import annotations

from fastapi import Request
from starlette.datastructures import FormData, UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException

from mp3_gateway.errors import UploadValidationError
from mp3_gateway.logging_utils import get_logger
from mp3_gateway.models import FileField, FormField, TextField


logger = get_logger(__name__)

MULTIPART_FORM_DATA = "multipart/form-data"


def require_multipart(content_type: str | None) -> None:
    if not content_type or MULTIPART_FORM_DATA not in content_type.lower():
        raise UploadValidationError("Content-Type must be multipart/form-data")


def check_content_length(
    content_length: str | None, *, max_body_bytes: int, too_large_message: str
) -> None:
    """Refuse bodies whose declared length rules them out before spooling them."""
    if not content_length:
        return
    try:
        declared = int(content_length)
    except ValueError:
        return
    if declared > max_body_bytes:
        logger.warning(
            "Refusing %d byte body (ceiling %d) before parsing", declared, max_body_bytes
        )
        raise UploadValidationError(too_large_message)


async def classify_form(form: FormData, *, max_file_bytes: int) -> dict[str, FormField]:
    """Turn a parsed form into typed fields, first occurrence of a name wins.

    File parts are read up to `max_file_bytes + 1` bytes: enough for the
    validator to see that an upload is over the limit without buffering
    an arbitrarily large body.
    """
    fields: dict[str, FormField] = {}
    for name, value in form.multi_items():
        if name in fields:
            continue
        if isinstance(value, UploadFile):
            data = await value.read(max_file_bytes + 1)
            fields[name] = FileField(
                name=name,
                filename=value.filename or "",
                media_type=(value.content_type or "").strip(),
                data=data,
            )
        else:
            fields[name] = TextField(name=name, value=str(value))
    return fields


async def parse_upload_form(
    request: Request,
    *,
    max_file_bytes: int,
    max_body_bytes: int | None = None,
    too_large_message: str = "File too large",
) -> dict[str, FormField]:
    """Parse the multipart body of `request` into typed fields.

    The form is opened as a context manager so Starlette's spooled
    temporary files are closed on every exit path, including parse and
    read errors.
    """
    require_multipart(request.headers.get("content-type"))
    if max_body_bytes is not None:
        check_content_length(
            request.headers.get("content-length"),
            max_body_bytes=max_body_bytes,
            too_large_message=too_large_message,
        )

    try:
        async with request.form() as form:
            return await classify_form(form, max_file_bytes=max_file_bytes)
    except StarletteHTTPException as exc:
        logger.warning("Rejecting malformed multipart body: %s", exc.detail)
        raise UploadValidationError("Malformed multipart form data") from exc
