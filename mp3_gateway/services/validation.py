from __future__ import annotations

from typing import Mapping

from mp3_gateway.config import MAX_UPLOAD_BYTES_DEFAULT
from mp3_gateway.models import (
    ALLOWED_MEDIA_TYPES,
    Accepted,
    FileField,
    FormField,
    Rejected,
    UploadRequest,
    ValidationResult,
    format_for_extension,
)


VIDEO_FIELD = "video"
MULTIPART_OVERHEAD_BYTES = 1024 * 1024


class UploadValidator:
    """Decides whether a parsed upload may be handed to the transcoder.

    Rules, in order:

    - the `video` field must be present and carry a file;
    - the declared content type must be an allowed video type, or else the
      filename extension must be one of the supported video extensions;
    - the payload must not exceed the size limit.

    The validator never performs I/O; it only looks at the fields it is
    given.
    """

    def __init__(
        self,
        *,
        max_upload_bytes: int = MAX_UPLOAD_BYTES_DEFAULT,
        max_upload_label: str = "50MB",
        field_name: str = VIDEO_FIELD,
    ) -> None:
        self._max_upload_bytes = max_upload_bytes
        self._max_upload_label = max_upload_label
        self._field_name = field_name

    @property
    def max_upload_bytes(self) -> int:
        return self._max_upload_bytes

    @property
    def max_body_bytes(self) -> int:
        """Ceiling on the whole request body, checked before the form is parsed.

        Twice the file limit plus room for multipart headers, so any upload
        that could pass the file rules still reaches them.
        """
        return 2 * self._max_upload_bytes + MULTIPART_OVERHEAD_BYTES

    @property
    def too_large_message(self) -> str:
        return f"File too large. Maximum size is {self._max_upload_label}"

    def effective_media_type(self, declared: str, filename: str) -> str | None:
        """Prefer the declared type, fall back to the filename extension."""
        normalized = declared.split(";", 1)[0].strip().lower()
        if normalized in ALLOWED_MEDIA_TYPES:
            return normalized
        fmt = format_for_extension(filename)
        if fmt is not None:
            return fmt.media_type
        return None

    def validate(self, fields: Mapping[str, FormField]) -> ValidationResult:
        field = fields.get(self._field_name)
        if not isinstance(field, FileField):
            return Rejected("No video file provided", code="missing_file")

        media_type = self.effective_media_type(field.media_type, field.filename)
        if media_type is None:
            return Rejected("Invalid video file type", code="invalid_type")

        if len(field.data) > self._max_upload_bytes:
            return Rejected(self.too_large_message, code="too_large")

        return Accepted(
            UploadRequest(
                filename=field.filename,
                media_type=media_type,
                data=field.data,
            )
        )
