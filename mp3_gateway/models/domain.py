from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class FileField:
    """A multipart part that carried a file attachment."""

    name: str
    filename: str
    media_type: str
    data: bytes


@dataclass(frozen=True)
class TextField:
    """A plain multipart form value."""

    name: str
    value: str


FormField = Union[FileField, TextField]


@dataclass(frozen=True)
class UploadRequest:
    """A validated video upload, ready to hand to a transcoder."""

    filename: str
    media_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class Accepted:
    upload: UploadRequest


@dataclass(frozen=True)
class Rejected:
    reason: str
    status_code: int = 400
    # Short machine-readable label, used for metrics.
    code: str = "invalid"


ValidationResult = Union[Accepted, Rejected]


@dataclass(frozen=True)
class Converted:
    mp3_bytes: bytes
    suggested_filename: str


@dataclass(frozen=True)
class Failed:
    message: str
    status_code: int = 500


ConversionOutcome = Union[Converted, Failed]
