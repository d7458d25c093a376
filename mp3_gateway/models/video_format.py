from __future__ import annotations

from enum import Enum


class VideoFormat(str, Enum):
    MP4 = "mp4"
    AVI = "avi"
    MOV = "mov"
    MKV = "mkv"
    WEBM = "webm"
    FLV = "flv"
    WMV = "wmv"

    @property
    def extension(self) -> str:
        return f".{self.value}"

    @property
    def media_type(self) -> str:
        return f"video/{self.value}"


SUPPORTED_EXTENSIONS: tuple[str, ...] = tuple(f.extension for f in VideoFormat)

# Registered names browsers and OSes send for the same containers.
_MEDIA_TYPE_ALIASES: dict[str, VideoFormat] = {
    "video/quicktime": VideoFormat.MOV,
    "video/x-msvideo": VideoFormat.AVI,
    "video/x-matroska": VideoFormat.MKV,
    "video/x-flv": VideoFormat.FLV,
    "video/x-ms-wmv": VideoFormat.WMV,
}

ALLOWED_MEDIA_TYPES: frozenset[str] = frozenset(
    [f.media_type for f in VideoFormat] + list(_MEDIA_TYPE_ALIASES)
)


def format_for_extension(filename: str) -> VideoFormat | None:
    """Return the video format implied by the final extension of `filename`."""
    dot = filename.rfind(".")
    if dot < 0:
        return None
    ext = filename[dot + 1 :].lower()
    try:
        return VideoFormat(ext)
    except ValueError:
        return None


def format_for_media_type(media_type: str) -> VideoFormat | None:
    normalized = media_type.split(";", 1)[0].strip().lower()
    if normalized in _MEDIA_TYPE_ALIASES:
        return _MEDIA_TYPE_ALIASES[normalized]
    if normalized.startswith("video/"):
        try:
            return VideoFormat(normalized[len("video/") :])
        except ValueError:
            return None
    return None
