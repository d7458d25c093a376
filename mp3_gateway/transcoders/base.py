from __future__ import annotations

from typing import Protocol


class BaseTranscoder(Protocol):
    """Interface for anything that turns a video upload into MP3 bytes.

    Implementations may be slow (seconds) and must not block the event
    loop; failures are reported by raising ConversionError.
    """

    id: str

    async def convert(self, data: bytes, media_type: str) -> bytes:
        """Return MP3 bytes for the given video payload."""
