from __future__ import annotations

from .base import BaseTranscoder


# MPEG-1 Layer III, 128 kbps, 44.1 kHz, no padding, followed by zeroed
# side information.
MP3_FRAME_HEADER = bytes(
    [
        0xFF, 0xFB, 0x90, 0x00,
        0x00, 0x00, 0x00, 0x00,
        0x00, 0x00, 0x00, 0x00,
        0x00, 0x00, 0x00, 0x00,
    ]
)


class PlaceholderTranscoder(BaseTranscoder):
    """Returns a fixed MP3-shaped buffer without decoding the input.

    Useful for exercising the HTTP surface and client integrations on hosts
    without a real transcoder installed.
    """

    id: str = "placeholder"

    def __init__(self, payload_size: int = 1024) -> None:
        self._payload_size = payload_size

    async def convert(self, data: bytes, media_type: str) -> bytes:
        return MP3_FRAME_HEADER + bytes(self._payload_size)
