from __future__ import annotations

import asyncio

from mp3_gateway.errors import ConversionError

from .base import BaseTranscoder


class UnimplementedTranscoder(BaseTranscoder):
    """Simulates a slow backend, then reports that conversion is unavailable."""

    id: str = "unimplemented"

    def __init__(self, delay_seconds: float = 1.0) -> None:
        self._delay_seconds = delay_seconds

    async def convert(self, data: bytes, media_type: str) -> bytes:
        if self._delay_seconds > 0:
            await asyncio.sleep(self._delay_seconds)
        raise ConversionError("Video to MP3 conversion is not implemented")
