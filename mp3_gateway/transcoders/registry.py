from __future__ import annotations

from typing import Callable, Dict, Iterable

from mp3_gateway.config import AppConfig, settings

from .base import BaseTranscoder
from .ffmpeg import FFmpegTranscoder
from .placeholder import PlaceholderTranscoder
from .unimplemented import UnimplementedTranscoder


class TranscoderRegistry:
    """Maps transcoder ids to factories built from the app config."""

    def __init__(self, config: AppConfig | None = None) -> None:
        cfg = config or settings
        self._factories: Dict[str, Callable[[], BaseTranscoder]] = {
            PlaceholderTranscoder.id: lambda: PlaceholderTranscoder(),
            UnimplementedTranscoder.id: lambda: UnimplementedTranscoder(
                delay_seconds=cfg.unimplemented_delay_seconds,
            ),
            FFmpegTranscoder.id: lambda: FFmpegTranscoder(
                binary=cfg.ffmpeg_binary,
                bitrate=cfg.mp3_bitrate,
                timeout_seconds=cfg.transcode_timeout_seconds,
            ),
        }

    def ids(self) -> Iterable[str]:
        return self._factories.keys()

    def create(self, transcoder_id: str) -> BaseTranscoder:
        try:
            factory = self._factories[transcoder_id.lower()]
        except KeyError:
            raise ValueError(
                f"Unknown transcoder '{transcoder_id}' "
                f"(expected one of: {', '.join(sorted(self._factories))})"
            )
        return factory()
