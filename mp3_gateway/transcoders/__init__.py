from .base import BaseTranscoder
from .ffmpeg import FFmpegTranscoder
from .placeholder import MP3_FRAME_HEADER, PlaceholderTranscoder
from .registry import TranscoderRegistry
from .unimplemented import UnimplementedTranscoder

__all__ = [
    "BaseTranscoder",
    "FFmpegTranscoder",
    "MP3_FRAME_HEADER",
    "PlaceholderTranscoder",
    "TranscoderRegistry",
    "UnimplementedTranscoder",
]
