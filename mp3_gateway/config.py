from __future__ import annotations

import os
from dataclasses import dataclass


MAX_UPLOAD_BYTES_DEFAULT = 50 * 1024 * 1024


@dataclass
class AppConfig:
    """Application configuration loaded from environment.

    The transcoder id selects which adapter backs `/api/convert`; every
    other knob tunes limits around that single call.
    """

    service_name: str = "Video to MP3 Converter"
    service_version: str = os.getenv("SERVICE_VERSION", "1.0.0")

    # One of the ids known to TranscoderRegistry.
    transcoder: str = os.getenv("TRANSCODER", "placeholder").lower()

    max_upload_bytes: int = int(
        os.getenv("MAX_UPLOAD_BYTES", str(MAX_UPLOAD_BYTES_DEFAULT))
    )

    transcode_timeout_seconds: float = float(
        os.getenv("TRANSCODE_TIMEOUT_SECONDS", "120")
    )
    # Extra attempts for transient transcoder failures only.
    transcode_max_retries: int = int(os.getenv("TRANSCODE_MAX_RETRIES", "1"))

    unimplemented_delay_seconds: float = float(
        os.getenv("UNIMPLEMENTED_DELAY_SECONDS", "1.0")
    )

    ffmpeg_binary: str = os.getenv("FFMPEG_BINARY", "ffmpeg")
    mp3_bitrate: str = os.getenv("MP3_BITRATE", "192k")

    circuit_breaker_failure_threshold: int = int(
        os.getenv("CIRCUIT_BREAKER_FAILURE_THRESHOLD", "5")
    )
    circuit_breaker_reset_seconds: int = int(
        os.getenv("CIRCUIT_BREAKER_RESET_SECONDS", "30")
    )

    metrics_enabled: bool = os.getenv("METRICS_ENABLED", "1") != "0"

    @property
    def max_upload_label(self) -> str:
        """Human readable size limit, e.g. "50MB"."""
        mib = self.max_upload_bytes / (1024 * 1024)
        if mib.is_integer():
            return f"{int(mib)}MB"
        return f"{mib:.1f}MB"


settings = AppConfig()
