from __future__ import annotations

import asyncio
import shutil
import subprocess
import tempfile
from pathlib import Path

from mp3_gateway.errors import (
    ConversionError,
    ConversionTimeoutError,
    TranscoderUnavailableError,
)
from mp3_gateway.logging_utils import get_logger
from mp3_gateway.models import format_for_media_type

from .base import BaseTranscoder


logger = get_logger(__name__)

# stderr names scratch paths on this host; it is logged, never returned.
EXTRACTION_FAILED_MESSAGE = "Could not extract audio from the uploaded video"


class FFmpegTranscoder(BaseTranscoder):
    """Extracts the audio track of a video with the ffmpeg CLI.

    Container formats such as MP4 keep their index at the end of the file, so
    ffmpeg needs a seekable input: the upload is written to a scratch
    directory and ffmpeg writes its MP3 next to it. The directory (input and
    output alike) is removed when the call returns, whichever way it returns.
    """

    id: str = "ffmpeg"

    def __init__(
        self,
        *,
        binary: str = "ffmpeg",
        bitrate: str = "192k",
        timeout_seconds: float | None = None,
    ) -> None:
        self._binary = binary
        self._bitrate = bitrate
        self._timeout_seconds = timeout_seconds

    async def convert(self, data: bytes, media_type: str) -> bytes:
        logger.info(
            "[START] ffmpeg convert in=%s (len=%d) -> mp3@%s",
            media_type,
            len(data),
            self._bitrate,
        )
        return await asyncio.to_thread(
            self._ffmpeg_convert,
            data=data,
            media_type=media_type,
        )

    def _resolve_binary(self) -> str:
        path = shutil.which(self._binary)
        if path is None:
            logger.error("ffmpeg binary '%s' not found on PATH", self._binary)
            raise TranscoderUnavailableError("Transcoder is not available")
        return path

    def _ffmpeg_convert(self, *, data: bytes, media_type: str) -> bytes:
        """Invoke ffmpeg CLI on a scratch copy of the upload."""
        binary = self._resolve_binary()

        fmt = format_for_media_type(media_type)
        suffix = fmt.extension if fmt is not None else ".bin"

        with tempfile.TemporaryDirectory(prefix="mp3-gateway-") as workdir:
            in_path = Path(workdir) / f"input{suffix}"
            out_path = Path(workdir) / "output.mp3"
            in_path.write_bytes(data)

            cmd = [
                binary,
                "-hide_banner",
                "-loglevel",
                "error",
                "-nostdin",
                "-y",
                "-i",
                str(in_path),
                "-vn",
                "-acodec",
                "libmp3lame",
                "-b:a",
                self._bitrate,
                "-f",
                "mp3",
                str(out_path),
            ]

            logger.info("[FFMPEG] cmd=%s (input_len=%d)", " ".join(cmd), len(data))

            try:
                proc = subprocess.run(
                    cmd,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.PIPE,
                    timeout=self._timeout_seconds,
                    check=False,
                )
            except subprocess.TimeoutExpired as exc:
                logger.error("ffmpeg timed out after %ss", self._timeout_seconds)
                raise ConversionTimeoutError("Conversion timed out") from exc
            except OSError as exc:
                logger.error("ffmpeg execution failed: %s", exc, exc_info=True)
                raise TranscoderUnavailableError("Transcoder is not available") from exc

            if proc.returncode != 0:
                message = proc.stderr.decode("utf-8", errors="ignore").strip() or str(
                    proc.returncode
                )
                logger.error(
                    "ffmpeg conversion failed in=%s (rc=%d): %s",
                    media_type,
                    proc.returncode,
                    message,
                )
                # A negative return code means ffmpeg was killed by a signal,
                # not that it rejected the input.
                raise ConversionError(
                    EXTRACTION_FAILED_MESSAGE,
                    transient=proc.returncode < 0,
                )

            out = out_path.read_bytes() if out_path.exists() else b""

        if not out:
            logger.error("ffmpeg produced no output data in=%s", media_type)
            raise ConversionError("ffmpeg produced no output data")

        logger.info("[FFMPEG] produced %d bytes of audio data", len(out))
        return out
