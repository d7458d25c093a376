from __future__ import annotations

import asyncio
import re
import time

from mp3_gateway.errors import (
    ConversionError,
    ConversionTimeoutError,
    TranscoderUnavailableError,
)
from mp3_gateway.logging_utils import get_logger
from mp3_gateway.metrics import GatewayMetrics
from mp3_gateway.models import ConversionOutcome, Converted, Failed, UploadRequest
from mp3_gateway.services.circuit_breaker import CircuitBreakerRegistry
from mp3_gateway.transcoders import BaseTranscoder


logger = get_logger(__name__)

_LAST_EXTENSION = re.compile(r"\.[^/.]+$")


def mp3_filename(original: str) -> str:
    """Replace the final extension of `original` with `.mp3`.

    - 'clip.MOV' -> 'clip.mp3'
    - 'my.holiday.mp4' -> 'my.holiday.mp3'
    - 'video' -> 'video.mp3'
    """
    base = _LAST_EXTENSION.sub("", original)
    return f"{base or 'converted'}.mp3"


class ConversionService:
    """Runs one accepted upload through the configured transcoder.

    The transcoder call is the only slow step in a request, so it is
    bounded by a timeout, guarded by a per-transcoder circuit breaker and
    retried only when the transcoder reports a transient failure.
    """

    def __init__(
        self,
        *,
        transcoder: BaseTranscoder,
        circuit_breakers: CircuitBreakerRegistry,
        metrics: GatewayMetrics,
        timeout_seconds: float = 120.0,
        max_retries: int = 1,
    ) -> None:
        self._transcoder = transcoder
        self._circuit_breakers = circuit_breakers
        self._metrics = metrics
        self._timeout_seconds = timeout_seconds
        self._max_retries = max(0, max_retries)

    @property
    def transcoder_id(self) -> str:
        return self._transcoder.id

    async def convert(self, upload: UploadRequest) -> ConversionOutcome:
        transcoder_id = self._transcoder.id

        if not self._circuit_breakers.allow_request(transcoder_id):
            self._metrics.record_conversion(transcoder_id, "rejected")
            return Failed("Transcoder temporarily unavailable", status_code=503)

        self._metrics.record_accepted_upload(upload.size)
        self._metrics.in_flight_conversions.inc()
        try:
            outcome, transcoder_fault = await self._convert_with_retries(upload)
        finally:
            self._metrics.in_flight_conversions.dec()

        if isinstance(outcome, Converted):
            self._circuit_breakers.record_success(transcoder_id)
            self._metrics.record_conversion(transcoder_id, "converted")
            return outcome

        # Deterministic failures (bad input) do not count against the breaker.
        if transcoder_fault:
            self._circuit_breakers.record_failure(transcoder_id)
        self._metrics.record_conversion(transcoder_id, "failed")
        return outcome

    async def _convert_with_retries(
        self, upload: UploadRequest
    ) -> tuple[ConversionOutcome, bool]:
        """Return the outcome and whether a failure was the transcoder's fault.

        The timeout is one deadline shared by every attempt, so retries never
        stretch a request past `timeout_seconds`.
        """
        transcoder_id = self._transcoder.id
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._timeout_seconds
        attempt = 0

        while True:
            attempt += 1
            logger.info(
                "[START] convert %s (%s, %d bytes) via %s attempt=%d",
                upload.filename,
                upload.media_type,
                upload.size,
                transcoder_id,
                attempt,
            )
            start = time.monotonic()
            try:
                remaining = deadline - loop.time()
                if remaining <= 0:
                    raise asyncio.TimeoutError()
                mp3 = await asyncio.wait_for(
                    self._transcoder.convert(upload.data, upload.media_type),
                    timeout=remaining,
                )
            except asyncio.TimeoutError:
                logger.error(
                    "Transcoder %s timed out after %.1fs for %s",
                    transcoder_id,
                    self._timeout_seconds,
                    upload.filename,
                )
                self._metrics.record_transcoder_failure(transcoder_id, "timeout")
                return Failed("Conversion timed out", status_code=504), True
            except ConversionError as exc:
                kind = "transient" if exc.transient else "error"
                self._metrics.record_transcoder_failure(transcoder_id, kind)
                if exc.transient and attempt <= self._max_retries:
                    logger.warning(
                        "Transient transcoder failure for %s (attempt %d/%d): %s",
                        upload.filename,
                        attempt,
                        self._max_retries + 1,
                        exc.message,
                    )
                    continue
                logger.error(
                    "Transcoder %s failed for %s: %s",
                    transcoder_id,
                    upload.filename,
                    exc.message,
                )
                fault = exc.transient or isinstance(
                    exc, (ConversionTimeoutError, TranscoderUnavailableError)
                )
                return (
                    Failed(exc.message or "Conversion failed", status_code=exc.status_code),
                    fault,
                )
            except Exception:
                logger.exception(
                    "Unexpected transcoder error for %s via %s",
                    upload.filename,
                    transcoder_id,
                )
                self._metrics.record_transcoder_failure(transcoder_id, "internal")
                return Failed("Internal server error", status_code=500), True
            finally:
                self._metrics.observe_transcode_duration(
                    transcoder_id, time.monotonic() - start
                )

            if not mp3:
                logger.error("Transcoder %s returned no data for %s", transcoder_id, upload.filename)
                self._metrics.record_transcoder_failure(transcoder_id, "empty")
                return Failed("Conversion failed", status_code=500), False

            logger.info(
                "[DONE] converted %s -> %d bytes of mp3",
                upload.filename,
                len(mp3),
            )
            converted = Converted(
                mp3_bytes=bytes(mp3), suggested_filename=mp3_filename(upload.filename)
            )
            return converted, False
