from __future__ import annotations

from functools import lru_cache

from mp3_gateway.config import settings
from mp3_gateway.metrics import GatewayMetrics
from mp3_gateway.services import (
    CircuitBreakerConfig,
    CircuitBreakerRegistry,
    ConversionService,
    UploadValidator,
)
from mp3_gateway.transcoders import BaseTranscoder, TranscoderRegistry


@lru_cache(maxsize=1)
def get_metrics() -> GatewayMetrics:
    return GatewayMetrics()


@lru_cache(maxsize=1)
def get_transcoder_registry() -> TranscoderRegistry:
    return TranscoderRegistry(settings)


@lru_cache(maxsize=1)
def get_transcoder() -> BaseTranscoder:
    """Return the process-wide transcoder selected by TRANSCODER."""
    return get_transcoder_registry().create(settings.transcoder)


@lru_cache(maxsize=1)
def get_circuit_breaker_registry() -> CircuitBreakerRegistry:
    config = CircuitBreakerConfig(
        failure_threshold=settings.circuit_breaker_failure_threshold,
        reset_timeout_seconds=settings.circuit_breaker_reset_seconds,
    )
    return CircuitBreakerRegistry(config=config)


@lru_cache(maxsize=1)
def get_upload_validator() -> UploadValidator:
    return UploadValidator(
        max_upload_bytes=settings.max_upload_bytes,
        max_upload_label=settings.max_upload_label,
    )


@lru_cache(maxsize=1)
def get_conversion_service() -> ConversionService:
    return ConversionService(
        transcoder=get_transcoder(),
        circuit_breakers=get_circuit_breaker_registry(),
        metrics=get_metrics(),
        timeout_seconds=settings.transcode_timeout_seconds,
        max_retries=settings.transcode_max_retries,
    )
