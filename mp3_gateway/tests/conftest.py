from __future__ import annotations

from typing import Callable, Optional

import pytest
from fastapi.testclient import TestClient

from mp3_gateway import container
from mp3_gateway.main import create_app
from mp3_gateway.metrics import GatewayMetrics
from mp3_gateway.services import (
    CircuitBreakerConfig,
    CircuitBreakerRegistry,
    ConversionService,
    UploadValidator,
)


class StubTranscoder:
    """Records every call and returns canned bytes (or raises)."""

    id = "stub"

    def __init__(
        self,
        output: bytes = b"\xff\xfb\x90\x00",
        error: Optional[Exception] = None,
    ) -> None:
        self.output = output
        self.error = error
        self.calls: list[tuple[bytes, str]] = []

    async def convert(self, data: bytes, media_type: str) -> bytes:
        self.calls.append((data, media_type))
        if self.error is not None:
            raise self.error
        return self.output


def build_service(
    transcoder,
    *,
    metrics: Optional[GatewayMetrics] = None,
    breakers: Optional[CircuitBreakerRegistry] = None,
    timeout_seconds: float = 5.0,
    max_retries: int = 1,
) -> ConversionService:
    return ConversionService(
        transcoder=transcoder,
        circuit_breakers=breakers
        or CircuitBreakerRegistry(CircuitBreakerConfig(failure_threshold=100)),
        metrics=metrics or GatewayMetrics(),
        timeout_seconds=timeout_seconds,
        max_retries=max_retries,
    )


@pytest.fixture
def stub_transcoder() -> StubTranscoder:
    return StubTranscoder()


@pytest.fixture
def metrics() -> GatewayMetrics:
    return GatewayMetrics()


@pytest.fixture
def make_client(metrics: GatewayMetrics) -> Callable[..., TestClient]:
    """Build a TestClient whose conversion service wraps the given transcoder."""

    def _make(
        transcoder=None,
        *,
        validator: Optional[UploadValidator] = None,
        **service_kwargs,
    ) -> TestClient:
        app = create_app()
        if transcoder is not None:
            service = build_service(transcoder, metrics=metrics, **service_kwargs)
            app.dependency_overrides[container.get_conversion_service] = lambda: service
        if validator is not None:
            app.dependency_overrides[container.get_upload_validator] = lambda: validator
        app.dependency_overrides[container.get_metrics] = lambda: metrics
        return TestClient(app)

    return _make


@pytest.fixture
def client(make_client, stub_transcoder: StubTranscoder) -> TestClient:
    return make_client(stub_transcoder)


@pytest.fixture
def make_stub() -> type[StubTranscoder]:
    return StubTranscoder


@pytest.fixture
def make_service() -> Callable[..., ConversionService]:
    return build_service
