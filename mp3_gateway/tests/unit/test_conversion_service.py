from __future__ import annotations

import asyncio

import pytest

from mp3_gateway.errors import ConversionError, TranscoderUnavailableError
from mp3_gateway.metrics import GatewayMetrics
from mp3_gateway.models import Converted, Failed, UploadRequest
from mp3_gateway.services import (
    CircuitBreakerConfig,
    CircuitBreakerRegistry,
    mp3_filename,
)


def _upload(filename: str = "clip.MOV") -> UploadRequest:
    return UploadRequest(filename=filename, media_type="video/mov", data=b"0123456789")


class FlakyTranscoder:
    id = "flaky"

    def __init__(self, failures: int) -> None:
        self.failures = failures
        self.calls = 0

    async def convert(self, data: bytes, media_type: str) -> bytes:
        self.calls += 1
        if self.calls <= self.failures:
            raise ConversionError("ffmpeg was killed", transient=True)
        return b"mp3!"


class SlowTranscoder:
    id = "slow"

    async def convert(self, data: bytes, media_type: str) -> bytes:
        await asyncio.sleep(5)
        return b"never"


class ExplodingTranscoder:
    id = "exploding"

    async def convert(self, data: bytes, media_type: str) -> bytes:
        raise RuntimeError("secret stack detail")


@pytest.mark.parametrize(
    ("original", "expected"),
    [
        ("clip.MOV", "clip.mp3"),
        ("my.holiday.mp4", "my.holiday.mp3"),
        ("video", "video.mp3"),
        ("dir.name/clip", "dir.name/clip.mp3"),
        (".mp4", "converted.mp3"),
        ("", "converted.mp3"),
    ],
)
def test_mp3_filename_replaces_last_extension(original: str, expected: str) -> None:
    assert mp3_filename(original) == expected


@pytest.mark.asyncio
async def test_convert_success_calls_transcoder_once(make_stub, make_service) -> None:
    stub = make_stub(output=b"\xff\xfb\x90\x00")
    service = make_service(stub)

    outcome = await service.convert(_upload())

    assert isinstance(outcome, Converted)
    assert outcome.mp3_bytes == b"\xff\xfb\x90\x00"
    assert outcome.suggested_filename == "clip.mp3"
    assert stub.calls == [(b"0123456789", "video/mov")]


@pytest.mark.asyncio
async def test_conversion_error_maps_to_failed_with_message(make_stub, make_service) -> None:
    stub = make_stub(error=ConversionError("Unsupported input"))
    service = make_service(stub)

    outcome = await service.convert(_upload())

    assert isinstance(outcome, Failed)
    assert outcome.status_code == 500
    assert outcome.message == "Unsupported input"
    # Deterministic failures are not retried.
    assert len(stub.calls) == 1


@pytest.mark.asyncio
async def test_unavailable_transcoder_maps_to_503(make_stub, make_service) -> None:
    stub = make_stub(error=TranscoderUnavailableError("ffmpeg binary 'ffmpeg' is not available"))
    service = make_service(stub)

    outcome = await service.convert(_upload())

    assert isinstance(outcome, Failed)
    assert outcome.status_code == 503


@pytest.mark.asyncio
async def test_transient_failure_is_retried_once(make_service) -> None:
    transcoder = FlakyTranscoder(failures=1)
    service = make_service(transcoder, max_retries=1)

    outcome = await service.convert(_upload())

    assert isinstance(outcome, Converted)
    assert transcoder.calls == 2


@pytest.mark.asyncio
async def test_retries_are_bounded(make_service) -> None:
    transcoder = FlakyTranscoder(failures=5)
    service = make_service(transcoder, max_retries=2)

    outcome = await service.convert(_upload())

    assert isinstance(outcome, Failed)
    assert outcome.message == "ffmpeg was killed"
    assert transcoder.calls == 3


@pytest.mark.asyncio
async def test_timeout_maps_to_504(make_service) -> None:
    service = make_service(SlowTranscoder(), timeout_seconds=0.05)

    outcome = await service.convert(_upload())

    assert isinstance(outcome, Failed)
    assert outcome.status_code == 504
    assert outcome.message == "Conversion timed out"


@pytest.mark.asyncio
async def test_unexpected_error_is_not_echoed(make_service) -> None:
    service = make_service(ExplodingTranscoder())

    outcome = await service.convert(_upload())

    assert isinstance(outcome, Failed)
    assert outcome.status_code == 500
    assert outcome.message == "Internal server error"
    assert "secret" not in outcome.message


@pytest.mark.asyncio
async def test_empty_output_is_a_failure(make_stub, make_service) -> None:
    service = make_service(make_stub(output=b""))

    outcome = await service.convert(_upload())

    assert isinstance(outcome, Failed)
    assert outcome.message == "Conversion failed"


@pytest.mark.asyncio
async def test_open_breaker_short_circuits_transcoder(make_stub, make_service) -> None:
    stub = make_stub(error=TranscoderUnavailableError("Transcoder is not available"))
    breakers = CircuitBreakerRegistry(
        CircuitBreakerConfig(failure_threshold=2, reset_timeout_seconds=60)
    )
    service = make_service(stub, breakers=breakers)

    await service.convert(_upload())
    await service.convert(_upload())
    outcome = await service.convert(_upload())

    assert isinstance(outcome, Failed)
    assert outcome.status_code == 503
    assert outcome.message == "Transcoder temporarily unavailable"
    assert len(stub.calls) == 2


@pytest.mark.asyncio
async def test_conversion_records_metrics(make_stub, make_service) -> None:
    metrics = GatewayMetrics()
    service = make_service(make_stub(), metrics=metrics)

    await service.convert(_upload())

    assert metrics.sample_value(
        "mp3_gateway_conversions_total", {"transcoder": "stub", "outcome": "converted"}
    ) == 1.0
    assert metrics.sample_value("mp3_gateway_upload_bytes_total") == 10.0
    assert metrics.sample_value(
        "mp3_gateway_transcode_duration_seconds_count", {"transcoder": "stub"}
    ) == 1.0


@pytest.mark.asyncio
async def test_concurrent_conversions_do_not_block_each_other(make_service) -> None:
    class SleepyTranscoder:
        id = "sleepy"

        async def convert(self, data: bytes, media_type: str) -> bytes:
            await asyncio.sleep(0.2)
            return data[:4]

    service = make_service(SleepyTranscoder())

    loop = asyncio.get_running_loop()
    start = loop.time()
    outcomes = await asyncio.gather(*(service.convert(_upload(f"clip{i}.mp4")) for i in range(5)))
    elapsed = loop.time() - start

    assert all(isinstance(o, Converted) for o in outcomes)
    assert [o.suggested_filename for o in outcomes] == [f"clip{i}.mp3" for i in range(5)]
    assert elapsed < 0.8


@pytest.mark.asyncio
async def test_deterministic_failures_do_not_trip_default_breaker(make_stub, make_service) -> None:
    stub = make_stub(error=ConversionError("Could not extract audio from the uploaded video"))
    breakers = CircuitBreakerRegistry()
    service = make_service(stub, breakers=breakers)

    outcomes = [await service.convert(_upload()) for _ in range(8)]

    assert all(isinstance(o, Failed) and o.status_code == 500 for o in outcomes)
    assert len(stub.calls) == 8
    assert breakers.state_of("stub") == "closed"

    # The transcoder is healthy, so a good upload still converts.
    stub.error = None
    assert isinstance(await service.convert(_upload()), Converted)


@pytest.mark.asyncio
async def test_timeouts_trip_the_breaker(make_service) -> None:
    breakers = CircuitBreakerRegistry(
        CircuitBreakerConfig(failure_threshold=2, reset_timeout_seconds=60)
    )
    service = make_service(SlowTranscoder(), breakers=breakers, timeout_seconds=0.02)

    await service.convert(_upload())
    await service.convert(_upload())

    assert breakers.state_of("slow") == "open"


@pytest.mark.asyncio
async def test_timeout_is_one_deadline_across_retries(make_service) -> None:
    class SlowFlakyTranscoder:
        id = "slow-flaky"

        def __init__(self) -> None:
            self.calls = 0

        async def convert(self, data: bytes, media_type: str) -> bytes:
            self.calls += 1
            await asyncio.sleep(0.15)
            raise ConversionError("worker restarted", transient=True)

    transcoder = SlowFlakyTranscoder()
    service = make_service(transcoder, timeout_seconds=0.25, max_retries=5)

    loop = asyncio.get_running_loop()
    start = loop.time()
    outcome = await service.convert(_upload())
    elapsed = loop.time() - start

    assert isinstance(outcome, Failed)
    assert outcome.status_code == 504
    assert transcoder.calls == 2
    assert elapsed < 0.5
