from __future__ import annotations

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram

from mp3_gateway.logging_utils import get_logger


logger = get_logger(__name__)


class GatewayMetrics:
    """Prometheus metrics for the conversion pipeline.

    Each instance owns its CollectorRegistry, so the container hands one
    instance to every collaborator and tests can build isolated copies.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry or CollectorRegistry()

        self.conversions_total = Counter(
            "mp3_gateway_conversions_total",
            "Total conversions by transcoder and outcome.",
            ["transcoder", "outcome"],
            registry=self.registry,
        )
        self.upload_rejections_total = Counter(
            "mp3_gateway_upload_rejections_total",
            "Total uploads rejected before reaching the transcoder.",
            ["reason"],
            registry=self.registry,
        )
        self.upload_bytes_total = Counter(
            "mp3_gateway_upload_bytes_total",
            "Total bytes of accepted video uploads.",
            registry=self.registry,
        )
        self.transcode_duration_seconds = Histogram(
            "mp3_gateway_transcode_duration_seconds",
            "Wall-clock time spent waiting on the transcoder.",
            ["transcoder"],
            buckets=(0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0),
            registry=self.registry,
        )
        self.transcoder_failures_total = Counter(
            "mp3_gateway_transcoder_failures_total",
            "Total transcoder failures by kind.",
            ["transcoder", "kind"],
            registry=self.registry,
        )
        self.in_flight_conversions = Gauge(
            "mp3_gateway_in_flight_conversions",
            "Conversions currently awaiting the transcoder.",
            registry=self.registry,
        )

    def record_rejection(self, reason: str) -> None:
        self.upload_rejections_total.labels(reason=reason).inc()

    def record_accepted_upload(self, num_bytes: int) -> None:
        self.upload_bytes_total.inc(num_bytes)

    def record_conversion(self, transcoder_id: str, outcome: str) -> None:
        self.conversions_total.labels(transcoder=transcoder_id, outcome=outcome).inc()

    def record_transcoder_failure(self, transcoder_id: str, kind: str) -> None:
        self.transcoder_failures_total.labels(transcoder=transcoder_id, kind=kind).inc()

    def observe_transcode_duration(self, transcoder_id: str, seconds: float) -> None:
        self.transcode_duration_seconds.labels(transcoder=transcoder_id).observe(
            max(0.0, seconds)
        )

    def sample_value(self, name: str, labels: dict[str, str] | None = None) -> float:
        """Return the current value of a sample, or 0.0 if it was never set."""
        value = self.registry.get_sample_value(name, labels or {})
        return float(value) if value is not None else 0.0
