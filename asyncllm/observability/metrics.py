"""
asyncllm - Prometheus Metrics

Stream metrics collected with the Prometheus client library.

Metrics exposed:
- asyncllm_streams_total: Counter of finished streams by status (completed/cancelled/failed)
- asyncllm_stream_duration_seconds: Histogram of stream wall time
- asyncllm_time_to_first_event_seconds: Histogram of time until the first event
- asyncllm_events_total: Counter of emitted events by kind (delta/error)
- asyncllm_errors_total: Counter of error events by error_type (transport/decode/provider)
- asyncllm_extractor_matches_total: Counter of deltas by the extractor that matched

Usage:
    from asyncllm.observability.metrics import get_metrics

    metrics = get_metrics()
    metrics.record_event("delta")

    # Expose with prometheus_client, e.g. start_http_server(9100)
"""

from typing import Dict, Optional

from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)


class StreamMetrics:
    """
    Metrics collector for normalized streams.

    One instance per registry; ``get_metrics()`` returns the shared
    default-registry instance.
    """

    def __init__(self, registry: CollectorRegistry = REGISTRY):
        self.registry = registry

        self.streams_total = Counter(
            "asyncllm_streams_total",
            "Total number of finished streams",
            labelnames=["status"],
            registry=registry,
        )

        # LLM streams range from well under a second to several minutes
        self.stream_duration = Histogram(
            "asyncllm_stream_duration_seconds",
            "Stream duration in seconds",
            buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 25.0, 50.0, 100.0, 300.0, float("inf")),
            registry=registry,
        )

        self.time_to_first_event = Histogram(
            "asyncllm_time_to_first_event_seconds",
            "Time until the first normalized event",
            buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, float("inf")),
            registry=registry,
        )

        self.events_total = Counter(
            "asyncllm_events_total",
            "Total normalized events emitted",
            labelnames=["kind"],  # kind = delta/error
            registry=registry,
        )

        self.errors_total = Counter(
            "asyncllm_errors_total",
            "Total error events emitted",
            labelnames=["error_type"],
            registry=registry,
        )

        self.extractor_matches = Counter(
            "asyncllm_extractor_matches_total",
            "Deltas produced, by the extractor that matched",
            labelnames=["extractor"],
            registry=registry,
        )

    def record_event(self, kind: str):
        self.events_total.labels(kind=kind).inc()

    def record_error(self, error_type: str):
        self.errors_total.labels(error_type=error_type).inc()

    def record_extractor_match(self, extractor: Optional[str]):
        self.extractor_matches.labels(extractor=extractor or "none").inc()

    def record_time_to_first_event(self, seconds: float):
        self.time_to_first_event.observe(seconds)

    def record_stream(self, status: str, duration_seconds: float):
        """Record a finished stream."""
        self.streams_total.labels(status=status).inc()
        self.stream_duration.observe(duration_seconds)

    def export(self) -> bytes:
        """Render the registry in Prometheus text format."""
        return generate_latest(self.registry)


_metrics_instance: Optional[StreamMetrics] = None
_instances: Dict[CollectorRegistry, StreamMetrics] = {}


def setup_metrics(registry: CollectorRegistry = REGISTRY) -> StreamMetrics:
    """
    Setup metrics collection.

    Safe to call multiple times: collectors are registered once per registry.
    """
    global _metrics_instance

    if registry not in _instances:
        _instances[registry] = StreamMetrics(registry)

    _metrics_instance = _instances[registry]
    return _metrics_instance


def get_metrics() -> StreamMetrics:
    """Get the shared metrics collector, creating it on first use."""
    if _metrics_instance is None:
        return setup_metrics()
    return _metrics_instance
