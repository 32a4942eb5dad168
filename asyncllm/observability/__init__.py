"""
asyncllm - Observability Module

- Prometheus metrics per stream (events, errors, extractor matches, duration)
- OpenTelemetry span per stream
- Structured JSON logging with per-stream context

Usage:
    from asyncllm.observability import setup_observability, get_logger

    setup_observability(log_level="INFO")
    logger = get_logger(__name__)
"""

from .metrics import (
    StreamMetrics,
    get_metrics,
    setup_metrics,
)
from .tracing import (
    TraceContext,
    get_tracer,
    setup_tracing,
    trace_stream,
)
from .logging import (
    LogContext,
    JSONFormatter,
    StructuredLogger,
    get_logger,
    setup_logging,
)

__all__ = [
    # Metrics
    "StreamMetrics",
    "get_metrics",
    "setup_metrics",
    # Tracing
    "TraceContext",
    "get_tracer",
    "setup_tracing",
    "trace_stream",
    # Logging
    "LogContext",
    "JSONFormatter",
    "StructuredLogger",
    "get_logger",
    "setup_logging",
    # Setup
    "setup_observability",
]


def setup_observability(
    service_name: str = "asyncllm",
    log_level: str = "INFO",
    json_logs: bool = True,
    enable_metrics: bool = True,
    enable_tracing: bool = True,
    console_export: bool = False,
) -> None:
    """
    Initialize logging, metrics and (optionally) an SDK tracer provider.

    Applications that already configure OpenTelemetry should pass
    enable_tracing=False.
    """
    setup_logging(level=log_level, json_output=json_logs)
    if enable_metrics:
        setup_metrics()
    if enable_tracing:
        setup_tracing(service_name=service_name, console_export=console_export)
