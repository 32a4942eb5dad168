"""
asyncllm - OpenTelemetry Tracing

One client span per stream.

The library only uses the OpenTelemetry API. Spans go wherever the
application's tracer provider sends them; ``setup_tracing`` installs an
SDK provider for scripts and the CLI that have none.

Usage:
    from asyncllm.observability.tracing import trace_stream

    with trace_stream("https://api.openai.com/v1/chat/completions") as span:
        ...
        span.set_attribute("asyncllm.events", 12)
"""

import os
import sys
from contextlib import contextmanager
from dataclasses import dataclass

from opentelemetry import trace
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import ConsoleSpanExporter, SimpleSpanProcessor
from opentelemetry.trace import SpanKind, Status, StatusCode

TRACER_NAME = "asyncllm"


@dataclass
class TraceContext:
    """Trace identifiers of a span, formatted for logs."""
    trace_id: str
    span_id: str

    @classmethod
    def from_span(cls, span: trace.Span) -> "TraceContext":
        ctx = span.get_span_context()
        return cls(
            trace_id=format(ctx.trace_id, "032x"),
            span_id=format(ctx.span_id, "016x"),
        )


def setup_tracing(
    service_name: str = "asyncllm",
    console_export: bool = False,
) -> TracerProvider:
    """
    Install an SDK tracer provider.

    Args:
        service_name: Service name resource attribute
        console_export: Print finished spans to stderr (debugging)
    """
    if os.getenv("OTEL_CONSOLE_EXPORT", "").lower() == "true":
        console_export = True

    provider = TracerProvider(resource=Resource.create({SERVICE_NAME: service_name}))
    if console_export:
        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter(out=sys.stderr)))

    trace.set_tracer_provider(provider)
    return provider


def get_tracer() -> trace.Tracer:
    return trace.get_tracer(TRACER_NAME)


@contextmanager
def trace_stream(url: str, method: str = "POST"):
    """
    Context manager for tracing one stream.

    The span is not made current: a stream outlives the caller's context
    between yields. Exceptions are recorded and mark the span as failed;
    closing the stream early does not.
    """
    span = get_tracer().start_span(
        "asyncllm.stream",
        kind=SpanKind.CLIENT,
        attributes={
            "http.method": method,
            "http.url": url,
        },
    )
    try:
        yield span
    except Exception as e:
        span.record_exception(e)
        span.set_status(Status(StatusCode.ERROR, str(e)))
        raise
    finally:
        span.end()
