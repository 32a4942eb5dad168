"""
asyncllm - Observability Tests

Tests for the observability stack:
- Prometheus metrics
- OpenTelemetry tracing
- Structured logging
"""

import json
import logging

import pytest
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.trace import SpanKind, StatusCode
from prometheus_client import CollectorRegistry

import asyncllm.observability as observability_module
from asyncllm.client import async_llm
from asyncllm.observability import setup_observability
from asyncllm.observability import tracing as tracing_module
from asyncllm.observability.logging import (
    JSONFormatter,
    LogContext,
    StructuredLogger,
    get_logger,
    setup_logging,
)
from asyncllm.observability.metrics import StreamMetrics, get_metrics, setup_metrics
from asyncllm.observability.tracing import TraceContext, trace_stream

from conftest import BASE_URL


# ============================================================
# Metrics Tests
# ============================================================

class TestStreamMetrics:
    """Tests for StreamMetrics."""

    def test_record_event(self, metrics):
        metrics.record_event("delta")
        metrics.record_event("delta")
        metrics.record_event("error")

        registry = metrics.registry
        assert registry.get_sample_value("asyncllm_events_total", {"kind": "delta"}) == 2
        assert registry.get_sample_value("asyncllm_events_total", {"kind": "error"}) == 1

    def test_record_error(self, metrics):
        metrics.record_error("provider")
        assert metrics.registry.get_sample_value("asyncllm_errors_total", {"error_type": "provider"}) == 1

    def test_record_extractor_match(self, metrics):
        metrics.record_extractor_match("anthropic")
        metrics.record_extractor_match(None)

        registry = metrics.registry
        assert registry.get_sample_value("asyncllm_extractor_matches_total", {"extractor": "anthropic"}) == 1
        assert registry.get_sample_value("asyncllm_extractor_matches_total", {"extractor": "none"}) == 1

    def test_record_stream(self, metrics):
        metrics.record_stream("completed", 1.5)

        registry = metrics.registry
        assert registry.get_sample_value("asyncllm_streams_total", {"status": "completed"}) == 1
        assert registry.get_sample_value("asyncllm_stream_duration_seconds_count") == 1
        assert registry.get_sample_value("asyncllm_stream_duration_seconds_sum") == 1.5

    def test_export(self, metrics):
        metrics.record_event("delta")
        output = metrics.export().decode()

        assert "# TYPE asyncllm_events_total counter" in output
        assert 'asyncllm_events_total{kind="delta"} 1.0' in output

    def test_setup_metrics_is_idempotent(self):
        registry = CollectorRegistry()
        first = setup_metrics(registry)
        second = setup_metrics(registry)

        assert first is second
        assert get_metrics() is first


# ============================================================
# Tracing Tests
# ============================================================

@pytest.fixture
def span_exporter(monkeypatch):
    """Route trace_stream spans to an in-memory exporter."""
    exporter = InMemorySpanExporter()
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    monkeypatch.setattr(tracing_module, "get_tracer", lambda: provider.get_tracer("test"))
    return exporter


class TestTracing:
    """Tests for stream spans."""

    def test_trace_stream_span(self, span_exporter):
        with trace_stream("http://llm.test/v1/chat", "POST") as span:
            span.set_attribute("asyncllm.events", 3)
            ctx = TraceContext.from_span(span)

        assert len(ctx.trace_id) == 32
        assert len(ctx.span_id) == 16

        [finished] = span_exporter.get_finished_spans()
        assert finished.name == "asyncllm.stream"
        assert finished.kind == SpanKind.CLIENT
        assert finished.attributes["http.url"] == "http://llm.test/v1/chat"
        assert finished.attributes["http.method"] == "POST"
        assert finished.attributes["asyncllm.events"] == 3

    def test_exception_marks_span_failed(self, span_exporter):
        with pytest.raises(RuntimeError):
            with trace_stream("http://llm.test"):
                raise RuntimeError("boom")

        [finished] = span_exporter.get_finished_spans()
        assert finished.status.status_code == StatusCode.ERROR
        assert finished.events[0].name == "exception"

    @pytest.mark.asyncio
    async def test_async_llm_span(self, span_exporter, sample_client, quiet_settings):
        [e async for e in async_llm(f"{BASE_URL}/errors.txt", client=sample_client, settings=quiet_settings)]

        [finished] = span_exporter.get_finished_spans()
        assert finished.attributes["http.method"] == "GET"
        assert finished.attributes["asyncllm.status"] == "completed"
        assert finished.attributes["asyncllm.events"] == 6
        assert finished.attributes["asyncllm.errors"] == 6


# ============================================================
# Logging Tests
# ============================================================

def make_record(msg: str = "Test message", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="asyncllm.test",
        level=logging.INFO,
        pathname="test.py",
        lineno=10,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredLogging:
    """Tests for structured logging."""

    @pytest.fixture(autouse=True)
    def clear_context(self):
        yield
        LogContext.set_current(None)

    def test_json_formatter(self):
        data = json.loads(JSONFormatter().format(make_record(url="http://llm.test")))

        assert data["level"] == "INFO"
        assert data["logger"] == "asyncllm.test"
        assert data["message"] == "Test message"
        assert data["url"] == "http://llm.test"
        assert "timestamp" in data

    def test_location(self):
        data = json.loads(JSONFormatter(include_location=True).format(make_record()))
        assert data["location"] == "test.py:10"

    def test_log_context_injection(self):
        LogContext.set_current(LogContext(stream_id="stream_abc", trace_id="t1", url="http://llm.test"))

        data = json.loads(JSONFormatter().format(make_record()))

        assert data["stream_id"] == "stream_abc"
        assert data["trace_id"] == "t1"
        assert data["url"] == "http://llm.test"

    def test_log_context_extra(self):
        ctx = LogContext(stream_id="s", extra={"provider": "gemini"})
        assert ctx.to_dict() == {"stream_id": "s", "provider": "gemini"}

    def test_sensitive_field_redaction(self):
        record = make_record(authorization="Bearer sk-123", api_key="key123", status=200)
        data = json.loads(JSONFormatter(redact_sensitive=True).format(record))

        assert data["authorization"] == "[REDACTED]"
        assert data["api_key"] == "[REDACTED]"
        assert data["status"] == 200

    def test_structured_fields(self, caplog):
        logger = get_logger("asyncllm.test")
        assert isinstance(logger, StructuredLogger)

        with caplog.at_level(logging.INFO, logger="asyncllm"):
            logger.info("Stream finished", events=4, status="completed")

        [record] = [r for r in caplog.records if r.name == "asyncllm.test"]
        assert record.events == 4
        assert record.status == "completed"

    def test_disabled_level_is_skipped(self, caplog):
        logger = get_logger("asyncllm.test")
        with caplog.at_level(logging.WARNING, logger="asyncllm"):
            logger.debug("hidden", detail="x")

        assert not [r for r in caplog.records if r.name == "asyncllm.test"]


@pytest.fixture
def package_logger():
    """Restore the asyncllm and httpx logger state after the test."""
    logger = logging.getLogger("asyncllm")
    httpx_logger = logging.getLogger("httpx")
    saved = (logger.handlers[:], logger.level, httpx_logger.level)
    yield logger
    logger.handlers[:] = saved[0]
    logger.setLevel(saved[1])
    httpx_logger.setLevel(saved[2])


class TestLoggingSetup:
    """Tests for logging configuration side effects."""

    def test_get_logger_does_not_configure(self, package_logger):
        package_logger.handlers[:] = []
        logging.getLogger("httpx").setLevel(logging.DEBUG)

        get_logger("asyncllm.fresh")

        assert package_logger.handlers == []
        assert logging.getLogger("httpx").level == logging.DEBUG

    def test_setup_logging_installs_handler(self, package_logger):
        setup_logging(level="DEBUG", json_output=True)

        [handler] = package_logger.handlers
        assert isinstance(handler.formatter, JSONFormatter)
        assert package_logger.level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.WARNING


class TestSetupObservability:
    """Tests for setup_observability wiring."""

    @pytest.fixture
    def calls(self, monkeypatch):
        recorded = []
        monkeypatch.setattr(observability_module, "setup_metrics", lambda: recorded.append("metrics"))
        monkeypatch.setattr(
            observability_module,
            "setup_tracing",
            lambda **kwargs: recorded.append(("tracing", kwargs)),
        )
        return recorded

    def test_all_enabled(self, package_logger, calls):
        setup_observability(service_name="svc", log_level="INFO", json_logs=False, console_export=True)

        [handler] = package_logger.handlers
        assert not isinstance(handler.formatter, JSONFormatter)
        assert package_logger.level == logging.INFO
        assert calls == ["metrics", ("tracing", {"service_name": "svc", "console_export": True})]

    def test_metrics_and_tracing_optional(self, package_logger, calls):
        setup_observability(enable_metrics=False, enable_tracing=False)

        assert calls == []
        assert len(package_logger.handlers) == 1
