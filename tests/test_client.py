"""
asyncllm - Client Tests

End-to-end tests of async_llm over a mocked HTTP transport.
"""

import logging
from contextlib import aclosing

import httpx
import pytest

from asyncllm import client as client_module
from asyncllm.client import async_llm
from asyncllm.config import Settings
from asyncllm.core.http_client import SSERequest, StreamConfig
from asyncllm.core.models import StreamErrorType
from asyncllm.observability.logging import LogContext

from conftest import BASE_URL


async def collect(stream):
    return [event async for event in stream]


class TestAsyncLLM:
    """Test the streaming entry point."""

    @pytest.mark.asyncio
    async def test_openai_stream(self, sample_client, quiet_settings):
        events = await collect(async_llm(f"{BASE_URL}/openai.txt", client=sample_client, settings=quiet_settings))

        assert len(events) == 10
        assert events[0].content == ""
        assert events[-1].content == "Hello! How can I assist you today?"
        assert events[-1].tools is None

    @pytest.mark.asyncio
    async def test_request_object(self, sample_client, sample_server, quiet_settings):
        request = SSERequest(
            url=f"{BASE_URL}/anthropic-tools2.txt",
            headers={"x-api-key": "test"},
            json={"model": "claude-3-5-sonnet-20241022", "stream": True, "messages": []},
        )
        events = await collect(async_llm(request, client=sample_client, settings=quiet_settings))

        assert [t.name for t in events[-1].tools] == ["get_order", "get_customer"]
        assert sample_server.requests[0].method == "POST"
        assert sample_server.requests[0].headers["x-api-key"] == "test"

    @pytest.mark.asyncio
    async def test_errors_stream(self, sample_client, quiet_settings):
        events = await collect(async_llm(f"{BASE_URL}/errors.txt", client=sample_client, settings=quiet_settings))

        assert [e.error_type for e in events] == [
            StreamErrorType.DECODE,
            StreamErrorType.PROVIDER,
            StreamErrorType.PROVIDER,
            StreamErrorType.PROVIDER,
            StreamErrorType.PROVIDER,
            StreamErrorType.DECODE,
        ]
        assert events[4].to_dict() == {"error": "OpenRouter API error"}

    @pytest.mark.asyncio
    async def test_on_response_hook(self, sample_client, quiet_settings):
        seen = []

        async def hook(response):
            seen.append((response.status_code, response.headers["content-type"]))

        events = await collect(async_llm(
            f"{BASE_URL}/openai.txt",
            StreamConfig(on_response=hook),
            client=sample_client,
            settings=quiet_settings,
        ))

        assert seen == [(200, "text/event-stream")]
        assert len(events) == 10

    @pytest.mark.asyncio
    async def test_http_error_becomes_event(self, sample_client, quiet_settings):
        events = await collect(async_llm(f"{BASE_URL}/nope.txt", client=sample_client, settings=quiet_settings))

        assert len(events) == 1
        assert events[0].error == "HTTP 404: Not Found"
        assert events[0].error_type == StreamErrorType.TRANSPORT

    @pytest.mark.asyncio
    async def test_records_metrics(self, sample_client, metrics, monkeypatch):
        monkeypatch.setattr(client_module, "get_metrics", lambda: metrics)

        await collect(async_llm(f"{BASE_URL}/errors.txt", client=sample_client, settings=Settings()))

        registry = metrics.registry
        assert registry.get_sample_value("asyncllm_streams_total", {"status": "completed"}) == 1
        assert registry.get_sample_value("asyncllm_errors_total", {"error_type": "provider"}) == 4
        assert registry.get_sample_value("asyncllm_errors_total", {"error_type": "decode"}) == 2
        assert registry.get_sample_value("asyncllm_stream_duration_seconds_count") == 1
        assert registry.get_sample_value("asyncllm_time_to_first_event_seconds_count") == 1

    @pytest.mark.asyncio
    async def test_metrics_disabled(self, sample_client, quiet_settings, monkeypatch):
        def fail():
            raise AssertionError("metrics should not be used")

        monkeypatch.setattr(client_module, "get_metrics", fail)
        events = await collect(async_llm(f"{BASE_URL}/gemini.txt", client=sample_client, settings=quiet_settings))
        assert len(events) == 3

    @pytest.mark.asyncio
    async def test_early_close_cancels_stream(self, sample_client, metrics, monkeypatch):
        monkeypatch.setattr(client_module, "get_metrics", lambda: metrics)

        async with aclosing(async_llm(f"{BASE_URL}/openai.txt", client=sample_client, settings=Settings())) as events:
            async for event in events:
                assert event.content == ""
                break

        registry = metrics.registry
        assert registry.get_sample_value("asyncllm_streams_total", {"status": "cancelled"}) == 1
        assert registry.get_sample_value("asyncllm_events_total", {"kind": "delta"}) == 1

    @pytest.mark.asyncio
    async def test_log_context_restored(self, sample_client, quiet_settings):
        assert LogContext.get_current() is None
        await collect(async_llm(f"{BASE_URL}/openai.txt", client=sample_client, settings=quiet_settings))
        assert LogContext.get_current() is None

    @pytest.mark.asyncio
    async def test_logs_stream_lifecycle(self, sample_client, quiet_settings, caplog):
        with caplog.at_level(logging.INFO, logger="asyncllm"):
            await collect(async_llm(f"{BASE_URL}/openai.txt", client=sample_client, settings=quiet_settings))

        messages = [rec.getMessage() for rec in caplog.records if rec.name == "asyncllm.client"]
        assert messages == ["Stream started", "Stream finished"]
        finished = [rec for rec in caplog.records if rec.getMessage() == "Stream finished"][0]
        assert finished.status == "completed"
        assert finished.events == 10

    @pytest.mark.asyncio
    async def test_private_client_uses_settings_timeout(self, sample_server, monkeypatch):
        created = []
        real_client = httpx.AsyncClient

        def make_client(**kwargs):
            client = real_client(transport=httpx.MockTransport(sample_server.handler), **kwargs)
            created.append(client)
            return client

        monkeypatch.setattr(httpx, "AsyncClient", make_client)

        settings = Settings(timeout=12.5, metrics_enabled=False)
        events = await collect(async_llm(f"{BASE_URL}/openrouter.txt", settings=settings))

        assert events[-1].content == "Hello! How can I help you today?"
        assert created[0].timeout == httpx.Timeout(12.5)
        assert created[0].is_closed
