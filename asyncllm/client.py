"""
asyncllm - Streaming Client

``async_llm`` opens an LLM streaming endpoint and yields normalized
events, whatever the provider behind it.

Usage:
    from asyncllm import async_llm, SSERequest

    request = SSERequest(
        url="https://api.openai.com/v1/chat/completions",
        headers={"Authorization": f"Bearer {api_key}"},
        json={"model": "gpt-4o-mini", "stream": True, "messages": [...]},
    )

    async for event in async_llm(request):
        print(event.content)
"""

import asyncio
import time
import uuid
from contextlib import aclosing
from dataclasses import replace
from typing import AsyncIterator, Optional, Union

import httpx

from .config import Settings
from .core.http_client import SSERequest, StreamConfig, iter_sse
from .core.models import NormalizedEvent
from .observability.logging import LogContext, get_logger
from .observability.metrics import get_metrics
from .observability.tracing import TraceContext, trace_stream
from .streaming.normalizer import StreamNormalizer, anormalize


logger = get_logger(__name__)


async def async_llm(
    request: Union[str, SSERequest],
    config: Optional[StreamConfig] = None,
    client: Optional[httpx.AsyncClient] = None,
    settings: Optional[Settings] = None,
) -> AsyncIterator[NormalizedEvent]:
    """
    Stream normalized events from an LLM endpoint.

    Args:
        request: URL or SSERequest
        config: Stream options (on_response hook, timeout, headers)
        client: Shared httpx client; a private one is used when omitted
        settings: Defaults to Settings.from_env()

    Yields:
        NormalizedEvent with the content and tool calls accumulated so
        far, or an error event. Errors do not end the stream.
    """
    settings = settings or Settings.from_env()
    config = config or StreamConfig()
    if client is None and config.timeout is None:
        config = replace(config, timeout=settings.timeout)

    req = request if isinstance(request, SSERequest) else SSERequest(url=request)
    metrics = get_metrics() if settings.metrics_enabled else None
    normalizer = StreamNormalizer(metrics=metrics)

    previous_ctx = LogContext.get_current()
    started = time.monotonic()
    first_event_seen = False
    status = "failed"

    with trace_stream(req.url, req.resolved_method) as span:
        LogContext.set_current(LogContext(
            stream_id=f"stream_{uuid.uuid4().hex[:12]}",
            trace_id=TraceContext.from_span(span).trace_id,
            url=req.url,
        ))
        logger.info("Stream started", method=req.resolved_method)

        try:
            async with aclosing(iter_sse(req, config, client)) as records:
                async with aclosing(anormalize(records, normalizer)) as events:
                    async for event in events:
                        if not first_event_seen:
                            first_event_seen = True
                            if metrics:
                                metrics.record_time_to_first_event(time.monotonic() - started)
                        yield event
            status = "completed"

        except (GeneratorExit, asyncio.CancelledError):
            status = "cancelled"
            raise

        finally:
            duration = time.monotonic() - started
            span.set_attribute("asyncllm.status", status)
            span.set_attribute("asyncllm.events", normalizer.events_emitted)
            span.set_attribute("asyncllm.errors", normalizer.errors_emitted)
            if metrics:
                metrics.record_stream(status, duration)
            logger.info(
                "Stream finished",
                status=status,
                events=normalizer.events_emitted,
                errors=normalizer.errors_emitted,
                duration_ms=int(duration * 1000),
            )
            # May run in a different context than the one that set it
            LogContext.set_current(previous_ctx)
