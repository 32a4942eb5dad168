"""
asyncllm - Stream Normalizer

Turns a provider's raw SSE records into one unified event stream.

Per record:
1. "[DONE]" ends the stream, nothing is emitted for it
2. transport error -> error event
3. undecodable JSON -> error event
4. provider-reported error -> error event
5. otherwise the first matching extractor's delta is merged into the
   running state, and if it carried anything the full content and tool
   calls so far are emitted

Errors never end the stream. Messages no extractor understands (pings,
framing events, finish chunks) are skipped silently.

Usage:
    for event in normalize(records):
        print(event.content, event.tools)

    async for event in anormalize(transport):
        ...
"""

import json
from typing import Any, AsyncIterable, AsyncIterator, Dict, Iterable, Iterator, Optional, Union

from ..core.models import NormalizedEvent, RawEvent, StreamErrorType
from ..observability.logging import get_logger
from ..observability.metrics import StreamMetrics
from .errors import classify_error, create_error_event, should_report
from .extractors import extract
from .tool_calls import StreamState


logger = get_logger(__name__)

# OpenAI and Cloudflare Workers AI end the stream with this payload
DONE_SENTINEL = "[DONE]"

Record = Union[RawEvent, Dict[str, Any]]


def _reject_constant(name: str):
    raise ValueError(f"Invalid JSON constant: {name}")


def decode(data: Optional[str]) -> Any:
    """Strict JSON decode: NaN, Infinity and -Infinity are rejected."""
    return json.loads(data if data is not None else "", parse_constant=_reject_constant)


class StreamNormalizer:
    """
    Holds the state of one stream and processes its records one by one.

    Not reusable: create one per stream.
    """

    def __init__(self, metrics: Optional[StreamMetrics] = None):
        self.state = StreamState()
        self.metrics = metrics
        self.done = False
        self.events_emitted = 0
        self.errors_emitted = 0

    def feed(self, record: Record) -> Optional[NormalizedEvent]:
        """
        Process one transport record.

        Returns:
            The event to emit, or None if this record produces nothing
        """
        raw = record if isinstance(record, RawEvent) else RawEvent.from_dict(record)

        if raw.data == DONE_SENTINEL:
            self.done = True
            return None

        if should_report(raw.error):
            logger.warning("Transport error in stream", error=str(raw.error))
            return self._error(raw.error, StreamErrorType.TRANSPORT)

        try:
            message = decode(raw.data)
        except (ValueError, RecursionError) as e:
            logger.debug("Undecodable stream payload", error=str(e))
            return self._error(str(e), StreamErrorType.DECODE, data=raw.data)

        error = classify_error(message, raw.error)
        if error is not None:
            logger.warning("Provider reported error in stream", error=str(error))
            return self._error(error, StreamErrorType.PROVIDER)

        extractor, delta = extract(message)
        if not self.state.apply(delta):
            return None

        if self.metrics:
            self.metrics.record_extractor_match(extractor)
        content, tools = self.state.snapshot()
        return self._emit(NormalizedEvent(
            content=content,
            tools=tools or None,
            message=message,
        ))

    def _error(
        self,
        error: Any,
        error_type: StreamErrorType,
        data: Optional[str] = None,
    ) -> NormalizedEvent:
        self.errors_emitted += 1
        if self.metrics:
            self.metrics.record_error(error_type.value)
        return self._emit(create_error_event(error, error_type, data=data))

    def _emit(self, event: NormalizedEvent) -> NormalizedEvent:
        self.events_emitted += 1
        if self.metrics:
            self.metrics.record_event("error" if event.is_error else "delta")
        return event


def normalize(
    records: Iterable[Record],
    normalizer: Optional[StreamNormalizer] = None,
) -> Iterator[NormalizedEvent]:
    """Normalize a synchronous sequence of records (files, fixtures, tests)."""
    normalizer = normalizer or StreamNormalizer()
    for record in records:
        event = normalizer.feed(record)
        if event is not None:
            yield event
        if normalizer.done:
            break


async def anormalize(
    records: AsyncIterable[Record],
    normalizer: Optional[StreamNormalizer] = None,
) -> AsyncIterator[NormalizedEvent]:
    """
    Normalize an async sequence of records.

    Lazy: nothing is pulled from ``records`` until the caller asks for
    the next event. Closing the source on early exit is the caller's
    job (``async_llm`` does it for the HTTP transport).
    """
    normalizer = normalizer or StreamNormalizer()
    async for record in records:
        event = normalizer.feed(record)
        if event is not None:
            yield event
        if normalizer.done:
            break
