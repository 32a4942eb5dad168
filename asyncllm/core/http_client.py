"""
asyncllm - SSE Transport

Streams a server-sent-events response over httpx and yields one
``RawEvent`` per dispatched event.

Parsing follows the WHATWG event-stream rules, with two relaxations
providers depend on:
- ``data:`` with an empty value still dispatches (as "")
- a block left open when the body ends is dispatched

HTTP failures never raise out of the generator. A non-2xx status or an
httpx error becomes a single ``RawEvent(error=...)`` and the stream ends.
"""

import inspect
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Iterable, Iterator, Optional, Union

import httpx

from ..observability.logging import get_logger
from .models import RawEvent


logger = get_logger(__name__)

DEFAULT_TIMEOUT = 60.0

ResponseHook = Callable[[httpx.Response], Union[None, Awaitable[None]]]


# ============================================================
# Request / Config
# ============================================================

@dataclass
class SSERequest:
    """
    HTTP request that opens an event stream.

    ``json`` is serialized by httpx; ``body`` is sent as-is. Method
    defaults to POST when a body is given, GET otherwise.
    """
    url: str
    method: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[Union[str, bytes]] = None
    json: Any = None

    @property
    def resolved_method(self) -> str:
        if self.method:
            return self.method.upper()
        if self.body is not None or self.json is not None:
            return "POST"
        return "GET"


@dataclass
class StreamConfig:
    """
    Per-stream options.

    on_response: Called once with the httpx.Response before any event
        is read. May be a plain function or a coroutine function.
    timeout: Seconds, applied to connect and each read. None uses the
        client's own timeout.
    headers: Extra headers; the request's own headers take precedence.
    """
    on_response: Optional[ResponseHook] = None
    timeout: Optional[float] = None
    headers: Dict[str, str] = field(default_factory=dict)


# ============================================================
# Event-stream parsing
# ============================================================

class SSEParser:
    """Incremental event-stream parser fed one line at a time."""

    def __init__(self):
        self._reset()

    def _reset(self):
        self._data: list = []
        self._event: Optional[str] = None
        self._id: Optional[str] = None

    def feed(self, line: str) -> Optional[RawEvent]:
        """
        Process one line (without its terminator).

        Returns:
            The dispatched event when ``line`` is blank, else None
        """
        line = line.rstrip("\r\n")

        if not line:
            return self._dispatch()

        if line.startswith(":"):
            return None

        name, sep, value = line.partition(":")
        if sep and value.startswith(" "):
            value = value[1:]

        if name == "data":
            self._data.append(value)
        elif name == "event":
            self._event = value
        elif name == "id" and "\0" not in value:
            self._id = value
        # "retry" and unknown fields are ignored

        return None

    def flush(self) -> Optional[RawEvent]:
        """Dispatch whatever is pending at end of body."""
        return self._dispatch()

    def _dispatch(self) -> Optional[RawEvent]:
        if not self._data:
            self._reset()
            return None

        event = RawEvent(data="\n".join(self._data), event=self._event, id=self._id)
        self._reset()
        return event


def parse_sse_lines(lines: Iterable[str]) -> Iterator[RawEvent]:
    """Parse an event stream from an iterable of lines (a file, a list)."""
    parser = SSEParser()
    for line in lines:
        event = parser.feed(line)
        if event is not None:
            yield event

    event = parser.flush()
    if event is not None:
        yield event


# ============================================================
# HTTP transport
# ============================================================

async def _call_hook(hook: ResponseHook, response: httpx.Response):
    try:
        result = hook(response)
        if inspect.isawaitable(result):
            await result
    except Exception as e:
        # A broken hook must not take the stream down with it
        logger.warning("on_response hook failed", error=str(e), status_code=response.status_code)


def _status_error(response: httpx.Response) -> str:
    return f"HTTP {response.status_code}: {response.reason_phrase}"


async def iter_sse(
    request: Union[str, SSERequest],
    config: Optional[StreamConfig] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> AsyncIterator[RawEvent]:
    """
    Open an event stream and yield its events.

    Args:
        request: URL or SSERequest
        config: Stream options
        client: Shared httpx client; a private one is created (and
            closed at the end) when omitted

    Yields:
        RawEvent per dispatched event, or a single error RawEvent
    """
    req = request if isinstance(request, SSERequest) else SSERequest(url=request)
    config = config or StreamConfig()

    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(
            timeout=config.timeout if config.timeout is not None else DEFAULT_TIMEOUT
        )

    headers = {**config.headers, **req.headers}
    stream_kwargs: Dict[str, Any] = {"headers": headers}
    if req.json is not None:
        stream_kwargs["json"] = req.json
    elif req.body is not None:
        stream_kwargs["content"] = req.body
    if config.timeout is not None and not owns_client:
        stream_kwargs["timeout"] = config.timeout

    try:
        async with client.stream(req.resolved_method, req.url, **stream_kwargs) as response:
            logger.debug(
                "Stream response received",
                status_code=response.status_code,
                content_type=response.headers.get("content-type", ""),
            )

            if config.on_response is not None:
                await _call_hook(config.on_response, response)

            if not response.is_success:
                await response.aread()
                logger.warning("Stream request failed", status_code=response.status_code)
                yield RawEvent(error=_status_error(response))
                return

            parser = SSEParser()
            async for line in response.aiter_lines():
                event = parser.feed(line)
                if event is not None:
                    yield event

            event = parser.flush()
            if event is not None:
                yield event

    except httpx.HTTPError as e:
        logger.warning("Stream transport error", error=str(e), error_class=type(e).__name__)
        yield RawEvent(error=str(e) or type(e).__name__)

    finally:
        if owns_client:
            await client.aclose()
