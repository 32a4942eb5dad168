"""
asyncllm - Streaming Error Handling

Detects provider-reported errors inside stream payloads.

Providers nest their errors differently:
- OpenRouter and other relays: {"message": {"error": ...}}
- OpenAI, Anthropic, Gemini:   {"error": {"message": ...}}
- Some relays:                 {"error": "..."}

None of these errors stop the stream. Each one becomes a single
error event and the next wire event is processed as usual.
"""

from typing import Any, Optional

from ..core.models import NormalizedEvent, StreamErrorType
from .extractors import dig


def _is_set(value: Any) -> bool:
    # "", False and 0 are how some relays say "no error"
    return value is not None and value is not False and value != "" and value != 0


def classify_error(message: Any, transport_error: Any = None) -> Optional[Any]:
    """
    Find an error in a decoded message.

    Checks, first match wins:
    1. message.message.error  (relay double wrapping)
    2. message.error.message
    3. message.error
    4. the transport's own error for this event

    Returns:
        The error description, or None
    """
    for candidate in (
        dig(message, "message", "error"),
        dig(message, "error", "message"),
        dig(message, "error"),
        transport_error,
    ):
        if candidate is not None:
            return candidate if _is_set(candidate) else None
    return None


def should_report(error: Any) -> bool:
    """True if a transport error value is worth an error event."""
    return _is_set(error)


def create_error_event(
    error: Any,
    error_type: StreamErrorType,
    data: Optional[str] = None,
) -> NormalizedEvent:
    """Build a standalone error event (never carries content or tools)."""
    return NormalizedEvent(error=error, error_type=error_type, data=data)
