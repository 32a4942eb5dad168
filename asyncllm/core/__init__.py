"""
asyncllm Core Module

Data models, exceptions and the SSE transport.
"""

from .models import (
    # Enums
    Provider,
    StreamErrorType,

    # Records
    RawEvent,
    ToolDelta,
    Delta,
    NormalizedEvent,
)
from .errors import (
    ErrorDetails,
    AsyncLLMError,
    TranslationError,
    ConfigError,
)
from .http_client import (
    SSERequest,
    StreamConfig,
    SSEParser,
    parse_sse_lines,
    iter_sse,
)

__all__ = [
    "Provider",
    "StreamErrorType",
    "RawEvent",
    "ToolDelta",
    "Delta",
    "NormalizedEvent",
    "ErrorDetails",
    "AsyncLLMError",
    "TranslationError",
    "ConfigError",
    "SSERequest",
    "StreamConfig",
    "SSEParser",
    "parse_sse_lines",
    "iter_sse",
]
