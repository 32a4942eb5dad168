"""
asyncllm - Streaming LLM responses, normalized

One event stream for OpenAI (chat and responses), Anthropic, Gemini and
OpenAI-compatible relays such as OpenRouter, Azure and Groq.

Usage:
    from asyncllm import async_llm

    async for event in async_llm(request):
        print(event.content, event.tools, event.error)
"""

from .client import async_llm
from .config import Settings
from .core import (
    AsyncLLMError,
    ConfigError,
    NormalizedEvent,
    RawEvent,
    SSERequest,
    StreamConfig,
    StreamErrorType,
    TranslationError,
    iter_sse,
    parse_sse_lines,
)
from .streaming import StreamNormalizer, anormalize, normalize
from .translators import to_anthropic, to_gemini

__version__ = "2.1.0"

__all__ = [
    "async_llm",
    "Settings",
    "AsyncLLMError",
    "ConfigError",
    "NormalizedEvent",
    "RawEvent",
    "SSERequest",
    "StreamConfig",
    "StreamErrorType",
    "TranslationError",
    "iter_sse",
    "parse_sse_lines",
    "StreamNormalizer",
    "anormalize",
    "normalize",
    "to_anthropic",
    "to_gemini",
]
