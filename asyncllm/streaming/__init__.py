"""
asyncllm - Streaming Module

Provider-neutral stream normalization:
- Extractors for OpenAI, OpenAI Responses, Anthropic and Gemini events
- Tool call accumulation across chunks
- Error detection inside stream payloads
"""

from .extractors import (
    EXTRACTORS,
    extract,
    extract_openai,
    extract_openai_responses,
    extract_anthropic,
    extract_gemini,
)
from .tool_calls import (
    ToolCallAccumulator,
    StreamState,
)
from .errors import (
    classify_error,
    create_error_event,
)
from .normalizer import (
    DONE_SENTINEL,
    StreamNormalizer,
    normalize,
    anormalize,
)

__all__ = [
    # Extractors
    "EXTRACTORS",
    "extract",
    "extract_openai",
    "extract_openai_responses",
    "extract_anthropic",
    "extract_gemini",
    # Tool calls
    "ToolCallAccumulator",
    "StreamState",
    # Errors
    "classify_error",
    "create_error_event",
    # Normalizer
    "DONE_SENTINEL",
    "StreamNormalizer",
    "normalize",
    "anormalize",
]
