"""
asyncllm - Core Data Models

Provider-neutral records that flow through the stream pipeline:
transport record in, delta in the middle, normalized event out.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


# ============================================================
# Enums
# ============================================================

class Provider(str, Enum):
    """Wire formats the extractor set understands."""
    OPENAI = "openai"
    OPENAI_RESPONSES = "openai_responses"
    ANTHROPIC = "anthropic"
    GEMINI = "gemini"


class StreamErrorType(str, Enum):
    """Where an error event came from."""
    TRANSPORT = "transport"  # transport signalled a failure for the event
    DECODE = "decode"        # payload was not valid JSON
    PROVIDER = "provider"    # provider reported an error in the payload


# ============================================================
# Transport Records
# ============================================================

@dataclass
class RawEvent:
    """
    One record from the SSE transport.

    Either ``data`` (the wire payload, already joined across
    ``data:`` lines) or ``error`` is set.
    """
    data: Optional[str] = None
    error: Any = None
    event: Optional[str] = None
    id: Optional[str] = None

    @classmethod
    def from_dict(cls, record: Dict[str, Any]) -> RawEvent:
        """Build from a plain ``{"data": ...}`` / ``{"error": ...}`` mapping."""
        return cls(
            data=record.get("data"),
            error=record.get("error"),
            event=record.get("event"),
            id=record.get("id"),
        )


# ============================================================
# Deltas
# ============================================================

@dataclass
class ToolDelta:
    """Fragment of a tool call carried by one wire event."""
    id: Optional[str] = None
    name: Optional[str] = None
    args: Optional[str] = None


@dataclass
class Delta:
    """What one extractor read out of one decoded message."""
    content: Optional[str] = None
    tools: List[ToolDelta] = field(default_factory=list)

    @property
    def has_data(self) -> bool:
        # An empty string still counts: some providers send "" as a keep-alive
        return self.content is not None or len(self.tools) > 0


# ============================================================
# Output
# ============================================================

@dataclass
class NormalizedEvent:
    """
    Event handed to the caller.

    ``content`` and ``tools`` are snapshots of everything accumulated
    so far, not deltas. Error events carry ``error`` only (plus the
    undecodable ``data`` for decode errors).
    """
    content: Optional[str] = None
    tools: Optional[List[Any]] = None
    error: Any = None
    message: Any = None
    data: Optional[str] = None
    error_type: Optional[StreamErrorType] = None

    @property
    def is_error(self) -> bool:
        return self.error_type is not None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain dict, omitting absent fields."""
        result: Dict[str, Any] = {}

        if self.is_error:
            result["error"] = self.error
            if self.error_type == StreamErrorType.DECODE:
                result["data"] = self.data
            return result

        if self.content is not None:
            result["content"] = self.content
        if self.tools:
            result["tools"] = [tool.to_dict() for tool in self.tools]
        result["message"] = self.message

        return result
