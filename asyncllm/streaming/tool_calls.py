"""
asyncllm - Tool Call Streaming

Accumulates tool/function calls as they stream in.

Tool calls come in pieces:
1. A chunk naming the call (and usually giving its id)
2. Any number of chunks with partial argument text
3. Nothing marks the end; the caller parses the final args

Gemini is the exception: it sends name and full arguments in one chunk,
which goes through the same path as a name followed by one args chunk.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

from ..core.models import Delta, ToolDelta


@dataclass
class ToolCallAccumulator:
    """
    One tool call in progress.

    ``args`` only ever grows; it is raw text, never parsed here.
    """
    name: Optional[str] = None
    id: Optional[str] = None
    args: str = ""

    def append_args(self, chunk: str):
        """Append an arguments fragment."""
        self.args += chunk

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        if self.name is not None:
            result["name"] = self.name
        if self.id is not None:
            result["id"] = self.id
        result["args"] = self.args
        return result


@dataclass
class StreamState:
    """
    Running state of one stream.

    ``content`` stays None until the first content delta (even an
    empty one). ``tools`` is append-only and keeps first-seen order.
    """
    content: Optional[str] = None
    tools: List[ToolCallAccumulator] = field(default_factory=list)

    def latest_tool(self) -> ToolCallAccumulator:
        """Last tool call, created nameless if none exists yet."""
        if not self.tools:
            self.tools.append(ToolCallAccumulator())
        return self.tools[-1]

    def apply_tool_delta(self, tool: ToolDelta):
        if tool.name is not None:
            self.tools.append(ToolCallAccumulator(name=tool.name, id=tool.id))
        if tool.args is not None:
            # Arguments always belong to the most recently announced call
            self.latest_tool().append_args(tool.args)

    def apply(self, delta: Delta) -> bool:
        """
        Fold one delta into the state.

        Returns:
            True if the delta carried anything (content, even "", or tool deltas)
        """
        if delta.content is not None:
            self.content = (self.content or "") + delta.content

        for tool in delta.tools:
            self.apply_tool_delta(tool)

        return delta.has_data

    def snapshot(self) -> Tuple[Optional[str], List[ToolCallAccumulator]]:
        """Content and copied tool calls as of now."""
        return self.content, self.snapshot_tools()

    def snapshot_tools(self) -> List[ToolCallAccumulator]:
        """Copies of the tool calls so far, safe to hand to the caller."""
        return [replace(tool) for tool in self.tools]
