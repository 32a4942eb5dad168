"""
asyncllm - Provider Extractors

One pure function per wire format, each reading a decoded message as
that provider's shape and returning a Delta.

Providers do not label their events, and several share field names
(``delta`` is a string for OpenAI Responses but an object for
Anthropic). So the extractors are tried in a fixed order and the first
one that finds data wins.

Every extractor is total: a missing path, a wrong type or a message
that is not an object at all just reads as "absent".
"""

import json
from typing import Any, Callable, List, Optional, Tuple

from ..core.models import Delta, Provider, ToolDelta


Extractor = Callable[[Any], Delta]


def dig(value: Any, *path: Any) -> Any:
    """
    Follow ``path`` through nested dicts and lists.

    String keys index dicts, int keys index lists. Returns None as soon
    as a step does not apply.
    """
    for key in path:
        if isinstance(key, int):
            if not isinstance(value, list) or not 0 <= key < len(value):
                return None
            value = value[key]
        else:
            if not isinstance(value, dict):
                return None
            value = value.get(key)
        if value is None:
            return None
    return value


def _list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _text(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def to_json_text(value: Any) -> Optional[str]:
    """Serialize like ``JSON.stringify``: compact, non-ASCII kept."""
    if value is None:
        return None
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


# ============================================================
# Extractors
# ============================================================

def extract_openai(message: Any) -> Delta:
    """
    OpenAI chat completions, and the relays that copy it
    (Azure, OpenRouter, Groq, ...).

    ``choices[0].delta.content`` plus ``choices[0].delta.tool_calls``.
    """
    delta = dig(message, "choices", 0, "delta")
    tools = [
        ToolDelta(
            id=_text(dig(tc, "id")),
            name=_text(dig(tc, "function", "name")),
            args=_text(dig(tc, "function", "arguments")),
        )
        for tc in _list(dig(delta, "tool_calls"))
    ]
    return Delta(content=_text(dig(delta, "content")), tools=tools)


def extract_openai_responses(message: Any) -> Delta:
    """
    OpenAI Responses API event stream.

    - ``response.output_text.delta``: text in ``delta``
    - ``response.output_item.added`` with a ``function_call`` item: new tool call
    - ``response.function_call_arguments.delta``: arguments for the current call
    """
    event_type = dig(message, "type")

    if event_type == "response.output_text.delta":
        return Delta(content=_text(dig(message, "delta")))

    if event_type == "response.output_item.added" and dig(message, "item", "type") == "function_call":
        item = message["item"]
        return Delta(tools=[
            ToolDelta(
                id=_text(dig(item, "id")),
                name=_text(dig(item, "name")),
                args=_text(dig(item, "arguments")),
            )
        ])

    if event_type == "response.function_call_arguments.delta":
        return Delta(tools=[ToolDelta(args=_text(dig(message, "delta")))])

    return Delta()


def extract_anthropic(message: Any) -> Delta:
    """
    Anthropic Messages API.

    Text arrives in ``delta.text``. A tool call starts with a
    ``content_block`` carrying ``name`` and ``id``; its arguments follow
    as ``delta.partial_json`` fragments.
    """
    content = _text(dig(message, "delta", "text"))

    name = _text(dig(message, "content_block", "name"))
    if name is not None:
        tools = [ToolDelta(id=_text(dig(message, "content_block", "id")), name=name)]
    else:
        partial_json = _text(dig(message, "delta", "partial_json"))
        tools = [ToolDelta(args=partial_json)] if partial_json is not None else []

    return Delta(content=content, tools=tools)


def extract_gemini(message: Any) -> Delta:
    """
    Google Gemini ``streamGenerateContent?alt=sse``.

    Text is read from the first part only. Gemini sends each function
    call whole, so every ``functionCall`` part becomes a complete tool
    call: name plus the serialized args.
    """
    parts = _list(dig(message, "candidates", 0, "content", "parts"))
    tools = []
    for part in parts:
        call = dig(part, "functionCall")
        if call is None:
            continue
        tools.append(ToolDelta(name=_text(dig(call, "name")), args=to_json_text(dig(call, "args"))))
    return Delta(content=_text(dig(parts, 0, "text")), tools=tools)


# Priority order matters: ties between overlapping shapes are broken by position.
EXTRACTORS: Tuple[Tuple[str, Extractor], ...] = (
    (Provider.OPENAI.value, extract_openai),
    (Provider.OPENAI_RESPONSES.value, extract_openai_responses),
    (Provider.ANTHROPIC.value, extract_anthropic),
    (Provider.GEMINI.value, extract_gemini),
)


def extract(message: Any) -> Tuple[Optional[str], Delta]:
    """
    Run the extractors in order and return the first delta with data.

    Returns:
        (extractor name, delta), or (None, empty delta) when nothing matched
    """
    for name, extractor in EXTRACTORS:
        delta = extractor(message)
        if delta.has_data:
            return name, delta
    return None, Delta()
