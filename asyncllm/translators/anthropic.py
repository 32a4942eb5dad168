"""
asyncllm - Anthropic Request Translator

Converts an OpenAI chat-completions body into an Anthropic Messages body.

Mapping:
- system message        -> top-level "system"
- text / image_url parts -> text / image blocks (audio is dropped)
- max_tokens            -> max_tokens (Anthropic requires it, default 4096)
- stop                  -> stop_sequences
- tool_choice           -> auto / any / tool, none drops it
- parallel_tool_calls   -> tool_choice.disable_parallel_tool_use
- tools[].function      -> tools[] with input_schema

Anthropic has no JSON mode; response_format is ignored.
"""

from typing import Any, Dict, List, Optional

from .base import (
    is_number,
    parse_data_uri,
    require_messages,
    split_system,
    stop_sequences,
    tool_choice_name,
    tool_functions,
)


PROVIDER = "anthropic"
DEFAULT_MAX_TOKENS = 4096


def _image_source(url: str) -> Dict[str, Any]:
    parsed = parse_data_uri(url)
    if parsed is None:
        return {"type": "url", "url": url}
    media_type, data = parsed
    return {"type": "base64", "media_type": media_type, "data": data}


def _convert_content(content: Any) -> Any:
    if not isinstance(content, list):
        return content

    blocks: List[Dict[str, Any]] = []
    for part in content:
        if not isinstance(part, dict):
            continue
        part_type = part.get("type")
        if part_type == "text":
            blocks.append({"type": "text", "text": part.get("text")})
        elif part_type == "image_url":
            url = (part.get("image_url") or {}).get("url", "")
            blocks.append({"type": "image", "source": _image_source(url)})
    return blocks


def _convert_tool_choice(body: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    tool_choice = body.get("tool_choice")

    parallel: Dict[str, Any] = {}
    if isinstance(body.get("parallel_tool_calls"), bool):
        parallel["disable_parallel_tool_use"] = not body["parallel_tool_calls"]

    if tool_choice == "auto":
        return {"type": "auto", **parallel}
    if tool_choice == "required":
        return {"type": "any", **parallel}
    if isinstance(tool_choice, dict):
        return {"type": "tool", "name": tool_choice_name(tool_choice), **parallel}
    return None


def to_anthropic(body: Dict[str, Any]) -> Dict[str, Any]:
    """
    Translate an OpenAI chat-completions body to Anthropic.

    Raises:
        TranslationError: If messages is missing or malformed
    """
    messages = require_messages(body, PROVIDER)
    system, conversation = split_system(messages)

    payload: Dict[str, Any] = {}
    if system:
        payload["system"] = system.get("content")

    payload["messages"] = [
        {"role": msg.get("role"), "content": _convert_content(msg.get("content"))}
        for msg in conversation
    ]

    if body.get("model") is not None:
        payload["model"] = body["model"]

    max_tokens = body.get("max_tokens")
    payload["max_tokens"] = max_tokens if max_tokens is not None else DEFAULT_MAX_TOKENS

    metadata = body.get("metadata")
    if isinstance(metadata, dict) and metadata.get("user_id"):
        payload["metadata"] = {"user_id": metadata["user_id"]}

    if isinstance(body.get("stream"), bool):
        payload["stream"] = body["stream"]
    if is_number(body.get("temperature")):
        payload["temperature"] = body["temperature"]
    if is_number(body.get("top_p")):
        payload["top_p"] = body["top_p"]

    stop = stop_sequences(body.get("stop"))
    if stop is not None:
        payload["stop_sequences"] = stop

    tool_choice = _convert_tool_choice(body)
    if tool_choice is not None:
        payload["tool_choice"] = tool_choice

    if body.get("tools") is not None:
        payload["tools"] = [
            {
                "name": function.get("name"),
                "description": function.get("description"),
                "input_schema": function.get("parameters"),
            }
            for function in tool_functions(body)
        ]

    return payload
