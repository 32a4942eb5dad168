"""
asyncllm - Translator Helpers

Shared pieces of the OpenAI request-body translators.
"""

from typing import Any, Dict, List, Optional, Tuple

from ..core.errors import TranslationError


def is_number(value: Any) -> bool:
    # bool is an int subclass; True is not a temperature
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def require_messages(body: Any, provider: str) -> List[Dict[str, Any]]:
    """
    Validate the body and return its messages.

    Raises:
        TranslationError: If body is not an object or messages is not a list
    """
    if not isinstance(body, dict):
        raise TranslationError(provider, "Request body must be a JSON object")

    messages = body.get("messages")
    if not isinstance(messages, list):
        raise TranslationError(provider, "'messages' must be a list", param="messages")

    for index, msg in enumerate(messages):
        if not isinstance(msg, dict):
            raise TranslationError(
                provider,
                f"messages[{index}] must be an object",
                param=f"messages[{index}]",
            )

    return messages


def split_system(messages: List[Dict[str, Any]]) -> Tuple[Optional[Dict[str, Any]], List[Dict[str, Any]]]:
    """
    Separate the system message from the conversation.

    Returns:
        (first system message or None, all non-system messages)
    """
    system = next((msg for msg in messages if msg.get("role") == "system"), None)
    return system, [msg for msg in messages if msg.get("role") != "system"]


def parse_data_uri(url: str) -> Optional[Tuple[str, str]]:
    """
    Split a base64 data URI.

    Returns:
        (mime_type, base64_data), or None if ``url`` is not a data URI
    """
    if not url.startswith("data:"):
        return None
    header, _, data = url.partition(",")
    mime_type = header[len("data:"):].replace(";base64", "")
    return mime_type, data


def stop_sequences(stop: Any) -> Optional[List[str]]:
    """OpenAI ``stop`` (string or list) as a list."""
    if isinstance(stop, str):
        return [stop]
    if isinstance(stop, list):
        return stop
    return None


def tool_choice_name(tool_choice: Dict[str, Any]) -> Optional[str]:
    function = tool_choice.get("function")
    if isinstance(function, dict):
        return function.get("name")
    return None


def tool_functions(body: Dict[str, Any]) -> List[Dict[str, Any]]:
    """The ``function`` objects of the body's tools."""
    return [(tool.get("function") or {}) for tool in body.get("tools") or []]
