"""
asyncllm - Gemini Request Translator

Converts an OpenAI chat-completions body into a Gemini
generateContent body.

Gemini names the assistant role "model", keeps the system prompt in
``systemInstruction`` and sampling options in ``generationConfig``.
Schemas lose ``additionalProperties``, which Gemini rejects.
"""

import copy
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


PROVIDER = "gemini"

ROLE_MAP = {"assistant": "model"}

# OpenAI numeric option -> generationConfig key
NUMERIC_OPTIONS = (
    ("temperature", "temperature"),
    ("max_tokens", "maxOutputTokens"),
    ("max_completion_tokens", "maxOutputTokens"),
    ("top_p", "topP"),
    ("presence_penalty", "presencePenalty"),
    ("frequency_penalty", "frequencyPenalty"),
    ("top_logprobs", "logprobs"),
    ("n", "candidateCount"),
)

TOOL_CHOICE_MODES = {
    "auto": "AUTO",
    "required": "ANY",
    "none": "NONE",
}


def strip_additional_properties(schema: Any) -> Any:
    """Remove ``additionalProperties`` at every depth, in place."""
    if isinstance(schema, list):
        for item in schema:
            strip_additional_properties(item)
    elif isinstance(schema, dict):
        schema.pop("additionalProperties", None)
        for value in schema.values():
            strip_additional_properties(value)
    return schema


def gemini_schema(schema: Any) -> Any:
    """Copy of a JSON schema that Gemini accepts. The input is not modified."""
    return strip_additional_properties(copy.deepcopy(schema))


def _part_from_url(url: str) -> Dict[str, Any]:
    parsed = parse_data_uri(url)
    if parsed is None:
        return {"fileData": {"fileUri": url}}
    mime_type, data = parsed
    return {"inlineData": {"mimeType": mime_type, "data": data}}


def _convert_parts(content: Any) -> List[Dict[str, Any]]:
    if not isinstance(content, list):
        return [{"text": content}]

    parts: List[Dict[str, Any]] = []
    for part in content:
        if not isinstance(part, dict):
            continue
        part_type = part.get("type")
        if part_type == "text":
            parts.append({"text": part.get("text")})
        elif part_type == "image_url":
            parts.append(_part_from_url((part.get("image_url") or {}).get("url", "")))
        elif part_type == "input_audio":
            parts.append(_part_from_url((part.get("input_audio") or {}).get("data", "")))
    return parts


def _generation_config(body: Dict[str, Any]) -> Dict[str, Any]:
    config: Dict[str, Any] = {}

    for option, key in NUMERIC_OPTIONS:
        if is_number(body.get(option)):
            config[key] = body[option]

    if isinstance(body.get("logprobs"), bool):
        config["responseLogprobs"] = body["logprobs"]

    stop = stop_sequences(body.get("stop"))
    if stop is not None:
        config["stopSequences"] = stop

    response_format = body.get("response_format")
    if isinstance(response_format, dict):
        if response_format.get("type") == "json_object":
            config["responseMimeType"] = "application/json"
        elif response_format.get("type") == "json_schema":
            config["responseMimeType"] = "application/json"
            json_schema = response_format.get("json_schema") or {}
            config["responseSchema"] = gemini_schema(json_schema.get("schema"))

    return config


def _tool_config(tool_choice: Any) -> Optional[Dict[str, Any]]:
    if isinstance(tool_choice, str) and tool_choice in TOOL_CHOICE_MODES:
        return {"function_calling_config": {"mode": TOOL_CHOICE_MODES[tool_choice]}}
    if isinstance(tool_choice, dict):
        return {
            "function_calling_config": {
                "mode": "ANY",
                "allowed_function_names": [tool_choice_name(tool_choice)],
            }
        }
    return None


def to_gemini(body: Dict[str, Any]) -> Dict[str, Any]:
    """
    Translate an OpenAI chat-completions body to Gemini.

    Raises:
        TranslationError: If messages is missing or malformed
    """
    messages = require_messages(body, PROVIDER)
    system, conversation = split_system(messages)

    payload: Dict[str, Any] = {}
    if system:
        payload["systemInstruction"] = {"parts": [{"text": system.get("content")}]}

    payload["contents"] = [
        {
            "role": ROLE_MAP.get(msg.get("role"), msg.get("role")),
            "parts": _convert_parts(msg.get("content")),
        }
        for msg in conversation
    ]

    generation_config = _generation_config(body)
    if generation_config:
        payload["generationConfig"] = generation_config

    tool_config = _tool_config(body.get("tool_choice"))
    if tool_config is not None:
        payload["toolConfig"] = tool_config

    if body.get("tools") is not None:
        payload["tools"] = {
            "functionDeclarations": [
                {
                    "name": function.get("name"),
                    "description": function.get("description"),
                    "parameters": gemini_schema(function.get("parameters")),
                }
                for function in tool_functions(body)
            ]
        }

    return payload
