"""
asyncllm Translators Module

Convert OpenAI chat-completions request bodies to the native request
format of other providers, so one body can drive any endpoint.
"""

from typing import Any, Callable, Dict

from ..core.errors import TranslationError
from .anthropic import to_anthropic
from .gemini import to_gemini

__all__ = [
    "to_anthropic",
    "to_gemini",
    "get_translator",
    "TRANSLATORS",
]


TRANSLATORS: Dict[str, Callable[[Dict[str, Any]], Dict[str, Any]]] = {
    "anthropic": to_anthropic,
    "gemini": to_gemini,
}


def get_translator(provider: str) -> Callable[[Dict[str, Any]], Dict[str, Any]]:
    """
    Get the request translator for a provider.

    Raises:
        TranslationError: If the provider has no translator
    """
    translator = TRANSLATORS.get(provider.lower())
    if translator is None:
        raise TranslationError(
            provider,
            f"No request translator for '{provider}'. Supported: {', '.join(TRANSLATORS)}",
        )
    return translator
