"""
asyncllm - Error Definitions

Exceptions raised for bad caller input (request bodies, settings).
Wire-level failures are never raised; the stream reports them as
error events instead (see ``asyncllm.streaming.errors``).
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class ErrorDetails:
    """Full error information."""
    code: str
    message: str

    # Context fields
    provider: Optional[str] = None
    param: Optional[str] = None

    # Debug fields
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }

        if self.provider:
            result["provider"] = self.provider
        if self.param:
            result["param"] = self.param
        if self.details:
            result["details"] = self.details

        return {"error": result}


class AsyncLLMError(Exception):
    """Base exception for all asyncllm errors."""

    def __init__(self, error: ErrorDetails):
        self.error = error
        super().__init__(error.message)


class TranslationError(AsyncLLMError):
    """Request body cannot be translated to the target provider."""

    def __init__(self, provider: str, message: str, param: Optional[str] = None):
        super().__init__(
            ErrorDetails(
                code="invalid_request_body",
                message=message,
                provider=provider,
                param=param,
            )
        )


class ConfigError(AsyncLLMError):
    """Environment setting has an unusable value."""

    def __init__(self, name: str, value: str, expected: str):
        super().__init__(
            ErrorDetails(
                code="invalid_setting",
                message=f"{name}={value!r} is invalid, expected {expected}",
                param=name,
                details={"value": value},
            )
        )
