"""Error hierarchy for model invocation.

Errors carry a category so callers can tell the recoverable ones (handled by
model fallback or turned into per-call tool results) from the fatal ones.

Error Categories:
    - TRANSPORT: network failures and provider-declared unavailability
    - RESPONSE_FORMAT: provider response that cannot be normalized
    - CONFIGURATION: unknown provider or model
    - TOOL: malformed input, missing tool or failed tool execution
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Categorization of errors for recovery decisions."""

    TRANSPORT = "transport"
    RESPONSE_FORMAT = "response_format"
    CONFIGURATION = "configuration"
    TOOL = "tool"


class LLMBridgeError(Exception):
    """Base exception for all invocation errors.

    :param message: Human-readable error description
    :cvar category: Error category; only TRANSPORT errors may trigger model fallback
    :param details: Additional technical information for debugging
    """

    category = ErrorCategory.TRANSPORT

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class TransportError(LLMBridgeError):
    """The provider call failed before a response could be parsed."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.status_code = status_code


class ResponseFormatError(LLMBridgeError):
    """Provider response has an unrecognized shape or termination cause."""

    category = ErrorCategory.RESPONSE_FORMAT


class ConfigurationError(LLMBridgeError):
    """Invalid provider or model configuration."""

    category = ErrorCategory.CONFIGURATION


class UnknownModelError(ConfigurationError):
    """No inference defaults are known for the requested model id."""

    def __init__(self, model_id: str) -> None:
        super().__init__(f"Unknown model: {model_id}", {"model_id": model_id})
        self.model_id = model_id


class ToolError(LLMBridgeError):
    """Base class for failures while handling a single tool call."""

    category = ErrorCategory.TOOL


class ToolInputError(ToolError):
    """Tool call input could not be parsed or failed schema validation."""


class ToolNotFoundError(ToolError):
    """Tool call references a name that is not registered."""


class ToolExecutionError(ToolError):
    """Tool raised while running."""


class ToolLoopError(LLMBridgeError):
    """The model kept requesting tools past the allowed number of rounds."""

    category = ErrorCategory.TOOL
