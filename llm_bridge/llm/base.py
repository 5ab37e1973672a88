"""Provider adapter interface.

An adapter owns everything provider-specific: the request wire shape, the
tool declaration format and the mapping of raw responses onto
``AssistantResponse`` / ``AssistantToolRequest``. Nothing provider-specific
leaves ``parse_response``.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Any, Iterable, Sequence

from llm_bridge.errors import ResponseFormatError
from llm_bridge.models import (
    AssistantResponse,
    AssistantToolRequest,
    InferenceConfig,
    InvocationResult,
    Message,
    TokenUsage,
    ToolCall,
)
from llm_bridge.tools.manager import ToolConfig


class ProviderAdapter(ABC):
    """Formats requests for, and normalizes responses from, one provider."""

    name: str
    # Roles accepted by the provider; others are filtered out before formatting.
    roles: frozenset[str] = frozenset({"system", "user", "assistant", "tool"})
    completion_causes: frozenset[str] = frozenset()
    tool_causes: frozenset[str] = frozenset()

    @abstractmethod
    def format_request(
        self,
        messages: Sequence[Message],
        model_id: str,
        inference: InferenceConfig,
        tool_config: ToolConfig | None,
    ) -> dict[str, Any]:
        """Build the provider request body."""

    @abstractmethod
    def format_tools(self, tool_config: ToolConfig) -> dict[str, Any]:
        """Request fields declaring the tools and the tool-choice directive."""

    @abstractmethod
    def termination_cause(self, raw: dict[str, Any]) -> str | None:
        """Provider-reported reason the call ended."""

    @abstractmethod
    def text_blocks(self, raw: dict[str, Any]) -> Iterable[str]:
        """Text content of the response, in order."""

    @abstractmethod
    def tool_calls(self, raw: dict[str, Any]) -> list[ToolCall]:
        """Tool-use requests contained in the response."""

    @abstractmethod
    def extract_usage(self, raw: dict[str, Any]) -> TokenUsage | None:
        """Token counts reported by the provider, or None if absent."""

    def check_response(self, raw: Any) -> dict[str, Any]:
        """Reject bodies that are not JSON objects before anything reads them."""
        if not isinstance(raw, dict):
            raise ResponseFormatError(f"Unexpected {self.name} response type: {type(raw).__name__}")
        return raw

    def parse_response(self, raw: dict[str, Any]) -> InvocationResult:
        raw = self.check_response(raw)
        cause = self.termination_cause(raw)
        content = "\n".join(self.text_blocks(raw))
        if isinstance(cause, str) and cause in self.completion_causes:
            return AssistantResponse(content=content)
        if isinstance(cause, str) and cause in self.tool_causes:
            return AssistantToolRequest(content=content, tool_calls=self.tool_calls(raw))
        raise ResponseFormatError(f"Unknown stop reason: {cause}", {"provider": self.name})

    def response_text(self, raw: dict[str, Any]) -> str:
        """Text used to estimate output tokens when usage is not reported."""
        text = "\n".join(self.text_blocks(raw))
        calls = [{"name": call.name, "input": call.input} for call in self.tool_calls(raw)]
        return text + (json.dumps(calls) if calls else "")


def arguments_as_text(value: Any) -> str:
    return value if isinstance(value, str) else json.dumps(value)


def arguments_as_object(value: Any) -> Any:
    """Best-effort decode for providers that require structured arguments."""
    if isinstance(value, str):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return value
    return value


def mapping_field(value: Any, path: str) -> dict[str, Any]:
    """Return a response object field; absent is empty, any other type is malformed."""
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ResponseFormatError(f"Malformed response: {path} is {type(value).__name__}, expected an object")
    return value


def list_field(value: Any, path: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ResponseFormatError(f"Malformed response: {path} is {type(value).__name__}, expected an array")
    return value


def token_count(value: Any, path: str) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError) as exc:
        raise ResponseFormatError(f"Malformed response: {path} is not a token count") from exc
