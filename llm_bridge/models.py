"""Core domain models used across layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Protocol, Sequence, Union

Role = Literal["system", "user", "assistant", "tool"]
VALID_ROLES: frozenset[str] = frozenset({"system", "user", "assistant", "tool"})


@dataclass(slots=True)
class ToolCall:
    """Tool invocation requested by a model."""

    name: str
    input: dict[str, Any] | str
    call_id: str | None = None


@dataclass(slots=True)
class ToolResult:
    """Outcome of one tool call, positionally aligned with its call."""

    call_id: str | None
    content: Any = None
    error: str | None = None

    @property
    def is_error(self) -> bool:
        return self.error is not None


@dataclass(slots=True)
class Message:
    """One conversation turn in provider-neutral form."""

    role: str
    content: Any
    tool_calls: list[ToolCall] | None = None
    tool_call_id: str | None = None


@dataclass(slots=True)
class TokenUsage:
    """Input/output token counts."""

    input: int = 0
    output: int = 0

    @property
    def total(self) -> int:
        return self.input + self.output


@dataclass(slots=True, frozen=True)
class CostInfo:
    """Monetary cost rendered as fixed-precision decimal strings."""

    input_cost: str
    output_cost: str
    total_cost: str


@dataclass(slots=True)
class AssistantResponse:
    """Ordinary completion."""

    content: str
    token_usage: TokenUsage | None = None
    cost_info: CostInfo | None = None


@dataclass(slots=True)
class AssistantToolRequest:
    """Completion that asks the caller to run tools."""

    content: str
    tool_calls: list[ToolCall] = field(default_factory=list)
    token_usage: TokenUsage | None = None
    cost_info: CostInfo | None = None


InvocationResult = Union[AssistantResponse, AssistantToolRequest]


@dataclass(slots=True, frozen=True)
class ModelConfig:
    """Static description of one model."""

    id: str
    provider: str
    display_name: str
    description: str = ""
    max_tokens: int = 4096
    default_temperature: float = 0.7
    default_top_p: float = 0.9


@dataclass(slots=True, frozen=True)
class ModelGroup:
    """Ordered fallback chain of model ids."""

    name: str
    models: tuple[str, ...]
    description: str = ""


@dataclass(slots=True)
class InferenceConfig:
    """Sampling parameters sent with a request."""

    max_tokens: int
    temperature: float
    top_p: float


class MessageStore(Protocol):
    """Read-only source of conversation history."""

    def get_all_messages(self) -> Sequence[Message]:
        ...
