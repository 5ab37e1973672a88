"""OpenAI-compatible chat completions adapter (OpenRouter, Mistral)."""

from __future__ import annotations

from typing import Any, Iterable, Sequence

from llm_bridge.formatting import content_as_text
from llm_bridge.llm.base import ProviderAdapter, arguments_as_text, list_field, mapping_field, token_count
from llm_bridge.models import InferenceConfig, Message, TokenUsage, ToolCall
from llm_bridge.tools.manager import ToolConfig


class ChatCompletionsAdapter(ProviderAdapter):
    """``choices[0]`` with a ``finish_reason`` and a chat message."""

    completion_causes = frozenset({"stop", "length"})
    tool_causes = frozenset({"tool_calls"})

    endpoint = "/chat/completions"

    def __init__(self, name: str = "openrouter") -> None:
        self.name = name

    def format_request(
        self,
        messages: Sequence[Message],
        model_id: str,
        inference: InferenceConfig,
        tool_config: ToolConfig | None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": model_id,
            "messages": [self.format_message(message) for message in messages],
            "max_tokens": inference.max_tokens,
            "temperature": inference.temperature,
            "top_p": inference.top_p,
        }
        if tool_config:
            payload.update(self.format_tools(tool_config))
        return payload

    def format_message(self, message: Message) -> dict[str, Any]:
        if message.role == "tool":
            return {
                "role": "tool",
                "tool_call_id": message.tool_call_id,
                "content": content_as_text(message.content),
            }
        formatted: dict[str, Any] = {"role": message.role, "content": content_as_text(message.content)}
        if message.role == "assistant" and message.tool_calls:
            formatted["tool_calls"] = [
                {
                    "id": call.call_id,
                    "type": "function",
                    "function": {"name": call.name, "arguments": arguments_as_text(call.input)},
                }
                for call in message.tool_calls
            ]
        return formatted

    def format_tools(self, tool_config: ToolConfig) -> dict[str, Any]:
        return {
            "tools": [{"type": "function", "function": dict(tool)} for tool in tool_config["tools"]],
            "tool_choice": tool_config["tool_choice"],
        }

    def termination_cause(self, raw: dict[str, Any]) -> str | None:
        choice = _first_choice(raw)
        return choice.get("finish_reason") or choice.get("finishReason")

    def text_blocks(self, raw: dict[str, Any]) -> Iterable[str]:
        content = _message(raw).get("content")
        if isinstance(content, str):
            return [content] if content else []
        if isinstance(content, list):
            return [part["text"] for part in content if isinstance(part, dict) and isinstance(part.get("text"), str)]
        return []

    def tool_calls(self, raw: dict[str, Any]) -> list[ToolCall]:
        parsed: list[ToolCall] = []
        for index, item in enumerate(list_field(_message(raw).get("tool_calls"), "message.tool_calls")):
            tool_call = mapping_field(item, f"message.tool_calls[{index}]")
            function_data = mapping_field(tool_call.get("function"), f"message.tool_calls[{index}].function")
            parsed.append(
                ToolCall(
                    name=function_data.get("name", ""),
                    input=function_data.get("arguments", "{}"),
                    call_id=tool_call.get("id"),
                )
            )
        return parsed

    def extract_usage(self, raw: dict[str, Any]) -> TokenUsage | None:
        usage = mapping_field(raw.get("usage"), "usage")
        if not usage:
            return None
        return TokenUsage(
            token_count(usage.get("prompt_tokens"), "usage.prompt_tokens"),
            token_count(usage.get("completion_tokens"), "usage.completion_tokens"),
        )


def _first_choice(raw: dict[str, Any]) -> dict[str, Any]:
    choices = list_field(raw.get("choices"), "choices")
    return mapping_field(choices[0], "choices[0]") if choices else {}


def _message(raw: dict[str, Any]) -> dict[str, Any]:
    return mapping_field(_first_choice(raw).get("message"), "choices[0].message")
