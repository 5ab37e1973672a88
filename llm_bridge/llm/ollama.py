"""Ollama chat adapter."""

from __future__ import annotations

import uuid
from typing import Any, Iterable, Sequence

from llm_bridge.formatting import content_as_text
from llm_bridge.llm.base import ProviderAdapter, arguments_as_object, list_field, mapping_field, token_count
from llm_bridge.models import InferenceConfig, Message, TokenUsage, ToolCall
from llm_bridge.tools.manager import ToolConfig


class OllamaAdapter(ProviderAdapter):
    """``/api/chat`` shape: a single message, optionally with ``tool_calls``.

    Ollama does not report a tool-specific done reason, so the presence of
    tool calls decides the result type.
    """

    name = "ollama"
    endpoint = "/api/chat"
    completion_causes = frozenset({"stop", "length"})
    tool_causes = frozenset({"tool_calls"})

    def format_request(
        self,
        messages: Sequence[Message],
        model_id: str,
        inference: InferenceConfig,
        tool_config: ToolConfig | None,
    ) -> dict[str, Any]:
        request: dict[str, Any] = {
            "model": model_id,
            "messages": [self.format_message(message) for message in messages],
            "stream": False,
            "options": {
                "num_predict": inference.max_tokens,
                "temperature": inference.temperature,
                "top_p": inference.top_p,
            },
        }
        if tool_config:
            request.update(self.format_tools(tool_config))
        return request

    def format_message(self, message: Message) -> dict[str, Any]:
        formatted: dict[str, Any] = {"role": message.role, "content": content_as_text(message.content)}
        if message.role == "assistant" and message.tool_calls:
            formatted["tool_calls"] = [
                {"function": {"name": call.name, "arguments": arguments_as_object(call.input)}}
                for call in message.tool_calls
            ]
        return formatted

    def format_tools(self, tool_config: ToolConfig) -> dict[str, Any]:
        # Ollama has no tool_choice field; tool use is always automatic.
        return {"tools": [{"type": "function", "function": dict(tool)} for tool in tool_config["tools"]]}

    def termination_cause(self, raw: dict[str, Any]) -> str | None:
        if _message(raw).get("tool_calls"):
            return "tool_calls"
        return raw.get("done_reason") or "stop"

    def text_blocks(self, raw: dict[str, Any]) -> Iterable[str]:
        content = _message(raw).get("content")
        return [content] if isinstance(content, str) and content else []

    def tool_calls(self, raw: dict[str, Any]) -> list[ToolCall]:
        calls: list[ToolCall] = []
        for index, item in enumerate(list_field(_message(raw).get("tool_calls"), "message.tool_calls")):
            tool_call = mapping_field(item, f"message.tool_calls[{index}]")
            function_data = mapping_field(tool_call.get("function"), f"message.tool_calls[{index}].function")
            calls.append(
                ToolCall(
                    name=function_data.get("name") or tool_call.get("name", ""),
                    input=function_data.get("arguments", tool_call.get("parameters", {})),
                    call_id=tool_call.get("id") or f"call_{uuid.uuid4().hex[:12]}",
                )
            )
        return calls

    def extract_usage(self, raw: dict[str, Any]) -> TokenUsage | None:
        if "prompt_eval_count" not in raw and "eval_count" not in raw:
            return None
        return TokenUsage(
            token_count(raw.get("prompt_eval_count"), "prompt_eval_count"),
            token_count(raw.get("eval_count"), "eval_count"),
        )


def _message(raw: dict[str, Any]) -> dict[str, Any]:
    return mapping_field(raw.get("message"), "message")
