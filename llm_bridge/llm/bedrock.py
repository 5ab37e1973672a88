"""Bedrock Converse adapter."""

from __future__ import annotations

from typing import Any, Iterable, Sequence

from llm_bridge.errors import ResponseFormatError
from llm_bridge.formatting import content_as_text, extract_system
from llm_bridge.llm.base import ProviderAdapter, arguments_as_object, list_field, mapping_field, token_count
from llm_bridge.models import InferenceConfig, Message, TokenUsage, ToolCall
from llm_bridge.tools.manager import ToolConfig


class BedrockAdapter(ProviderAdapter):
    """Converse API shape: block arrays with a ``stopReason``.

    Anthropic Messages bodies (``content`` / ``stop_reason`` at the top level,
    ``tool_use`` blocks) are accepted as well.
    """

    name = "bedrock"
    completion_causes = frozenset({"end_turn", "stop_sequence", "max_tokens"})
    tool_causes = frozenset({"tool_use"})

    def format_request(
        self,
        messages: Sequence[Message],
        model_id: str,
        inference: InferenceConfig,
        tool_config: ToolConfig | None,
    ) -> dict[str, Any]:
        request: dict[str, Any] = {
            "modelId": model_id,
            "messages": self.format_messages(messages),
            "inferenceConfig": {
                "maxTokens": inference.max_tokens,
                "temperature": inference.temperature,
                "topP": inference.top_p,
            },
        }
        system = extract_system(messages)
        if system:
            request["system"] = [{"text": system}]
        if tool_config:
            request.update(self.format_tools(tool_config))
        return request

    def format_messages(self, messages: Sequence[Message]) -> list[dict[str, Any]]:
        formatted: list[dict[str, Any]] = []
        for message in messages:
            if message.role == "system":
                continue
            if message.role == "tool":
                block = _tool_result_block(message)
                # Consecutive tool results travel in one user turn.
                if formatted and formatted[-1]["role"] == "user" and _is_tool_result_turn(formatted[-1]):
                    formatted[-1]["content"].append(block)
                else:
                    formatted.append({"role": "user", "content": [block]})
                continue
            formatted.append({"role": message.role, "content": _content_blocks(message)})
        return formatted

    def format_tools(self, tool_config: ToolConfig) -> dict[str, Any]:
        return {
            "toolConfig": {
                "tools": [
                    {
                        "toolSpec": {
                            "name": tool["name"],
                            "description": tool["description"],
                            "inputSchema": {"json": tool["parameters"]},
                        }
                    }
                    for tool in tool_config["tools"]
                ],
                "toolChoice": {tool_config["tool_choice"]: {}},
            }
        }

    def termination_cause(self, raw: dict[str, Any]) -> str | None:
        return raw.get("stopReason") or raw.get("stop_reason")

    def text_blocks(self, raw: dict[str, Any]) -> Iterable[str]:
        return [block["text"] for block in _blocks(raw) if isinstance(block.get("text"), str)]

    def tool_calls(self, raw: dict[str, Any]) -> list[ToolCall]:
        calls: list[ToolCall] = []
        for block in _blocks(raw):
            if "toolUse" in block:
                tool_use = block["toolUse"]
                if not isinstance(tool_use, dict):
                    raise ResponseFormatError(f"Malformed response: toolUse is {type(tool_use).__name__}")
                calls.append(ToolCall(tool_use.get("name", ""), tool_use.get("input", {}), tool_use.get("toolUseId")))
            elif block.get("type") == "tool_use":
                calls.append(ToolCall(block.get("name", ""), block.get("input", {}), block.get("id")))
        return calls

    def extract_usage(self, raw: dict[str, Any]) -> TokenUsage | None:
        usage = mapping_field(raw.get("usage"), "usage")
        if not usage:
            return None
        if "inputTokens" in usage or "outputTokens" in usage:
            return TokenUsage(
                token_count(usage.get("inputTokens"), "usage.inputTokens"),
                token_count(usage.get("outputTokens"), "usage.outputTokens"),
            )
        return TokenUsage(
            token_count(usage.get("input_tokens"), "usage.input_tokens"),
            token_count(usage.get("output_tokens"), "usage.output_tokens"),
        )


def _blocks(raw: dict[str, Any]) -> list[dict[str, Any]]:
    # Converse nests blocks under output.message; Anthropic bodies carry them at the top level.
    if "output" in raw:
        output = mapping_field(raw["output"], "output")
        content = mapping_field(output.get("message"), "output.message").get("content")
    else:
        content = raw.get("content")
    return [block for block in list_field(content, "content") if isinstance(block, dict)]


def _content_blocks(message: Message) -> list[dict[str, Any]]:
    if isinstance(message.content, list):
        blocks = list(message.content)
    else:
        text = content_as_text(message.content)
        blocks = [{"text": text}] if text.strip() else []
    for call in message.tool_calls or []:
        blocks.append(
            {"toolUse": {"toolUseId": call.call_id, "name": call.name, "input": arguments_as_object(call.input)}}
        )
    return blocks


def _tool_result_block(message: Message) -> dict[str, Any]:
    content = message.content
    result: dict[str, Any] = {"toolUseId": message.tool_call_id}
    if isinstance(content, dict):
        result["content"] = [{"json": content}]
        if "error" in content:
            result["status"] = "error"
    else:
        result["content"] = [{"text": content_as_text(content)}]
    return {"toolResult": result}


def _is_tool_result_turn(turn: dict[str, Any]) -> bool:
    return all("toolResult" in block for block in turn["content"])
