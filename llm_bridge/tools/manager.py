"""Tool registry, tool config and tool-call dispatch."""

from __future__ import annotations

import asyncio
import copy
import json
import logging
from typing import Any, Iterable, Optional, Sequence, Union

from pydantic import ValidationError, create_model

from llm_bridge.errors import ToolError, ToolExecutionError, ToolInputError, ToolNotFoundError
from llm_bridge.models import Message, ToolCall, ToolResult
from llm_bridge.tools.base import Tool

_LOGGER = logging.getLogger(__name__)


class _NoTools:
    """Marker returned instead of an empty tool list."""

    _instance: _NoTools | None = None

    def __new__(cls) -> _NoTools:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NO_TOOLS"


NO_TOOLS = _NoTools()

ToolConfig = dict[str, Any]


class ToolManager:
    """Registry of tools keyed by name; the first registration wins."""

    def __init__(self) -> None:
        self._tools: dict[str, Tool] = {}

    def register_tools(self, tools: Iterable[Tool]) -> None:
        for tool in tools:
            if tool.name in self._tools:
                _LOGGER.debug("Tool %r already registered, keeping the first one", tool.name)
                continue
            self._tools[tool.name] = tool
        _LOGGER.info("Registered tools: %s", list(self._tools))

    def get_tools(self) -> list[Tool]:
        return list(self._tools.values())

    def get_tool(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def get_tool_config(self) -> ToolConfig | _NoTools:
        if not self._tools:
            return NO_TOOLS
        return {
            "tools": [copy.deepcopy(tool.describe()) for tool in self._tools.values()],
            "tool_choice": "auto",
        }

    async def process_tool_calls(self, calls: Sequence[ToolCall]) -> list[ToolResult]:
        """Run every call and return results in the same order as ``calls``.

        Failures are reported per call; one bad call never aborts the batch.
        """
        return list(await asyncio.gather(*(self._process_one(call) for call in calls)))

    async def _process_one(self, call: ToolCall) -> ToolResult:
        try:
            params = _parse_input(call.input)
            tool = self._tools.get(call.name)
            if tool is None:
                raise ToolNotFoundError(f"Tool {call.name} not found")
            validated = _validate_arguments(tool.parameters_schema, params)
            try:
                content = await tool.run(**validated)
            except Exception as exc:  # noqa: BLE001
                raise ToolExecutionError(str(exc), {"tool": call.name}) from exc
        except ToolError as exc:
            _LOGGER.warning("Tool call %s (%s) failed: %s", call.call_id, call.name, exc.message)
            return ToolResult(call_id=call.call_id, error=exc.message)
        return ToolResult(call_id=call.call_id, content=content)


def tool_messages(
    content: str,
    calls: Sequence[ToolCall],
    results: Sequence[ToolResult],
) -> list[Message]:
    """Conversation turns recording a tool request and its results."""
    messages = [Message(role="assistant", content=content, tool_calls=list(calls))]
    for result in results:
        payload = {"error": result.error} if result.is_error else result.content
        messages.append(Message(role="tool", content=payload, tool_call_id=result.call_id))
    return messages


def _parse_input(raw: Any) -> dict[str, Any]:
    if isinstance(raw, dict):
        return raw
    try:
        parsed = json.loads(raw) if raw else {}
    except (TypeError, json.JSONDecodeError) as exc:
        raise ToolInputError(f"Failed to parse tool input: {exc}") from exc
    if not isinstance(parsed, dict):
        raise ToolInputError("Failed to parse tool input: expected a JSON object")
    return parsed


_JSON_TYPES: dict[str, type[Any]] = {
    "string": str,
    "integer": int,
    "number": float,
    "boolean": bool,
    "object": dict,
    "array": list,
}


def _validate_arguments(schema: dict[str, Any], arguments: dict[str, Any]) -> dict[str, Any]:
    """Check tool arguments against the ``properties`` of a JSON schema."""
    try:
        required = set(schema.get("required") or [])
        fields = {
            name: _field_definition(spec, name in required)
            for name, spec in (schema.get("properties") or {}).items()
        }
        arguments_model = create_model("ToolArguments", **fields)
    except Exception as exc:  # noqa: BLE001
        raise ToolInputError(f"Unsupported parameter schema: {exc}") from exc

    try:
        validated = arguments_model(**arguments)
    except ValidationError as exc:
        raise ToolInputError(f"Invalid input for tool: {exc}") from exc
    return validated.model_dump(exclude_none=True)


def _field_definition(spec: Any, required: bool) -> tuple[Any, Any]:
    declared = spec.get("type", "string") if isinstance(spec, dict) else "string"
    # A list of types, e.g. ["string", "null"], declares a union.
    names = declared if isinstance(declared, list) else [declared]
    members = [_JSON_TYPES.get(name, str) if isinstance(name, str) else Any for name in names if name != "null"]

    if not members:
        annotation: Any = Any
    elif len(members) == 1:
        annotation = members[0]
    else:
        annotation = Union[tuple(members)]
    if "null" in names:
        annotation = Optional[annotation]
    return annotation, (... if required else None)
