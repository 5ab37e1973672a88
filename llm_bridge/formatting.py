"""Provider-neutral request formatting helpers."""

from __future__ import annotations

import json
import logging
from typing import Any, Iterable, Mapping, Sequence

from llm_bridge.models import VALID_ROLES, Message, ToolCall

_LOGGER = logging.getLogger(__name__)


def coerce_message(raw: Message | Mapping[str, Any]) -> Message:
    """Accept a ``Message`` or a chat-style dict and return a ``Message``."""
    if isinstance(raw, Message):
        return raw
    tool_calls = raw.get("tool_calls")
    return Message(
        role=str(raw.get("role", "")),
        content=raw.get("content", ""),
        tool_calls=[_coerce_tool_call(tc) for tc in tool_calls] if tool_calls else None,
        tool_call_id=raw.get("tool_call_id"),
    )


def _coerce_tool_call(raw: ToolCall | Mapping[str, Any]) -> ToolCall:
    if isinstance(raw, ToolCall):
        return raw
    return ToolCall(name=raw["name"], input=raw.get("input", {}), call_id=raw.get("call_id"))


def apply_window(messages: Sequence[Message], chat_size: int | None) -> list[Message]:
    """Keep every system message plus the most recent non-system messages.

    The window only applies when the conversation is longer than
    ``chat_size``. A tool result whose originating call fell outside the
    window is dropped from the head of the kept tail.
    """
    messages = list(messages)
    if not chat_size or len(messages) <= chat_size:
        return messages

    system = [m for m in messages if m.role == "system"]
    rest = [m for m in messages if m.role != "system"]
    keep = max(chat_size - len(system), 0)
    tail = rest[-keep:] if keep else []
    while tail and tail[0].role == "tool":
        tail.pop(0)
    return [*system, *tail]


def is_empty(message: Message) -> bool:
    """Blank text turns carry nothing; tool traffic is never empty."""
    if message.role == "tool" or message.tool_calls:
        return False
    if isinstance(message.content, str):
        return not message.content.strip()
    return not message.content


def clean_messages(messages: Iterable[Message | Mapping[str, Any]], roles: Iterable[str] = VALID_ROLES) -> list[Message]:
    """Drop messages with unsupported roles and degenerate empty turns."""
    allowed = frozenset(roles)
    cleaned: list[Message] = []
    for raw in messages:
        message = coerce_message(raw)
        if message.role not in allowed:
            _LOGGER.debug("Dropping message with unsupported role %r", message.role)
            continue
        if is_empty(message):
            continue
        cleaned.append(message)
    return cleaned


def extract_system(messages: Iterable[Message]) -> str:
    """Merge all system message text into one block."""
    parts = [content_as_text(m.content) for m in messages if m.role == "system"]
    return "\n\n".join(part for part in parts if part.strip())


def content_as_text(content: Any) -> str:
    if isinstance(content, str):
        return content
    if content is None:
        return ""
    return json.dumps(content)
