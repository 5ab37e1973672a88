"""Invocation pipeline: format, send, normalize, with bounded model fallback."""

from __future__ import annotations

import json
import logging
from typing import Any, Iterable, Mapping, Sequence

from llm_bridge.errors import ToolLoopError
from llm_bridge.formatting import apply_window, clean_messages, coerce_message
from llm_bridge.llm.base import ProviderAdapter
from llm_bridge.llm.transport import TransportClient
from llm_bridge.model_manager import ModelManager
from llm_bridge.models import (
    AssistantResponse,
    InvocationResult,
    Message,
    MessageStore,
    TokenUsage,
)
from llm_bridge.tools.base import Tool
from llm_bridge.tools.manager import ToolManager, tool_messages
from llm_bridge.usage import SessionUsage, UsageTracker, estimate_tokens

LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_TOOL_ROUNDS = 5


class InvocationOrchestrator:
    """Runs model invocations for one conversation against one provider.

    The model pointer and attempt counter live in the ``ModelManager`` owned
    by this instance, so one orchestrator must not serve concurrent
    invocations of the same conversation. Session usage is shared through
    the injected ``UsageTracker``.
    """

    def __init__(
        self,
        adapter: ProviderAdapter,
        transport: TransportClient,
        model_manager: ModelManager,
        tool_manager: ToolManager | None = None,
        usage_tracker: UsageTracker | None = None,
        chat_size: int | None = None,
        debug: bool = False,
    ) -> None:
        self._adapter = adapter
        self._transport = transport
        self._model_manager = model_manager
        self._tool_manager = tool_manager or ToolManager()
        self._usage_tracker = usage_tracker or UsageTracker(SessionUsage())
        self._chat_size = chat_size
        self._debug = debug

    @property
    def model_manager(self) -> ModelManager:
        return self._model_manager

    @property
    def tool_manager(self) -> ToolManager:
        return self._tool_manager

    @property
    def token_usage(self) -> TokenUsage:
        return self._usage_tracker.usage

    @property
    def session_usage(self) -> TokenUsage:
        return self._usage_tracker.session.snapshot()

    def register_tools(self, tools: Iterable[Tool]) -> None:
        self._tool_manager.register_tools(tools)

    async def invoke(
        self,
        messages: Iterable[Message | Mapping[str, Any]],
        inference_overrides: Mapping[str, Any] | None = None,
    ) -> InvocationResult:
        """Invoke the current model, falling back to later models on failure.

        The original error is re-raised once the fallback sequence or the
        attempt budget is exhausted.
        """
        cleaned = clean_messages(messages, self._adapter.roles)
        tool_config = self._tool_manager.get_tool_config() or None
        self._model_manager.reset_attempts()

        while True:
            model_id = self._model_manager.get_current_model()
            inference = self._model_manager.get_inference_config(inference_overrides)
            request = self._adapter.format_request(cleaned, model_id, inference, tool_config)
            if self._debug:
                LOGGER.debug("%s request: %s", self._adapter.name, json.dumps(request, default=str))
            try:
                raw = await self._transport.send(request)
            except Exception as exc:  # noqa: BLE001
                if self._model_manager.recover(exc):
                    continue
                raise
            break

        if self._debug:
            LOGGER.debug("%s response: %s", self._adapter.name, json.dumps(raw, default=str))

        raw = self._adapter.check_response(raw)
        usage = self._adapter.extract_usage(raw)
        if usage is None:
            usage = TokenUsage(
                input=estimate_tokens(json.dumps(request, default=str)),
                output=estimate_tokens(self._adapter.response_text(raw)),
            )
        snapshot = self._usage_tracker.track_token_usage(model_id, usage.input, usage.output)

        result = self._adapter.parse_response(raw)
        result.token_usage = snapshot.request_tokens
        result.cost_info = snapshot.cost_info
        LOGGER.info(
            "Model %s returned %s (tokens in=%d out=%d)",
            model_id,
            type(result).__name__,
            snapshot.request_tokens.input,
            snapshot.request_tokens.output,
        )
        return result

    async def invoke_from_store(
        self,
        store: MessageStore,
        inference_overrides: Mapping[str, Any] | None = None,
    ) -> InvocationResult:
        """Invoke over the store's conversation, truncated to the chat window."""
        history = [coerce_message(message) for message in store.get_all_messages()]
        return await self.invoke(apply_window(history, self._chat_size), inference_overrides)

    async def converse(
        self,
        messages: Sequence[Message | Mapping[str, Any]],
        max_rounds: int = DEFAULT_MAX_TOOL_ROUNDS,
        inference_overrides: Mapping[str, Any] | None = None,
    ) -> AssistantResponse:
        """Invoke repeatedly, running requested tools, until the model answers."""
        history = [coerce_message(message) for message in messages]
        for _ in range(max_rounds):
            result = await self.invoke(history, inference_overrides)
            if isinstance(result, AssistantResponse):
                return result
            results = await self._tool_manager.process_tool_calls(result.tool_calls)
            history.extend(tool_messages(result.content, result.tool_calls, results))
        raise ToolLoopError(f"Model still requesting tools after {max_rounds} rounds")
