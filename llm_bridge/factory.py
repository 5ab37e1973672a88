"""Build orchestrators from settings."""

from __future__ import annotations

import logging

from llm_bridge import catalog
from llm_bridge.config import Settings, configured_inference
from llm_bridge.errors import ConfigurationError
from llm_bridge.llm.base import ProviderAdapter
from llm_bridge.llm.bedrock import BedrockAdapter
from llm_bridge.llm.chat_completions import ChatCompletionsAdapter
from llm_bridge.llm.ollama import OllamaAdapter
from llm_bridge.llm.transport import HttpTransport, TransportClient
from llm_bridge.model_manager import ModelManager
from llm_bridge.orchestrator import InvocationOrchestrator
from llm_bridge.tools.manager import ToolManager
from llm_bridge.usage import SessionUsage, UsageTracker

LOGGER = logging.getLogger(__name__)


def create_adapter(provider: str) -> ProviderAdapter:
    if provider == "bedrock":
        return BedrockAdapter()
    if provider in ("openrouter", "mistral"):
        return ChatCompletionsAdapter(name=provider)
    if provider == "ollama":
        return OllamaAdapter()
    raise ConfigurationError(f"Unknown LLM provider: {provider}")


def create_transport(provider: str, settings: Settings) -> TransportClient:
    timeout = settings.request_timeout_seconds
    if provider == "openrouter":
        return HttpTransport(settings.openrouter_base_url, ChatCompletionsAdapter.endpoint, settings.openrouter_api_key, timeout)
    if provider == "mistral":
        return HttpTransport(settings.mistral_base_url, ChatCompletionsAdapter.endpoint, settings.mistral_api_key, timeout)
    if provider == "ollama":
        return HttpTransport(settings.ollama_base_url, OllamaAdapter.endpoint, timeout_seconds=timeout)
    if provider == "bedrock":
        raise ConfigurationError("Bedrock needs a transport client, e.g. one wrapping the AWS SDK Converse call")
    raise ConfigurationError(f"Unknown LLM provider: {provider}")


def create_orchestrator(
    settings: Settings,
    provider: str | None = None,
    transport: TransportClient | None = None,
    session: SessionUsage | None = None,
) -> InvocationOrchestrator:
    """Wire adapter, transport and managers for ``provider``.

    Pass the same ``session`` to every orchestrator whose usage should be
    accumulated together.
    """
    provider = provider or settings.provider
    adapter = create_adapter(provider)
    groups = catalog.groups_for(provider)
    model_id = settings.default_model_id or catalog.default_model_for(provider)

    model_manager = ModelManager(
        groups,
        model_id,
        configured_inference=configured_inference(settings),
        max_attempts=settings.max_attempts,
    )
    usage_tracker = UsageTracker(session or SessionUsage(), enabled=settings.enable_token_tracking)

    LOGGER.info("Initialized %s orchestrator with model %s", provider, model_id)
    return InvocationOrchestrator(
        adapter=adapter,
        transport=transport or create_transport(provider, settings),
        model_manager=model_manager,
        tool_manager=ToolManager(),
        usage_tracker=usage_tracker,
        chat_size=settings.chat_size,
        debug=settings.debug,
    )
