"""Static model tables and fallback groups."""

from __future__ import annotations

from llm_bridge.errors import ConfigurationError
from llm_bridge.models import ModelConfig, ModelGroup


def _models(*configs: ModelConfig) -> dict[str, ModelConfig]:
    return {config.id: config for config in configs}


CLAUDE_MODELS = _models(
    ModelConfig(
        id="us.anthropic.claude-3-7-sonnet-20250219-v1:0",
        provider="bedrock",
        display_name="Claude 3.7 Sonnet",
        description="Latest Claude model with improved reasoning",
    ),
    ModelConfig(
        id="anthropic.claude-3-5-sonnet-20241022-v2:0",
        provider="bedrock",
        display_name="Claude 3.5 Sonnet",
        description="Balanced Claude model for general use",
    ),
    ModelConfig(
        id="anthropic.claude-3-sonnet-20240229-v1:0",
        provider="bedrock",
        display_name="Claude 3 Sonnet",
        description="Original Claude 3 model",
    ),
)

NOVA_MODELS = _models(
    ModelConfig(
        id="amazon.nova-pro-v1:0",
        provider="bedrock",
        display_name="Amazon Nova Pro",
        description="High-performance Amazon Nova model",
    ),
    ModelConfig(
        id="amazon.nova-lite-v1:0",
        provider="bedrock",
        display_name="Amazon Nova Lite",
        description="Balanced Amazon Nova model",
    ),
    ModelConfig(
        id="amazon.nova-micro-v1:0",
        provider="bedrock",
        display_name="Amazon Nova Micro",
        description="Cost-effective Amazon Nova model",
    ),
)

LLAMA_MODELS = _models(
    ModelConfig(
        id="us.meta.llama3-3-70b-instruct-v1:0",
        provider="bedrock",
        display_name="Llama 3.3 70B",
        description="Latest Llama model with 70B parameters",
    ),
)

MISTRAL_MODELS = _models(
    ModelConfig(
        id="mistral-large-latest",
        provider="mistral",
        display_name="Mistral Large",
        description="Top-tier Mistral model",
        max_tokens=8192,
    ),
    ModelConfig(
        id="mistral-medium-latest",
        provider="mistral",
        display_name="Mistral Medium",
        description="Balanced Mistral model",
    ),
    ModelConfig(
        id="mistral-small-latest",
        provider="mistral",
        display_name="Mistral Small",
        description="Cost-effective Mistral model",
    ),
)

OPENROUTER_MODELS = _models(
    ModelConfig(
        id="anthropic/claude-3.5-sonnet",
        provider="openrouter",
        display_name="Claude 3.5 Sonnet (OpenRouter)",
    ),
    ModelConfig(
        id="openai/gpt-4o-mini",
        provider="openrouter",
        display_name="GPT-4o mini (OpenRouter)",
    ),
    ModelConfig(
        id="meta-llama/llama-3.3-70b-instruct",
        provider="openrouter",
        display_name="Llama 3.3 70B (OpenRouter)",
    ),
)

OLLAMA_MODELS = _models(
    ModelConfig(
        id="llama3.1",
        provider="ollama",
        display_name="Llama 3.1",
        description="Meta Llama 3.1 model via Ollama",
    ),
    ModelConfig(
        id="mistral",
        provider="ollama",
        display_name="Mistral",
        description="Mistral model via Ollama",
    ),
    ModelConfig(
        id="gemma",
        provider="ollama",
        display_name="Gemma",
        description="Google Gemma model via Ollama",
    ),
)

ALL_MODELS: dict[str, ModelConfig] = {
    **CLAUDE_MODELS,
    **NOVA_MODELS,
    **LLAMA_MODELS,
    **MISTRAL_MODELS,
    **OPENROUTER_MODELS,
    **OLLAMA_MODELS,
}

CLAUDE_GROUP = ModelGroup("Claude Models", tuple(CLAUDE_MODELS), "Anthropic Claude models in order of preference")
NOVA_GROUP = ModelGroup("Nova Models", tuple(NOVA_MODELS), "Amazon Nova models in order of preference")
LLAMA_GROUP = ModelGroup("Llama Models", tuple(LLAMA_MODELS), "Meta Llama models in order of preference")
MISTRAL_GROUP = ModelGroup("Mistral Models", tuple(MISTRAL_MODELS), "Mistral hosted models in order of preference")
OPENROUTER_GROUP = ModelGroup("OpenRouter Models", tuple(OPENROUTER_MODELS), "Models routed through OpenRouter")
OLLAMA_GROUP = ModelGroup("Ollama Models", tuple(OLLAMA_MODELS), "Models available through Ollama")

# Group order is the global fallback order within a provider.
PROVIDER_GROUPS: dict[str, tuple[ModelGroup, ...]] = {
    "bedrock": (CLAUDE_GROUP, NOVA_GROUP, LLAMA_GROUP),
    "mistral": (MISTRAL_GROUP,),
    "openrouter": (OPENROUTER_GROUP,),
    "ollama": (OLLAMA_GROUP,),
}

DEFAULT_MODELS: dict[str, str] = {
    "bedrock": "amazon.nova-micro-v1:0",
    "mistral": "mistral-small-latest",
    "openrouter": "openai/gpt-4o-mini",
    "ollama": "llama3.1",
}


def groups_for(provider: str) -> tuple[ModelGroup, ...]:
    try:
        return PROVIDER_GROUPS[provider]
    except KeyError:
        raise ConfigurationError(f"Unknown LLM provider: {provider}") from None


def default_model_for(provider: str) -> str:
    try:
        return DEFAULT_MODELS[provider]
    except KeyError:
        raise ConfigurationError(f"Unknown LLM provider: {provider}") from None
