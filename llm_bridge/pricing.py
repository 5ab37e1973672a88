"""Per-model pricing and cost calculation.

Provider price sheets quote rates per token, per 1K tokens or per 1M tokens.
Every rate is normalized to a per-token ``Decimal`` when the table is built,
so cost arithmetic is exact until the final rounding step.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Mapping

from llm_bridge.models import CostInfo

COST_PRECISION = Decimal("0.000001")

PER_TOKEN = 1
PER_1K = 1_000
PER_1M = 1_000_000


@dataclass(slots=True, frozen=True)
class ModelPricing:
    """Per-token input and output rates for one model."""

    input_rate: Decimal
    output_rate: Decimal

    @classmethod
    def quoted(cls, input_price: str, output_price: str, per: int = PER_TOKEN) -> ModelPricing:
        unit = Decimal(per)
        return cls(Decimal(input_price) / unit, Decimal(output_price) / unit)

    def input_cost(self, tokens: int) -> Decimal:
        return self.input_rate * tokens

    def output_cost(self, tokens: int) -> Decimal:
        return self.output_rate * tokens


FREE = ModelPricing(Decimal(0), Decimal(0))

DEFAULT_PRICING: dict[str, ModelPricing] = {
    # Claude on Bedrock, quoted per token
    "us.anthropic.claude-3-7-sonnet-20250219-v1:0": ModelPricing.quoted("0.000015", "0.000075"),
    "anthropic.claude-3-5-sonnet-20241022-v2:0": ModelPricing.quoted("0.000010", "0.000050"),
    "anthropic.claude-3-sonnet-20240229-v1:0": ModelPricing.quoted("0.000008", "0.000024"),
    # Nova, quoted per 1K tokens
    "us.amazon.nova-premier-v1:0": ModelPricing.quoted("0.0025", "0.0125", per=PER_1K),
    "amazon.nova-pro-v1:0": ModelPricing.quoted("0.0008", "0.0032", per=PER_1K),
    "amazon.nova-lite-v1:0": ModelPricing.quoted("0.00006", "0.00024", per=PER_1K),
    "amazon.nova-micro-v1:0": ModelPricing.quoted("0.000035", "0.00014", per=PER_1K),
    # Llama on Bedrock, quoted per token
    "us.meta.llama3-3-70b-instruct-v1:0": ModelPricing.quoted("0.000007", "0.000009"),
    # Mistral, quoted per 1M tokens
    "mistral-large-latest": ModelPricing.quoted("2.0", "6.0", per=PER_1M),
    "mistral-medium-latest": ModelPricing.quoted("0.4", "2.0", per=PER_1M),
    "mistral-small-latest": ModelPricing.quoted("0.1", "0.3", per=PER_1M),
    "magistral-medium-latest": ModelPricing.quoted("2.0", "5.0", per=PER_1M),
    "codestral-latest": ModelPricing.quoted("0.3", "0.9", per=PER_1M),
    "ministral-8b-latest": ModelPricing.quoted("0.1", "0.1", per=PER_1M),
    "ministral-3b-latest": ModelPricing.quoted("0.04", "0.04", per=PER_1M),
    "open-mistral-nemo": ModelPricing.quoted("0.15", "0.15", per=PER_1M),
    # OpenRouter, quoted per 1M tokens
    "anthropic/claude-3.5-sonnet": ModelPricing.quoted("3.0", "15.0", per=PER_1M),
    "openai/gpt-4o-mini": ModelPricing.quoted("0.15", "0.6", per=PER_1M),
    "meta-llama/llama-3.3-70b-instruct": ModelPricing.quoted("0.13", "0.4", per=PER_1M),
    # Local models
    "llama3.1": FREE,
    "mistral": FREE,
    "gemma": FREE,
}


def format_cost(value: Decimal) -> str:
    """Round half-up to the fixed precision, keeping trailing zeros."""
    return str(value.quantize(COST_PRECISION, rounding=ROUND_HALF_UP))


ZERO_COST = CostInfo(format_cost(Decimal(0)), format_cost(Decimal(0)), format_cost(Decimal(0)))


def get_model_pricing(model_id: str, pricing: Mapping[str, ModelPricing] | None = None) -> ModelPricing:
    """Look up pricing; unknown models are free rather than an error."""
    table = DEFAULT_PRICING if pricing is None else pricing
    return table.get(model_id, FREE)


def calculate_cost(
    model_id: str,
    input_tokens: int,
    output_tokens: int,
    pricing: Mapping[str, ModelPricing] | None = None,
) -> CostInfo:
    model_pricing = get_model_pricing(model_id, pricing)
    input_cost = model_pricing.input_cost(input_tokens)
    output_cost = model_pricing.output_cost(output_tokens)
    return CostInfo(
        input_cost=format_cost(input_cost),
        output_cost=format_cost(output_cost),
        total_cost=format_cost(input_cost + output_cost),
    )
