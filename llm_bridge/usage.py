"""Token usage accounting."""

from __future__ import annotations

import math
import threading
from dataclasses import dataclass
from typing import Mapping

from llm_bridge.models import CostInfo, TokenUsage
from llm_bridge.pricing import ZERO_COST, ModelPricing, calculate_cost

CHARS_PER_TOKEN = 4


def estimate_tokens(text: str) -> int:
    """Rough token count for providers that do not report usage."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


class SessionUsage:
    """Process-scoped token accumulator shared by orchestrators.

    Pass one instance to every orchestrator that should count towards the
    same session. Updates happen under a lock in a single call.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._input = 0
        self._output = 0

    def add(self, input_tokens: int, output_tokens: int) -> TokenUsage:
        with self._lock:
            self._input += input_tokens
            self._output += output_tokens
            return TokenUsage(self._input, self._output)

    def snapshot(self) -> TokenUsage:
        with self._lock:
            return TokenUsage(self._input, self._output)

    def reset(self) -> None:
        with self._lock:
            self._input = 0
            self._output = 0


@dataclass(slots=True)
class UsageSnapshot:
    """Usage counters after one tracked request."""

    request_tokens: TokenUsage
    instance_tokens: TokenUsage
    session_tokens: TokenUsage
    cost_info: CostInfo


class UsageTracker:
    """Per-orchestrator usage counter feeding a shared session accumulator."""

    def __init__(
        self,
        session: SessionUsage,
        enabled: bool = True,
        pricing: Mapping[str, ModelPricing] | None = None,
    ) -> None:
        self._session = session
        self._enabled = enabled
        self._pricing = pricing
        self._lock = threading.Lock()
        self._usage = TokenUsage()

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def usage(self) -> TokenUsage:
        with self._lock:
            return TokenUsage(self._usage.input, self._usage.output)

    @property
    def session(self) -> SessionUsage:
        return self._session

    def track_token_usage(self, model_id: str, input_tokens: int, output_tokens: int) -> UsageSnapshot:
        if not self._enabled:
            return UsageSnapshot(
                request_tokens=TokenUsage(),
                instance_tokens=TokenUsage(),
                session_tokens=TokenUsage(),
                cost_info=ZERO_COST,
            )

        with self._lock:
            self._usage.input += input_tokens
            self._usage.output += output_tokens
            instance_tokens = TokenUsage(self._usage.input, self._usage.output)
        session_tokens = self._session.add(input_tokens, output_tokens)

        return UsageSnapshot(
            request_tokens=TokenUsage(input_tokens, output_tokens),
            instance_tokens=instance_tokens,
            session_tokens=session_tokens,
            cost_info=calculate_cost(model_id, input_tokens, output_tokens, self._pricing),
        )
