"""Current-model tracking and fallback across ordered model groups."""

from __future__ import annotations

import logging
import re
from typing import Any, Awaitable, Callable, Mapping, Sequence, TypeVar

from llm_bridge import catalog
from llm_bridge.errors import ErrorCategory, LLMBridgeError, TransportError, UnknownModelError
from llm_bridge.models import InferenceConfig, ModelConfig, ModelGroup

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_INFERENCE: dict[str, Any] = {"max_tokens": 2048, "temperature": 0.7, "top_p": 0.9}

_FALLBACK_PATTERNS = re.compile(
    "|".join(
        [
            r"rate.?limit",
            r"too many requests",
            r"throttl",
            r"quota",
            r"model.{0,40}(not available|unavailable|not found|overloaded|not supported)",
            r"service unavailable",
            r"on-demand throughput isn'?t supported",
            r"inference profile",
        ]
    ),
    re.IGNORECASE,
)
_FALLBACK_STATUS_CODES = frozenset({429, 503, 529})


class ModelManager:
    """Owns the current model and walks the fallback sequence forward.

    The fallback sequence is every model of every group, in group order. A
    fallback moves to the next model of the current group, or to the first
    model of the next group once the current one is exhausted.
    """

    def __init__(
        self,
        groups: Sequence[ModelGroup],
        initial_model: str,
        configured_inference: Mapping[str, Any] | None = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        models: Mapping[str, ModelConfig] | None = None,
    ) -> None:
        self._groups = tuple(groups)
        self._models = catalog.ALL_MODELS if models is None else models
        self._current_model = initial_model
        self._configured_inference = dict(configured_inference or {})
        self._max_attempts = max_attempts
        self._attempts = 0

    @property
    def attempts(self) -> int:
        return self._attempts

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    def get_current_model(self) -> str:
        return self._current_model

    def get_available_models(self) -> list[str]:
        return [model for group in self._groups for model in group.models]

    def set_model(self, model_id: str) -> bool:
        if model_id not in self.get_available_models():
            return False
        self._current_model = model_id
        return True

    def get_inference_config(self, overrides: Mapping[str, Any] | None = None) -> InferenceConfig:
        """Layer built-in, model, configured and per-call parameters."""
        model = self._models.get(self._current_model)
        if model is None:
            raise UnknownModelError(self._current_model)
        values = {
            **DEFAULT_INFERENCE,
            "max_tokens": model.max_tokens,
            "temperature": model.default_temperature,
            "top_p": model.default_top_p,
            **self._configured_inference,
            **{key: value for key, value in (overrides or {}).items() if value is not None},
        }
        return InferenceConfig(**{key: values[key] for key in DEFAULT_INFERENCE})

    def fallback_to_next_model(self) -> bool:
        for group_index, group in enumerate(self._groups):
            if self._current_model not in group.models:
                continue
            index = group.models.index(self._current_model)
            if index < len(group.models) - 1:
                self._current_model = group.models[index + 1]
                return True
            for next_group in self._groups[group_index + 1 :]:
                if next_group.models:
                    self._current_model = next_group.models[0]
                    return True
            return False
        return False

    def is_fallback_worthy(self, error: BaseException) -> bool:
        if isinstance(error, LLMBridgeError) and error.category is not ErrorCategory.TRANSPORT:
            return False
        if isinstance(error, TransportError) and error.status_code in _FALLBACK_STATUS_CODES:
            return True
        return bool(_FALLBACK_PATTERNS.search(str(error)))

    def reset_attempts(self) -> None:
        self._attempts = 0

    def recover(self, error: BaseException) -> bool:
        """Decide whether a failed call should be retried on a new model.

        Retries only happen after the fallback actually advanced, and never
        more than ``max_attempts`` times per invocation.
        """
        self._attempts += 1
        failed_model = self._current_model
        _LOGGER.warning("Error invoking model %s: %s", failed_model, error)

        if self._attempts > self._max_attempts:
            _LOGGER.error("Giving up after %d attempts on model %s", self._attempts, failed_model)
            return False
        if not self.is_fallback_worthy(error):
            return False
        if not self.fallback_to_next_model():
            _LOGGER.error("No fallback model after %s", failed_model)
            return False

        _LOGGER.info("Falling back from %s to %s", failed_model, self._current_model)
        return True

    async def handle_error(self, error: BaseException, retry: Callable[[], Awaitable[T]]) -> T:
        """Retry on the next model when the error allows it, else re-raise."""
        if self.recover(error):
            return await retry()
        raise error
