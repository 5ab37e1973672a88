"""Tool contract shared by every provider."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class Tool(ABC):
    """Named, schema-described capability a model may request.

    ``name`` must be unique within a ``ToolManager``. ``parameters_schema`` is
    a JSON-schema object describing the keyword arguments of ``run``.
    """

    name: str
    description: str
    parameters_schema: dict[str, Any]

    @abstractmethod
    async def run(self, **kwargs: Any) -> Any:
        """Execute tool with validated arguments."""

    def describe(self) -> dict[str, Any]:
        """Provider-neutral tool description."""
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters_schema,
        }
