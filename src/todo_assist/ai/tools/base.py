"""Abstract tool interface for Gemini function calling."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from todo_assist.ai.models import RequestContext


class Tool(ABC):
    """Base class for all model-callable tools."""

    # RequestContext attributes that must be set before the tool may run
    required_context: tuple[str, ...] = ("user_seq",)

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique function name sent to the Gemini API."""
        ...

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable description for the model."""
        ...

    @property
    @abstractmethod
    def parameters(self) -> dict[str, Any]:
        """Gemini OBJECT schema describing accepted arguments."""
        ...

    @abstractmethod
    async def execute(self, context: RequestContext, args: dict[str, Any]) -> dict[str, Any]:
        """Run the tool and return a JSON-serialisable result for the model."""
        ...

    def missing_context(self, context: RequestContext) -> list[str]:
        return [field for field in self.required_context if not getattr(context, field)]

    def to_declaration(self) -> dict[str, Any]:
        """Serialize to a Gemini function declaration."""
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters,
        }
