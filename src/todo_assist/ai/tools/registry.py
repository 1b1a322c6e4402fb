"""Tool registry holding the function declarations offered to the model."""

from __future__ import annotations

from typing import Any

from todo_assist.ai.gateway import TodoGateway
from todo_assist.ai.tools.base import Tool
from todo_assist.log import get_logger

logger = get_logger(__name__)


class ToolRegistry:
    """Registry of all available tools."""

    def __init__(self) -> None:
        self._tools: dict[str, Tool] = {}
        self._declarations: tuple[dict[str, Any], ...] = ()

    def register(self, tool: Tool) -> None:
        self._tools[tool.name] = tool
        self._declarations = tuple(t.to_declaration() for t in self._tools.values())
        logger.info("tool_registered", tool_name=tool.name)

    def get(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def all_tools(self) -> list[Tool]:
        return list(self._tools.values())

    def declarations(self) -> list[dict[str, Any]]:
        """Function declarations in registration order. Identical on every call."""
        return list(self._declarations)

    def discover_and_register(self, gateway: TodoGateway) -> None:
        """Register the built-in to-do tools."""
        from todo_assist.ai.tools.todos import CreateTodoTool, GetTodosTool, UpdateTodoTool

        self.register(GetTodosTool(gateway))
        self.register(CreateTodoTool(gateway))
        self.register(UpdateTodoTool(gateway))
