"""Registry that exposes the graph tools to the agent host."""

import logging
from typing import Any

from .base import Tool, ToolResult

logger = logging.getLogger(__name__)


def _failure(error: str) -> ToolResult:
    return ToolResult(success=False, output="", error=error)


class ToolRegistry:
    """Name-indexed collection of tools."""

    def __init__(self) -> None:
        self._tools: dict[str, Tool] = {}

    def register(self, tool: Tool) -> None:
        """Register a tool; names are unique."""
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' already registered")
        self._tools[tool.name] = tool

    def get(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def list_tools(self) -> list[str]:
        """Registered tool names, in registration order."""
        return list(self._tools)

    def get_tools_schema(self) -> list[dict[str, Any]]:
        """Function-calling schemas for every registered tool."""
        return [tool.get_schema() for tool in self._tools.values()]

    async def dispatch(self, tool_name: str, args: dict[str, Any]) -> ToolResult:
        """Validate and run a tool call.

        Unknown tools, invalid arguments and unexpected exceptions all come
        back as a failed ToolResult; this never raises.
        """
        tool = self._tools.get(tool_name)
        if tool is None:
            return _failure(f"Unknown tool: {tool_name}")

        valid, error = tool.validate_args(args)
        if not valid:
            logger.debug("graphiti: rejected %s call: %s", tool_name, error)
            return _failure(error or "Invalid arguments")

        try:
            return await tool.execute(**args)
        except Exception as e:
            logger.exception("graphiti: tool %s raised", tool_name)
            return _failure(f"Tool execution failed: {e}")
