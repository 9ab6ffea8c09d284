"""Tool module registry for Monad Migration MCP Server."""

from dataclasses import dataclass
from typing import Callable, Awaitable

from mcp.types import Tool, TextContent


@dataclass
class ToolModule:
    """A module of related MCP tools."""
    name: str
    tools: list[Tool]
    handler: Callable[[str, dict], Awaitable[list[TextContent]]]

    @property
    def tool_names(self) -> list[str]:
        return [t.name for t in self.tools]
