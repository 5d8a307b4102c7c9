"""On-demand graph tools and the tool registry."""

from .base import Tool, ToolResult
from .graph import GraphIngestTool, GraphSearchTool
from .registry import ToolRegistry

__all__ = ["GraphIngestTool", "GraphSearchTool", "Tool", "ToolResult", "ToolRegistry"]
