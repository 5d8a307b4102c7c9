"""Agent tools for explicit knowledge graph search and ingestion.

Unlike the lifecycle pipelines, these run because the user asked for them,
so failures come back as a failed ToolResult the user can see.
"""

from datetime import datetime, timezone
from typing import Any

from ..client import GraphClient
from ..exceptions import GraphClientError
from ..models import Message
from .base import Tool, ToolResult

DEFAULT_SEARCH_LIMIT = 10
MAX_SEARCH_LIMIT = 50
PREVIEW_CHARS = 100


class GraphSearchTool(Tool):
    """Tool for searching facts in the knowledge graph."""

    def __init__(self, client: GraphClient) -> None:
        self.client = client

    @property
    def name(self) -> str:
        return "graphiti_search"

    @property
    def label(self) -> str:
        return "Graphiti Search"

    @property
    def description(self) -> str:
        return (
            "Search the knowledge graph for facts, entities, and relationships. "
            "Use when you need context about people, projects, decisions, infrastructure, "
            "or anything discussed in past conversations."
        )

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "Natural language search query",
                },
                "limit": {
                    "type": "integer",
                    "description": f"Max results (default: {DEFAULT_SEARCH_LIMIT})",
                    "minimum": 1,
                    "maximum": MAX_SEARCH_LIMIT,
                },
            },
            "required": ["query"],
        }

    async def execute(
        self,
        query: str = "",
        limit: int = DEFAULT_SEARCH_LIMIT,
        **kwargs: Any,
    ) -> ToolResult:
        """Search the graph.

        Args:
            query: The search query.
            limit: Maximum number of facts.

        Returns:
            ToolResult with numbered facts and their validity start.
        """
        if not query or not query.strip():
            return ToolResult(success=False, output="", error="Search query cannot be empty")

        limit = min(max(1, int(limit)), MAX_SEARCH_LIMIT)

        try:
            facts = await self.client.search(query, limit)
        except GraphClientError as e:
            return ToolResult(
                success=False,
                output="",
                error=f"Graphiti search failed: {e}",
            )

        if not facts:
            return ToolResult(
                success=True,
                output="No relevant facts found in the knowledge graph.",
                details={"count": 0},
            )

        text = "\n".join(
            f"{i}. **{f.name}**: {f.fact} [{f.valid_at or 'ongoing'}]"
            for i, f in enumerate(facts, 1)
        )

        return ToolResult(
            success=True,
            output=f"Found {len(facts)} facts:\n\n{text}",
            details={
                "count": len(facts),
                "facts": [
                    {"uuid": f.uuid, "name": f.name, "fact": f.fact, "valid_at": f.valid_at}
                    for f in facts
                ],
            },
        )


class GraphIngestTool(Tool):
    """Tool for manually adding content to the knowledge graph."""

    def __init__(self, client: GraphClient, role: str = "agent") -> None:
        """Initialize the ingest tool.

        Args:
            client: Graph client used for ingestion.
            role: Speaker role attached to ingested messages.
        """
        self.client = client
        self.role = role

    @property
    def name(self) -> str:
        return "graphiti_ingest"

    @property
    def label(self) -> str:
        return "Graphiti Ingest"

    @property
    def description(self) -> str:
        return (
            "Manually ingest information into the knowledge graph. "
            "Use for important facts, decisions, or context that should be remembered long-term."
        )

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "content": {
                    "type": "string",
                    "description": "Content to ingest (rich natural language)",
                },
                "name": {
                    "type": "string",
                    "description": "Episode name/label",
                },
                "source": {
                    "type": "string",
                    "description": "Source description (default: manual)",
                },
            },
            "required": ["content"],
        }

    async def execute(
        self,
        content: str = "",
        name: str | None = None,
        source: str = "manual",
        **kwargs: Any,
    ) -> ToolResult:
        """Submit content as one episode."""
        if not content or not content.strip():
            return ToolResult(success=False, output="", error="'content' is required")

        now = datetime.now(timezone.utc)
        message = Message(
            content=content,
            role_type="system",
            role=self.role,
            name=name or f"manual-{int(now.timestamp() * 1000)}",
            timestamp=now.isoformat(),
            source_description=f"agent: {source}",
        )

        try:
            result = await self.client.ingest([message])
        except GraphClientError as e:
            return ToolResult(
                success=False,
                output="",
                error=f"Graphiti ingest failed: {e}",
            )

        preview = content[:PREVIEW_CHARS]
        if len(content) > PREVIEW_CHARS:
            preview += "..."

        return ToolResult(
            success=True,
            output=f'Ingested into knowledge graph: "{preview}"',
            details=result.to_dict(),
        )
