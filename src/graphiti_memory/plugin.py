"""Graphiti memory plugin: wires config, client, tools and lifecycle hooks."""

from __future__ import annotations

import logging
from typing import Any

from .client import GraphClient
from .config import PluginConfig
from .events import EventKind, HookRegistry
from .logging import EventLog
from .pipelines import COMPACTION, RESET, CapturePipeline, RecallPipeline
from .tools import GraphIngestTool, GraphSearchTool, ToolRegistry, ToolResult

logger = logging.getLogger(__name__)


class GraphitiPlugin:
    """Temporal knowledge graph memory for an agent host.

    Provides:
    - graphiti_search / graphiti_ingest tools
    - auto-recall before each turn (when ``auto_recall`` is on)
    - auto-capture before compaction and reset (when ``auto_capture`` is on)
    - a status command and a start/stop service lifecycle

    The host delivers lifecycle events through ``emit`` and tool calls
    through ``call_tool``.
    """

    id = "graphiti"
    name = "Graphiti Knowledge Graph"
    description = "Temporal knowledge graph for persistent agent memory"
    kind = "memory"

    def __init__(
        self,
        config: PluginConfig | None = None,
        client: GraphClient | None = None,
        event_log: EventLog | None = None,
    ) -> None:
        self.config = config or PluginConfig()
        self.client = client or GraphClient(
            self.config.url, self.config.group_id, token=self.config.token
        )
        if event_log is None and self.config.log_dir is not None:
            event_log = EventLog(self.config.log_dir)
        self.event_log = event_log

        self.tools = ToolRegistry()
        self.hooks = HookRegistry()
        self._register()

        logger.info(
            "graphiti: plugin registered (url: %s, group: %s)",
            self.config.url,
            self.config.group_id,
        )

    def _register(self) -> None:
        self.tools.register(GraphSearchTool(self.client))
        self.tools.register(GraphIngestTool(self.client, role=self.config.ingest_role))

        if self.config.auto_recall:
            self.hooks.on(
                EventKind.BEFORE_AGENT_START,
                RecallPipeline(self.config, self.client, self.event_log),
            )

        if self.config.auto_capture:
            self.hooks.on(
                EventKind.BEFORE_COMPACTION,
                CapturePipeline(self.config, self.client, COMPACTION, self.event_log),
            )
            self.hooks.on(
                EventKind.BEFORE_RESET,
                CapturePipeline(self.config, self.client, RESET, self.event_log),
            )

    async def emit(self, kind: EventKind | str, payload: dict[str, Any] | None = None) -> list[Any]:
        """Deliver a host lifecycle event to the registered hooks."""
        return await self.hooks.emit(EventKind(kind), payload)

    async def before_agent_start(self, payload: dict[str, Any] | None) -> dict[str, str] | None:
        """Return ``{"prependContext": ...}`` when facts were recalled."""
        results = await self.emit(EventKind.BEFORE_AGENT_START, payload)
        if not results:
            return None
        return {"prependContext": "\n\n".join(results)}

    async def call_tool(self, name: str, args: dict[str, Any]) -> ToolResult:
        """Run a tool on behalf of the agent."""
        return await self.tools.dispatch(name, args)

    async def status_text(self) -> str:
        """Reply for the /graphiti command."""
        if await self.client.healthy():
            return (
                f"✅ Graphiti healthy\n📍 {self.config.url}\n"
                f"🏷️ Group: {self.config.group_id}"
            )
        return f"❌ Graphiti unreachable at {self.config.url}"

    async def start(self) -> bool:
        """Service start: report server health."""
        ok = await self.client.healthy()
        logger.info(
            "graphiti: service started (healthy: %s, url: %s, group: %s)",
            ok,
            self.config.url,
            self.config.group_id,
        )
        if self.event_log:
            self.event_log.log("service_start", healthy=ok)
        return ok

    def stop(self) -> None:
        """Service stop."""
        logger.info("graphiti: service stopped")
        if self.event_log:
            self.event_log.log("service_stop")
