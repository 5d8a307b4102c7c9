"""Auto-recall: inject relevant facts before a turn runs."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from ..content import contains_marker
from ..events import BeforeAgentStartEvent
from .gate import HealthGate, contain

if TYPE_CHECKING:
    from ..client import GraphClient
    from ..config import PluginConfig
    from ..logging import EventLog
    from ..models import Fact

logger = logging.getLogger(__name__)


def format_recall_context(facts: list[Fact]) -> str:
    """Format facts as a block to prepend to the agent's context.

    Args:
        facts: Facts in the order the server returned them.

    Returns:
        A ``<graphiti-context>`` block, or empty string if no facts.
    """
    if not facts:
        return ""

    lines = [f"- **{fact.name}**: {fact.fact}" for fact in facts]
    content = "\n".join(lines)

    return (
        "<graphiti-context>\n"
        "Relevant knowledge graph facts (auto-recalled):\n"
        f"{content}\n"
        "</graphiti-context>"
    )


class RecallPipeline:
    """Decides whether a prompt warrants a graph search and formats the hits."""

    name = "recall"

    def __init__(
        self,
        config: PluginConfig,
        client: GraphClient,
        event_log: EventLog | None = None,
    ) -> None:
        self.config = config
        self.client = client
        self.event_log = event_log
        self.gate = HealthGate(client, event_log)

    def skip_reason(self, prompt: str | None) -> str | None:
        """Why a prompt is ineligible for recall, or None if it is eligible.

        Only the local checks are made here; the health gate comes after.
        """
        if not self.config.auto_recall:
            return "disabled"
        if not prompt or len(prompt) < self.config.min_prompt_length:
            return "short_prompt"
        if contains_marker(prompt, self.config.recall_skip_markers):
            return "skip_marker"
        return None

    async def run(self, event: BeforeAgentStartEvent) -> str | None:
        """Recall facts for a prompt. May raise; see ``__call__``."""
        reason = self.skip_reason(event.prompt)
        if reason is not None:
            logger.debug("graphiti: recall skipped (%s)", reason)
            if self.event_log:
                self.event_log.log_skip(self.name, reason)
            return None

        if not await self.gate.check(self.name):
            return None

        start = time.monotonic()
        facts = await self.client.search(event.prompt, self.config.recall_max_facts)
        if not facts:
            if self.event_log:
                self.event_log.log_skip(self.name, "no_facts")
            return None

        logger.info("graphiti: injecting %d facts into context", len(facts))
        if self.event_log:
            self.event_log.log_recall(
                len(facts), duration_ms=(time.monotonic() - start) * 1000
            )
        return format_recall_context(facts)

    async def __call__(self, event: BeforeAgentStartEvent) -> str | None:
        """Hook entry point: recall failures never block the turn."""
        return await contain(self.name, self.run(event), self.event_log)
