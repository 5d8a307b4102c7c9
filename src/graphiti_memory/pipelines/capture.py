"""Auto-capture: submit conversation for extraction before it is lost.

Two host events trigger capture: history compaction and session reset. Both
batch the conversation into a single episode; the caps bound the size of the
extraction job the server runs for it.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from ..content import contains_marker, is_acknowledgement, normalize_turns
from ..models import Message
from .gate import HealthGate, contain

if TYPE_CHECKING:
    from ..client import GraphClient
    from ..config import PluginConfig
    from ..logging import EventLog

logger = logging.getLogger(__name__)

MIN_TURNS = 4
MIN_LINES = 2
MAX_EPISODE_CHARS = 12_000


@dataclass(frozen=True)
class CaptureTrigger:
    """Per-trigger capture policy.

    Attributes:
        kind: Trigger name used in logs.
        episode_prefix: Prefix of the synthetic episode name.
        source_description: Tells the server which event produced the episode.
        max_turn_chars: Cap applied to each turn's text.
        max_lines: Keep only the most recent lines, None to keep all.
    """

    kind: str
    episode_prefix: str
    source_description: str
    max_turn_chars: int
    max_lines: int | None = None


COMPACTION = CaptureTrigger(
    kind="compaction",
    episode_prefix="compaction",
    source_description="pre-compaction conversation",
    max_turn_chars=2000,
)

RESET = CaptureTrigger(
    kind="reset",
    episode_prefix="session-reset",
    source_description="session reset",
    max_turn_chars=1000,
    max_lines=20,
)


def extract_lines(
    messages: list[Any],
    trigger: CaptureTrigger,
    config: PluginConfig,
) -> list[str]:
    """Flatten turns into ``"role: text"`` lines, dropping plumbing and acks."""
    lines = []
    for turn in normalize_turns(messages, config.capture_roles):
        if contains_marker(turn.text, config.capture_skip_markers):
            continue
        if is_acknowledgement(turn.text, config.acknowledgements):
            continue
        lines.append(f"{turn.role}: {turn.text[: trigger.max_turn_chars]}")
    return lines


def build_episode(lines: list[str], trigger: CaptureTrigger) -> str:
    """Join lines into one episode body within the outer size budget."""
    if trigger.max_lines is not None:
        lines = lines[-trigger.max_lines :]
    return "\n\n".join(lines)[:MAX_EPISODE_CHARS]


class CapturePipeline:
    """Batches a conversation into one episode and ingests it."""

    name = "capture"

    def __init__(
        self,
        config: PluginConfig,
        client: GraphClient,
        trigger: CaptureTrigger,
        event_log: EventLog | None = None,
    ) -> None:
        self.config = config
        self.client = client
        self.trigger = trigger
        self.event_log = event_log
        self.gate = HealthGate(client, event_log)

    def _skip(self, reason: str) -> None:
        logger.debug("graphiti: %s capture skipped (%s)", self.trigger.kind, reason)
        if self.event_log:
            self.event_log.log_skip(self.name, reason, trigger=self.trigger.kind)

    async def run(self, messages: list[Any] | None) -> None:
        """Capture a conversation. May raise; see ``__call__``."""
        messages = messages or []
        if len(messages) < MIN_TURNS:
            self._skip("too_few_turns")
            return

        if not await self.gate.check(self.name, self.trigger.kind):
            return

        lines = extract_lines(messages, self.trigger, self.config)
        if len(lines) < MIN_LINES:
            self._skip("too_few_lines")
            return

        episode = build_episode(lines, self.trigger)
        kept = min(len(lines), self.trigger.max_lines or len(lines))
        now = datetime.now(timezone.utc)

        start = time.monotonic()
        await self.client.ingest(
            [
                Message(
                    content=episode,
                    role_type="user",
                    role="conversation",
                    name=f"{self.trigger.episode_prefix}-{int(now.timestamp() * 1000)}",
                    timestamp=now.isoformat(),
                    source_description=self.trigger.source_description,
                )
            ]
        )

        logger.info(
            "graphiti: captured %d turns (%d chars) on %s",
            kept,
            len(episode),
            self.trigger.kind,
        )
        if self.event_log:
            self.event_log.log_capture(
                self.trigger.kind,
                kept,
                len(episode),
                duration_ms=(time.monotonic() - start) * 1000,
            )

    async def __call__(self, event: Any) -> None:
        """Hook entry point: capture failures never reach the host."""
        await contain(self.name, self.run(event.messages), self.event_log)
