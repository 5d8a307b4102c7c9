"""Health gate and containment boundary shared by the pipelines.

Recall and capture are best-effort enrichment: when the server is down or a
call fails, the conversation carries on as if the plugin were absent.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Awaitable, TypeVar

if TYPE_CHECKING:
    from ..client import GraphClient
    from ..logging import EventLog

logger = logging.getLogger(__name__)

T = TypeVar("T")


class HealthGate:
    """Uncached liveness check consulted before any remote work."""

    def __init__(self, client: GraphClient, event_log: EventLog | None = None) -> None:
        self.client = client
        self.event_log = event_log

    async def check(self, pipeline: str, trigger: str | None = None) -> bool:
        """Return True if the server is healthy.

        Logs a warning and records a skip when it is not.
        """
        if await self.client.healthy():
            return True

        logger.warning("graphiti: server unhealthy, skipping %s", pipeline)
        if self.event_log:
            self.event_log.log_skip(pipeline, "unhealthy", trigger=trigger)
        return False


async def contain(
    pipeline: str,
    body: Awaitable[T],
    event_log: EventLog | None = None,
) -> T | None:
    """Await a pipeline body, turning any failure into a logged no-op.

    Args:
        pipeline: Name used in diagnostics ('recall', 'capture').
        body: The pipeline coroutine.
        event_log: Optional event log that records the failure.

    Returns:
        The body's result, or None if it raised.
    """
    try:
        return await body
    except Exception as e:
        logger.warning("graphiti: %s failed: %s", pipeline, e)
        if event_log:
            event_log.log_failure(pipeline, str(e))
        return None
