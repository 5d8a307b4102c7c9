"""Typed lifecycle events and handler registration.

The host emits lifecycle events with loosely-typed payloads. Each event kind
has a fixed payload dataclass; handlers receive the parsed payload and return
an optional result (a context string for recall, nothing for capture).
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable


class EventKind(Enum):
    """Lifecycle events the plugin listens to."""

    BEFORE_AGENT_START = "before_agent_start"  # A turn is about to run
    BEFORE_COMPACTION = "before_compaction"  # History is about to be compacted
    BEFORE_RESET = "before_reset"  # Session is about to be discarded


@dataclass(frozen=True)
class BeforeAgentStartEvent:
    prompt: str | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any] | None) -> BeforeAgentStartEvent:
        prompt = (payload or {}).get("prompt")
        return cls(prompt=prompt if isinstance(prompt, str) else None)


@dataclass(frozen=True)
class BeforeCompactionEvent:
    messages: list[Any] = field(default_factory=list)
    message_count: int | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any] | None) -> BeforeCompactionEvent:
        payload = payload or {}
        messages = payload.get("messages")
        count = payload.get("messageCount")
        return cls(
            messages=list(messages) if isinstance(messages, list) else [],
            message_count=count if isinstance(count, int) else None,
        )


@dataclass(frozen=True)
class BeforeResetEvent:
    messages: list[Any] = field(default_factory=list)

    @classmethod
    def from_payload(cls, payload: dict[str, Any] | None) -> BeforeResetEvent:
        messages = (payload or {}).get("messages")
        return cls(messages=list(messages) if isinstance(messages, list) else [])


EVENT_TYPES: dict[EventKind, type] = {
    EventKind.BEFORE_AGENT_START: BeforeAgentStartEvent,
    EventKind.BEFORE_COMPACTION: BeforeCompactionEvent,
    EventKind.BEFORE_RESET: BeforeResetEvent,
}

EventHandler = Callable[[Any], Any]


def parse_event(kind: EventKind, payload: dict[str, Any] | None) -> Any:
    """Parse a raw host payload into the event dataclass for ``kind``."""
    return EVENT_TYPES[kind].from_payload(payload)


class HookRegistry:
    """Registry of lifecycle handlers keyed by event kind."""

    def __init__(self) -> None:
        self._handlers: dict[EventKind, list[EventHandler]] = {}

    def on(self, kind: EventKind, handler: EventHandler) -> None:
        """Register a handler for an event kind."""
        self._handlers.setdefault(kind, []).append(handler)

    def handlers(self, kind: EventKind) -> list[EventHandler]:
        """Handlers registered for a kind, in registration order."""
        return list(self._handlers.get(kind, []))

    def kinds(self) -> list[EventKind]:
        """Event kinds with at least one handler."""
        return [kind for kind, handlers in self._handlers.items() if handlers]

    async def emit(self, kind: EventKind, payload: dict[str, Any] | None = None) -> list[Any]:
        """Dispatch a raw payload to every handler of ``kind``.

        Returns:
            Results of the handlers that returned something other than None.
        """
        event = parse_event(kind, payload)
        results: list[Any] = []
        for handler in self.handlers(kind):
            result = handler(event)
            if inspect.isawaitable(result):
                result = await result
            if result is not None:
                results.append(result)
        return results
