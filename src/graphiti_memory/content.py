"""Conversation content normalization and filtering helpers.

Hosts deliver message content either as a plain string or as a list of typed
blocks (``{"type": "text", "text": ...}``, ``{"type": "image", ...}``, ...).
Both shapes are parsed into a small tagged union and flattened into
``TextTurn`` pairs that the capture pipeline consumes.
"""

import string
from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence


@dataclass(frozen=True)
class PlainText:
    """Content given as a single string."""

    text: str


@dataclass(frozen=True)
class ContentBlock:
    """One typed block of structured content."""

    kind: str
    text: str | None = None


@dataclass(frozen=True)
class Blocks:
    """Content given as a sequence of typed blocks."""

    blocks: tuple[ContentBlock, ...] = field(default_factory=tuple)


Content = PlainText | Blocks


@dataclass(frozen=True)
class Turn:
    """A conversational turn as delivered by the host."""

    role: str
    content: Content


@dataclass(frozen=True)
class TextTurn:
    """A turn reduced to its role and plain text."""

    role: str
    text: str


def parse_content(raw: Any) -> Content:
    """Build the tagged content union from host content.

    Strings become ``PlainText``; lists become ``Blocks`` with malformed
    entries skipped; anything else becomes empty ``Blocks``.
    """
    if isinstance(raw, str):
        return PlainText(raw)

    blocks: list[ContentBlock] = []
    if isinstance(raw, (list, tuple)):
        for item in raw:
            if not isinstance(item, dict) or not isinstance(item.get("type"), str):
                continue
            text = item.get("text")
            blocks.append(ContentBlock(kind=item["type"], text=text if isinstance(text, str) else None))
    return Blocks(tuple(blocks))


def content_text(content: Content) -> str:
    """Plain text of a content value. Only ``text`` blocks contribute."""
    if isinstance(content, PlainText):
        return content.text
    return "\n".join(
        block.text for block in content.blocks if block.kind == "text" and block.text
    )


def parse_turns(raw_messages: Iterable[Any] | None) -> list[Turn]:
    """Parse host messages into turns, skipping entries that are not mappings."""
    turns: list[Turn] = []
    for msg in raw_messages or []:
        if not isinstance(msg, dict):
            continue
        role = msg.get("role")
        if not isinstance(role, str):
            continue
        turns.append(Turn(role=role, content=parse_content(msg.get("content"))))
    return turns


def normalize_turns(
    raw_messages: Iterable[Any] | None,
    roles: Sequence[str] = ("user", "assistant"),
) -> list[TextTurn]:
    """Flatten host messages into ``(role, text)`` pairs.

    Args:
        raw_messages: Messages as delivered by the host.
        roles: Roles to keep; system and tool turns are dropped by default.

    Returns:
        Turns with non-empty text, in conversation order.
    """
    result: list[TextTurn] = []
    for turn in parse_turns(raw_messages):
        if turn.role not in roles:
            continue
        text = content_text(turn.content)
        if text.strip():
            result.append(TextTurn(role=turn.role, text=text))
    return result


def contains_marker(text: str, markers: Iterable[str]) -> bool:
    """True if any marker occurs in text (plain substring test)."""
    return any(marker and marker in text for marker in markers)


_ACK_STRIP = string.whitespace + string.punctuation


def is_acknowledgement(text: str, phrases: Iterable[str]) -> bool:
    """True if the whole text is just one of the acknowledgement phrases."""
    normalized = text.strip(_ACK_STRIP).lower()
    if not normalized:
        return True
    return normalized in {p.strip(_ACK_STRIP).lower() for p in phrases}
