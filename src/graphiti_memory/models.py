"""Data models for the knowledge graph memory."""

from dataclasses import dataclass, field
from typing import Any

ROLE_TYPES = ("user", "assistant", "system")


def _edges(value: Any) -> tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(str(edge) for edge in value)


@dataclass(frozen=True)
class Fact:
    """A relationship extracted by the graph service.

    Attributes:
        uuid: Edge identifier assigned by the service.
        name: Relationship label (e.g. 'WORKS_AT').
        fact: Natural-language statement of the relationship.
        created_at: ISO timestamp when the service created it.
        valid_at: Start of the validity interval, None if unknown.
        invalid_at: End of the validity interval, None while ongoing.
        expired_at: ISO timestamp when superseded, None if current.
    """

    uuid: str
    name: str
    fact: str
    created_at: str | None = None
    valid_at: str | None = None
    invalid_at: str | None = None
    expired_at: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Fact":
        return cls(
            uuid=str(data.get("uuid", "")),
            name=str(data.get("name", "")),
            fact=str(data.get("fact", "")),
            created_at=data.get("created_at"),
            valid_at=data.get("valid_at"),
            invalid_at=data.get("invalid_at"),
            expired_at=data.get("expired_at"),
        )


@dataclass(frozen=True)
class Episode:
    """One unit of raw content the service has stored or queued."""

    uuid: str
    name: str
    group_id: str
    content: str
    source: str = ""
    source_description: str = ""
    created_at: str | None = None
    valid_at: str | None = None
    entity_edges: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Episode":
        return cls(
            uuid=str(data.get("uuid", "")),
            name=str(data.get("name", "")),
            group_id=str(data.get("group_id", "")),
            content=str(data.get("content", "")),
            source=str(data.get("source", "")),
            source_description=str(data.get("source_description", "")),
            created_at=data.get("created_at"),
            valid_at=data.get("valid_at"),
            entity_edges=_edges(data.get("entity_edges")),
        )


@dataclass(frozen=True)
class Message:
    """An outbound message submitted for extraction.

    The server has no default for ``role`` and rejects messages without it,
    so an empty role is refused here instead of being filled in.
    """

    content: str
    role_type: str
    role: str
    name: str | None = None
    timestamp: str | None = None
    source_description: str | None = None

    def __post_init__(self) -> None:
        if self.role_type not in ROLE_TYPES:
            raise ValueError(
                f"role_type must be one of {', '.join(ROLE_TYPES)}, got {self.role_type!r}"
            )
        if not self.role:
            raise ValueError("Message role is required")

    def to_dict(self) -> dict[str, Any]:
        """Convert to the wire shape, excluding unset optional fields."""
        data: dict[str, Any] = {
            "content": self.content,
            "role_type": self.role_type,
            "role": self.role,
        }
        if self.name is not None:
            data["name"] = self.name
        if self.timestamp is not None:
            data["timestamp"] = self.timestamp
        if self.source_description is not None:
            data["source_description"] = self.source_description
        return data


@dataclass(frozen=True)
class IngestResult:
    """Acknowledgement returned by the ingest endpoint."""

    success: bool
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"success": self.success, "message": self.message}
