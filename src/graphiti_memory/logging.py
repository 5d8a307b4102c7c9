"""JSONL event log for pipeline observability."""

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any


@dataclass
class LogEntry:
    """A single log entry."""

    timestamp: str
    event: str
    pipeline: str | None = None
    trigger: str | None = None
    reason: str | None = None
    count: int | None = None
    chars: int | None = None
    duration_ms: float | None = None
    error: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict, excluding None values."""
        data = asdict(self)
        return {k: v for k, v in data.items() if v is not None and v != {} and v != []}


class EventLog:
    """Writes recall/capture outcomes as JSON lines.

    One instance is created at startup and handed to the plugin; the
    pipelines call the ``log_*`` helpers after each decision.
    """

    def __init__(
        self,
        log_dir: str | Path | None = None,
        filename: str = "events.jsonl",
        max_size_mb: float = 10.0,
    ) -> None:
        if log_dir is None:
            log_dir = Path.home() / ".graphiti-memory" / "logs"
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.filename = filename
        self.max_size_bytes = int(max_size_mb * 1024 * 1024)

    @property
    def log_path(self) -> Path:
        """Current log file path."""
        return self.log_dir / self.filename

    def _rotate_if_needed(self) -> None:
        """Rotate log file if it exceeds max size."""
        if not self.log_path.exists():
            return

        if self.log_path.stat().st_size >= self.max_size_bytes:
            timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S_%f")
            rotated_name = f"{self.log_path.stem}_{timestamp}.jsonl"
            self.log_path.rename(self.log_dir / rotated_name)

    def _write(self, entry: LogEntry) -> None:
        self._rotate_if_needed()

        with open(self.log_path, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry.to_dict(), ensure_ascii=False) + "\n")

    def log(
        self,
        event: str,
        *,
        pipeline: str | None = None,
        trigger: str | None = None,
        reason: str | None = None,
        count: int | None = None,
        chars: int | None = None,
        duration_ms: float | None = None,
        error: str | None = None,
        **extra: Any,
    ) -> None:
        """Log an event."""
        entry = LogEntry(
            timestamp=datetime.now(timezone.utc).isoformat(),
            event=event,
            pipeline=pipeline,
            trigger=trigger,
            reason=reason,
            count=count,
            chars=chars,
            duration_ms=duration_ms,
            error=error,
            extra=extra if extra else {},
        )
        self._write(entry)

    def log_recall(self, count: int, *, duration_ms: float | None = None) -> None:
        """Log facts injected before a turn."""
        self.log("recall_injected", pipeline="recall", count=count, duration_ms=duration_ms)

    def log_capture(
        self,
        trigger: str,
        count: int,
        chars: int,
        *,
        duration_ms: float | None = None,
    ) -> None:
        """Log an episode submitted for extraction."""
        self.log(
            "capture_submitted",
            pipeline="capture",
            trigger=trigger,
            count=count,
            chars=chars,
            duration_ms=duration_ms,
        )

    def log_skip(self, pipeline: str, reason: str, *, trigger: str | None = None) -> None:
        """Log a pipeline declining to act."""
        self.log(f"{pipeline}_skipped", pipeline=pipeline, trigger=trigger, reason=reason)

    def log_failure(self, pipeline: str, error: str) -> None:
        """Log a contained pipeline failure."""
        self.log("pipeline_failed", pipeline=pipeline, error=error)
