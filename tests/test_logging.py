"""Tests for the JSONL event log."""

import json
import tempfile
from pathlib import Path

import pytest

from graphiti_memory.logging import EventLog, LogEntry


@pytest.fixture
def temp_log_dir():
    """Create a temporary directory for logs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def event_log(temp_log_dir: Path) -> EventLog:
    return EventLog(log_dir=temp_log_dir)


def read_entries(event_log: EventLog) -> list[dict]:
    with open(event_log.log_path) as f:
        return [json.loads(line) for line in f]


def test_log_entry_to_dict():
    """LogEntry excludes None values and empty extras."""
    entry = LogEntry(timestamp="2024-01-01T00:00:00Z", event="test")
    data = entry.to_dict()

    assert "timestamp" in data
    assert "event" in data
    assert "pipeline" not in data
    assert "extra" not in data


def test_log_creates_file(event_log: EventLog):
    event_log.log("test_event")
    assert event_log.log_path.exists()


def test_log_writes_jsonl(event_log: EventLog):
    event_log.log("event1", pipeline="recall")
    event_log.log("event2", pipeline="capture")

    entries = read_entries(event_log)

    assert len(entries) == 2
    assert entries[0]["event"] == "event1"
    assert entries[0]["pipeline"] == "recall"
    assert entries[1]["event"] == "event2"


def test_log_recall(event_log: EventLog):
    event_log.log_recall(3, duration_ms=12.5)

    entry = read_entries(event_log)[0]
    assert entry["event"] == "recall_injected"
    assert entry["count"] == 3
    assert entry["duration_ms"] == 12.5


def test_log_capture(event_log: EventLog):
    event_log.log_capture("reset", 20, 4000)

    entry = read_entries(event_log)[0]
    assert entry["event"] == "capture_submitted"
    assert entry["trigger"] == "reset"
    assert entry["count"] == 20
    assert entry["chars"] == 4000


def test_log_skip_and_failure(event_log: EventLog):
    event_log.log_skip("recall", "short_prompt")
    event_log.log_failure("capture", "boom")

    skip, failure = read_entries(event_log)
    assert skip["event"] == "recall_skipped"
    assert skip["reason"] == "short_prompt"
    assert failure["event"] == "pipeline_failed"
    assert failure["error"] == "boom"


def test_extra_fields(event_log: EventLog):
    event_log.log("service_start", healthy=True)
    assert read_entries(event_log)[0]["extra"] == {"healthy": True}


def test_rotation(temp_log_dir: Path):
    """Log file is rotated once it exceeds max size."""
    event_log = EventLog(log_dir=temp_log_dir, max_size_mb=0.0001)  # ~100 bytes

    for i in range(10):
        event_log.log("test_event", reason=f"reason {i}" * 5)

    log_files = list(temp_log_dir.glob("*.jsonl"))
    assert len(log_files) > 1
