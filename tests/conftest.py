"""Shared fixtures: a stub Graphiti server behind an httpx mock transport."""

import json
from typing import Any

import httpx
import pytest

from graphiti_memory.client import GraphClient
from graphiti_memory.config import PluginConfig

BASE_URL = "http://graphiti.test"
GROUP_ID = "test-group"

SAMPLE_FACTS: list[dict[str, Any]] = [
    {
        "uuid": "fact-001",
        "name": "WORKS_AT",
        "fact": "Alice works at Acme Corp",
        "valid_at": "2024-01-15T10:30:00+00:00",
        "invalid_at": None,
        "created_at": "2024-01-15T10:30:00+00:00",
        "expired_at": None,
    },
    {
        "uuid": "fact-002",
        "name": "PREFERS",
        "fact": "User prefers dark mode",
        "valid_at": None,
        "invalid_at": None,
        "created_at": "2024-02-01T00:00:00+00:00",
        "expired_at": None,
    },
]

SAMPLE_EPISODES: list[dict[str, Any]] = [
    {
        "uuid": "ep-001",
        "name": "session-reset-1700000000000",
        "group_id": GROUP_ID,
        "labels": [],
        "created_at": "2024-01-15T10:30:00+00:00",
        "source": "message",
        "source_description": "session reset",
        "content": "user: Hello",
        "valid_at": "2024-01-15T10:30:00+00:00",
        "entity_edges": ["fact-001"],
    },
]


class StubGraphServer:
    """In-process stand-in for the Graphiti FastAPI server.

    Records every request; behaviour is tweaked through attributes.
    """

    def __init__(self) -> None:
        self.healthy = True
        self.facts: list[dict[str, Any]] = list(SAMPLE_FACTS)
        self.search_status = 200
        self.ingest_status = 202
        self.ingest_body: Any = {
            "message": "Messages added to processing queue",
            "success": True,
        }
        self.episodes: Any = list(SAMPLE_EPISODES)
        self.episodes_status = 200
        self.error: str | None = None  # "connect" or "timeout"
        self.requests: list[httpx.Request] = []

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if self.error == "connect":
            raise httpx.ConnectError("Connection refused", request=request)
        if self.error == "timeout":
            raise httpx.ReadTimeout("timed out", request=request)

        path = request.url.path
        method = request.method

        if method == "GET" and path == "/healthcheck":
            if not self.healthy:
                return httpx.Response(503)
            return httpx.Response(200, json={"status": "healthy"})

        if method == "POST" and path == "/search":
            if self.search_status != 200:
                return httpx.Response(self.search_status, json={"detail": "search error"})
            return httpx.Response(200, json={"facts": self.facts})

        if method == "POST" and path == "/get-memory":
            return httpx.Response(200, json={"facts": self.facts})

        if method == "POST" and path == "/messages":
            return httpx.Response(self.ingest_status, json=self.ingest_body)

        if method == "GET" and path.startswith("/episodes/"):
            if self.episodes_status != 200:
                return httpx.Response(self.episodes_status, json={"detail": "error"})
            return httpx.Response(200, json=self.episodes)

        return httpx.Response(404, json={"detail": "Not Found"})

    def calls(self, path: str) -> list[httpx.Request]:
        """Requests received for a path (query string ignored)."""
        return [r for r in self.requests if r.url.path == path]

    def last_json(self, path: str) -> Any:
        """Decoded body of the last request to a path, None if none."""
        calls = self.calls(path)
        if not calls:
            return None
        return json.loads(calls[-1].content)


@pytest.fixture
def server() -> StubGraphServer:
    return StubGraphServer()


@pytest.fixture
def client(server: StubGraphServer) -> GraphClient:
    return GraphClient(BASE_URL, GROUP_ID, transport=server.transport)


@pytest.fixture
def config() -> PluginConfig:
    """Config with both pipelines enabled."""
    return PluginConfig(url=BASE_URL, group_id=GROUP_ID, auto_recall=True, auto_capture=True)
