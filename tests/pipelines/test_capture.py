"""Tests for the auto-capture pipeline."""

from dataclasses import replace

import pytest

from graphiti_memory.client import GraphClient
from graphiti_memory.config import PluginConfig
from graphiti_memory.events import BeforeCompactionEvent, BeforeResetEvent
from graphiti_memory.pipelines.capture import (
    COMPACTION,
    MAX_EPISODE_CHARS,
    RESET,
    CapturePipeline,
    build_episode,
    extract_lines,
)

CONVERSATION = [
    {"role": "user", "content": "What is the architecture of our system?"},
    {"role": "assistant", "content": "The system uses a microservices architecture with Neo4j."},
    {"role": "user", "content": "Tell me more about the graph database."},
    {"role": "assistant", "content": "Neo4j stores entities and relationships as a knowledge graph."},
]


def numbered_turns(n: int) -> list[dict]:
    roles = ("user", "assistant")
    return [{"role": roles[i % 2], "content": f"turn number {i:02d} with some text"} for i in range(n)]


@pytest.fixture
def compaction(config: PluginConfig, client: GraphClient) -> CapturePipeline:
    return CapturePipeline(config, client, COMPACTION)


@pytest.fixture
def reset(config: PluginConfig, client: GraphClient) -> CapturePipeline:
    return CapturePipeline(config, client, RESET)


class TestCompactionCapture:
    """before_compaction capture."""

    @pytest.mark.asyncio
    async def test_ingests_one_episode(self, compaction: CapturePipeline, server):
        await compaction(BeforeCompactionEvent(messages=CONVERSATION, message_count=4))

        assert len(server.calls("/messages")) == 1
        body = server.last_json("/messages")
        assert body["group_id"] == "test-group"
        assert len(body["messages"]) == 1

        message = body["messages"][0]
        assert message["role_type"] == "user"
        assert message["role"] == "conversation"
        assert message["source_description"] == "pre-compaction conversation"
        assert message["name"].startswith("compaction-")
        assert "timestamp" in message

    @pytest.mark.asyncio
    async def test_keeps_all_turns_in_order(self, compaction: CapturePipeline, server):
        await compaction(BeforeCompactionEvent(messages=CONVERSATION))

        content = server.last_json("/messages")["messages"][0]["content"]
        expected = "\n\n".join(f"{m['role']}: {m['content']}" for m in CONVERSATION)
        assert content == expected

    @pytest.mark.asyncio
    async def test_skips_fewer_than_four_turns(self, compaction: CapturePipeline, server):
        await compaction(
            BeforeCompactionEvent(
                messages=[
                    {"role": "user", "content": "Hello"},
                    {"role": "assistant", "content": "Hi!"},
                ],
                message_count=2,
            )
        )

        assert server.requests == []

    @pytest.mark.asyncio
    async def test_skips_when_unhealthy(self, compaction: CapturePipeline, server):
        server.healthy = False

        await compaction(BeforeCompactionEvent(messages=CONVERSATION))

        assert len(server.calls("/healthcheck")) == 1
        assert server.calls("/messages") == []

    @pytest.mark.asyncio
    async def test_handles_content_blocks(self, compaction: CapturePipeline, server):
        await compaction(
            BeforeCompactionEvent(
                messages=[
                    {"role": "user", "content": [{"type": "text", "text": "What about the project architecture?"}]},
                    {
                        "role": "assistant",
                        "content": [
                            {"type": "text", "text": "The architecture uses event-driven patterns."},
                            {"type": "image", "source": "..."},
                        ],
                    },
                    {"role": "user", "content": [{"type": "text", "text": "Can you elaborate on that?"}]},
                    {
                        "role": "assistant",
                        "content": [{"type": "text", "text": "We use message queues between services."}],
                    },
                ]
            )
        )

        content = server.last_json("/messages")["messages"][0]["content"]
        assert "architecture" in content
        assert "event-driven" in content
        assert "image" not in content

    @pytest.mark.asyncio
    async def test_truncates_each_turn_to_2000(self, compaction: CapturePipeline, server):
        messages = list(CONVERSATION)
        messages[0] = {"role": "user", "content": "a" * 2500}

        await compaction(BeforeCompactionEvent(messages=messages))

        content = server.last_json("/messages")["messages"][0]["content"]
        first_line = content.split("\n\n")[0]
        assert first_line == "user: " + "a" * 2000

    @pytest.mark.asyncio
    async def test_truncates_episode_to_budget(self, compaction: CapturePipeline, server):
        messages = [{"role": "user", "content": "b" * 2000} for _ in range(10)]

        await compaction(BeforeCompactionEvent(messages=messages))

        content = server.last_json("/messages")["messages"][0]["content"]
        assert len(content) == MAX_EPISODE_CHARS

    @pytest.mark.asyncio
    async def test_skips_when_fewer_than_two_usable_lines(self, compaction: CapturePipeline, server):
        messages = [
            {"role": "system", "content": "You are a helpful assistant."},
            {"role": "tool", "content": "ls output"},
            {"role": "user", "content": "Please summarize the repository layout."},
            {"role": "assistant", "content": [{"type": "tool_use", "name": "bash"}]},
        ]

        await compaction(BeforeCompactionEvent(messages=messages))

        assert server.calls("/messages") == []

    @pytest.mark.asyncio
    async def test_failure_is_contained(self, compaction: CapturePipeline, server):
        server.ingest_status = 500

        # Must not raise
        await compaction(BeforeCompactionEvent(messages=CONVERSATION))

        assert len(server.calls("/messages")) == 1


class TestResetCapture:
    """before_reset capture."""

    @pytest.mark.asyncio
    async def test_ingests_with_reset_source(self, reset: CapturePipeline, server):
        await reset(
            BeforeResetEvent(
                messages=[
                    {"role": "user", "content": "Let me tell you about our deployment setup."},
                    {"role": "assistant", "content": "I understand you want to discuss deployment."},
                    {"role": "user", "content": "We use Kubernetes with ArgoCD for GitOps."},
                    {"role": "assistant", "content": "That is a solid GitOps workflow."},
                ]
            )
        )

        message = server.last_json("/messages")["messages"][0]
        assert "deployment" in message["content"]
        assert "Kubernetes" in message["content"]
        assert message["source_description"] == "session reset"
        assert message["name"].startswith("session-reset-")

    @pytest.mark.asyncio
    async def test_keeps_most_recent_twenty(self, reset: CapturePipeline, server):
        await reset(BeforeResetEvent(messages=numbered_turns(25)))

        content = server.last_json("/messages")["messages"][0]["content"]
        lines = content.split("\n\n")
        assert len(lines) == 20
        assert "turn number 04" not in content
        assert lines[0].endswith("turn number 05 with some text")
        assert lines[-1].endswith("turn number 24 with some text")

    @pytest.mark.asyncio
    async def test_truncates_each_turn_to_1000(self, reset: CapturePipeline, server):
        messages = numbered_turns(4)
        messages[1] = {"role": "assistant", "content": "c" * 1500}

        await reset(BeforeResetEvent(messages=messages))

        lines = server.last_json("/messages")["messages"][0]["content"].split("\n\n")
        assert lines[1] == "assistant: " + "c" * 1000

    @pytest.mark.asyncio
    async def test_skips_fewer_than_four_turns(self, reset: CapturePipeline, server):
        await reset(
            BeforeResetEvent(
                messages=[
                    {"role": "user", "content": "Short session"},
                    {"role": "assistant", "content": "Indeed."},
                ]
            )
        )

        assert server.requests == []

    @pytest.mark.asyncio
    async def test_skips_without_messages(self, reset: CapturePipeline, server):
        await reset(BeforeResetEvent.from_payload({}))
        assert server.requests == []


class TestExtractLines:
    """Filtering policy applied while flattening turns."""

    def test_drops_plumbing_markers(self, config: PluginConfig):
        messages = [
            {"role": "user", "content": "Deploy the staging cluster please."},
            {"role": "assistant", "content": "HEARTBEAT_OK"},
            {"role": "assistant", "content": "NO_REPLY"},
            {"role": "assistant", "content": "Staging is deployed."},
        ]

        lines = extract_lines(messages, COMPACTION, config)

        assert lines == [
            "user: Deploy the staging cluster please.",
            "assistant: Staging is deployed.",
        ]

    def test_drops_bare_acknowledgements(self, config: PluginConfig):
        messages = [
            {"role": "user", "content": "Thanks!"},
            {"role": "assistant", "content": "ok"},
            {"role": "user", "content": "Thanks for the migration plan, it looks right."},
        ]

        lines = extract_lines(messages, COMPACTION, config)

        assert lines == ["user: Thanks for the migration plan, it looks right."]

    def test_acknowledgement_policy_is_configurable(self, config: PluginConfig):
        messages = [{"role": "user", "content": "ok"}]
        lines = extract_lines(messages, COMPACTION, replace(config, acknowledgements=()))
        assert lines == ["user: ok"]

    def test_capture_roles(self, config: PluginConfig):
        messages = [
            {"role": "user", "content": "question about billing"},
            {"role": "assistant", "content": "answer about billing"},
        ]
        lines = extract_lines(messages, COMPACTION, replace(config, capture_roles=("user",)))
        assert lines == ["user: question about billing"]

    def test_build_episode_window_applies_only_to_reset(self):
        lines = [f"user: line {i}" for i in range(25)]
        assert build_episode(lines, COMPACTION).count("\n\n") == 24
        assert build_episode(lines, RESET).count("\n\n") == 19
