"""Plugin configuration.

The configuration is built once at startup, from the host's plugin config,
a JSON file or the environment, and passed explicitly to the client, the
pipelines and the tools. Nothing mutates it afterwards.
"""

import json
import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".graphiti-memory" / "config.json"

DEFAULT_URL = "http://localhost:8100"
DEFAULT_GROUP_ID = "default"

# Operational prompts that should never trigger recall
DEFAULT_RECALL_SKIP_MARKERS = (
    "HEARTBEAT",
    "Pre-compaction memory flush",
    "GatewayRestart",
    "boot check",
)

# Turns carrying these markers are host plumbing, not conversation
DEFAULT_CAPTURE_SKIP_MARKERS = (
    "HEARTBEAT_OK",
    "NO_REPLY",
    "Pre-compaction memory flush",
)

DEFAULT_ACKNOWLEDGEMENTS = (
    "ok",
    "okay",
    "k",
    "thanks",
    "thank you",
    "thx",
    "got it",
    "sure",
    "yes",
    "no",
    "done",
    "👍",
)

# camelCase plugin-config key -> PluginConfig field
_KEYS = {
    "url": "url",
    "groupId": "group_id",
    "token": "token",
    "autoRecall": "auto_recall",
    "autoCapture": "auto_capture",
    "recallMaxFacts": "recall_max_facts",
    "minPromptLength": "min_prompt_length",
    "captureRoles": "capture_roles",
    "recallSkipMarkers": "recall_skip_markers",
    "captureSkipMarkers": "capture_skip_markers",
    "acknowledgements": "acknowledgements",
    "ingestRole": "ingest_role",
    "logDir": "log_dir",
}

_LIST_FIELDS = {
    "capture_roles",
    "recall_skip_markers",
    "capture_skip_markers",
    "acknowledgements",
}


@dataclass(frozen=True)
class PluginConfig:
    """Configuration for the Graphiti memory plugin.

    Attributes:
        url: Base URL of the Graphiti server.
        group_id: Graph namespace used by every operation.
        token: Optional bearer token.
        auto_recall: Inject facts before each turn.
        auto_capture: Ingest conversation before compaction and reset.
        recall_max_facts: Facts requested per auto-recall.
        min_prompt_length: Shortest prompt that triggers recall.
        capture_roles: Roles whose turns are captured.
        recall_skip_markers: Prompt substrings that suppress recall.
        capture_skip_markers: Turn substrings that drop a turn from capture.
        acknowledgements: Bare replies dropped from capture.
        ingest_role: Role name used by the manual ingest tool.
        log_dir: Directory for the JSONL event log, None to disable it.
    """

    url: str = DEFAULT_URL
    group_id: str = DEFAULT_GROUP_ID
    token: str | None = None
    auto_recall: bool = False
    auto_capture: bool = True
    recall_max_facts: int = 1
    min_prompt_length: int = 10
    capture_roles: tuple[str, ...] = ("user", "assistant")
    recall_skip_markers: tuple[str, ...] = DEFAULT_RECALL_SKIP_MARKERS
    capture_skip_markers: tuple[str, ...] = DEFAULT_CAPTURE_SKIP_MARKERS
    acknowledgements: tuple[str, ...] = DEFAULT_ACKNOWLEDGEMENTS
    ingest_role: str = "agent"
    log_dir: Path | None = None

    def __post_init__(self) -> None:
        """Validate config."""
        if not self.url:
            raise ValueError("url is required")
        if not self.group_id:
            raise ValueError("group_id is required")
        if self.recall_max_facts < 1:
            raise ValueError("recall_max_facts must be at least 1")
        if self.min_prompt_length < 0:
            raise ValueError("min_prompt_length cannot be negative")
        if not self.ingest_role:
            raise ValueError("ingest_role is required")

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "PluginConfig":
        """Build a config from a host plugin-config mapping.

        Unknown keys are ignored with a warning; missing keys keep their
        defaults.
        """
        kwargs: dict[str, Any] = {}
        for key, value in (data or {}).items():
            name = _KEYS.get(key)
            if name is None:
                logger.warning("Ignoring unknown config key: %s", key)
                continue
            if value is None:
                continue
            if name in _LIST_FIELDS:
                if not isinstance(value, (list, tuple)):
                    raise ValueError(f"{key} must be a list")
                value = tuple(str(v) for v in value)
            elif name == "log_dir":
                value = Path(value).expanduser()
            kwargs[name] = value
        return cls(**kwargs)


def load_config(config_path: Path | None = None) -> PluginConfig:
    """Load PluginConfig from a JSON file.

    The file holds the plugin config under a ``graphiti`` key:
    ```json
    {
      "graphiti": {
        "url": "http://localhost:8100",
        "groupId": "my-agent",
        "autoRecall": true,
        "recallMaxFacts": 3
      }
    }
    ```

    A missing or unreadable file yields the defaults.
    """
    path = config_path or DEFAULT_CONFIG_PATH

    if not path.exists():
        logger.debug("No config file at %s, using defaults", path)
        return PluginConfig()

    try:
        with open(path, "r") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        logger.warning("Invalid JSON in %s: %s. Using defaults.", path, e)
        return PluginConfig()
    except OSError as e:
        logger.warning("Cannot read %s: %s. Using defaults.", path, e)
        return PluginConfig()

    if not isinstance(data, dict):
        logger.warning("Config in %s is not an object. Using defaults.", path)
        return PluginConfig()

    return PluginConfig.from_dict(data.get("graphiti", {}))


def config_from_env(base: PluginConfig | None = None) -> PluginConfig:
    """Overlay GRAPHITI_URL, GRAPHITI_GROUP_ID and GRAPHITI_TOKEN on a config."""
    base = base or PluginConfig()
    return replace(
        base,
        url=os.getenv("GRAPHITI_URL") or base.url,
        group_id=os.getenv("GRAPHITI_GROUP_ID") or base.group_id,
        token=os.getenv("GRAPHITI_TOKEN") or base.token,
    )
