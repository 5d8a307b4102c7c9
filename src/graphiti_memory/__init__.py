"""Long-term agent memory backed by a Graphiti temporal knowledge graph."""

from .client import GraphClient
from .config import PluginConfig, config_from_env, load_config
from .events import EventKind, HookRegistry
from .exceptions import GraphClientError, RemoteError, UnreachableError
from .models import Episode, Fact, IngestResult, Message
from .plugin import GraphitiPlugin

__all__ = [
    "Episode",
    "EventKind",
    "Fact",
    "GraphClient",
    "GraphClientError",
    "GraphitiPlugin",
    "HookRegistry",
    "IngestResult",
    "Message",
    "PluginConfig",
    "RemoteError",
    "UnreachableError",
    "config_from_env",
    "load_config",
]
