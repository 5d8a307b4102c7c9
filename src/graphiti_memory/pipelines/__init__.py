"""Recall and capture pipelines run from lifecycle hooks."""

from .capture import COMPACTION, RESET, CapturePipeline, CaptureTrigger, build_episode
from .gate import HealthGate, contain
from .recall import RecallPipeline, format_recall_context

__all__ = [
    "COMPACTION",
    "RESET",
    "CapturePipeline",
    "CaptureTrigger",
    "HealthGate",
    "RecallPipeline",
    "build_episode",
    "contain",
    "format_recall_context",
]
