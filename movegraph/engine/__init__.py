"""Layout, culling and camera engine for move-tree graphs."""

from .graph import GameGraph
from .scheduler import Debouncer, ManualScheduler
from .types import (
    Camera,
    EdgeDescriptor,
    EngineState,
    GraphSettings,
    NodeClick,
    NodeDescriptor,
    RenderPass,
)

__all__ = [
    "Camera",
    "Debouncer",
    "EdgeDescriptor",
    "EngineState",
    "GameGraph",
    "GraphSettings",
    "ManualScheduler",
    "NodeClick",
    "NodeDescriptor",
    "RenderPass",
]
