"""Data types shared by the graph engine.

The engine never owns the move tree. It reads runs through the ``Run``
protocol below (satisfied by ``gametree.GameTree`` and by any host model
with the same attributes) and produces plain descriptor dataclasses that a
presentation layer turns into shapes.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Hashable, Protocol, Sequence

if TYPE_CHECKING:
    from .matrix import Matrix, PositionDict


class Run(Protocol):
    """One straight sequence of moves (a bone) in the move tree."""

    id: Hashable
    nodes: Sequence[Any]
    subtrees: Sequence[Run]
    current: int | None
    parent: Run | None


TreePosition = tuple[Any, int]  # (run, move index)
Vertex = tuple[float, float]

PRIMARY_BUTTON = 0

SHAPE_MOVE = "circle"
SHAPE_PASS = "square"
SHAPE_SETUP = "diamond"

DEFAULT_COMMENT_PROPERTIES = (
    "C",
    "N",
    "UC",
    "GW",
    "DM",
    "GB",
    "BM",
    "TE",
    "DO",
    "IT",
)

# dotted settings key -> GraphSettings attribute
_SETTING_KEYS = {
    "graph.grid_size": "grid_size",
    "graph.node_size": "node_size",
    "graph.delay": "delay",
    "graph.animation_duration": "animation_duration",
    "graph.edge_color": "edge_color",
    "graph.edge_inactive_color": "edge_inactive_color",
    "graph.edge_size": "edge_size",
    "graph.edge_inactive_size": "edge_inactive_size",
    "graph.node_color": "node_color",
    "graph.node_inactive_color": "node_inactive_color",
    "graph.node_active_color": "node_active_color",
    "graph.node_bookmark_color": "node_bookmark_color",
    "graph.node_comment_color": "node_comment_color",
    "sgf.comment_properties": "comment_properties",
}


@dataclass(frozen=True)
class GraphSettings:
    grid_size: int = 22
    node_size: int = 4
    delay: int = 100  # ms before recentering after a selection change
    animation_duration: int = 100
    edge_color: str = "#cccccc"
    edge_inactive_color: str = "#777777"
    edge_size: int = 2
    edge_inactive_size: int = 1
    node_color: str = "#eeeeee"
    node_inactive_color: str = "#777777"
    node_active_color: str = "#f76047"
    node_bookmark_color: str = "#c678dd"
    node_comment_color: str = "#6bb1ff"
    comment_properties: tuple[str, ...] = DEFAULT_COMMENT_PROPERTIES

    @staticmethod
    def from_dict(d: dict | None) -> GraphSettings:
        """Build settings from a flat dotted-key dict.

        Unknown keys are ignored and missing keys keep their defaults.
        """
        if not d:
            return GraphSettings()
        kwargs: dict[str, Any] = {}
        for key, attr in _SETTING_KEYS.items():
            if key in d:
                kwargs[attr] = d[key]
        if "comment_properties" in kwargs:
            kwargs["comment_properties"] = tuple(kwargs["comment_properties"])
        return GraphSettings(**kwargs)

    def to_dict(self) -> dict:
        d = {key: getattr(self, attr) for key, attr in _SETTING_KEYS.items()}
        d["sgf.comment_properties"] = list(self.comment_properties)
        return d


@dataclass(frozen=True)
class Camera:
    position: Vertex = (0.0, 0.0)
    viewport_size: Vertex = (0.0, 0.0)
    viewport_position: Vertex = (0.0, 0.0)

    @staticmethod
    def initial(
        grid_size: float, viewport_size: Vertex = (0.0, 0.0)
    ) -> Camera:
        """Camera parked just off the grid, before the first layout."""
        return Camera(
            position=(-grid_size, -grid_size), viewport_size=viewport_size
        )


@dataclass(frozen=True)
class EngineState:
    """Everything the engine remembers between events.

    Operations in ``camera.py`` and ``hittest.py`` take a state and return
    a new one, so they can be driven without a live event loop.
    """

    camera: Camera = field(default_factory=Camera)
    mouse_down: int | None = None
    drag: bool = False
    mouse_position: Vertex = (-100.0, -100.0)
    tree_position: TreePosition | None = None
    matrix_dict: tuple[Matrix, PositionDict] | None = None
    dirty: bool = False
    visible: bool = True

    def with_camera(self, **changes: Any) -> EngineState:
        return replace(self, camera=replace(self.camera, **changes))


@dataclass(frozen=True)
class NodeDescriptor:
    tree_position: TreePosition
    column: int
    row: int
    position: Vertex
    shape: str
    fill: str
    current: bool
    hover: bool = False


@dataclass(frozen=True)
class EdgeDescriptor:
    key: Hashable
    position_above: Vertex
    position_below: Vertex
    length: float
    current: bool
    stroke: str
    stroke_width: int

    def points(self, grid_size: float) -> list[Vertex]:
        """Polyline through the edge in graph pixel space."""
        left1, top1 = self.position_above
        left2, top2 = self.position_below
        if left1 == left2:
            return [(left1, top1), (left1, top2 + self.length)]
        return [
            (left1, top1),
            (left2 - grid_size, top2 - grid_size),
            (left2, top2),
            (left2, top2 + self.length),
        ]


@dataclass
class RenderPass:
    nodes: list[NodeDescriptor] = field(default_factory=list)
    edges: list[EdgeDescriptor] = field(default_factory=list)


@dataclass(frozen=True)
class NodeClick:
    tree_position: TreePosition
    context: bool = False
    x: float = 0.0
    y: float = 0.0
