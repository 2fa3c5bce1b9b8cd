"""Viewport culling and draw descriptors.

A render pass only looks at the part of the matrix that can be on screen.
``visible_region`` turns the camera into a rectangle of grid cells, padded
so that nodes straddling the border and the diagonal connectors that
reach one cell up-left into the next bone are still included (false
positives are fine, a missed cell would be a visible hole).
``render_pass`` then picks the occupied cells inside that rectangle with a
NumPy mask over the matrix's coordinate arrays and scans them column by
column, top to bottom.

For every cell it emits a node descriptor. Edges are emitted per run, not
per move: the first time a run turns up in the scan it contributes its
bone (joined to its parent's last move if the cell is the run's first
move), and its last move contributes one connector per child run.
Connectors on the current path are appended and the rest prepended, so a
presentation layer drawing the list in order paints the current line on
top.
"""

from __future__ import annotations

import logging
import math
from collections import deque
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Callable, Hashable

import numpy as np

from .gametree import navigate as default_navigate
from .matrix import Matrix, PositionDict
from .tracks import TrackClassifier
from .types import (
    SHAPE_MOVE,
    SHAPE_PASS,
    SHAPE_SETUP,
    Camera,
    EdgeDescriptor,
    GraphSettings,
    NodeDescriptor,
    RenderPass,
    Run,
    TreePosition,
)

logger = logging.getLogger(__name__)

PAD_COLS = 2
PAD_ROWS = 5

Navigate = Callable[[Any, int, int], tuple[Any, int]]


@dataclass(frozen=True)
class Region:
    min_col: int
    min_row: int
    max_col: int
    max_row: int

    def contains(self, col: int, row: int) -> bool:
        return (
            self.min_col <= col <= self.max_col
            and self.min_row <= row <= self.max_row
        )


def visible_region(
    camera: Camera,
    grid_size: float,
    pad_cols: int = PAD_COLS,
    pad_rows: int = PAD_ROWS,
) -> Region:
    cx, cy = camera.position
    width, height = camera.viewport_size
    return Region(
        min_col=max(math.floor(cx / grid_size) - pad_cols, 0),
        min_row=max(math.floor(cy / grid_size) - pad_rows, 0),
        max_col=math.ceil((cx + width) / grid_size) + pad_cols,
        max_row=math.ceil((cy + height) / grid_size) + pad_rows,
    )


def visible_cells(matrix: Matrix, region: Region) -> list[int]:
    """Indices into ``matrix.cells`` inside ``region``, column-major."""
    if len(matrix) == 0:
        return []
    cols = matrix.cols
    rows = matrix.row_indices
    mask = (
        (cols >= region.min_col)
        & (cols <= region.max_col)
        & (rows >= region.min_row)
        & (rows <= region.max_row)
    )
    idx = np.nonzero(mask)[0]
    order = np.lexsort((rows[idx], cols[idx]))
    return idx[order].tolist()


def node_shape(node: Any) -> str:
    """Pass nodes are squares, setup nodes diamonds, moves circles."""
    if not isinstance(node, Mapping):
        return SHAPE_MOVE
    has_move = False
    for color in ("B", "W"):
        if color not in node:
            continue
        has_move = True
        value = node[color]
        if isinstance(value, str) or not isinstance(value, Sequence):
            return SHAPE_MOVE
        if len(value) > 0 and value[0] == "":
            return SHAPE_PASS
    return SHAPE_MOVE if has_move else SHAPE_SETUP


def node_fill(
    node: Any, current: bool, selected: bool, settings: GraphSettings
) -> str:
    if not current:
        return settings.node_inactive_color
    if selected:
        return settings.node_active_color
    if not isinstance(node, Mapping):
        return settings.node_color
    if "HO" in node:
        return settings.node_bookmark_color
    if any(prop in node for prop in settings.comment_properties):
        return settings.node_comment_color
    return settings.node_color


def _is_selected(
    tree_position: TreePosition | None, tree: Run, index: int
) -> bool:
    if tree_position is None:
        return False
    return tree_position[0] is tree and tree_position[1] == index


class _EdgeCollector:
    def __init__(self, settings: GraphSettings) -> None:
        self._settings = settings
        self.edges: deque[EdgeDescriptor] = deque()
        self.done: set[Hashable] = set()

    def add(
        self,
        key: Hashable,
        above: tuple[float, float],
        below: tuple[float, float],
        length: float,
        current: bool,
    ) -> None:
        s = self._settings
        edge = EdgeDescriptor(
            key=key,
            position_above=above,
            position_below=below,
            length=length,
            current=current,
            stroke=s.edge_color if current else s.edge_inactive_color,
            stroke_width=s.edge_size if current else s.edge_inactive_size,
        )
        if current:
            self.edges.append(edge)
        else:
            self.edges.appendleft(edge)


def render_pass(
    matrix: Matrix,
    position_dict: PositionDict,
    camera: Camera,
    settings: GraphSettings,
    tree_position: TreePosition | None,
    classifier: TrackClassifier,
    hover: tuple[int, int] | None = None,
    navigate: Navigate = default_navigate,
) -> RenderPass:
    grid = settings.grid_size
    region = visible_region(camera, grid)
    nodes: list[NodeDescriptor] = []
    edges = _EdgeCollector(settings)

    def pixel(key: tuple[Hashable, int]) -> tuple[float, float] | None:
        cell = position_dict.get(key)
        if cell is None:
            logger.debug("Skipping edge to %r: not in layout", key)
            return None
        return cell[0] * grid, cell[1] * grid

    for i in visible_cells(matrix, region):
        tree, index = matrix.cells[i]
        col = int(matrix.cols[i])
        row = int(matrix.row_indices[i])
        if index >= len(tree.nodes):
            continue
        node = tree.nodes[index]
        current = classifier.is_current(tree)
        left, top = col * grid, row * grid

        nodes.append(
            NodeDescriptor(
                tree_position=(tree, index),
                column=col,
                row=row,
                position=(left, top),
                shape=node_shape(node),
                fill=node_fill(
                    node,
                    current,
                    _is_selected(tree_position, tree, index),
                    settings,
                ),
                current=current,
                hover=hover == (col, row),
            )
        )

        if tree.id not in edges.done:
            # The tree bone: one straight edge through the whole run
            above = below = None
            if index == 0 and tree.parent is not None:
                prev_tree, prev_index = navigate(tree, index, -1)
                if prev_tree is not None:
                    above = pixel((prev_tree.id, prev_index))
                below = (left, top)
            else:
                above = below = pixel((tree.id, 0))

            if above is not None and below is not None:
                edges.add(
                    tree.id,
                    above,
                    below,
                    (len(tree.nodes) - 1) * grid,
                    current,
                )
                edges.done.add(tree.id)

        if index == len(tree.nodes) - 1:
            for k, subtree in enumerate(tree.subtrees):
                below = pixel((subtree.id, 0))
                if below is None:
                    continue
                edges.add(
                    subtree.id,
                    (left, top),
                    below,
                    (len(subtree.nodes) - 1) * grid,
                    current and tree.current == k,
                )
                edges.done.add(subtree.id)

    return RenderPass(nodes=nodes, edges=list(edges.edges))
