"""Camera state transitions.

Each function takes an ``EngineState`` and returns the next one; nothing
here touches timers or widgets. ``graph.GameGraph`` decides *when* to call
them (debouncing recenter and remeasure), this module decides *what*
happens.

Dragging is a two-state machine. ``pointer_down`` remembers which button
started the gesture and ``pointer_move`` pans the camera by the negated
pointer delta only while the primary button is held. Any other move
discards its delta and clears the drag flag. ``pointer_up`` forgets the
button but leaves the drag flag set so the click that a release produces
can be recognised as the end of a pan (see ``hittest.click``).

Recentering puts the selected node in the middle of the viewport, then
biases the camera sideways toward the side of the node's row with more
empty space, so that on a wide row of variations the neighbouring columns
stay visible. The bias is at most half the row width and never more than
half the viewport minus one cell.
"""

from __future__ import annotations

import logging
import math
from dataclasses import replace

from .matrix import Matrix, PositionDict, width_of
from .types import PRIMARY_BUTTON, EngineState, TreePosition, Vertex

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Round .5 toward positive infinity, like JavaScript's Math.round."""
    return math.floor(value + 0.5)


def pointer_down(state: EngineState, button: int) -> EngineState:
    return replace(state, mouse_down=button)


def pointer_move(
    state: EngineState, x: float, y: float, dx: float, dy: float
) -> EngineState:
    """Track the pointer at screen ``(x, y)`` that moved by ``(dx, dy)``."""
    vx, vy = state.camera.viewport_position
    if state.mouse_down == PRIMARY_BUTTON:
        drag = True
    else:
        dx, dy = 0, 0
        drag = False

    state = replace(state, drag=drag, mouse_position=(x - vx, y - vy))
    if drag:
        cx, cy = state.camera.position
        state = state.with_camera(position=(cx - dx, cy - dy))
    return state


def pointer_up(state: EngineState) -> EngineState:
    return replace(state, mouse_down=None)


def recenter_position(
    matrix: Matrix,
    position_dict: PositionDict,
    grid_size: float,
    viewport_size: Vertex,
    tree_position: TreePosition,
) -> Vertex | None:
    """Camera position that centers ``tree_position``, or None if unknown."""
    tree, index = tree_position
    cell = position_dict.get((tree.id, index))
    if cell is None:
        return None
    x, y = cell
    width, padding = width_of(y, matrix)
    viewport_w, viewport_h = viewport_size

    rel_x = 0.0 if width <= 1 else 1 - 2 * (x - padding) / (width - 1)
    diff = (width - 1) * grid_size / 2
    diff = min(diff, viewport_w / 2 - grid_size)

    return (
        round_half_up(x * grid_size + rel_x * diff - viewport_w / 2),
        round_half_up(y * grid_size - viewport_h / 2),
    )


def recenter(
    state: EngineState,
    matrix: Matrix,
    position_dict: PositionDict,
    grid_size: float,
    tree_position: TreePosition | None = None,
) -> EngineState:
    """Adopt the given layout and center the selected node.

    A selection the layout does not know about (stale after an edit)
    leaves the camera where it is.
    """
    if tree_position is None:
        tree_position = state.tree_position
    state = replace(
        state, matrix_dict=(matrix, position_dict), dirty=False
    )
    if tree_position is None:
        return state

    target = recenter_position(
        matrix,
        position_dict,
        grid_size,
        state.camera.viewport_size,
        tree_position,
    )
    if target is None:
        tree, index = tree_position
        logger.debug(
            "Recenter skipped: (%r, %d) not in layout", tree.id, index
        )
        return state
    return state.with_camera(position=target)


def remeasure(
    state: EngineState, rect: tuple[float, float, float, float]
) -> EngineState:
    """Store the viewport rect ``(left, top, width, height)``."""
    if not state.visible:
        return state
    left, top, width, height = rect
    return state.with_camera(
        viewport_size=(width, height), viewport_position=(left, top)
    )
