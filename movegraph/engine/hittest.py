"""Pointer to tree-position mapping."""

from __future__ import annotations

import math
from dataclasses import replace

from .camera import round_half_up
from .matrix import Matrix
from .types import Camera, EngineState, TreePosition, Vertex


def to_graph(pointer_screen: Vertex, camera: Camera) -> Vertex:
    """Screen coordinates -> graph pixel coordinates."""
    vx, vy = camera.viewport_position
    cx, cy = camera.position
    return pointer_screen[0] - vx + cx, pointer_screen[1] - vy + cy


def nearest_cell(
    pointer_screen: Vertex, camera: Camera, grid_size: float
) -> tuple[int, int]:
    gx, gy = to_graph(pointer_screen, camera)
    return round_half_up(gx / grid_size), round_half_up(gy / grid_size)


def resolve(
    pointer_screen: Vertex,
    camera: Camera,
    grid_size: float,
    matrix: Matrix,
) -> TreePosition | None:
    col, row = nearest_cell(pointer_screen, camera, grid_size)
    return matrix.get(col, row)


def click(
    state: EngineState,
    pointer_screen: Vertex,
    grid_size: float,
) -> tuple[EngineState, TreePosition | None]:
    """Resolve a click, swallowing the one that ends a drag."""
    if state.drag:
        return replace(state, drag=False), None
    if state.matrix_dict is None:
        return state, None
    matrix, _ = state.matrix_dict
    return state, resolve(pointer_screen, state.camera, grid_size, matrix)


def hover_cell(
    state: EngineState, grid_size: float
) -> tuple[int, int] | None:
    """Cell whose node square contains the pointer, if any.

    A node at pixel ``p`` covers ``[ceil(p - g/2), floor(p + g/2) - 1]``
    on each axis, so neighbouring squares never share a pixel.
    """
    mx, my = state.mouse_position
    cx, cy = state.camera.position
    gx, gy = mx + cx, my + cy
    col = round_half_up(gx / grid_size)
    row = round_half_up(gy / grid_size)
    half = grid_size / 2
    for value, index in ((gx, col), (gy, row)):
        center = index * grid_size
        lo = math.ceil(center - half)
        hi = math.floor(center + half) - 1
        if not lo <= value <= hi:
            return None
    return col, row
