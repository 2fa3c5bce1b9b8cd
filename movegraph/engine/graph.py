"""The game graph engine a host application drives.

``GameGraph`` ties the pieces together. The host feeds it input events
(pointer down/move/up, clicks, resizes, visibility and selection changes)
and asks it for render passes; it never touches a widget itself. Timing
goes through an injected ``Scheduler`` so the same engine runs under Tk's
event loop, a test's virtual clock, or any other loop.

Selection changes are debounced: holding an arrow key produces a stream of
``select()`` calls, and only the last one triggers a layout fetch and a
recenter, ``settings.delay`` ms after the stream stops. Until then the
state is ``dirty`` and ``should_render()`` says no, so the host keeps the
previous frame instead of flashing a half-updated one. Resizes are coarser
and wait 500 ms before re-reading the viewport rect.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Callable, Hashable

from . import camera, hittest
from .culling import render_pass
from .gametree import get_root, matrix_hash, navigate
from .matrix import MatrixCache
from .scheduler import Debouncer, Scheduler
from .tracks import TrackClassifier
from .types import (
    Camera,
    EngineState,
    GraphSettings,
    NodeClick,
    RenderPass,
    TreePosition,
)

logger = logging.getLogger(__name__)

RECENTER = "recenter"
REMEASURE = "remeasure"

REMEASURE_DELAY_MS = 500
# After the host panel is shown or changes height, before layout settles
SETTLE_DELAY_MS = 200

Rect = tuple[float, float, float, float]


class GameGraph:
    def __init__(
        self,
        settings: GraphSettings,
        scheduler: Scheduler,
        measure: Callable[[], Rect] | None = None,
        on_node_click: Callable[[NodeClick], None] | None = None,
        hash_fn: Callable[[Any], Hashable] = matrix_hash,
        get_root_fn: Callable[[Any], Any] = get_root,
        navigate_fn: Callable[[Any, int, int], Any] = navigate,
        viewport_size: tuple[float, float] = (0.0, 0.0),
    ) -> None:
        self.settings = settings
        self.measure = measure
        self.on_node_click = on_node_click
        self.state = EngineState(
            camera=Camera.initial(settings.grid_size, viewport_size)
        )
        self.cache = MatrixCache(hash_fn)
        self.classifier = TrackClassifier()
        self._debouncer = Debouncer(scheduler)
        self._get_root = get_root_fn
        self._navigate = navigate_fn
        self._height: float | None = None
        self._last_render_key: tuple | None = None
        self.recenter_count = 0

    # -- read-only views --

    @property
    def dirty(self) -> bool:
        return self.state.dirty

    @property
    def camera(self) -> Camera:
        return self.state.camera

    def recenter_pending(self) -> bool:
        return self._debouncer.pending(RECENTER)

    def should_render(self) -> bool:
        """True when a render pass would show something new."""
        if not self.state.visible or self.state.dirty:
            return False
        return self._render_key() != self._last_render_key

    # -- input events --

    def pointer_down(self, button: int) -> None:
        self.state = camera.pointer_down(self.state, button)

    def pointer_move(self, x: float, y: float, dx: float, dy: float) -> None:
        self.state = camera.pointer_move(self.state, x, y, dx, dy)

    def pointer_up(self) -> None:
        self.state = camera.pointer_up(self.state)

    def click(self, x: float, y: float, context: bool = False) -> None:
        self.state, tree_position = hittest.click(
            self.state, (x, y), self.settings.grid_size
        )
        if tree_position is None or self.on_node_click is None:
            return
        self.on_node_click(
            NodeClick(tree_position=tree_position, context=context, x=x, y=y)
        )

    def select(self, tree_position: TreePosition) -> None:
        """The host's selection moved. Recenters after ``settings.delay``."""
        if self.state.tree_position is not None:
            old_tree, old_index = self.state.tree_position
            if old_tree is tree_position[0] and old_index == tree_position[1]:
                return
        self.state = replace(
            self.state, tree_position=tree_position, dirty=True
        )
        self._debouncer.schedule(
            RECENTER, self.settings.delay, self.update_camera_position
        )

    def resize(self) -> None:
        self._debouncer.schedule(
            REMEASURE, REMEASURE_DELAY_MS, self.remeasure
        )

    def set_height(self, height: float) -> None:
        if height == self._height:
            return
        self._height = height
        self._debouncer.schedule(REMEASURE, SETTLE_DELAY_MS, self.remeasure)

    def set_visible(self, visible: bool) -> None:
        if visible == self.state.visible:
            return
        self.state = replace(self.state, visible=visible)
        if visible:
            # Redraw on show even if the camera did not move
            self._last_render_key = None
            self._debouncer.schedule(
                RECENTER, SETTLE_DELAY_MS, self.update_camera_position
            )

    def refresh(self) -> None:
        """Force the next should_render() after an in-place tree edit."""
        self._last_render_key = None

    def close(self) -> None:
        """Drop any pending recenter/remeasure."""
        self._debouncer.cancel_all()

    # -- delayed actions --

    def update_camera_position(self) -> None:
        tree_position = self.state.tree_position
        if tree_position is None:
            return
        self.recenter_count += 1
        root = self._get_root(tree_position[0])
        matrix, position_dict = self.cache.get(root)
        self.state = camera.recenter(
            self.state,
            matrix,
            position_dict,
            self.settings.grid_size,
            tree_position,
        )

    def remeasure(self) -> None:
        if self.measure is None:
            return
        rect = self.measure()
        logger.debug("Viewport remeasured: %s", rect)
        self.state = camera.remeasure(self.state, rect)

    # -- rendering --

    def render(self) -> RenderPass:
        """Draw descriptors for everything in or near the viewport."""
        self._last_render_key = self._render_key()
        if self.state.matrix_dict is None or not self.state.visible:
            return RenderPass()
        matrix, position_dict = self.state.matrix_dict
        self.classifier.reset()
        return render_pass(
            matrix,
            position_dict,
            self.state.camera,
            self.settings,
            self.state.tree_position,
            self.classifier,
            hover=hittest.hover_cell(self.state, self.settings.grid_size),
            navigate=self._navigate,
        )

    def _render_key(self) -> tuple:
        matrix_dict = self.state.matrix_dict
        tree_position = self.state.tree_position
        return (
            self.state.camera,
            None if matrix_dict is None else id(matrix_dict[0]),
            None
            if tree_position is None
            else (id(tree_position[0]), tree_position[1]),
            hittest.hover_cell(self.state, self.settings.grid_size),
        )
