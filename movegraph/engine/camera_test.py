"""Tests for camera transitions: drag panning, recenter, remeasure."""

from movegraph.engine import camera
from movegraph.engine.gametree import GameTree
from movegraph.engine.matrix import build
from movegraph.engine.types import Camera, EngineState

GRID = 22


def _run(n):
    return GameTree(nodes=[{"B": ["aa"]} for _ in range(n)])


def _fan(children):
    root = _run(1)
    kids = [root.add_subtree(_run(1)) for _ in range(children)]
    return root, kids


def _state(position=(0.0, 0.0), viewport=(400.0, 300.0), offset=(0.0, 0.0)):
    return EngineState(
        camera=Camera(
            position=position,
            viewport_size=viewport,
            viewport_position=offset,
        )
    )


class TestRoundHalfUp:
    def test_halves_round_up(self):
        assert camera.round_half_up(0.5) == 1
        assert camera.round_half_up(1.5) == 2
        assert camera.round_half_up(2.5) == 3
        assert camera.round_half_up(-0.5) == 0
        assert camera.round_half_up(-1.5) == -1

    def test_plain(self):
        assert camera.round_half_up(2.4) == 2
        assert camera.round_half_up(-2.6) == -3


class TestDrag:
    def test_move_without_button_is_ignored(self):
        state = camera.pointer_move(_state((10, 20)), 50, 60, 5, 5)
        assert state.camera.position == (10, 20)
        assert state.drag is False

    def test_primary_drag_pans_opposite(self):
        state = camera.pointer_down(_state((10, 20)), 0)
        state = camera.pointer_move(state, 50, 60, 5, -3)
        assert state.drag is True
        assert state.camera.position == (5, 23)
        state = camera.pointer_move(state, 52, 60, 2, 0)
        assert state.camera.position == (3, 23)

    def test_other_button_does_not_drag(self):
        state = camera.pointer_down(_state((10, 20)), 2)
        state = camera.pointer_move(state, 50, 60, 5, 5)
        assert state.drag is False
        assert state.camera.position == (10, 20)

    def test_pointer_position_relative_to_viewport(self):
        state = _state(offset=(100, 40))
        state = camera.pointer_move(state, 150, 90, 0, 0)
        assert state.mouse_position == (50, 50)

    def test_release_keeps_drag_flag(self):
        state = camera.pointer_down(_state(), 0)
        state = camera.pointer_move(state, 1, 1, 1, 1)
        state = camera.pointer_up(state)
        assert state.mouse_down is None
        assert state.drag is True
        # The next move with no button clears it
        state = camera.pointer_move(state, 2, 2, 1, 1)
        assert state.drag is False
        assert state.camera.position == (-1, -1)

    def test_panning_is_unbounded(self):
        state = camera.pointer_down(_state(), 0)
        state = camera.pointer_move(state, 0, 0, 10000, 10000)
        assert state.camera.position == (-10000, -10000)


class TestRecenter:
    def test_dead_center_has_no_bias(self):
        root, kids = _fan(5)
        matrix, pos = build(root)
        state = camera.recenter(
            _state(viewport=(400, 300)), matrix, pos, GRID, (kids[2], 0)
        )
        # node pixel (44, 22), minus half the viewport
        assert state.camera.position == (44 - 200, 22 - 150)

    def test_edges_bias_toward_row_center(self):
        root, kids = _fan(5)
        matrix, pos = build(root)
        xs = []
        for kid in kids:
            state = camera.recenter(
                _state(viewport=(400, 300)), matrix, pos, GRID, (kid, 0)
            )
            xs.append(state.camera.position[0])
        # The row is narrow enough to keep it centered whatever is selected
        assert xs == [-156] * 5

    def test_bias_clamped_by_viewport(self):
        root, kids = _fan(5)
        matrix, pos = build(root)
        left = camera.recenter(
            _state(viewport=(100, 100)), matrix, pos, GRID, (kids[0], 0)
        )
        right = camera.recenter(
            _state(viewport=(100, 100)), matrix, pos, GRID, (kids[4], 0)
        )
        # diff = min(44, 50 - 22) = 28
        assert left.camera.position[0] == 0 + 28 - 50
        assert right.camera.position[0] == 88 - 28 - 50

    def test_single_column_centers_exactly(self):
        root = _run(10)
        matrix, pos = build(root)
        state = camera.recenter(
            _state(viewport=(301, 201)), matrix, pos, GRID, (root, 4)
        )
        # -150.5 and -12.5 round up
        assert state.camera.position == (-150, -12)

    def test_adopts_layout_and_clears_dirty(self):
        root = _run(3)
        matrix, pos = build(root)
        state = EngineState(dirty=True, tree_position=(root, 1))
        state = camera.recenter(state, matrix, pos, GRID)
        assert state.dirty is False
        assert state.matrix_dict == (matrix, pos)

    def test_stale_selection_keeps_camera(self):
        root = _run(3)
        matrix, pos = build(root)
        state = _state((7, 8))
        state = camera.recenter(state, matrix, pos, GRID, (root, 12))
        assert state.camera.position == (7, 8)
        assert state.matrix_dict == (matrix, pos)

    def test_recenter_position_unknown(self):
        root = _run(3)
        other = _run(1)
        matrix, pos = build(root)
        assert (
            camera.recenter_position(matrix, pos, GRID, (400, 300), (other, 0))
            is None
        )


class TestRemeasure:
    def test_stores_rect(self):
        state = camera.remeasure(_state(), (10, 20, 640, 480))
        assert state.camera.viewport_position == (10, 20)
        assert state.camera.viewport_size == (640, 480)

    def test_hidden_graph_is_not_measured(self):
        state = EngineState(visible=False)
        assert camera.remeasure(state, (10, 20, 640, 480)) == state
