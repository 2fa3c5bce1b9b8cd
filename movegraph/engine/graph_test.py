"""Tests for the GameGraph engine driven by a virtual clock."""

from movegraph.engine.gametree import GameTree
from movegraph.engine.graph import GameGraph
from movegraph.engine.scheduler import ManualScheduler
from movegraph.engine.types import GraphSettings, NodeClick


def _run(n):
    return GameTree(nodes=[{"B": ["aa"]} for _ in range(n)])


def _make_graph(**kwargs):
    sched = ManualScheduler()
    clicks = []
    kwargs.setdefault("viewport_size", (400.0, 300.0))
    graph = GameGraph(
        GraphSettings(delay=100),
        sched,
        on_node_click=clicks.append,
        **kwargs,
    )
    return graph, sched, clicks


class TestSelection:
    def test_rapid_selects_coalesce(self):
        root = _run(10)
        graph, sched, _ = _make_graph()
        graph.select((root, 0))
        sched.advance(50)
        graph.select((root, 1))
        sched.advance(50)
        graph.select((root, 2))
        assert graph.dirty
        assert not graph.should_render()

        sched.advance(99)
        assert graph.recenter_count == 0
        assert graph.recenter_pending()

        sched.advance(1)
        assert graph.recenter_count == 1
        assert not graph.dirty
        assert graph.camera.position == (-200, 44 - 150)

    def test_same_position_is_ignored(self):
        root = _run(3)
        graph, sched, _ = _make_graph()
        graph.select((root, 1))
        sched.advance(100)
        graph.select((root, 1))
        assert not graph.dirty
        assert not graph.recenter_pending()
        sched.advance(1000)
        assert graph.recenter_count == 1

    def test_layout_cached_across_selections(self):
        root = _run(5)
        root.add_subtree(_run(2))
        root.add_subtree(_run(2))
        graph, sched, _ = _make_graph()
        for index in range(5):
            graph.select((root, index))
            sched.advance(100)
        assert graph.recenter_count == 5
        assert graph.cache.builds == 1

        # A structural edit forces one rebuild
        root.subtrees[0].add_subtree(_run(1))
        graph.select((root.subtrees[0], 0))
        sched.advance(100)
        assert graph.cache.builds == 2

    def test_stale_selection_keeps_camera(self):
        root = _run(3)
        graph, sched, _ = _make_graph(hash_fn=lambda tree: "fixed")
        graph.select((root, 2))
        sched.advance(100)
        before = graph.camera.position

        late = root.add_subtree(_run(1))
        graph.select((late, 0))
        sched.advance(100)
        assert graph.recenter_count == 2
        assert graph.camera.position == before
        assert not graph.dirty

    def test_close_drops_pending_recenter(self):
        root = _run(3)
        graph, sched, _ = _make_graph()
        graph.select((root, 1))
        graph.close()
        sched.advance(1000)
        assert graph.recenter_count == 0
        assert graph.dirty


class TestRendering:
    def test_nothing_before_first_layout(self):
        graph, _, _ = _make_graph()
        result = graph.render()
        assert result.nodes == []
        assert result.edges == []

    def test_should_render_tracks_changes(self):
        root = _run(10)
        graph, sched, _ = _make_graph()
        graph.select((root, 2))
        sched.advance(100)
        assert graph.should_render()

        result = graph.render()
        assert len(result.nodes) == 10
        assert not graph.should_render()

        graph.pointer_down(0)
        graph.pointer_move(10, 10, 4, 0)
        assert graph.should_render()
        graph.render()
        assert not graph.should_render()

        graph.refresh()
        assert graph.should_render()

    def test_selection_marks_active_node(self):
        root = _run(4)
        graph, sched, _ = _make_graph()
        graph.select((root, 3))
        sched.advance(100)
        fills = {n.row: n.fill for n in graph.render().nodes}
        settings = graph.settings
        assert fills[3] == settings.node_active_color
        assert fills[0] == settings.node_color

    def test_hidden_graph_does_not_render(self):
        root = _run(3)
        graph, sched, _ = _make_graph()
        graph.select((root, 0))
        sched.advance(100)
        graph.set_visible(False)
        assert not graph.should_render()
        assert graph.render().nodes == []

    def test_show_recenters_after_settle(self):
        root = _run(3)
        graph, sched, _ = _make_graph()
        graph.select((root, 0))
        sched.advance(100)
        graph.set_visible(False)
        graph.set_visible(False)
        graph.set_visible(True)
        sched.advance(199)
        assert graph.recenter_count == 1
        sched.advance(1)
        assert graph.recenter_count == 2

    def test_reshown_graph_asks_to_be_drawn(self):
        root = _run(10)
        graph, sched, _ = _make_graph()
        graph.select((root, 2))
        sched.advance(100)
        graph.render()
        assert not graph.should_render()

        graph.set_visible(False)
        graph.render()
        graph.set_visible(True)
        sched.advance(200)
        assert graph.camera.position == (-200, 44 - 150)
        assert graph.should_render()
        graph.render()
        assert not graph.should_render()


class TestClicks:
    def test_click_dispatches_node(self):
        root = _run(10)
        graph, sched, clicks = _make_graph()
        graph.select((root, 2))
        sched.advance(100)
        # Camera is (-200, -106); move 3 sits at graph pixel (0, 66)
        graph.click(200, 172, context=True)
        assert clicks == [
            NodeClick(tree_position=(root, 3), context=True, x=200, y=172)
        ]

    def test_click_on_empty_cell(self):
        root = _run(10)
        graph, sched, clicks = _make_graph()
        graph.select((root, 2))
        sched.advance(100)
        graph.click(300, 172)
        assert clicks == []

    def test_drag_release_is_not_a_click(self):
        root = _run(10)
        graph, sched, clicks = _make_graph()
        graph.select((root, 2))
        sched.advance(100)
        graph.pointer_down(0)
        graph.pointer_move(205, 172, 5, 0)
        graph.pointer_up()
        graph.click(205, 172)
        assert clicks == []
        # The drag is consumed, the next click goes through
        graph.click(195, 172)
        assert [c.tree_position for c in clicks] == [(root, 3)]

    def test_no_listener(self):
        root = _run(3)
        graph = GameGraph(GraphSettings(), ManualScheduler())
        graph.select((root, 0))
        graph.click(22, 22)


class TestMeasure:
    def test_resizes_coalesce(self):
        rects = []

        def measure():
            rects.append(1)
            return (10.0, 20.0, 640.0, 480.0)

        graph, sched, _ = _make_graph(measure=measure)
        for _ in range(3):
            graph.resize()
            sched.advance(400)
        assert rects == []
        sched.advance(100)
        assert rects == [1]
        assert graph.camera.viewport_size == (640.0, 480.0)
        assert graph.camera.viewport_position == (10.0, 20.0)

    def test_height_change_remeasures_sooner(self):
        rects = []

        def measure():
            rects.append(1)
            return (0.0, 0.0, 300.0, 200.0)

        graph, sched, _ = _make_graph(measure=measure)
        graph.set_height(200)
        sched.advance(200)
        assert rects == [1]
        graph.set_height(200)
        sched.advance(1000)
        assert rects == [1]

    def test_without_measure(self):
        graph, sched, _ = _make_graph()
        graph.remeasure()
        assert graph.camera.viewport_size == (400.0, 300.0)
