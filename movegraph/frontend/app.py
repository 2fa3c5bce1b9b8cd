"""Tkinter viewer for the game graph engine.

A thin host around ``engine.GameGraph``: it owns the window, turns Tk
events into engine input events, and paints each render pass onto a Tk
Canvas through ``renderer.render_graph``. The engine's timers run on Tk's
event loop via ``TkScheduler``.

Controls:
  * drag with the left button to pan,
  * click a node to select it (the path to it becomes the current line),
  * Up/Down walk the current line, Left/Right switch between sibling
    variations at the nearest fork,
  * Ctrl+O opens a .json/.png tree, Ctrl+S saves a PNG snapshot.

Run with::

    python -m movegraph.frontend.app [tree.json] [--settings s.json]
"""

import argparse
import logging
import tkinter as tk
from pathlib import Path
from tkinter import filedialog, messagebox

from PIL import ImageTk

from ..engine import gametree
from ..engine.graph import GameGraph
from ..engine.settings_io import load_settings
from ..engine.types import GraphSettings
from ..logging_config import setup_logging
from .renderer import CANVAS_BG, render_graph
from .tree_io import load_tree, save_tree_png

logger = logging.getLogger(__name__)

SUPERSAMPLE = 2

# Tk button numbers -> engine buttons (0 primary, 1 middle, 2 secondary)
_TK_BUTTONS = {1: 0, 2: 1, 3: 2}


class TkScheduler:
    """Engine scheduler backed by ``widget.after``."""

    def __init__(self, widget):
        self.widget = widget

    def call_later(self, delay_ms, callback):
        return self.widget.after(delay_ms, callback)

    def cancel(self, handle):
        if handle:
            self.widget.after_cancel(handle)


def _engine_button(tk_num):
    return _TK_BUTTONS.get(tk_num, tk_num)


def _select_path(tree):
    """Make ``tree`` part of the current line by re-pointing its ancestors."""
    while tree.parent is not None:
        parent = tree.parent
        parent.current = parent.subtrees.index(tree)
        tree = parent


def _switch_variation(tree, delta):
    """Tree position on the sibling variation ``delta`` away, or None.

    Walks up to the nearest run with more than one child and moves its
    selection; the new position is that child's first move.
    """
    child = tree
    parent = tree.parent
    while parent is not None and len(parent.subtrees) < 2:
        child, parent = parent, parent.parent
    if parent is None:
        return None
    k = (parent.subtrees.index(child) + delta) % len(parent.subtrees)
    parent.current = k
    return parent.subtrees[k], 0


class App:
    def __init__(self, root_tree, settings):
        self.settings = settings
        self.root_tree = root_tree

        self.root = tk.Tk()
        self.root.title("movegraph")
        self.root.geometry("420x720")
        self.canvas = tk.Canvas(
            self.root, bg=CANVAS_BG, highlightthickness=0
        )
        self.canvas.pack(fill="both", expand=True)

        self.graph = GameGraph(
            settings,
            TkScheduler(self.root),
            measure=self._measure,
            on_node_click=self._on_node_click,
        )
        self._photo = None
        self._last_xy = None

        self.canvas.bind("<ButtonPress>", self._on_press)
        self.canvas.bind("<ButtonRelease>", self._on_release)
        self.canvas.bind("<Motion>", self._on_motion)
        self.canvas.bind("<Configure>", self._on_configure)
        self.root.bind("<Up>", lambda e: self._step(-1))
        self.root.bind("<Down>", lambda e: self._step(1))
        self.root.bind("<Left>", lambda e: self._variation(-1))
        self.root.bind("<Right>", lambda e: self._variation(1))
        self.root.bind("<Control-o>", self._on_open)
        self.root.bind("<Control-s>", self._on_snapshot)

        self.root.update_idletasks()
        self.graph.remeasure()
        self.graph.select((root_tree, 0))
        self._tick()

    # -- engine plumbing --

    def _measure(self):
        self.canvas.update_idletasks()
        return (
            self.canvas.winfo_rootx(),
            self.canvas.winfo_rooty(),
            self.canvas.winfo_width(),
            self.canvas.winfo_height(),
        )

    def _tick(self):
        """Repaint if the engine has something new, ~60 times a second."""
        if self.graph.should_render():
            self._render()
        self.root.after(16, self._tick)

    def _render(self):
        render_pass = self.graph.render()
        img = render_graph(
            render_pass,
            self.graph.camera,
            self.settings.grid_size,
            self.settings.node_size,
            supersample=SUPERSAMPLE,
        )
        self._photo = ImageTk.PhotoImage(img)
        self.canvas.delete("all")
        self.canvas.create_image(0, 0, image=self._photo, anchor="nw")

    # -- input --

    def _on_press(self, event):
        self._last_xy = (event.x_root, event.y_root)
        self.graph.pointer_down(_engine_button(event.num))

    def _on_motion(self, event):
        x, y = event.x_root, event.y_root
        if self._last_xy is None:
            dx, dy = 0, 0
        else:
            dx, dy = x - self._last_xy[0], y - self._last_xy[1]
        self._last_xy = (x, y)
        self.graph.pointer_move(x, y, dx, dy)

    def _on_release(self, event):
        self.graph.pointer_up()
        # Tk has no click event; a release over the canvas is the click
        button = _engine_button(event.num)
        if button in (0, 2):
            self.graph.click(event.x_root, event.y_root, context=button == 2)

    def _on_configure(self, _event):
        self.graph.resize()

    def _on_node_click(self, node_click):
        tree, index = node_click.tree_position
        if node_click.context:
            logger.info("Context click on run %r move %d", tree.id, index)
            return
        _select_path(tree)
        self.graph.refresh()
        self.graph.select((tree, index))

    def _step(self, delta):
        tree, index = self.graph.state.tree_position
        new_tree, new_index = gametree.navigate(tree, index, delta)
        if new_tree is not None:
            self.graph.select((new_tree, new_index))

    def _variation(self, delta):
        tree, _ = self.graph.state.tree_position
        target = _switch_variation(tree, delta)
        if target is not None:
            self.graph.select(target)

    # -- files --

    def _on_open(self, _event=None):
        path = filedialog.askopenfilename(
            filetypes=[("Trees", "*.json *.png"), ("All files", "*")]
        )
        if not path:
            return
        try:
            tree = load_tree(path)
        except (OSError, ValueError) as e:
            messagebox.showerror("Open failed", str(e))
            return
        self.root_tree = tree
        self.graph.select((tree, 0))

    def _on_snapshot(self, _event=None):
        path = filedialog.asksaveasfilename(
            defaultextension=".png", filetypes=[("PNG", "*.png")]
        )
        if not path:
            return
        img = render_graph(
            self.graph.render(),
            self.graph.camera,
            self.settings.grid_size,
            self.settings.node_size,
        )
        save_tree_png(img, self.root_tree, path)

    def run(self):
        self.root.mainloop()


def main(argv=None):
    parser = argparse.ArgumentParser(description="Game graph viewer")
    parser.add_argument("tree", nargs="?", help=".json or .png tree file")
    parser.add_argument("--settings", help="settings JSON file")
    parser.add_argument(
        "--seed",
        type=int,
        default=1,
        help="seed for a random demo tree when no file is given",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    if args.settings:
        settings = load_settings(Path(args.settings))
    else:
        settings = GraphSettings()
    if args.tree:
        tree = load_tree(args.tree)
    else:
        tree = gametree.random_tree(args.seed, num_runs=200)
    App(tree, settings).run()


if __name__ == "__main__":
    main()
