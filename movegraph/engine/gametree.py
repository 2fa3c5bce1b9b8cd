"""Minimal in-memory move tree.

The graph engine only reads trees, so any host model exposing ``id``,
``nodes``, ``subtrees``, ``current`` and ``parent`` works. This module is
the reference model used by the bundled Tk host and the tests: a forest of
``GameTree`` runs, each holding a straight list of SGF-style property dicts
(``{"B": ["dd"]}``, ``{"W": [""]}`` for a pass, ``{"AB": [...]}`` for
setup, ``"C"`` for a comment, ``"HO"`` for a bookmark).

It also supplies the read-only helpers the engine relies on:

  * ``get_root`` and ``navigate`` for walking the tree,
  * ``on_current_track`` (the brute-force classification the track
    classifier must agree with),
  * ``matrix_hash`` (the structural cache key for the layout),
  * ``from_dict`` / ``to_dict`` for JSON round trips.

Everything is iterative so trees tens of thousands of moves deep never
touch the recursion limit.
"""

from __future__ import annotations

import itertools
import random
from dataclasses import dataclass, field

_id_counter = itertools.count(1)


@dataclass(eq=False)
class GameTree:
    id: int = field(default_factory=lambda: next(_id_counter))
    nodes: list[dict] = field(default_factory=list)
    subtrees: list[GameTree] = field(default_factory=list)
    current: int | None = None
    parent: GameTree | None = field(default=None, repr=False)

    def add_subtree(self, subtree: GameTree) -> GameTree:
        """Append a child run. The first child becomes the active one."""
        subtree.parent = self
        self.subtrees.append(subtree)
        if self.current is None:
            self.current = 0
        return subtree


def get_root(tree: GameTree) -> GameTree:
    while tree.parent is not None:
        tree = tree.parent
    return tree


def iter_trees(root: GameTree):
    """Yield every run in depth-first pre-order, children left to right."""
    stack = [root]
    while stack:
        tree = stack.pop()
        yield tree
        stack.extend(reversed(tree.subtrees))


def get_height(root: GameTree) -> int:
    """Number of moves on the longest root-to-leaf line."""
    height = 0
    stack = [(root, 0)]
    while stack:
        tree, depth = stack.pop()
        depth += len(tree.nodes)
        height = max(height, depth)
        stack.extend((sub, depth) for sub in tree.subtrees)
    return height


def navigate(
    tree: GameTree | None, index: int, step: int
) -> tuple[GameTree | None, int]:
    """Move ``step`` moves along the current line from ``(tree, index)``.

    Walking up leaves through the parent run; walking down follows each
    run's active child. Returns ``(None, 0)`` past either end.
    """
    while tree is not None:
        target = index + step
        if 0 <= target < len(tree.nodes):
            return tree, target
        if target < 0 and tree.parent is not None:
            prev = tree.parent
            step = target + 1
            tree, index = prev, len(prev.nodes) - 1
        elif target >= len(tree.nodes) and tree.subtrees:
            step = target - len(tree.nodes)
            tree, index = tree.subtrees[tree.current or 0], 0
        else:
            break
    return None, 0


def on_current_track(tree: GameTree) -> bool:
    """True iff every ancestor selects the child leading to ``tree``."""
    while tree.parent is not None:
        parent = tree.parent
        if parent.current is None:
            return False
        if parent.subtrees[parent.current] is not tree:
            return False
        tree = parent
    return True


def matrix_hash(root: GameTree) -> int:
    """Structural hash of ids, move counts and child order.

    Selection (``current``) and node contents are not included, the
    layout depends on neither.
    """
    return hash(
        tuple(
            (tree.id, len(tree.nodes), tuple(sub.id for sub in tree.subtrees))
            for tree in iter_trees(root)
        )
    )


def from_dict(d: dict) -> GameTree:
    """Build a tree from ``{"nodes": [...], "subtrees": [...], "current": i}``.

    ``id`` is optional; fresh ids are assigned when absent.
    """
    root = _tree_from_dict(d)
    stack = [(root, d)]
    while stack:
        tree, data = stack.pop()
        for sub_data in data.get("subtrees", []):
            sub = tree.add_subtree(_tree_from_dict(sub_data))
            stack.append((sub, sub_data))
        current = data.get("current")
        if tree.subtrees and current is not None:
            if not 0 <= current < len(tree.subtrees):
                raise ValueError(
                    f"Run {tree.id!r} selects child {current} of "
                    f"{len(tree.subtrees)}"
                )
            tree.current = current
    return root


def _tree_from_dict(d: dict) -> GameTree:
    if not isinstance(d, dict):
        raise ValueError(
            f"Tree entry must be an object, got {type(d).__name__}"
        )
    tree = GameTree(nodes=[dict(n) for n in d.get("nodes", [])])
    if "id" in d:
        tree.id = d["id"]
    return tree


def to_dict(root: GameTree) -> dict:
    out = _tree_to_dict(root)
    stack = [(root, out)]
    while stack:
        tree, data = stack.pop()
        for sub in tree.subtrees:
            sub_data = _tree_to_dict(sub)
            data["subtrees"].append(sub_data)
            stack.append((sub, sub_data))
    return out


def _tree_to_dict(tree: GameTree) -> dict:
    return {
        "id": tree.id,
        "nodes": [dict(n) for n in tree.nodes],
        "subtrees": [],
        "current": tree.current,
    }


def random_tree(
    seed: int,
    num_runs: int = 50,
    max_run_length: int = 8,
    max_children: int = 3,
) -> GameTree:
    """Deterministic pseudo-random tree for tests and benchmarks.

    Moves alternate colours; roughly one in ten is a pass, one in eight
    carries a comment and one in twenty is bookmarked. The root starts
    with an empty setup node.
    """
    rng = random.Random(seed)
    root = GameTree(nodes=[{}])
    _fill_moves(rng, root, rng.randint(1, max_run_length))
    open_runs = [root]
    made = 1
    while made < num_runs and open_runs:
        parent = open_runs[rng.randrange(len(open_runs))]
        if len(parent.subtrees) >= max_children:
            open_runs.remove(parent)
            continue
        child = parent.add_subtree(GameTree())
        _fill_moves(rng, child, rng.randint(1, max_run_length))
        open_runs.append(child)
        made += 1
    for tree in iter_trees(root):
        if tree.subtrees:
            tree.current = rng.randrange(len(tree.subtrees))
    return root


def _fill_moves(rng: random.Random, tree: GameTree, count: int) -> None:
    letters = "abcdefghijklmnopqrs"
    for i in range(count):
        color = "B" if i % 2 == 0 else "W"
        roll = rng.random()
        if roll < 0.1:
            node = {color: [""]}
        else:
            node = {color: [rng.choice(letters) + rng.choice(letters)]}
        if rng.random() < 0.125:
            node["C"] = ["comment"]
        if rng.random() < 0.05:
            node["HO"] = ["1"]
        tree.nodes.append(node)
