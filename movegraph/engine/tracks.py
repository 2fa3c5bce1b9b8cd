"""Current-path classification of runs.

A run is on the current track when every ancestor selects the child that
leads to it. Asking that question naively costs a walk to the root per
visible node; a render pass asks it for hundreds of nodes whose runs share
most of their ancestors. ``TrackClassifier`` memoizes the answer per run id
in two disjoint sets and resolves a run from its parent's answer when that
is already known. Otherwise it walks up only until it meets an ancestor it
has already classified and then fills in the chain on the way back down.

The memo is only valid for one selection state, so the engine calls
``reset()`` at the start of every render pass.
"""

from __future__ import annotations

from typing import Hashable

from .types import Run


class TrackClassifier:
    def __init__(self) -> None:
        self._current: set[Hashable] = set()
        self._alternate: set[Hashable] = set()

    def reset(self) -> None:
        self._current.clear()
        self._alternate.clear()

    def known(self, run: Run) -> bool | None:
        """Memoized classification, or None if not yet classified."""
        if run.id in self._current:
            return True
        if run.id in self._alternate:
            return False
        return None

    def is_current(self, run: Run) -> bool:
        cached = self.known(run)
        if cached is not None:
            return cached

        # Collect unclassified runs up to the root or a known ancestor
        chain: list[Run] = []
        tree: Run | None = run
        on_track = True
        while tree is not None:
            cached = self.known(tree)
            if cached is not None:
                on_track = cached
                break
            chain.append(tree)
            tree = tree.parent

        for tree in reversed(chain):
            parent = tree.parent
            if parent is not None:
                on_track = on_track and _selects(parent, tree)
            self._record(tree, on_track)
        return on_track

    def _record(self, run: Run, current: bool) -> None:
        if current:
            self._current.add(run.id)
        else:
            self._alternate.add(run.id)


def _selects(parent: Run, child: Run) -> bool:
    if parent.current is None:
        return False
    if not 0 <= parent.current < len(parent.subtrees):
        return False
    return parent.subtrees[parent.current] is child
