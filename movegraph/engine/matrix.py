"""Grid layout of a move tree.

Every move gets an integer cell ``(column, row)``: the row is the move's
depth from the root, and each run (a straight line of moves) keeps one
column for all of its moves, forming a vertical bone. Runs are placed in
depth-first pre-order with children left to right. A run proposes its
parent's column and is pushed right just far enough to clear every row it
will occupy, plus the row directly below it, which is reserved for the
connector into its first child. So a first child continues its parent's
bone when there is room, and each later sibling lands to the right of the
whole subtree of the siblings before it.

Rows are stored as lists padded with ``None`` up to their rightmost
occupied column, which makes "how far right is this row already filled"
an O(1) ``len()``. The required shift for a run is therefore the maximum
row length over its rows, and the whole layout is linear in the number of
moves.

The layout depends only on run ids, move counts and child order, never on
which child is selected, so ``MatrixCache`` keys it by a structural hash
and rebuilds only when the tree's shape changes.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Hashable

import numpy as np

from .types import Run, TreePosition

logger = logging.getLogger(__name__)

PositionDict = dict[tuple[Hashable, int], tuple[int, int]]

# width_of looks at rows [row - 4, row + 5]
_WIDTH_WINDOW_ABOVE = 4
_WIDTH_WINDOW_BELOW = 5


class Matrix:
    """Sparse grid of tree positions, indexed ``matrix.get(col, row)``."""

    def __init__(self, rows: list[list[TreePosition | None]]) -> None:
        self.rows = rows
        cols_list: list[int] = []
        rows_list: list[int] = []
        cells: list[TreePosition] = []
        for y, row in enumerate(rows):
            for x, cell in enumerate(row):
                if cell is not None:
                    cols_list.append(x)
                    rows_list.append(y)
                    cells.append(cell)
        # Parallel arrays of occupied cells, for vectorised culling
        self.cols = np.array(cols_list, dtype=np.int64)
        self.row_indices = np.array(rows_list, dtype=np.int64)
        self.cells = cells

    @property
    def height(self) -> int:
        return len(self.rows)

    def __len__(self) -> int:
        return len(self.cells)

    def get(self, col: int, row: int) -> TreePosition | None:
        if row < 0 or col < 0 or row >= len(self.rows):
            return None
        line = self.rows[row]
        if col >= len(line):
            return None
        return line[col]

    def snapshot(self) -> list[list[tuple[Hashable, int] | None]]:
        """Rows with runs replaced by their ids, for equality checks."""
        return [
            [None if cell is None else (cell[0].id, cell[1]) for cell in row]
            for row in self.rows
        ]


def build(root: Run) -> tuple[Matrix, PositionDict]:
    """Lay out the tree below ``root``.

    Returns the matrix and the dict mapping ``(run id, index)`` to
    ``(column, row)``.
    """
    rows: list[list[TreePosition | None]] = []
    position_dict: PositionDict = {}

    # (run, proposed column, first row)
    stack: list[tuple[Run, int, int]] = [(root, 0, 0)]
    while stack:
        tree, xshift, yshift = stack.pop()
        count = len(tree.nodes)

        x = xshift
        for y in range(yshift, min(yshift + count + 1, len(rows))):
            x = max(x, len(rows[y]))

        for i in range(count):
            y = yshift + i
            if y == len(rows):
                rows.append([])
            row = rows[y]
            row.extend([None] * (x - len(row)))
            row.append((tree, i))
            position_dict[(tree.id, i)] = (x, y)

        stack.extend(
            (sub, x, yshift + count) for sub in reversed(tree.subtrees)
        )

    return Matrix(rows), position_dict


def width_of(row: int, matrix: Matrix) -> tuple[int, int]:
    """Width of the neighbourhood of ``row`` and its left padding.

    Considers rows ``row - 4`` through ``row + 5`` (clipped to the matrix).
    The padding is the leftmost first-occupied column over those rows, the
    width runs from there to the rightmost row end.
    """
    lo = max(row - _WIDTH_WINDOW_ABOVE, 0)
    hi = min(row + _WIDTH_WINDOW_BELOW, matrix.height - 1)
    if lo > hi:
        return 0, 0

    paddings = []
    for y in range(lo, hi + 1):
        line = matrix.rows[y]
        paddings.append(
            next((x for x, cell in enumerate(line) if cell is not None), 0)
        )
    padding = min(paddings)
    width = max(len(matrix.rows[y]) for y in range(lo, hi + 1)) - padding
    return width, padding


class MatrixCache:
    """Caches ``build()`` keyed by the tree's structural hash."""

    def __init__(self, hash_fn: Callable[[Any], Hashable]) -> None:
        self._hash_fn = hash_fn
        self._hash: Hashable | None = None
        self._value: tuple[Matrix, PositionDict] | None = None
        self.builds = 0

    def get(self, root: Run) -> tuple[Matrix, PositionDict]:
        key = self._hash_fn(root)
        if self._value is None or key != self._hash:
            start = time.perf_counter()
            self._value = build(root)
            self._hash = key
            self.builds += 1
            logger.debug(
                "Rebuilt graph matrix: %d moves, %d rows in %.1f ms",
                len(self._value[0]),
                self._value[0].height,
                (time.perf_counter() - start) * 1000,
            )
        return self._value

    def invalidate(self) -> None:
        self._hash = None
        self._value = None
