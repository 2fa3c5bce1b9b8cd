#!/usr/bin/env python3
"""Benchmark layout and render-pass performance on random trees.

Usage (from the repo root):
    python scripts/bench_render.py              # 3 iterations, 2000 runs
    python scripts/bench_render.py -n 5         # 5 iterations
    python scripts/bench_render.py -r 20000     # bigger tree
"""

import argparse
import statistics
import sys
import time
from pathlib import Path

# Add the repo root to path
SCRIPT_DIR = Path(__file__).resolve().parent
ROOT_DIR = SCRIPT_DIR.parent
sys.path.insert(0, str(ROOT_DIR))

from movegraph.engine.camera import recenter  # noqa: E402
from movegraph.engine.culling import render_pass  # noqa: E402
from movegraph.engine.gametree import (  # noqa: E402
    get_height,
    iter_trees,
    matrix_hash,
    random_tree,
)
from movegraph.engine.matrix import MatrixCache, build  # noqa: E402
from movegraph.engine.tracks import TrackClassifier  # noqa: E402
from movegraph.engine.types import (  # noqa: E402
    Camera,
    EngineState,
    GraphSettings,
)


def _deepest_current(root):
    tree = root
    while tree.subtrees:
        tree = tree.subtrees[tree.current]
    return tree, len(tree.nodes) - 1


def _report(label, times_ms):
    median = statistics.median(times_ms)
    mean = statistics.mean(times_ms)
    line = f"  {label:<12} median {median:8.2f} ms  mean {mean:8.2f} ms"
    if len(times_ms) > 1:
        line += f"  stdev {statistics.stdev(times_ms):6.2f} ms"
    print(line)


def main():
    parser = argparse.ArgumentParser(
        description="Benchmark game graph layout and culling"
    )
    parser.add_argument(
        "-n",
        "--iterations",
        type=int,
        default=3,
        help="Number of iterations (default: 3)",
    )
    parser.add_argument(
        "-r",
        "--runs",
        type=int,
        default=2000,
        help="Number of runs in the random tree (default: 2000)",
    )
    parser.add_argument(
        "--seed", type=int, default=1, help="Tree seed (default: 1)"
    )
    args = parser.parse_args()

    settings = GraphSettings()
    root = random_tree(args.seed, num_runs=args.runs)
    moves = sum(len(t.nodes) for t in iter_trees(root))
    print(f"Benchmark: {args.runs} runs, {moves} moves, seed={args.seed}")
    print(f"Longest line: {get_height(root)} moves")
    print(f"Iterations: {args.iterations}")
    print()

    cache = MatrixCache(matrix_hash)
    matrix, position_dict = cache.get(root)
    state = EngineState(
        camera=Camera(viewport_size=(420.0, 720.0)),
        tree_position=_deepest_current(root),
    )
    state = recenter(state, matrix, position_dict, settings.grid_size)

    build_ms, hit_ms, pass_ms = [], [], []
    classifier = TrackClassifier()
    for _ in range(args.iterations):
        start = time.perf_counter()
        build(root)
        build_ms.append((time.perf_counter() - start) * 1000)

        start = time.perf_counter()
        cache.get(root)
        hit_ms.append((time.perf_counter() - start) * 1000)

        start = time.perf_counter()
        classifier.reset()
        result = render_pass(
            matrix,
            position_dict,
            state.camera,
            settings,
            state.tree_position,
            classifier,
        )
        pass_ms.append((time.perf_counter() - start) * 1000)

    print(f"Matrix: {matrix.height} rows, {len(matrix)} cells")
    print(
        f"Last pass: {len(result.nodes)} nodes, {len(result.edges)} edges"
    )
    print()
    _report("build", build_ms)
    _report("cache hit", hit_ms)
    _report("render pass", pass_ms)


if __name__ == "__main__":
    main()
