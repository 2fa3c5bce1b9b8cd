"""Tests for reading and writing tree files."""

import json

import pytest
from PIL import Image

from ..engine import gametree
from .tree_io import (
    load_tree,
    load_tree_json,
    load_tree_png,
    save_tree_json,
    save_tree_png,
)


def _sample_tree():
    root = gametree.GameTree(nodes=[{}, {"B": ["pd"]}])
    main = root.add_subtree(gametree.GameTree(nodes=[{"W": ["dp"]}]))
    root.add_subtree(gametree.GameTree(nodes=[{"W": [""]}, {"C": "hm"}]))
    main.add_subtree(gametree.GameTree(nodes=[{"B": ["qq"]}]))
    root.current = 1
    return root


def _shape(tree):
    return gametree.to_dict(tree)


def test_snapshot_reopens_as_tree(tmp_path):
    """A snapshot reopens as the same tree, selection included."""
    img = Image.new("RGB", (100, 100), "green")
    path = str(tmp_path / "tree.png")
    root = _sample_tree()

    save_tree_png(img, root, path)
    loaded = load_tree_png(path)

    assert _shape(loaded) == _shape(root)
    assert loaded.current == 1
    assert loaded.subtrees[0].parent is loaded


def test_foreign_png_rejected(tmp_path):
    """A screenshot taken elsewhere has no tree to restore."""
    img = Image.new("RGB", (100, 100), "red")
    path = str(tmp_path / "plain.png")
    img.save(path)

    with pytest.raises(ValueError, match="movegraph_tree"):
        load_tree_png(path)


def test_json_roundtrip(tmp_path):
    path = str(tmp_path / "tree.json")
    root = _sample_tree()
    save_tree_json(root, path)
    with open(path) as f:
        assert json.load(f) == _shape(root)
    assert _shape(load_tree_json(path)) == _shape(root)


def test_load_tree_by_suffix(tmp_path):
    """Suffix matching ignores case."""
    root = _sample_tree()
    json_path = str(tmp_path / "tree.JSON")
    save_tree_json(root, json_path)
    assert _shape(load_tree(json_path)) == _shape(root)

    png_path = str(tmp_path / "tree.png")
    save_tree_png(Image.new("RGB", (10, 10)), root, png_path)
    assert _shape(load_tree(png_path)) == _shape(root)


def test_unknown_suffix_rejected():
    with pytest.raises(ValueError, match="expected one of .json, .png"):
        load_tree("tree.sgf")
