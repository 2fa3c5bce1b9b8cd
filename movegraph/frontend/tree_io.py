"""Tree files for the viewer's Open and Snapshot commands.

Two formats are read. A ``.json`` file is the output of
``gametree.to_dict``. A ``.png`` snapshot is a picture of the graph whose
``movegraph_tree`` text chunk carries that same JSON, so a screenshot of
a game can be reopened as the game itself.
"""

import json
from pathlib import Path

from PIL import Image
from PIL.PngImagePlugin import PngInfo

from ..engine import gametree

METADATA_KEY = "movegraph_tree"


def save_tree_png(img, root, path):
    info = PngInfo()
    info.add_text(METADATA_KEY, json.dumps(gametree.to_dict(root)))
    img.save(path, pnginfo=info)


def load_tree_png(path):
    """Rebuild the tree stored in a snapshot.

    A PNG saved by anything other than ``save_tree_png`` has no tree
    chunk and raises ValueError.
    """
    with Image.open(path) as img:
        payload = getattr(img, "text", {}).get(METADATA_KEY)
    if payload is None:
        raise ValueError(f"{path} has no {METADATA_KEY} text chunk")
    return gametree.from_dict(json.loads(payload))


def load_tree_json(path):
    with open(path) as f:
        return gametree.from_dict(json.load(f))


def save_tree_json(root, path):
    with open(path, "w") as f:
        json.dump(gametree.to_dict(root), f, indent=2)
        f.write("\n")


_LOADERS = {
    ".json": load_tree_json,
    ".png": load_tree_png,
}


def load_tree(path):
    loader = _LOADERS.get(Path(path).suffix.lower())
    if loader is None:
        known = ", ".join(sorted(_LOADERS))
        raise ValueError(f"Can't open {path}: expected one of {known}")
    return loader(path)
