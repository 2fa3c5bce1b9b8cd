"""Load and save graph settings from/to JSON files.

Settings files are flat objects with dotted keys, the same shape the host
application keeps its preferences in::

    {"graph.grid_size": 22, "graph.delay": 100,
     "sgf.comment_properties": ["C", "N"]}

Keys the graph does not use are preserved by ``load_settings_dict`` and
ignored by ``load_settings``.
"""

from __future__ import annotations

import json
from pathlib import Path

from .types import GraphSettings


def load_settings_dict(path: Path) -> dict:
    """Load a settings JSON file and return the raw dict.

    Raises ValueError if the file does not hold a JSON object.
    """
    with open(path) as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Settings file {path} must contain a JSON object")
    return data


def load_settings(path: Path) -> GraphSettings:
    """Load a settings JSON file into ``GraphSettings``."""
    return GraphSettings.from_dict(load_settings_dict(path))


def save_settings_dict(data: dict, path: Path) -> None:
    """Write a settings dict to a JSON file.

    Creates parent directories if they don't exist.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(data, f, indent=2, sort_keys=True)
        f.write("\n")
