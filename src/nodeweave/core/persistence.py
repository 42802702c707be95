"""
Persistence - Save and load editor state (positions, pan, zoom).

Only what the editor owns is saved. Nodes and links belong to the caller
and are never part of this record.

Format:
    {"version": 1, "zoom": 1.0, "pan": {"x": 0, "y": 0},
     "nodes": [{"id": 1, "x": 100, "y": 100}, ...]}
"""

from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import Any

from nodeweave.core.declarations import NodeId
from nodeweave.core.geometry import Vec2
from nodeweave.core.state import GraphState


logger = logging.getLogger(__name__)

FORMAT_VERSION = 1


class FormatError(ValueError):
    """Saved editor state is malformed or has an unknown version."""


def _reject_constant(name: str) -> Any:
    raise FormatError(f"Invalid editor state: {name} is not a number")


def state_to_dict(state: GraphState) -> dict[str, Any]:
    """Serialize the editor-owned part of a GraphState."""
    return {
        "version": FORMAT_VERSION,
        "zoom": state.zoom,
        "pan": {"x": state.pan.x, "y": state.pan.y},
        "nodes": [
            {"id": int(node_id), "x": pos.x, "y": pos.y}
            for node_id, pos in state.positions.items()
        ],
    }


def parse_state(data: Any) -> tuple[dict[NodeId, Vec2], Vec2, float]:
    """
    Validate a saved record.

    Returns (positions, pan, zoom). Raises FormatError on any problem.
    """
    if not isinstance(data, dict):
        raise FormatError("Invalid editor state: expected an object")

    version = data.get("version")
    if type(version) is not int or version != FORMAT_VERSION:
        raise FormatError(f"Unsupported editor state version: {version!r}")

    try:
        zoom = float(data["zoom"])
        pan = Vec2(float(data["pan"]["x"]), float(data["pan"]["y"]))
        positions = {
            NodeId(int(entry["id"])): Vec2(float(entry["x"]), float(entry["y"]))
            for entry in data["nodes"]
        }
    except (KeyError, TypeError, ValueError) as e:
        raise FormatError(f"Invalid editor state: {e}") from e

    numbers = [zoom, pan.x, pan.y]
    for position in positions.values():
        numbers.extend((position.x, position.y))
    if not all(math.isfinite(n) for n in numbers):
        raise FormatError("Invalid editor state: non-finite number")

    if zoom <= 0:
        raise FormatError(f"Invalid editor state: zoom must be positive, got {zoom}")

    return positions, pan, zoom


def apply_state(state: GraphState, data: Any) -> None:
    """Validate `data` fully, then apply it; state is untouched on error."""
    positions, pan, zoom = parse_state(data)
    state.restore(positions, pan, zoom)


def save_state(state: GraphState, path: Path) -> Path:
    """
    Save editor state to a JSON file.

    Returns:
        Path where the state was saved
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        json.dump(state_to_dict(state), f, indent=2)

    logger.info("Saved editor state to %s", path)
    return path


def load_state(state: GraphState, path: Path) -> None:
    """
    Load editor state from a JSON file into `state`.

    Raises:
        FileNotFoundError: If the file doesn't exist
        FormatError: If the file is not a valid editor state record
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Editor state not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f, parse_constant=_reject_constant)
        except json.JSONDecodeError as e:
            raise FormatError(f"Invalid editor state format: {path}") from e

    apply_state(state, data)
    logger.info("Loaded editor state from %s", path)
