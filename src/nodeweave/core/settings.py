"""
Editor Settings - Input bindings and behaviour knobs.

Settings are saved with the user's configuration and can be loaded from a
JSON file. Visual metrics live in Style; this module covers how the editor
reacts to input.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from nodeweave.core.input import Modifiers, PointerButton


logger = logging.getLogger(__name__)

# Default settings location
SETTINGS_PATH = Path.home() / ".config" / "nodeweave" / "settings.json"


def _modifier_to_str(modifier: Modifiers) -> str:
    names = [m.name.lower() for m in Modifiers if m and m in modifier]
    return "|".join(names) if names else "none"


def _modifier_from_str(value: str) -> Modifiers:
    result = Modifiers.NONE
    for part in value.split("|"):
        result |= Modifiers[part.strip().upper()]
    return result


@dataclass
class EditorSettings:
    """
    Input bindings and interaction thresholds.

    Attributes:
        pan_button: Button that pans the canvas while held (None disables it)
        pan_modifier: Modifier that turns a primary drag into a pan
        additive_modifier: Modifier that adds to the selection instead of replacing it
        link_detach_modifier: Modifier that detaches a link when pressing on it
        drag_threshold: Pointer travel (pixels) before a node press becomes a drag
        zoom_min / zoom_max: Zoom bounds
        zoom_step: Zoom factor applied per wheel step
    """
    pan_button: PointerButton | None = PointerButton.MIDDLE
    pan_modifier: Modifiers = Modifiers.NONE
    additive_modifier: Modifiers = Modifiers.CTRL
    link_detach_modifier: Modifiers = Modifiers.ALT
    drag_threshold: float = 3.0
    zoom_min: float = 0.25
    zoom_max: float = 4.0
    zoom_step: float = 1.1

    def __post_init__(self) -> None:
        if self.zoom_min <= 0 or self.zoom_min > self.zoom_max:
            raise ValueError(
                f"Invalid zoom bounds: [{self.zoom_min}, {self.zoom_max}]"
            )

    def to_dict(self) -> dict[str, Any]:
        """Convert settings to dictionary for serialization."""
        return {
            "pan_button": self.pan_button.value if self.pan_button else None,
            "pan_modifier": _modifier_to_str(self.pan_modifier),
            "additive_modifier": _modifier_to_str(self.additive_modifier),
            "link_detach_modifier": _modifier_to_str(self.link_detach_modifier),
            "drag_threshold": self.drag_threshold,
            "zoom_min": self.zoom_min,
            "zoom_max": self.zoom_max,
            "zoom_step": self.zoom_step,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EditorSettings:
        """Create settings from dictionary."""
        pan_button = data.get("pan_button", PointerButton.MIDDLE.value)
        return cls(
            pan_button=PointerButton(pan_button) if pan_button else None,
            pan_modifier=_modifier_from_str(data.get("pan_modifier", "none")),
            additive_modifier=_modifier_from_str(data.get("additive_modifier", "ctrl")),
            link_detach_modifier=_modifier_from_str(data.get("link_detach_modifier", "alt")),
            drag_threshold=float(data.get("drag_threshold", 3.0)),
            zoom_min=float(data.get("zoom_min", 0.25)),
            zoom_max=float(data.get("zoom_max", 4.0)),
            zoom_step=float(data.get("zoom_step", 1.1)),
        )


def load_settings(path: Path | None = None) -> EditorSettings:
    """
    Load editor settings from a JSON file.

    A missing or unreadable file yields the defaults; the problem is logged
    rather than raised so a broken config never prevents the editor from
    starting.
    """
    if path is None:
        path = SETTINGS_PATH

    if not path.exists():
        return EditorSettings()

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return EditorSettings.from_dict(data)
    except (OSError, json.JSONDecodeError, KeyError, ValueError, TypeError) as e:
        logger.warning("Failed to load editor settings from %s: %s", path, e)
        return EditorSettings()


def save_settings(settings: EditorSettings, path: Path | None = None) -> Path:
    """Save editor settings to a JSON file, returning the path written."""
    if path is None:
        path = SETTINGS_PATH

    # Ensure directory exists
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        json.dump(settings.to_dict(), f, indent=2)

    return path
