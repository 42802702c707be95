"""
Frame Input - Per-frame pointer and keyboard snapshot.

The host (e.g. the Qt canvas) samples its input state once per frame and
hands it to the editor as a FrameInput. The engine derives press/release
edges by comparing against the previous frame, so hosts only report what is
currently held.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntFlag

from nodeweave.core.geometry import Vec2


class PointerButton(Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"
    MIDDLE = "middle"


class Modifiers(IntFlag):
    """Keyboard modifier state."""
    NONE = 0
    SHIFT = 1 << 0
    CTRL = 1 << 1
    ALT = 1 << 2
    COMMAND = 1 << 3


@dataclass(frozen=True)
class FrameInput:
    """
    Input state for one frame.

    Attributes:
        pointer: Pointer position in screen space, None if unknown
        buttons: Buttons currently held down
        modifiers: Modifier keys currently held down
        delete_pressed: Delete action requested this frame
        scroll: Wheel steps this frame (positive zooms in)
    """
    pointer: Vec2 | None = None
    buttons: frozenset[PointerButton] = field(default_factory=frozenset)
    modifiers: Modifiers = Modifiers.NONE
    delete_pressed: bool = False
    scroll: float = 0.0

    @classmethod
    def at(
        cls,
        x: float,
        y: float,
        *buttons: PointerButton,
        modifiers: Modifiers = Modifiers.NONE,
        delete_pressed: bool = False,
        scroll: float = 0.0,
    ) -> FrameInput:
        """Shorthand for a pointer at (x, y) holding the given buttons."""
        return cls(
            pointer=Vec2(x, y),
            buttons=frozenset(buttons),
            modifiers=modifiers,
            delete_pressed=delete_pressed,
            scroll=scroll,
        )

    def is_down(self, button: PointerButton) -> bool:
        return button in self.buttons

    def has_modifier(self, modifier: Modifiers) -> bool:
        if modifier == Modifiers.NONE:
            return False
        return bool(self.modifiers & modifier)
