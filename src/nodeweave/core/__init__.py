"""
Core module - Geometry, state and interaction for the node editor.

This module provides the toolkit-independent engine:
- Declarations: What the caller re-declares each frame
- GraphState: Persistent positions, selection, pan and zoom
- FrameBuilder: Node/pin/link layout for one frame
- InteractionEngine: Hover resolution and the gesture state machine
- NodeEditor: The per-frame entry point tying it all together
"""

from nodeweave.core.declarations import (
    AttributeDecl,
    AttributeFlags,
    AttributeKind,
    LinkArgs,
    LinkDecl,
    LinkId,
    NodeArgs,
    NodeBuilder,
    NodeDecl,
    NodeId,
    PinArgs,
    PinId,
    PinShape,
)

from nodeweave.core.editor import (
    CoordinateSpace,
    FrameResult,
    NodeEditor,
)

from nodeweave.core.events import (
    EditorEvent,
    HoveredLinkChanged,
    HoveredNodeChanged,
    HoveredPinChanged,
    LinkCreated,
    LinkDestroyed,
    LinkStarted,
    LinkSelectionChanged,
    NodeDeletionRequested,
    NodeSelectionChanged,
    NodesMoved,
)

from nodeweave.core.frame import (
    AttributeLayout,
    Diagnostic,
    FrameBuilder,
    FrameGeometry,
    LinkLayout,
    NodeLayout,
)

from nodeweave.core.geometry import (
    CanvasTransform,
    Rect,
    Size2D,
    Vec2,
)

from nodeweave.core.input import (
    FrameInput,
    Modifiers,
    PointerButton,
)

from nodeweave.core.interaction import (
    Hover,
    InteractionEngine,
    InteractionResult,
)

from nodeweave.core.links import LinkCurve

from nodeweave.core.persistence import FormatError

from nodeweave.core.settings import (
    EditorSettings,
    load_settings,
    save_settings,
)

from nodeweave.core.state import (
    GraphState,
    InteractionMode,
)

from nodeweave.core.style import (
    ColorStyle,
    Style,
)


__all__ = [
    # declarations.py
    "AttributeDecl",
    "AttributeFlags",
    "AttributeKind",
    "LinkArgs",
    "LinkDecl",
    "LinkId",
    "NodeArgs",
    "NodeBuilder",
    "NodeDecl",
    "NodeId",
    "PinArgs",
    "PinId",
    "PinShape",
    # editor.py
    "CoordinateSpace",
    "FrameResult",
    "NodeEditor",
    # events.py
    "EditorEvent",
    "HoveredLinkChanged",
    "HoveredNodeChanged",
    "HoveredPinChanged",
    "LinkCreated",
    "LinkDestroyed",
    "LinkStarted",
    "LinkSelectionChanged",
    "NodeDeletionRequested",
    "NodeSelectionChanged",
    "NodesMoved",
    # frame.py
    "AttributeLayout",
    "Diagnostic",
    "FrameBuilder",
    "FrameGeometry",
    "LinkLayout",
    "NodeLayout",
    # geometry.py
    "CanvasTransform",
    "Rect",
    "Size2D",
    "Vec2",
    # input.py
    "FrameInput",
    "Modifiers",
    "PointerButton",
    # interaction.py
    "Hover",
    "InteractionEngine",
    "InteractionResult",
    # links.py
    "LinkCurve",
    # persistence.py
    "FormatError",
    # settings.py
    "EditorSettings",
    "load_settings",
    "save_settings",
    # state.py
    "GraphState",
    "InteractionMode",
    # style.py
    "ColorStyle",
    "Style",
]
