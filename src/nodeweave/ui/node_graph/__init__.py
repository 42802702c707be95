"""
Node Graph UI components.

This package provides the Qt host widget for the node editor.
"""

from nodeweave.ui.node_graph.canvas import (
    NodeEditorCanvas,
    QtPainter,
    buttons_from_qt,
    modifiers_from_qt,
)

__all__ = [
    "NodeEditorCanvas",
    "QtPainter",
    "buttons_from_qt",
    "modifiers_from_qt",
]
