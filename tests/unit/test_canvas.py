"""
Tests for the Qt input conversion helpers.
"""

import pytest

QtWidgets = pytest.importorskip("PySide6.QtWidgets")

from PySide6.QtCore import Qt

from nodeweave.core.input import Modifiers, PointerButton
from nodeweave.ui.node_graph.canvas import buttons_from_qt, modifiers_from_qt


class TestButtonMapping:
    """Tests for buttons_from_qt."""

    def test_no_buttons(self):
        assert buttons_from_qt(Qt.MouseButton.NoButton) == frozenset()

    def test_combined_buttons(self):
        buttons = Qt.MouseButton.LeftButton | Qt.MouseButton.MiddleButton
        assert buttons_from_qt(buttons) == {PointerButton.PRIMARY, PointerButton.MIDDLE}

    def test_right_button(self):
        assert buttons_from_qt(Qt.MouseButton.RightButton) == {PointerButton.SECONDARY}


class TestModifierMapping:
    """Tests for modifiers_from_qt."""

    def test_no_modifiers(self):
        assert modifiers_from_qt(Qt.KeyboardModifier.NoModifier) == Modifiers.NONE

    def test_combined_modifiers(self):
        mods = Qt.KeyboardModifier.ControlModifier | Qt.KeyboardModifier.ShiftModifier
        assert modifiers_from_qt(mods) == Modifiers.CTRL | Modifiers.SHIFT
