"""
Tests for editor settings and style.
"""

import json
import logging

import pytest

from nodeweave.core.input import Modifiers, PointerButton
from nodeweave.core.settings import EditorSettings, load_settings, save_settings
from nodeweave.core.style import ColorStyle, Style, colors_light


class TestEditorSettings:
    """Tests for EditorSettings."""

    def test_defaults(self):
        settings = EditorSettings()
        assert settings.pan_button is PointerButton.MIDDLE
        assert settings.additive_modifier == Modifiers.CTRL
        assert settings.zoom_min == 0.25

    def test_dict_round_trip(self):
        settings = EditorSettings(
            pan_button=None,
            pan_modifier=Modifiers.SHIFT,
            drag_threshold=5.0,
            zoom_max=8.0,
        )
        data = settings.to_dict()
        assert data["pan_button"] is None
        assert data["pan_modifier"] == "shift"
        assert EditorSettings.from_dict(data) == settings

    def test_combined_modifiers(self):
        settings = EditorSettings(additive_modifier=Modifiers.CTRL | Modifiers.SHIFT)
        data = settings.to_dict()
        assert data["additive_modifier"] == "shift|ctrl"
        assert EditorSettings.from_dict(data).additive_modifier == Modifiers.CTRL | Modifiers.SHIFT

    def test_from_partial_dict(self):
        settings = EditorSettings.from_dict({"zoom_step": 1.25})
        assert settings.zoom_step == 1.25
        assert settings.pan_button is PointerButton.MIDDLE
        assert settings.link_detach_modifier == Modifiers.ALT

    def test_invalid_zoom_bounds(self):
        with pytest.raises(ValueError):
            EditorSettings(zoom_min=2.0, zoom_max=1.0)


class TestSettingsFile:
    """Tests for loading and saving the settings file."""

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "config" / "settings.json"
        settings = EditorSettings(additive_modifier=Modifiers.SHIFT)

        assert save_settings(settings, path) == path
        assert load_settings(path) == settings

    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_settings(tmp_path / "nope.json") == EditorSettings()

    def test_corrupt_file_gives_defaults(self, tmp_path, caplog):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"pan_modifier": "hyper"}))

        with caplog.at_level(logging.WARNING):
            settings = load_settings(path)

        assert settings == EditorSettings()
        assert "Failed to load editor settings" in caplog.text


class TestStyle:
    """Tests for Style themes."""

    def test_default_theme_is_dark(self):
        style = Style()
        assert style.color(ColorStyle.TITLE_BAR) == (41, 74, 122, 255)

    def test_themed(self):
        assert Style.themed("light").colors == colors_light()

    def test_unknown_theme(self):
        with pytest.raises(ValueError):
            Style.themed("neon")
