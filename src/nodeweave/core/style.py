"""
Editor Style - Layout metrics and colour themes.

Metrics are expressed in canvas units (for node layout) or screen pixels
(for hover/hit distances, which are divided by zoom before being compared
against canvas-space geometry). Colours are plain RGBA tuples so the core
stays independent of any drawing toolkit.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from nodeweave.core.geometry import Size2D, Vec2


Color = tuple[int, int, int, int]


class ColorStyle(Enum):
    """Named colour slots used by the frame painter."""
    NODE_BACKGROUND = "node_background"
    NODE_BACKGROUND_HOVERED = "node_background_hovered"
    NODE_BACKGROUND_SELECTED = "node_background_selected"
    NODE_OUTLINE = "node_outline"
    TITLE_BAR = "title_bar"
    TITLE_BAR_HOVERED = "title_bar_hovered"
    TITLE_BAR_SELECTED = "title_bar_selected"
    LINK = "link"
    LINK_HOVERED = "link_hovered"
    LINK_SELECTED = "link_selected"
    PIN = "pin"
    PIN_HOVERED = "pin_hovered"
    BOX_SELECTOR = "box_selector"
    BOX_SELECTOR_OUTLINE = "box_selector_outline"
    GRID_BACKGROUND = "grid_background"
    GRID_LINE = "grid_line"


def colors_dark() -> dict[ColorStyle, Color]:
    """Dark colour theme (default)."""
    return {
        ColorStyle.NODE_BACKGROUND: (50, 50, 50, 255),
        ColorStyle.NODE_BACKGROUND_HOVERED: (75, 75, 75, 255),
        ColorStyle.NODE_BACKGROUND_SELECTED: (75, 75, 75, 255),
        ColorStyle.NODE_OUTLINE: (100, 100, 100, 255),
        ColorStyle.TITLE_BAR: (41, 74, 122, 255),
        ColorStyle.TITLE_BAR_HOVERED: (66, 150, 250, 255),
        ColorStyle.TITLE_BAR_SELECTED: (66, 150, 250, 255),
        ColorStyle.LINK: (61, 133, 224, 200),
        ColorStyle.LINK_HOVERED: (66, 150, 250, 255),
        ColorStyle.LINK_SELECTED: (66, 150, 250, 255),
        ColorStyle.PIN: (53, 150, 250, 180),
        ColorStyle.PIN_HOVERED: (53, 150, 250, 255),
        ColorStyle.BOX_SELECTOR: (61, 133, 224, 30),
        ColorStyle.BOX_SELECTOR_OUTLINE: (61, 133, 224, 150),
        ColorStyle.GRID_BACKGROUND: (40, 40, 50, 200),
        ColorStyle.GRID_LINE: (200, 200, 200, 40),
    }


def colors_classic() -> dict[ColorStyle, Color]:
    """Classic colour theme."""
    colors = colors_dark()
    colors.update({
        ColorStyle.TITLE_BAR: (69, 69, 138, 255),
        ColorStyle.TITLE_BAR_HOVERED: (82, 82, 161, 255),
        ColorStyle.TITLE_BAR_SELECTED: (82, 82, 161, 255),
        ColorStyle.LINK: (255, 255, 255, 100),
        ColorStyle.LINK_HOVERED: (105, 99, 204, 153),
        ColorStyle.LINK_SELECTED: (105, 99, 204, 153),
        ColorStyle.PIN: (89, 102, 156, 170),
        ColorStyle.PIN_HOVERED: (102, 122, 179, 200),
        ColorStyle.BOX_SELECTOR: (82, 82, 161, 100),
        ColorStyle.BOX_SELECTOR_OUTLINE: (82, 82, 161, 255),
    })
    return colors


def colors_light() -> dict[ColorStyle, Color]:
    """Light colour theme."""
    return {
        ColorStyle.NODE_BACKGROUND: (240, 240, 240, 255),
        ColorStyle.NODE_BACKGROUND_HOVERED: (240, 240, 240, 255),
        ColorStyle.NODE_BACKGROUND_SELECTED: (240, 240, 240, 255),
        ColorStyle.NODE_OUTLINE: (100, 100, 100, 255),
        ColorStyle.TITLE_BAR: (248, 248, 248, 255),
        ColorStyle.TITLE_BAR_HOVERED: (209, 209, 209, 255),
        ColorStyle.TITLE_BAR_SELECTED: (209, 209, 209, 255),
        ColorStyle.LINK: (66, 150, 250, 100),
        ColorStyle.LINK_HOVERED: (66, 150, 250, 242),
        ColorStyle.LINK_SELECTED: (66, 150, 250, 242),
        ColorStyle.PIN: (66, 150, 250, 160),
        ColorStyle.PIN_HOVERED: (66, 150, 250, 255),
        ColorStyle.BOX_SELECTOR: (90, 170, 250, 30),
        ColorStyle.BOX_SELECTOR_OUTLINE: (90, 170, 250, 150),
        ColorStyle.GRID_BACKGROUND: (225, 225, 225, 255),
        ColorStyle.GRID_LINE: (180, 180, 180, 100),
    }


THEMES = {
    "dark": colors_dark,
    "classic": colors_classic,
    "light": colors_light,
}


@dataclass
class Style:
    """
    Layout metrics and colours used by the builder, the engine and the painter.

    Attributes:
        node_padding: Space between node border and its content
        node_min_width: Lower bound on node width (canvas units)
        attribute_spacing: Vertical gap between stacked attributes
        default_content_size: Size used when content cannot be measured
        pin_offset: Horizontal distance of anchors outside the node border
        pin_hover_radius: Pin hover/press radius in screen pixels
        link_hover_distance: Link hit threshold in screen pixels
        link_tangent_min / link_tangent_max: Bounds on the bezier tangent length
        link_segments: Number of polyline segments used to sample a link
        default_origin: Position of the first node placed without an origin
        cascade_offset: Offset applied to each further default-placed node
    """
    grid_spacing: float = 32.0
    node_corner_rounding: float = 4.0
    node_padding: Vec2 = Vec2(8.0, 8.0)
    node_border_thickness: float = 1.0
    node_min_width: float = 0.0
    attribute_spacing: float = 4.0
    default_content_size: Size2D = Size2D(80.0, 18.0)

    link_thickness: float = 3.0
    link_hover_distance: float = 10.0
    link_tangent_min: float = 50.0
    link_tangent_max: float = 250.0
    link_segments: int = 32

    pin_circle_radius: float = 4.0
    pin_quad_side_length: float = 7.0
    pin_triangle_side_length: float = 9.5
    pin_line_thickness: float = 1.0
    pin_hover_radius: float = 10.0
    pin_offset: float = 0.0

    default_origin: Vec2 = Vec2(100.0, 100.0)
    cascade_offset: Vec2 = Vec2(40.0, 40.0)

    grid_lines: bool = True
    node_outline: bool = True
    colors: dict[ColorStyle, Color] = field(default_factory=colors_dark)

    def color(self, item: ColorStyle) -> Color:
        return self.colors[item]

    @classmethod
    def themed(cls, theme: str) -> Style:
        """Create a style using one of the named colour themes."""
        try:
            factory = THEMES[theme]
        except KeyError:
            raise ValueError(f"Unknown theme: {theme!r}") from None
        return cls(colors=factory())
