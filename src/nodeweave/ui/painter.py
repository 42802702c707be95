"""
Frame Painter - Draws a FrameResult through a toolkit-neutral Painter.

The painter protocol is the only thing a drawing backend has to provide.
FramePainter turns one frame's geometry, selection and hover state into
draw calls in screen space, in this order:
grid, links, nodes (bottom to top), pending link, box selector.
"""

from __future__ import annotations

import math
from contextlib import AbstractContextManager
from typing import Any, Protocol, Sequence, runtime_checkable

from nodeweave.core.declarations import PinShape
from nodeweave.core.editor import FrameResult
from nodeweave.core.frame import AttributeLayout, LinkLayout, NodeLayout
from nodeweave.core.geometry import CanvasTransform, Rect, Size2D, Vec2
from nodeweave.core.links import LinkCurve
from nodeweave.core.style import Color, ColorStyle, Style


@runtime_checkable
class Painter(Protocol):
    """Drawing surface used by FramePainter. All coordinates are screen space."""

    def measure(self, content: Any) -> Size2D | None:
        """Size of opaque content at zoom 1, or None if it cannot be measured."""
        ...

    def draw_content(self, content: Any, rect: Rect, zoom: float) -> None:
        ...

    def line(self, a: Vec2, b: Vec2, color: Color, thickness: float) -> None:
        ...

    def bezier(self, p0: Vec2, p1: Vec2, p2: Vec2, p3: Vec2, color: Color, thickness: float) -> None:
        ...

    def fill_rect(self, rect: Rect, color: Color, rounding: float = 0.0) -> None:
        ...

    def stroke_rect(self, rect: Rect, color: Color, thickness: float, rounding: float = 0.0) -> None:
        ...

    def fill_circle(self, center: Vec2, radius: float, color: Color) -> None:
        ...

    def stroke_circle(self, center: Vec2, radius: float, color: Color, thickness: float) -> None:
        ...

    def polygon(self, points: Sequence[Vec2], color: Color, filled: bool, thickness: float = 1.0) -> None:
        ...

    def clip(self, rect: Rect) -> AbstractContextManager[None]:
        """Restrict drawing to `rect` for the duration of the context."""
        ...


def triangle_points(center: Vec2, side: float) -> list[Vec2]:
    """Right-pointing triangle centred on its centroid."""
    sqrt3 = math.sqrt(3.0)
    left = -side * sqrt3 / 6.0
    right = side * sqrt3 / 3.0
    half = side * 0.5
    return [
        Vec2(center.x + left, center.y + half),
        Vec2(center.x + right, center.y),
        Vec2(center.x + left, center.y - half),
    ]


def quad_points(center: Vec2, side: float) -> list[Vec2]:
    half = side * 0.5
    return [
        Vec2(center.x - half, center.y - half),
        Vec2(center.x + half, center.y - half),
        Vec2(center.x + half, center.y + half),
        Vec2(center.x - half, center.y + half),
    ]


class FramePainter:
    """Renders frames with a given style."""

    def __init__(self, style: Style):
        self.style = style

    def paint(self, painter: Painter, frame: FrameResult, canvas_rect: Rect) -> None:
        """Draw a complete frame into `canvas_rect`."""
        transform = frame.transform
        with painter.clip(canvas_rect):
            self._draw_grid(painter, canvas_rect, transform)

            for link in frame.geometry.links.values():
                self._draw_link(painter, link, frame, transform)

            for node in frame.geometry.nodes.values():
                self._draw_node(painter, node, frame, transform)

            if frame.pending_curve is not None:
                self._draw_curve(
                    painter,
                    frame.pending_curve,
                    transform,
                    self.style.color(ColorStyle.LINK_SELECTED),
                    self.style.link_thickness,
                )

            if frame.box_rect is not None:
                painter.fill_rect(frame.box_rect, self.style.color(ColorStyle.BOX_SELECTOR))
                painter.stroke_rect(frame.box_rect, self.style.color(ColorStyle.BOX_SELECTOR_OUTLINE), 1.0)

    # --- Grid ---

    def _draw_grid(self, painter: Painter, canvas_rect: Rect, transform: CanvasTransform) -> None:
        style = self.style
        painter.fill_rect(canvas_rect, style.color(ColorStyle.GRID_BACKGROUND))
        if not style.grid_lines:
            return

        spacing = style.grid_spacing * transform.zoom
        if spacing <= 1.0:
            return
        color = style.color(ColorStyle.GRID_LINE)

        x = canvas_rect.left + transform.pan.x % spacing
        while x < canvas_rect.right:
            painter.line(Vec2(x, canvas_rect.top), Vec2(x, canvas_rect.bottom), color, 1.0)
            x += spacing

        y = canvas_rect.top + transform.pan.y % spacing
        while y < canvas_rect.bottom:
            painter.line(Vec2(canvas_rect.left, y), Vec2(canvas_rect.right, y), color, 1.0)
            y += spacing

    # --- Links ---

    def _draw_link(
        self,
        painter: Painter,
        link: LinkLayout,
        frame: FrameResult,
        transform: CanvasTransform,
    ) -> None:
        style = self.style
        args = link.args
        if link.id in frame.selected_links:
            color = args.selected or style.color(ColorStyle.LINK_SELECTED)
        elif link.id == frame.hovered_link:
            color = args.hovered or style.color(ColorStyle.LINK_HOVERED)
        else:
            color = args.base or style.color(ColorStyle.LINK)
        thickness = args.thickness if args.thickness is not None else style.link_thickness
        self._draw_curve(painter, link.curve, transform, color, thickness)

    def _draw_curve(
        self,
        painter: Painter,
        curve: LinkCurve,
        transform: CanvasTransform,
        color: Color,
        thickness: float,
    ) -> None:
        p0, p1, p2, p3 = (
            transform.canvas_to_screen(p) for p in (curve.p0, curve.p1, curve.p2, curve.p3)
        )
        painter.bezier(p0, p1, p2, p3, color, thickness)

    # --- Nodes ---

    def _draw_node(
        self,
        painter: Painter,
        node: NodeLayout,
        frame: FrameResult,
        transform: CanvasTransform,
    ) -> None:
        style = self.style
        args = node.args
        zoom = transform.zoom
        rounding = (args.corner_rounding if args.corner_rounding is not None else style.node_corner_rounding) * zoom

        selected = node.id in frame.selected_nodes
        hovered = node.id == frame.hovered_node
        if selected:
            background = args.background_selected or style.color(ColorStyle.NODE_BACKGROUND_SELECTED)
            titlebar = args.titlebar_selected or style.color(ColorStyle.TITLE_BAR_SELECTED)
        elif hovered:
            background = args.background_hovered or style.color(ColorStyle.NODE_BACKGROUND_HOVERED)
            titlebar = args.titlebar_hovered or style.color(ColorStyle.TITLE_BAR_HOVERED)
        else:
            background = args.background or style.color(ColorStyle.NODE_BACKGROUND)
            titlebar = args.titlebar or style.color(ColorStyle.TITLE_BAR)

        rect = transform.rect_to_screen(node.rect)
        painter.fill_rect(rect, background, rounding)

        if node.title_rect is not None:
            painter.fill_rect(transform.rect_to_screen(node.title_rect), titlebar, rounding)

        if style.node_outline:
            thickness = args.border_thickness if args.border_thickness is not None else style.node_border_thickness
            outline = args.outline or style.color(ColorStyle.NODE_OUTLINE)
            painter.stroke_rect(rect, outline, thickness, rounding)

        if node.title_content_rect is not None:
            painter.draw_content(node.title, transform.rect_to_screen(node.title_content_rect), zoom)

        for pin_id in node.attributes:
            attribute = frame.geometry.attributes[pin_id]
            if attribute.content is not None:
                painter.draw_content(attribute.content, transform.rect_to_screen(attribute.rect), zoom)
            if attribute.anchor is not None:
                self._draw_pin(painter, attribute, frame, transform)

    def _draw_pin(
        self,
        painter: Painter,
        attribute: AttributeLayout,
        frame: FrameResult,
        transform: CanvasTransform,
    ) -> None:
        style = self.style
        args = attribute.args
        if attribute.id == frame.hovered_pin:
            color = args.hovered or style.color(ColorStyle.PIN_HOVERED)
        else:
            color = args.background or style.color(ColorStyle.PIN)

        center = transform.canvas_to_screen(attribute.anchor)
        shape = attribute.shape
        if shape is PinShape.CIRCLE:
            painter.stroke_circle(center, style.pin_circle_radius, color, style.pin_line_thickness)
        elif shape is PinShape.CIRCLE_FILLED:
            painter.fill_circle(center, style.pin_circle_radius, color)
        elif shape is PinShape.QUAD:
            painter.polygon(quad_points(center, style.pin_quad_side_length), color, False, style.pin_line_thickness)
        elif shape is PinShape.QUAD_FILLED:
            painter.polygon(quad_points(center, style.pin_quad_side_length), color, True)
        elif shape is PinShape.TRIANGLE:
            painter.polygon(
                triangle_points(center, style.pin_triangle_side_length), color, False, style.pin_line_thickness,
            )
        else:
            painter.polygon(triangle_points(center, style.pin_triangle_side_length), color, True)
