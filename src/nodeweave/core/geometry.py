"""
Geometry - Small value types for canvas and screen coordinates.

This module defines:
- Vec2: 2D point/vector used for positions, anchors and deltas
- Size2D: Width/height pair returned by content measurement
- Rect: Axis-aligned rectangle with hit-testing helpers
- CanvasTransform: Canvas <-> screen conversion for one frame
"""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Vec2:
    """2D point or vector."""
    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: Vec2) -> Vec2:
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vec2) -> Vec2:
        return Vec2(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> Vec2:
        return Vec2(self.x * scalar, self.y * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> Vec2:
        return Vec2(self.x / scalar, self.y / scalar)

    def __neg__(self) -> Vec2:
        return Vec2(-self.x, -self.y)

    @property
    def length(self) -> float:
        return math.hypot(self.x, self.y)

    def length_sq(self) -> float:
        return self.x * self.x + self.y * self.y

    def distance(self, other: Vec2) -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def distance_sq(self, other: Vec2) -> float:
        return (self.x - other.x) ** 2 + (self.y - other.y) ** 2

    def as_tuple(self) -> tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True, slots=True)
class Size2D:
    """2D size for content and node dimensions."""
    width: float = 0.0
    height: float = 0.0


@dataclass(frozen=True, slots=True)
class Rect:
    """
    Axis-aligned rectangle.

    `min` is the top-left corner and `max` the bottom-right corner
    (screen convention, y grows downwards). Containment and
    intersection tests are inclusive of the border.
    """
    min: Vec2
    max: Vec2

    @classmethod
    def from_min_size(cls, origin: Vec2, size: Size2D) -> Rect:
        return cls(origin, Vec2(origin.x + size.width, origin.y + size.height))

    @classmethod
    def from_points(cls, a: Vec2, b: Vec2) -> Rect:
        """Build a normalized rect spanning two arbitrary corners."""
        return cls(
            Vec2(min(a.x, b.x), min(a.y, b.y)),
            Vec2(max(a.x, b.x), max(a.y, b.y)),
        )

    @classmethod
    def bounding(cls, points: list[Vec2]) -> Rect:
        xs = [p.x for p in points]
        ys = [p.y for p in points]
        return cls(Vec2(min(xs), min(ys)), Vec2(max(xs), max(ys)))

    @property
    def left(self) -> float:
        return self.min.x

    @property
    def right(self) -> float:
        return self.max.x

    @property
    def top(self) -> float:
        return self.min.y

    @property
    def bottom(self) -> float:
        return self.max.y

    @property
    def width(self) -> float:
        return self.max.x - self.min.x

    @property
    def height(self) -> float:
        return self.max.y - self.min.y

    @property
    def size(self) -> Size2D:
        return Size2D(self.width, self.height)

    @property
    def center(self) -> Vec2:
        return Vec2((self.min.x + self.max.x) * 0.5, (self.min.y + self.max.y) * 0.5)

    def contains(self, p: Vec2) -> bool:
        return self.min.x <= p.x <= self.max.x and self.min.y <= p.y <= self.max.y

    def intersects(self, other: Rect) -> bool:
        return (
            self.min.x <= other.max.x and other.min.x <= self.max.x
            and self.min.y <= other.max.y and other.min.y <= self.max.y
        )

    def expand(self, margin: float) -> Rect:
        return Rect(
            Vec2(self.min.x - margin, self.min.y - margin),
            Vec2(self.max.x + margin, self.max.y + margin),
        )

    def expand2(self, margin: Vec2) -> Rect:
        return Rect(self.min - margin, self.max + margin)

    def translate(self, delta: Vec2) -> Rect:
        return Rect(self.min + delta, self.max + delta)

    def union(self, other: Rect) -> Rect:
        return Rect(
            Vec2(min(self.min.x, other.min.x), min(self.min.y, other.min.y)),
            Vec2(max(self.max.x, other.max.x), max(self.max.y, other.max.y)),
        )


@dataclass(frozen=True, slots=True)
class CanvasTransform:
    """
    Handles canvas pan and zoom transformations for a single frame.

    Screen = origin + pan + canvas * zoom, where `origin` is the top-left
    corner of the canvas widget on screen. "Editor space" is screen space
    relative to that corner.
    """
    origin: Vec2 = Vec2()
    pan: Vec2 = Vec2()
    zoom: float = 1.0

    def canvas_to_screen(self, p: Vec2) -> Vec2:
        """Convert canvas coordinates to screen coordinates."""
        return Vec2(
            self.origin.x + self.pan.x + p.x * self.zoom,
            self.origin.y + self.pan.y + p.y * self.zoom,
        )

    def screen_to_canvas(self, p: Vec2) -> Vec2:
        """Convert screen coordinates to canvas coordinates."""
        return Vec2(
            (p.x - self.origin.x - self.pan.x) / self.zoom,
            (p.y - self.origin.y - self.pan.y) / self.zoom,
        )

    def screen_to_editor(self, p: Vec2) -> Vec2:
        return p - self.origin

    def editor_to_screen(self, p: Vec2) -> Vec2:
        return p + self.origin

    def rect_to_screen(self, rect: Rect) -> Rect:
        return Rect(self.canvas_to_screen(rect.min), self.canvas_to_screen(rect.max))

    def rect_to_canvas(self, rect: Rect) -> Rect:
        return Rect(self.screen_to_canvas(rect.min), self.screen_to_canvas(rect.max))
