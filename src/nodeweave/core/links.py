"""
Link Geometry - Cubic bezier curves for links and their hit tests.

A link is drawn as a cubic bezier from its start anchor (output side) to
its end anchor (input side), with horizontal tangents whose length grows
with the horizontal distance between the anchors. Curves are sampled into
a fixed-size polyline with numpy; hit tests run against that polyline.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property

import numpy as np

from nodeweave.core.geometry import Rect, Vec2
from nodeweave.core.style import Style


def tangent_length(p0: Vec2, p3: Vec2, k_min: float, k_max: float) -> float:
    """Horizontal tangent length for a link between two anchors."""
    return max(k_min, min(k_max, 0.5 * abs(p3.x - p0.x)))


def _segments_intersect(a: np.ndarray, b: np.ndarray, c: np.ndarray, d: np.ndarray) -> bool:
    def cross(o, p, q):
        return (p[0] - o[0]) * (q[1] - o[1]) - (p[1] - o[1]) * (q[0] - o[0])

    d1 = cross(c, d, a)
    d2 = cross(c, d, b)
    d3 = cross(a, b, c)
    d4 = cross(a, b, d)
    if d1 == 0 and d2 == 0:
        # Collinear: overlap of the projections decides
        return (
            min(a[0], b[0]) <= max(c[0], d[0]) and min(c[0], d[0]) <= max(a[0], b[0])
            and min(a[1], b[1]) <= max(c[1], d[1]) and min(c[1], d[1]) <= max(a[1], b[1])
        )
    return (d1 * d2 <= 0) and (d3 * d4 <= 0)


@dataclass(frozen=True)
class LinkCurve:
    """
    Cubic bezier through control points p0..p3 (canvas space).

    The polyline is computed once per curve and reused by all queries.
    """
    p0: Vec2
    p1: Vec2
    p2: Vec2
    p3: Vec2
    segments: int = 32

    @classmethod
    def build(cls, start: Vec2, end: Vec2, style: Style) -> LinkCurve:
        """Build the curve between an output-side and an input-side anchor."""
        k = tangent_length(start, end, style.link_tangent_min, style.link_tangent_max)
        return cls(
            p0=start,
            p1=start + Vec2(k, 0.0),
            p2=end - Vec2(k, 0.0),
            p3=end,
            segments=max(1, style.link_segments),
        )

    @property
    def control_points(self) -> np.ndarray:
        return np.array([p.as_tuple() for p in (self.p0, self.p1, self.p2, self.p3)], dtype=float)

    def _evaluate(self, t: np.ndarray) -> np.ndarray:
        cp = self.control_points
        u = 1.0 - t
        weights = np.stack([u ** 3, 3.0 * u * u * t, 3.0 * u * t * t, t ** 3], axis=-1)
        return weights @ cp

    def point_at(self, t: float) -> Vec2:
        x, y = self._evaluate(np.array([t], dtype=float))[0]
        return Vec2(float(x), float(y))

    @cached_property
    def _polyline(self) -> np.ndarray:
        t = np.linspace(0.0, 1.0, self.segments + 1)
        return self._evaluate(t)

    def polyline(self) -> np.ndarray:
        """Sampled curve as an (segments + 1, 2) array."""
        return self._polyline.copy()

    def points(self) -> list[Vec2]:
        return [Vec2(float(x), float(y)) for x, y in self._polyline]

    def distance_to(self, point: Vec2) -> float:
        """Minimum distance from `point` to the sampled polyline."""
        pts = self._polyline
        a = pts[:-1]
        ab = pts[1:] - a
        ap = np.array(point.as_tuple()) - a

        denom = np.einsum("ij,ij->i", ab, ab)
        t = np.divide(
            np.einsum("ij,ij->i", ap, ab),
            denom,
            out=np.zeros_like(denom),
            where=denom > 0,
        )
        t = np.clip(t, 0.0, 1.0)
        closest = a + ab * t[:, None]
        diff = closest - np.array(point.as_tuple())
        return float(np.min(np.hypot(diff[:, 0], diff[:, 1])))

    def bounding_rect(self, margin: float = 0.0) -> Rect:
        """Box around the control points; the curve never leaves it."""
        return Rect.bounding([self.p0, self.p1, self.p2, self.p3]).expand(margin)

    def hit_distance(self, point: Vec2, threshold: float) -> float | None:
        """
        Distance to the curve when closer than `threshold`, else None.

        Points outside the bounding box grown by `threshold` are rejected
        without sampling the curve.
        """
        if not self.bounding_rect(threshold).contains(point):
            return None
        distance = self.distance_to(point)
        if distance < threshold:
            return distance
        return None

    def overlaps_rect(self, rect: Rect) -> bool:
        """True if any part of the sampled curve lies inside `rect`."""
        if not self.bounding_rect().intersects(rect):
            return False

        pts = self._polyline
        inside = (
            (pts[:, 0] >= rect.left) & (pts[:, 0] <= rect.right)
            & (pts[:, 1] >= rect.top) & (pts[:, 1] <= rect.bottom)
        )
        if inside.any():
            return True

        corners = np.array([
            (rect.left, rect.top),
            (rect.right, rect.top),
            (rect.right, rect.bottom),
            (rect.left, rect.bottom),
        ], dtype=float)
        edges = [(corners[i], corners[(i + 1) % 4]) for i in range(4)]
        for a, b in zip(pts[:-1], pts[1:]):
            for c, d in edges:
                if _segments_intersect(a, b, c, d):
                    return True
        return False
