"""
Tests for link curve geometry and hit-testing.
"""

from unittest.mock import patch

import numpy as np
import pytest

from nodeweave.core.geometry import Rect, Vec2
from nodeweave.core.links import LinkCurve, tangent_length
from nodeweave.core.style import Style


@pytest.fixture
def style():
    return Style()


class TestCurveConstruction:
    """Tests for control point placement."""

    def test_tangent_is_half_horizontal_distance(self, style):
        curve = LinkCurve.build(Vec2(0, 0), Vec2(200, 0), style)
        assert curve.p1 == Vec2(100, 0)
        assert curve.p2 == Vec2(100, 0)

    def test_tangent_clamped_to_min(self):
        assert tangent_length(Vec2(0, 0), Vec2(20, 0), 50, 250) == 50

    def test_tangent_clamped_to_max(self):
        assert tangent_length(Vec2(0, 0), Vec2(1000, 0), 50, 250) == 250

    def test_tangent_ignores_direction(self):
        assert tangent_length(Vec2(200, 0), Vec2(0, 0), 50, 250) == 100

    def test_endpoints(self, style):
        curve = LinkCurve.build(Vec2(10, 20), Vec2(300, 80), style)
        assert curve.point_at(0.0) == Vec2(10, 20)
        assert curve.point_at(1.0) == Vec2(300, 80)


class TestSampling:
    """Tests for polyline sampling."""

    def test_polyline_shape(self, style):
        curve = LinkCurve.build(Vec2(0, 0), Vec2(200, 100), style)
        points = curve.polyline()
        assert points.shape == (style.link_segments + 1, 2)
        np.testing.assert_allclose(points[0], [0, 0])
        np.testing.assert_allclose(points[-1], [200, 100])

    def test_midpoint_of_symmetric_curve(self, style):
        curve = LinkCurve.build(Vec2(0, 0), Vec2(200, 0), style)
        mid = curve.point_at(0.5)
        assert mid.x == pytest.approx(100)
        assert mid.y == pytest.approx(0)


class TestHitTesting:
    """Tests for distance and overlap queries."""

    def test_point_on_curve_at_half(self, style):
        curve = LinkCurve.build(Vec2(0, 0), Vec2(200, 100), style)
        on_curve = curve.point_at(0.5)
        assert curve.distance_to(on_curve) == pytest.approx(0, abs=1e-6)
        assert curve.hit_distance(on_curve, 10) == pytest.approx(0, abs=1e-6)

    def test_near_point_hits(self, style):
        curve = LinkCurve.build(Vec2(0, 0), Vec2(200, 0), style)
        assert curve.hit_distance(Vec2(100, 5), 10) == pytest.approx(5)

    def test_point_beyond_threshold_misses(self, style):
        curve = LinkCurve.build(Vec2(0, 0), Vec2(200, 0), style)
        assert curve.hit_distance(Vec2(100, 15), 10) is None

    def test_far_point_rejected_by_box(self, style):
        curve = LinkCurve.build(Vec2(0, 0), Vec2(200, 100), style)
        with patch.object(LinkCurve, "distance_to") as distance_to:
            assert curve.hit_distance(Vec2(5000, 5000), 10) is None
            distance_to.assert_not_called()

    def test_bounding_rect_margin(self, style):
        curve = LinkCurve.build(Vec2(0, 0), Vec2(200, 100), style)
        assert curve.bounding_rect(5) == Rect(Vec2(-5, -5), Vec2(205, 105))

    def test_overlaps_rect_containing_samples(self, style):
        curve = LinkCurve.build(Vec2(0, 0), Vec2(200, 0), style)
        assert curve.overlaps_rect(Rect(Vec2(90, -5), Vec2(110, 5)))

    def test_overlaps_thin_rect_between_samples(self, style):
        curve = LinkCurve.build(Vec2(0, 0), Vec2(200, 0), style)
        assert curve.overlaps_rect(Rect(Vec2(50.1, -5), Vec2(50.2, 5)))

    def test_rect_inside_bounds_but_off_curve(self, style):
        curve = LinkCurve.build(Vec2(0, 0), Vec2(200, 100), style)
        assert not curve.overlaps_rect(Rect(Vec2(150, 0), Vec2(200, 20)))

    def test_rect_away_from_curve(self, style):
        curve = LinkCurve.build(Vec2(0, 0), Vec2(200, 0), style)
        assert not curve.overlaps_rect(Rect(Vec2(0, 50), Vec2(200, 60)))
