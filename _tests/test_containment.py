"""
Unit tests for the Containment Tester.

Tests:
1. Great-circle distance against known values
2. Circle vs ring: bounds pre-filter, then any vertex within radius
3. Circle surrounded by a ring with no vertex inside is NOT intersecting
4. Bounded region vs ring / point uses bounding boxes only (default)
5. Exact polygon strategy is a drop-in replacement for drawn polygons

Run with: python -m pytest _tests/test_containment.py -v
"""

import math

import pytest

from shelter_coverage.containment import (
    BoundingBoxStrategy,
    ExactPolygonStrategy,
    distances_to,
    get_strategy,
    great_circle_distance,
    intersects,
)
from shelter_coverage.geometry import BoundingBox, Ring
from shelter_coverage.shapes import BoundedRegion, Circle

EARTH_RADIUS_M = 6371000.0
CENTER = (59.91, 10.75)


def north_of(point, meters):
    """Point the given distance due north (along a meridian)."""
    return (point[0] + math.degrees(meters / EARTH_RADIUS_M), point[1])


@pytest.fixture
def bbox_strategy():
    return BoundingBoxStrategy(EARTH_RADIUS_M)


@pytest.fixture
def exact_strategy():
    return ExactPolygonStrategy(EARTH_RADIUS_M)


# ============================================================================
# DISTANCE
# ============================================================================


class TestDistance:
    """Haversine distance on the web-map sphere."""

    def test_zero_distance(self):
        assert great_circle_distance(CENTER, CENTER) == pytest.approx(0.0, abs=1e-9)

    def test_meridian_distance(self):
        assert great_circle_distance(north_of(CENTER, 500.0), CENTER) == pytest.approx(
            500.0, rel=1e-9
        )

    def test_one_degree_of_longitude_at_equator(self):
        expected = EARTH_RADIUS_M * math.radians(1.0)
        assert great_circle_distance((0.0, 0.0), (0.0, 1.0)) == pytest.approx(expected)

    def test_vectorized_distances(self):
        points = [CENTER, north_of(CENTER, 100.0), north_of(CENTER, 2000.0)]
        result = distances_to(points, CENTER, EARTH_RADIUS_M)
        assert result.shape == (3,)
        assert list(result) == pytest.approx([0.0, 100.0, 2000.0], abs=1e-6)


# ============================================================================
# CIRCLE
# ============================================================================


class TestCircle:
    """Circle rules are shared by every strategy."""

    circle = Circle(center=CENTER, radius_m=1000.0)

    def test_ring_with_vertex_inside(self, bbox_strategy):
        ring = Ring(
            vertices=(north_of(CENTER, 500.0), (59.95, 10.80), (59.95, 10.70))
        )
        assert bbox_strategy.intersects_ring(self.circle, ring)

    def test_ring_outside_bounds(self, bbox_strategy):
        ring = Ring(vertices=((61.0, 11.0), (61.1, 11.0), (61.1, 11.1)))
        assert not bbox_strategy.intersects_ring(self.circle, ring)

    def test_bounds_overlap_but_no_vertex_inside(self, bbox_strategy):
        """Bounds overlap the circle's box, but every vertex is > radius away."""
        # 0.02 deg of longitude at 59.91N is ~1115 m; 0.02 deg of latitude ~2224 m
        ring = Ring(vertices=((59.91, 10.77), (59.93, 10.77), (59.93, 10.73)))
        assert ring.bounds.intersects(self.circle.bounds(EARTH_RADIUS_M))
        assert not bbox_strategy.intersects_ring(self.circle, ring)

    def test_ring_surrounding_circle_is_not_intersecting(
        self, bbox_strategy, exact_strategy
    ):
        """Only ring vertices are checked, never the circle center."""
        ring = Ring(vertices=((59.0, 10.0), (59.0, 11.5), (60.5, 11.5), (60.5, 10.0)))
        assert not bbox_strategy.intersects_ring(self.circle, ring)
        assert not exact_strategy.intersects_ring(self.circle, ring)

    def test_point_within_radius(self, bbox_strategy):
        assert bbox_strategy.contains_point(self.circle, north_of(CENTER, 999.0))
        assert bbox_strategy.contains_point(self.circle, CENTER)

    def test_point_outside_radius(self, bbox_strategy):
        assert not bbox_strategy.contains_point(self.circle, north_of(CENTER, 1001.0))

    def test_circle_bounds(self):
        bounds = self.circle.bounds(EARTH_RADIUS_M)
        assert bounds.north == pytest.approx(north_of(CENTER, 1000.0)[0])
        # Longitude span widens with latitude
        assert (bounds.east - bounds.west) > (bounds.north - bounds.south)


# ============================================================================
# BOUNDED REGION
# ============================================================================


class TestBoundedRegion:
    """Rectangles and polygons are reduced to their bounds by default."""

    # Drawn triangle occupying the lower-left half of its bounds
    triangle = BoundedRegion(
        bounds=BoundingBox(south=59.0, west=10.0, north=60.0, east=11.0),
        kind="polygon",
        vertices=((59.0, 10.0), (59.0, 11.0), (60.0, 10.0)),
    )

    def test_ring_bounds_overlap(self, bbox_strategy):
        ring = Ring(vertices=((59.9, 10.9), (60.5, 10.9), (60.5, 11.5)))
        assert bbox_strategy.intersects_ring(self.triangle, ring)

    def test_ring_disjoint(self, bbox_strategy):
        ring = Ring(vertices=((61.0, 12.0), (61.5, 12.0), (61.5, 12.5)))
        assert not bbox_strategy.intersects_ring(self.triangle, ring)

    def test_point_in_bounds_but_outside_polygon(self, bbox_strategy, exact_strategy):
        """Upper-right corner: inside the bounds, outside the drawn triangle."""
        point = (59.9, 10.9)
        assert bbox_strategy.contains_point(self.triangle, point)
        assert not exact_strategy.contains_point(self.triangle, point)

    def test_ring_in_bounds_but_outside_polygon(self, bbox_strategy, exact_strategy):
        ring = Ring(vertices=((59.9, 10.9), (59.95, 10.9), (59.95, 10.95)))
        assert bbox_strategy.intersects_ring(self.triangle, ring)
        assert not exact_strategy.intersects_ring(self.triangle, ring)

    def test_exact_without_vertices_uses_bounds(self, exact_strategy):
        rectangle = BoundedRegion(bounds=self.triangle.bounds, kind="rectangle")
        assert exact_strategy.contains_point(rectangle, (59.9, 10.9))
        assert exact_strategy.contains_point(rectangle, (60.0, 11.0))


# ============================================================================
# STRATEGY LOOKUP
# ============================================================================


class TestStrategyLookup:
    def test_get_strategy_by_name(self):
        assert isinstance(get_strategy("bbox"), BoundingBoxStrategy)
        assert isinstance(get_strategy("exact"), ExactPolygonStrategy)

    def test_unknown_strategy(self):
        with pytest.raises(ValueError):
            get_strategy("convex-hull")

    def test_intersects_dispatches_on_candidate(self, bbox_strategy):
        circle = Circle(center=CENTER, radius_m=1000.0)
        ring = Ring(vertices=(CENTER, (59.95, 10.80), (59.95, 10.70)))
        assert intersects(circle, ring, bbox_strategy)
        assert intersects(circle, CENTER, bbox_strategy)
        assert not intersects(circle, (0.0, 0.0), bbox_strategy)
