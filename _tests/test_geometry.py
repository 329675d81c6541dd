"""
Unit tests for the Geometry Builder.

Tests:
1. Outer ring extraction from Polygon, MultiPolygon, WKT and bare rings
2. Holes and extra polygons are ignored
3. Unconvertible vertices are dropped; < 3 survivors give Rejected
4. BoundingBox overlap and containment are edge-inclusive

Run with: python -m pytest _tests/test_geometry.py -v
"""

import pytest
from shapely.geometry import Polygon

from shelter_coverage.config_types import ProjectionConfig
from shelter_coverage.coordinates import CoordinateNormalizer
from shelter_coverage.geometry import (
    BoundingBox,
    GeometryError,
    Rejected,
    Ring,
    build_ring,
    build_ring_from_geometry,
    extract_outer_ring,
)

OUTER = [[10.0, 59.0], [11.0, 59.0], [11.0, 60.0], [10.0, 60.0], [10.0, 59.0]]
HOLE = [[10.4, 59.4], [10.6, 59.4], [10.6, 59.6], [10.4, 59.4]]
SECOND = [[20.0, 65.0], [21.0, 65.0], [21.0, 66.0], [20.0, 65.0]]


@pytest.fixture(scope="module")
def normalizer():
    return CoordinateNormalizer(ProjectionConfig())


# ============================================================================
# OUTER RING EXTRACTION
# ============================================================================


class TestExtractOuterRing:
    """extract_outer_ring returns the raw outer ring of the first polygon."""

    def test_polygon_geojson(self):
        geom = {"type": "Polygon", "coordinates": [OUTER, HOLE]}
        assert extract_outer_ring(geom) == OUTER

    def test_multipolygon_geojson(self):
        geom = {"type": "MultiPolygon", "coordinates": [[OUTER, HOLE], [SECOND]]}
        assert extract_outer_ring(geom) == OUTER

    def test_bare_ring(self):
        """A plain list of positions is already a ring."""
        assert extract_outer_ring(OUTER) == OUTER

    def test_wkt_string(self):
        ring = extract_outer_ring("POLYGON((0 0, 4 0, 4 4, 0 4, 0 0))")
        assert [tuple(p) for p in ring] == [(0, 0), (4, 0), (4, 4), (0, 4), (0, 0)]

    def test_shapely_geometry(self):
        ring = extract_outer_ring(Polygon([(0, 0), (1, 0), (1, 1)]))
        assert len(ring) == 4  # shapely closes the ring

    @pytest.mark.parametrize(
        "geom",
        [
            {"type": "Polygon"},
            {"type": "Polygon", "coordinates": []},
            {"type": "Polygon", "coordinates": 42},
            {"type": "Point", "coordinates": [10.0, 59.0]},
            "NOT WKT AT ALL",
            "POINT (1 2)",
        ],
    )
    def test_non_conforming_geometry(self, geom):
        with pytest.raises(GeometryError):
            extract_outer_ring(geom)


# ============================================================================
# RING BUILDING
# ============================================================================


class TestBuildRing:
    """build_ring normalizes vertices and enforces the 3-vertex minimum."""

    def test_geographic_ring(self, normalizer):
        ring = build_ring(OUTER, normalizer)
        assert isinstance(ring, Ring)
        assert ring.vertices[0] == (59.0, 10.0)
        assert len(ring) == len(OUTER)

    def test_projected_ring(self, normalizer):
        utm = [[262000.0, 6650000.0], [263000.0, 6650000.0], [263000.0, 6651000.0]]
        ring = build_ring(utm, normalizer)
        assert isinstance(ring, Ring)
        for lat, lng in ring.vertices:
            assert 59.0 < lat < 61.0
            assert 10.0 < lng < 11.5

    def test_invalid_vertices_dropped(self, normalizer):
        """Bad vertices are removed, not kept as gaps."""
        coords = [[10.0, 59.0], "bad", [11.0, 59.0], [None, 1], [11.0, 60.0]]
        ring = build_ring(coords, normalizer)
        assert isinstance(ring, Ring)
        assert ring.vertices == ((59.0, 10.0), (59.0, 11.0), (60.0, 11.0))

    @pytest.mark.parametrize("count", [0, 1, 2])
    def test_rejected_below_three_vertices(self, normalizer, count):
        ring = build_ring(OUTER[:count], normalizer)
        assert isinstance(ring, Rejected)
        assert ring.valid_vertices == count

    def test_rejected_after_dropping(self, normalizer):
        """Two valid vertices left after conversion -> Rejected."""
        ring = build_ring([[10.0, 59.0], [11.0, 59.0], ["x", "y"]], normalizer)
        assert isinstance(ring, Rejected)
        assert ring.valid_vertices == 2
        assert ring.dropped_vertices == 1

    def test_from_geometry_never_raises(self, normalizer):
        result = build_ring_from_geometry({"type": "Polygon", "coordinates": 7}, normalizer)
        assert isinstance(result, Rejected)

    def test_ring_bounds(self, normalizer):
        ring = build_ring(OUTER, normalizer)
        assert ring.bounds == BoundingBox(south=59.0, west=10.0, north=60.0, east=11.0)


# ============================================================================
# BOUNDING BOX
# ============================================================================


class TestBoundingBox:
    """Edge-inclusive box tests."""

    box = BoundingBox(south=59.0, west=10.0, north=60.0, east=11.0)

    def test_overlap(self):
        assert self.box.intersects(BoundingBox(59.5, 10.5, 61.0, 12.0))

    def test_touching_edges_intersect(self):
        assert self.box.intersects(BoundingBox(60.0, 11.0, 61.0, 12.0))

    def test_disjoint(self):
        assert not self.box.intersects(BoundingBox(60.1, 10.0, 61.0, 11.0))
        assert not self.box.intersects(BoundingBox(59.0, 11.1, 60.0, 12.0))

    def test_contains_point(self):
        assert self.box.contains((59.5, 10.5))
        assert self.box.contains((60.0, 11.0))
        assert not self.box.contains((60.01, 10.5))

    def test_from_points_empty(self):
        with pytest.raises(GeometryError):
            BoundingBox.from_points([])
