#!/usr/bin/env python3
"""
Shelter Coverage Analysis - Containment Tester

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Decide whether a population ring intersects, or a shelter
point lies inside, the drawn query shape.

Rules (BoundingBoxStrategy, the default):
- Ring vs BoundedRegion: ring bounds overlap region bounds
- Ring vs Circle: ring bounds overlap circle bounds, then at least one ring
  vertex within radius of the center. A ring that surrounds the circle with
  no vertex inside it is NOT intersecting.
- Point vs Circle: great-circle distance <= radius
- Point vs BoundedRegion: point inside region bounds

ExactPolygonStrategy swaps the two BoundedRegion rules for shapely polygon
tests against the drawn vertices. Circle rules are shared by both.

Navigation Guide:
- great_circle_distance / distances_to: Haversine distances (numpy)
- ContainmentStrategy: Base interface (intersects_ring, contains_point)
- BoundingBoxStrategy / ExactPolygonStrategy: Implementations
- get_strategy: Lookup by config name

For Navigation: Use VS Code outline (Ctrl+Shift+O)
"""

from typing import Dict, Optional, Sequence, Type

import numpy as np
from shapely.geometry import Point, Polygon, box

from shelter_coverage.config_types import CONFIG
from shelter_coverage.coordinates import LatLng
from shelter_coverage.geometry import BoundingBox, Ring
from shelter_coverage.shapes import BoundedRegion, Circle, QueryShape


# ═══════════════════════════════════════════════════════════════════════════
# 📏 DISTANCE
# ═══════════════════════════════════════════════════════════════════════════


def distances_to(
    points: Sequence[LatLng],
    center: LatLng,
    earth_radius_m: float = CONFIG.containment.earth_radius_m,
) -> np.ndarray:
    """
    Haversine distances in meters from each (lat, lng) point to center.

    Args:
        points: Sequence of (lat, lng) points
        center: (lat, lng) reference point
        earth_radius_m: Sphere radius in meters

    Returns:
        1-D array of distances, one per point
    """
    pts = np.radians(np.asarray(points, dtype=float).reshape(-1, 2))
    lat1, lng1 = np.radians(center[0]), np.radians(center[1])
    lat2, lng2 = pts[:, 0], pts[:, 1]

    sin_dlat = np.sin((lat2 - lat1) / 2.0)
    sin_dlng = np.sin((lng2 - lng1) / 2.0)
    a = sin_dlat**2 + np.cos(lat1) * np.cos(lat2) * sin_dlng**2
    a = np.clip(a, 0.0, 1.0)
    return 2.0 * earth_radius_m * np.arctan2(np.sqrt(a), np.sqrt(1.0 - a))


def great_circle_distance(
    a: LatLng,
    b: LatLng,
    earth_radius_m: float = CONFIG.containment.earth_radius_m,
) -> float:
    """Great-circle distance in meters between two (lat, lng) points."""
    return float(distances_to([a], b, earth_radius_m)[0])


# ═══════════════════════════════════════════════════════════════════════════
# 📐 STRATEGIES
# ═══════════════════════════════════════════════════════════════════════════


class ContainmentStrategy:
    """
    Base containment strategy.

    Circle rules live here; subclasses decide how BoundedRegion shapes are
    compared against rings and points.
    """

    name = "base"

    def __init__(self, earth_radius_m: Optional[float] = None) -> None:
        self.earth_radius_m = earth_radius_m or CONFIG.containment.earth_radius_m

    def intersects_ring(self, shape: QueryShape, ring: Ring) -> bool:
        """True if the population ring counts as intersecting the shape."""
        if isinstance(shape, Circle):
            return self._ring_in_circle(shape, ring)
        return self._ring_in_region(shape, ring)

    def contains_point(self, shape: QueryShape, point: LatLng) -> bool:
        """True if the (lat, lng) point counts as inside the shape."""
        if isinstance(shape, Circle):
            return great_circle_distance(point, shape.center, self.earth_radius_m) <= (
                shape.radius_m
            )
        return self._point_in_region(shape, point)

    def _ring_in_circle(self, circle: Circle, ring: Ring) -> bool:
        # Cheap pre-filter before computing vertex distances
        if not ring.bounds.intersects(circle.bounds(self.earth_radius_m)):
            return False
        distances = distances_to(ring.vertices, circle.center, self.earth_radius_m)
        return bool(np.any(distances <= circle.radius_m))

    def _ring_in_region(self, region: BoundedRegion, ring: Ring) -> bool:
        raise NotImplementedError

    def _point_in_region(self, region: BoundedRegion, point: LatLng) -> bool:
        raise NotImplementedError


class BoundingBoxStrategy(ContainmentStrategy):
    """Bounding-box approximation for rectangles and polygons."""

    name = "bbox"

    def _ring_in_region(self, region: BoundedRegion, ring: Ring) -> bool:
        return ring.bounds.intersects(region.bounds)

    def _point_in_region(self, region: BoundedRegion, point: LatLng) -> bool:
        return region.bounds.contains(point)


class ExactPolygonStrategy(ContainmentStrategy):
    """Shapely polygon tests against the drawn vertices (bounds if none)."""

    name = "exact"

    @staticmethod
    def _region_polygon(region: BoundedRegion) -> Polygon:
        if region.vertices:
            return Polygon([(lng, lat) for lat, lng in region.vertices])
        b: BoundingBox = region.bounds
        return box(b.west, b.south, b.east, b.north)

    def _ring_in_region(self, region: BoundedRegion, ring: Ring) -> bool:
        ring_polygon = ring.to_polygon()
        if not ring_polygon.is_valid:
            ring_polygon = ring_polygon.buffer(0)
        return self._region_polygon(region).intersects(ring_polygon)

    def _point_in_region(self, region: BoundedRegion, point: LatLng) -> bool:
        lat, lng = point
        return self._region_polygon(region).covers(Point(lng, lat))


STRATEGIES: Dict[str, Type[ContainmentStrategy]] = {
    BoundingBoxStrategy.name: BoundingBoxStrategy,
    ExactPolygonStrategy.name: ExactPolygonStrategy,
}


def get_strategy(
    name: Optional[str] = None, earth_radius_m: Optional[float] = None
) -> ContainmentStrategy:
    """Instantiate the containment strategy registered under name."""
    name = name or CONFIG.containment.strategy
    if name not in STRATEGIES:
        raise ValueError(f"Unknown containment strategy '{name}'")
    return STRATEGIES[name](earth_radius_m)


# ═══════════════════════════════════════════════════════════════════════════
# 📌 MODULE-LEVEL HELPERS
# ═══════════════════════════════════════════════════════════════════════════


def intersects(
    shape: QueryShape,
    candidate,
    strategy: Optional[ContainmentStrategy] = None,
) -> bool:
    """
    Test a candidate against the shape.

    Args:
        shape: Circle or BoundedRegion
        candidate: Ring (population area) or (lat, lng) point (shelter)
        strategy: Containment strategy (defaults to the configured one)
    """
    strategy = strategy or get_strategy()
    if isinstance(candidate, Ring):
        return strategy.intersects_ring(shape, candidate)
    return strategy.contains_point(shape, candidate)
