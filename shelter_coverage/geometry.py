#!/usr/bin/env python3
"""
Shelter Coverage Analysis - Geometry Builder

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Parse dataset geometries at the boundary and build normalized
rings of (lat, lng) vertices for bounding-box and point tests.

Key Features:
1. Outer ring extraction from GeoJSON-like geometries, WKT strings, shapely
   geometries or bare nested coordinate lists (holes and extra polygons ignored)
2. Per-vertex normalization; unconvertible vertices are dropped, not gapped
3. Explicit Rejected result when fewer than 3 vertices survive
4. Axis-aligned BoundingBox shared by rings and query shapes

Navigation Guide:
- BoundingBox: min/max lat-lng box (intersects, contains)
- extract_outer_ring: Boundary parsing of nested coordinate structures
- build_ring: Ring | Rejected

For Navigation: Use VS Code outline (Ctrl+Shift+O)
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Tuple, Union

from shapely import wkt
from shapely.errors import ShapelyError
from shapely.geometry import Polygon, mapping

from shelter_coverage.coordinates import (
    CoordinateConversionError,
    CoordinateNormalizer,
    LatLng,
    get_default_normalizer,
)

# ═══════════════════════════════════════════════════════════════════════════
# 🔧 CONSTANTS
# ═══════════════════════════════════════════════════════════════════════════

MIN_RING_VERTICES = 3

logger = logging.getLogger(__name__)


class GeometryError(ValueError):
    """Raised when a geometry does not have a usable coordinate structure."""


# ═══════════════════════════════════════════════════════════════════════════
# 📦 DATA CONTAINERS
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box in geographic degrees. Edges are inclusive."""

    south: float
    west: float
    north: float
    east: float

    @classmethod
    def from_points(cls, points: Iterable[LatLng]) -> "BoundingBox":
        """Smallest box enclosing the (lat, lng) points."""
        pts = list(points)
        if not pts:
            raise GeometryError("Cannot compute bounds of an empty point set")
        lats = [p[0] for p in pts]
        lngs = [p[1] for p in pts]
        return cls(south=min(lats), west=min(lngs), north=max(lats), east=max(lngs))

    def intersects(self, other: "BoundingBox") -> bool:
        """True if the boxes overlap or touch."""
        return (
            other.north >= self.south
            and other.south <= self.north
            and other.east >= self.west
            and other.west <= self.east
        )

    def contains(self, point: LatLng) -> bool:
        """True if the (lat, lng) point lies inside or on the box."""
        lat, lng = point
        return self.south <= lat <= self.north and self.west <= lng <= self.east

    def to_dict(self) -> dict:
        return {
            "south": self.south,
            "west": self.west,
            "north": self.north,
            "east": self.east,
        }


@dataclass(frozen=True)
class Ring:
    """Normalized outer ring of a population area, as (lat, lng) vertices."""

    vertices: Tuple[LatLng, ...]

    @property
    def bounds(self) -> BoundingBox:
        return BoundingBox.from_points(self.vertices)

    def to_polygon(self) -> Polygon:
        """Shapely polygon in (x=lng, y=lat) order."""
        return Polygon([(lng, lat) for lat, lng in self.vertices])

    def __len__(self) -> int:
        return len(self.vertices)


@dataclass(frozen=True)
class Rejected:
    """A ring that could not be built (kept non-fatal for the caller)."""

    reason: str
    valid_vertices: int = 0
    dropped_vertices: int = 0


# ═══════════════════════════════════════════════════════════════════════════
# 🔍 BOUNDARY PARSING
# ═══════════════════════════════════════════════════════════════════════════


def _is_position(node: Any) -> bool:
    """True for a coordinate position such as [x, y] (numbers, not lists)."""
    return isinstance(node, (list, tuple)) and (
        len(node) == 0 or not isinstance(node[0], (list, tuple))
    )


def _coordinates_of(geometry: Any) -> Any:
    """Return the nested coordinate structure of any supported geometry form."""
    if isinstance(geometry, str):
        try:
            return mapping(wkt.loads(geometry))["coordinates"]
        except (ShapelyError, KeyError) as e:
            raise GeometryError(f"Unparseable WKT geometry: {e}")

    if hasattr(geometry, "__geo_interface__"):
        return geometry.__geo_interface__.get("coordinates")

    # numpy coordinate arrays
    if hasattr(geometry, "tolist"):
        return geometry.tolist()

    if isinstance(geometry, dict):
        if "coordinates" not in geometry:
            raise GeometryError("Geometry has no 'coordinates' member")
        return geometry["coordinates"]

    return geometry


def extract_outer_ring(geometry: Any) -> List[Any]:
    """
    Extract the outer ring of the first polygon from a geometry.

    Accepts Polygon / MultiPolygon GeoJSON dicts, WKT strings, shapely
    geometries and bare nested lists. Nesting is descended through the first
    element until a list of positions is reached.

    Args:
        geometry: Raw geometry from a population record

    Returns:
        List of raw coordinate positions (not yet normalized)

    Raises:
        GeometryError: If the structure holds no list of positions
    """
    node = _coordinates_of(geometry)

    if not isinstance(node, (list, tuple)) or len(node) == 0:
        raise GeometryError(f"Invalid coordinates: {type(node).__name__}")

    # Polygon -> rings -> positions; MultiPolygon adds one more level
    while not _is_position(node[0]):
        node = node[0]
        if not isinstance(node, (list, tuple)) or len(node) == 0:
            raise GeometryError("Invalid ring in coordinate structure")

    return list(node)


# ═══════════════════════════════════════════════════════════════════════════
# 🔷 RING BUILDER
# ═══════════════════════════════════════════════════════════════════════════


def build_ring(
    raw_coordinates: Iterable[Any],
    normalizer: Optional[CoordinateNormalizer] = None,
) -> Union[Ring, Rejected]:
    """
    Normalize a sequence of raw coordinate pairs into a Ring.

    Each pair goes through the normalizer's range classification. Pairs that
    fail conversion are dropped. Fewer than MIN_RING_VERTICES survivors
    produce a Rejected result instead of a ring.

    Args:
        raw_coordinates: Raw positions of the outer ring
        normalizer: Coordinate normalizer (defaults to the shared one)

    Returns:
        Ring with >= 3 vertices, or Rejected
    """
    normalizer = normalizer or get_default_normalizer()

    vertices: List[LatLng] = []
    dropped = 0
    for coord in raw_coordinates:
        try:
            vertices.append(normalizer.normalize_coord(coord))
        except CoordinateConversionError as e:
            dropped += 1
            logger.warning(f"Error converting coordinate: {e}")

    if len(vertices) < MIN_RING_VERTICES:
        return Rejected(
            reason="Not enough valid coordinates",
            valid_vertices=len(vertices),
            dropped_vertices=dropped,
        )

    return Ring(vertices=tuple(vertices))


def build_ring_from_geometry(
    geometry: Any,
    normalizer: Optional[CoordinateNormalizer] = None,
) -> Union[Ring, Rejected]:
    """Extract the outer ring of a raw geometry and build it; never raises."""
    try:
        raw_ring = extract_outer_ring(geometry)
    except GeometryError as e:
        return Rejected(reason=str(e))
    return build_ring(raw_ring, normalizer)
