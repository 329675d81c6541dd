#!/usr/bin/env python3
"""
Shelter Coverage Analysis - Query Shapes

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Tagged union of the shapes a user can draw, parsed from the
drawing collaborator's payload at the boundary.

    QueryShape = Circle(center, radius_m)
               | BoundedRegion(bounds, kind, vertices)

A drawn rectangle or polygon becomes a BoundedRegion. The polygon's vertices
are kept for strategies that can use them, but the default containment
strategy only looks at the bounds.

Payload formats (JSON from the map frontend):
    {"type": "circle", "center": {"lat": 59.91, "lng": 10.75}, "radius": 1000}
    {"type": "rectangle", "bounds": {"south": .., "west": .., "north": .., "east": ..}}
    {"type": "polygon", "vertices": [[lat, lng], ...]}

For Navigation: Use VS Code outline (Ctrl+Shift+O)
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union

from shelter_coverage.coordinates import LatLng, MAX_LATITUDE, MAX_LONGITUDE
from shelter_coverage.geometry import BoundingBox

SHAPE_CIRCLE = "circle"
SHAPE_RECTANGLE = "rectangle"
SHAPE_POLYGON = "polygon"


class ShapeError(ValueError):
    """Raised when a draw payload does not describe a supported shape."""


# ═══════════════════════════════════════════════════════════════════════════
# 🔵 SHAPES
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class Circle:
    """Drawn circle: geographic center and radius in meters."""

    center: LatLng
    radius_m: float

    shape_type = SHAPE_CIRCLE

    def bounds(self, earth_radius_m: float) -> BoundingBox:
        """Bounding box of the circle on a sphere of the given radius."""
        lat, lng = self.center
        lat_delta = math.degrees(self.radius_m / earth_radius_m)
        cos_lat = math.cos(math.radians(lat))
        lng_delta = lat_delta / cos_lat if cos_lat > 1e-12 else 180.0
        return BoundingBox(
            south=lat - lat_delta,
            west=lng - lng_delta,
            north=lat + lat_delta,
            east=lng + lng_delta,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.shape_type,
            "center": {"lat": self.center[0], "lng": self.center[1]},
            "radius": self.radius_m,
        }


@dataclass(frozen=True)
class BoundedRegion:
    """Drawn rectangle or polygon, reduced to its axis-aligned bounds."""

    bounds: BoundingBox
    kind: str = SHAPE_RECTANGLE
    vertices: Optional[Tuple[LatLng, ...]] = None

    @property
    def shape_type(self) -> str:
        return self.kind

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"type": self.kind, "bounds": self.bounds.to_dict()}
        if self.vertices:
            d["vertices"] = [list(v) for v in self.vertices]
        return d


QueryShape = Union[Circle, BoundedRegion]


# ═══════════════════════════════════════════════════════════════════════════
# 🔍 PAYLOAD PARSING
# ═══════════════════════════════════════════════════════════════════════════


def _number(value: Any, name: str) -> float:
    try:
        result = float(value)
    except (TypeError, ValueError, OverflowError):
        raise ShapeError(f"'{name}' must be a number, got {value!r}")
    if not math.isfinite(result):
        raise ShapeError(f"'{name}' must be finite, got {value!r}")
    return result


def _latlng(value: Any, name: str) -> LatLng:
    """Parse {"lat", "lng"} / {"lat", "lon"} dicts or [lat, lng] pairs."""
    if isinstance(value, dict):
        lng = value.get("lng", value.get("lon"))
        lat, lng = _number(value.get("lat"), f"{name}.lat"), _number(lng, f"{name}.lng")
    elif isinstance(value, (list, tuple)) and len(value) >= 2:
        lat, lng = _number(value[0], f"{name}[0]"), _number(value[1], f"{name}[1]")
    else:
        raise ShapeError(f"'{name}' must be a lat/lng object or pair, got {value!r}")

    if abs(lat) > MAX_LATITUDE or abs(lng) > MAX_LONGITUDE:
        raise ShapeError(f"'{name}' is outside the geographic range: ({lat}, {lng})")
    return (lat, lng)


def _bounds(value: Any) -> BoundingBox:
    if not isinstance(value, dict):
        raise ShapeError(f"'bounds' must be an object, got {value!r}")
    south = _number(value.get("south"), "bounds.south")
    west = _number(value.get("west"), "bounds.west")
    north = _number(value.get("north"), "bounds.north")
    east = _number(value.get("east"), "bounds.east")
    if south > north or west > east:
        raise ShapeError(
            f"'bounds' must satisfy south <= north and west <= east, got {value!r}"
        )
    return BoundingBox(south=south, west=west, north=north, east=east)


def parse_shape(payload: Any) -> QueryShape:
    """
    Parse a draw payload into a QueryShape.

    Args:
        payload: Shape descriptor dict from the drawing collaborator

    Returns:
        Circle or BoundedRegion

    Raises:
        ShapeError: If the payload is not a supported, well-formed shape
    """
    if not isinstance(payload, dict):
        raise ShapeError("Shape payload must be an object")

    shape_type = str(payload.get("type", "")).lower()

    if shape_type == SHAPE_CIRCLE:
        center = _latlng(payload.get("center"), "center")
        radius = _number(payload.get("radius"), "radius")
        if radius < 0:
            raise ShapeError(f"'radius' must be >= 0, got {radius}")
        return Circle(center=center, radius_m=radius)

    if shape_type in (SHAPE_RECTANGLE, SHAPE_POLYGON):
        vertices: Optional[Tuple[LatLng, ...]] = None
        raw_vertices = payload.get("vertices")
        if raw_vertices is not None:
            if not isinstance(raw_vertices, (list, tuple)) or len(raw_vertices) < 3:
                raise ShapeError("'vertices' must hold at least 3 points")
            vertices = tuple(
                _latlng(v, f"vertices[{i}]") for i, v in enumerate(raw_vertices)
            )

        if "bounds" in payload:
            bounds = _bounds(payload["bounds"])
        elif vertices is not None:
            bounds = BoundingBox.from_points(vertices)
        else:
            raise ShapeError(f"A {shape_type} needs 'bounds' or 'vertices'")

        return BoundedRegion(bounds=bounds, kind=shape_type, vertices=vertices)

    raise ShapeError(
        f"Unsupported shape type '{payload.get('type')}' "
        f"(expected {SHAPE_CIRCLE}, {SHAPE_RECTANGLE} or {SHAPE_POLYGON})"
    )
