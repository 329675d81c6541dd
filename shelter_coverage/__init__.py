"""
Shelter Coverage Analysis

═══════════════════════════════════════════════════════════════════════════════
ARCHITECTURAL OVERVIEW
═══════════════════════════════════════════════════════════════════════════════

Responsibility: For a shape drawn on the map (circle, rectangle, polygon),
compute the resident population and civil-shelter capacity it overlaps, plus
the shelter coverage percentage.

Pipeline:
    coordinates   -> UTM / WGS84 range classification, (lat, lng) output
    geometry      -> outer ring of each population area, 3-vertex minimum
    containment   -> bounding-box (default) or exact polygon tests
    aggregator    -> population / capacity sums, coverage percentage
    session       -> single current shape, created / edited / deleted

Usage:
    from shelter_coverage import DrawSession, parse_shape

    session = DrawSession(population_records, shelter_records)
    result = session.on_created(parse_shape({
        "type": "circle", "center": {"lat": 59.91, "lng": 10.75}, "radius": 1000,
    }))

For Navigation: Use VS Code outline (Ctrl+Shift+O)

═══════════════════════════════════════════════════════════════════════════════
"""

from .aggregator import AnalysisResult, aggregate, analyze, coverage
from .config_types import CONFIG, AppConfig
from .coordinates import CoordinateConversionError, CoordinateNormalizer, normalize
from .geometry import BoundingBox, Rejected, Ring, build_ring
from .session import DrawSession
from .shapes import BoundedRegion, Circle, ShapeError, parse_shape

__all__ = [
    "AnalysisResult",
    "aggregate",
    "analyze",
    "coverage",
    "CONFIG",
    "AppConfig",
    "CoordinateConversionError",
    "CoordinateNormalizer",
    "normalize",
    "BoundingBox",
    "Rejected",
    "Ring",
    "build_ring",
    "DrawSession",
    "BoundedRegion",
    "Circle",
    "ShapeError",
    "parse_shape",
]
