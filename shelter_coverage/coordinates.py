#!/usr/bin/env python3
"""
Shelter Coverage Analysis - Coordinate Normalizer

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Convert raw dataset coordinates into canonical (lat, lng) pairs.

Source datasets mix projected UTM coordinates (easting, northing in meters)
and geographic coordinates (lng, lat in degrees) without a CRS tag, so the
reference system is classified from the value range:

    x > 180 or y > 90  ->  projected, inverse-projected with pyproj
    otherwise          ->  already geographic, swapped to (lat, lng)

Only strictly-greater comparisons select the projected path, so negative
values, zero and the exact boundary values 180 / 90 stay geographic.
Callers depend on CoordinateNormalizer only, so a real CRS tag can replace
the range heuristic without touching them.

Navigation Guide:
- CoordinateNormalizer: Transformer wrapper (normalize, normalize_projected)
- is_projected: Range-based CRS classification

For Navigation: Use VS Code outline (Ctrl+Shift+O)
"""

import logging
import math
from typing import Any, Mapping, Optional, Tuple

from pyproj import Transformer
from pyproj.exceptions import ProjError

from shelter_coverage.config_types import CONFIG, ProjectionConfig

# ═══════════════════════════════════════════════════════════════════════════
# 🔧 CONSTANTS
# ═══════════════════════════════════════════════════════════════════════════

MAX_LONGITUDE = 180.0
MAX_LATITUDE = 90.0

LatLng = Tuple[float, float]

logger = logging.getLogger(__name__)


class CoordinateConversionError(ValueError):
    """Raised when a raw coordinate cannot be normalized to (lat, lng)."""


# ═══════════════════════════════════════════════════════════════════════════
# 🧭 CRS CLASSIFICATION
# ═══════════════════════════════════════════════════════════════════════════


def is_projected(x: float, y: float) -> bool:
    """Return True if (x, y) lies outside the geographic range (projected CRS)."""
    return x > MAX_LONGITUDE or y > MAX_LATITUDE


def _as_pair(coord: Any) -> Tuple[float, float]:
    """Validate a raw coordinate and return it as a float pair."""
    # numpy rows are accepted alongside lists and tuples
    if isinstance(coord, (str, bytes, Mapping)) or not hasattr(coord, "__len__"):
        raise CoordinateConversionError(f"Invalid coordinate format: {coord!r}")
    if len(coord) < 2:
        raise CoordinateConversionError(f"Coordinate needs two components: {coord!r}")

    try:
        x, y = float(coord[0]), float(coord[1])
    except (TypeError, ValueError, OverflowError) as e:
        raise CoordinateConversionError(f"Non-numeric coordinate {coord!r}: {e}")

    if not (math.isfinite(x) and math.isfinite(y)):
        raise CoordinateConversionError(f"Non-finite coordinate: {coord!r}")
    return x, y


# ═══════════════════════════════════════════════════════════════════════════
# 📐 NORMALIZER
# ═══════════════════════════════════════════════════════════════════════════


class CoordinateNormalizer:
    """
    Normalize raw coordinates to (lat, lng) using a cached pyproj Transformer.

    The transformer is built once from the configured UTM zone and hemisphere
    with always_xy=True, so it returns (lng, lat) which is swapped on output.
    """

    def __init__(self, projection: Optional[ProjectionConfig] = None) -> None:
        self.projection = projection or CONFIG.projection
        self._utm_to_wgs84 = Transformer.from_crs(
            self.projection.source_crs, self.projection.target_crs, always_xy=True
        )
        logger.debug(
            f"Normalizer ready: {self.projection.source_crs} -> "
            f"{self.projection.target_crs}"
        )

    def normalize(self, x: float, y: float) -> LatLng:
        """
        Normalize a raw (x, y) pair to (lat, lng).

        Args:
            x: Easting (projected) or longitude (geographic)
            y: Northing (projected) or latitude (geographic)

        Returns:
            (lat, lng) tuple

        Raises:
            CoordinateConversionError: If the projected conversion fails
        """
        x, y = _as_pair((x, y))
        if is_projected(x, y):
            return self.normalize_projected(x, y)
        return (y, x)

    def normalize_projected(self, easting: float, northing: float) -> LatLng:
        """
        Inverse-project a UTM (easting, northing) pair to (lat, lng).

        No range classification is applied: the input is always converted.

        Raises:
            CoordinateConversionError: If pyproj rejects the input or the
                result falls outside the geographic range
        """
        easting, northing = _as_pair((easting, northing))
        try:
            lng, lat = self._utm_to_wgs84.transform(easting, northing, errcheck=True)
        except ProjError as e:
            raise CoordinateConversionError(
                f"Projection failed for ({easting}, {northing}): {e}"
            )

        if not (math.isfinite(lat) and math.isfinite(lng)):
            raise CoordinateConversionError(
                f"Projection produced non-finite result for ({easting}, {northing})"
            )
        if abs(lat) > MAX_LATITUDE or abs(lng) > MAX_LONGITUDE:
            raise CoordinateConversionError(
                f"Projection out of range for ({easting}, {northing}): ({lat}, {lng})"
            )
        return (lat, lng)

    def normalize_coord(self, coord: Any) -> LatLng:
        """Normalize a raw coordinate sequence ([x, y] or [x, y, z])."""
        x, y = _as_pair(coord)
        return self.normalize(x, y)

    def normalize_projected_coord(self, coord: Any) -> LatLng:
        """Inverse-project a raw coordinate sequence, always as UTM."""
        easting, northing = _as_pair(coord)
        return self.normalize_projected(easting, northing)


# ═══════════════════════════════════════════════════════════════════════════
# 📌 MODULE-LEVEL HELPERS
# ═══════════════════════════════════════════════════════════════════════════

_default_normalizer: Optional[CoordinateNormalizer] = None


def get_default_normalizer() -> CoordinateNormalizer:
    """Return the shared normalizer for the module-level CONFIG (created lazily)."""
    global _default_normalizer
    if _default_normalizer is None:
        _default_normalizer = CoordinateNormalizer(CONFIG.projection)
    return _default_normalizer


def normalize(x: float, y: float) -> LatLng:
    """Normalize (x, y) to (lat, lng) with the default normalizer."""
    return get_default_normalizer().normalize(x, y)
