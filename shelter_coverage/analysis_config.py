#!/usr/bin/env python3
"""
Shelter Coverage Analysis - Configuration

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Configuration dictionary for the shelter coverage analysis.
This is the user-facing configuration file - edit values here.

Pattern:
- analysis_config.py defines the ANALYSIS_CONFIG_DATA dictionary (edit this)
- config_types.py defines typed dataclasses and loads from ANALYSIS_CONFIG_DATA

Environment overrides (useful for deployment):
- SHELTER_DATA_DIR: directory holding the population and shelter datasets
- SHELTER_UTM_ZONE: UTM zone of the projected source coordinates
- SHELTER_HOST / SHELTER_PORT: Flask bind address

For Navigation: Use VS Code outline (Ctrl+Shift+O)
"""

import os
from typing import Any, Callable, Dict, Optional, TypeVar

T = TypeVar("T")


def _env_or_default(
    key: str, default: T, type_fn: Optional[Callable[[str], T]] = None
) -> T:
    """
    Get value from environment variable or use default.

    Args:
        key: Environment variable name (e.g., "SHELTER_UTM_ZONE")
        default: Default value if env var not set
        type_fn: Optional type conversion function (e.g., float, int)

    Returns:
        Value from environment (converted) or default
    """
    val = os.getenv(key)
    if val is not None:
        if type_fn is not None:
            return type_fn(val)
        return val  # type: ignore
    return default


# ═══════════════════════════════════════════════════════════════════════════
# 🛡️ SHELTER COVERAGE CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════

ANALYSIS_CONFIG_DATA: Dict[str, Any] = {
    # ═══════════════════════════════════════════════════════════════════════
    # 🗺️ PROJECTION (source datasets are UTM; ETRS89 / WGS84 zone 33N for Norway)
    # ═══════════════════════════════════════════════════════════════════════
    "projection": {
        "utm_zone": _env_or_default("SHELTER_UTM_ZONE", 33, int),
        "hemisphere": "north",
        "target_crs": "EPSG:4326",
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 📂 DATASETS
    # ═══════════════════════════════════════════════════════════════════════
    "datasets": {
        "data_dir": _env_or_default("SHELTER_DATA_DIR", "data"),
        "population_file": "population.json",
        "shelter_file": "bunkers.json",
        "geometry_field": "geom",
        "population_field": "poptot",
        "capacity_field": "plasser",
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 📐 CONTAINMENT
    # ═══════════════════════════════════════════════════════════════════════
    "containment": {
        # "bbox": bounding-box approximation (matches the map frontend)
        # "exact": shapely polygon tests
        "strategy": "bbox",
        "earth_radius_m": 6371000.0,  # Mean Earth radius, as Leaflet 1.x measures circles
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 🎨 DISPLAY
    # ═══════════════════════════════════════════════════════════════════════
    "display": {
        "poor_threshold": 33.0,  # Red below this coverage %
        "medium_threshold": 66.0,  # Orange below this coverage %
        "poor_color": "#d32f2f",
        "medium_color": "#f57c00",
        "good_color": "#388e3c",
        # (minimum population exclusive, fill colour), highest first
        "population_classes": [
            [2000, "#BD0026"],
            [1000, "#FC4E2A"],
            [500, "#FD8D3C"],
            [100, "#FEB24C"],
        ],
        "population_default_color": "#FFEDA0",
    },
    # ═══════════════════════════════════════════════════════════════════════
    # 🌐 SERVER
    # ═══════════════════════════════════════════════════════════════════════
    "server": {
        "host": _env_or_default("SHELTER_HOST", "127.0.0.1"),
        "port": _env_or_default("SHELTER_PORT", 5052, int),
    },
}
