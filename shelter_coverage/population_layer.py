#!/usr/bin/env python3
"""
Shelter Coverage Analysis - Population Layer

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Prepare the population areas as a GeoJSON FeatureCollection
for the map's population overlay.

Key Features:
- Same ring building as the analysis (normalization, 3-vertex minimum)
- Fill colour per area from the configured population classes
- Success / error counts for the loading log

For Navigation: Use VS Code outline (Ctrl+Shift+O)
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from shapely.geometry import mapping

from shelter_coverage.aggregator import RECORD_ERRORS, PopulationArea
from shelter_coverage.config_types import CONFIG, DatasetConfig, DisplayConfig
from shelter_coverage.coordinates import CoordinateNormalizer, get_default_normalizer
from shelter_coverage.geometry import Rejected, build_ring_from_geometry

logger = logging.getLogger(__name__)


@dataclass
class PopulationLayer:
    """Population overlay features with load statistics."""

    geojson: Dict[str, Any]
    success_count: int
    error_count: int


def build_population_layer(
    population_areas: Optional[Iterable[Any]],
    normalizer: Optional[CoordinateNormalizer] = None,
    display: Optional[DisplayConfig] = None,
    fields: DatasetConfig = CONFIG.datasets,
) -> PopulationLayer:
    """
    Build overlay features for every population area with a valid ring.

    Records without geometry or population are skipped without counting.

    Args:
        population_areas: Population records
        normalizer: Coordinate normalizer (defaults to the shared one)
        display: Colour classes (defaults to CONFIG.display)
        fields: Record field names

    Returns:
        PopulationLayer with a FeatureCollection in (lng, lat) order
    """
    normalizer = normalizer or get_default_normalizer()
    display = display or CONFIG.display

    features: List[Dict[str, Any]] = []
    error_count = 0

    for index, record in enumerate(population_areas or []):
        try:
            if not PopulationArea.is_present(record, fields):
                continue
            area = PopulationArea.from_record(record, fields)
            ring = build_ring_from_geometry(area.geometry, normalizer)
            if isinstance(ring, Rejected):
                logger.warning(f"{ring.reason} for area {index}")
                error_count += 1
                continue

            features.append(
                {
                    "type": "Feature",
                    "id": index,
                    "properties": {
                        "population": area.total_population,
                        "fillColor": display.population_color(area.total_population),
                    },
                    "geometry": mapping(ring.to_polygon()),
                }
            )
        except RECORD_ERRORS as e:
            logger.error(f"Error processing population area {index}: {e}")
            error_count += 1

    logger.info(
        f"Population loading complete. Success: {len(features)}, Errors: {error_count}"
    )

    return PopulationLayer(
        geojson={"type": "FeatureCollection", "features": features},
        success_count=len(features),
        error_count=error_count,
    )
