#!/usr/bin/env python3
"""
Shelter Coverage Analysis - Data Loader

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Load the population-area and shelter datasets once per session
and hand them to the analysis as plain, read-only record lists.

Supported inputs (by file suffix):
1. .json: list of records ({"geom": {...}, "poptot": 150}) or a GeoJSON
   FeatureCollection (properties become record fields)
2. .geojson / .shp / .gpkg: read with geopandas
3. .csv: read with pandas; shelters from x/y (or easting/northing) columns,
   population areas from a WKT geometry column

Coordinates are kept as stored. Vector files in a CRS other than WGS84 or
the configured UTM zone are reprojected to the UTM zone first.

A missing or unreadable file gives an empty dataset and a warning; the
analysis then reports zero totals for that side.

Navigation Guide:
- DataLoader: Main loader class
- get_population_records / get_shelter_records: Loaded datasets
- get_data_info: File timestamps and counts

For Navigation: Use VS Code outline (Ctrl+Shift+O)
"""

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional
import json
import logging
import os

import geopandas as gpd
import pandas as pd
from shapely.geometry import mapping

from shelter_coverage.config_types import CONFIG, DatasetConfig, ProjectionConfig

# ═══════════════════════════════════════════════════════════════════════════
# 🔧 CONSTANTS
# ═══════════════════════════════════════════════════════════════════════════

CRS_WGS84 = "EPSG:4326"

VECTOR_SUFFIXES = (".geojson", ".shp", ".gpkg")
EASTING_COLUMNS = ("x", "easting", "east", "X")
NORTHING_COLUMNS = ("y", "northing", "north", "Y")
WKT_COLUMNS = ("wkt", "geometry", "WKT")

logger = logging.getLogger(__name__)


def _clean_value(value: Any) -> Any:
    """Turn pandas / numpy scalars into plain Python values (NaN -> None)."""
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    if hasattr(value, "item"):
        return value.item()
    return value


# ═══════════════════════════════════════════════════════════════════════════
# 📂 DATA LOADER
# ═══════════════════════════════════════════════════════════════════════════


class DataLoader:
    """
    Load the population and shelter datasets from a data directory.

    Records are plain dicts keyed by the configured field names, so the
    analysis works the same whichever file format they came from.
    """

    def __init__(
        self,
        data_dir: Path,
        datasets: Optional[DatasetConfig] = None,
        projection: Optional[ProjectionConfig] = None,
    ) -> None:
        """
        Initialize data loader and load both datasets.

        Args:
            data_dir: Directory containing the dataset files
            datasets: File and field names (defaults to CONFIG.datasets)
            projection: UTM settings for reprojecting vector files
        """
        self.data_dir = Path(data_dir)
        self.datasets = datasets or CONFIG.datasets
        self.projection = projection or CONFIG.projection

        self._population_records: List[Dict[str, Any]] = []
        self._shelter_records: List[Dict[str, Any]] = []
        self._file_modified: Dict[str, Optional[datetime]] = {}
        self._data_loaded_at: Optional[datetime] = None

        self._load_data()

    def _load_data(self) -> None:
        """Load both datasets from the data directory."""
        self._population_records = self._load_dataset(
            self.datasets.population_file, is_point=False
        )
        self._shelter_records = self._load_dataset(
            self.datasets.shelter_file, is_point=True
        )
        self._data_loaded_at = datetime.now()

        logger.info(
            f"Loaded {len(self._population_records)} population areas, "
            f"{len(self._shelter_records)} shelters"
        )
        if self._population_records:
            logger.debug(f"First population record: {self._population_records[0]}")

    def _load_dataset(self, filename: str, is_point: bool) -> List[Dict[str, Any]]:
        """Load one dataset file; returns [] if missing or unreadable."""
        path = self.data_dir / filename
        if not path.exists():
            logger.warning(f"⚠️ Data file not found: {path}")
            self._file_modified[filename] = None
            return []

        self._file_modified[filename] = datetime.fromtimestamp(os.path.getmtime(path))
        logger.info(f"Loading data from: {path.name}")

        suffix = path.suffix.lower()
        try:
            if suffix == ".json":
                return self._load_json(path)
            if suffix in VECTOR_SUFFIXES:
                return self._load_vector(path, is_point)
            if suffix == ".csv":
                return self._load_csv(path, is_point)
        except (OSError, ValueError, RuntimeError) as e:
            logger.error(f"❌ Failed to read {path.name}: {e}")
            return []

        logger.error(f"❌ Unsupported data file type: {path.name}")
        return []

    # ═══════════════════════════════════════════════════════════════════
    # 📄 FORMAT READERS
    # ═══════════════════════════════════════════════════════════════════

    def _load_json(self, path: Path) -> List[Dict[str, Any]]:
        """Load a JSON list of records or a GeoJSON FeatureCollection."""
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)

        if isinstance(data, list):
            return [r for r in data if isinstance(r, dict)]

        if isinstance(data, dict) and data.get("type") == "FeatureCollection":
            return self._features_to_records(data.get("features", []))

        raise ValueError("expected a list of records or a FeatureCollection")

    def _features_to_records(self, features: List[Any]) -> List[Dict[str, Any]]:
        """Flatten GeoJSON features into records (properties + geometry field)."""
        records = []
        for feature in features:
            if not isinstance(feature, dict):
                continue
            record = dict(feature.get("properties") or {})
            record[self.datasets.geometry_field] = feature.get("geometry")
            records.append(record)
        return records

    def _load_vector(self, path: Path, is_point: bool) -> List[Dict[str, Any]]:
        """Load a vector file with geopandas.

        Shelter points must end up in the UTM zone; areas may stay in WGS84.
        """
        gdf = gpd.read_file(path)
        if gdf.empty:
            return []

        accepted = {self.projection.source_crs}
        if not is_point:
            accepted.add(CRS_WGS84)

        if gdf.crs is not None and f"EPSG:{gdf.crs.to_epsg()}" not in accepted:
            logger.info(f"🔄 Reprojecting from {gdf.crs} to {self.projection.source_crs}")
            gdf = gdf.to_crs(self.projection.source_crs)

        records = []
        for _, row in gdf.iterrows():
            record = {
                col: _clean_value(row[col]) for col in gdf.columns if col != "geometry"
            }
            geom = row.geometry
            record[self.datasets.geometry_field] = (
                None if geom is None or geom.is_empty else mapping(geom)
            )
            records.append(record)
        return records

    def _load_csv(self, path: Path, is_point: bool) -> List[Dict[str, Any]]:
        """Load a CSV of shelter points (x/y) or population areas (WKT)."""
        df = pd.read_csv(path)
        columns = set(df.columns)

        x_col = next((c for c in EASTING_COLUMNS if c in columns), None)
        y_col = next((c for c in NORTHING_COLUMNS if c in columns), None)
        wkt_col = next((c for c in WKT_COLUMNS if c in columns), None)

        records = []
        for _, row in df.iterrows():
            record = {col: _clean_value(row[col]) for col in df.columns}
            if is_point and x_col and y_col:
                x, y = record.pop(x_col), record.pop(y_col)
                record[self.datasets.geometry_field] = (
                    None
                    if x is None or y is None
                    else {"type": "Point", "coordinates": [x, y]}
                )
            elif wkt_col:
                record[self.datasets.geometry_field] = record.pop(wkt_col)
            records.append(record)

        if is_point and not (x_col and y_col):
            logger.warning(f"⚠️ No coordinate columns found in {path.name}")
        return records

    # ═══════════════════════════════════════════════════════════════════
    # 📤 ACCESSORS
    # ═══════════════════════════════════════════════════════════════════

    def get_population_records(self) -> List[Dict[str, Any]]:
        """Population-area records as loaded."""
        return self._population_records

    def get_shelter_records(self) -> List[Dict[str, Any]]:
        """Shelter records as loaded."""
        return self._shelter_records

    def get_data_info(self) -> Dict[str, Any]:
        """File timestamps and record counts for the frontend."""
        return {
            "data_dir": str(self.data_dir),
            "files": {
                name: modified.isoformat() if modified else None
                for name, modified in self._file_modified.items()
            },
            "data_loaded_at": (
                self._data_loaded_at.isoformat() if self._data_loaded_at else None
            ),
            "population_count": len(self._population_records),
            "shelter_count": len(self._shelter_records),
        }
