#!/usr/bin/env python3
"""
Shelter Coverage Analysis - Aggregator

═══════════════════════════════════════════════════════════════════════════════
ARCHITECTURAL OVERVIEW
═══════════════════════════════════════════════════════════════════════════════

Responsibility: Sum the population and shelter capacity a drawn shape covers,
and derive the coverage percentage.

Data Flow:
    population records -> build_ring -> intersects_ring -> population sum
    shelter records    -> normalize_projected -> contains_point -> capacity sum
    (capacity sum, population sum) -> coverage -> AnalysisResult

Record handling:
- Missing geometry/location or population/capacity: skipped silently
- Ring with < 3 valid vertices or malformed geometry: counted in
  areas_with_errors, skipped
- Shelter conversion failure: skipped silently
- Nothing raised to the caller; analyze() always returns a full result

For Navigation: Use VS Code outline (Ctrl+Shift+O)

═══════════════════════════════════════════════════════════════════════════════
"""

import logging
import math
import numbers
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional, Union

from pyproj.exceptions import ProjError
from shapely.errors import ShapelyError

from shelter_coverage.config_types import CONFIG, DatasetConfig, DisplayConfig
from shelter_coverage.containment import ContainmentStrategy, get_strategy
from shelter_coverage.coordinates import CoordinateNormalizer, get_default_normalizer
from shelter_coverage.geometry import Rejected, build_ring_from_geometry
from shelter_coverage.shapes import QueryShape

logger = logging.getLogger(__name__)

Number = Union[int, float]

# Per-record failures that are counted and never abort a pass
RECORD_ERRORS = (
    ValueError,
    TypeError,
    KeyError,
    ArithmeticError,
    ProjError,
    ShapelyError,
)


# ═══════════════════════════════════════════════════════════════════════════════
# 📦 RECORDS
# ═══════════════════════════════════════════════════════════════════════════════


def _parse_amount(value: Any, name: str) -> Number:
    """Parse a non-negative population / capacity amount."""
    if isinstance(value, bool):
        raise ValueError(f"{name} must be a number, got {value!r}")
    if isinstance(value, numbers.Integral):
        amount: Number = int(value)
    elif isinstance(value, numbers.Real):
        amount = float(value)
    else:
        amount = float(value)  # numeric strings from CSV / JSON exports
    try:
        finite = math.isfinite(amount)
    except OverflowError:
        raise ValueError(f"{name} is too large, got {value!r}")
    if not finite or amount < 0:
        raise ValueError(f"{name} must be a finite non-negative number, got {value!r}")
    return amount


def _geometry_present(geometry: Any) -> bool:
    if geometry is None:
        return False
    if isinstance(geometry, str):
        return bool(geometry.strip())
    if isinstance(geometry, Mapping):
        return geometry.get("coordinates") is not None
    return True


@dataclass(frozen=True)
class PopulationArea:
    """Population area: raw geometry (outer ring used) and total population."""

    geometry: Any
    total_population: Number

    @staticmethod
    def is_present(record: Any, fields: DatasetConfig = CONFIG.datasets) -> bool:
        """True if the record carries both a geometry and a population value."""
        return (
            isinstance(record, Mapping)
            and _geometry_present(record.get(fields.geometry_field))
            and record.get(fields.population_field) is not None
        )

    @classmethod
    def from_record(
        cls, record: Mapping[str, Any], fields: DatasetConfig = CONFIG.datasets
    ) -> "PopulationArea":
        """Build from a dataset record (raises ValueError on a bad population)."""
        return cls(
            geometry=record[fields.geometry_field],
            total_population=_parse_amount(
                record[fields.population_field], fields.population_field
            ),
        )


@dataclass(frozen=True)
class ShelterSite:
    """Shelter (bunker): projected location and capacity."""

    location: Any
    capacity: Number

    @staticmethod
    def _location_of(geometry: Any) -> Any:
        if isinstance(geometry, Mapping):
            return geometry.get("coordinates")
        return geometry

    @classmethod
    def is_present(cls, record: Any, fields: DatasetConfig = CONFIG.datasets) -> bool:
        """True if the record carries both a location and a capacity value."""
        return (
            isinstance(record, Mapping)
            and cls._location_of(record.get(fields.geometry_field)) is not None
            and record.get(fields.capacity_field) is not None
        )

    @classmethod
    def from_record(
        cls, record: Mapping[str, Any], fields: DatasetConfig = CONFIG.datasets
    ) -> "ShelterSite":
        """Build from a dataset record (raises ValueError on a bad capacity)."""
        return cls(
            location=cls._location_of(record[fields.geometry_field]),
            capacity=_parse_amount(record[fields.capacity_field], fields.capacity_field),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# 📊 RESULT
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class AnalysisResult:
    """Totals for one drawn shape. A cleared result has every count at zero."""

    total_population: Number = 0
    total_shelter_capacity: Number = 0
    coverage_percentage: float = 0.0
    areas_processed: int = 0
    areas_intersected: int = 0
    areas_with_errors: int = 0
    bunkers_inside: int = 0
    shape_type: Optional[str] = None

    @classmethod
    def cleared(cls) -> "AnalysisResult":
        """The neutral result shown when no shape is drawn."""
        return cls()

    @property
    def is_cleared(self) -> bool:
        return self.shape_type is None

    def to_dict(self, display: Optional[DisplayConfig] = None) -> Dict[str, Any]:
        """Convert to dictionary for the frontend JSON API."""
        d: Dict[str, Any] = {
            "cleared": self.is_cleared,
            "shapeType": self.shape_type,
            "totalPopulation": self.total_population,
            "totalShelterCapacity": self.total_shelter_capacity,
            "coveragePercentage": self.coverage_percentage,
            "areasProcessed": self.areas_processed,
            "areasIntersected": self.areas_intersected,
            "areasWithErrors": self.areas_with_errors,
            "bunkersInside": self.bunkers_inside,
        }
        if not self.is_cleared:
            display = display or CONFIG.display
            d["coverageLevel"] = display.coverage_level(self.coverage_percentage)
            d["coverageColor"] = display.coverage_color(self.coverage_percentage)
        return d


# ═══════════════════════════════════════════════════════════════════════════════
# 🧮 COVERAGE
# ═══════════════════════════════════════════════════════════════════════════════


def coverage(total_shelter_capacity: Number, total_population: Number) -> float:
    """
    Shelter capacity as a percentage of population.

    Zero population gives 0.0 rather than an error. Values above 100 are kept.
    """
    if total_population == 0:
        return 0.0
    return (total_shelter_capacity / total_population) * 100.0


# ═══════════════════════════════════════════════════════════════════════════════
# 🔄 AGGREGATION
# ═══════════════════════════════════════════════════════════════════════════════


def aggregate(
    population_areas: Optional[Iterable[Any]],
    shelter_sites: Optional[Iterable[Any]],
    shape: QueryShape,
    normalizer: Optional[CoordinateNormalizer] = None,
    strategy: Optional[ContainmentStrategy] = None,
    fields: DatasetConfig = CONFIG.datasets,
) -> AnalysisResult:
    """
    Aggregate population and shelter capacity inside a query shape.

    One pass over each dataset. Sums are order independent.

    Args:
        population_areas: Population records (None or empty allowed)
        shelter_sites: Shelter records (None or empty allowed)
        shape: Circle or BoundedRegion from the draw action
        normalizer: Coordinate normalizer (defaults to the shared one)
        strategy: Containment strategy (defaults to the configured one)
        fields: Record field names

    Returns:
        AnalysisResult with totals, counts and coverage percentage
    """
    normalizer = normalizer or get_default_normalizer()
    strategy = strategy or get_strategy()

    # === POPULATION PASS ===
    total_population: Number = 0
    areas_processed = 0
    areas_intersected = 0
    areas_with_errors = 0

    if not population_areas:
        logger.warning("No population data available for analysis")
        population_areas = []

    for index, record in enumerate(population_areas):
        try:
            if not PopulationArea.is_present(record, fields):
                continue
            areas_processed += 1

            area = PopulationArea.from_record(record, fields)
            ring = build_ring_from_geometry(area.geometry, normalizer)
            if isinstance(ring, Rejected):
                areas_with_errors += 1
                logger.warning(f"{ring.reason} for area {index}")
                continue

            if strategy.intersects_ring(shape, ring):
                areas_intersected += 1
                total_population += area.total_population
                logger.debug(
                    f"Area {index} intersects with shape. Population: "
                    f"{area.total_population}. Running total: {total_population}"
                )
        except RECORD_ERRORS as e:
            areas_with_errors += 1
            logger.error(f"Error analyzing population area {index}: {e}")

    logger.info(
        f"Population analysis complete. Processed: {areas_processed}, "
        f"intersected: {areas_intersected}, errors: {areas_with_errors}"
    )

    # === SHELTER PASS ===
    total_capacity: Number = 0
    bunkers_inside = 0

    if not shelter_sites:
        logger.warning("No bunker data available for analysis")
        shelter_sites = []

    for index, record in enumerate(shelter_sites):
        try:
            if not ShelterSite.is_present(record, fields):
                continue

            site = ShelterSite.from_record(record, fields)
            # Shelter locations are always projected, no range classification
            point = normalizer.normalize_projected_coord(site.location)
            if strategy.contains_point(shape, point):
                bunkers_inside += 1
                total_capacity += site.capacity
                logger.debug(
                    f"Bunker {index} is inside shape. Capacity: {site.capacity}. "
                    f"Running total: {total_capacity}"
                )
        except RECORD_ERRORS as e:
            logger.warning(f"Error analyzing bunker {index}: {e}")

    logger.info(f"Bunker analysis complete. {bunkers_inside} bunkers inside the shape")

    # === COVERAGE ===
    coverage_pct = coverage(total_capacity, total_population)
    logger.info(
        f"📊 Population: {total_population}, shelter capacity: {total_capacity}, "
        f"coverage: {coverage_pct:.2f}%"
    )

    return AnalysisResult(
        total_population=total_population,
        total_shelter_capacity=total_capacity,
        coverage_percentage=coverage_pct,
        areas_processed=areas_processed,
        areas_intersected=areas_intersected,
        areas_with_errors=areas_with_errors,
        bunkers_inside=bunkers_inside,
        shape_type=shape.shape_type,
    )


def analyze(
    shape: QueryShape,
    population_areas: Optional[Iterable[Any]],
    shelter_sites: Optional[Iterable[Any]],
    normalizer: Optional[CoordinateNormalizer] = None,
    strategy: Optional[ContainmentStrategy] = None,
) -> AnalysisResult:
    """Analyze one drawn shape against the session datasets."""
    logger.info(f"Starting analysis with drawn {shape.shape_type}")
    return aggregate(population_areas, shelter_sites, shape, normalizer, strategy)
