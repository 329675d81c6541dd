#!/usr/bin/env python3
"""
Shelter Coverage Analysis - Configuration Types

ARCHITECTURAL OVERVIEW:
=======================
Responsibility: Centralized, typed configuration for the shelter coverage
analysis using frozen dataclasses for immutability and type safety.

This follows the Typed Configuration Architecture pattern:
- analysis_config.py defines ANALYSIS_CONFIG_DATA dictionary (user edits this)
- config_types.py defines frozen dataclasses (this file)
- CONFIG module-level instance for orchestrator access
- Business logic receives primitives only

For Navigation: Use VS Code outline (Ctrl+Shift+O)
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

VALID_HEMISPHERES = ("north", "south")
VALID_STRATEGIES = ("bbox", "exact")

# ═══════════════════════════════════════════════════════════════════════════
# 🗺️ PROJECTION CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class ProjectionConfig:
    """UTM zone and hemisphere of the projected source coordinates."""

    utm_zone: int = 33
    hemisphere: str = "north"
    target_crs: str = "EPSG:4326"

    def __post_init__(self) -> None:
        if not 1 <= self.utm_zone <= 60:
            raise ValueError(f"utm_zone must be in 1..60, got {self.utm_zone}")
        if self.hemisphere not in VALID_HEMISPHERES:
            raise ValueError(
                f"hemisphere must be one of {VALID_HEMISPHERES}, got '{self.hemisphere}'"
            )

    @property
    def source_crs(self) -> str:
        """WGS84 / UTM EPSG code (326xx north, 327xx south)."""
        base = 32600 if self.hemisphere == "north" else 32700
        return f"EPSG:{base + self.utm_zone}"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ProjectionConfig":
        """Create from dictionary."""
        return cls(
            utm_zone=int(d.get("utm_zone", 33)),
            hemisphere=str(d.get("hemisphere", "north")).lower(),
            target_crs=d.get("target_crs", "EPSG:4326"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "utm_zone": self.utm_zone,
            "hemisphere": self.hemisphere,
            "source_crs": self.source_crs,
            "target_crs": self.target_crs,
        }


# ═══════════════════════════════════════════════════════════════════════════
# 📂 DATASET CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class DatasetConfig:
    """File locations and record field names of the two datasets."""

    data_dir: str = "data"
    population_file: str = "population.json"
    shelter_file: str = "bunkers.json"
    geometry_field: str = "geom"
    population_field: str = "poptot"
    capacity_field: str = "plasser"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "DatasetConfig":
        """Create from dictionary."""
        return cls(
            data_dir=str(d.get("data_dir", "data")),
            population_file=d.get("population_file", "population.json"),
            shelter_file=d.get("shelter_file", "bunkers.json"),
            geometry_field=d.get("geometry_field", "geom"),
            population_field=d.get("population_field", "poptot"),
            capacity_field=d.get("capacity_field", "plasser"),
        )


# ═══════════════════════════════════════════════════════════════════════════
# 📐 CONTAINMENT CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class ContainmentConfig:
    """Containment strategy selection and distance model."""

    strategy: str = "bbox"
    earth_radius_m: float = 6371000.0

    def __post_init__(self) -> None:
        if self.strategy not in VALID_STRATEGIES:
            raise ValueError(
                f"strategy must be one of {VALID_STRATEGIES}, got '{self.strategy}'"
            )
        if self.earth_radius_m <= 0:
            raise ValueError(f"earth_radius_m must be > 0, got {self.earth_radius_m}")

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ContainmentConfig":
        """Create from dictionary."""
        return cls(
            strategy=d.get("strategy", "bbox"),
            earth_radius_m=float(d.get("earth_radius_m", 6371000.0)),
        )


# ═══════════════════════════════════════════════════════════════════════════
# 🎨 DISPLAY CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class DisplayConfig:
    """Coverage level thresholds and population colour classes."""

    poor_threshold: float = 33.0
    medium_threshold: float = 66.0
    poor_color: str = "#d32f2f"
    medium_color: str = "#f57c00"
    good_color: str = "#388e3c"
    population_classes: Tuple[Tuple[float, str], ...] = (
        (2000, "#BD0026"),
        (1000, "#FC4E2A"),
        (500, "#FD8D3C"),
        (100, "#FEB24C"),
    )
    population_default_color: str = "#FFEDA0"

    def __post_init__(self) -> None:
        if self.poor_threshold > self.medium_threshold:
            raise ValueError(
                f"poor_threshold ({self.poor_threshold}) must not exceed "
                f"medium_threshold ({self.medium_threshold})"
            )

    def coverage_level(self, coverage_pct: float) -> str:
        """Classify a coverage percentage as 'poor', 'medium' or 'good'."""
        if coverage_pct < self.poor_threshold:
            return "poor"
        if coverage_pct < self.medium_threshold:
            return "medium"
        return "good"

    def coverage_color(self, coverage_pct: float) -> str:
        """Colour for a coverage percentage."""
        return {
            "poor": self.poor_color,
            "medium": self.medium_color,
            "good": self.good_color,
        }[self.coverage_level(coverage_pct)]

    def population_color(self, population: float) -> str:
        """Fill colour for a population area (first class whose minimum is exceeded)."""
        for minimum, color in self.population_classes:
            if population > minimum:
                return color
        return self.population_default_color

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "DisplayConfig":
        """Create from dictionary."""
        classes = d.get("population_classes")
        if classes is None:
            population_classes = cls.population_classes
        else:
            population_classes = tuple(
                sorted(
                    ((float(minimum), str(color)) for minimum, color in classes),
                    reverse=True,
                )
            )
        return cls(
            poor_threshold=float(d.get("poor_threshold", 33.0)),
            medium_threshold=float(d.get("medium_threshold", 66.0)),
            poor_color=d.get("poor_color", "#d32f2f"),
            medium_color=d.get("medium_color", "#f57c00"),
            good_color=d.get("good_color", "#388e3c"),
            population_classes=population_classes,
            population_default_color=d.get("population_default_color", "#FFEDA0"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "poorThreshold": self.poor_threshold,
            "mediumThreshold": self.medium_threshold,
            "poorColor": self.poor_color,
            "mediumColor": self.medium_color,
            "goodColor": self.good_color,
            "populationClasses": [list(c) for c in self.population_classes],
            "populationDefaultColor": self.population_default_color,
        }


# ═══════════════════════════════════════════════════════════════════════════
# 🌐 SERVER CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class ServerConfig:
    """Flask bind address."""

    host: str = "127.0.0.1"
    port: int = 5052

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ServerConfig":
        """Create from dictionary."""
        return cls(host=d.get("host", "127.0.0.1"), port=int(d.get("port", 5052)))


# ═══════════════════════════════════════════════════════════════════════════
# ⚙️ MAIN CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class AppConfig:
    """Top-level configuration aggregating all sections."""

    projection: ProjectionConfig = field(default_factory=ProjectionConfig)
    datasets: DatasetConfig = field(default_factory=DatasetConfig)
    containment: ContainmentConfig = field(default_factory=ContainmentConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    server: ServerConfig = field(default_factory=ServerConfig)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "AppConfig":
        """Create from dictionary."""
        return cls(
            projection=ProjectionConfig.from_dict(d.get("projection", {})),
            datasets=DatasetConfig.from_dict(d.get("datasets", {})),
            containment=ContainmentConfig.from_dict(d.get("containment", {})),
            display=DisplayConfig.from_dict(d.get("display", {})),
            server=ServerConfig.from_dict(d.get("server", {})),
        )

    @classmethod
    def defaults(cls) -> "AppConfig":
        """Create with all default values."""
        return cls.from_dict({})

    def to_frontend_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for frontend JSON API."""
        return {
            "projection": self.projection.to_dict(),
            "containmentStrategy": self.containment.strategy,
            "display": self.display.to_dict(),
        }


# ═══════════════════════════════════════════════════════════════════════════
# 📌 MODULE-LEVEL CONFIG INSTANCE
# ═══════════════════════════════════════════════════════════════════════════

# Import configuration data from separate file (user-editable)
from shelter_coverage.analysis_config import ANALYSIS_CONFIG_DATA  # noqa: E402

# Edit analysis_config.py to change settings (restart server after changes)
CONFIG: AppConfig = AppConfig.from_dict(ANALYSIS_CONFIG_DATA)


def get_frontend_config() -> Dict[str, Any]:
    """
    Get configuration for frontend JavaScript.

    Returns a dict suitable for JSON serialization and use in the frontend.
    """
    return CONFIG.to_frontend_dict()
