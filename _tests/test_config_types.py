"""
Unit tests for the typed configuration.

Tests:
1. Projection zone / hemisphere select the UTM EPSG code
2. Invalid values are rejected in __post_init__
3. Coverage levels and colours follow the 33 / 66 thresholds
4. Population colour classes (exclusive minimum, highest first)
5. Environment overrides via _env_or_default

Run with: python -m pytest _tests/test_config_types.py -v
"""

import pytest

from shelter_coverage.analysis_config import _env_or_default
from shelter_coverage.config_types import (
    CONFIG,
    AppConfig,
    ContainmentConfig,
    DisplayConfig,
    ProjectionConfig,
    get_frontend_config,
)


class TestProjectionConfig:
    @pytest.mark.parametrize(
        "zone, hemisphere, expected",
        [(33, "north", "EPSG:32633"), (32, "north", "EPSG:32632"), (56, "south", "EPSG:32756")],
    )
    def test_source_crs(self, zone, hemisphere, expected):
        assert ProjectionConfig(utm_zone=zone, hemisphere=hemisphere).source_crs == expected

    @pytest.mark.parametrize("zone", [0, 61, -3])
    def test_invalid_zone(self, zone):
        with pytest.raises(ValueError):
            ProjectionConfig(utm_zone=zone)

    def test_invalid_hemisphere(self):
        with pytest.raises(ValueError):
            ProjectionConfig(hemisphere="east")

    def test_from_dict_normalizes_hemisphere(self):
        config = ProjectionConfig.from_dict({"utm_zone": "32", "hemisphere": "SOUTH"})
        assert config.utm_zone == 32
        assert config.hemisphere == "south"


class TestContainmentConfig:
    def test_defaults(self):
        config = ContainmentConfig()
        assert config.strategy == "bbox"
        assert config.earth_radius_m == 6371000.0

    def test_unknown_strategy(self):
        with pytest.raises(ValueError):
            ContainmentConfig(strategy="magic")

    def test_non_positive_radius(self):
        with pytest.raises(ValueError):
            ContainmentConfig(earth_radius_m=0)


class TestDisplayConfig:
    display = DisplayConfig()

    @pytest.mark.parametrize(
        "pct, level, color",
        [
            (0.0, "poor", "#d32f2f"),
            (32.99, "poor", "#d32f2f"),
            (33.0, "medium", "#f57c00"),
            (65.9, "medium", "#f57c00"),
            (66.0, "good", "#388e3c"),
            (250.0, "good", "#388e3c"),
        ],
    )
    def test_coverage_levels(self, pct, level, color):
        assert self.display.coverage_level(pct) == level
        assert self.display.coverage_color(pct) == color

    @pytest.mark.parametrize(
        "population, color",
        [
            (5000, "#BD0026"),
            (2000, "#FC4E2A"),
            (1001, "#FC4E2A"),
            (600, "#FD8D3C"),
            (101, "#FEB24C"),
            (100, "#FFEDA0"),
            (0, "#FFEDA0"),
        ],
    )
    def test_population_color(self, population, color):
        assert self.display.population_color(population) == color

    def test_from_dict_sorts_classes(self):
        display = DisplayConfig.from_dict(
            {"population_classes": [[10, "#low"], [1000, "#high"]]}
        )
        assert display.population_classes == ((1000.0, "#high"), (10.0, "#low"))
        assert display.population_color(50) == "#low"

    def test_thresholds_must_be_ordered(self):
        with pytest.raises(ValueError):
            DisplayConfig(poor_threshold=70.0, medium_threshold=60.0)


class TestAppConfig:
    def test_defaults_match_module_config(self):
        defaults = AppConfig.defaults()
        assert defaults.display == CONFIG.display
        assert defaults.containment == CONFIG.containment

    def test_frontend_dict(self):
        d = get_frontend_config()
        assert d["containmentStrategy"] in ("bbox", "exact")
        assert d["display"]["poorThreshold"] == 33.0
        assert d["projection"]["source_crs"].startswith("EPSG:32")


class TestEnvOverrides:
    def test_env_value_is_converted(self, monkeypatch):
        monkeypatch.setenv("SHELTER_TEST_PORT", "8080")
        assert _env_or_default("SHELTER_TEST_PORT", 5052, int) == 8080

    def test_default_when_unset(self, monkeypatch):
        monkeypatch.delenv("SHELTER_TEST_PORT", raising=False)
        assert _env_or_default("SHELTER_TEST_PORT", 5052, int) == 5052
