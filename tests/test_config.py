"""
Tests for feature sets, OSMConfig presets, validation and settings loading
"""

import pytest

from osm_tiles import config as config_module
from osm_tiles.config import (
    BBoxRegion,
    CityRegion,
    FeatureSet,
    OSMConfig,
    OSMFeature,
    OSMTagQuery,
    bbox,
    center_radius,
    city,
    load_settings,
    validate_config,
)
from osm_tiles.errors import ConfigError


class TestFeatures:

    def test_tag_query_filter(self):
        assert OSMTagQuery("building").to_overpass_filter() == '["building"]'
        assert OSMTagQuery("highway", "primary").to_overpass_filter() == '["highway"="primary"]'

    def test_every_feature_has_queries_and_description(self):
        for feature in OSMFeature:
            assert feature.to_osm_queries()
            assert feature.description

    def test_urban_is_default(self):
        assert OSMConfig().features == FeatureSet.urban()
        assert FeatureSet.urban().contains_feature(OSMFeature.ROADS)
        assert not FeatureSet.urban().contains_feature(OSMFeature.RAILWAYS)

    def test_queries_are_deduplicated_and_sorted(self):
        features = FeatureSet({OSMFeature.ROADS, OSMFeature.HIGHWAYS})
        queries = features.to_osm_queries()
        assert len(queries) == len(set(queries))
        assert queries == sorted(queries, key=lambda q: (q.key, q.value or ""))
        # highway=primary is in both groups
        assert sum(1 for q in queries if q == OSMTagQuery("highway", "primary")) == 1

    def test_fluent_changes_return_copies(self):
        base = FeatureSet.urban()
        more = base.with_feature(OSMFeature.TOURISM).with_custom_query("shop")
        less = base.without_feature(OSMFeature.ROADS)

        assert OSMFeature.TOURISM not in base.features
        assert more.contains_feature(OSMFeature.TOURISM)
        assert OSMTagQuery("shop") in more.to_osm_queries()
        assert not less.contains_feature(OSMFeature.ROADS)
        assert len(more) == len(base) + 2

    def test_empty_feature_set(self):
        assert FeatureSet().is_empty()
        assert not FeatureSet().with_custom_query("shop").is_empty()

    def test_preset_lookup(self):
        assert FeatureSet.preset("natural") == FeatureSet.natural()
        with pytest.raises(ConfigError):
            FeatureSet.preset("everything")


class TestOSMConfig:

    def test_defaults(self):
        config = OSMConfig()
        assert config.region == CityRegion("Berlin")
        assert config.grid_resolution == 100
        assert config.tile_size == 10.0
        assert config.timeout_seconds == 30

    def test_fluent_copies(self):
        config = OSMConfig.for_city("Hamburg").with_grid_resolution(250).with_tile_size(2.5).with_timeout(60)
        assert config.region == city("Hamburg")
        assert config.grid_resolution == 250
        assert config.tile_size == 2.5
        assert config.timeout_seconds == 60
        assert OSMConfig().grid_resolution == 100

    def test_presets(self):
        gaming = OSMConfig.for_gaming()
        assert (gaming.grid_resolution, gaming.tile_size) == (200, 5.0)
        assert gaming.features.contains_feature(OSMFeature.TOURISM)

        planning = OSMConfig.for_urban_planning()
        assert (planning.grid_resolution, planning.tile_size) == (300, 3.0)
        assert planning.features.contains_feature(OSMFeature.BOUNDARIES)

        assert OSMConfig.for_navigation().features.contains_feature(OSMFeature.RAILWAYS)
        assert OSMConfig.for_environment().tile_size == 15.0

    def test_region_helpers(self):
        region = bbox(1.0, 2.0, 3.0, 4.0)
        assert isinstance(region, BBoxRegion)
        assert region.bbox.as_tuple() == (1.0, 2.0, 3.0, 4.0)
        assert center_radius(52.5, 13.4, 1.0).radius_km == 1.0


class TestValidation:

    def test_valid_config_passes(self):
        validate_config(OSMConfig())
        validate_config(OSMConfig(region=bbox(52.4, 13.3, 52.6, 13.5)))

    def test_collects_every_problem(self):
        config = OSMConfig(region=bbox(53.0, 13.0, 52.0, 14.0), grid_resolution=0, tile_size=-1.0)
        with pytest.raises(ConfigError) as exc_info:
            validate_config(config)
        message = str(exc_info.value)
        assert "grid_resolution" in message
        assert "tile_size" in message
        assert "inverted" in message

    def test_bad_radius_and_city(self):
        with pytest.raises(ConfigError):
            validate_config(OSMConfig(region=center_radius(52.5, 13.4, 0.0)))
        with pytest.raises(ConfigError):
            validate_config(OSMConfig(region=city("  ")))


class TestSettings:

    def test_env_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setattr(config_module, "config", config_module.Settings())
        env_file = tmp_path / ".env"
        env_file.write_text("OSM_TILES_USER_AGENT=from-dotenv\nOSM_TILES_MAX_RETRIES=7\n")
        monkeypatch.setenv("OSM_TILES_USER_AGENT", "from-env")
        monkeypatch.setenv("OSM_TILES_CACHE_DIR", str(tmp_path / "cache"))
        # Registered with monkeypatch so the value loaded from .env is removed afterwards
        monkeypatch.setenv("OSM_TILES_MAX_RETRIES", "0")
        monkeypatch.delenv("OSM_TILES_MAX_RETRIES")

        settings = load_settings(str(env_file))

        # Existing environment wins over .env
        assert settings.api.user_agent == "from-env"
        assert settings.api.max_retries == 7
        assert settings.cache_dir == str(tmp_path / "cache")
        assert config_module.get_config() is settings

    def test_non_integer_env_value(self, monkeypatch):
        monkeypatch.setattr(config_module, "config", config_module.Settings())
        monkeypatch.setenv("OSM_TILES_REQUEST_TIMEOUT", "soon")

        with pytest.raises(ConfigError, match="OSM_TILES_REQUEST_TIMEOUT must be an integer, got 'soon'"):
            load_settings()
