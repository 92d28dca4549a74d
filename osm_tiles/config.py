"""
Configuration settings for OSM tile grid generation

- Settings / APIConfig: service endpoints and request behavior, with .env
  and environment overrides
- Region: how the area of interest is specified
- OSMFeature / FeatureSet: which OSM features to fetch
- OSMConfig: the bundle handed to providers and the grid generator
"""

import os
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple, Union

from dotenv import load_dotenv
from loguru import logger

from .errors import ConfigError
from .geo import BoundingBox


@dataclass
class APIConfig:
    """API endpoints and request settings"""
    # Overpass API (OSM)
    overpass_url: str = "https://overpass-api.de/api/interpreter"

    # Nominatim (geocoding)
    nominatim_url: str = "https://nominatim.openstreetmap.org"

    # Request settings
    request_timeout: int = 30
    max_retries: int = 3
    retry_delay: float = 5.0
    min_request_interval: float = 2.0

    # User agent for API requests (Nominatim rejects anonymous clients)
    user_agent: str = "osm-tiles/0.1"


@dataclass
class Settings:
    """Process-wide settings"""
    api: APIConfig = field(default_factory=APIConfig)

    # Directory for cached raw Overpass responses (disabled when None)
    cache_dir: Optional[str] = None

    log_level: str = "INFO"


# Global settings instance
config = Settings()


def get_config() -> Settings:
    """Get global settings"""
    return config


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got '{value}'")


def load_settings(env_file: Optional[str] = None) -> Settings:
    """
    Load .env and apply OSM_TILES_* environment overrides to the global settings

    Existing environment variables are never overridden by the .env file.
    """
    if env_file:
        load_dotenv(env_file, override=False)
    else:
        env_paths = [
            Path(__file__).parent.parent / ".env",  # Project root
            Path.cwd() / ".env",
        ]
        for env_path in env_paths:
            if env_path.exists():
                load_dotenv(env_path, override=False)
                logger.debug(f"Loaded .env file from {env_path}")
                break

    api = config.api
    api.overpass_url = os.getenv("OSM_TILES_OVERPASS_URL", api.overpass_url)
    api.nominatim_url = os.getenv("OSM_TILES_NOMINATIM_URL", api.nominatim_url)
    api.user_agent = os.getenv("OSM_TILES_USER_AGENT", api.user_agent)
    api.request_timeout = _env_int("OSM_TILES_REQUEST_TIMEOUT", api.request_timeout)
    api.max_retries = _env_int("OSM_TILES_MAX_RETRIES", api.max_retries)
    config.cache_dir = os.getenv("OSM_TILES_CACHE_DIR", config.cache_dir)

    return config


# ============================================================
# Regions
# ============================================================

@dataclass(frozen=True)
class CityRegion:
    """A named place, resolved through geocoding"""
    name: str


@dataclass(frozen=True)
class BBoxRegion:
    """An explicit bounding box"""
    bbox: BoundingBox


@dataclass(frozen=True)
class CenterRadiusRegion:
    """A center point with a radius in kilometers"""
    lat: float
    lon: float
    radius_km: float


Region = Union[CityRegion, BBoxRegion, CenterRadiusRegion]


def city(name: str) -> CityRegion:
    return CityRegion(name=name)


def bbox(south: float, west: float, north: float, east: float) -> BBoxRegion:
    return BBoxRegion(bbox=BoundingBox(south=south, west=west, north=north, east=east))


def center_radius(lat: float, lon: float, radius_km: float) -> CenterRadiusRegion:
    return CenterRadiusRegion(lat=lat, lon=lon, radius_km=radius_km)


# ============================================================
# Features
# ============================================================

@dataclass(frozen=True, order=True)
class OSMTagQuery:
    """A single OSM tag filter; value None matches any value"""
    key: str
    value: Optional[str] = None

    def to_overpass_filter(self) -> str:
        if self.value is None:
            return f'["{self.key}"]'
        return f'["{self.key}"="{self.value}"]'


class OSMFeature(str, Enum):
    """Standard OSM feature groups"""
    # Transportation
    ROADS = "roads"
    HIGHWAYS = "highways"
    FOOTPATHS = "footpaths"
    RAILWAYS = "railways"

    # Buildings & structures
    BUILDINGS = "buildings"
    RESIDENTIAL = "residential"
    COMMERCIAL = "commercial"
    INDUSTRIAL = "industrial"

    # Natural features
    WATER = "water"
    RIVERS = "rivers"
    LAKES = "lakes"
    FORESTS = "forests"
    PARKS = "parks"
    GRASSLAND = "grassland"

    # Urban features
    PARKING = "parking"
    AMENITIES = "amenities"
    TOURISM = "tourism"

    # Infrastructure
    POWER_LINES = "power_lines"
    BOUNDARIES = "boundaries"
    LANDUSE = "landuse"

    def to_osm_queries(self) -> List[OSMTagQuery]:
        """Tag queries that select this feature"""
        return [OSMTagQuery(key, value) for key, value in _FEATURE_QUERIES[self]]

    @property
    def description(self) -> str:
        return _FEATURE_DESCRIPTIONS[self]


_FEATURE_QUERIES: Dict[OSMFeature, List[Tuple[str, Optional[str]]]] = {
    OSMFeature.ROADS: [
        ("highway", "primary"),
        ("highway", "secondary"),
        ("highway", "tertiary"),
        ("highway", "residential"),
        ("highway", "unclassified"),
    ],
    OSMFeature.HIGHWAYS: [
        ("highway", "motorway"),
        ("highway", "trunk"),
        ("highway", "primary"),
    ],
    OSMFeature.FOOTPATHS: [
        ("highway", "footway"),
        ("highway", "path"),
        ("highway", "pedestrian"),
        ("highway", "steps"),
    ],
    OSMFeature.RAILWAYS: [("railway", None)],
    OSMFeature.BUILDINGS: [("building", None)],
    OSMFeature.RESIDENTIAL: [
        ("building", "residential"),
        ("landuse", "residential"),
    ],
    OSMFeature.COMMERCIAL: [
        ("building", "commercial"),
        ("landuse", "commercial"),
        ("building", "retail"),
    ],
    OSMFeature.INDUSTRIAL: [
        ("building", "industrial"),
        ("landuse", "industrial"),
    ],
    OSMFeature.WATER: [
        ("natural", "water"),
        ("waterway", None),
    ],
    OSMFeature.RIVERS: [
        ("waterway", "river"),
        ("waterway", "stream"),
    ],
    OSMFeature.LAKES: [
        ("natural", "water"),
        ("water", "lake"),
    ],
    OSMFeature.FORESTS: [
        ("natural", "wood"),
        ("landuse", "forest"),
    ],
    OSMFeature.PARKS: [
        ("leisure", "park"),
        ("leisure", "garden"),
    ],
    OSMFeature.GRASSLAND: [
        ("landuse", "grass"),
        ("natural", "grassland"),
    ],
    OSMFeature.PARKING: [
        ("amenity", "parking"),
        ("landuse", "parking"),
    ],
    OSMFeature.AMENITIES: [("amenity", None)],
    OSMFeature.TOURISM: [("tourism", None)],
    OSMFeature.POWER_LINES: [
        ("power", "line"),
        ("power", "tower"),
    ],
    OSMFeature.BOUNDARIES: [("boundary", None)],
    OSMFeature.LANDUSE: [("landuse", None)],
}

_FEATURE_DESCRIPTIONS: Dict[OSMFeature, str] = {
    OSMFeature.ROADS: "Local roads and streets",
    OSMFeature.HIGHWAYS: "Major highways and motorways",
    OSMFeature.FOOTPATHS: "Walking paths and pedestrian areas",
    OSMFeature.RAILWAYS: "Railway lines and stations",
    OSMFeature.BUILDINGS: "All building structures",
    OSMFeature.RESIDENTIAL: "Residential buildings and areas",
    OSMFeature.COMMERCIAL: "Commercial buildings and retail areas",
    OSMFeature.INDUSTRIAL: "Industrial buildings and zones",
    OSMFeature.WATER: "All water features",
    OSMFeature.RIVERS: "Rivers and streams",
    OSMFeature.LAKES: "Lakes and ponds",
    OSMFeature.FORESTS: "Forests and wooded areas",
    OSMFeature.PARKS: "Parks and recreational areas",
    OSMFeature.GRASSLAND: "Grass and meadow areas",
    OSMFeature.PARKING: "Parking areas and lots",
    OSMFeature.AMENITIES: "Public amenities and services",
    OSMFeature.TOURISM: "Tourist attractions and facilities",
    OSMFeature.POWER_LINES: "Power lines and electrical infrastructure",
    OSMFeature.BOUNDARIES: "Administrative and other boundaries",
    OSMFeature.LANDUSE: "General land use classifications",
}


@dataclass
class FeatureSet:
    """Standard features plus custom tag queries to fetch"""
    features: Set[OSMFeature] = field(default_factory=set)
    custom_queries: List[OSMTagQuery] = field(default_factory=list)

    @classmethod
    def urban(cls) -> "FeatureSet":
        return cls({
            OSMFeature.ROADS,
            OSMFeature.BUILDINGS,
            OSMFeature.PARKS,
            OSMFeature.WATER,
        })

    @classmethod
    def transportation(cls) -> "FeatureSet":
        return cls({
            OSMFeature.ROADS,
            OSMFeature.HIGHWAYS,
            OSMFeature.RAILWAYS,
            OSMFeature.FOOTPATHS,
            OSMFeature.PARKING,
        })

    @classmethod
    def natural(cls) -> "FeatureSet":
        return cls({
            OSMFeature.WATER,
            OSMFeature.RIVERS,
            OSMFeature.LAKES,
            OSMFeature.FORESTS,
            OSMFeature.PARKS,
            OSMFeature.GRASSLAND,
        })

    @classmethod
    def comprehensive(cls) -> "FeatureSet":
        return cls({
            OSMFeature.ROADS,
            OSMFeature.HIGHWAYS,
            OSMFeature.BUILDINGS,
            OSMFeature.RESIDENTIAL,
            OSMFeature.COMMERCIAL,
            OSMFeature.WATER,
            OSMFeature.PARKS,
            OSMFeature.FORESTS,
            OSMFeature.RAILWAYS,
            OSMFeature.AMENITIES,
        })

    @classmethod
    def preset(cls, name: str) -> "FeatureSet":
        """Look up a preset by name (urban, transportation, natural, comprehensive)"""
        presets = {
            "urban": cls.urban,
            "transportation": cls.transportation,
            "natural": cls.natural,
            "comprehensive": cls.comprehensive,
        }
        if name not in presets:
            raise ConfigError(f"Unknown feature preset: '{name}'. Available presets: {sorted(presets)}")
        return presets[name]()

    def with_features(self, features: List[OSMFeature]) -> "FeatureSet":
        return FeatureSet(self.features | set(features), list(self.custom_queries))

    def with_feature(self, feature: OSMFeature) -> "FeatureSet":
        return self.with_features([feature])

    def without_feature(self, feature: OSMFeature) -> "FeatureSet":
        return FeatureSet(self.features - {feature}, list(self.custom_queries))

    def with_custom_query(self, key: str, value: Optional[str] = None) -> "FeatureSet":
        return FeatureSet(set(self.features), self.custom_queries + [OSMTagQuery(key, value)])

    def contains_feature(self, feature: OSMFeature) -> bool:
        return feature in self.features

    def to_osm_queries(self) -> List[OSMTagQuery]:
        """All tag queries, deduplicated and sorted by key then value"""
        queries = set(self.custom_queries)
        for feature in self.features:
            queries.update(feature.to_osm_queries())
        return sorted(queries, key=lambda q: (q.key, q.value or ""))

    def is_empty(self) -> bool:
        return not self.features and not self.custom_queries

    def __len__(self) -> int:
        return len(self.features) + len(self.custom_queries)


# ============================================================
# Generation config
# ============================================================

@dataclass
class OSMConfig:
    """Configuration for OSM data download and grid generation"""
    region: Region = field(default_factory=lambda: city("Berlin"))

    # Grid resolution in cells per degree
    grid_resolution: int = 100

    # Nominal tile size in meters
    tile_size: float = 10.0

    # Overpass query timeout in seconds
    timeout_seconds: int = 30

    features: FeatureSet = field(default_factory=FeatureSet.urban)

    @classmethod
    def for_city(cls, name: str) -> "OSMConfig":
        return cls(region=city(name))

    def with_region(self, region: Region) -> "OSMConfig":
        return replace(self, region=region)

    def with_grid_resolution(self, resolution: int) -> "OSMConfig":
        return replace(self, grid_resolution=resolution)

    def with_tile_size(self, size: float) -> "OSMConfig":
        return replace(self, tile_size=size)

    def with_timeout(self, seconds: int) -> "OSMConfig":
        return replace(self, timeout_seconds=seconds)

    def with_features(self, features: FeatureSet) -> "OSMConfig":
        return replace(self, features=features)

    # Presets for common use cases

    @classmethod
    def for_gaming(cls) -> "OSMConfig":
        features = FeatureSet.urban().with_features([OSMFeature.AMENITIES, OSMFeature.TOURISM])
        return cls(features=features, grid_resolution=200, tile_size=5.0)

    @classmethod
    def for_navigation(cls) -> "OSMConfig":
        features = FeatureSet.transportation().with_features([OSMFeature.BUILDINGS, OSMFeature.AMENITIES])
        return cls(features=features, grid_resolution=150, tile_size=8.0)

    @classmethod
    def for_urban_planning(cls) -> "OSMConfig":
        features = FeatureSet.comprehensive().with_features([OSMFeature.BOUNDARIES, OSMFeature.LANDUSE])
        return cls(features=features, grid_resolution=300, tile_size=3.0)

    @classmethod
    def for_environment(cls) -> "OSMConfig":
        features = FeatureSet.natural().with_feature(OSMFeature.LANDUSE)
        return cls(features=features, grid_resolution=100, tile_size=15.0)


def validate_config(config: OSMConfig) -> None:
    """
    Validate an OSMConfig before handing it to a provider or generator.
    Raises ConfigError listing every problem found.
    """
    errors = []

    if config.grid_resolution is None or config.grid_resolution <= 0:
        errors.append(f"grid_resolution must be a positive integer, got {config.grid_resolution}")

    if config.tile_size is None or config.tile_size <= 0:
        errors.append(f"tile_size must be positive, got {config.tile_size}")

    if config.timeout_seconds is None or config.timeout_seconds <= 0:
        errors.append(f"timeout_seconds must be positive, got {config.timeout_seconds}")

    region = config.region
    if isinstance(region, BBoxRegion):
        box = region.bbox
        if box.north < box.south or box.east < box.west:
            errors.append(f"bounding box is inverted: {box.as_tuple()}")
    elif isinstance(region, CenterRadiusRegion):
        if region.radius_km <= 0:
            errors.append(f"radius_km must be positive, got {region.radius_km}")
    elif isinstance(region, CityRegion):
        if not region.name.strip():
            errors.append("city name is empty")
    else:
        errors.append(f"unsupported region: {region!r}")

    if errors:
        error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        raise ConfigError(error_msg)
