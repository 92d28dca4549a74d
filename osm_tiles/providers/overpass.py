"""
Overpass API provider

Resolves the region (geocoding cities through Nominatim), builds one batch
Overpass QL query from the feature set and returns the raw JSON response.
"""

import json
import time
from typing import Optional

from loguru import logger

from ..config import APIConfig, BBoxRegion, CenterRadiusRegion, CityRegion, OSMConfig, Region, get_config
from ..errors import ConfigError, GeographicError, ParseError
from ..geo import BoundingBox
from .api_client import OverpassAPIClient
from .base import OSMData, OSMDataFormat, OSMDataProvider, OSMMetadata, ProviderCapabilities
from .cache import OSMCache

WARN_AREA_KM2 = 1000.0
MAX_AREA_KM2 = 5000.0

# Keys that are commonly mapped as multipolygon relations
RELATION_KEYS = ("building", "natural", "landuse", "leisure", "boundary", "waterway")

# Keys that are commonly mapped as single nodes
NODE_KEYS = ("amenity", "tourism", "power")

AVAILABILITY_QUERY = "[out:json][timeout:5];\nnode(0,0,0.001,0.001);\nout;"


class OverpassProvider(OSMDataProvider):
    """
    Fetch OSM data from the Overpass API

    Uses a single batch query per fetch to minimize API calls.
    Supports caching raw responses to disk for debugging and reuse.
    """

    provider_type = "overpass"

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout_seconds: Optional[int] = None,
        cache_dir: Optional[str] = None,
        api_config: Optional[APIConfig] = None,
    ):
        settings = get_config()
        self.api = api_config or settings.api
        self.base_url = base_url or self.api.overpass_url
        self.custom_timeout = timeout_seconds
        self.api_client = OverpassAPIClient(self.api, overpass_url=self.base_url)
        self.cache = OSMCache(cache_dir if cache_dir is not None else settings.cache_dir)

    def build_query(self, bbox: BoundingBox, config: OSMConfig) -> str:
        """Overpass QL for every tag query of config.features inside bbox"""
        bbox_str = bbox.to_overpass()
        timeout = self.custom_timeout or config.timeout_seconds

        lines = [f"[out:json][timeout:{timeout}];", "("]
        for tag_query in config.features.to_osm_queries():
            tag_filter = tag_query.to_overpass_filter()
            lines.append(f"  way{tag_filter}({bbox_str});")
            if tag_query.key in RELATION_KEYS:
                lines.append(f"  relation{tag_filter}({bbox_str});")
            if tag_query.key in NODE_KEYS:
                lines.append(f"  node{tag_filter}({bbox_str});")
        lines.append(");")
        lines.append("out geom;")
        return "\n".join(lines)

    def fetch_data(self, config: OSMConfig) -> OSMData:
        start_time = time.monotonic()
        logger.info(f"Fetching OSM data via Overpass API for {config.region}")

        bbox = self.resolve_region(config.region)
        logger.debug(f"Resolved region to bounding box: {bbox.as_tuple()}")

        area_km2 = bbox.area_km2()
        if area_km2 > WARN_AREA_KM2:
            logger.warning(f"Large area requested: {area_km2:.2f} km² - this may take a while or fail")
        if area_km2 > MAX_AREA_KM2:
            raise ConfigError(
                f"Area too large: {area_km2:.2f} km². Overpass API typically limits requests to ~1000 km²"
            )

        query = self.build_query(bbox, config)
        logger.debug(f"Overpass query:\n{query}")

        # Check cache first
        cache_path = self.cache.get_cache_path(query)
        raw_data = self.cache.load(cache_path) if cache_path else None
        from_cache = raw_data is not None
        if raw_data is None:
            raw_data = self.api_client.query(query)
            if cache_path:
                self.cache.save(cache_path, raw_data)

        processing_time = int((time.monotonic() - start_time) * 1000)
        element_count = self._count_elements(raw_data)

        metadata = OSMMetadata(source=self.base_url, provider_type=self.provider_type)
        metadata = metadata.with_processing_time(processing_time)
        if element_count is not None:
            metadata = metadata.with_element_count(element_count)
        metadata = (
            metadata.with_extra("query_size", str(len(raw_data)))
            .with_extra("area_km2", f"{area_km2:.2f}")
            .with_extra("bbox", bbox.to_overpass())
            .with_extra("from_cache", str(from_cache).lower())
        )

        logger.info(
            f"Fetched OSM data: {element_count or 0} elements, "
            f"{len(raw_data) / 1024:.2f} KB, {processing_time / 1000:.1f}s"
        )
        return OSMData(raw_data=raw_data, format=OSMDataFormat.JSON, bounding_box=bbox, metadata=metadata)

    def resolve_region(self, region: Region) -> BoundingBox:
        if isinstance(region, BBoxRegion):
            return region.bbox
        if isinstance(region, CenterRadiusRegion):
            return BoundingBox.from_center_radius(region.lat, region.lon, region.radius_km)
        if isinstance(region, CityRegion):
            return self.geocode_city(region.name)
        raise ConfigError(f"Unsupported region: {region!r}")

    def geocode_city(self, name: str) -> BoundingBox:
        """Bounding box of the first Nominatim match for name"""
        logger.debug(f"Geocoding city: {name}")
        url = f"{self.api.nominatim_url.rstrip('/')}/search"
        params = {"q": name, "format": "json", "limit": 1, "addressdetails": 1}

        results = self.api_client.get_json(url, params=params)
        if not isinstance(results, list):
            raise ParseError("Failed to parse geocoding response: expected a list")
        if not results:
            raise GeographicError(f"Could not find city: {name}")

        # Nominatim order: [south, north, west, east] as strings
        raw_bbox = results[0].get("boundingbox") if isinstance(results[0], dict) else None
        if raw_bbox is None:
            raise GeographicError(f"No bounding box found for city: {name}")
        if not isinstance(raw_bbox, list) or len(raw_bbox) != 4:
            raise GeographicError("Invalid bounding box format from geocoding service")

        labels = ("south latitude", "north latitude", "west longitude", "east longitude")
        coords = []
        for value, label in zip(raw_bbox, labels):
            try:
                coords.append(float(value))
            except (TypeError, ValueError):
                raise ParseError(f"Invalid {label} format")

        south, north, west, east = coords
        logger.debug(f"Geocoded '{name}' to bbox: {south},{west},{north},{east}")
        return BoundingBox(south=south, west=west, north=north, east=east)

    def test_availability(self) -> None:
        logger.debug("Testing Overpass API availability")
        self.api_client.query(AVAILABILITY_QUERY, retries=1)
        logger.debug("Overpass API is available")

    def capabilities(self) -> ProviderCapabilities:
        return ProviderCapabilities(
            supports_real_time=True,
            requires_network=True,
            supports_geocoding=True,
            max_area_km2=WARN_AREA_KM2,
            supported_formats=[OSMDataFormat.JSON],
            rate_limit_rpm=60,
            notes="Overpass API with Nominatim geocoding",
        )

    @staticmethod
    def _count_elements(raw_data: str) -> Optional[int]:
        try:
            elements = json.loads(raw_data).get("elements")
        except (ValueError, AttributeError):
            return None
        return len(elements) if isinstance(elements, list) else None
