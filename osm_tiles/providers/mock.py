"""
Mock provider

Offline provider returning canned OSM data, for tests and development
"""

import json
from typing import Any, Dict, Optional

from loguru import logger

from ..config import BBoxRegion, CenterRadiusRegion, CityRegion, OSMConfig, Region
from ..errors import ConfigError, ConnectionFailedError, GeographicError
from ..geo import BoundingBox
from .base import OSMData, OSMDataFormat, OSMDataProvider, OSMMetadata, ProviderCapabilities

# Rough degrees per kilometer
KM_PER_DEGREE = 111.0

MOCK_CITIES: Dict[str, BoundingBox] = {
    "berlin": BoundingBox(52.3, 13.0, 52.7, 13.8),
    "munich": BoundingBox(48.0, 11.3, 48.3, 11.8),
    "münchen": BoundingBox(48.0, 11.3, 48.3, 11.8),
    "hamburg": BoundingBox(53.4, 9.7, 53.8, 10.3),
    "test": BoundingBox(52.4, 13.3, 52.6, 13.5),
    "testcity": BoundingBox(52.4, 13.3, 52.6, 13.5),
    "mock": BoundingBox(52.4, 13.3, 52.6, 13.5),
}

# One residential building, one street crossing it, a park and a cafe near Alexanderplatz
DEFAULT_TEST_DATA: Dict[str, Any] = {
    "version": 0.6,
    "generator": "Mock Provider v1.0",
    "elements": [
        {
            "type": "way",
            "id": 123456789,
            "nodes": [1001, 1002, 1003, 1001],
            "tags": {
                "building": "residential",
                "addr:street": "Mock Street",
                "addr:housenumber": "42",
            },
            "geometry": [
                {"lat": 52.5, "lon": 13.4},
                {"lat": 52.501, "lon": 13.4},
                {"lat": 52.501, "lon": 13.401},
                {"lat": 52.5, "lon": 13.401},
                {"lat": 52.5, "lon": 13.4},
            ],
        },
        {
            "type": "way",
            "id": 987654321,
            "nodes": [2001, 2002],
            "tags": {"highway": "residential", "name": "Mock Street"},
            "geometry": [
                {"lat": 52.499, "lon": 13.399},
                {"lat": 52.502, "lon": 13.402},
            ],
        },
        {
            "type": "way",
            "id": 555666777,
            "nodes": [3001, 3002, 3003, 3004, 3001],
            "tags": {"leisure": "park", "name": "Mock Park"},
            "geometry": [
                {"lat": 52.503, "lon": 13.403},
                {"lat": 52.504, "lon": 13.403},
                {"lat": 52.504, "lon": 13.405},
                {"lat": 52.503, "lon": 13.405},
                {"lat": 52.503, "lon": 13.403},
            ],
        },
        {
            "type": "node",
            "id": 4001,
            "lat": 52.5015,
            "lon": 13.4015,
            "tags": {"amenity": "cafe", "name": "Mock Cafe"},
        },
    ],
}


class MockProvider(OSMDataProvider):
    """Returns fixed data for any region; optionally simulates failures"""

    provider_type = "mock"

    def __init__(self, data: Optional[str] = None, simulate_failure: bool = False):
        self.mock_data = data if data is not None else json.dumps(DEFAULT_TEST_DATA, indent=2)
        self.simulate_failure = simulate_failure

    @classmethod
    def with_data(cls, data: str) -> "MockProvider":
        return cls(data=data)

    def with_failure(self) -> "MockProvider":
        return MockProvider(data=self.mock_data, simulate_failure=True)

    def fetch_data(self, config: OSMConfig) -> OSMData:
        if self.simulate_failure:
            raise ConnectionFailedError("Simulated network failure")

        bbox = self.resolve_region(config.region)

        metadata = (
            OSMMetadata(source="mock-provider", provider_type=self.provider_type)
            .with_element_count(self._count_elements())
            .with_processing_time(1)
            .with_extra("simulated", "true")
            .with_extra("test_data", "true")
        )

        logger.debug(f"Mock provider returning {len(self.mock_data)} bytes of test data")
        return OSMData(raw_data=self.mock_data, format=OSMDataFormat.JSON, bounding_box=bbox, metadata=metadata)

    def resolve_region(self, region: Region) -> BoundingBox:
        if isinstance(region, BBoxRegion):
            return region.bbox

        if isinstance(region, CenterRadiusRegion):
            delta = region.radius_km / KM_PER_DEGREE
            return BoundingBox(
                south=region.lat - delta,
                west=region.lon - delta,
                north=region.lat + delta,
                east=region.lon + delta,
            )

        if isinstance(region, CityRegion):
            bbox = MOCK_CITIES.get(region.name.lower())
            if bbox is None:
                raise GeographicError(
                    f"Mock provider doesn't know city: '{region.name}'. "
                    f"Try: berlin, munich, hamburg, or test"
                )
            return bbox

        raise ConfigError(f"Unsupported region: {region!r}")

    def test_availability(self) -> None:
        if self.simulate_failure:
            raise GeographicError("Mock failure enabled")
        logger.debug("Mock provider is always available")

    def capabilities(self) -> ProviderCapabilities:
        return ProviderCapabilities(
            supports_real_time=False,
            requires_network=False,
            supports_geocoding=True,
            max_area_km2=None,
            supported_formats=[OSMDataFormat.JSON],
            rate_limit_rpm=None,
            notes="Mock provider for testing",
        )

    def _count_elements(self) -> int:
        try:
            elements = json.loads(self.mock_data).get("elements")
        except (ValueError, AttributeError):
            return 0
        return len(elements) if isinstance(elements, list) else 0
