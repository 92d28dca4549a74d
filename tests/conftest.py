"""
Shared fixtures for the osm_tiles test suite
"""

import json

import pytest

from osm_tiles.config import OSMConfig, bbox
from osm_tiles.geo import BoundingBox
from osm_tiles.grid.tile_grid import TileGrid
from osm_tiles.osm.models import OSMElement, OSMElementType
from osm_tiles.providers.base import OSMData, OSMDataFormat


@pytest.fixture
def berlin_bbox():
    """Small box around Alexanderplatz"""
    return BoundingBox(south=52.49, west=13.39, north=52.51, east=13.41)


@pytest.fixture
def unit_bbox():
    return BoundingBox(south=0.0, west=0.0, north=1.0, east=1.0)


@pytest.fixture
def grid_100(berlin_bbox):
    return TileGrid(100, 100, berlin_bbox, 5.0)


@pytest.fixture
def grid_10(unit_bbox):
    return TileGrid(10, 10, unit_bbox, 10.0)


@pytest.fixture
def berlin_config(berlin_bbox):
    return OSMConfig(region=bbox(*berlin_bbox.as_tuple()), grid_resolution=1000)


@pytest.fixture
def road_element():
    return OSMElement(
        id=987654321,
        element_type=OSMElementType.WAY,
        tags={"highway": "residential", "name": "Mock Street"},
        geometry=[(52.499, 13.399), (52.502, 13.402)],
    )


@pytest.fixture
def square_building():
    """Closed square spanning roughly half of berlin_bbox on each axis"""
    return OSMElement(
        id=42,
        element_type=OSMElementType.WAY,
        tags={"building": "yes"},
        geometry=[
            (52.495, 13.395),
            (52.505, 13.395),
            (52.505, 13.405),
            (52.495, 13.405),
            (52.495, 13.395),
        ],
    )


@pytest.fixture
def overpass_payload():
    return {
        "version": 0.6,
        "elements": [
            {
                "type": "node",
                "id": 1,
                "lat": 52.5,
                "lon": 13.4,
                "tags": {"amenity": "cafe", "name": "Cafe", "level": 2},
            },
            {
                "type": "way",
                "id": 2,
                "tags": {"highway": "primary"},
                "geometry": [{"lat": 52.5, "lon": 13.4}, {"lat": 52.501, "lon": 13.401}],
            },
            {"type": "relation", "id": 3, "tags": {"landuse": "forest"}},
            {"type": "area", "id": 4, "tags": {"name": "ignored"}},
            {"type": "way", "id": 5},
        ],
    }


@pytest.fixture
def make_osm_data(berlin_bbox):
    """Factory for OSMData wrapping a payload"""
    def _make(payload, data_format=OSMDataFormat.JSON, bounding_box=None):
        raw = payload if isinstance(payload, str) else json.dumps(payload)
        return OSMData(raw_data=raw, format=data_format, bounding_box=bounding_box or berlin_bbox)
    return _make
