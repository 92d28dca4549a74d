"""
OSM Tiles

Turns OpenStreetMap data for a region into a uniform 2D grid of typed tiles:
- Providers: Fetch raw OSM data (Overpass API, mock data, local files)
- OSM: Parse elements and classify them by their tags
- Grid: Rasterize elements onto a TileGrid with priority-based overwrites
- Export: JSON serialization and PNG rendering
"""

__version__ = "0.1.0"

from .config import OSMConfig, FeatureSet, OSMFeature, bbox, center_radius, city
from .errors import OSMTilesError
from .geo import BoundingBox
from .grid import DefaultGridGenerator, Tile, TileGrid, TileMetadata, TileType
from .osm import OSMElement, OSMParser, classify
from .pipeline import GenerationResult, TileGridPipeline
from .providers import create_provider

__all__ = [
    "OSMConfig",
    "FeatureSet",
    "OSMFeature",
    "bbox",
    "center_radius",
    "city",
    "OSMTilesError",
    "BoundingBox",
    "DefaultGridGenerator",
    "Tile",
    "TileGrid",
    "TileMetadata",
    "TileType",
    "OSMElement",
    "OSMParser",
    "classify",
    "GenerationResult",
    "TileGridPipeline",
    "create_provider",
]
