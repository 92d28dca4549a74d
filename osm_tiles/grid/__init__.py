"""
Tile grid module

Modular grid components:
- Tiles: TileType, TileMetadata, Tile and their priorities and colors
- TileGrid: Grid storage, coordinate mapping, statistics, serialization
- Generator: Rasterization of OSM elements onto a grid
"""

from .tiles import EMPTY_TILE, Tile, TileKind, TileMetadata, TileType
from .tile_grid import GridMetadata, GridStatistics, TileGrid
from .generator import DefaultGridGenerator, GeneratorCapabilities, GridGenerator

__all__ = [
    "EMPTY_TILE",
    "Tile",
    "TileKind",
    "TileMetadata",
    "TileType",
    "GridMetadata",
    "GridStatistics",
    "TileGrid",
    "DefaultGridGenerator",
    "GeneratorCapabilities",
    "GridGenerator",
]
