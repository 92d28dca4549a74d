"""
Grid generation

Rasterizes parsed OSM elements onto a TileGrid:
- points are placed in their containing cell
- lines are drawn between consecutive vertices with Bresenham
- closed shapes of fillable types also get a ray-casting interior fill

Every write goes through set_tile_with_priority, so overlap resolution is
decided by tile priority alone.
"""

import math
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from loguru import logger

from ..config import OSMConfig
from ..geo import BoundingBox
from ..osm.models import OSMElement
from ..osm.parser import OSMParser
from ..providers.base import OSMData
from .tile_grid import TileGrid
from .tiles import Tile, TileType

MIN_GRID_SIZE = 10
DEFAULT_MAX_GRID_SIZE = (5000, 5000)


@dataclass
class GeneratorCapabilities:
    max_grid_size: Optional[Tuple[int, int]] = None
    supported_crs: List[str] = field(default_factory=lambda: ["EPSG:4326"])
    supports_parallel: bool = False
    notes: str = ""


class GridGenerator(ABC):
    """Turns OSM data into a tile grid"""

    @abstractmethod
    def generate_grid(self, osm_data: OSMData, config: OSMConfig) -> TileGrid:
        pass

    @abstractmethod
    def capabilities(self) -> GeneratorCapabilities:
        pass


class DefaultGridGenerator(GridGenerator):
    """Rasterization-based generator using the standard tag classifier"""

    def __init__(self, max_grid_size: Tuple[int, int] = DEFAULT_MAX_GRID_SIZE):
        self.parser = OSMParser()
        self.max_grid_size = max_grid_size

    def generate_grid(self, osm_data: OSMData, config: OSMConfig) -> TileGrid:
        """
        Parse and rasterize a provider response

        Args:
            osm_data: Raw OSM data with its bounding box
            config: Supplies grid_resolution and tile_size

        Returns:
            Populated grid covering osm_data.bounding_box

        Raises:
            ParseError: If the data cannot be parsed. No partial grid is returned.
        """
        logger.info("Generating grid from OSM data")
        elements = self.parser.parse(osm_data)
        return self.generate_from_elements(elements, osm_data.bounding_box, config)

    def generate_from_elements(
        self,
        elements: Sequence[OSMElement],
        bounding_box: BoundingBox,
        config: OSMConfig,
    ) -> TileGrid:
        """Rasterize already-parsed elements over bounding_box"""
        start_time = time.monotonic()

        width, height = self.calculate_grid_dimensions(bounding_box, config.grid_resolution)
        meters_per_tile = self.calculate_meters_per_tile(bounding_box, (width, height), config.tile_size)

        logger.info(
            f"Creating {width}x{height} grid ({width * height} tiles, ~{meters_per_tile:.1f}m per tile)"
        )
        grid = TileGrid(width, height, bounding_box, meters_per_tile)

        tiles_populated = 0
        for element in elements:
            tiles_populated += self.rasterize_element(element, grid)

        generation_time_ms = int((time.monotonic() - start_time) * 1000)

        grid.metadata.elements_processed = len(elements)
        grid.metadata.tiles_populated = tiles_populated
        grid.metadata.generation_time_ms = generation_time_ms
        grid.metadata.algorithm = "default_rasterization"
        grid.metadata.extra.update({
            "grid_width": str(width),
            "grid_height": str(height),
            "meters_per_tile": str(meters_per_tile),
        })

        logger.info(
            f"Grid generation complete: {tiles_populated}/{width * height} tiles populated "
            f"in {generation_time_ms / 1000:.1f}s"
        )
        return grid

    def capabilities(self) -> GeneratorCapabilities:
        return GeneratorCapabilities(
            max_grid_size=self.max_grid_size,
            supported_crs=["EPSG:4326"],
            supports_parallel=False,
            notes="Default rasterization-based grid generator",
        )

    # ------------------------------------------------------------
    # Sizing
    # ------------------------------------------------------------

    def calculate_grid_dimensions(self, bounding_box: BoundingBox, grid_resolution: int) -> Tuple[int, int]:
        """Cells per axis from the degree extent, clamped to [10, max_grid_size]"""
        width = math.ceil(bounding_box.width() * grid_resolution)
        height = math.ceil(bounding_box.height() * grid_resolution)

        width = min(max(width, MIN_GRID_SIZE), self.max_grid_size[0])
        height = min(max(height, MIN_GRID_SIZE), self.max_grid_size[1])

        return width, height

    @staticmethod
    def calculate_meters_per_tile(
        bounding_box: BoundingBox,
        dimensions: Tuple[int, int],
        tile_size: float,
    ) -> float:
        """Average of the measured cell side and the configured tile size"""
        total_tiles = dimensions[0] * dimensions[1]
        m2_per_tile = bounding_box.area_km2() / total_tiles * 1_000_000
        return (math.sqrt(m2_per_tile) + tile_size) / 2

    # ------------------------------------------------------------
    # Rasterization
    # ------------------------------------------------------------

    def rasterize_element(self, element: OSMElement, grid: TileGrid) -> int:
        """
        Write one element onto the grid

        Returns:
            Number of successful (priority-winning) writes
        """
        tile_type = element.to_tile_type()
        if tile_type == TileType.EMPTY or not element.geometry:
            return 0

        tile = Tile.with_metadata(tile_type, element.to_tile_metadata())

        if len(element.geometry) == 1:
            lat, lon = element.geometry[0]
            cell = grid.geo_to_grid(lat, lon)
            if cell is None:
                return 0
            return int(grid.set_tile_with_priority(cell[0], cell[1], tile))

        tiles_updated = 0

        # Outline; a segment is drawn only when both ends fall inside the grid
        for (lat1, lon1), (lat2, lon2) in zip(element.geometry, element.geometry[1:]):
            start = grid.geo_to_grid(lat1, lon1)
            end = grid.geo_to_grid(lat2, lon2)
            if start is not None and end is not None:
                tiles_updated += self.draw_line(start[0], start[1], end[0], end[1], tile, grid)

        if tile_type.is_fillable() and len(element.geometry) >= 3:
            tiles_updated += self.fill_polygon(element.geometry, tile, grid)

        return tiles_updated

    @staticmethod
    def draw_line(x1: int, y1: int, x2: int, y2: int, tile: Tile, grid: TileGrid) -> int:
        """Bresenham line from (x1, y1) to (x2, y2), both ends included"""
        tiles_updated = 0

        dx = abs(x2 - x1)
        dy = abs(y2 - y1)
        sx = 1 if x1 < x2 else -1
        sy = 1 if y1 < y2 else -1
        err = dx - dy
        x, y = x1, y1

        while True:
            if x >= 0 and y >= 0 and grid.set_tile_with_priority(x, y, tile):
                tiles_updated += 1

            if x == x2 and y == y2:
                break

            e2 = 2 * err
            if e2 > -dy:
                err -= dy
                x += sx
            if e2 < dx:
                err += dx
                y += sy

        return tiles_updated

    def fill_polygon(self, polygon: Sequence[Tuple[float, float]], tile: Tile, grid: TileGrid) -> int:
        """Fill cells whose centers fall inside polygon, scanning its grid-space bounding rectangle"""
        cells = [grid.geo_to_grid(lat, lon) for lat, lon in polygon]
        cells = [c for c in cells if c is not None]
        if not cells:
            return 0

        min_x = min(x for x, _ in cells)
        max_x = max(x for x, _ in cells)
        min_y = min(y for _, y in cells)
        max_y = max(y for _, y in cells)

        tiles_updated = 0
        for y in range(min_y, max_y + 1):
            for x in range(min_x, max_x + 1):
                lat, lon = grid.grid_to_geo(x, y)
                if self.point_in_polygon(lat, lon, polygon) and grid.set_tile_with_priority(x, y, tile):
                    tiles_updated += 1

        return tiles_updated

    @staticmethod
    def point_in_polygon(lat: float, lon: float, polygon: Sequence[Tuple[float, float]]) -> bool:
        """Even-odd ray casting test in (lat, lon) space"""
        inside = False
        j = len(polygon) - 1
        for i in range(len(polygon)):
            lat_i, lon_i = polygon[i]
            lat_j, lon_j = polygon[j]
            if (lat_i > lat) != (lat_j > lat) and lon < (lon_j - lon_i) * (lat - lat_i) / (lat_j - lat_i) + lon_i:
                inside = not inside
            j = i
        return inside
