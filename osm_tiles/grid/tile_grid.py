"""
Tile grid storage

A dense row-major grid of tiles covering a bounding box, with
bounds-checked access, priority-gated writes, geo <-> grid conversion,
statistics and JSON serialization.
"""

import json
import math
import os
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional, Tuple

from loguru import logger

from ..errors import GridBoundsError, GridGenerationError
from ..geo import BoundingBox
from .tiles import EMPTY_TILE, Tile, TileType


@dataclass
class GridMetadata:
    """Metadata about grid generation"""
    generated_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    elements_processed: int = 0
    tiles_populated: int = 0
    generation_time_ms: int = 0
    algorithm: str = "default"
    extra: Dict[str, str] = field(default_factory=dict)


def _count_key(tile_type: TileType) -> str:
    # Custom names may collide with standard kinds
    if tile_type.is_custom:
        return f"custom:{tile_type.name}"
    return tile_type.name


@dataclass
class GridStatistics:
    """Aggregate statistics about a tile grid"""
    total_tiles: int
    non_empty_tiles: int
    tile_type_counts: Dict[TileType, int]
    coverage_ratio: float
    dimensions: Tuple[int, int]
    area_km2: float
    meters_per_tile: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_tiles": self.total_tiles,
            "non_empty_tiles": self.non_empty_tiles,
            "tile_type_counts": {_count_key(t): n for t, n in self.tile_type_counts.items()},
            "coverage_ratio": self.coverage_ratio,
            "dimensions": list(self.dimensions),
            "area_km2": self.area_km2,
            "meters_per_tile": self.meters_per_tile,
        }


class TileGrid:
    """
    Grid of tiles representing a geographic area

    Row 0 is the northern edge, column 0 the western edge. Dimensions are
    fixed at construction. Not safe for concurrent mutation.
    """

    def __init__(
        self,
        width: int,
        height: int,
        bounding_box: BoundingBox,
        meters_per_tile: float,
        metadata: Optional[GridMetadata] = None,
    ):
        if width < 1 or height < 1:
            raise GridGenerationError(f"Grid dimensions must be at least 1x1, got {width}x{height}")
        self._width = width
        self._height = height
        self._tiles: List[List[Tile]] = [[EMPTY_TILE] * width for _ in range(height)]
        self.bounding_box = bounding_box
        self.meters_per_tile = meters_per_tile
        self.metadata = metadata or GridMetadata()

    # ------------------------------------------------------------
    # Dimensions
    # ------------------------------------------------------------

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def dimensions(self) -> Tuple[int, int]:
        """Grid dimensions as (width, height)"""
        return self._width, self._height

    def tile_count(self) -> int:
        return self._width * self._height

    def rows(self) -> int:
        return self._height

    def cols(self) -> int:
        return self._width

    @property
    def tiles(self) -> List[List[Tile]]:
        """Raw rows, tiles[y][x]"""
        return self._tiles

    def _in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self._width and 0 <= y < self._height

    # ------------------------------------------------------------
    # Access
    # ------------------------------------------------------------

    def get_tile(self, x: int, y: int) -> Optional[Tile]:
        if not self._in_bounds(x, y):
            return None
        return self._tiles[y][x]

    def set_tile(self, x: int, y: int, tile: Tile) -> None:
        """Unconditionally replace a tile. Raises GridBoundsError outside the grid."""
        if not self._in_bounds(x, y):
            raise GridBoundsError(x, y, self._width, self._height)
        self._tiles[y][x] = tile

    def set_tile_with_priority(self, x: int, y: int, tile: Tile) -> bool:
        """
        Write tile only if it outranks the current one

        Args:
            x: Column
            y: Row
            tile: Tile to write

        Returns:
            True if the tile was written

        Raises:
            GridBoundsError: If (x, y) is outside the grid
        """
        if not self._in_bounds(x, y):
            raise GridBoundsError(x, y, self._width, self._height)

        if self._tiles[y][x].can_be_overwritten_by(tile):
            self._tiles[y][x] = tile
            return True
        return False

    # ------------------------------------------------------------
    # Coordinate conversion
    # ------------------------------------------------------------

    def geo_to_grid(self, lat: float, lon: float) -> Optional[Tuple[int, int]]:
        """Cell containing (lat, lon), or None outside the bounding box"""
        bbox = self.bounding_box
        if not bbox.contains(lat, lon):
            return None

        width_deg = bbox.width()
        height_deg = bbox.height()

        x_ratio = (lon - bbox.west) / width_deg if width_deg else 0.0
        y_ratio = (bbox.north - lat) / height_deg if height_deg else 0.0  # Flip Y axis

        x = math.floor(x_ratio * self._width)
        y = math.floor(y_ratio * self._height)

        # Clamp to grid bounds
        x = min(max(x, 0), self._width - 1)
        y = min(max(y, 0), self._height - 1)

        return x, y

    def grid_to_geo(self, x: int, y: int) -> Optional[Tuple[float, float]]:
        """(lat, lon) of the center of cell (x, y), or None outside the grid"""
        if not self._in_bounds(x, y):
            return None

        bbox = self.bounding_box
        x_ratio = (x + 0.5) / self._width
        y_ratio = (y + 0.5) / self._height

        lon = bbox.west + x_ratio * bbox.width()
        lat = bbox.north - y_ratio * bbox.height()  # Flip Y axis

        return lat, lon

    # ------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------

    def iter_tiles(self) -> Iterator[Tuple[int, int, Tile]]:
        """Yield (x, y, tile) in row-major order"""
        for y, row in enumerate(self._tiles):
            for x, tile in enumerate(row):
                yield x, y, tile

    def tiles_of_type(self, tile_type: TileType) -> List[Tuple[int, int, Tile]]:
        return [(x, y, tile) for x, y, tile in self.iter_tiles() if tile.tile_type == tile_type]

    def count_tiles_by_type(self) -> Dict[TileType, int]:
        counts = Counter()
        for row in self._tiles:
            counts.update(tile.tile_type for tile in row)
        return dict(counts)

    def statistics(self) -> GridStatistics:
        counts = self.count_tiles_by_type()
        total_tiles = self.tile_count()
        non_empty_tiles = total_tiles - counts.get(TileType.EMPTY, 0)

        return GridStatistics(
            total_tiles=total_tiles,
            non_empty_tiles=non_empty_tiles,
            tile_type_counts=counts,
            coverage_ratio=non_empty_tiles / total_tiles if total_tiles else 0.0,
            dimensions=self.dimensions(),
            area_km2=self.bounding_box.area_km2(),
            meters_per_tile=self.meters_per_tile,
        )

    def get_area(
        self,
        x_start: int,
        y_start: int,
        width: int,
        height: int,
    ) -> Optional[List[List[Tile]]]:
        """Rectangle of tiles, or None unless it lies fully inside the grid"""
        if x_start < 0 or y_start < 0 or width < 0 or height < 0:
            return None
        if x_start + width > self._width or y_start + height > self._height:
            return None

        return [row[x_start:x_start + width] for row in self._tiles[y_start:y_start + height]]

    # ------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        from ..models import TileGridModel

        return TileGridModel.from_grid(self).model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TileGrid":
        from ..models import TileGridModel

        return TileGridModel.model_validate(data).to_grid()

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_json(cls, text: str) -> "TileGrid":
        from ..models import TileGridModel

        return TileGridModel.model_validate_json(text).to_grid()

    def save(self, path: str) -> str:
        """Save grid as JSON"""
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, ensure_ascii=False)
        logger.info(f"Saved {self._width}x{self._height} grid to {path}")
        return path

    @classmethod
    def load(cls, path: str) -> "TileGrid":
        with open(path, "r", encoding="utf-8") as f:
            grid = cls.from_dict(json.load(f))
        logger.info(f"Loaded {grid.width}x{grid.height} grid from {path}")
        return grid

    def __repr__(self) -> str:
        return (
            f"TileGrid({self._width}x{self._height}, bbox={self.bounding_box.as_tuple()}, "
            f"meters_per_tile={self.meters_per_tile:.2f})"
        )
