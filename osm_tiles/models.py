"""
Pydantic models for the serialized tile grid
Defines the JSON schema written by TileGrid.save and read by TileGrid.load
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .errors import ParseError
from .geo import BoundingBox
from .grid.tile_grid import GridMetadata, TileGrid
from .grid.tiles import EMPTY_TILE, Tile, TileKind, TileMetadata, TileType


class BoundingBoxModel(BaseModel):
    south: float
    west: float
    north: float
    east: float

    @classmethod
    def from_bbox(cls, bbox: BoundingBox) -> "BoundingBoxModel":
        return cls(south=bbox.south, west=bbox.west, north=bbox.north, east=bbox.east)

    def to_bbox(self) -> BoundingBox:
        return BoundingBox(south=self.south, west=self.west, north=self.north, east=self.east)


class TileTypeModel(BaseModel):
    kind: TileKind
    name: Optional[str] = None  # Only set for custom types

    @classmethod
    def from_tile_type(cls, tile_type: TileType) -> "TileTypeModel":
        return cls(kind=tile_type.kind, name=tile_type.custom_name)

    def to_tile_type(self) -> TileType:
        return TileType(self.kind, self.name)


class TileMetadataModel(BaseModel):
    osm_ids: List[int] = Field(default_factory=list)
    tags: Dict[str, str] = Field(default_factory=dict)
    confidence: float = 1.0


class TileModel(BaseModel):
    tile_type: TileTypeModel
    metadata: Optional[TileMetadataModel] = None

    @classmethod
    def from_tile(cls, tile: Tile) -> "TileModel":
        metadata = None
        if tile.metadata is not None:
            metadata = TileMetadataModel(
                osm_ids=list(tile.metadata.osm_ids),
                tags=dict(tile.metadata.tags),
                confidence=tile.metadata.confidence,
            )
        return cls(tile_type=TileTypeModel.from_tile_type(tile.tile_type), metadata=metadata)

    def to_tile(self) -> Tile:
        tile_type = self.tile_type.to_tile_type()
        if self.metadata is None:
            if tile_type == TileType.EMPTY:
                return EMPTY_TILE
            return Tile(tile_type)
        metadata = TileMetadata(
            osm_ids=list(self.metadata.osm_ids),
            tags=dict(self.metadata.tags),
            confidence=self.metadata.confidence,
        )
        return Tile.with_metadata(tile_type, metadata)


class GridMetadataModel(BaseModel):
    generated_at: str
    elements_processed: int = 0
    tiles_populated: int = 0
    generation_time_ms: int = 0
    algorithm: str = "default"
    extra: Dict[str, str] = Field(default_factory=dict)


class TileGridModel(BaseModel):
    width: int = Field(ge=1)
    height: int = Field(ge=1)
    bounding_box: BoundingBoxModel
    meters_per_tile: float
    metadata: GridMetadataModel
    tiles: List[List[TileModel]]

    @classmethod
    def from_grid(cls, grid: TileGrid) -> "TileGridModel":
        meta = grid.metadata
        return cls(
            width=grid.width,
            height=grid.height,
            bounding_box=BoundingBoxModel.from_bbox(grid.bounding_box),
            meters_per_tile=grid.meters_per_tile,
            metadata=GridMetadataModel(
                generated_at=meta.generated_at,
                elements_processed=meta.elements_processed,
                tiles_populated=meta.tiles_populated,
                generation_time_ms=meta.generation_time_ms,
                algorithm=meta.algorithm,
                extra=dict(meta.extra),
            ),
            tiles=[[TileModel.from_tile(tile) for tile in row] for row in grid.tiles],
        )

    def to_grid(self) -> TileGrid:
        if len(self.tiles) != self.height or any(len(row) != self.width for row in self.tiles):
            raise ParseError(
                f"Tile rows do not match declared dimensions {self.width}x{self.height}"
            )

        grid = TileGrid(
            self.width,
            self.height,
            self.bounding_box.to_bbox(),
            self.meters_per_tile,
            metadata=GridMetadata(**self.metadata.model_dump()),
        )
        for y, row in enumerate(self.tiles):
            for x, tile in enumerate(row):
                grid.set_tile(x, y, tile.to_tile())
        return grid
