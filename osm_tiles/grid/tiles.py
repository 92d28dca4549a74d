"""
Tile types and tiles

TileType is a closed set of kinds plus one Custom(name) case. Name, color
and priority are total over the kinds; priority alone decides which tile
wins when geometries overlap.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple


class TileKind(str, Enum):
    EMPTY = "empty"
    ROAD = "road"
    BUILDING = "building"
    WATER = "water"
    GREEN_SPACE = "green_space"
    RAILWAY = "railway"
    PARKING = "parking"
    AMENITY = "amenity"
    TOURISM = "tourism"
    INDUSTRIAL = "industrial"
    RESIDENTIAL = "residential"
    COMMERCIAL = "commercial"
    CUSTOM = "custom"


# Higher priority overwrites lower
_PRIORITY: Dict[TileKind, int] = {
    TileKind.EMPTY: 0,
    TileKind.GREEN_SPACE: 1,
    TileKind.WATER: 2,
    TileKind.RESIDENTIAL: 3,
    TileKind.COMMERCIAL: 4,
    TileKind.INDUSTRIAL: 5,
    TileKind.PARKING: 6,
    TileKind.ROAD: 7,
    TileKind.RAILWAY: 8,
    TileKind.BUILDING: 9,
    TileKind.AMENITY: 10,
    TileKind.TOURISM: 11,
    TileKind.CUSTOM: 5,
}

_COLORS: Dict[TileKind, Tuple[int, int, int]] = {
    TileKind.EMPTY: (240, 240, 240),      # Light gray
    TileKind.ROAD: (128, 128, 128),       # Gray
    TileKind.BUILDING: (139, 69, 19),     # Brown
    TileKind.WATER: (30, 144, 255),       # Blue
    TileKind.GREEN_SPACE: (34, 139, 34),  # Green
    TileKind.RAILWAY: (105, 105, 105),    # Dark gray
    TileKind.PARKING: (169, 169, 169),
    TileKind.AMENITY: (255, 165, 0),      # Orange
    TileKind.TOURISM: (255, 20, 147),     # Pink
    TileKind.INDUSTRIAL: (128, 0, 128),   # Purple
    TileKind.RESIDENTIAL: (255, 255, 0),  # Yellow
    TileKind.COMMERCIAL: (255, 0, 0),     # Red
    TileKind.CUSTOM: (200, 200, 200),
}

# Types whose closed geometry gets an interior fill
_FILLABLE = frozenset({
    TileKind.BUILDING,
    TileKind.WATER,
    TileKind.GREEN_SPACE,
    TileKind.PARKING,
    TileKind.RESIDENTIAL,
    TileKind.COMMERCIAL,
    TileKind.INDUSTRIAL,
})


@dataclass(frozen=True)
class TileType:
    """
    Category of a grid tile

    Use the class constants (TileType.ROAD, ...) for the standard kinds and
    TileType.custom(name) for anything else.
    """
    kind: TileKind
    custom_name: Optional[str] = None

    # Standard kinds, assigned below the class body
    EMPTY = None  # type: TileType
    ROAD = None  # type: TileType
    BUILDING = None  # type: TileType
    WATER = None  # type: TileType
    GREEN_SPACE = None  # type: TileType
    RAILWAY = None  # type: TileType
    PARKING = None  # type: TileType
    AMENITY = None  # type: TileType
    TOURISM = None  # type: TileType
    INDUSTRIAL = None  # type: TileType
    RESIDENTIAL = None  # type: TileType
    COMMERCIAL = None  # type: TileType

    def __post_init__(self):
        if self.kind is TileKind.CUSTOM and not self.custom_name:
            raise ValueError("Custom tile type requires a name")
        if self.kind is not TileKind.CUSTOM and self.custom_name is not None:
            raise ValueError(f"Tile type {self.kind.value} does not take a name")

    @classmethod
    def custom(cls, name: str) -> "TileType":
        return cls(TileKind.CUSTOM, name)

    @property
    def name(self) -> str:
        """Human-readable name; the payload for custom types"""
        if self.kind is TileKind.CUSTOM:
            return self.custom_name
        return self.kind.value

    @property
    def is_custom(self) -> bool:
        return self.kind is TileKind.CUSTOM

    def default_color(self) -> Tuple[int, int, int]:
        """Suggested RGB color"""
        return _COLORS[self.kind]

    def priority(self) -> int:
        return _PRIORITY[self.kind]

    def is_navigable(self) -> bool:
        return self.kind in (TileKind.ROAD, TileKind.EMPTY, TileKind.PARKING)

    def is_structure(self) -> bool:
        return self.kind in (TileKind.BUILDING, TileKind.AMENITY, TileKind.TOURISM)

    def is_fillable(self) -> bool:
        return self.kind in _FILLABLE

    def __repr__(self) -> str:
        if self.kind is TileKind.CUSTOM:
            return f"TileType.custom({self.custom_name!r})"
        return f"TileType.{self.kind.name}"


for _kind in TileKind:
    if _kind is not TileKind.CUSTOM:
        setattr(TileType, _kind.name, TileType(_kind))


@dataclass(frozen=True)
class TileMetadata:
    """Provenance of a tile: contributing OSM ids and their tags"""
    osm_ids: List[int] = field(default_factory=list)
    tags: Dict[str, str] = field(default_factory=dict)
    # Always 1.0 for now
    confidence: float = 1.0


@dataclass(frozen=True)
class Tile:
    """A tile type with optional metadata. Immutable, so one instance can fill many cells."""
    tile_type: TileType = TileType.EMPTY
    metadata: Optional[TileMetadata] = None

    @classmethod
    def with_metadata(cls, tile_type: TileType, metadata: TileMetadata) -> "Tile":
        return cls(tile_type=tile_type, metadata=metadata)

    def can_be_overwritten_by(self, other: "Tile") -> bool:
        """True only when other has a strictly higher priority"""
        return other.tile_type.priority() > self.tile_type.priority()

    @property
    def is_empty(self) -> bool:
        return self.tile_type.kind is TileKind.EMPTY


EMPTY_TILE = Tile()
