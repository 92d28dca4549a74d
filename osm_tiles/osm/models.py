"""
OSM data models

Parsed OSM elements as consumed by the grid generator
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from ..grid.tiles import TileMetadata, TileType


class OSMElementType(str, Enum):
    NODE = "node"
    WAY = "way"
    RELATION = "relation"


@dataclass
class OSMElement:
    """
    A single OSM feature with tags and geometry

    Geometry is a list of (lat, lon) pairs: one point for nodes, two or more
    for lines, and a polygon is a line whose first and last points coincide.
    """
    id: int
    element_type: OSMElementType
    tags: Dict[str, str] = field(default_factory=dict)
    geometry: List[Tuple[float, float]] = field(default_factory=list)

    def to_tile_type(self) -> TileType:
        """Tile type for this element based on its tags"""
        from .classifier import classify

        return classify(self.tags)

    def to_tile_metadata(self) -> TileMetadata:
        return TileMetadata(osm_ids=[self.id], tags=dict(self.tags), confidence=1.0)

    def is_closed(self) -> bool:
        return len(self.geometry) >= 3 and self.geometry[0] == self.geometry[-1]

    def center_point(self) -> Optional[Tuple[float, float]]:
        """Mean of the geometry points as (lat, lon)"""
        if not self.geometry:
            return None

        count = len(self.geometry)
        lat_sum = sum(lat for lat, _ in self.geometry)
        lon_sum = sum(lon for _, lon in self.geometry)
        return lat_sum / count, lon_sum / count

    def bounding_box(self) -> Optional[Tuple[float, float, float, float]]:
        """Geometry extent as (min_lat, min_lon, max_lat, max_lon)"""
        if not self.geometry:
            return None

        lats = [lat for lat, _ in self.geometry]
        lons = [lon for _, lon in self.geometry]
        return min(lats), min(lons), max(lats), max(lons)
