"""
Element classification

Maps an OSM tag set to a single tile type. Rules are checked in a fixed
order and the first match wins, so structural tags (building) take
precedence over use tags (landuse) on double-tagged elements.
"""

from typing import Mapping, Union

from ..grid.tiles import TileType
from .models import OSMElement

GREEN_LEISURE = ("park", "garden")

# building=* and landuse=* values with a dedicated tile type
_USE_TYPES = {
    "residential": TileType.RESIDENTIAL,
    "commercial": TileType.COMMERCIAL,
    "retail": TileType.COMMERCIAL,
    "industrial": TileType.INDUSTRIAL,
}


def classify(element: Union[OSMElement, Mapping[str, str]]) -> TileType:
    """
    Classify an element (or a bare tag map)

    Args:
        element: OSMElement or its tags

    Returns:
        TileType.EMPTY when no rule matches
    """
    tags = element.tags if isinstance(element, OSMElement) else element

    # Buildings
    if "building" in tags:
        return _USE_TYPES.get(tags["building"], TileType.BUILDING)

    # Highways and roads
    if "highway" in tags:
        return TileType.ROAD

    # Water features
    if "waterway" in tags or tags.get("natural") == "water":
        return TileType.WATER

    # Green spaces
    if (
        tags.get("leisure") in GREEN_LEISURE
        or tags.get("landuse") == "forest"
        or tags.get("natural") == "wood"
        or tags.get("landuse") == "grass"
    ):
        return TileType.GREEN_SPACE

    if "railway" in tags:
        return TileType.RAILWAY

    if tags.get("amenity") == "parking" or tags.get("landuse") == "parking":
        return TileType.PARKING

    if "amenity" in tags:
        return TileType.AMENITY

    if "tourism" in tags:
        return TileType.TOURISM

    # Land use
    landuse = tags.get("landuse")
    if landuse is not None:
        return _USE_TYPES.get(landuse) or TileType.custom(f"landuse_{landuse}")

    return TileType.EMPTY
