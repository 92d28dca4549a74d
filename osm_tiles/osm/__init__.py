"""
OpenStreetMap element handling

- Models: OSMElement and its element type
- Classifier: Tag set -> TileType
- Parser: Overpass JSON and OSM XML parsing
"""

from .models import OSMElement, OSMElementType
from .classifier import classify
from .parser import OSMParser

__all__ = [
    "OSMElement",
    "OSMElementType",
    "classify",
    "OSMParser",
]
