"""
OSM response parser

Parses raw provider output (Overpass JSON or OSM XML) into OSMElement objects
"""

import json
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger

from ..errors import ParseError
from ..providers.base import OSMData, OSMDataFormat
from .models import OSMElement, OSMElementType

_ELEMENT_TYPES = {t.value: t for t in OSMElementType}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class OSMParser:
    """Parses OSM data into elements"""

    def parse(self, osm_data: OSMData) -> List[OSMElement]:
        """
        Parse raw OSM data according to its format

        Args:
            osm_data: Provider response

        Returns:
            Elements in document order

        Raises:
            ParseError: If the payload or any element in it is malformed
        """
        if osm_data.format == OSMDataFormat.JSON:
            elements = self.parse_json(osm_data.raw_data)
        elif osm_data.format == OSMDataFormat.XML:
            elements = self.parse_xml(osm_data.raw_data)
        else:
            raise ParseError(f"Unsupported data format: {osm_data.format}")

        logger.debug(f"Parsed {len(elements)} OSM elements ({osm_data.format.value})")
        return elements

    # ------------------------------------------------------------
    # JSON (Overpass 'out geom')
    # ------------------------------------------------------------

    def parse_json(self, text: str) -> List[OSMElement]:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ParseError(f"Invalid JSON: {e}") from e

        raw_elements = data.get("elements") if isinstance(data, dict) else None
        if not isinstance(raw_elements, list):
            raise ParseError("No 'elements' array found in JSON")

        elements = []
        for raw in raw_elements:
            element = self._parse_json_element(raw)
            if element is not None:
                elements.append(element)
        return elements

    def _parse_json_element(self, raw: Dict[str, Any]) -> Optional[OSMElement]:
        if not isinstance(raw, dict):
            raise ParseError(f"Element is not an object: {raw!r}")

        element_id = raw.get("id")
        if not isinstance(element_id, int) or isinstance(element_id, bool):
            raise ParseError("Element missing 'id'")

        type_name = raw.get("type")
        if not isinstance(type_name, str):
            raise ParseError("Element missing 'type'")

        element_type = _ELEMENT_TYPES.get(type_name)
        if element_type is None:
            return None  # Skip unknown types

        tags = {}
        raw_tags = raw.get("tags")
        if isinstance(raw_tags, dict):
            tags = {k: v for k, v in raw_tags.items() if isinstance(v, str)}

        if element_type == OSMElementType.NODE:
            lat, lon = raw.get("lat"), raw.get("lon")
            if not _is_number(lat):
                raise ParseError("Node missing 'lat'")
            if not _is_number(lon):
                raise ParseError("Node missing 'lon'")
            geometry = [(float(lat), float(lon))]
        else:
            geometry = self._json_geometry(raw)

        if not geometry and not tags:
            return None

        return OSMElement(id=element_id, element_type=element_type, tags=tags, geometry=geometry)

    @staticmethod
    def _json_geometry(raw: Dict[str, Any]) -> List[Tuple[float, float]]:
        points = raw.get("geometry")
        if isinstance(points, list):
            geometry = []
            for point in points:
                lat = point.get("lat") if isinstance(point, dict) else None
                lon = point.get("lon") if isinstance(point, dict) else None
                if not _is_number(lat):
                    raise ParseError("Geometry point missing 'lat'")
                if not _is_number(lon):
                    raise ParseError("Geometry point missing 'lon'")
                geometry.append((float(lat), float(lon)))
            return geometry

        # Some ways come back with only a center point
        if _is_number(raw.get("lat")) and _is_number(raw.get("lon")):
            return [(float(raw["lat"]), float(raw["lon"]))]

        return []

    # ------------------------------------------------------------
    # XML (OSM / Overpass XML)
    # ------------------------------------------------------------

    def parse_xml(self, text: str) -> List[OSMElement]:
        try:
            root = ET.fromstring(text)
        except ET.ParseError as e:
            raise ParseError(f"Invalid XML: {e}") from e

        # Node coordinates by id, for resolving <nd ref="..."/> without inline coordinates
        node_coords: Dict[int, Tuple[float, float]] = {}
        elements = []

        for elem in root:
            element_type = _ELEMENT_TYPES.get(elem.tag)
            if element_type is None:
                continue  # <bounds>, <meta>, <note> ...

            element_id = self._xml_int(elem.get("id"), "Element missing 'id'")

            tags = {}
            for tag_elem in elem.findall("tag"):
                key = tag_elem.get("k")
                value = tag_elem.get("v")
                if key is not None and value is not None:
                    tags[key] = value

            if element_type == OSMElementType.NODE:
                lat = self._xml_float(elem.get("lat"), "Node missing 'lat'")
                lon = self._xml_float(elem.get("lon"), "Node missing 'lon'")
                node_coords[element_id] = (lat, lon)
                geometry = [(lat, lon)]
            else:
                geometry = self._xml_geometry(elem, node_coords)

            if not geometry and not tags:
                continue

            elements.append(OSMElement(id=element_id, element_type=element_type, tags=tags, geometry=geometry))

        return elements

    def _xml_geometry(
        self,
        elem: ET.Element,
        node_coords: Dict[int, Tuple[float, float]],
    ) -> List[Tuple[float, float]]:
        geometry = []
        for nd in elem.findall("nd"):
            if nd.get("lat") is not None or nd.get("lon") is not None:
                lat = self._xml_float(nd.get("lat"), "Geometry point missing 'lat'")
                lon = self._xml_float(nd.get("lon"), "Geometry point missing 'lon'")
                geometry.append((lat, lon))
                continue

            ref = self._xml_int(nd.get("ref"), "Way node missing 'ref'")
            if ref not in node_coords:
                raise ParseError(f"Way {elem.get('id')} references unknown node {ref}")
            geometry.append(node_coords[ref])

        if geometry:
            return geometry

        # Overpass 'out center' puts the center on a child element
        center = elem.find("center")
        if center is not None:
            return [(
                self._xml_float(center.get("lat"), "Center missing 'lat'"),
                self._xml_float(center.get("lon"), "Center missing 'lon'"),
            )]

        if elem.get("lat") is not None and elem.get("lon") is not None:
            return [(
                self._xml_float(elem.get("lat"), "Element has invalid 'lat'"),
                self._xml_float(elem.get("lon"), "Element has invalid 'lon'"),
            )]

        return []

    @staticmethod
    def _xml_int(value: Optional[str], message: str) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ParseError(message)

    @staticmethod
    def _xml_float(value: Optional[str], message: str) -> float:
        try:
            return float(value)
        except (TypeError, ValueError):
            raise ParseError(message)
