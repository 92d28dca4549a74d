"""
File provider

Loads OSM data (Overpass JSON or OSM XML) from a local file
"""

import json
import os
import xml.etree.ElementTree as ET
from typing import Optional

from loguru import logger

from ..config import BBoxRegion, OSMConfig, Region
from ..errors import ConfigError
from ..geo import BoundingBox
from .base import OSMData, OSMDataFormat, OSMDataProvider, OSMMetadata, ProviderCapabilities

# Used when nothing in the file or the caller pins the extent down
DEFAULT_BBOX = BoundingBox(0.0, 0.0, 1.0, 1.0)

XML_EXTENSIONS = (".xml", ".osm")


class FileProvider(OSMDataProvider):
    """Reads a single OSM export from disk"""

    provider_type = "file"

    def __init__(self, file_path: str, bbox: Optional[BoundingBox] = None):
        self.file_path = str(file_path)
        self.known_bbox = bbox

    def with_bbox(self, bbox: BoundingBox) -> "FileProvider":
        return FileProvider(self.file_path, bbox)

    def detect_format(self) -> OSMDataFormat:
        """Format by extension; anything that is not .xml/.osm is treated as JSON"""
        _, ext = os.path.splitext(self.file_path)
        if ext.lower() in XML_EXTENSIONS:
            return OSMDataFormat.XML
        return OSMDataFormat.JSON

    def fetch_data(self, config: OSMConfig) -> OSMData:
        try:
            with open(self.file_path, "r", encoding="utf-8") as f:
                data = f.read()
        except OSError as e:
            raise ConfigError(f"Failed to read file '{self.file_path}': {e}") from e

        data_format = self.detect_format()

        bbox = self.known_bbox
        if bbox is None:
            if data_format == OSMDataFormat.JSON:
                bbox = self.extract_bbox_from_json(data)
            else:
                bbox = self.extract_bbox_from_xml(data)
        if bbox is None:
            logger.warning(f"Could not determine bounding box of {self.file_path}, using {DEFAULT_BBOX.as_tuple()}")
            bbox = DEFAULT_BBOX

        metadata = (
            OSMMetadata(source=self.file_path, provider_type=self.provider_type)
            .with_extra("file_size", str(len(data)))
            .with_extra("format", data_format.value)
        )

        logger.info(f"Loaded {len(data) / 1024:.2f} KB of {data_format.value.upper()} from {self.file_path}")
        return OSMData(raw_data=data, format=data_format, bounding_box=bbox, metadata=metadata)

    @staticmethod
    def extract_bbox_from_json(data: str) -> Optional[BoundingBox]:
        """Extent of all way/relation geometry points in an Overpass JSON document"""
        try:
            elements = json.loads(data).get("elements")
        except (ValueError, AttributeError):
            return None
        if not isinstance(elements, list):
            return None

        lats, lons = [], []
        for element in elements:
            geometry = element.get("geometry") if isinstance(element, dict) else None
            if not isinstance(geometry, list):
                continue
            for point in geometry:
                if not isinstance(point, dict):
                    continue
                lat, lon = point.get("lat"), point.get("lon")
                if isinstance(lat, (int, float)) and isinstance(lon, (int, float)):
                    lats.append(lat)
                    lons.append(lon)

        if not lats:
            return None
        return BoundingBox(south=min(lats), west=min(lons), north=max(lats), east=max(lons))

    @staticmethod
    def extract_bbox_from_xml(data: str) -> Optional[BoundingBox]:
        """Extent from the <bounds> element of an OSM XML document"""
        try:
            root = ET.fromstring(data)
        except ET.ParseError:
            return None

        bounds = root.find("bounds")
        if bounds is None:
            return None
        try:
            return BoundingBox(
                south=float(bounds.get("minlat")),
                west=float(bounds.get("minlon")),
                north=float(bounds.get("maxlat")),
                east=float(bounds.get("maxlon")),
            )
        except (TypeError, ValueError):
            return None

    def resolve_region(self, region: Region) -> BoundingBox:
        # Cities and center+radius cannot be resolved offline
        if isinstance(region, BBoxRegion):
            return region.bbox
        return self.known_bbox or DEFAULT_BBOX

    def test_availability(self) -> None:
        if not os.path.exists(self.file_path):
            raise ConfigError(f"File not found: {self.file_path}")

    def capabilities(self) -> ProviderCapabilities:
        return ProviderCapabilities(
            supports_real_time=False,
            requires_network=False,
            supports_geocoding=False,
            max_area_km2=None,
            supported_formats=[OSMDataFormat.JSON, OSMDataFormat.XML],
            rate_limit_rpm=None,
            notes="Local file-based OSM data",
        )
