"""
Provider interface

Common types for anything that can turn an OSMConfig into raw OSM data
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from ..config import OSMConfig, Region
from ..geo import BoundingBox


class OSMDataFormat(str, Enum):
    JSON = "json"
    XML = "xml"


@dataclass
class OSMMetadata:
    """How and when a dataset was fetched"""
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    source: str = "unknown"
    provider_type: str = "unknown"
    element_count: Optional[int] = None
    processing_time_ms: Optional[int] = None
    extra: Dict[str, str] = field(default_factory=dict)

    def with_source(self, source: str) -> "OSMMetadata":
        return replace(self, source=source)

    def with_element_count(self, count: int) -> "OSMMetadata":
        return replace(self, element_count=count)

    def with_processing_time(self, ms: int) -> "OSMMetadata":
        return replace(self, processing_time_ms=ms)

    def with_extra(self, key: str, value: str) -> "OSMMetadata":
        return replace(self, extra={**self.extra, key: value})


@dataclass
class OSMData:
    """Raw OSM response plus where it came from"""
    raw_data: str
    format: OSMDataFormat
    bounding_box: BoundingBox
    metadata: OSMMetadata = field(default_factory=OSMMetadata)

    def size_bytes(self) -> int:
        return len(self.raw_data.encode("utf-8"))


@dataclass
class ProviderCapabilities:
    supports_real_time: bool = False
    requires_network: bool = False
    supports_geocoding: bool = False
    # Recommended maximum bounding box area
    max_area_km2: Optional[float] = None
    supported_formats: List[OSMDataFormat] = field(default_factory=lambda: [OSMDataFormat.JSON])
    rate_limit_rpm: Optional[int] = None
    notes: Optional[str] = None


class OSMDataProvider(ABC):
    """Source of raw OSM data"""

    provider_type: str = "unknown"

    @abstractmethod
    def fetch_data(self, config: OSMConfig) -> OSMData:
        """Fetch raw data for config.region and config.features"""

    @abstractmethod
    def resolve_region(self, region: Region) -> BoundingBox:
        """Turn any region description into a bounding box"""

    @abstractmethod
    def test_availability(self) -> None:
        """Return quietly if the provider can serve requests, raise otherwise"""

    @abstractmethod
    def capabilities(self) -> ProviderCapabilities:
        pass
