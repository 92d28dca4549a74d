"""
Geographic primitives

BoundingBox plus the great-circle helpers used to size it. Distances use
pyproj's Geod on a sphere with the mean Earth radius, which matches the
haversine formula.
"""

from dataclasses import dataclass
from typing import Tuple

from pyproj import Geod

EARTH_RADIUS_M = 6371008.8

_SPHERE = Geod(a=EARTH_RADIUS_M, b=EARTH_RADIUS_M)


def distance_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points in meters"""
    _, _, dist = _SPHERE.inv(lon1, lat1, lon2, lat2)
    return float(dist)


def destination(lat: float, lon: float, bearing_deg: float, distance: float) -> Tuple[float, float]:
    """
    Move from (lat, lon) along a bearing

    Args:
        lat: Start latitude
        lon: Start longitude
        bearing_deg: Bearing in degrees (0 = north, 90 = east)
        distance: Distance in meters

    Returns:
        (lat, lon) of the destination point
    """
    dest_lon, dest_lat, _ = _SPHERE.fwd(lon, lat, bearing_deg, distance)
    return float(dest_lat), float(dest_lon)


@dataclass(frozen=True)
class BoundingBox:
    """Rectangular region bounded by south/west/north/east degrees"""
    south: float
    west: float
    north: float
    east: float

    @classmethod
    def from_center_radius(cls, lat: float, lon: float, radius_km: float) -> "BoundingBox":
        """Box reaching radius_km from the center along each cardinal bearing"""
        distance = radius_km * 1000.0
        north, _ = destination(lat, lon, 0.0, distance)
        south, _ = destination(lat, lon, 180.0, distance)
        _, east = destination(lat, lon, 90.0, distance)
        _, west = destination(lat, lon, 270.0, distance)
        return cls(south=south, west=west, north=north, east=east)

    def center(self) -> Tuple[float, float]:
        """Center point as (lat, lon)"""
        return (self.south + self.north) / 2.0, (self.west + self.east) / 2.0

    def width(self) -> float:
        """Width in degrees of longitude"""
        return self.east - self.west

    def height(self) -> float:
        """Height in degrees of latitude"""
        return self.north - self.south

    def area_km2(self) -> float:
        """
        Approximate area in square kilometers

        Width is measured between the west and east edge midpoints, height
        between the south and north edge midpoints.
        """
        center_lat, center_lon = self.center()
        width_km = distance_m(center_lat, self.west, center_lat, self.east) / 1000.0
        height_km = distance_m(self.south, center_lon, self.north, center_lon) / 1000.0
        return width_km * height_km

    def contains(self, lat: float, lon: float) -> bool:
        return self.south <= lat <= self.north and self.west <= lon <= self.east

    def expand_by_km(self, distance_km: float) -> "BoundingBox":
        """Move every edge outward by distance_km"""
        center_lat, center_lon = self.center()
        distance = distance_km * 1000.0

        new_north, _ = destination(self.north, center_lon, 0.0, distance)
        new_south, _ = destination(self.south, center_lon, 180.0, distance)
        _, new_east = destination(center_lat, self.east, 90.0, distance)
        _, new_west = destination(center_lat, self.west, 270.0, distance)

        return BoundingBox(south=new_south, west=new_west, north=new_north, east=new_east)

    def to_overpass(self) -> str:
        """Overpass QL bbox filter: south,west,north,east"""
        return f"{self.south},{self.west},{self.north},{self.east}"

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return self.south, self.west, self.north, self.east
