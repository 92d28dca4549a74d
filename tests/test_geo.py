"""
Tests for BoundingBox and great-circle helpers
"""

import dataclasses

import pytest

from osm_tiles.geo import BoundingBox, destination, distance_m


def test_one_degree_of_latitude():
    assert distance_m(0.0, 0.0, 1.0, 0.0) == pytest.approx(111195, rel=1e-3)


def test_destination_north():
    lat, lon = destination(52.5, 13.4, 0.0, 1000.0)
    assert lat > 52.5
    assert lon == pytest.approx(13.4)
    assert distance_m(52.5, 13.4, lat, lon) == pytest.approx(1000.0, rel=1e-6)


def test_derived_values(berlin_bbox):
    assert berlin_bbox.center() == pytest.approx((52.5, 13.4))
    assert berlin_bbox.width() == pytest.approx(0.02)
    assert berlin_bbox.height() == pytest.approx(0.02)
    # ~1.36 km wide x ~2.22 km tall at this latitude
    assert berlin_bbox.area_km2() == pytest.approx(3.01, rel=0.02)


def test_contains_is_inclusive(unit_bbox):
    assert unit_bbox.contains(0.0, 0.0)
    assert unit_bbox.contains(1.0, 1.0)
    assert unit_bbox.contains(0.5, 0.5)
    assert not unit_bbox.contains(1.0000001, 0.5)
    assert not unit_bbox.contains(0.5, -0.0000001)


def test_expand_by_km(berlin_bbox):
    expanded = berlin_bbox.expand_by_km(1.0)
    assert expanded.north > berlin_bbox.north
    assert expanded.south < berlin_bbox.south
    assert expanded.east > berlin_bbox.east
    assert expanded.west < berlin_bbox.west
    assert distance_m(berlin_bbox.north, 13.4, expanded.north, 13.4) == pytest.approx(1000.0, rel=1e-6)


def test_from_center_radius():
    box = BoundingBox.from_center_radius(52.5, 13.4, 2.0)
    assert box.center()[0] == pytest.approx(52.5, abs=1e-6)
    assert distance_m(52.5, 13.4, box.north, 13.4) == pytest.approx(2000.0, rel=1e-6)
    assert box.contains(52.5, 13.4)


def test_to_overpass():
    assert BoundingBox(52.5, 13.4, 52.51, 13.41).to_overpass() == "52.5,13.4,52.51,13.41"


def test_bounding_box_is_immutable(berlin_bbox):
    with pytest.raises(dataclasses.FrozenInstanceError):
        berlin_bbox.north = 60.0
    assert berlin_bbox.north == 52.51
