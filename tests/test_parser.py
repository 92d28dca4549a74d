"""
Tests for Overpass JSON and OSM XML parsing
"""

import pytest

from osm_tiles.errors import ParseError
from osm_tiles.osm.models import OSMElementType
from osm_tiles.osm.parser import OSMParser
from osm_tiles.providers.base import OSMDataFormat


@pytest.fixture
def parser():
    return OSMParser()


class TestJSON:

    def test_parses_supported_elements(self, parser, make_osm_data, overpass_payload):
        elements = parser.parse(make_osm_data(overpass_payload))

        # area is an unknown type, way 5 has neither tags nor geometry
        assert [e.id for e in elements] == [1, 2, 3]

        cafe, road, forest = elements
        assert cafe.element_type == OSMElementType.NODE
        assert cafe.geometry == [(52.5, 13.4)]
        # Non-string tag values are dropped
        assert cafe.tags == {"amenity": "cafe", "name": "Cafe"}

        assert road.element_type == OSMElementType.WAY
        assert road.geometry == [(52.5, 13.4), (52.501, 13.401)]

        assert forest.element_type == OSMElementType.RELATION
        assert forest.geometry == []

    def test_way_falls_back_to_center_point(self, parser, make_osm_data):
        payload = {"elements": [{"type": "way", "id": 9, "lat": 1.5, "lon": 2.5}]}
        elements = parser.parse(make_osm_data(payload))
        assert elements[0].geometry == [(1.5, 2.5)]
        assert elements[0].tags == {}

    def test_invalid_json(self, parser, make_osm_data):
        with pytest.raises(ParseError, match="Invalid JSON"):
            parser.parse(make_osm_data("{not json"))

    def test_missing_elements_array(self, parser, make_osm_data):
        with pytest.raises(ParseError, match="No 'elements' array"):
            parser.parse(make_osm_data({"version": 0.6}))
        with pytest.raises(ParseError, match="No 'elements' array"):
            parser.parse(make_osm_data({"elements": {}}))

    @pytest.mark.parametrize("element, message", [
        ({"type": "node", "lat": 1, "lon": 2}, "missing 'id'"),
        ({"type": "node", "id": "7", "lat": 1, "lon": 2}, "missing 'id'"),
        ({"id": 7, "lat": 1, "lon": 2}, "missing 'type'"),
        ({"type": "node", "id": 7, "lon": 2}, "Node missing 'lat'"),
        ({"type": "node", "id": 7, "lat": 1}, "Node missing 'lon'"),
        ({"type": "way", "id": 7, "geometry": [{"lon": 2}]}, "Geometry point missing 'lat'"),
        ({"type": "way", "id": 7, "geometry": [{"lat": 1}]}, "Geometry point missing 'lon'"),
    ])
    def test_malformed_elements(self, parser, make_osm_data, element, message):
        with pytest.raises(ParseError, match=message):
            parser.parse(make_osm_data({"elements": [element]}))

    def test_empty_elements(self, parser, make_osm_data):
        assert parser.parse(make_osm_data({"elements": []})) == []


OSM_XML = """<?xml version="1.0" encoding="UTF-8"?>
<osm version="0.6" generator="test">
  <bounds minlat="52.49" minlon="13.39" maxlat="52.51" maxlon="13.41"/>
  <node id="1" lat="52.5" lon="13.4">
    <tag k="amenity" v="cafe"/>
  </node>
  <node id="2" lat="52.495" lon="13.395"/>
  <node id="3" lat="52.505" lon="13.405"/>
  <way id="10">
    <nd ref="2"/>
    <nd ref="3"/>
    <tag k="highway" v="primary"/>
  </way>
  <way id="11">
    <nd lat="52.50" lon="13.40"/>
    <nd lat="52.50" lon="13.41"/>
    <nd lat="52.51" lon="13.41"/>
    <nd lat="52.50" lon="13.40"/>
    <tag k="building" v="yes"/>
  </way>
  <relation id="20">
    <member type="way" ref="11" role="outer"/>
    <tag k="landuse" v="forest"/>
  </relation>
  <relation id="21"/>
</osm>
"""


class TestXML:

    def test_parses_nodes_ways_and_relations(self, parser, make_osm_data):
        elements = parser.parse(make_osm_data(OSM_XML, OSMDataFormat.XML))
        by_id = {e.id: e for e in elements}

        # Untagged nodes still carry geometry; the empty relation is skipped
        assert sorted(by_id) == [1, 2, 3, 10, 11, 20]

        assert by_id[1].tags == {"amenity": "cafe"}
        assert by_id[1].geometry == [(52.5, 13.4)]

        # Node references resolve to earlier nodes
        assert by_id[10].geometry == [(52.495, 13.395), (52.505, 13.405)]
        assert by_id[10].element_type == OSMElementType.WAY

        assert len(by_id[11].geometry) == 4
        assert by_id[11].is_closed()

        assert by_id[20].element_type == OSMElementType.RELATION
        assert by_id[20].geometry == []

    def test_malformed_xml(self, parser, make_osm_data):
        with pytest.raises(ParseError, match="Invalid XML"):
            parser.parse(make_osm_data("<osm><node></osm>", OSMDataFormat.XML))

    def test_unknown_node_reference(self, parser, make_osm_data):
        xml = '<osm><way id="1"><nd ref="99"/><tag k="highway" v="path"/></way></osm>'
        with pytest.raises(ParseError, match="unknown node 99"):
            parser.parse(make_osm_data(xml, OSMDataFormat.XML))

    def test_node_without_coordinates(self, parser, make_osm_data):
        with pytest.raises(ParseError, match="Node missing 'lat'"):
            parser.parse(make_osm_data('<osm><node id="1" lon="2"/></osm>', OSMDataFormat.XML))
