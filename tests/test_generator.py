"""
Tests for grid sizing and rasterization
"""

import math

import pytest

from osm_tiles.config import OSMConfig
from osm_tiles.errors import ParseError
from osm_tiles.geo import BoundingBox
from osm_tiles.grid.generator import DefaultGridGenerator, GridGenerator
from osm_tiles.grid.tile_grid import TileGrid
from osm_tiles.grid.tiles import Tile, TileType
from osm_tiles.osm.models import OSMElement, OSMElementType
from osm_tiles.providers.mock import MockProvider


@pytest.fixture
def generator():
    return DefaultGridGenerator()


def _cells_of(grid, tile_type):
    return {(x, y) for x, y, _ in grid.tiles_of_type(tile_type)}


class TestSizing:

    def test_dimensions_follow_resolution(self, generator, unit_bbox):
        assert generator.calculate_grid_dimensions(unit_bbox, 100) == (100, 100)
        assert generator.calculate_grid_dimensions(BoundingBox(0.0, 0.0, 0.5, 0.25), 100) == (25, 50)

    def test_dimensions_are_clamped(self, generator, unit_bbox):
        assert generator.calculate_grid_dimensions(BoundingBox(0.0, 0.0, 0.001, 0.001), 100) == (10, 10)
        assert generator.calculate_grid_dimensions(unit_bbox, 10000) == (5000, 5000)
        assert DefaultGridGenerator(max_grid_size=(50, 60)).calculate_grid_dimensions(unit_bbox, 100) == (50, 60)

    def test_meters_per_tile_blends_measured_and_configured(self, generator, unit_bbox):
        measured = math.sqrt(unit_bbox.area_km2() / 10000 * 1_000_000)
        assert generator.calculate_meters_per_tile(unit_bbox, (100, 100), 10.0) == pytest.approx((measured + 10.0) / 2)

    def test_capabilities(self, generator):
        caps = generator.capabilities()
        assert isinstance(generator, GridGenerator)
        assert caps.max_grid_size == (5000, 5000)
        assert caps.supported_crs == ["EPSG:4326"]
        assert caps.supports_parallel is False
        assert caps.notes == "Default rasterization-based grid generator"


class TestPrimitives:

    def test_bresenham_line(self, grid_10):
        tile = Tile(TileType.ROAD)
        written = DefaultGridGenerator.draw_line(0, 0, 3, 1, tile, grid_10)
        assert written == 4
        assert _cells_of(grid_10, TileType.ROAD) == {(0, 0), (1, 0), (2, 1), (3, 1)}

    def test_bresenham_single_cell_and_reverse(self, grid_10):
        tile = Tile(TileType.ROAD)
        assert DefaultGridGenerator.draw_line(5, 5, 5, 5, tile, grid_10) == 1
        DefaultGridGenerator.draw_line(9, 9, 6, 6, tile, grid_10)
        assert {(6, 6), (7, 7), (8, 8), (9, 9)} <= _cells_of(grid_10, TileType.ROAD)

    def test_point_in_polygon(self):
        square = [(0.0, 0.0), (0.0, 1.0), (1.0, 1.0), (1.0, 0.0), (0.0, 0.0)]
        assert DefaultGridGenerator.point_in_polygon(0.5, 0.5, square)
        assert not DefaultGridGenerator.point_in_polygon(1.5, 0.5, square)
        assert not DefaultGridGenerator.point_in_polygon(0.5, -0.5, square)
        assert not DefaultGridGenerator.point_in_polygon(0.5, 0.5, [])


class TestRasterization:

    def test_line_is_contiguous(self, generator, grid_100, road_element):
        written = generator.rasterize_element(road_element, grid_100)

        x1, y1 = grid_100.geo_to_grid(52.499, 13.399)
        x2, y2 = grid_100.geo_to_grid(52.502, 13.402)
        cells = _cells_of(grid_100, TileType.ROAD)

        assert (x1, y1) in cells
        assert (x2, y2) in cells
        assert written == len(cells) == max(abs(x2 - x1), abs(y2 - y1)) + 1
        # One cell per step along the major axis: no gaps
        for x in range(min(x1, x2), max(x1, x2) + 1):
            assert any(cx == x for cx, _ in cells)
        # All cells form one 8-connected run from start to end
        reached = {(x1, y1)}
        frontier = [(x1, y1)]
        while frontier:
            cx, cy = frontier.pop()
            for nx in (cx - 1, cx, cx + 1):
                for ny in (cy - 1, cy, cy + 1):
                    if (nx, ny) in cells and (nx, ny) not in reached:
                        reached.add((nx, ny))
                        frontier.append((nx, ny))
        assert reached == cells

    def test_polygon_outline_and_interior(self, generator, grid_100, square_building):
        written = generator.rasterize_element(square_building, grid_100)
        cells = _cells_of(grid_100, TileType.BUILDING)

        corners = [grid_100.geo_to_grid(lat, lon) for lat, lon in square_building.geometry]
        for corner in corners:
            assert corner in cells

        center = grid_100.geo_to_grid(52.5, 13.4)
        assert center in cells
        assert written == len(cells)

        xs = [x for x, _ in corners]
        ys = [y for _, y in corners]
        outline_only = 2 * (max(xs) - min(xs)) + 2 * (max(ys) - min(ys))
        assert len(cells) > outline_only

        # Nothing outside the square
        assert grid_100.get_tile(0, 0).is_empty
        assert all(min(xs) <= x <= max(xs) and min(ys) <= y <= max(ys) for x, y in cells)

    def test_roads_are_not_filled(self, generator, grid_100, square_building):
        ring_road = OSMElement(
            id=1,
            element_type=OSMElementType.WAY,
            tags={"highway": "residential"},
            geometry=square_building.geometry,
        )
        generator.rasterize_element(ring_road, grid_100)
        assert grid_100.get_tile(*grid_100.geo_to_grid(52.5, 13.4)).is_empty

    def test_point_element(self, generator, grid_100):
        cafe = OSMElement(id=4001, element_type=OSMElementType.NODE, tags={"amenity": "cafe"}, geometry=[(52.5015, 13.4015)])
        assert generator.rasterize_element(cafe, grid_100) == 1

        tile = grid_100.get_tile(*grid_100.geo_to_grid(52.5015, 13.4015))
        assert tile.tile_type == TileType.AMENITY
        assert tile.metadata.osm_ids == [4001]
        assert tile.metadata.tags == {"amenity": "cafe"}

    def test_points_outside_grid_are_ignored(self, generator, grid_100):
        far_away = OSMElement(id=1, element_type=OSMElementType.NODE, tags={"amenity": "bar"}, geometry=[(48.1, 11.5)])
        assert generator.rasterize_element(far_away, grid_100) == 0

        # Second vertex is outside: the only segment is skipped
        half_out = OSMElement(
            id=2,
            element_type=OSMElementType.WAY,
            tags={"highway": "primary"},
            geometry=[(52.5, 13.4), (53.5, 13.4)],
        )
        assert generator.rasterize_element(half_out, grid_100) == 0

    def test_empty_element_contributes_nothing(self, generator, berlin_bbox, road_element):
        config = OSMConfig(grid_resolution=1000)
        untagged = OSMElement(
            id=5,
            element_type=OSMElementType.WAY,
            tags={"name": "Nothing special"},
            geometry=[(52.495, 13.395), (52.505, 13.405)],
        )
        no_geometry = OSMElement(id=6, element_type=OSMElementType.RELATION, tags={"building": "yes"})

        baseline = generator.generate_from_elements([road_element], berlin_bbox, config)
        with_extra = generator.generate_from_elements([road_element, untagged, no_geometry], berlin_bbox, config)

        assert with_extra.metadata.tiles_populated == baseline.metadata.tiles_populated
        assert with_extra.metadata.elements_processed == 3
        assert with_extra.tiles == baseline.tiles

    def test_higher_priority_wins_regardless_of_order(self, generator, grid_100, square_building, road_element):
        other = TileGrid(100, 100, grid_100.bounding_box, 5.0)
        generator.rasterize_element(square_building, grid_100)
        generator.rasterize_element(road_element, grid_100)
        generator.rasterize_element(road_element, other)
        generator.rasterize_element(square_building, other)

        assert grid_100.tiles == other.tiles
        # The road lies inside the building, whose fill outranks it
        assert not _cells_of(grid_100, TileType.ROAD)


class TestGenerateGrid:

    def test_generate_from_mock_payload(self, generator, berlin_config):
        osm_data = MockProvider().fetch_data(berlin_config)
        grid = generator.generate_grid(osm_data, berlin_config)

        width, height = grid.dimensions()
        assert grid.metadata.algorithm == "default_rasterization"
        assert grid.metadata.elements_processed == 4
        assert grid.metadata.tiles_populated > 0
        assert grid.metadata.extra["grid_width"] == str(width)
        assert grid.metadata.extra["grid_height"] == str(height)
        assert float(grid.metadata.extra["meters_per_tile"]) == pytest.approx(grid.meters_per_tile)

        counts = grid.count_tiles_by_type()
        assert sum(counts.values()) == width * height
        assert counts.get(TileType.AMENITY) == 1
        assert counts.get(TileType.ROAD, 0) > 0
        assert counts.get(TileType.GREEN_SPACE, 0) > 0

    def test_parse_errors_abort_generation(self, generator, make_osm_data):
        with pytest.raises(ParseError):
            generator.generate_grid(make_osm_data("not json"), OSMConfig())
