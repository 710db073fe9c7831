"""
Tests for coordinate transforms and polygon primitives.
"""

import math

import pytest

from models.building import Point2D, SiteConfig, points_from_tuples
from geometry.transforms import (
    bounding_box,
    has_self_intersection,
    image_to_world,
    is_point_in_polygon,
    polygon_area,
    polygon_centroid,
    segments_intersect,
    signed_polygon_area,
    transform_footprint,
    world_to_image,
    world_to_local,
)


class TestImageToWorld:
    """Tests for the image -> world mapping."""

    def test_image_center_maps_to_origin(self, site_config):
        """The image center becomes the world origin."""
        (p,) = image_to_world([Point2D(500, 400)], site_config)
        assert p.x == pytest.approx(0.0)
        assert p.y == pytest.approx(0.0)

    def test_scale_applied(self, site_config):
        """Pixel offsets are multiplied by the scale."""
        (p,) = image_to_world([Point2D(600, 400)], site_config)
        assert p.x == pytest.approx(50.0)
        assert p.y == pytest.approx(0.0)

    def test_image_down_is_world_south(self, site_config):
        """Image Y grows downwards and world Y grows southwards."""
        (p,) = image_to_world([Point2D(500, 500)], site_config)
        assert p.x == pytest.approx(0.0)
        assert p.y == pytest.approx(50.0)

    def test_north_angle_rotates(self):
        """A quarter turn moves an east offset onto the Y axis."""
        config = SiteConfig(image_width=1000, image_height=800, scale=0.5, north_angle=90)
        (p,) = image_to_world([Point2D(600, 400)], config)
        assert p.x == pytest.approx(0.0, abs=1e-9)
        assert p.y == pytest.approx(50.0)

    @pytest.mark.parametrize("north_angle", [0, 17.5, 45, 90, 133, 180, 270, 359])
    def test_rotation_preserves_area(self, image_rectangle, north_angle):
        """World area equals image area times scale squared for any rotation."""
        config = SiteConfig(image_width=1000, image_height=800, scale=0.25, north_angle=north_angle)
        world = image_to_world(image_rectangle, config)
        expected = polygon_area(image_rectangle) * 0.25 ** 2
        assert polygon_area(world) == pytest.approx(expected, rel=1e-9)

    @pytest.mark.parametrize("north_angle", [0, 30, 200])
    def test_world_to_image_inverts(self, l_shape, north_angle):
        """world_to_image undoes image_to_world."""
        config = SiteConfig(image_width=640, image_height=480, scale=0.3, north_angle=north_angle)
        back = world_to_image(image_to_world(l_shape, config), config)
        for original, restored in zip(l_shape, back):
            assert restored.x == pytest.approx(original.x, abs=1e-9)
            assert restored.y == pytest.approx(original.y, abs=1e-9)

    def test_empty_input(self, site_config):
        assert image_to_world([], site_config) == []


class TestWorldToLocal:
    """Tests for centroid re-centering."""

    def test_centroid_is_vertex_mean(self, l_shape):
        local, centroid = world_to_local(l_shape)
        assert centroid.x == pytest.approx(sum(p.x for p in l_shape) / len(l_shape))
        assert centroid.y == pytest.approx(sum(p.y for p in l_shape) / len(l_shape))

    def test_local_vertices_sum_to_zero(self, l_shape):
        local, _ = world_to_local(l_shape)
        assert sum(p.x for p in local) == pytest.approx(0.0, abs=1e-9)
        assert sum(p.y for p in local) == pytest.approx(0.0, abs=1e-9)

    def test_empty_input(self):
        local, centroid = world_to_local([])
        assert local == []
        assert centroid == Point2D(0.0, 0.0)


class TestTransformFootprint:
    """Tests for the full pipeline."""

    def test_metadata(self, image_rectangle, site_config):
        result = transform_footprint(image_rectangle, site_config)
        assert result.metadata['input_points'] == 4
        assert result.metadata['output_points'] == 4
        assert result.metadata['applied_scale'] == 0.5
        assert result.metadata['applied_rotation'] == 0.0

    def test_world_and_local_consistent(self, image_rectangle, site_config):
        """Local vertices plus the centroid give back the world vertices."""
        result = transform_footprint(image_rectangle, site_config)
        for world, local in zip(result.world_footprint, result.local_footprint):
            assert local.x + result.centroid.x == pytest.approx(world.x)
            assert local.y + result.centroid.y == pytest.approx(world.y)


class TestPolygonPrimitives:
    """Tests for area, bounding box, intersection and containment."""

    def test_signed_area_sign(self, unit_square):
        assert signed_polygon_area(unit_square) == pytest.approx(1.0)
        assert signed_polygon_area(unit_square[::-1]) == pytest.approx(-1.0)

    def test_degenerate_area_is_zero(self):
        assert polygon_area([]) == 0.0
        assert polygon_area(points_from_tuples([(0, 0), (1, 1)])) == 0.0

    def test_concave_area(self, l_shape):
        assert polygon_area(l_shape) == pytest.approx(75.0)

    def test_bounding_box(self, l_shape):
        bbox = bounding_box(l_shape)
        assert (bbox.min_x, bbox.min_y, bbox.max_x, bbox.max_y) == (0, 0, 10, 10)
        assert bbox.width == 10
        assert bbox.height == 10

    def test_bounding_box_empty(self):
        bbox = bounding_box([])
        assert bbox.width == 0 and bbox.height == 0

    def test_segments_intersect(self):
        a, b = Point2D(0, 0), Point2D(2, 2)
        c, d = Point2D(0, 2), Point2D(2, 0)
        assert segments_intersect(a, b, c, d)
        assert not segments_intersect(a, Point2D(1, 0), c, Point2D(1, 2))

    def test_bowtie_self_intersects(self):
        bowtie = points_from_tuples([(0, 0), (1, 1), (1, 0), (0, 1)])
        assert has_self_intersection(bowtie)

    def test_simple_polygons_do_not_self_intersect(self, unit_square, l_shape):
        assert not has_self_intersection(unit_square)
        assert not has_self_intersection(l_shape)

    def test_point_in_polygon(self, l_shape):
        assert is_point_in_polygon(Point2D(2, 2), l_shape)
        assert is_point_in_polygon(Point2D(2, 8), l_shape)
        # inside the notch of the L
        assert not is_point_in_polygon(Point2D(7, 7), l_shape)
        assert not is_point_in_polygon(Point2D(-1, 5), l_shape)

    def test_point_in_degenerate_polygon(self):
        assert not is_point_in_polygon(Point2D(0, 0), points_from_tuples([(0, 0), (1, 1)]))

    def test_centroid(self, unit_square):
        assert polygon_centroid(unit_square) == Point2D(0.5, 0.5)
        assert polygon_centroid([]) == Point2D(0.0, 0.0)
