"""
Tests for ear-clipping triangulation and its area oracle.
"""

import math

import mapbox_earcut
import numpy as np
import pytest

from models.building import Point2D, points_from_tuples
from geometry.transforms import polygon_area
from geometry.triangulation import (
    analyze_triangulation_quality,
    calculate_triangle_quality,
    triangulate_polygon,
    triangulate_with_validation,
    validate_triangulation,
)
from utils.errors import TriangulationError


def triangulated_area(points, indices):
    total = 0.0
    for i in range(0, len(indices), 3):
        a, b, c = points[indices[i]], points[indices[i + 1]], points[indices[i + 2]]
        total += 0.5 * abs((b.x - a.x) * (c.y - a.y) - (c.x - a.x) * (b.y - a.y))
    return total


class TestTriangulatePolygon:
    """Tests for triangulate_polygon."""

    def test_square(self, unit_square):
        indices = triangulate_polygon(unit_square)
        assert len(indices) == 6
        assert all(0 <= i < 4 for i in indices)

    def test_concave_area_conserved(self, l_shape):
        indices = triangulate_polygon(l_shape)
        assert len(indices) == 3 * (len(l_shape) - 2)
        assert triangulated_area(l_shape, indices) == pytest.approx(75.0, rel=0.01)

    @pytest.mark.parametrize("sides", [5, 8, 17, 40])
    def test_regular_polygons_conserve_area(self, sides):
        points = [
            Point2D(20 * math.cos(2 * math.pi * k / sides), 20 * math.sin(2 * math.pi * k / sides))
            for k in range(sides)
        ]
        indices = triangulate_polygon(points)
        assert triangulated_area(points, indices) == pytest.approx(polygon_area(points), rel=0.01)

    def test_with_hole(self):
        outer = points_from_tuples([(0, 0), (10, 0), (10, 10), (0, 10)])
        hole = points_from_tuples([(4, 4), (4, 6), (6, 6), (6, 4)])
        indices = triangulate_polygon(outer, holes=[hole])
        combined = outer + hole
        assert max(indices) < len(combined)
        assert triangulated_area(combined, indices) == pytest.approx(96.0, rel=0.01)

    def test_too_few_vertices(self):
        with pytest.raises(TriangulationError) as exc_info:
            triangulate_polygon(points_from_tuples([(0, 0), (1, 1)]))
        assert exc_info.value.cause == TriangulationError.TOO_FEW_VERTICES

    def test_degenerate_produces_no_triangles(self):
        with pytest.raises(TriangulationError) as exc_info:
            triangulate_polygon(points_from_tuples([(0, 0), (5, 0), (10, 0)]))
        assert exc_info.value.cause == TriangulationError.NO_TRIANGLES

    @pytest.mark.parametrize("raw,cause", [
        ([0, 1], TriangulationError.INDEX_COUNT),
        ([0, 1, 7], TriangulationError.INDEX_OUT_OF_RANGE),
    ])
    def test_malformed_engine_output(self, monkeypatch, raw, cause):
        monkeypatch.setattr(
            mapbox_earcut, 'triangulate_float64', lambda vertices, rings: np.array(raw, dtype=np.uint32)
        )
        with pytest.raises(TriangulationError) as exc_info:
            triangulate_polygon(points_from_tuples([(0, 0), (4, 0), (0, 3)]))
        assert exc_info.value.cause == cause

    def test_engine_failure(self, monkeypatch):
        def fail(vertices, rings):
            raise ValueError('bad ring')

        monkeypatch.setattr(mapbox_earcut, 'triangulate_float64', fail)
        with pytest.raises(TriangulationError) as exc_info:
            triangulate_polygon(points_from_tuples([(0, 0), (4, 0), (0, 3)]))
        assert exc_info.value.cause == TriangulationError.ENGINE_FAILURE
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_error_is_value_error(self):
        with pytest.raises(ValueError):
            triangulate_polygon([])


class TestValidateTriangulation:
    """Tests for the area comparison."""

    def test_valid(self, l_shape):
        check = validate_triangulation(l_shape, triangulate_polygon(l_shape))
        assert check.valid
        assert check.relative_error < 0.01
        assert check.message == ''

    def test_missing_triangle_detected(self, unit_square):
        indices = triangulate_polygon(unit_square)[:3]
        check = validate_triangulation(unit_square, indices)
        assert not check.valid
        assert check.relative_error == pytest.approx(0.5)
        assert 'mismatch' in check.message

    def test_with_validation_result(self, l_shape):
        result = triangulate_with_validation(l_shape)
        assert result.valid
        assert result.triangle_count == 4
        assert result.input_area == pytest.approx(75.0)
        assert result.triangulated_area == pytest.approx(75.0)

    def test_without_validation(self, unit_square):
        result = triangulate_with_validation(unit_square, validate=False)
        assert result.valid
        assert result.triangle_count == 2
        assert result.input_area == 0.0


class TestTriangleQuality:
    """Tests for shape quality metrics."""

    def test_equilateral_is_one(self):
        quality = calculate_triangle_quality(Point2D(0, 0), Point2D(1, 0), Point2D(0.5, math.sqrt(3) / 2))
        assert quality == pytest.approx(1.0)

    def test_degenerate_is_zero(self):
        assert calculate_triangle_quality(Point2D(0, 0), Point2D(1, 0), Point2D(2, 0)) == 0.0

    def test_sliver_is_low(self):
        assert calculate_triangle_quality(Point2D(0, 0), Point2D(100, 0), Point2D(50, 0.1)) < 0.01

    def test_analysis(self, unit_square):
        stats = analyze_triangulation_quality(unit_square, triangulate_polygon(unit_square))
        # right isosceles triangles: 4·√3·0.5 / 4
        assert stats['min_quality'] == pytest.approx(math.sqrt(3) / 2)
        assert stats['avg_quality'] == pytest.approx(math.sqrt(3) / 2)
        assert stats['degenerate_count'] == 0
        assert stats['low_quality_count'] == 0

    def test_analysis_empty(self, unit_square):
        assert analyze_triangulation_quality(unit_square, [])['avg_quality'] == 0.0
