"""
Tests for building mesh extrusion.
"""

import numpy as np
import pytest

from models.building import Building, points_from_tuples
from geometry.mesh_builder import create_building_mesh, create_robust_building_mesh, extrude_footprint
from geometry.triangulation import triangulate_polygon


class TestExtrusion:
    """Tests for prism extrusion."""

    def test_volume_is_area_times_height(self, l_shape):
        mesh = extrude_footprint(l_shape, triangulate_polygon(l_shape), 6.0)
        assert mesh.is_watertight
        assert mesh.volume == pytest.approx(75.0 * 6.0)

    def test_base_elevation(self, unit_square):
        mesh = extrude_footprint(unit_square, triangulate_polygon(unit_square), 3.0, base_z=10.0)
        assert mesh.bounds[0][2] == pytest.approx(10.0)
        assert mesh.bounds[1][2] == pytest.approx(13.0)


class TestRobustBuildingMesh:
    """Tests for validate -> triangulate -> extrude."""

    def test_building_and_floors(self, ten_meter_square):
        result = create_robust_building_mesh(ten_meter_square, floors=5, floor_height=3.0)
        assert result.is_valid
        assert not result.used_fallback
        assert result.building_mesh.volume == pytest.approx(1500.0)
        assert len(result.floor_meshes) == 5
        assert [m.metadata['name'] for m in result.floor_meshes] == [f"Floor_{n}" for n in range(1, 6)]
        for n, mesh in enumerate(result.floor_meshes, 1):
            assert mesh.volume == pytest.approx(300.0)
            assert mesh.bounds[0][2] == pytest.approx((n - 1) * 3.0)

    def test_clockwise_input(self, l_shape):
        result = create_robust_building_mesh(l_shape[::-1], floors=2, floor_height=3.0)
        assert result.validation.metadata['was_reversed']
        assert result.building_mesh.volume == pytest.approx(75.0 * 6.0)

    def test_invalid_footprint(self):
        result = create_robust_building_mesh(points_from_tuples([(0, 0), (1, 1)]), floors=2, floor_height=3.0)
        assert not result.is_valid
        assert result.building_mesh is None
        assert result.floor_meshes == []
        assert result.validation.errors

    def test_convex_hull_fallback(self):
        # self-intersecting outline whose shoelace area no triangulation reproduces
        bowtie = points_from_tuples([(0, 0), (20, 0), (0, 20), (30, 30)])
        result = create_robust_building_mesh(bowtie, floors=1, floor_height=4.0)
        assert result.is_valid
        assert result.used_fallback
        assert any('convex hull' in w for w in result.validation.warnings)
        assert result.building_mesh.volume == pytest.approx(600.0 * 4.0)

    def test_from_building(self, tower):
        result = create_building_mesh(tower)
        assert result.building_mesh.metadata['name'] == 'Tower'
        assert result.building_mesh.metadata['building_id'] == 'tower'
        np.testing.assert_allclose(result.building_mesh.bounds, [[-5, -5, 0], [5, 5, 15]], atol=1e-9)

    def test_building_base_elevation(self, ten_meter_square):
        raised = Building(id='r', name='Raised', footprint=ten_meter_square, floors=1, base_elevation=5.0)
        assert create_building_mesh(raised).building_mesh.bounds[0][2] == pytest.approx(5.0)
