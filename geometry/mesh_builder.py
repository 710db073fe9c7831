"""
Building mesh construction.

Extrudes validated, triangulated footprints into closed trimesh meshes,
one per floor plus one for the whole building. Z is up; footprint X/Y
are taken as given (world or building-local meters).
"""

import logging
from typing import List, Optional, Sequence
from dataclasses import dataclass, field

import numpy as np
import trimesh
from shapely.geometry import Polygon

from models.building import Building, Point2D
from geometry.validation import PolygonNormalizationResult, validate_and_normalize_polygon
from geometry.triangulation import TriangulationResult, triangulate_with_validation
from utils.errors import TriangulationError

logger = logging.getLogger(__name__)


@dataclass
class BuildingMeshResult:
    """Meshes for one building plus the checks that produced them."""

    building_mesh: Optional[trimesh.Trimesh]
    floor_meshes: List[trimesh.Trimesh] = field(default_factory=list)
    validation: Optional[PolygonNormalizationResult] = None
    triangulation: Optional[TriangulationResult] = None
    used_fallback: bool = False

    @property
    def is_valid(self) -> bool:
        return self.building_mesh is not None


def extrude_footprint(
    footprint: Sequence[Point2D],
    indices: Sequence[int],
    height: float,
    base_z: float = 0.0
) -> trimesh.Trimesh:
    """
    Extrude a triangulated footprint into a closed prism.

    Args:
        footprint: Polygon vertices in meters
        indices: Triangle indices into footprint (groups of 3)
        height: Extrusion height in meters
        base_z: Elevation of the bottom face

    Returns:
        Watertight trimesh.Trimesh
    """
    vertices = np.array([p.as_tuple() for p in footprint], dtype=np.float64)
    faces = np.array(indices, dtype=np.int64).reshape(-1, 3)

    mesh = trimesh.creation.extrude_triangulation(vertices=vertices, faces=faces, height=height)
    if base_z:
        mesh.apply_translation([0.0, 0.0, base_z])
    return mesh


def create_floor_meshes(
    footprint: Sequence[Point2D],
    indices: Sequence[int],
    floors: int,
    floor_height: float,
    base_elevation: float = 0.0
) -> List[trimesh.Trimesh]:
    """One prism per floor, stacked from base_elevation upwards."""
    meshes = []
    for floor in range(1, floors + 1):
        floor_bottom = base_elevation + (floor - 1) * floor_height
        mesh = extrude_footprint(footprint, indices, floor_height, floor_bottom)
        mesh.metadata['name'] = f"Floor_{floor}"
        mesh.metadata['floor'] = floor
        meshes.append(mesh)
    return meshes


def _convex_hull_footprint(footprint: Sequence[Point2D]) -> Optional[List[Point2D]]:
    hull = Polygon([p.as_tuple() for p in footprint]).convex_hull
    if not isinstance(hull, Polygon) or hull.area <= 0:
        return None
    coords = list(hull.exterior.coords)[:-1]
    return [Point2D(x, y) for x, y in coords]


def create_robust_building_mesh(
    footprint: Sequence[Point2D],
    floors: int,
    floor_height: float,
    base_elevation: float = 0.0,
    coordinate_system: str = 'world'
) -> BuildingMeshResult:
    """
    Validate, normalize, triangulate and extrude a footprint.

    When triangulation fails or does not conserve area, the footprint's
    convex hull is used instead and a warning is recorded.

    Args:
        footprint: Raw footprint vertices in meters
        floors: Number of floors
        floor_height: Height of each floor in meters
        base_elevation: Ground elevation of the building
        coordinate_system: Passed to the validator for area thresholds

    Returns:
        BuildingMeshResult; building_mesh is None when the footprint is unusable
    """
    validation = validate_and_normalize_polygon(footprint, coordinate_system=coordinate_system)
    if not validation.is_valid:
        logger.error(f"Cannot build mesh: {'; '.join(validation.errors)}")
        return BuildingMeshResult(building_mesh=None, validation=validation)

    outline = validation.normalized
    used_fallback = False
    triangulation = None

    try:
        triangulation = triangulate_with_validation(outline)
    except TriangulationError as e:
        logger.warning(f"Triangulation failed ({e.cause}), falling back to convex hull")

    if triangulation is None or not triangulation.valid:
        hull = _convex_hull_footprint(outline)
        if hull is None:
            validation.add_error('Footprint could not be triangulated and has no usable convex hull')
            return BuildingMeshResult(building_mesh=None, validation=validation, triangulation=triangulation)

        validation.add_warning('Footprint replaced by its convex hull for meshing')
        outline = hull
        triangulation = triangulate_with_validation(outline)
        used_fallback = True

    total_height = floors * floor_height
    building_mesh = extrude_footprint(outline, triangulation.indices, total_height, base_elevation)
    floor_meshes = create_floor_meshes(outline, triangulation.indices, floors, floor_height, base_elevation)

    logger.debug(
        f"Built mesh: {triangulation.triangle_count} triangles, {floors} floors, "
        f"volume {building_mesh.volume:.1f} m³"
    )

    return BuildingMeshResult(
        building_mesh=building_mesh,
        floor_meshes=floor_meshes,
        validation=validation,
        triangulation=triangulation,
        used_fallback=used_fallback,
    )


def create_building_mesh(building: Building) -> BuildingMeshResult:
    """Mesh a Building whose footprint is already in world meters."""
    result = create_robust_building_mesh(
        building.footprint,
        building.floors,
        building.floor_height,
        building.base_elevation,
    )
    if result.building_mesh is not None:
        result.building_mesh.metadata['name'] = building.name
        result.building_mesh.metadata['building_id'] = building.id
    return result
