"""
Polygon triangulation by ear clipping.

Delegates to mapbox_earcut (the same engine trimesh uses for polygon
triangulation) and checks the returned index set before anyone consumes it.
"""

import logging
import math
from typing import Dict, List, Optional, Sequence
from dataclasses import dataclass

import numpy as np
import mapbox_earcut

from models.building import Point2D
from geometry.transforms import polygon_area
from utils.errors import TriangulationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TriangulationCheck:
    """Area comparison between a polygon and its triangulation."""

    valid: bool
    input_area: float
    triangulated_area: float
    relative_error: float
    message: str = ''


@dataclass(frozen=True)
class TriangulationResult:
    indices: List[int]
    triangle_count: int
    valid: bool
    input_area: float = 0.0
    triangulated_area: float = 0.0
    relative_error: float = 0.0


def triangulate_polygon(
    points: Sequence[Point2D],
    holes: Optional[Sequence[Sequence[Point2D]]] = None
) -> List[int]:
    """
    Triangulate a polygon, optionally with interior holes.

    Hole vertices are appended after the outer ring, so indices refer to
    the concatenated vertex list (outer ring first, then each hole).

    Args:
        points: Outer ring vertices
        holes: Optional list of hole rings

    Returns:
        Flat list of triangle vertex indices (groups of 3)

    Raises:
        TriangulationError: If the input has fewer than 3 vertices, the
            engine fails or returns no triangles, the index count is not a
            multiple of 3, or an index is out of range
    """
    if len(points) < 3:
        raise TriangulationError(
            'Cannot triangulate polygon with fewer than 3 vertices',
            TriangulationError.TOO_FEW_VERTICES
        )

    rings = [list(points)]
    if holes:
        rings.extend(list(hole) for hole in holes)

    coords = [(p.x, p.y) for ring in rings for p in ring]
    vertex_count = len(coords)

    # earcut takes the end index of every ring
    ring_ends = np.cumsum([len(ring) for ring in rings]).astype(np.uint32)
    vertices = np.asarray(coords, dtype=np.float64).reshape(-1, 2)

    try:
        raw = mapbox_earcut.triangulate_float64(vertices, ring_ends)
    except (ValueError, TypeError, RuntimeError) as e:
        raise TriangulationError(f"Triangulation failed: {e}", TriangulationError.ENGINE_FAILURE) from e

    indices = [int(i) for i in np.asarray(raw).ravel()]

    if not indices:
        raise TriangulationError(
            'Triangulation produced no triangles - polygon may be degenerate',
            TriangulationError.NO_TRIANGLES
        )

    if len(indices) % 3 != 0:
        raise TriangulationError(
            f"Invalid triangulation: {len(indices)} indices (not divisible by 3)",
            TriangulationError.INDEX_COUNT
        )

    max_index = vertex_count - 1
    for position, index in enumerate(indices):
        if index < 0 or index > max_index:
            raise TriangulationError(
                f"Invalid index {index} at position {position} (valid range: 0-{max_index})",
                TriangulationError.INDEX_OUT_OF_RANGE
            )

    return indices


def _triangle_area(p1: Point2D, p2: Point2D, p3: Point2D) -> float:
    return 0.5 * abs((p2.x - p1.x) * (p3.y - p1.y) - (p3.x - p1.x) * (p2.y - p1.y))


def validate_triangulation(
    points: Sequence[Point2D],
    indices: Sequence[int],
    tolerance: float = 0.01
) -> TriangulationCheck:
    """
    Compare the summed triangle area with the polygon's shoelace area.

    Missing, inverted or overlapping triangles all show up as an area
    mismatch.

    Args:
        points: Polygon vertices
        indices: Triangle indices
        tolerance: Relative error tolerance (default 1%)

    Returns:
        TriangulationCheck
    """
    input_area = polygon_area(points)

    triangulated_area = 0.0
    for i in range(0, len(indices) - 2, 3):
        triangulated_area += _triangle_area(points[indices[i]], points[indices[i + 1]], points[indices[i + 2]])

    error = abs(input_area - triangulated_area)
    relative_error = error / input_area if input_area > 0 else 0.0
    valid = relative_error <= tolerance

    message = ''
    if not valid:
        message = (
            f"Triangulation area mismatch: input={input_area:.2f}, "
            f"triangulated={triangulated_area:.2f}, error={relative_error * 100:.2f}%"
        )

    return TriangulationCheck(valid, input_area, triangulated_area, relative_error, message)


def triangulate_with_validation(points: Sequence[Point2D], validate: bool = True) -> TriangulationResult:
    """Triangulate and, unless disabled, check the area in one call."""
    indices = triangulate_polygon(points)
    triangle_count = len(indices) // 3

    if not validate:
        return TriangulationResult(indices, triangle_count, True)

    check = validate_triangulation(points, indices)
    if not check.valid:
        logger.warning(check.message)

    return TriangulationResult(
        indices=indices,
        triangle_count=triangle_count,
        valid=check.valid,
        input_area=check.input_area,
        triangulated_area=check.triangulated_area,
        relative_error=check.relative_error,
    )


def calculate_triangle_quality(p1: Point2D, p2: Point2D, p3: Point2D) -> float:
    """
    Shape quality of a triangle.

    4·√3·area / (a² + b² + c²): 1.0 for an equilateral triangle, tending
    to 0 for slivers.
    """
    a = math.hypot(p2.x - p1.x, p2.y - p1.y)
    b = math.hypot(p3.x - p2.x, p3.y - p2.y)
    c = math.hypot(p1.x - p3.x, p1.y - p3.y)

    s = (a + b + c) / 2
    area_sq = s * (s - a) * (s - b) * (s - c)
    if area_sq <= 0:
        return 0.0

    quality = 4 * math.sqrt(3) * math.sqrt(area_sq) / (a * a + b * b + c * c)
    return max(0.0, min(1.0, quality))


def analyze_triangulation_quality(points: Sequence[Point2D], indices: Sequence[int]) -> Dict[str, float]:
    """Min/max/average quality plus counts of degenerate (<0.01) and low-quality (<0.3) triangles."""
    qualities = [
        calculate_triangle_quality(points[indices[i]], points[indices[i + 1]], points[indices[i + 2]])
        for i in range(0, len(indices) - 2, 3)
    ]

    if not qualities:
        return {
            'min_quality': 0.0,
            'max_quality': 0.0,
            'avg_quality': 0.0,
            'degenerate_count': 0,
            'low_quality_count': 0,
        }

    return {
        'min_quality': min(qualities),
        'max_quality': max(qualities),
        'avg_quality': sum(qualities) / len(qualities),
        'degenerate_count': sum(1 for q in qualities if q < 0.01),
        'low_quality_count': sum(1 for q in qualities if q < 0.3),
    }
