"""
Footprint and site validation.

Turns user- or detector-supplied vertex lists into polygons that are safe
for triangulation and shadow projection. Errors block further processing;
warnings are informational, so noisy detected footprints degrade
gracefully instead of being rejected.

Nothing in this module raises for bad geometry: results carry separate
error and warning lists and the caller decides what to do with them.
"""

import logging
import math
from typing import Dict, List, Optional, Sequence, Tuple, Any

from models.building import Building, Point2D, SiteConfig
from geometry.transforms import (
    polygon_area,
    signed_polygon_area,
    bounding_box,
    has_self_intersection,
)

logger = logging.getLogger(__name__)

DEFAULT_EPSILON = 0.001
MIN_AREA_IMAGE = 100.0  # px²
MIN_AREA_WORLD = 1.0  # m²
DEFAULT_MAX_ASPECT_RATIO = 100.0
SELF_INTERSECTION_VERTEX_LIMIT = 100
MANY_POINTS_WARNING = 200

_ZERO_AREA = 1e-9


class ValidationResult:
    """Result of a validation pass: hard errors plus informational warnings."""

    def __init__(self):
        self.is_valid: bool = True
        self.errors: List[str] = []
        self.warnings: List[str] = []

    def add_error(self, message: str):
        """Add validation error."""
        self.is_valid = False
        self.errors.append(message)
        logger.error(f"Geometry validation error: {message}")

    def add_warning(self, message: str):
        """Add validation warning."""
        self.warnings.append(message)
        logger.warning(f"Geometry validation warning: {message}")

    def extend(self, other: 'ValidationResult'):
        """Merge another result into this one without logging twice."""
        if other.errors:
            self.is_valid = False
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)

    def get_summary(self) -> str:
        """Get validation summary."""
        status = '✓ VALID' if self.is_valid else '✗ INVALID'
        return f"Validation Status: {status} | Errors: {len(self.errors)}, Warnings: {len(self.warnings)}"


class PolygonNormalizationResult(ValidationResult):
    """Validation result carrying the normalized polygon and pipeline metadata."""

    def __init__(self, original_vertex_count: int = 0):
        super().__init__()
        self.normalized: List[Point2D] = []
        self.metadata: Dict[str, Any] = {
            'original_vertex_count': original_vertex_count,
            'normalized_vertex_count': 0,
            'area': 0.0,
            'winding_order': 'CCW',
            'was_reversed': False,
            'duplicates_removed': 0,
        }


def _unit(coordinate_system: str) -> str:
    return 'm²' if coordinate_system == 'world' else 'px²'


def _default_min_area(coordinate_system: str) -> float:
    return MIN_AREA_WORLD if coordinate_system == 'world' else MIN_AREA_IMAGE


def remove_duplicate_points(points: Sequence[Point2D], epsilon: float = DEFAULT_EPSILON) -> List[Point2D]:
    """
    Remove vertices that lie within epsilon of their successor.

    The polygon is treated as closed, so the last vertex is compared with
    the first. Non-finite vertices are never dropped here; they are left
    for the finite-coordinate check to reject.

    Args:
        points: Polygon vertices
        epsilon: Distance threshold in the working unit

    Returns:
        Cleaned vertex list, or the input unchanged if fewer than three
        vertices would survive
    """
    points = list(points)
    if len(points) < 3:
        return points

    epsilon_sq = epsilon * epsilon
    cleaned = []
    n = len(points)

    for i in range(n):
        current = points[i]
        nxt = points[(i + 1) % n]
        dx = nxt.x - current.x
        dy = nxt.y - current.y
        dist_sq = dx * dx + dy * dy

        if not dist_sq <= epsilon_sq:
            cleaned.append(current)

    return cleaned if len(cleaned) >= 3 else points


def get_winding_order(points: Sequence[Point2D]) -> str:
    """
    Winding order from the sign of the shoelace area.

    Returns:
        'CCW' for positive signed area (also for degenerate input), 'CW' otherwise
    """
    if len(points) < 3:
        return 'CCW'
    return 'CW' if signed_polygon_area(points) < 0 else 'CCW'


def normalize_to_counter_clockwise(points: Sequence[Point2D]) -> List[Point2D]:
    """Return the polygon in counter-clockwise order, reversed if needed."""
    points = list(points)
    if get_winding_order(points) == 'CCW':
        return points
    return points[::-1]


def _check_finite(points: Sequence[Point2D], result: ValidationResult):
    for i, point in enumerate(points):
        if not (math.isfinite(point.x) and math.isfinite(point.y)):
            result.add_error(f"Point {i} has invalid coordinates: ({point.x}, {point.y})")


def validate_and_normalize_polygon(
    points: Sequence[Point2D],
    epsilon: float = DEFAULT_EPSILON,
    min_area: Optional[float] = None,
    max_aspect_ratio: float = DEFAULT_MAX_ASPECT_RATIO,
    coordinate_system: str = 'image',
    self_intersection_vertex_limit: int = SELF_INTERSECTION_VERTEX_LIMIT
) -> PolygonNormalizationResult:
    """
    Validate a raw polygon and normalize it for triangulation.

    Pipeline:
        1. Vertex count check
        2. Duplicate removal
        3. Finite-coordinate check
        4. Area check (zero area is an error, small area a warning)
        5. Self-intersection detection (warning only)
        6. Winding normalization to counter-clockwise
        7. Aspect ratio sanity check

    Args:
        points: Raw polygon vertices
        epsilon: Duplicate-vertex distance threshold
        min_area: Minimum recommended area, defaults by coordinate system
        max_aspect_ratio: Bounding-box aspect ratio above which to warn
        coordinate_system: 'image' (pixels) or 'world' (meters)
        self_intersection_vertex_limit: Skip the O(n²) check at or above this count

    Returns:
        PolygonNormalizationResult with normalized polygon, errors, warnings
        and metadata
    """
    points = list(points)
    result = PolygonNormalizationResult(original_vertex_count=len(points))

    if len(points) < 3:
        result.add_error('Polygon must have at least 3 vertices')
        return result

    cleaned = remove_duplicate_points(points, epsilon)
    duplicates_removed = len(points) - len(cleaned)
    result.metadata['duplicates_removed'] = duplicates_removed
    result.metadata['normalized_vertex_count'] = len(cleaned)

    if duplicates_removed > 0:
        result.add_warning(f"Removed {duplicates_removed} duplicate or near-duplicate vertices")

    _check_finite(cleaned, result)
    if not result.is_valid:
        return result

    area = polygon_area(cleaned)
    result.metadata['area'] = area
    if min_area is None:
        min_area = _default_min_area(coordinate_system)

    if area <= _ZERO_AREA:
        result.add_error('Polygon has zero area - all points are collinear')
    elif area < min_area:
        result.add_warning(
            f"Polygon area is very small: {area:.2f} {_unit(coordinate_system)} "
            f"(minimum recommended: {min_area})"
        )

    if len(cleaned) < self_intersection_vertex_limit and has_self_intersection(cleaned):
        result.add_warning('Polygon has self-intersecting edges (may cause minor rendering artifacts)')

    winding = get_winding_order(cleaned)
    normalized = normalize_to_counter_clockwise(cleaned)
    was_reversed = winding == 'CW'
    result.metadata['winding_order'] = winding
    result.metadata['was_reversed'] = was_reversed

    if was_reversed:
        result.add_warning('Polygon winding order was reversed from clockwise to counter-clockwise')

    bbox = bounding_box(normalized)
    if bbox.width > 0 and bbox.height > 0:
        aspect_ratio = max(bbox.width, bbox.height) / min(bbox.width, bbox.height)
        if aspect_ratio > max_aspect_ratio:
            result.add_warning(
                f"Polygon has extreme aspect ratio: {aspect_ratio:.1f}:1 "
                f"(maximum recommended: {max_aspect_ratio}:1)"
            )

    if result.is_valid:
        result.normalized = normalized
        result.metadata['normalized_vertex_count'] = len(normalized)

    return result


def validate_footprint(points: Sequence[Point2D], coordinate_system: str = 'image') -> ValidationResult:
    """
    Validate a building footprint without normalizing it.

    Args:
        points: Footprint vertices
        coordinate_system: 'image' or 'world' (affects the area threshold)

    Returns:
        ValidationResult
    """
    result = ValidationResult()

    if len(points) < 3:
        result.add_error('Footprint must have at least 3 points to form a polygon')
        return result

    _check_finite(points, result)
    if not result.is_valid:
        return result

    area = polygon_area(points)
    min_area = _default_min_area(coordinate_system)
    unit = _unit(coordinate_system)

    if area < min_area:
        result.add_warning(
            f"Building footprint is very small ({area:.2f} {unit}). "
            f"Minimum recommended: {min_area:g} {unit}"
        )

    if area <= _ZERO_AREA:
        result.add_error('Footprint has zero area - all points are collinear')
        return result

    bbox = bounding_box(points)
    if bbox.width > 0 and bbox.height > 0:
        aspect_ratio = bbox.width / bbox.height
        if aspect_ratio > 20 or aspect_ratio < 0.05:
            result.add_warning(
                f"Building footprint has extreme aspect ratio ({aspect_ratio:.2f}:1). "
                f"This may indicate a drawing error."
            )

    if len(points) < SELF_INTERSECTION_VERTEX_LIMIT and has_self_intersection(points):
        result.add_warning('Footprint has self-intersecting edges. This may cause rendering artifacts.')

    if len(points) > MANY_POINTS_WARNING:
        result.add_warning(f"Footprint has {len(points)} points. Consider simplifying for better performance.")

    return result


def validate_site_config(site_config: SiteConfig) -> ValidationResult:
    """
    Validate the image-to-world mapping parameters.

    Checks positive image dimensions, a positive scale (warning outside
    0.01-100 m/px) and a finite north angle (warning when it is outside
    [0, 360) and will be normalized).
    """
    result = ValidationResult()

    if not math.isfinite(site_config.image_width) or site_config.image_width <= 0:
        result.add_error(f"Invalid image width: {site_config.image_width}. Must be a positive number.")

    if not math.isfinite(site_config.image_height) or site_config.image_height <= 0:
        result.add_error(f"Invalid image height: {site_config.image_height}. Must be a positive number.")

    if not math.isfinite(site_config.scale) or site_config.scale <= 0:
        result.add_error(f"Invalid scale: {site_config.scale}. Must be a positive number.")
    elif site_config.scale < 0.01 or site_config.scale > 100:
        result.add_warning(
            f"Scale {site_config.scale} m/px is outside typical range (0.01 - 100). Verify this is correct."
        )

    if not math.isfinite(site_config.north_angle):
        result.add_error(f"Invalid north angle: {site_config.north_angle}. Must be a number.")
    else:
        normalized_angle = site_config.north_angle % 360
        if normalized_angle != site_config.north_angle:
            result.add_warning(
                f"North angle {site_config.north_angle}° will be normalized to {normalized_angle}°"
            )

    return result


def validate_floor_data(floors: int, floor_height: float) -> ValidationResult:
    """
    Check the floor count and floor height of a building.

    Applies in any coordinate system: the floor count must be a positive
    integer and the floor height a positive, finite number of meters.

    Args:
        floors: Number of floors
        floor_height: Height of each floor in meters

    Returns:
        ValidationResult
    """
    result = ValidationResult()

    floors_ok = isinstance(floors, int) and not isinstance(floors, bool) and floors >= 1
    if not floors_ok:
        result.add_error(f"Floor count must be a positive integer, got: {floors}")
    elif floors > 200:
        result.add_warning(f"Building has {floors} floors. This seems unusually tall.")

    height_ok = (
        isinstance(floor_height, (int, float))
        and not isinstance(floor_height, bool)
        and math.isfinite(floor_height)
        and floor_height > 0
    )
    if not height_ok:
        result.add_error(f"Floor height must be positive, got: {floor_height}m")
    elif floor_height < 2 or floor_height > 10:
        result.add_warning(
            f"Floor height {floor_height}m is outside typical range (2-10m). "
            f"Typical values: 3m (residential), 4m (commercial)"
        )

    if floors_ok and height_ok:
        total_height = floors * floor_height
        if total_height > 1000:
            result.add_warning(
                f"Total building height is {total_height}m ({floors} × {floor_height}m). This is extremely tall."
            )

    return result


def validate_building_geometry(
    footprint: Sequence[Point2D],
    floors: int,
    floor_height: float
) -> ValidationResult:
    """
    Comprehensive building check: image-space footprint plus floor data.

    Args:
        footprint: Footprint in image coordinates
        floors: Number of floors
        floor_height: Height of each floor in meters

    Returns:
        ValidationResult
    """
    result = ValidationResult()
    result.extend(validate_footprint(footprint, 'image'))
    result.extend(validate_floor_data(floors, floor_height))
    return result


def validate_buildings(
    buildings: Sequence[Building],
    site_config: SiteConfig
) -> List[Tuple[str, ValidationResult]]:
    """
    Batch validate buildings against one site configuration.

    An invalid site configuration fails every building with a single
    combined error.

    Returns:
        List of (building name, ValidationResult), one per building
    """
    site_result = validate_site_config(site_config)
    results = []

    if not site_result.is_valid:
        message = f"Site configuration invalid: {', '.join(site_result.errors)}"
        for building in buildings:
            failed = ValidationResult()
            failed.add_error(message)
            results.append((building.name, failed))
        return results

    for building in buildings:
        results.append((
            building.name,
            validate_building_geometry(building.footprint, building.floors, building.floor_height)
        ))

    return results


def format_validation_message(result: ValidationResult, building_name: Optional[str] = None) -> str:
    """Format a validation result as a user-facing message."""
    prefix = f'Building "{building_name}": ' if building_name else ''

    if result.is_valid and not result.warnings:
        return f"{prefix}Validation passed ✓"

    parts = []
    if result.errors:
        parts.append("ERRORS:\n" + "\n".join(f"  • {e}" for e in result.errors))
    if result.warnings:
        parts.append("WARNINGS:\n" + "\n".join(f"  ⚠ {w}" for w in result.warnings))

    return f"{prefix}\n" + "\n\n".join(parts)


def get_validation_severity(result: ValidationResult) -> str:
    """'error', 'warning' or 'success'."""
    if result.errors:
        return 'error'
    if result.warnings:
        return 'warning'
    return 'success'
