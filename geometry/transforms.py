"""
Coordinate transformations and polygon primitives.

Coordinate systems:

1. Image space: origin at the top-left corner of the site plan, X right,
   Y down, units pixels.
2. World space: origin at the image center, X east, Y south, units meters,
   after scale and north rotation are applied.
3. Building local space: world space re-centered on a building's centroid.

Pipeline: image (px) -> center at origin -> scale to meters -> rotate for
north -> world -> subtract centroid -> local.

None of these functions raise on malformed input; fewer than three points
yield zero areas and empty results, and rejection is left to the validator.
"""

import logging
import math
from typing import Dict, List, Optional, Sequence, Tuple
from dataclasses import dataclass, field

from models.building import Point2D, SiteConfig
from utils.geometry_utils import rotate_vector

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoundingBox:
    min_x: float = 0.0
    min_y: float = 0.0
    max_x: float = 0.0
    max_y: float = 0.0

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y


@dataclass(frozen=True)
class FootprintTransform:
    """Result of the full image -> world -> local pipeline."""

    world_footprint: List[Point2D]
    local_footprint: List[Point2D]
    centroid: Point2D
    metadata: Dict[str, float] = field(default_factory=dict)


def _transform_point(point: Point2D, site_config: SiteConfig) -> Point2D:
    # Image Y maps to world south
    meter_x = (point.x - site_config.image_width / 2) * site_config.scale
    meter_y = (point.y - site_config.image_height / 2) * site_config.scale
    x, y = rotate_vector((meter_x, meter_y), site_config.north_angle)
    return Point2D(x, y)


def image_to_world(image_footprint: Sequence[Point2D], site_config: SiteConfig) -> List[Point2D]:
    """
    Transform a polygon from image space to world space.

    Args:
        image_footprint: Polygon vertices in image pixels
        site_config: Site configuration (image size, scale, north angle)

    Returns:
        Polygon vertices in world meters (X east, Y south)
    """
    return [_transform_point(p, site_config) for p in image_footprint]


def world_to_image(world_footprint: Sequence[Point2D], site_config: SiteConfig) -> List[Point2D]:
    """
    Inverse of image_to_world for the same site configuration.

    Args:
        world_footprint: Polygon vertices in world meters
        site_config: Site configuration used for the forward transform

    Returns:
        Polygon vertices in image pixels
    """
    result = []
    for point in world_footprint:
        x, y = rotate_vector((point.x, point.y), -site_config.north_angle)
        result.append(Point2D(
            x / site_config.scale + site_config.image_width / 2,
            y / site_config.scale + site_config.image_height / 2,
        ))
    return result


def polygon_centroid(points: Sequence[Point2D]) -> Point2D:
    """Arithmetic mean of the vertices, (0, 0) for an empty list."""
    if not points:
        return Point2D(0.0, 0.0)
    n = len(points)
    return Point2D(sum(p.x for p in points) / n, sum(p.y for p in points) / n)


def world_to_local(world_footprint: Sequence[Point2D]) -> Tuple[List[Point2D], Point2D]:
    """
    Re-center a world-space polygon on its centroid.

    Args:
        world_footprint: Polygon in world meters

    Returns:
        Tuple of (local footprint, world centroid)
    """
    if not world_footprint:
        return [], Point2D(0.0, 0.0)

    centroid = polygon_centroid(world_footprint)
    local_footprint = [Point2D(p.x - centroid.x, p.y - centroid.y) for p in world_footprint]
    return local_footprint, centroid


def transform_footprint(image_footprint: Sequence[Point2D], site_config: SiteConfig) -> FootprintTransform:
    """
    Complete transformation pipeline: image -> world -> local.

    Args:
        image_footprint: Footprint drawn on the site plan (pixels)
        site_config: Site configuration

    Returns:
        FootprintTransform with world and local coordinates and metadata
    """
    world_footprint = image_to_world(image_footprint, site_config)
    local_footprint, centroid = world_to_local(world_footprint)

    logger.debug(
        f"Transformed footprint: {len(image_footprint)} points, "
        f"scale={site_config.scale} m/px, rotation={site_config.north_angle}°"
    )

    return FootprintTransform(
        world_footprint=world_footprint,
        local_footprint=local_footprint,
        centroid=centroid,
        metadata={
            'input_points': len(image_footprint),
            'output_points': len(local_footprint),
            'applied_rotation': site_config.north_angle,
            'applied_scale': site_config.scale,
        },
    )


def signed_polygon_area(points: Sequence[Point2D]) -> float:
    """
    Signed area by the shoelace formula.

    Positive for counter-clockwise vertex order in a Y-up frame.
    """
    n = len(points)
    if n < 3:
        return 0.0

    area = 0.0
    for i in range(n):
        j = (i + 1) % n
        area += points[i].x * points[j].y
        area -= points[j].x * points[i].y
    return area / 2.0


def polygon_area(points: Sequence[Point2D]) -> float:
    """Absolute polygon area (shoelace)."""
    return abs(signed_polygon_area(points))


def bounding_box(points: Sequence[Point2D]) -> BoundingBox:
    """Axis-aligned bounding box, all zeros for an empty list."""
    if not points:
        return BoundingBox()

    xs = [p.x for p in points]
    ys = [p.y for p in points]
    return BoundingBox(min(xs), min(ys), max(xs), max(ys))


def _ccw(a: Point2D, b: Point2D, c: Point2D) -> bool:
    return (c.y - a.y) * (b.x - a.x) > (b.y - a.y) * (c.x - a.x)


def segments_intersect(p1: Point2D, p2: Point2D, p3: Point2D, p4: Point2D) -> bool:
    """Proper intersection test for segments p1-p2 and p3-p4."""
    return _ccw(p1, p3, p4) != _ccw(p2, p3, p4) and _ccw(p1, p2, p3) != _ccw(p1, p2, p4)


def has_self_intersection(points: Sequence[Point2D]) -> bool:
    """
    Check whether any two non-adjacent edges of a closed polygon cross.

    O(n²); callers limit it to modest vertex counts.
    """
    n = len(points)
    if n < 4:
        return False

    for i in range(n):
        p1 = points[i]
        p2 = points[(i + 1) % n]

        for j in range(i + 2, n):
            # edge j shares a vertex with edge i when it wraps around
            if (j + 1) % n == i:
                continue

            p3 = points[j]
            p4 = points[(j + 1) % n]

            if segments_intersect(p1, p2, p3, p4):
                return True

    return False


def is_point_in_polygon(point: Point2D, polygon: Sequence[Point2D]) -> bool:
    """
    Point-in-polygon test by ray casting (even-odd rule).

    A ray from the point towards +X is intersected with every edge; an odd
    number of crossings means the point is inside.
    """
    n = len(polygon)
    if n < 3:
        return False

    inside = False
    j = n - 1
    for i in range(n):
        xi, yi = polygon[i].x, polygon[i].y
        xj, yj = polygon[j].x, polygon[j].y

        if (yi > point.y) != (yj > point.y):
            x_cross = (xj - xi) * (point.y - yi) / (yj - yi) + xi
            if point.x < x_cross:
                inside = not inside
        j = i

    return inside


def has_finite_coordinates(points: Sequence[Point2D]) -> bool:
    return all(math.isfinite(p.x) and math.isfinite(p.y) for p in points)


def first_non_finite_index(points: Sequence[Point2D]) -> Optional[int]:
    for index, p in enumerate(points):
        if not (math.isfinite(p.x) and math.isfinite(p.y)):
            return index
    return None
