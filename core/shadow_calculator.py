"""
Shadow projection for extruded buildings.

Shadows are cast on the horizontal plane at a target height: every
footprint vertex is pushed away from the sun by (height above target) /
tan(altitude). World frame is X east, Y south.
"""

import math
import logging
from typing import Dict, List, Optional, Sequence, Tuple
from dataclasses import dataclass

from shapely.geometry import Polygon
from shapely.ops import unary_union

from models.building import Building, Point2D
from geometry.transforms import bounding_box, is_point_in_polygon
from utils.geometry_utils import angular_difference
from .sun_position import SunPosition

logger = logging.getLogger(__name__)

SHADOW_MODE_OUTLINE = 'outline'
SHADOW_MODE_SWEPT = 'swept'
SHADOW_MODES = (SHADOW_MODE_OUTLINE, SHADOW_MODE_SWEPT)


@dataclass(frozen=True)
class ShadowPolygon:
    building_id: str
    vertices: Tuple[Point2D, ...]
    building_height: float

    @property
    def is_empty(self) -> bool:
        return len(self.vertices) < 3


def shadow_direction(azimuth: float) -> Tuple[float, float]:
    """
    Unit vector pointing away from the sun in world space.

    Args:
        azimuth: Sun azimuth in radians, clockwise from north

    Returns:
        (dx, dy) with X east and Y south
    """
    return -math.sin(azimuth), math.cos(azimuth)


def shadow_length(effective_height: float, altitude: float) -> float:
    """Horizontal length of the shadow of a vertical edge."""
    return effective_height / math.tan(altitude)


def _outline(footprint: Sequence[Point2D], projected: Sequence[Point2D]) -> List[Point2D]:
    # base ring followed by the projected ring walked backwards
    return list(footprint) + list(reversed(projected))


def _swept(footprint: Sequence[Point2D], projected: Sequence[Point2D]) -> List[Point2D]:
    n = len(footprint)
    pieces = [
        Polygon([p.as_tuple() for p in footprint]).buffer(0),
        Polygon([p.as_tuple() for p in projected]).buffer(0),
    ]
    for i in range(n):
        j = (i + 1) % n
        quad = Polygon([
            footprint[i].as_tuple(), footprint[j].as_tuple(),
            projected[j].as_tuple(), projected[i].as_tuple(),
        ]).buffer(0)
        if not quad.is_empty:
            pieces.append(quad)

    shape = unary_union(pieces)
    if shape.geom_type != 'Polygon':
        shape = shape.convex_hull
    if shape.is_empty or shape.geom_type != 'Polygon':
        return []

    return [Point2D(x, y) for x, y in list(shape.exterior.coords)[:-1]]


class ShadowCalculator:
    """
    Computes and caches building shadow polygons.

    Cache entries are keyed by (building id, target height to 0.1 m) and
    remember the sun position they were computed for. An entry is reused
    while both altitude and azimuth stay within the tolerance of that
    position. Each analysis run owns its own instance; instances are not
    meant to be shared between threads.
    """

    def __init__(self, cache_tolerance_degrees: float = 0.5, mode: str = SHADOW_MODE_OUTLINE):
        if mode not in SHADOW_MODES:
            raise ValueError(f"Unknown shadow mode '{mode}', expected one of {SHADOW_MODES}")
        self.tolerance = math.radians(cache_tolerance_degrees)
        self.mode = mode
        self._cache: Dict[Tuple[str, float], Tuple[SunPosition, ShadowPolygon]] = {}
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._cache)

    @staticmethod
    def _key(building_id: str, target_height: float) -> Tuple[str, float]:
        return building_id, round(target_height, 1)

    def clear(self, building_id: Optional[str] = None):
        """
        Invalidate cached shadows.

        Args:
            building_id: Only drop this building's entries; None drops everything
        """
        if building_id is None:
            logger.debug(f"Shadow cache cleared ({len(self._cache)} entries, {self.hits} hits, {self.misses} misses)")
            self._cache.clear()
            self.hits = 0
            self.misses = 0
            return

        for key in [k for k in self._cache if k[0] == building_id]:
            del self._cache[key]

    def _lookup(self, key: Tuple[str, float], sun_position: SunPosition) -> Optional[ShadowPolygon]:
        entry = self._cache.get(key)
        if entry is None:
            return None

        cached_sun, shadow = entry
        if abs(sun_position.altitude - cached_sun.altitude) > self.tolerance:
            return None
        if angular_difference(sun_position.azimuth, cached_sun.azimuth) > self.tolerance:
            return None
        return shadow

    def calculate_shadow_polygon(
        self,
        building: Building,
        sun_position: SunPosition,
        target_height: float = 0.0
    ) -> ShadowPolygon:
        """
        Shadow cast by a building onto the plane at target_height.

        Args:
            building: Building with a world-space footprint
            sun_position: Sun position (radians)
            target_height: Height of the receiving plane in meters

        Returns:
            ShadowPolygon, empty when the sun is down or the building does
            not reach above the target height
        """
        effective_height = building.total_height - target_height
        if sun_position.altitude <= 0 or effective_height <= 0 or len(building.footprint) < 3:
            return ShadowPolygon(building.id, (), building.total_height)

        key = self._key(building.id, target_height)
        cached = self._lookup(key, sun_position)
        if cached is not None:
            self.hits += 1
            return cached
        self.misses += 1

        length = shadow_length(effective_height, sun_position.altitude)
        dx, dy = shadow_direction(sun_position.azimuth)
        projected = [Point2D(p.x + dx * length, p.y + dy * length) for p in building.footprint]

        if self.mode == SHADOW_MODE_SWEPT:
            vertices = _swept(building.footprint, projected)
        else:
            vertices = _outline(building.footprint, projected)

        shadow = ShadowPolygon(building.id, tuple(vertices), building.total_height)
        self._cache[key] = (sun_position, shadow)
        return shadow

    def is_point_in_shadow(
        self,
        point: Point2D,
        buildings: Sequence[Building],
        sun_position: SunPosition,
        exclude_building_id: Optional[str] = None,
        target_height: float = 0.0
    ) -> bool:
        """
        Test whether a point is inside any other building's shadow.

        Everything is in shadow when the sun is at or below the horizon.
        """
        if sun_position.altitude <= 0:
            return True

        for building in buildings:
            if building.id == exclude_building_id:
                continue
            if building.total_height <= target_height:
                continue

            shadow = self.calculate_shadow_polygon(building, sun_position, target_height)
            if not shadow.is_empty and is_point_in_polygon(point, shadow.vertices):
                return True

        return False

    def calculate_shadow_coverage(
        self,
        target_building: Building,
        buildings: Sequence[Building],
        sun_position: SunPosition,
        target_height: float = 0.0,
        sample_density: int = 8
    ) -> float:
        """
        Percentage of a footprint shadowed by other buildings.

        The footprint's bounding box is split into sample_density ×
        sample_density cells and the cell centers inside the footprint are
        tested.

        Returns:
            Shadowed share of in-footprint samples in percent (0-100)
        """
        if sun_position.altitude <= 0:
            return 100.0

        footprint = target_building.footprint
        if len(footprint) < 3:
            return 0.0

        obstructers = [
            b for b in buildings
            if b.id != target_building.id and b.total_height > target_height and len(b.footprint) >= 3
        ]
        if not obstructers or sample_density < 1:
            return 0.0

        bbox = bounding_box(footprint)
        step_x = bbox.width / sample_density
        step_y = bbox.height / sample_density

        total = 0
        shadowed = 0
        for i in range(sample_density):
            x = bbox.min_x + (i + 0.5) * step_x
            for j in range(sample_density):
                point = Point2D(x, bbox.min_y + (j + 0.5) * step_y)
                if not is_point_in_polygon(point, footprint):
                    continue
                total += 1
                if self.is_point_in_shadow(point, obstructers, sun_position, target_building.id, target_height):
                    shadowed += 1

        if total == 0:
            return 0.0
        return shadowed / total * 100.0
