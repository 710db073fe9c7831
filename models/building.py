"""
Site and building data models: Point2D, SiteConfig, Location, Building.
Footprints are plain vertex lists; the coordinate space (image pixels,
world meters or building-local meters) is determined by context.
"""

from typing import List, Optional, Tuple
from dataclasses import dataclass, field, replace


@dataclass(frozen=True)
class Point2D:
    """Immutable 2D coordinate."""

    x: float
    y: float

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def to_dict(self) -> dict:
        return {'x': self.x, 'y': self.y}


@dataclass(frozen=True)
class SiteConfig:
    """Parameters of the image -> world mapping for one site plan."""

    image_width: float  # pixels
    image_height: float  # pixels
    scale: float  # meters per pixel
    north_angle: float = 0.0  # degrees, 0 = north is image-up, positive = clockwise


@dataclass(frozen=True)
class Location:
    """Geographic location of the site."""

    latitude: float
    longitude: float
    timezone: str = "UTC"
    city: Optional[str] = None


@dataclass(frozen=True)
class Building:
    """Box-extruded building with a polygonal footprint."""

    id: str
    name: str
    footprint: List[Point2D] = field(default_factory=list)
    floors: int = 1
    floor_height: float = 3.0  # meters
    color: str = "#4A90D9"
    base_elevation: float = 0.0

    @property
    def total_height(self) -> float:
        """Total building height in meters."""
        return self.floors * self.floor_height

    def with_footprint(self, footprint: List[Point2D]) -> 'Building':
        """Return a copy of this building with a different footprint."""
        return replace(self, footprint=list(footprint))

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'footprint': [p.to_dict() for p in self.footprint],
            'floors': self.floors,
            'floor_height': self.floor_height,
            'total_height': self.total_height,
            'color': self.color,
            'base_elevation': self.base_elevation,
        }


def points_from_tuples(coords) -> List[Point2D]:
    """Build a Point2D list from an iterable of (x, y) pairs."""
    return [Point2D(float(x), float(y)) for x, y in coords]
