"""
Pytest configuration and fixtures for SunScope tests.

Provides reusable fixtures for:
- Footprints (squares, L-shapes)
- Buildings and sites
- Locations
"""

import sys
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from models.building import Building, Location, Point2D, SiteConfig, points_from_tuples


def square(x0: float, y0: float, size: float):
    """Counter-clockwise square with its lower corner at (x0, y0)."""
    return points_from_tuples([
        (x0, y0), (x0 + size, y0), (x0 + size, y0 + size), (x0, y0 + size),
    ])


# =============================================================================
# FOOTPRINT FIXTURES
# =============================================================================

@pytest.fixture
def unit_square():
    return points_from_tuples([(0, 0), (1, 0), (1, 1), (0, 1)])


@pytest.fixture
def ten_meter_square():
    """10 x 10 m square centered on the origin."""
    return points_from_tuples([(-5, -5), (5, -5), (5, 5), (-5, 5)])


@pytest.fixture
def l_shape():
    """Concave L-shaped footprint, area 75."""
    return points_from_tuples([(0, 0), (10, 0), (10, 5), (5, 5), (5, 10), (0, 10)])


@pytest.fixture
def image_rectangle():
    """Rectangle drawn on a 1000 x 800 px plan, 100 x 50 px."""
    return points_from_tuples([(400, 300), (500, 300), (500, 350), (400, 350)])


# =============================================================================
# SITE FIXTURES
# =============================================================================

@pytest.fixture
def site_config():
    return SiteConfig(image_width=1000, image_height=800, scale=0.5, north_angle=0.0)


@pytest.fixture
def new_york():
    return Location(latitude=40.71, longitude=-74.01, timezone='America/New_York', city='New York')


@pytest.fixture
def new_york_utc():
    return Location(latitude=40.71, longitude=-74.01)


@pytest.fixture
def tower(ten_meter_square):
    """Single 10 x 10 m, 15 m tall building."""
    return Building(id='tower', name='Tower', footprint=ten_meter_square, floors=5, floor_height=3.0)


@pytest.fixture
def target_and_obstruction():
    """Low target building with a tall building directly to its south (Y is south)."""
    target = Building(id='target', name='Target', footprint=square(0, 0, 10), floors=2, floor_height=3.0)
    tall = Building(id='tall', name='Tall', footprint=square(0, 15, 10), floors=20, floor_height=3.0)
    return target, tall
