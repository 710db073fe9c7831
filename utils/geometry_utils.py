"""
Geometry utility functions for 2D vector calculations.
"""

import math
from typing import Tuple


def calculate_distance(point1: Tuple[float, float], point2: Tuple[float, float]) -> float:
    """
    Calculate Euclidean distance between two 2D points.

    Args:
        point1: First point (x, y)
        point2: Second point (x, y)

    Returns:
        Distance in the points' working unit
    """
    dx = point2[0] - point1[0]
    dy = point2[1] - point1[1]
    return math.sqrt(dx*dx + dy*dy)


def rotate_vector(vector: Tuple[float, float], angle_degrees: float) -> Tuple[float, float]:
    """
    Rotate a 2D vector by the given angle.

    In a Y-down frame (image or world X=east/Y=south) a positive angle
    turns the vector clockwise as seen on screen.

    Args:
        vector: Input vector (x, y)
        angle_degrees: Rotation angle in degrees

    Returns:
        Rotated vector
    """
    angle_rad = math.radians(angle_degrees)
    cos_a = math.cos(angle_rad)
    sin_a = math.sin(angle_rad)
    x, y = vector
    return (x * cos_a - y * sin_a, x * sin_a + y * cos_a)


def normalize_vector(vector: Tuple[float, float]) -> Tuple[float, float]:
    """
    Normalize a 2D vector to unit length.

    Args:
        vector: Input vector

    Returns:
        Normalized vector, (0, 0) for a zero vector
    """
    magnitude = math.hypot(vector[0], vector[1])
    if magnitude == 0:
        return (0.0, 0.0)
    return (vector[0] / magnitude, vector[1] / magnitude)


def angular_difference(angle1: float, angle2: float) -> float:
    """
    Smallest absolute difference between two angles in radians.

    Wraps around the full circle, so 359 deg and 1 deg are 2 deg apart.
    """
    diff = math.fmod(abs(angle1 - angle2), 2 * math.pi)
    return min(diff, 2 * math.pi - diff)
