"""
Utility functions and helpers.
"""

from .config_loader import load_config, get_config_value
from .geometry_utils import calculate_distance, rotate_vector, normalize_vector, angular_difference
from .log_config import setup_logging, setup_logging_from_config
from .errors import SunScopeError, GeometryValidationError, TriangulationError, ConfigurationError

__all__ = [
    'load_config',
    'get_config_value',
    'calculate_distance',
    'rotate_vector',
    'normalize_vector',
    'angular_difference',
    'setup_logging',
    'setup_logging_from_config',
    'SunScopeError',
    'GeometryValidationError',
    'TriangulationError',
    'ConfigurationError',
]
