"""
Footprint geometry: coordinate transforms, validation, triangulation and meshing.
"""

from .transforms import (
    BoundingBox,
    FootprintTransform,
    image_to_world,
    world_to_image,
    world_to_local,
    transform_footprint,
    signed_polygon_area,
    polygon_area,
    polygon_centroid,
    bounding_box,
    segments_intersect,
    has_self_intersection,
    is_point_in_polygon,
)
from .validation import (
    ValidationResult,
    PolygonNormalizationResult,
    remove_duplicate_points,
    get_winding_order,
    normalize_to_counter_clockwise,
    validate_and_normalize_polygon,
    validate_footprint,
    validate_site_config,
    validate_floor_data,
    validate_building_geometry,
    validate_buildings,
    format_validation_message,
    get_validation_severity,
)
from .triangulation import (
    triangulate_polygon,
    validate_triangulation,
    triangulate_with_validation,
    calculate_triangle_quality,
    analyze_triangulation_quality,
)

__all__ = [
    'BoundingBox',
    'FootprintTransform',
    'image_to_world',
    'world_to_image',
    'world_to_local',
    'transform_footprint',
    'signed_polygon_area',
    'polygon_area',
    'polygon_centroid',
    'bounding_box',
    'segments_intersect',
    'has_self_intersection',
    'is_point_in_polygon',
    'ValidationResult',
    'PolygonNormalizationResult',
    'remove_duplicate_points',
    'get_winding_order',
    'normalize_to_counter_clockwise',
    'validate_and_normalize_polygon',
    'validate_footprint',
    'validate_site_config',
    'validate_floor_data',
    'validate_building_geometry',
    'validate_buildings',
    'format_validation_message',
    'get_validation_severity',
    'triangulate_polygon',
    'validate_triangulation',
    'triangulate_with_validation',
    'calculate_triangle_quality',
    'analyze_triangulation_quality',
]
