"""
Error types raised at the geometry, triangulation and configuration boundaries.

Analysis-level degenerate cases (missing target, empty site, polar day or
night) are not errors and never raise.
"""

from typing import List, Optional


class SunScopeError(Exception):
    """Base class for all project errors."""

    pass


class GeometryValidationError(SunScopeError, ValueError):
    """
    Raised when a footprint fails hard validation.

    Attributes:
        errors: Blocking validation messages
        warnings: Informational messages collected alongside
        building_id: Building the footprint belongs to (optional)
    """

    def __init__(
        self,
        message: str,
        errors: Optional[List[str]] = None,
        warnings: Optional[List[str]] = None,
        building_id: Optional[str] = None
    ):
        self.errors = list(errors or [])
        self.warnings = list(warnings or [])
        self.building_id = building_id
        if self.errors:
            message = f"{message}: {'; '.join(self.errors)}"
        super().__init__(message)


class TriangulationError(SunScopeError, ValueError):
    """
    Raised when a polygon cannot be triangulated consistently.

    Attributes:
        cause: One of TOO_FEW_VERTICES, NO_TRIANGLES, INDEX_COUNT,
            INDEX_OUT_OF_RANGE, ENGINE_FAILURE
    """

    TOO_FEW_VERTICES = 'too_few_vertices'
    NO_TRIANGLES = 'no_triangles'
    INDEX_COUNT = 'index_count'
    INDEX_OUT_OF_RANGE = 'index_out_of_range'
    ENGINE_FAILURE = 'engine_failure'

    def __init__(self, message: str, cause: str):
        self.cause = cause
        super().__init__(message)


class ConfigurationError(SunScopeError, ValueError):
    """Raised for invalid settings or scenario factors."""

    pass
