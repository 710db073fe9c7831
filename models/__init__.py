"""
Data models for sites, buildings, scenarios and analysis results.
"""

from .building import Point2D, SiteConfig, Location, Building, points_from_tuples
from .scenario import (
    WindowState, GlazingType, InteriorShading, ExteriorShading,
    WindowConfig, GlazingConfig, ShadingConfig, Scenario,
    DEFAULT_SCENARIO, SCENARIO_PRESETS,
)
from .calculation_result import (
    TimeBlock, HourlyDataPoint, SunlightResults, SolarResults, RiskLevel,
    RecommendationKind, Recommendation, ComfortResults, TargetType, AnalysisResults,
)

__all__ = [
    'Point2D',
    'SiteConfig',
    'Location',
    'Building',
    'points_from_tuples',
    'WindowState',
    'GlazingType',
    'InteriorShading',
    'ExteriorShading',
    'WindowConfig',
    'GlazingConfig',
    'ShadingConfig',
    'Scenario',
    'DEFAULT_SCENARIO',
    'SCENARIO_PRESETS',
    'TimeBlock',
    'HourlyDataPoint',
    'SunlightResults',
    'SolarResults',
    'RiskLevel',
    'RecommendationKind',
    'Recommendation',
    'ComfortResults',
    'TargetType',
    'AnalysisResults',
]
