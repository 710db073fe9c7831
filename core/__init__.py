"""
Core calculation engines for sun position, shadows, irradiance and comfort.
"""

from .sun_position import SunPosition, DaylightWindow, SunPositionCalculator
from .shadow_calculator import ShadowCalculator, ShadowPolygon
from .irradiance import ClearSkyModel
from .comfort import calculate_comfort_score, analyze_comfort
from .recommendations import generate_recommendations, format_recommendation
from .analysis_engine import AnalysisEngine, AnalysisSettings, normalize_buildings

__all__ = [
    'SunPosition',
    'DaylightWindow',
    'SunPositionCalculator',
    'ShadowCalculator',
    'ShadowPolygon',
    'ClearSkyModel',
    'calculate_comfort_score',
    'analyze_comfort',
    'generate_recommendations',
    'format_recommendation',
    'AnalysisEngine',
    'AnalysisSettings',
    'normalize_buildings',
]
