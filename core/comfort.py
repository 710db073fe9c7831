"""
Thermal comfort scoring from daily sunlight and solar aggregates.
"""

from typing import Optional, Sequence

from models.calculation_result import (
    ComfortResults,
    RiskLevel,
    SolarResults,
    SunlightResults,
    TimeBlock,
)
from models.scenario import Scenario
from .recommendations import generate_recommendations

BASE_SCORE = 70


def calculate_comfort_score(sunlight: SunlightResults, solar: SolarResults, scenario: Scenario) -> int:
    """
    Comfort score on a 0-100 scale.

    Starts from 70 and adjusts for sun-hour duration, peak irradiance,
    glazing type, shading effectiveness and ventilation.

    Args:
        sunlight: Sunlight aggregates
        solar: Solar aggregates (already scaled by the scenario)
        scenario: Envelope scenario

    Returns:
        Integer score clamped to [0, 100]
    """
    score = float(BASE_SCORE)
    hours = sunlight.total_hours

    if hours < 2:
        score -= 20
    elif hours > 8:
        score -= (hours - 8) * 3
    elif 4 <= hours <= 6:
        score += 10

    if solar.peak_irradiance > 800:
        score -= 15
    elif solar.peak_irradiance > 600:
        score -= 10

    score += scenario.glazing.comfort_bonus

    reduction = scenario.shading.reduction_factor
    if hours > 4 and reduction < 0.8:
        score += round((1 - reduction) * 15)

    if scenario.window.is_open:
        ventilation_bonus = scenario.window.ventilation_factor * 10
        # open windows help less when it is hot outside
        if solar.peak_irradiance > 700:
            ventilation_bonus *= 0.3
        score += ventilation_bonus

    return max(0, min(100, round(score)))


def find_peak_heat_period(blocks: Sequence[TimeBlock]) -> Optional[TimeBlock]:
    """Longest contiguous sun block; the earliest wins a tie."""
    longest = None
    for block in blocks:
        if longest is None or block.duration_minutes > longest.duration_minutes:
            longest = block
    return longest


def analyze_comfort(sunlight: SunlightResults, solar: SolarResults, scenario: Scenario) -> ComfortResults:
    """Score, risk tier, peak heat period and recommendations in one result."""
    score = calculate_comfort_score(sunlight, solar, scenario)
    return ComfortResults(
        risk_level=RiskLevel.from_score(score),
        score=score,
        peak_heat_period=find_peak_heat_period(sunlight.continuous_blocks),
        recommendations=generate_recommendations(sunlight, solar, score, scenario),
    )
