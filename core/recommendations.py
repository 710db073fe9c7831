"""
Advisory recommendations derived from analysis aggregates.

generate_recommendations is a pure function of the aggregates and the
scenario and returns structured records; format_recommendation renders a
record as English text so other presentation layers can word it their own way.
"""

from datetime import datetime, timedelta
from typing import Callable, Dict, List, Tuple

from models.calculation_result import (
    Recommendation,
    RecommendationKind,
    SolarResults,
    SunlightResults,
)
from models.scenario import GlazingType, Scenario

Kind = RecommendationKind


def _device_name(scenario: Scenario) -> str:
    if scenario.shading.has_interior:
        return scenario.shading.interior.value
    return scenario.shading.exterior.value


def generate_recommendations(
    sunlight: SunlightResults,
    solar: SolarResults,
    score: int,
    scenario: Scenario
) -> Tuple[Recommendation, ...]:
    """
    Build the recommendation list for one analysis.

    Args:
        sunlight: Sunlight aggregates
        solar: Solar aggregates
        score: Comfort score
        scenario: Envelope scenario the aggregates were computed with

    Returns:
        Tuple of Recommendation records in presentation order
    """
    recs: List[Recommendation] = []
    first_sun = sunlight.first_sun_time
    last_sun = sunlight.last_sun_time
    peak_time = solar.peak_time
    peak = solar.peak_irradiance

    if first_sun and last_sun:
        recs.append(Recommendation(Kind.BEST_NATURAL_LIGHT, {
            'start': first_sun, 'end': last_sun, 'hours': sunlight.total_hours,
        }))

    # Ventilation timing around the peak
    if first_sun and peak_time:
        if peak > 500:
            recs.append(Recommendation(Kind.MORNING_VENTILATION, {
                'open_time': first_sun, 'close_time': peak_time - timedelta(hours=1),
            }))
            reopen = peak_time + timedelta(hours=2)
            if last_sun and reopen < last_sun:
                recs.append(Recommendation(Kind.EVENING_VENTILATION, {'reopen_time': reopen}))
        else:
            recs.append(Recommendation(Kind.WINDOWS_OPEN_ALL_DAY))

    if peak > 700 and peak_time:
        reduction = scenario.shading.reduction_factor
        if reduction >= 0.9:
            recs.append(Recommendation(Kind.PEAK_HEAT_CLOSE_BLINDS, {
                'peak_time': peak_time,
                'irradiance': round(peak),
                'close_from': peak_time - timedelta(hours=1),
                'close_until': peak_time + timedelta(hours=2),
            }))
        else:
            recs.append(Recommendation(Kind.HEAT_MANAGED, {
                'device': _device_name(scenario),
                'peak_time': peak_time,
                'reduction_percent': round((1 - reduction) * 100),
            }))
    elif peak > 500 and peak_time:
        recs.append(Recommendation(Kind.MODERATE_HEAT, {'peak_time': peak_time, 'irradiance': round(peak)}))

    glazing = scenario.glazing
    if glazing.type is GlazingType.SINGLE and solar.daily_irradiation > 3000:
        recs.append(Recommendation(Kind.UPGRADE_GLAZING, {
            'potential_reduction': round(solar.daily_irradiation * 0.45),
        }))
    elif glazing.type is GlazingType.LOW_E:
        recs.append(Recommendation(Kind.LOW_E_SAVING, {
            'blocked_percent': round((1 - glazing.solar_transmittance) * 100),
            'daily_saving': round(solar.daily_irradiation * 0.3),
        }))

    # Glare: first sun block starting in the 14:00-18:00 band
    afternoon = [b for b in sunlight.continuous_blocks if 14 <= b.start.hour < 18]
    if afternoon:
        block = afternoon[0]
        if scenario.shading.has_interior:
            recs.append(Recommendation(Kind.DEPLOY_SHADING, {
                'device': scenario.shading.interior.value, 'start': block.start, 'end': block.end,
            }))
        else:
            recs.append(Recommendation(Kind.GLARE_RISK, {'start': block.start, 'end': block.end}))

    if not scenario.window.is_open and score < 60 and peak < 700:
        recs.append(Recommendation(Kind.OPEN_WINDOWS_TIP, {
            'current_score': score, 'improved_score': min(100, score + 10),
        }))
    elif scenario.window.is_open and peak > 700 and peak_time:
        recs.append(Recommendation(Kind.CLOSE_WINDOWS_AT_PEAK, {
            'close_from': peak_time - timedelta(minutes=30),
            'close_until': peak_time + timedelta(hours=1),
        }))

    if first_sun and first_sun.hour < 10:
        recs.append(Recommendation(Kind.MORNING_SUN, {'time': first_sun}))

    if sunlight.total_hours < 2:
        recs.append(Recommendation(Kind.LOW_SUNLIGHT, {'hours': sunlight.total_hours}))

    return tuple(recs)


def format_time(value: datetime) -> str:
    """12-hour clock, e.g. '07:15 AM'."""
    return value.strftime('%I:%M %p')


_TEMPLATES: Dict[RecommendationKind, Callable[[dict], str]] = {
    Kind.BEST_NATURAL_LIGHT: lambda p: (
        f"Best natural light: {format_time(p['start'])} to {format_time(p['end'])} "
        f"({p['hours']:.1f} hours total)"
    ),
    Kind.MORNING_VENTILATION: lambda p: (
        f"Morning ventilation: Open windows {format_time(p['open_time'])} - "
        f"{format_time(p['close_time'])} before heat builds"
    ),
    Kind.EVENING_VENTILATION: lambda p: (
        f"Evening ventilation: Re-open windows after {format_time(p['reopen_time'])} when heat subsides"
    ),
    Kind.WINDOWS_OPEN_ALL_DAY: lambda p: "Windows can remain open throughout the day (low heat risk)",
    Kind.PEAK_HEAT_CLOSE_BLINDS: lambda p: (
        f"Peak heat at {format_time(p['peak_time'])} ({p['irradiance']} W/m²). "
        f"Close blinds {format_time(p['close_from'])} - {format_time(p['close_until'])}"
    ),
    Kind.HEAT_MANAGED: lambda p: (
        f"Heat managed: {p['device']} active reduces peak heat ({format_time(p['peak_time'])}) "
        f"by {p['reduction_percent']}%"
    ),
    Kind.MODERATE_HEAT: lambda p: (
        f"Moderate heat at {format_time(p['peak_time'])} ({p['irradiance']} W/m²). Consider shading."
    ),
    Kind.UPGRADE_GLAZING: lambda p: (
        f"Upgrade glazing: Low-E glass could reduce daily heat gain by ~{p['potential_reduction']} Wh/m²"
    ),
    Kind.LOW_E_SAVING: lambda p: (
        f"Low-E glass blocking {p['blocked_percent']}% of solar heat "
        f"(saving ~{p['daily_saving']} Wh/m² daily)"
    ),
    Kind.GLARE_RISK: lambda p: (
        f"Glare risk: {format_time(p['start'])} - {format_time(p['end'])}. Add blinds for screen visibility"
    ),
    Kind.DEPLOY_SHADING: lambda p: (
        f"Deploy {p['device']} during {format_time(p['start'])} - {format_time(p['end'])} to prevent glare"
    ),
    Kind.OPEN_WINDOWS_TIP: lambda p: (
        f"Tip: Opening windows could improve comfort score from {p['current_score']} to ~{p['improved_score']}"
    ),
    Kind.CLOSE_WINDOWS_AT_PEAK: lambda p: (
        f"Close windows {format_time(p['close_from'])} - {format_time(p['close_until'])} "
        f"to block hot outside air"
    ),
    Kind.MORNING_SUN: lambda p: (
        f"Morning sun {format_time(p['time'])}: Ideal for plants needing gentle light"
    ),
    Kind.LOW_SUNLIGHT: lambda p: (
        f"Only {p['hours']:.1f} hrs sunlight. Use 400+ lux task lighting for workspaces"
    ),
}


def format_recommendation(recommendation: Recommendation) -> str:
    """Render a recommendation record as an English sentence."""
    return _TEMPLATES[recommendation.kind](recommendation.params)


def format_recommendations(recommendations) -> List[str]:
    return [format_recommendation(r) for r in recommendations]
