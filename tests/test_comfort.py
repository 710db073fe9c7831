"""
Tests for comfort scoring and the peak heat period.
"""

from datetime import datetime, timedelta

import pytest

from models.calculation_result import RiskLevel, SolarResults, SunlightResults, TimeBlock
from models.scenario import (
    DEFAULT_SCENARIO,
    ExteriorShading,
    GlazingConfig,
    GlazingType,
    InteriorShading,
    Scenario,
    ShadingConfig,
    WindowConfig,
)
from core.comfort import analyze_comfort, calculate_comfort_score, find_peak_heat_period


def sunlight(hours):
    return SunlightResults(total_hours=hours, direct_hours=hours)


def solar(peak):
    return SolarResults(peak_irradiance=peak)


def with_glazing(glazing_type):
    return Scenario(id=glazing_type.value, name=glazing_type.value, glazing=GlazingConfig.for_type(glazing_type))


class TestComfortScore:
    """Tests for calculate_comfort_score."""

    def test_ideal_duration(self):
        # 70 base, +10 for 4-6 hours, +2 for double glazing
        assert calculate_comfort_score(sunlight(5), solar(300), DEFAULT_SCENARIO) == 82

    def test_little_sun_penalized(self):
        assert calculate_comfort_score(sunlight(1), solar(300), DEFAULT_SCENARIO) == 52

    def test_long_hot_day(self):
        # 70 - (12 - 8) * 3 - 15 + 2
        assert calculate_comfort_score(sunlight(12), solar(900), DEFAULT_SCENARIO) == 45

    def test_moderate_peak(self):
        assert calculate_comfort_score(sunlight(3), solar(650), DEFAULT_SCENARIO) == 62

    def test_clamped_low(self):
        scenario = with_glazing(GlazingType.SINGLE)
        assert calculate_comfort_score(sunlight(30), solar(900), scenario) == 0

    def test_clamped_high(self):
        scenario = Scenario(
            id='best',
            name='Best',
            window=WindowConfig.opened(),
            glazing=GlazingConfig.for_type(GlazingType.LOW_E),
            shading=ShadingConfig(InteriorShading.NONE, ExteriorShading.NONE, 0.2),
        )
        assert calculate_comfort_score(sunlight(5), solar(0), scenario) == 100

    def test_glazing_ordering(self):
        scores = [
            calculate_comfort_score(sunlight(7), solar(650), with_glazing(g))
            for g in (GlazingType.SINGLE, GlazingType.DOUBLE, GlazingType.TRIPLE, GlazingType.LOW_E)
        ]
        assert scores == sorted(scores)
        assert len(set(scores)) == 4

    def test_shading_bonus_needs_long_sun(self):
        shaded = Scenario(id='s', name='S', shading=ShadingConfig.for_devices(InteriorShading.CURTAINS))
        # round((1 - 0.6) * 15) = 6
        assert calculate_comfort_score(sunlight(5), solar(300), shaded) == 88
        assert calculate_comfort_score(sunlight(3), solar(300), shaded) == calculate_comfort_score(
            sunlight(3), solar(300), DEFAULT_SCENARIO
        )

    def test_ventilation_damped_in_heat(self):
        opened = Scenario(id='o', name='O', window=WindowConfig.opened())
        # 70 + 10 - 10 + 2 + 8 * 0.3
        assert calculate_comfort_score(sunlight(5), solar(750), opened) == 74
        assert calculate_comfort_score(sunlight(5), solar(300), opened) == 90


class TestRiskLevel:
    @pytest.mark.parametrize("score,level", [
        (100, RiskLevel.LOW),
        (70, RiskLevel.LOW),
        (69, RiskLevel.MEDIUM),
        (40, RiskLevel.MEDIUM),
        (39, RiskLevel.HIGH),
        (0, RiskLevel.HIGH),
    ])
    def test_tiers(self, score, level):
        assert RiskLevel.from_score(score) is level


class TestPeakHeatPeriod:
    """Tests for the longest sun block."""

    def _block(self, start_hour, minutes):
        start = datetime(2024, 6, 21, start_hour)
        return TimeBlock(start, start + timedelta(minutes=minutes), minutes)

    def test_longest_block(self):
        blocks = [self._block(6, 60), self._block(9, 180), self._block(15, 90)]
        assert find_peak_heat_period(blocks) is blocks[1]

    def test_earliest_wins_tie(self):
        blocks = [self._block(7, 120), self._block(13, 120)]
        assert find_peak_heat_period(blocks) is blocks[0]

    def test_no_blocks(self):
        assert find_peak_heat_period([]) is None


class TestAnalyzeComfort:
    def test_bundles_score_and_recommendations(self):
        result = analyze_comfort(sunlight(1), solar(0), DEFAULT_SCENARIO)
        assert result.score == 52
        assert result.risk_level is RiskLevel.MEDIUM
        assert result.peak_heat_period is None
        assert result.recommendations
