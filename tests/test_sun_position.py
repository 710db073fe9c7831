"""
Tests for the ephemeris wrapper and daylight windows.
"""

import math
from datetime import date, datetime

import pytest
import pytz

from core.sun_position import DaylightWindow, SunPosition, SunPositionCalculator


@pytest.fixture
def nyc():
    return SunPositionCalculator(40.71, -74.01, 'America/New_York')


@pytest.fixture
def svalbard():
    return SunPositionCalculator(78.22, 15.65)


class TestSunPosition:
    """Tests for the SunPosition value."""

    def test_from_degrees(self):
        sun = SunPosition.from_degrees(30, 180)
        assert sun.altitude == pytest.approx(math.pi / 6)
        assert sun.azimuth == pytest.approx(math.pi)
        assert sun.altitude_degrees == pytest.approx(30)
        assert sun.azimuth_degrees == pytest.approx(180)

    def test_above_horizon(self):
        assert SunPosition.from_degrees(0.1, 90).is_above_horizon
        assert not SunPosition.from_degrees(0, 90).is_above_horizon
        assert not SunPosition.from_degrees(-12, 90).is_above_horizon


class TestSunPositionCalculator:
    """Tests against known solar geometry for New York."""

    def test_summer_noon_elevation(self, nyc):
        azimuth, elevation = nyc.get_sun_position(datetime(2024, 6, 21, 13, 0))
        # 90 - 40.71 + 23.44
        assert elevation == pytest.approx(72.7, abs=1.0)
        assert azimuth == pytest.approx(180, abs=10)

    def test_winter_noon_elevation(self, nyc):
        _, elevation = nyc.get_sun_position(datetime(2024, 12, 21, 12, 0))
        assert elevation == pytest.approx(25.8, abs=1.0)

    def test_morning_sun_in_the_east(self, nyc):
        azimuth, elevation = nyc.get_sun_position(datetime(2024, 6, 21, 8, 0))
        assert 0 < elevation < 45
        assert 45 < azimuth < 110

    def test_naive_datetime_is_local(self, nyc):
        naive = datetime(2024, 6, 21, 9, 30)
        aware = pytz.timezone('America/New_York').localize(naive)
        assert nyc.get_sun_position(naive) == pytest.approx(nyc.get_sun_position(aware))

    def test_aware_datetime_in_other_zone(self, nyc):
        local = pytz.timezone('America/New_York').localize(datetime(2024, 6, 21, 9, 30))
        assert nyc.get_sun_position(local.astimezone(pytz.utc)) == pytest.approx(nyc.get_sun_position(local))

    def test_night(self, nyc):
        assert not nyc.is_sun_above_horizon(datetime(2024, 6, 21, 2, 0))
        assert nyc.is_sun_above_horizon(datetime(2024, 6, 21, 12, 0))

    def test_sun_position_in_radians(self, nyc):
        moment = datetime(2024, 6, 21, 13, 0)
        azimuth, elevation = nyc.get_sun_position(moment)
        sun = nyc.sun_position(moment)
        assert sun.altitude == pytest.approx(math.radians(elevation))
        assert sun.azimuth == pytest.approx(math.radians(azimuth))

    def test_sunrise_before_sunset(self, nyc):
        rise, setting = nyc.get_sunrise_sunset(date(2024, 6, 21))
        assert rise < setting
        assert rise.hour == 5
        assert setting.hour == 20

    def test_daylight_hours_by_season(self, nyc):
        summer = nyc.get_daylight_hours(date(2024, 6, 21))
        winter = nyc.get_daylight_hours(date(2024, 12, 21))
        assert 14.5 < summer < 15.6
        assert 9.0 < winter < 9.6

    def test_southern_hemisphere_seasons(self):
        sydney = SunPositionCalculator(-33.87, 151.21, 'Australia/Sydney')
        assert sydney.get_daylight_hours(date(2024, 12, 21)) > sydney.get_daylight_hours(date(2024, 6, 21))


class TestDaylightWindow:
    """Tests for normal and polar daylight windows."""

    def test_normal_window(self, nyc):
        window = nyc.get_daylight_window(date(2024, 3, 20))
        assert window.kind == DaylightWindow.NORMAL
        assert window.has_daylight
        assert window.hours == pytest.approx(12.1, abs=0.3)

    def test_polar_day(self, svalbard):
        window = svalbard.get_daylight_window(date(2024, 6, 21))
        assert window.kind == DaylightWindow.POLAR_DAY
        assert window.hours == pytest.approx(24.0)
        assert (window.sunrise.hour, window.sunrise.minute) == (0, 0)

    def test_polar_night(self, svalbard):
        window = svalbard.get_daylight_window(date(2024, 12, 21))
        assert window.kind == DaylightWindow.POLAR_NIGHT
        assert not window.has_daylight
        assert window.hours == 0.0
        assert svalbard.get_daylight_hours(date(2024, 12, 21)) == 0.0

    def test_polar_sunrise_sunset_raises(self, svalbard):
        with pytest.raises(ValueError):
            svalbard.get_sunrise_sunset(date(2024, 12, 21))
