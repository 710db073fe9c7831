"""
Sun position calculator for determining solar angles at any given time and location.
Wraps the astral ephemeris; the rest of the engine only sees SunPosition and
DaylightWindow values.
"""

import math
import logging
from datetime import datetime, date, time, timedelta
from typing import Tuple, Optional
from dataclasses import dataclass

import pytz
from astral import LocationInfo
from astral.sun import azimuth, elevation, noon, sunrise, sunset

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SunPosition:
    """Sun angles in radians; azimuth clockwise from north."""

    altitude: float
    azimuth: float

    @property
    def altitude_degrees(self) -> float:
        return math.degrees(self.altitude)

    @property
    def azimuth_degrees(self) -> float:
        return math.degrees(self.azimuth)

    @property
    def is_above_horizon(self) -> bool:
        return self.altitude > 0

    @classmethod
    def from_degrees(cls, altitude: float, azimuth: float) -> 'SunPosition':
        return cls(math.radians(altitude), math.radians(azimuth))


@dataclass(frozen=True)
class DaylightWindow:
    """
    Sampling window for one date.

    kind is 'normal' (sun rises and sets), 'polar_day' (sun never sets,
    window covers the whole local day) or 'polar_night' (no window).
    """

    kind: str
    sunrise: Optional[datetime] = None
    sunset: Optional[datetime] = None

    NORMAL = 'normal'
    POLAR_DAY = 'polar_day'
    POLAR_NIGHT = 'polar_night'

    @property
    def has_daylight(self) -> bool:
        return self.sunrise is not None and self.sunset is not None

    @property
    def hours(self) -> float:
        if not self.has_daylight:
            return 0.0
        return (self.sunset - self.sunrise).total_seconds() / 3600.0


class SunPositionCalculator:
    """
    Calculates sun position (azimuth and elevation) for a given location and time.
    """

    def __init__(self, latitude: float, longitude: float, timezone: str = "UTC"):
        """
        Initialize sun position calculator.

        Args:
            latitude: Latitude in decimal degrees (positive for North)
            longitude: Longitude in decimal degrees (positive for East)
            timezone: Timezone name (e.g., "America/New_York")
        """
        self.latitude = latitude
        self.longitude = longitude
        self.tz = pytz.timezone(timezone)
        self.location = LocationInfo(
            name="Site",
            region="",
            timezone=timezone,
            latitude=latitude,
            longitude=longitude
        )

    def _localize(self, dt: datetime) -> datetime:
        if dt.tzinfo is None:
            return self.tz.localize(dt)
        return dt.astimezone(self.tz)

    def get_sun_position(self, dt: datetime) -> Tuple[float, float]:
        """
        Calculate sun azimuth and elevation for a given datetime.

        Args:
            dt: Datetime object (naive values are taken as local time)

        Returns:
            Tuple of (azimuth_degrees, elevation_degrees)
            - Azimuth: 0° = North, 90° = East, 180° = South, 270° = West
            - Elevation: 0° = horizon, 90° = zenith
        """
        dt = self._localize(dt)
        observer = self.location.observer
        return azimuth(observer, dt), elevation(observer, dt)

    def sun_position(self, dt: datetime) -> SunPosition:
        """Sun position in radians for the shadow and irradiance models."""
        azimuth_deg, elevation_deg = self.get_sun_position(dt)
        return SunPosition.from_degrees(elevation_deg, azimuth_deg)

    def is_sun_above_horizon(self, dt: datetime) -> bool:
        _, elevation_deg = self.get_sun_position(dt)
        return elevation_deg > 0

    def get_sunrise_sunset(self, date_obj: date) -> Tuple[datetime, datetime]:
        """
        Get sunrise and sunset times for a given date.

        Args:
            date_obj: Date object

        Returns:
            Tuple of (sunrise, sunset) datetime objects

        Raises:
            ValueError: If the sun does not rise or set on this date
        """
        observer = self.location.observer
        rise = sunrise(observer, date=date_obj, tzinfo=self.tz)
        setting = sunset(observer, date=date_obj, tzinfo=self.tz)
        if setting < rise:
            setting = sunset(observer, date=date_obj + timedelta(days=1), tzinfo=self.tz)
        return rise, setting

    def get_daylight_window(self, date_obj: date) -> DaylightWindow:
        """
        Resolve the daylight window, degrading instead of failing near the poles.

        When the ephemeris has no sunrise or sunset, the sun's elevation at
        solar noon decides between polar day (whole local day) and polar
        night (no daylight).
        """
        try:
            rise, setting = self.get_sunrise_sunset(date_obj)
            return DaylightWindow(DaylightWindow.NORMAL, rise, setting)
        except ValueError as e:
            logger.debug(f"No sunrise/sunset on {date_obj}: {e}")

        solar_noon = noon(self.location.observer, date=date_obj, tzinfo=self.tz)
        if elevation(self.location.observer, solar_noon) > 0:
            logger.warning(f"Polar day on {date_obj} at latitude {self.latitude}: sampling the full day")
            start = self.tz.localize(datetime.combine(date_obj, time()))
            return DaylightWindow(DaylightWindow.POLAR_DAY, start, start + timedelta(days=1))

        logger.warning(f"Polar night on {date_obj} at latitude {self.latitude}: no daylight samples")
        return DaylightWindow(DaylightWindow.POLAR_NIGHT)

    def get_daylight_hours(self, date_obj: date) -> float:
        """
        Calculate total daylight hours for a given date.

        Args:
            date_obj: Date object

        Returns:
            Daylight hours as float (24 for polar day, 0 for polar night)
        """
        return self.get_daylight_window(date_obj).hours
