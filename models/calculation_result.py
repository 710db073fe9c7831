"""
Calculation result models for solar exposure analysis.

All results are immutable and serialise to plain dictionaries with
datetimes as POSIX timestamps (seconds).
"""

from enum import Enum
from typing import Any, Dict, Optional, Tuple
from dataclasses import dataclass, field
from datetime import date, datetime, time

import pytz


def _timestamp(value: Optional[datetime]) -> Optional[float]:
    return value.timestamp() if value is not None else None


def _plain(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.timestamp()
    if isinstance(value, Enum):
        return value.value
    return value


@dataclass(frozen=True)
class TimeBlock:
    """Contiguous run of sunlit samples."""

    start: datetime
    end: datetime
    duration_minutes: float

    def to_dict(self) -> dict:
        return {
            'start': _timestamp(self.start),
            'end': _timestamp(self.end),
            'duration_minutes': self.duration_minutes,
        }


@dataclass(frozen=True)
class HourlyDataPoint:
    """One sample of the discretised day."""

    time: datetime
    sun_altitude: float  # degrees
    sun_azimuth: float  # degrees, clockwise from north
    in_shadow: bool
    irradiance: float  # W/m²
    shadow_percent: float

    @property
    def hour(self) -> int:
        return self.time.hour

    @property
    def is_sunlit(self) -> bool:
        return not self.in_shadow and self.sun_altitude > 0

    def to_dict(self) -> dict:
        return {
            'time': _timestamp(self.time),
            'hour': self.hour,
            'sun_altitude': self.sun_altitude,
            'sun_azimuth': self.sun_azimuth,
            'in_shadow': self.in_shadow,
            'irradiance': self.irradiance,
            'shadow_percent': self.shadow_percent,
        }


@dataclass(frozen=True)
class SunlightResults:
    first_sun_time: Optional[datetime] = None
    last_sun_time: Optional[datetime] = None
    total_hours: float = 0.0
    direct_hours: float = 0.0
    continuous_blocks: Tuple[TimeBlock, ...] = ()

    def to_dict(self) -> dict:
        return {
            'first_sun_time': _timestamp(self.first_sun_time),
            'last_sun_time': _timestamp(self.last_sun_time),
            'total_hours': self.total_hours,
            'direct_hours': self.direct_hours,
            'continuous_blocks': [b.to_dict() for b in self.continuous_blocks],
        }


@dataclass(frozen=True)
class SolarResults:
    peak_irradiance: float = 0.0  # W/m²
    daily_irradiation: float = 0.0  # Wh/m²
    peak_time: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            'peak_irradiance': self.peak_irradiance,
            'daily_irradiation': self.daily_irradiation,
            'peak_time': _timestamp(self.peak_time),
        }


class RiskLevel(str, Enum):
    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'

    @classmethod
    def from_score(cls, score: float) -> 'RiskLevel':
        if score >= 70:
            return cls.LOW
        if score >= 40:
            return cls.MEDIUM
        return cls.HIGH


class RecommendationKind(str, Enum):
    BEST_NATURAL_LIGHT = 'best_natural_light'
    MORNING_VENTILATION = 'morning_ventilation'
    EVENING_VENTILATION = 'evening_ventilation'
    WINDOWS_OPEN_ALL_DAY = 'windows_open_all_day'
    PEAK_HEAT_CLOSE_BLINDS = 'peak_heat_close_blinds'
    HEAT_MANAGED = 'heat_managed'
    MODERATE_HEAT = 'moderate_heat'
    UPGRADE_GLAZING = 'upgrade_glazing'
    LOW_E_SAVING = 'low_e_saving'
    GLARE_RISK = 'glare_risk'
    DEPLOY_SHADING = 'deploy_shading'
    OPEN_WINDOWS_TIP = 'open_windows_tip'
    CLOSE_WINDOWS_AT_PEAK = 'close_windows_at_peak'
    MORNING_SUN = 'morning_sun'
    LOW_SUNLIGHT = 'low_sunlight'


@dataclass(frozen=True)
class Recommendation:
    """Advisory record: a kind plus the numbers that triggered it."""

    kind: RecommendationKind
    params: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            'kind': self.kind.value,
            'params': {k: _plain(v) for k, v in self.params.items()},
        }


@dataclass(frozen=True)
class ComfortResults:
    risk_level: RiskLevel = RiskLevel.MEDIUM
    score: int = 0
    peak_heat_period: Optional[TimeBlock] = None
    recommendations: Tuple[Recommendation, ...] = ()

    def to_dict(self) -> dict:
        return {
            'risk_level': self.risk_level.value,
            'score': self.score,
            'peak_heat_period': self.peak_heat_period.to_dict() if self.peak_heat_period else None,
            'recommendations': [r.to_dict() for r in self.recommendations],
        }


class TargetType(str, Enum):
    BUILDING = 'building'
    FLOOR = 'floor'
    SITE = 'site'


@dataclass(frozen=True)
class AnalysisResults:
    """Terminal output of one analyze(date) call."""

    target_id: str
    target_type: TargetType
    date: date
    sunlight: SunlightResults
    solar: SolarResults
    comfort: ComfortResults
    hourly_data: Tuple[HourlyDataPoint, ...] = ()
    floor: Optional[int] = None
    scenario_id: Optional[str] = None
    daylight_kind: str = 'normal'
    timezone: str = 'UTC'

    @property
    def sample_count(self) -> int:
        return len(self.hourly_data)

    def to_dict(self) -> dict:
        midnight = pytz.timezone(self.timezone).localize(datetime.combine(self.date, time()))
        return {
            'target_id': self.target_id,
            'target_type': self.target_type.value,
            'floor': self.floor,
            'date': midnight.timestamp(),
            'scenario_id': self.scenario_id,
            'daylight_kind': self.daylight_kind,
            'sunlight': self.sunlight.to_dict(),
            'solar': self.solar.to_dict(),
            'comfort': self.comfort.to_dict(),
            'hourly_data': [p.to_dict() for p in self.hourly_data],
        }
