"""
Solar exposure engine.

One AnalysisEngine call samples a day from sunrise to sunset, tests the
target for shadow from surrounding buildings, applies the clear-sky
irradiance model scaled by the scenario and aggregates the series into
sunlight, solar and comfort results.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Iterator, List, Optional, Sequence
from dataclasses import dataclass

import pytz

from models.building import Building, Location, Point2D, SiteConfig
from models.calculation_result import (
    AnalysisResults,
    HourlyDataPoint,
    SolarResults,
    SunlightResults,
    TargetType,
    TimeBlock,
)
from models.scenario import DEFAULT_SCENARIO, Scenario
from geometry.transforms import image_to_world, polygon_centroid
from geometry.validation import validate_and_normalize_polygon, validate_floor_data, validate_site_config
from utils.config_loader import get_config_value
from utils.errors import ConfigurationError, GeometryValidationError
from .comfort import analyze_comfort
from .irradiance import ClearSkyModel, DIFFUSE_RATIO, EXTINCTION_COEFFICIENT, SOLAR_CONSTANT
from .shadow_calculator import SHADOW_MODES, ShadowCalculator
from .sun_position import DaylightWindow, SunPositionCalculator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisSettings:
    """Tunable parameters of one analysis run."""

    sample_interval_minutes: int = 15
    shadow_sample_density: int = 8
    shadow_mode: str = 'outline'
    solar_constant: float = SOLAR_CONSTANT
    extinction_coefficient: float = EXTINCTION_COEFFICIENT
    diffuse_ratio: float = DIFFUSE_RATIO
    cache_tolerance_degrees: float = 0.5
    epsilon: float = 0.001
    min_area_image: float = 100.0
    min_area_world: float = 1.0
    max_aspect_ratio: float = 100.0
    self_intersection_vertex_limit: int = 100

    def __post_init__(self):
        if self.sample_interval_minutes <= 0:
            raise ConfigurationError(
                f"sample_interval_minutes must be positive, got {self.sample_interval_minutes}"
            )
        if self.shadow_sample_density < 1:
            raise ConfigurationError(
                f"shadow_sample_density must be at least 1, got {self.shadow_sample_density}"
            )
        if self.shadow_mode not in SHADOW_MODES:
            raise ConfigurationError(f"shadow_mode must be one of {SHADOW_MODES}, got '{self.shadow_mode}'")
        if self.solar_constant <= 0 or self.extinction_coefficient < 0:
            raise ConfigurationError('solar_constant must be positive and extinction_coefficient non-negative')
        if not 0 <= self.diffuse_ratio <= 1:
            raise ConfigurationError(f"diffuse_ratio must be in [0, 1], got {self.diffuse_ratio}")

    @property
    def interval(self) -> timedelta:
        return timedelta(minutes=self.sample_interval_minutes)

    @property
    def interval_hours(self) -> float:
        return self.sample_interval_minutes / 60.0

    @classmethod
    def from_config(cls, config: dict) -> 'AnalysisSettings':
        """
        Build settings from a loaded configuration mapping.

        Missing keys fall back to the defaults; unknown keys are ignored.
        """
        defaults = cls()

        def value(path, default, cast):
            raw = get_config_value(config, path, default)
            try:
                return cast(raw)
            except (TypeError, ValueError) as e:
                raise ConfigurationError(f"Invalid value for '{path}': {raw!r}") from e

        return cls(
            sample_interval_minutes=value('analysis.sample_interval_minutes', defaults.sample_interval_minutes, int),
            shadow_sample_density=value('analysis.shadow_sample_density', defaults.shadow_sample_density, int),
            shadow_mode=value('analysis.shadow_mode', defaults.shadow_mode, str),
            solar_constant=value('irradiance.solar_constant', defaults.solar_constant, float),
            extinction_coefficient=value(
                'irradiance.extinction_coefficient', defaults.extinction_coefficient, float
            ),
            diffuse_ratio=value('irradiance.diffuse_ratio', defaults.diffuse_ratio, float),
            cache_tolerance_degrees=value(
                'shadow.cache_tolerance_degrees', defaults.cache_tolerance_degrees, float
            ),
            epsilon=value('validation.epsilon', defaults.epsilon, float),
            min_area_image=value('validation.min_area_image', defaults.min_area_image, float),
            min_area_world=value('validation.min_area_world', defaults.min_area_world, float),
            max_aspect_ratio=value('validation.max_aspect_ratio', defaults.max_aspect_ratio, float),
            self_intersection_vertex_limit=value(
                'validation.self_intersection_vertex_limit', defaults.self_intersection_vertex_limit, int
            ),
        )


def find_continuous_blocks(hourly_data: Sequence[HourlyDataPoint], interval_minutes: float) -> List[TimeBlock]:
    """Runs of consecutive sunlit samples."""
    blocks = []
    start = end = None
    count = 0

    for sample in hourly_data:
        if sample.is_sunlit:
            if start is None:
                start = sample.time
            end = sample.time
            count += 1
        elif start is not None:
            blocks.append(TimeBlock(start, end, count * interval_minutes))
            start = end = None
            count = 0

    if start is not None:
        blocks.append(TimeBlock(start, end, count * interval_minutes))

    return blocks


def analyze_sunlight(hourly_data: Sequence[HourlyDataPoint], interval_minutes: float) -> SunlightResults:
    sunny = [d for d in hourly_data if d.is_sunlit]
    total_hours = len(sunny) * interval_minutes / 60.0

    return SunlightResults(
        first_sun_time=sunny[0].time if sunny else None,
        last_sun_time=sunny[-1].time if sunny else None,
        total_hours=total_hours,
        # no indirect-light model, so direct hours equal total hours
        direct_hours=total_hours,
        continuous_blocks=tuple(find_continuous_blocks(hourly_data, interval_minutes)),
    )


def analyze_solar(hourly_data: Sequence[HourlyDataPoint], interval_minutes: float) -> SolarResults:
    peak = 0.0
    peak_time = None
    total = 0.0

    for sample in hourly_data:
        if sample.irradiance > peak:
            peak = sample.irradiance
            peak_time = sample.time
        # W/m² over one interval -> Wh/m²
        total += sample.irradiance * interval_minutes / 60.0

    return SolarResults(peak_irradiance=peak, daily_irradiation=total, peak_time=peak_time)


def normalize_buildings(
    buildings: Sequence[Building],
    site_config: Optional[SiteConfig] = None,
    settings: Optional[AnalysisSettings] = None
) -> List[Building]:
    """
    Validate buildings and return normalized world-space copies.

    Args:
        buildings: Buildings to prepare (left untouched)
        site_config: Image-to-world mapping; None if footprints are already in meters
        settings: Validation thresholds

    Returns:
        New Building objects with counter-clockwise world-space footprints

    Raises:
        GeometryValidationError: On an invalid site config, bad floor data or unusable footprint
    """
    settings = settings or AnalysisSettings()

    if site_config is not None:
        site_result = validate_site_config(site_config)
        if not site_result.is_valid:
            raise GeometryValidationError('Invalid site configuration', site_result.errors, site_result.warnings)

    coordinate_system = 'image' if site_config is not None else 'world'
    min_area = settings.min_area_image if site_config is not None else settings.min_area_world

    prepared = []
    for building in buildings:
        floor_result = validate_floor_data(building.floors, building.floor_height)
        if not floor_result.is_valid:
            raise GeometryValidationError(
                f"Building '{building.name}' has invalid floor data",
                errors=floor_result.errors,
                warnings=floor_result.warnings,
                building_id=building.id,
            )

        result = validate_and_normalize_polygon(
            building.footprint,
            epsilon=settings.epsilon,
            min_area=min_area,
            max_aspect_ratio=settings.max_aspect_ratio,
            coordinate_system=coordinate_system,
            self_intersection_vertex_limit=settings.self_intersection_vertex_limit,
        )
        if not result.is_valid:
            raise GeometryValidationError(
                f"Building '{building.name}' has an unusable footprint",
                errors=result.errors,
                warnings=result.warnings,
                building_id=building.id,
            )

        footprint = result.normalized
        if site_config is not None:
            # image and world frames share handedness, so winding survives
            footprint = image_to_world(footprint, site_config)
        prepared.append(building.with_footprint(footprint))

    return prepared


class AnalysisEngine:
    """
    Analyzes sun, shadow and heat for one target over a day.

    The engine is parameterized by exactly one scenario. Footprints are
    validated and normalized when the engine is built; the caller's
    Building objects are never modified. With a site_config the footprints
    are taken as image pixels and transformed to world meters, otherwise
    they are taken as world meters already.
    """

    def __init__(
        self,
        location: Location,
        buildings: Sequence[Building],
        site_config: Optional[SiteConfig] = None,
        target_building_id: Optional[str] = None,
        target_floor: Optional[int] = None,
        scenario: Optional[Scenario] = None,
        settings: Optional[AnalysisSettings] = None
    ):
        """
        Initialize analysis engine.

        Args:
            location: Site location and timezone
            buildings: Buildings on the site
            site_config: Image-to-world mapping, None for world-space footprints
            target_building_id: Building to analyze, None for the whole site
            target_floor: 1-based floor of the target building
            scenario: Envelope scenario, defaults to closed double glazing without shading
            settings: Analysis settings

        Raises:
            GeometryValidationError: If the site config or a footprint is unusable
        """
        self.location = location
        self.settings = settings or AnalysisSettings()
        self.scenario = scenario or DEFAULT_SCENARIO
        self.site_config = site_config
        self.buildings: List[Building] = normalize_buildings(buildings, site_config, self.settings)

        self.target_building = self._resolve_target(target_building_id)
        self.target_floor = self._resolve_floor(target_floor)

        self.sun_calculator = SunPositionCalculator(location.latitude, location.longitude, location.timezone)
        self.shadow_calculator = ShadowCalculator(
            cache_tolerance_degrees=self.settings.cache_tolerance_degrees,
            mode=self.settings.shadow_mode,
        )
        self.sky_model = ClearSkyModel(
            solar_constant=self.settings.solar_constant,
            extinction_coefficient=self.settings.extinction_coefficient,
            diffuse_ratio=self.settings.diffuse_ratio,
        )

    def _resolve_target(self, target_building_id: Optional[str]) -> Optional[Building]:
        if target_building_id is None:
            return None
        for building in self.buildings:
            if building.id == target_building_id:
                return building
        logger.warning(f"Target building '{target_building_id}' not found, analyzing the whole site")
        return None

    def _resolve_floor(self, target_floor: Optional[int]) -> Optional[int]:
        if target_floor is None or self.target_building is None:
            return None
        if not 1 <= target_floor <= self.target_building.floors:
            logger.warning(
                f"Floor {target_floor} outside 1-{self.target_building.floors} "
                f"for '{self.target_building.name}', analyzing the whole building"
            )
            return None
        return target_floor

    @property
    def target_height(self) -> float:
        """Height of the analyzed plane: mid-floor, mid-building or ground."""
        if self.target_building is None:
            return 0.0
        if self.target_floor is not None:
            return (self.target_floor - 0.5) * self.target_building.floor_height
        return self.target_building.total_height / 2

    @property
    def target_point(self) -> Point2D:
        """Centroid of the target footprint, or the mean building centroid for a site."""
        if self.target_building is not None:
            return polygon_centroid(self.target_building.footprint)
        if not self.buildings:
            return Point2D(0.0, 0.0)
        return polygon_centroid([polygon_centroid(b.footprint) for b in self.buildings])

    def _sample_times(self, window: DaylightWindow) -> Iterator[datetime]:
        if not window.has_daylight:
            return

        step = self.settings.interval
        end = window.sunset
        if window.kind == DaylightWindow.POLAR_DAY:
            end = end - step

        tz = self.sun_calculator.tz
        current = window.sunrise.astimezone(pytz.utc)
        end = end.astimezone(pytz.utc)
        while current <= end:
            yield current.astimezone(tz)
            current += step

    def generate_hourly_data(self, window: DaylightWindow) -> List[HourlyDataPoint]:
        """Sample the daylight window at the configured interval."""
        data = []
        target = self.target_building
        check_shadow = target is not None and len(self.buildings) > 1
        target_point = self.target_point
        target_height = self.target_height
        glazing = self.scenario.glazing.solar_transmittance
        shading = self.scenario.shading.reduction_factor

        for moment in self._sample_times(window):
            sun = self.sun_calculator.sun_position(moment)
            altitude = sun.altitude_degrees

            in_shadow = False
            shadow_percent = 0.0
            if check_shadow:
                in_shadow = self.shadow_calculator.is_point_in_shadow(
                    target_point, self.buildings, sun, target.id, target_height
                )
                if altitude > 0:
                    shadow_percent = self.shadow_calculator.calculate_shadow_coverage(
                        target, self.buildings, sun, target_height, self.settings.shadow_sample_density
                    )
                else:
                    shadow_percent = 100.0

            irradiance = self.sky_model.calculate(altitude, in_shadow, glazing, shading)

            data.append(HourlyDataPoint(
                time=moment,
                sun_altitude=altitude,
                sun_azimuth=sun.azimuth_degrees,
                in_shadow=in_shadow,
                irradiance=irradiance.total,
                shadow_percent=shadow_percent,
            ))

        return data

    def analyze(self, analysis_date: date) -> AnalysisResults:
        """
        Run the full analysis for one date.

        Args:
            analysis_date: Calendar date in the location's timezone

        Returns:
            AnalysisResults; degenerate inputs (no target, no buildings,
            polar day or night) still give a well-formed result
        """
        if isinstance(analysis_date, datetime):
            analysis_date = analysis_date.date()

        target = self.target_building
        logger.info(
            f"Analyzing {target.name if target else 'site'} on {analysis_date} "
            f"(scenario '{self.scenario.id}', {len(self.buildings)} buildings)"
        )

        self.shadow_calculator.clear()
        window = self.sun_calculator.get_daylight_window(analysis_date)
        hourly_data = self.generate_hourly_data(window)

        interval = self.settings.sample_interval_minutes
        sunlight = analyze_sunlight(hourly_data, interval)
        solar = analyze_solar(hourly_data, interval)
        comfort = analyze_comfort(sunlight, solar, self.scenario)

        if target is None:
            target_type = TargetType.SITE
        elif self.target_floor is not None:
            target_type = TargetType.FLOOR
        else:
            target_type = TargetType.BUILDING

        logger.info(
            f"Analysis complete: {len(hourly_data)} samples ({window.kind}), "
            f"{sunlight.total_hours:.2f} sun hours, peak {solar.peak_irradiance:.0f} W/m², "
            f"comfort {comfort.score} ({comfort.risk_level.value})"
        )

        return AnalysisResults(
            target_id=target.id if target else 'site',
            target_type=target_type,
            date=analysis_date,
            sunlight=sunlight,
            solar=solar,
            comfort=comfort,
            hourly_data=tuple(hourly_data),
            floor=self.target_floor,
            scenario_id=self.scenario.id,
            daylight_kind=window.kind,
            timezone=self.location.timezone,
        )

