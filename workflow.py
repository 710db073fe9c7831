"""
Analysis workflow functions for the SunScope solar exposure engine.

This module composes validation, footprint preparation and the analysis
engine into the calls an application makes: prepare a site, run one
analysis, compare seasons or scenarios, and analyze a batch of dates.
"""

import logging
from concurrent.futures import ProcessPoolExecutor, as_completed
from datetime import date
from typing import Callable, Dict, List, Optional, Sequence

from models.building import Building, Location, SiteConfig
from models.calculation_result import AnalysisResults
from models.scenario import SCENARIO_PRESETS, Scenario
from core import AnalysisEngine, AnalysisSettings
from core.analysis_engine import normalize_buildings
from geometry.validation import format_validation_message, validate_buildings
from utils.config_loader import get_config_value
from utils.errors import GeometryValidationError

logger = logging.getLogger(__name__)

# one hour of solar time either side of Greenwich
UTC_LONGITUDE_LIMIT = 15.0


def make_location(
    latitude: float,
    longitude: float,
    config: Optional[dict] = None,
    city: Optional[str] = None
) -> Location:
    """
    Location with the timezone taken from 'location.timezone' (UTC by default).

    Analysis dates are local calendar days, so the timezone should be set
    per site. UTC far from Greenwich shifts the day being analyzed.
    """
    timezone = get_config_value(config or {}, 'location.timezone', 'UTC')
    if timezone == 'UTC' and abs(longitude) > UTC_LONGITUDE_LIMIT:
        logger.warning(
            f"Site at longitude {longitude}° uses UTC; set location.timezone "
            f"so analysis dates follow the local calendar day"
        )
    return Location(latitude=latitude, longitude=longitude, timezone=timezone, city=city)


def prepare_buildings(
    buildings: Sequence[Building],
    site_config: Optional[SiteConfig] = None,
    config: Optional[dict] = None
) -> List[Building]:
    """
    Validate buildings and convert their footprints to world space.

    Args:
        buildings: Buildings with image-space footprints (world space if site_config is None)
        site_config: Site configuration of the plan the footprints were drawn on
        config: Configuration dictionary

    Returns:
        Validated world-space copies of the buildings

    Raises:
        GeometryValidationError: For the first building that cannot be used
    """
    settings = AnalysisSettings.from_config(config or {})
    logger.info(f"Preparing {len(buildings)} building(s)")

    if site_config is not None:
        results = validate_buildings(buildings, site_config)
        for building, (name, result) in zip(buildings, results):
            if result.errors or result.warnings:
                logger.info(format_validation_message(result, name))
            if not result.is_valid:
                raise GeometryValidationError(
                    f"Building '{name}' failed validation",
                    errors=result.errors,
                    warnings=result.warnings,
                    building_id=building.id,
                )

    prepared = normalize_buildings(buildings, site_config, settings)
    logger.info(f"Prepared {len(prepared)} building(s) in world coordinates")
    return prepared


def run_analysis(
    location: Location,
    buildings: Sequence[Building],
    analysis_date: date,
    target_building_id: Optional[str] = None,
    target_floor: Optional[int] = None,
    scenario: Optional[Scenario] = None,
    site_config: Optional[SiteConfig] = None,
    config: Optional[dict] = None
) -> AnalysisResults:
    """
    Run a single analysis.

    Args:
        location: Site location
        buildings: Buildings on the site
        analysis_date: Date to analyze
        target_building_id: Building to analyze, None for the whole site
        target_floor: Floor of the target building
        scenario: Envelope scenario
        site_config: Site configuration for image-space footprints
        config: Configuration dictionary

    Returns:
        AnalysisResults
    """
    settings = AnalysisSettings.from_config(config or {})
    engine = AnalysisEngine(
        location,
        buildings,
        site_config=site_config,
        target_building_id=target_building_id,
        target_floor=target_floor,
        scenario=scenario,
        settings=settings,
    )
    return engine.analyze(analysis_date)


def solstice_dates(latitude: float, year: int) -> Dict[str, date]:
    """Summer and winter solstice dates for the hemisphere of a latitude."""
    june = date(year, 6, 21)
    december = date(year, 12, 21)
    if latitude >= 0:
        return {'summer': june, 'winter': december}
    return {'summer': december, 'winter': june}


def compare_seasons(
    location: Location,
    buildings: Sequence[Building],
    year: Optional[int] = None,
    target_building_id: Optional[str] = None,
    target_floor: Optional[int] = None,
    scenario: Optional[Scenario] = None,
    site_config: Optional[SiteConfig] = None,
    config: Optional[dict] = None
) -> Dict[str, AnalysisResults]:
    """
    Analyze the summer and winter solstice of a year.

    Returns:
        Dictionary with 'summer' and 'winter' results
    """
    year = year or date.today().year
    settings = AnalysisSettings.from_config(config or {})
    engine = AnalysisEngine(
        location,
        buildings,
        site_config=site_config,
        target_building_id=target_building_id,
        target_floor=target_floor,
        scenario=scenario,
        settings=settings,
    )

    results = {season: engine.analyze(day) for season, day in solstice_dates(location.latitude, year).items()}

    difference = results['summer'].sunlight.total_hours - results['winter'].sunlight.total_hours
    logger.info(f"Seasonal comparison {year}: {difference:.1f} more sun hours in summer")
    return results


def compare_scenarios(
    location: Location,
    buildings: Sequence[Building],
    analysis_date: date,
    scenarios: Optional[Sequence[Scenario]] = None,
    target_building_id: Optional[str] = None,
    target_floor: Optional[int] = None,
    site_config: Optional[SiteConfig] = None,
    config: Optional[dict] = None
) -> Dict[str, AnalysisResults]:
    """
    Analyze the same date once per scenario.

    Args:
        scenarios: Scenarios to compare, defaults to the built-in presets

    Returns:
        Results keyed by scenario id, in scenario order
    """
    scenarios = list(scenarios) if scenarios is not None else list(SCENARIO_PRESETS)
    settings = AnalysisSettings.from_config(config or {})
    # validate once, every engine below gets the world-space copies
    world_buildings = normalize_buildings(buildings, site_config, settings)

    results = {}
    for index, scenario in enumerate(scenarios, 1):
        logger.info(f"[{index}/{len(scenarios)}] Scenario: {scenario.name}")
        engine = AnalysisEngine(
            location,
            world_buildings,
            target_building_id=target_building_id,
            target_floor=target_floor,
            scenario=scenario,
            settings=settings,
        )
        results[scenario.id] = engine.analyze(analysis_date)

    return results


def _analyze_date(
    analysis_date: date,
    location: Location,
    buildings: Sequence[Building],
    target_building_id: Optional[str],
    target_floor: Optional[int],
    scenario: Optional[Scenario],
    settings: AnalysisSettings
) -> AnalysisResults:
    # Runs in a worker process: each call owns its engine and shadow cache
    engine = AnalysisEngine(
        location,
        buildings,
        target_building_id=target_building_id,
        target_floor=target_floor,
        scenario=scenario,
        settings=settings,
    )
    return engine.analyze(analysis_date)


def analyze_dates(
    location: Location,
    buildings: Sequence[Building],
    dates: Sequence[date],
    target_building_id: Optional[str] = None,
    target_floor: Optional[int] = None,
    scenario: Optional[Scenario] = None,
    site_config: Optional[SiteConfig] = None,
    config: Optional[dict] = None,
    max_workers: Optional[int] = None,
    progress_callback: Optional[Callable[[int, int], None]] = None
) -> List[AnalysisResults]:
    """
    Analyze many dates, in parallel across processes.

    Every date is an independent analysis with its own engine. Footprints
    are validated once up front, so geometry errors surface before any
    worker starts.

    Args:
        dates: Dates to analyze
        max_workers: Number of worker processes; 1 runs in this process
        progress_callback: Called with (completed, total)

    Returns:
        Results in the order of dates
    """
    settings = AnalysisSettings.from_config(config or {})
    world_buildings = normalize_buildings(buildings, site_config, settings)
    total = len(dates)
    logger.info(f"Analyzing {total} date(s) with max_workers={max_workers}")

    args = (location, world_buildings, target_building_id, target_floor, scenario, settings)
    results: List[Optional[AnalysisResults]] = [None] * total

    if max_workers == 1:
        for index, day in enumerate(dates):
            results[index] = _analyze_date(day, *args)
            if progress_callback:
                progress_callback(index + 1, total)
        return results

    with ProcessPoolExecutor(max_workers=max_workers) as executor:
        futures = {}
        for index, day in enumerate(dates):
            future = executor.submit(_analyze_date, day, *args)
            futures[future] = index

        completed = 0
        for future in as_completed(futures):
            results[futures[future]] = future.result()
            completed += 1
            if progress_callback:
                progress_callback(completed, total)

    return results
