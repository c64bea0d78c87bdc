"""Constraint operators: pure functions from (candidate, answer) to a new candidate."""

from .matching import MATCHING_STRATEGIES, apply_matching_sampled, apply_matching_voronoi
from .measuring import MEASURING_METHODS, apply_measuring
from .poi_within import apply_poi_within
from .radar import RADAR_STEPS, apply_radar
from .region import apply_region_matching
from .thermometer import apply_thermometer
from .types import (
    MatchingOutcome,
    MeasuringOutcome,
    OperatorOutcome,
    PoiWithinOutcome,
    RadarOutcome,
    RegionOutcome,
    ThermometerOutcome,
)

__all__ = [
    "MATCHING_STRATEGIES",
    "MEASURING_METHODS",
    "MatchingOutcome",
    "MeasuringOutcome",
    "OperatorOutcome",
    "PoiWithinOutcome",
    "RADAR_STEPS",
    "RadarOutcome",
    "RegionOutcome",
    "ThermometerOutcome",
    "apply_matching_sampled",
    "apply_matching_voronoi",
    "apply_measuring",
    "apply_poi_within",
    "apply_radar",
    "apply_region_matching",
    "apply_thermometer",
]
