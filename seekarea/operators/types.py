"""Result records returned by the constraint operators."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..algebra import AnyPoly


@dataclass
class OperatorOutcome:
    """New candidate (``None`` when no location remains) plus audit counts."""

    next: Optional[AnyPoly]

    @property
    def is_empty(self) -> bool:
        return self.next is None


@dataclass
class RadarOutcome(OperatorOutcome):
    radius_km: float = 0.0


@dataclass
class ThermometerOutcome(OperatorOutcome):
    distance_m: float = 0.0


@dataclass
class MatchingOutcome(OperatorOutcome):
    strategy: str = "voronoi"
    feature_count: int = 0
    seeker_nearest_key: Optional[str] = None
    seeker_nearest_name: Optional[str] = None
    sample_count: int = 0
    kept_count: int = 0
    area_before_km2: float = 0.0
    area_after_km2: float = 0.0

    @property
    def percent_remaining(self) -> float:
        if self.area_before_km2 <= 0:
            return 0.0
        return self.area_after_km2 / self.area_before_km2 * 100.0


@dataclass
class MeasuringOutcome(OperatorOutcome):
    method: str = "exact"
    poi_count: int = 0
    seeker_distance_m: float = 0.0
    threshold_m: float = 0.0
    sample_count: int = 0
    kept_count: int = 0


@dataclass
class PoiWithinOutcome(OperatorOutcome):
    poi_count: int = 0
    radius_km: float = 0.0


@dataclass
class RegionOutcome(OperatorOutcome):
    level: str = ""
    seeker_region: str = ""
    sample_count: int = 0
    kept_count: int = 0
    indeterminate_count: int = 0
    lookup_count: int = 0
