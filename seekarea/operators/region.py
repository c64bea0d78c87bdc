"""REGION-MATCHING: is the hider in the same administrative region as the seeker?"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from ..algebra import AnyPoly
from ..errors import InsufficientInputError, SamplingError
from ..logging_utils import debug_log_call
from ..providers.base import REGION_FIELDS, ReverseGeocodeResult, normalize_region_name
from ..sampling import clip_to_samples, sample_interior
from .types import RegionOutcome

logger = logging.getLogger(__name__)

ReverseGeocode = Callable[[float, float], ReverseGeocodeResult]


class _RegionLookup:
    """Reverse-geocode memo keyed by coordinates rounded to *decimals* degrees."""

    def __init__(self, reverse_geocode: ReverseGeocode, level: str, decimals: int) -> None:
        self._reverse = reverse_geocode
        self._level = level
        self._decimals = decimals
        self._memo: Dict[Tuple[float, float], Optional[str]] = {}
        self.calls = 0

    def __call__(self, lon: float, lat: float) -> Optional[str]:
        key = (round(lat, self._decimals), round(lon, self._decimals))
        if key not in self._memo:
            self.calls += 1
            result = self._reverse(key[0], key[1])
            self._memo[key] = normalize_region_name(result.region(self._level))
        return self._memo[key]


@debug_log_call(logger)
def apply_region_matching(
    candidate: AnyPoly,
    seeker: Sequence[float],
    level: str,
    answer_yes: bool,
    reverse_geocode: ReverseGeocode,
    *,
    max_points: int = 60,
    min_step_km: float = 20.0,
    round_decimals: int = 2,
    buffer_min_km: float = 6.0,
    buffer_step_factor: float = 0.9,
    downsample_max: int = 350,
    batch_size: int = 25,
) -> RegionOutcome:
    """Keep coarse samples whose region at *level* equals (YES) or differs from (NO) the seeker's.

    Samples whose region cannot be determined are dropped from both answers.
    """

    if level not in REGION_FIELDS:
        raise InsufficientInputError(f"Unknown region level {level!r}")

    seeker_result = reverse_geocode(float(seeker[1]), float(seeker[0]))
    seeker_region = normalize_region_name(seeker_result.region(level))
    if seeker_region is None:
        raise InsufficientInputError(f"Seeker's {level} could not be determined; question not applied")

    samples = sample_interior(candidate, max_points=max_points, min_step_km=min_step_km)
    if not samples.points:
        raise SamplingError("Candidate area is too small to sample; no change applied")

    lookup = _RegionLookup(reverse_geocode, level, round_decimals)
    kept: List[Tuple[float, float]] = []
    indeterminate = 0
    for lon, lat in samples.points:
        region = lookup(lon, lat)
        if region is None:
            indeterminate += 1
            continue
        if (region == seeker_region) == answer_yes:
            kept.append((lon, lat))

    outcome = RegionOutcome(
        next=None,
        level=level,
        seeker_region=seeker_region,
        sample_count=len(samples),
        kept_count=len(kept),
        indeterminate_count=indeterminate,
        lookup_count=lookup.calls,
    )
    if kept:
        outcome.next = clip_to_samples(
            candidate,
            kept,
            max(buffer_min_km, samples.step_km * buffer_step_factor),
            downsample_max,
            batch_size,
        )
    logger.info(
        "Region matching (%s=%s) %s: kept %d/%d sample(s), %d lookup(s)",
        level,
        seeker_region,
        "yes" if answer_yes else "no",
        len(kept),
        len(samples),
        lookup.calls,
    )
    return outcome


__all__ = ["apply_region_matching"]
