"""MATCHING: is the hider's nearest POI of a kind the same as the seeker's?

Two strategies are available. ``voronoi`` partitions the POI bbox exactly
and is the default; ``sampled`` classifies a grid of interior samples and is
kept for POI sets too large or irregular for a clean partition. The session
picks one through ``EngineConfig.matching_strategy``.
"""

from __future__ import annotations

import logging
from typing import Sequence

from shapely.geometry import box

from ..algebra import AnyPoly, difference, intersect
from ..errors import GeometryError, InsufficientInputError, SamplingError
from ..logging_utils import debug_log_call
from ..nearest import Poi, dedupe_pois, nearest_for_points, nearest_to
from ..primitives import geodesic_area_km2
from ..sampling import clip_to_samples, sample_interior
from ..voronoi import locate_cell, voronoi_cells
from .types import MatchingOutcome

logger = logging.getLogger(__name__)

MATCHING_STRATEGIES = ("voronoi", "sampled")


@debug_log_call(logger)
def apply_matching_voronoi(
    candidate: AnyPoly,
    seeker: Sequence[float],
    pois: Sequence[Poi],
    answer_yes: bool,
    bbox: Sequence[float],
) -> MatchingOutcome:
    """Keep (YES) or remove (NO) the Voronoi cell of the seeker's nearest POI.

    *bbox* is ``[south, west, north, east]`` and bounds the partition.
    """

    area_before = geodesic_area_km2(candidate)
    unique = dedupe_pois(pois)
    nearest = nearest_to(seeker, unique)
    if nearest is None:
        raise InsufficientInputError("No POIs available for matching")

    outcome = MatchingOutcome(
        next=None,
        strategy="voronoi",
        feature_count=len(unique),
        seeker_nearest_key=nearest.key,
        seeker_nearest_name=nearest.poi.name,
        area_before_km2=area_before,
    )

    # a lone POI is nearest everywhere
    if len(unique) == 1:
        if answer_yes:
            outcome.next = candidate
            outcome.area_after_km2 = area_before
        return outcome

    south, west, north, east = (float(v) for v in bbox)
    cells = voronoi_cells([p.lonlat for p in unique], box(west, south, east, north))
    idx = locate_cell(cells, nearest.poi.lonlat)
    if idx is None:
        raise GeometryError("Could not locate the Voronoi cell of the nearest POI; no change applied")

    cell = cells[idx]
    outcome.next = intersect(candidate, cell) if answer_yes else difference(candidate, cell)
    outcome.area_after_km2 = geodesic_area_km2(outcome.next)
    logger.info(
        "Matching (voronoi) %s over %d POI(s): %.1f%% remaining",
        "yes" if answer_yes else "no",
        len(unique),
        outcome.percent_remaining,
    )
    return outcome


@debug_log_call(logger)
def apply_matching_sampled(
    candidate: AnyPoly,
    seeker: Sequence[float],
    pois: Sequence[Poi],
    answer_yes: bool,
    *,
    max_points: int = 900,
    min_step_km: float = 12.0,
    buffer_min_km: float = 6.0,
    buffer_step_factor: float = 0.9,
    downsample_max: int = 350,
    batch_size: int = 25,
) -> MatchingOutcome:
    """Keep interior samples whose nearest POI agrees (YES) or disagrees (NO) with the seeker's."""

    pois = dedupe_pois(pois)
    area_before = geodesic_area_km2(candidate)
    nearest = nearest_to(seeker, pois)
    if nearest is None:
        raise InsufficientInputError("No POIs available for matching")

    samples = sample_interior(candidate, max_points=max_points, min_step_km=min_step_km)
    if not samples.points:
        raise SamplingError("Candidate area is too small to sample; no change applied")

    indices, _ = nearest_for_points(samples.points, pois)
    seeker_key = nearest.key
    kept = []
    for point, idx in zip(samples.points, indices):
        same = pois[int(idx)].dedup_key == seeker_key
        if same == answer_yes:
            kept.append(point)

    outcome = MatchingOutcome(
        next=None,
        strategy="sampled",
        feature_count=len(pois),
        seeker_nearest_key=seeker_key,
        seeker_nearest_name=nearest.poi.name,
        sample_count=len(samples),
        kept_count=len(kept),
        area_before_km2=area_before,
    )
    if kept:
        outcome.next = clip_to_samples(
            candidate,
            kept,
            max(buffer_min_km, samples.step_km * buffer_step_factor),
            downsample_max,
            batch_size,
        )
        outcome.area_after_km2 = geodesic_area_km2(outcome.next)
    logger.info(
        "Matching (sampled) %s: kept %d/%d sample(s)", "yes" if answer_yes else "no", len(kept), len(samples)
    )
    return outcome


__all__ = ["MATCHING_STRATEGIES", "apply_matching_sampled", "apply_matching_voronoi"]
