"""MEASURING: is the hider closer to or farther from a POI kind than the seeker?

The exact method uses the fact that "nearest POI within d" is the same as
"inside the union of d-buffers around every POI", so one buffer at the
threshold distance decides the whole candidate. The sampled method
classifies grid samples one by one and is used for very large POI sets.
"""

from __future__ import annotations

import logging
from typing import Sequence

from ..algebra import AnyPoly, buffer_from_points, difference, intersect
from ..errors import InsufficientInputError, SamplingError
from ..logging_utils import debug_log_call
from ..nearest import Poi, nearest_for_points, nearest_to
from ..sampling import clip_to_samples, sample_interior
from .types import MeasuringOutcome

logger = logging.getLogger(__name__)

MEASURING_METHODS = ("auto", "exact", "sampled")


@debug_log_call(logger)
def apply_measuring(
    candidate: AnyPoly,
    seeker: Sequence[float],
    pois: Sequence[Poi],
    closer: bool,
    *,
    epsilon_m: float = 25.0,
    method: str = "auto",
    exact_max_pois: int = 400,
    max_points: int = 900,
    min_step_km: float = 12.0,
    buffer_min_km: float = 6.0,
    buffer_step_factor: float = 0.9,
    downsample_max: int = 350,
    batch_size: int = 25,
    circle_steps: int = 64,
) -> MeasuringOutcome:
    """Keep locations closer (or farther) than the seeker to their nearest POI, beyond *epsilon_m*."""

    if method not in MEASURING_METHODS:
        raise ValueError(f"unknown measuring method {method!r}")
    nearest = nearest_to(seeker, pois)
    if nearest is None:
        raise InsufficientInputError("No POIs available for measuring")
    if method == "auto":
        method = "exact" if len(pois) <= exact_max_pois else "sampled"

    seeker_d = nearest.meters
    threshold = seeker_d - epsilon_m if closer else seeker_d + epsilon_m
    outcome = MeasuringOutcome(
        next=None,
        method=method,
        poi_count=len(pois),
        seeker_distance_m=seeker_d,
        threshold_m=threshold,
    )

    if method == "exact":
        if threshold <= 0:
            # nothing can be strictly closer than the seeker's margin
            return outcome
        region = buffer_from_points(
            [p.lonlat for p in pois], threshold / 1000.0, batch_size=batch_size, steps=circle_steps
        )
        outcome.next = intersect(candidate, region) if closer else difference(candidate, region)
    else:
        samples = sample_interior(candidate, max_points=max_points, min_step_km=min_step_km)
        if not samples.points:
            raise SamplingError("Candidate area is too small to sample; no change applied")
        _, dists = nearest_for_points(samples.points, pois)
        keep_mask = dists < threshold if closer else dists > threshold
        kept = [point for point, keep in zip(samples.points, keep_mask) if keep]
        outcome.sample_count = len(samples)
        outcome.kept_count = len(kept)
        if kept:
            outcome.next = clip_to_samples(
                candidate,
                kept,
                max(buffer_min_km, samples.step_km * buffer_step_factor),
                downsample_max,
                batch_size,
            )

    logger.info(
        "Measuring (%s) %s than %.0f m -> %s",
        method,
        "closer" if closer else "farther",
        seeker_d,
        outcome.next.geom_type if outcome.next else "empty",
    )
    return outcome


__all__ = ["MEASURING_METHODS", "apply_measuring"]
