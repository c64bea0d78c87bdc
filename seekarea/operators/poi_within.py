"""POI-WITHIN: is the hider within a radius of any POI of a kind?"""

from __future__ import annotations

import logging
from typing import Sequence

from ..algebra import AnyPoly, buffer_from_points, difference, intersect
from ..errors import InsufficientInputError
from ..logging_utils import debug_log_call
from ..nearest import Poi
from .types import PoiWithinOutcome

logger = logging.getLogger(__name__)


@debug_log_call(logger)
def apply_poi_within(
    candidate: AnyPoly,
    pois: Sequence[Poi],
    radius_km: float,
    answer_yes: bool,
    *,
    batch_size: int = 25,
    circle_steps: int = 64,
) -> PoiWithinOutcome:
    if radius_km <= 0:
        raise InsufficientInputError("POI radius must be positive")
    outcome = PoiWithinOutcome(next=None, poi_count=len(pois), radius_km=radius_km)
    if not pois:
        # no qualifying POI: YES is impossible, NO rules nothing out
        outcome.next = None if answer_yes else candidate
        logger.info("POI-within found no POIs; answer %s", "yes" if answer_yes else "no")
        return outcome

    region = buffer_from_points([p.lonlat for p in pois], radius_km, batch_size=batch_size, steps=circle_steps)
    outcome.next = intersect(candidate, region) if answer_yes else difference(candidate, region)
    logger.info(
        "POI-within %s %.2f km of %d POI(s) -> %s",
        "yes" if answer_yes else "no",
        radius_km,
        len(pois),
        outcome.next.geom_type if outcome.next else "empty",
    )
    return outcome
