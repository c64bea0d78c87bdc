"""RADAR: is the hider within a given radius of the seeker?"""

from __future__ import annotations

import logging
from typing import Sequence

from ..algebra import AnyPoly, buffer_point, difference, intersect
from ..errors import InsufficientInputError
from ..logging_utils import debug_log_call
from ..primitives import miles_to_km
from .types import RadarOutcome

logger = logging.getLogger(__name__)

RADAR_STEPS = 96


@debug_log_call(logger)
def apply_radar(
    candidate: AnyPoly,
    seeker: Sequence[float],
    radius_miles: float,
    hit: bool,
    *,
    steps: int = RADAR_STEPS,
) -> RadarOutcome:
    """Keep (hit) or remove (miss) the circle of *radius_miles* around *seeker*."""

    if radius_miles <= 0:
        raise InsufficientInputError("Radar radius must be positive")
    radius_km = miles_to_km(radius_miles)
    circle = buffer_point(seeker, radius_km, steps)
    nxt = intersect(candidate, circle) if hit else difference(candidate, circle)
    logger.info(
        "Radar %s %.2f mi -> %s", "hit" if hit else "miss", radius_miles, nxt.geom_type if nxt else "empty"
    )
    return RadarOutcome(next=nxt, radius_km=radius_km)
