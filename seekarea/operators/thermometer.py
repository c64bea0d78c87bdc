"""THERMOMETER: did the seeker get hotter or colder walking from start to end?"""

from __future__ import annotations

import logging
from typing import Sequence

from shapely.geometry import box

from ..algebra import AnyPoly, intersect
from ..errors import GeometryError, InsufficientInputError
from ..logging_utils import debug_log_call
from ..primitives import distance_meters
from ..voronoi import locate_cell, voronoi_cells
from .types import ThermometerOutcome

logger = logging.getLogger(__name__)


@debug_log_call(logger)
def apply_thermometer(
    candidate: AnyPoly,
    start: Sequence[float],
    end: Sequence[float],
    hotter: bool,
    *,
    pad_deg: float = 1.0,
) -> ThermometerOutcome:
    """Keep the half-plane of the two-site Voronoi split nearer to *end* (hotter) or *start*."""

    if tuple(start) == tuple(end):
        raise InsufficientInputError("Thermometer start and end are the same point")

    minx, miny, maxx, maxy = candidate.bounds
    clip = box(
        min(minx, start[0], end[0]) - pad_deg,
        min(miny, start[1], end[1]) - pad_deg,
        max(maxx, start[0], end[0]) + pad_deg,
        max(maxy, start[1], end[1]) + pad_deg,
    )
    cells = voronoi_cells([start, end], clip)
    query = end if hotter else start
    idx = locate_cell(cells, query)
    if idx is None:
        raise GeometryError("Could not locate the thermometer Voronoi cell; no change applied")

    nxt = intersect(candidate, cells[idx])
    logger.info("Thermometer %s -> %s", "hotter" if hotter else "colder", nxt.geom_type if nxt else "empty")
    return ThermometerOutcome(next=nxt, distance_m=distance_meters(start, end))
