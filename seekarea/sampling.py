"""Approximately uniform interior sampling of candidate polygons."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np
import shapely

from .algebra import AnyPoly, buffer_from_points, intersect
from .primitives import KM_PER_DEG_LAT, KM_PER_DEG_LON_EQUATOR, km_to_lat_deg, km_to_lon_deg

logger = logging.getLogger(__name__)


@dataclass
class SampleResult:
    """Interior grid nodes as ``(lon, lat)`` pairs and the grid step used."""

    points: List[Tuple[float, float]] = field(default_factory=list)
    step_km: float = 0.0

    def __len__(self) -> int:
        return len(self.points)


def grid_step_km(geom: AnyPoly, max_points: int, min_step_km: float) -> float:
    minx, miny, maxx, maxy = geom.bounds
    lat_mid = (miny + maxy) / 2.0
    width_km = max(1.0, (maxx - minx) * KM_PER_DEG_LON_EQUATOR * math.cos(math.radians(lat_mid)))
    height_km = max(1.0, (maxy - miny) * KM_PER_DEG_LAT)
    return max(float(min_step_km), math.sqrt(width_km * height_km / max(1, int(max_points))))


def sample_interior(geom: AnyPoly, max_points: int = 900, min_step_km: float = 10.0) -> SampleResult:
    """Walk a lat/lon grid over the bbox of *geom* and keep nodes inside it.

    The longitude step is recomputed for every latitude row so cells stay
    roughly square. Collection stops once *max_points* nodes are found, which
    means thin or small polygons can legitimately yield zero samples.
    """

    step_km = grid_step_km(geom, max_points, min_step_km)
    minx, miny, maxx, maxy = geom.bounds
    lat_step = km_to_lat_deg(step_km)
    shapely.prepare(geom)

    points: List[Tuple[float, float]] = []
    rows = int(math.floor((maxy - miny) / lat_step)) + 1
    for row in range(rows):
        lat = miny + row * lat_step
        lon_step = min(360.0, km_to_lon_deg(step_km, lat))
        cols = int(math.floor((maxx - minx) / lon_step)) + 1
        lons = minx + np.arange(cols, dtype=float) * lon_step
        inside = shapely.intersects_xy(geom, lons, np.full(cols, lat))
        for lon in lons[inside]:
            points.append((float(lon), float(lat)))
            if len(points) >= max_points:
                logger.debug("Sampling hit cap of %d point(s) at step %.2f km", max_points, step_km)
                return SampleResult(points, step_km)

    logger.debug("Sampled %d interior point(s) at step %.2f km", len(points), step_km)
    return SampleResult(points, step_km)


def downsample(items: List, max_items: int) -> List:
    """Keep every k-th item so that at most *max_items* remain."""

    if len(items) <= max_items:
        return list(items)
    stride = int(math.ceil(len(items) / max_items))
    return items[::stride]


def clip_to_samples(
    candidate: AnyPoly,
    kept: Sequence[Tuple[float, float]],
    buffer_km: float,
    downsample_max: int = 350,
    batch_size: int = 25,
) -> Optional[AnyPoly]:
    """Rebuild an area from kept samples by buffering them and clipping to *candidate*."""

    region = buffer_from_points(downsample(list(kept), downsample_max), buffer_km, batch_size=batch_size)
    return intersect(candidate, region)


__all__ = ["SampleResult", "clip_to_samples", "downsample", "grid_step_km", "sample_interior"]
