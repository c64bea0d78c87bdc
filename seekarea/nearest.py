"""Nearest point-of-interest lookup by great-circle distance."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .primitives import EARTH_RADIUS_M, distances_meters

_CHUNK_ROWS = 256


@dataclass(frozen=True)
class Poi:
    """Point of interest supplied by a POI collaborator."""

    id: int
    lon: float
    lat: float
    name: Optional[str] = None
    key: Optional[str] = None
    osm_type: Optional[str] = None

    @property
    def dedup_key(self) -> str:
        if self.key:
            return self.key
        return f"{self.osm_type or 'x'}/{self.id}"

    @property
    def lonlat(self) -> Tuple[float, float]:
        return (self.lon, self.lat)


@dataclass(frozen=True)
class NearestPoi:
    poi: Poi
    meters: float

    @property
    def key(self) -> str:
        return self.poi.dedup_key


def _coords(pois: Sequence[Poi]) -> Tuple[np.ndarray, np.ndarray]:
    lons = np.fromiter((p.lon for p in pois), dtype=float, count=len(pois))
    lats = np.fromiter((p.lat for p in pois), dtype=float, count=len(pois))
    return lons, lats


def nearest_to(point: Sequence[float], pois: Sequence[Poi]) -> Optional[NearestPoi]:
    """Return the POI closest to *point*; ties go to the earliest in input order."""

    if not pois:
        return None
    lons, lats = _coords(pois)
    dists = distances_meters(point, lons, lats)
    idx = int(np.argmin(dists))
    return NearestPoi(pois[idx], float(dists[idx]))


def nearest_for_points(
    points: Sequence[Sequence[float]], pois: Sequence[Poi]
) -> Tuple[np.ndarray, np.ndarray]:
    """Index and distance (m) of the nearest POI for every ``(lon, lat)`` in *points*.

    Same flat scan as :func:`nearest_to`, evaluated row-block by row-block.
    """

    if not pois:
        raise ValueError("nearest_for_points requires at least one POI")
    count = len(points)
    indices = np.empty(count, dtype=int)
    meters = np.empty(count, dtype=float)
    if count == 0:
        return indices, meters

    poi_lon, poi_lat = (np.radians(arr) for arr in _coords(pois))
    pts = np.radians(np.asarray(points, dtype=float).reshape(count, 2))
    cos_poi_lat = np.cos(poi_lat)
    for start in range(0, count, _CHUNK_ROWS):
        block = pts[start:start + _CHUNK_ROWS]
        lon = block[:, 0:1]
        lat = block[:, 1:2]
        s1 = np.sin((poi_lat[None, :] - lat) / 2.0)
        s2 = np.sin((poi_lon[None, :] - lon) / 2.0)
        a = np.clip(s1 * s1 + np.cos(lat) * cos_poi_lat[None, :] * s2 * s2, 0.0, 1.0)
        dist = EARTH_RADIUS_M * 2.0 * np.arctan2(np.sqrt(a), np.sqrt(1.0 - a))
        best = np.argmin(dist, axis=1)
        indices[start:start + len(block)] = best
        meters[start:start + len(block)] = dist[np.arange(len(block)), best]
    return indices, meters


def dedupe_pois(pois: Iterable[Poi]) -> List[Poi]:
    """Drop POIs whose key, or whose coordinate rounded to 1e-6 degrees, was already seen.

    Coincident sites would make a Voronoi partition degenerate, so the first
    POI at a location wins.
    """

    seen_keys = set()
    seen_coords = set()
    out: List[Poi] = []
    for poi in pois:
        coord = (round(poi.lat * 1e6), round(poi.lon * 1e6))
        if poi.dedup_key in seen_keys or coord in seen_coords:
            continue
        seen_keys.add(poi.dedup_key)
        seen_coords.add(coord)
        out.append(poi)
    return out


__all__ = ["NearestPoi", "Poi", "dedupe_pois", "nearest_for_points", "nearest_to"]
