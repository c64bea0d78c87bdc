"""Spherical-earth helpers: distances, projections and bbox padding."""

from __future__ import annotations

import math
from typing import Iterable, Sequence, Tuple

import numpy as np

LonLat = Tuple[float, float]
# [south, west, north, east]
BBox = Tuple[float, float, float, float]

EARTH_RADIUS_M = 6_371_000.0
KM_PER_DEG_LAT = 110.574
KM_PER_DEG_LON_EQUATOR = 111.320
KM_PER_MILE = 1.609344


def distance_meters(p1: Sequence[float], p2: Sequence[float]) -> float:
    """Great-circle (haversine) distance between two ``(lon, lat)`` points."""

    lon1, lat1 = float(p1[0]), float(p1[1])
    lon2, lat2 = float(p2[0]), float(p2[1])
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    s1 = math.sin(d_lat / 2.0)
    s2 = math.sin(d_lon / 2.0)
    a = s1 * s1 + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * s2 * s2
    a = min(1.0, max(0.0, a))
    return EARTH_RADIUS_M * 2.0 * math.atan2(math.sqrt(a), math.sqrt(1.0 - a))


def distances_meters(origin: Sequence[float], lons: np.ndarray, lats: np.ndarray) -> np.ndarray:
    """Vectorised haversine distances from *origin* to every ``(lons[i], lats[i])``."""

    lon0 = math.radians(float(origin[0]))
    lat0 = math.radians(float(origin[1]))
    lon_r = np.radians(np.asarray(lons, dtype=float))
    lat_r = np.radians(np.asarray(lats, dtype=float))
    s1 = np.sin((lat_r - lat0) / 2.0)
    s2 = np.sin((lon_r - lon0) / 2.0)
    a = s1 * s1 + math.cos(lat0) * np.cos(lat_r) * s2 * s2
    a = np.clip(a, 0.0, 1.0)
    return EARTH_RADIUS_M * 2.0 * np.arctan2(np.sqrt(a), np.sqrt(1.0 - a))


def destination_point(origin: Sequence[float], distance_m: float, bearing_deg: float) -> LonLat:
    """Point reached from *origin* after travelling *distance_m* along *bearing_deg*."""

    lon1 = math.radians(float(origin[0]))
    lat1 = math.radians(float(origin[1]))
    delta = distance_m / EARTH_RADIUS_M
    theta = math.radians(bearing_deg)
    sin_lat2 = math.sin(lat1) * math.cos(delta) + math.cos(lat1) * math.sin(delta) * math.cos(theta)
    lat2 = math.asin(max(-1.0, min(1.0, sin_lat2)))
    lon2 = lon1 + math.atan2(
        math.sin(theta) * math.sin(delta) * math.cos(lat1),
        math.cos(delta) - math.sin(lat1) * math.sin(lat2),
    )
    return (math.degrees(lon2), math.degrees(lat2))


def km_to_lat_deg(km: float) -> float:
    return km / KM_PER_DEG_LAT


def km_to_lon_deg(km: float, lat_deg: float) -> float:
    return km / (KM_PER_DEG_LON_EQUATOR * math.cos(math.radians(lat_deg)))


def miles_to_km(miles: float) -> float:
    return miles * KM_PER_MILE


def expand_bbox(bbox: Sequence[float], padding_km: float) -> BBox:
    """Widen a ``[south, west, north, east]`` box by *padding_km* on every side.

    Longitude padding uses the cosine of the mid latitude, so the span grows
    without bound near the poles. That is accepted rather than corrected.
    """

    south, west, north, east = (float(v) for v in bbox)
    lat_mid = (south + north) / 2.0
    lat_pad = km_to_lat_deg(padding_km)
    lon_pad = km_to_lon_deg(padding_km, lat_mid)
    return (south - lat_pad, west - lon_pad, north + lat_pad, east + lon_pad)


def bbox_of_points(points: Iterable[Sequence[float]]) -> BBox:
    """``[south, west, north, east]`` box enclosing ``(lon, lat)`` points."""

    lons = []
    lats = []
    for point in points:
        lons.append(float(point[0]))
        lats.append(float(point[1]))
    if not lons:
        raise ValueError("bbox_of_points requires at least one point")
    return (min(lats), min(lons), max(lats), max(lons))


def _ring_area_m2(coords: Sequence[Sequence[float]]) -> float:
    pts = list(coords)
    if len(pts) > 1 and tuple(pts[0]) == tuple(pts[-1]):
        pts = pts[:-1]
    count = len(pts)
    if count < 3:
        return 0.0
    total = 0.0
    for idx in range(count):
        lon_prev = math.radians(pts[idx - 1][0])
        lon_next = math.radians(pts[(idx + 1) % count][0])
        lat = math.radians(pts[idx][1])
        total += (lon_next - lon_prev) * math.sin(lat)
    return abs(total * EARTH_RADIUS_M * EARTH_RADIUS_M / 2.0)


def geodesic_area_km2(geom) -> float:
    """Approximate spherical area of a shapely (Multi)Polygon in km²."""

    if geom is None or geom.is_empty:
        return 0.0
    if geom.geom_type == "MultiPolygon":
        return sum(geodesic_area_km2(part) for part in geom.geoms)
    if geom.geom_type != "Polygon":
        return 0.0
    area = _ring_area_m2(geom.exterior.coords)
    for ring in geom.interiors:
        area -= _ring_area_m2(ring.coords)
    return max(0.0, area) / 1e6


__all__ = [
    "BBox",
    "EARTH_RADIUS_M",
    "KM_PER_DEG_LAT",
    "KM_PER_DEG_LON_EQUATOR",
    "KM_PER_MILE",
    "LonLat",
    "bbox_of_points",
    "destination_point",
    "distance_meters",
    "distances_meters",
    "expand_bbox",
    "geodesic_area_km2",
    "km_to_lat_deg",
    "km_to_lon_deg",
    "miles_to_km",
]
