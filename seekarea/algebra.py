"""Polygon set operations over ``Polygon | MultiPolygon`` candidates.

Every operation returns a valid shapely ``Polygon`` or ``MultiPolygon``, or
``None`` when the result has zero area. An empty shapely geometry never
leaves this module.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

import shapely
from shapely.errors import GEOSException
from shapely.geometry import MultiPolygon, Polygon, box, mapping, shape
from shapely.geometry.base import BaseGeometry
from shapely.geometry.polygon import orient
from shapely.validation import make_valid

from .errors import GeometryError
from .primitives import destination_point

logger = logging.getLogger(__name__)

AnyPoly = Union[Polygon, MultiPolygon]

MIN_CIRCLE_STEPS = 64
UNION_BATCH_SIZE = 25


def _polygonal_parts(geom: BaseGeometry) -> List[Polygon]:
    if geom.is_empty:
        return []
    if isinstance(geom, Polygon):
        return [geom]
    if isinstance(geom, MultiPolygon):
        return list(geom.geoms)
    if hasattr(geom, "geoms"):
        parts: List[Polygon] = []
        for member in geom.geoms:
            parts.extend(_polygonal_parts(member))
        return parts
    return []


def as_candidate(geom: Optional[BaseGeometry]) -> Optional[AnyPoly]:
    """Normalise a shapely result to ``Polygon``, ``MultiPolygon`` or ``None``."""

    if geom is None:
        return None
    if not geom.is_valid:
        geom = make_valid(geom)
    parts = [part for part in _polygonal_parts(geom) if part.area > 0.0]
    if not parts:
        return None
    if len(parts) == 1:
        return orient(parts[0], sign=1.0)
    return MultiPolygon([orient(part, sign=1.0) for part in parts])


def _prepare(geom: AnyPoly) -> BaseGeometry:
    if geom.is_valid:
        return geom
    return make_valid(geom)


def intersect(a: AnyPoly, b: AnyPoly) -> Optional[AnyPoly]:
    try:
        return as_candidate(_prepare(a).intersection(_prepare(b)))
    except GEOSException as exc:
        raise GeometryError(f"intersection failed: {exc}") from exc


def difference(a: AnyPoly, b: AnyPoly) -> Optional[AnyPoly]:
    try:
        return as_candidate(_prepare(a).difference(_prepare(b)))
    except GEOSException as exc:
        raise GeometryError(f"difference failed: {exc}") from exc


def union(a: AnyPoly, b: AnyPoly) -> Optional[AnyPoly]:
    try:
        return as_candidate(_prepare(a).union(_prepare(b)))
    except GEOSException as exc:
        raise GeometryError(f"union failed: {exc}") from exc


def buffer_point(point: Sequence[float], radius_km: float, steps: int = MIN_CIRCLE_STEPS) -> Polygon:
    """Approximate geodesic circle of *radius_km* around a ``(lon, lat)`` point."""

    if radius_km <= 0:
        raise ValueError("buffer radius must be positive")
    steps = max(int(steps), MIN_CIRCLE_STEPS)
    radius_m = radius_km * 1000.0
    ring = [destination_point(point, radius_m, -360.0 * idx / steps) for idx in range(steps)]
    ring.append(ring[0])
    return orient(Polygon(ring), sign=1.0)


def _union_batch(polygons: Sequence[BaseGeometry]) -> Optional[AnyPoly]:
    try:
        return as_candidate(shapely.union_all(list(polygons)))
    except GEOSException as exc:
        raise GeometryError(f"batch union failed: {exc}") from exc


def buffer_from_points(
    points: Iterable[Sequence[float]],
    radius_km: float,
    *,
    batch_size: int = UNION_BATCH_SIZE,
    steps: int = MIN_CIRCLE_STEPS,
) -> AnyPoly:
    """Union of circular buffers around every ``(lon, lat)`` point.

    Buffers are merged in fixed-size batches. A batch whose union fails is
    logged and skipped, so the result may be partial; :class:`GeometryError`
    is raised only when *points* is empty or no batch produced geometry.
    """

    pts = [tuple(p) for p in points]
    if not pts:
        raise GeometryError("No points provided for buffering")

    buffers = [buffer_point(p, radius_km, steps) for p in pts]
    batch_size = max(1, int(batch_size))

    result: Optional[AnyPoly] = None
    skipped = 0
    for start in range(0, len(buffers), batch_size):
        chunk = buffers[start:start + batch_size]
        try:
            merged = _union_batch(chunk)
            if merged is None:
                continue
            result = merged if result is None else union(result, merged)
        except GeometryError as exc:
            skipped += 1
            logger.warning("Skipping buffer batch at offset %d: %s", start, exc)
            continue

    if result is None:
        raise GeometryError("No valid buffers created")
    if skipped:
        logger.warning("Buffer built from partial input: %d batch(es) skipped", skipped)
    logger.debug("Buffered %d point(s) at %.3f km into %s", len(pts), radius_km, result.geom_type)
    return result


def bbox_polygon_for(geom: BaseGeometry, pad_deg: float = 0.5) -> Polygon:
    """Axis-aligned box around *geom*, padded by *pad_deg* degrees."""

    minx, miny, maxx, maxy = geom.bounds
    return box(minx - pad_deg, miny - pad_deg, maxx + pad_deg, maxy + pad_deg)


def bbox_swne(geom: BaseGeometry) -> tuple:
    """``(south, west, north, east)`` of a shapely geometry."""

    minx, miny, maxx, maxy = geom.bounds
    return (miny, minx, maxy, maxx)


def to_geojson(geom: Optional[AnyPoly]) -> Optional[Dict[str, Any]]:
    if geom is None:
        return None
    return dict(mapping(geom))


def from_geojson(data: Mapping[str, Any]) -> AnyPoly:
    """Build a candidate from a GeoJSON Polygon/MultiPolygon (or Feature)."""

    if data.get("type") == "Feature":
        data = data.get("geometry") or {}
    if data.get("type") not in ("Polygon", "MultiPolygon"):
        raise ValueError(f"expected Polygon or MultiPolygon, got {data.get('type')!r}")
    geom = as_candidate(shape(data))
    if geom is None:
        raise ValueError("polygon has zero area")
    return geom


__all__ = [
    "AnyPoly",
    "MIN_CIRCLE_STEPS",
    "UNION_BATCH_SIZE",
    "as_candidate",
    "bbox_polygon_for",
    "bbox_swne",
    "buffer_from_points",
    "buffer_point",
    "difference",
    "from_geojson",
    "intersect",
    "to_geojson",
    "union",
]
