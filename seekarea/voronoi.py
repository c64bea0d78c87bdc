"""Bounded planar Voronoi partitions over ``(lon, lat)`` sites."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

import numpy as np
from scipy.spatial import QhullError, Voronoi
from shapely.geometry import MultiPoint, Point, Polygon

from .algebra import AnyPoly, as_candidate
from .errors import GeometryError

logger = logging.getLogger(__name__)


def _mirrored_sites(pts: np.ndarray, frame: Sequence[float]) -> np.ndarray:
    minx, miny, maxx, maxy = frame
    left = np.column_stack([2.0 * minx - pts[:, 0], pts[:, 1]])
    right = np.column_stack([2.0 * maxx - pts[:, 0], pts[:, 1]])
    bottom = np.column_stack([pts[:, 0], 2.0 * miny - pts[:, 1]])
    top = np.column_stack([pts[:, 0], 2.0 * maxy - pts[:, 1]])
    return np.vstack([pts, left, right, bottom, top])


def voronoi_cells(sites: Sequence[Sequence[float]], clip: Polygon) -> List[Optional[AnyPoly]]:
    """Voronoi cell of every site, clipped to *clip*.

    Sites are reflected across the four sides of a frame enclosing both the
    sites and *clip*; the cells of the input sites are then finite and
    equal to the unbounded cells restricted to the frame. The returned list
    is aligned with *sites*; an entry is ``None`` when the clipped cell has
    no area.
    """

    pts = np.asarray(sites, dtype=float).reshape(-1, 2)
    if len(pts) == 0:
        return []
    if len(pts) == 1:
        return [as_candidate(clip)]

    cminx, cminy, cmaxx, cmaxy = clip.bounds
    minx = min(cminx, float(pts[:, 0].min()))
    miny = min(cminy, float(pts[:, 1].min()))
    maxx = max(cmaxx, float(pts[:, 0].max()))
    maxy = max(cmaxy, float(pts[:, 1].max()))
    margin = max(maxx - minx, maxy - miny) * 0.01 + 1e-6
    frame = (minx - margin, miny - margin, maxx + margin, maxy + margin)

    try:
        vor = Voronoi(_mirrored_sites(pts, frame))
    except QhullError as exc:
        raise GeometryError(f"Voronoi construction failed: {exc}") from exc

    cells: List[Optional[AnyPoly]] = []
    for idx in range(len(pts)):
        region = vor.regions[vor.point_region[idx]]
        if not region or -1 in region:
            logger.warning("Voronoi site %d has an unbounded region", idx)
            cells.append(None)
            continue
        hull = MultiPoint([tuple(v) for v in vor.vertices[region]]).convex_hull
        cells.append(as_candidate(hull.intersection(clip)))
    logger.debug("Built %d Voronoi cell(s) inside %s", len(cells), clip.bounds)
    return cells


def locate_cell(cells: Sequence[Optional[AnyPoly]], point: Sequence[float]) -> Optional[int]:
    """Index of the first cell covering *point*, or ``None``."""

    pt = Point(float(point[0]), float(point[1]))
    for idx, cell in enumerate(cells):
        if cell is not None and cell.covers(pt):
            return idx
    return None


__all__ = ["locate_cell", "voronoi_cells"]
