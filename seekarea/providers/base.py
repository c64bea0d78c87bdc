"""Collaborator contracts consumed by the session and the operators."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple

from shapely.geometry import box, shape

from ..algebra import AnyPoly, as_candidate
from ..nearest import Poi

# address fields consulted, in order, for each administrative level
REGION_FIELDS: Dict[str, Tuple[str, ...]] = {
    "state": ("state", "region", "province"),
    "county": ("county", "state_district"),
    "city": ("city", "town", "village", "municipality"),
    "neighborhood": ("neighbourhood", "suburb", "quarter", "city_district"),
}


def normalize_region_name(name: Optional[str]) -> Optional[str]:
    if name is None:
        return None
    cleaned = " ".join(str(name).split()).casefold()
    return cleaned or None


@dataclass(frozen=True)
class SeekerPosition:
    """A location fix for the seeker."""

    lon: float
    lat: float
    accuracy_m: Optional[float] = None
    timestamp: float = field(default_factory=time.time)

    @property
    def lonlat(self) -> Tuple[float, float]:
        return (self.lon, self.lat)


@dataclass
class SearchResult:
    """One geocoder hit. ``bbox`` is ``[min_lat, max_lat, min_lon, max_lon]``."""

    display_name: str
    lat: float
    lon: float
    bbox: Tuple[float, float, float, float]
    geojson: Optional[Dict[str, Any]] = None
    kind: Optional[str] = None
    category: Optional[str] = None
    importance: Optional[float] = None
    address: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SearchResult":
        try:
            raw_bbox = [float(v) for v in data["boundingbox"]]
            if len(raw_bbox) != 4:
                raise ValueError("boundingbox must have four values")
            return cls(
                display_name=str(data["display_name"]),
                lat=float(data["lat"]),
                lon=float(data["lon"]),
                bbox=(raw_bbox[0], raw_bbox[1], raw_bbox[2], raw_bbox[3]),
                geojson=data.get("geojson"),
                kind=data.get("type"),
                category=data.get("class") or data.get("category"),
                importance=float(data["importance"]) if data.get("importance") is not None else None,
                address=dict(data.get("address") or {}),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"malformed search result: {exc}") from exc

    def to_geometry(self) -> Optional[AnyPoly]:
        """Polygonal outline of the result, falling back to its bounding box.

        A GeometryCollection contributes its first polygonal member. A
        degenerate bounding box gives ``None``.
        """

        geom = self._polygon_from_geojson(self.geojson)
        if geom is not None:
            return geom
        min_lat, max_lat, min_lon, max_lon = self.bbox
        return as_candidate(box(min_lon, min_lat, max_lon, max_lat))

    @staticmethod
    def _polygon_from_geojson(data: Optional[Mapping[str, Any]]) -> Optional[AnyPoly]:
        if not data:
            return None
        kind = data.get("type")
        if kind in ("Polygon", "MultiPolygon"):
            return as_candidate(shape(data))
        if kind == "GeometryCollection":
            for member in data.get("geometries", []):
                if member.get("type") in ("Polygon", "MultiPolygon"):
                    return as_candidate(shape(member))
        return None


@dataclass
class ReverseGeocodeResult:
    address: Dict[str, str] = field(default_factory=dict)
    display_name: Optional[str] = None

    def region(self, level: str) -> Optional[str]:
        """First populated address field for *level*, or ``None`` when indeterminate."""

        if level not in REGION_FIELDS:
            raise ValueError(f"unknown region level {level!r}")
        for key in REGION_FIELDS[level]:
            value = self.address.get(key)
            if value and str(value).strip():
                return str(value)
        return None


class PoiProvider(Protocol):
    def fetch_pois(self, kind: str, bbox: Sequence[float], limit: int = 800) -> List[Poi]:
        """POIs of *kind* inside ``[south, west, north, east]``; empty list when none."""
        ...


class GeocodeProvider(Protocol):
    def search(self, query: str) -> List[SearchResult]:
        ...

    def reverse_geocode(self, lat: float, lon: float) -> ReverseGeocodeResult:
        ...


class LocationProvider(Protocol):
    def current_position(self, timeout_s: float) -> SeekerPosition:
        ...


class Renderer(Protocol):
    def render(self, candidate: Optional[AnyPoly], seeker: Optional[SeekerPosition]) -> None:
        ...


__all__ = [
    "GeocodeProvider",
    "LocationProvider",
    "PoiProvider",
    "REGION_FIELDS",
    "Renderer",
    "ReverseGeocodeResult",
    "SearchResult",
    "SeekerPosition",
    "normalize_region_name",
]
