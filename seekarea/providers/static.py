"""In-memory collaborators for offline play, scripted replays and tests."""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from ..nearest import Poi
from .base import ReverseGeocodeResult, SearchResult, SeekerPosition


class StaticPoiProvider:
    """Serves a fixed POI list per kind, filtered by bbox."""

    def __init__(self, pois_by_kind: Optional[Mapping[str, Iterable[Poi]]] = None) -> None:
        self._pois: Dict[str, List[Poi]] = {k: list(v) for k, v in (pois_by_kind or {}).items()}
        self.calls: List[tuple] = []

    def add(self, kind: str, pois: Iterable[Poi]) -> None:
        self._pois.setdefault(kind, []).extend(pois)

    def fetch_pois(self, kind: str, bbox: Sequence[float], limit: int = 800) -> List[Poi]:
        self.calls.append((kind, tuple(bbox), limit))
        south, west, north, east = (float(v) for v in bbox)
        found = [
            p for p in self._pois.get(kind, []) if south <= p.lat <= north and west <= p.lon <= east
        ]
        return found[:limit]


class StaticGeocoder:
    """Search over a fixed result list; reverse lookups delegate to a callable."""

    def __init__(
        self,
        results: Optional[Iterable[SearchResult]] = None,
        reverse: Optional[Callable[[float, float], Mapping[str, str]]] = None,
    ) -> None:
        self._results = list(results or [])
        self._reverse = reverse
        self.reverse_calls = 0

    def search(self, query: str) -> List[SearchResult]:
        needle = query.strip().casefold()
        if not needle:
            return []
        return [r for r in self._results if needle in r.display_name.casefold()]

    def reverse_geocode(self, lat: float, lon: float) -> ReverseGeocodeResult:
        self.reverse_calls += 1
        if self._reverse is None:
            return ReverseGeocodeResult()
        return ReverseGeocodeResult(address=dict(self._reverse(lat, lon)))


class StaticLocationProvider:
    """Replays a list of positions, repeating the last one."""

    def __init__(self, positions: Sequence[SeekerPosition]) -> None:
        if not positions:
            raise ValueError("StaticLocationProvider needs at least one position")
        self._positions = list(positions)
        self._index = 0

    def current_position(self, timeout_s: float) -> SeekerPosition:
        position = self._positions[min(self._index, len(self._positions) - 1)]
        self._index += 1
        return position
