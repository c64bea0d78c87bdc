"""POI collaborator backed by the Overpass API."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

import requests

from ..errors import ProviderError
from ..nearest import Poi
from .cache import TTLCache, round_bbox_key
from .osm_kinds import build_overpass_query, is_osm_kind

logger = logging.getLogger(__name__)

DEFAULT_OVERPASS_URL = "https://overpass-api.de/api/interpreter"
USER_AGENT = "seekarea/0.1 (possible-area engine)"


def normalize_elements(data: Mapping[str, Any]) -> List[Poi]:
    """Turn Overpass ``elements`` into POIs; ways and relations use their center."""

    points: List[Poi] = []
    for elem in data.get("elements") or []:
        etype = elem.get("type")
        lat = lon = None
        if etype == "node":
            lat, lon = elem.get("lat"), elem.get("lon")
        elif etype in ("way", "relation"):
            center = elem.get("center") or {}
            lat = center.get("lat", elem.get("lat"))
            lon = center.get("lon", elem.get("lon"))
        if lat is None or lon is None or elem.get("id") is None:
            continue
        tags = elem.get("tags") or {}
        points.append(
            Poi(
                id=int(elem["id"]),
                lon=float(lon),
                lat=float(lat),
                name=tags.get("name") or tags.get("name:en") or None,
                key=f"{etype}/{elem['id']}",
                osm_type=etype,
            )
        )
    return points


class OverpassPoiProvider:
    def __init__(
        self,
        url: str = DEFAULT_OVERPASS_URL,
        *,
        timeout_s: float = 30.0,
        session: Optional[requests.Session] = None,
        cache: Optional[TTLCache] = None,
    ) -> None:
        self.url = url
        self.timeout_s = timeout_s
        self._session = session or requests.Session()
        self._cache = cache if cache is not None else TTLCache()

    def fetch_pois(self, kind: str, bbox: Sequence[float], limit: int = 800) -> List[Poi]:
        if not is_osm_kind(kind):
            raise ProviderError(f"Unknown POI kind: {kind}")
        cache_key = f"{kind}:{round_bbox_key(bbox)}:{limit}"
        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.debug("Overpass cache hit for %s", cache_key)
            return list(cached)

        query = build_overpass_query(kind, bbox, limit)
        try:
            response = self._session.post(
                self.url,
                data={"data": query},
                headers={"User-Agent": USER_AGENT},
                timeout=self.timeout_s,
            )
            response.raise_for_status()
            payload: Dict[str, Any] = response.json()
        except requests.Timeout as exc:
            raise ProviderError("Overpass busy. Try again.") from exc
        except requests.RequestException as exc:
            raise ProviderError(f"POI fetch failed: {exc}") from exc
        except ValueError as exc:
            raise ProviderError(f"POI fetch returned malformed data: {exc}") from exc

        points = normalize_elements(payload)
        self._cache.set(cache_key, points)
        logger.info("Fetched %d %s POI(s) for bbox %s", len(points), kind, round_bbox_key(bbox))
        return list(points)
