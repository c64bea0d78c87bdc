"""Geocoding collaborator backed by Nominatim."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from ..errors import ProviderError
from ..tasks import Throttle
from .base import ReverseGeocodeResult, SearchResult
from .cache import TTLCache

logger = logging.getLogger(__name__)

DEFAULT_NOMINATIM_URL = "https://nominatim.openstreetmap.org"
USER_AGENT = "seekarea/0.1 (possible-area engine)"


class NominatimGeocoder:
    """Forward and reverse geocoding, throttled to one request per second."""

    def __init__(
        self,
        base_url: str = DEFAULT_NOMINATIM_URL,
        *,
        timeout_s: float = 12.0,
        session: Optional[requests.Session] = None,
        throttle: Optional[Throttle] = None,
        cache: Optional[TTLCache] = None,
        language: str = "en",
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self.language = language
        self._session = session or requests.Session()
        self._throttle = throttle or Throttle(1.0)
        self._cache = cache if cache is not None else TTLCache()

    def _get(self, path: str, params: Dict[str, Any]) -> Any:
        self._throttle.wait()
        try:
            response = self._session.get(
                f"{self.base_url}/{path}",
                params=params,
                headers={"User-Agent": USER_AGENT, "Accept-Language": self.language},
                timeout=self.timeout_s,
            )
            response.raise_for_status()
            return response.json()
        except requests.Timeout as exc:
            raise ProviderError("Geocoding timed out") from exc
        except requests.RequestException as exc:
            raise ProviderError(f"Geocoding failed: {exc}") from exc
        except ValueError as exc:
            raise ProviderError(f"Geocoding returned malformed data: {exc}") from exc

    def search(self, query: str) -> List[SearchResult]:
        normalized = query.strip()
        if not normalized:
            return []
        cache_key = ("search", normalized)
        cached = self._cache.get(cache_key)
        if cached is not None:
            return list(cached)

        payload = self._get(
            "search",
            {"format": "jsonv2", "q": normalized, "polygon_geojson": 1, "addressdetails": 1, "limit": 8},
        )
        if not isinstance(payload, list):
            raise ProviderError("Geocoding returned malformed data: expected a list")
        try:
            results = [SearchResult.from_dict(item) for item in payload]
        except ValueError as exc:
            raise ProviderError(str(exc)) from exc
        self._cache.set(cache_key, results)
        logger.info("Search %r returned %d result(s)", normalized, len(results))
        return list(results)

    def reverse_geocode(self, lat: float, lon: float) -> ReverseGeocodeResult:
        cache_key = ("reverse", round(lat, 5), round(lon, 5))
        cached = self._cache.get(cache_key)
        if cached is not None:
            return cached

        payload = self._get(
            "reverse", {"format": "jsonv2", "lat": lat, "lon": lon, "addressdetails": 1, "zoom": 14}
        )
        if not isinstance(payload, dict):
            raise ProviderError("Reverse geocoding returned malformed data")
        # points at sea come back as {"error": "Unable to geocode"}
        result = ReverseGeocodeResult(
            address=dict(payload.get("address") or {}), display_name=payload.get("display_name")
        )
        self._cache.set(cache_key, result)
        return result
