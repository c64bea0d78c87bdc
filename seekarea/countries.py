"""Country boundary catalog loaded from a GeoJSON FeatureCollection."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from .algebra import AnyPoly, from_geojson

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Country:
    iso_a2: str
    name: Optional[str]
    geometry: AnyPoly


class CountryCatalog:
    """Countries keyed by upper-case ISO 3166-1 alpha-2 code."""

    def __init__(self, countries: List[Country]) -> None:
        self._by_iso: Dict[str, Country] = {}
        for country in countries:
            self._by_iso.setdefault(country.iso_a2.upper(), country)

    @classmethod
    def from_geojson(cls, data: Mapping[str, Any]) -> "CountryCatalog":
        countries: List[Country] = []
        for feature in data.get("features") or []:
            props = feature.get("properties") or {}
            iso = str(props.get("iso_a2") or "").strip().upper()
            if not iso:
                continue
            try:
                geometry = from_geojson(feature.get("geometry") or {})
            except ValueError as exc:
                logger.warning("Skipping country %s: %s", iso, exc)
                continue
            countries.append(Country(iso, props.get("name"), geometry))
        logger.info("Loaded %d countr(ies)", len(countries))
        return cls(countries)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "CountryCatalog":
        with open(path, encoding="utf-8") as fin:
            return cls.from_geojson(json.load(fin))

    def find(self, iso_a2: str) -> Optional[Country]:
        return self._by_iso.get(iso_a2.strip().upper())

    def codes(self) -> List[str]:
        return sorted(self._by_iso)

    def __len__(self) -> int:
        return len(self._by_iso)


__all__ = ["Country", "CountryCatalog"]
