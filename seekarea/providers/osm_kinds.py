"""OSM tag clauses for every POI kind the game asks about."""

from __future__ import annotations

from typing import Dict, List, Tuple

OverpassClause = Tuple[str, str]

OSM_KIND_CLAUSES: Dict[str, List[OverpassClause]] = {
    "zoo": [("tourism", "zoo")],
    "hospital": [("amenity", "hospital")],
    "museum": [("tourism", "museum")],
    "library": [("amenity", "library")],
    "university": [("amenity", "university")],
    "school": [("amenity", "school")],
    "police": [("amenity", "police")],
    "firestation": [("amenity", "fire_station")],
    "fire_station": [("amenity", "fire_station")],
    "courthouse": [("amenity", "courthouse")],
    "townhall": [("amenity", "townhall")],
    "embassy": [("embassy", "yes"), ("amenity", "embassy")],
    "park": [("leisure", "park"), ("boundary", "national_park")],
    "park_national": [("boundary", "national_park")],
    "stadium": [("leisure", "stadium")],
    "themepark": [("tourism", "theme_park")],
    "castle": [("historic", "castle"), ("historic", "fort")],
    "castle_fort": [("historic", "fort")],
    "peak": [("natural", "peak")],
    "airport": [("aeroway", "aerodrome")],
    "trainstation": [("railway", "station")],
    "ferry": [("amenity", "ferry_terminal")],
    "ferry_terminal": [("amenity", "ferry_terminal"), ("man_made", "pier")],
    "metro_station": [("railway", "subway_entrance"), ("station", "subway")],
    "government": [("amenity", "townhall"), ("amenity", "courthouse"), ("office", "government")],
    "highway_access": [("highway", "motorway_junction")],
}


def is_osm_kind(kind: str) -> bool:
    return kind in OSM_KIND_CLAUSES


def build_overpass_query(kind: str, bbox, limit: int, timeout_s: int = 25) -> str:
    """Overpass QL selecting nodes, ways and relations of *kind* in ``[south, west, north, east]``."""

    if kind not in OSM_KIND_CLAUSES:
        raise ValueError(f"Unknown POI kind: {kind}")
    south, west, north, east = (float(v) for v in bbox)
    area = f"({south},{west},{north},{east})"
    parts = []
    for element in ("node", "way", "relation"):
        for key, value in OSM_KIND_CLAUSES[kind]:
            parts.append(f'{element}["{key}"="{value}"]{area};')
    body = "\n  ".join(parts)
    return f"[out:json][timeout:{timeout_s}];\n(\n  {body}\n);\nout center {int(limit)};\n"


__all__ = ["OSM_KIND_CLAUSES", "OverpassClause", "build_overpass_query", "is_osm_kind"]
