"""Collaborator contracts and their HTTP and in-memory implementations."""

from .base import (
    REGION_FIELDS,
    GeocodeProvider,
    LocationProvider,
    PoiProvider,
    Renderer,
    ReverseGeocodeResult,
    SearchResult,
    SeekerPosition,
    normalize_region_name,
)
from .nominatim import NominatimGeocoder
from .osm_kinds import OSM_KIND_CLAUSES, build_overpass_query, is_osm_kind
from .overpass import OverpassPoiProvider
from .static import StaticGeocoder, StaticLocationProvider, StaticPoiProvider

__all__ = [
    "GeocodeProvider",
    "LocationProvider",
    "NominatimGeocoder",
    "OSM_KIND_CLAUSES",
    "OverpassPoiProvider",
    "PoiProvider",
    "REGION_FIELDS",
    "Renderer",
    "ReverseGeocodeResult",
    "SearchResult",
    "SeekerPosition",
    "StaticGeocoder",
    "StaticLocationProvider",
    "StaticPoiProvider",
    "build_overpass_query",
    "is_osm_kind",
    "normalize_region_name",
]
