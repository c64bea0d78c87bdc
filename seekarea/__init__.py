from .errors import (
    SeekAreaError,
    InsufficientInputError,
    ProviderError,
    GeometryError,
    SamplingError,
    SessionBusyError,
)
from .config import EngineConfig, get_engine_config, set_engine_config
from .primitives import (
    distance_meters,
    distances_meters,
    destination_point,
    expand_bbox,
    km_to_lat_deg,
    km_to_lon_deg,
    miles_to_km,
    geodesic_area_km2,
)
from .algebra import (
    AnyPoly,
    intersect,
    difference,
    union,
    buffer_point,
    buffer_from_points,
    bbox_polygon_for,
    to_geojson,
    from_geojson,
)
from .sampling import SampleResult, sample_interior, downsample
from .nearest import Poi, NearestPoi, nearest_to, nearest_for_points, dedupe_pois
from .voronoi import voronoi_cells, locate_cell
from .operators import (
    apply_radar,
    apply_thermometer,
    apply_matching_voronoi,
    apply_matching_sampled,
    apply_measuring,
    apply_poi_within,
    apply_region_matching,
    OperatorOutcome,
)
from .providers import (
    SeekerPosition,
    SearchResult,
    ReverseGeocodeResult,
    OverpassPoiProvider,
    NominatimGeocoder,
    StaticPoiProvider,
    StaticGeocoder,
    StaticLocationProvider,
)
from .countries import Country, CountryCatalog
from .history import HistoryEntry, describe_entry, entry_to_dict
from .tasks import DebouncedTask, Throttle, TrackingHandle, SearchController
from .session import Session, ActionResult
from .render import GeoJSONRenderer, feature_collection

__all__ = [
    'SeekAreaError',
    'InsufficientInputError',
    'ProviderError',
    'GeometryError',
    'SamplingError',
    'SessionBusyError',
    'EngineConfig',
    'get_engine_config',
    'set_engine_config',
    'distance_meters',
    'distances_meters',
    'destination_point',
    'expand_bbox',
    'km_to_lat_deg',
    'km_to_lon_deg',
    'miles_to_km',
    'geodesic_area_km2',
    'AnyPoly',
    'intersect',
    'difference',
    'union',
    'buffer_point',
    'buffer_from_points',
    'bbox_polygon_for',
    'to_geojson',
    'from_geojson',
    'SampleResult',
    'sample_interior',
    'downsample',
    'Poi',
    'NearestPoi',
    'nearest_to',
    'nearest_for_points',
    'dedupe_pois',
    'voronoi_cells',
    'locate_cell',
    'apply_radar',
    'apply_thermometer',
    'apply_matching_voronoi',
    'apply_matching_sampled',
    'apply_measuring',
    'apply_poi_within',
    'apply_region_matching',
    'OperatorOutcome',
    'SeekerPosition',
    'SearchResult',
    'ReverseGeocodeResult',
    'OverpassPoiProvider',
    'NominatimGeocoder',
    'StaticPoiProvider',
    'StaticGeocoder',
    'StaticLocationProvider',
    'Country',
    'CountryCatalog',
    'HistoryEntry',
    'describe_entry',
    'entry_to_dict',
    'DebouncedTask',
    'Throttle',
    'TrackingHandle',
    'SearchController',
    'Session',
    'ActionResult',
    'GeoJSONRenderer',
    'feature_collection',
]
