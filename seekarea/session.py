"""Session state machine owning the candidate area and its history.

A :class:`Session` is the only place the candidate changes. Each public
action either commits a new candidate (pushing the previous one on the undo
stack and appending a history entry) or leaves every piece of state as it
was and reports why through :class:`ActionResult`.
"""

from __future__ import annotations

import concurrent.futures
import logging
import math
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Iterator, List, Optional, Sequence, Tuple

from shapely.geometry import MultiPolygon, Polygon

from . import operators
from .algebra import AnyPoly, as_candidate, bbox_swne
from .config import EngineConfig, get_engine_config
from .countries import CountryCatalog
from .errors import InsufficientInputError, ProviderError, SeekAreaError, SessionBusyError
from .history import (
    HistoryEntry,
    MatchingEntry,
    MeasuringEntry,
    PoiWithinEntry,
    RadarEntry,
    RegionMatchingEntry,
    SetAreaEntry,
    SetCountryEntry,
    ThermometerEntry,
)
from .nearest import Poi
from .primitives import expand_bbox, miles_to_km
from .providers.base import (
    GeocodeProvider,
    LocationProvider,
    PoiProvider,
    Renderer,
    ReverseGeocodeResult,
    SearchResult,
    SeekerPosition,
)
from .tasks import TrackingHandle

logger = logging.getLogger(__name__)

EMPTY_MESSAGE = "No possible area remains"

STATE_UNSET = "unset"
STATE_ACTIVE = "active"
STATE_EMPTY = "empty"


@dataclass
class ActionResult:
    ok: bool
    message: str
    entry: Optional[HistoryEntry] = None


class Session:
    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        poi_provider: Optional[PoiProvider] = None,
        geocoder: Optional[GeocodeProvider] = None,
        renderer: Optional[Renderer] = None,
        countries: Optional[CountryCatalog] = None,
    ) -> None:
        self.config = config or get_engine_config()
        self.poi_provider = poi_provider
        self.geocoder = geocoder
        self.renderer = renderer
        self.countries = countries

        self.candidate: Optional[AnyPoly] = None
        self.base_area: Optional[AnyPoly] = None
        self.base_label: Optional[str] = None
        self.selected_iso: Optional[str] = None
        self.seeker: Optional[SeekerPosition] = None
        self.thermo_start: Optional[Tuple[float, float]] = None
        self.thermo_end: Optional[Tuple[float, float]] = None
        self.history: List[HistoryEntry] = []
        self.undo_stack: List[Optional[AnyPoly]] = []
        self.redo_stack: List[Optional[AnyPoly]] = []
        self.search_results: List[SearchResult] = []
        self.status: str = ""

        self._busy = threading.Lock()
        self._tracking: Optional[TrackingHandle] = None

    # ------------------------------------------------------------------ state

    @property
    def state(self) -> str:
        if self.candidate is not None:
            return STATE_ACTIVE
        if self.base_area is not None:
            return STATE_EMPTY
        return STATE_UNSET

    @property
    def busy(self) -> bool:
        return self._busy.locked()

    def close(self) -> None:
        self.stop_tracking()

    @contextmanager
    def _exclusive(self, action: str) -> Iterator[None]:
        if not self._busy.acquire(blocking=False):
            raise SessionBusyError(f"Another operation is still running; {action} not started")
        try:
            yield
        finally:
            self._busy.release()

    def _report(self, ok: bool, message: str, entry: Optional[HistoryEntry] = None) -> ActionResult:
        self.status = message
        if ok:
            logger.info(message)
        else:
            logger.warning(message)
        return ActionResult(ok, message, entry)

    def _render(self) -> None:
        if self.renderer is not None:
            self.renderer.render(self.candidate, self.seeker)

    def _require_candidate(self) -> AnyPoly:
        if self.base_area is None:
            raise InsufficientInputError("Select an area first")
        if self.candidate is None:
            raise InsufficientInputError(f"{EMPTY_MESSAGE}; undo or reset first")
        return self.candidate

    def _require_seeker(self) -> SeekerPosition:
        if self.seeker is None:
            raise InsufficientInputError("Seeker position unknown; update location first")
        return self.seeker

    def _commit(self, nxt: Optional[AnyPoly], entry: HistoryEntry) -> None:
        self.undo_stack.append(self.candidate)
        self.redo_stack.clear()
        self.candidate = nxt
        self.history.append(entry)
        self._render()

    def _apply(self, action: str, compute: Callable[[], Tuple[Optional[AnyPoly], HistoryEntry]]) -> ActionResult:
        try:
            with self._exclusive(action):
                nxt, entry = compute()
                self._commit(nxt, entry)
        except SeekAreaError as exc:
            return self._report(False, f"{action}: {exc}")
        if nxt is None:
            return self._report(True, f"{action}: {EMPTY_MESSAGE}", entry)
        return self._report(True, f"{action} applied", entry)

    # --------------------------------------------------------- collaborators

    def _call_collaborator(self, func: Callable[..., Any], *args: Any, timeout_s: float) -> Any:
        # One worker per call: a hung collaborator keeps only its own thread.
        executor = concurrent.futures.ThreadPoolExecutor(max_workers=1, thread_name_prefix="seekarea-io")
        future = executor.submit(func, *args)
        try:
            return future.result(timeout=timeout_s)
        except concurrent.futures.TimeoutError as exc:
            future.cancel()
            raise ProviderError(f"collaborator timed out after {timeout_s:g}s") from exc
        except ProviderError:
            raise
        except Exception as exc:
            raise ProviderError(f"collaborator failed: {type(exc).__name__}: {exc}") from exc
        finally:
            executor.shutdown(wait=False)

    def _poi_bbox(
        self, candidate: AnyPoly, seeker: Optional[SeekerPosition], padding_km: float
    ) -> Tuple[float, float, float, float]:
        south, west, north, east = bbox_swne(candidate)
        if seeker is not None:
            south = min(south, seeker.lat)
            north = max(north, seeker.lat)
            west = min(west, seeker.lon)
            east = max(east, seeker.lon)
        return expand_bbox((south, west, north, east), padding_km)

    def _fetch_pois(self, kind: str, bbox: Sequence[float]) -> List[Poi]:
        if self.poi_provider is None:
            raise InsufficientInputError("No POI provider configured")
        pois = self._call_collaborator(
            self.poi_provider.fetch_pois, kind, tuple(bbox), self.config.poi_limit, timeout_s=self.config.poi_timeout_s
        )
        try:
            pois = list(pois)
        except TypeError as exc:
            raise ProviderError(f"POI provider returned {type(pois).__name__}, not a list") from exc
        bad = [p for p in pois if not isinstance(p, Poi)]
        if bad:
            raise ProviderError(f"POI provider returned {len(bad)} malformed item(s) ({type(bad[0]).__name__})")
        logger.debug("Fetched %d %s POI(s)", len(pois), kind)
        return pois

    def _reverse_geocode(self, lat: float, lon: float) -> ReverseGeocodeResult:
        if self.geocoder is None:
            raise InsufficientInputError("No geocoder configured")
        result = self._call_collaborator(
            self.geocoder.reverse_geocode, lat, lon, timeout_s=self.config.geocode_timeout_s
        )
        if not isinstance(result, ReverseGeocodeResult):
            raise ProviderError(f"geocoder returned {type(result).__name__}, not a reverse geocode result")
        return result

    # ------------------------------------------------------------ area setup

    def _set_base(self, geometry: AnyPoly, label: str, entry: HistoryEntry) -> None:
        self.base_area = geometry
        self.base_label = label
        self.candidate = geometry
        self.undo_stack.clear()
        self.redo_stack.clear()
        self.thermo_start = None
        self.thermo_end = None
        self.history.append(entry)
        self._render()

    def set_country(self, iso_a2: str) -> ActionResult:
        try:
            with self._exclusive("Set country"):
                if self.countries is None:
                    raise InsufficientInputError("No country dataset loaded")
                country = self.countries.find(iso_a2)
                if country is None:
                    raise InsufficientInputError(f"Unknown country {iso_a2!r}")
                entry = SetCountryEntry(iso_a2=country.iso_a2, name=country.name)
                self.selected_iso = country.iso_a2
                self._set_base(country.geometry, country.name or country.iso_a2, entry)
        except SeekAreaError as exc:
            return self._report(False, str(exc))
        return self._report(True, f"Area set to {country.name or country.iso_a2}", entry)

    def set_area(self, geometry: Optional[AnyPoly], label: str) -> ActionResult:
        try:
            with self._exclusive("Set area"):
                if not isinstance(geometry, (Polygon, MultiPolygon)) or not geometry.is_valid:
                    geometry = as_candidate(geometry)
                if geometry is None or geometry.area <= 0.0:
                    raise InsufficientInputError(f"Area {label!r} has no extent")
                entry = SetAreaEntry(label=label)
                self.selected_iso = None
                self._set_base(geometry, label, entry)
        except SeekAreaError as exc:
            return self._report(False, str(exc))
        return self._report(True, f"Area set to {label}", entry)

    def select_search_result(self, result: SearchResult) -> ActionResult:
        return self.set_area(result.to_geometry(), result.display_name)

    def run_search(self, query: str) -> ActionResult:
        if not query.strip():
            self.search_results = []
            return self._report(True, "Search cleared")
        try:
            if self.geocoder is None:
                raise InsufficientInputError("No geocoder configured")
            results = self._call_collaborator(
                self.geocoder.search, query, timeout_s=self.config.geocode_timeout_s
            )
            if not isinstance(results, (list, tuple)) or not all(isinstance(r, SearchResult) for r in results):
                raise ProviderError("geocoder returned malformed search results")
        except SeekAreaError as exc:
            self.search_results = []
            return self._report(False, f"Search failed: {exc}")
        self.search_results = list(results)
        return self._report(True, f"{len(self.search_results)} result(s) for {query.strip()!r}")

    # ---------------------------------------------------------------- seeker

    def set_seeker(
        self, lon: float, lat: float, accuracy_m: Optional[float] = None, timestamp: Optional[float] = None
    ) -> ActionResult:
        if not (math.isfinite(lon) and math.isfinite(lat)) or not (-180.0 <= lon <= 180.0 and -90.0 <= lat <= 90.0):
            return self._report(False, f"Invalid seeker position ({lon}, {lat})")
        if timestamp is None:
            self.seeker = SeekerPosition(float(lon), float(lat), accuracy_m)
        else:
            self.seeker = SeekerPosition(float(lon), float(lat), accuracy_m, timestamp)
        self._render()
        return self._report(True, f"Seeker at ({lon:.5f}, {lat:.5f})")

    def _on_position(self, position: SeekerPosition) -> None:
        self.seeker = position
        self._render()

    def update_seeker_from(self, provider: LocationProvider) -> ActionResult:
        try:
            position = self._call_collaborator(
                provider.current_position, self.config.location_timeout_s, timeout_s=self.config.location_timeout_s
            )
            if not isinstance(position, SeekerPosition):
                raise ProviderError(f"location provider returned {type(position).__name__}")
        except SeekAreaError as exc:
            return self._report(False, f"Location update failed: {exc}")
        return self.set_seeker(position.lon, position.lat, position.accuracy_m, position.timestamp)

    def start_tracking(self, provider: LocationProvider, interval_s: float = 5.0) -> TrackingHandle:
        self.stop_tracking()
        self._tracking = TrackingHandle(
            provider, self._on_position, interval_s=interval_s, timeout_s=self.config.location_timeout_s
        ).start()
        return self._tracking

    def stop_tracking(self) -> None:
        if self._tracking is not None:
            self._tracking.stop()
            self._tracking = None

    def set_thermo_start_now(self) -> ActionResult:
        if self.seeker is None:
            return self._report(False, "Seeker position unknown; cannot set thermometer start")
        self.thermo_start = self.seeker.lonlat
        return self._report(True, "Thermometer start set")

    def set_thermo_end_now(self) -> ActionResult:
        if self.seeker is None:
            return self._report(False, "Seeker position unknown; cannot set thermometer end")
        self.thermo_end = self.seeker.lonlat
        return self._report(True, "Thermometer end set")

    # ------------------------------------------------------------- operators

    def apply_radar(self, radius_miles: float, hit: bool) -> ActionResult:
        def compute():
            candidate = self._require_candidate()
            seeker = self._require_seeker()
            outcome = operators.apply_radar(
                candidate, seeker.lonlat, radius_miles, hit, steps=self.config.radar_circle_steps
            )
            entry = RadarEntry(radius_miles=radius_miles, hit=hit, seeker=seeker.lonlat, empty=outcome.is_empty)
            return outcome.next, entry

        return self._apply("Radar", compute)

    def apply_thermometer(self, hotter: bool) -> ActionResult:
        def compute():
            candidate = self._require_candidate()
            if self.thermo_start is None or self.thermo_end is None:
                raise InsufficientInputError("Set thermometer start and end first")
            start, end = self.thermo_start, self.thermo_end
            outcome = operators.apply_thermometer(
                candidate, start, end, hotter, pad_deg=self.config.thermometer_pad_deg
            )
            entry = ThermometerEntry(
                hotter=hotter, start=start, end=end, distance_m=outcome.distance_m, empty=outcome.is_empty
            )
            return outcome.next, entry

        return self._apply("Thermometer", compute)

    def apply_matching(self, kind: str, answer_yes: bool, strategy: Optional[str] = None) -> ActionResult:
        strategy = strategy or self.config.matching_strategy
        cfg = self.config

        def compute():
            if strategy not in operators.MATCHING_STRATEGIES:
                raise InsufficientInputError(f"Unknown matching strategy {strategy!r}")
            candidate = self._require_candidate()
            seeker = self._require_seeker()
            bbox = self._poi_bbox(candidate, seeker, cfg.poi_padding_km)
            pois = self._fetch_pois(kind, bbox)
            if strategy == "voronoi":
                outcome = operators.apply_matching_voronoi(candidate, seeker.lonlat, pois, answer_yes, bbox)
            else:
                outcome = operators.apply_matching_sampled(
                    candidate,
                    seeker.lonlat,
                    pois,
                    answer_yes,
                    max_points=cfg.sample_max_points,
                    min_step_km=cfg.sample_min_step_km,
                    buffer_min_km=cfg.buffer_min_km,
                    buffer_step_factor=cfg.buffer_step_factor,
                    downsample_max=cfg.downsample_max,
                    batch_size=cfg.union_batch_size,
                )
            entry = MatchingEntry(
                kind=kind,
                answer_yes=answer_yes,
                strategy=outcome.strategy,
                feature_count=outcome.feature_count,
                seeker_nearest_key=outcome.seeker_nearest_key,
                seeker_nearest_name=outcome.seeker_nearest_name,
                sample_count=outcome.sample_count,
                kept_count=outcome.kept_count,
                percent_remaining=outcome.percent_remaining,
                empty=outcome.is_empty,
            )
            return outcome.next, entry

        return self._apply(f"Matching {kind}", compute)

    def apply_measuring(
        self, kind: str, closer: bool, epsilon_m: Optional[float] = None, method: str = "auto"
    ) -> ActionResult:
        cfg = self.config
        eps = cfg.measuring_epsilon_m if epsilon_m is None else float(epsilon_m)

        def compute():
            if method not in operators.MEASURING_METHODS:
                raise InsufficientInputError(f"Unknown measuring method {method!r}")
            candidate = self._require_candidate()
            seeker = self._require_seeker()
            pois = self._fetch_pois(kind, self._poi_bbox(candidate, seeker, cfg.poi_padding_km))
            outcome = operators.apply_measuring(
                candidate,
                seeker.lonlat,
                pois,
                closer,
                epsilon_m=eps,
                method=method,
                exact_max_pois=cfg.measuring_exact_max_pois,
                max_points=cfg.sample_max_points,
                min_step_km=cfg.sample_min_step_km,
                buffer_min_km=cfg.buffer_min_km,
                buffer_step_factor=cfg.buffer_step_factor,
                downsample_max=cfg.downsample_max,
                batch_size=cfg.union_batch_size,
                circle_steps=cfg.circle_steps,
            )
            entry = MeasuringEntry(
                kind=kind,
                closer=closer,
                method=outcome.method,
                poi_count=outcome.poi_count,
                seeker_distance_m=outcome.seeker_distance_m,
                epsilon_m=eps,
                sample_count=outcome.sample_count,
                kept_count=outcome.kept_count,
                empty=outcome.is_empty,
            )
            return outcome.next, entry

        return self._apply(f"Measuring {kind}", compute)

    def apply_poi_within(self, kind: str, radius_miles: float, answer_yes: bool) -> ActionResult:
        cfg = self.config

        def compute():
            candidate = self._require_candidate()
            radius_km = miles_to_km(radius_miles)
            pois = self._fetch_pois(kind, expand_bbox(bbox_swne(candidate), radius_km))
            outcome = operators.apply_poi_within(
                candidate,
                pois,
                radius_km,
                answer_yes,
                batch_size=cfg.union_batch_size,
                circle_steps=cfg.circle_steps,
            )
            entry = PoiWithinEntry(
                kind=kind,
                radius_miles=radius_miles,
                answer_yes=answer_yes,
                poi_count=outcome.poi_count,
                empty=outcome.is_empty,
            )
            return outcome.next, entry

        return self._apply(f"POI {kind}", compute)

    def apply_region_matching(self, level: str, answer_yes: bool) -> ActionResult:
        cfg = self.config

        def compute():
            candidate = self._require_candidate()
            seeker = self._require_seeker()
            if self.geocoder is None:
                raise InsufficientInputError("No geocoder configured")
            outcome = operators.apply_region_matching(
                candidate,
                seeker.lonlat,
                level,
                answer_yes,
                self._reverse_geocode,
                max_points=cfg.region_max_points,
                min_step_km=cfg.region_min_step_km,
                round_decimals=cfg.region_round_decimals,
                buffer_min_km=cfg.buffer_min_km,
                buffer_step_factor=cfg.buffer_step_factor,
                downsample_max=cfg.downsample_max,
                batch_size=cfg.union_batch_size,
            )
            entry = RegionMatchingEntry(
                level=level,
                answer_yes=answer_yes,
                seeker_region=outcome.seeker_region,
                sample_count=outcome.sample_count,
                kept_count=outcome.kept_count,
                lookup_count=outcome.lookup_count,
                empty=outcome.is_empty,
            )
            return outcome.next, entry

        return self._apply(f"Region {level}", compute)

    # ------------------------------------------------------------ undo/redo

    def undo(self) -> ActionResult:
        try:
            with self._exclusive("Undo"):
                if not self.undo_stack:
                    return self._report(False, "Nothing to undo")
                self.redo_stack.append(self.candidate)
                self.candidate = self.undo_stack.pop()
                self._render()
        except SessionBusyError as exc:
            return self._report(False, str(exc))
        return self._report(True, "Undone")

    def redo(self) -> ActionResult:
        try:
            with self._exclusive("Redo"):
                if not self.redo_stack:
                    return self._report(False, "Nothing to redo")
                self.undo_stack.append(self.candidate)
                self.candidate = self.redo_stack.pop()
                self._render()
        except SessionBusyError as exc:
            return self._report(False, str(exc))
        return self._report(True, "Redone")

    def reset(self, clear_history: bool = False) -> ActionResult:
        """Return to the selected base area, dropping undo/redo and thermometer state."""

        try:
            with self._exclusive("Reset"):
                self.candidate = self.base_area
                self.undo_stack.clear()
                self.redo_stack.clear()
                self.thermo_start = None
                self.thermo_end = None
                if clear_history:
                    self.history.clear()
                self._render()
        except SessionBusyError as exc:
            return self._report(False, str(exc))
        if self.base_area is None:
            return self._report(True, "Reset; no area selected")
        return self._report(True, f"Reset to {self.base_label}")


__all__ = ["ActionResult", "EMPTY_MESSAGE", "STATE_ACTIVE", "STATE_EMPTY", "STATE_UNSET", "Session"]
