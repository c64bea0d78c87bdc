"""Replay of JSON game scripts through a :class:`~seekarea.session.Session`.

A script is a mapping with the area (``area`` GeoJSON plus ``label``, or a
``countries`` file plus ``country`` code), optional ``config`` overrides,
``pois`` per kind, ``regions`` for reverse geocoding and a list of ``steps``::

    {"op": "seeker", "lon": 2.35, "lat": 48.85}
    {"op": "radar", "radius_miles": 10, "hit": true}
    {"op": "thermo_start"} / {"op": "thermo_end"} / {"op": "thermometer", "hotter": true}
    {"op": "matching", "kind": "hospital", "answer": true, "strategy": "voronoi"}
    {"op": "measuring", "kind": "museum", "closer": true, "epsilon_m": 25}
    {"op": "poi_within", "kind": "zoo", "radius_miles": 1, "answer": false}
    {"op": "region", "level": "state", "answer": true}
    {"op": "undo"} / {"op": "redo"} / {"op": "reset"}
"""

from __future__ import annotations

import dataclasses
import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from .algebra import from_geojson
from .config import EngineConfig, get_engine_config
from .countries import CountryCatalog
from .nearest import Poi
from .providers.base import Renderer
from .providers.static import StaticGeocoder, StaticPoiProvider
from .session import ActionResult, Session

logger = logging.getLogger(__name__)


class ScriptError(ValueError):
    """Raised for malformed game scripts."""


def load_script(path: Union[str, Path]) -> Dict[str, Any]:
    with open(path, encoding="utf-8") as fin:
        data = json.load(fin)
    if not isinstance(data, dict):
        raise ScriptError("script must be a JSON object")
    return data


def _config_from(overrides: Mapping[str, Any]) -> EngineConfig:
    config = get_engine_config()
    known = {f.name for f in dataclasses.fields(EngineConfig)}
    unknown = sorted(set(overrides) - known)
    if unknown:
        raise ScriptError(f"unknown config field(s): {', '.join(unknown)}")
    return dataclasses.replace(config, **dict(overrides))


def _pois_from(raw: Mapping[str, Sequence[Mapping[str, Any]]]) -> Dict[str, List[Poi]]:
    pois: Dict[str, List[Poi]] = {}
    for kind, items in raw.items():
        pois[kind] = [
            Poi(
                id=int(item.get("id", idx)),
                lon=float(item["lon"]),
                lat=float(item["lat"]),
                name=item.get("name"),
                key=item.get("key"),
                osm_type=item.get("osm_type"),
            )
            for idx, item in enumerate(items)
        ]
    return pois


def _region_lookup(regions: Sequence[Mapping[str, Any]]) -> Callable[[float, float], Dict[str, str]]:
    """Reverse geocoder answering from ``[south, west, north, east]`` boxes; first match wins."""

    boxes = [(tuple(float(v) for v in r["bbox"]), dict(r.get("address") or {})) for r in regions]

    def reverse(lat: float, lon: float) -> Dict[str, str]:
        for (south, west, north, east), address in boxes:
            if south <= lat <= north and west <= lon <= east:
                return address
        return {}

    return reverse


def build_session(
    script: Mapping[str, Any],
    base_dir: Union[str, Path] = ".",
    renderer: Optional[Renderer] = None,
) -> Session:
    config = _config_from(script.get("config") or {})
    poi_provider = StaticPoiProvider(_pois_from(script.get("pois") or {}))
    geocoder = StaticGeocoder(reverse=_region_lookup(script.get("regions") or []))
    countries = None
    if script.get("countries"):
        countries = CountryCatalog.load(Path(base_dir) / script["countries"])
    session = Session(config, poi_provider=poi_provider, geocoder=geocoder, renderer=renderer, countries=countries)

    if script.get("area"):
        try:
            area = from_geojson(script["area"])
        except ValueError as exc:
            raise ScriptError(f"invalid area: {exc}") from exc
        session.set_area(area, script.get("label") or "Custom area")
    elif script.get("country"):
        result = session.set_country(script["country"])
        if not result.ok:
            raise ScriptError(result.message)
    return session


def _run_step(session: Session, step: Mapping[str, Any]) -> ActionResult:
    op = step.get("op")
    if op == "seeker":
        return session.set_seeker(float(step["lon"]), float(step["lat"]), step.get("accuracy_m"))
    if op == "radar":
        return session.apply_radar(float(step["radius_miles"]), bool(step["hit"]))
    if op == "thermo_start":
        return session.set_thermo_start_now()
    if op == "thermo_end":
        return session.set_thermo_end_now()
    if op == "thermometer":
        return session.apply_thermometer(bool(step["hotter"]))
    if op == "matching":
        return session.apply_matching(step["kind"], bool(step["answer"]), step.get("strategy"))
    if op == "measuring":
        return session.apply_measuring(
            step["kind"], bool(step["closer"]), step.get("epsilon_m"), step.get("method", "auto")
        )
    if op == "poi_within":
        return session.apply_poi_within(step["kind"], float(step["radius_miles"]), bool(step["answer"]))
    if op == "region":
        return session.apply_region_matching(step["level"], bool(step["answer"]))
    if op == "undo":
        return session.undo()
    if op == "redo":
        return session.redo()
    if op == "reset":
        return session.reset(bool(step.get("clear_history", False)))
    raise ScriptError(f"unknown step op {op!r}")


def run_script(session: Session, steps: Sequence[Mapping[str, Any]]) -> List[ActionResult]:
    results: List[ActionResult] = []
    for idx, step in enumerate(steps):
        try:
            result = _run_step(session, step)
        except ScriptError:
            raise
        except KeyError as exc:
            raise ScriptError(f"step {idx} ({step.get('op')}) is missing {exc}") from exc
        except (TypeError, ValueError) as exc:
            raise ScriptError(f"step {idx} ({step.get('op')}) is malformed: {exc}") from exc
        logger.debug("Step %d %s -> ok=%s %s", idx, step.get("op"), result.ok, result.message)
        results.append(result)
    return results


__all__ = ["ScriptError", "build_session", "load_script", "run_script"]
