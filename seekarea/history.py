"""Append-only history records, one variant per kind of action."""

from __future__ import annotations

import time
import uuid
from dataclasses import asdict, dataclass, field
from typing import Any, ClassVar, Dict, Optional, Tuple, Union

LonLat = Tuple[float, float]


def _new_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass(frozen=True)
class SetCountryEntry:
    KIND: ClassVar[str] = "SET_COUNTRY"

    iso_a2: str
    name: Optional[str] = None
    entry_id: str = field(default_factory=_new_id)
    ts: float = field(default_factory=time.time)


@dataclass(frozen=True)
class SetAreaEntry:
    KIND: ClassVar[str] = "SET_AREA"

    label: str
    entry_id: str = field(default_factory=_new_id)
    ts: float = field(default_factory=time.time)


@dataclass(frozen=True)
class RadarEntry:
    KIND: ClassVar[str] = "RADAR"

    radius_miles: float
    hit: bool
    seeker: LonLat
    empty: bool = False
    entry_id: str = field(default_factory=_new_id)
    ts: float = field(default_factory=time.time)


@dataclass(frozen=True)
class ThermometerEntry:
    KIND: ClassVar[str] = "THERMOMETER"

    hotter: bool
    start: LonLat
    end: LonLat
    distance_m: float = 0.0
    empty: bool = False
    entry_id: str = field(default_factory=_new_id)
    ts: float = field(default_factory=time.time)


@dataclass(frozen=True)
class MatchingEntry:
    KIND: ClassVar[str] = "MATCHING"

    kind: str
    answer_yes: bool
    strategy: str
    feature_count: int
    seeker_nearest_key: Optional[str] = None
    seeker_nearest_name: Optional[str] = None
    sample_count: int = 0
    kept_count: int = 0
    percent_remaining: float = 0.0
    empty: bool = False
    entry_id: str = field(default_factory=_new_id)
    ts: float = field(default_factory=time.time)


@dataclass(frozen=True)
class MeasuringEntry:
    KIND: ClassVar[str] = "MEASURING"

    kind: str
    closer: bool
    method: str
    poi_count: int
    seeker_distance_m: float
    epsilon_m: float
    sample_count: int = 0
    kept_count: int = 0
    empty: bool = False
    entry_id: str = field(default_factory=_new_id)
    ts: float = field(default_factory=time.time)


@dataclass(frozen=True)
class PoiWithinEntry:
    KIND: ClassVar[str] = "POI_WITHIN"

    kind: str
    radius_miles: float
    answer_yes: bool
    poi_count: int
    empty: bool = False
    entry_id: str = field(default_factory=_new_id)
    ts: float = field(default_factory=time.time)


@dataclass(frozen=True)
class RegionMatchingEntry:
    KIND: ClassVar[str] = "REGION_MATCHING"

    level: str
    answer_yes: bool
    seeker_region: str
    sample_count: int = 0
    kept_count: int = 0
    lookup_count: int = 0
    empty: bool = False
    entry_id: str = field(default_factory=_new_id)
    ts: float = field(default_factory=time.time)


HistoryEntry = Union[
    SetCountryEntry,
    SetAreaEntry,
    RadarEntry,
    ThermometerEntry,
    MatchingEntry,
    MeasuringEntry,
    PoiWithinEntry,
    RegionMatchingEntry,
]


def _yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


def describe_entry(entry: HistoryEntry) -> str:
    """One-line, human readable summary of *entry*."""

    suffix = " (no possible area remains)" if getattr(entry, "empty", False) else ""
    if isinstance(entry, SetCountryEntry):
        return f"Country: {entry.name or entry.iso_a2} ({entry.iso_a2})"
    if isinstance(entry, SetAreaEntry):
        return f"Area: {entry.label}"
    if isinstance(entry, RadarEntry):
        return f"Radar: {'Hit' if entry.hit else 'Miss'} {entry.radius_miles:g} mi{suffix}"
    if isinstance(entry, ThermometerEntry):
        return f"Thermometer: {'Hotter' if entry.hotter else 'Colder'} after {entry.distance_m:.0f} m{suffix}"
    if isinstance(entry, MatchingEntry):
        nearest = entry.seeker_nearest_name or entry.seeker_nearest_key or "?"
        return (
            f"Matching {entry.kind}: {_yes_no(entry.answer_yes)} (nearest {nearest}, "
            f"{entry.feature_count} POIs, {entry.percent_remaining:.1f}% remaining){suffix}"
        )
    if isinstance(entry, MeasuringEntry):
        return (
            f"Measuring {entry.kind}: {'Closer' if entry.closer else 'Farther'} than "
            f"{entry.seeker_distance_m:.0f} m ({entry.poi_count} POIs){suffix}"
        )
    if isinstance(entry, PoiWithinEntry):
        return (
            f"POI {entry.kind} within {entry.radius_miles:g} mi: {_yes_no(entry.answer_yes)} "
            f"({entry.poi_count} POIs){suffix}"
        )
    if isinstance(entry, RegionMatchingEntry):
        return f"Same {entry.level} ({entry.seeker_region}): {_yes_no(entry.answer_yes)}{suffix}"
    raise TypeError(f"unknown history entry {type(entry).__name__}")


_ENTRY_TYPES = (
    SetCountryEntry,
    SetAreaEntry,
    RadarEntry,
    ThermometerEntry,
    MatchingEntry,
    MeasuringEntry,
    PoiWithinEntry,
    RegionMatchingEntry,
)


def entry_to_dict(entry: HistoryEntry) -> Dict[str, Any]:
    """JSON-ready dict with a ``type`` discriminator."""

    if not isinstance(entry, _ENTRY_TYPES):
        raise TypeError(f"unknown history entry {type(entry).__name__}")
    data = asdict(entry)
    for key, value in list(data.items()):
        if isinstance(value, tuple):
            data[key] = list(value)
    return {"type": entry.KIND, **data}


__all__ = [
    "HistoryEntry",
    "MatchingEntry",
    "MeasuringEntry",
    "PoiWithinEntry",
    "RadarEntry",
    "RegionMatchingEntry",
    "SetAreaEntry",
    "SetCountryEntry",
    "ThermometerEntry",
    "describe_entry",
    "entry_to_dict",
]
